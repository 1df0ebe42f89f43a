"""
Settings configuration using pydantic-settings.

Loads configuration from:
1. Constructor arguments (highest precedence)
2. Environment variables with SCOPE_CHAIN_ prefix
3. .env file named by SCOPE_CHAIN_ENV_FILE (if set)
4. Layered YAML config files resolved through a ScopeChain:
   - Project config: .scope-chain.yaml (highest)
   - User config: ~/.config/scope-chain/config.yaml
5. Field defaults (lowest)

Example:
  SCOPE_CHAIN_UNDERFLOW=ignore
  SCOPE_CHAIN_LOG_LEVEL=debug
"""

import logging as _logging
import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic as _pydantic
import pydantic_settings as _pydantic_settings

import scope_chain.chain as chain
import scope_chain.config.sources as sources


def _get_env_file() -> str | None:
    """Determine which .env file to load.

    SCOPE_CHAIN_ENV_FILE names it explicitly. If it is unset, or set to a
    file that doesn't exist, no .env is loaded.
    """
    if env_file := _os.environ.get("SCOPE_CHAIN_ENV_FILE"):
        if _pathlib.Path(env_file).exists():
            return env_file
    return None


class Settings(_pydantic_settings.BaseSettings):
    """
    scope-chain configuration settings.

    All settings can be overridden via environment variables with the
    SCOPE_CHAIN_ prefix.

    Config precedence (highest to lowest):
    1. Constructor arguments
    2. Environment variables (SCOPE_CHAIN_*)
    3. .env file
    4. Project config (.scope-chain.yaml)
    5. User config (~/.config/scope-chain/config.yaml)
    6. Field defaults
    """

    model_config = _pydantic_settings.SettingsConfigDict(
        env_prefix="SCOPE_CHAIN_",
        env_file=_get_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[_pydantic_settings.BaseSettings],
        init_settings: _pydantic_settings.PydanticBaseSettingsSource,
        env_settings: _pydantic_settings.PydanticBaseSettingsSource,
        dotenv_settings: _pydantic_settings.PydanticBaseSettingsSource,
        file_secret_settings: _pydantic_settings.PydanticBaseSettingsSource,
    ) -> tuple[_pydantic_settings.PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            sources.ScopeChainSettingsSource(settings_cls),
            file_secret_settings,
        )

    @classmethod
    def construct_without_dotenv(cls, **kwargs: _typing.Any) -> "Settings":
        """Create Settings without loading a .env file.

        Useful for test isolation, where a developer's .env must not leak
        into the settings under test.
        """
        return cls(_env_file=None, **kwargs)  # type: ignore[call-arg]

    underflow: chain.UnderflowPolicy = _pydantic.Field(
        default="raise",
        description="What popping the root scope does: 'raise' or 'ignore'",
    )

    log_level: str = _pydantic.Field(
        default="WARNING",
        description="Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    @_pydantic.field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: _typing.Any) -> str:
        """Accept level names in any case; reject unknown names."""
        name = str(value).upper()
        if name not in _logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level: {value!r}")
        return name

    def new_chain(self) -> chain.ScopeChain[_typing.Any, _typing.Any]:
        """Create an empty ScopeChain using the configured underflow policy."""
        return chain.ScopeChain(on_underflow=self.underflow)
