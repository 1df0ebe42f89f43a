"""Custom pydantic-settings source for scope-chain configuration.

This module provides:

- ScopeChainSettingsSource: A pydantic-settings source that loads
  configuration from layered YAML files, resolving them through a
  ScopeChain so the project file shadows the user file key by key.

Configuration layers (in precedence order, highest first):
1. Project config: .scope-chain.yaml in the working directory
2. User config: ~/.config/scope-chain/config.yaml (or SCOPE_CHAIN_CONFIG_DIR)

Environment variables:
- SCOPE_CHAIN_CONFIG_DIR: Override user config directory (default: ~/.config/scope-chain)
"""

import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic.fields as _pydantic_fields
import pydantic_settings as _pydantic_settings
import yaml as _yaml

import scope_chain.chain as chain

# Environment variable for overriding user config directory
ENV_CONFIG_DIR = "SCOPE_CHAIN_CONFIG_DIR"

PROJECT_CONFIG_NAME = ".scope-chain.yaml"


class ConfigFileError(Exception):
    """Error loading or parsing a configuration file."""

    def __init__(self, path: _pathlib.Path, message: str) -> None:
        self.path = path
        super().__init__(f"Error in config file {path}: {message}")


def get_user_config_path() -> _pathlib.Path:
    """Get path to the user config file, respecting SCOPE_CHAIN_CONFIG_DIR."""
    config_dir_env = _os.environ.get(ENV_CONFIG_DIR)
    if config_dir_env:
        return _pathlib.Path(config_dir_env) / "config.yaml"
    return _pathlib.Path.home() / ".config" / "scope-chain" / "config.yaml"


def load_yaml_file(path: _pathlib.Path) -> dict[str, _typing.Any] | None:
    """
    Load a YAML config file and return its contents as a dict.

    Returns:
        Parsed YAML contents, or None if file is empty.

    Raises:
        ConfigFileError: If the file cannot be read, is malformed YAML,
            or contains non-dict content at the top level.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigFileError(path, f"cannot read file: {e}") from e

    try:
        parsed = _yaml.safe_load(content)
    except _yaml.YAMLError as e:
        raise ConfigFileError(path, f"invalid YAML: {e}") from e

    if parsed is None:
        return None

    if not isinstance(parsed, dict):
        type_name = type(parsed).__name__
        raise ConfigFileError(
            path,
            f"config must be a YAML mapping (dict), got {type_name}",
        )

    return parsed


class ScopeChainSettingsSource(_pydantic_settings.PydanticBaseSettingsSource):
    """
    Settings source that resolves layered YAML config files via a ScopeChain.

    The user config fills the root scope and the project config is pushed
    on top, so a key set in both resolves to the project value.
    """

    def __init__(
        self,
        settings_cls: type[_pydantic_settings.BaseSettings],
        project_dir: _pathlib.Path | None = None,
        *,
        user_config_path: _pathlib.Path | None = None,
    ) -> None:
        """
        Initialize the settings source.

        Args:
            settings_cls: The Settings class being populated.
            project_dir: Directory holding the project config. Defaults to
                the current working directory.
            user_config_path: Override path for user config file (for testing).
        """
        super().__init__(settings_cls)
        self._project_dir = project_dir if project_dir is not None else _pathlib.Path.cwd()
        self._user_config_path = user_config_path
        self._loaded_layers: list[tuple[str, _pathlib.Path]] = []
        self._chain = self._load_config_layers()

    def _load_config_layers(self) -> chain.ScopeChain[str, _typing.Any]:
        """Load the config files, outermost (user) first."""
        layers: list[dict[str, _typing.Any]] = []

        # Missing config files are normal
        for name, path in (
            ("user", self._get_user_config_path()),
            ("project", self._project_dir / PROJECT_CONFIG_NAME),
        ):
            if path.exists():
                content = load_yaml_file(path)
                if content:
                    layers.append(content)
                    self._loaded_layers.append((name, path))

        return chain.ScopeChain.from_layers(*layers)

    def _get_user_config_path(self) -> _pathlib.Path:
        if self._user_config_path is not None:
            return self._user_config_path
        return get_user_config_path()

    @property
    def scope_chain(self) -> chain.ScopeChain[str, _typing.Any]:
        """Access the underlying ScopeChain for provenance queries."""
        return self._chain

    def get_loaded_layers(self) -> list[tuple[str, _pathlib.Path]]:
        """
        Get info about layers that were actually loaded.

        Returns:
            List of (layer_name, path) tuples, outermost first. Index in this
            list matches the scope index returned by scope_chain.find().
        """
        return list(self._loaded_layers)

    def get_field_value(
        self,
        field: _pydantic_fields.FieldInfo,  # noqa: ARG002 - required by pydantic-settings interface
        field_name: str,
    ) -> tuple[_typing.Any, str, bool]:
        value = self._chain.get(field_name)
        if value is None:
            return None, field_name, False
        return value, field_name, isinstance(value, (dict, list))

    def __call__(self) -> dict[str, _typing.Any]:
        """Return the resolved config as a plain dict for Pydantic validation."""
        return self._chain.flatten()
