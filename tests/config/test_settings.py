"""Tests for Settings precedence and validation."""

import logging as _logging
import os as _os
import pathlib as _pathlib

import pydantic as _pydantic
import pytest as _pytest

import scope_chain.config as config
import scope_chain.config.sources as sources


class TestDefaults:
    """Defaults with no environment or config files."""

    def test_default_values(self, clean_settings: config.Settings) -> None:
        """Underflow raises and logging stays quiet by default."""
        assert clean_settings.underflow == "raise"
        assert clean_settings.log_level == "WARNING"

    def test_new_chain_uses_policy(self, isolated_env: _pathlib.Path) -> None:
        """new_chain() builds an empty chain with the configured policy."""
        settings = config.Settings.construct_without_dotenv(underflow="ignore")
        scopes = settings.new_chain()

        assert scopes.depth == 1
        assert scopes.on_underflow == "ignore"
        assert scopes.pop_scope() is None


class TestPrecedence:
    """Constructor > environment > project file > user file > defaults."""

    def test_env_var_overrides_default(self, isolated_env: _pathlib.Path) -> None:
        """SCOPE_CHAIN_* variables are read."""
        _os.environ["SCOPE_CHAIN_UNDERFLOW"] = "ignore"

        assert config.Settings.construct_without_dotenv().underflow == "ignore"

    def test_project_file_overrides_user_file(self, isolated_env: _pathlib.Path) -> None:
        """.scope-chain.yaml in the working directory shadows the user file."""
        user = sources.get_user_config_path()
        user.parent.mkdir(parents=True)
        user.write_text("underflow: ignore\nlog_level: info\n")
        (isolated_env / sources.PROJECT_CONFIG_NAME).write_text("log_level: error\n")

        settings = config.Settings.construct_without_dotenv()

        assert settings.underflow == "ignore"
        assert settings.log_level == "ERROR"

    def test_env_var_overrides_files(self, isolated_env: _pathlib.Path) -> None:
        """Environment beats any config file."""
        (isolated_env / sources.PROJECT_CONFIG_NAME).write_text("underflow: ignore\n")
        _os.environ["SCOPE_CHAIN_UNDERFLOW"] = "raise"

        assert config.Settings.construct_without_dotenv().underflow == "raise"

    def test_constructor_overrides_env(self, isolated_env: _pathlib.Path) -> None:
        """Constructor arguments win over everything."""
        _os.environ["SCOPE_CHAIN_LOG_LEVEL"] = "ERROR"

        settings = config.Settings.construct_without_dotenv(log_level="debug")

        assert settings.log_level == "DEBUG"


class TestValidation:
    """Field validation."""

    def test_log_level_normalized(self, isolated_env: _pathlib.Path) -> None:
        """Level names are accepted in any case."""
        settings = config.Settings.construct_without_dotenv(log_level="info")

        assert settings.log_level == "INFO"
        assert _logging.getLevelName(settings.log_level) == _logging.INFO

    def test_unknown_log_level_rejected(self, isolated_env: _pathlib.Path) -> None:
        """Unknown level names fail validation."""
        with _pytest.raises(_pydantic.ValidationError, match="unknown log level"):
            config.Settings.construct_without_dotenv(log_level="chatty")

    def test_unknown_underflow_rejected(self, isolated_env: _pathlib.Path) -> None:
        """Only 'raise' and 'ignore' are valid policies."""
        with _pytest.raises(_pydantic.ValidationError):
            config.Settings.construct_without_dotenv(underflow="explode")

    def test_malformed_config_file_raises(self, isolated_env: _pathlib.Path) -> None:
        """A broken project file surfaces as ConfigFileError."""
        (isolated_env / sources.PROJECT_CONFIG_NAME).write_text("underflow: [\n")

        with _pytest.raises(config.ConfigFileError):
            config.Settings.construct_without_dotenv()
