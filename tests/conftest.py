"""
Shared pytest fixtures for scope-chain tests.

This file is automatically loaded by pytest. Fixtures defined here are
available to all test files without explicit imports.
"""

import os as _os
import pathlib as _pathlib
import typing as _typing
import unittest.mock as _mock

import pytest as _pytest

import scope_chain.chain as chain
import scope_chain.config as config


def _is_settings_key(key: str) -> bool:
    return key.startswith("SCOPE_CHAIN_")


@_pytest.fixture
def clean_env(tmp_path: _pathlib.Path) -> dict[str, str]:
    """
    Return environment dict with scope-chain settings removed.

    The user config directory points at an empty temporary directory so
    a developer's ~/.config/scope-chain never leaks into tests.
    """
    env = {k: v for k, v in _os.environ.items() if not _is_settings_key(k)}
    env["SCOPE_CHAIN_CONFIG_DIR"] = str(tmp_path / "user-config")
    return env


@_pytest.fixture
def isolated_env(
    clean_env: dict[str, str],
    tmp_path: _pathlib.Path,
    monkeypatch: _pytest.MonkeyPatch,
) -> _typing.Iterator[_pathlib.Path]:
    """
    Isolate a test from environment variables and config files.

    Yields the working directory (an empty temp dir), where tests can drop
    a project config file.
    """
    workdir = tmp_path / "project"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    with _mock.patch.dict(_os.environ, clean_env, clear=True):
        yield workdir


@_pytest.fixture
def clean_settings(isolated_env: _pathlib.Path) -> config.Settings:
    """Settings instance isolated from environment, .env and config files."""
    return config.Settings.construct_without_dotenv()


@_pytest.fixture
def nested_chain() -> chain.ScopeChain[str, int]:
    """Three-scope chain: a and b shadowed at depth 1, c only in root."""
    return chain.ScopeChain.from_layers(
        {"a": 1, "b": 2, "c": 3},  # root
        {"a": 4, "b": 5},  # scope 1
        {"d": 6},  # scope 2 (current)
    )
