"""
Configuration module for scope-chain.

Uses pydantic-settings for environment variable loading.
"""

from scope_chain.config.settings import Settings
from scope_chain.config.sources import ConfigFileError

__all__ = ["ConfigFileError", "Settings"]
