"""
CLI module for scope-chain.

Provides the command-line interface using Click.
"""

from scope_chain.cli.main import cli, main

__all__ = ["main", "cli"]
