"""
Exceptions raised by ScopeChain.
"""

from __future__ import annotations


class ScopeChainError(Exception):
    """Base class for ScopeChain errors."""

    pass


class ScopeUnderflowError(ScopeChainError, IndexError):
    """
    Raised when pop_scope() is called with only the root scope remaining.

    The root scope is never removed; the chain is left unchanged.
    """

    def __init__(self, depth: int = 1) -> None:
        self.depth = depth
        super().__init__("cannot pop the root scope")
