"""
Type aliases for ScopeChain.

This module provides the type variables and aliases used throughout the
chain package:
- K, V: Key and value type variables (keys must be hashable)
- Scope: One frame of bindings
- UnderflowPolicy: What pop_scope() does when only the root scope remains
"""

from __future__ import annotations

import collections.abc as _abc
import typing as _typing

K = _typing.TypeVar("K", bound=_abc.Hashable)
V = _typing.TypeVar("V")

# A scope is a plain table; it knows nothing about its parent or children
Scope: _typing.TypeAlias = dict

# "raise": popping the root raises ScopeUnderflowError
# "ignore": popping the root is a logged no-op
UnderflowPolicy: _typing.TypeAlias = _typing.Literal["raise", "ignore"]

UNDERFLOW_POLICIES: tuple[str, ...] = _typing.get_args(UnderflowPolicy)
