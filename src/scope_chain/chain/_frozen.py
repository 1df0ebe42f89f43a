"""
Read-only view of a scope frame.

ScopeChain owns its frames exclusively. Callers that need to look at a
frame (the current scope, or every scope for a debugger dump) get a
FrozenMapping wrapping the live dict, so the view reflects later writes
made through the chain but cannot be written through.
"""

from __future__ import annotations

import collections.abc as _abc
import typing as _typing

import scope_chain.chain._types as _types


class FrozenMapping(_abc.Mapping[_types.K, _types.V]):
    """
    Read-only view of a dict.

    Example:
        >>> frame = {"a": 1}
        >>> frozen = FrozenMapping(frame)
        >>> frozen["a"]
        1
        >>> frozen["a"] = 99  # TypeError: immutable
    """

    __slots__ = ("_data",)

    def __init__(self, data: dict[_types.K, _types.V]) -> None:
        """
        Wrap a dict in a read-only view.

        Args:
            data: The dict to wrap. It is used directly, not copied.
        """
        self._data = data

    def __getitem__(self, key: _types.K) -> _types.V:
        return self._data[key]

    def __iter__(self) -> _typing.Iterator[_types.K]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __repr__(self) -> str:
        return f"FrozenMapping({self._data!r})"

    def __eq__(self, other: object) -> bool:
        """Compare equal to any Mapping with same content."""
        if isinstance(other, _abc.Mapping):
            return dict(self.items()) == dict(other.items())
        return NotImplemented

    def __hash__(self) -> int:
        """FrozenMapping is not hashable (the frame may change)."""
        raise TypeError(f"unhashable type: '{type(self).__name__}'")
