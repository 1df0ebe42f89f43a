"""
ScopeChain: a stack of nested scopes with nearest-scope-wins lookup.

Unlike collections.ChainMap, which is built from independent maps, a
ScopeChain owns its frames and grows and shrinks in LIFO order as scopes
are entered and exited. It is the building block for symbol tables,
interpreter environments and layered configuration.

Architecture:
- Frames: a list of dicts, root first, current scope last
- Writes (insert, item assignment) go to the current scope only
- Lookups and removals scan from the current scope out to the root and
  stop at the first frame holding the key

Lookups are never cached, so a binding inserted after a failed lookup is
visible to the very next lookup.

Thread safety: NOT thread-safe. push_scope, pop_scope, insert, assign and
remove need exclusive access. Concurrent reads (get, contains) are safe
only while no mutator runs.
"""

from __future__ import annotations

import contextlib as _contextlib
import logging as _logging
import typing as _typing

import scope_chain.chain._errors as _errors
import scope_chain.chain._frozen as _frozen
import scope_chain.chain._types as _types

_logger = _logging.getLogger(__name__)

K = _types.K
V = _types.V


class ScopeChain(_typing.MutableMapping[K, V]):
    """
    A mapping organized as a chain of nested scopes.

    The chain always holds at least one scope, the root. push_scope() opens a
    new current scope, pop_scope() discards it. Inserts target the current
    scope; lookups resolve to the nearest scope defining the key.

    Example:
        >>> chain = ScopeChain()
        >>> chain.insert("a", 1)
        >>> chain.push_scope()
        >>> chain.insert("a", 4)
        >>> chain.get("a")
        4
        >>> chain.pop_scope()
        {'a': 4}
        >>> chain.get("a")
        1

    Provenance:
        >>> chain.get_with_provenance("a")
        (1, 0)
        # 0 = root scope, depth - 1 = current scope

    Args:
        on_underflow: What pop_scope() does when only the root remains.
            "raise" (default) raises ScopeUnderflowError; "ignore" logs a
            warning and leaves the root in place.

    Note:
        **Ownership:** bindings handed to push_scope() or from_layers() are
        copied into a fresh frame. Frames are only ever exposed through
        FrozenMapping views, so each binding lives in exactly one frame.
    """

    def __init__(self, *, on_underflow: _types.UnderflowPolicy = "raise") -> None:
        if on_underflow not in _types.UNDERFLOW_POLICIES:
            raise ValueError(
                f"on_underflow must be one of {_types.UNDERFLOW_POLICIES}, got {on_underflow!r}"
            )
        self._on_underflow = on_underflow
        self._scopes: list[_types.Scope] = [{}]

    @classmethod
    def from_layers(
        cls,
        *layers: _typing.Mapping[K, V],
        on_underflow: _types.UnderflowPolicy = "raise",
    ) -> ScopeChain[K, V]:
        """
        Build a chain from mappings in nesting order.

        The first layer fills the root scope; each following layer is pushed
        on top of the previous one, so later layers shadow earlier ones.

        Args:
            *layers: Mappings, outermost first.
            on_underflow: Underflow policy of the new chain.

        Returns:
            A chain with max(1, len(layers)) scopes.
        """
        chain: ScopeChain[K, V] = cls(on_underflow=on_underflow)
        if layers:
            chain._scopes[0].update(layers[0])
            for layer in layers[1:]:
                chain.push_scope(layer)
        return chain

    # =========================================================================
    # Scope management
    # =========================================================================

    @property
    def on_underflow(self) -> _types.UnderflowPolicy:
        """The underflow policy this chain was built with."""
        return self._on_underflow

    @property
    def depth(self) -> int:
        """Number of scopes, root included. Always >= 1."""
        return len(self._scopes)

    @property
    def scopes(self) -> list[_frozen.FrozenMapping[K, V]]:
        """Read-only views of every scope, root first."""
        return [_frozen.FrozenMapping(scope) for scope in self._scopes]

    @property
    def current(self) -> _frozen.FrozenMapping[K, V]:
        """Read-only view of the current (innermost) scope."""
        return _frozen.FrozenMapping(self._scopes[-1])

    def push_scope(self, bindings: _typing.Mapping[K, V] | None = None) -> None:
        """
        Open a new current scope.

        Args:
            bindings: Optional initial bindings, copied into the new scope.
        """
        self._scopes.append(dict(bindings) if bindings else {})
        _logger.debug("Pushed scope (depth=%d)", len(self._scopes))

    def pop_scope(self) -> dict[K, V] | None:
        """
        Discard the current scope, making its parent current.

        Returns:
            The discarded bindings, or None if the underflow policy is
            "ignore" and only the root remained.

        Raises:
            ScopeUnderflowError: If only the root scope remains and the
                underflow policy is "raise". The root is left intact.
        """
        if len(self._scopes) == 1:
            if self._on_underflow == "raise":
                raise _errors.ScopeUnderflowError()
            _logger.warning("Ignoring pop_scope() on the root scope")
            return None
        scope = self._scopes.pop()
        _logger.debug("Popped scope (depth=%d, discarded %d bindings)", len(self._scopes), len(scope))
        return scope

    @_contextlib.contextmanager
    def scope(
        self,
        bindings: _typing.Mapping[K, V] | None = None,
    ) -> _typing.Iterator[ScopeChain[K, V]]:
        """
        Push a scope for the duration of a with-block.

        The scope is popped on exit even if the block raises. Exit restores
        the chain to the depth it had before the block: scopes the block
        left open are discarded along with the pushed one. If the block
        already popped the pushed scope, the enclosing scopes are left alone.

        Example:
            >>> with chain.scope({"x": 1}):
            ...     chain["x"]
            1
        """
        self.push_scope(bindings)
        depth = len(self._scopes)
        frame = self._scopes[-1]
        try:
            yield self
        finally:
            if len(self._scopes) >= depth and self._scopes[depth - 1] is frame:
                if len(self._scopes) > depth:
                    _logger.warning(
                        "Discarding %d scope(s) left open inside scope()",
                        len(self._scopes) - depth,
                    )
                del self._scopes[depth - 1 :]
                _logger.debug("Popped scope (depth=%d)", len(self._scopes))
            else:
                _logger.warning("Scope pushed by scope() was already popped")

    # =========================================================================
    # Bindings
    # =========================================================================

    def _find(self, key: object) -> int | None:
        """Index of the nearest scope holding key, or None."""
        for index in range(len(self._scopes) - 1, -1, -1):
            if key in self._scopes[index]:
                return index
        return None

    def insert(self, key: K, value: V) -> V | None:
        """
        Bind key in the current scope.

        Bindings of the same key in outer scopes are shadowed, not modified.

        Returns:
            The value previously bound to key in the current scope, or None.
        """
        scope = self._scopes[-1]
        previous = scope.get(key)
        scope[key] = value
        return previous

    def get(self, key: K, default: V | None = None) -> V | None:  # type: ignore[override]
        """
        Return the value bound in the nearest scope, or default.

        The stored object itself is returned, not a copy.
        """
        index = self._find(key)
        if index is None:
            return default
        return self._scopes[index][key]

    def find(self, key: K) -> int | None:
        """
        Return the index of the scope that resolves key.

        Returns:
            0 for the root, depth - 1 for the current scope, or None if no
            scope holds key.
        """
        return self._find(key)

    def get_with_provenance(self, key: K) -> tuple[V, int]:
        """
        Get a value along with the index of the scope it came from.

        Raises:
            KeyError: If no scope holds key.
        """
        index = self._find(key)
        if index is None:
            raise KeyError(key)
        return self._scopes[index][key], index

    def assign(self, key: K, value: V) -> V:
        """
        Rebind key in the nearest scope that already holds it.

        Unlike insert(), this updates an outer binding in place when the
        current scope does not shadow it.

        Returns:
            The value that was replaced.

        Raises:
            KeyError: If no scope holds key.
        """
        index = self._find(key)
        if index is None:
            raise KeyError(key)
        scope = self._scopes[index]
        previous = scope[key]
        scope[key] = value
        return previous

    def remove(self, key: K) -> V | None:
        """
        Remove and return the nearest binding of key.

        Only one binding is removed; a binding of the same key further out
        becomes visible again.

        Returns:
            The removed value, or None if no scope holds key.
        """
        index = self._find(key)
        if index is None:
            return None
        return self._scopes[index].pop(key)

    def contains(self, key: K) -> bool:
        """Check whether any scope binds key."""
        return self._find(key) is not None

    def flatten(self) -> dict[K, V]:
        """
        Return every visible binding as a plain dict.

        Each key maps to its nearest-scope value. The dict is a snapshot;
        values themselves are not copied.
        """
        result: dict[K, V] = {}
        for scope in self._scopes:
            result.update(scope)
        return result

    # =========================================================================
    # Mapping protocol
    # =========================================================================

    def __getitem__(self, key: K) -> V:
        index = self._find(key)
        if index is None:
            raise KeyError(key)
        return self._scopes[index][key]

    def __setitem__(self, key: K, value: V) -> None:
        """Bind key in the current scope (same as insert())."""
        self._scopes[-1][key] = value

    def __delitem__(self, key: K) -> None:
        """Remove the nearest binding of key."""
        index = self._find(key)
        if index is None:
            raise KeyError(key)
        del self._scopes[index][key]

    def __iter__(self) -> _typing.Iterator[K]:
        """Iterate over each visible key once, innermost scope first."""
        seen: set[K] = set()
        for scope in reversed(self._scopes):
            for key in scope:
                if key not in seen:
                    seen.add(key)
                    yield key

    def __len__(self) -> int:
        """Count visible keys."""
        return sum(1 for _ in self)

    def __contains__(self, key: object) -> bool:
        return self._find(key) is not None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._scopes!r})"

    def __eq__(self, other: object) -> bool:
        """Chains are equal when their scope sequences are equal."""
        if isinstance(other, ScopeChain):
            return self._scopes == other._scopes
        return NotImplemented

    def copy(self) -> ScopeChain[K, V]:
        """
        Return a copy with the same scope structure.

        Each scope dict is copied, so pushing, popping and binding on either
        chain does not affect the other. Values are shared, not copied.
        """
        new: ScopeChain[K, V] = type(self)(on_underflow=self._on_underflow)
        new._scopes = [dict(scope) for scope in self._scopes]
        return new

    __copy__ = copy
