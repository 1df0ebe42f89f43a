"""
scope-chain - scoped key-value stack

A mapping organized as a chain of nested scopes, for symbol tables,
interpreter environments and layered configuration.
"""

import importlib.metadata as _metadata

# Version is defined in pyproject.toml - read it and parse into tuple (primary representation)
_raw_version = _metadata.version("scope-chain")
__version_info__: tuple[int, int, int] = tuple(int(x) for x in _raw_version.split(".")[:3])  # type: ignore[assignment]
__version__: str = ".".join(str(x) for x in __version_info__)
__author__ = "scope-chain Contributors"

from scope_chain.chain import (  # noqa: E402
    FrozenMapping,
    ScopeChain,
    ScopeChainError,
    ScopeUnderflowError,
)

__all__ = [
    "__version__",
    "__version_info__",
    "FrozenMapping",
    "ScopeChain",
    "ScopeChainError",
    "ScopeUnderflowError",
]
