"""
ScopeChain — a stack of nested scopes with nearest-scope-wins lookup.

Lookups resolve to the innermost scope defining a key, inserts land in the
current scope only, and scopes are entered and exited in LIFO order.

Example:
    >>> from scope_chain.chain import ScopeChain
    >>> chain = ScopeChain.from_layers({"a": 1, "b": 2}, {"a": 4})
    >>> chain["a"], chain["b"]
    (4, 2)
    >>> chain.pop_scope()
    {'a': 4}
    >>> chain["a"]
    1
"""

from scope_chain.chain._core import ScopeChain
from scope_chain.chain._errors import ScopeChainError, ScopeUnderflowError
from scope_chain.chain._frozen import FrozenMapping
from scope_chain.chain._types import UnderflowPolicy

__all__ = [
    "FrozenMapping",
    "ScopeChain",
    "ScopeChainError",
    "ScopeUnderflowError",
    "UnderflowPolicy",
]
