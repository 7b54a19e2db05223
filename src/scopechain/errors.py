"""
Exceptions raised by scopechain.

Every condition is local and non-fatal to the tree: an operation that
raises leaves all nodes exactly as they were.
"""

from __future__ import annotations

import typing as _typing


class ScopeChainError(Exception):
    """Base class for all scopechain errors."""

    pass


class KeyNotFoundError(ScopeChainError, KeyError):
    """Raised when no level visible from a handle stores the key."""

    def __init__(self, key: _typing.Any) -> None:
        super().__init__(key)
        self.key = key


class LockedNodeError(ScopeChainError):
    """Raised when a write would mutate the storage of a read-only level."""

    def __init__(self, key: _typing.Any, operation: str) -> None:
        super().__init__(f"Cannot {operation} {key!r}: level is read-only")
        self.key = key
        self.operation = operation


class StructuralMisuseError(ScopeChainError, RuntimeError):
    """
    Raised on operations that the ownership rules should make unreachable.

    Examples are using a handle after release() or writing into a level
    that has no storage. Seeing this error means a caller bug.
    """

    pass
