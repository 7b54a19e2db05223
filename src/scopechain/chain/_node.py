"""
Node: one level of a scope chain.

A Node owns a local store (a plain dict) and a strong reference to its
parent. Nodes never reference their children, so the tree can only be
walked upward and a subtree is reclaimed by ordinary reference counting
as soon as no handle and no descendant points into it.

Every storage access happens inside a short critical section on the
node's own lock. Callers walking a chain hold at most one node lock at a
time.

Variants (fixed at construction):
- ordinary: storage present, checked by every lookup
- transparent: no storage at all, every operation goes to the parent
- fallthrough: storage present, but local_get looks through it

Any node can additionally be locked once, after which its storage
rejects writes.
"""

from __future__ import annotations

import threading as _threading
import typing as _typing

import scopechain.chain._types as _types
import scopechain.errors as errors


class Node(_typing.Generic[_types.K, _types.V]):
    """
    One storage level plus its upward link.

    Use the new_* constructors rather than calling Node() directly.
    """

    __slots__ = (
        "_storage",
        "_parent",
        "_fallthrough",
        "_locked",
        "_depth",
        "_mutex",
        "__weakref__",
    )

    def __init__(
        self,
        parent: Node[_types.K, _types.V] | None,
        storage: dict[_types.K, _types.V] | None,
        *,
        fallthrough: bool = False,
    ) -> None:
        if parent is None and storage is None:
            raise errors.StructuralMisuseError("A root level must have storage")
        self._parent = parent
        self._storage = storage
        self._fallthrough = fallthrough
        self._locked = False
        self._depth = 0 if parent is None else parent._depth + 1
        self._mutex = _threading.Lock()

    # =========================================================================
    # Constructors
    # =========================================================================

    @classmethod
    def new_root(cls) -> Node[_types.K, _types.V]:
        """Empty, unlocked root with no parent."""
        return cls(None, {})

    @classmethod
    def new_root_with(
        cls,
        initial: _typing.Mapping[_types.K, _types.V],
    ) -> Node[_types.K, _types.V]:
        """Root whose storage starts as a copy of `initial`."""
        return cls(None, dict(initial))

    @classmethod
    def new_child(cls, parent: Node[_types.K, _types.V]) -> Node[_types.K, _types.V]:
        """Empty ordinary child of `parent`."""
        return cls(parent, {})

    @classmethod
    def new_child_with(
        cls,
        parent: Node[_types.K, _types.V],
        initial: _typing.Mapping[_types.K, _types.V],
    ) -> Node[_types.K, _types.V]:
        """Ordinary child of `parent` seeded with a copy of `initial`."""
        return cls(parent, dict(initial))

    @classmethod
    def new_transparent_child(
        cls,
        parent: Node[_types.K, _types.V],
    ) -> Node[_types.K, _types.V]:
        """Storage-less child that delegates everything to `parent`."""
        return cls(parent, None)

    @classmethod
    def new_fallthrough_child(
        cls,
        parent: Node[_types.K, _types.V],
    ) -> Node[_types.K, _types.V]:
        """Empty child with its own storage that local lookups look through."""
        return cls(parent, {}, fallthrough=True)

    # =========================================================================
    # Flags and topology (immutable after construction, except locked)
    # =========================================================================

    @property
    def parent(self) -> Node[_types.K, _types.V] | None:
        return self._parent

    @property
    def depth(self) -> int:
        """Number of ancestors (0 for a root)."""
        return self._depth

    @property
    def transparent(self) -> bool:
        return self._storage is None

    @property
    def fallthrough(self) -> bool:
        return self._fallthrough

    @property
    def locked(self) -> bool:
        with self._mutex:
            return self._locked

    def lock(self) -> None:
        """Make this level's own storage read-only. Idempotent, never undone."""
        with self._mutex:
            self._locked = True

    def write_target(self) -> Node[_types.K, _types.V]:
        """Return the nearest level that has storage, starting at self."""
        node: Node[_types.K, _types.V] | None = self
        while node is not None:
            if node._storage is not None:
                return node
            node = node._parent
        # Roots always have storage, so a chain always ends in one
        raise errors.StructuralMisuseError("Chain has no level with storage")

    # =========================================================================
    # Single-node critical sections
    # =========================================================================

    def lookup(self, key: _types.K) -> _types.V | _types._MissingType:
        """Return the locally stored value for key, or MISSING."""
        if self._storage is None:
            return _types.MISSING
        with self._mutex:
            return self._storage.get(key, _types.MISSING)

    def store(self, key: _types.K, value: _types.V) -> None:
        """
        Create or overwrite key in this level's own storage.

        Raises:
            LockedNodeError: If the level is locked.
            StructuralMisuseError: If the level has no storage.
        """
        storage = self._require_storage()
        with self._mutex:
            if self._locked:
                raise errors.LockedNodeError(key, "insert")
            storage[key] = value

    def replace(self, key: _types.K, value: _types.V) -> bool:
        """
        Overwrite key only if this level already stores it.

        Returns:
            True if the entry was replaced, False if key is not stored here.

        Raises:
            LockedNodeError: If key is stored here but the level is locked.
        """
        if self._storage is None:
            return False
        with self._mutex:
            if key not in self._storage:
                return False
            if self._locked:
                raise errors.LockedNodeError(key, "update")
            self._storage[key] = value
            return True

    def discard(self, key: _types.K) -> None:
        """
        Remove key from this level's own storage.

        Raises:
            KeyNotFoundError: If key is not stored here.
            LockedNodeError: If the level is locked.
            StructuralMisuseError: If the level has no storage.
        """
        storage = self._require_storage()
        with self._mutex:
            if key not in storage:
                raise errors.KeyNotFoundError(key)
            if self._locked:
                raise errors.LockedNodeError(key, "delete")
            del storage[key]

    def keys(self) -> list[_types.K]:
        """Snapshot of the keys stored at this level."""
        if self._storage is None:
            return []
        with self._mutex:
            return list(self._storage)

    def snapshot(self) -> dict[_types.K, _types.V]:
        """Copy of this level's entries."""
        if self._storage is None:
            return {}
        with self._mutex:
            return dict(self._storage)

    def _require_storage(self) -> dict[_types.K, _types.V]:
        if self._storage is None:
            raise errors.StructuralMisuseError(
                "Transparent level has no storage; write to its write_target()"
            )
        return self._storage

    def __repr__(self) -> str:
        if self._storage is None:
            kind = "transparent"
        elif self._fallthrough:
            kind = "fallthrough"
        else:
            kind = "ordinary"
        flags = ", locked" if self._locked else ""
        return f"<Node {kind} depth={self._depth}{flags}>"
