"""
ChainMap: a handle onto one level of a tree of scopes.

Levels form a tree through parent links only. Any number of handles can
branch off the same level, and writes to a shared level are visible to
every handle below it that has not shadowed the key.

Handle semantics:
- insert / handle[key] = value: new binding at the handle's own level
- update: replace the nearest existing binding in place, wherever it is
- get / handle[key]: nearest binding wins (leaf levels shadow root levels)
- fork: the handle moves onto a fresh level below its old one, and a new
  sibling branch is handed back

Thread safety: every level has its own lock and operations hold at most
one of them at a time. A single get/update is a sequence of atomic
per-level steps, not one atomic step over the whole chain.
"""

from __future__ import annotations

import collections.abc as _abc
import logging as _logging
import types as _pytypes
import typing as _typing

import scopechain.chain._frozen as _frozen
import scopechain.chain._node as _node
import scopechain.chain._resolve as _resolve
import scopechain.chain._types as _types
import scopechain.config as config
import scopechain.errors as errors

_logger = _logging.getLogger(__name__)

Node = _node.Node


class ChainMap(_abc.Mapping[_types.K, _types.V]):
    """
    A mutable handle bound to one level of a scope tree.

    Example:
        >>> globals_ = ChainMap.new_with({"x": 1, "y": 2})
        >>> local = globals_.extend_with({"x": 10})
        >>> local["x"], local["y"]
        (10, 2)
        >>> local.update("y", 20)   # mutates the binding in globals_
        >>> globals_["y"]
        20
        >>> local.insert("z", 3)    # new binding, local only
        >>> "z" in globals_
        False

    Fork:
        >>> branch = globals_.fork()
        >>> globals_.insert("w", 0)  # lands in globals_'s new private level
        >>> "w" in branch
        False
        >>> globals_.update("x", 5)  # updates still reach the shared level
        >>> branch["x"]
        5

    Args:
        settings: Settings shared by this root and every handle derived
            from it. Defaults to the process-wide settings.

    Note:
        Handles are unhashable mappings and compare equal by visible
        content, like any other Mapping. Use ``is`` for identity.
    """

    __slots__ = ("_node", "_settings")

    _node: Node[_types.K, _types.V] | None
    _settings: config.Settings

    def __init__(self, *, settings: config.Settings | None = None) -> None:
        self._node = Node.new_root()
        self._settings = settings if settings is not None else config.default_settings()

    @classmethod
    def new_with(
        cls,
        mapping: _typing.Mapping[_types.K, _types.V],
        *,
        settings: config.Settings | None = None,
    ) -> ChainMap[_types.K, _types.V]:
        """Create a root handle whose level starts as a copy of `mapping`."""
        return cls._bind(
            Node.new_root_with(mapping),
            settings if settings is not None else config.default_settings(),
        )

    @classmethod
    def _bind(
        cls,
        node: Node[_types.K, _types.V],
        settings: config.Settings,
    ) -> ChainMap[_types.K, _types.V]:
        handle = cls.__new__(cls)
        handle._node = node
        handle._settings = settings
        return handle

    def _bound(self) -> Node[_types.K, _types.V]:
        """Return the designated level, read once so a concurrent fork can't split an operation."""
        node = self._node
        if node is None:
            raise errors.StructuralMisuseError("ChainMap handle has been released")
        return node

    def _derive(self, node: Node[_types.K, _types.V]) -> ChainMap[_types.K, _types.V]:
        self._check_depth(node)
        return self._bind(node, self._settings)

    def _check_depth(self, node: Node[_types.K, _types.V]) -> None:
        if node.depth == self._settings.depth_warning:
            _logger.warning(
                "Scope chain reached %d levels; check for runaway nesting",
                node.depth,
            )

    # =========================================================================
    # Introspection
    # =========================================================================

    @property
    def settings(self) -> config.Settings:
        return self._settings

    @property
    def node(self) -> Node[_types.K, _types.V]:
        """The level this handle currently designates."""
        return self._bound()

    @property
    def depth(self) -> int:
        """Number of levels above this handle's level (0 at a root)."""
        return self._bound().depth

    @property
    def writable(self) -> bool:
        """Whether insert through this handle would be accepted."""
        return not self._bound().write_target().locked

    @property
    def released(self) -> bool:
        return self._node is None

    def level(self) -> _frozen.FrozenMapping[_types.K, _types.V]:
        """
        Snapshot of the entries stored at this handle's own level.

        Ancestors are not included. A transparent level has no entries of
        its own, so its snapshot is always empty.
        """
        return _frozen.FrozenMapping(self._bound().snapshot())

    def parent(self) -> ChainMap[_types.K, _types.V] | None:
        """Return a new handle on the parent level, or None at a root."""
        parent = self._bound().parent
        if parent is None:
            return None
        return self._bind(parent, self._settings)

    # =========================================================================
    # Extension
    # =========================================================================

    def extend(self) -> ChainMap[_types.K, _types.V]:
        """
        Create a new empty scope below this one.

        The new scope can get and update bindings of this scope, but its
        inserts are only visible to itself and its own descendants. This
        handle keeps its binding.
        """
        return self._derive(Node.new_child(self._bound()))

    def extend_with(
        self,
        mapping: _typing.Mapping[_types.K, _types.V],
    ) -> ChainMap[_types.K, _types.V]:
        """Like extend(), with the new scope seeded from a copy of `mapping`."""
        return self._derive(Node.new_child_with(self._bound(), mapping))

    def extend_fallthrough(self) -> ChainMap[_types.K, _types.V]:
        """
        Create a transparent view of this scope.

        The new handle has no storage of its own: reads, inserts and
        updates through it act exactly as they would through this handle.
        """
        return self._derive(Node.new_transparent_child(self._bound()))

    def readonly(self) -> ChainMap[_types.K, _types.V]:
        """
        Create a read-only view of this scope.

        The view designates a new locked level below this one, so inserts
        through it raise LockedNodeError while this handle (and any other
        handle sharing this level) stays writable. Updates through the view
        still reach unlocked ancestors.
        """
        node = Node.new_child(self._bound())
        node.lock()
        _logger.debug("readonly view created at depth %d", node.depth)
        return self._derive(node)

    def fork(self) -> ChainMap[_types.K, _types.V]:
        """
        Split this scope into two branches.

        This handle is rebound in place to a new fallthrough level below
        its old level, and a handle on a new ordinary level below the old
        level is returned. Afterwards:

        - everything visible before the fork stays visible from both
        - inserts through either handle are invisible to the other
        - updates of pre-fork bindings land in the shared old level and
          are visible to both
        - other handles still bound to the old level are unaffected
        - a read-only handle stays read-only; the returned branch is
          writable, like extend() of a read-only view

        Returns:
            Handle on the new sibling branch.
        """
        node = self._bound()
        return self._fork(node, Node.new_child(node))

    def fork_with(
        self,
        mapping: _typing.Mapping[_types.K, _types.V],
    ) -> ChainMap[_types.K, _types.V]:
        """Like fork(), with the returned branch seeded from a copy of `mapping`."""
        node = self._bound()
        return self._fork(node, Node.new_child_with(node, mapping))

    def _fork(
        self,
        node: Node[_types.K, _types.V],
        newlevel: Node[_types.K, _types.V],
    ) -> ChainMap[_types.K, _types.V]:
        oldlevel: Node[_types.K, _types.V] = Node.new_fallthrough_child(node)
        if node.write_target().locked:
            # A read-only handle stays read-only on its side of the fork
            oldlevel.lock()
        self._check_depth(oldlevel)
        self._node = oldlevel
        _logger.debug("forked scope at depth %d", node.depth)
        # Both new levels sit at the same depth; oldlevel was already checked
        return self._bind(newlevel, self._settings)

    # =========================================================================
    # Reads
    # =========================================================================

    def get(self, key: _types.K, default: _typing.Any = None) -> _typing.Any:
        """Return the nearest binding of key, or default if there is none."""
        value = _resolve.lookup(self._bound(), key, self._settings)
        return default if value is _types.MISSING else value

    def local_get(self, key: _types.K, default: _typing.Any = None) -> _typing.Any:
        """
        Return key's binding only if it lives in this handle's local scope.

        The local scope is this handle's level plus any transparent or
        fallthrough levels directly above it. After a fork, the forked
        handle's local scope therefore still includes its pre-fork level,
        while the returned branch's local scope is just its own level.
        """
        value = _resolve.lookup_local(self._bound(), key, self._settings)
        return default if value is _types.MISSING else value

    def contains(self, key: _types.K) -> bool:
        """Return True if any visible level binds key."""
        return _resolve.lookup(self._bound(), key, self._settings) is not _types.MISSING

    def __contains__(self, key: object) -> bool:
        try:
            hash(key)
        except TypeError:
            return False
        return self.contains(_typing.cast(_types.K, key))

    def __getitem__(self, key: _types.K) -> _types.V:
        """
        Return the nearest binding of key.

        Raises:
            KeyNotFoundError: If no visible level binds key.
        """
        value = _resolve.lookup(self._bound(), key, self._settings)
        if value is _types.MISSING:
            raise errors.KeyNotFoundError(key)
        return _typing.cast(_types.V, value)

    def __iter__(self) -> _typing.Iterator[_types.K]:
        """Iterate over visible keys, each once, nearest level first."""
        return _resolve.visible_keys(self._bound())

    def __len__(self) -> int:
        """Count visible keys."""
        return sum(1 for _ in self)

    # =========================================================================
    # Writes
    # =========================================================================

    def insert(self, key: _types.K, value: _types.V) -> None:
        """
        Bind key at this handle's own level, shadowing any ancestor binding.

        Through a transparent handle the binding goes to the nearest
        ancestor level that has storage.

        Raises:
            LockedNodeError: If that level is read-only.
        """
        target = self._bound().write_target()
        try:
            target.store(key, value)
        except errors.LockedNodeError:
            _logger.debug("insert %r rejected: level at depth %d is locked", key, target.depth)
            raise

    def __setitem__(self, key: _types.K, value: _types.V) -> None:
        self.insert(key, value)

    def update(self, key: _types.K, value: _types.V) -> None:
        """
        Replace the nearest existing binding of key in place.

        The change is visible to every handle that can see that level.
        No new binding is ever created.

        Raises:
            KeyNotFoundError: If no visible level binds key.
            LockedNodeError: If the level holding the binding is read-only.
        """
        try:
            found = _resolve.update(self._bound(), key, value, self._settings)
        except errors.LockedNodeError:
            _logger.debug("update %r rejected: binding lives in a locked level", key)
            raise
        if not found:
            raise errors.KeyNotFoundError(key)

    def update_or(self, key: _types.K, value: _types.V) -> None:
        """
        Update key if some visible level binds it, otherwise insert it here.

        The check and the insert are separate steps, so a concurrent insert
        of the same key into an ancestor may be shadowed by this insert.
        """
        try:
            self.update(key, value)
        except errors.KeyNotFoundError:
            self.insert(key, value)

    def __delitem__(self, key: _types.K) -> None:
        """
        Remove key from this handle's own level.

        Ancestor bindings are never removed; after deleting a shadowing
        binding the ancestor's value becomes visible again.

        Raises:
            KeyNotFoundError: If key is not bound at this handle's level.
            LockedNodeError: If the level is read-only.
        """
        self._bound().write_target().discard(key)

    # =========================================================================
    # Lifetime
    # =========================================================================

    def release(self) -> None:
        """
        Drop this handle's reference to its level.

        Levels no longer referenced by any handle or descendant are freed.
        Any later operation on this handle raises StructuralMisuseError.
        Releasing twice is allowed.
        """
        if self._node is not None:
            _logger.debug("released handle at depth %d", self._node.depth)
        self._node = None

    def __enter__(self) -> ChainMap[_types.K, _types.V]:
        self._bound()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: _pytypes.TracebackType | None,
    ) -> None:
        self.release()

    def __repr__(self) -> str:
        node = self._node
        if node is None:
            return "ChainMap(<released>)"
        return f"ChainMap(depth={node.depth}, level={node.snapshot()!r})"
