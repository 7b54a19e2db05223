"""
Chain walks shared by the ChainMap read and update operations.

Each walk starts at a node and moves toward the root, taking each node's
lock only for the single check or write at that node. A walk is therefore
a sequence of atomic steps, not one atomic operation: a concurrent insert
into a level the walk has not reached yet can change which level it
settles on.
"""

from __future__ import annotations

import logging as _logging
import typing as _typing

import scopechain.chain._node as _node
import scopechain.chain._types as _types

if _typing.TYPE_CHECKING:
    import scopechain.config.settings as _settings

_logger = _logging.getLogger(__name__)

Node = _node.Node


def iter_levels(start: Node[_types.K, _types.V]) -> _typing.Iterator[Node[_types.K, _types.V]]:
    """Yield start and then each ancestor up to the root."""
    node: Node[_types.K, _types.V] | None = start
    while node is not None:
        yield node
        node = node.parent


def lookup(
    start: Node[_types.K, _types.V],
    key: _types.K,
    settings: _settings.Settings,
) -> _types.V | _types._MissingType:
    """
    Find the value of key nearest to start.

    Transparent levels are skipped without checking storage.

    Returns:
        The stored value, or MISSING if no level stores key.
    """
    for node in iter_levels(start):
        if node.transparent:
            continue
        value = node.lookup(key)
        if value is not _types.MISSING:
            if settings.trace_resolution:
                _logger.debug(
                    "lookup %r: found at depth %d (from depth %d)",
                    key, node.depth, start.depth,
                )
            return value
    if settings.trace_resolution:
        _logger.debug("lookup %r: not found (from depth %d)", key, start.depth)
    return _types.MISSING


def lookup_local(
    start: Node[_types.K, _types.V],
    key: _types.K,
    settings: _settings.Settings,
) -> _types.V | _types._MissingType:
    """
    Find key among the levels that belong to start's local scope.

    The walk checks start, then keeps going only while the level it just
    left was transparent or fallthrough. The first ordinary level ends
    the scope.
    """
    for node in iter_levels(start):
        value = node.lookup(key)
        if value is not _types.MISSING:
            if settings.trace_resolution:
                _logger.debug("local lookup %r: found at depth %d", key, node.depth)
            return value
        if not (node.transparent or node.fallthrough):
            break
    if settings.trace_resolution:
        _logger.debug("local lookup %r: not in local scope", key)
    return _types.MISSING


def update(
    start: Node[_types.K, _types.V],
    key: _types.K,
    value: _types.V,
    settings: _settings.Settings,
) -> bool:
    """
    Replace key in place at the nearest level that stores it.

    Returns:
        True if some level was updated, False if key is stored nowhere.

    Raises:
        LockedNodeError: If the nearest level storing key is locked.
    """
    for node in iter_levels(start):
        if node.transparent:
            continue
        if node.replace(key, value):
            if settings.trace_resolution:
                _logger.debug("update %r: replaced at depth %d", key, node.depth)
            return True
    if settings.trace_resolution:
        _logger.debug("update %r: not found (from depth %d)", key, start.depth)
    return False


def visible_keys(start: Node[_types.K, _types.V]) -> _typing.Iterator[_types.K]:
    """Yield every key visible from start once, nearest level first."""
    seen: set[_types.K] = set()
    for node in iter_levels(start):
        for key in node.keys():
            if key not in seen:
                seen.add(key)
                yield key
