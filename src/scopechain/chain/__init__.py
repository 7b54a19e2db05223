"""
ChainMap: a tree of key-value levels with fall-through lookup.

Each handle designates one level. Lookups walk from that level toward the
root, so bindings near the handle shadow bindings of the same key further
up. Many handles can branch off one shared level without copying it.

Example:
    >>> from scopechain.chain import ChainMap
    >>> root = ChainMap.new_with({"debug": False, "jobs": 4})
    >>> project = root.extend_with({"jobs": 8})
    >>> project["jobs"], project["debug"]
    (8, False)
"""

from scopechain.chain._core import ChainMap
from scopechain.chain._frozen import FrozenMapping
from scopechain.chain._node import Node

__all__ = ["ChainMap", "FrozenMapping", "Node"]
