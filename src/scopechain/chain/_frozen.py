"""
Read-only snapshot views of a single level.

A FrozenMapping owns a private copy of one level's entries taken under
that level's lock, so later writes to the level never show through it.
Values themselves are not copied.
"""

from __future__ import annotations

import collections.abc as _abc
import typing as _typing

import scopechain.chain._types as _types


class FrozenMapping(_abc.Mapping[_types.K, _types.V]):
    """
    Immutable mapping over a snapshot dict.

    Example:
        >>> root = ChainMap.new_with({"a": 1})
        >>> snap = root.level()
        >>> root.insert("b", 2)
        >>> dict(snap)
        {'a': 1}
        >>> snap["a"] = 99  # TypeError: immutable
    """

    __slots__ = ("_data",)

    def __init__(self, data: _abc.Mapping[_types.K, _types.V] | None = None) -> None:
        """
        Wrap a snapshot.

        Args:
            data: Entries to expose. Always copied, so the caller may keep
                  mutating its own dict.
        """
        self._data: dict[_types.K, _types.V] = dict(data) if data else {}

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
            return self._data == dict(other.items())
        return NotImplemented

    def __hash__(self) -> int:
        """FrozenMapping is not hashable (values may be mutable)."""
        raise TypeError(f"unhashable type: '{type(self).__name__}'")
