"""
Type variables and sentinels shared by the chain modules.

- K, V: key and value type parameters of a ChainMap
- MISSING: marker returned by single-node lookups that found nothing
"""

from __future__ import annotations

import typing as _typing

K = _typing.TypeVar("K", bound=_typing.Hashable)
V = _typing.TypeVar("V")


# Helper function to reconstruct the MISSING singleton during unpickle
def _get_missing_singleton() -> _MissingType:
    """Return the MISSING singleton. Called by pickle to reconstruct."""
    return MISSING


class _MissingType:
    """Sentinel type marking an absent entry (None is a valid stored value)."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "<MISSING>"

    def __reduce__(self) -> tuple[_typing.Callable[[], _MissingType], tuple[()]]:
        """Pickle support: ensure singleton is preserved."""
        return (_get_missing_singleton, ())


MISSING = _MissingType()
