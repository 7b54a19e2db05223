"""
scopechain - layered scopes with shared, mutable ancestors

A tree of key-value levels where lookups fall through to parent levels,
for nested-scope resolution in interpreters and hierarchical config
overrides.
"""

import importlib.metadata as _metadata

# Version is defined in pyproject.toml - read it and parse into tuple (primary representation)
_raw_version = _metadata.version("scopechain")
__version_info__: tuple[int, int, int] = tuple(int(x) for x in _raw_version.split(".")[:3])  # type: ignore[assignment]
__version__: str = ".".join(str(x) for x in __version_info__)
__author__ = "scopechain Contributors"

import scopechain.errors as errors  # noqa: E402
from scopechain.chain import ChainMap  # noqa: E402
from scopechain.config import Settings  # noqa: E402
from scopechain.errors import (  # noqa: E402
    KeyNotFoundError,
    LockedNodeError,
    ScopeChainError,
    StructuralMisuseError,
)

__all__ = [
    "__version__",
    "__version_info__",
    "ChainMap",
    "KeyNotFoundError",
    "LockedNodeError",
    "ScopeChainError",
    "Settings",
    "StructuralMisuseError",
    "errors",
]
