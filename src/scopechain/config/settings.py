"""
Settings configuration using pydantic-settings.

Loads configuration from:
1. Constructor arguments (highest precedence)
2. Environment variables with SCOPECHAIN_ prefix
3. .env file (only if SCOPECHAIN_ENV_FILE points at one)
4. Field defaults

Example:
  SCOPECHAIN_TRACE_RESOLUTION=true
  SCOPECHAIN_DEPTH_WARNING=256
"""

import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic as _pydantic
import pydantic_settings as _pydantic_settings

import scopechain.constants as constants


def _get_env_file() -> str | None:
    """Determine which .env file to load.

    SCOPECHAIN_ENV_FILE is used when it names an existing file. There is
    no implicit .env lookup: a library should not pick up whatever .env
    happens to sit in the caller's working directory.
    """
    if env_file := _os.environ.get("SCOPECHAIN_ENV_FILE"):
        if _pathlib.Path(env_file).exists():
            return env_file
    return None


class Settings(_pydantic_settings.BaseSettings):
    """
    scopechain runtime settings.

    All settings can be overridden via environment variables with the
    SCOPECHAIN_ prefix. A root ChainMap takes a Settings instance; every
    handle derived from it shares the same object.
    """

    model_config = _pydantic_settings.SettingsConfigDict(
        env_prefix=constants.ENV_PREFIX,
        env_file=_get_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    trace_resolution: bool = False
    """Log every chain walk (key, outcome, depth reached) at DEBUG level."""

    depth_warning: int = _pydantic.Field(
        default=constants.DEFAULT_DEPTH_WARNING,
        ge=1,
    )
    """Log a warning when a branch grows to this many levels."""

    @classmethod
    def construct_without_dotenv(cls, **kwargs: _typing.Any) -> "Settings":
        """Create Settings from environment variables only, without loading .env file.

        Useful for test isolation.
        """
        return cls(_env_file=None, **kwargs)  # type: ignore[call-arg]


_default: Settings | None = None


def default_settings() -> Settings:
    """Return the process-wide Settings, building it on first use."""
    global _default
    if _default is None:
        _default = Settings()
    return _default


def reset_default_settings() -> None:
    """Forget the cached process-wide Settings.

    SCOPECHAIN_* variables are read again on next use. The .env file is
    not: it was chosen from SCOPECHAIN_ENV_FILE when this module was
    imported, so later changes to that variable have no effect.
    """
    global _default
    _default = None
