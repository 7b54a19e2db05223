"""
Configuration module for scopechain.

Uses pydantic-settings for environment variable loading.
"""

from scopechain.config.settings import (
    Settings,
    default_settings,
    reset_default_settings,
)

__all__ = ["Settings", "default_settings", "reset_default_settings"]
