"""
Shared constants for scopechain.

Single source of truth for default values used by the config and chain
modules.
"""

DEFAULT_DEPTH_WARNING = 1000
"""Chain depth at which a warning is logged (runaway scope nesting)."""

ENV_PREFIX = "SCOPECHAIN_"
"""Prefix for environment variables read by Settings."""
