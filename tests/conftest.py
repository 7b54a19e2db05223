"""
Shared pytest fixtures for scopechain tests.

This file is automatically loaded by pytest. Fixtures defined here are
available to all test files without explicit imports.
"""

import os as _os
import unittest.mock as _mock

import pytest as _pytest

import scopechain.config as config

# Environment keys that should be cleared for isolated tests
ENV_KEYS_TO_CLEAR = [
    "SCOPECHAIN_ENV_FILE",
    "SCOPECHAIN_TRACE_RESOLUTION",
    "SCOPECHAIN_DEPTH_WARNING",
]


@_pytest.fixture
def clean_env() -> dict[str, str]:
    """
    Return environment dict with scopechain keys removed.

    Use with mock.patch.dict to isolate tests from the actual environment.
    """
    return {k: v for k, v in _os.environ.items() if k not in ENV_KEYS_TO_CLEAR}


@_pytest.fixture
def isolated_env(clean_env: dict[str, str]):
    """
    Context manager that isolates tests from environment variables.

    Usage:
        def test_something(isolated_env):
            with isolated_env:
                settings = config.Settings.construct_without_dotenv()
    """
    return _mock.patch.dict(_os.environ, clean_env, clear=True)


@_pytest.fixture
def clean_settings(isolated_env) -> config.Settings:
    """
    Settings instance isolated from environment and .env file.

    This fixture ensures tests get predictable default settings.
    """
    with isolated_env:
        return config.Settings.construct_without_dotenv()


@_pytest.fixture(autouse=True)
def _forget_default_settings():
    """Make every test build the process-wide Settings from scratch."""
    config.reset_default_settings()
    yield
    config.reset_default_settings()
