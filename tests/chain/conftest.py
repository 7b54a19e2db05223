"""
Shared fixtures for ChainMap tests.
"""

import pytest as _pytest

import scopechain.chain as chain
import scopechain.config as config


@_pytest.fixture
def root(clean_settings: config.Settings) -> chain.ChainMap[str, int]:
    """Empty root handle with default settings."""
    return chain.ChainMap(settings=clean_settings)


@_pytest.fixture
def seeded_root(clean_settings: config.Settings) -> chain.ChainMap[str, int]:
    """Root handle holding a=1, b=2."""
    return chain.ChainMap.new_with({"a": 1, "b": 2}, settings=clean_settings)


@_pytest.fixture
def tracing_settings(isolated_env) -> config.Settings:
    """Settings with resolution tracing on and a low depth warning."""
    with isolated_env:
        return config.Settings.construct_without_dotenv(
            trace_resolution=True,
            depth_warning=3,
        )
