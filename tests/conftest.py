"""Pytest configuration and shared fixtures for exforms tests."""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

import pytest
from hypothesis import HealthCheck, settings

from exforms import _config
from exforms._logging import clear_log_hooks

if TYPE_CHECKING:
    from collections.abc import Generator

# reset_runtime is autouse and function scoped; it only clears globals
settings.register_profile('exforms', suppress_health_check=[HealthCheck.function_scoped_fixture])
settings.load_profile('exforms')


@pytest.fixture(autouse=True)
def reset_runtime() -> Generator[None]:
    """Start every test without runtime config or log hooks."""
    _config._reset()
    clear_log_hooks()
    yield
    _config._reset()
    clear_log_hooks()


@pytest.fixture
def calls() -> Counter[str]:
    """Call counter shared between a test and the handlers it builds."""
    return Counter()
