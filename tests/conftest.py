"""
Shared pytest fixtures for review_service tests.

Provides fixtures for:
- A fixed clock
- In-memory settings sources
- Mock prompters
- A ReviewService factory
"""

import pytest
from datetime import datetime, timezone
from typing import Optional
from unittest.mock import AsyncMock, MagicMock

from review_service.service import ReviewService
from review_service.sources import MemorySettingsSource
from review_service.tracked_state import TrackedState


FIXED_NOW = datetime(2024, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def now():
    """The time every test clock returns."""
    return FIXED_NOW


@pytest.fixture
def clock(now):
    """Clock returning the fixed time."""
    return lambda: now


@pytest.fixture
def prompter():
    """Mock prompter with an awaitable trigger()."""
    mock = MagicMock()
    mock.trigger = AsyncMock(return_value=None)
    return mock


@pytest.fixture
def memory_source():
    """Factory for a memory source pre-loaded with a state."""
    def _create(state: Optional[TrackedState] = None) -> MemorySettingsSource:
        source = MemorySettingsSource()
        if state is not None:
            source._state = state
        return source
    return _create


@pytest.fixture
def make_service(prompter, clock):
    """Factory for ReviewService with the mock prompter and fixed clock."""
    def _create(source, policy=None, **kwargs) -> ReviewService:
        kwargs.setdefault("clock", clock)
        return ReviewService(
            prompter=kwargs.pop("prompter", prompter),
            settings_source=source,
            policy=policy,
            **kwargs
        )
    return _create
