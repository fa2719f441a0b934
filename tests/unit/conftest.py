"""Fixtures for service-level tests against the in-memory store."""
from datetime import datetime, timezone

import pytest

from app.store import MemoryPollStore


@pytest.fixture
def store():
    """A fresh in-memory store per test."""
    return MemoryPollStore()


@pytest.fixture
def now():
    return datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
