"""Shared fixtures for the lttr test suite."""

from datetime import datetime, timezone

import pytest

from lttr.audit import AuditLogger
from lttr.config import TrackerSettings
from lttr.services.storage import InMemoryAuditStorage, InMemoryStorage
from lttr.store import TrackerStore


FIXED_NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """A clock the test can move."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def config() -> TrackerSettings:
    return TrackerSettings(trial_length_days=7, recent_activity_limit=3, export_indent=2)


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def audit_storage() -> InMemoryAuditStorage:
    return InMemoryAuditStorage()


@pytest.fixture
def audit_logger(audit_storage) -> AuditLogger:
    return AuditLogger(audit_storage)


@pytest.fixture
def store(storage, audit_logger, clock, config) -> TrackerStore:
    """An empty store: loaded from empty storage, no sample companies."""
    tracker = TrackerStore(storage, audit_logger=audit_logger, clock=clock, config=config)
    tracker.load()
    return tracker


@pytest.fixture
def opened_store(storage, audit_logger, clock, config) -> TrackerStore:
    """A store opened the way the app opens it (load + seed)."""
    return TrackerStore.open(storage, audit_logger=audit_logger, clock=clock, config=config)
