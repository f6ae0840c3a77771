"""
Application Wiring for lttr.

This module builds the one TrackerStore the application uses and wires
its dependencies (storage backend, audit logger, configuration).

DESIGN DECISION: The store is created here exactly once per process by
the entry point and handed to every view. Nothing looks it up globally.
"""

from pathlib import Path
from typing import Optional

from lttr.audit import AuditLogger
from lttr.config import get_settings
from lttr.services.storage import (
    InMemoryAuditStorage,
    InMemoryStorage,
    JsonFileStorage,
    KeyValueStorageInterface,
)
from lttr.store import TrackerStore


def create_app_components(
    use_storage: bool = True,
    data_dir: Optional[Path] = None,
) -> tuple[TrackerStore, AuditLogger]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to persist to local JSON files.
                    Set to False for an ephemeral, in-memory session.
        data_dir: Override the configured data directory.

    Returns:
        (store, audit_logger)
    """
    settings = get_settings()

    storage: KeyValueStorageInterface
    if use_storage:
        storage = JsonFileStorage(data_dir or settings.storage.data_dir)
    else:
        storage = InMemoryStorage()

    audit_logger = AuditLogger(InMemoryAuditStorage())
    store = TrackerStore.open(
        storage,
        audit_logger=audit_logger,
        config=settings.tracker,
    )
    return store, audit_logger
