"""
Abstract Storage Interface

DESIGN DECISION: The tracker persists a handful of independently keyed
text blobs. We define an abstract key-value interface so that:
1. The JSON-file backend can be swapped for anything key-value shaped
2. Tests use in-memory storage
3. Business logic never touches the filesystem

The interface is intentionally tiny. Serialization is the store's job,
backends only move strings.
"""

from abc import ABC, abstractmethod
from typing import Optional

from lttr.models.audit import AuditEvent


class KeyValueStorageInterface(ABC):
    """
    Abstract interface for key-value persistence.

    Keys are short identifiers (see lttr.models.records.StorageKey).
    Values are serialized JSON documents.
    """

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Returns:
            The stored text, or None if the key is absent

        Raises:
            StorageReadError: If the backend could not be read
        """
        pass

    @abstractmethod
    def write(self, key: str, value: str) -> None:
        """
        Store a value under a key, replacing any previous value.

        Raises:
            StorageWriteError: If the value could not be stored
        """
        pass

    @abstractmethod
    def remove(self, key: str) -> bool:
        """
        Remove a key.

        Returns:
            True if the key existed
        """
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        """List all stored keys."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageReadError(StorageError):
    """A stored value could not be read."""
    pass


class StorageWriteError(StorageError):
    """A value could not be written."""
    pass


class InvalidKeyError(StorageError):
    """The key cannot be used with this backend."""
    pass
