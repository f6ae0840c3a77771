"""
Storage Services Package

Provides the abstract key-value interface and its implementations.
Currently implements local JSON files as the backend, but designed to be swappable.
"""

from lttr.services.storage.interface import (
    AuditStorageInterface,
    InvalidKeyError,
    KeyValueStorageInterface,
    StorageError,
    StorageReadError,
    StorageWriteError,
)
from lttr.services.storage.local_files import JsonFileStorage
from lttr.services.storage.memory import InMemoryAuditStorage, InMemoryStorage

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "KeyValueStorageInterface",
    # Exceptions
    "InvalidKeyError",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    # Implementations
    "InMemoryAuditStorage",
    "InMemoryStorage",
    "JsonFileStorage",
]
