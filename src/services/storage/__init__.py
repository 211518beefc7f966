"""
Storage Services Package

Provides the abstract key/value interface and its implementations.
The JSON file backend is shared across sessions; the in-memory backend
is used for tests and throwaway sessions.
"""

from src.services.storage.interface import (
    ChangeListener,
    KeyValueStorageInterface,
    StorageError,
    StorageQuotaExceededError,
    StorageReadError,
    StorageWriteError,
)
from src.services.storage.json_file import JsonFileKeyValueStorage
from src.services.storage.memory import InMemoryKeyValueStorage, StorageArea

__all__ = [
    # Interfaces
    "ChangeListener",
    "KeyValueStorageInterface",
    # Exceptions
    "StorageError",
    "StorageQuotaExceededError",
    "StorageReadError",
    "StorageWriteError",
    # Implementations
    "InMemoryKeyValueStorage",
    "JsonFileKeyValueStorage",
    "StorageArea",
]
