"""Services package."""

from src.services.storage import (
    InMemoryKeyValueStorage,
    JsonFileKeyValueStorage,
    KeyValueStorageInterface,
    StorageArea,
    StorageError,
    StorageQuotaExceededError,
    StorageReadError,
    StorageWriteError,
)

__all__ = [
    # Storage services
    "InMemoryKeyValueStorage",
    "JsonFileKeyValueStorage",
    "KeyValueStorageInterface",
    "StorageArea",
    "StorageError",
    "StorageQuotaExceededError",
    "StorageReadError",
    "StorageWriteError",
]
