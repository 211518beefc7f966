"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for the persistence backend.
This allows us to:
1. Keep expenses in a JSON file shared by every browser session
2. Use in-memory storage for testing
3. Keep the expense store decoupled from where the blob lives

The interface mirrors browser local storage on purpose: string values
under string keys, plus a notification when another context writes a key.
Nothing more is needed by the expense store.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional


# Called with the key that another context changed
ChangeListener = Callable[[str], None]


class KeyValueStorageInterface(ABC):
    """
    Abstract interface for origin-scoped key/string storage.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Args:
            key: Storage key

        Returns:
            The stored string, or None if the key is absent

        Raises:
            StorageReadError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Store a value under a key, replacing any previous value.

        Args:
            key: Storage key
            value: String to store

        Raises:
            StorageQuotaExceededError: If the value does not fit
            StorageWriteError: If the write fails for any other reason
        """
        pass

    @abstractmethod
    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """
        Register a listener for changes made by OTHER contexts.

        Writes made through this handle never notify its own listeners,
        matching how browsers deliver storage events to other tabs only.

        Args:
            listener: Called with the changed key

        Returns:
            A function that unsubscribes the listener
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageReadError(StorageError):
    """Stored data could not be read."""
    pass


class StorageWriteError(StorageError):
    """A value could not be written."""
    pass


class StorageQuotaExceededError(StorageWriteError):
    """The write would exceed the storage quota."""
    pass
