"""
In-Memory Storage Implementation

Used by tests and for throwaway sessions. Several storage handles can share
one StorageArea; each handle then behaves like a separate browser tab of the
same origin, and a write through one handle notifies the others.
"""

from typing import Callable, Optional

from src.services.storage.interface import (
    ChangeListener,
    KeyValueStorageInterface,
    StorageQuotaExceededError,
)


class StorageArea:
    """
    The shared key/value data behind one or more storage handles.

    Size is measured in characters of keys plus values, like local storage.
    """

    def __init__(self, quota_bytes: Optional[int] = None):
        self.quota_bytes = quota_bytes
        self._data: dict[str, str] = {}
        self._handles: list["InMemoryKeyValueStorage"] = []

    def size_with(self, key: str, value: str) -> int:
        """Total size if `key` held `value`."""
        size = sum(
            len(k) + len(v) for k, v in self._data.items() if k != key
        )
        return size + len(key) + len(value)

    def attach(self, handle: "InMemoryKeyValueStorage") -> None:
        self._handles.append(handle)

    def detach(self, handle: "InMemoryKeyValueStorage") -> None:
        if handle in self._handles:
            self._handles.remove(handle)

    def broadcast(self, key: str, origin: "InMemoryKeyValueStorage") -> None:
        """Notify every handle except the one that wrote."""
        for handle in list(self._handles):
            if handle is not origin:
                handle._notify(key)


class InMemoryKeyValueStorage(KeyValueStorageInterface):
    """
    Memory-backed key/value storage.

    Example:
        area = StorageArea(quota_bytes=1024)
        tab_a = InMemoryKeyValueStorage(area)
        tab_b = InMemoryKeyValueStorage(area)
        tab_b.subscribe(print)
        tab_a.set("k", "v")   # prints "k"
    """

    def __init__(
        self,
        area: Optional[StorageArea] = None,
        quota_bytes: Optional[int] = None,
    ):
        self._area = area or StorageArea(quota_bytes=quota_bytes)
        self._area.attach(self)
        self._listeners: list[ChangeListener] = []

    @property
    def area(self) -> StorageArea:
        return self._area

    def get(self, key: str) -> Optional[str]:
        return self._area._data.get(key)

    def set(self, key: str, value: str) -> None:
        quota = self._area.quota_bytes
        if quota is not None:
            needed = self._area.size_with(key, value)
            if needed > quota:
                raise StorageQuotaExceededError(
                    f"Storing {key!r} needs {needed} bytes; quota is {quota}"
                )
        self._area._data[key] = value
        self._area.broadcast(key, origin=self)

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def close(self) -> None:
        """Stop receiving notifications from other handles."""
        self._area.detach(self)
        self._listeners.clear()

    def _notify(self, key: str) -> None:
        for listener in list(self._listeners):
            listener(key)
