"""
JSON File Storage Implementation

DESIGN DECISION: A single JSON file stands in for browser local storage.
Every Streamlit session on the host opens its own handle on the same file,
so the file plays the role of the origin and each session plays a tab.

TRADEOFFS:
- The whole file is rewritten on every set (fine for personal use)
- Writes are atomic (temp file + os.replace), but there is no locking:
  the last writer wins, exactly like local storage
- Other sessions' writes are noticed by polling, not pushed
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Callable, Optional, Union

from src.services.storage.interface import (
    ChangeListener,
    KeyValueStorageInterface,
    StorageQuotaExceededError,
    StorageReadError,
    StorageWriteError,
)


# (inode, mtime_ns, size) of the file, or None if it does not exist
FileSignature = Optional[tuple[int, int, int]]


class JsonFileKeyValueStorage(KeyValueStorageInterface):
    """
    Key/value storage persisted as one JSON object of strings.

    Call poll_changes() to deliver change notifications for writes made
    by other handles (other sessions or processes) since the last poll.
    """

    def __init__(
        self,
        path: Union[str, Path],
        quota_bytes: Optional[int] = None,
    ):
        self._path = Path(path)
        self._quota_bytes = quota_bytes
        self._listeners: list[ChangeListener] = []
        self._signature: FileSignature = self._stat()
        try:
            self._snapshot = self._read_all()
        except StorageReadError:
            self._snapshot = {}

    @property
    def path(self) -> Path:
        return self._path

    def _stat(self) -> FileSignature:
        try:
            stat = self._path.stat()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageReadError(f"Cannot stat {self._path}: {e}") from e
        return (stat.st_ino, stat.st_mtime_ns, stat.st_size)

    def _read_all(self) -> dict[str, str]:
        """Read every key. A missing file is an empty store."""
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise StorageReadError(f"Cannot read {self._path}: {e}") from e

        if not text.strip():
            return {}
        try:
            data = json.loads(text)
        except (ValueError, RecursionError) as e:
            raise StorageReadError(f"{self._path} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise StorageReadError(f"{self._path} does not hold a JSON object")
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, data: dict[str, str]) -> None:
        if self._quota_bytes is not None:
            needed = sum(len(k) + len(v) for k, v in data.items())
            if needed > self._quota_bytes:
                raise StorageQuotaExceededError(
                    f"Storage needs {needed} bytes; quota is {self._quota_bytes}"
                )

        directory = self._path.parent
        temp_name: Optional[str] = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=directory,
                prefix=self._path.name + "-",
                suffix=".tmp",
                delete=False,
            ) as tf:
                temp_name = tf.name
                json.dump(data, tf, ensure_ascii=False)
                tf.flush()
                os.fsync(tf.fileno())
            os.replace(temp_name, self._path)
        except OSError as e:
            if temp_name and os.path.exists(temp_name):
                os.unlink(temp_name)
            raise StorageWriteError(f"Cannot write {self._path}: {e}") from e

        self._snapshot = dict(data)
        self._signature = self._stat()

    def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        try:
            data = self._read_all()
        except StorageReadError as e:
            # Never clobber a file we cannot understand
            raise StorageWriteError(str(e)) from e
        data[key] = value
        self._write_all(data)

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def poll_changes(self) -> list[str]:
        """
        Detect writes made by other handles since the last poll or own write.

        Listeners are called once per changed key.

        Returns:
            The changed keys (empty if nothing changed or the file is unreadable)
        """
        try:
            signature = self._stat()
        except StorageReadError:
            return []
        if signature == self._signature:
            return []

        try:
            current = self._read_all()
        except StorageReadError:
            # Keep the old snapshot; the next poll retries
            return []

        changed = sorted(
            key
            for key in set(current) | set(self._snapshot)
            if current.get(key) != self._snapshot.get(key)
        )
        self._snapshot = current
        self._signature = signature

        for key in changed:
            for listener in list(self._listeners):
                listener(key)
        return changed
