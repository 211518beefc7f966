"""
Diagnostics Logger

DESIGN DECISION: Storage and parse failures never crash the page.
They are caught where they happen and reported here, so the user keeps
working with the in-memory view while a developer can still see what failed.

The diagnostics logger:
- Writes every event to the structured log
- Keeps a bounded list of recent events for the settings page and tests
- Is the only place swallowed errors become visible
"""

import logging
from collections import deque
from typing import Optional

import structlog

from src.models.diagnostics import (
    DiagnosticEvent,
    DiagnosticEventBuilder,
    DiagnosticEventType,
    DiagnosticSeverity,
)


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class DiagnosticsLogger:
    """
    Central diagnostic channel.

    Every component that swallows an error reports it through here.
    """

    def __init__(self, max_recent: int = 200):
        """
        Initialize diagnostics logger.

        Args:
            max_recent: How many events to keep in memory.
        """
        self._recent: deque[DiagnosticEvent] = deque(maxlen=max_recent)
        self._logger = structlog.get_logger("expense_tracker")

    def log(self, event: DiagnosticEvent) -> None:
        """Record an event and write it to the structured log."""
        self._recent.append(event)

        log_dict = event.to_log_dict()
        if event.severity == DiagnosticSeverity.ERROR:
            self._logger.error("diagnostic_event", **log_dict)
        elif event.severity == DiagnosticSeverity.WARNING:
            self._logger.warning("diagnostic_event", **log_dict)
        elif event.severity == DiagnosticSeverity.DEBUG:
            self._logger.debug("diagnostic_event", **log_dict)
        else:
            self._logger.info("diagnostic_event", **log_dict)

    @property
    def recent_events(self) -> list[DiagnosticEvent]:
        """Recent events, oldest first."""
        return list(self._recent)

    def events_of_type(self, event_type: DiagnosticEventType) -> list[DiagnosticEvent]:
        return [event for event in self._recent if event.event_type == event_type]

    def clear(self) -> None:
        self._recent.clear()

    def log_storage_loaded(self, storage_key: str, count: int) -> None:
        """Log a successful load."""
        self.log(DiagnosticEventBuilder.storage_loaded(storage_key, count))

    def log_storage_read_failed(self, storage_key: str, error: str) -> None:
        """Log a failed storage read."""
        self.log(DiagnosticEventBuilder.storage_read_failed(storage_key, error))

    def log_storage_blob_malformed(self, storage_key: str, reason: str) -> None:
        """Log an unreadable stored blob."""
        self.log(DiagnosticEventBuilder.storage_blob_malformed(storage_key, reason))

    def log_records_dropped(self, storage_key: str, dropped: int, kept: int) -> None:
        """Log records dropped during load."""
        self.log(DiagnosticEventBuilder.records_dropped(storage_key, dropped, kept))

    def log_persist_failed(self, storage_key: str, error: str, count: int) -> None:
        """Log a lost write."""
        self.log(DiagnosticEventBuilder.persist_failed(storage_key, error, count))

    def log_expense_added(self, storage_key: str, expense_id: str) -> None:
        self.log(DiagnosticEventBuilder.expense_added(storage_key, expense_id))

    def log_expense_updated(
        self,
        storage_key: str,
        expense_id: str,
        fields: list[str],
    ) -> None:
        self.log(DiagnosticEventBuilder.expense_updated(storage_key, expense_id, fields))

    def log_expense_deleted(self, storage_key: str, expense_id: str) -> None:
        self.log(DiagnosticEventBuilder.expense_deleted(storage_key, expense_id))

    def log_external_change(self, storage_key: str, count: int) -> None:
        """Log a reload caused by another session."""
        self.log(DiagnosticEventBuilder.external_change_reloaded(storage_key, count))

    def log_edit_conflict(self, storage_key: str, expense_id: str) -> None:
        """Log an external change to the record currently being edited."""
        self.log(DiagnosticEventBuilder.edit_conflict(storage_key, expense_id))


def configure_log_level(level: Optional[str]) -> None:
    """Set the stdlib level that structlog's level filter reads."""
    logging.basicConfig(format="%(message)s")
    logging.getLogger("expense_tracker").setLevel(level or "INFO")
