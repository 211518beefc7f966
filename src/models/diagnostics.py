"""
Diagnostic Event Models for Expense Tracker

Storage and synchronization problems are never raised to the page.
They are converted to safe defaults and reported here instead, so that
a developer can still see that a write was lost or a blob was unreadable.

DESIGN DECISION: Diagnostic events are not an audit trail of the user's
expenses. They are kept in memory only and go to the structured log.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DiagnosticEventType(str, Enum):
    """Types of events reported to the diagnostic channel."""
    # Storage reads
    STORAGE_LOADED = "storage_loaded"
    STORAGE_READ_FAILED = "storage_read_failed"
    STORAGE_BLOB_MALFORMED = "storage_blob_malformed"
    RECORDS_DROPPED = "records_dropped"

    # Storage writes
    PERSIST_FAILED = "persist_failed"

    # Mutations
    EXPENSE_ADDED = "expense_added"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"

    # Cross-context synchronization
    EXTERNAL_CHANGE_RELOADED = "external_change_reloaded"
    EDIT_CONFLICT = "edit_conflict"


class DiagnosticSeverity(str, Enum):
    """Severity level for diagnostic events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class DiagnosticEvent(BaseModel):
    """A single diagnostic event."""

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: DiagnosticEventType = Field(
        ...,
        description="Type of event"
    )
    severity: DiagnosticSeverity = Field(
        default=DiagnosticSeverity.INFO,
        description="Event severity"
    )

    # Context
    storage_key: Optional[str] = Field(
        default=None,
        description="Storage key the event relates to"
    )
    expense_id: Optional[str] = Field(
        default=None,
        description="Expense the event relates to, if any"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "storage_key": self.storage_key,
            "expense_id": self.expense_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class DiagnosticEventBuilder:
    """
    Helper class to build diagnostic events with common patterns.

    Usage:
        event = DiagnosticEventBuilder.persist_failed(key, error)
        event = DiagnosticEventBuilder.expense_added(key, expense_id)
    """

    @staticmethod
    def storage_loaded(storage_key: str, count: int) -> DiagnosticEvent:
        return DiagnosticEvent(
            event_type=DiagnosticEventType.STORAGE_LOADED,
            severity=DiagnosticSeverity.DEBUG,
            storage_key=storage_key,
            description=f"Loaded {count} expense(s) from storage",
            details={"count": count},
        )

    @staticmethod
    def storage_read_failed(storage_key: str, error: str) -> DiagnosticEvent:
        return DiagnosticEvent(
            event_type=DiagnosticEventType.STORAGE_READ_FAILED,
            severity=DiagnosticSeverity.WARNING,
            storage_key=storage_key,
            description="Could not read expenses from storage",
            error_message=error,
        )

    @staticmethod
    def storage_blob_malformed(storage_key: str, reason: str) -> DiagnosticEvent:
        return DiagnosticEvent(
            event_type=DiagnosticEventType.STORAGE_BLOB_MALFORMED,
            severity=DiagnosticSeverity.WARNING,
            storage_key=storage_key,
            description="Stored expenses are malformed; starting empty",
            error_message=reason,
        )

    @staticmethod
    def records_dropped(storage_key: str, dropped: int, kept: int) -> DiagnosticEvent:
        return DiagnosticEvent(
            event_type=DiagnosticEventType.RECORDS_DROPPED,
            severity=DiagnosticSeverity.DEBUG,
            storage_key=storage_key,
            description=f"Dropped {dropped} malformed expense record(s)",
            details={"dropped": dropped, "kept": kept},
        )

    @staticmethod
    def persist_failed(storage_key: str, error: str, count: int) -> DiagnosticEvent:
        return DiagnosticEvent(
            event_type=DiagnosticEventType.PERSIST_FAILED,
            severity=DiagnosticSeverity.ERROR,
            storage_key=storage_key,
            description="Could not save expenses",
            details={"count": count},
            error_message=error,
        )

    @staticmethod
    def expense_added(storage_key: str, expense_id: str) -> DiagnosticEvent:
        return DiagnosticEvent(
            event_type=DiagnosticEventType.EXPENSE_ADDED,
            severity=DiagnosticSeverity.DEBUG,
            storage_key=storage_key,
            expense_id=expense_id,
            description="Expense added",
        )

    @staticmethod
    def expense_updated(
        storage_key: str,
        expense_id: str,
        fields: list[str],
    ) -> DiagnosticEvent:
        return DiagnosticEvent(
            event_type=DiagnosticEventType.EXPENSE_UPDATED,
            severity=DiagnosticSeverity.DEBUG,
            storage_key=storage_key,
            expense_id=expense_id,
            description="Expense updated",
            details={"fields": fields},
        )

    @staticmethod
    def expense_deleted(storage_key: str, expense_id: str) -> DiagnosticEvent:
        return DiagnosticEvent(
            event_type=DiagnosticEventType.EXPENSE_DELETED,
            severity=DiagnosticSeverity.DEBUG,
            storage_key=storage_key,
            expense_id=expense_id,
            description="Expense deleted",
        )

    @staticmethod
    def external_change_reloaded(storage_key: str, count: int) -> DiagnosticEvent:
        return DiagnosticEvent(
            event_type=DiagnosticEventType.EXTERNAL_CHANGE_RELOADED,
            storage_key=storage_key,
            description="Expenses changed in another session; reloaded",
            details={"count": count},
        )

    @staticmethod
    def edit_conflict(storage_key: str, expense_id: str) -> DiagnosticEvent:
        return DiagnosticEvent(
            event_type=DiagnosticEventType.EDIT_CONFLICT,
            severity=DiagnosticSeverity.WARNING,
            storage_key=storage_key,
            expense_id=expense_id,
            description="Expense being edited was changed in another session",
        )
