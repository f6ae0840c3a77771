"""
Audit Models for lttr.

Every mutation of the tracker, and every piece of local state that had to
be thrown away, is recorded as an audit event. This provides:
1. Traceability of what changed and when
2. Visibility into silently recovered decode failures
3. Debugging information when persistence misbehaves

DESIGN DECISION: Audit events are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from lttr.models.records import utc_now


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Record lifecycle
    RECORD_ADDED = "record_added"
    RECORD_REPLACED = "record_replaced"
    RECORDS_DELETED = "records_deleted"
    DUPLICATE_RECORD_IGNORED = "duplicate_record_ignored"
    LETTER_CONFIRMED = "letter_confirmed"
    PROFILE_UPDATED = "profile_updated"
    SETTINGS_UPDATED = "settings_updated"

    # Bulk operations
    DEFAULTS_SEEDED = "defaults_seeded"
    DATA_RESET = "data_reset"
    DATA_IMPORTED = "data_imported"
    IMPORT_FAILED = "import_failed"

    # Persistence
    BLOB_DECODE_FAILED = "blob_decode_failed"
    BLOB_SAVE_FAILED = "blob_save_failed"

    # Observers
    SUBSCRIBER_FAILED = "subscriber_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of the audit trail.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # What is this about? (a collection name, a storage key, ...)
    entity_type: Optional[str] = None
    entity_id: Optional[UUID] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.record_added("letters", letter.id, "Acme")
        event = AuditEventBuilder.blob_decode_failed("letters", str(exc))
    """

    @staticmethod
    def record_added(
        collection: str,
        record_id: UUID,
        label: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_ADDED,
            entity_type=collection,
            entity_id=record_id,
            description=f"Added to {collection}: {label}",
            is_user_action=True,
        )

    @staticmethod
    def record_replaced(
        collection: str,
        record_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_REPLACED,
            entity_type=collection,
            entity_id=record_id,
            description=f"Record replaced in {collection}",
            is_user_action=True,
        )

    @staticmethod
    def records_deleted(
        collection: str,
        record_ids: list[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORDS_DELETED,
            entity_type=collection,
            description=f"Deleted {len(record_ids)} record(s) from {collection}",
            details={"record_ids": [str(record_id) for record_id in record_ids]},
            is_user_action=True,
        )

    @staticmethod
    def duplicate_record_ignored(
        collection: str,
        record_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DUPLICATE_RECORD_IGNORED,
            severity=AuditSeverity.WARNING,
            entity_type=collection,
            entity_id=record_id,
            description=f"Record already present in {collection}, add ignored",
        )

    @staticmethod
    def letter_confirmed(
        letter_id: UUID,
        response_id: Optional[UUID] = None,
    ) -> AuditEvent:
        via = "linked response" if response_id else "manual confirmation"
        return AuditEvent(
            event_type=AuditEventType.LETTER_CONFIRMED,
            entity_type="letters",
            entity_id=letter_id,
            description=f"Letter confirmed by {via}",
            details={"response_id": str(response_id) if response_id else None},
            is_user_action=response_id is None,
        )

    @staticmethod
    def profile_updated() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROFILE_UPDATED,
            entity_type="userProfile",
            description="User profile updated",
            is_user_action=True,
        )

    @staticmethod
    def settings_updated() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SETTINGS_UPDATED,
            entity_type="settings",
            description="User settings updated",
            is_user_action=True,
        )

    @staticmethod
    def defaults_seeded(count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEFAULTS_SEEDED,
            entity_type="companies",
            description=f"Seeded {count} sample companies",
            details={"count": count},
        )

    @staticmethod
    def data_reset() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_RESET,
            severity=AuditSeverity.WARNING,
            description="All tracked data was reset",
            is_user_action=True,
        )

    @staticmethod
    def data_imported(counts: dict[str, int]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_IMPORTED,
            description="Backup bundle imported",
            details={"counts": counts},
            is_user_action=True,
        )

    @staticmethod
    def import_failed(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_FAILED,
            severity=AuditSeverity.WARNING,
            description="Backup bundle rejected, state left untouched",
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def blob_decode_failed(
        key: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BLOB_DECODE_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type=key,
            description=f"Stored {key} could not be decoded, using defaults",
            error_message=error_message,
        )

    @staticmethod
    def blob_save_failed(
        key: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BLOB_SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type=key,
            description=f"Could not persist {key}",
            error_message=error_message,
        )

    @staticmethod
    def subscriber_failed(
        subscriber: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBSCRIBER_FAILED,
            severity=AuditSeverity.ERROR,
            description=f"Store subscriber failed: {subscriber}",
            error_message=error_message,
        )
