"""
Audit Logger

DESIGN DECISION: Every mutation of the tracker is logged, and so is every
piece of local state that had to be discarded. Load-time decode failures
are never shown to the user, so this log is the only place they surface.

The audit logger:
- Is synchronous, like the store it serves
- Gracefully handles failures (doesn't crash the app if logging fails)
- Optionally mirrors events to an audit storage backend
"""

from typing import Optional
from uuid import UUID

import structlog

from lttr.models.audit import AuditEvent, AuditEventBuilder
from lttr.services.storage import AuditStorageInterface


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


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit storage backend, if one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("lttr.audit")

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value == "error":
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_record_added(self, collection: str, record_id: UUID, label: str) -> None:
        self.log(AuditEventBuilder.record_added(collection, record_id, label))

    def log_record_replaced(self, collection: str, record_id: UUID) -> None:
        self.log(AuditEventBuilder.record_replaced(collection, record_id))

    def log_records_deleted(self, collection: str, record_ids: list[UUID]) -> None:
        self.log(AuditEventBuilder.records_deleted(collection, record_ids))

    def log_duplicate_ignored(self, collection: str, record_id: UUID) -> None:
        self.log(AuditEventBuilder.duplicate_record_ignored(collection, record_id))

    def log_letter_confirmed(
        self,
        letter_id: UUID,
        response_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.letter_confirmed(letter_id, response_id))

    def log_profile_updated(self) -> None:
        self.log(AuditEventBuilder.profile_updated())

    def log_settings_updated(self) -> None:
        self.log(AuditEventBuilder.settings_updated())

    def log_defaults_seeded(self, count: int) -> None:
        self.log(AuditEventBuilder.defaults_seeded(count))

    def log_data_reset(self) -> None:
        self.log(AuditEventBuilder.data_reset())

    def log_data_imported(self, counts: dict[str, int]) -> None:
        self.log(AuditEventBuilder.data_imported(counts))

    def log_import_failed(self, error_message: str) -> None:
        self.log(AuditEventBuilder.import_failed(error_message))

    def log_decode_failed(self, key: str, error_message: str) -> None:
        """Log a stored blob that was replaced by its default."""
        self.log(AuditEventBuilder.blob_decode_failed(key, error_message))

    def log_save_failed(self, key: str, error_message: str) -> None:
        self.log(AuditEventBuilder.blob_save_failed(key, error_message))

    def log_subscriber_failed(self, subscriber: str, error_message: str) -> None:
        self.log(AuditEventBuilder.subscriber_failed(subscriber, error_message))
