"""
Data Models Package

This package contains all Pydantic models used by lttr.
Everything the tracker stores or exports conforms to these schemas.
"""

from lttr.models.records import (
    ActivityEntry,
    CalendarNote,
    Collection,
    Company,
    CompanyStats,
    ExpectedResponseRange,
    Letter,
    NoteType,
    Response,
    StorageKey,
    SubscriptionType,
    Supply,
    TrackerState,
    UserProfile,
    UserSettings,
    duplicate_ids,
    utc_now,
)
from lttr.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Record models
    "ActivityEntry",
    "CalendarNote",
    "Collection",
    "Company",
    "CompanyStats",
    "ExpectedResponseRange",
    "Letter",
    "NoteType",
    "Response",
    "StorageKey",
    "SubscriptionType",
    "Supply",
    "TrackerState",
    "UserProfile",
    "UserSettings",
    "duplicate_ids",
    "utc_now",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
