"""
Backup Export / Import

The user-facing backup format is one pretty-printed JSON object holding
all seven collections/records plus an exportDate timestamp, meant to be
copied out of and pasted back into a text field.

CRITICAL: Import is all-or-nothing. The whole bundle is decoded and
validated before the store is touched. A bundle that fails in any way
leaves the in-memory state exactly as it was and the user is told why.
This deliberately differs from TrackerStore.load(), which silently falls
back to defaults per blob.
"""

from datetime import datetime

from pydantic import BaseModel, ValidationError

from lttr.models.records import TrackerState, UtcDatetime
from lttr.store.tracker import TrackerStore
from lttr.validation.forms import describe_validation_error


IMPORT_SUCCESS_MESSAGE = "Data imported successfully!"
INVALID_FORMAT_MESSAGE = "Invalid data format"


class ExportBundle(TrackerState):
    """Everything the tracker owns, stamped with when it was exported."""

    export_date: UtcDatetime

    def to_state(self) -> TrackerState:
        """Drop the export stamp."""
        return TrackerState(
            letters=self.letters,
            responses=self.responses,
            companies=self.companies,
            supplies=self.supplies,
            calendar_notes=self.calendar_notes,
            user_profile=self.user_profile,
            settings=self.settings,
        )


class ImportResult(BaseModel):
    """Outcome of an import, shown to the user as-is."""

    success: bool
    message: str


def build_bundle(store: TrackerStore) -> ExportBundle:
    """Snapshot the store. exportDate is regenerated on every call."""
    state = store.state()
    return ExportBundle(
        letters=state.letters,
        responses=state.responses,
        companies=state.companies,
        supplies=state.supplies,
        calendar_notes=state.calendar_notes,
        user_profile=state.user_profile,
        settings=state.settings,
        export_date=store.now(),
    )


def export_bundle(store: TrackerStore) -> str:
    """Serialize the store as human-readable JSON."""
    bundle = build_bundle(store)
    return bundle.model_dump_json(by_alias=True, indent=store.config.export_indent)


def parse_bundle(text: str) -> ExportBundle:
    """
    Decode and validate a bundle without touching any store.

    Raises:
        ValidationError: If the text is not a valid bundle
    """
    return ExportBundle.model_validate_json(text)


def import_bundle(store: TrackerStore, text: str) -> ImportResult:
    """
    Replace the store's state with a pasted bundle.

    Never raises for bad input. On failure the store is untouched.
    """
    if not text or not text.strip():
        store.audit_logger.log_import_failed(INVALID_FORMAT_MESSAGE)
        return ImportResult(success=False, message=INVALID_FORMAT_MESSAGE)

    try:
        bundle = parse_bundle(text)
    except ValidationError as e:
        reason = describe_validation_error(e)
        store.audit_logger.log_import_failed(reason)
        return ImportResult(
            success=False,
            message=f"Failed to import data: {reason}",
        )

    store.replace_state(bundle.to_state())
    return ImportResult(success=True, message=IMPORT_SUCCESS_MESSAGE)


def exported_at(text: str) -> datetime:
    """The exportDate of a bundle, for display before importing."""
    return parse_bundle(text).export_date
