"""Tests for backup export and import."""

import json
from datetime import date, timedelta
from decimal import Decimal

import pytest

from lttr.models.audit import AuditEventType
from lttr.models.records import CalendarNote, Letter, Response, Supply, UserSettings
from lttr.services.backup import (
    IMPORT_SUCCESS_MESSAGE,
    INVALID_FORMAT_MESSAGE,
    export_bundle,
    exported_at,
    import_bundle,
)
from lttr.services.storage import InMemoryStorage
from lttr.store import TrackerStore


@pytest.fixture
def target_storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def target(target_storage, audit_logger, clock, config) -> TrackerStore:
    """A second, empty store on its own storage to import into."""
    tracker = TrackerStore(target_storage, audit_logger=audit_logger, clock=clock, config=config)
    tracker.load()
    return tracker


def populate(store):
    sent = store.add_letter(Letter(
        company_name="Bellagio",
        expected_response=Decimal("100"),
        quantity=2,
        date_sent=date(2026, 10, 1),
    ))
    store.add_response(Response(
        company_name="Bellagio",
        amount=Decimal("150"),
        linked_letter_id=sent.id,
        date_received=date(2026, 10, 10),
    ))
    store.add_supply(Supply(name="Stamps", quantity=20, cost=Decimal("13.20")))
    store.add_note(CalendarNote(day=date(2026, 10, 19), title="Mail run"))
    store.update_settings(UserSettings(currency="EUR"))


class TestExport:
    """Tests for export_bundle()."""

    def test_bundle_has_every_key(self, opened_store):
        data = json.loads(export_bundle(opened_store))
        assert set(data) == {
            "letters", "responses", "companies", "supplies",
            "calendarNotes", "userProfile", "settings", "exportDate",
        }

    def test_bundle_is_pretty_printed(self, opened_store):
        text = export_bundle(opened_store)
        assert text.startswith("{\n  \"")

    def test_export_date_regenerated(self, opened_store, clock):
        """Test every export is stamped with the current time."""
        start = clock.now
        first = exported_at(export_bundle(opened_store))
        clock.now += timedelta(hours=1)
        second = exported_at(export_bundle(opened_store))
        assert first == start
        assert second == start + timedelta(hours=1)


class TestImport:
    """Tests for import_bundle()."""

    def test_round_trip(self, opened_store, target):
        """Test importing an export reproduces the state exactly."""
        populate(opened_store)
        text = export_bundle(opened_store)

        result = import_bundle(target, text)

        assert result.success is True
        assert result.message == IMPORT_SUCCESS_MESSAGE
        assert target.state() == opened_store.state()
        assert target.roi == opened_store.roi

    def test_import_persists(self, opened_store, target, target_storage):
        populate(opened_store)
        import_bundle(target, export_bundle(opened_store))
        assert json.loads(target_storage.read("settings"))["currency"] == "EUR"

    def test_empty_text(self, opened_store, audit_storage):
        before = opened_store.state()
        result = import_bundle(opened_store, "   ")
        assert result.success is False
        assert result.message == INVALID_FORMAT_MESSAGE
        assert opened_store.state() == before

    def test_invalid_json_leaves_state(self, opened_store, audit_storage):
        """Test a broken bundle changes nothing and says why."""
        populate(opened_store)
        before = opened_store.state()

        result = import_bundle(opened_store, "{\"letters\": [")

        assert result.success is False
        assert result.message.startswith("Failed to import data: ")
        assert opened_store.state() == before
        events = [event.event_type for event in audit_storage.get_recent_events(1000)]
        assert AuditEventType.IMPORT_FAILED in events
        assert AuditEventType.DATA_IMPORTED not in events

    def test_one_bad_record_rejects_whole_bundle(self, opened_store, target):
        """Test import is all-or-nothing."""
        populate(opened_store)
        data = json.loads(export_bundle(opened_store))
        data["supplies"][0]["cost"] = "-5"
        before = target.state()

        result = import_bundle(target, json.dumps(data))

        assert result.success is False
        assert target.state() == before

    @pytest.mark.parametrize("key", [
        "letters", "responses", "companies", "supplies",
        "calendarNotes", "userProfile", "settings", "exportDate",
    ])
    def test_missing_key_rejected(self, opened_store, key):
        """Test a bundle missing any one key is rejected and changes nothing."""
        populate(opened_store)
        data = json.loads(export_bundle(opened_store))
        del data[key]
        before = opened_store.state()

        result = import_bundle(opened_store, json.dumps(data))

        assert result.success is False
        assert key in result.message
        assert opened_store.state() == before

    def test_export_date_only_rejected(self, opened_store, clock):
        """Test a bundle with no collections does not wipe the store."""
        populate(opened_store)
        before = opened_store.state()

        result = import_bundle(opened_store, '{"exportDate": "2026-01-01T00:00:00Z"}')

        assert result.success is False
        assert opened_store.state() == before
        assert opened_store.user_profile.trial_start_date == clock.now

    def test_duplicate_ids_rejected(self, opened_store, target):
        populate(opened_store)
        data = json.loads(export_bundle(opened_store))
        data["letters"].append(data["letters"][0])
        result = import_bundle(target, json.dumps(data))
        assert result.success is False
        assert "Duplicate record ids in letters" in result.message
