"""
Tests for lttr data models

Test strategy:
1. Unit tests for individual components (models, metrics, validators)
2. Store tests against in-memory storage with a fixed clock
3. File backend tests against pytest's tmp_path
"""

import json
from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError

from lttr.models.records import (
    CalendarNote,
    Company,
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
)
from lttr.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


class TestRecordModels:
    """Tests for the tracked record models."""

    def test_letter_defaults(self):
        """Test Letter defaults: one letter, unconfirmed."""
        letter = Letter(company_name="Bellagio", expected_response=Decimal("100"))
        assert letter.quantity == 1
        assert letter.is_confirmed is False
        assert letter.notes == ""

    def test_letter_strips_whitespace(self):
        """Test that whitespace is stripped from company name."""
        letter = Letter(company_name="  MGM Grand  ", expected_response=Decimal("10"))
        assert letter.company_name == "MGM Grand"

    def test_letter_rejects_zero_quantity(self):
        """Test quantity must be at least 1."""
        with pytest.raises(ValidationError):
            Letter(company_name="Test", expected_response=Decimal("10"), quantity=0)

    def test_letter_rejects_negative_expected_response(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValidationError):
            Letter(company_name="Test", expected_response=Decimal("-1"))

    def test_record_ids_are_unique(self):
        """Test each record gets its own id."""
        first = Letter(company_name="A", expected_response=Decimal("1"))
        second = Letter(company_name="A", expected_response=Decimal("1"))
        assert first.id != second.id

    def test_record_id_is_immutable(self):
        """Test the id cannot be reassigned after construction."""
        letter = Letter(company_name="A", expected_response=Decimal("1"))
        with pytest.raises(ValidationError):
            letter.id = uuid4()

    def test_other_fields_are_mutable(self):
        """Test the confirm flag can be flipped in place."""
        letter = Letter(company_name="A", expected_response=Decimal("1"))
        letter.is_confirmed = True
        assert letter.is_confirmed is True

    def test_response_link_is_optional(self):
        """Test Response without a linked letter."""
        response = Response(company_name="Bellagio", amount=Decimal("150"))
        assert response.linked_letter_id is None

    def test_company_rate_bounds(self):
        """Test response rate must be between 0 and 1."""
        with pytest.raises(ValidationError):
            Company(
                name="Test",
                response_rate=1.5,
                expected_response_range=ExpectedResponseRange(
                    minimum=Decimal("1"), maximum=Decimal("2")
                ),
            )

    def test_expected_range_requires_min_not_above_max(self):
        """Test that an inverted range is rejected."""
        with pytest.raises(ValueError, match="minimum cannot exceed maximum"):
            ExpectedResponseRange(minimum=Decimal("200"), maximum=Decimal("50"))

    def test_expected_range_allows_equal_bounds(self):
        """Test a single-value range."""
        bounds = ExpectedResponseRange(minimum=Decimal("50"), maximum=Decimal("50"))
        assert bounds.minimum == bounds.maximum

    def test_supply_creation(self):
        """Test Supply model creation."""
        supply = Supply(name="Stamps", quantity=20, cost=Decimal("13.20"))
        assert supply.cost == Decimal("13.20")
        assert supply.date_purchased == date.today()

    def test_calendar_note_type_default(self):
        """Test notes default to the general type."""
        note = CalendarNote(day=date(2026, 10, 1), title="Mail run")
        assert note.type == NoteType.GENERAL

    def test_calendar_note_serializes_date_key(self):
        """Test the note's day is stored under 'date'."""
        note = CalendarNote(day=date(2026, 10, 1), title="Mail run")
        data = json.loads(note.model_dump_json(by_alias=True))
        assert data["date"] == "2026-10-01"
        assert "day" not in data


class TestSerialization:
    """Tests for the camelCase blob format."""

    def test_letter_uses_camel_case_keys(self):
        """Test persisted field names."""
        letter = Letter(
            company_name="Bellagio",
            expected_response=Decimal("100"),
            date_sent=date(2026, 10, 1),
        )
        data = json.loads(letter.model_dump_json(by_alias=True))
        assert set(data) == {
            "id", "dateSent", "companyName", "expectedResponse",
            "quantity", "notes", "isConfirmed",
        }

    def test_letter_parses_camel_case_keys(self):
        """Test decoding a stored letter."""
        letter = Letter.model_validate({
            "id": str(uuid4()),
            "dateSent": "2026-10-01",
            "companyName": "Bellagio",
            "expectedResponse": "100",
            "quantity": 2,
            "notes": "",
            "isConfirmed": True,
        })
        assert letter.quantity == 2
        assert letter.is_confirmed is True

    def test_naive_trial_start_is_read_as_utc(self):
        """Test naive timestamps become aware UTC."""
        profile = UserProfile(trial_start_date=datetime(2026, 10, 1, 9, 30))
        assert profile.trial_start_date.tzinfo == timezone.utc

    def test_profile_defaults(self):
        """Test a new profile is on trial."""
        profile = UserProfile()
        assert profile.subscription_type == SubscriptionType.TRIAL
        assert profile.postal_codes == []

    def test_settings_defaults(self):
        """Test default user settings."""
        settings = UserSettings()
        assert settings.currency == "USD"
        assert settings.follow_up_reminder_days == 30
        assert settings.notifications_enabled is True

    def test_storage_keys(self):
        """Test the seven persistence keys."""
        assert [key.value for key in StorageKey] == [
            "letters", "responses", "companies", "supplies",
            "calendarNotes", "userProfile", "settings",
        ]

    def test_state_rejects_duplicate_ids(self):
        """Test ids must be unique within a collection."""
        letter = Letter(company_name="A", expected_response=Decimal("1"))
        with pytest.raises(ValidationError, match="Duplicate record ids in letters"):
            TrackerState(
                letters=[letter, letter],
                responses=[],
                companies=[],
                supplies=[],
                calendar_notes=[],
                user_profile=UserProfile(),
                settings=UserSettings(),
            )

    def test_state_requires_every_field(self):
        """Test a snapshot missing the profile is rejected, not defaulted."""
        with pytest.raises(ValidationError, match="userProfile"):
            TrackerState.model_validate({
                "letters": [],
                "responses": [],
                "companies": [],
                "supplies": [],
                "calendarNotes": [],
                "settings": {},
            })

    def test_duplicate_ids_helper(self):
        first = Letter(company_name="A", expected_response=Decimal("1"))
        second = Letter(company_name="B", expected_response=Decimal("1"))
        assert duplicate_ids([first, second]) == []
        assert duplicate_ids([first, second, first, first]) == [first.id]


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.RECORD_ADDED,
            description="Test letter added",
        )
        assert event.event_type == AuditEventType.RECORD_ADDED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.DATA_IMPORTED,
            description="Backup imported",
            details={"counts": {"letters": 2}},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "data_imported"
        assert log_dict["details"]["counts"]["letters"] == 2

    def test_builder_record_added(self):
        """Test AuditEventBuilder.record_added."""
        record_id = uuid4()
        event = AuditEventBuilder.record_added("letters", record_id, "Bellagio")
        assert event.event_type == AuditEventType.RECORD_ADDED
        assert event.entity_type == "letters"
        assert event.entity_id == record_id
        assert event.is_user_action is True

    def test_builder_letter_confirmed_by_response(self):
        """Test confirmation through a linked response is not a user action."""
        event = AuditEventBuilder.letter_confirmed(uuid4(), response_id=uuid4())
        assert event.event_type == AuditEventType.LETTER_CONFIRMED
        assert event.is_user_action is False
        assert "linked response" in event.description

    def test_builder_decode_failed_is_warning(self):
        """Test decode failures are warnings, not errors."""
        event = AuditEventBuilder.blob_decode_failed("letters", "bad json")
        assert event.severity == AuditSeverity.WARNING
        assert event.error_message == "bad json"
