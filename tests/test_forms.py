"""Tests for form validation."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError

from lttr.models.records import CalendarNote, Company, Letter, NoteType, Response, Supply
from lttr.validation import FormValidator, describe_validation_error, quick_supply


@pytest.fixture
def validator() -> FormValidator:
    return FormValidator()


class TestLetterForm:
    """Tests for the letter form."""

    def test_valid_letter(self, validator):
        result = validator.letter("Bellagio", "100", "2", date(2026, 10, 1), "first batch")
        assert result.can_save is True
        assert isinstance(result.record, Letter)
        assert result.record.expected_response == Decimal("100")
        assert result.record.quantity == 2
        assert result.record.is_confirmed is False

    def test_quantity_defaults_to_one(self, validator):
        assert validator.letter("Bellagio", "100", "").record.quantity == 1

    def test_missing_fields(self, validator):
        result = validator.letter("  ", "")
        assert result.can_save is False
        assert result.record is None
        assert result.messages() == [
            "Company name is required",
            "Expected response is required",
        ]

    @pytest.mark.parametrize("amount", ["abc", "1,00", "nan-ish"])
    def test_unparseable_amount(self, validator, amount):
        result = validator.letter("Bellagio", amount)
        assert result.can_save is False
        assert result.issues[0].issue_type == "invalid_format"

    def test_negative_amount(self, validator):
        result = validator.letter("Bellagio", "-5")
        assert result.messages() == ["Expected response must be zero or more"]

    @pytest.mark.parametrize("quantity,message", [
        ("2.5", "Quantity must be a whole number"),
        ("0", "Quantity must be at least 1"),
    ])
    def test_bad_quantity(self, validator, quantity, message):
        result = validator.letter("Bellagio", "100", quantity)
        assert result.messages() == [message]

    def test_too_many_decimal_places(self, validator):
        """Test amounts are not silently rounded."""
        result = validator.letter("Bellagio", "10.005")
        assert result.can_save is False


class TestOtherForms:
    """Tests for response, company, supply and note forms."""

    def test_response_with_link(self, validator):
        letter_id = uuid4()
        result = validator.response("Bellagio", "150", linked_letter_id=letter_id)
        assert isinstance(result.record, Response)
        assert result.record.linked_letter_id == letter_id

    def test_company_rate_is_percent(self, validator):
        result = validator.company("Wynn", "3131 Las Vegas Blvd", "15", "50", "200")
        assert isinstance(result.record, Company)
        assert result.record.response_rate == pytest.approx(0.15)
        assert result.record.expected_response_range.maximum == Decimal("200")

    def test_company_rate_over_hundred(self, validator):
        result = validator.company("Wynn", "3131 Las Vegas Blvd", "150", "50", "200")
        assert result.messages() == ["Response rate cannot exceed 100%"]

    def test_company_inverted_range(self, validator):
        result = validator.company("Wynn", "3131 Las Vegas Blvd", "15", "200", "50")
        assert result.can_save is False
        assert result.messages() == ["Maximum expected response must be at least the minimum"]

    def test_supply(self, validator):
        result = validator.supply("Stamps", "13.20", "20", date(2026, 10, 2))
        assert isinstance(result.record, Supply)
        assert result.record.quantity == 20

    def test_note(self, validator):
        result = validator.note("Mail run", date(2026, 10, 19), NoteType.LETTER)
        assert isinstance(result.record, CalendarNote)
        assert result.record.day == date(2026, 10, 19)
        assert result.record.type == NoteType.LETTER

    def test_note_requires_title(self, validator):
        assert validator.note("").messages() == ["Title is required"]


class TestQuickSupplies:
    """Tests for preset supplies."""

    def test_known_preset(self, validator):
        name, cost = quick_supply("stamps")
        assert (name, cost) == ("Stamps", "0.66")
        assert validator.supply(name, cost).record.cost == Decimal("0.66")

    def test_unknown_preset(self):
        with pytest.raises(KeyError):
            quick_supply("Glitter")


class TestDescribeValidationError:
    """Tests for one-line validation summaries."""

    def test_summary_counts_remaining_errors(self):
        with pytest.raises(ValidationError) as excinfo:
            Letter.model_validate({"companyName": "", "expectedResponse": "-1", "quantity": 0})
        summary = describe_validation_error(excinfo.value)
        assert summary.startswith("companyName: ")
        assert summary.endswith("(+2 more)")
