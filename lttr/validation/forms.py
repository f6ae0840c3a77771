"""
Form Input Validation

DESIGN DECISION: Forms hand us raw text. Validation turns that text into a
record or a list of issues, never both. A form whose required fields do not
all parse cannot be saved: FormResult.can_save is False and
TrackerStore.submit() is a no-op. The caller disables its save button on
can_save rather than reporting an error after the fact.

IMPORTANT: Validation NEVER silently fixes input.
It reports the problem so the user can correct it.
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field, ValidationError

from lttr.models.records import (
    CalendarNote,
    Company,
    Letter,
    NoteType,
    Response,
    Supply,
)


# Common supplies offered as one-tap presets (name, unit cost)
QUICK_SUPPLIES: list[tuple[str, Decimal]] = [
    ("Stamps", Decimal("0.66")),
    ("Envelopes", Decimal("0.15")),
    ("Pens", Decimal("2.99")),
    ("Paper", Decimal("8.99")),
]


class FieldIssue(BaseModel):
    """A single problem with one form field."""

    field: str
    issue_type: str = Field(
        ...,
        pattern="^(missing|invalid_format|invalid_value)$"
    )
    message: str


class FormResult(BaseModel):
    """Outcome of validating one form."""

    issues: list[FieldIssue] = Field(default_factory=list)
    record: Optional[Any] = None

    @property
    def can_save(self) -> bool:
        return self.record is not None and not self.issues

    @property
    def is_valid(self) -> bool:
        return self.can_save

    def messages(self) -> list[str]:
        return [issue.message for issue in self.issues]


def describe_validation_error(error: ValidationError) -> str:
    """One-line summary of a pydantic ValidationError."""
    errors = error.errors()
    if not errors:
        return str(error)
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    summary = f"{location}: {first['msg']}" if location else first["msg"]
    if len(errors) > 1:
        summary += f" (+{len(errors) - 1} more)"
    return summary


class FormValidator:
    """
    Parses raw form fields into tracker records.

    Every method takes text exactly as typed and returns a FormResult.
    """

    # =========================================================================
    # FIELD PARSERS
    # =========================================================================

    @staticmethod
    def _required_text(
        field: str,
        raw: Optional[str],
        label: str,
        issues: list[FieldIssue],
    ) -> str:
        value = (raw or "").strip()
        if not value:
            issues.append(FieldIssue(
                field=field,
                issue_type="missing",
                message=f"{label} is required",
            ))
        return value

    @staticmethod
    def _amount(
        field: str,
        raw: Optional[str],
        label: str,
        issues: list[FieldIssue],
    ) -> Optional[Decimal]:
        text = (raw or "").strip()
        if not text:
            issues.append(FieldIssue(
                field=field,
                issue_type="missing",
                message=f"{label} is required",
            ))
            return None
        try:
            value = Decimal(text)
        except InvalidOperation:
            issues.append(FieldIssue(
                field=field,
                issue_type="invalid_format",
                message=f"{label} must be a number",
            ))
            return None
        if not value.is_finite() or value < 0:
            issues.append(FieldIssue(
                field=field,
                issue_type="invalid_value",
                message=f"{label} must be zero or more",
            ))
            return None
        return value

    @staticmethod
    def _quantity(
        field: str,
        raw: Optional[str],
        issues: list[FieldIssue],
    ) -> Optional[int]:
        text = (raw or "").strip() or "1"
        try:
            value = int(text)
        except ValueError:
            issues.append(FieldIssue(
                field=field,
                issue_type="invalid_format",
                message="Quantity must be a whole number",
            ))
            return None
        if value < 1:
            issues.append(FieldIssue(
                field=field,
                issue_type="invalid_value",
                message="Quantity must be at least 1",
            ))
            return None
        return value

    @staticmethod
    def _build(model: type[BaseModel], issues: list[FieldIssue], **fields: Any) -> FormResult:
        """Construct the record once every field parsed."""
        if issues:
            return FormResult(issues=issues)
        try:
            record = model(**fields)
        except ValidationError as e:
            return FormResult(issues=[
                FieldIssue(
                    field=".".join(str(part) for part in error.get("loc", ())) or "form",
                    issue_type="invalid_value",
                    message=error["msg"],
                )
                for error in e.errors()
            ])
        return FormResult(record=record)

    # =========================================================================
    # FORMS
    # =========================================================================

    def letter(
        self,
        company_name: str,
        expected_response: str,
        quantity: str = "1",
        date_sent: Optional[date] = None,
        notes: str = "",
    ) -> FormResult:
        issues: list[FieldIssue] = []
        name = self._required_text("company_name", company_name, "Company name", issues)
        expected = self._amount("expected_response", expected_response, "Expected response", issues)
        count = self._quantity("quantity", quantity, issues)
        return self._build(
            Letter,
            issues,
            company_name=name,
            expected_response=expected,
            quantity=count,
            date_sent=date_sent or date.today(),
            notes=notes,
        )

    def response(
        self,
        company_name: str,
        amount: str,
        date_received: Optional[date] = None,
        linked_letter_id: Optional[UUID] = None,
        notes: str = "",
    ) -> FormResult:
        issues: list[FieldIssue] = []
        name = self._required_text("company_name", company_name, "Company name", issues)
        value = self._amount("amount", amount, "Amount received", issues)
        return self._build(
            Response,
            issues,
            company_name=name,
            amount=value,
            date_received=date_received or date.today(),
            linked_letter_id=linked_letter_id,
            notes=notes,
        )

    def company(
        self,
        name: str,
        address: str,
        response_rate_percent: str,
        expected_min: str,
        expected_max: str,
        notes: str = "",
    ) -> FormResult:
        """The response rate is typed as a percentage (0-100)."""
        issues: list[FieldIssue] = []
        company_name = self._required_text("name", name, "Company name", issues)
        company_address = self._required_text("address", address, "Address", issues)
        rate = self._amount("response_rate", response_rate_percent, "Response rate", issues)
        if rate is not None and rate > 100:
            issues.append(FieldIssue(
                field="response_rate",
                issue_type="invalid_value",
                message="Response rate cannot exceed 100%",
            ))
        low = self._amount("expected_min", expected_min, "Minimum expected response", issues)
        high = self._amount("expected_max", expected_max, "Maximum expected response", issues)
        if low is not None and high is not None and low > high:
            issues.append(FieldIssue(
                field="expected_max",
                issue_type="invalid_value",
                message="Maximum expected response must be at least the minimum",
            ))
        if issues:
            return FormResult(issues=issues)
        return self._build(
            Company,
            issues,
            name=company_name,
            address=company_address,
            response_rate=float(rate / 100),
            expected_response_range={"minimum": low, "maximum": high},
            notes=notes,
        )

    def supply(
        self,
        name: str,
        cost: str,
        quantity: str = "1",
        date_purchased: Optional[date] = None,
        notes: str = "",
    ) -> FormResult:
        issues: list[FieldIssue] = []
        supply_name = self._required_text("name", name, "Supply name", issues)
        supply_cost = self._amount("cost", cost, "Cost", issues)
        count = self._quantity("quantity", quantity, issues)
        return self._build(
            Supply,
            issues,
            name=supply_name,
            cost=supply_cost,
            quantity=count,
            date_purchased=date_purchased or date.today(),
            notes=notes,
        )

    def note(
        self,
        title: str,
        day: Optional[date] = None,
        note_type: NoteType = NoteType.GENERAL,
        notes: str = "",
    ) -> FormResult:
        issues: list[FieldIssue] = []
        note_title = self._required_text("title", title, "Title", issues)
        return self._build(
            CalendarNote,
            issues,
            title=note_title,
            day=day or date.today(),
            type=note_type,
            notes=notes,
        )


def quick_supply(name: str) -> tuple[str, str]:
    """Form values (name, cost) for a preset supply."""
    for preset_name, cost in QUICK_SUPPLIES:
        if preset_name.casefold() == name.strip().casefold():
            return preset_name, f"{cost:.2f}"
    raise KeyError(f"Unknown quick supply: {name}")
