"""
Core Data Models for lttr.

These models define the schemas for every record the tracker keeps.
They are designed to:
1. Enforce type safety at runtime
2. Serialize to the camelCase blobs stored under each persistence key
3. Round-trip losslessly through the export/import bundle

DESIGN DECISION: Record ids are frozen fields. Identity is assigned once
at construction and can never be reassigned, only the other fields change.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional
from uuid import UUID, uuid4

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps are read as UTC so comparisons never mix aware/naive.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]

Money = Annotated[Decimal, Field(ge=0, decimal_places=2)]


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class SubscriptionType(str, Enum):
    """Subscription plan of the user."""
    TRIAL = "trial"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class NoteType(str, Enum):
    """What a calendar note is about."""
    LETTER = "letter"
    RESPONSE = "response"
    SUPPLY = "supply"
    GENERAL = "general"


class Collection(str, Enum):
    """
    The five record collections owned by the tracker.

    Values double as persistence keys.
    """
    LETTERS = "letters"
    RESPONSES = "responses"
    COMPANIES = "companies"
    SUPPLIES = "supplies"
    CALENDAR_NOTES = "calendarNotes"


class StorageKey(str, Enum):
    """
    Persistence keys, one per independently stored blob.

    CRITICAL: These strings are the on-disk layout. Never rename them.
    """
    LETTERS = "letters"
    RESPONSES = "responses"
    COMPANIES = "companies"
    SUPPLIES = "supplies"
    CALENDAR_NOTES = "calendarNotes"
    USER_PROFILE = "userProfile"
    SETTINGS = "settings"


# =============================================================================
# BASE
# =============================================================================

class TrackerModel(BaseModel):
    """Shared configuration: camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class TrackerRecord(TrackerModel):
    """A record with a stable identity."""

    id: UUID = Field(
        default_factory=uuid4,
        frozen=True,
        description="Unique record ID, never reused"
    )


# =============================================================================
# RECORDS
# =============================================================================

class Letter(TrackerRecord):
    """
    A batch of letters sent to one company.

    quantity multiplies both the letters-sent count and the expected return.
    """

    date_sent: date = Field(default_factory=date.today)
    company_name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Recipient company name"
    )
    expected_response: Money = Field(
        ...,
        description="Expected response value per letter"
    )
    quantity: int = Field(
        default=1,
        ge=1,
        description="Number of letters in this batch"
    )
    notes: str = ""
    is_confirmed: bool = Field(
        default=False,
        description="Set once a response is received for this letter"
    )


class Response(TrackerRecord):
    """
    A response (drop) received from a company.

    linked_letter_id is a weak reference. It may point at a letter that
    has since been deleted.
    """

    date_received: date = Field(default_factory=date.today)
    amount: Money = Field(
        ...,
        description="Value received"
    )
    company_name: str = Field(
        ...,
        min_length=1,
        max_length=200
    )
    linked_letter_id: Optional[UUID] = None
    notes: str = ""


class ExpectedResponseRange(TrackerModel):
    """Inclusive range of response values a company usually sends."""

    minimum: Money
    maximum: Money

    @model_validator(mode='after')
    def validate_bounds(self) -> 'ExpectedResponseRange':
        if self.minimum > self.maximum:
            raise ValueError("Expected response minimum cannot exceed maximum")
        return self


class Company(TrackerRecord):
    """Reference data about a company letters are sent to."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=200
    )
    address: str = ""
    response_rate: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Fraction of letters that get a response (0-1)"
    )
    expected_response_range: ExpectedResponseRange
    last_updated: UtcDatetime = Field(default_factory=utc_now)
    notes: str = ""


class Supply(TrackerRecord):
    """A supply purchase (stamps, envelopes, ...)."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=200
    )
    quantity: int = Field(default=1, ge=1)
    cost: Money
    date_purchased: date = Field(default_factory=date.today)
    notes: str = ""


class CalendarNote(TrackerRecord):
    """A dated annotation. No behavioural coupling to other records."""

    day: date = Field(..., alias="date")
    title: str = Field(
        ...,
        min_length=1,
        max_length=200
    )
    notes: str = ""
    type: NoteType = NoteType.GENERAL


# =============================================================================
# SINGLE RECORDS
# =============================================================================

class UserProfile(TrackerModel):
    """The user's account profile. Drives trial expiry."""

    username: str = ""
    email: str = ""
    postal_codes: list[str] = Field(default_factory=list)
    subscription_type: SubscriptionType = SubscriptionType.TRIAL
    trial_start_date: UtcDatetime = Field(default_factory=utc_now)


class UserSettings(TrackerModel):
    """User preferences."""

    currency: str = "USD"
    follow_up_reminder_days: int = Field(default=30, ge=0)
    notifications_enabled: bool = True


# =============================================================================
# STATE & DERIVED VIEWS
# =============================================================================

def duplicate_ids(records: list[TrackerRecord]) -> list[UUID]:
    """Ids that occur more than once, in first-seen order."""
    seen: set[UUID] = set()
    repeated: list[UUID] = []
    for record in records:
        if record.id in seen and record.id not in repeated:
            repeated.append(record.id)
        seen.add(record.id)
    return repeated


class TrackerState(TrackerModel):
    """
    Everything the tracker owns: five collections and two single records.

    This is the unit of export/import. Every field is required: a
    snapshot that leaves something out is not a snapshot.
    """

    letters: list[Letter]
    responses: list[Response]
    companies: list[Company]
    supplies: list[Supply]
    calendar_notes: list[CalendarNote]
    user_profile: UserProfile
    settings: UserSettings

    @model_validator(mode='after')
    def validate_unique_ids(self) -> 'TrackerState':
        """Record ids must be unique within each collection."""
        for name in ("letters", "responses", "companies", "supplies", "calendar_notes"):
            if duplicate_ids(getattr(self, name)):
                raise ValueError(f"Duplicate record ids in {to_camel(name)}")
        return self


class CompanyStats(BaseModel):
    """Per-company activity totals."""

    company_name: str
    letters_sent: int = Field(ge=0)
    responses_received: int = Field(ge=0)
    amount_received: Decimal = Field(ge=0)


class ActivityEntry(BaseModel):
    """One line in the recent activity feed."""

    kind: str = Field(
        ...,
        pattern="^(letter|response)$"
    )
    record_id: UUID
    company_name: str
    day: date
    amount: Decimal
