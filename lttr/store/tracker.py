"""
Tracker Store

The single source of truth for every tracked record. It:
1. Owns the five record collections and the two single records
2. Computes derived metrics on demand
3. Mirrors its state to key-value storage after every mutation
4. Notifies subscribers after every mutation

DESIGN DECISION: The store is an explicit object, constructed once at
application start (see lttr.orchestrator) and passed to every consumer.
There is no module-level instance.

FAILURE SEMANTICS: Corrupt or unreadable local state never raises.
Each blob falls back to its default on its own and the failure is audited.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Iterable, Optional, Union
from uuid import UUID

from pydantic import BaseModel, TypeAdapter, ValidationError

from lttr.audit import AuditLogger
from lttr.config import TrackerSettings, get_settings
from lttr.models.records import (
    ActivityEntry,
    CalendarNote,
    Collection,
    Company,
    CompanyStats,
    Letter,
    Response,
    StorageKey,
    Supply,
    TrackerRecord,
    TrackerState,
    UserProfile,
    UserSettings,
    duplicate_ids,
    utc_now,
)
from lttr.services.storage import KeyValueStorageInterface, StorageError
from lttr.store import metrics
from lttr.store.defaults import default_companies
from lttr.validation.forms import FormResult, describe_validation_error


Subscriber = Callable[["TrackerStore"], None]
Clock = Callable[[], datetime]

# Python attribute holding each collection
_ATTRIBUTES: dict[Collection, str] = {
    Collection.LETTERS: "letters",
    Collection.RESPONSES: "responses",
    Collection.COMPANIES: "companies",
    Collection.SUPPLIES: "supplies",
    Collection.CALENDAR_NOTES: "calendar_notes",
}

_MODELS: dict[Collection, type[TrackerRecord]] = {
    Collection.LETTERS: Letter,
    Collection.RESPONSES: Response,
    Collection.COMPANIES: Company,
    Collection.SUPPLIES: Supply,
    Collection.CALENDAR_NOTES: CalendarNote,
}

# Fields matched by search(), per collection
_SEARCH_FIELDS: dict[Collection, tuple[str, ...]] = {
    Collection.LETTERS: ("company_name", "notes"),
    Collection.RESPONSES: ("company_name", "notes"),
    Collection.COMPANIES: ("name", "address", "notes"),
    Collection.SUPPLIES: ("name", "notes"),
    Collection.CALENDAR_NOTES: ("title", "notes"),
}

# Sort key and direction for search() results
_SEARCH_ORDER: dict[Collection, tuple[str, bool]] = {
    Collection.LETTERS: ("date_sent", True),
    Collection.RESPONSES: ("date_received", True),
    Collection.COMPANIES: ("name", False),
    Collection.SUPPLIES: ("date_purchased", True),
    Collection.CALENDAR_NOTES: ("day", True),
}

_LIST_ADAPTERS: dict[Collection, TypeAdapter] = {
    collection: TypeAdapter(list[model])
    for collection, model in _MODELS.items()
}

_RECORD_MODELS: dict[StorageKey, type[BaseModel]] = {
    StorageKey.USER_PROFILE: UserProfile,
    StorageKey.SETTINGS: UserSettings,
}


class BlobDecodeError(ValueError):
    """A stored blob parsed but breaks a rule the models cannot check alone."""


class TrackerStore:
    """
    Observable in-memory store for the letter tracker.

    Usage:
        store = TrackerStore.open(JsonFileStorage())
        store.add_letter(Letter(company_name="Bellagio", expected_response=Decimal("100")))
        store.roi
    """

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        clock: Optional[Clock] = None,
        config: Optional[TrackerSettings] = None,
    ):
        """
        Create an empty store. Nothing is read until load() is called.

        Args:
            storage: Key-value backend the store mirrors itself to
            audit_logger: Audit sink. A local-only logger if None.
            clock: Source of "now" (aware UTC). Defaults to the system clock.
            config: Tracker settings. Loaded from the environment if None.
        """
        self._storage = storage
        self._audit = audit_logger or AuditLogger()
        self._clock = clock or utc_now
        self._config = config or get_settings().tracker
        self._subscribers: list[Subscriber] = []

        self.letters: list[Letter] = []
        self.responses: list[Response] = []
        self.companies: list[Company] = []
        self.supplies: list[Supply] = []
        self.calendar_notes: list[CalendarNote] = []
        self.user_profile = UserProfile(trial_start_date=self._clock())
        self.settings = UserSettings()

    @classmethod
    def open(
        cls,
        storage: KeyValueStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        clock: Optional[Clock] = None,
        config: Optional[TrackerSettings] = None,
    ) -> "TrackerStore":
        """Create a store, load persisted state and seed sample companies if needed."""
        store = cls(storage, audit_logger=audit_logger, clock=clock, config=config)
        store.load()
        store.seed_defaults()
        return store

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit

    @property
    def config(self) -> TrackerSettings:
        return self._config

    def now(self) -> datetime:
        return self._clock()

    # =========================================================================
    # OBSERVERS
    # =========================================================================

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a callback invoked with the store after every mutation.

        Returns a function that removes the subscription.
        """
        if callback not in self._subscribers:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            try:
                callback(self)
            except Exception as e:
                # One failing view must not stop the others
                name = getattr(callback, "__name__", repr(callback))
                self._audit.log_subscriber_failed(name, str(e))

    def _commit(self) -> list[str]:
        failed = self.save()
        self._notify()
        return failed

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def load(self) -> list[str]:
        """
        Decode every blob from storage, each independently.

        An absent key leaves its default in place. A blob that cannot be
        read or decoded is replaced by its default and audited.

        Returns:
            Keys whose stored blob was discarded
        """
        discarded = []
        for key in StorageKey:
            try:
                raw = self._storage.read(key.value)
            except StorageError as e:
                self._audit.log_decode_failed(key.value, str(e))
                self._reset_blob(key)
                discarded.append(key.value)
                continue

            if raw is None:
                self._reset_blob(key)
                continue

            try:
                self._decode_blob(key, raw)
            except ValidationError as e:
                self._audit.log_decode_failed(key.value, describe_validation_error(e))
                self._reset_blob(key)
                discarded.append(key.value)
            except BlobDecodeError as e:
                self._audit.log_decode_failed(key.value, str(e))
                self._reset_blob(key)
                discarded.append(key.value)

        return discarded

    def save(self) -> list[str]:
        """
        Encode and write every blob under its own key.

        A failed write is audited and does not stop the remaining keys.

        Returns:
            Keys that could not be written
        """
        failed = []
        for key in StorageKey:
            try:
                self._storage.write(key.value, self._encode_blob(key))
            except StorageError as e:
                self._audit.log_save_failed(key.value, str(e))
                failed.append(key.value)
        return failed

    def _decode_blob(self, key: StorageKey, raw: str) -> None:
        if key in _RECORD_MODELS:
            value = _RECORD_MODELS[key].model_validate_json(raw)
            if key == StorageKey.USER_PROFILE:
                self.user_profile = value
            else:
                self.settings = value
            return
        collection = Collection(key.value)
        records = _LIST_ADAPTERS[collection].validate_json(raw)
        if duplicate_ids(records):
            raise BlobDecodeError(f"Duplicate record ids in {key.value}")
        setattr(self, _ATTRIBUTES[collection], records)

    def _encode_blob(self, key: StorageKey) -> str:
        if key == StorageKey.USER_PROFILE:
            return self.user_profile.model_dump_json(by_alias=True)
        if key == StorageKey.SETTINGS:
            return self.settings.model_dump_json(by_alias=True)
        collection = Collection(key.value)
        records = getattr(self, _ATTRIBUTES[collection])
        return _LIST_ADAPTERS[collection].dump_json(records, by_alias=True).decode("utf-8")

    def _reset_blob(self, key: StorageKey) -> None:
        if key == StorageKey.USER_PROFILE:
            self.user_profile = UserProfile(trial_start_date=self._clock())
        elif key == StorageKey.SETTINGS:
            self.settings = UserSettings()
        else:
            setattr(self, _ATTRIBUTES[Collection(key.value)], [])

    def seed_defaults(self) -> bool:
        """
        Populate the sample companies if there are none, and persist.

        Returns True if companies were seeded.
        """
        if self.companies:
            return False
        self._seed_companies()
        self._commit()
        return True

    def _seed_companies(self) -> None:
        self.companies = default_companies(self._clock())
        self._audit.log_defaults_seeded(len(self.companies))

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def records(self, collection: Union[Collection, str]) -> list[Any]:
        """The live list backing a collection."""
        return getattr(self, _ATTRIBUTES[Collection(collection)])

    def _append(self, collection: Collection, record: TrackerRecord, label: str) -> TrackerRecord:
        model = _MODELS[collection]
        if not isinstance(record, model):
            raise TypeError(f"{collection.value} holds {model.__name__}, got {type(record).__name__}")

        records = self.records(collection)
        existing = _find(records, record.id)
        if existing is not None:
            self._audit.log_duplicate_ignored(collection.value, record.id)
            return existing

        records.append(record)
        self._audit.log_record_added(collection.value, record.id, label)
        return record

    def add_letter(self, letter: Letter) -> Letter:
        added = self._append(Collection.LETTERS, letter, letter.company_name)
        self._commit()
        return added

    def add_response(self, response: Response) -> Response:
        """
        Record a response.

        If it links to a known letter, that letter is confirmed in the same
        mutation, before anything is persisted. Unknown links change nothing.
        """
        added = self._append(Collection.RESPONSES, response, response.company_name)
        if added is response:
            self._confirm_linked_letter(response)
        self._commit()
        return added

    def _confirm_linked_letter(self, response: Response) -> None:
        if response.linked_letter_id is None:
            return
        letter = _find(self.letters, response.linked_letter_id)
        if letter is not None and not letter.is_confirmed:
            letter.is_confirmed = True
            self._audit.log_letter_confirmed(letter.id, response.id)

    def add_company(self, company: Company) -> Company:
        added = self._append(Collection.COMPANIES, company, company.name)
        self._commit()
        return added

    def add_supply(self, supply: Supply) -> Supply:
        added = self._append(Collection.SUPPLIES, supply, supply.name)
        self._commit()
        return added

    def add_note(self, note: CalendarNote) -> CalendarNote:
        added = self._append(Collection.CALENDAR_NOTES, note, note.title)
        self._commit()
        return added

    def submit(self, form: FormResult) -> Optional[TrackerRecord]:
        """
        Save the record of a validated form.

        An invalid form is a no-op and returns None.
        """
        if not form.can_save:
            return None
        adders = {
            Letter: self.add_letter,
            Response: self.add_response,
            Company: self.add_company,
            Supply: self.add_supply,
            CalendarNote: self.add_note,
        }
        return adders[type(form.record)](form.record)

    def replace(self, collection: Union[Collection, str], record: TrackerRecord) -> bool:
        """
        Replace the record with the same id.

        A replaced response confirms the letter it now links to, exactly as
        add_response() does.

        Returns False if no such record exists.
        """
        collection = Collection(collection)
        model = _MODELS[collection]
        if not isinstance(record, model):
            raise TypeError(f"{collection.value} holds {model.__name__}, got {type(record).__name__}")

        records = self.records(collection)
        for index, current in enumerate(records):
            if current.id == record.id:
                records[index] = record
                self._audit.log_record_replaced(collection.value, record.id)
                if collection == Collection.RESPONSES:
                    self._confirm_linked_letter(record)
                self._commit()
                return True
        return False

    def delete_at(
        self,
        collection: Union[Collection, str],
        indices: Iterable[int],
    ) -> list[TrackerRecord]:
        """
        Remove the records at the given positions.

        Out-of-range positions are ignored. Nothing cascades: responses
        linked to a deleted letter keep their dangling link.

        Returns:
            The removed records
        """
        collection = Collection(collection)
        records = self.records(collection)
        doomed = {index for index in indices if 0 <= index < len(records)}
        if not doomed:
            return []

        removed = [record for index, record in enumerate(records) if index in doomed]
        records[:] = [record for index, record in enumerate(records) if index not in doomed]
        self._audit.log_records_deleted(collection.value, [record.id for record in removed])
        self._commit()
        return removed

    def delete_by_id(self, collection: Union[Collection, str], record_id: UUID) -> bool:
        records = self.records(collection)
        for index, record in enumerate(records):
            if record.id == record_id:
                self.delete_at(collection, [index])
                return True
        return False

    def set_confirmed(self, letter_id: UUID) -> bool:
        """
        Manually mark a letter as confirmed. Idempotent.

        Returns False if the letter does not exist.
        """
        letter = _find(self.letters, letter_id)
        if letter is None:
            return False
        if not letter.is_confirmed:
            letter.is_confirmed = True
            self._audit.log_letter_confirmed(letter.id)
            self._commit()
        return True

    def update_profile(self, profile: UserProfile) -> None:
        self.user_profile = profile
        self._audit.log_profile_updated()
        self._commit()

    def update_settings(self, settings: UserSettings) -> None:
        self.settings = settings
        self._audit.log_settings_updated()
        self._commit()

    def reset_all(self) -> None:
        """
        Clear every collection and re-seed the sample companies.

        The user profile and settings are kept.
        """
        for attribute in _ATTRIBUTES.values():
            getattr(self, attribute).clear()
        self._audit.log_data_reset()
        self._seed_companies()
        self._commit()

    def state(self) -> TrackerState:
        """Snapshot of everything the store owns."""
        return TrackerState(
            letters=list(self.letters),
            responses=list(self.responses),
            companies=list(self.companies),
            supplies=list(self.supplies),
            calendar_notes=list(self.calendar_notes),
            user_profile=self.user_profile,
            settings=self.settings,
        )

    def replace_state(self, state: TrackerState) -> None:
        """Replace all seven collections/records wholesale and persist."""
        self.letters = list(state.letters)
        self.responses = list(state.responses)
        self.companies = list(state.companies)
        self.supplies = list(state.supplies)
        self.calendar_notes = list(state.calendar_notes)
        self.user_profile = state.user_profile
        self.settings = state.settings
        self._audit.log_data_imported({
            collection.value: len(self.records(collection)) for collection in Collection
        })
        self._commit()

    # =========================================================================
    # LOOKUPS
    # =========================================================================

    def linked_letter(self, response: Response) -> Optional[Letter]:
        """The letter a response links to, or None if unlinked or dangling."""
        if response.linked_letter_id is None:
            return None
        return _find(self.letters, response.linked_letter_id)

    def search(self, collection: Union[Collection, str], text: str = "") -> list[Any]:
        """
        Case-insensitive substring search over a collection's text fields.

        Results are newest first (companies alphabetically).
        """
        collection = Collection(collection)
        needle = text.strip().casefold()
        fields = _SEARCH_FIELDS[collection]
        matches = [
            record for record in self.records(collection)
            if not needle
            or any(needle in getattr(record, field).casefold() for field in fields)
        ]
        sort_field, newest_first = _SEARCH_ORDER[collection]
        if collection == Collection.COMPANIES:
            return sorted(matches, key=lambda record: record.name.casefold())
        # Stable sort: equal dates keep insertion order
        return sorted(matches, key=lambda record: getattr(record, sort_field), reverse=newest_first)

    def notes_on(self, day: date) -> list[CalendarNote]:
        return [note for note in self.calendar_notes if note.day == day]

    def company_stats(self, company_name: str) -> CompanyStats:
        return metrics.company_stats(company_name, self.letters, self.responses)

    def recent_activity(self, limit: Optional[int] = None) -> list[ActivityEntry]:
        return metrics.recent_activity(
            self.letters,
            self.responses,
            self._config.recent_activity_limit if limit is None else limit,
        )

    def letters_due_for_follow_up(self, today: Optional[date] = None) -> list[Letter]:
        return metrics.letters_due_for_follow_up(
            self.letters,
            today or self._clock().date(),
            self.settings.follow_up_reminder_days,
        )

    # =========================================================================
    # DERIVED METRICS
    # =========================================================================

    @property
    def total_letters_sent(self) -> int:
        return metrics.total_letters_sent(self.letters)

    @property
    def total_responses_received(self) -> int:
        return metrics.total_responses_received(self.responses)

    @property
    def total_amount_received(self) -> Decimal:
        return metrics.total_amount_received(self.responses)

    @property
    def total_expected_responses(self) -> Decimal:
        return metrics.total_expected_responses(self.letters)

    @property
    def roi(self) -> float:
        return metrics.roi(self.total_amount_received, self.total_expected_responses)

    @property
    def average_response_value(self) -> Decimal:
        return metrics.average_response_value(self.responses)

    @property
    def confirmed_letters(self) -> list[Letter]:
        return metrics.confirmed_letters(self.letters)

    @property
    def pending_letters(self) -> list[Letter]:
        return metrics.pending_letters(self.letters)

    @property
    def available_letters_for_linking(self) -> list[Letter]:
        """Letters a new response may be linked to."""
        return self.pending_letters

    @property
    def total_supply_cost(self) -> Decimal:
        return metrics.total_supply_cost(self.supplies)

    @property
    def net_profit(self) -> Decimal:
        return self.total_amount_received - self.total_supply_cost

    @property
    def is_trial_expired(self) -> bool:
        return metrics.is_trial_expired(
            self.user_profile,
            self._clock(),
            self._config.trial_length_days,
        )

    @property
    def days_left_in_trial(self) -> int:
        return metrics.days_left_in_trial(
            self.user_profile,
            self._clock(),
            self._config.trial_length_days,
        )


def _find(records: Iterable[TrackerRecord], record_id: UUID) -> Optional[Any]:
    for record in records:
        if record.id == record_id:
            return record
    return None

