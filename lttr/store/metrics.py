"""
Derived Metrics

DESIGN DECISION: Every metric is a pure function over the current
collections. Nothing is cached; the store recomputes on each read, so a
metric can never disagree with the records it summarizes.

Money stays Decimal throughout. Only ROI, a percentage, is a float.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterable, Sequence

from lttr.models.records import (
    ActivityEntry,
    CompanyStats,
    Letter,
    Response,
    SubscriptionType,
    Supply,
    UserProfile,
)


ZERO = Decimal("0")


def total_letters_sent(letters: Iterable[Letter]) -> int:
    """Sum of quantities, not the number of letter records."""
    return sum(letter.quantity for letter in letters)


def total_responses_received(responses: Sequence[Response]) -> int:
    return len(responses)


def total_amount_received(responses: Iterable[Response]) -> Decimal:
    return sum((response.amount for response in responses), ZERO)


def total_expected_responses(letters: Iterable[Letter]) -> Decimal:
    return sum(
        (letter.expected_response * letter.quantity for letter in letters),
        ZERO,
    )


def roi(amount_received: Decimal, expected_responses: Decimal) -> float:
    """
    Return on expectation, as a percentage.

    0 when nothing is expected, regardless of what was received.
    Negative when responses fall short of expectation.
    """
    if expected_responses == 0:
        return 0.0
    return float((amount_received / expected_responses - 1) * 100)


def average_response_value(responses: Sequence[Response]) -> Decimal:
    if not responses:
        return ZERO
    return total_amount_received(responses) / len(responses)


def confirmed_letters(letters: Iterable[Letter]) -> list[Letter]:
    return [letter for letter in letters if letter.is_confirmed]


def pending_letters(letters: Iterable[Letter]) -> list[Letter]:
    return [letter for letter in letters if not letter.is_confirmed]


def total_supply_cost(supplies: Iterable[Supply]) -> Decimal:
    return sum((supply.cost for supply in supplies), ZERO)


def trial_end(profile: UserProfile, trial_length_days: int) -> datetime:
    return profile.trial_start_date + timedelta(days=trial_length_days)


def is_trial_expired(
    profile: UserProfile,
    now: datetime,
    trial_length_days: int,
) -> bool:
    """Only trial subscriptions expire."""
    return (
        profile.subscription_type == SubscriptionType.TRIAL
        and now > trial_end(profile, trial_length_days)
    )


def days_left_in_trial(
    profile: UserProfile,
    now: datetime,
    trial_length_days: int,
) -> int:
    """Whole days until the trial ends. Never negative."""
    return max(0, (trial_end(profile, trial_length_days) - now).days)


def company_stats(
    company_name: str,
    letters: Iterable[Letter],
    responses: Iterable[Response],
) -> CompanyStats:
    """Totals for one company, matched by name."""
    company_letters = [l for l in letters if l.company_name == company_name]
    company_responses = [r for r in responses if r.company_name == company_name]
    return CompanyStats(
        company_name=company_name,
        letters_sent=total_letters_sent(company_letters),
        responses_received=len(company_responses),
        amount_received=total_amount_received(company_responses),
    )


def recent_activity(
    letters: Sequence[Letter],
    responses: Sequence[Response],
    limit: int,
) -> list[ActivityEntry]:
    """
    Most recent letters and responses, newest first.

    Ties keep letters ahead of responses and later insertions ahead of
    earlier ones.
    """
    entries = [
        ActivityEntry(
            kind="letter",
            record_id=letter.id,
            company_name=letter.company_name,
            day=letter.date_sent,
            amount=letter.expected_response * letter.quantity,
        )
        for letter in reversed(letters)
    ]
    entries.extend(
        ActivityEntry(
            kind="response",
            record_id=response.id,
            company_name=response.company_name,
            day=response.date_received,
            amount=response.amount,
        )
        for response in reversed(responses)
    )
    entries.sort(key=lambda entry: entry.day, reverse=True)
    return entries[:limit]


def letters_due_for_follow_up(
    letters: Iterable[Letter],
    today: date,
    reminder_days: int,
) -> list[Letter]:
    """Pending letters sent at least reminder_days ago, oldest first."""
    due = [
        letter for letter in pending_letters(letters)
        if (today - letter.date_sent).days >= reminder_days
    ]
    return sorted(due, key=lambda letter: letter.date_sent)
