"""
Sample reference data shown to a first-run user.
"""

from datetime import datetime
from decimal import Decimal

from lttr.models.records import Company, ExpectedResponseRange


# (name, address, response rate, expected range, notes)
_SAMPLE_COMPANIES = [
    (
        "Bellagio",
        "3600 S Las Vegas Blvd, Las Vegas, NV 89109",
        0.15,
        ("50", "200"),
        "High-end property, prefers handwritten letters",
    ),
    (
        "Caesars Palace",
        "3570 S Las Vegas Blvd, Las Vegas, NV 89109",
        0.12,
        ("25", "150"),
        "Classic Vegas casino",
    ),
    (
        "MGM Grand",
        "3799 S Las Vegas Blvd, Las Vegas, NV 89109",
        0.18,
        ("30", "180"),
        "Good response rate for handwritten",
    ),
    (
        "The Venetian",
        "3355 S Las Vegas Blvd, Las Vegas, NV 89109",
        0.10,
        ("20", "100"),
        "Luxury property, accepts email",
    ),
]


def default_companies(now: datetime) -> list[Company]:
    """Build a fresh copy of the sample company list."""
    return [
        Company(
            name=name,
            address=address,
            response_rate=rate,
            expected_response_range=ExpectedResponseRange(
                minimum=Decimal(low),
                maximum=Decimal(high),
            ),
            last_updated=now,
            notes=notes,
        )
        for name, address, rate, (low, high), notes in _SAMPLE_COMPANIES
    ]


def default_company_names() -> list[str]:
    return [entry[0] for entry in _SAMPLE_COMPANIES]
