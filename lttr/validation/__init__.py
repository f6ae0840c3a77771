"""Form validation package."""

from lttr.validation.forms import (
    QUICK_SUPPLIES,
    FieldIssue,
    FormResult,
    FormValidator,
    describe_validation_error,
    quick_supply,
)

__all__ = [
    "QUICK_SUPPLIES",
    "FieldIssue",
    "FormResult",
    "FormValidator",
    "describe_validation_error",
    "quick_supply",
]
