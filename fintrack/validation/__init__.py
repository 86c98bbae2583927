"""Input validation package."""

from fintrack.validation.validator import (
    AmountParseError,
    InputValidationError,
    InvalidMonthKeyError,
    is_blank,
    missing_required_fields,
    parse_amount,
    parse_month_key,
)

__all__ = [
    "AmountParseError",
    "InputValidationError",
    "InvalidMonthKeyError",
    "is_blank",
    "missing_required_fields",
    "parse_amount",
    "parse_month_key",
]
