"""
Input Validation

Parses the raw text the presentation layer collects into typed values.

Two kinds of outcome:
- Missing required fields are reported as a list; the store treats that
  as a silent skip.
- Text that is present but cannot be parsed raises an
  InputValidationError, which callers can catch and show to the user.

IMPORTANT: Validation never silently fixes a value into something else.
A bad amount is an error, never a NaN or a zero.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional


_MONTH_KEY = re.compile(r"^(\d{4})-(\d{2})$")


class InputValidationError(ValueError):
    """Base exception for user input that cannot be parsed."""

    def __init__(self, field: str, value: Optional[str], message: str):
        self.field = field
        self.value = value
        self.message = message
        super().__init__(f"Invalid {field} {value!r}: {message}")


class AmountParseError(InputValidationError):
    """Amount or goal text is not a finite, non-negative number."""
    pass


class InvalidMonthKeyError(InputValidationError):
    """Month filter is neither empty nor a YYYY-MM value."""
    pass


def is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def missing_required_fields(**fields: Optional[str]) -> list[str]:
    """
    Names of the given fields that are empty or whitespace-only.

    Order follows the keyword order of the call.
    """
    return [name for name, value in fields.items() if is_blank(value)]


def parse_amount(text: Optional[str], field: str = "amount") -> Decimal:
    """
    Parse user-entered amount text into a Decimal.

    Accepts a comma as the decimal separator when the text has no dot
    ("12,50" -> 12.50). Rejects empty, non-numeric, non-finite and
    negative input.

    Raises:
        AmountParseError: If the text is not a usable amount
    """
    if is_blank(text):
        raise AmountParseError(field, text, "value is empty")

    normalized = str(text).strip()
    if "," in normalized and "." not in normalized:
        normalized = normalized.replace(",", ".")

    try:
        value = Decimal(normalized)
    except InvalidOperation:
        raise AmountParseError(field, text, "not a number")

    if not value.is_finite():
        raise AmountParseError(field, text, "must be a finite number")
    if value < 0:
        raise AmountParseError(field, text, "must not be negative")

    return value


def parse_month_key(month_key: Optional[str]) -> Optional[tuple[int, int]]:
    """
    Parse a month filter.

    Returns None for an empty filter (no filtering), otherwise the
    (year, month) pair.

    Raises:
        InvalidMonthKeyError: If the key is not YYYY-MM with a month in 1..12
    """
    if month_key is None or not month_key.strip():
        return None

    match = _MONTH_KEY.match(month_key.strip())
    if not match:
        raise InvalidMonthKeyError("month", month_key, "expected YYYY-MM")

    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise InvalidMonthKeyError("month", month_key, "month must be between 01 and 12")

    return year, month
