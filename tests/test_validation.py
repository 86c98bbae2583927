"""Tests for input parsing."""

from decimal import Decimal

import pytest

from fintrack.validation import (
    AmountParseError,
    InputValidationError,
    InvalidMonthKeyError,
    missing_required_fields,
    parse_amount,
    parse_month_key,
)


class TestParseAmount:
    """Tests for amount text parsing."""

    @pytest.mark.parametrize("text,expected", [
        ("12.50", Decimal("12.50")),
        ("12,50", Decimal("12.50")),
        (" 7 ", Decimal("7")),
        ("0", Decimal("0")),
        ("1e2", Decimal("100")),
    ])
    def test_valid_amounts(self, text, expected):
        """Test accepted amount formats."""
        assert parse_amount(text) == expected

    @pytest.mark.parametrize("text", ["", "   ", None, "abc", "12abc", "NaN", "Infinity", "-5", "1,234.56"])
    def test_invalid_amounts(self, text):
        """Test that unusable amount text raises instead of producing NaN."""
        with pytest.raises(AmountParseError):
            parse_amount(text)

    def test_error_carries_field_and_value(self):
        """Test the error reports which field and value failed."""
        with pytest.raises(AmountParseError) as exc_info:
            parse_amount("lots", field="goal")
        assert exc_info.value.field == "goal"
        assert exc_info.value.value == "lots"
        assert isinstance(exc_info.value, InputValidationError)
        assert isinstance(exc_info.value, ValueError)


class TestParseMonthKey:
    """Tests for month filter parsing."""

    @pytest.mark.parametrize("key", ["", "  ", None])
    def test_empty_key_means_no_filter(self, key):
        """Test that an empty key disables filtering."""
        assert parse_month_key(key) is None

    def test_valid_key(self):
        """Test YYYY-MM parsing."""
        assert parse_month_key("2024-03") == (2024, 3)

    @pytest.mark.parametrize("key", ["2024-13", "2024-00", "2024-3", "March", "2024/03", "2024-03-01"])
    def test_invalid_key(self, key):
        """Test malformed month keys are rejected."""
        with pytest.raises(InvalidMonthKeyError):
            parse_month_key(key)


class TestRequiredFields:
    """Tests for required field detection."""

    def test_reports_blank_fields_in_order(self):
        """Test blank and whitespace-only fields are reported."""
        missing = missing_required_fields(description="", amount="5", category="  ")
        assert missing == ["description", "category"]

    def test_none_counts_as_missing(self):
        """Test None is treated as missing."""
        assert missing_required_fields(amount=None) == ["amount"]

    def test_nothing_missing(self):
        """Test complete input reports nothing."""
        assert missing_required_fields(description="Lunch", amount="5", category="Food") == []
