"""Tests for the two-stage form validation."""

import pytest
from datetime import date, timedelta
from decimal import Decimal

from smartreceipt.models.expense import ExpenseDraft
from smartreceipt.validation import ExpenseValidator


@pytest.fixture
def validator(today):
    return ExpenseValidator(today=today)


def complete_draft(**overrides):
    fields = dict(
        amount=Decimal("12.50"),
        merchant="Cafe",
        category="Food & Dining",
        date=date(2024, 3, 13),
    )
    fields.update(overrides)
    return ExpenseDraft(**fields)


class TestSchemaValidation:
    """Tests for required fields."""

    def test_complete_draft_is_valid(self, validator):
        """Test that a filled-in form passes."""
        result = validator.validate(complete_draft())
        assert result.is_valid is True
        assert result.issues == []

    @pytest.mark.parametrize("field,value", [
        ("amount", None),
        ("merchant", ""),
        ("category", ""),
        ("date", None),
    ])
    def test_missing_required_field(self, validator, field, value):
        """Test that each required field blocks the save."""
        result = validator.validate(complete_draft(**{field: value}))
        assert result.is_valid is False
        assert [issue.field for issue in result.issues] == [field]

    def test_blank_merchant_is_missing(self, validator):
        """Test that whitespace-only text counts as empty."""
        result = validator.validate(complete_draft(merchant="   "))
        assert result.is_valid is False

    def test_negative_amount(self, validator):
        """Test that a negative amount is an error."""
        result = validator.validate(complete_draft(amount=Decimal("-1")))
        assert result.is_valid is False
        assert result.issues[0].issue_type == "invalid_value"

    def test_zero_amount_allowed(self, validator):
        """Test that zero is a valid amount."""
        assert validator.validate(complete_draft(amount=Decimal("0"))).is_valid is True

    def test_blank_form_reports_every_field(self, validator):
        """Test that an empty form lists all four problems."""
        result = validator.validate(ExpenseDraft(date=None))
        assert result.error_count == 4


class TestSemanticValidation:
    """Tests for warnings that do not block the save."""

    def test_future_date_warning(self, validator, today):
        """Test that a date well in the future is flagged."""
        result = validator.validate(complete_draft(date=today + timedelta(days=5)))
        assert result.is_valid is True
        assert result.semantic_valid is False
        assert result.warnings[0].issue_type == "future_date"

    def test_tomorrow_is_tolerated(self, validator, today):
        """Test the one-day tolerance for timezones."""
        result = validator.validate(complete_draft(date=today + timedelta(days=1)))
        assert result.warnings == []

    def test_large_amount_warning(self, validator):
        """Test that a huge amount is flagged."""
        result = validator.validate(complete_draft(amount=Decimal("25000")))
        assert result.is_valid is True
        assert result.warnings[0].field == "amount"

    def test_unknown_category_is_info(self, validator):
        """Test that a free-text category is noted but not a warning."""
        result = validator.validate(complete_draft(category="Pets"))
        assert result.is_valid is True
        assert result.warnings == []
        assert result.issues[0].severity == "info"


class TestDailyLimitValidation:
    """Tests for the settings form."""

    @pytest.mark.parametrize("value,expected", [
        ("75", Decimal("75")),
        (" 12.5 ", Decimal("12.5")),
        (0, Decimal("0")),
        (Decimal("40"), Decimal("40")),
    ])
    def test_valid_limits(self, validator, value, expected):
        """Test accepted limits."""
        limit, result = validator.validate_daily_limit(value)
        assert limit == expected
        assert result.is_valid is True

    @pytest.mark.parametrize("value", [None, "", "abc", "-5", "NaN", "Infinity"])
    def test_invalid_limits(self, validator, value):
        """Test rejected limits."""
        limit, result = validator.validate_daily_limit(value)
        assert limit is None
        assert result.is_valid is False


class TestSummary:
    """Tests for the user-facing summary."""

    def test_summary_lists_errors(self, validator):
        """Test the error message heading and lines."""
        result = validator.validate(complete_draft(merchant=""))
        summary = validator.get_user_friendly_summary(result)
        assert summary.startswith("Please fill in all required fields:")
        assert "Merchant / title is required" in summary

    def test_summary_when_valid(self, validator):
        """Test the all-clear message."""
        result = validator.validate(complete_draft())
        assert validator.get_user_friendly_summary(result) == "All details look good."
