"""
Tests for SmartReceipt

Test strategy:
1. Unit tests for individual components (models, queries, validators)
2. Flow tests for the controller (in-memory store, fake AI model)
3. No real API calls in tests (use fakes)
"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from uuid import uuid4

from pydantic import ValidationError

from smartreceipt.models.expense import (
    DEFAULT_CATEGORY_ICON,
    BudgetSettings,
    Expense,
    ExpenseCategory,
    ExpenseDraft,
    ImageUpload,
    ReceiptScan,
    ValidationIssue,
    ValidationResult,
    ViewType,
    category_icon,
    normalize_category,
)
from smartreceipt.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from smartreceipt.models.state import AppState, Notice


class TestExpenseModels:
    """Tests for expense-related Pydantic models."""

    def test_expense_creation(self):
        """Test Expense model creation."""
        expense = Expense(
            amount=Decimal("12.50"),
            merchant="Blue Bottle",
            category="Food & Dining",
            date=date(2024, 3, 1),
        )
        assert expense.amount == Decimal("12.50")
        assert expense.is_ai_generated is False
        assert expense.id

    def test_expense_ids_are_unique(self):
        """Test that each new expense gets its own id."""
        first = Expense(amount=1, merchant="A", category="Other", date=date(2024, 3, 1))
        second = Expense(amount=1, merchant="A", category="Other", date=date(2024, 3, 1))
        assert first.id != second.id

    def test_expense_strips_whitespace(self):
        """Test that whitespace is stripped from merchant."""
        expense = Expense(
            amount=Decimal("5"),
            merchant="  Corner Shop  ",
            category="Shopping",
            date=date(2024, 3, 1),
        )
        assert expense.merchant == "Corner Shop"

    def test_expense_rejects_negative_amount(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValidationError):
            Expense(
                amount=Decimal("-1"),
                merchant="Test",
                category="Other",
                date=date(2024, 3, 1),
            )

    def test_expense_rejects_nan_amount(self):
        """Test that non-finite amounts are rejected."""
        with pytest.raises(ValidationError):
            Expense(
                amount="NaN",
                merchant="Test",
                category="Other",
                date=date(2024, 3, 1),
            )

    def test_expense_accepts_zero_amount(self):
        """Test that a zero amount is a valid record."""
        expense = Expense(amount=0, merchant="Free", category="Other", date=date(2024, 3, 1))
        assert expense.amount == Decimal("0")

    def test_expense_is_frozen(self):
        """Test that an expense cannot be edited in place."""
        expense = Expense(amount=1, merchant="A", category="Other", date=date(2024, 3, 1))
        with pytest.raises(ValidationError):
            expense.amount = Decimal("2")

    def test_expense_keeps_unknown_category(self):
        """Test that a free-text category is accepted and gets the generic icon."""
        expense = Expense(amount=1, merchant="A", category="Pets", date=date(2024, 3, 1))
        assert expense.category == "Pets"
        assert expense.icon == DEFAULT_CATEGORY_ICON

    def test_expense_record_uses_camel_case(self):
        """Test the persisted JSON shape."""
        expense = Expense(
            id="abc",
            amount=Decimal("9.99"),
            merchant="Cinema",
            category="Entertainment",
            date=date(2024, 3, 1),
            is_ai_generated=True,
        )
        record = expense.to_record()
        assert record == {
            "id": "abc",
            "amount": 9.99,
            "merchant": "Cinema",
            "category": "Entertainment",
            "date": "2024-03-01",
            "isAiGenerated": True,
        }

    def test_expense_from_record(self):
        """Test reading a stored record back, including a timestamp date."""
        expense = Expense.model_validate({
            "id": "abc",
            "amount": 9.99,
            "merchant": "Cinema",
            "category": "Entertainment",
            "date": "2024-03-01T18:30:00.000Z",
            "isAiGenerated": True,
        })
        assert expense.date == date(2024, 3, 1)
        assert expense.is_ai_generated is True
        assert expense.amount == Decimal("9.99")

    def test_budget_settings_default(self):
        """Test the default daily limit."""
        assert BudgetSettings().daily_limit == Decimal("50")
        assert BudgetSettings().to_record() == {"dailyLimit": 50.0}

    def test_budget_settings_rejects_negative_limit(self):
        """Test that a negative limit is rejected."""
        with pytest.raises(ValidationError):
            BudgetSettings(daily_limit=Decimal("-5"))


class TestExpenseDraft:
    """Tests for the add/edit form model."""

    def test_draft_defaults(self):
        """Test that a blank draft is dated today."""
        draft = ExpenseDraft()
        assert draft.amount is None
        assert draft.merchant == ""
        assert draft.date == date.today()

    def test_draft_round_trip_keeps_id(self):
        """Test that editing keeps the original id."""
        expense = Expense(
            amount=Decimal("20"),
            merchant="Gym",
            category="Health",
            date=date(2024, 3, 1),
        )
        draft = ExpenseDraft.from_expense(expense).model_copy(
            update={"amount": Decimal("25")}
        )
        updated = draft.to_expense(expense.id)
        assert updated.id == expense.id
        assert updated.amount == Decimal("25")

    def test_draft_new_expense_gets_new_id(self):
        """Test that a new expense is given a fresh id."""
        draft = ExpenseDraft(
            amount=Decimal("3"),
            merchant="Bus",
            category="Transportation",
            date=date(2024, 3, 1),
        )
        assert draft.to_expense().id

    def test_draft_drops_time_of_day(self):
        """Test that datetimes are reduced to their calendar day."""
        draft = ExpenseDraft(date=datetime(2024, 3, 1, 23, 59))
        assert draft.date == date(2024, 3, 1)


class TestCategories:
    """Tests for the category helpers."""

    def test_all_categories_exist(self):
        """Test that expected categories exist."""
        expected = [
            "Food & Dining", "Shopping", "Transportation", "Entertainment",
            "Utilities", "Health", "Other",
        ]
        for cat in expected:
            assert ExpenseCategory(cat) is not None

    def test_category_icon(self):
        """Test icon lookup with fallback."""
        assert category_icon("Transportation") == "🚗"
        assert category_icon("Gardening") == DEFAULT_CATEGORY_ICON

    def test_normalize_category(self):
        """Test case folding onto known categories."""
        assert normalize_category("shopping") == "Shopping"
        assert normalize_category("  FOOD & DINING ") == "Food & Dining"
        assert normalize_category("Pets") == "Pets"
        assert normalize_category(None) == "Other"
        assert normalize_category("   ") == "Other"


class TestScanModels:
    """Tests for receipt scanning models."""

    def test_image_upload_normalizes_mime_type(self):
        """Test MIME type normalization."""
        upload = ImageUpload(file_size_bytes=10, mime_type=" IMAGE/PNG ")
        assert upload.mime_type == "image/png"

    def test_receipt_scan_has_data(self):
        """Test that a scan needs an amount or a merchant to count."""
        assert ReceiptScan(amount=Decimal("5")).has_data is True
        assert ReceiptScan(merchant="Shop").has_data is True
        assert ReceiptScan(category="Other", date=date(2024, 3, 1)).has_data is False


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.EXPENSE_CREATED,
            description="Expense saved",
        )
        assert event.event_type == AuditEventType.EXPENSE_CREATED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.SETTINGS_SAVED,
            description="Daily limit set",
            details={"daily_limit": "50"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "settings_saved"
        assert log_dict["details"]["daily_limit"] == "50"
        assert log_dict["correlation_id"] is None

    def test_audit_event_builder_expense_created(self):
        """Test AuditEventBuilder.expense_created."""
        correlation_id = uuid4()

        event = AuditEventBuilder.expense_created(
            expense_id="abc",
            merchant="Cafe",
            amount="4.50",
            is_ai_generated=True,
            correlation_id=correlation_id,
        )

        assert event.event_type == AuditEventType.EXPENSE_CREATED
        assert event.entity_id == "abc"
        assert event.correlation_id == correlation_id
        assert event.details["is_ai_generated"] is True
        assert event.is_user_action is True

    def test_audit_event_builder_receipt_scan_failed(self):
        """Test AuditEventBuilder.receipt_scan_failed."""
        upload_id = uuid4()

        event = AuditEventBuilder.receipt_scan_failed(
            upload_id=upload_id,
            error_type="ScanTimeoutError",
            error_message="timed out",
            correlation_id=uuid4(),
        )

        assert event.severity == AuditSeverity.WARNING
        assert event.entity_id == str(upload_id)
        assert event.error_message == "timed out"


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_validation_result_has_errors(self):
        """Test has_errors property."""
        result = ValidationResult(
            schema_valid=False,
            issues=[
                ValidationIssue(
                    field="amount",
                    issue_type="missing",
                    message="Amount is required",
                    severity="error",
                ),
            ],
        )
        assert result.has_errors is True
        assert result.error_count == 1
        assert result.is_valid is False

    def test_validation_result_warnings_only(self):
        """Test that warnings don't count as errors."""
        result = ValidationResult(
            schema_valid=True,
            semantic_valid=False,
            issues=[
                ValidationIssue(
                    field="date",
                    issue_type="future_date",
                    message="Date in future",
                    severity="warning",
                ),
            ],
        )
        assert result.has_errors is False
        assert result.error_count == 0
        assert result.is_valid is True
        assert len(result.warnings) == 1


class TestAppState:
    """Tests for the view state model."""

    def test_default_state(self):
        """Test that the app opens on the dashboard with defaults."""
        state = AppState()
        assert state.view == ViewType.DASHBOARD
        assert state.expenses == []
        assert state.settings.daily_limit == Decimal("50")
        assert state.is_editing is False

    def test_header_label_while_editing(self):
        """Test that the badge reads 'edit' in the form while editing."""
        expense = Expense(amount=1, merchant="A", category="Other", date=date(2024, 3, 1))
        state = AppState(view=ViewType.ADD, editing=expense)
        assert state.header_label == "edit"
        assert AppState(view=ViewType.ADD).header_label == "add"
        assert AppState(view=ViewType.HISTORY).header_label == "history"

    def test_notice_level_is_checked(self):
        """Test that unknown notice levels are rejected."""
        with pytest.raises(ValidationError):
            Notice(level="fatal", text="boom")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
