"""
Core Data Models for SmartReceipt

These models define the schemas for all data flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Serialize to the same JSON documents the record store keeps
4. Support the audit trail

DESIGN DECISION: Persisted JSON uses camelCase keys (`isAiGenerated`,
`dailyLimit`) while Python code uses snake_case. The alias generator
handles the mapping; `populate_by_name` lets code use either.
"""

import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
)
from pydantic.alias_generators import to_camel


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def _coerce_calendar_day(value):
    """Drop any time-of-day part so dates compare as calendar days."""
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, str) and "T" in value:
        return value.split("T", 1)[0]
    return value


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class ExpenseCategory(str, Enum):
    """
    Known expense categories.

    DESIGN DECISION: The category of an Expense is an open string.
    The receipt interpreter guesses free text, and we never reject a
    record because its category is unknown. This enum only drives
    labels, icons and case normalization.
    """
    FOOD_AND_DINING = "Food & Dining"
    SHOPPING = "Shopping"
    TRANSPORTATION = "Transportation"
    ENTERTAINMENT = "Entertainment"
    UTILITIES = "Utilities"
    HEALTH = "Health"
    OTHER = "Other"


KNOWN_CATEGORIES = frozenset(category.value for category in ExpenseCategory)

CATEGORY_ICONS = {
    ExpenseCategory.FOOD_AND_DINING.value: "☕",
    ExpenseCategory.SHOPPING.value: "🛍️",
    ExpenseCategory.TRANSPORTATION.value: "🚗",
    ExpenseCategory.ENTERTAINMENT.value: "🎬",
    ExpenseCategory.UTILITIES.value: "⚡",
    ExpenseCategory.HEALTH.value: "❤️",
}
DEFAULT_CATEGORY_ICON = "•••"


def category_icon(category: str) -> str:
    """Icon for a category; unrecognized values get the generic icon."""
    return CATEGORY_ICONS.get(category, DEFAULT_CATEGORY_ICON)


def normalize_category(raw: Optional[str]) -> str:
    """
    Map a free-text category onto a known one where the match is obvious.

    "shopping" becomes "Shopping". Anything else is kept as written,
    and a blank value falls back to "Other".
    """
    if raw is None or not raw.strip():
        return ExpenseCategory.OTHER.value
    cleaned = raw.strip()
    for known in ExpenseCategory:
        if known.value.lower() == cleaned.lower():
            return known.value
    return cleaned


class ViewType(str, Enum):
    """The four screens of the app."""
    DASHBOARD = "dashboard"
    HISTORY = "history"
    ADD = "add"
    SETTINGS = "settings"


# =============================================================================
# CORE RECORDS
# =============================================================================

class Expense(BaseModel):
    """
    A single recorded transaction.

    CRITICAL: Expenses are immutable. An edit is a full-record replace
    keyed on `id`; the id never changes after creation.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        min_length=1,
        description="Opaque unique identifier"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        allow_inf_nan=False,
        description="Amount spent"
    )
    merchant: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Merchant or title"
    )
    category: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Category (known or free text)"
    )
    date: datetime.date = Field(
        ...,
        description="Calendar day of the expense"
    )
    is_ai_generated: bool = Field(
        default=False,
        description="True if any field came from the receipt interpreter"
    )

    @field_validator('date', mode='before')
    @classmethod
    def strip_time_of_day(cls, v):
        return _coerce_calendar_day(v)

    @field_serializer('amount', when_used='json')
    def serialize_amount(self, v: Decimal) -> float:
        # Stored documents keep amounts as JSON numbers
        return float(v)

    def to_record(self) -> dict:
        """Serialize to the persisted JSON shape."""
        return self.model_dump(mode="json", by_alias=True)

    @property
    def icon(self) -> str:
        return category_icon(self.category)


class BudgetSettings(BaseModel):
    """
    The singleton Settings record.

    Exactly one exists at any time; saving replaces it wholesale.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    daily_limit: Decimal = Field(
        default=Decimal("50"),
        ge=0,
        allow_inf_nan=False,
        description="Daily spending threshold"
    )

    @field_serializer('daily_limit', when_used='json')
    def serialize_daily_limit(self, v: Decimal) -> float:
        return float(v)

    def to_record(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class ExpenseDraft(BaseModel):
    """
    The add/edit form contents.

    CRITICAL: This is PROPOSED data, NOT verified.
    All fields are optional because the user (or the receipt
    interpreter) might not have filled them in yet. A draft only
    becomes an Expense after validation passes.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    amount: Optional[Decimal] = None
    merchant: str = ""
    category: str = ""
    date: Optional[datetime.date] = Field(default_factory=datetime.date.today)
    is_ai_generated: bool = False

    @field_validator('date', mode='before')
    @classmethod
    def strip_time_of_day(cls, v):
        return _coerce_calendar_day(v)

    @classmethod
    def from_expense(cls, expense: Expense) -> "ExpenseDraft":
        """Pre-populate the form from an existing record."""
        return cls(
            amount=expense.amount,
            merchant=expense.merchant,
            category=expense.category,
            date=expense.date,
            is_ai_generated=expense.is_ai_generated,
        )

    def to_expense(self, expense_id: Optional[str] = None) -> Expense:
        """
        Build the record to persist.

        A new id is generated unless one is given (the edit flow keeps
        the original id).
        """
        fields = dict(
            amount=self.amount,
            merchant=self.merchant,
            category=self.category,
            date=self.date,
            is_ai_generated=self.is_ai_generated,
        )
        if expense_id is not None:
            fields["id"] = expense_id
        return Expense(**fields)


# =============================================================================
# RECEIPT SCANNING MODELS
# =============================================================================

class ImageUpload(BaseModel):
    """Represents a receipt image before it is sent for scanning."""

    upload_id: UUID = Field(
        default_factory=uuid4,
        description="Unique upload identifier"
    )
    received_at: datetime.datetime = Field(
        default_factory=_utcnow
    )
    file_size_bytes: int = Field(ge=0)
    mime_type: str

    @field_validator('mime_type')
    @classmethod
    def normalize_mime_type(cls, v: str) -> str:
        return v.strip().lower()


class ReceiptScan(BaseModel):
    """
    Best-guess fields read from a receipt image.

    CRITICAL: This is what the AI thinks it saw.
    Every field may be missing, and `category` is free text that
    may not match any known category.
    """

    scan_id: UUID = Field(
        default_factory=uuid4,
        description="Unique ID for this scan attempt"
    )
    scanned_at: datetime.datetime = Field(
        default_factory=_utcnow
    )
    amount: Optional[Decimal] = Field(
        default=None,
        ge=0,
        allow_inf_nan=False,
    )
    merchant: Optional[str] = None
    category: Optional[str] = None
    date: Optional[datetime.date] = None

    # Raw model output for debugging
    raw_response: Optional[str] = Field(
        default=None,
        description="Raw text returned by the model"
    )

    @property
    def has_data(self) -> bool:
        return self.amount is not None or bool(self.merchant)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'future_date')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of the two-stage validation.

    Stage 1: Schema validation (required fields, types)
    Stage 2: Semantic validation (suspicious but allowed values)
    """

    validated_at: datetime.datetime = Field(
        default_factory=_utcnow
    )

    schema_valid: bool = Field(
        ...,
        description="Did schema validation pass?"
    )
    semantic_valid: bool = Field(
        default=True,
        description="Did semantic validation pass without warnings?"
    )

    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )

    @property
    def is_valid(self) -> bool:
        """Only errors block submission; warnings are shown but allowed."""
        return self.schema_valid and not self.has_errors

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == "warning"]


# =============================================================================
# QUERY MODELS (aggregation and history results)
# =============================================================================

class RangeSummary(BaseModel):
    """Total and count of expenses inside a custom date range."""

    total: Decimal
    count: int = Field(ge=0)


class DailyPoint(BaseModel):
    """One bar of the 7-day trend chart."""

    label: str = Field(
        ...,
        description="Short day label, e.g. 'Mar 05'"
    )
    day: datetime.date
    amount: Decimal
    over_limit: bool = False


class DashboardSummary(BaseModel):
    """Everything the dashboard shows, computed from one snapshot."""

    today: datetime.date
    daily_total: Decimal
    daily_limit: Decimal
    is_over_limit: bool
    over_limit_percent: Optional[Decimal] = Field(
        default=None,
        description="Percent over the limit; None when the limit is zero"
    )
    limit_progress: Decimal = Field(
        ...,
        description="Progress bar fill, 0-100"
    )
    week_total: Decimal
    month_total: Decimal
    last_7_days: list[DailyPoint]
    custom_range: Optional[RangeSummary] = None


class HistoryResult(BaseModel):
    """Filtered, date-descending view of the expense list."""

    expenses: list[Expense] = Field(default_factory=list)
    count: int = Field(ge=0)
    total: Decimal
