"""
Data Models Package

This package contains all Pydantic models used in SmartReceipt.
All data flowing through the system must conform to these schemas.
"""

from smartreceipt.models.expense import (
    CATEGORY_ICONS,
    DEFAULT_CATEGORY_ICON,
    KNOWN_CATEGORIES,
    BudgetSettings,
    DailyPoint,
    DashboardSummary,
    Expense,
    ExpenseCategory,
    ExpenseDraft,
    HistoryResult,
    ImageUpload,
    RangeSummary,
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

__all__ = [
    # Expense models
    "CATEGORY_ICONS",
    "DEFAULT_CATEGORY_ICON",
    "KNOWN_CATEGORIES",
    "BudgetSettings",
    "DailyPoint",
    "DashboardSummary",
    "Expense",
    "ExpenseCategory",
    "ExpenseDraft",
    "HistoryResult",
    "ImageUpload",
    "RangeSummary",
    "ReceiptScan",
    "ValidationIssue",
    "ValidationResult",
    "ViewType",
    "category_icon",
    "normalize_category",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
    # State
    "AppState",
    "Notice",
]
