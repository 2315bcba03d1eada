"""Form validation package."""

from smartreceipt.validation.validator import ExpenseValidator

__all__ = ["ExpenseValidator"]
