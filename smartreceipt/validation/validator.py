"""
Two-Stage Validation Pipeline

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Required field presence (amount, merchant, category, date)
- Amount is a finite, non-negative number
- Any error here blocks the save

STAGE 2 - SEMANTIC VALIDATION:
- Future date detection
- Unusually large amount detection
- Category outside the known set
- These are warnings: shown to the user, never blocking

IMPORTANT: Validation NEVER silently fixes issues.
It reports them; the user decides.
"""

from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from smartreceipt.config import get_settings
from smartreceipt.models.expense import (
    KNOWN_CATEGORIES,
    ExpenseDraft,
    ValidationIssue,
    ValidationResult,
)


class ExpenseValidator:
    """
    Validates form input before anything reaches the record store.

    Stage 1: Schema validation (required fields)
    Stage 2: Semantic validation (suspicious values)
    """

    def __init__(self, today: Optional[date] = None):
        """
        Initialize validator.

        Args:
            today: Fixed reference day for date checks. Defaults to the
                   current day at validation time.
        """
        self._settings = get_settings().app
        self._today = today

    def _reference_day(self) -> date:
        return self._today or date.today()

    def _validate_schema(
        self,
        draft: ExpenseDraft,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 1: Schema validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        if draft.amount is None:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required",
                severity="error",
                suggested_fix="Enter the amount shown on the receipt",
            ))
        elif not draft.amount.is_finite():
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be a number",
                severity="error",
            ))
        elif draft.amount < 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount cannot be negative",
                severity="error",
                suggested_fix="Check if the amount was read correctly",
            ))

        if not draft.merchant:
            issues.append(ValidationIssue(
                field="merchant",
                issue_type="missing",
                message="Merchant / title is required",
                severity="error",
            ))

        if not draft.category:
            issues.append(ValidationIssue(
                field="category",
                issue_type="missing",
                message="Category is required",
                severity="error",
                suggested_fix="Pick a category, or use 'Other'",
            ))

        if draft.date is None:
            issues.append(ValidationIssue(
                field="date",
                issue_type="missing",
                message="Date is required",
                severity="error",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def _validate_semantic(
        self,
        draft: ExpenseDraft,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 2: Semantic validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []
        today = self._reference_day()

        max_future_date = today + timedelta(days=self._settings.future_date_tolerance_days)
        if draft.date and draft.date > max_future_date:
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Date ({draft.date.isoformat()}) is in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            ))

        max_amount = Decimal(str(self._settings.max_expense_amount))
        if draft.amount is not None and draft.amount.is_finite() and draft.amount > max_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ${draft.amount:,.2f} is unusually large",
                severity="warning",
                suggested_fix="Please verify the amount was read correctly",
            ))

        if draft.category and draft.category not in KNOWN_CATEGORIES:
            issues.append(ValidationIssue(
                field="category",
                issue_type="unknown_category",
                message=f"'{draft.category}' is not one of the standard categories",
                severity="info",
            ))

        is_valid = not any(issue.severity in ("error", "warning") for issue in issues)
        return is_valid, issues

    def validate(self, draft: ExpenseDraft) -> ValidationResult:
        """
        Run both validation stages on a form draft.

        Stage 2 is skipped when stage 1 finds errors.
        """
        schema_valid, issues = self._validate_schema(draft)
        semantic_valid = False

        if schema_valid:
            semantic_valid, semantic_issues = self._validate_semantic(draft)
            issues.extend(semantic_issues)

        return ValidationResult(
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            issues=issues,
        )

    def validate_daily_limit(
        self,
        value: Union[str, int, float, Decimal, None],
    ) -> tuple[Optional[Decimal], ValidationResult]:
        """
        Validate the settings form.

        Returns:
            (parsed_limit, validation_result). The limit is None when
            validation failed.
        """
        issue = None
        limit = None

        if value is None or (isinstance(value, str) and not value.strip()):
            issue = ValidationIssue(
                field="daily_limit",
                issue_type="missing",
                message="Daily limit is required",
                severity="error",
            )
        else:
            try:
                limit = Decimal(str(value).strip())
            except InvalidOperation:
                limit = None

            if limit is None or not limit.is_finite():
                issue = ValidationIssue(
                    field="daily_limit",
                    issue_type="invalid_value",
                    message=f"'{value}' is not a valid amount",
                    severity="error",
                )
                limit = None
            elif limit < 0:
                issue = ValidationIssue(
                    field="daily_limit",
                    issue_type="invalid_value",
                    message="Daily limit cannot be negative",
                    severity="error",
                )
                limit = None

        result = ValidationResult(
            schema_valid=issue is None,
            issues=[issue] if issue else [],
        )
        return limit, result

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """
        Generate a user-friendly summary of validation results.
        """
        if result.is_valid and not result.warnings:
            return "All details look good."

        lines = []
        if result.has_errors:
            lines.append("Please fill in all required fields:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"- {issue.message}")

        if result.warnings:
            lines.append("Please double-check:")
            for issue in result.warnings:
                line = f"- {issue.message}"
                if issue.suggested_fix:
                    line += f" ({issue.suggested_fix})"
                lines.append(line)

        return "\n".join(lines)
