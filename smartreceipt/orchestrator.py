"""
Main Orchestrator for SmartReceipt

This module ties together all the components and defines the
end-to-end flows for every user action:
1. Add / edit expense (form → validate → save or update → reload)
2. Delete expense (delete → reload)
3. Save settings (validate → save → reload)
4. Scan receipt (image → AI guess → pre-filled form, never saved)

DESIGN DECISION: The controller holds no snapshot of its own. Every
method takes the current AppState and returns the next one, and
every successful write is followed by a full reload from the record
store. If a write fails, the previous snapshot is kept untouched and
an error notice is shown instead.
"""

import asyncio
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Optional, Union
from uuid import UUID, uuid4

import structlog
from pydantic import ValidationError

from smartreceipt.audit import AuditLogger, create_correlation_id
from smartreceipt.config import get_settings
from smartreceipt.models.expense import (
    BudgetSettings,
    DashboardSummary,
    ExpenseDraft,
    HistoryResult,
    ValidationIssue,
    ValidationResult,
    ViewType,
    normalize_category,
)
from smartreceipt.models.state import AppState, Notice
from smartreceipt.queries import filter_history, summarize_dashboard
from smartreceipt.queries.dates import DateInput
from smartreceipt.services.receipt import GeminiReceiptService, ReceiptScanError
from smartreceipt.services.storage import (
    LocalRecordStore,
    NotFoundError,
    RecordStoreInterface,
    StorageError,
)
from smartreceipt.validation import ExpenseValidator


logger = structlog.get_logger(__name__)

SCAN_FAILED_MESSAGE = "Failed to scan receipt. Please try again or enter manually."
SAVE_FAILED_MESSAGE = "Could not save your changes. Nothing was changed, please try again."


class ExpenseController:
    """
    Orchestrates every mutating user action.

    Flow for each write:
    1. Validate → stop with a notice on failure (no store call)
    2. Write → the record store
    3. Reload → expenses and settings re-read in full
    4. Navigate → the landing view of the action

    There is a single logical thread of control; the only await is
    the receipt scan, guarded so a second scan cannot start while one
    is in flight.
    """

    def __init__(
        self,
        store: RecordStoreInterface,
        validator: Optional[ExpenseValidator] = None,
        receipt_service: Optional[GeminiReceiptService] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._validator = validator or ExpenseValidator()
        self._receipt_service = receipt_service
        self._audit_logger = audit_logger or AuditLogger()
        self._scan_lock = asyncio.Lock()

    @property
    def can_scan(self) -> bool:
        return self._receipt_service is not None and self._receipt_service.is_available

    @property
    def is_scanning(self) -> bool:
        return self._scan_lock.locked()

    # -------------------------------------------------------------------------
    # Snapshot
    # -------------------------------------------------------------------------

    def initial_state(self) -> AppState:
        """Load the first snapshot; a store failure starts from empty data."""
        return self.reload(AppState())

    def reload(
        self,
        state: AppState,
        correlation_id: Optional[UUID] = None,
    ) -> AppState:
        """Re-read expenses and settings from the record store."""
        try:
            expenses = self._store.load_expenses()
            settings = self._store.load_settings()
        except StorageError as e:
            self._audit_logger.log_storage_error(
                operation="reload",
                error_message=str(e),
                correlation_id=correlation_id,
            )
            return state.model_copy(update={
                "notice": Notice(level="error", text=f"Could not load your data: {e}"),
            })

        self._audit_logger.log_snapshot_reloaded(
            expense_count=len(expenses),
            daily_limit=str(settings.daily_limit),
            correlation_id=correlation_id,
        )
        return state.model_copy(update={"expenses": expenses, "settings": settings})

    # -------------------------------------------------------------------------
    # Navigation and form state
    # -------------------------------------------------------------------------

    def navigate(self, state: AppState, view: ViewType) -> AppState:
        """Switch views; leaving or re-entering a view drops any edit in progress."""
        return state.model_copy(update={
            "view": ViewType(view),
            "editing": None,
            "form": ExpenseDraft(),
            "notice": None,
            "validation": None,
        })

    def begin_edit(self, state: AppState, expense_id: str) -> AppState:
        """Open the form pre-populated from an existing expense."""
        try:
            expense = self._require_expense(state, expense_id)
        except NotFoundError as e:
            return state.model_copy(update={
                "notice": Notice(level="warning", text=str(e)),
            })

        return state.model_copy(update={
            "view": ViewType.ADD,
            "editing": expense,
            "form": ExpenseDraft.from_expense(expense),
            "notice": None,
            "validation": None,
        })

    def cancel_edit(self, state: AppState) -> AppState:
        return self.navigate(state, ViewType.DASHBOARD)

    def update_form(self, state: AppState, **fields) -> AppState:
        """
        Replace some fields of the draft.

        Input that cannot even be parsed (e.g. letters in the amount)
        is reported as a validation failure; the draft is left as it was.
        A successful change clears the feedback of the previous action.
        """
        try:
            form = ExpenseDraft.model_validate({**state.form.model_dump(), **fields})
        except ValidationError as e:
            return self._rejected(state, _result_from_error(e), "expense")
        return state.model_copy(update={"form": form, "notice": None, "validation": None})

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def submit_expense(self, state: AppState) -> AppState:
        """
        Save the form as a new expense, or replace the one being edited.

        CRITICAL: Nothing is written unless validation passes.
        """
        correlation_id = create_correlation_id()
        result = self._validator.validate(state.form)
        if not result.is_valid:
            return self._rejected(state, result, "expense", correlation_id)

        editing = state.editing
        try:
            expense = state.form.to_expense(editing.id if editing else None)
        except ValidationError as e:
            return self._rejected(state, _result_from_error(e), "expense", correlation_id)

        try:
            if editing:
                found = self._store.update_expense(expense)
                if found:
                    self._audit_logger.log_expense_updated(
                        expense_id=expense.id,
                        merchant=expense.merchant,
                        amount=str(expense.amount),
                        correlation_id=correlation_id,
                    )
            else:
                self._store.save_expense(expense)
                self._audit_logger.log_expense_created(
                    expense_id=expense.id,
                    merchant=expense.merchant,
                    amount=str(expense.amount),
                    is_ai_generated=expense.is_ai_generated,
                    correlation_id=correlation_id,
                )
        except StorageError as e:
            return self._storage_failure(state, "save_expense", e, correlation_id)

        saved = self.reload(state.model_copy(update={"notice": None}), correlation_id)
        return saved.model_copy(update={
            "view": ViewType.DASHBOARD,
            "editing": None,
            "form": ExpenseDraft(),
            "validation": None,
        })

    def delete_expense(self, state: AppState, expense_id: str) -> AppState:
        """Delete by id; an unknown id changes nothing and is not an error."""
        correlation_id = create_correlation_id()
        try:
            found = self._store.delete_expense(expense_id)
        except StorageError as e:
            return self._storage_failure(state, "delete_expense", e, correlation_id)

        self._audit_logger.log_expense_deleted(
            expense_id=expense_id,
            found=found,
            correlation_id=correlation_id,
        )
        deleted = self.reload(state.model_copy(update={"notice": None}), correlation_id)
        return deleted.model_copy(update={"view": ViewType.HISTORY})

    def save_settings(
        self,
        state: AppState,
        daily_limit: Union[str, int, float, Decimal, None],
    ) -> AppState:
        """Validate and save the daily limit, then reload."""
        correlation_id = create_correlation_id()
        limit, result = self._validator.validate_daily_limit(daily_limit)
        if limit is None:
            return self._rejected(state, result, "settings", correlation_id)

        try:
            self._store.save_settings(BudgetSettings(daily_limit=limit))
        except StorageError as e:
            return self._storage_failure(state, "save_settings", e, correlation_id)

        self._audit_logger.log_settings_saved(
            daily_limit=str(limit),
            correlation_id=correlation_id,
        )
        saved = self.reload(state.model_copy(update={"notice": None}), correlation_id)
        return saved.model_copy(update={
            "view": ViewType.SETTINGS,
            "validation": None,
            "notice": saved.notice or Notice(
                level="success",
                text="Settings saved successfully!",
            ),
        })

    # -------------------------------------------------------------------------
    # Receipt scanning
    # -------------------------------------------------------------------------

    async def scan_receipt(
        self,
        state: AppState,
        image: Union[bytes, str],
        mime_type: str = "image/jpeg",
    ) -> AppState:
        """
        Pre-fill the form from a receipt photo.

        On failure the form is left exactly as it was before the scan
        and the user is asked to retry or type the details in.
        """
        if self._receipt_service is None:
            return state.model_copy(update={
                "notice": Notice(
                    level="warning",
                    text="Receipt scanning is not available. Please enter the expense manually.",
                ),
            })
        if state.is_editing:
            return state.model_copy(update={
                "notice": Notice(level="warning", text="Receipts can only be scanned for new expenses."),
            })
        if self._scan_lock.locked():
            return state.model_copy(update={
                "notice": Notice(level="info", text="A receipt is already being scanned."),
            })

        correlation_id = create_correlation_id()
        async with self._scan_lock:
            upload_ref = uuid4()
            self._audit_logger.log_receipt_scan_started(
                upload_id=upload_ref,
                file_size=len(image),
                mime_type=mime_type,
                correlation_id=correlation_id,
            )
            try:
                scan = await self._receipt_service.scan_receipt(image, mime_type)
            except ReceiptScanError as e:
                self._audit_logger.log_receipt_scan_failed(
                    upload_id=upload_ref,
                    error_type=type(e).__name__,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
                return state.model_copy(update={
                    "notice": Notice(level="error", text=SCAN_FAILED_MESSAGE),
                })

        fields_found = [
            name for name in ("amount", "merchant", "category", "date")
            if getattr(scan, name) not in (None, "")
        ]
        self._audit_logger.log_receipt_scan_completed(
            scan_id=scan.scan_id,
            fields_found=fields_found,
            correlation_id=correlation_id,
        )

        form = state.form.model_copy(update={
            "amount": scan.amount if scan.amount is not None else state.form.amount,
            "merchant": scan.merchant or state.form.merchant,
            "category": (
                normalize_category(scan.category) if scan.category
                else state.form.category or normalize_category(None)
            ),
            "date": scan.date or state.form.date or date.today(),
            "is_ai_generated": True,
        })
        return state.model_copy(update={
            "form": form,
            "validation": None,
            "notice": Notice(
                level="success",
                text="Receipt scanned. Please check the details before saving.",
            ),
        })

    # -------------------------------------------------------------------------
    # Read-only views of the snapshot
    # -------------------------------------------------------------------------

    def dashboard(
        self,
        state: AppState,
        today: Optional[date] = None,
        range_start: DateInput = None,
        range_end: DateInput = None,
    ) -> DashboardSummary:
        return summarize_dashboard(
            state.expenses,
            state.settings,
            today or date.today(),
            range_start=range_start,
            range_end=range_end,
            week_start=get_settings().app.week_start_weekday,
        )

    def history(
        self,
        state: AppState,
        search_term: str = "",
        start_date: DateInput = None,
        end_date: DateInput = None,
    ) -> HistoryResult:
        return filter_history(state.expenses, search_term, start_date, end_date)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _require_expense(self, state: AppState, expense_id: str):
        for expense in state.expenses:
            if expense.id == expense_id:
                return expense
        raise NotFoundError(f"Expense not found: {expense_id}")

    def _rejected(
        self,
        state: AppState,
        result: ValidationResult,
        form: str,
        correlation_id: Optional[UUID] = None,
    ) -> AppState:
        """Show validation errors; the snapshot and the store are untouched."""
        self._audit_logger.log_validation_failed(
            form=form,
            issues=[
                {"field": i.field, "type": i.issue_type, "message": i.message}
                for i in result.issues
                if i.severity == "error"
            ],
            correlation_id=correlation_id,
        )
        return state.model_copy(update={
            "validation": result,
            "notice": Notice(
                level="error",
                text=self._validator.get_user_friendly_summary(result),
            ),
        })

    def _storage_failure(
        self,
        state: AppState,
        operation: str,
        error: StorageError,
        correlation_id: UUID,
    ) -> AppState:
        """Keep the previous snapshot and tell the user the write failed."""
        self._audit_logger.log_storage_error(
            operation=operation,
            error_message=str(error),
            correlation_id=correlation_id,
        )
        return state.model_copy(update={
            "notice": Notice(level="error", text=SAVE_FAILED_MESSAGE),
        })


def _result_from_error(error: ValidationError) -> ValidationResult:
    """Report input pydantic could not parse as schema errors."""
    issues = [
        ValidationIssue(
            field=".".join(str(part) for part in detail["loc"]) or "form",
            issue_type="invalid_format",
            message=detail["msg"],
            severity="error",
        )
        for detail in error.errors()
    ]
    return ValidationResult(schema_valid=False, issues=issues)


def create_app_components(
    data_dir: Optional[Path] = None,
    use_ai: bool = True,
    store: Optional[RecordStoreInterface] = None,
) -> ExpenseController:
    """
    Factory function to create the application controller.

    Args:
        data_dir: Where the JSON documents live (defaults to settings)
        use_ai: Whether to enable receipt scanning. Scanning is also
                skipped when no Gemini API key is configured.
        store: A ready record store, overriding data_dir

    Returns:
        The wired ExpenseController
    """
    audit_logger = AuditLogger()
    store = store or LocalRecordStore(data_dir=data_dir, audit_logger=audit_logger)

    receipt_service = None
    if use_ai:
        if get_settings().gemini.is_configured:
            receipt_service = GeminiReceiptService()
        else:
            logger.warning("receipt_scanning_disabled", reason="GEMINI_API_KEY is not set")

    return ExpenseController(
        store=store,
        validator=ExpenseValidator(),
        receipt_service=receipt_service,
        audit_logger=audit_logger,
    )
