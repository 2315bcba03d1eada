"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Traceability of every write to the record store
2. Debugging capability for failed scans and saves
3. Correlation of the events of one user action

The audit logger:
- Writes structured JSON lines through structlog
- Never raises (a logging problem must not break a save)
- Supports correlation IDs to trace related events
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from smartreceipt.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Keeps the most recent events in memory as well, so the views
    (and tests) can show what just happened.
    """

    def __init__(self, history_size: int = 100):
        self._logger = structlog.get_logger("smartreceipt.audit")
        self._history_size = history_size
        self._recent: list[AuditEvent] = []

    @property
    def recent_events(self) -> list[AuditEvent]:
        """Most recent events, newest last."""
        return list(self._recent)

    def log(self, event: AuditEvent) -> None:
        """Log an audit event at its severity."""
        self._recent.append(event)
        if len(self._recent) > self._history_size:
            del self._recent[0]

        log_dict = event.to_log_dict()
        try:
            if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # Log failure but don't raise
            structlog.get_logger("smartreceipt.audit").error(
                "audit_log_failed",
                error=str(e),
                event_id=str(event.event_id),
            )

    def log_expense_created(
        self,
        expense_id: str,
        merchant: str,
        amount: str,
        is_ai_generated: bool,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.expense_created(
            expense_id=expense_id,
            merchant=merchant,
            amount=amount,
            is_ai_generated=is_ai_generated,
            correlation_id=correlation_id,
        ))

    def log_expense_updated(
        self,
        expense_id: str,
        merchant: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.expense_updated(
            expense_id=expense_id,
            merchant=merchant,
            amount=amount,
            correlation_id=correlation_id,
        ))

    def log_expense_deleted(
        self,
        expense_id: str,
        found: bool,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.expense_deleted(
            expense_id=expense_id,
            found=found,
            correlation_id=correlation_id,
        ))

    def log_settings_saved(
        self,
        daily_limit: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.settings_saved(
            daily_limit=daily_limit,
            correlation_id=correlation_id,
        ))

    def log_validation_failed(
        self,
        form: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.validation_failed(
            form=form,
            issues=issues,
            correlation_id=correlation_id,
        ))

    def log_receipt_scan_started(
        self,
        upload_id: UUID,
        file_size: int,
        mime_type: str,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.receipt_scan_started(
            upload_id=upload_id,
            file_size=file_size,
            mime_type=mime_type,
            correlation_id=correlation_id,
        ))

    def log_receipt_scan_completed(
        self,
        scan_id: UUID,
        fields_found: list[str],
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.receipt_scan_completed(
            scan_id=scan_id,
            fields_found=fields_found,
            correlation_id=correlation_id,
        ))

    def log_receipt_scan_failed(
        self,
        upload_id: UUID,
        error_type: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.receipt_scan_failed(
            upload_id=upload_id,
            error_type=error_type,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_snapshot_reloaded(
        self,
        expense_count: int,
        daily_limit: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.snapshot_reloaded(
            expense_count=expense_count,
            daily_limit=daily_limit,
            correlation_id=correlation_id,
        ))

    def log_storage_error(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.storage_error(
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., scan and save).
    Pass it through all subsequent operations.
    """
    return uuid4()
