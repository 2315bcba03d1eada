"""
Audit Models for SmartReceipt

Every significant action in the system produces an audit event.
This provides:
1. Traceability of every write to the record store
2. Debugging information when a scan or a save goes wrong
3. Correlation of the events that make up one user action

DESIGN DECISION: Audit events go to the structured log only.
They are never persisted, so they do not become an edit history.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.
    """
    # Expense lifecycle
    EXPENSE_CREATED = "expense_created"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"

    # Settings
    SETTINGS_SAVED = "settings_saved"

    # Validation
    VALIDATION_FAILED = "validation_failed"

    # Receipt scanning
    RECEIPT_SCAN_STARTED = "receipt_scan_started"
    RECEIPT_SCAN_COMPLETED = "receipt_scan_completed"
    RECEIPT_SCAN_FAILED = "receipt_scan_failed"

    # Storage
    SNAPSHOT_RELOADED = "snapshot_reloaded"
    STORAGE_ERROR = "storage_error"
    CORRUPT_RECORD_SKIPPED = "corrupt_record_skipped"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'settings', 'receipt')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one scan-and-save)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_created(expense_id, merchant, amount)
        event = AuditEventBuilder.receipt_scan_failed(upload_id, error, correlation_id)
    """

    @staticmethod
    def expense_created(
        expense_id: str,
        merchant: str,
        amount: str,
        is_ai_generated: bool,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_CREATED,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense saved: {merchant} - ${amount}",
            details={
                "merchant": merchant,
                "amount": amount,
                "is_ai_generated": is_ai_generated,
            },
            is_user_action=True,
        )

    @staticmethod
    def expense_updated(
        expense_id: str,
        merchant: str,
        amount: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_UPDATED,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense updated: {merchant} - ${amount}",
            details={
                "merchant": merchant,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def expense_deleted(
        expense_id: str,
        found: bool,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=(
                "Expense deleted" if found
                else "Delete requested for unknown expense (no-op)"
            ),
            details={
                "found": found,
            },
            is_user_action=True,
        )

    @staticmethod
    def settings_saved(
        daily_limit: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SETTINGS_SAVED,
            entity_type="settings",
            correlation_id=correlation_id,
            description=f"Daily limit set to ${daily_limit}",
            details={
                "daily_limit": daily_limit,
            },
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(
        form: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type=form,
            correlation_id=correlation_id,
            description=f"{form.capitalize()} validation failed with {len(issues)} issues",
            details={
                "issues": issues,
            },
            is_user_action=True,
        )

    @staticmethod
    def receipt_scan_started(
        upload_id: UUID,
        file_size: int,
        mime_type: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECEIPT_SCAN_STARTED,
            entity_type="receipt",
            entity_id=str(upload_id),
            correlation_id=correlation_id,
            description="Receipt image sent for scanning",
            details={
                "file_size_bytes": file_size,
                "mime_type": mime_type,
            },
            is_user_action=True,
        )

    @staticmethod
    def receipt_scan_completed(
        scan_id: UUID,
        fields_found: list[str],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECEIPT_SCAN_COMPLETED,
            entity_type="receipt",
            entity_id=str(scan_id),
            correlation_id=correlation_id,
            description=f"Receipt scanned, {len(fields_found)} fields found",
            details={
                "fields_found": fields_found,
            },
        )

    @staticmethod
    def receipt_scan_failed(
        upload_id: UUID,
        error_type: str,
        error_message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECEIPT_SCAN_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="receipt",
            entity_id=str(upload_id),
            correlation_id=correlation_id,
            description=f"Receipt scan failed: {error_type}",
            error_message=error_message,
            details={
                "error_type": error_type,
            },
        )

    @staticmethod
    def snapshot_reloaded(
        expense_count: int,
        daily_limit: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_RELOADED,
            severity=AuditSeverity.DEBUG,
            correlation_id=correlation_id,
            description=f"Snapshot reloaded with {expense_count} expenses",
            details={
                "expense_count": expense_count,
                "daily_limit": daily_limit,
            },
        )

    @staticmethod
    def storage_error(
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            correlation_id=correlation_id,
            description=f"Storage error during {operation}",
            error_message=error_message,
            details={
                "operation": operation,
            },
        )

    @staticmethod
    def corrupt_record_skipped(
        key: str,
        reason: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CORRUPT_RECORD_SKIPPED,
            severity=AuditSeverity.WARNING,
            entity_type="document",
            entity_id=key,
            description=f"Unreadable data under '{key}' ignored",
            error_message=reason,
        )
