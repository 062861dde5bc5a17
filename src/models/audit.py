"""
Audit Models for Control Financiero

Every change to the ledger is logged for audit purposes.
This provides:
1. Traceability of who-changed-what in the single local store
2. Debugging information when the store degrades to empty
3. A way to reconstruct history, since the store keeps only current state

DESIGN DECISION: The audit trail is append-only, even for deleted ledger entries.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every mutation of the ledger has its own event type.
    """
    # Daily transactions
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"

    # Monthly expenses
    FIXED_EXPENSE_ADDED = "fixed_expense_added"
    FIXED_EXPENSE_DELETED = "fixed_expense_deleted"
    VARIABLE_EXPENSE_ADDED = "variable_expense_added"
    VARIABLE_EXPENSE_DELETED = "variable_expense_deleted"
    TAX_ADDED = "tax_added"
    TAX_DELETED = "tax_deleted"

    # Bills
    BILL_ADDED = "bill_added"
    BILL_STATUS_TOGGLED = "bill_status_toggled"
    BILL_DELETED = "bill_deleted"

    # Input
    INPUT_REJECTED = "input_rejected"

    # Dashboard
    NOTIFICATIONS_GENERATED = "notifications_generated"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


# Mutations that remove data, used to pick a severity
_DELETIONS = {
    AuditEventType.TRANSACTION_DELETED,
    AuditEventType.FIXED_EXPENSE_DELETED,
    AuditEventType.VARIABLE_EXPENSE_DELETED,
    AuditEventType.TAX_DELETED,
    AuditEventType.BILL_DELETED,
}


class AuditEvent(BaseModel):
    """
    A single audit event.

    One ledger change, rejected form or dashboard load.
    Serialized as one line of the JSON-lines trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
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

    # Which record the event is about
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'bill', 'tax')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Shared by the events of one UI action
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one UI action)"
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

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Triggered by a form or button rather than a page load"
    )

    def to_log_dict(self) -> dict:
        """
        Flat dict passed to structlog and written to the audit trail.
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

    def to_json_line(self) -> str:
        """One line of the JSON-lines audit file."""
        return json.dumps(self.to_log_dict(), ensure_ascii=False)


class AuditEventBuilder:
    """
    Builders for the events the flows emit.

    Usage:
        event = AuditEventBuilder.entity_changed(AuditEventType.TAX_ADDED, "tax", tax.id, ...)
        event = AuditEventBuilder.input_rejected("bill", issues, correlation_id)
    """

    @staticmethod
    def entity_changed(
        event_type: AuditEventType,
        entity_type: str,
        entity_id: str,
        description: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=event_type,
            severity=(
                AuditSeverity.WARNING if event_type in _DELETIONS else AuditSeverity.INFO
            ),
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=description,
            details=details or {},
            is_user_action=True,
        )

    @staticmethod
    def transaction_added(
        transaction_id: str,
        date: str,
        transaction_type: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEventBuilder.entity_changed(
            AuditEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"{transaction_type.capitalize()} of {amount} recorded on {date}",
            details={
                "date": date,
                "type": transaction_type,
                "amount": amount,
            },
            correlation_id=correlation_id,
        )

    @staticmethod
    def bill_status_toggled(
        bill_id: str,
        old_status: str,
        new_status: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEventBuilder.entity_changed(
            AuditEventType.BILL_STATUS_TOGGLED,
            entity_type="bill",
            entity_id=bill_id,
            description=f"Bill status changed: {old_status} -> {new_status}",
            details={
                "old_status": old_status,
                "new_status": new_status,
            },
            correlation_id=correlation_id,
        )

    @staticmethod
    def input_rejected(
        form: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INPUT_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="form",
            correlation_id=correlation_id,
            description=f"{form} form rejected with {len(issues)} issues",
            error_message="; ".join(issue.get("message", "") for issue in issues),
            details={
                "form": form,
                "issues": issues,
            },
            is_user_action=True,
        )

    @staticmethod
    def notifications_generated(
        month: str,
        notification_ids: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.NOTIFICATIONS_GENERATED,
            severity=AuditSeverity.DEBUG,
            entity_type="month",
            entity_id=month,
            correlation_id=correlation_id,
            description=f"{len(notification_ids)} notifications for {month}",
            details={
                "notifications": notification_ids,
            },
        )
