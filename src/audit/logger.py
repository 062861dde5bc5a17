"""
Audit Logger

DESIGN DECISION: Every change to the ledger is logged.
This provides:
1. Traceability of the single local store
2. Debugging capability when reads degrade to empty data
3. User can see history of their entries

The audit logger:
- Never lets a failing audit store break the form that triggered it
- Tags every event of one UI action with the same correlation id
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from src.models.audit import AuditEvent, AuditEventBuilder, AuditEventType
from src.services.storage import AuditStorageInterface


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
    Writes ledger audit events.

    Logs events both to:
    1. The structlog "audit" logger (JSON on stderr)
    2. An audit store, when one is configured (JSON-lines file or memory)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Where events are appended.
                    If None, events only go to the local log.
        """
        self._storage = storage
        self._logger = structlog.get_logger("audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Routes the event to the local log by severity, then appends it to the store.

        Returns False only when the store rejected or failed the append.
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # The ledger write already happened; keep going
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_transaction_added(
        self,
        transaction_id: str,
        date: str,
        transaction_type: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a new income or expense."""
        event = AuditEventBuilder.transaction_added(
            transaction_id=transaction_id,
            date=date,
            transaction_type=transaction_type,
            amount=amount,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_entity_changed(
        self,
        event_type: AuditEventType,
        entity_type: str,
        entity_id: str,
        description: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log any other add, update or delete."""
        event = AuditEventBuilder.entity_changed(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            description=description,
            details=details,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_bill_status_toggled(
        self,
        bill_id: str,
        old_status: str,
        new_status: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.bill_status_toggled(
            bill_id=bill_id,
            old_status=old_status,
            new_status=new_status,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_input_rejected(
        self,
        form: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a form that failed validation."""
        event = AuditEventBuilder.input_rejected(
            form=form,
            issues=issues,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_notifications_generated(
        self,
        month: str,
        notification_ids: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.notifications_generated(
            month=month,
            notification_ids=notification_ids,
            correlation_id=correlation_id,
        )
        self.log(event)


def create_correlation_id() -> UUID:
    """
    New id shared by every audit event of one UI action.

    Use this at the start of a new user action (e.g., saving a form).
    Flows create one when the caller does not pass it.
    """
    return uuid4()
