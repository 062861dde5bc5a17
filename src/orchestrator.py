"""
Main Orchestrator for Control Financiero

This module ties together all the components and defines the
request/response flows behind every UI action:
1. Ledger (daily transactions, fixed/variable expenses, taxes)
2. Bills (cuentas a pagar)
3. Dashboard (totals, month summary, notifications)

Every mutating flow follows the same path:
    raw form input -> validate -> storage mutation -> audit
and the UI re-reads and re-aggregates afterwards.

DESIGN DECISION: The orchestrator enforces the boundaries:
- Raw strings never reach storage; rejected input is audited
- Storage is the only state; flows hold no per-user data between calls
"""

from datetime import date
from typing import Optional
from uuid import UUID

from src.aggregation import day_totals
from src.audit import AuditLogger, create_correlation_id
from src.config import Settings, get_settings
from src.models.audit import AuditEventType
from src.models.finance import (
    Bill,
    CalendarMonthTotals,
    DailyTotals,
    DayData,
    FixedExpense,
    MonthData,
    MonthSummary,
    PaymentMethod,
    Tax,
    Transaction,
    TransactionType,
    ValidationIssue,
    ValidationResult,
    VariableExpense,
)
from src.models.notification import Notification
from src.notifications import evaluate_notifications
from src.services.storage import (
    FinanceStorage,
    InMemoryAuditStorage,
    JsonLinesAuditStorage,
    KeyValueBackend,
)
from src.validation import FormInputValidator


def _issue_dicts(result: ValidationResult) -> list[dict]:
    return [
        {"field": i.field, "type": i.issue_type, "message": i.message}
        for i in result.issues
    ]


class LedgerFlow:
    """
    Daily transactions and monthly expenses.

    Record methods return (stored_record_or_None, validation_result).
    A None record means the input was rejected and nothing was written.
    """

    # form -> (storage add, storage delete, added event, deleted event)
    _MONTHLY = {
        "fixed_expense": (
            "add_fixed_expense",
            "delete_fixed_expense",
            AuditEventType.FIXED_EXPENSE_ADDED,
            AuditEventType.FIXED_EXPENSE_DELETED,
        ),
        "variable_expense": (
            "add_variable_expense",
            "delete_variable_expense",
            AuditEventType.VARIABLE_EXPENSE_ADDED,
            AuditEventType.VARIABLE_EXPENSE_DELETED,
        ),
        "tax": (
            "add_tax",
            "delete_tax",
            AuditEventType.TAX_ADDED,
            AuditEventType.TAX_DELETED,
        ),
    }

    def __init__(
        self,
        storage: FinanceStorage,
        validator: Optional[FormInputValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._validator = validator or FormInputValidator()
        self._audit_logger = audit_logger

    @property
    def validator(self) -> FormInputValidator:
        return self._validator

    def _reject(self, result: ValidationResult, correlation_id: Optional[UUID]) -> None:
        if self._audit_logger:
            self._audit_logger.log_input_rejected(
                form=result.form,
                issues=_issue_dicts(result),
                correlation_id=correlation_id,
            )

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def day_view(self, date: str) -> tuple[DayData, DailyTotals]:
        day = self._storage.get_day(date)
        return day, day_totals(day)

    def month_view(self, month: str) -> tuple[MonthData, MonthSummary]:
        """The month record together with its summary."""
        return self._storage.get_month(month), self._storage.calculate_month_summary(month)

    def calendar_totals(self, month: str) -> CalendarMonthTotals:
        """Calendar screen totals; unlike DashboardFlow.load this is not audited."""
        return self._storage.calculate_calendar_totals(month)

    def available_months(self) -> list[str]:
        return self._storage.list_available_months()

    # -------------------------------------------------------------------------
    # Daily transactions
    # -------------------------------------------------------------------------

    def record_transaction(
        self,
        date: str,
        transaction_type: str,
        amount: str,
        description: Optional[str] = None,
        payment_method: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[Optional[Transaction], ValidationResult]:
        """Validate the day form and store the transaction."""
        correlation_id = correlation_id or create_correlation_id()

        result, draft = self._validator.validate_transaction(
            date=date,
            transaction_type=transaction_type,
            amount=amount,
            description=description,
            payment_method=payment_method,
        )
        if draft is None:
            self._reject(result, correlation_id)
            return None, result

        transaction = self._storage.add_transaction(date.strip(), draft)

        if self._audit_logger:
            self._audit_logger.log_transaction_added(
                transaction_id=transaction.id,
                date=transaction.date,
                transaction_type=transaction.type.value,
                amount=str(transaction.amount),
                correlation_id=correlation_id,
            )

        return transaction, result

    def edit_transaction(
        self,
        date: str,
        transaction_id: str,
        amount: Optional[str] = None,
        description: Optional[str] = None,
        payment_method: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[Optional[Transaction], ValidationResult]:
        """
        Overwrite fields of an existing transaction.

        Fields left as None are unchanged. Returns (None, result) when the
        input is invalid or the transaction does not exist.
        """
        correlation_id = correlation_id or create_correlation_id()
        result = ValidationResult(form="transaction_edit")

        self._validator.parse_date_field(date, result.issues, field="date")

        parsed_amount = None
        if amount is not None:
            parsed_amount = self._validator.parse_amount(amount, result.issues)

        text = description.strip() if description else None
        self._validator.check_length(text, result.issues, "description", 200)

        method = None
        if payment_method is not None:
            try:
                method = PaymentMethod(payment_method.strip().lower())
            except ValueError:
                result.issues.append(ValidationIssue(
                    field="payment_method",
                    issue_type="invalid_value",
                    message="La forma de pago debe ser 'card' o 'cash'",
                    severity="error",
                ))

        if result.has_errors:
            self._reject(result, correlation_id)
            return None, result

        updated = self._storage.update_transaction(
            date.strip(),
            transaction_id,
            description=text or None,
            amount=parsed_amount,
            payment_method=method,
        )

        if updated is not None and self._audit_logger:
            self._audit_logger.log_entity_changed(
                event_type=AuditEventType.TRANSACTION_UPDATED,
                entity_type="transaction",
                entity_id=transaction_id,
                description=f"Transaction on {date} updated",
                details={"amount": str(updated.amount), "description": updated.description},
                correlation_id=correlation_id,
            )

        return updated, result

    def remove_transaction(
        self,
        date: str,
        transaction_id: str,
        transaction_type: TransactionType,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """Delete a transaction; False if it was not there or the date is malformed."""
        result = ValidationResult(form="transaction_delete")
        if self._validator.parse_date_field(date, result.issues, field="date") is None:
            self._reject(result, correlation_id)
            return False

        removed = self._storage.delete_transaction(date.strip(), transaction_id, transaction_type)

        if removed and self._audit_logger:
            self._audit_logger.log_entity_changed(
                event_type=AuditEventType.TRANSACTION_DELETED,
                entity_type="transaction",
                entity_id=transaction_id,
                description=f"{transaction_type.value.capitalize()} on {date} deleted",
                correlation_id=correlation_id,
            )

        return removed

    # -------------------------------------------------------------------------
    # Monthly expenses and taxes
    # -------------------------------------------------------------------------

    def _record_monthly(
        self,
        form: str,
        month: str,
        amount: str,
        description: str,
        correlation_id: Optional[UUID],
    ):
        correlation_id = correlation_id or create_correlation_id()
        add_name, _, added_event, _ = self._MONTHLY[form]

        result, draft = self._validator.validate_monthly_expense(
            month=month,
            amount=amount,
            description=description,
            form=form,
        )
        if draft is None:
            self._reject(result, correlation_id)
            return None, result

        item = getattr(self._storage, add_name)(month.strip(), draft)

        if self._audit_logger:
            self._audit_logger.log_entity_changed(
                event_type=added_event,
                entity_type=form,
                entity_id=item.id,
                description=f"{item.description}: {item.amount} ({item.month})",
                details={"month": item.month, "amount": str(item.amount)},
                correlation_id=correlation_id,
            )

        return item, result

    def _remove_monthly(
        self,
        form: str,
        month: str,
        item_id: str,
        correlation_id: Optional[UUID],
    ) -> bool:
        _, delete_name, _, deleted_event = self._MONTHLY[form]

        result = ValidationResult(form=f"{form}_delete")
        if self._validator.parse_month_field(month, result.issues) is None:
            self._reject(result, correlation_id)
            return False

        removed = getattr(self._storage, delete_name)(month.strip(), item_id)

        if removed and self._audit_logger:
            self._audit_logger.log_entity_changed(
                event_type=deleted_event,
                entity_type=form,
                entity_id=item_id,
                description=f"{form.replace('_', ' ').capitalize()} deleted from {month}",
                correlation_id=correlation_id,
            )

        return removed

    def record_fixed_expense(
        self,
        month: str,
        amount: str,
        description: str,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[Optional[FixedExpense], ValidationResult]:
        return self._record_monthly("fixed_expense", month, amount, description, correlation_id)

    def remove_fixed_expense(self, month: str, expense_id: str, correlation_id: Optional[UUID] = None) -> bool:
        return self._remove_monthly("fixed_expense", month, expense_id, correlation_id)

    def record_variable_expense(
        self,
        month: str,
        amount: str,
        description: str,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[Optional[VariableExpense], ValidationResult]:
        return self._record_monthly("variable_expense", month, amount, description, correlation_id)

    def remove_variable_expense(self, month: str, expense_id: str, correlation_id: Optional[UUID] = None) -> bool:
        return self._remove_monthly("variable_expense", month, expense_id, correlation_id)

    def record_tax(
        self,
        month: str,
        amount: str,
        description: str,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[Optional[Tax], ValidationResult]:
        return self._record_monthly("tax", month, amount, description, correlation_id)

    def remove_tax(self, month: str, tax_id: str, correlation_id: Optional[UUID] = None) -> bool:
        return self._remove_monthly("tax", month, tax_id, correlation_id)


class BillFlow:
    """Payable bills (cuentas a pagar)."""

    def __init__(
        self,
        storage: FinanceStorage,
        validator: Optional[FormInputValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._validator = validator or FormInputValidator()
        self._audit_logger = audit_logger

    @property
    def validator(self) -> FormInputValidator:
        return self._validator

    def list_bills(self) -> list[Bill]:
        return self._storage.get_bills()

    def record_bill(
        self,
        creditor: str,
        amount: str,
        due_date: str,
        description: Optional[str] = None,
        today: Optional[date] = None,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[Optional[Bill], ValidationResult]:
        """
        Validate the bill form and store the bill.

        A bill whose due date is already past is stored as overdue.
        """
        correlation_id = correlation_id or create_correlation_id()

        result, draft = self._validator.validate_bill(
            creditor=creditor,
            amount=amount,
            due_date=due_date,
            description=description,
        )
        if draft is None:
            if self._audit_logger:
                self._audit_logger.log_input_rejected(
                    form=result.form,
                    issues=_issue_dicts(result),
                    correlation_id=correlation_id,
                )
            return None, result

        bill = self._storage.add_bill(draft, today=today)

        if self._audit_logger:
            self._audit_logger.log_entity_changed(
                event_type=AuditEventType.BILL_ADDED,
                entity_type="bill",
                entity_id=bill.id,
                description=f"Bill from {bill.creditor}: {bill.amount} due {bill.due_date}",
                details={
                    "amount": str(bill.amount),
                    "due_date": bill.due_date.isoformat(),
                    "status": bill.status.value,
                },
                correlation_id=correlation_id,
            )

        return bill, result

    def toggle_bill(self, bill_id: str, correlation_id: Optional[UUID] = None) -> Optional[Bill]:
        """Flip paid <-> pending. None if the bill does not exist."""
        previous = next((b for b in self._storage.get_bills() if b.id == bill_id), None)
        bill = self._storage.toggle_bill_status(bill_id)

        if bill is not None and previous is not None and self._audit_logger:
            self._audit_logger.log_bill_status_toggled(
                bill_id=bill_id,
                old_status=previous.status.value,
                new_status=bill.status.value,
                correlation_id=correlation_id,
            )

        return bill

    def remove_bill(self, bill_id: str, correlation_id: Optional[UUID] = None) -> bool:
        removed = self._storage.delete_bill(bill_id)

        if removed and self._audit_logger:
            self._audit_logger.log_entity_changed(
                event_type=AuditEventType.BILL_DELETED,
                entity_type="bill",
                entity_id=bill_id,
                description="Bill deleted",
                correlation_id=correlation_id,
            )

        return removed


class DashboardFlow:
    """Totals, summary and notifications for one month."""

    def __init__(
        self,
        storage: FinanceStorage,
        settings: Optional[Settings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._settings = settings or get_settings()
        self._audit_logger = audit_logger

    def load(
        self,
        month: str,
        today: Optional[date] = None,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[CalendarMonthTotals, MonthSummary, list[Notification]]:
        """
        Compute everything the dashboard shows.

        Notifications are recomputed on every call; `today` drives the
        month-end reminder and defaults to the wall clock.
        """
        totals = self._storage.calculate_calendar_totals(month)
        summary = self._storage.calculate_month_summary(month)
        notifications = evaluate_notifications(
            totals,
            today=today,
            thresholds=self._settings.notifications,
            currency=self._settings.app.currency,
        )

        if self._audit_logger:
            self._audit_logger.log_notifications_generated(
                month=month,
                notification_ids=[n.id for n in notifications],
                correlation_id=correlation_id,
            )

        return totals, summary, notifications


def create_app_components(
    settings: Optional[Settings] = None,
    backend: Optional[KeyValueBackend] = None,
) -> tuple[LedgerFlow, BillFlow, DashboardFlow]:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to use (defaults to environment configuration)
        backend: Key-value medium to use instead of the configured one

    Returns:
        (ledger_flow, bill_flow, dashboard_flow)
    """
    settings = settings or get_settings()
    storage_settings = settings.storage

    storage = FinanceStorage.from_settings(storage_settings, backend=backend)

    if storage_settings.audit_log_path:
        audit_logger = AuditLogger(JsonLinesAuditStorage(storage_settings.audit_log_path))
    else:
        audit_logger = AuditLogger(InMemoryAuditStorage())

    validator = FormInputValidator()

    ledger_flow = LedgerFlow(storage, validator=validator, audit_logger=audit_logger)
    bill_flow = BillFlow(storage, validator=validator, audit_logger=audit_logger)
    dashboard_flow = DashboardFlow(storage, settings=settings, audit_logger=audit_logger)

    return ledger_flow, bill_flow, dashboard_flow
