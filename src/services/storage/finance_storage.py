"""
Finance Storage Accessor

DESIGN DECISION: The whole ledger is one JSON object under a single key
(`finance_data`), mapping YYYY-MM month keys to month records. Bills are
global and live under a second key (`finance_bills`).

FAILURE SEMANTICS:
- Missing data is never an error: reads fall back to empty records
- A corrupted blob reads as an empty store; a single month record with the
  wrong shape reads as that month being absent
- An unavailable medium makes reads empty and writes no-ops
- Every degradation is logged as a warning, nothing is raised to callers

Writes replace a whole record (one month, or the bill list). Other month
records are written back exactly as they were read, including ones that
failed validation, so a bad record is never silently destroyed by an
unrelated write.
"""

import json
from datetime import date
from decimal import Decimal
from typing import Any, Optional

import structlog
from pydantic import ValidationError

from src.aggregation import calculate_calendar_totals, calculate_month_summary
from src.config import StorageSettings
from src.models.finance import (
    Bill,
    BillDraft,
    CalendarMonthTotals,
    DayData,
    FixedExpense,
    MonthData,
    MonthlyExpenseDraft,
    MonthSummary,
    PaymentMethod,
    Tax,
    Transaction,
    TransactionDraft,
    TransactionType,
    VariableExpense,
    derive_bill_status,
    toggled_bill_status,
)
from src.services.storage.backends import create_backend
from src.services.storage.interface import (
    KeyValueBackend,
    StorageUnavailableError,
)
from src.utils.dates import month_key_of


logger = structlog.get_logger(__name__)

DEFAULT_DATA_KEY = "finance_data"
DEFAULT_BILLS_KEY = "finance_bills"

# MonthData attribute holding each kind of monthly expense
_FIXED = "fixed_expenses"
_VARIABLE = "variable_expenses"
_TAXES = "taxes"


def _encode_decimal(value: Any) -> float:
    """Raw records read back with Decimal amounts are written as numbers."""
    if isinstance(value, Decimal):
        return float(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def scoped_key(key: str, namespace: Optional[str]) -> str:
    """Prefix a storage key with a per-user namespace, if any."""
    return f"{namespace}:{key}" if namespace else key


class FinanceStorage:
    """
    Durable mapping month key -> month record, with day and entity level
    convenience accessors.

    All operations are synchronous; each completes before returning.
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        data_key: str = DEFAULT_DATA_KEY,
        bills_key: str = DEFAULT_BILLS_KEY,
        namespace: Optional[str] = None,
    ):
        self._backend = backend
        self._data_key = scoped_key(data_key, namespace)
        self._bills_key = scoped_key(bills_key, namespace)

    @classmethod
    def from_settings(
        cls,
        settings: StorageSettings,
        backend: Optional[KeyValueBackend] = None,
    ) -> "FinanceStorage":
        return cls(
            backend=backend or create_backend(settings),
            data_key=settings.data_key,
            bills_key=settings.bills_key,
            namespace=settings.namespace,
        )

    @property
    def data_key(self) -> str:
        return self._data_key

    @property
    def bills_key(self) -> str:
        return self._bills_key

    # -------------------------------------------------------------------------
    # Raw access
    # -------------------------------------------------------------------------

    def _read_json(self, key: str) -> Any:
        """Decoded value under `key`, or None if absent, unreadable or corrupt."""
        try:
            raw = self._backend.get(key)
        except StorageUnavailableError as e:
            logger.warning("storage_unavailable", key=key, operation="read", error=str(e))
            return None

        if raw is None:
            return None

        try:
            return json.loads(raw, parse_float=Decimal)
        except json.JSONDecodeError as e:
            logger.warning("store_corrupted", key=key, error=str(e))
            return None

    def _write_json(self, key: str, payload: Any) -> None:
        try:
            self._backend.set(
                key,
                json.dumps(payload, ensure_ascii=False, default=_encode_decimal),
            )
        except StorageUnavailableError as e:
            logger.warning("storage_unavailable", key=key, operation="write", error=str(e))

    def _read_raw_store(self) -> dict:
        raw = self._read_json(self._data_key)
        if raw is None:
            return {}
        if not isinstance(raw, dict):
            logger.warning("store_corrupted", key=self._data_key, error="not a JSON object")
            return {}
        return raw

    @staticmethod
    def _parse_month(key: str, record: Any) -> Optional[MonthData]:
        try:
            month_data = MonthData.model_validate(record)
        except ValidationError as e:
            logger.warning("month_record_skipped", month=key, errors=e.error_count())
            return None
        if month_data.month != key:
            logger.warning(
                "month_record_skipped",
                month=key,
                reason=f"record is for {month_data.month}",
            )
            return None
        return month_data

    # -------------------------------------------------------------------------
    # Months and days
    # -------------------------------------------------------------------------

    def get_all_data(self) -> dict[str, MonthData]:
        """Every readable month record, keyed by month."""
        data = {}
        for key, record in self._read_raw_store().items():
            month_data = self._parse_month(key, record)
            if month_data is not None:
                data[key] = month_data
        return data

    def get_month(self, month: str) -> MonthData:
        """Stored month, or an empty one. Never fails."""
        record = self._read_raw_store().get(month)
        if record is not None:
            month_data = self._parse_month(month, record)
            if month_data is not None:
                return month_data
        return MonthData(month=month)

    def save_month(self, month: str, data: MonthData) -> None:
        """Replace the whole month record and persist the store."""
        if data.month != month:
            raise ValueError(f"Month record for {data.month} cannot be saved under {month}")
        store = self._read_raw_store()
        store[month] = data.to_json_dict()
        self._write_json(self._data_key, store)

    def get_day(self, date: str) -> DayData:
        """Stored day, or an empty one. Never fails."""
        month_data = self.get_month(month_key_of(date))
        day = month_data.days.get(date)
        return day if day is not None else DayData(date=date)

    def save_day(self, date: str, data: DayData) -> None:
        """Replace one day inside its month and persist."""
        month = month_key_of(date)
        month_data = self.get_month(month)
        month_data.days[date] = data
        self.save_month(month, month_data)

    def list_available_months(self) -> list[str]:
        """Month keys with data, most recent first."""
        return sorted(self.get_all_data().keys(), reverse=True)

    # -------------------------------------------------------------------------
    # Daily transactions
    # -------------------------------------------------------------------------

    def add_transaction(self, date: str, draft: TransactionDraft) -> Transaction:
        """Store a new income or expense on `date` and return it with its id."""
        day = self.get_day(date)
        transaction = Transaction(date=date, **draft.model_dump())

        if transaction.type == TransactionType.INCOME:
            day.incomes.append(transaction)
        else:
            day.expenses.append(transaction)

        self.save_day(date, day)
        return transaction

    def delete_transaction(
        self,
        date: str,
        transaction_id: str,
        transaction_type: TransactionType,
    ) -> bool:
        """
        Remove a transaction by id from the given collection.

        Returns False, and writes nothing, when the id is not there.
        """
        day = self.get_day(date)
        attr = "incomes" if transaction_type == TransactionType.INCOME else "expenses"
        items = getattr(day, attr)
        remaining = [t for t in items if t.id != transaction_id]

        if len(remaining) == len(items):
            return False

        setattr(day, attr, remaining)
        self.save_day(date, day)
        return True

    def update_transaction(
        self,
        date: str,
        transaction_id: str,
        *,
        description: Optional[str] = None,
        amount=None,
        payment_method: Optional[PaymentMethod] = None,
    ) -> Optional[Transaction]:
        """
        Overwrite fields of a stored transaction.

        Only the fields passed are changed. Returns the updated transaction,
        or None if no transaction with that id exists on that day.
        """
        updates = {
            key: value
            for key, value in (
                ("description", description),
                ("amount", amount),
                ("payment_method", payment_method),
            )
            if value is not None
        }

        day = self.get_day(date)
        for items in (day.incomes, day.expenses):
            for index, transaction in enumerate(items):
                if transaction.id == transaction_id:
                    updated = Transaction.model_validate(
                        {**transaction.model_dump(), **updates}
                    )
                    items[index] = updated
                    self.save_day(date, day)
                    return updated
        return None

    # -------------------------------------------------------------------------
    # Monthly expenses and taxes
    # -------------------------------------------------------------------------

    def _add_monthly(self, month: str, draft: MonthlyExpenseDraft, attr: str, model):
        month_data = self.get_month(month)
        item = model(month=month, **draft.model_dump())
        getattr(month_data, attr).append(item)
        self.save_month(month, month_data)
        return item

    def _delete_monthly(self, month: str, item_id: str, attr: str) -> bool:
        month_data = self.get_month(month)
        items = getattr(month_data, attr)
        remaining = [item for item in items if item.id != item_id]

        if len(remaining) == len(items):
            return False

        setattr(month_data, attr, remaining)
        self.save_month(month, month_data)
        return True

    def add_fixed_expense(self, month: str, draft: MonthlyExpenseDraft) -> FixedExpense:
        return self._add_monthly(month, draft, _FIXED, FixedExpense)

    def delete_fixed_expense(self, month: str, expense_id: str) -> bool:
        return self._delete_monthly(month, expense_id, _FIXED)

    def add_variable_expense(self, month: str, draft: MonthlyExpenseDraft) -> VariableExpense:
        return self._add_monthly(month, draft, _VARIABLE, VariableExpense)

    def delete_variable_expense(self, month: str, expense_id: str) -> bool:
        return self._delete_monthly(month, expense_id, _VARIABLE)

    def add_tax(self, month: str, draft: MonthlyExpenseDraft) -> Tax:
        return self._add_monthly(month, draft, _TAXES, Tax)

    def delete_tax(self, month: str, tax_id: str) -> bool:
        return self._delete_monthly(month, tax_id, _TAXES)

    # -------------------------------------------------------------------------
    # Bills
    # -------------------------------------------------------------------------

    def get_bills(self) -> list[Bill]:
        """The global bill list, in insertion order. Unreadable entries are skipped."""
        raw = self._read_json(self._bills_key)
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning("store_corrupted", key=self._bills_key, error="not a JSON array")
            return []

        bills = []
        for record in raw:
            try:
                bills.append(Bill.model_validate(record))
            except ValidationError as e:
                logger.warning("bill_record_skipped", errors=e.error_count())
        return bills

    def _save_bills(self, bills: list[Bill]) -> None:
        self._write_json(self._bills_key, [bill.to_json_dict() for bill in bills])

    def add_bill(self, draft: BillDraft, today: Optional[date] = None) -> Bill:
        """
        Store a new bill.

        The status is derived once, here: overdue if the due date is already
        past, pending otherwise. It is not re-evaluated later.
        """
        today = today or date.today()
        bill = Bill(
            status=derive_bill_status(draft.due_date, today),
            **draft.model_dump(),
        )
        bills = self.get_bills()
        bills.append(bill)
        self._save_bills(bills)
        return bill

    def toggle_bill_status(self, bill_id: str) -> Optional[Bill]:
        """Flip a bill between paid and pending. None if the id is unknown."""
        bills = self.get_bills()
        for index, bill in enumerate(bills):
            if bill.id == bill_id:
                bills[index] = bill.model_copy(
                    update={"status": toggled_bill_status(bill.status)}
                )
                self._save_bills(bills)
                return bills[index]
        return None

    def delete_bill(self, bill_id: str) -> bool:
        bills = self.get_bills()
        remaining = [bill for bill in bills if bill.id != bill_id]
        if len(remaining) == len(bills):
            return False
        self._save_bills(remaining)
        return True

    # -------------------------------------------------------------------------
    # Derived reads
    # -------------------------------------------------------------------------

    def calculate_month_summary(self, month: str) -> MonthSummary:
        return calculate_month_summary(self.get_month(month))

    def calculate_calendar_totals(self, month: str) -> CalendarMonthTotals:
        return calculate_calendar_totals(self.get_month(month), self.get_bills())
