"""
Tests for the finance storage accessor and its backends.

Storage never raises on bad or missing data: every degradation reads as
empty. These tests pin that down along with the persisted layout.
"""

import json
from datetime import date
from decimal import Decimal
from typing import Optional

import pytest

from src.config import StorageSettings
from src.models.finance import (
    BillDraft,
    BillStatus,
    DayData,
    MonthData,
    MonthlyExpenseDraft,
    PaymentMethod,
    TransactionDraft,
    TransactionType,
)
from src.services.storage import (
    FinanceStorage,
    InMemoryBackend,
    JsonFileBackend,
    KeyValueBackend,
    StorageUnavailableError,
    create_backend,
    scoped_key,
)


class UnavailableBackend(KeyValueBackend):
    """A medium that refuses every read and write."""

    def __init__(self):
        self.writes = 0

    def get(self, key: str) -> Optional[str]:
        raise StorageUnavailableError("quota exceeded")

    def set(self, key: str, value: str) -> None:
        self.writes += 1
        raise StorageUnavailableError("quota exceeded")


def income(amount: str = "1500", method=PaymentMethod.CARD) -> TransactionDraft:
    return TransactionDraft(
        description="Nómina",
        amount=Decimal(amount),
        type=TransactionType.INCOME,
        payment_method=method,
    )


def expense(amount: str = "20") -> TransactionDraft:
    return TransactionDraft(
        description="Compra",
        amount=Decimal(amount),
        type=TransactionType.EXPENSE,
    )


def monthly(amount: str = "700", description: str = "Alquiler") -> MonthlyExpenseDraft:
    return MonthlyExpenseDraft(description=description, amount=Decimal(amount))


def raw_store(backend: KeyValueBackend, key: str = "finance_data") -> dict:
    return json.loads(backend.get(key))


class TestMonthsAndDays:
    """Tests for month and day records."""

    def test_missing_month_is_empty(self, storage):
        month = storage.get_month("2024-03")
        assert month == MonthData(month="2024-03")

    def test_missing_day_is_empty(self, storage):
        assert storage.get_day("2024-03-05") == DayData(date="2024-03-05")

    def test_reads_are_stable(self, storage):
        storage.add_transaction("2024-03-05", income())
        assert storage.get_month("2024-03") == storage.get_month("2024-03")

    def test_save_and_read_month(self, storage):
        month = MonthData(month="2024-03")
        month.days["2024-03-05"] = DayData(date="2024-03-05")
        storage.save_month("2024-03", month)
        assert storage.get_month("2024-03") == month

    def test_save_is_idempotent(self, storage, backend):
        """Test that saving the same month twice leaves the same store."""
        storage.add_fixed_expense("2024-03", monthly())
        month = storage.get_month("2024-03")
        storage.save_month("2024-03", month)
        first = backend.get("finance_data")
        storage.save_month("2024-03", month)
        assert backend.get("finance_data") == first

    def test_save_under_wrong_key_rejected(self, storage):
        with pytest.raises(ValueError):
            storage.save_month("2024-04", MonthData(month="2024-03"))

    def test_saving_one_month_keeps_others(self, storage):
        storage.add_fixed_expense("2024-03", monthly())
        storage.add_fixed_expense("2024-04", monthly("50", "Gimnasio"))
        assert storage.get_month("2024-03").fixed_expenses[0].description == "Alquiler"
        assert storage.get_month("2024-04").fixed_expenses[0].description == "Gimnasio"

    def test_available_months_most_recent_first(self, storage):
        for month in ("2024-01", "2024-03", "2023-12"):
            storage.add_tax(month, monthly("10", "IVA"))
        assert storage.list_available_months() == ["2024-03", "2024-01", "2023-12"]


class TestTransactions:
    """Tests for daily transactions."""

    def test_add_transaction(self, storage):
        transaction = storage.add_transaction("2024-03-05", income())
        day = storage.get_day("2024-03-05")
        assert day.incomes == [transaction]
        assert day.expenses == []
        assert transaction.date == "2024-03-05"

    def test_persisted_layout(self, storage, backend):
        """Test the camelCase JSON written for a day."""
        storage.add_transaction("2024-03-05", income("12.5"))
        stored = raw_store(backend)["2024-03"]
        assert set(stored) == {"month", "fixedExpenses", "variableExpenses", "taxes", "days"}
        entry = stored["days"]["2024-03-05"]["incomes"][0]
        assert entry["amount"] == 12.5
        assert entry["paymentMethod"] == "card"
        assert entry["type"] == "income"

    def test_amounts_keep_cents_after_reload(self, storage):
        """Test that cents do not drift through the JSON round trip."""
        storage.add_transaction("2024-03-05", income("0.10"))
        storage.add_transaction("2024-03-05", income("0.20"))
        incomes = storage.get_day("2024-03-05").incomes
        assert sum(t.amount for t in incomes) == Decimal("0.3")

    def test_delete_transaction(self, storage):
        kept = storage.add_transaction("2024-03-05", expense("10"))
        removed = storage.add_transaction("2024-03-05", expense("20"))
        assert storage.delete_transaction("2024-03-05", removed.id, TransactionType.EXPENSE)
        assert storage.get_day("2024-03-05").expenses == [kept]

    def test_delete_unknown_writes_nothing(self, storage, backend):
        storage.add_transaction("2024-03-05", expense())
        before = backend.get("finance_data")
        assert not storage.delete_transaction("2024-03-05", "missing", TransactionType.EXPENSE)
        assert backend.get("finance_data") == before

    def test_delete_looks_in_the_given_collection_only(self, storage):
        transaction = storage.add_transaction("2024-03-05", income())
        assert not storage.delete_transaction("2024-03-05", transaction.id, TransactionType.EXPENSE)
        assert storage.get_day("2024-03-05").incomes == [transaction]

    def test_update_transaction(self, storage):
        transaction = storage.add_transaction("2024-03-05", income())
        updated = storage.update_transaction(
            "2024-03-05",
            transaction.id,
            amount=Decimal("1600"),
            payment_method=PaymentMethod.CASH,
        )
        assert updated.id == transaction.id
        assert updated.amount == Decimal("1600")
        assert updated.description == "Nómina"
        assert storage.get_day("2024-03-05").incomes == [updated]

    def test_update_unknown_transaction(self, storage):
        assert storage.update_transaction("2024-03-05", "missing", description="x") is None


class TestMonthlyItems:
    """Tests for fixed expenses, variable expenses and taxes."""

    def test_add_and_delete_each_kind(self, storage):
        fixed = storage.add_fixed_expense("2024-03", monthly())
        variable = storage.add_variable_expense("2024-03", monthly("35", "Regalo"))
        tax = storage.add_tax("2024-03", monthly("400", "IVA"))

        month = storage.get_month("2024-03")
        assert month.fixed_expenses == [fixed]
        assert month.variable_expenses == [variable]
        assert month.taxes == [tax]
        assert tax.month == "2024-03"

        assert storage.delete_fixed_expense("2024-03", fixed.id)
        assert storage.delete_variable_expense("2024-03", variable.id)
        assert storage.delete_tax("2024-03", tax.id)
        month = storage.get_month("2024-03")
        assert month.fixed_expenses == month.variable_expenses == month.taxes == []

    def test_delete_unknown_item(self, storage):
        storage.add_tax("2024-03", monthly("400", "IVA"))
        assert not storage.delete_tax("2024-03", "missing")
        assert not storage.delete_fixed_expense("2024-05", "missing")


class TestBills:
    """Tests for the global bill list."""

    def draft(self, due: date) -> BillDraft:
        return BillDraft(creditor="Iberdrola", amount=Decimal("80"), due_date=due, description="Luz")

    def test_new_bill_status(self, storage):
        """Test that status is derived from the due date at creation."""
        today = date(2024, 3, 10)
        overdue = storage.add_bill(self.draft(date(2024, 3, 1)), today=today)
        pending = storage.add_bill(self.draft(date(2024, 3, 20)), today=today)
        assert overdue.status == BillStatus.OVERDUE
        assert pending.status == BillStatus.PENDING
        assert storage.get_bills() == [overdue, pending]

    def test_bill_persisted_layout(self, storage, backend):
        storage.add_bill(self.draft(date(2024, 3, 20)), today=date(2024, 3, 10))
        entry = raw_store(backend, "finance_bills")[0]
        assert entry["dueDate"] == "2024-03-20"
        assert entry["status"] == "pending"
        assert entry["amount"] == 80.0

    def test_toggle_cycle(self, storage):
        """Test overdue -> paid -> pending; overdue never comes back."""
        bill = storage.add_bill(self.draft(date(2024, 3, 1)), today=date(2024, 3, 10))
        assert storage.toggle_bill_status(bill.id).status == BillStatus.PAID
        assert storage.toggle_bill_status(bill.id).status == BillStatus.PENDING
        assert storage.get_bills()[0].status == BillStatus.PENDING

    def test_toggle_unknown(self, storage):
        assert storage.toggle_bill_status("missing") is None

    def test_delete_bill(self, storage):
        bill = storage.add_bill(self.draft(date(2024, 3, 20)), today=date(2024, 3, 10))
        assert storage.delete_bill(bill.id)
        assert not storage.delete_bill(bill.id)
        assert storage.get_bills() == []

    def test_invalid_bill_entries_skipped(self):
        backend = InMemoryBackend({
            "finance_bills": json.dumps([
                {"id": "b1", "creditor": "A", "amount": 10, "dueDate": "2024-03-01", "status": "pending"},
                {"id": "b2", "creditor": "", "amount": 10, "dueDate": "2024-03-01"},
            ]),
        })
        bills = FinanceStorage(backend).get_bills()
        assert [b.id for b in bills] == ["b1"]

    def test_calendar_totals_include_bills(self, storage):
        storage.add_transaction("2024-03-05", income("1000"))
        storage.add_bill(self.draft(date(2024, 3, 1)), today=date(2024, 3, 10))
        totals = storage.calculate_calendar_totals("2024-03")
        assert totals.cuentas_vencidas == Decimal("80")
        assert totals.balance == Decimal("920")

    def test_month_summary(self, storage):
        storage.add_transaction("2024-03-05", income("1000"))
        storage.add_fixed_expense("2024-03", monthly("300"))
        assert storage.calculate_month_summary("2024-03").final_profit == Decimal("700")


class TestDegradation:
    """Tests for corrupt data and unavailable media."""

    def test_corrupt_blob_reads_as_empty(self):
        storage = FinanceStorage(InMemoryBackend({"finance_data": "{not json"}))
        assert storage.get_all_data() == {}
        assert storage.get_month("2024-03") == MonthData(month="2024-03")
        assert storage.list_available_months() == []

    def test_non_object_blob_reads_as_empty(self):
        storage = FinanceStorage(InMemoryBackend({"finance_data": "[1, 2]"}))
        assert storage.get_all_data() == {}

    def test_corrupt_blob_replaced_on_write(self):
        backend = InMemoryBackend({"finance_data": "{not json"})
        storage = FinanceStorage(backend)
        storage.add_tax("2024-03", monthly("10", "IVA"))
        assert list(raw_store(backend)) == ["2024-03"]

    def test_invalid_month_record_is_absent(self, backend):
        """Test that one bad month does not hide the others."""
        backend.set("finance_data", json.dumps({
            "2024-03": {"month": "2024-03", "fixedExpenses": [{"amount": -5}]},
            "2024-04": {"month": "2024-04", "fixedExpenses": [], "variableExpenses": [], "days": {}},
        }))
        storage = FinanceStorage(backend)
        assert list(storage.get_all_data()) == ["2024-04"]
        assert storage.get_month("2024-03") == MonthData(month="2024-03")

    def test_mismatched_month_record_is_absent(self, backend):
        backend.set("finance_data", json.dumps({
            "2024-03": {"month": "2024-04", "fixedExpenses": [], "variableExpenses": [], "days": {}},
        }))
        storage = FinanceStorage(backend)
        assert storage.get_month("2024-03").month == "2024-03"
        assert storage.get_all_data() == {}

    def test_bad_records_survive_unrelated_writes(self, backend):
        backend.set("finance_data", json.dumps({
            "2024-03": {"month": "2024-04", "fixedExpenses": []},
        }))
        storage = FinanceStorage(backend)
        storage.add_tax("2024-05", monthly("10", "IVA"))
        assert raw_store(backend)["2024-03"]["month"] == "2024-04"

    def test_unavailable_backend(self):
        """Test that reads come back empty and writes do not raise."""
        backend = UnavailableBackend()
        storage = FinanceStorage(backend)

        assert storage.get_month("2024-03") == MonthData(month="2024-03")
        assert storage.get_bills() == []
        transaction = storage.add_transaction("2024-03-05", income())
        assert transaction.id
        assert backend.writes == 1
        assert storage.list_available_months() == []


class TestNamespaces:
    """Tests for per-user key prefixes."""

    def test_scoped_key(self):
        assert scoped_key("finance_data", None) == "finance_data"
        assert scoped_key("finance_data", "ana") == "ana:finance_data"

    def test_namespaces_are_isolated(self, backend):
        ana = FinanceStorage(backend, namespace="ana")
        luis = FinanceStorage(backend, namespace="luis")

        ana.add_transaction("2024-03-05", income())
        assert luis.get_day("2024-03-05").is_empty
        assert backend.get("ana:finance_data") is not None
        assert backend.get("finance_data") is None

    def test_from_settings(self, backend):
        settings = StorageSettings(namespace="ana", bills_key="cuentas")
        storage = FinanceStorage.from_settings(settings, backend=backend)
        assert storage.data_key == "ana:finance_data"
        assert storage.bills_key == "ana:cuentas"

    def test_blank_namespace_is_none(self):
        assert StorageSettings(namespace="  ").namespace is None


class TestJsonFileBackend:
    """Tests for the on-disk backend."""

    def test_survives_restart(self, tmp_path):
        path = tmp_path / "data" / "finance.json"
        FinanceStorage(JsonFileBackend(path)).add_transaction("2024-03-05", income())

        reopened = FinanceStorage(JsonFileBackend(path))
        assert len(reopened.get_day("2024-03-05").incomes) == 1

        document = json.loads(path.read_text(encoding="utf-8"))
        assert isinstance(document["finance_data"], str)

    def test_missing_file(self, tmp_path):
        assert JsonFileBackend(tmp_path / "nope.json").get("finance_data") is None

    def test_corrupt_file_reads_empty_and_is_replaced(self, tmp_path):
        path = tmp_path / "finance.json"
        path.write_text("garbage", encoding="utf-8")
        backend = JsonFileBackend(path)

        assert backend.get("finance_data") is None
        backend.set("finance_data", "{}")
        assert json.loads(path.read_text(encoding="utf-8")) == {"finance_data": "{}"}

    def test_undecodable_file_reads_empty(self, tmp_path):
        """Test that bytes that are not UTF-8 degrade to an empty store."""
        path = tmp_path / "finance.json"
        path.write_bytes(b'{"finance_data": "\xff\xfe"}')
        storage = FinanceStorage(JsonFileBackend(path))

        month = storage.get_month("2024-03")
        assert month.days == {}
        assert storage.get_bills() == []

    def test_non_object_document_reads_empty(self, tmp_path):
        path = tmp_path / "finance.json"
        path.write_text("[1, 2]", encoding="utf-8")
        assert JsonFileBackend(path).get("finance_data") is None

    def test_inline_values_are_read(self, tmp_path):
        path = tmp_path / "finance.json"
        path.write_text(json.dumps({"finance_bills": []}), encoding="utf-8")
        assert JsonFileBackend(path).get("finance_bills") == "[]"

    def test_unwritable_path(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        backend = JsonFileBackend(blocker / "finance.json")
        with pytest.raises(StorageUnavailableError):
            backend.set("finance_data", "{}")

    def test_create_backend(self, tmp_path):
        assert isinstance(create_backend(StorageSettings(backend="memory")), InMemoryBackend)
        file_backend = create_backend(StorageSettings(data_path=str(tmp_path / "f.json")))
        assert isinstance(file_backend, JsonFileBackend)
        assert file_backend.path == tmp_path / "f.json"
