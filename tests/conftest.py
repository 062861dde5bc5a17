"""Shared fixtures: in-memory storage and flows wired the way the app wires them."""

import pytest

from src.audit import AuditLogger
from src.config import get_settings
from src.orchestrator import BillFlow, DashboardFlow, LedgerFlow
from src.services.storage import FinanceStorage, InMemoryAuditStorage, InMemoryBackend
from src.validation import FormInputValidator


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Every test sees default configuration, whatever the shell exports."""
    for name in (
        "FINANCE_STORAGE_BACKEND",
        "FINANCE_STORAGE_DATA_PATH",
        "FINANCE_STORAGE_NAMESPACE",
        "FINANCE_STORAGE_AUDIT_LOG_PATH",
        "FINANCE_NOTIFY_FIXED_EXPENSE_RATIO",
        "FINANCE_NOTIFY_TAX_RATIO",
        "FINANCE_NOTIFY_PENDING_BILLS_RATIO",
        "FINANCE_NOTIFY_MONTH_END_DAYS",
        "DEFAULT_DESCRIPTION",
        "MAX_AMOUNT",
        "CURRENCY",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def backend():
    return InMemoryBackend()


@pytest.fixture
def storage(backend):
    return FinanceStorage(backend)


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def audit_logger(audit_storage):
    return AuditLogger(audit_storage)


@pytest.fixture
def ledger_flow(storage, audit_logger):
    return LedgerFlow(storage, validator=FormInputValidator(), audit_logger=audit_logger)


@pytest.fixture
def bill_flow(storage, audit_logger):
    return BillFlow(storage, validator=FormInputValidator(), audit_logger=audit_logger)


@pytest.fixture
def dashboard_flow(storage, audit_logger):
    return DashboardFlow(storage, settings=get_settings(), audit_logger=audit_logger)
