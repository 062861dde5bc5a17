"""
Data Models Package

This package contains all Pydantic models used in Control Financiero.
All data flowing through the system must conform to these schemas.
"""

from src.models.finance import (
    Bill,
    BillDraft,
    BillStatus,
    CalendarMonthTotals,
    DailyTotals,
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
    ValidationIssue,
    ValidationResult,
    VariableExpense,
    derive_bill_status,
    generate_id,
    toggled_bill_status,
)
from src.models.notification import Notification, NotificationType
from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Finance models
    "Bill",
    "BillDraft",
    "BillStatus",
    "CalendarMonthTotals",
    "DailyTotals",
    "DayData",
    "FixedExpense",
    "MonthData",
    "MonthlyExpenseDraft",
    "MonthSummary",
    "PaymentMethod",
    "Tax",
    "Transaction",
    "TransactionDraft",
    "TransactionType",
    "ValidationIssue",
    "ValidationResult",
    "VariableExpense",
    "derive_bill_status",
    "generate_id",
    "toggled_bill_status",
    # Notification models
    "Notification",
    "NotificationType",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
