"""
Core Data Models for Control Financiero

These models define the schemas for everything the tracker stores or derives.
They are designed to:
1. Enforce non-negative decimal amounts at runtime
2. Serialize to the camelCase JSON layout of the persisted store
3. Load that layout back, rejecting records whose shape does not match

DESIGN DECISION: Amounts are Decimal, never float. Sums over many small
transactions stay exact. In JSON they are written as plain numbers.
"""

import random
import time
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    model_validator,
)
from pydantic.alias_generators import to_camel


DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
MONTH_PATTERN = r"^\d{4}-\d{2}$"

Amount = Annotated[
    Decimal,
    Field(ge=0),
    PlainSerializer(lambda v: float(v), return_type=float, when_used="json"),
]

ZERO = Decimal("0")


def generate_id() -> str:
    """Timestamp plus random suffix, unique within a collection in practice."""
    return f"{int(time.time() * 1000)}-{random.random()}"


class FinanceModel(BaseModel):
    """Base for stored records: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    def to_json_dict(self) -> dict:
        """Dump in the persisted layout (camelCase keys, amounts as numbers)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# =============================================================================
# ENUMS
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a daily transaction."""
    INCOME = "income"    # entrada
    EXPENSE = "expense"  # salida


class PaymentMethod(str, Enum):
    """How an income was received."""
    CARD = "card"  # tarjeta
    CASH = "cash"  # efectivo


class BillStatus(str, Enum):
    """
    Bill lifecycle.

    OVERDUE is only assigned when the bill is created with a due date in
    the past. Afterwards the status is toggled manually between PAID and
    PENDING.
    """
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"


# =============================================================================
# DAILY TRANSACTIONS
# =============================================================================

class TransactionDraft(FinanceModel):
    """A transaction as entered by the user, before it has an id."""

    description: str = Field(..., max_length=200)
    amount: Amount
    type: TransactionType
    payment_method: Optional[PaymentMethod] = None


class Transaction(FinanceModel):
    """An income or expense recorded on a specific day."""

    id: str = Field(default_factory=generate_id)
    description: str = Field(..., max_length=200)
    amount: Amount
    date: str = Field(..., pattern=DATE_PATTERN)
    type: TransactionType
    payment_method: Optional[PaymentMethod] = None

    @property
    def month(self) -> str:
        return self.date[:7]


class DayData(FinanceModel):
    """All transactions of one calendar day."""

    date: str = Field(..., pattern=DATE_PATTERN)
    incomes: list[Transaction] = Field(default_factory=list)
    expenses: list[Transaction] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.incomes and not self.expenses


# =============================================================================
# MONTHLY EXPENSES
# =============================================================================

class MonthlyExpenseDraft(FinanceModel):
    """Fixed expense, variable expense or tax as entered, before it has an id."""

    description: str = Field(..., min_length=1, max_length=200)
    amount: Amount


class FixedExpense(FinanceModel):
    """Recurring monthly cost not tied to a day (gasto fijo)."""

    id: str = Field(default_factory=generate_id)
    description: str = Field(..., max_length=200)
    amount: Amount
    month: str = Field(..., pattern=MONTH_PATTERN)


class VariableExpense(FinanceModel):
    """Non-recurring monthly cost not tied to a day (gasto variable)."""

    id: str = Field(default_factory=generate_id)
    description: str = Field(..., max_length=200)
    amount: Amount
    month: str = Field(..., pattern=MONTH_PATTERN)


class Tax(FinanceModel):
    """Tax paid in a month (impuesto)."""

    id: str = Field(default_factory=generate_id)
    description: str = Field(..., max_length=200)
    amount: Amount
    month: str = Field(..., pattern=MONTH_PATTERN)


class MonthData(FinanceModel):
    """
    Everything stored for one month.

    Days are keyed by their YYYY-MM-DD date; every key starts with `month`.
    """

    month: str = Field(..., pattern=MONTH_PATTERN)
    fixed_expenses: list[FixedExpense] = Field(default_factory=list)
    variable_expenses: list[VariableExpense] = Field(default_factory=list)
    taxes: list[Tax] = Field(default_factory=list)
    days: dict[str, DayData] = Field(default_factory=dict)

    @model_validator(mode='after')
    def validate_day_keys(self) -> 'MonthData':
        """Every day is stored under its own date, inside its own month."""
        for key, day in self.days.items():
            if key != day.date:
                raise ValueError(f"Day key {key} does not match its date {day.date}")
            if key[:7] != self.month:
                raise ValueError(f"Day {key} does not belong to month {self.month}")
        return self


# =============================================================================
# BILLS
# =============================================================================

class BillDraft(FinanceModel):
    """A payable as entered by the user."""

    creditor: str = Field(..., min_length=1, max_length=200)
    amount: Amount
    due_date: date
    description: str = Field(default="", max_length=500)


class Bill(FinanceModel):
    """A payable obligation (cuenta a pagar)."""

    id: str = Field(default_factory=generate_id)
    creditor: str = Field(..., min_length=1, max_length=200)
    amount: Amount
    due_date: date
    status: BillStatus = BillStatus.PENDING
    description: str = Field(default="", max_length=500)

    @property
    def is_paid(self) -> bool:
        return self.status == BillStatus.PAID


def derive_bill_status(due_date: date, today: date) -> BillStatus:
    """Status for a newly created bill: overdue if already past due."""
    if due_date < today:
        return BillStatus.OVERDUE
    return BillStatus.PENDING


def toggled_bill_status(status: BillStatus) -> BillStatus:
    """Manual toggle: paid bills go back to pending, everything else is paid."""
    if status == BillStatus.PAID:
        return BillStatus.PENDING
    return BillStatus.PAID


# =============================================================================
# DERIVED TOTALS
# =============================================================================

class DailyTotals(FinanceModel):
    """Income, expense and profit of a single day."""

    date: str
    incomes: Decimal = ZERO
    expenses: Decimal = ZERO
    profit: Decimal = ZERO


class MonthSummary(FinanceModel):
    """Month summary shown on the month screen."""

    total_incomes: Decimal = ZERO
    total_expenses: Decimal = ZERO
    total_fixed_expenses: Decimal = ZERO
    total_variable_expenses: Decimal = ZERO
    final_profit: Decimal = ZERO
    daily_data: list[DailyTotals] = Field(default_factory=list)

    @property
    def total_outgoings(self) -> Decimal:
        """Daily expenses plus fixed and variable expenses."""
        return (
            self.total_expenses
            + self.total_fixed_expenses
            + self.total_variable_expenses
        )


class CalendarMonthTotals(FinanceModel):
    """
    Totals of the calendar screen.

    Field names are the on-screen labels: entradas are incomes, salidas are
    daily expenses, gastos fijos are fixed expenses, impuestos are taxes,
    cuentas pendientes / vencidas are unpaid / overdue bills.
    """

    entradas: Decimal = ZERO
    salidas: Decimal = ZERO
    entradas_tarjeta: Decimal = ZERO
    entradas_efectivo: Decimal = ZERO
    gastos_fijos: Decimal = ZERO
    impuestos: Decimal = ZERO
    cuentas_pendientes: Decimal = ZERO
    cuentas_vencidas: Decimal = ZERO
    balance: Decimal = ZERO


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem found in raw form input."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'suspicious_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = None


class ValidationResult(BaseModel):
    """Result of validating one submitted form."""

    form: str = Field(
        ...,
        description="Which form was validated (transaction, fixed_expense, bill, ...)"
    )
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "warning"]
