"""
Aggregation Engine

DESIGN DECISION: Every total shown anywhere in the app is computed here,
by pure functions over stored records. Nothing in this module reads or
writes storage, and nothing mutates its inputs.

Two balances exist and they are intentionally different:
- Month summary (month screen): incomes minus daily, fixed and variable
  expenses.
- Calendar totals (calendar screen and dashboard): incomes minus daily
  expenses, fixed expenses, taxes and every unpaid bill.
"""

from decimal import Decimal
from typing import Iterable

from src.models.finance import (
    ZERO,
    Bill,
    BillStatus,
    CalendarMonthTotals,
    DailyTotals,
    DayData,
    MonthData,
    MonthSummary,
    PaymentMethod,
)


def sum_amounts(items: Iterable) -> Decimal:
    """Sum the `amount` of every item."""
    return sum((item.amount for item in items), ZERO)


def day_totals(day: DayData) -> DailyTotals:
    """Incomes, expenses and profit of one day."""
    incomes = sum_amounts(day.incomes)
    expenses = sum_amounts(day.expenses)
    return DailyTotals(
        date=day.date,
        incomes=incomes,
        expenses=expenses,
        profit=incomes - expenses,
    )


def calculate_month_summary(month_data: MonthData) -> MonthSummary:
    """
    Summarize a month.

    finalProfit = totalIncomes - totalExpenses
                  - totalFixedExpenses - totalVariableExpenses
    """
    daily_data = [day_totals(day) for day in month_data.days.values()]
    # YYYY-MM-DD sorts chronologically as text
    daily_data.sort(key=lambda d: d.date)

    total_incomes = sum((d.incomes for d in daily_data), ZERO)
    total_expenses = sum((d.expenses for d in daily_data), ZERO)
    total_fixed = sum_amounts(month_data.fixed_expenses)
    total_variable = sum_amounts(month_data.variable_expenses)

    return MonthSummary(
        total_incomes=total_incomes,
        total_expenses=total_expenses,
        total_fixed_expenses=total_fixed,
        total_variable_expenses=total_variable,
        final_profit=total_incomes - total_expenses - total_fixed - total_variable,
        daily_data=daily_data,
    )


def calculate_calendar_totals(
    month_data: MonthData,
    bills: Iterable[Bill],
) -> CalendarMonthTotals:
    """
    Totals of the calendar screen.

    balance = entradas - salidas - gastosFijos - impuestos - cuentasPendientes

    Bills are global, not scoped to the month: every unpaid bill counts.
    Incomes without a payment method count toward entradas only.
    """
    entradas = salidas = ZERO
    by_method = {PaymentMethod.CARD: ZERO, PaymentMethod.CASH: ZERO}

    for day in month_data.days.values():
        for income in day.incomes:
            entradas += income.amount
            if income.payment_method in by_method:
                by_method[income.payment_method] += income.amount
        salidas += sum_amounts(day.expenses)

    gastos_fijos = sum_amounts(month_data.fixed_expenses)
    impuestos = sum_amounts(month_data.taxes)

    bills = list(bills)
    cuentas_pendientes = sum_amounts(b for b in bills if b.status != BillStatus.PAID)
    cuentas_vencidas = sum_amounts(b for b in bills if b.status == BillStatus.OVERDUE)

    return CalendarMonthTotals(
        entradas=entradas,
        salidas=salidas,
        entradas_tarjeta=by_method[PaymentMethod.CARD],
        entradas_efectivo=by_method[PaymentMethod.CASH],
        gastos_fijos=gastos_fijos,
        impuestos=impuestos,
        cuentas_pendientes=cuentas_pendientes,
        cuentas_vencidas=cuentas_vencidas,
        balance=entradas - salidas - gastos_fijos - impuestos - cuentas_pendientes,
    )
