"""
Notification Rule Evaluator

Turns a snapshot of calendar totals into dashboard notifications. Each rule
is checked independently, in a fixed order, and several may fire at once.

The month-end reminder always looks at the wall-clock month, whatever month
the dashboard is showing.

A balance of exactly zero triggers neither the positive nor the negative
balance rule.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from src.config import NotificationSettings, get_settings
from src.models.finance import CalendarMonthTotals
from src.models.notification import Notification, NotificationType
from src.utils.dates import days_remaining_in_month
from src.utils.formatting import format_currency


def _ratio(value: float) -> Decimal:
    return Decimal(str(value))


def evaluate_notifications(
    totals: CalendarMonthTotals,
    today: Optional[date] = None,
    now: Optional[datetime] = None,
    thresholds: Optional[NotificationSettings] = None,
    currency: str = "EUR",
) -> list[Notification]:
    """
    Evaluate every rule against `totals`.

    Args:
        totals: Calendar totals of the month being viewed
        today: Date used for the month-end reminder (defaults to today)
        now: Timestamp stamped on every notification (defaults to now)
        thresholds: Rule thresholds (defaults to configured settings)
        currency: Currency used in messages

    Returns:
        Notifications in rule order, all unread
    """
    thresholds = thresholds or get_settings().notifications
    now = now or datetime.now()
    today = today or now.date()

    def money(amount: Decimal) -> str:
        return format_currency(amount, currency)

    notifications: list[Notification] = []

    def emit(rule_id: str, kind: NotificationType, title: str, message: str) -> None:
        notifications.append(Notification(
            id=rule_id,
            type=kind,
            title=title,
            message=message,
            timestamp=now,
        ))

    entradas = totals.entradas

    if totals.balance < 0:
        emit(
            "balance_negative",
            NotificationType.ERROR,
            "Balance Negativo",
            f"Tu balance actual es de {money(totals.balance)}. Revisa tus gastos.",
        )

    if totals.balance > 0:
        emit(
            "balance_positive",
            NotificationType.SUCCESS,
            "Balance Positivo",
            f"¡Excelente! Tu balance es de {money(totals.balance)}.",
        )

    fixed_ratio = _ratio(thresholds.fixed_expense_ratio)
    if totals.gastos_fijos > entradas * fixed_ratio:
        emit(
            "fixed_expenses_high",
            NotificationType.WARNING,
            "Gastos Fijos Elevados",
            f"Tus gastos fijos ({money(totals.gastos_fijos)}) representan más del "
            f"{fixed_ratio * 100:.0f}% de tus entradas.",
        )

    tax_ratio = _ratio(thresholds.tax_ratio)
    if totals.impuestos > entradas * tax_ratio:
        emit(
            "taxes_high",
            NotificationType.WARNING,
            "Impuestos Elevados",
            f"Tus impuestos ({money(totals.impuestos)}) representan más del "
            f"{tax_ratio * 100:.0f}% de tus entradas.",
        )

    if totals.cuentas_vencidas > 0:
        emit(
            "bills_overdue",
            NotificationType.ERROR,
            "Cuentas Vencidas",
            f"Tienes {money(totals.cuentas_vencidas)} en cuentas vencidas. ¡Paga urgente!",
        )

    pending_ratio = _ratio(thresholds.pending_bills_ratio)
    if totals.cuentas_pendientes > entradas * pending_ratio:
        emit(
            "bills_pending_high",
            NotificationType.WARNING,
            "Cuentas Pendientes Elevadas",
            f"Tienes {money(totals.cuentas_pendientes)} en cuentas pendientes "
            f"(más del {pending_ratio * 100:.0f}% de tus entradas).",
        )

    days_left = days_remaining_in_month(today)
    if days_left <= thresholds.month_end_days:
        emit(
            "month_end",
            NotificationType.INFO,
            "Fin de Mes Próximo",
            f"Quedan {days_left} días para finalizar el mes. "
            "Revisa tus pendientes y cuentas a pagar.",
        )

    return notifications


def mark_as_read(notifications: list[Notification], notification_id: str) -> list[Notification]:
    """New list where the notification with that id is marked read."""
    return [
        n.mark_read() if n.id == notification_id else n
        for n in notifications
    ]


def unread_count(notifications: list[Notification]) -> int:
    return sum(1 for n in notifications if not n.read)
