"""
Spanish (es-ES) display formatting for amounts and dates.

Mirrors what the browser's es-ES locale produces:
- currency: "1234,56 €", "15.000,00 €" (thousands are only grouped from
  five integer digits onwards)
- dates: "05 de marzo de 2024", months and weekdays in lower case
"""

from datetime import date
from decimal import ROUND_HALF_EVEN, Decimal
from typing import Union

from src.utils.dates import parse_date, parse_month_key


MONTH_NAMES = [
    "enero", "febrero", "marzo", "abril", "mayo", "junio",
    "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
]

# Indexed by date.weekday(): Monday = 0
DAY_NAMES = [
    "lunes", "martes", "miércoles", "jueves", "viernes", "sábado", "domingo",
]

CURRENCY_SYMBOLS = {
    "EUR": "€",
    "USD": "US$",
    "GBP": "GB£",
}

CENT = Decimal("0.01")


def _group_thousands(digits: str) -> str:
    if len(digits) < 5:
        return digits
    groups = []
    while digits:
        groups.insert(0, digits[-3:])
        digits = digits[:-3]
    return ".".join(groups)


def format_amount(amount: Union[Decimal, int, float]) -> str:
    """Number with two decimals, comma as decimal separator, no symbol."""
    value = Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_EVEN)
    sign = "-" if value < 0 else ""
    integer, fraction = f"{abs(value):.2f}".split(".")
    return f"{sign}{_group_thousands(integer)},{fraction}"


def format_currency(amount: Union[Decimal, int, float], currency: str = "EUR") -> str:
    symbol = CURRENCY_SYMBOLS.get(currency.upper(), currency.upper())
    return f"{format_amount(amount)} {symbol}"


def _as_date(value: Union[str, date]) -> date:
    if isinstance(value, date):
        return value
    return parse_date(value)


def format_date(value: Union[str, date]) -> str:
    """'2024-03-05' -> '05 de marzo de 2024'"""
    d = _as_date(value)
    return f"{d.day:02d} de {MONTH_NAMES[d.month - 1]} de {d.year}"


def format_month_year(month: str) -> str:
    """'2024-03' -> 'marzo de 2024'"""
    year, month_num = parse_month_key(month)
    return f"{MONTH_NAMES[month_num - 1]} de {year}"


def day_name(value: Union[str, date]) -> str:
    return DAY_NAMES[_as_date(value).weekday()]
