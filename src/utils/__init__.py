"""Date and display helpers."""

from src.utils.dates import (
    current_date,
    current_month,
    days_in_month,
    days_remaining_in_month,
    days_until_due,
    first_weekday_of_month,
    month_dates,
    month_key_of,
    next_month,
    parse_date,
    parse_month_key,
    previous_month,
)
from src.utils.formatting import (
    day_name,
    format_amount,
    format_currency,
    format_date,
    format_month_year,
)

__all__ = [
    "current_date",
    "current_month",
    "day_name",
    "days_in_month",
    "days_remaining_in_month",
    "days_until_due",
    "first_weekday_of_month",
    "format_amount",
    "format_currency",
    "format_date",
    "format_month_year",
    "month_dates",
    "month_key_of",
    "next_month",
    "parse_date",
    "parse_month_key",
    "previous_month",
]
