"""Pure aggregation over stored finance records."""

from src.aggregation.summary import (
    calculate_calendar_totals,
    calculate_month_summary,
    day_totals,
    sum_amounts,
)

__all__ = [
    "calculate_calendar_totals",
    "calculate_month_summary",
    "day_totals",
    "sum_amounts",
]
