"""
Control Financiero - Source Package

A personal finance tracker: daily incomes and expenses, monthly fixed and
variable expenses, taxes, bills to pay, and dashboard notifications.

DESIGN PRINCIPLES:
1. One local store, read and written whole
2. Fail soft on reads: missing or damaged data reads as empty
3. No silent corrections of user input
4. Every change must be auditable
5. Storage medium is swappable
"""

__version__ = "1.0.0"
__author__ = "Control Financiero Team"
