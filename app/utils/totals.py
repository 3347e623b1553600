"""
Derived money figures.

Every total shown anywhere (invoice detail, invoice list, dashboard, reports)
is computed by one of these functions from rows that were just fetched.
Nothing here is ever persisted. All amounts are integers in minor units.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, Union

# CategoryType is a str enum, so members compare equal to their values
INCOME = "income"

Number = Union[int, float, Decimal, str]

# amounts are stored in 32-bit Integer columns
MAX_MINOR_UNITS = 2_147_483_647


def to_minor_units(value: Number) -> int:
    """
    Round an amount to the nearest whole minor unit, halves away from zero.
    Raises ValueError when the result does not fit MAX_MINOR_UNITS.
    """
    try:
        rounded = int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    except InvalidOperation:
        raise ValueError(f"{value} is out of range")
    if abs(rounded) > MAX_MINOR_UNITS:
        raise ValueError(f"{value} is out of range")
    return rounded


def invoice_total(items: Iterable) -> int:
    """Sum of quantity x unit_price over invoice items (or item projections)."""
    return sum(item.quantity * item.unit_price for item in items)


def split_by_type(rows: Iterable) -> tuple[int, int]:
    """Return (income, expense) sums over rows carrying `type` and `amount`."""
    income = 0
    expense = 0
    for row in rows:
        if row.type == INCOME:
            income += row.amount
        else:
            expense += row.amount
    return income, expense


def income_expense_totals(rows: Iterable) -> dict:
    income, expense = split_by_type(rows)
    return {"income": income, "expense": expense, "net": income - expense}


def percentage_of(amount: int, total: int) -> float:
    if not total:
        return 0.0
    return round(amount / total * 100, 2)
