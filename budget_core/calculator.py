"""Budget remaining engine.

Pure functions that turn a yearly allocation and a list of expenses into the
amount still available for the fiscal year, the current fiscal month and the
current day. Every call recomputes from its arguments; nothing is cached.

The cascade spreads what is left evenly over what is left::

    yearly  = allocation - spend within the fiscal year
    monthly = floor(yearly / months left in the fiscal year)
    daily   = floor(monthly / days left in the calendar month)
"""

from __future__ import annotations

import calendar
import math
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterable, Union

from .models import Budget, Expense, FiscalYearRange

__all__ = [
    "daily_remaining",
    "fiscal_year_range",
    "monthly_remaining",
    "remaining_days",
    "remaining_months",
    "yearly_expense_total",
    "yearly_remaining",
]

Number = Union[int, float, Decimal]


def _calendar_date(value: date) -> date:
    # datetime is a date subclass; compare by calendar day only.
    if isinstance(value, datetime):
        return value.date()
    return value


def _floor_div(value: Number, divisor: int) -> int:
    # Exact for int. Decimal divides at context precision and float loses digits
    # above 2**53. Decimal `//` truncates toward zero, hence math.floor.
    if isinstance(value, int):
        return value // divisor
    return math.floor(value / divisor)


def fiscal_year_range(base_date: date, fiscal_start_month: int) -> FiscalYearRange:
    """Return the fiscal year containing ``base_date``.

    The fiscal year begins on the first day of ``fiscal_start_month`` and ends
    on the day before the next fiscal year begins. ``fiscal_start_month`` is
    not validated.
    """
    base_date = _calendar_date(base_date)
    start_year = base_date.year if base_date.month >= fiscal_start_month else base_date.year - 1
    start = date(start_year, fiscal_start_month, 1)
    end = date(start_year + 1, fiscal_start_month, 1) - timedelta(days=1)
    return FiscalYearRange(start=start, end=end)


def yearly_expense_total(
    expenses: Iterable[Expense], category_id: int, period: FiscalYearRange
) -> Number:
    """Sum live expenses of ``category_id`` dated within ``period`` (inclusive)."""
    return sum(
        (
            expense.amount
            for expense in expenses
            if not expense.is_deleted
            and expense.category_id == category_id
            and _calendar_date(expense.date) in period
        ),
        0,
    )


def remaining_months(base_date: date, fiscal_start_month: int) -> int:
    """Count fiscal months from the current one through the last, never below one."""
    month = base_date.month
    if fiscal_start_month <= month:
        remaining = 12 - (month - fiscal_start_month)
    else:
        remaining = fiscal_start_month - month
    return 1 if remaining == 0 else remaining


def remaining_days(base_date: date) -> int:
    """Count days from ``base_date`` through the end of its month, inclusive."""
    last_day = calendar.monthrange(base_date.year, base_date.month)[1]
    remaining = last_day - base_date.day + 1
    return 1 if remaining <= 0 else remaining


def yearly_remaining(
    budget: Budget, expenses: Iterable[Expense], base_date: date, fiscal_start_month: int
) -> Number:
    """Allocation minus spend for the fiscal year; negative when overspent."""
    period = fiscal_year_range(base_date, fiscal_start_month)
    used = yearly_expense_total(expenses, budget.category_id, period)
    return budget.yearly_amount - used


def monthly_remaining(
    budget: Budget, expenses: Iterable[Expense], base_date: date, fiscal_start_month: int
) -> int:
    yearly = yearly_remaining(budget, expenses, base_date, fiscal_start_month)
    return _floor_div(yearly, remaining_months(base_date, fiscal_start_month))


def daily_remaining(
    budget: Budget, expenses: Iterable[Expense], base_date: date, fiscal_start_month: int
) -> int:
    monthly = monthly_remaining(budget, expenses, base_date, fiscal_start_month)
    return _floor_div(monthly, remaining_days(base_date))
