# Diamond Ledger - Bookkeeping & profit-sharing engine for diamond resellers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period helpers for Diamond Ledger.

This module defines a Period value object, the two ways of selecting a
reporting period (a calendar month, or a custom date range) and the
filtering of record collections by period.

It also provides the advisory "future date" checks used by the CLI when
new records are entered.
"""

from calendar import monthrange
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from .records import (
    Expense,
    Month,
    MonthlyCommission,
    Sale,
    month_from_index,
    month_index,
)


@dataclass
class Period:
    """Represents a reporting period with a human-readable label."""

    start: date
    end: date
    label: str


@dataclass(frozen=True)
class FilteredRecords:
    """Record collections restricted to a period."""

    sales: tuple[Sale, ...]
    commissions: tuple[MonthlyCommission, ...]
    expenses: tuple[Expense, ...]


def _today() -> date:
    """Return today's date as a date object (isolated for easier testing)."""
    return datetime.today().date()


def period_for_month(month: Month, year: int) -> Period:
    """Full calendar month."""
    idx = month_index(month)
    if idx is None:
        raise ValueError(f"Unknown month: {month!r}")
    last_day = monthrange(year, idx + 1)[1]
    return Period(
        start=date(year, idx + 1, 1),
        end=date(year, idx + 1, last_day),
        label=f"{Month(month).value} {year}",
    )


def period_for_range(start: date, end: date) -> Period:
    """Custom inclusive date range."""
    if end < start:
        raise ValueError("Custom period end date cannot be before start date.")
    return Period(start=start, end=end, label=f"Custom period ({start} → {end})")


def current_month_period(today: Optional[date] = None) -> Period:
    """Calendar month containing ``today`` (defaults to the real today)."""
    today = today or _today()
    return period_for_month(month_from_index(today.month - 1), today.year)


def commission_reference_date(commission: MonthlyCommission) -> Optional[date]:
    """
    Date used to place a monthly commission inside a date range.

    Commissions carry a month, not a day; the 15th of the month is used as
    their reference date. Returns None for a non-canonical month.
    """
    idx = month_index(commission.month)
    if idx is None:
        return None
    return date(commission.year, idx + 1, 15)


def filter_records(
    sales: Iterable[Sale],
    commissions: Iterable[MonthlyCommission],
    expenses: Iterable[Expense],
    period: Period,
) -> FilteredRecords:
    """
    Keep only the records that fall within the period (inclusive bounds).

    Sales and expenses are matched on their date. Commissions are matched
    on their reference date (see ``commission_reference_date``), which for
    a full calendar month selects exactly the commissions of that month.
    """

    def _inside(d: Optional[date]) -> bool:
        return d is not None and period.start <= d <= period.end

    return FilteredRecords(
        sales=tuple(s for s in sales if _inside(s.date)),
        commissions=tuple(
            c for c in commissions if _inside(commission_reference_date(c))
        ),
        expenses=tuple(e for e in expenses if _inside(e.date)),
    )


def is_future_date(value: date, today: Optional[date] = None) -> bool:
    """Return True if ``value`` lies after today."""
    return value > (today or _today())


def is_future_period(month: Month, year: int, today: Optional[date] = None) -> bool:
    """Return True if the month/year lies after the current month."""
    today = today or _today()
    idx = month_index(month)
    if idx is None:
        return False
    if year > today.year:
        return True
    return year == today.year and idx > today.month - 1
