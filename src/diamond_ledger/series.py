# Diamond Ledger - Bookkeeping & profit-sharing engine for diamond resellers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Time series builders used by dashboard charts.

- ``build_profit_series`` merges same-day sales into one point carrying
  the summed net profit of that day.
- ``build_balance_flow`` turns the cash summary into a chronological
  balance series (monthly flow chart).

Sales are keyed by their parsed ``datetime.date``, so two records for the
same calendar day always end up in the same point.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from .engine import DEFAULT_FACTORS, CashSummaryRow, Factors, compute_sale_metrics
from .records import Sale


@dataclass(frozen=True)
class SeriesPoint:
    """Net profit of all sales made on one calendar day."""

    date: date
    net_profit: float


def current_month_sales(sales: Iterable[Sale], today: date) -> list[Sale]:
    """Return the sales whose date falls in the month of ``today``."""
    return [
        s for s in sales if s.date.year == today.year and s.date.month == today.month
    ]


def build_profit_series(
    sales: Iterable[Sale],
    factors: Factors = DEFAULT_FACTORS,
) -> list[SeriesPoint]:
    """Return one (date, net profit) point per day, sorted by date."""
    by_day: dict[date, float] = {}
    for s in sales:
        by_day[s.date] = by_day.get(s.date, 0.0) + compute_sale_metrics(
            s, factors
        ).net_profit
    return [SeriesPoint(date=d, net_profit=by_day[d]) for d in sorted(by_day)]


def build_balance_flow(rows: Iterable[CashSummaryRow]) -> list[tuple[str, float]]:
    """Return (label, balance) pairs, oldest month first.

    Labels look like ``"Mar 2025"``.
    """
    ordered = sorted(rows, key=lambda r: (r.year, r.month_index))
    return [(f"{r.month.value} {r.year}", r.balance) for r in ordered]
