# Diamond Ledger - Bookkeeping & profit-sharing engine for diamond resellers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period-over-period growth for Diamond Ledger.

Growth is the percentage change in quantity sold between a period and its
immediate predecessor. Two comparators are provided and they deliberately
treat a zero predecessor differently:

Annual (``compare_annual``)
    Input is ordered newest-first; each year is compared with the next
    element (the next older year). When either year sold nothing, the
    comparison is reported as "no previous" with a growth of 0.

Monthly (``compare_monthly``)
    Input is chronological (Jan..Dec); each month is compared with the
    element before it.

    - first month                       -> no previous, growth 0
    - previous 0 and current > 0        -> growth 100, has previous
    - previous 0 and current 0          -> no previous, growth 0
    - otherwise                         -> (current - previous) / previous * 100

Division by zero is avoided by these explicit branches.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .engine import annual_volume, monthly_volume
from .records import Sale


@dataclass(frozen=True)
class GrowthPoint:
    """
    Quantity of a period annotated with its growth.

    Attributes:
        label: Period label (year as a string, or month name).
        quantity: Units sold in the period.
        growth_percent: Growth against the previous period, in percent.
        has_previous: False when no meaningful comparison exists.
    """

    label: str
    quantity: int
    growth_percent: float
    has_previous: bool


def compare_annual(points: Sequence[tuple[str, int]]) -> list[GrowthPoint]:
    """Annotate newest-first yearly quantities with year-over-year growth."""
    out: list[GrowthPoint] = []
    for i, (label, qty) in enumerate(points):
        growth = 0.0
        has_previous = False
        if i + 1 < len(points):
            older = points[i + 1][1]
            if older != 0 and qty != 0:
                growth = (qty - older) / older * 100
                has_previous = True
        out.append(GrowthPoint(str(label), qty, growth, has_previous))
    return out


def compare_monthly(points: Sequence[tuple[str, int]]) -> list[GrowthPoint]:
    """Annotate chronological monthly quantities with month-over-month growth."""
    out: list[GrowthPoint] = []
    for i, (label, qty) in enumerate(points):
        growth = 0.0
        has_previous = False
        if i > 0:
            previous = points[i - 1][1]
            if previous == 0:
                # 0 -> N is reported as +100 %; 0 -> 0 has no comparison.
                if qty > 0:
                    growth = 100.0
                    has_previous = True
            else:
                growth = (qty - previous) / previous * 100
                has_previous = True
        out.append(GrowthPoint(str(label), qty, growth, has_previous))
    return out


def annual_growth(sales: Iterable[Sale]) -> list[GrowthPoint]:
    """Year-over-year growth of the quantity sold, newest year first."""
    volume = annual_volume(sales)
    points = [(str(year), volume[year]) for year in sorted(volume, reverse=True)]
    return compare_annual(points)


def monthly_growth(sales: Iterable[Sale], year: int) -> list[GrowthPoint]:
    """Month-over-month growth for the twelve months of ``year``."""
    points = [(m.value, qty) for m, qty in monthly_volume(sales, year)]
    return compare_monthly(points)
