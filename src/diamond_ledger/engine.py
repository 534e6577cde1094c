# Diamond Ledger - Bookkeeping & profit-sharing engine for diamond resellers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Core financial derivation engine for Diamond Ledger.

This module turns raw records (sales, commissions, expenses) into derived
monetary figures. Every function is pure: it takes the record collections
as parameters and returns new values, without caching or hidden state.
Derived values are therefore recomputed from scratch on every read.

The engine covers four responsibilities:

1. Sale metrics
   ------------
   ``compute_sale_metrics()`` multiplies the quantity of a sale by each of
   the per-unit ``Factors``:

       value_received   = quantity * value_per_unit
       gross_commission = quantity * gross_commission_per_unit
       debt_owed        = quantity * debt_per_unit
       net_profit       = gross_commission - debt_owed

2. Period aggregation
   ------------------
   - ``annual_volume()``  : year -> summed quantity,
   - ``monthly_volume()`` : 12 (Month, quantity) pairs for one year,
   - ``build_reconciliation_buckets()`` : (year, month_index) -> quantity,
     debt and commission accumulated from sales and commissions,
   - ``summarize_period()`` : totals for an already filtered period.

   Grouping keys always come from parsed calendar values (``datetime.date``
   and canonical Month names), never from raw date strings.

3. Reconciliation
   --------------
   ``reconcile()`` converts the buckets into ledger rows, most recent
   period first:

       final_balance   = total_commission - total_debt
       partner_a_share = final_balance * partner_a_percentage / 100
       partner_b_share = final_balance * partner_b_percentage / 100

   A negative balance is a valid state. No rounding is applied here;
   rounding is a presentation concern handled by ``views.py``.

4. Cash summary
   ------------
   ``build_cash_summary()`` produces the monthly cash table, which
   additionally deducts fixed expenses from the balance.

Notes
-----
``month_index`` is 0-based everywhere (0 = Jan, 11 = Dec).
"""

from collections.abc import Iterable
from dataclasses import dataclass

from .records import MONTHS, Expense, Month, MonthlyCommission, Sale, month_index
from .settings import PartnerSplit, Settings

# ---------------------------------------------------------------------------
# Factors
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Factors:
    """
    Per-unit monetary multipliers used by every derived calculation.

    Attributes
    ----------
    value_per_unit :
        Amount received from the customer per unit sold.
    gross_commission_per_unit :
        Gross commission earned per unit sold.
    debt_per_unit :
        Amount to be reinvested (debt to replace) per unit sold.
    """

    value_per_unit: float = 470.0
    gross_commission_per_unit: float = 75.0
    debt_per_unit: float = 30.0


DEFAULT_FACTORS = Factors()


def factors_from_settings(settings: Settings) -> Factors:
    """Return the factors held by the user-editable price defaults."""
    return Factors(
        value_per_unit=settings.default_sale_price,
        gross_commission_per_unit=settings.default_gross_commission,
        debt_per_unit=settings.default_repayment_rate,
    )


# ---------------------------------------------------------------------------
# Derived values
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SaleMetrics:
    """Monetary figures derived from one sale."""

    value_received: float
    gross_commission: float
    debt_owed: float
    net_profit: float


@dataclass
class ReconciliationBucket:
    """Accumulator for one calendar month of the reconciliation ledger."""

    year: int
    month_index: int
    total_quantity: int = 0
    total_debt: float = 0.0
    total_commission: float = 0.0


@dataclass(frozen=True)
class ReconciliationRow:
    """
    One monthly ledger entry, split between the two partners.

    Attributes
    ----------
    year, month_index :
        Calendar period (month_index is 0-based).
    total_quantity :
        Units sold in the period.
    total_debt :
        Debt generated by the period's sales.
    total_commission :
        Commissions received for the period (all operators).
    final_balance :
        total_commission - total_debt (may be negative).
    partner_a_share, partner_b_share :
        final_balance split according to the partner percentages.
    """

    year: int
    month_index: int
    total_quantity: int
    total_debt: float
    total_commission: float
    final_balance: float
    partner_a_share: float
    partner_b_share: float

    @property
    def month(self) -> Month:
        return MONTHS[self.month_index]


@dataclass(frozen=True)
class PeriodSummary:
    """Totals for a filtered period (dashboard figures)."""

    total_quantity: int
    total_debt: float
    total_commission: float
    total_expenses: float
    net_profit: float


@dataclass(frozen=True)
class CashSummaryRow:
    """One month of the cash summary: credits minus debt and expenses."""

    year: int
    month_index: int
    credits: float
    debt: float
    expenses: float
    balance: float

    @property
    def month(self) -> Month:
        return MONTHS[self.month_index]


# ---------------------------------------------------------------------------
# Sale metrics
# ---------------------------------------------------------------------------


def compute_sale_metrics(sale: Sale, factors: Factors = DEFAULT_FACTORS) -> SaleMetrics:
    """Derive the four monetary figures of a single sale.

    The quantity is used as-is: it is validated at the input boundary and a
    zero or negative value simply propagates through the multiplications.
    """
    qty = sale.quantity
    gross_commission = qty * factors.gross_commission_per_unit
    debt_owed = qty * factors.debt_per_unit
    return SaleMetrics(
        value_received=qty * factors.value_per_unit,
        gross_commission=gross_commission,
        debt_owed=debt_owed,
        net_profit=gross_commission - debt_owed,
    )


# ---------------------------------------------------------------------------
# Period aggregation
# ---------------------------------------------------------------------------


def annual_volume(sales: Iterable[Sale]) -> dict[int, int]:
    """Return the total quantity sold per calendar year."""
    volume: dict[int, int] = {}
    for s in sales:
        volume[s.date.year] = volume.get(s.date.year, 0) + s.quantity
    return volume


def monthly_volume(sales: Iterable[Sale], year: int) -> list[tuple[Month, int]]:
    """Return the quantity sold in each month of ``year``.

    The result always has twelve entries, Jan to Dec; months without sales
    carry a quantity of 0.
    """
    quantities = [0] * 12
    for s in sales:
        if s.date.year == year:
            quantities[s.date.month - 1] += s.quantity
    return list(zip(MONTHS, quantities))


def build_reconciliation_buckets(
    sales: Iterable[Sale],
    commissions: Iterable[MonthlyCommission],
    factors: Factors = DEFAULT_FACTORS,
) -> dict[tuple[int, int], ReconciliationBucket]:
    """Accumulate sales debt and commission income per (year, month_index).

    A bucket is created the first time a sale or a commission touches its
    period, so a month with sales but no commission (or the reverse) still
    gets a bucket with the missing side at 0.

    Commissions whose month is not one of the twelve canonical names are
    skipped.
    """
    buckets: dict[tuple[int, int], ReconciliationBucket] = {}

    def _bucket(year: int, idx: int) -> ReconciliationBucket:
        key = (year, idx)
        if key not in buckets:
            buckets[key] = ReconciliationBucket(year=year, month_index=idx)
        return buckets[key]

    for s in sales:
        b = _bucket(s.date.year, s.date.month - 1)
        b.total_quantity += s.quantity
        b.total_debt += compute_sale_metrics(s, factors).debt_owed

    for c in commissions:
        idx = month_index(c.month)
        if idx is None:
            continue
        _bucket(c.year, idx).total_commission += c.commission_value

    return buckets


def summarize_period(
    sales: Iterable[Sale],
    commissions: Iterable[MonthlyCommission],
    expenses: Iterable[Expense],
    factors: Factors = DEFAULT_FACTORS,
) -> PeriodSummary:
    """Compute the dashboard totals for already filtered collections.

    ``net_profit`` is commissions minus sales debt minus expenses.
    """
    sales = list(sales)
    total_quantity = sum(s.quantity for s in sales)
    total_debt = sum(compute_sale_metrics(s, factors).debt_owed for s in sales)
    total_commission = sum(c.commission_value for c in commissions)
    total_expenses = sum(e.value for e in expenses)
    return PeriodSummary(
        total_quantity=total_quantity,
        total_debt=total_debt,
        total_commission=total_commission,
        total_expenses=total_expenses,
        net_profit=total_commission - total_debt - total_expenses,
    )


# ---------------------------------------------------------------------------
# Reconciliation
# ---------------------------------------------------------------------------


def reconcile(
    buckets: dict[tuple[int, int], ReconciliationBucket],
    split: PartnerSplit,
) -> list[ReconciliationRow]:
    """Turn reconciliation buckets into ledger rows, most recent first.

    Rows are sorted by year descending, then month_index descending.
    """
    rows: list[ReconciliationRow] = []
    for b in buckets.values():
        final_balance = b.total_commission - b.total_debt
        share_a, share_b = split.split_amount(final_balance)
        rows.append(
            ReconciliationRow(
                year=b.year,
                month_index=b.month_index,
                total_quantity=b.total_quantity,
                total_debt=b.total_debt,
                total_commission=b.total_commission,
                final_balance=final_balance,
                partner_a_share=share_a,
                partner_b_share=share_b,
            )
        )
    rows.sort(key=lambda r: (r.year, r.month_index), reverse=True)
    return rows


def build_reconciliation(
    sales: Iterable[Sale],
    commissions: Iterable[MonthlyCommission],
    split: PartnerSplit,
    factors: Factors = DEFAULT_FACTORS,
) -> list[ReconciliationRow]:
    """Convenience wrapper: buckets + reconcile in one call."""
    return reconcile(build_reconciliation_buckets(sales, commissions, factors), split)


def build_cash_summary(
    sales: Iterable[Sale],
    commissions: Iterable[MonthlyCommission],
    expenses: Iterable[Expense],
    factors: Factors = DEFAULT_FACTORS,
) -> list[CashSummaryRow]:
    """
    Build the monthly cash summary, most recent month first.

    Each row holds the commissions received (credits), the debt generated
    by sales and the fixed expenses of the month:

        balance = credits - debt - expenses

    Parameters
    ----------
    sales, commissions, expenses :
        Full record collections (not filtered by period).
    factors :
        Per-unit factors used to derive the sales debt.

    Returns
    -------
    list[CashSummaryRow]
        One row per month touched by at least one record, sorted by year
        then month, descending.
    """
    totals: dict[tuple[int, int], list[float]] = {}

    def _acc(year: int, idx: int) -> list[float]:
        return totals.setdefault((year, idx), [0.0, 0.0, 0.0])

    for s in sales:
        _acc(s.date.year, s.date.month - 1)[1] += compute_sale_metrics(
            s, factors
        ).debt_owed
    for c in commissions:
        idx = month_index(c.month)
        if idx is None:
            continue
        _acc(c.year, idx)[0] += c.commission_value
    for e in expenses:
        _acc(e.date.year, e.date.month - 1)[2] += e.value

    rows = [
        CashSummaryRow(
            year=year,
            month_index=idx,
            credits=credits,
            debt=debt,
            expenses=spent,
            balance=credits - debt - spent,
        )
        for (year, idx), (credits, debt, spent) in totals.items()
    ]
    rows.sort(key=lambda r: (r.year, r.month_index), reverse=True)
    return rows
