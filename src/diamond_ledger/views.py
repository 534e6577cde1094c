# Diamond Ledger - Bookkeeping & profit-sharing engine for diamond resellers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for Diamond Ledger.

This module turns the engine results (dataclasses) into pandas DataFrames
ready for display or CSV export. It is the only place where amounts are
rounded; the engine always works on unrounded values.

The main views are:

- record listings      : sales (with metrics), commissions, expenses,
- period summary       : dashboard totals and the partner split,
- reconciliation       : monthly ledger with partner shares,
- cash summary         : monthly credits / debt / expenses / balance,
- growth               : annual and monthly growth tables,
- series               : daily profit series and monthly balance flow.
"""

from collections.abc import Iterable, Sequence

import pandas as pd

from .engine import (
    DEFAULT_FACTORS,
    CashSummaryRow,
    Factors,
    PeriodSummary,
    ReconciliationRow,
    compute_sale_metrics,
)
from .growth import GrowthPoint
from .records import Expense, MonthlyCommission, Sale
from .series import SeriesPoint
from .settings import PartnerSplit


def _round_amounts(df: pd.DataFrame, columns: Sequence[str], decimals: int) -> pd.DataFrame:
    for col in columns:
        if col in df.columns:
            df[col] = df[col].astype(float).round(decimals)
    return df


# ---------------------------------------------------------------------------
# Record listings
# ---------------------------------------------------------------------------


def sales_view(
    sales: Iterable[Sale],
    factors: Factors = DEFAULT_FACTORS,
    decimals: int = 2,
) -> pd.DataFrame:
    rows = []
    for s in sales:
        m = compute_sale_metrics(s, factors)
        rows.append(
            {
                "id": s.id,
                "date": s.date,
                "quantity": s.quantity,
                "value_received": m.value_received,
                "gross_commission": m.gross_commission,
                "debt_owed": m.debt_owed,
                "net_profit": m.net_profit,
            }
        )
    df = pd.DataFrame(
        rows,
        columns=[
            "id",
            "date",
            "quantity",
            "value_received",
            "gross_commission",
            "debt_owed",
            "net_profit",
        ],
    )
    return _round_amounts(
        df, ["value_received", "gross_commission", "debt_owed", "net_profit"], decimals
    )


def commissions_view(
    commissions: Iterable[MonthlyCommission], decimals: int = 2
) -> pd.DataFrame:
    df = pd.DataFrame(
        [
            {
                "id": c.id,
                "period": f"{c.month.value} {c.year}",
                "operator": c.operator.value,
                "commission_value": c.commission_value,
            }
            for c in commissions
        ],
        columns=["id", "period", "operator", "commission_value"],
    )
    return _round_amounts(df, ["commission_value"], decimals)


def expenses_view(expenses: Iterable[Expense], decimals: int = 2) -> pd.DataFrame:
    df = pd.DataFrame(
        [
            {
                "id": e.id,
                "date": e.date,
                "description": e.description,
                "category": e.category,
                "value": e.value,
            }
            for e in expenses
        ],
        columns=["id", "date", "description", "category", "value"],
    )
    return _round_amounts(df, ["value"], decimals)


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------


def period_summary_view(summary: PeriodSummary, decimals: int = 2) -> pd.DataFrame:
    """Return the dashboard totals as a two-column (name, amount) table."""
    df = pd.DataFrame(
        [
            ("total_quantity", summary.total_quantity),
            ("total_commission", summary.total_commission),
            ("total_debt", -summary.total_debt),
            ("total_expenses", -summary.total_expenses),
            ("net_profit", summary.net_profit),
        ],
        columns=["name", "amount"],
    )
    return _round_amounts(df, ["amount"], decimals)


def profit_split_view(
    summary: PeriodSummary, split: PartnerSplit, decimals: int = 2
) -> pd.DataFrame:
    """
    Return the partner shares of a period's net profit.

    Only a positive net profit is shared; otherwise the table is empty.
    """
    columns = ["partner", "percentage", "amount"]
    if summary.net_profit <= 0:
        return pd.DataFrame(columns=columns)

    share_a, share_b = split.split_amount(summary.net_profit)
    df = pd.DataFrame(
        [
            (split.partner_a_name, split.partner_a_percentage, share_a),
            (split.partner_b_name, split.partner_b_percentage, share_b),
        ],
        columns=columns,
    )
    return _round_amounts(df, ["amount"], decimals)


# ---------------------------------------------------------------------------
# Reconciliation and cash summary
# ---------------------------------------------------------------------------


def reconciliation_view(
    rows: Iterable[ReconciliationRow],
    split: PartnerSplit,
    decimals: int = 2,
) -> pd.DataFrame:
    """Return the monthly ledger; share columns are named after the partners."""
    records = [
        {
            "period": f"{r.month.value} {r.year}",
            "total_quantity": r.total_quantity,
            "total_debt": r.total_debt,
            "total_commission": r.total_commission,
            "final_balance": r.final_balance,
            split.partner_a_name: r.partner_a_share,
            split.partner_b_name: r.partner_b_share,
        }
        for r in rows
    ]
    df = pd.DataFrame(
        records,
        columns=[
            "period",
            "total_quantity",
            "total_debt",
            "total_commission",
            "final_balance",
            split.partner_a_name,
            split.partner_b_name,
        ],
    )
    return _round_amounts(
        df,
        [
            "total_debt",
            "total_commission",
            "final_balance",
            split.partner_a_name,
            split.partner_b_name,
        ],
        decimals,
    )


def cash_summary_view(rows: Iterable[CashSummaryRow], decimals: int = 2) -> pd.DataFrame:
    df = pd.DataFrame(
        [
            {
                "period": f"{r.month.value} {r.year}",
                "credits": r.credits,
                "debt": r.debt,
                "expenses": r.expenses,
                "balance": r.balance,
            }
            for r in rows
        ],
        columns=["period", "credits", "debt", "expenses", "balance"],
    )
    return _round_amounts(df, ["credits", "debt", "expenses", "balance"], decimals)


# ---------------------------------------------------------------------------
# Growth and series
# ---------------------------------------------------------------------------


def growth_view(points: Iterable[GrowthPoint], decimals: int = 2) -> pd.DataFrame:
    """Growth table; ``growth_percent`` is left empty when there is no comparison."""
    df = pd.DataFrame(
        [
            {
                "label": p.label,
                "quantity": p.quantity,
                "growth_percent": p.growth_percent if p.has_previous else None,
            }
            for p in points
        ],
        columns=["label", "quantity", "growth_percent"],
    )
    return _round_amounts(df, ["growth_percent"], decimals)


def profit_series_view(points: Iterable[SeriesPoint], decimals: int = 2) -> pd.DataFrame:
    df = pd.DataFrame(
        [{"date": p.date, "net_profit": p.net_profit} for p in points],
        columns=["date", "net_profit"],
    )
    return _round_amounts(df, ["net_profit"], decimals)


def balance_flow_view(
    flow: Iterable[tuple[str, float]], decimals: int = 2
) -> pd.DataFrame:
    df = pd.DataFrame(list(flow), columns=["period", "balance"])
    return _round_amounts(df, ["balance"], decimals)
