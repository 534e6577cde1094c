# Diamond Ledger - Bookkeeping & profit-sharing engine for diamond resellers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
CSV exports for Diamond Ledger.

Two exports are provided:

1) Period ledger
   -------------
   One line per record of a filtered period, with signed values:

       type           ref      period       value
       Divida-Pacote  A1B2C3   2025-03-01   -300.0    (sales debt)
       Comissao-Op    D4E5F6   Mar 2025     5500.0    (commission)
       Despesa        0000A1   2025-03-02   -1500.0   (expense)

   ``ref`` is the last six characters of the record id, upper-cased.
   The CSV header is ``Tipo,Ref,Data/Periodo,Valor``.

2) Sales sheet
   -----------
   Per-sale metrics, written as a ``;``-separated UTF-8 file with a BOM
   (so spreadsheet tools detect the encoding) and ``dd/mm/yyyy`` dates.
"""

import os
from collections.abc import Iterable
from typing import Union

import pandas as pd

from .engine import DEFAULT_FACTORS, Factors, compute_sale_metrics
from .periods import FilteredRecords
from .records import Sale

PERIOD_LEDGER_HEADERS = {
    "type": "Tipo",
    "ref": "Ref",
    "period": "Data/Periodo",
    "value": "Valor",
}

SALES_HEADERS = {
    "date": "Data",
    "quantity": "Qtd",
    "value_per_unit": "Preço",
    "gross_commission_per_unit": "Comissão Unit",
    "debt_per_unit": "Taxa",
    "value_received": "Total Recebido",
    "gross_commission": "Total Comiss",
    "debt_owed": "Dívida",
    "net_profit": "Lucro",
}


def short_ref(record_id: str) -> str:
    """Return the display reference of a record id."""
    return record_id[-6:].upper()


def period_ledger_frame(
    filtered: FilteredRecords,
    factors: Factors = DEFAULT_FACTORS,
) -> pd.DataFrame:
    """Return the signed ledger lines of a filtered period.

    Lines are grouped by kind (sales, commissions, expenses) and keep the
    order of the input collections.
    """
    rows: list[dict[str, object]] = []
    for s in filtered.sales:
        rows.append(
            {
                "type": "Divida-Pacote",
                "ref": short_ref(s.id),
                "period": s.date.isoformat(),
                "value": -compute_sale_metrics(s, factors).debt_owed,
            }
        )
    for c in filtered.commissions:
        rows.append(
            {
                "type": "Comissao-Op",
                "ref": short_ref(c.id),
                "period": f"{c.month.value} {c.year}",
                "value": c.commission_value,
            }
        )
    for e in filtered.expenses:
        rows.append(
            {
                "type": "Despesa",
                "ref": short_ref(e.id),
                "period": e.date.isoformat(),
                "value": -e.value,
            }
        )
    return pd.DataFrame(rows, columns=list(PERIOD_LEDGER_HEADERS))


def write_period_ledger_csv(
    df: pd.DataFrame, path: Union[str, "os.PathLike[str]"]
) -> None:
    df.rename(columns=PERIOD_LEDGER_HEADERS).to_csv(
        path, index=False, encoding="utf-8"
    )


def sales_frame(
    sales: Iterable[Sale],
    factors: Factors = DEFAULT_FACTORS,
) -> pd.DataFrame:
    """Return one line of metrics per sale."""
    rows: list[dict[str, object]] = []
    for s in sales:
        m = compute_sale_metrics(s, factors)
        rows.append(
            {
                "date": s.date,
                "quantity": s.quantity,
                "value_per_unit": factors.value_per_unit,
                "gross_commission_per_unit": factors.gross_commission_per_unit,
                "debt_per_unit": factors.debt_per_unit,
                "value_received": m.value_received,
                "gross_commission": m.gross_commission,
                "debt_owed": m.debt_owed,
                "net_profit": m.net_profit,
            }
        )
    return pd.DataFrame(rows, columns=list(SALES_HEADERS))


def write_sales_csv(df: pd.DataFrame, path: Union[str, "os.PathLike[str]"]) -> None:
    """Write a sales frame as a spreadsheet-friendly CSV (``;``, BOM, dd/mm/yyyy)."""
    out = df.copy()
    out["date"] = out["date"].map(lambda d: d.strftime("%d/%m/%Y"))
    out.rename(columns=SALES_HEADERS).to_csv(
        path, index=False, sep=";", encoding="utf-8-sig"
    )
