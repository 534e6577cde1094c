from datetime import date

import pandas as pd
import pytest

from diamond_ledger.export import (
    period_ledger_frame,
    sales_frame,
    short_ref,
    write_period_ledger_csv,
    write_sales_csv,
)
from diamond_ledger.periods import FilteredRecords
from diamond_ledger.records import Expense, Month, MonthlyCommission, Operator, Sale


@pytest.fixture
def filtered() -> FilteredRecords:
    return FilteredRecords(
        sales=(Sale(id="abcdef123456", date=date(2025, 3, 1), quantity=10),),
        commissions=(
            MonthlyCommission("c0ffee99", Month.MAR, 2025, Operator.MPESA, 5500.0),
        ),
        expenses=(
            Expense("1", date(2025, 3, 2), "Internet Mensal", "Internet", 1500.0),
        ),
    )


def test_short_ref() -> None:
    assert short_ref("abcdef123456") == "123456"
    assert short_ref("9f8e7d6c5b4a") == "6C5B4A"
    assert short_ref("1") == "1"


def test_period_ledger_frame_signs(filtered) -> None:
    df = period_ledger_frame(filtered)

    assert list(df.columns) == ["type", "ref", "period", "value"]
    assert list(df["type"]) == ["Divida-Pacote", "Comissao-Op", "Despesa"]
    assert list(df["period"]) == ["2025-03-01", "Mar 2025", "2025-03-02"]
    assert list(df["value"]) == pytest.approx([-300.0, 5500.0, -1500.0])
    assert df.loc[1, "ref"] == "FFEE99"


def test_period_ledger_frame_empty() -> None:
    df = period_ledger_frame(FilteredRecords((), (), ()))
    assert df.empty
    assert list(df.columns) == ["type", "ref", "period", "value"]


def test_write_period_ledger_csv(filtered, tmp_path) -> None:
    path = tmp_path / "ledger.csv"
    write_period_ledger_csv(period_ledger_frame(filtered), path)

    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "Tipo,Ref,Data/Periodo,Valor"
    assert lines[1] == "Divida-Pacote,123456,2025-03-01,-300.0"
    assert len(lines) == 4


def test_sales_csv_layout(tmp_path) -> None:
    """Semicolon-separated, UTF-8 with BOM, dd/mm/yyyy dates."""
    sales = [Sale(id="1", date=date(2025, 3, 7), quantity=2)]
    path = tmp_path / "vendas.csv"
    write_sales_csv(sales_frame(sales), path)

    raw = path.read_bytes()
    assert raw.startswith(b"\xef\xbb\xbf")

    df = pd.read_csv(path, sep=";", encoding="utf-8-sig")
    assert list(df.columns)[:3] == ["Data", "Qtd", "Preço"]
    assert df.loc[0, "Data"] == "07/03/2025"
    assert df.loc[0, "Total Recebido"] == pytest.approx(940.0)
    assert df.loc[0, "Lucro"] == pytest.approx(90.0)
