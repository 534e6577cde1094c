from datetime import date

import pytest

import diamond_ledger.periods as periods
from diamond_ledger.records import Expense, Month, MonthlyCommission, Operator, Sale


def _comm(month, year) -> MonthlyCommission:
    return MonthlyCommission(
        id=f"{month}{year}",
        month=month,
        year=year,
        operator=Operator.MPESA,
        commission_value=1.0,
    )


def test_period_for_month_covers_the_whole_month() -> None:
    p = periods.period_for_month(Month.FEB, 2024)

    assert p.start == date(2024, 2, 1)
    assert p.end == date(2024, 2, 29)
    assert p.label == "Feb 2024"


def test_period_for_month_rejects_unknown_month() -> None:
    with pytest.raises(ValueError):
        periods.period_for_month("Febr", 2024)


def test_period_for_range_rejects_inverted_bounds() -> None:
    with pytest.raises(ValueError):
        periods.period_for_range(date(2025, 3, 2), date(2025, 3, 1))


def test_current_month_period_uses_today(monkeypatch) -> None:
    monkeypatch.setattr(periods, "_today", lambda: date(2025, 12, 24))
    p = periods.current_month_period()

    assert (p.start, p.end) == (date(2025, 12, 1), date(2025, 12, 31))


def test_filter_records_inclusive_bounds() -> None:
    """Records on the first and last day of the period are kept."""
    p = periods.period_for_range(date(2025, 2, 1), date(2025, 3, 31))
    sales = [
        Sale(id="1", date=date(2025, 1, 31), quantity=1),
        Sale(id="2", date=date(2025, 2, 1), quantity=1),
        Sale(id="3", date=date(2025, 3, 31), quantity=1),
        Sale(id="4", date=date(2025, 4, 1), quantity=1),
    ]
    expenses = [
        Expense(id="e", date=date(2025, 3, 31), description="", category="Outros", value=1.0)
    ]
    filtered = periods.filter_records(sales, [], expenses, p)

    assert [s.id for s in filtered.sales] == ["2", "3"]
    assert [e.id for e in filtered.expenses] == ["e"]


def test_commissions_match_range_on_the_15th() -> None:
    """A range includes a commission when it contains the 15th of its month."""
    commissions = [_comm(Month.JAN, 2025), _comm(Month.FEB, 2025), _comm(Month.MAR, 2025)]

    p = periods.period_for_range(date(2025, 1, 16), date(2025, 3, 15))
    filtered = periods.filter_records([], commissions, [], p)
    assert [c.month for c in filtered.commissions] == [Month.FEB, Month.MAR]

    p = periods.period_for_month(Month.JAN, 2025)
    filtered = periods.filter_records([], commissions, [], p)
    assert [c.month for c in filtered.commissions] == [Month.JAN]


def test_future_checks() -> None:
    today = date(2025, 6, 15)

    assert periods.is_future_date(date(2025, 6, 16), today) is True
    assert periods.is_future_date(date(2025, 6, 15), today) is False

    assert periods.is_future_period(Month.JUL, 2025, today) is True
    assert periods.is_future_period(Month.JUN, 2025, today) is False
    assert periods.is_future_period(Month.JAN, 2026, today) is True
    assert periods.is_future_period(Month.DEC, 2024, today) is False
