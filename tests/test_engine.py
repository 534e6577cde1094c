from datetime import date

import pytest

from diamond_ledger.engine import (
    DEFAULT_FACTORS,
    Factors,
    annual_volume,
    build_cash_summary,
    build_reconciliation,
    build_reconciliation_buckets,
    compute_sale_metrics,
    factors_from_settings,
    monthly_volume,
    reconcile,
    summarize_period,
)
from diamond_ledger.growth import annual_growth, monthly_growth
from diamond_ledger.records import (
    Expense,
    Month,
    MonthlyCommission,
    Operator,
    Sale,
)
from diamond_ledger.series import build_profit_series
from diamond_ledger.settings import PartnerSplit, Settings


def _sale(id_, d, qty) -> Sale:
    return Sale(id=id_, date=d, quantity=qty)


def _comm(id_, month, year, value, operator=Operator.MPESA) -> MonthlyCommission:
    return MonthlyCommission(
        id=id_, month=month, year=year, operator=operator, commission_value=value
    )


def _expense(id_, d, value, category="Internet") -> Expense:
    return Expense(id=id_, date=d, description="x", category=category, value=value)


# ---------------------------------------------------------------------------
# Sale metrics
# ---------------------------------------------------------------------------


def test_sale_metrics_with_default_factors() -> None:
    """Each metric is quantity multiplied by its per-unit factor."""
    m = compute_sale_metrics(_sale("1", date(2025, 3, 1), 10))

    assert m.value_received == pytest.approx(4700.0)
    assert m.gross_commission == pytest.approx(750.0)
    assert m.debt_owed == pytest.approx(300.0)
    assert m.net_profit == pytest.approx(450.0)


def test_sale_metrics_net_profit_identity() -> None:
    """net_profit is always gross_commission - debt_owed."""
    factors = Factors(value_per_unit=100.0, gross_commission_per_unit=7.5, debt_per_unit=2.0)
    for qty in (1, 3, 250):
        m = compute_sale_metrics(_sale("x", date(2025, 1, 1), qty), factors)
        assert m.net_profit == pytest.approx(m.gross_commission - m.debt_owed)
        assert m.value_received == pytest.approx(qty * 100.0)


def test_sale_metrics_zero_quantity_is_all_zero() -> None:
    m = compute_sale_metrics(_sale("x", date(2025, 1, 1), 0))
    assert (m.value_received, m.gross_commission, m.debt_owed, m.net_profit) == (
        0,
        0,
        0,
        0,
    )


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


def test_annual_volume_sums_quantities_per_year() -> None:
    sales = [
        _sale("1", date(2024, 5, 1), 10),
        _sale("2", date(2024, 12, 31), 5),
        _sale("3", date(2025, 1, 1), 7),
    ]
    assert annual_volume(sales) == {2024: 15, 2025: 7}


def test_annual_volume_empty() -> None:
    assert annual_volume([]) == {}


def test_monthly_volume_has_twelve_entries() -> None:
    """Months without sales carry 0; other years are ignored."""
    sales = [
        _sale("1", date(2025, 3, 1), 10),
        _sale("2", date(2025, 3, 20), 4),
        _sale("3", date(2025, 11, 2), 1),
        _sale("4", date(2024, 3, 1), 99),
    ]
    volume = monthly_volume(sales, 2025)

    assert len(volume) == 12
    assert [m for m, _ in volume] == list(Month)
    assert dict(volume)[Month.MAR] == 14
    assert dict(volume)[Month.NOV] == 1
    assert sum(q for _, q in volume) == 15


def test_buckets_merge_sales_and_commissions() -> None:
    """Sales and commissions of the same month land in the same bucket."""
    sales = [_sale("1", date(2024, 3, 5), 10)]
    commissions = [
        _comm("a", Month.MAR, 2024, 1000.0),
        _comm("b", Month.MAR, 2024, 500.0, Operator.EMOLA),
        _comm("c", Month.APR, 2024, 200.0),
    ]
    buckets = build_reconciliation_buckets(sales, commissions)

    assert set(buckets) == {(2024, 2), (2024, 3)}
    march = buckets[(2024, 2)]
    assert march.total_quantity == 10
    assert march.total_debt == pytest.approx(300.0)
    assert march.total_commission == pytest.approx(1500.0)

    april = buckets[(2024, 3)]
    assert april.total_quantity == 0
    assert april.total_debt == 0
    assert april.total_commission == pytest.approx(200.0)


def test_buckets_skip_non_canonical_month() -> None:
    """A commission with an unknown month name is ignored."""
    bad = MonthlyCommission(
        id="x", month="March", year=2024, operator=Operator.MPESA, commission_value=9.0
    )
    assert build_reconciliation_buckets([], [bad]) == {}


def test_summarize_period_net_profit_deducts_expenses() -> None:
    summary = summarize_period(
        [_sale("1", date(2025, 3, 1), 50), _sale("2", date(2025, 3, 2), 30)],
        [_comm("a", Month.MAR, 2025, 5500.0), _comm("b", Month.MAR, 2025, 3200.0)],
        [_expense("e", date(2025, 3, 2), 1500.0)],
    )

    assert summary.total_quantity == 80
    assert summary.total_debt == pytest.approx(2400.0)
    assert summary.total_commission == pytest.approx(8700.0)
    assert summary.total_expenses == pytest.approx(1500.0)
    assert summary.net_profit == pytest.approx(8700.0 - 2400.0 - 1500.0)


# ---------------------------------------------------------------------------
# Reconciliation
# ---------------------------------------------------------------------------


def test_reconciliation_example_march() -> None:
    """10 units in March (debt 300) against 1500 of commissions, split 40/60."""
    rows = build_reconciliation(
        [_sale("1", date(2024, 3, 10), 10)],
        [_comm("a", Month.MAR, 2024, 1500.0)],
        PartnerSplit(),
    )

    assert len(rows) == 1
    row = rows[0]
    assert row.month == Month.MAR
    assert row.total_debt == pytest.approx(300.0)
    assert row.total_commission == pytest.approx(1500.0)
    assert row.final_balance == pytest.approx(1200.0)
    assert row.partner_a_share == pytest.approx(480.0)
    assert row.partner_b_share == pytest.approx(720.0)


def test_reconciliation_shares_sum_to_balance() -> None:
    split = PartnerSplit().with_partner_a_percentage(33.3)
    rows = build_reconciliation(
        [_sale("1", date(2024, 1, 2), 7), _sale("2", date(2024, 2, 2), 13)],
        [_comm("a", Month.JAN, 2024, 123.45), _comm("b", Month.FEB, 2024, 999.0)],
        split,
    )
    for r in rows:
        assert r.partner_a_share + r.partner_b_share == pytest.approx(r.final_balance)
        assert r.final_balance == pytest.approx(r.total_commission - r.total_debt)


def test_reconciliation_negative_balance_is_kept() -> None:
    """A month with sales but no commission has a negative balance."""
    rows = build_reconciliation([_sale("1", date(2024, 6, 1), 10)], [], PartnerSplit())

    assert rows[0].total_commission == 0
    assert rows[0].final_balance == pytest.approx(-300.0)
    assert rows[0].partner_a_share == pytest.approx(-120.0)


def test_reconciliation_sorted_most_recent_first() -> None:
    rows = build_reconciliation(
        [
            _sale("1", date(2023, 12, 1), 1),
            _sale("2", date(2024, 2, 1), 1),
            _sale("3", date(2024, 11, 1), 1),
        ],
        [_comm("a", Month.JAN, 2024, 10.0)],
        PartnerSplit(),
    )
    assert [(r.year, r.month_index) for r in rows] == [
        (2024, 10),
        (2024, 1),
        (2024, 0),
        (2023, 11),
    ]


def test_reconcile_uses_split_percentages() -> None:
    buckets = build_reconciliation_buckets(
        [], [_comm("a", Month.MAY, 2025, 1000.0)], DEFAULT_FACTORS
    )
    split = PartnerSplit(partner_a_percentage=25.0, partner_b_percentage=75.0)
    (row,) = reconcile(buckets, split)

    assert row.partner_a_share == pytest.approx(250.0)
    assert row.partner_b_share == pytest.approx(750.0)


def test_reconciliation_empty_inputs() -> None:
    assert build_reconciliation([], [], PartnerSplit()) == []


# ---------------------------------------------------------------------------
# Cash summary
# ---------------------------------------------------------------------------


def test_cash_summary_includes_expenses() -> None:
    rows = build_cash_summary(
        [_sale("1", date(2025, 3, 1), 10)],
        [_comm("a", Month.MAR, 2025, 1500.0)],
        [_expense("e", date(2025, 3, 5), 200.0), _expense("f", date(2025, 4, 1), 50.0)],
    )

    assert [(r.year, r.month) for r in rows] == [(2025, Month.APR), (2025, Month.MAR)]
    april, march = rows
    assert march.credits == pytest.approx(1500.0)
    assert march.debt == pytest.approx(300.0)
    assert march.expenses == pytest.approx(200.0)
    assert march.balance == pytest.approx(1000.0)
    assert april.balance == pytest.approx(-50.0)


def test_factors_are_configurable() -> None:
    factors = Factors(value_per_unit=500.0, gross_commission_per_unit=80.0, debt_per_unit=25.0)
    rows = build_reconciliation(
        [_sale("1", date(2024, 3, 10), 10)],
        [_comm("a", Month.MAR, 2024, 1500.0)],
        PartnerSplit(),
        factors,
    )
    assert rows[0].total_debt == pytest.approx(250.0)


def _mixed_records():
    sales = [
        _sale("1", date(2024, 3, 5), 10),
        _sale("2", date(2024, 3, 20), 4),
        _sale("3", date(2025, 1, 2), 7),
        _sale("4", date(2025, 2, 28), 1),
    ]
    commissions = [
        _comm("a", Month.MAR, 2024, 1500.0),
        _comm("b", Month.FEB, 2025, 300.0, Operator.EMOLA),
        _comm("c", Month.DEC, 2023, 50.0),
    ]
    expenses = [_expense("x", date(2025, 1, 10), 120.0)]
    return sales, commissions, expenses


def test_bucket_quantities_add_up_to_the_sales() -> None:
    sales, commissions, _ = _mixed_records()
    buckets = build_reconciliation_buckets(sales, commissions, DEFAULT_FACTORS)

    assert sum(b.total_quantity for b in buckets.values()) == sum(
        s.quantity for s in sales
    )
    assert sum(annual_volume(sales).values()) == sum(s.quantity for s in sales)


def test_aggregators_are_repeatable() -> None:
    """Running an aggregator twice on the same records gives the same output."""
    sales, commissions, expenses = _mixed_records()
    split = PartnerSplit()
    aggregators = [
        lambda: build_reconciliation(sales, commissions, split),
        lambda: build_cash_summary(sales, commissions, expenses, DEFAULT_FACTORS),
        lambda: annual_volume(sales),
        lambda: monthly_volume(sales, 2025),
        lambda: summarize_period(sales, commissions, expenses, DEFAULT_FACTORS),
        lambda: annual_growth(sales),
        lambda: monthly_growth(sales, 2025),
        lambda: build_profit_series(sales),
    ]

    for aggregate in aggregators:
        assert aggregate() == aggregate()


def test_factors_from_settings() -> None:
    settings = Settings().with_defaults(sale_price=480, repayment_rate=32.5)

    assert factors_from_settings(settings) == Factors(480, 75.0, 32.5)
    assert factors_from_settings(Settings()) == DEFAULT_FACTORS
