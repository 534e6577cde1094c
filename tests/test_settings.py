import pytest

from diamond_ledger.records import Operator
from diamond_ledger.settings import PartnerSplit, Settings


def test_default_split() -> None:
    split = PartnerSplit()

    assert split.partner_a_name == "Sócio A"
    assert split.partner_b_name == "Sócio B"
    assert split.partner_a_percentage + split.partner_b_percentage == pytest.approx(100)


@pytest.mark.parametrize("value", [-10, 0, 33.3, 50, 100, 150])
def test_linked_percentages_always_sum_to_100(value) -> None:
    a = PartnerSplit().with_partner_a_percentage(value)
    b = PartnerSplit().with_partner_b_percentage(value)

    for split in (a, b):
        assert 0 <= split.partner_a_percentage <= 100
        assert 0 <= split.partner_b_percentage <= 100
        assert split.partner_a_percentage + split.partner_b_percentage == pytest.approx(100)


def test_linked_percentage_is_clamped() -> None:
    split = PartnerSplit().with_partner_a_percentage(120)

    assert split.partner_a_percentage == 100
    assert split.partner_b_percentage == 0


def test_split_amount() -> None:
    assert PartnerSplit().split_amount(1200.0) == pytest.approx((480.0, 720.0))


def test_with_names_keeps_percentages() -> None:
    split = PartnerSplit().with_partner_a_percentage(70).with_names("Ana", "Rui")

    assert (split.partner_a_name, split.partner_b_name) == ("Ana", "Rui")
    assert split.partner_a_percentage == 70


def test_with_defaults_only_replaces_given_values() -> None:
    settings = Settings().with_defaults(operator=Operator.EMOLA)

    assert settings.default_operator is Operator.EMOLA
    assert settings.default_expense_category == "Transporte"

    settings = settings.with_defaults(expense_category="Outros")
    assert settings.default_expense_category == "Outros"
    assert settings.default_operator is Operator.EMOLA


def test_price_defaults_match_the_factor_defaults() -> None:
    settings = Settings()

    assert settings.default_quantity == 1
    assert settings.default_sale_price == 470.0
    assert settings.default_gross_commission == 75.0
    assert settings.default_repayment_rate == 30.0


def test_with_defaults_updates_prices_and_quantity() -> None:
    settings = Settings().with_defaults(quantity=10, gross_commission=80)

    assert settings.default_quantity == 10
    assert settings.default_gross_commission == 80
    assert settings.default_sale_price == 470.0
    assert settings.default_operator is Operator.MPESA
