# Diamond Ledger - Bookkeeping & profit-sharing engine for diamond resellers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
User-editable settings for Diamond Ledger.

Settings hold the partner profit split consumed by the reconciliation
engine, the per-unit price defaults used as calculation factors and the
default values offered when new records are entered.
Initial values come from the TOML configuration (see ``config.py``);
later edits are persisted with the records (see ``store.py``).

The two partner percentages are edited as a linked pair: changing one
side automatically adjusts the other so that they always sum to 100.
"""

from dataclasses import dataclass, replace
from typing import Optional

from .records import EXPENSE_CATEGORIES, Operator


def _clamp_percentage(value: float) -> float:
    return min(100.0, max(0.0, float(value)))


@dataclass(frozen=True)
class PartnerSplit:
    """
    Names and profit percentages of the two business partners.

    Attributes
    ----------
    partner_a_name, partner_b_name:
        Display names of the partners.
    partner_a_percentage, partner_b_percentage:
        Share of the balance attributed to each partner, in percent.
        Both lie in [0, 100] and sum to 100 when built through the
        ``with_partner_*_percentage`` helpers.
    """

    partner_a_name: str = "Sócio A"
    partner_b_name: str = "Sócio B"
    partner_a_percentage: float = 40.0
    partner_b_percentage: float = 60.0

    def with_partner_a_percentage(self, value: float) -> "PartnerSplit":
        """Set partner A's percentage (clamped to [0, 100]); B gets the rest."""
        a = _clamp_percentage(value)
        return replace(self, partner_a_percentage=a, partner_b_percentage=100.0 - a)

    def with_partner_b_percentage(self, value: float) -> "PartnerSplit":
        """Set partner B's percentage (clamped to [0, 100]); A gets the rest."""
        b = _clamp_percentage(value)
        return replace(self, partner_b_percentage=b, partner_a_percentage=100.0 - b)

    def with_names(self, partner_a_name: str, partner_b_name: str) -> "PartnerSplit":
        return replace(
            self,
            partner_a_name=partner_a_name,
            partner_b_name=partner_b_name,
        )

    def split_amount(self, amount: float) -> tuple[float, float]:
        """Return (partner A share, partner B share) of ``amount``."""
        return (
            amount * self.partner_a_percentage / 100,
            amount * self.partner_b_percentage / 100,
        )


@dataclass(frozen=True)
class Settings:
    """
    Settings exposed to the reconciliation engine and to record entry.

    Attributes
    ----------
    split:
        Partner names and percentages.
    default_expense_category:
        Category pre-selected when a new expense is entered.
    default_operator:
        Operator pre-selected when a new commission is entered.
    default_quantity:
        Quantity used when a new sale is entered without one.
    default_sale_price, default_gross_commission, default_repayment_rate:
        Per-unit price, gross commission and debt to replace. They are the
        factors of every derived calculation of the session.
    """

    split: PartnerSplit = PartnerSplit()
    default_expense_category: str = EXPENSE_CATEGORIES[0]
    default_operator: Operator = Operator.MPESA
    default_quantity: int = 1
    default_sale_price: float = 470.0
    default_gross_commission: float = 75.0
    default_repayment_rate: float = 30.0

    def with_split(self, split: PartnerSplit) -> "Settings":
        return replace(self, split=split)

    def with_defaults(
        self,
        *,
        expense_category: Optional[str] = None,
        operator: Optional[Operator] = None,
        quantity: Optional[int] = None,
        sale_price: Optional[float] = None,
        gross_commission: Optional[float] = None,
        repayment_rate: Optional[float] = None,
    ) -> "Settings":
        """Return a copy with the given default values replaced.

        Arguments left to ``None`` keep their current value.
        """
        changes = {
            "default_expense_category": expense_category,
            "default_operator": operator,
            "default_quantity": quantity,
            "default_sale_price": sale_price,
            "default_gross_commission": gross_commission,
            "default_repayment_rate": repayment_rate,
        }
        return replace(self, **{k: v for k, v in changes.items() if v is not None})
