# Diamond Ledger - Bookkeeping & profit-sharing engine for diamond resellers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Raw record types for Diamond Ledger.

This module defines the three source collections handled by the
application:

- ``Sale``              : units of diamonds sold on a calendar day,
- ``MonthlyCommission`` : commission paid by an operator for a month,
- ``Expense``           : fixed business expense.

All records are immutable. Edits replace a whole record by id and
deletions drop it from its collection (see ``store.py``).

The module also provides the built-in default datasets used on first run
or when stored data cannot be read.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional, Union


class Month(str, Enum):
    """Canonical month names, in calendar order."""

    JAN = "Jan"
    FEB = "Feb"
    MAR = "Mar"
    APR = "Apr"
    MAY = "May"
    JUN = "Jun"
    JUL = "Jul"
    AUG = "Aug"
    SEP = "Sep"
    OCT = "Oct"
    NOV = "Nov"
    DEC = "Dec"


class Operator(str, Enum):
    """Payment operators paying monthly commissions."""

    MPESA = "M-Pesa"
    EMOLA = "e-Mola"


MONTHS: tuple[Month, ...] = tuple(Month)
OPERATORS: tuple[Operator, ...] = tuple(Operator)

EXPENSE_CATEGORIES: tuple[str, ...] = (
    "Transporte",
    "Alimentação",
    "Internet",
    "Crédito/Chamadas",
    "Outros",
)


def month_index(value: Union[Month, str]) -> Optional[int]:
    """
    Return the 0-based calendar index of a month name.

    Returns None when ``value`` is not one of the twelve canonical names
    (``"Jan"`` .. ``"Dec"``).
    """
    try:
        return MONTHS.index(Month(value))
    except ValueError:
        return None


def month_from_index(index: int) -> Month:
    """Return the Month for a 0-based index (0 = Jan)."""
    return MONTHS[index]


@dataclass(frozen=True)
class Sale:
    """A number of units sold on a given calendar day."""

    id: str
    date: date
    quantity: int


@dataclass(frozen=True)
class MonthlyCommission:
    """Commission paid by an operator for a calendar month."""

    id: str
    month: Month
    year: int
    operator: Operator
    commission_value: float


@dataclass(frozen=True)
class Expense:
    """Fixed business expense (transport, internet, airtime, ...)."""

    id: str
    date: date
    description: str
    category: str
    value: float


# ---------------------------------------------------------------------------
# Default datasets
# ---------------------------------------------------------------------------


def default_sales(today: date) -> tuple[Sale, ...]:
    """Two sample sales on the first days of the current month."""
    return (
        Sale(id="1", date=today.replace(day=1), quantity=50),
        Sale(id="2", date=today.replace(day=2), quantity=30),
    )


def default_commissions(today: date) -> tuple[MonthlyCommission, ...]:
    """One sample commission per operator for the current month."""
    month = month_from_index(today.month - 1)
    return (
        MonthlyCommission(
            id="1",
            month=month,
            year=today.year,
            operator=Operator.MPESA,
            commission_value=5500.0,
        ),
        MonthlyCommission(
            id="2",
            month=month,
            year=today.year,
            operator=Operator.EMOLA,
            commission_value=3200.0,
        ),
    )


def default_expenses(today: date) -> tuple[Expense, ...]:
    """A single monthly internet expense."""
    return (
        Expense(
            id="1",
            date=today.replace(day=2),
            description="Internet Mensal",
            category="Internet",
            value=1500.0,
        ),
    )
