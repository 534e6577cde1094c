# Diamond Ledger - Bookkeeping & profit-sharing engine for diamond resellers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
In-memory record store for Diamond Ledger.

This module sits between:
- the persistence collaborator (``storage.py`` + ``serialization.py``), and
- user-facing layers such as the CLI.

Responsibilities
----------------
1) Loading
   - Each collection (sales, commissions, expenses) and the settings are
     loaded once when the store is opened.
   - A missing key yields the built-in default dataset.
   - A payload that cannot be read is logged and replaced by the default
     dataset; this never fails the application.

2) Mutations
   - Add / edit / delete (single and multiple) for every collection, plus
     settings updates.
   - Collections are tuples: every mutation builds a new tuple and swaps it
     in (copy-on-write), so any view taken earlier stays consistent.
   - Every mutation is written back to storage immediately.

3) Snapshots
   - ``snapshot()`` returns the current collections and settings as an
     immutable ``LedgerSnapshot``, suitable for the pure engine functions
     and for the insight generator.

Design notes
------------
- The store performs no validation: quantities, values and dates are
  checked at the input boundary (CLI).
- Record ids come from a caller-supplied factory and are only required to
  be unique within their collection.
"""

import logging
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Callable, Optional, Protocol

from .engine import Factors, factors_from_settings
from .records import (
    Expense,
    Month,
    MonthlyCommission,
    Operator,
    Sale,
    default_commissions,
    default_expenses,
    default_sales,
)
from .serialization import (
    PayloadError,
    dump_backup,
    dump_commissions,
    dump_expenses,
    dump_sales,
    dump_settings,
    load_backup,
    load_commissions,
    load_expenses,
    load_sales,
    load_settings,
)
from .periods import _today
from .settings import PartnerSplit, Settings

logger = logging.getLogger(__name__)

SALES_KEY = "diamond_sales"
COMMISSIONS_KEY = "diamond_commissions"
EXPENSES_KEY = "diamond_expenses"
SETTINGS_KEY = "diamond_settings"


class KeyValueStorage(Protocol):
    """Persistence collaborator used by the store."""

    def load(self, key: str) -> Optional[str]: ...

    def save(self, key: str, text: str) -> None: ...

    def save_many(self, items: Mapping[str, str]) -> None: ...


@dataclass(frozen=True)
class LedgerSnapshot:
    """Consistent, immutable view of every collection and the settings."""

    sales: tuple[Sale, ...]
    commissions: tuple[MonthlyCommission, ...]
    expenses: tuple[Expense, ...]
    settings: Settings


def _new_id() -> str:
    return uuid.uuid4().hex


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _replace_by_id(records: tuple, record) -> tuple:
    """Return a copy of ``records`` with the record sharing its id replaced."""
    if not any(r.id == record.id for r in records):
        raise KeyError(f"No record with id {record.id!r}.")
    return tuple(record if r.id == record.id else r for r in records)


def _drop_ids(records: tuple, ids: Iterable[str]) -> tuple:
    """Return a copy of ``records`` without the given ids."""
    ids = set(ids)
    missing = ids.difference(r.id for r in records)
    if missing:
        raise KeyError(f"No record with id(s): {', '.join(sorted(missing))}.")
    return tuple(r for r in records if r.id not in ids)


class LedgerStore:
    """
    Owner of the record collections and settings.

    Use ``LedgerStore.open()`` to load the collections from storage.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        sales: tuple[Sale, ...],
        commissions: tuple[MonthlyCommission, ...],
        expenses: tuple[Expense, ...],
        settings: Settings,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._storage = storage
        self._sales = sales
        self._commissions = commissions
        self._expenses = expenses
        self._settings = settings
        self._id_factory = id_factory

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def open(
        cls,
        storage: KeyValueStorage,
        *,
        settings_defaults: Settings = Settings(),
        today: date,
        id_factory: Callable[[], str] = _new_id,
    ) -> "LedgerStore":
        """
        Load every collection from ``storage``.

        Parameters
        ----------
        storage:
            Key/value persistence collaborator.
        settings_defaults:
            Settings used when none are stored (usually from the TOML
            configuration), and for fields missing from stored settings.
        today:
            Reference date for the default datasets and for commissions
            stored without a year.
        id_factory:
            Generator of new record ids.
        """
        sales = cls._load_collection(
            storage, SALES_KEY, load_sales, lambda: default_sales(today)
        )
        commissions = cls._load_collection(
            storage,
            COMMISSIONS_KEY,
            lambda text: load_commissions(text, today),
            lambda: default_commissions(today),
        )
        expenses = cls._load_collection(
            storage, EXPENSES_KEY, load_expenses, lambda: default_expenses(today)
        )
        settings = cls._load_collection(
            storage,
            SETTINGS_KEY,
            lambda text: load_settings(text, settings_defaults),
            lambda: settings_defaults,
        )
        return cls(
            storage,
            sales=sales,
            commissions=commissions,
            expenses=expenses,
            settings=settings,
            id_factory=id_factory,
        )

    @staticmethod
    def _load_collection(storage, key, parse, fallback):
        text = storage.load(key)
        if text is None:
            return fallback()
        try:
            return parse(text)
        except PayloadError as exc:
            logger.warning(
                "Could not read stored %s (%s); using the default dataset.", key, exc
            )
            return fallback()

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def sales(self) -> tuple[Sale, ...]:
        return self._sales

    @property
    def commissions(self) -> tuple[MonthlyCommission, ...]:
        return self._commissions

    @property
    def expenses(self) -> tuple[Expense, ...]:
        return self._expenses

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def factors(self) -> Factors:
        """Per-unit factors held by the current price defaults."""
        return factors_from_settings(self._settings)

    def snapshot(self) -> LedgerSnapshot:
        return LedgerSnapshot(
            sales=self._sales,
            commissions=self._commissions,
            expenses=self._expenses,
            settings=self._settings,
        )

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _set_sales(self, sales: tuple[Sale, ...]) -> None:
        self._sales = sales
        self._storage.save(SALES_KEY, dump_sales(sales))

    def _set_commissions(self, commissions: tuple[MonthlyCommission, ...]) -> None:
        self._commissions = commissions
        self._storage.save(COMMISSIONS_KEY, dump_commissions(commissions))

    def _set_expenses(self, expenses: tuple[Expense, ...]) -> None:
        self._expenses = expenses
        self._storage.save(EXPENSES_KEY, dump_expenses(expenses))

    def _set_settings(self, settings: Settings) -> None:
        self._settings = settings
        self._storage.save(SETTINGS_KEY, dump_settings(settings))

    # ------------------------------------------------------------------
    # Sales
    # ------------------------------------------------------------------

    def add_sale(self, sale_date: date, quantity: int) -> Sale:
        """Create a sale; new records are placed first, as in the listings."""
        sale = Sale(id=self._id_factory(), date=sale_date, quantity=quantity)
        self._set_sales((sale, *self._sales))
        return sale

    def edit_sale(self, sale: Sale) -> Sale:
        self._set_sales(_replace_by_id(self._sales, sale))
        return sale

    def delete_sale(self, sale_id: str) -> None:
        self.delete_sales([sale_id])

    def delete_sales(self, sale_ids: Iterable[str]) -> None:
        self._set_sales(_drop_ids(self._sales, sale_ids))

    # ------------------------------------------------------------------
    # Commissions
    # ------------------------------------------------------------------

    def add_commission(
        self,
        month: Month,
        year: int,
        operator: Operator,
        commission_value: float,
    ) -> MonthlyCommission:
        commission = MonthlyCommission(
            id=self._id_factory(),
            month=month,
            year=year,
            operator=operator,
            commission_value=commission_value,
        )
        self._set_commissions((commission, *self._commissions))
        return commission

    def edit_commission(self, commission: MonthlyCommission) -> MonthlyCommission:
        self._set_commissions(_replace_by_id(self._commissions, commission))
        return commission

    def delete_commission(self, commission_id: str) -> None:
        self.delete_commissions([commission_id])

    def delete_commissions(self, commission_ids: Iterable[str]) -> None:
        self._set_commissions(_drop_ids(self._commissions, commission_ids))

    # ------------------------------------------------------------------
    # Expenses
    # ------------------------------------------------------------------

    def add_expense(
        self,
        expense_date: date,
        description: str,
        category: str,
        value: float,
    ) -> Expense:
        expense = Expense(
            id=self._id_factory(),
            date=expense_date,
            description=description,
            category=category,
            value=value,
        )
        self._set_expenses((expense, *self._expenses))
        return expense

    def edit_expense(self, expense: Expense) -> Expense:
        self._set_expenses(_replace_by_id(self._expenses, expense))
        return expense

    def delete_expense(self, expense_id: str) -> None:
        self.delete_expenses([expense_id])

    def delete_expenses(self, expense_ids: Iterable[str]) -> None:
        self._set_expenses(_drop_ids(self._expenses, expense_ids))

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def update_settings(self, settings: Settings) -> Settings:
        self._set_settings(settings)
        return settings

    def update_split(self, split: PartnerSplit) -> Settings:
        return self.update_settings(self._settings.with_split(split))

    # ------------------------------------------------------------------
    # Backup
    # ------------------------------------------------------------------

    def export_backup(self, path: Path) -> None:
        """Write every collection and the settings to a JSON file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            dump_backup(self._sales, self._commissions, self._expenses, self._settings),
            encoding="utf-8",
        )

    def restore_backup(self, path: Path, today: Optional[date] = None) -> LedgerSnapshot:
        """
        Replace every collection and the settings with a backup file.

        ``today`` is used for commissions stored without a year.

        Raises
        ------
        FileNotFoundError
            If the file does not exist.
        PayloadError
            If the file is not a valid backup; nothing is replaced.
        sqlite3.Error
            If the backup cannot be saved; nothing is replaced.
        """
        if not path.is_file():
            raise FileNotFoundError(f"Backup file not found: {path}")

        sales, commissions, expenses, settings = load_backup(
            path.read_text(encoding="utf-8"), self._settings, today or _today()
        )
        # All four keys are written in one call before anything is swapped in.
        self._storage.save_many(
            {
                SALES_KEY: dump_sales(sales),
                COMMISSIONS_KEY: dump_commissions(commissions),
                EXPENSES_KEY: dump_expenses(expenses),
                SETTINGS_KEY: dump_settings(settings),
            }
        )
        self._sales = sales
        self._commissions = commissions
        self._expenses = expenses
        self._settings = settings
        logger.info(
            "Restored %d sales, %d commissions, %d expenses from %s",
            len(sales),
            len(commissions),
            len(expenses),
            path,
        )
        return self.snapshot()
