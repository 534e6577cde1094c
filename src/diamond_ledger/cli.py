# Diamond Ledger - Bookkeeping & profit-sharing engine for diamond resellers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for Diamond Ledger.

This module wires together the main building blocks of Diamond Ledger:

- application configuration (factors, partners, storage, display),
- the record store (sales, commissions, expenses, settings),
- the derivation engine (metrics, aggregation, reconciliation),
- growth and chart series builders,
- view helpers (tabular rendering) and CSV exports,
- the AI insight generator.

The CLI is intentionally thin: it does not implement any financial logic
itself. It parses arguments, validates user input, calls the underlying
modules and prints the resulting tables.


Configuration
-------------

By default, the CLI reads its configuration from a TOML file named
``diamond_ledger_config.toml`` in the current working directory. When the
file does not exist, built-in defaults are used. You can point to another
file using:

    --config PATH

The log level comes from ``[logging].level`` and can be overridden with
``--log-level``.


Period selection
----------------

Commands that work on a period (dashboard, export, record listings) use:

- ``--month MON --year YYYY``: a calendar month (defaults to the current
  month and year),
- ``--from-date YYYY-MM-DD --to-date YYYY-MM-DD``: a custom range
  (inclusive). Commissions fall into a range through the 15th of their
  month.


Commands
--------

    sales        add | list | edit | delete | export
    commissions  add | list | edit | delete
    expenses     add | list | edit | delete
    dashboard       period totals, partner split, growth
    reconciliation  monthly ledger split between the partners
    summary         monthly cash summary (net of expenses)
    series          daily profit series and monthly balance flow
    insights        AI analysis of the records (Google Gemini)
    export          period ledger as CSV
    settings     show | split | names | defaults
    backup       export | restore


Input validation
----------------

Quantities must be positive integers, amounts non-negative numbers and
dates ISO formatted. Invalid input stops the command with a message.
Dates and periods in the future only produce a warning.
"""

import argparse
import logging
import math
import os
from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Optional

import pandas as pd

from . import __version__, periods
from .config import AppConfig, load_app_config
from .engine import build_cash_summary, build_reconciliation, summarize_period
from .export import (
    period_ledger_frame,
    sales_frame,
    write_period_ledger_csv,
    write_sales_csv,
)
from .growth import annual_growth, monthly_growth
from .insights import InsightSnapshot, generate_insights
from .periods import (
    Period,
    current_month_period,
    filter_records,
    is_future_date,
    is_future_period,
    period_for_month,
    period_for_range,
)
from .records import EXPENSE_CATEGORIES, MONTHS, Month, Operator, month_from_index
from .serialization import PayloadError
from .series import build_balance_flow, build_profit_series, current_month_sales
from .storage import SQLiteStorage
from .store import LedgerStore
from .views import (
    balance_flow_view,
    cash_summary_view,
    commissions_view,
    expenses_view,
    growth_view,
    period_summary_view,
    profit_series_view,
    profit_split_view,
    reconciliation_view,
    sales_view,
)

logger = logging.getLogger(__name__)

MONTH_CHOICES = [m.value for m in MONTHS]
OPERATOR_CHOICES = [op.value for op in Operator]


# ---------------------------------------------------------------------------
# Argument types
# ---------------------------------------------------------------------------


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid integer: {value!r}") from exc
    if number <= 0:
        raise argparse.ArgumentTypeError("Quantity must be greater than zero.")
    return number


def _non_negative_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid number: {value!r}") from exc
    if not math.isfinite(number):
        raise argparse.ArgumentTypeError(f"Invalid number: {value!r}")
    if number < 0:
        raise argparse.ArgumentTypeError("Amount cannot be negative.")
    return number


def _percentage(value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid percentage: {value!r}") from exc


def _non_empty(value: str) -> str:
    if not value.strip():
        raise argparse.ArgumentTypeError("Value cannot be empty.")
    return value.strip()


def _parse_optional_date(value: Optional[str]) -> Optional[date]:
    """
    Parse an optional CLI date argument (YYYY-MM-DD).

    Raises
    ------
    SystemExit
        If the date format is invalid.
    """
    if value is None:
        return None

    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        msg = f"Invalid date format: {value!r}. Expected YYYY-MM-DD."
        raise SystemExit(msg) from exc


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def _add_record_ids(parser: argparse.ArgumentParser, kind: str) -> None:
    parser.add_argument("ids", nargs="+", metavar="ID", help=f"Id(s) of the {kind}.")


def _add_list_parser(subparsers, kind: str) -> None:
    p = subparsers.add_parser("list", help=f"List {kind} of the selected period.")
    p.add_argument(
        "--all",
        dest="show_all",
        action="store_true",
        help=f"List every {kind[:-1]} instead of the selected period only.",
    )


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="python -m diamond_ledger.cli",
        description=(
            "Diamond Ledger - Bookkeeping & profit-sharing engine for diamond "
            "resellers. Records sales, operator commissions and expenses, "
            "reconciles commissions against the debt to replace and splits the "
            "balance between two partners."
        ),
    )

    # Generic options
    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of diamond_ledger and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the TOML configuration file. If omitted, "
            "'diamond_ledger_config.toml' in the current directory is used "
            "when it exists."
        ),
    )
    ap.add_argument(
        "--log-level",
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override the [logging].level setting of the configuration.",
    )

    # Period selection
    ap.add_argument(
        "--month",
        choices=MONTH_CHOICES,
        help="Month of the reporting period (defaults to the current month).",
    )
    ap.add_argument(
        "--year",
        type=int,
        help="Year of the reporting period (defaults to the current year).",
    )
    ap.add_argument(
        "--from-date",
        dest="from_date",
        help="Custom period start date (YYYY-MM-DD). Requires --to-date.",
    )
    ap.add_argument(
        "--to-date",
        dest="to_date",
        help="Custom period end date (YYYY-MM-DD). Requires --from-date.",
    )

    subparsers = ap.add_subparsers(dest="command", metavar="command")

    # ------------------------------------------------------------------
    # sales
    # ------------------------------------------------------------------
    sales_parser = subparsers.add_parser("sales", help="Manage daily sales.")
    sales_sub = sales_parser.add_subparsers(dest="sales_command", metavar="sales-command")

    sales_add = sales_sub.add_parser("add", help="Record a sale.")
    sales_add.add_argument("--date", dest="record_date", help="Sale date (default: today).")
    sales_add.add_argument(
        "--quantity",
        type=_positive_int,
        help="Units sold (default: the quantity set in the settings).",
    )

    _add_list_parser(sales_sub, "sales")

    sales_edit = sales_sub.add_parser("edit", help="Edit a sale.")
    sales_edit.add_argument("id", help="Id of the sale.")
    sales_edit.add_argument("--date", dest="record_date", help="New sale date.")
    sales_edit.add_argument("--quantity", type=_positive_int, help="New quantity.")

    sales_delete = sales_sub.add_parser("delete", help="Delete one or more sales.")
    _add_record_ids(sales_delete, "sales")

    sales_export = sales_sub.add_parser(
        "export", help="Export every sale with its metrics to a CSV file."
    )
    sales_export.add_argument(
        "--output",
        dest="output_path",
        help="CSV file to write (default: vendas_<today>.csv).",
    )

    # ------------------------------------------------------------------
    # commissions
    # ------------------------------------------------------------------
    comm_parser = subparsers.add_parser(
        "commissions", help="Manage monthly operator commissions."
    )
    comm_sub = comm_parser.add_subparsers(
        dest="commissions_command", metavar="commissions-command"
    )

    comm_add = comm_sub.add_parser("add", help="Record a monthly commission.")
    comm_add.add_argument(
        "--for-month",
        dest="record_month",
        choices=MONTH_CHOICES,
        help="Commission month (default: current month).",
    )
    comm_add.add_argument(
        "--for-year",
        dest="record_year",
        type=int,
        help="Commission year (default: current year).",
    )
    comm_add.add_argument(
        "--operator",
        choices=OPERATOR_CHOICES,
        help="Paying operator (default: settings default operator).",
    )
    comm_add.add_argument(
        "--value",
        type=_non_negative_float,
        required=True,
        help="Commission amount.",
    )

    _add_list_parser(comm_sub, "commissions")

    comm_edit = comm_sub.add_parser("edit", help="Edit a commission.")
    comm_edit.add_argument("id", help="Id of the commission.")
    comm_edit.add_argument("--for-month", dest="record_month", choices=MONTH_CHOICES)
    comm_edit.add_argument("--for-year", dest="record_year", type=int)
    comm_edit.add_argument("--operator", choices=OPERATOR_CHOICES)
    comm_edit.add_argument("--value", type=_non_negative_float)

    comm_delete = comm_sub.add_parser("delete", help="Delete one or more commissions.")
    _add_record_ids(comm_delete, "commissions")

    # ------------------------------------------------------------------
    # expenses
    # ------------------------------------------------------------------
    exp_parser = subparsers.add_parser("expenses", help="Manage fixed expenses.")
    exp_sub = exp_parser.add_subparsers(
        dest="expenses_command", metavar="expenses-command"
    )

    exp_add = exp_sub.add_parser("add", help="Record an expense.")
    exp_add.add_argument(
        "--date", dest="record_date", help="Expense date (default: today)."
    )
    exp_add.add_argument("--description", type=_non_empty, required=True)
    exp_add.add_argument(
        "--category",
        choices=list(EXPENSE_CATEGORIES),
        help="Expense category (default: settings default category).",
    )
    exp_add.add_argument("--value", type=_non_negative_float, required=True)

    _add_list_parser(exp_sub, "expenses")

    exp_edit = exp_sub.add_parser("edit", help="Edit an expense.")
    exp_edit.add_argument("id", help="Id of the expense.")
    exp_edit.add_argument("--date", dest="record_date")
    exp_edit.add_argument("--description", type=_non_empty)
    exp_edit.add_argument("--category", choices=list(EXPENSE_CATEGORIES))
    exp_edit.add_argument("--value", type=_non_negative_float)

    exp_delete = exp_sub.add_parser("delete", help="Delete one or more expenses.")
    _add_record_ids(exp_delete, "expenses")

    # ------------------------------------------------------------------
    # reports
    # ------------------------------------------------------------------
    subparsers.add_parser(
        "dashboard",
        help="Period totals, partner split of the net profit and growth.",
    )
    subparsers.add_parser(
        "reconciliation",
        help="Monthly commissions against sales debt, split between partners.",
    )
    subparsers.add_parser(
        "summary", help="Monthly cash summary (credits, debt, expenses, balance)."
    )

    series_parser = subparsers.add_parser(
        "series", help="Daily net profit series and monthly balance flow."
    )
    series_parser.add_argument(
        "--all",
        dest="show_all",
        action="store_true",
        help="Use every sale instead of the current month's sales only.",
    )

    subparsers.add_parser("insights", help="AI analysis of the records (Gemini).")

    export_parser = subparsers.add_parser(
        "export", help="Export the ledger lines of the selected period to CSV."
    )
    export_parser.add_argument(
        "--output",
        dest="output_path",
        default="diamond_ledger_export.csv",
        help="CSV file to write (default: diamond_ledger_export.csv).",
    )

    # ------------------------------------------------------------------
    # settings
    # ------------------------------------------------------------------
    settings_parser = subparsers.add_parser("settings", help="Show or edit settings.")
    settings_sub = settings_parser.add_subparsers(
        dest="settings_command", metavar="settings-command"
    )
    settings_sub.add_parser("show", help="Show the current settings.")

    split_parser = settings_sub.add_parser(
        "split", help="Set one partner's percentage; the other gets the rest."
    )
    split_group = split_parser.add_mutually_exclusive_group(required=True)
    split_group.add_argument("--partner-a", dest="partner_a", type=_percentage)
    split_group.add_argument("--partner-b", dest="partner_b", type=_percentage)

    names_parser = settings_sub.add_parser("names", help="Rename the partners.")
    names_parser.add_argument("partner_a_name", type=_non_empty)
    names_parser.add_argument("partner_b_name", type=_non_empty)

    defaults_parser = settings_sub.add_parser(
        "defaults",
        help="Set the default values of new records and the per-unit prices.",
    )
    defaults_parser.add_argument(
        "--expense-category", dest="expense_category", choices=list(EXPENSE_CATEGORIES)
    )
    defaults_parser.add_argument("--operator", choices=OPERATOR_CHOICES)
    defaults_parser.add_argument("--quantity", type=_positive_int)
    defaults_parser.add_argument(
        "--sale-price",
        dest="sale_price",
        type=_non_negative_float,
        help="Amount received per unit sold.",
    )
    defaults_parser.add_argument(
        "--gross-commission",
        dest="gross_commission",
        type=_non_negative_float,
        help="Gross commission per unit sold.",
    )
    defaults_parser.add_argument(
        "--repayment-rate",
        dest="repayment_rate",
        type=_non_negative_float,
        help="Debt to replace per unit sold.",
    )

    # ------------------------------------------------------------------
    # backup
    # ------------------------------------------------------------------
    backup_parser = subparsers.add_parser(
        "backup", help="Export or restore every record and the settings."
    )
    backup_sub = backup_parser.add_subparsers(
        dest="backup_command", metavar="backup-command"
    )
    backup_export = backup_sub.add_parser("export", help="Write a JSON backup.")
    backup_export.add_argument("path")
    backup_restore = backup_sub.add_parser(
        "restore", help="Replace every record with a JSON backup."
    )
    backup_restore.add_argument("path")

    return ap


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _determine_period(args: argparse.Namespace) -> Period:
    """
    Build the reporting period from the CLI arguments.

    A custom range takes precedence over --month/--year. Missing month or
    year default to the current ones.
    """
    from_date = _parse_optional_date(args.from_date)
    to_date = _parse_optional_date(args.to_date)

    if from_date is not None or to_date is not None:
        if from_date is None or to_date is None:
            raise SystemExit("--from-date and --to-date must be used together.")
        try:
            return period_for_range(from_date, to_date)
        except ValueError as exc:
            raise SystemExit(str(exc)) from exc

    if args.month is None and args.year is None:
        return current_month_period(periods._today())

    today = periods._today()
    month = Month(args.month) if args.month else month_from_index(today.month - 1)
    year = args.year if args.year is not None else today.year
    return period_for_month(month, year)


def _print_table(df: pd.DataFrame, empty_message: str) -> None:
    if df.empty:
        print(empty_message)
        return
    print()
    print(df.to_string(index=False))


def _warn_future_date(value: date) -> None:
    if is_future_date(value, periods._today()):
        print(f"Warning: {value.isoformat()} is in the future.")


def _warn_future_period(month: Month, year: int) -> None:
    if is_future_period(month, year, periods._today()):
        print(f"Warning: {month.value} {year} is in the future.")


def _record_date(value: Optional[str]) -> date:
    return _parse_optional_date(value) or periods._today()


def _find(records, record_id: str, kind: str):
    for r in records:
        if r.id == record_id:
            return r
    raise SystemExit(f"No {kind} with id {record_id!r}.")


def _delete(delete_many, ids: list[str], kind: str) -> None:
    try:
        delete_many(ids)
    except KeyError as exc:
        raise SystemExit(f"Cannot delete {kind}: {exc.args[0]}") from exc
    print(f"Deleted {len(ids)} {kind}.")


def _selected_records(store: LedgerStore, args: argparse.Namespace):
    """Return the store records, restricted to the selected period unless --all."""
    if getattr(args, "show_all", False):
        return store.sales, store.commissions, store.expenses, None
    period = _determine_period(args)
    filtered = filter_records(store.sales, store.commissions, store.expenses, period)
    return filtered.sales, filtered.commissions, filtered.expenses, period


# ---------------------------------------------------------------------------
# Record commands
# ---------------------------------------------------------------------------


def _handle_sales_command(
    args: argparse.Namespace, config: AppConfig, store: LedgerStore
) -> None:
    subcmd = getattr(args, "sales_command", None)
    decimals = config.display_decimals

    if subcmd == "add":
        sale_date = _record_date(args.record_date)
        _warn_future_date(sale_date)
        quantity = args.quantity or store.settings.default_quantity
        sale = store.add_sale(sale_date, quantity)
        print(f"Sale recorded: {sale.id} ({sale.date.isoformat()}, qty {sale.quantity})")
    elif subcmd == "list":
        sales, _, _, period = _selected_records(store, args)
        if period is not None:
            print(f"Period: {period.label}")
        _print_table(
            sales_view(sales, store.factors, decimals), "No sales found."
        )
    elif subcmd == "edit":
        sale = _find(store.sales, args.id, "sale")
        if args.record_date is not None:
            sale = replace(sale, date=_parse_optional_date(args.record_date))
            _warn_future_date(sale.date)
        if args.quantity is not None:
            sale = replace(sale, quantity=args.quantity)
        store.edit_sale(sale)
        print(f"Sale updated: {sale.id}")
    elif subcmd == "delete":
        _delete(store.delete_sales, args.ids, "sale(s)")
    elif subcmd == "export":
        output = Path(
            args.output_path or f"vendas_{periods._today().isoformat()}.csv"
        )
        write_sales_csv(sales_frame(store.sales, store.factors), output)
        print(f"Sales exported to {output}")
    else:
        print(
            "No sales subcommand specified. "
            "Available subcommands are: 'add', 'list', 'edit', 'delete', 'export'."
        )


def _handle_commissions_command(
    args: argparse.Namespace, config: AppConfig, store: LedgerStore
) -> None:
    subcmd = getattr(args, "commissions_command", None)

    if subcmd == "add":
        today = periods._today()
        month = (
            Month(args.record_month)
            if args.record_month
            else month_from_index(today.month - 1)
        )
        year = args.record_year if args.record_year is not None else today.year
        operator = (
            Operator(args.operator) if args.operator else store.settings.default_operator
        )
        _warn_future_period(month, year)
        commission = store.add_commission(month, year, operator, args.value)
        print(
            f"Commission recorded: {commission.id} "
            f"({commission.month.value} {commission.year}, "
            f"{commission.operator.value}, {commission.commission_value:.2f})"
        )
    elif subcmd == "list":
        _, commissions, _, period = _selected_records(store, args)
        if period is not None:
            print(f"Period: {period.label}")
        _print_table(
            commissions_view(commissions, config.display_decimals),
            "No commissions found.",
        )
    elif subcmd == "edit":
        commission = _find(store.commissions, args.id, "commission")
        if args.record_month is not None:
            commission = replace(commission, month=Month(args.record_month))
        if args.record_year is not None:
            commission = replace(commission, year=args.record_year)
        if args.operator is not None:
            commission = replace(commission, operator=Operator(args.operator))
        if args.value is not None:
            commission = replace(commission, commission_value=args.value)
        _warn_future_period(commission.month, commission.year)
        store.edit_commission(commission)
        print(f"Commission updated: {commission.id}")
    elif subcmd == "delete":
        _delete(store.delete_commissions, args.ids, "commission(s)")
    else:
        print(
            "No commissions subcommand specified. "
            "Available subcommands are: 'add', 'list', 'edit', 'delete'."
        )


def _handle_expenses_command(
    args: argparse.Namespace, config: AppConfig, store: LedgerStore
) -> None:
    subcmd = getattr(args, "expenses_command", None)

    if subcmd == "add":
        expense_date = _record_date(args.record_date)
        _warn_future_date(expense_date)
        category = args.category or store.settings.default_expense_category
        expense = store.add_expense(expense_date, args.description, category, args.value)
        print(
            f"Expense recorded: {expense.id} "
            f"({expense.date.isoformat()}, {expense.category}, {expense.value:.2f})"
        )
    elif subcmd == "list":
        _, _, expenses, period = _selected_records(store, args)
        if period is not None:
            print(f"Period: {period.label}")
        _print_table(
            expenses_view(expenses, config.display_decimals), "No expenses found."
        )
    elif subcmd == "edit":
        expense = _find(store.expenses, args.id, "expense")
        if args.record_date is not None:
            expense = replace(expense, date=_parse_optional_date(args.record_date))
            _warn_future_date(expense.date)
        if args.description is not None:
            expense = replace(expense, description=args.description)
        if args.category is not None:
            expense = replace(expense, category=args.category)
        if args.value is not None:
            expense = replace(expense, value=args.value)
        store.edit_expense(expense)
        print(f"Expense updated: {expense.id}")
    elif subcmd == "delete":
        _delete(store.delete_expenses, args.ids, "expense(s)")
    else:
        print(
            "No expenses subcommand specified. "
            "Available subcommands are: 'add', 'list', 'edit', 'delete'."
        )


# ---------------------------------------------------------------------------
# Report commands
# ---------------------------------------------------------------------------


def _handle_dashboard(
    args: argparse.Namespace, config: AppConfig, store: LedgerStore
) -> None:
    period = _determine_period(args)
    filtered = filter_records(store.sales, store.commissions, store.expenses, period)
    summary = summarize_period(
        filtered.sales, filtered.commissions, filtered.expenses, store.factors
    )
    decimals = config.display_decimals

    print(f"Period: {period.label}")
    _print_table(period_summary_view(summary, decimals), "No data.")

    print()
    print("Profit split:")
    _print_table(
        profit_split_view(summary, store.settings.split, decimals),
        "No positive net profit to share for this period.",
    )

    print()
    print("Annual growth:")
    _print_table(growth_view(annual_growth(store.sales), decimals), "No sales.")

    print()
    current_year = periods._today().year
    print(f"Monthly growth ({current_year}):")
    _print_table(
        growth_view(monthly_growth(store.sales, current_year), decimals),
        "No sales.",
    )


def _handle_reconciliation(config: AppConfig, store: LedgerStore) -> None:
    split = store.settings.split
    rows = build_reconciliation(store.sales, store.commissions, split, store.factors)
    _print_table(
        reconciliation_view(rows, split, config.display_decimals),
        "No sales or commissions recorded yet.",
    )


def _handle_summary(config: AppConfig, store: LedgerStore) -> None:
    rows = build_cash_summary(
        store.sales, store.commissions, store.expenses, store.factors
    )
    _print_table(
        cash_summary_view(rows, config.display_decimals), "No records yet."
    )


def _handle_series(
    args: argparse.Namespace, config: AppConfig, store: LedgerStore
) -> None:
    sales = (
        store.sales if args.show_all else current_month_sales(store.sales, periods._today())
    )
    decimals = config.display_decimals

    print("Daily net profit:")
    _print_table(
        profit_series_view(build_profit_series(sales, store.factors), decimals),
        "No sales.",
    )

    rows = build_cash_summary(
        store.sales, store.commissions, store.expenses, store.factors
    )
    print()
    print("Monthly balance flow:")
    _print_table(balance_flow_view(build_balance_flow(rows), decimals), "No records.")


def _handle_insights(config: AppConfig, store: LedgerStore) -> None:
    snapshot = InsightSnapshot(
        sales=store.sales,
        commissions=store.commissions,
        expenses=store.expenses,
        factors=store.factors,
    )
    api_key = os.environ.get(config.insights.api_key_env, "")
    print(generate_insights(snapshot, api_key, config.insights.model))


def _handle_export(
    args: argparse.Namespace, config: AppConfig, store: LedgerStore
) -> None:
    period = _determine_period(args)
    filtered = filter_records(store.sales, store.commissions, store.expenses, period)
    output = Path(args.output_path)
    df = period_ledger_frame(filtered, store.factors)
    write_period_ledger_csv(df, output)
    print(f"{len(df)} ledger lines for {period.label} exported to {output}")


# ---------------------------------------------------------------------------
# Settings and backup
# ---------------------------------------------------------------------------


def _print_settings(store: LedgerStore) -> None:
    s = store.settings
    print(
        f"  {s.split.partner_a_name}: {s.split.partner_a_percentage:g}%\n"
        f"  {s.split.partner_b_name}: {s.split.partner_b_percentage:g}%\n"
        f"  default expense category: {s.default_expense_category}\n"
        f"  default operator:         {s.default_operator.value}\n"
        f"  default quantity:         {s.default_quantity}\n"
        f"  sale price per unit:      {s.default_sale_price:g}\n"
        f"  commission per unit:      {s.default_gross_commission:g}\n"
        f"  repayment rate per unit:  {s.default_repayment_rate:g}"
    )


def _handle_settings_command(args: argparse.Namespace, store: LedgerStore) -> None:
    subcmd = getattr(args, "settings_command", None)
    split = store.settings.split

    if subcmd == "show":
        _print_settings(store)
        return
    if subcmd == "split":
        if args.partner_a is not None:
            store.update_split(split.with_partner_a_percentage(args.partner_a))
        else:
            store.update_split(split.with_partner_b_percentage(args.partner_b))
    elif subcmd == "names":
        store.update_split(split.with_names(args.partner_a_name, args.partner_b_name))
    elif subcmd == "defaults":
        operator = Operator(args.operator) if args.operator else None
        store.update_settings(
            store.settings.with_defaults(
                expense_category=args.expense_category,
                operator=operator,
                quantity=args.quantity,
                sale_price=args.sale_price,
                gross_commission=args.gross_commission,
                repayment_rate=args.repayment_rate,
            )
        )
    else:
        print(
            "No settings subcommand specified. "
            "Available subcommands are: 'show', 'split', 'names', 'defaults'."
        )
        return

    print("Settings updated:")
    _print_settings(store)


def _handle_backup_command(args: argparse.Namespace, store: LedgerStore) -> None:
    subcmd = getattr(args, "backup_command", None)

    if subcmd == "export":
        path = Path(args.path)
        store.export_backup(path)
        print(f"Backup written to {path}")
    elif subcmd == "restore":
        path = Path(args.path)
        try:
            snapshot = store.restore_backup(path, periods._today())
        except (FileNotFoundError, PayloadError) as exc:
            raise SystemExit(f"Cannot restore backup: {exc}") from exc
        print(
            f"Backup restored: {len(snapshot.sales)} sales, "
            f"{len(snapshot.commissions)} commissions, "
            f"{len(snapshot.expenses)} expenses."
        )
    else:
        print(
            "No backup subcommand specified. "
            "Available subcommands are: 'export', 'restore'."
        )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the Diamond Ledger CLI.

    This function parses command-line arguments, loads the configuration,
    configures logging, opens the record store and dispatches to the
    selected command.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    # --version: short-circuit and exit early.
    if args.version:
        print(f"diamond_ledger version {__version__}")
        return

    config = load_app_config(args.config_path)

    logging.basicConfig(
        level=args.log_level or config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.debug("Using storage at %s", config.storage.path)

    store = LedgerStore.open(
        SQLiteStorage(config.storage),
        settings_defaults=config.settings,
        today=periods._today(),
    )

    command = getattr(args, "command", None)
    if command == "sales":
        _handle_sales_command(args, config, store)
    elif command == "commissions":
        _handle_commissions_command(args, config, store)
    elif command == "expenses":
        _handle_expenses_command(args, config, store)
    elif command == "dashboard":
        _handle_dashboard(args, config, store)
    elif command == "reconciliation":
        _handle_reconciliation(config, store)
    elif command == "summary":
        _handle_summary(config, store)
    elif command == "series":
        _handle_series(args, config, store)
    elif command == "insights":
        _handle_insights(config, store)
    elif command == "export":
        _handle_export(args, config, store)
    elif command == "settings":
        _handle_settings_command(args, store)
    elif command == "backup":
        _handle_backup_command(args, store)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
