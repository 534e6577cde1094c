# Diamond Ledger - Bookkeeping & profit-sharing engine for diamond resellers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
JSON (de)serialization of records and settings, with schema migration.

Every collection is persisted as a versioned JSON envelope:

    {"schema_version": 2, "records": [ {...}, {...} ]}

and the settings as:

    {"schema_version": 2, "settings": {...}}

Record layouts (schema version 2)
---------------------------------
- sale        : id, date (YYYY-MM-DD), quantity
- commission  : id, month (Jan..Dec), year, operator, commission_value
- expense     : id, date (YYYY-MM-DD), description, category, value

Legacy payloads (schema version 1)
----------------------------------
Version 1 is the format written by the first release of the dashboard:
a bare JSON list (or, for settings, a bare JSON object) with camelCase
keys such as ``commissionValue`` or ``partnerAPercentage``. It is
migrated to version 2 when loaded:

- camelCase keys are renamed to their snake_case equivalent,
- keys that no longer exist (per-sale rates) are dropped.

Loading rules
-------------
- A payload that is not valid JSON, or whose root is neither a legacy
  list/object nor a known envelope, raises ``PayloadError``. Callers fall
  back to defaults (see ``store.py``).
- Inside a valid payload, each record is parsed strictly into its typed
  dataclass. A record that cannot be parsed is skipped with a warning.
- A commission without a ``year`` gets the current calendar year.
- Dates are normalized to ``datetime.date``; timestamps are truncated to
  their calendar day.
"""

import json
import logging
from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any, Callable, TypeVar

import pandas as pd

from .records import Expense, Month, MonthlyCommission, Operator, Sale
from .settings import PartnerSplit, Settings

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 2

T = TypeVar("T")

_LEGACY_KEYS: dict[str, str] = {
    "commissionValue": "commission_value",
    "partnerAName": "partner_a_name",
    "partnerBName": "partner_b_name",
    "partnerAPercentage": "partner_a_percentage",
    "partnerBPercentage": "partner_b_percentage",
    "defaultExpenseCategory": "default_expense_category",
    "defaultOperator": "default_operator",
    "defaultQuantity": "default_quantity",
    "defaultSalePrice": "default_sale_price",
    "defaultGrossCommission": "default_gross_commission",
    "defaultRepaymentRate": "default_repayment_rate",
}

_RELATIVE_DATES = frozenset({"now", "today", "tomorrow", "yesterday"})

_PRICE_DEFAULTS = (
    "default_sale_price",
    "default_gross_commission",
    "default_repayment_rate",
)


class PayloadError(ValueError):
    """Raised when a stored payload is structurally invalid."""


class RecordError(ValueError):
    """Raised when a single record cannot be parsed."""


# ---------------------------------------------------------------------------
# Field parsing helpers
# ---------------------------------------------------------------------------


def parse_date(value: Any) -> date:
    """
    Normalize a date-like value to ``datetime.date``.

    Accepts ``date``/``datetime`` objects and strings understood by pandas
    (``"2025-03-01"``, ``"2025-03-01T10:30:00Z"``, ...). Missing values
    (``NaT``) and relative words such as ``"today"`` are rejected.
    """
    if isinstance(value, date) and not pd.isna(value):
        # datetime and pd.Timestamp are subclasses of date
        return value if type(value) is date else value.date()
    if not isinstance(value, str) or not value.strip():
        raise RecordError(f"Invalid date value: {value!r}")
    if value.strip().lower() in _RELATIVE_DATES:
        raise RecordError(f"Relative date not allowed: {value!r}")
    try:
        parsed = pd.to_datetime(value.strip(), errors="raise")
    except (ValueError, TypeError) as exc:
        raise RecordError(f"Invalid date value: {value!r}") from exc
    if pd.isna(parsed):
        raise RecordError(f"Invalid date value: {value!r}")
    return parsed.date()


def _as_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise RecordError(f"Invalid integer for {field!r}: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as exc:
            raise RecordError(f"Invalid integer for {field!r}: {value!r}") from exc
    raise RecordError(f"Invalid integer for {field!r}: {value!r}")


def _as_float(value: Any, field: str) -> float:
    if isinstance(value, bool):
        raise RecordError(f"Invalid number for {field!r}: {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise RecordError(f"Invalid number for {field!r}: {value!r}") from exc


def _require(raw: Mapping[str, Any], field: str) -> Any:
    try:
        return raw[field]
    except KeyError as exc:
        raise RecordError(f"Missing field {field!r}") from exc


def _as_id(raw: Mapping[str, Any]) -> str:
    value = _require(raw, "id")
    if value is None or str(value) == "":
        raise RecordError("Empty record id")
    return str(value)


# ---------------------------------------------------------------------------
# Record parsing
# ---------------------------------------------------------------------------


def parse_sale(raw: Mapping[str, Any]) -> Sale:
    return Sale(
        id=_as_id(raw),
        date=parse_date(_require(raw, "date")),
        quantity=_as_int(_require(raw, "quantity"), "quantity"),
    )


def parse_commission(raw: Mapping[str, Any], default_year: int) -> MonthlyCommission:
    """Parse a commission record; a missing or null year gets ``default_year``."""
    try:
        month = Month(_require(raw, "month"))
        operator = Operator(_require(raw, "operator"))
    except ValueError as exc:
        raise RecordError(str(exc)) from exc

    raw_year = raw.get("year")
    year = default_year if raw_year is None else _as_int(raw_year, "year")

    return MonthlyCommission(
        id=_as_id(raw),
        month=month,
        year=year,
        operator=operator,
        commission_value=_as_float(
            _require(raw, "commission_value"), "commission_value"
        ),
    )


def parse_expense(raw: Mapping[str, Any]) -> Expense:
    return Expense(
        id=_as_id(raw),
        date=parse_date(_require(raw, "date")),
        description=str(raw.get("description") or ""),
        category=str(_require(raw, "category")),
        value=_as_float(_require(raw, "value"), "value"),
    )


# ---------------------------------------------------------------------------
# Envelope handling and migration
# ---------------------------------------------------------------------------


def _rename_legacy_keys(raw: Mapping[str, Any]) -> dict[str, Any]:
    return {_LEGACY_KEYS.get(k, k): v for k, v in raw.items()}


def _decode(text: str) -> Any:
    try:
        return json.loads(text)
    except (TypeError, ValueError) as exc:
        raise PayloadError(f"Stored payload is not valid JSON: {exc}") from exc


def _extract_records(text: str) -> list[Any]:
    """Decode a collection payload and return its records in v2 layout."""
    data = _decode(text)

    # Schema version 1: bare list with camelCase keys.
    if isinstance(data, list):
        return [
            _rename_legacy_keys(item) if isinstance(item, Mapping) else item
            for item in data
        ]

    if not isinstance(data, Mapping):
        raise PayloadError("Stored payload root must be a list or an object.")

    version = data.get("schema_version")
    if version != SCHEMA_VERSION:
        raise PayloadError(f"Unsupported schema version: {version!r}")

    records = data.get("records")
    if not isinstance(records, list):
        raise PayloadError("Stored payload is missing its 'records' list.")
    return records


def _parse_each(
    records: Iterable[Any],
    parser: Callable[[Mapping[str, Any]], T],
    kind: str,
) -> tuple[T, ...]:
    parsed: list[T] = []
    for position, raw in enumerate(records):
        if not isinstance(raw, Mapping):
            logger.warning("Skipping %s #%d: not an object", kind, position)
            continue
        try:
            parsed.append(parser(raw))
        except RecordError as exc:
            logger.warning("Skipping %s #%d: %s", kind, position, exc)
    return tuple(parsed)


def load_sales(text: str) -> tuple[Sale, ...]:
    return _parse_each(_extract_records(text), parse_sale, "sale")


def load_commissions(text: str, today: date) -> tuple[MonthlyCommission, ...]:
    return _parse_each(
        _extract_records(text),
        lambda raw: parse_commission(raw, default_year=today.year),
        "commission",
    )


def load_expenses(text: str) -> tuple[Expense, ...]:
    return _parse_each(_extract_records(text), parse_expense, "expense")


# ---------------------------------------------------------------------------
# Dumping
# ---------------------------------------------------------------------------


def sale_to_dict(sale: Sale) -> dict[str, Any]:
    return {"id": sale.id, "date": sale.date.isoformat(), "quantity": sale.quantity}


def commission_to_dict(c: MonthlyCommission) -> dict[str, Any]:
    return {
        "id": c.id,
        "month": c.month.value,
        "year": c.year,
        "operator": c.operator.value,
        "commission_value": c.commission_value,
    }


def expense_to_dict(e: Expense) -> dict[str, Any]:
    return {
        "id": e.id,
        "date": e.date.isoformat(),
        "description": e.description,
        "category": e.category,
        "value": e.value,
    }


def _envelope(records: list[dict[str, Any]]) -> str:
    return json.dumps(
        {"schema_version": SCHEMA_VERSION, "records": records}, ensure_ascii=False
    )


def dump_sales(sales: Iterable[Sale]) -> str:
    return _envelope([sale_to_dict(s) for s in sales])


def dump_commissions(commissions: Iterable[MonthlyCommission]) -> str:
    return _envelope([commission_to_dict(c) for c in commissions])


def dump_expenses(expenses: Iterable[Expense]) -> str:
    return _envelope([expense_to_dict(e) for e in expenses])


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


def settings_to_dict(settings: Settings) -> dict[str, Any]:
    split = settings.split
    return {
        "partner_a_name": split.partner_a_name,
        "partner_b_name": split.partner_b_name,
        "partner_a_percentage": split.partner_a_percentage,
        "partner_b_percentage": split.partner_b_percentage,
        "default_expense_category": settings.default_expense_category,
        "default_operator": settings.default_operator.value,
        "default_quantity": settings.default_quantity,
        "default_sale_price": settings.default_sale_price,
        "default_gross_commission": settings.default_gross_commission,
        "default_repayment_rate": settings.default_repayment_rate,
    }


def dump_settings(settings: Settings) -> str:
    return json.dumps(
        {"schema_version": SCHEMA_VERSION, "settings": settings_to_dict(settings)},
        ensure_ascii=False,
    )


def parse_settings(raw: Mapping[str, Any], base: Settings) -> Settings:
    """
    Build Settings from a v2 settings object, using ``base`` for any field
    that is absent.

    The partner percentages are re-linked through partner A's value so that
    they always sum to 100.
    """
    split = base.split
    try:
        split = PartnerSplit(
            partner_a_name=str(raw.get("partner_a_name", split.partner_a_name)),
            partner_b_name=str(raw.get("partner_b_name", split.partner_b_name)),
            partner_a_percentage=split.partner_a_percentage,
            partner_b_percentage=split.partner_b_percentage,
        )
        if "partner_a_percentage" in raw:
            split = split.with_partner_a_percentage(
                _as_float(raw["partner_a_percentage"], "partner_a_percentage")
            )
        elif "partner_b_percentage" in raw:
            split = split.with_partner_b_percentage(
                _as_float(raw["partner_b_percentage"], "partner_b_percentage")
            )
        operator = Operator(raw.get("default_operator", base.default_operator))
        quantity = _as_int(
            raw.get("default_quantity", base.default_quantity), "default_quantity"
        )
        prices = {
            field: _as_float(raw.get(field, getattr(base, field)), field)
            for field in _PRICE_DEFAULTS
        }
    except ValueError as exc:
        raise PayloadError(f"Invalid settings payload: {exc}") from exc

    return Settings(
        split=split,
        default_expense_category=str(
            raw.get("default_expense_category", base.default_expense_category)
        ),
        default_operator=operator,
        default_quantity=quantity,
        **prices,
    )


def load_settings(text: str, base: Settings) -> Settings:
    data = _decode(text)
    if not isinstance(data, Mapping):
        raise PayloadError("Stored settings root must be an object.")

    if "schema_version" not in data:
        # Schema version 1: bare camelCase object.
        return parse_settings(_rename_legacy_keys(data), base)

    if data.get("schema_version") != SCHEMA_VERSION:
        raise PayloadError(
            f"Unsupported schema version: {data.get('schema_version')!r}"
        )
    raw = data.get("settings")
    if not isinstance(raw, Mapping):
        raise PayloadError("Stored settings payload is missing its 'settings' object.")
    return parse_settings(raw, base)


# ---------------------------------------------------------------------------
# Full backup
# ---------------------------------------------------------------------------


def dump_backup(
    sales: Iterable[Sale],
    commissions: Iterable[MonthlyCommission],
    expenses: Iterable[Expense],
    settings: Settings,
) -> str:
    """Serialize every collection and the settings into a single document."""
    return json.dumps(
        {
            "schema_version": SCHEMA_VERSION,
            "sales": [sale_to_dict(s) for s in sales],
            "commissions": [commission_to_dict(c) for c in commissions],
            "expenses": [expense_to_dict(e) for e in expenses],
            "settings": settings_to_dict(settings),
        },
        ensure_ascii=False,
        indent=2,
    )


def load_backup(
    text: str,
    base: Settings,
    today: date,
) -> tuple[
    tuple[Sale, ...],
    tuple[MonthlyCommission, ...],
    tuple[Expense, ...],
    Settings,
]:
    """
    Parse a document produced by ``dump_backup``.

    Unlike stored collections, a backup is user-supplied: any structural
    problem raises ``PayloadError`` and nothing is restored.
    """
    data = _decode(text)
    if not isinstance(data, Mapping) or data.get("schema_version") != SCHEMA_VERSION:
        raise PayloadError("Not a Diamond Ledger backup (schema version 2).")

    sections = {}
    for name in ("sales", "commissions", "expenses"):
        records = data.get(name, [])
        if not isinstance(records, list):
            raise PayloadError(f"Backup section {name!r} must be a list.")
        sections[name] = records

    raw_settings = data.get("settings", {})
    if not isinstance(raw_settings, Mapping):
        raise PayloadError("Backup section 'settings' must be an object.")

    return (
        _parse_each(sections["sales"], parse_sale, "sale"),
        _parse_each(
            sections["commissions"],
            lambda raw: parse_commission(raw, default_year=today.year),
            "commission",
        ),
        _parse_each(sections["expenses"], parse_expense, "expense"),
        parse_settings(raw_settings, base),
    )
