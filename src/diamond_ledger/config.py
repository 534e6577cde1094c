# Diamond Ledger - Bookkeeping & profit-sharing engine for diamond resellers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for Diamond Ledger.

This module is responsible for:
- loading the application configuration from a TOML file,
- validating the per-unit factors and the initial partner split,
- exposing typed dataclasses used by the rest of the application.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover - fallback for older Python
    import tomli as tomllib  # type: ignore[import]

from .engine import Factors
from .records import EXPENSE_CATEGORIES, Operator
from .settings import PartnerSplit, Settings
from .storage import StorageConfig

DEFAULT_CONFIG_FILE = "diamond_ledger_config.toml"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class InsightsConfig:
    """Settings of the AI insight generator."""

    model: str
    api_key_env: str


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for Diamond Ledger.

    This aggregates:
    - the per-unit factors from the TOML file (they seed the price
      defaults of the settings),
    - the initial settings (partner split, default values),
    - the storage configuration (where records are persisted),
    - the insight generator options,
    - display and logging options.
    """

    factors: Factors
    settings: Settings
    storage: StorageConfig
    insights: InsightsConfig
    display_decimals: int
    log_level: str


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed or is not a table.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Invalid TOML root type in {path}, expected a table.")

    return data


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = raw.get(name) or {}
    if not isinstance(section, Mapping):
        return {}
    return section


def _parse_factors(raw: Mapping[str, Any]) -> Factors:
    """
    Extract the per-unit factors from raw TOML configuration data.

    Raises:
        ValueError: if a factor is not a number.
    """
    section = _section(raw, "factors")
    defaults = Factors()

    values: dict[str, float] = {}
    for key in ("value_per_unit", "gross_commission_per_unit", "debt_per_unit"):
        raw_value = section.get(key, getattr(defaults, key))
        try:
            values[key] = float(raw_value)
        except (TypeError, ValueError) as exc:
            raise ValueError(
                f"Invalid value for 'factors.{key}' in the configuration. "
                "Expected a number."
            ) from exc

    return Factors(**values)


def _parse_split(raw: Mapping[str, Any]) -> PartnerSplit:
    """
    Extract the initial partner split.

    ``b_percentage`` defaults to ``100 - a_percentage``.

    Raises:
        ValueError: if a percentage is not a number, lies outside [0, 100],
            or if both percentages do not sum to 100.
    """
    section = _section(raw, "partners")
    defaults = PartnerSplit()

    try:
        a_pct = float(section.get("a_percentage", defaults.partner_a_percentage))
        b_pct = float(section.get("b_percentage", 100.0 - a_pct))
    except (TypeError, ValueError) as exc:
        raise ValueError(
            "Invalid partner percentages in the configuration. Expected numbers."
        ) from exc

    for pct in (a_pct, b_pct):
        if not 0.0 <= pct <= 100.0:
            raise ValueError("Partner percentages must lie between 0 and 100.")
    if abs(a_pct + b_pct - 100.0) > 1e-9:
        raise ValueError("Partner percentages must sum to 100.")

    return PartnerSplit(
        partner_a_name=str(section.get("a_name") or defaults.partner_a_name),
        partner_b_name=str(section.get("b_name") or defaults.partner_b_name),
        partner_a_percentage=a_pct,
        partner_b_percentage=b_pct,
    )


def _parse_settings(raw: Mapping[str, Any], factors: Factors) -> Settings:
    """
    Extract the initial settings.

    The price defaults are seeded from ``[factors]``; they are the factors
    used until the user edits them.

    Raises:
        ValueError: if the operator is unknown or the quantity is not a
            positive integer.
    """
    section = _section(raw, "defaults")

    category = str(section.get("expense_category") or EXPENSE_CATEGORIES[0])

    try:
        operator = Operator(section.get("operator") or Operator.MPESA.value)
    except ValueError as exc:
        choices = ", ".join(op.value for op in Operator)
        raise ValueError(
            f"Invalid value for 'defaults.operator'. Expected one of: {choices}."
        ) from exc

    quantity = section.get("quantity", 1)
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise ValueError(
            "Invalid value for 'defaults.quantity'. Expected a positive integer."
        )

    return Settings(
        split=_parse_split(raw),
        default_expense_category=category,
        default_operator=operator,
        default_quantity=quantity,
        default_sale_price=factors.value_per_unit,
        default_gross_commission=factors.gross_commission_per_unit,
        default_repayment_rate=factors.debt_per_unit,
    )


def _parse_log_level(raw: Mapping[str, Any]) -> str:
    section = _section(raw, "logging")
    level = str(section.get("level") or "WARNING").upper()
    if level not in LOG_LEVELS:
        choices = ", ".join(LOG_LEVELS)
        raise ValueError(
            f"Invalid value for 'logging.level'. Expected one of: {choices}."
        )
    return level


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the Diamond Ledger application configuration from a TOML file.

    Expected top-level sections in the TOML file (all optional)
    ---------------------------------------------------------
    [factors]
        value_per_unit, gross_commission_per_unit, debt_per_unit.

    [partners]
        a_name, b_name, a_percentage, b_percentage.

    [defaults]
        expense_category, operator, quantity (used when a sale is entered
        without one).

    [storage]
        engine ("sqlite") and path of the database file.

    [insights]
        model, api_key_env (name of the environment variable holding the
        Gemini API key).

    [display]
        decimals used when rendering amounts.

    [logging]
        level (DEBUG, INFO, WARNING, ERROR or CRITICAL).

    Notes
    -----
    - When ``config_path`` is None and the default file
      (diamond_ledger_config.toml in the current directory) does not exist,
      built-in defaults are used.
    - All file paths in the TOML are resolved relative to the directory of
      the TOML file itself.

    Parameters
    ----------
    config_path :
        Path to the TOML configuration file.

    Returns
    -------
    AppConfig
        Parsed and validated application configuration.
    """
    if config_path is None:
        config_file = Path(DEFAULT_CONFIG_FILE).resolve()
        raw = _load_toml(config_file) if config_file.is_file() else {}
    else:
        config_file = Path(config_path).resolve()
        raw = _load_toml(config_file)

    base_dir = config_file.parent

    # 1) Factors and settings
    factors = _parse_factors(raw)
    settings = _parse_settings(raw, factors)

    # 2) Storage
    storage_section = _section(raw, "storage")
    engine = str(storage_section.get("engine") or "sqlite")
    path_raw = storage_section.get("path") or "data/db/diamond_ledger.sqlite"
    storage = StorageConfig(engine=engine, path=(base_dir / str(path_raw)).resolve())

    # 3) Insights
    insights_section = _section(raw, "insights")
    insights = InsightsConfig(
        model=str(insights_section.get("model") or "gemini-1.5-pro"),
        api_key_env=str(insights_section.get("api_key_env") or "GEMINI_API_KEY"),
    )

    # 4) Display and logging
    display_section = _section(raw, "display")
    try:
        display_decimals = int(display_section.get("decimals", 2))
    except (TypeError, ValueError):
        display_decimals = 2

    log_level = _parse_log_level(raw)

    return AppConfig(
        factors=factors,
        settings=settings,
        storage=storage,
        insights=insights,
        display_decimals=display_decimals,
        log_level=log_level,
    )
