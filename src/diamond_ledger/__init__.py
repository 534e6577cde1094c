# Diamond Ledger - Bookkeeping & profit-sharing engine for diamond resellers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Diamond Ledger
--------------

A Python-based bookkeeping application for a small business reselling
"diamonds" (prepaid activation packs) and collecting monthly commissions
from two payment operators (M-Pesa, e-Mola).

Main capabilities:
- per-sale metrics (value received, gross commission, debt to replace,
  net profit) driven by configurable per-unit factors,
- annual and monthly sales volumes with period-over-period growth,
- a monthly reconciliation ledger netting commissions against debt and
  splitting the balance between two partners,
- a cash summary including fixed expenses,
- daily profit series for charts,
- SQLite persistence with versioned payload migration,
- CSV exports and optional AI-generated business insights (Gemini).

Diamond Ledger separates computation (engine, growth, series),
configuration (TOML), persistence (storage, serialization, store) and
presentation (views, export, CLI).

Version: 0.2.0

Usage:
    python -m diamond_ledger.cli --help
"""

__all__ = ["engine", "growth", "series", "store"]

__version__ = "0.2.0"
