# Diamond Ledger - Bookkeeping & profit-sharing engine for diamond resellers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
Persistence layer for Diamond Ledger.

The application persists each record collection (sales, commissions,
expenses) and the user settings as one JSON document per key. This module
provides the key/value collaborator used by ``store.py``:

- ``load(key)``  -> stored JSON text, or None when the key is absent,
- ``save(key, text)`` -> replaces the stored text for the key,
- ``save_many(items)`` -> replaces several keys in one transaction.

Parsing and validating the JSON documents is not done here; see
``serialization.py``.

------------------------------------------------------------------------------
Schema Overview
------------------------------------------------------------------------------

A single table is used:

kv_store
   - key         TEXT PRIMARY KEY  -- "diamond_sales", "diamond_settings", ...
   - value       TEXT NOT NULL     -- JSON document
   - updated_at  TEXT NOT NULL     -- ISO datetime, UTC

------------------------------------------------------------------------------
SQLite Notes
------------------------------------------------------------------------------

- Timestamps are stored as ISO-8601 text (UTC).
- ``init_storage`` is idempotent and is called before every access, so a
  fresh database file is created on first use.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StorageConfig:
    """
    Storage configuration for Diamond Ledger.

    Attributes
    ----------
    engine:
        Storage engine identifier. Only "sqlite" is supported.
    path:
        Path to the SQLite database file.
    """

    engine: str
    path: Path


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _ensure_sqlite(cfg: StorageConfig) -> None:
    """Raise if the configuration does not refer to a supported engine."""
    if cfg.engine.lower() != "sqlite":
        msg = (
            f"Unsupported storage engine: {cfg.engine!r}. "
            "Only 'sqlite' is supported for now."
        )
        raise ValueError(msg)


def _connect(cfg: StorageConfig) -> sqlite3.Connection:
    """
    Open a SQLite connection.

    The caller is responsible for closing the connection.
    """
    _ensure_sqlite(cfg)
    return sqlite3.connect(cfg.path)


def _now_utc_iso() -> str:
    """Return the current UTC datetime as ISO string."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def init_storage(cfg: StorageConfig) -> None:
    """
    Initialize the storage schema if needed.

    - Creates the parent directory and the SQLite file if they do not exist.
    - Creates the kv_store table if it is missing.

    Raises
    ------
    ValueError
        If cfg.engine is not supported.
    sqlite3.Error
        If schema creation fails.
    """
    _ensure_sqlite(cfg)
    cfg.path.parent.mkdir(parents=True, exist_ok=True)

    conn = _connect(cfg)
    try:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS kv_store (
                key        TEXT PRIMARY KEY,
                value      TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );
            """
        )
        conn.commit()
    finally:
        conn.close()


class SQLiteStorage:
    """
    Key/value store backed by a SQLite file.

    Each call opens and closes its own connection, like the rest of the
    application; the volume of data (a few collections of small records)
    does not justify pooling.
    """

    def __init__(self, cfg: StorageConfig) -> None:
        self.cfg = cfg
        init_storage(cfg)

    def load(self, key: str) -> str | None:
        """Return the JSON text stored under ``key``, or None if absent."""
        conn = _connect(self.cfg)
        try:
            cur = conn.execute("SELECT value FROM kv_store WHERE key = ?;", (key,))
            row = cur.fetchone()
        finally:
            conn.close()

        if row is None:
            return None
        return str(row[0])

    def save(self, key: str, text: str) -> None:
        """Store ``text`` under ``key``, replacing any previous value."""
        conn = _connect(self.cfg)
        try:
            conn.execute(
                """
                INSERT INTO kv_store (key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE
                   SET value = excluded.value,
                       updated_at = excluded.updated_at;
                """,
                (key, text, _now_utc_iso()),
            )
            conn.commit()
        finally:
            conn.close()
        logger.debug("Saved %s (%d bytes)", key, len(text))

    def save_many(self, items: Mapping[str, str]) -> None:
        """Store several keys in a single transaction (all or nothing)."""
        now = _now_utc_iso()
        conn = _connect(self.cfg)
        try:
            with conn:
                conn.executemany(
                    """
                    INSERT INTO kv_store (key, value, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE
                       SET value = excluded.value,
                           updated_at = excluded.updated_at;
                    """,
                    [(key, text, now) for key, text in items.items()],
                )
        finally:
            conn.close()
        logger.debug("Saved %s", ", ".join(items))

    def keys(self) -> list[str]:
        """Return the stored keys, sorted."""
        conn = _connect(self.cfg)
        try:
            cur = conn.execute("SELECT key FROM kv_store ORDER BY key;")
            return [row[0] for row in cur.fetchall()]
        finally:
            conn.close()
