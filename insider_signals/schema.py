"""Database schema for the Trade Event Store.

Dates are ISO-8601 TEXT ('YYYY-MM-DD' for calendar dates, UTC with 'Z' for timestamps)
so comparisons like `trade_date >= ?` sort correctly on both engines.

NOTE: The Postgres schema is generated from the SQLite schema with a small set of
transformations (types + autoincrement).
"""

from __future__ import annotations

import re


SCHEMA_SQLITE = r"""
PRAGMA foreign_keys = ON;

CREATE TABLE IF NOT EXISTS app_config (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

-- One row per insider transaction. transaction_type is classified at ingestion
-- (Purchase|Sale|Other), the raw label is kept for audit.
CREATE TABLE IF NOT EXISTS insider_trades (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    ticker TEXT NOT NULL,
    company_name TEXT,

    insider_id TEXT NOT NULL,
    insider_cik TEXT,
    insider_name TEXT,
    insider_title TEXT,

    transaction_type TEXT NOT NULL CHECK (transaction_type IN ('Purchase','Sale','Other')),
    transaction_type_raw TEXT,

    trade_date TEXT,
    filing_date TEXT,
    price REAL,
    qty REAL,
    value REAL,

    scraped_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_trades_ticker_date ON insider_trades (ticker, trade_date);
CREATE INDEX IF NOT EXISTS idx_trades_type_date ON insider_trades (transaction_type, trade_date);
CREATE INDEX IF NOT EXISTS idx_trades_insider ON insider_trades (insider_id);
"""


def _sqlite_to_postgres(ddl: str) -> str:
    lines: list[str] = []
    for line in ddl.splitlines():
        if line.strip().upper().startswith("PRAGMA "):
            continue
        lines.append(line)
    out = "\n".join(lines)

    out = re.sub(r"\bREAL\b", "DOUBLE PRECISION", out)
    out = re.sub(
        r"INTEGER\s+PRIMARY\s+KEY\s+AUTOINCREMENT",
        "BIGSERIAL PRIMARY KEY",
        out,
        flags=re.IGNORECASE,
    )
    return out


SCHEMA_POSTGRES = _sqlite_to_postgres(SCHEMA_SQLITE)


def get_schema_sql(dialect: str) -> str:
    d = (dialect or "").lower()
    if d.startswith("post"):
        return SCHEMA_POSTGRES
    return SCHEMA_SQLITE
