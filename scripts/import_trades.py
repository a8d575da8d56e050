"""Import insider trades from a CSV export into insider_trades.

Usage:
  python scripts/import_trades.py --file trades.csv

Expected header (extra columns are ignored, missing ones are treated as blank):
  ticker, company_name, insider_name, insider_title, insider_cik,
  transaction_type, trade_date, filing_date, price, qty, value

transaction_type may be a raw scraped label ('P - Purchase', 'S - Sale+OE'); it is
classified once here. Rows without a ticker are skipped.
"""

from __future__ import annotations

import argparse
import csv
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


from insider_signals.config import Config
from insider_signals.db import connect, init_db, upsert_app_config
from insider_signals.models import TransactionType
from insider_signals.store import insert_trade
from insider_signals.util.time import utcnow_iso


_COLUMNS = (
    "ticker",
    "company_name",
    "insider_name",
    "insider_title",
    "insider_cik",
    "transaction_type",
    "trade_date",
    "filing_date",
    "price",
    "qty",
    "value",
)


def _clean(v: object) -> object:
    if v is None:
        return None
    s = str(v).strip()
    return s or None


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--file", default="trades.csv", help="Path to trades CSV")
    args = parser.parse_args()

    cfg = Config()  # reads env
    init_db(cfg.DB_DSN)

    path = Path(args.file)
    counts = {t: 0 for t in TransactionType}
    skipped = 0

    with path.open(newline="", encoding="utf-8", errors="ignore") as fh, connect(cfg.DB_DSN) as conn:
        reader = csv.DictReader(fh)
        for lineno, row in enumerate(reader, start=2):
            rec = {k: _clean(row.get(k)) for k in _COLUMNS}
            if not rec["ticker"]:
                skipped += 1
                continue
            try:
                ev = insert_trade(conn, **rec)
            except ValueError as e:
                print(f"  line {lineno}: skipped ({e})")
                skipped += 1
                continue
            counts[ev.transaction_type] += 1

        upsert_app_config(conn, "trades_imported_at_utc", utcnow_iso())

    total = sum(counts.values())
    print(
        f"Done. imported={total} purchases={counts[TransactionType.PURCHASE]} "
        f"sales={counts[TransactionType.SALE]} other={counts[TransactionType.OTHER]} skipped={skipped}"
    )


if __name__ == "__main__":
    main()
