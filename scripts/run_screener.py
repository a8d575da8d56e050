"""Run the Signals screener against the configured DB and print the ranking.

Usage:
  python scripts/run_screener.py --days 30 --min-buyers 2 --officer-only
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from insider_signals.compute.aggregate import window_bounds
from insider_signals.compute.conviction import ScoringWeights
from insider_signals.compute.screener import SORT_FIELDS, ScreenerQuery, run_screener
from insider_signals.config import load_config
from insider_signals.db import connect
from insider_signals.errors import ValidationError
from insider_signals.models import TransactionType
from insider_signals.store import load_all_time_counts, load_trade_events


def main() -> None:
    cfg = load_config()

    parser = argparse.ArgumentParser()
    parser.add_argument("--days", type=int, default=cfg.SCREENER_DEFAULT_DAYS, help="0 = all time")
    parser.add_argument("--min-buyers", type=int, default=1)
    parser.add_argument("--min-value", type=float, default=None)
    parser.add_argument("--officer-only", action="store_true")
    parser.add_argument("--sort-by", default="conviction_score", choices=SORT_FIELDS + ("conviction",))
    parser.add_argument("--asc", action="store_true", help="Sort ascending instead of descending")
    parser.add_argument("--limit", type=int, default=50)
    args = parser.parse_args()

    query = ScreenerQuery(
        days=args.days,
        min_buyers=args.min_buyers,
        min_value=args.min_value,
        officer_only=args.officer_only,
        sort_by=args.sort_by,
        sort_dir="asc" if args.asc else "desc",
        limit=args.limit,
    )
    try:
        q = query.validated(max_limit=cfg.SCREENER_MAX_LIMIT)
        since, _ = window_bounds(q.days)
    except ValidationError as e:
        parser.error(str(e))
        return

    with connect(cfg.DB_DSN) as conn:
        events = load_trade_events(conn, since=since, transaction_types=[TransactionType.PURCHASE])
        counts = load_all_time_counts(conn, tickers={ev.ticker for ev in events})

    results = run_screener(
        events,
        q,
        all_time_counts=counts,
        weights=ScoringWeights.from_config(cfg),
        max_limit=cfg.SCREENER_MAX_LIMIT,
    )

    if not results:
        print("No signals match these filters.")
        return

    for r in results:
        flag = "*" if r.is_cluster else " "
        print(
            f"{flag} {r.ticker:<6} score={r.conviction_score:7.2f} ({r.conviction_level:<9}) "
            f"buyers={r.distinct_buyers} trades={r.total_trades} value=${r.total_value:,.0f} "
            f"B/S={r.total_buys_ever}/{r.total_sells_ever} latest={r.latest_trade_date} {r.latest_insider or ''}"
        )


if __name__ == "__main__":
    main()
