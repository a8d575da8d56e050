from __future__ import annotations

import math
from datetime import date, timedelta
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from insider_signals.errors import ValidationError
from insider_signals.models import TickerAggregate, TradeEvent


def _debug(msg: str) -> None:
    print(f"[aggregate] {msg}")


def window_bounds(days: int, today: Optional[date] = None) -> Tuple[Optional[date], date]:
    """Return (window_start, window_end) for a look-back window.

    days == 0 means "all time": window_start is None (unbounded).
    """
    if days is None or int(days) < 0:
        raise ValidationError(f"days must be >= 0 (0 = all time), got {days}")
    end = today or date.today()
    if int(days) == 0:
        return None, end
    try:
        return end - timedelta(days=int(days)), end
    except OverflowError as e:
        raise ValidationError(f"days is too large: {days}") from e


def in_window(ev: TradeEvent, start: Optional[date], end: date) -> bool:
    if ev.trade_date is None:
        return False
    if start is None:
        return True
    return start <= ev.trade_date <= end


def aggregate_trades(
    events: Iterable[TradeEvent],
    days: int,
    today: Optional[date] = None,
    all_time_counts: Optional[Mapping[str, Tuple[int, int]]] = None,
) -> List[TickerAggregate]:
    """Group trade events by ticker over a look-back window.

    One TickerAggregate per ticker with >= 1 in-window Purchase; sales alone never
    qualify a ticker. total_buys_ever / total_sells_ever count the whole supplied
    history unless `all_time_counts` ({ticker: (buys, sells)}) is given, which lets the
    caller pre-filter the history by date without changing the result.

    Output is ordered by ticker. Pure function of its inputs.
    """
    start, end = window_bounds(days, today)

    by_ticker: Dict[str, List[Tuple[int, TradeEvent]]] = {}
    for seq, ev in enumerate(events):
        by_ticker.setdefault(ev.ticker, []).append((seq, ev))

    out: List[TickerAggregate] = []
    for ticker in sorted(by_ticker):
        rows = by_ticker[ticker]

        purchases = [(seq, ev) for seq, ev in rows if ev.is_purchase and in_window(ev, start, end)]
        if not purchases:
            continue

        if all_time_counts is not None and ticker in all_time_counts:
            buys_ever, sells_ever = all_time_counts[ticker]
        else:
            buys_ever = sum(1 for _, ev in rows if ev.is_purchase)
            sells_ever = sum(1 for _, ev in rows if ev.is_sale)

        buyers = {ev.insider_id for _, ev in purchases}
        # Canonical order so float totals never depend on how the history was read.
        ordered = sorted(
            (ev for _, ev in purchases),
            key=lambda ev: (ev.trade_date, ev.insider_id, ev.dollars, ev.insider_title or "", ev.filed_at or ""),
        )
        total_value = math.fsum(ev.dollars for ev in ordered)

        # Latest purchase: trade_date, then filing/scrape time, then input order.
        newest_first = sorted(purchases, key=lambda p: (p[1].trade_date, p[1].filed_at or "", p[0]), reverse=True)
        latest = newest_first[0][1]

        # Derived from purchases only: a date-filtered purchase feed must agree with the full history.
        window_start = start if start is not None else ordered[0].trade_date
        company_name = next((ev.company_name for _, ev in newest_first if ev.company_name), None)

        out.append(
            TickerAggregate(
                ticker=ticker,
                window_start=window_start,
                window_end=end,
                distinct_buyers=len(buyers),
                total_trades=len(purchases),
                total_value=total_value,
                total_buys_ever=int(buys_ever),
                total_sells_ever=int(sells_ever),
                latest_trade_date=latest.trade_date,
                latest_insider=latest.insider_name,
                latest_title=latest.insider_title,
                company_name=company_name,
                has_officer_buyer=any(ev.is_officer for _, ev in purchases),
                purchases=tuple(ordered),
            )
        )

    _debug(f"days={days} tickers_seen={len(by_ticker)} qualifying={len(out)}")
    return out
