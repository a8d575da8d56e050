from __future__ import annotations

import math
from typing import Iterable, Optional

from insider_signals.models import TickerSummary, TradeEvent
from insider_signals.util.normalization import normalize_ticker


def summarize_ticker(events: Iterable[TradeEvent], ticker: str) -> Optional[TickerSummary]:
    """All-time buy/sell totals for one ticker. None if the ticker has no events."""
    t = normalize_ticker(ticker)
    rows = [ev for ev in events if ev.ticker == t]
    if not rows:
        return None

    buys = [ev for ev in rows if ev.is_purchase]
    sells = [ev for ev in rows if ev.is_sale]
    dates = [ev.trade_date for ev in rows if ev.trade_date is not None]

    return TickerSummary(
        ticker=t,
        company_name=next((ev.company_name for ev in reversed(rows) if ev.company_name), None),
        total_insider_purchases=len(buys),
        total_insider_sales=len(sells),
        total_insider_purchase_value=math.fsum(ev.dollars for ev in buys),
        total_insider_sale_value=math.fsum(ev.dollars for ev in sells),
        distinct_insiders=len({ev.insider_id for ev in rows}),
        first_trade_date=min(dates) if dates else None,
        last_trade_date=max(dates) if dates else None,
    )
