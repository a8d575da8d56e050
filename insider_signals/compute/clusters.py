from __future__ import annotations

from datetime import timedelta
from typing import Dict, Iterable, List

from insider_signals.errors import ValidationError
from insider_signals.models import ClusterWindow, TradeEvent


# Fixed: the screener's min_buyers filter never moves this threshold.
CLUSTER_MIN_BUYERS = 2


def _debug(msg: str) -> None:
    print(f"[clusters] {msg}")


def is_cluster(distinct_buyers: int) -> bool:
    return int(distinct_buyers) >= CLUSTER_MIN_BUYERS


def find_cluster_windows(events: Iterable[TradeEvent], window_days: int = 14) -> List[ClusterWindow]:
    """Find cluster-buy windows for one ticker's purchase history.

    Deterministic + non-overlapping:
    - Sort dated purchases by (trade_date, insider_id).
    - Sweep left-to-right. Each unassigned purchase anchors [anchor, anchor + window_days].
    - If that window holds purchases from >= 2 distinct insiders, all unassigned purchases
      in it form ONE cluster and are marked assigned.

    Each cluster's span is therefore <= window_days. Non-purchases and undated events
    are ignored. Events for several tickers are swept per ticker.
    """
    if int(window_days) <= 0:
        raise ValidationError(f"window_days must be positive, got {window_days}")

    by_ticker: Dict[str, List[TradeEvent]] = {}
    for ev in events:
        if ev.is_purchase and ev.trade_date is not None:
            by_ticker.setdefault(ev.ticker, []).append(ev)

    out: List[ClusterWindow] = []
    for ticker in sorted(by_ticker):
        out.extend(_sweep(ticker, by_ticker[ticker], int(window_days)))
    return out


def _sweep(ticker: str, purchases: List[TradeEvent], window_days: int) -> List[ClusterWindow]:
    candidates = sorted(purchases, key=lambda e: (e.trade_date, e.insider_id))
    if len(candidates) < CLUSTER_MIN_BUYERS:
        return []

    assigned = [False] * len(candidates)
    windows: List[ClusterWindow] = []

    for i, anchor in enumerate(candidates):
        if assigned[i]:
            continue

        window_end_dt = anchor.trade_date + timedelta(days=window_days)
        idxs = [
            j
            for j in range(i, len(candidates))
            if candidates[j].trade_date <= window_end_dt and not assigned[j]
        ]

        insiders = {candidates[k].insider_id for k in idxs}
        if not is_cluster(len(insiders)):
            continue

        members = tuple(sorted(insiders))
        win = ClusterWindow(
            ticker=ticker,
            window_start=anchor.trade_date,
            window_end=max(candidates[k].trade_date for k in idxs),
            unique_insiders=len(insiders),
            total_value=float(sum(candidates[k].dollars for k in idxs)),
            officers_involved=any(candidates[k].is_officer for k in idxs),
            members=members,
        )
        windows.append(win)
        for k in idxs:
            assigned[k] = True

        _debug(
            f"Built cluster ticker={ticker} insiders={win.unique_insiders} "
            f"dollars={win.total_value:.0f} window={win.window_start}->{win.window_end}"
        )

    return windows
