from __future__ import annotations

import re
from datetime import date, timedelta
from typing import Dict, Iterable, Optional

import requests


def _debug(msg: str) -> None:
    print(f"[eodhd] {msg}")


def to_symbol(ticker: str, exchange: str = "US") -> str:
    """DB ticker -> EODHD symbol (AAPL -> AAPL.US).

    Tickers that already look like CODE.EXCHANGE (SHOP.TO) are returned as-is.
    SEC class shares (BRK.B) use '-' on EODHD (BRK-B.US).
    """
    t = (ticker or "").strip().upper()
    if not t:
        raise RuntimeError("Ticker is blank; cannot build EODHD symbol")
    if re.match(r"^[A-Z0-9\-]+\.[A-Z]{2,4}$", t):
        return t
    return f"{t.replace('.', '-')}.{exchange.upper()}"


def fetch_latest_close(
    base_url: str,
    api_key: str,
    symbol: str,
    *,
    lookback_days: int = 10,
    today: Optional[date] = None,
) -> Optional[float]:
    """Most recent daily close for a symbol (None if EODHD has no rows in the lookback).

    Raises RuntimeError on HTTP errors; callers decide whether that is fatal.
    """
    end = today or date.today()
    start = end - timedelta(days=int(lookback_days))
    url = f"{base_url.rstrip('/')}/eod/{symbol}"
    params = {
        "api_token": api_key,
        "fmt": "json",
        "period": "d",
        "from": start.isoformat(),
        "to": end.isoformat(),
    }
    _debug(f"Fetching latest close: {url} from={params['from']} to={params['to']}")
    r = requests.get(url, params=params, timeout=30)
    if r.status_code != 200:
        raise RuntimeError(f"EODHD eod error {r.status_code}: {r.text}")

    data = r.json() if r.text else []
    if not isinstance(data, list):
        raise RuntimeError(f"EODHD eod returned unexpected payload: {data}")

    rows = [row for row in data if isinstance(row, dict) and row.get("date") and row.get("close") is not None]
    if not rows:
        return None
    last = max(rows, key=lambda row: str(row["date"]))
    return float(last["close"])


def fetch_latest_closes(
    base_url: str,
    api_key: str,
    tickers: Iterable[str],
    *,
    exchange: str = "US",
) -> Dict[str, Optional[float]]:
    """Best-effort batch: a failed lookup maps the ticker to None and is logged."""
    out: Dict[str, Optional[float]] = {}
    for t in dict.fromkeys(tickers):
        try:
            out[t] = fetch_latest_close(base_url, api_key, to_symbol(t, exchange))
        except (RuntimeError, requests.RequestException, ValueError) as e:
            _debug(f"Price lookup failed ticker={t}: {e}")
            out[t] = None
    return out
