"""Trade Event Store: the only place insider trades are read from / written to the DB.

Rows are turned into TradeEvent once, here. Read failures surface as
DataUnavailableError; the scoring core never retries.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Tuple

from insider_signals.errors import DataUnavailableError
from insider_signals.models import TradeEvent, TransactionType
from insider_signals.util.normalization import (
    build_insider_id,
    classify_transaction_type,
    normalize_cik,
    normalize_ticker,
)
from insider_signals.util.time import parse_iso_date, utcnow_iso


def _debug(msg: str) -> None:
    print(f"[store] {msg}")


def _num(x: Any) -> Optional[float]:
    if x is None or x == "":
        return None
    try:
        return float(str(x).replace(",", "").replace("$", "").strip())
    except ValueError:
        return None


def insert_trade(
    conn: Any,
    *,
    ticker: str,
    transaction_type: Any,
    trade_date: Any = None,
    insider_name: Optional[str] = None,
    insider_title: Optional[str] = None,
    insider_cik: Optional[str] = None,
    company_name: Optional[str] = None,
    filing_date: Any = None,
    price: Any = None,
    qty: Any = None,
    value: Any = None,
    scraped_at: Optional[str] = None,
) -> TradeEvent:
    """Classify + normalize one trade and insert it.

    value falls back to |price * qty| when not given. Negative values are stored as
    their absolute amount (sales are often reported with signed quantities).
    """
    t = normalize_ticker(ticker)
    if not t:
        raise ValueError("ticker is required")

    tx_type = classify_transaction_type(transaction_type)
    td = parse_iso_date(trade_date)
    fd = parse_iso_date(filing_date)
    p = _num(price)
    q = _num(qty)
    v = _num(value)
    if v is None and p is not None and q is not None:
        v = p * q
    if v is not None:
        v = abs(v)

    cik = normalize_cik(insider_cik)
    insider_id = build_insider_id(cik, insider_name, insider_title)
    scraped = scraped_at or utcnow_iso()

    conn.execute(
        """
        INSERT INTO insider_trades (
            ticker, company_name,
            insider_id, insider_cik, insider_name, insider_title,
            transaction_type, transaction_type_raw,
            trade_date, filing_date, price, qty, value,
            scraped_at
        ) VALUES (?,?,?,?,?,?,?,?,?,?,?,?,?,?)
        """,
        (
            t,
            company_name,
            insider_id,
            cik,
            insider_name,
            insider_title,
            tx_type.value,
            None if transaction_type is None else str(getattr(transaction_type, "value", transaction_type)),
            td.isoformat() if td else None,
            fd.isoformat() if fd else None,
            p,
            q,
            v,
            scraped,
        ),
    )

    return TradeEvent(
        ticker=t,
        insider_id=insider_id,
        transaction_type=tx_type,
        trade_date=td,
        value=v,
        insider_title=insider_title,
        insider_name=insider_name,
        filed_at=_filed_at(fd.isoformat() if fd else None, scraped),
        company_name=company_name,
    )


def _filed_at(filing_date: Optional[str], scraped_at: Optional[str]) -> Optional[str]:
    # filing date first, scrape time second: both ISO, so string order == time order
    if not filing_date and not scraped_at:
        return None
    return f"{filing_date or ''}|{scraped_at or ''}"


def row_to_event(row: Any) -> TradeEvent:
    return TradeEvent(
        ticker=row["ticker"],
        insider_id=row["insider_id"],
        transaction_type=TransactionType(row["transaction_type"]),
        trade_date=parse_iso_date(row["trade_date"]),
        value=float(row["value"]) if row["value"] is not None else None,
        insider_title=row["insider_title"],
        insider_name=row["insider_name"],
        filed_at=_filed_at(row["filing_date"], row["scraped_at"]),
        company_name=row["company_name"],
    )


def load_trade_events(
    conn: Any,
    *,
    since: Optional[date] = None,
    ticker: Optional[str] = None,
    transaction_types: Optional[Iterable[TransactionType]] = None,
) -> List[TradeEvent]:
    """Single read query. `since` drops rows with trade_date before it (and undated rows)."""
    where: List[str] = []
    params: List[Any] = []

    if since is not None:
        where.append("trade_date >= ?")
        params.append(since.isoformat())
    if ticker:
        where.append("ticker = ?")
        params.append(normalize_ticker(ticker))
    if transaction_types is not None:
        types = [TransactionType(t).value for t in transaction_types]
        if not types:
            return []
        where.append(f"transaction_type IN ({','.join('?' for _ in types)})")
        params.extend(types)

    where_sql = f"WHERE {' AND '.join(where)}" if where else ""

    try:
        rows = conn.execute(
            f"""
            SELECT ticker, company_name, insider_id, insider_name, insider_title,
                   transaction_type, trade_date, filing_date, value, scraped_at
            FROM insider_trades
            {where_sql}
            ORDER BY id ASC
            """,
            tuple(params),
        ).fetchall()
    except Exception as e:
        raise DataUnavailableError(f"Could not load insider trades: {e}") from e

    events = [row_to_event(r) for r in rows]
    _debug(f"Loaded {len(events)} trade events since={since} ticker={ticker}")
    return events


def load_all_time_counts(conn: Any, tickers: Optional[Iterable[str]] = None) -> Dict[str, Tuple[int, int]]:
    """{ticker: (purchases, sales)} over the entire stored history."""
    params: List[Any] = []
    where_sql = ""
    if tickers is not None:
        ts = sorted({normalize_ticker(t) for t in tickers if normalize_ticker(t)})
        if not ts:
            return {}
        where_sql = f"WHERE ticker IN ({','.join('?' for _ in ts)})"
        params.extend(ts)

    try:
        rows = conn.execute(
            f"""
            SELECT ticker,
                   SUM(CASE WHEN transaction_type='Purchase' THEN 1 ELSE 0 END) AS buys,
                   SUM(CASE WHEN transaction_type='Sale' THEN 1 ELSE 0 END) AS sells
            FROM insider_trades
            {where_sql}
            GROUP BY ticker
            """,
            tuple(params),
        ).fetchall()
    except Exception as e:
        raise DataUnavailableError(f"Could not load all-time trade counts: {e}") from e

    return {str(r["ticker"]): (int(r["buys"] or 0), int(r["sells"] or 0)) for r in rows}
