from __future__ import annotations

import dataclasses
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from insider_signals import __version__
from insider_signals.compute.aggregate import window_bounds
from insider_signals.compute.clusters import find_cluster_windows
from insider_signals.compute.conviction import ScoringWeights
from insider_signals.compute.screener import ScreenerQuery, run_screener
from insider_signals.compute.summary import summarize_ticker
from insider_signals.config import Config, load_config
from insider_signals.db import connect, get_app_config, init_db
from insider_signals.eodhd.client import fetch_latest_closes
from insider_signals.errors import DataUnavailableError, ValidationError
from insider_signals.models import TransactionType
from insider_signals.store import insert_trade, load_all_time_counts, load_trade_events
from insider_signals.util.normalization import normalize_ticker


def _debug(msg: str) -> None:
    print(f"[api] {msg}")


app = FastAPI(title="Insider Signals", version=__version__)
cfg: Config = load_config()

# CORS is mainly needed for local development (Next.js on :3000 -> API on :8000).
_cors_origins = [o.strip() for o in (cfg.CORS_ALLOW_ORIGINS or "").split(",") if o.strip()]
if _cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.on_event("startup")
def _on_startup() -> None:
    init_db(cfg.DB_DSN)


def _bad_request(e: ValidationError) -> HTTPException:
    return HTTPException(status_code=400, detail=str(e))


def _unavailable(e: DataUnavailableError) -> HTTPException:
    _debug(f"Trade history unavailable: {e}")
    return HTTPException(status_code=503, detail="trade_history_unavailable")


# -----------------------------
# Health
# -----------------------------


@app.get("/health")
def health() -> Dict[str, Any]:
    """Liveness plus the scoring version stamped into app_config by scripts/init_db.py.

    recorded_scoring_version is None when the DB has no stamp or cannot be read;
    health never fails because of the DB.
    """
    recorded: Optional[str] = None
    try:
        with connect(cfg.DB_DSN) as conn:
            recorded = get_app_config(conn, "current_scoring_version")
    except Exception as e:
        _debug(f"Could not read recorded scoring version: {e}")
    return {
        "status": "ok",
        "scoring_version": cfg.CURRENT_SCORING_VERSION,
        "recorded_scoring_version": recorded,
    }


# -----------------------------
# Signals (screener)
# -----------------------------


@app.get("/signals/screener")
def signals_screener(
    days: Optional[int] = Query(None, description="Look-back window in days; 0 = all time"),
    min_buyers: int = 1,
    min_value: Optional[float] = None,
    officer_only: bool = False,
    sort_by: str = Query("conviction_score"),
    sort_dir: str = Query("desc"),
    limit: Optional[int] = None,
    with_prices: bool = False,
) -> List[Dict[str, Any]]:
    """Conviction-ranked tickers with insider buying in the window.

    Validation errors (negative days, non-positive limit, unknown sort_by) are 400s,
    not 422s, so the Signals page can show the message directly.
    """
    query = ScreenerQuery(
        days=cfg.SCREENER_DEFAULT_DAYS if days is None else days,
        min_buyers=min_buyers,
        min_value=min_value,
        officer_only=officer_only,
        sort_by=sort_by,
        sort_dir=sort_dir,
        limit=cfg.SCREENER_MAX_LIMIT if limit is None else limit,
    )
    today = date.today()
    try:
        q = query.validated(max_limit=cfg.SCREENER_MAX_LIMIT)
        since, _ = window_bounds(q.days, today)
    except ValidationError as e:
        raise _bad_request(e)

    try:
        with connect(cfg.DB_DSN) as conn:
            # Only purchases can qualify a ticker; all-time counts come from a separate aggregate.
            events = load_trade_events(conn, since=since, transaction_types=[TransactionType.PURCHASE])
            counts = load_all_time_counts(conn, tickers={ev.ticker for ev in events})
    except DataUnavailableError as e:
        raise _unavailable(e)

    results = run_screener(
        events,
        q,
        today=today,
        all_time_counts=counts,
        weights=ScoringWeights.from_config(cfg),
        max_limit=cfg.SCREENER_MAX_LIMIT,
    )

    if with_prices and results and cfg.ENABLE_PRICE_ENRICHMENT:
        if cfg.EODHD_API_KEY:
            prices = fetch_latest_closes(
                cfg.EODHD_BASE_URL,
                cfg.EODHD_API_KEY,
                [r.ticker for r in results],
                exchange=cfg.EODHD_EXCHANGE_SUFFIX,
            )
            results = [dataclasses.replace(r, price=prices.get(r.ticker)) for r in results]
        else:
            _debug("with_prices requested but EODHD_API_KEY is not set; returning price=null")

    return [r.to_dict() for r in results]


@app.get("/signals/ticker/{ticker}/clusters")
def ticker_clusters(
    ticker: str,
    window_days: Optional[int] = None,
    days: int = Query(0, description="Look-back window in days; 0 = all time"),
) -> Dict[str, Any]:
    t = normalize_ticker(ticker)
    wd = cfg.CLUSTER_WINDOW_DAYS if window_days is None else window_days
    try:
        since, _ = window_bounds(days)
    except ValidationError as e:
        raise _bad_request(e)

    try:
        with connect(cfg.DB_DSN) as conn:
            events = load_trade_events(
                conn, since=since, ticker=t, transaction_types=[TransactionType.PURCHASE]
            )
    except DataUnavailableError as e:
        raise _unavailable(e)

    try:
        windows = find_cluster_windows(events, window_days=wd)
    except ValidationError as e:
        raise _bad_request(e)

    return {
        "ticker": t,
        "days": days,
        "window_days": wd,
        "clusters": [w.to_dict() for w in windows],
    }


# -----------------------------
# Insider trades
# -----------------------------


@app.get("/insider/ticker/{ticker}/summary")
def ticker_summary(ticker: str) -> Dict[str, Any]:
    t = normalize_ticker(ticker)
    try:
        with connect(cfg.DB_DSN) as conn:
            events = load_trade_events(conn, ticker=t)
    except DataUnavailableError as e:
        raise _unavailable(e)

    summary = summarize_ticker(events, t or "")
    if summary is None:
        raise HTTPException(status_code=404, detail="ticker_not_found")
    return summary.to_dict()


class TradeIn(BaseModel):
    ticker: str
    transaction_type: str  # raw label is fine: 'P - Purchase', 'S - Sale', 'Purchase', ...
    trade_date: Optional[date] = None
    filing_date: Optional[date] = None
    insider_name: Optional[str] = None
    insider_title: Optional[str] = None
    insider_cik: Optional[str] = None
    company_name: Optional[str] = None
    price: Optional[float] = None
    qty: Optional[float] = None
    value: Optional[float] = None


@app.post("/insider/trades", status_code=201)
def create_trade(payload: TradeIn) -> Dict[str, Any]:
    if not normalize_ticker(payload.ticker):
        raise HTTPException(status_code=400, detail="ticker_required")

    with connect(cfg.DB_DSN) as conn:
        ev = insert_trade(conn, **payload.model_dump())

    _debug(f"Stored trade ticker={ev.ticker} type={ev.transaction_type.value} date={ev.trade_date}")
    return {
        "ticker": ev.ticker,
        "insider_id": ev.insider_id,
        "transaction_type": ev.transaction_type.value,
        "trade_date": ev.trade_date.isoformat() if ev.trade_date else None,
        "value": ev.value,
        "is_officer": ev.is_officer,
    }
