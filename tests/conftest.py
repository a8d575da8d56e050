import os
import sys
from datetime import date, timedelta

import pytest

# Ensure repo root is on sys.path for imports like 'insider_signals.*'
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from insider_signals.models import TradeEvent, TransactionType


TODAY = date(2024, 6, 30)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def make_event():
    """Build a TradeEvent; `age` is days before TODAY."""

    def _make(
        ticker="ACME",
        insider="0000000001",
        tx=TransactionType.PURCHASE,
        value=10_000.0,
        title=None,
        age=0,
        name=None,
        filed_at=None,
        company_name=None,
        trade_date="auto",
    ):
        td = TODAY - timedelta(days=age) if trade_date == "auto" else trade_date
        return TradeEvent(
            ticker=ticker,
            insider_id=insider,
            transaction_type=tx,
            trade_date=td,
            value=value,
            insider_title=title,
            insider_name=name or f"Insider {insider}",
            filed_at=filed_at,
            company_name=company_name,
        )

    return _make
