from datetime import timedelta

from insider_signals.compute.summary import summarize_ticker
from insider_signals.models import TransactionType


def test_summary_counts_all_time(make_event, today):
    events = [
        make_event(ticker="ACME", insider="a", value=1_000, age=900, company_name="Acme Corp"),
        make_event(ticker="ACME", insider="b", value=None, age=1),
        make_event(ticker="ACME", insider="a", tx=TransactionType.SALE, value=4_000, age=2),
        make_event(ticker="ACME", insider="c", tx=TransactionType.OTHER, value=9_999, age=3),
        make_event(ticker="OTHER", insider="z", value=5),
    ]
    s = summarize_ticker(events, "acme")
    assert s.ticker == "ACME"
    assert s.company_name == "Acme Corp"
    assert s.total_insider_purchases == 2
    assert s.total_insider_sales == 1
    assert s.total_insider_purchase_value == 1_000
    assert s.total_insider_sale_value == 4_000
    assert s.distinct_insiders == 3
    assert s.first_trade_date == today - timedelta(days=900)
    assert s.last_trade_date == today - timedelta(days=1)


def test_summary_unknown_ticker(make_event):
    assert summarize_ticker([make_event(ticker="ACME")], "ZZZ") is None
