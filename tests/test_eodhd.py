"""Tests for the EODHD last-price client (HTTP mocked)."""

from datetime import date

import pytest
import requests

from insider_signals.eodhd import client as eodhd


class _Resp:
    def __init__(self, status_code, payload):
        self.status_code = status_code
        self._payload = payload
        self.text = "x" if payload is not None else ""

    def json(self):
        return self._payload


@pytest.mark.parametrize(
    "ticker,symbol",
    [("aapl", "AAPL.US"), ("BRK.B", "BRK-B.US"), ("SHOP.TO", "SHOP.TO")],
)
def test_to_symbol(ticker, symbol):
    assert eodhd.to_symbol(ticker) == symbol


def test_fetch_latest_close_picks_last_row(monkeypatch):
    calls = {}

    def fake_get(url, params=None, timeout=None):
        calls["url"] = url
        calls["params"] = params
        return _Resp(200, [{"date": "2024-06-27", "close": 10.0}, {"date": "2024-06-28", "close": 11.5}])

    monkeypatch.setattr(eodhd.requests, "get", fake_get)
    price = eodhd.fetch_latest_close("https://eodhd.test/api/", "key", "AAPL.US", today=date(2024, 6, 30))
    assert price == 11.5
    assert calls["url"] == "https://eodhd.test/api/eod/AAPL.US"
    assert calls["params"]["to"] == "2024-06-30"


def test_fetch_latest_close_http_error(monkeypatch):
    monkeypatch.setattr(eodhd.requests, "get", lambda *a, **k: _Resp(500, None))
    with pytest.raises(RuntimeError):
        eodhd.fetch_latest_close("https://eodhd.test/api", "key", "AAPL.US")


def test_fetch_latest_closes_is_best_effort(monkeypatch):
    def fake_get(url, params=None, timeout=None):
        if "BAD" in url:
            raise requests.ConnectionError("boom")
        return _Resp(200, [{"date": "2024-06-28", "close": 3.0}])

    monkeypatch.setattr(eodhd.requests, "get", fake_get)
    out = eodhd.fetch_latest_closes("https://eodhd.test/api", "key", ["GOOD", "BAD", "GOOD"])
    assert out == {"GOOD": 3.0, "BAD": None}
