"""Tests for the SQLite-backed trade event store."""

from datetime import date

import pytest

from insider_signals.db import (
    connect,
    detect_dialect,
    get_app_config,
    init_db,
    qmark_to_pct,
    split_statements,
    upsert_app_config,
)
from insider_signals.errors import DataUnavailableError
from insider_signals.models import TransactionType
from insider_signals.schema import get_schema_sql
from insider_signals.store import insert_trade, load_all_time_counts, load_trade_events


@pytest.fixture
def dsn(tmp_path):
    path = str(tmp_path / "trades.sqlite")
    init_db(path)
    return path


def test_detect_dialect():
    assert detect_dialect("postgresql://u:p@localhost/db") == "postgres"
    assert detect_dialect("./local.sqlite") == "sqlite"
    assert detect_dialect("sqlite:///tmp/x.sqlite") == "sqlite"


def test_qmark_to_pct_skips_literals():
    assert qmark_to_pct("SELECT * FROM t WHERE a=? AND b='?'") == "SELECT * FROM t WHERE a=%s AND b='?'"


def test_postgres_schema_splits_into_ddl_statements():
    stmts = split_statements(get_schema_sql("postgres"))
    assert stmts
    for stmt in stmts:
        assert stmt.upper().startswith("CREATE"), stmt[:60]
    assert any("insider_trades" in s for s in stmts)
    assert any("app_config" in s for s in stmts)


def test_postgres_schema_comments_hold_no_statement_separator():
    # init_db splits the Postgres script on ";", so comments must never introduce one
    for chunk in get_schema_sql("postgres").split(";"):
        body = "\n".join(line for line in chunk.splitlines() if not line.strip().startswith("--")).strip()
        if body:
            assert body.upper().startswith("CREATE"), body[:60]


def test_app_config_roundtrip(dsn):
    with connect(dsn) as conn:
        upsert_app_config(conn, "current_scoring_version", "conviction_v1")
        upsert_app_config(conn, "current_scoring_version", "conviction_v2")
    with connect(dsn) as conn:
        assert get_app_config(conn, "current_scoring_version") == "conviction_v2"
        assert get_app_config(conn, "missing") is None


def test_insert_classifies_and_normalizes(dsn):
    with connect(dsn) as conn:
        ev = insert_trade(
            conn,
            ticker=" acme ",
            transaction_type="P - Purchase",
            trade_date="2024-06-01",
            filing_date="2024-06-03",
            insider_name="Doe, Jane",
            insider_title="CFO",
            price="12.50",
            qty="1,000",
        )
    assert ev.ticker == "ACME"
    assert ev.transaction_type == TransactionType.PURCHASE
    assert ev.value == pytest.approx(12_500)
    assert ev.trade_date == date(2024, 6, 1)
    assert ev.insider_id.startswith("namehash:")
    assert ev.is_officer is True

    with connect(dsn) as conn:
        (loaded,) = load_trade_events(conn)
    assert loaded == ev


def test_negative_sale_value_stored_as_amount(dsn):
    with connect(dsn) as conn:
        ev = insert_trade(conn, ticker="ACME", transaction_type="S - Sale+OE", trade_date="2024-06-01", price=10, qty=-300)
    assert ev.transaction_type == TransactionType.SALE
    assert ev.value == pytest.approx(3_000)


def test_blank_ticker_rejected(dsn):
    with connect(dsn) as conn:
        with pytest.raises(ValueError):
            insert_trade(conn, ticker="  ", transaction_type="P")


def test_load_filters(dsn):
    with connect(dsn) as conn:
        insert_trade(conn, ticker="AAA", transaction_type="P", trade_date="2024-01-10", insider_cik="1")
        insert_trade(conn, ticker="AAA", transaction_type="S", trade_date="2024-05-10", insider_cik="1")
        insert_trade(conn, ticker="AAA", transaction_type="M - OptEx", trade_date="2024-05-11", insider_cik="2")
        insert_trade(conn, ticker="BBB", transaction_type="P", trade_date="2024-05-20", insider_cik="3")
        insert_trade(conn, ticker="BBB", transaction_type="P", trade_date=None, insider_cik="4")

    with connect(dsn) as conn:
        assert len(load_trade_events(conn)) == 5
        assert len(load_trade_events(conn, ticker="aaa")) == 3
        since = load_trade_events(conn, since=date(2024, 5, 1))
        assert {(e.ticker, e.transaction_type) for e in since} == {
            ("AAA", TransactionType.SALE),
            ("AAA", TransactionType.OTHER),
            ("BBB", TransactionType.PURCHASE),
        }
        buys = load_trade_events(conn, transaction_types=[TransactionType.PURCHASE])
        assert all(e.is_purchase for e in buys) and len(buys) == 3
        assert load_trade_events(conn, transaction_types=[]) == []

        assert load_all_time_counts(conn) == {"AAA": (1, 1), "BBB": (2, 0)}
        assert load_all_time_counts(conn, tickers=["bbb"]) == {"BBB": (2, 0)}


def test_read_failure_is_data_unavailable(tmp_path):
    # No schema: the table does not exist.
    path = str(tmp_path / "empty.sqlite")
    with connect(path) as conn:
        with pytest.raises(DataUnavailableError):
            load_trade_events(conn)
        with pytest.raises(DataUnavailableError):
            load_all_time_counts(conn)
