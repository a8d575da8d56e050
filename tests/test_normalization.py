"""Tests for ingestion-time normalization."""

import pytest

from insider_signals.models import TransactionType
from insider_signals.util.normalization import (
    build_insider_id,
    classify_transaction_type,
    is_officer_title,
    normalize_cik,
    normalize_insider_name,
    normalize_ticker,
)


class TestClassifyTransactionType:
    @pytest.mark.parametrize("raw", ["P - Purchase", "P", "Purchase", "purchase", " p - purchase "])
    def test_purchase_labels(self, raw):
        assert classify_transaction_type(raw) == TransactionType.PURCHASE

    @pytest.mark.parametrize("raw", ["S - Sale", "S - Sale+OE", "S", "Sale"])
    def test_sale_labels(self, raw):
        assert classify_transaction_type(raw) == TransactionType.SALE

    @pytest.mark.parametrize("raw", [None, "", "M - OptEx", "G - Gift", "A - Grant", "Superpurchase"])
    def test_everything_else_is_other(self, raw):
        assert classify_transaction_type(raw) == TransactionType.OTHER

    def test_enum_passes_through(self):
        assert classify_transaction_type(TransactionType.SALE) == TransactionType.SALE


class TestOfficerTitle:
    @pytest.mark.parametrize("title", ["CEO", "cfo", "President & COO", "Chief Accounting Officer", "Director"])
    def test_officer_class(self, title):
        assert is_officer_title(title) is True

    @pytest.mark.parametrize("title", [None, "", "10% Owner", "VP Sales"])
    def test_not_officer_class(self, title):
        assert is_officer_title(title) is False


class TestIdentity:
    def test_normalize_ticker(self):
        assert normalize_ticker(" aapl ") == "AAPL"
        assert normalize_ticker("  ") is None

    def test_normalize_cik_pads(self):
        assert normalize_cik("320193") == "0000320193"
        assert normalize_cik("abc") is None

    def test_comma_name_reordered_and_suffix_dropped(self):
        assert normalize_insider_name("Doe, John A.") == "john a doe"
        assert normalize_insider_name("John A. Doe Jr.") == "john a doe"

    def test_cik_wins(self):
        assert build_insider_id("1234", "Jane Roe", "CEO") == "0000001234"

    def test_name_title_pair_is_stable(self):
        a = build_insider_id(None, "Doe, John", "CFO")
        b = build_insider_id(None, "John Doe", "cfo")
        c = build_insider_id(None, "John Doe", "Director")
        assert a == b
        assert a != c
        assert a.startswith("namehash:")
