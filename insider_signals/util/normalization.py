from __future__ import annotations

import re
import unicodedata
from typing import Any, Optional

from insider_signals.models import TransactionType
from insider_signals.util.hashing import sha256_hex


OFFICER_KEYWORDS = ("CEO", "CFO", "PRESIDENT", "OFFICER", "DIRECTOR")

_SUFFIXES = {
    "jr",
    "sr",
    "ii",
    "iii",
    "iv",
    "md",
    "phd",
    "cpa",
    "esq",
}

# Form 4 codes seen as the leading token of scraped labels ("P - Purchase", "S - Sale+OE").
_PURCHASE_CODES = {"p", "purchase", "buy"}
_SALE_CODES = {"s", "sale", "sell"}


def normalize_ticker(ticker: Any) -> Optional[str]:
    if ticker is None:
        return None
    t = str(ticker).strip().upper()
    return t or None


def normalize_cik(cik: Any) -> Optional[str]:
    """Normalize a filer CIK: digits only, left-pad to 10.

    Returns None if input is blank or contains no digits.
    """
    if cik is None:
        return None
    s = str(cik).strip()
    if not s:
        return None
    digits = "".join(ch for ch in s if ch.isdigit())
    if not digits:
        return None
    return digits.zfill(10)


def _basic_norm(s: str) -> str:
    s = unicodedata.normalize("NFKC", s)
    s = s.replace("\u00a0", " ")
    s = s.lower().strip()
    s = re.sub(r"[^a-z0-9]+", " ", s)
    return " ".join(s.split())


def normalize_insider_name(name: Any) -> Optional[str]:
    """Conservative name normalization (no fuzzy matching).

    'Doe, John A.' becomes 'john a doe'; trailing suffixes (Jr, III, ...) are dropped.
    """
    if name is None:
        return None
    raw = str(name).strip()
    if not raw:
        return None

    if "," in raw:
        left, right = raw.split(",", 1)
        left_n = _basic_norm(left)
        right_n = _basic_norm(right)
        s = f"{right_n} {left_n}".strip() if (left_n and right_n) else _basic_norm(raw)
    else:
        s = _basic_norm(raw)

    tokens = s.split()
    while tokens and tokens[-1] in _SUFFIXES:
        tokens.pop()
    out = " ".join(tokens).strip()
    return out or None


def build_insider_id(cik: Any, name: Any, title: Any) -> str:
    """Stable insider identity.

    CIK wins when present. Otherwise the normalized (name, title) pair is hashed so the
    same person filing under the same role maps to one buyer.
    """
    c = normalize_cik(cik)
    if c:
        return c

    n = normalize_insider_name(name)
    if n:
        t = _basic_norm(str(title)) if title else ""
        return f"namehash:{sha256_hex(f'{n}|{t}')[:16]}"

    return f"unknown:{sha256_hex('unknown_insider')[:16]}"


def classify_transaction_type(raw: Any) -> TransactionType:
    """Classify a raw transaction label once, at ingestion.

    Handles 'P - Purchase', 'S - Sale', 'S - Sale+OE', bare codes ('P'/'S') and
    enum values ('Purchase'/'Sale'). Everything else (grants, option exercises,
    gifts, blanks) is Other.
    """
    if isinstance(raw, TransactionType):
        return raw
    if raw is None:
        return TransactionType.OTHER
    s = str(raw).strip().lower()
    if not s:
        return TransactionType.OTHER

    head = re.split(r"[\s\-:+/]+", s, maxsplit=1)[0]
    if head in _PURCHASE_CODES:
        return TransactionType.PURCHASE
    if head in _SALE_CODES:
        return TransactionType.SALE
    return TransactionType.OTHER


def is_officer_title(title: Any) -> bool:
    """Officer-class title: CEO, CFO, President, Officer or Director (case-insensitive)."""
    if not title:
        return False
    t = str(title).upper()
    return any(k in t for k in OFFICER_KEYWORDS)
