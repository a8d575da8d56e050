from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class TransactionType(str, Enum):
    PURCHASE = "Purchase"
    SALE = "Sale"
    OTHER = "Other"


@dataclass(frozen=True)
class TradeEvent:
    """One insider transaction, normalized at ingestion.

    transaction_type is already classified; nothing downstream inspects raw labels.
    value is USD and may be None (unpriced); negatives are treated as 0 by all math.
    """

    ticker: str
    insider_id: str
    transaction_type: TransactionType
    trade_date: Optional[date]
    value: Optional[float] = None
    insider_title: Optional[str] = None
    insider_name: Optional[str] = None
    filed_at: Optional[str] = None
    company_name: Optional[str] = None

    @property
    def is_purchase(self) -> bool:
        return self.transaction_type == TransactionType.PURCHASE

    @property
    def is_sale(self) -> bool:
        return self.transaction_type == TransactionType.SALE

    @property
    def is_officer(self) -> bool:
        from insider_signals.util.normalization import is_officer_title

        return is_officer_title(self.insider_title)

    @property
    def dollars(self) -> float:
        v = self.value
        if v is None or v < 0:
            return 0.0
        return float(v)


@dataclass(frozen=True)
class TickerAggregate:
    ticker: str
    window_start: Optional[date]
    window_end: date
    distinct_buyers: int
    total_trades: int
    total_value: float
    total_buys_ever: int
    total_sells_ever: int
    latest_trade_date: date
    latest_insider: Optional[str]
    latest_title: Optional[str]
    company_name: Optional[str] = None
    has_officer_buyer: bool = False
    # In-window purchases, kept for the scorer (not part of any response)
    purchases: Tuple[TradeEvent, ...] = field(default=(), repr=False, compare=False)


@dataclass(frozen=True)
class ScreenerResult:
    ticker: str
    window_start: Optional[date]
    window_end: date
    distinct_buyers: int
    total_trades: int
    total_value: float
    total_buys_ever: int
    total_sells_ever: int
    latest_trade_date: date
    latest_insider: Optional[str]
    latest_title: Optional[str]
    company_name: Optional[str]
    conviction_score: float
    conviction_level: str
    is_cluster: bool
    price: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ticker": self.ticker,
            "company_name": self.company_name,
            "window_start": self.window_start.isoformat() if self.window_start else None,
            "window_end": self.window_end.isoformat(),
            "distinct_buyers": self.distinct_buyers,
            "total_trades": self.total_trades,
            "total_value": self.total_value,
            "total_buys_ever": self.total_buys_ever,
            "total_sells_ever": self.total_sells_ever,
            "latest_trade_date": self.latest_trade_date.isoformat(),
            "latest_insider": self.latest_insider,
            "latest_title": self.latest_title,
            "conviction_score": self.conviction_score,
            "conviction_level": self.conviction_level,
            "is_cluster": self.is_cluster,
            "price": self.price,
        }


@dataclass(frozen=True)
class ClusterWindow:
    ticker: str
    window_start: date
    window_end: date
    unique_insiders: int
    total_value: float
    officers_involved: bool
    members: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ticker": self.ticker,
            "window_start": self.window_start.isoformat(),
            "window_end": self.window_end.isoformat(),
            "unique_insiders": self.unique_insiders,
            "total_value": self.total_value,
            "officers_involved": self.officers_involved,
            "members": list(self.members),
        }


@dataclass(frozen=True)
class TickerSummary:
    ticker: str
    company_name: Optional[str]
    total_insider_purchases: int
    total_insider_sales: int
    total_insider_purchase_value: float
    total_insider_sale_value: float
    distinct_insiders: int
    first_trade_date: Optional[date]
    last_trade_date: Optional[date]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ticker": self.ticker,
            "company_name": self.company_name,
            "total_insider_purchases": self.total_insider_purchases,
            "total_insider_sales": self.total_insider_sales,
            "total_insider_purchase_value": self.total_insider_purchase_value,
            "total_insider_sale_value": self.total_insider_sale_value,
            "distinct_insiders": self.distinct_insiders,
            "first_trade_date": self.first_trade_date.isoformat() if self.first_trade_date else None,
            "last_trade_date": self.last_trade_date.isoformat() if self.last_trade_date else None,
        }
