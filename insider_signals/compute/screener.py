from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from insider_signals.compute.aggregate import aggregate_trades, window_bounds
from insider_signals.compute.clusters import is_cluster
from insider_signals.compute.conviction import ScoringWeights, conviction_level, score_aggregate
from insider_signals.errors import ValidationError
from insider_signals.models import ScreenerResult, TickerAggregate, TradeEvent


MAX_LIMIT = 200

SORT_FIELDS = ("conviction_score", "total_value", "distinct_buyers", "latest_trade_date")

# The Signals page sends sort_by=conviction.
_SORT_ALIASES = {"conviction": "conviction_score"}

SORT_DIRS = ("desc", "asc")


def _debug(msg: str) -> None:
    print(f"[screener] {msg}")


@dataclass(frozen=True)
class ScreenerQuery:
    days: int = 90
    min_buyers: int = 1
    min_value: Optional[float] = None
    officer_only: bool = False
    sort_by: str = "conviction_score"
    sort_dir: str = "desc"
    limit: int = MAX_LIMIT

    def validated(self, max_limit: int = MAX_LIMIT) -> "ScreenerQuery":
        """Return a normalized copy, or raise ValidationError.

        days: 0 = all time, otherwise positive.
        limit: positive; values above max_limit are capped.
        """
        try:
            days = int(self.days)
            min_buyers = int(self.min_buyers)
            limit = int(self.limit)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"days, min_buyers and limit must be integers ({e})") from e

        if days < 0:
            raise ValidationError(f"days must be >= 0 (0 = all time), got {days}")
        # the window start must still be a representable date
        window_bounds(days)
        if min_buyers < 1:
            raise ValidationError(f"min_buyers must be >= 1, got {min_buyers}")
        if limit <= 0:
            raise ValidationError(f"limit must be positive, got {limit}")

        min_value = self.min_value
        if min_value is not None:
            try:
                min_value = float(min_value)
            except (TypeError, ValueError) as e:
                raise ValidationError(f"min_value must be numeric, got {self.min_value!r}") from e
            if min_value < 0:
                raise ValidationError(f"min_value must be >= 0, got {min_value}")

        sort_by = (self.sort_by or "conviction_score").strip().lower()
        sort_by = _SORT_ALIASES.get(sort_by, sort_by)
        if sort_by not in SORT_FIELDS:
            raise ValidationError(f"invalid sort_by {self.sort_by!r}; expected one of {', '.join(SORT_FIELDS)}")

        sort_dir = (self.sort_dir or "desc").strip().lower()
        if sort_dir not in SORT_DIRS:
            raise ValidationError(f"invalid sort_dir {self.sort_dir!r}; expected desc or asc")

        return replace(
            self,
            days=days,
            min_buyers=min_buyers,
            min_value=min_value,
            officer_only=bool(self.officer_only),
            sort_by=sort_by,
            sort_dir=sort_dir,
            limit=min(limit, int(max_limit)),
        )


def run_screener(
    events: Iterable[TradeEvent],
    query: ScreenerQuery,
    today: Optional[date] = None,
    all_time_counts: Optional[Mapping[str, Tuple[int, int]]] = None,
    weights: Optional[ScoringWeights] = None,
    max_limit: int = MAX_LIMIT,
) -> List[ScreenerResult]:
    """Aggregate, score, filter, sort and truncate.

    Filter order: min_buyers, then officer_only, then min_value.
    Ties on sort_by always break by total_value desc, then ticker asc.
    """
    q = query.validated(max_limit=max_limit)
    ref = today or date.today()

    aggs = aggregate_trades(events, q.days, today=ref, all_time_counts=all_time_counts)

    kept: List[TickerAggregate] = []
    for agg in aggs:
        if agg.distinct_buyers < q.min_buyers:
            continue
        if q.officer_only and not agg.has_officer_buyer:
            continue
        if q.min_value is not None and agg.total_value < q.min_value:
            continue
        kept.append(agg)

    results = [_to_result(agg, q.days, ref, weights) for agg in kept]
    results = sort_results(results, q.sort_by, q.sort_dir)[: q.limit]

    _debug(
        f"days={q.days} min_buyers={q.min_buyers} min_value={q.min_value} officer_only={q.officer_only} "
        f"sort={q.sort_by}/{q.sort_dir} candidates={len(aggs)} filtered={len(kept)} returned={len(results)}"
    )
    return results


def sort_results(results: List[ScreenerResult], sort_by: str, sort_dir: str = "desc") -> List[ScreenerResult]:
    """Stable multi-key sort: primary field, then total_value desc, then ticker asc."""
    key: Callable[[ScreenerResult], Any] = _SORT_KEYS[sort_by]
    out = sorted(results, key=lambda r: r.ticker)
    out.sort(key=lambda r: r.total_value, reverse=True)
    out.sort(key=key, reverse=(sort_dir == "desc"))
    return out


_SORT_KEYS: Dict[str, Callable[[ScreenerResult], Any]] = {
    "conviction_score": lambda r: r.conviction_score,
    "total_value": lambda r: r.total_value,
    "distinct_buyers": lambda r: r.distinct_buyers,
    "latest_trade_date": lambda r: r.latest_trade_date,
}


def _to_result(
    agg: TickerAggregate,
    days: int,
    today: date,
    weights: Optional[ScoringWeights],
) -> ScreenerResult:
    score = score_aggregate(agg, days, today=today, weights=weights)
    return ScreenerResult(
        ticker=agg.ticker,
        window_start=agg.window_start,
        window_end=agg.window_end,
        distinct_buyers=agg.distinct_buyers,
        total_trades=agg.total_trades,
        total_value=agg.total_value,
        total_buys_ever=agg.total_buys_ever,
        total_sells_ever=agg.total_sells_ever,
        latest_trade_date=agg.latest_trade_date,
        latest_insider=agg.latest_insider,
        latest_title=agg.latest_title,
        company_name=agg.company_name,
        conviction_score=score,
        conviction_level=conviction_level(score),
        is_cluster=is_cluster(agg.distinct_buyers),
    )
