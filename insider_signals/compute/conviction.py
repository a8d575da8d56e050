from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Optional

from insider_signals.config import Config
from insider_signals.models import TickerAggregate, TradeEvent


@dataclass(frozen=True)
class ScoringWeights:
    """Conviction constants.

    Calibrated against the Signals badge cutoffs (5 / 20 / 50), not a verified formula.
    """

    officer_multiplier: float = 1.5
    base_multiplier: float = 1.0
    decay_floor: float = 0.2
    cluster_bonus: float = 5.0

    @classmethod
    def from_config(cls, cfg: Config) -> "ScoringWeights":
        return cls(
            officer_multiplier=float(cfg.CONVICTION_OFFICER_MULTIPLIER),
            decay_floor=float(cfg.CONVICTION_DECAY_FLOOR),
            cluster_bonus=float(cfg.CONVICTION_CLUSTER_BONUS),
        )


DEFAULT_WEIGHTS = ScoringWeights()

# (min score, label), highest first
CONVICTION_LEVELS = (
    (50.0, "Very High"),
    (20.0, "High"),
    (5.0, "Medium"),
)


def value_component(ev: TradeEvent) -> float:
    # log10 so a 10x bigger purchase adds a constant +1; missing/negative -> log10(1) = 0
    return math.log10(max(ev.dollars, 1.0))


def role_multiplier(ev: TradeEvent, weights: ScoringWeights = DEFAULT_WEIGHTS) -> float:
    return weights.officer_multiplier if ev.is_officer else weights.base_multiplier


def recency_decay(
    ev: TradeEvent,
    days: int,
    today: Optional[date] = None,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> float:
    """Linear decay across the window, floored at weights.decay_floor.

    days == 0 ("all time") has no window to decay across: every event counts fully.
    """
    if int(days) == 0 or ev.trade_date is None:
        return 1.0
    ref = today or date.today()
    age_days = max(0, (ref - ev.trade_date).days)
    return max(weights.decay_floor, 1.0 - age_days / float(days))


def event_weight(
    ev: TradeEvent,
    days: int,
    today: Optional[date] = None,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> float:
    return value_component(ev) * role_multiplier(ev, weights) * recency_decay(ev, days, today, weights)


def cluster_bonus(distinct_buyers: int, weights: ScoringWeights = DEFAULT_WEIGHTS) -> float:
    return max(0, int(distinct_buyers) - 1) * weights.cluster_bonus


def score_aggregate(
    agg: TickerAggregate,
    days: int,
    today: Optional[date] = None,
    weights: Optional[ScoringWeights] = None,
) -> float:
    """Conviction score for one ticker.

    Sum of per-purchase weights plus a bonus per distinct buyer beyond the first.
    Never negative.
    """
    w = weights or DEFAULT_WEIGHTS
    ref = today or agg.window_end
    base = math.fsum(event_weight(ev, days, ref, w) for ev in agg.purchases)
    return float(base + cluster_bonus(agg.distinct_buyers, w))


def conviction_level(score: float) -> str:
    for cutoff, label in CONVICTION_LEVELS:
        if score >= cutoff:
            return label
    return "Low"
