"""Insider Activity Scoring Engine - Backend.

Turns a history of insider trades into a ranked "Signals" screener:
- All scoring is a pure function of (trade history, query parameters).
- Persistence and HTTP are thin layers around the compute package.

Core concepts:
- Atomic unit is a *trade event* (ticker, insider_id, type, value, trade_date).
- Only open-market purchases qualify a ticker; sales are counted for context.

Scoring:
- Each in-window purchase weighs log10(value) x role (officers 1.5) x linear recency
  decay (floored at 0.2; no decay for all-time windows).
- Every distinct buyer beyond the first adds a cluster bonus of 5.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
