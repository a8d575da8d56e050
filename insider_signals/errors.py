from __future__ import annotations


class ValidationError(ValueError):
    """An invalid screener/query parameter. Surfaced to the caller as-is (HTTP 400)."""


class DataUnavailableError(RuntimeError):
    """The trade event store could not supply history (HTTP 503).

    The scoring core never retries; retrying a read belongs to the data layer.
    """
