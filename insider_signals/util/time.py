from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Optional


def utcnow_iso() -> str:
    """Current UTC time as ISO-8601 string with Z."""
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def parse_iso_date(value: Any) -> Optional[date]:
    """Parse a trade/filing date into a `date`.

    Accepts `date`, `datetime`, 'YYYY-MM-DD' and full ISO timestamps
    ('2024-03-01T12:00:00Z'). Blank / None returns None; anything else
    unparseable raises ValueError.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    s = str(value).strip()
    if not s:
        return None
    # Only the calendar part matters for windows.
    y, m, d = s[:10].split("-")
    return date(int(y), int(m), int(d))
