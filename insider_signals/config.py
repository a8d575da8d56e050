import os
from dataclasses import dataclass
from typing import Optional

# Optional: load a local .env file if present.
try:
    from dotenv import load_dotenv

    load_dotenv()
except Exception:
    # If python-dotenv isn't installed or .env isn't present, that's fine.
    pass


def _env_bool(name: str, default: Optional[bool] = None) -> Optional[bool]:
    """Parse a boolean environment variable.

    Accepted truthy: 1, true, yes, y, on
    Accepted falsy:  0, false, no, n, off
    Anything else (or unset) returns default.
    """

    raw = os.environ.get(name)
    if raw is None:
        return default
    v = raw.strip().lower()
    if v in ("1", "true", "yes", "y", "on"):
        return True
    if v in ("0", "false", "no", "n", "off"):
        return False
    return default


@dataclass(frozen=True)
class Config:
    """Runtime configuration.

    IMPORTANT: Provide API keys via environment variables or a .env file.
    """

    # -----------------
    # Core
    # -----------------
    # Preferred: INSIDER_DATABASE_URL (or DATABASE_URL) for Postgres.
    # Fallback: INSIDER_DB_PATH for SQLite.
    DB_DSN: str = (
        os.environ.get("INSIDER_DATABASE_URL")
        or os.environ.get("DATABASE_URL")
        or os.environ.get("INSIDER_DB_PATH", "./insider_signals.sqlite")
    )

    # EODHD (optional last-price enrichment on the screener)
    EODHD_API_KEY: str | None = os.environ.get("EODHD_API_KEY")
    EODHD_BASE_URL: str = os.environ.get("EODHD_BASE_URL", "https://eodhd.com/api")
    EODHD_EXCHANGE_SUFFIX: str = os.environ.get("EODHD_EXCHANGE_SUFFIX", "US")

    # -----------------
    # Screener
    # -----------------
    SCREENER_DEFAULT_DAYS: int = int(os.environ.get("SCREENER_DEFAULT_DAYS", "90"))
    SCREENER_MAX_LIMIT: int = int(os.environ.get("SCREENER_MAX_LIMIT", "200"))

    # Conviction weights. These are a starting calibration against the UI badge
    # cutoffs (5 / 20 / 50); bump CURRENT_SCORING_VERSION when changing them.
    CONVICTION_OFFICER_MULTIPLIER: float = float(os.environ.get("CONVICTION_OFFICER_MULTIPLIER", "1.5"))
    CONVICTION_DECAY_FLOOR: float = float(os.environ.get("CONVICTION_DECAY_FLOOR", "0.2"))
    CONVICTION_CLUSTER_BONUS: float = float(os.environ.get("CONVICTION_CLUSTER_BONUS", "5.0"))

    # Cluster windows (ticker drill-down)
    CLUSTER_WINDOW_DAYS: int = int(os.environ.get("CLUSTER_WINDOW_DAYS", "14"))

    # Versions (bump when behavior changes)
    CURRENT_SCORING_VERSION: str = os.environ.get("CURRENT_SCORING_VERSION", "conviction_v1")

    # Price enrichment is on by default only when a key is configured.
    ENABLE_PRICE_ENRICHMENT: bool = _env_bool("ENABLE_PRICE_ENRICHMENT", True) is True

    # -----------------
    # CORS (development)
    # -----------------
    # Next.js dev server on :3000 -> API on :8000.
    CORS_ALLOW_ORIGINS: str = os.environ.get(
        "CORS_ALLOW_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000",
    )


def load_config() -> Config:
    return Config()
