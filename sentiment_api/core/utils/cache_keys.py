"""Cache key, job id and TTL helpers."""

import re
import time

from sentiment_api.domain.constants import CACHE_KEY_DELIMITER
from sentiment_api.domain.exceptions import InvalidArgumentError

SECONDS_PER_DAY = 24 * 60 * 60

# "#" and "_" delimit cache keys and job ids, so tickers may not contain them
TICKER_PATTERN = re.compile(r"^[A-Z0-9.\-]+$")


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


def calculate_ttl(days: float, now: float | None = None) -> int:
    """Compute an expiry instant `days` from now.

    Args:
        days: Lifetime in days
        now: Reference time in epoch seconds (defaults to current time)

    Returns:
        Expiry as epoch seconds (the store's native TTL unit)
    """
    reference = time.time() if now is None else now
    return int(reference + days * SECONDS_PER_DAY)


def is_cache_fresh(fetched_at_ms: int, max_age_ms: int, now: int | None = None) -> bool:
    """Return True if an item fetched at `fetched_at_ms` is younger than `max_age_ms`."""
    current = now_ms() if now is None else now
    return current - fetched_at_ms < max_age_ms


def normalize_ticker(ticker: str) -> str:
    """Trim and upper-case a ticker symbol.

    Raises:
        InvalidArgumentError: Empty ticker, or characters other than A-Z, 0-9, "." and "-"
    """
    if not isinstance(ticker, str) or not ticker.strip():
        raise InvalidArgumentError("ticker is required", field="ticker", value=ticker)
    normalized = ticker.strip().upper()
    if not TICKER_PATTERN.match(normalized):
        raise InvalidArgumentError(
            f"Invalid ticker symbol: {ticker!r}", field="ticker", value=ticker
        )
    return normalized


def generate_cache_key(ticker: str, date: str) -> str:
    """Build a composite cache key, e.g. "AAPL#2025-01-15"."""
    return f"{normalize_ticker(ticker)}{CACHE_KEY_DELIMITER}{date}"


def parse_cache_key(cache_key: str) -> tuple[str, str]:
    """Split a composite cache key into (ticker, date).

    Raises:
        InvalidArgumentError: If the key does not have exactly two non-empty parts
    """
    parts = cache_key.split(CACHE_KEY_DELIMITER)
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise InvalidArgumentError(
            f"Invalid cacheKey format: {cache_key!r}", field="cache_key", value=cache_key
        )
    return parts[0], parts[1]


def generate_job_id(ticker: str, start_date: str, end_date: str) -> str:
    """Deterministic job id, e.g. "AAPL_2025-01-01_2025-01-30"."""
    return f"{normalize_ticker(ticker)}_{start_date}_{end_date}"


def parse_job_id(job_id: str) -> tuple[str, str, str]:
    """Split a job id into (ticker, start_date, end_date).

    Raises:
        InvalidArgumentError: If the id does not contain a ticker and two dates
    """
    parts = job_id.rsplit("_", 2)
    if len(parts) != 3 or not all(parts):
        raise InvalidArgumentError(f"Invalid jobId format: {job_id!r}", field="job_id", value=job_id)
    return parts[0], parts[1], parts[2]
