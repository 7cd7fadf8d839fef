"""Configuration for the cache store and job orchestration."""

import os
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from dateutil.relativedelta import relativedelta

from sentiment_api.domain.constants import (
    DEFAULT_BASE_DELAY_MS,
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_MAX_RETRIES,
)

# Environment variable names
ENV_STORE_BACKEND = "STORE_BACKEND"
ENV_SQLITE_CACHE_PATH = "SQLITE_CACHE_PATH"
ENV_AWS_REGION = "AWS_REGION"
ENV_NEWS_CACHE_TABLE = "NEWS_CACHE_TABLE"
ENV_SENTIMENT_CACHE_TABLE = "SENTIMENT_CACHE_TABLE"
ENV_SENTIMENT_JOBS_TABLE = "SENTIMENT_JOBS_TABLE"
ENV_STOCKS_CACHE_TABLE = "STOCKS_CACHE_TABLE"
ENV_SENTIMENT_MAX_CONCURRENCY = "SENTIMENT_MAX_CONCURRENCY"
ENV_STORE_MAX_RETRIES = "STORE_MAX_RETRIES"
ENV_STORE_BASE_DELAY_MS = "STORE_BASE_DELAY_MS"
ENV_PREDICTION_LOOKBACK_MONTHS = "PREDICTION_LOOKBACK_MONTHS"

# Defaults
DEFAULT_STORE_BACKEND = "memory"
DEFAULT_SQLITE_CACHE_PATH = "data/cache/sentiment_store.db"
DEFAULT_NEWS_CACHE_TABLE = "NewsCache"
DEFAULT_SENTIMENT_CACHE_TABLE = "SentimentCache"
DEFAULT_SENTIMENT_JOBS_TABLE = "SentimentJobs"
DEFAULT_STOCKS_CACHE_TABLE = "StocksCache"
DEFAULT_PREDICTION_LOOKBACK_MONTHS = 6

SUPPORTED_BACKENDS = ("memory", "sqlite", "dynamodb")


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name, "")
    return int(raw) if raw else default


def get_store_backend() -> str:
    """Get the cache store backend name from environment (memory, sqlite, dynamodb)."""
    backend = os.environ.get(ENV_STORE_BACKEND, DEFAULT_STORE_BACKEND).lower()
    if backend not in SUPPORTED_BACKENDS:
        raise ValueError(
            f"Unsupported {ENV_STORE_BACKEND}={backend!r}. "
            f"Expected one of: {', '.join(SUPPORTED_BACKENDS)}"
        )
    return backend


def get_max_concurrency() -> int:
    """Get the bound on concurrent existence checks per job."""
    return _int_env(ENV_SENTIMENT_MAX_CONCURRENCY, DEFAULT_MAX_CONCURRENCY)


def resolve_prediction_window(end_date: date | None = None) -> tuple[date, date]:
    """Resolve the default data window for predictions.

    Reads:
    - PREDICTION_LOOKBACK_MONTHS: months to look back from end_date (default: 6)

    Args:
        end_date: Window end (defaults to today)

    Returns:
        Tuple of (start_date, end_date) as date objects.
    """
    months = _int_env(ENV_PREDICTION_LOOKBACK_MONTHS, DEFAULT_PREDICTION_LOOKBACK_MONTHS)
    end = end_date or date.today()
    return end - relativedelta(months=months), end


@dataclass
class StoreConfig:
    """Configuration for the cache store backends.

    Attributes:
        backend: One of memory, sqlite, dynamodb
        sqlite_path: Database file for the sqlite backend
        aws_region: Region for the dynamodb backend (None = boto3 default chain)
        news_table: Table holding cached articles
        sentiment_table: Table holding article-level sentiment
        jobs_table: Table holding job records
        stocks_table: Table holding daily price bars
        max_retries: Retry budget for transient store errors
        base_delay_ms: Base backoff delay, doubled per attempt
    """

    backend: str = DEFAULT_STORE_BACKEND
    sqlite_path: Path = field(default_factory=lambda: Path(DEFAULT_SQLITE_CACHE_PATH))
    aws_region: str | None = None
    news_table: str = DEFAULT_NEWS_CACHE_TABLE
    sentiment_table: str = DEFAULT_SENTIMENT_CACHE_TABLE
    jobs_table: str = DEFAULT_SENTIMENT_JOBS_TABLE
    stocks_table: str = DEFAULT_STOCKS_CACHE_TABLE
    max_retries: int = DEFAULT_MAX_RETRIES
    base_delay_ms: int = DEFAULT_BASE_DELAY_MS

    def __post_init__(self) -> None:
        """Ensure paths are Path objects."""
        if isinstance(self.sqlite_path, str):
            self.sqlite_path = Path(self.sqlite_path)

    @classmethod
    def from_env(cls) -> "StoreConfig":
        """Resolve store configuration from environment variables."""
        return cls(
            backend=get_store_backend(),
            sqlite_path=Path(os.environ.get(ENV_SQLITE_CACHE_PATH, DEFAULT_SQLITE_CACHE_PATH)),
            aws_region=os.environ.get(ENV_AWS_REGION) or None,
            news_table=os.environ.get(ENV_NEWS_CACHE_TABLE, DEFAULT_NEWS_CACHE_TABLE),
            sentiment_table=os.environ.get(
                ENV_SENTIMENT_CACHE_TABLE, DEFAULT_SENTIMENT_CACHE_TABLE
            ),
            jobs_table=os.environ.get(ENV_SENTIMENT_JOBS_TABLE, DEFAULT_SENTIMENT_JOBS_TABLE),
            stocks_table=os.environ.get(ENV_STOCKS_CACHE_TABLE, DEFAULT_STOCKS_CACHE_TABLE),
            max_retries=_int_env(ENV_STORE_MAX_RETRIES, DEFAULT_MAX_RETRIES),
            base_delay_ms=_int_env(ENV_STORE_BASE_DELAY_MS, DEFAULT_BASE_DELAY_MS),
        )
