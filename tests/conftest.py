"""Pytest configuration and fixtures for all tests.

This module ensures tests run in isolation from production environment variables.
"""

import os
from datetime import date, timedelta

import pytest

from sentiment_api.core.utils import generate_article_hash
from sentiment_api.domain.entities import Article, PriceBar
from sentiment_api.storage import create_memory_store_handle

# Store and job environment variables that should not affect tests
STORE_ENV_VARS = [
    "STORE_BACKEND",
    "SQLITE_CACHE_PATH",
    "AWS_REGION",
    "NEWS_CACHE_TABLE",
    "SENTIMENT_CACHE_TABLE",
    "SENTIMENT_JOBS_TABLE",
    "STOCKS_CACHE_TABLE",
    "SENTIMENT_MAX_CONCURRENCY",
    "STORE_MAX_RETRIES",
    "STORE_BASE_DELAY_MS",
    "PREDICTION_LOOKBACK_MONTHS",
]


@pytest.fixture(autouse=True)
def isolate_from_env():
    """Clear store env vars before each test so no test touches a real table.

    This fixture runs automatically for every test (autouse=True).
    It saves original values, clears them for the test, then restores after.
    """
    original_values = {}
    for var in STORE_ENV_VARS:
        if var in os.environ:
            original_values[var] = os.environ.pop(var)

    yield

    for var, value in original_values.items():
        os.environ[var] = value


async def _no_sleep(_seconds: float) -> None:
    return None


@pytest.fixture
def no_sleep():
    """Awaitable sleep that returns immediately."""
    return _no_sleep


@pytest.fixture
def store(no_sleep):
    """In-memory store handle with instant retries."""
    return create_memory_store_handle(base_delay_ms=1, sleep=no_sleep)


def _make_article(
    ticker: str, url: str, day: str, title: str, description: str = ""
) -> Article:
    return Article(
        ticker=ticker,
        article_hash=generate_article_hash(url),
        date=day,
        title=title,
        description=description,
        url=url,
    )


@pytest.fixture
def aapl_articles() -> list[Article]:
    """Three AAPL articles over two days: two positive, one negative."""
    return [
        _make_article(
            "AAPL",
            "https://news.example.com/aapl-earnings",
            "2025-01-02",
            "Apple beats estimates with strong growth.",
            "Profit surged on record demand.",
        ),
        _make_article(
            "AAPL",
            "https://news.example.com/aapl-upgrade",
            "2025-01-02",
            "Analysts upgrade Apple on impressive momentum.",
        ),
        _make_article(
            "AAPL",
            "https://news.example.com/aapl-lawsuit",
            "2025-01-03",
            "Apple shares tumbled after disappointing sales.",
            "Regulatory scrutiny and litigation fears are mounting.",
        ),
    ]


def _make_price_bars(ticker: str, start: date, closes: list[float]) -> list[PriceBar]:
    """One bar per consecutive day with a simple OHLCV around each close."""
    bars = []
    for i, close in enumerate(closes):
        day = (start + timedelta(days=i)).isoformat()
        bars.append(
            PriceBar(
                ticker=ticker,
                date=day,
                open=close * 0.99,
                high=close * 1.02,
                low=close * 0.97,
                close=close,
                volume=1_000_000 + 10_000 * (i % 7),
            )
        )
    return bars


@pytest.fixture
def make_article():
    """Factory for articles whose hash is derived from the URL."""
    return _make_article


@pytest.fixture
def make_price_bars():
    """Factory for consecutive daily price bars from a list of closes."""
    return _make_price_bars
