"""Shared utility functions for sentiment_api core modules."""

from sentiment_api.core.utils.cache_keys import (
    calculate_ttl,
    generate_cache_key,
    generate_job_id,
    is_cache_fresh,
    normalize_ticker,
    now_ms,
    parse_cache_key,
    parse_job_id,
)
from sentiment_api.core.utils.concurrency import Outcome, gather_bounded, settle_all
from sentiment_api.core.utils.dates import validate_date, validate_date_range
from sentiment_api.core.utils.hashing import generate_article_hash, is_valid_hash

__all__ = [
    "Outcome",
    "calculate_ttl",
    "gather_bounded",
    "generate_article_hash",
    "generate_cache_key",
    "generate_job_id",
    "is_cache_fresh",
    "is_valid_hash",
    "normalize_ticker",
    "now_ms",
    "parse_cache_key",
    "parse_job_id",
    "settle_all",
    "validate_date",
    "validate_date_range",
]
