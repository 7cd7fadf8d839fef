"""Domain constants for sentiment_api.

This module centralizes all magic numbers and configuration constants
to improve maintainability and make the codebase more self-documenting.
"""

# ============================================================================
# Sentiment Classification Constants
# ============================================================================

# Shared by article-level and daily classification so the two never drift
POSITIVE_THRESHOLD = 0.1  # score > 0.1 = POS
NEGATIVE_THRESHOLD = -0.1  # score < -0.1 = NEG

# Sentence-level lexicon score thresholds
SENTENCE_POSITIVE_THRESHOLD = 1
SENTENCE_NEGATIVE_THRESHOLD = -1

# Sentence confidence = min(|lexicon score| / cap, 1.0)
SENTENCE_CONFIDENCE_CAP = 15.0


# ============================================================================
# Cache Constants
# ============================================================================

# TTLs in days
ARTICLE_TTL_DAYS = 30
SENTIMENT_TTL_DAYS = 90  # sentiment for a given article never changes
JOB_TTL_DAYS = 7
STOCK_TTL_DAYS = 7

# Provider batch limits (DynamoDB BatchWriteItem / BatchGetItem)
MAX_BATCH_WRITE_ITEMS = 25
MAX_BATCH_READ_ITEMS = 100

# Recursive retries of unprocessed sub-batches before giving up
MAX_UNPROCESSED_RETRIES = 5

# Retry/backoff defaults for transient store errors
DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY_MS = 100

# Error codes treated as transient
RETRYABLE_ERROR_CODES = frozenset(
    {
        "ProvisionedThroughputExceededException",
        "RequestLimitExceeded",
        "ThrottlingException",
        "InternalServerError",
    }
)

# Delimiter for composite cache keys ("AAPL#2025-01-15")
CACHE_KEY_DELIMITER = "#"

# Attribute holding the expiry instant (epoch seconds)
TTL_ATTRIBUTE = "expires_at"


# ============================================================================
# Job Constants
# ============================================================================

# Upper bound on concurrent cache existence checks per job
DEFAULT_MAX_CONCURRENCY = 10

# Client-side polling defaults
DEFAULT_POLL_INTERVAL_SECONDS = 2.0
DEFAULT_POLL_MAX_ATTEMPTS = 60  # 2 minutes at 2s intervals


# ============================================================================
# Prediction Constants
# ============================================================================

# Horizons in trading days
PREDICTION_HORIZONS = {
    "next": 1,
    "week": 10,  # 2 weeks
    "month": 21,  # 1 month
}

# Number of folds for cross-validation
DEFAULT_CV_FOLDS = 8

# 8 folds for CV + 21 day horizon
MIN_PREDICTION_DATA_POINTS = 29

# Gradient descent defaults
LR_LEARNING_RATE = 0.01
LR_MAX_ITERATIONS = 1000
LR_REGULARIZATION = 1.0  # C parameter (inverse of regularization strength)
LR_TOLERANCE = 1e-4

# Decision threshold on P(y=1)
DECISION_THRESHOLD = 0.5
