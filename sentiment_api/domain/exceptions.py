"""Custom exceptions for sentiment_api domain.

This module defines domain-specific exceptions to replace generic exceptions
and provide better error handling and debugging.
"""


class SentimentAPIError(Exception):
    """Base exception for all sentiment_api errors."""

    pass


# ============================================================================
# Argument errors
# ============================================================================


class InvalidArgumentError(SentimentAPIError, ValueError):
    """Raised when a caller passes malformed input.

    Fails fast: no retry and no partial state mutation.

    Examples:
    - Malformed date range
    - k out of bounds for k-fold splitting
    - Malformed cache key
    """

    def __init__(self, message: str, field: str | None = None, value: object = None):
        super().__init__(message)
        self.field = field
        self.value = value


class LengthMismatchError(InvalidArgumentError):
    """Raised when paired inputs (e.g. features and labels) differ in length."""

    def __init__(self, message: str, expected: int, actual: int):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class EmptyDatasetError(InvalidArgumentError):
    """Raised when a fit is attempted on zero-length input."""

    pass


class InsufficientDataError(SentimentAPIError):
    """Raised when there's not enough data to perform an operation.

    Examples:
    - Fewer joined price/sentiment days than a prediction requires
    """

    def __init__(self, message: str, required: int | None = None, available: int | None = None):
        super().__init__(message)
        self.required = required
        self.available = available


# ============================================================================
# Storage errors
# ============================================================================


class StoreError(SentimentAPIError):
    """Base class for cache store errors."""

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.code = code


class TransientStoreError(StoreError):
    """Capacity, throttling or internal-transient failure.

    Retried with exponential backoff, then surfaced.
    """

    pass


class PermanentStoreError(StoreError):
    """Validation or permission failure. Surfaced immediately, never retried."""

    pass


# ============================================================================
# Sentiment pipeline errors
# ============================================================================


class AnalysisFailure(SentimentAPIError):
    """Raised when scoring a single article fails.

    Absorbed into partial-success accounting, never fatal to a batch.
    """

    def __init__(self, message: str, article_hash: str | None = None):
        super().__init__(message)
        self.article_hash = article_hash


class JobFailedError(SentimentAPIError):
    """Raised after a job has been recorded as FAILED.

    Re-triggering requires a new job id or an explicit reset.
    """

    def __init__(self, message: str, job_id: str):
        super().__init__(message)
        self.job_id = job_id


class PollTimeoutError(SentimentAPIError):
    """Raised when a poller exhausts its attempts before a terminal status."""

    def __init__(self, message: str, job_id: str, attempts: int):
        super().__init__(message)
        self.job_id = job_id
        self.attempts = attempts


# ============================================================================
# Model errors
# ============================================================================


class ModelError(SentimentAPIError):
    """Base class for model-related errors."""

    pass


class ModelNotFittedError(ModelError):
    """Raised when predict/transform is called before fit."""

    pass


class ModelLoadError(ModelError):
    """Raised when a model artifact fails to load.

    Examples:
    - Weights present without their paired scaler
    - Feature count mismatch between weights and scaler
    """

    def __init__(self, message: str, model_path: str | None = None):
        super().__init__(message)
        self.model_path = model_path
