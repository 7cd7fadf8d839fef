"""Protocol definitions for dependency injection."""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from sentiment_api.core.sentiment.analyzer import AnalysisRequest, SentimentResult


class SentimentScorer(Protocol):
    """Protocol for scoring article sentiment."""

    def analyze(self, text: str, article_hash: str) -> "SentimentResult":
        """Score the sentiment of one article text."""
        ...

    def analyze_batch(self, requests: list["AnalysisRequest"]) -> list["SentimentResult"]:
        """Score sentiment for a batch of articles."""
        ...
