"""Sentence-level lexicon sentiment analyzer.

Text is cleaned, split into sentences, and each sentence is scored by
summing AFINN word scores with financial overrides. Sentences are then
bucketed into positive, negative and neutral with a per-bucket mean
confidence.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from sentiment_api.core.sentiment.lexicon import NEGATORS, get_word_score
from sentiment_api.domain.constants import (
    SENTENCE_CONFIDENCE_CAP,
    SENTENCE_NEGATIVE_THRESHOLD,
    SENTENCE_POSITIVE_THRESHOLD,
)
from sentiment_api.domain.entities import Classification, SentimentRecord
from sentiment_api.domain.services import classify_sentiment, compute_sentiment_score

_STRIP_CHARS = re.compile(r"[\"',]")
_SENTENCE_SPLIT = re.compile(r"(?<=[.?])\s+")
_TOKEN = re.compile(r"[a-z0-9]+")


@dataclass(frozen=True)
class SentimentBucket:
    """Count of sentences in one class and their mean confidence (2 decimals)."""

    count: int = 0
    confidence: float = 0.0

    def to_list(self) -> list:
        return [self.count, self.confidence]


@dataclass(frozen=True)
class SentenceScore:
    """Lexicon score and class of one sentence."""

    sentence: str
    score: int
    classification: Classification
    confidence: float


@dataclass(frozen=True)
class SentimentResult:
    """Per-article analysis result."""

    article_hash: str
    positive: SentimentBucket = field(default_factory=SentimentBucket)
    negative: SentimentBucket = field(default_factory=SentimentBucket)
    neutral: SentimentBucket = field(default_factory=SentimentBucket)

    @property
    def score(self) -> float:
        """(positive - negative) / (positive + negative), 0 when both are 0."""
        return compute_sentiment_score(self.positive.count, self.negative.count)

    @property
    def classification(self) -> Classification:
        return classify_sentiment(self.score)

    def to_record(self, ticker: str, analyzed_at: int) -> SentimentRecord:
        """Convert to a persistable sentiment record."""
        return SentimentRecord(
            ticker=ticker.upper(),
            article_hash=self.article_hash,
            positive_count=self.positive.count,
            negative_count=self.negative.count,
            score=self.score,
            classification=self.classification,
            analyzed_at=analyzed_at,
        )

    def to_dict(self) -> dict:
        return {
            "hash": self.article_hash,
            "positive": self.positive.to_list(),
            "negative": self.negative.to_list(),
            "neutral": self.neutral.to_list(),
            "score": self.score,
            "classification": self.classification.value,
        }


@dataclass(frozen=True)
class AnalysisRequest:
    """One article to analyze."""

    article_hash: str
    text: str


def article_text(title: str | None, description: str | None) -> str:
    """Join title and description into the text fed to the analyzer."""
    return f"{title or ''} {description or ''}".strip()


def split_sentences(text: str) -> list[str]:
    """Clean text and split it on sentence boundaries (. or ? then whitespace)."""
    if not text or not text.strip():
        return []
    cleaned = _STRIP_CHARS.sub("", text)
    return [s for s in _SENTENCE_SPLIT.split(cleaned) if s.strip()]


def score_tokens(sentence: str) -> int:
    """Sum lexicon scores over a sentence. A preceding negator flips a word's sign."""
    total = 0
    previous = ""
    for token in _TOKEN.findall(sentence.lower()):
        value = get_word_score(token)
        if value and previous in NEGATORS:
            value = -value
        total += value
        previous = token
    return total


class SentimentAnalyzer:
    """Stateless financial-text sentiment analyzer.

    Deterministic and free of I/O. Malformed input never raises; unknown
    tokens simply do not count.
    """

    def __init__(
        self,
        positive_threshold: int = SENTENCE_POSITIVE_THRESHOLD,
        negative_threshold: int = SENTENCE_NEGATIVE_THRESHOLD,
        confidence_cap: float = SENTENCE_CONFIDENCE_CAP,
    ):
        self.positive_threshold = positive_threshold
        self.negative_threshold = negative_threshold
        self.confidence_cap = confidence_cap

    def score_sentence(self, sentence: str) -> SentenceScore:
        score = score_tokens(sentence)
        if score > self.positive_threshold:
            classification = Classification.POS
        elif score < self.negative_threshold:
            classification = Classification.NEG
        else:
            classification = Classification.NEUT
        confidence = min(abs(score) / self.confidence_cap, 1.0)
        return SentenceScore(sentence, score, classification, confidence)

    def analyze(self, text: str, article_hash: str) -> SentimentResult:
        """Analyze one article.

        Args:
            text: Article text (title + description)
            article_hash: Identifier echoed back in the result

        Returns:
            SentimentResult with per-class sentence counts and confidences
        """
        confidences: dict[Classification, list[float]] = {c: [] for c in Classification}
        for sentence in split_sentences(text if isinstance(text, str) else ""):
            scored = self.score_sentence(sentence)
            confidences[scored.classification].append(scored.confidence)

        def bucket(values: list[float]) -> SentimentBucket:
            if not values:
                return SentimentBucket()
            return SentimentBucket(count=len(values), confidence=round(sum(values) / len(values), 2))

        return SentimentResult(
            article_hash=article_hash,
            positive=bucket(confidences[Classification.POS]),
            negative=bucket(confidences[Classification.NEG]),
            neutral=bucket(confidences[Classification.NEUT]),
        )

    def analyze_batch(self, requests: list[AnalysisRequest]) -> list[SentimentResult]:
        """Analyze articles independently, in input order."""
        return [self.analyze(request.text, request.article_hash) for request in requests]
