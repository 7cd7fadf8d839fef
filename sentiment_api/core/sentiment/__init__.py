"""Lexicon-based sentiment analysis."""

from sentiment_api.core.sentiment.analyzer import (
    AnalysisRequest,
    SentenceScore,
    SentimentAnalyzer,
    SentimentBucket,
    SentimentResult,
    article_text,
    score_tokens,
    split_sentences,
)
from sentiment_api.core.sentiment.lexicon import FINANCIAL_LEXICON, NEGATORS, get_word_score
from sentiment_api.core.sentiment.protocols import SentimentScorer

__all__ = [
    "FINANCIAL_LEXICON",
    "NEGATORS",
    "AnalysisRequest",
    "SentenceScore",
    "SentimentAnalyzer",
    "SentimentBucket",
    "SentimentResult",
    "SentimentScorer",
    "article_text",
    "get_word_score",
    "score_tokens",
    "split_sentences",
]
