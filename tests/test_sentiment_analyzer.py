"""Tests for the lexicon sentiment analyzer."""

import pytest

from sentiment_api.core.sentiment import (
    FINANCIAL_LEXICON,
    AnalysisRequest,
    SentimentAnalyzer,
    get_word_score,
    score_tokens,
    split_sentences,
)
from sentiment_api.domain.entities import Classification


@pytest.fixture
def analyzer():
    return SentimentAnalyzer()


# ============================================================================
# Lexicon and tokenization
# ============================================================================


def test_financial_terms_override_afinn_scores():
    assert get_word_score("Bullish") == 4
    assert get_word_score("revenue") == 0
    assert get_word_score("shares") == 0
    assert get_word_score("zebra") == 0
    assert FINANCIAL_LEXICON["plummeted"] < 0


def test_general_words_use_afinn_scores():
    assert get_word_score("terrible") < 0
    assert get_word_score("Awesome") > 0


def test_split_sentences_on_period_and_question_mark():
    assert split_sentences('Up? Down. "Flat", maybe') == ["Up?", "Down.", "Flat maybe"]
    assert split_sentences("   ") == []
    assert split_sentences("") == []


def test_score_tokens_sums_and_negates():
    assert score_tokens("Strong growth") == 5
    assert score_tokens("Revenue not strong") == -3
    assert score_tokens("Quarterly earnings guidance") == 0


# ============================================================================
# Sentence classification
# ============================================================================


def test_sentence_thresholds_are_strict(analyzer):
    assert analyzer.score_sentence("Stock rose").classification == Classification.POS
    assert analyzer.score_sentence("A record day").classification == Classification.NEUT
    assert analyzer.score_sentence("Debt load").classification == Classification.NEG


def test_general_vocabulary_is_scored(analyzer):
    result = analyzer.analyze(
        "Terrible disaster for the company. Investors love the awesome product.", "h0"
    )

    assert result.negative.count == 1
    assert result.positive.count == 1
    assert result.neutral.count == 0
    assert result.score == 0.0


def test_sentence_confidence_is_capped(analyzer):
    scored = analyzer.score_sentence("Strong impressive surge beats bullish upgrade")
    assert scored.score == 22
    assert scored.confidence == 1.0

    assert analyzer.score_sentence("Stock rose").confidence == pytest.approx(2 / 15)


# ============================================================================
# Article analysis
# ============================================================================


def test_positive_article(analyzer):
    result = analyzer.analyze(
        "Apple beats estimates with strong growth. Profit surged on record demand.", "h1"
    )

    assert result.article_hash == "h1"
    assert result.positive.count == 2
    assert result.positive.confidence == pytest.approx(0.5)
    assert result.negative.count == 0
    assert result.score == 1.0
    assert result.classification == Classification.POS


def test_negative_article(analyzer):
    result = analyzer.analyze(
        "Apple shares tumbled after disappointing sales. "
        "Regulatory scrutiny and litigation fears are mounting.",
        "h2",
    )

    assert result.negative.count == 2
    assert result.negative.confidence == pytest.approx(0.6)
    assert result.classification == Classification.NEG


def test_mixed_article_scores_counts(analyzer):
    result = analyzer.analyze(
        "Profit surged. Losses widened. Margins fell sharply. The company announced results.",
        "h3",
    )

    assert result.positive.count == 1
    assert result.negative.count == 2
    assert result.neutral.count == 1
    assert result.score == pytest.approx(-1 / 3)
    assert result.classification == Classification.NEG


def test_empty_or_malformed_text_is_neutral(analyzer):
    for text in ["", "   ", None]:
        result = analyzer.analyze(text, "h")
        assert result.score == 0.0
        assert result.classification == Classification.NEUT
        assert result.positive.to_list() == [0, 0.0]


def test_to_record_and_dict(analyzer):
    result = analyzer.analyze("Analysts upgrade Apple on impressive momentum.", "h4")

    record = result.to_record("aapl", analyzed_at=123)
    assert record.ticker == "AAPL"
    assert record.positive_count == 1
    assert record.classification == Classification.POS
    assert record.analyzed_at == 123

    data = result.to_dict()
    assert data["hash"] == "h4"
    assert data["positive"] == [1, 0.67]


def test_analyze_batch_preserves_order(analyzer):
    requests = [
        AnalysisRequest("a", "Stock rose."),
        AnalysisRequest("b", "Stock fell."),
        AnalysisRequest("c", ""),
    ]

    results = analyzer.analyze_batch(requests)

    assert [r.article_hash for r in results] == ["a", "b", "c"]
    assert [r.classification for r in results] == [
        Classification.POS,
        Classification.NEG,
        Classification.NEUT,
    ]


def test_long_repeated_positive_text(analyzer):
    result = analyzer.analyze("Strong growth and record profit. " * 500, "long")

    assert result.positive.count == 500
    assert result.score > 0
    assert result.classification == Classification.POS


def test_mixed_scripts_and_special_characters(analyzer):
    result = analyzer.analyze("Apple 📈 株価 surged!!! €€€ #AAPL @desk <b>", "intl")

    assert result.positive.count == 1
    assert result.classification == Classification.POS

    symbols = analyzer.analyze("¿¡§± ★★★ ～～ \x00\t\n", "symbols")
    assert symbols.score == 0.0
    assert symbols.classification == Classification.NEUT
