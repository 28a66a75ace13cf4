"""Tests for label mapping, the classifier wrapper and aggregation."""

import threading
import time
from unittest.mock import Mock

import pytest

from pricepulse.analysis.sentiment import (
    NEGATIVE,
    NEUTRAL,
    POSITIVE,
    SentimentAggregator,
    SentimentAnalyzer,
    map_label,
)


@pytest.mark.parametrize("label,expected", [
    ("5 stars", POSITIVE),
    ("4 stars", POSITIVE),
    ("4star", POSITIVE),
    ("3 stars", NEUTRAL),
    ("2 stars", NEGATIVE),
    ("1 star", NEGATIVE),
    ("POSITIVE", POSITIVE),
    ("LABEL_neutral", NEUTRAL),
    ("NEGATIVE", NEGATIVE),
    ("something else", NEGATIVE),
])
def test_map_label(label, expected):
    assert map_label(label, 0.9).label == expected


def test_map_label_defaults():
    result = map_label(None)
    assert result.label == NEGATIVE
    assert result.score == 0.5
    assert map_label("5 stars", 0.87).score == 0.87


def _analyzer_with(outputs):
    classifier = Mock(return_value=outputs)
    return SentimentAnalyzer("fake", loader=lambda name: classifier), classifier


def test_all_positive_reviews_score_one():
    analyzer, _ = _analyzer_with([{"label": "5 stars", "score": 1.0}] * 3)
    summary = SentimentAggregator(analyzer).analyze(["a", "b", "c"])
    assert summary.score == pytest.approx(1.0)
    assert summary.label == "Positive"
    assert summary.positive == 3
    assert summary.total == 3


def test_all_negative_reviews_score_zero():
    analyzer, _ = _analyzer_with([{"label": "1 star", "score": 1.0}] * 2)
    summary = SentimentAggregator(analyzer).analyze(["a", "b"])
    assert summary.score == pytest.approx(0.0)
    assert summary.label == "Negative"
    assert summary.negative == 2


def test_mixed_reviews(fake_analyzer):
    summary = SentimentAggregator(fake_analyzer).analyze(
        ["Good value", "Poor build", "Okay overall"]
    )
    # (0.8 - 0.6) / 3 mapped onto [0, 1]
    assert summary.score == pytest.approx((0.2 / 3 + 1) / 2)
    assert summary.label == "Neutral"
    assert (summary.positive, summary.neutral, summary.negative) == (1, 1, 1)


def test_empty_batch_keeps_previous_summary_without_classifying():
    analyzer, classifier = _analyzer_with([{"label": "5 stars", "score": 1.0}])
    aggregator = SentimentAggregator(analyzer)

    assert aggregator.analyze([]) is None
    assert classifier.call_count == 0

    first = aggregator.analyze(["Lovely"])
    assert aggregator.analyze(["", "   "]) is first
    assert classifier.call_count == 1


def test_empty_classifier_output_keeps_previous_summary():
    classifier = Mock(side_effect=[[{"label": "5 stars", "score": 1.0}], []])
    analyzer = SentimentAnalyzer("fake", loader=lambda name: classifier)
    aggregator = SentimentAggregator(analyzer)

    first = aggregator.analyze(["Lovely"])
    assert aggregator.analyze(["Another one"]) is first
    assert classifier.call_count == 2


def test_batch_is_capped_and_classified_in_one_call(fake_analyzer, fake_classifier):
    texts = [f"Great review {i}" for i in range(25)]
    summary = SentimentAggregator(fake_analyzer, max_reviews=20).analyze(texts)
    assert len(fake_classifier.calls) == 1
    assert len(fake_classifier.calls[0]) == 20
    assert summary.total == 20


def test_examples_capped_per_label(fake_analyzer):
    summary = SentimentAggregator(fake_analyzer).analyze(
        ["Great one", "Great two", "Great three", "Bad one"]
    )
    assert summary.examples["positive"] == ["Great one", "Great two"]
    assert summary.examples["negative"] == ["Bad one"]
    assert summary.examples["neutral"] == []


def test_nested_pipeline_output_is_handled():
    analyzer, _ = _analyzer_with([[{"label": "4 stars", "score": 0.7}]])
    results = analyzer.analyze_batch(["fine"])
    assert results[0].label == POSITIVE
    assert results[0].score == 0.7


def test_analyze_text(fake_analyzer):
    assert fake_analyzer.analyze_text("Bad purchase").label == NEGATIVE


def test_model_loads_once_under_concurrency(fake_classifier):
    loads = []

    def slow_loader(name):
        loads.append(name)
        time.sleep(0.05)
        return fake_classifier

    analyzer = SentimentAnalyzer("fake", loader=slow_loader)
    barrier = threading.Barrier(8)

    def worker():
        barrier.wait()
        analyzer.analyze_text("Great")

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert loads == ["fake"]
    assert analyzer.is_loaded
    assert len(fake_classifier.calls) == 8


def test_failed_load_is_retried(fake_classifier):
    loader = Mock(side_effect=[RuntimeError("download failed"), fake_classifier])
    analyzer = SentimentAnalyzer("fake", loader=loader)

    with pytest.raises(RuntimeError):
        analyzer.analyze_text("Great")
    assert not analyzer.is_loaded

    assert analyzer.analyze_text("Great").label == POSITIVE
    assert loader.call_count == 2
