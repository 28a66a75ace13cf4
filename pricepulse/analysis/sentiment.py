"""
Review sentiment: label mapping, classifier wrapper and aggregation.

The classifier is a pre-trained transformers text-classification pipeline
(by default a 1-5 star model). Its raw labels are mapped onto
POSITIVE / NEUTRAL / NEGATIVE.
"""

import logging
import re
import threading
from dataclasses import dataclass, field, asdict
from typing import Callable, Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)

POSITIVE = "POSITIVE"
NEUTRAL = "NEUTRAL"
NEGATIVE = "NEGATIVE"

DEFAULT_CONFIDENCE = 0.5
MAX_REVIEWS = 20
MAX_EXAMPLES = 2

_POSITIVE_STARS = re.compile(r"[45]\s*star")
_NEUTRAL_STARS = re.compile(r"3\s*star")


@dataclass
class SentimentResult:
    label: str
    score: float


def map_label(label: Optional[str], score: Optional[float] = None) -> SentimentResult:
    """Map a raw classifier label ("5 stars", "LABEL_POSITIVE", ...) to the three-way taxonomy."""
    raw = (label or "").lower()
    confidence = DEFAULT_CONFIDENCE if score is None else score
    if _POSITIVE_STARS.search(raw) or "positive" in raw:
        return SentimentResult(POSITIVE, confidence)
    if _NEUTRAL_STARS.search(raw) or "neutral" in raw:
        return SentimentResult(NEUTRAL, confidence)
    return SentimentResult(NEGATIVE, confidence)


def _top_prediction(raw) -> dict:
    # Pipelines return either {label, score} or [{label, score}, ...] per input
    if isinstance(raw, list):
        raw = raw[0] if raw else {}
    return raw or {}


def load_transformers_pipeline(model_name: str):
    """Load a sentiment-analysis pipeline from the Hugging Face hub."""
    from transformers import pipeline

    return pipeline("sentiment-analysis", model=model_name, truncation=True)


class SentimentAnalyzer:
    """
    Lazily loaded classifier shared by all requests of the process.

    The model is loaded on first use. Concurrent first callers wait on one
    lock so the model is only loaded once; if loading fails the error goes
    to the caller and the next call tries again.
    """

    def __init__(self, model_name: str,
                 loader: Optional[Callable[[str], Callable]] = None):
        self.model_name = model_name
        self._loader = loader or load_transformers_pipeline
        self._classifier = None
        self._lock = threading.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._classifier is not None

    def _get_classifier(self):
        if self._classifier is not None:
            return self._classifier
        with self._lock:
            if self._classifier is None:
                logger.info(f"Loading sentiment model {self.model_name}")
                self._classifier = self._loader(self.model_name)
        return self._classifier

    def analyze_text(self, text: str) -> SentimentResult:
        classifier = self._get_classifier()
        raw = _top_prediction(classifier(text))
        return map_label(raw.get("label"), raw.get("score"))

    def analyze_batch(self, texts: Sequence[str]) -> List[SentimentResult]:
        """Classify all texts with a single pipeline call."""
        if not texts:
            return []
        classifier = self._get_classifier()
        outputs = classifier(list(texts))
        results = []
        for output in outputs:
            raw = _top_prediction(output)
            results.append(map_label(raw.get("label"), raw.get("score")))
        return results


@dataclass
class SentimentSummary:
    """Aggregate sentiment of a batch of reviews."""

    label: str
    score: float
    positive: int
    neutral: int
    negative: int
    total: int
    examples: Dict[str, List[str]] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return asdict(self)


def overall_label(score: float) -> str:
    if score > 0.6:
        return "Positive"
    if score < 0.4:
        return "Negative"
    return "Neutral"


class SentimentAggregator:
    """
    Classifies review texts and keeps the latest summary.

    Calling ``analyze`` with no texts does not touch the classifier and
    returns the previous summary (``None`` before the first batch).
    """

    def __init__(self, analyzer: SentimentAnalyzer, max_reviews: int = MAX_REVIEWS):
        self.analyzer = analyzer
        self.max_reviews = max_reviews
        self.summary: Optional[SentimentSummary] = None

    def analyze(self, texts: Sequence[str]) -> Optional[SentimentSummary]:
        batch = [text for text in texts if text and text.strip()][:self.max_reviews]
        if not batch:
            return self.summary

        results = self.analyzer.analyze_batch(batch)
        if not results:
            logger.warning(f"Classifier returned no results for {len(batch)} reviews")
            return self.summary

        counts = {POSITIVE: 0, NEUTRAL: 0, NEGATIVE: 0}
        examples = {POSITIVE: [], NEUTRAL: [], NEGATIVE: []}
        running = 0.0
        for text, result in zip(batch, results):
            counts[result.label] += 1
            if len(examples[result.label]) < MAX_EXAMPLES:
                examples[result.label].append(text)
            if result.label == POSITIVE:
                running += result.score
            elif result.label == NEGATIVE:
                running -= result.score

        total = len(results)
        score = (running / total + 1) / 2
        self.summary = SentimentSummary(
            label=overall_label(score),
            score=score,
            positive=counts[POSITIVE],
            neutral=counts[NEUTRAL],
            negative=counts[NEGATIVE],
            total=total,
            examples={
                "positive": examples[POSITIVE],
                "neutral": examples[NEUTRAL],
                "negative": examples[NEGATIVE],
            },
        )
        logger.debug(f"Aggregated {total} reviews: {self.summary.label} ({score:.2f})")
        return self.summary
