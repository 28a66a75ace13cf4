"""
Sentiment Service
Aggregated review sentiment per product, backed by the shared classifier.
"""

import logging
from typing import Any, Dict, Optional

from flask import current_app

from pricepulse.analysis.sentiment import SentimentAggregator, SentimentAnalyzer
from pricepulse.database import Database
from pricepulse.errors import ProductNotFoundError
from pricepulse.utils.cache import TTLCache

logger = logging.getLogger(__name__)


def get_sentiment_analyzer() -> SentimentAnalyzer:
    """Get or create the classifier wrapper of the current app."""
    analyzer = current_app.extensions.get('sentiment_analyzer')
    if analyzer is None:
        analyzer = SentimentAnalyzer(current_app.config.get('SENTIMENT_MODEL'))
        current_app.extensions['sentiment_analyzer'] = analyzer
    return analyzer


class SentimentService:
    """Classifies the latest reviews of a product and caches the summary."""

    def __init__(self, db: Database, analyzer: SentimentAnalyzer,
                 cache: Optional[TTLCache] = None, max_reviews: int = 20):
        self.db = db
        self.analyzer = analyzer
        self.cache = cache
        self.max_reviews = max_reviews

    def product_sentiment(self, product_id: int) -> Dict[str, Any]:
        if self.db.get_product_by_id(product_id) is None:
            raise ProductNotFoundError(product_id)

        cache_key = f"sentiment:{product_id}"
        if self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.info(f"Cache hit for sentiment of product {product_id}")
                return cached

        reviews = self.db.get_reviews(product_id, limit=self.max_reviews)
        aggregator = SentimentAggregator(self.analyzer, max_reviews=self.max_reviews)
        summary = aggregator.analyze([review.review_text for review in reviews])

        result = {
            'product_id': product_id,
            'sentiment': summary.to_dict() if summary else None,
            'review_count': len(reviews),
        }
        if self.cache is not None:
            self.cache.set(cache_key, result)
        return result

    def invalidate(self, product_id: int) -> None:
        if self.cache is not None:
            self.cache.delete(f"sentiment:{product_id}")
