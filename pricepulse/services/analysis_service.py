"""
Product Analysis Service
Computes the worth-buying analysis of a stored product and caches it.
"""

import logging
from typing import Any, Dict, Optional

from pricepulse.analysis.price_stats import compute_price_statistics
from pricepulse.analysis.scoring import ScoringWeights, score_worth_buying
from pricepulse.database import Database
from pricepulse.errors import ProductNotFoundError
from pricepulse.models import AnalysisResult, Product, average_rating

logger = logging.getLogger(__name__)


class ProductAnalysisService:
    """Service class for worth-buying analyses."""

    def __init__(self, db: Database, weights: Optional[ScoringWeights] = None):
        self.db = db
        self.weights = weights or ScoringWeights()

    def _get_product(self, product_id: int) -> Product:
        product = self.db.get_product_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    def get_statistics(self, product_id: int) -> Dict[str, Any]:
        """Price statistics of a product's history."""
        product = self._get_product(product_id)
        history = self.db.get_price_history(product_id)
        stats = compute_price_statistics(
            history, product.current_price, self.weights.trend_window
        )
        return {
            'product_id': product_id,
            'current_price': product.current_price,
            'statistics': stats.to_dict(),
        }

    def analyze_product(self, product_id: int) -> Dict[str, Any]:
        """
        Recompute and store the analysis of a product.

        Returns:
            Dictionary with the stored analysis, the statistics and the
            score breakdown.
        """
        product = self._get_product(product_id)
        history = self.db.get_price_history(product_id)
        reviews = self.db.get_reviews(product_id)

        stats = compute_price_statistics(
            history, product.current_price, self.weights.trend_window
        )
        rating = average_rating(reviews)
        result = score_worth_buying(product.current_price, stats, rating, self.weights)

        analysis = self.db.upsert_analysis(result.to_analysis_result(product_id))
        logger.info(
            f"Analyzed product {product_id}: score {result.score} ({result.tier}), "
            f"{stats.count} price points, {len(reviews)} reviews"
        )

        return {
            'analysis': analysis.to_dict(),
            'statistics': stats.to_dict(),
            'breakdown': result.to_dict(),
            'average_rating': rating,
            'review_count': len(reviews),
        }

    def get_analysis(self, product_id: int) -> Optional[AnalysisResult]:
        """Cached analysis, or None if the product was never analyzed."""
        self._get_product(product_id)
        return self.db.get_analysis(product_id)
