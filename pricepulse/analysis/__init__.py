"""
Price and review analysis for PricePulse
"""
from pricepulse.analysis.price_stats import PriceStatistics, compute_price_statistics
from pricepulse.analysis.scoring import (
    ScoringWeights,
    WorthBuyingResult,
    price_position,
    score_worth_buying,
)
from pricepulse.analysis.sentiment import (
    SentimentAggregator,
    SentimentAnalyzer,
    SentimentResult,
    SentimentSummary,
    map_label,
)

__all__ = [
    'PriceStatistics',
    'compute_price_statistics',
    'ScoringWeights',
    'WorthBuyingResult',
    'price_position',
    'score_worth_buying',
    'SentimentAggregator',
    'SentimentAnalyzer',
    'SentimentResult',
    'SentimentSummary',
    'map_label',
]
