"""
Worth-buying score.

Combines where the current price sits in its observed range, the recent
price trend, volatility and the average review rating into a single score
between SCORING_MIN_SCORE and SCORING_MAX_SCORE, plus a templated
recommendation.
"""

from dataclasses import dataclass, asdict
from typing import Mapping, Optional

from pricepulse.analysis.price_stats import PriceStatistics
from pricepulse.models import AnalysisResult
from pricepulse.utils.helpers import format_inr, round_half_up

NEUTRAL_POSITION = 50.0
NEUTRAL_RATING = 3.0

STRONG_BUY = "strong buy"
FAIR_DEAL = "fair deal"
WAIT = "wait"

STRONG_BUY_THRESHOLD = 70
FAIR_DEAL_THRESHOLD = 40

SIGNIFICANT_SLOPE = 10.0
STABLE_VOLATILITY = 0.08
MODERATE_VOLATILITY = 0.15


@dataclass(frozen=True)
class ScoringWeights:
    """Named weights of the worth-buying score."""

    review_bonus: float = 15.0
    falling_trend_bonus: float = 10.0
    rising_trend_penalty: float = 5.0
    min_score: int = 5
    max_score: int = 95
    trend_window: int = 14

    @classmethod
    def from_config(cls, config: Mapping) -> 'ScoringWeights':
        """Build weights from a Flask config (``SCORING_*`` keys)."""
        defaults = cls()
        return cls(
            review_bonus=float(config.get('SCORING_REVIEW_BONUS', defaults.review_bonus)),
            falling_trend_bonus=float(
                config.get('SCORING_FALLING_TREND_BONUS', defaults.falling_trend_bonus)
            ),
            rising_trend_penalty=float(
                config.get('SCORING_RISING_TREND_PENALTY', defaults.rising_trend_penalty)
            ),
            min_score=int(config.get('SCORING_MIN_SCORE', defaults.min_score)),
            max_score=int(config.get('SCORING_MAX_SCORE', defaults.max_score)),
            trend_window=int(config.get('SCORING_TREND_WINDOW', defaults.trend_window)),
        )


DEFAULT_WEIGHTS = ScoringWeights()


@dataclass
class WorthBuyingResult:
    """Score, tier and narrative for one product."""

    score: int
    tier: str
    summary: str
    recommendation: str
    price_position: float
    review_bonus: float
    trend_adjustment: float
    trend_label: str
    volatility_label: str

    def to_dict(self) -> dict:
        return asdict(self)

    def to_analysis_result(self, product_id: int) -> AnalysisResult:
        return AnalysisResult(
            product_id=product_id,
            worth_buying_score=self.score,
            tier=self.tier,
            recommendation=self.recommendation,
            analysis_summary=self.summary,
        )


def price_position(current_price: float, lowest: float, highest: float) -> float:
    """
    Percentile of the current price within [lowest, highest], 0 = at the low.

    Returns 50 when the range is empty.
    """
    price_range = highest - lowest
    if price_range <= 0:
        return NEUTRAL_POSITION
    return (current_price - lowest) / price_range * 100


def review_bonus(avg_rating: Optional[float], weights: ScoringWeights = DEFAULT_WEIGHTS) -> float:
    """Scale a 1..5 rating to [-review_bonus, +review_bonus]; 3 stars is 0."""
    if avg_rating is None:
        avg_rating = NEUTRAL_RATING
    return ((avg_rating - NEUTRAL_RATING) / 2) * weights.review_bonus


def trend_adjustment(slope: float, weights: ScoringWeights = DEFAULT_WEIGHTS) -> float:
    if slope < 0:
        return weights.falling_trend_bonus
    if slope > 0:
        return -weights.rising_trend_penalty
    return 0.0


def trend_label(slope: float) -> str:
    if slope <= -SIGNIFICANT_SLOPE:
        return "dropping significantly"
    if slope < 0:
        return "trending downward"
    if slope >= SIGNIFICANT_SLOPE:
        return "rising significantly"
    if slope > 0:
        return "trending upward"
    return "stable"


def volatility_label(volatility: float) -> str:
    if volatility < STABLE_VOLATILITY:
        return "stable"
    if volatility <= MODERATE_VOLATILITY:
        return "moderately volatile"
    return "highly volatile"


def tier_for(score: int) -> str:
    if score >= STRONG_BUY_THRESHOLD:
        return STRONG_BUY
    if score >= FAIR_DEAL_THRESHOLD:
        return FAIR_DEAL
    return WAIT


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


_FLUCTUATION = {
    "stable": "with little fluctuation",
    "moderately volatile": "with moderate swings",
    "highly volatile": "with large swings",
}


def _narrative(tier: str, current_price: float, stats: PriceStatistics,
               avg_rating: float, trend: str, volatility: str):
    price = format_inr(current_price)
    lowest = format_inr(stats.lowest)
    highest = format_inr(stats.highest)
    average = format_inr(stats.average)
    if stats.lowest > 0:
        above_low = (current_price - stats.lowest) / stats.lowest * 100
    else:
        above_low = 0.0
    rating = f"{avg_rating:.1f}/5"
    movement = f"the price is {trend} {_FLUCTUATION[volatility]}"

    if tier == STRONG_BUY:
        summary = "Great time to buy! The price is close to or below its recorded low."
        if above_low > 0:
            position = f"only {above_low:.1f}% above the lowest recorded price of {lowest}"
        elif above_low < 0:
            position = f"{-above_low:.1f}% below the lowest recorded price of {lowest}"
        else:
            position = f"at the lowest recorded price of {lowest}"
        recommendation = (
            f"Excellent value. This product is currently priced at {price}, {position}. "
            f"Over the tracked period {movement}, "
            f"and customers rate it {rating}. This is a good moment to purchase."
        )
    elif tier == FAIR_DEAL:
        summary = "Decent pricing. Consider tracking it for a better deal."
        recommendation = (
            f"Fair value. The current price of {price} compares reasonably with the "
            f"average of {average}, and the lowest recorded price was {lowest}. "
            f"Over the tracked period {movement}; customers rate it {rating}. "
            f"Tracking this product may catch a further drop."
        )
    else:
        summary = "The price is high. Wait for a better deal or check other stores."
        recommendation = (
            f"Consider waiting. The current price of {price} is {above_low:.1f}% above the "
            f"lowest recorded price of {lowest} and close to the high of {highest}. "
            f"Over the tracked period {movement}, and customers rate it {rating}. "
            f"Better pricing has been available before."
        )
    return summary, recommendation


def score_worth_buying(
    current_price: float,
    stats: PriceStatistics,
    avg_rating: Optional[float] = None,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> WorthBuyingResult:
    """
    Score how worth buying a product is right now.

    Args:
        current_price: the product's current price
        stats: statistics of its price history
        avg_rating: mean review rating, ``None`` when there are no reviews
        weights: scoring weights

    Returns:
        WorthBuyingResult with the bounded score, tier and narrative.
    """
    rating = NEUTRAL_RATING if avg_rating is None else avg_rating
    position = price_position(current_price, stats.lowest, stats.highest)
    base_score = 100 - position
    bonus = review_bonus(rating, weights)
    adjustment = trend_adjustment(stats.trend_slope, weights)

    raw_score = round_half_up(base_score + bonus + adjustment)
    score = int(_clamp(raw_score, weights.min_score, weights.max_score))
    tier = tier_for(score)
    trend = trend_label(stats.trend_slope)
    volatility = volatility_label(stats.volatility)
    summary, recommendation = _narrative(tier, current_price, stats, rating, trend, volatility)

    return WorthBuyingResult(
        score=score,
        tier=tier,
        summary=summary,
        recommendation=recommendation,
        price_position=position,
        review_bonus=bonus,
        trend_adjustment=adjustment,
        trend_label=trend,
        volatility_label=volatility,
    )
