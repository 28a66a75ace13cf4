"""
Price statistics over a product's recorded price history.
"""

import math
from dataclasses import dataclass, asdict
from typing import Iterable, List, Sequence

from pricepulse.models import PricePoint

DEFAULT_TREND_WINDOW = 14
MIN_TREND_POINTS = 3


@dataclass
class PriceStatistics:
    """Summary of a price history."""

    lowest: float
    highest: float
    average: float
    volatility: float
    trend_slope: float
    count: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


def _prices(history: Iterable) -> List[float]:
    prices = []
    for point in history:
        if isinstance(point, PricePoint):
            prices.append(float(point.price))
        elif isinstance(point, dict):
            prices.append(float(point['price']))
        elif isinstance(point, (tuple, list)):
            # (timestamp, price) pairs
            prices.append(float(point[1]))
        else:
            prices.append(float(point))
    return prices


def coefficient_of_variation(prices: Sequence[float]) -> float:
    """Population standard deviation divided by the mean; 0 for < 2 points."""
    if len(prices) < 2:
        return 0.0
    mean = sum(prices) / len(prices)
    if mean == 0:
        return 0.0
    variance = sum((p - mean) ** 2 for p in prices) / len(prices)
    return math.sqrt(variance) / mean


def trend_slope(prices: Sequence[float], window: int = DEFAULT_TREND_WINDOW) -> float:
    """
    Least-squares slope of price against index over the last ``window`` points.

    Returns 0 when fewer than 3 points are available. A negative slope means
    the price is falling.
    """
    recent = list(prices[-window:]) if window > 0 else list(prices)
    n = len(recent)
    if n < MIN_TREND_POINTS:
        return 0.0

    x_mean = (n - 1) / 2
    y_mean = sum(recent) / n
    numerator = sum((i - x_mean) * (y - y_mean) for i, y in enumerate(recent))
    denominator = sum((i - x_mean) ** 2 for i in range(n))
    return numerator / denominator


def compute_price_statistics(
    history: Iterable,
    current_price: float,
    trend_window: int = DEFAULT_TREND_WINDOW,
) -> PriceStatistics:
    """
    Compute lowest/highest/average, volatility and trend slope.

    Args:
        history: price points ordered oldest to newest. Accepts PricePoint
            objects, ``{"price": ...}`` dicts, ``(timestamp, price)`` pairs
            or bare numbers.
        current_price: used for lowest/highest/average when history is empty.
        trend_window: number of most recent points the slope is fitted on.
    """
    prices = _prices(history)
    if not prices:
        return PriceStatistics(
            lowest=current_price,
            highest=current_price,
            average=current_price,
            volatility=0.0,
            trend_slope=0.0,
            count=0,
        )

    return PriceStatistics(
        lowest=min(prices),
        highest=max(prices),
        average=sum(prices) / len(prices),
        volatility=coefficient_of_variation(prices),
        trend_slope=trend_slope(prices, trend_window),
        count=len(prices),
    )
