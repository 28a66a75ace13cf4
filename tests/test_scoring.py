"""Tests for the worth-buying score."""

import pytest

from pricepulse.analysis.price_stats import PriceStatistics, compute_price_statistics
from pricepulse.analysis.scoring import (
    FAIR_DEAL,
    STRONG_BUY,
    WAIT,
    ScoringWeights,
    price_position,
    review_bonus,
    score_worth_buying,
    trend_label,
    volatility_label,
)


def _stats(lowest, highest, slope=0.0, volatility=0.0):
    return PriceStatistics(
        lowest=lowest,
        highest=highest,
        average=(lowest + highest) / 2,
        volatility=volatility,
        trend_slope=slope,
        count=5,
    )


def test_price_position_with_empty_range_is_neutral():
    assert price_position(100.0, 100.0, 100.0) == 50.0
    assert price_position(0.0, 0.0, 0.0) == 50.0


def test_price_position_percentile():
    assert price_position(80.0, 80.0, 100.0) == 0.0
    assert price_position(100.0, 80.0, 100.0) == 100.0
    assert price_position(90.0, 80.0, 100.0) == pytest.approx(50.0)


def test_empty_history_scores_neutral():
    stats = compute_price_statistics([], current_price=999.0)
    result = score_worth_buying(999.0, stats, avg_rating=None)
    assert result.score == 50
    assert result.tier == FAIR_DEAL


def test_flat_history_depends_on_reviews_only():
    stats = compute_price_statistics([100, 100, 100, 100, 100], current_price=100)
    assert score_worth_buying(100, stats, 3.0).score == 50
    assert score_worth_buying(100, stats, 5.0).score == 65
    assert score_worth_buying(100, stats, 5.0).tier == FAIR_DEAL
    assert score_worth_buying(100, stats, 1.0).score == 35


def test_score_clamps_to_upper_bound():
    result = score_worth_buying(80.0, _stats(80.0, 100.0), avg_rating=5.0)
    assert result.review_bonus == pytest.approx(15.0)
    assert result.score == 95
    assert result.tier == STRONG_BUY


def test_score_clamps_to_lower_bound():
    result = score_worth_buying(100.0, _stats(80.0, 100.0, slope=1.0), avg_rating=1.0)
    assert result.score == 5
    assert result.tier == WAIT


@pytest.mark.parametrize("current", [0.0, 50.0, 80.0, 90.0, 100.0, 150.0])
@pytest.mark.parametrize("rating", [1.0, 3.0, 5.0])
@pytest.mark.parametrize("slope", [-20.0, 0.0, 20.0])
def test_score_always_within_bounds(current, rating, slope):
    result = score_worth_buying(current, _stats(80.0, 100.0, slope=slope), rating)
    assert 5 <= result.score <= 95


def test_trend_adjustment_direction():
    falling = score_worth_buying(90.0, _stats(80.0, 100.0, slope=-1.0), 3.0)
    rising = score_worth_buying(90.0, _stats(80.0, 100.0, slope=1.0), 3.0)
    assert falling.trend_adjustment == 10.0
    assert rising.trend_adjustment == -5.0
    assert falling.score == 60
    assert rising.score == 45


def test_review_bonus_range():
    assert review_bonus(5.0) == pytest.approx(15.0)
    assert review_bonus(1.0) == pytest.approx(-15.0)
    assert review_bonus(None) == 0.0


@pytest.mark.parametrize("slope,label", [
    (-12.0, "dropping significantly"),
    (-10.0, "dropping significantly"),
    (-1.0, "trending downward"),
    (0.0, "stable"),
    (3.0, "trending upward"),
    (10.0, "rising significantly"),
])
def test_trend_labels(slope, label):
    assert trend_label(slope) == label


@pytest.mark.parametrize("volatility,label", [
    (0.05, "stable"),
    (0.08, "moderately volatile"),
    (0.15, "moderately volatile"),
    (0.2, "highly volatile"),
])
def test_volatility_labels(volatility, label):
    assert volatility_label(volatility) == label


def test_strong_buy_narrative():
    result = score_worth_buying(80.0, _stats(80.0, 100.0, slope=-1.0), 3.0)
    assert result.tier == STRONG_BUY
    assert result.summary.startswith("Great time to buy")
    assert "₹80" in result.recommendation
    assert "trending downward" in result.recommendation


def test_wait_narrative_mentions_distance_from_low():
    result = score_worth_buying(100.0, _stats(80.0, 100.0, slope=1.0), 3.0)
    assert result.tier == WAIT
    assert result.recommendation.startswith("Consider waiting")
    assert "25.0% above" in result.recommendation
    assert "trending upward" in result.recommendation


def test_narrative_uses_indian_grouping():
    result = score_worth_buying(124999.0, _stats(124999.0, 124999.0), 3.0)
    assert "₹1,24,999" in result.recommendation


def test_weights_from_config():
    weights = ScoringWeights.from_config({
        "SCORING_REVIEW_BONUS": 30,
        "SCORING_MAX_SCORE": 90,
    })
    assert weights.review_bonus == 30.0
    assert weights.max_score == 90
    assert weights.falling_trend_bonus == 10.0
    assert review_bonus(5.0, weights) == pytest.approx(30.0)
    result = score_worth_buying(80.0, _stats(80.0, 100.0), 5.0, weights)
    assert result.score == 90


def test_to_analysis_result():
    result = score_worth_buying(80.0, _stats(80.0, 100.0), 5.0)
    analysis = result.to_analysis_result(7)
    assert analysis.product_id == 7
    assert analysis.worth_buying_score == 95
    assert analysis.analysis_summary == result.summary


def test_narrative_below_recorded_low():
    result = score_worth_buying(80.0, _stats(100.0, 120.0), 3.0)
    assert result.tier == STRONG_BUY
    assert "20.0% below the lowest recorded price of ₹100" in result.recommendation
    assert "at the lowest recorded price" not in result.recommendation


def test_narrative_reads_naturally_for_flat_history():
    result = score_worth_buying(100.0, _stats(100.0, 100.0), 3.0)
    assert "the price is stable with little fluctuation" in result.recommendation
    assert "has been stable" not in result.recommendation
