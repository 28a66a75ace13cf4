"""Tests for helpers, validators, the TTL cache and the rate limiter."""

import time

import pytest

from pricepulse.errors import ValidationError
from pricepulse.utils import clean_text, format_inr, round_half_up
from pricepulse.utils.cache import TTLCache
from pricepulse.utils.rate_limiter import RateLimiter
from pricepulse.utils.validators import (
    parse_notify_on_drop,
    parse_page_args,
    parse_rating,
    parse_review_text,
    parse_target_price,
    parse_user_name,
)


@pytest.mark.parametrize("amount,expected", [
    (0, "₹0"),
    (999, "₹999"),
    (1000, "₹1,000"),
    (124999, "₹1,24,999"),
    (12345678, "₹1,23,45,678"),
    (499.5, "₹499.5"),
    (1499.99, "₹1,499.99"),
    (-2500, "-₹2,500"),
    (None, "₹0"),
])
def test_format_inr(amount, expected):
    assert format_inr(amount) == expected


def test_round_half_up():
    assert round_half_up(62.5) == 63
    assert round_half_up(2.5) == 3
    assert round_half_up(2.4) == 2
    assert round_half_up(-0.5) == 0


def test_text_helpers():
    assert clean_text("  too   many\n spaces ") == "too many spaces"
    assert clean_text(None) == ""


@pytest.mark.parametrize("value", [1, 5, "4"])
def test_parse_rating_accepts(value):
    assert parse_rating(value) == int(value)


@pytest.mark.parametrize("value", [0, 6, 4.5, "4.5", "five", None, True])
def test_parse_rating_rejects(value):
    with pytest.raises(ValidationError):
        parse_rating(value)


def test_parse_review_text():
    assert parse_review_text("  Solid  ") == "Solid"
    with pytest.raises(ValidationError):
        parse_review_text("")
    with pytest.raises(ValidationError):
        parse_review_text("x" * 5001)


def test_parse_user_name():
    assert parse_user_name(" Asha ") == "Asha"
    assert parse_user_name("Asha \n  Rao") == "Asha Rao"
    assert len(parse_user_name("n" * 300)) == 100
    with pytest.raises(ValidationError):
        parse_user_name(None)


def test_parse_target_price():
    assert parse_target_price(None) == 0.0
    assert parse_target_price("1499") == 1499.0
    for value in [-1, "cheap", False]:
        with pytest.raises(ValidationError):
            parse_target_price(value)


def test_parse_notify_on_drop():
    assert parse_notify_on_drop(None) is True
    assert parse_notify_on_drop(False) is False
    assert parse_notify_on_drop(True) is True
    for value in ["false", 0, 1, "yes"]:
        with pytest.raises(ValidationError):
            parse_notify_on_drop(value)


def test_parse_page_args():
    assert parse_page_args({}) == (1, 20)
    assert parse_page_args({"page": "0", "per_page": "500"}) == (1, 100)
    with pytest.raises(ValidationError):
        parse_page_args({"page": "two"})


def test_cache_expiry():
    cache = TTLCache(max_size=10, ttl_seconds=60)
    cache.set("fresh", 1)
    cache.set("stale", 2, ttl=-1)
    assert cache.get("fresh") == 1
    assert cache.get("stale") is None
    assert cache.delete("fresh") is True
    assert cache.delete("fresh") is False


def test_cache_evicts_oldest():
    cache = TTLCache(max_size=2, ttl_seconds=60)
    cache.set("a", 1)
    time.sleep(0.01)
    cache.set("b", 2)
    time.sleep(0.01)
    cache.set("c", 3)
    assert cache.get("a") is None
    assert cache.get("b") == 2
    assert cache.get("c") == 3
    assert cache.stats()["size"] == 2


def test_rate_limiter():
    limiter = RateLimiter(requests_per_minute=2)
    assert limiter.is_allowed("1.2.3.4")
    assert limiter.get_remaining("1.2.3.4") == 1
    assert limiter.is_allowed("1.2.3.4")
    assert not limiter.is_allowed("1.2.3.4")
    assert limiter.is_allowed("5.6.7.8")
    assert limiter.get_reset_time("1.2.3.4") > time.time()
    assert limiter.get_reset_time("unknown") is None


def test_rate_limiter_forgets_idle_clients():
    limiter = RateLimiter(requests_per_minute=5, window_seconds=0)
    assert limiter.is_allowed("1.2.3.4")
    time.sleep(0.01)
    assert limiter.get_remaining("1.2.3.4") == 5
    assert "1.2.3.4" not in limiter._requests

    # Looking up a client that never called does not create an entry
    assert limiter.get_remaining("5.6.7.8") == 5
    assert limiter._requests == {}
