"""
Validation utilities for PricePulse
"""

from pricepulse.errors import ValidationError
from pricepulse.utils.helpers import clean_text
from pricepulse.models.review import MIN_RATING, MAX_RATING

MAX_REVIEW_LENGTH = 5000
MAX_USER_NAME_LENGTH = 100


def parse_rating(value) -> int:
    """Parse a review rating, raising ValidationError unless it is 1..5."""
    if isinstance(value, bool):
        raise ValidationError("Rating must be an integer between 1 and 5")
    try:
        rating = int(value)
    except (ValueError, TypeError):
        raise ValidationError("Rating must be an integer between 1 and 5")
    if rating != value and str(rating) != str(value):
        raise ValidationError("Rating must be an integer between 1 and 5")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError("Rating must be an integer between 1 and 5")
    return rating


def parse_review_text(value) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Review text is required")
    text = value.strip()
    if len(text) > MAX_REVIEW_LENGTH:
        raise ValidationError(f"Review text must be at most {MAX_REVIEW_LENGTH} characters")
    return text


def parse_user_name(value) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("User name is required")
    return clean_text(value)[:MAX_USER_NAME_LENGTH]


def parse_target_price(value) -> float:
    """Parse a tracking target price; missing means 0 (no target)."""
    if value is None or value == "":
        return 0.0
    if isinstance(value, bool):
        raise ValidationError("Target price must be a number")
    try:
        price = float(value)
    except (ValueError, TypeError):
        raise ValidationError("Target price must be a number")
    if price < 0:
        raise ValidationError("Target price cannot be negative")
    return price


def parse_page_args(args, default_per_page: int = 20, max_per_page: int = 100):
    """Read ``page`` and ``per_page`` from query args and clamp them."""
    try:
        page = int(args.get("page", 1))
        per_page = int(args.get("per_page", default_per_page))
    except ValueError:
        raise ValidationError("Page and per_page must be integers")
    return max(1, page), max(1, min(max_per_page, per_page))


def parse_notify_on_drop(value) -> bool:
    """Parse the price-drop notification flag; missing means True."""
    if value is None:
        return True
    if not isinstance(value, bool):
        raise ValidationError("notify_on_drop must be true or false")
    return value
