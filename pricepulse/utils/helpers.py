"""
Helper utilities for PricePulse
"""

import math
from typing import Optional


def clean_text(text: str) -> str:
    """
    Clean and normalize text content.

    Args:
        text: The text to clean.

    Returns:
        Cleaned text string.
    """
    if not text:
        return ""

    return " ".join(text.split())


def _group_indian(integer_part: str) -> str:
    """Group digits the Indian way: last three, then pairs (12,34,567)."""
    if len(integer_part) <= 3:
        return integer_part
    head, tail = integer_part[:-3], integer_part[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def format_inr(amount: Optional[float], symbol: str = "₹") -> str:
    """
    Format an amount in rupees with Indian digit grouping.

    Args:
        amount: The numeric amount.
        symbol: Currency symbol prefix.

    Returns:
        Formatted string such as "₹1,24,999" or "₹499.5".
    """
    if amount is None:
        amount = 0.0

    sign = "-" if amount < 0 else ""
    text = f"{abs(amount):.2f}"
    integer_part, fraction = text.split(".")
    fraction = fraction.rstrip("0")

    formatted = _group_indian(integer_part)
    if fraction:
        formatted += "." + fraction
    return f"{sign}{symbol}{formatted}"


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (62.5 -> 63)."""
    return int(math.floor(value + 0.5))
