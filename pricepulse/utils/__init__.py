"""
Utilities module for PricePulse
"""

from pricepulse.utils.helpers import format_inr, clean_text, round_half_up

__all__ = ["format_inr", "clean_text", "round_half_up"]
