"""
Remote Analysis Service
Relays product price and review aggregates to a hosted chat-completions
gateway and splits the reply into a short summary and a detailed
recommendation.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Tuple

import requests

from pricepulse.analysis.price_stats import compute_price_statistics
from pricepulse.analysis.scoring import price_position
from pricepulse.errors import (
    ConfigurationError,
    CreditsExhaustedError,
    RateLimitedError,
    UpstreamError,
    ValidationError,
)
from pricepulse.utils.helpers import format_inr, round_half_up

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = (
    "You are a product analyst expert. Provide clear, data-driven buying recommendations."
)

MAX_POSITIVE_EXCERPTS = 3
MAX_NEGATIVE_EXCERPTS = 2
POSITIVE_RATING = 4
FALLBACK_SUMMARY_LENGTH = 200

_SUMMARY_FIELD = re.compile(r"^[\s*#_]*summary[\s*_]*:[\s*_]*(.*)$", re.IGNORECASE)
_RECOMMENDATION_FIELD = re.compile(
    r"^[\s*#_]*(?:detailed\s+)?recommendation[\s*_]*:[\s*_]*(.*)$", re.IGNORECASE
)
_LIST_MARKER = re.compile(r"^\s*([12])\.\s*")
_HEADING_NOISE = re.compile(r"^[\s*#_]*(?:a\s+)?(?:concise\s+|short\s+)?"
                            r"(?:summary|(?:detailed\s+)?recommendation(?:\s+paragraph)?)[\s*_]*:?[\s*_]*",
                            re.IGNORECASE)


def _price_of(point: Any) -> float:
    if isinstance(point, dict):
        return float(point.get("price") or 0.0)
    return float(point)


def compute_gateway_statistics(product: Dict[str, Any],
                               price_history: List[Any]) -> Dict[str, float]:
    """
    Price figures embedded in the prompt.

    The score here is ``100 - price position`` only; it does not use the
    review or trend weighting of the worth-buying scorer.
    """
    current_price = float(product.get("current_price") or 0.0)
    stats = compute_price_statistics(
        [_price_of(point) for point in price_history], current_price
    )
    position = price_position(current_price, stats.lowest, stats.highest)
    return {
        "current_price": current_price,
        "lowest": stats.lowest,
        "highest": stats.highest,
        "average": stats.average,
        "price_position": position,
        "worth_buying_score": round_half_up(100 - position),
    }


def build_prompt(product: Dict[str, Any], stats: Dict[str, float],
                 reviews: List[Dict[str, Any]]) -> str:
    """Build the user prompt sent to the language model."""
    ratings = [float(r.get("rating") or 0) for r in reviews]
    avg_rating = sum(ratings) / len(ratings) if ratings else 0.0
    positive = [r for r in reviews if float(r.get("rating") or 0) >= POSITIVE_RATING]
    negative = [r for r in reviews if float(r.get("rating") or 0) < POSITIVE_RATING]

    positive_lines = "\n".join(
        f'- "{r.get("review_text", "")}"' for r in positive[:MAX_POSITIVE_EXCERPTS]
    ) or "- (none)"
    negative_lines = "\n".join(
        f'- "{r.get("review_text", "")}"' for r in negative[:MAX_NEGATIVE_EXCERPTS]
    ) or "- (none)"

    return f"""Analyze this product and provide buying recommendations:

Product: {product.get("name", "Unknown product")}
Current Price: {format_inr(stats["current_price"])}
Lowest Price (30 days): {format_inr(stats["lowest"])}
Highest Price (30 days): {format_inr(stats["highest"])}
Average Price: {format_inr(stats["average"])}
Price Position: {stats["price_position"]:.1f}% from lowest to highest

Customer Reviews:
- Average Rating: {avg_rating:.1f}/5
- Positive Reviews: {len(positive)}
- Negative Reviews: {len(negative)}

Sample Positive Reviews:
{positive_lines}

Sample Negative Reviews:
{negative_lines}

Answer in exactly this format:
SUMMARY: a concise 2-3 sentence summary of whether this is a good deal
RECOMMENDATION: a detailed paragraph (4-6 sentences) analyzing price trends, value, and customer sentiment

Be specific with actual numbers and prices. Focus on value and timing."""


def _parse_fields(text: str) -> Tuple[str, str]:
    """Read ``SUMMARY:`` / ``RECOMMENDATION:`` fields."""
    summary, detailed = [], []
    current = None
    for line in text.splitlines():
        match = _SUMMARY_FIELD.match(line)
        if match:
            current = summary
            line = match.group(1)
        else:
            match = _RECOMMENDATION_FIELD.match(line)
            if match:
                current = detailed
                line = match.group(1)
        if current is not None and line.strip():
            current.append(line.strip())
    return " ".join(summary), " ".join(detailed)


def _parse_markers(text: str) -> Tuple[str, str]:
    """Scan for "1." / "2." or summary / detailed / recommendation headings."""
    summary, detailed = [], []
    current = None
    for line in (l for l in text.splitlines() if l.strip()):
        lowered = line.lower()
        list_marker = _LIST_MARKER.match(line)
        if "summary" in lowered or (list_marker and list_marker.group(1) == "1"):
            current = summary
        elif ("detailed" in lowered or "recommendation" in lowered
              or (list_marker and list_marker.group(1) == "2")):
            current = detailed
        else:
            if current is not None:
                current.append(line.strip())
            continue

        # Keep any text that follows the marker on the same line
        remainder = _HEADING_NOISE.sub("", _LIST_MARKER.sub("", line, count=1), count=1)
        if remainder.strip():
            current.append(remainder.strip())
    return " ".join(summary), " ".join(detailed)


def parse_analysis_text(text: str) -> Tuple[str, str]:
    """
    Split a model reply into (summary, detailed recommendation).

    Tries the delimited fields first, then list/heading markers, and finally
    the first blank-line-separated paragraph.
    """
    summary, detailed = _parse_fields(text)
    if summary and detailed:
        return summary, detailed

    summary, detailed = _parse_markers(text)
    if summary and detailed:
        return summary, detailed

    parts = text.split("\n\n")
    summary = parts[0] if parts[0] else text[:FALLBACK_SUMMARY_LENGTH]
    detailed = parts[1] if len(parts) > 1 and parts[1] else text[FALLBACK_SUMMARY_LENGTH:]
    return summary.strip(), detailed.strip()


class RemoteAnalysisService:
    """Stateless relay to the language-model gateway. Never retries."""

    def __init__(
        self,
        api_key: Optional[str],
        gateway_url: str,
        model: str,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.gateway_url = gateway_url
        self.model = model
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config) -> 'RemoteAnalysisService':
        return cls(
            api_key=config.get("AI_GATEWAY_API_KEY"),
            gateway_url=config.get("AI_GATEWAY_URL"),
            model=config.get("AI_MODEL"),
            timeout=config.get("AI_REQUEST_TIMEOUT", 30),
        )

    def request_completion(self, prompt: str) -> str:
        """
        Send one chat-completion request and return the reply text.

        Raises:
            ConfigurationError: no API key configured
            RateLimitedError: gateway answered 429
            CreditsExhaustedError: gateway answered 402
            UpstreamError: any other failure
        """
        if not self.api_key:
            raise ConfigurationError("AI_GATEWAY_API_KEY")

        try:
            response = self.session.post(
                self.gateway_url,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json={
                    "model": self.model,
                    "messages": [
                        {"role": "system", "content": SYSTEM_INSTRUCTION},
                        {"role": "user", "content": prompt},
                    ],
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"AI gateway request failed: {e}")
            raise UpstreamError(f"AI analysis failed: {e}") from e

        if response.status_code == 429:
            raise RateLimitedError()
        if response.status_code == 402:
            raise CreditsExhaustedError()
        if not response.ok:
            logger.error(f"AI gateway error: {response.status_code} {response.text}")
            raise UpstreamError("AI analysis failed")

        try:
            data = response.json()
            return data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise UpstreamError(f"Unexpected AI gateway response: {e}") from e

    def analyze(self, payload: Any) -> Dict[str, Any]:
        """
        Run the full relay for a ``{product, priceHistory, reviews}`` payload.

        Returns:
            ``{worthBuyingScore, summary, detailedRecommendation, analysisText}``
        """
        if not isinstance(payload, dict) or not isinstance(payload.get("product"), dict):
            raise ValidationError("Request body must contain a product object")
        product = payload["product"]
        price_history = payload.get("priceHistory") or []
        reviews = payload.get("reviews") or []
        if not isinstance(price_history, list) or not isinstance(reviews, list):
            raise ValidationError("priceHistory and reviews must be lists")

        stats = compute_gateway_statistics(product, price_history)
        prompt = build_prompt(product, stats, reviews)
        analysis_text = self.request_completion(prompt)
        summary, detailed = parse_analysis_text(analysis_text)

        logger.info(
            f"AI analysis for {product.get('name', 'unknown')}: "
            f"score {stats['worth_buying_score']}"
        )
        return {
            "worthBuyingScore": stats["worth_buying_score"],
            "summary": summary,
            "detailedRecommendation": detailed,
            "analysisText": analysis_text,
        }
