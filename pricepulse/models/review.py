"""
Review Model
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

MIN_RATING = 1
MAX_RATING = 5


@dataclass
class Review:
    """A customer review of a product."""

    id: Optional[int] = None
    product_id: int = 0
    user_name: str = ""
    rating: int = 3
    review_text: str = ""
    helpful_count: int = 0
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        created_at = self.created_at
        if isinstance(created_at, datetime):
            created_at = created_at.isoformat()
        return {
            'id': self.id,
            'product_id': self.product_id,
            'user_name': self.user_name,
            'rating': self.rating,
            'review_text': self.review_text,
            'helpful_count': self.helpful_count,
            'created_at': created_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Review':
        return cls(
            id=data.get('id'),
            product_id=data.get('product_id', 0),
            user_name=data.get('user_name', ''),
            rating=int(data.get('rating', 3)),
            review_text=data.get('review_text', ''),
            helpful_count=data.get('helpful_count') or 0,
            created_at=data.get('created_at'),
        )


def average_rating(reviews, default: float = 3.0) -> float:
    """Mean star rating of the given reviews, or ``default`` when there are none."""
    if not reviews:
        return default
    return sum(review.rating for review in reviews) / len(reviews)
