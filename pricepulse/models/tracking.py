"""
Tracking Models
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class TrackingSubscription:
    """A user's price-drop subscription. Unique per (user_id, product_id)."""

    user_id: str = ""
    product_id: int = 0
    target_price: float = 0.0
    notify_on_drop: bool = True
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        created_at = self.created_at
        if isinstance(created_at, datetime):
            created_at = created_at.isoformat()
        return {
            'id': self.id,
            'user_id': self.user_id,
            'product_id': self.product_id,
            'target_price': self.target_price,
            'notify_on_drop': self.notify_on_drop,
            'created_at': created_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'TrackingSubscription':
        return cls(
            id=data.get('id'),
            user_id=data.get('user_id', ''),
            product_id=data.get('product_id', 0),
            target_price=float(data.get('target_price') or 0.0),
            notify_on_drop=bool(data.get('notify_on_drop', True)),
            created_at=data.get('created_at'),
        )

    def target_reached(self, current_price: float) -> bool:
        """True once the price is at or below a positive target."""
        return self.target_price > 0 and current_price <= self.target_price


@dataclass
class UserPreference:
    """Category interest recorded when a user tracks a product."""

    user_id: str = ""
    category: str = ""
    interest_score: int = 1

    def to_dict(self) -> dict:
        return {
            'user_id': self.user_id,
            'category': self.category,
            'interest_score': self.interest_score,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'UserPreference':
        return cls(
            user_id=data.get('user_id', ''),
            category=data.get('category', ''),
            interest_score=int(data.get('interest_score') or 1),
        )
