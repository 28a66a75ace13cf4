"""
Price History Model
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class PricePoint:
    """A single recorded price of a product. Rows are append-only."""

    price: float = 0.0
    recorded_at: Optional[datetime] = None
    product_id: int = 0
    id: Optional[int] = None

    def to_dict(self) -> dict:
        """Convert price point to dictionary."""
        recorded_at = self.recorded_at
        if isinstance(recorded_at, datetime):
            recorded_at = recorded_at.isoformat()
        return {
            'id': self.id,
            'product_id': self.product_id,
            'price': self.price,
            'recorded_at': recorded_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'PricePoint':
        """Create a PricePoint from a database row or request payload."""
        return cls(
            id=data.get('id'),
            product_id=data.get('product_id', 0),
            price=float(data.get('price') or 0.0),
            recorded_at=data.get('recorded_at'),
        )
