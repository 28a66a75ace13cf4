"""
Product Models
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class Product:
    """A product with its current price and source store."""

    id: Optional[int] = None
    name: str = ""
    description: Optional[str] = None
    category: Optional[str] = None
    current_price: float = 0.0
    currency: str = "INR"
    image_url: Optional[str] = None
    source_url: Optional[str] = None
    store_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        """Convert product to dictionary."""
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'category': self.category,
            'current_price': self.current_price,
            'currency': self.currency,
            'image_url': self.image_url,
            'source_url': self.source_url,
            'store_name': self.store_name,
            'created_at': _isoformat(self.created_at),
            'updated_at': _isoformat(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Product':
        """Create a Product instance from a dictionary."""
        return cls(
            id=data.get('id'),
            name=data.get('name', ''),
            description=data.get('description'),
            category=data.get('category'),
            current_price=float(data.get('current_price') or 0.0),
            currency=data.get('currency') or 'INR',
            image_url=data.get('image_url'),
            source_url=data.get('source_url'),
            store_name=data.get('store_name'),
            created_at=data.get('created_at'),
            updated_at=data.get('updated_at'),
        )


@dataclass
class ProductStore:
    """Price of a product at one store."""

    id: Optional[int] = None
    product_id: int = 0
    store_name: str = ""
    price: float = 0.0
    store_url: str = ""
    last_updated: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'product_id': self.product_id,
            'store_name': self.store_name,
            'price': self.price,
            'store_url': self.store_url,
            'last_updated': _isoformat(self.last_updated),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'ProductStore':
        return cls(
            id=data.get('id'),
            product_id=data.get('product_id', 0),
            store_name=data.get('store_name', ''),
            price=float(data.get('price') or 0.0),
            store_url=data.get('store_url', ''),
            last_updated=data.get('last_updated'),
        )


def _isoformat(value):
    """Render datetimes as ISO strings; sqlite already hands back strings."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)
