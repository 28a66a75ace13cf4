"""
Tracking Service
Price-drop subscriptions of users.
"""

import logging
from typing import Any, Dict, List

from pricepulse.database import Database
from pricepulse.errors import ProductNotFoundError
from pricepulse.models import TrackingSubscription, UserPreference

logger = logging.getLogger(__name__)


class TrackingService:
    """Service class for tracking and un-tracking products."""

    def __init__(self, db: Database):
        self.db = db

    def track(
        self,
        user_id: str,
        product_id: int,
        target_price: float = 0.0,
        notify_on_drop: bool = True,
    ) -> Dict[str, Any]:
        """
        Subscribe a user to a product, then record interest in its category.

        The preference upsert runs after the subscription is stored; if it
        fails the subscription stays and ``preference_recorded`` is False.

        Raises:
            ProductNotFoundError: unknown product
            AlreadyTrackedError: the user already tracks the product
        """
        product = self.db.get_product_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)

        subscription = self.db.add_tracking(TrackingSubscription(
            user_id=user_id,
            product_id=product_id,
            target_price=target_price,
            notify_on_drop=notify_on_drop,
        ))
        logger.info(f"User {user_id} is now tracking product {product_id}")

        preference_recorded = False
        if product.category:
            try:
                self.db.upsert_preference(UserPreference(
                    user_id=user_id,
                    category=product.category,
                ))
                preference_recorded = True
            except Exception as e:
                logger.error(f"Failed to record preference for user {user_id}: {e}")

        return {
            'subscription': subscription.to_dict(),
            'preference_recorded': preference_recorded,
        }

    def untrack(self, user_id: str, product_id: int) -> bool:
        """Remove a subscription. Returns False if the user was not tracking it."""
        removed = self.db.delete_tracking(user_id, product_id)
        if removed:
            logger.info(f"User {user_id} stopped tracking product {product_id}")
        return removed

    def is_tracked(self, user_id: str, product_id: int) -> bool:
        return self.db.get_tracking(user_id, product_id) is not None

    def list_tracked(self, user_id: str) -> List[Dict[str, Any]]:
        """Subscriptions of a user with the product's current price."""
        items = []
        for row in self.db.get_tracked_products(user_id):
            subscription = TrackingSubscription.from_dict(row)
            item = subscription.to_dict()
            item['product_name'] = row['product_name']
            item['current_price'] = row['current_price']
            item['target_reached'] = subscription.target_reached(row['current_price'])
            items.append(item)
        return items
