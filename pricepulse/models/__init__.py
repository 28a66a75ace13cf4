"""
Models module for PricePulse
"""
from pricepulse.models.product import Product, ProductStore
from pricepulse.models.price_history import PricePoint
from pricepulse.models.review import Review, average_rating
from pricepulse.models.tracking import TrackingSubscription, UserPreference
from pricepulse.models.analysis import AnalysisResult

__all__ = [
    'Product',
    'ProductStore',
    'PricePoint',
    'Review',
    'average_rating',
    'TrackingSubscription',
    'UserPreference',
    'AnalysisResult',
]
