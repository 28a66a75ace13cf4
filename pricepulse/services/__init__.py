"""
Services module for PricePulse
"""
from pricepulse.services.ai_analysis import RemoteAnalysisService
from pricepulse.services.analysis_service import ProductAnalysisService
from pricepulse.services.sentiment_service import SentimentService
from pricepulse.services.tracking_service import TrackingService

__all__ = [
    'RemoteAnalysisService',
    'ProductAnalysisService',
    'SentimentService',
    'TrackingService',
]
