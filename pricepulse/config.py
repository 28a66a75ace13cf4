"""
Configuration settings for PricePulse
"""

import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Base configuration class."""

    SECRET_KEY = os.environ.get("SECRET_KEY") or "dev-secret-key-change-in-production"
    DEBUG = False
    TESTING = False

    # Database configuration
    DATABASE_URL = os.environ.get("DATABASE_URL") or "sqlite:///pricepulse.db"

    # Hosted language-model gateway (chat completions)
    AI_GATEWAY_URL = os.environ.get(
        "AI_GATEWAY_URL", "https://ai.gateway.lovable.dev/v1/chat/completions"
    )
    AI_GATEWAY_API_KEY = os.environ.get("AI_GATEWAY_API_KEY")
    AI_MODEL = os.environ.get("AI_MODEL", "google/gemini-2.5-flash")
    AI_REQUEST_TIMEOUT = int(os.environ.get("AI_REQUEST_TIMEOUT", 30))

    # Sentiment classifier (loaded lazily on first use)
    SENTIMENT_MODEL = os.environ.get(
        "SENTIMENT_MODEL", "nlptown/bert-base-multilingual-uncased-sentiment"
    )
    SENTIMENT_MAX_REVIEWS = int(os.environ.get("SENTIMENT_MAX_REVIEWS", 20))

    # Rate limiting for the AI proxy (requests/min per IP)
    RATE_LIMIT_PER_MINUTE = int(os.environ.get("RATE_LIMIT_PER_MINUTE", 10))

    # Cache settings (sentiment summaries)
    CACHE_TTL_SECONDS = int(os.environ.get("CACHE_TTL_SECONDS", 300))
    CACHE_MAX_SIZE = int(os.environ.get("CACHE_MAX_SIZE", 100))

    # Pagination defaults
    DEFAULT_PAGE_SIZE = int(os.environ.get("DEFAULT_PAGE_SIZE", 20))
    MAX_PAGE_SIZE = int(os.environ.get("MAX_PAGE_SIZE", 100))
    SIMILAR_PRODUCTS_LIMIT = 4

    # Worth-buying score weights
    SCORING_REVIEW_BONUS = float(os.environ.get("SCORING_REVIEW_BONUS", 15.0))
    SCORING_FALLING_TREND_BONUS = float(os.environ.get("SCORING_FALLING_TREND_BONUS", 10.0))
    SCORING_RISING_TREND_PENALTY = float(os.environ.get("SCORING_RISING_TREND_PENALTY", 5.0))
    SCORING_MIN_SCORE = int(os.environ.get("SCORING_MIN_SCORE", 5))
    SCORING_MAX_SCORE = int(os.environ.get("SCORING_MAX_SCORE", 95))
    SCORING_TREND_WINDOW = int(os.environ.get("SCORING_TREND_WINDOW", 14))


class DevelopmentConfig(Config):
    """Development configuration."""

    DEBUG = True


class ProductionConfig(Config):
    """Production configuration."""

    DEBUG = False


class TestingConfig(Config):
    """Testing configuration."""

    TESTING = True
    DEBUG = True
    DATABASE_URL = "sqlite:///:memory:"
    AI_GATEWAY_API_KEY = "test-key"
    RATE_LIMIT_PER_MINUTE = 1000


config = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
    "default": DevelopmentConfig,
}
