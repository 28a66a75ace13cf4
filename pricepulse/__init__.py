"""
PricePulse - Flask Application Factory
Price tracking, reviews and worth-buying analysis API.
"""

import logging
from flask import Flask
from pricepulse.config import Config

__version__ = "0.1.0"


def configure_logging(app: Flask) -> None:
    """Configure structured logging."""
    log_level = logging.DEBUG if app.debug else logging.INFO

    # Configure root logger
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    app.logger.setLevel(log_level)

    # Reduce noise from third-party libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)
    logging.getLogger("transformers").setLevel(logging.WARNING)


def create_app(config_class=Config):
    """Application factory pattern for creating Flask app instances."""
    app = Flask(__name__)
    app.config.from_object(config_class)

    configure_logging(app)

    # Enable CORS for the web client
    @app.after_request
    def add_cors_headers(response):
        response.headers['Access-Control-Allow-Origin'] = '*'
        response.headers['Access-Control-Allow-Headers'] = (
            'authorization, x-client-info, apikey, content-type, x-user-id'
        )
        response.headers['Access-Control-Allow-Methods'] = 'GET, POST, DELETE, OPTIONS'
        return response

    # Register blueprints
    from pricepulse.api import api_bp

    app.register_blueprint(api_bp, url_prefix="/api/v1")

    # Register error handlers
    from pricepulse.errors import register_error_handlers

    register_error_handlers(app)

    @app.route("/health")
    def health_check():
        return {
            "status": "healthy",
            "service": "pricepulse",
            "version": __version__,
        }

    @app.route("/")
    def index():
        return {
            "service": "PricePulse API",
            "version": __version__,
            "description": "Product price tracking, reviews and buying advice",
            "endpoints": {
                "health": "/health",
                "products": "/api/v1/products?q={query}&category={category}",
                "product": "/api/v1/products/{id}",
                "prices": "/api/v1/products/{id}/prices",
                "statistics": "/api/v1/products/{id}/statistics",
                "reviews": "/api/v1/products/{id}/reviews",
                "sentiment": "/api/v1/products/{id}/sentiment",
                "analysis": "/api/v1/products/{id}/analysis",
                "track": "/api/v1/products/{id}/track",
                "tracked": "/api/v1/tracked",
                "ai_analysis": "/api/v1/analyze-product-ai",
            },
        }

    app.logger.info("PricePulse initialized successfully")
    return app
