"""
API Routes for PricePulse
- GET /products - Browse and search products
- GET /products/{id} - Product detail with history, stores and analysis
- GET/POST /products/{id}/reviews - Read and submit reviews
- GET /products/{id}/sentiment - Aggregated review sentiment
- GET/POST /products/{id}/analysis - Worth-buying analysis
- POST/DELETE /products/{id}/track - Price-drop tracking
- POST /analyze-product-ai - Language-model analysis proxy
"""

import logging

from flask import current_app, jsonify, request

from pricepulse.analysis.scoring import ScoringWeights
from pricepulse.api import api_bp
from pricepulse.database import get_db
from pricepulse.errors import (
    AuthenticationRequiredError,
    PricePulseError,
    ProductNotFoundError,
    ValidationError,
)
from pricepulse.models import Review
from pricepulse.services.ai_analysis import RemoteAnalysisService
from pricepulse.services.analysis_service import ProductAnalysisService
from pricepulse.services.sentiment_service import SentimentService, get_sentiment_analyzer
from pricepulse.services.tracking_service import TrackingService
from pricepulse.utils.cache import get_cache
from pricepulse.utils.rate_limiter import rate_limit
from pricepulse.utils.validators import (
    parse_notify_on_drop,
    parse_page_args,
    parse_rating,
    parse_review_text,
    parse_target_price,
    parse_user_name,
)

logger = logging.getLogger(__name__)


def _current_user_id():
    """User id set by the authentication proxy, or None for anonymous calls."""
    user_id = request.headers.get("X-User-Id", "").strip()
    return user_id or None


def _require_user_id() -> str:
    user_id = _current_user_id()
    if not user_id:
        raise AuthenticationRequiredError()
    return user_id


def _require_product(product_id: int):
    product = get_db().get_product_by_id(product_id)
    if product is None:
        raise ProductNotFoundError(product_id)
    return product


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _analysis_service() -> ProductAnalysisService:
    return ProductAnalysisService(get_db(), ScoringWeights.from_config(current_app.config))


def _sentiment_service() -> SentimentService:
    return SentimentService(
        get_db(),
        get_sentiment_analyzer(),
        cache=get_cache(),
        max_reviews=current_app.config.get("SENTIMENT_MAX_REVIEWS", 20),
    )


@api_bp.route("/products", methods=["GET"])
def list_products():
    """
    Browse products.

    Query Parameters:
        q (optional): Name filter
        category (optional): Exact category
        page (optional): Page number, default 1
        per_page (optional): Results per page, default 20
    """
    page, per_page = parse_page_args(
        request.args,
        current_app.config.get("DEFAULT_PAGE_SIZE", 20),
        current_app.config.get("MAX_PAGE_SIZE", 100),
    )
    query = request.args.get("q", "").strip()
    category = request.args.get("category", "").strip() or None

    result = get_db().search_products(query, category, page, per_page)
    result["products"] = [product.to_dict() for product in result["products"]]
    return jsonify({"success": True, "data": result}), 200


@api_bp.route("/products/<int:product_id>", methods=["GET"])
def get_product(product_id: int):
    """
    Product detail with price history, store prices, cached analysis and,
    for signed-in users, whether the product is tracked.
    """
    db = get_db()
    product = _require_product(product_id)

    data = product.to_dict()
    data["price_history"] = [point.to_dict() for point in db.get_price_history(product_id)]
    data["stores"] = [store.to_dict() for store in db.get_product_stores(product_id)]
    analysis = db.get_analysis(product_id)
    data["analysis"] = analysis.to_dict() if analysis else None

    user_id = _current_user_id()
    if user_id:
        data["is_tracked"] = TrackingService(db).is_tracked(user_id, product_id)

    return jsonify({"success": True, "data": data}), 200


@api_bp.route("/products/<int:product_id>/prices", methods=["GET"])
def get_price_history(product_id: int):
    """Price history of a product, oldest first."""
    db = get_db()
    _require_product(product_id)
    prices = [point.to_dict() for point in db.get_price_history(product_id)]
    return jsonify({"success": True, "data": {"product_id": product_id, "prices": prices}}), 200


@api_bp.route("/products/<int:product_id>/statistics", methods=["GET"])
def get_price_statistics(product_id: int):
    """Lowest/highest/average, volatility and trend slope of the history."""
    data = _analysis_service().get_statistics(product_id)
    return jsonify({"success": True, "data": data}), 200


@api_bp.route("/products/<int:product_id>/similar", methods=["GET"])
def get_similar_products(product_id: int):
    """Other products in the same category."""
    db = get_db()
    product = _require_product(product_id)
    limit = current_app.config.get("SIMILAR_PRODUCTS_LIMIT", 4)
    similar = [p.to_dict() for p in db.get_similar_products(product, limit)]
    return jsonify({"success": True, "data": similar}), 200


@api_bp.route("/products/<int:product_id>/stores", methods=["GET"])
def get_product_stores(product_id: int):
    """Store prices of a product, cheapest first."""
    db = get_db()
    _require_product(product_id)
    stores = [store.to_dict() for store in db.get_product_stores(product_id)]
    return jsonify({"success": True, "data": stores}), 200


@api_bp.route("/products/<int:product_id>/reviews", methods=["GET"])
def get_reviews(product_id: int):
    """Reviews of a product, newest first."""
    db = get_db()
    _require_product(product_id)
    reviews = [review.to_dict() for review in db.get_reviews(product_id)]
    return jsonify({"success": True, "data": reviews}), 200


@api_bp.route("/products/<int:product_id>/reviews", methods=["POST"])
def submit_review(product_id: int):
    """
    Submit a review. Requires a signed-in user (X-User-Id).

    Request Body:
        {
            "user_name": "Asha",
            "rating": 4,
            "review_text": "Good battery life"
        }
    """
    _require_user_id()
    db = get_db()
    _require_product(product_id)
    data = _json_body()

    review = Review(
        product_id=product_id,
        user_name=parse_user_name(data.get("user_name")),
        rating=parse_rating(data.get("rating")),
        review_text=parse_review_text(data.get("review_text")),
    )
    review = db.add_review(review)
    _sentiment_service().invalidate(product_id)
    logger.info(f"New {review.rating}-star review for product {product_id}")

    return jsonify({"success": True, "data": review.to_dict()}), 201


@api_bp.route("/products/<int:product_id>/sentiment", methods=["GET"])
def get_review_sentiment(product_id: int):
    """Aggregated sentiment of the latest reviews."""
    try:
        data = _sentiment_service().product_sentiment(product_id)
    except PricePulseError:
        raise
    except Exception as e:
        logger.error(f"Sentiment analysis error: {e}")
        return (
            jsonify(
                {"success": False, "error": "Internal Server Error", "message": str(e)}
            ),
            500,
        )
    return jsonify({"success": True, "data": data}), 200


@api_bp.route("/products/<int:product_id>/analysis", methods=["GET"])
def get_analysis(product_id: int):
    """The stored worth-buying analysis, if any."""
    analysis = _analysis_service().get_analysis(product_id)
    if analysis is None:
        return (
            jsonify(
                {
                    "success": False,
                    "error": "Not Found",
                    "message": f"Product {product_id} has not been analyzed yet",
                }
            ),
            404,
        )
    return jsonify({"success": True, "data": analysis.to_dict()}), 200


@api_bp.route("/products/<int:product_id>/analysis", methods=["POST"])
def analyze_product(product_id: int):
    """Recompute the worth-buying analysis and overwrite the stored one."""
    data = _analysis_service().analyze_product(product_id)
    return jsonify({"success": True, "data": data}), 200


@api_bp.route("/products/<int:product_id>/track", methods=["POST"])
def track_product(product_id: int):
    """
    Track a product for price drops.

    Request Body (optional):
        {
            "target_price": 1499,
            "notify_on_drop": true
        }
    """
    user_id = _require_user_id()
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")

    result = TrackingService(get_db()).track(
        user_id,
        product_id,
        target_price=parse_target_price(data.get("target_price")),
        notify_on_drop=parse_notify_on_drop(data.get("notify_on_drop")),
    )
    return jsonify({"success": True, "data": result}), 201


@api_bp.route("/products/<int:product_id>/track", methods=["DELETE"])
def untrack_product(product_id: int):
    """Stop tracking a product."""
    user_id = _require_user_id()
    removed = TrackingService(get_db()).untrack(user_id, product_id)
    if not removed:
        return (
            jsonify(
                {
                    "success": False,
                    "error": "Not Found",
                    "message": f"Product {product_id} is not tracked",
                }
            ),
            404,
        )
    return jsonify({"success": True, "data": {"product_id": product_id, "tracked": False}}), 200


@api_bp.route("/tracked", methods=["GET"])
def list_tracked_products():
    """Products tracked by the signed-in user."""
    user_id = _require_user_id()
    items = TrackingService(get_db()).list_tracked(user_id)
    return jsonify({"success": True, "data": items}), 200


@api_bp.route("/analyze-product-ai", methods=["POST"])
@rate_limit
def analyze_product_ai():
    """
    Language-model analysis proxy.

    Request Body:
        {"product": {...}, "priceHistory": [...], "reviews": [...]}

    Returns:
        {worthBuyingScore, summary, detailedRecommendation, analysisText},
        or {error} with status 400/402/429/500.
    """
    service = RemoteAnalysisService.from_config(current_app.config)
    try:
        result = service.analyze(request.get_json(silent=True))
    except PricePulseError as e:
        if e.status_code >= 500:
            logger.error(f"Analysis error: {e.message}")
        return jsonify({"error": e.message}), e.status_code
    except Exception as e:
        logger.error(f"Analysis error: {e}")
        return jsonify({"error": str(e) or "Failed to analyze product"}), 500
    return jsonify(result), 200


@api_bp.route("/stats", methods=["GET"])
def get_stats():
    """
    Get database and cache statistics.
    """
    db_stats = get_db().get_stats()
    cache_stats = get_cache().stats()
    return (
        jsonify(
            {
                "success": True,
                "data": {
                    "database": db_stats,
                    "cache": cache_stats,
                },
            }
        ),
        200,
    )
