"""
Error handlers and exceptions for PricePulse
"""
from flask import jsonify


def register_error_handlers(app):
    """Register error handlers with the Flask app."""

    @app.errorhandler(PricePulseError)
    def pricepulse_error(error):
        return jsonify({
            'success': False,
            'error': error.title,
            'message': error.message
        }), error.status_code

    @app.errorhandler(400)
    def bad_request(error):
        return jsonify({
            'success': False,
            'error': 'Bad Request',
            'message': str(error.description) if hasattr(error, 'description') else 'Invalid request'
        }), 400

    @app.errorhandler(401)
    def unauthorized(error):
        return jsonify({
            'success': False,
            'error': 'Unauthorized',
            'message': 'Authentication is required for this endpoint'
        }), 401

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({
            'success': False,
            'error': 'Not Found',
            'message': 'The requested resource was not found'
        }), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({
            'success': False,
            'error': 'Method Not Allowed',
            'message': 'The method is not allowed for this endpoint'
        }), 405

    @app.errorhandler(429)
    def rate_limit_exceeded(error):
        return jsonify({
            'success': False,
            'error': 'Rate Limit Exceeded',
            'message': 'Too many requests. Please try again later.'
        }), 429

    @app.errorhandler(500)
    def internal_server_error(error):
        return jsonify({
            'success': False,
            'error': 'Internal Server Error',
            'message': 'An unexpected error occurred'
        }), 500


class PricePulseError(Exception):
    """Base exception for errors reported to API callers."""

    title = 'Internal Server Error'

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class ValidationError(PricePulseError):
    """Raised when request input is malformed."""

    title = 'Bad Request'

    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class AuthenticationRequiredError(PricePulseError):
    """Raised when an endpoint needs a signed-in user."""

    title = 'Unauthorized'

    def __init__(self, message: str = 'Please sign in to continue'):
        super().__init__(message, status_code=401)


class ProductNotFoundError(PricePulseError):
    """Raised when a product id does not exist."""

    title = 'Not Found'

    def __init__(self, product_id):
        super().__init__(f"Product with ID {product_id} not found", status_code=404)


class AlreadyTrackedError(PricePulseError):
    """Raised when a user tracks the same product twice."""

    title = 'Conflict'

    def __init__(self, user_id: str, product_id: int):
        message = f"Product {product_id} is already tracked by user {user_id}"
        super().__init__(message, status_code=409)


class UpstreamError(PricePulseError):
    """Base exception for language-model gateway failures."""

    title = 'Upstream Error'


class RateLimitedError(UpstreamError):
    """The gateway answered 429."""

    def __init__(self):
        super().__init__('Rate limit exceeded. Please try again later.', status_code=429)


class CreditsExhaustedError(UpstreamError):
    """The gateway answered 402."""

    def __init__(self):
        super().__init__('AI credits exhausted. Please add credits to continue.', status_code=402)


class ConfigurationError(UpstreamError):
    """A required setting such as the gateway credential is missing."""

    def __init__(self, setting: str):
        super().__init__(f"{setting} is not configured", status_code=500)
