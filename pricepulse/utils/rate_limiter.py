"""
Rate Limiter for PricePulse
Sliding-window limit per client IP, applied to the AI analysis proxy.
"""
import time
import threading
from typing import Dict, List, Optional
from functools import wraps
from flask import current_app, request, jsonify, make_response


class RateLimiter:
    """Thread-safe rate limiter using sliding window algorithm."""

    def __init__(self, requests_per_minute: int = 10, window_seconds: int = 60):
        self.requests_per_minute = requests_per_minute
        self._window_seconds = window_seconds
        self._requests: Dict[str, List[float]] = {}
        self._lock = threading.RLock()

    def _prune(self, client_id: str, now: float) -> List[float]:
        window_start = now - self._window_seconds
        timestamps = [ts for ts in self._requests.get(client_id, ()) if ts > window_start]
        if timestamps:
            self._requests[client_id] = timestamps
        else:
            # Forget idle clients
            self._requests.pop(client_id, None)
        return timestamps

    def is_allowed(self, client_id: str) -> bool:
        """Record a request and return False if the client is over the limit."""
        with self._lock:
            now = time.time()
            timestamps = self._prune(client_id, now)
            if len(timestamps) < self.requests_per_minute:
                timestamps.append(now)
                self._requests[client_id] = timestamps
                return True
            return False

    def get_remaining(self, client_id: str) -> int:
        with self._lock:
            timestamps = self._prune(client_id, time.time())
            return max(0, self.requests_per_minute - len(timestamps))

    def get_reset_time(self, client_id: str) -> Optional[float]:
        """Unix time when the oldest request leaves the window, or None."""
        with self._lock:
            timestamps = self._requests.get(client_id)
            if not timestamps:
                return None
            return min(timestamps) + self._window_seconds


def get_rate_limiter() -> RateLimiter:
    """Get or create the rate limiter of the current app."""
    limiter = current_app.extensions.get('pricepulse_rate_limiter')
    if limiter is None:
        limiter = RateLimiter(current_app.config.get('RATE_LIMIT_PER_MINUTE', 10))
        current_app.extensions['pricepulse_rate_limiter'] = limiter
    return limiter


def get_client_ip() -> str:
    """Get the client's IP address from the request."""
    if request.headers.get('X-Forwarded-For'):
        return request.headers.get('X-Forwarded-For').split(',')[0].strip()
    return request.remote_addr or 'unknown'


def rate_limit(func):
    """Decorator to apply rate limiting to an endpoint."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        limiter = get_rate_limiter()
        client_ip = get_client_ip()

        if not limiter.is_allowed(client_ip):
            reset_time = limiter.get_reset_time(client_ip)
            response = jsonify({
                'success': False,
                'error': 'Too many requests. Please try again later.',
                'retry_after': int(reset_time - time.time()) if reset_time else 60
            })
            response.status_code = 429
            response.headers['X-RateLimit-Remaining'] = '0'
            if reset_time:
                response.headers['X-RateLimit-Reset'] = str(int(reset_time))
            return response

        response = make_response(func(*args, **kwargs))
        response.headers['X-RateLimit-Remaining'] = str(limiter.get_remaining(client_ip))
        return response

    return wrapper
