"""
API Middleware
==============
Rate limiting, session lookup, and request handling middleware.
"""
import time
import hashlib
import threading
from functools import wraps
from collections import defaultdict
from typing import Callable, Optional
from flask import request, jsonify, g

from nyay_sahayak.config import config
from nyay_sahayak.services.session import get_session_registry
from nyay_sahayak.utils.logging import get_logger


class RateLimiter:
    """
    Simple in-memory rate limiter.

    Uses a sliding window approach for rate limiting.
    """

    def __init__(self, requests_per_minute: int = 60):
        self.requests_per_minute = requests_per_minute
        self.requests: dict = defaultdict(list)
        self._lock = threading.Lock()
        self.logger = get_logger().api_logger

    def _get_client_id(self) -> str:
        """Get unique client identifier."""
        # Use X-Forwarded-For if behind proxy
        forwarded = request.headers.get('X-Forwarded-For')
        if forwarded:
            ip = forwarded.split(',')[0].strip()
        else:
            ip = request.remote_addr or 'unknown'

        client = request.headers.get('X-Client-Id', '')

        return hashlib.sha256(f"{ip}:{client}".encode()).hexdigest()[:16]

    def _cleanup_old_requests(self, client_id: str, window_start: float) -> None:
        """Remove requests outside the current window."""
        self.requests[client_id] = [
            ts for ts in self.requests[client_id]
            if ts > window_start
        ]

    def is_allowed(self) -> tuple[bool, dict]:
        """
        Check if request is allowed.

        Returns:
            Tuple of (allowed, info_dict)
        """
        client_id = self._get_client_id()
        current_time = time.time()
        window_start = current_time - 60  # 1 minute window

        with self._lock:
            self._cleanup_old_requests(client_id, window_start)

            request_count = len(self.requests[client_id])
            remaining = max(0, self.requests_per_minute - request_count)

            if request_count >= self.requests_per_minute:
                retry_after = int(self.requests[client_id][0] - window_start + 1)
                self.logger.warning(f"Rate limit exceeded for client {client_id}")
                return False, {
                    'limit': self.requests_per_minute,
                    'remaining': 0,
                    'reset': retry_after
                }

            self.requests[client_id].append(current_time)

        return True, {
            'limit': self.requests_per_minute,
            'remaining': remaining - 1,
            'reset': 60
        }


# Global instance
_rate_limiter: Optional[RateLimiter] = None


def get_rate_limiter() -> RateLimiter:
    """Get rate limiter instance."""
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = RateLimiter(config.security.rate_limit_per_minute)
    return _rate_limiter


def reset_rate_limiter(limiter: RateLimiter = None) -> None:
    """Replace the rate limiter (for testing)."""
    global _rate_limiter
    _rate_limiter = limiter


def rate_limit(f: Callable) -> Callable:
    """Rate limiting decorator."""
    @wraps(f)
    def decorated(*args, **kwargs):
        limiter = get_rate_limiter()
        allowed, info = limiter.is_allowed()

        # Add rate limit headers
        g.rate_limit_info = info

        if not allowed:
            return jsonify({
                'error': 'Rate limit exceeded',
                'retry_after': info['reset']
            }), 429

        return f(*args, **kwargs)

    return decorated


def require_session(f: Callable) -> Callable:
    """Resolve the <session_id> path parameter into g.session."""
    @wraps(f)
    def decorated(session_id: str, *args, **kwargs):
        session = get_session_registry().get(session_id)
        if session is None:
            return jsonify({'error': 'Session not found'}), 404
        g.session = session
        return f(session, *args, **kwargs)

    return decorated


def add_rate_limit_headers(response):
    """Add rate limit headers to response."""
    if hasattr(g, 'rate_limit_info'):
        info = g.rate_limit_info
        response.headers['X-RateLimit-Limit'] = str(info['limit'])
        response.headers['X-RateLimit-Remaining'] = str(info['remaining'])
        response.headers['X-RateLimit-Reset'] = str(info['reset'])
    return response
