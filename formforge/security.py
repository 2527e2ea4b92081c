"""
Rate limiting and response hardening for the public form endpoints.
"""

from flask_limiter import Limiter
from flask_limiter.util import get_remote_address


limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["1000 per day", "200 per hour"]
)


# Rate limit configurations
RATE_LIMITS = {
    'answer': "30 per minute",
    'fetch_submission': "60 per minute",
    'payment_amount': "30 per minute",
    'save_properties': "60 per minute",
}


def rate_limit(endpoint: str):
    """Decorator applying the configured limit of an endpoint."""
    return limiter.limit(RATE_LIMITS[endpoint])


def add_security_headers(response):
    """Add security headers to every JSON response."""
    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['X-Frame-Options'] = 'DENY'
    response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
    response.headers['Cache-Control'] = 'no-store'
    return response


def init_security(app):
    """Initialize security extensions with the app."""
    limiter.init_app(app)
