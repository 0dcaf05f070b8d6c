"""
Authentication Middleware for the Exper gateway
Picks up the caller's token and makes it available for forwarding to backend services
"""

from functools import wraps
from flask import request, g
import logging

from utils.error_handler import AuthenticationError, handle_error

logger = logging.getLogger(__name__)

AUTH_COOKIE = 'authToken'


def _extract_token():
    auth_header = request.headers.get('Authorization', '')
    if auth_header:
        token = auth_header.replace('Bearer ', '').strip()
        if token:
            return token

    cookie_token = request.cookies.get(AUTH_COOKIE, '').strip()
    return cookie_token or None


def require_auth(f):
    """
    Decorator to require a bearer token or auth cookie for API endpoints
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = _extract_token()
        if not token:
            logger.warning(f"Unauthenticated request to {request.path}")
            return handle_error(AuthenticationError('Authorization required'))

        g.auth_token = token
        return f(*args, **kwargs)

    return decorated_function


def optional_auth(f):
    """
    Decorator for endpoints where auth is optional
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        g.auth_token = _extract_token()
        return f(*args, **kwargs)

    return decorated_function


def get_auth_token():
    """
    Token of the current request, or None
    """
    return g.get('auth_token')
