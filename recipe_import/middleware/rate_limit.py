"""Rate limiting using slowapi."""

from fastapi import Request
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address

from recipe_import.config import settings


def get_client_key(request) -> str:
    """
    Rate limit key: the forwarded client address behind a proxy, else the peer address.

    Handles both Request objects and raw ASGI scope dicts.
    """
    if isinstance(request, dict):
        headers = {}
        for key, value in request.get("headers", []):
            key = key.decode("latin-1").lower() if isinstance(key, bytes) else str(key).lower()
            value = value.decode("latin-1") if isinstance(value, bytes) else str(value)
            headers[key] = value
        forwarded = headers.get("x-forwarded-for", "")
        client = request.get("client")
        remote_address = client[0] if client else "unknown"
    else:
        forwarded = request.headers.get("X-Forwarded-For", "")
        remote_address = get_remote_address(request)
    return forwarded.split(",")[0].strip() or remote_address


limiter = Limiter(
    key_func=get_client_key,
    default_limits=[f"{settings.rate_limit_per_hour}/hour"],
    storage_uri="memory://",
)


def get_rate_limit_exceeded_handler():
    """Get rate limit exceeded handler."""
    return _rate_limit_exceeded_handler


def rate_limit_dependency(request: Request) -> None:
    """
    Rate limit dependency for FastAPI routes.

    Raises:
        RateLimitExceeded: If rate limit is exceeded
    """
    # slowapi only exposes the check through this helper when its middleware is not installed
    try:
        limiter._check_request_limit(request, endpoint_func=None)
    except (AttributeError, TypeError):
        limiter._check_request_limit(request.scope, endpoint_func=None)
