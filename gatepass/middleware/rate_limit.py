"""Rate limiting for API protection"""
from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request
from gatepass.config import settings


def get_identifier(request: Request) -> str:
    """
    Get identifier for rate limiting based on authentication

    Priority:
    1. Actor resolved by the auth dependency
    2. Admin key
    3. IP address (for unauthenticated)
    """
    actor = getattr(request.state, "actor", None)
    if actor is not None:
        return f"actor:{actor.sub}"

    admin_key = request.headers.get("x-admin-key")
    if admin_key == settings.ADMIN_API_KEY:
        return "admin:authenticated"

    return get_remote_address(request)


# Create limiter instance
limiter = Limiter(
    key_func=get_identifier,
    default_limits=settings.RATE_LIMIT_DEFAULT,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)
