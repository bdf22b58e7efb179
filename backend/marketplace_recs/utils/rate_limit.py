"""Rate limiting utilities"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request

from ..config import settings


def get_user_rate_limit_key(request: Request) -> str:
    """
    Rate limit key for per-user endpoints

    Uses the user_id path parameter when present, falls back to the client IP.
    """
    user_id = request.path_params.get("user_id")
    if user_id:
        return f"user:{user_id}"

    return get_remote_address(request)


limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["100/minute"],
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window"
)
