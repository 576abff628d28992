from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request

from shared.config.settings import get_settings
from .jwt_handler import authenticate


def user_id_or_ip(request: Request) -> str:
    """
    Key function for SlowAPI.
    Uses the verified user id from the Authorization header when present,
    otherwise the client's IP address.
    """
    auth_header = request.headers.get("Authorization")

    if auth_header and auth_header.startswith("Bearer "):
        identity = authenticate(auth_header.split(" ", 1)[1])
        if identity is not None:
            return f"user:{identity.id}"

    return f"ip:{get_remote_address(request)}"


def create_order_limit() -> str:
    return get_settings().create_order_rate_limit


limiter = Limiter(key_func=user_id_or_ip)
