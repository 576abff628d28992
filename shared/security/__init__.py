from .jwt_handler import AuthenticatedIdentity, authenticate, require_role, verify_access_token
from .dependencies import RequestContext, get_current_user, get_request_context, require_admin
from .rate_limiter import create_order_limit, limiter, user_id_or_ip

__all__ = [
    "AuthenticatedIdentity",
    "authenticate",
    "require_role",
    "verify_access_token",
    "RequestContext",
    "get_current_user",
    "get_request_context",
    "require_admin",
    "create_order_limit",
    "limiter",
    "user_id_or_ip"
]
