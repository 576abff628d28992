from dataclasses import dataclass

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from shared.errors import Forbidden, Unauthorized
from .jwt_handler import AuthenticatedIdentity, authenticate, require_role

ADMIN_ROLE = "admin"

# Defines the expected header format (Bearer <token>); a missing header is not an error here
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class RequestContext:
    """Identity and the raw token it was verified from. Both are None for anonymous callers."""
    identity: AuthenticatedIdentity | None = None
    token: str | None = None


async def get_request_context(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> RequestContext:
    """Dependency that verifies the bearer token, falling back to an anonymous context."""
    if credentials is None:
        return RequestContext()

    identity = authenticate(credentials.credentials)
    if identity is None:
        return RequestContext()

    # Store in request state for downstream use (like rate limiting)
    request.state.user_id = identity.id
    return RequestContext(identity=identity, token=credentials.credentials)


async def get_current_user(context: RequestContext = Depends(get_request_context)) -> AuthenticatedIdentity:
    """Dependency for operations open to any authenticated caller."""
    if context.identity is None:
        raise Unauthorized()
    return context.identity


async def require_admin(context: RequestContext = Depends(get_request_context)) -> AuthenticatedIdentity:
    """Dependency for administrative mutations."""
    if context.identity is None:
        raise Unauthorized()
    if not require_role(context.identity, ADMIN_ROLE):
        raise Forbidden()
    return context.identity
