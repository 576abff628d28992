from dataclasses import dataclass

from jose import JWTError, jwt

from shared.config.settings import get_settings


@dataclass(frozen=True)
class AuthenticatedIdentity:
    id: str
    role: str | None = None


def verify_access_token(token: str) -> dict | None:
    """Decodes and verifies the JWT. Returns payload if valid, None if invalid/expired."""
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def authenticate(token: str | None) -> AuthenticatedIdentity | None:
    """Turns a bearer token into an identity, or None if it does not verify."""
    if not token:
        return None
    payload = verify_access_token(token)
    if payload is None:
        return None

    # Tokens from the user service carry "id"; standard issuers use "sub"
    user_id = payload.get("id")
    if user_id is None:
        user_id = payload.get("sub")
    if user_id is None:
        return None
    return AuthenticatedIdentity(id=str(user_id), role=payload.get("role"))


def require_role(identity: AuthenticatedIdentity | None, role: str) -> bool:
    return identity is not None and identity.role == role
