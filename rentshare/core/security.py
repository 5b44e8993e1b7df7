"""Verification of bearer tokens issued by the external auth provider."""

from typing import Any
from uuid import UUID

from jose import JWTError, jwt

from rentshare.config import settings
from rentshare.core.exceptions import AuthenticationError


def verify_token(token: str) -> dict[str, Any]:
    """Verify and decode an access token."""
    options = {"verify_aud": settings.auth_jwt_audience is not None}
    try:
        return jwt.decode(
            token,
            settings.auth_jwt_secret,
            algorithms=[settings.auth_jwt_algorithm],
            audience=settings.auth_jwt_audience,
            options=options,
        )
    except JWTError as e:
        raise AuthenticationError(f"Token validation failed: {str(e)}")


def user_id_from_claims(payload: dict[str, Any]) -> UUID:
    """Extract the subject as a UUID."""
    subject = payload.get("sub")
    if not subject:
        raise AuthenticationError("Invalid token payload")
    try:
        return UUID(str(subject))
    except ValueError:
        raise AuthenticationError("Invalid token subject")


def is_admin(payload: dict[str, Any]) -> bool:
    """Admins carry ``role: admin`` in the provider's app metadata."""
    app_metadata = payload.get("app_metadata") or {}
    return app_metadata.get("role") == "admin" or payload.get("user_role") == "admin"
