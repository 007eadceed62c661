"""Bearer token handling for the identity provider adapter.

Principals are authenticated upstream; this module only verifies the JWT
the provider issued and extracts the principal id from its ``sub`` claim.
"""

from datetime import UTC, datetime, timedelta
from uuid import UUID

import jwt
from jwt import exceptions as jwt_exceptions

from tenancy.core.config import get_settings

settings = get_settings()


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Create a JWT access token.

    Used by development tooling and tests to mint tokens the way the
    identity provider would.

    Args:
        data: Dictionary of claims to encode in the token
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(UTC) + expires_delta
    else:
        expire = datetime.now(UTC) + timedelta(minutes=settings.jwt_access_token_expire_minutes)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    return encoded_jwt


def decode_token(token: str) -> dict | None:
    """Decode and validate a JWT token.

    Args:
        token: JWT token string to decode

    Returns:
        Decoded token payload if valid, None otherwise
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        return payload
    except jwt_exceptions.PyJWTError:
        return None


def principal_id_from_token(token: str | None) -> UUID | None:
    """Return the verified principal id carried by a bearer token, if any."""
    if not token:
        return None

    payload = decode_token(token)
    if not payload:
        return None

    subject = payload.get("sub")
    if not subject:
        return None

    try:
        return UUID(str(subject))
    except ValueError:
        return None
