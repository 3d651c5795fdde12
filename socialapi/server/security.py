"""Security utilities: password hashing and JWT issue/verify.

Tokens are HS256-signed with the shared ``JWT_SECRET`` so every service can
verify what the auth service issued without a network round trip.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

import jwt
from jwt import InvalidTokenError
from passlib.context import CryptContext
from pydantic import BaseModel, Field

from socialapi.server.settings import settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


class TokenVerificationError(Exception):
    """Raised when a JWT cannot be verified."""


class TokenClaims(BaseModel):
    """Verified JWT payload.

    Attributes:
        sub: subject (username); the tweet service uses it as the principal
        user_id: ``userId`` claim; the post service uses it as the principal
        type: ``access`` or ``refresh``
    """
    sub: str
    user_id: Optional[str] = Field(default=None, alias="userId")
    username: Optional[str] = None
    email: Optional[str] = None
    role: str = "USER"
    type: str = ACCESS_TOKEN_TYPE
    iss: Optional[str] = None
    iat: Optional[int] = None
    exp: int

    class Config:
        populate_by_name = True


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return pwd_context.verify(password, password_hash)
    except ValueError as exc:
        # malformed hash stored in the database
        logger.warning("Password hash verification failed: %s", exc)
        return False


def _encode(payload: Dict[str, Any]) -> str:
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def create_token(
    *,
    user_id: Any,
    username: str,
    email: Optional[str] = None,
    role: str = "USER",
    token_type: str = ACCESS_TOKEN_TYPE,
    expires_in: Optional[int] = None,
) -> str:
    """Sign a token for ``username``.

    Args:
        user_id: numeric or string id, stored as a string ``userId`` claim
        username: becomes the ``sub`` claim
        token_type: ``access`` (default) or ``refresh``
        expires_in: lifetime in seconds; defaults to the configured TTL for
            the token type

    Returns:
        Encoded JWT string
    """
    if expires_in is None:
        expires_in = (
            settings.JWT_REFRESH_EXPIRATION_SECONDS
            if token_type == REFRESH_TOKEN_TYPE
            else settings.JWT_EXPIRATION_SECONDS
        )
    now = int(time.time())
    payload = {
        "sub": username,
        "userId": str(user_id),
        "username": username,
        "email": email,
        "role": role,
        "type": token_type,
        "iss": settings.JWT_ISSUER,
        "iat": now,
        "exp": now + expires_in,
    }
    return _encode(payload)


def decode_token(token: str, *, expected_type: Optional[str] = ACCESS_TOKEN_TYPE) -> TokenClaims:
    """Verify signature, expiry, issuer and token type.

    Raises:
        TokenVerificationError: the token is malformed, expired, signed with
            another key, issued by someone else, or of the wrong type
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            issuer=settings.JWT_ISSUER,
            options={"require": ["exp", "sub"]},
        )
    except InvalidTokenError as exc:
        logger.warning("JWT verification failed: %s", exc)
        raise TokenVerificationError(str(exc)) from exc

    claims = TokenClaims(**payload)
    if expected_type is not None and claims.type != expected_type:
        raise TokenVerificationError(
            f"Expected a {expected_type} token but got a {claims.type} token"
        )
    return claims
