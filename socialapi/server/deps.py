"""Dependency injection for FastAPI routes.

Bearer tokens are verified locally with the shared secret. Post routes use the
``userId`` claim as the caller's identity; tweet and auth routes use the
subject (username).
"""
from __future__ import annotations

import logging
from typing import Callable, Optional, Tuple

from fastapi import Depends, Header, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from socialapi.db import auth_db, post_db, tweet_db
from socialapi.server.security import TokenClaims, TokenVerificationError, decode_token
from socialapi.server.settings import settings

logger = logging.getLogger(__name__)

# auto_error=False so a missing header yields 401 instead of FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)

get_auth_session = auth_db.session
get_post_session = post_db.session
get_tweet_session = tweet_db.session


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_token_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> TokenClaims:
    """Verify the bearer token and return its claims.

    Raises:
        HTTPException: 401 - missing, malformed, expired or forged token
    """
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Not authenticated")

    try:
        return decode_token(credentials.credentials)
    except TokenVerificationError as exc:
        logger.warning("JWT verification failed: %s", exc)
        raise _unauthorized("Invalid or expired token") from exc


def get_current_user_id(claims: TokenClaims = Depends(get_token_claims)) -> str:
    if not claims.user_id:
        logger.error("JWT payload missing user identifier for subject %s", claims.sub)
        raise _unauthorized("Token missing user identifier")
    return claims.user_id


def get_current_username(claims: TokenClaims = Depends(get_token_claims)) -> str:
    return claims.sub


def get_authorization_header(authorization: Optional[str] = Header(default=None)) -> Optional[str]:
    """Raw ``Authorization`` header, forwarded to the user service."""
    return authorization


def pagination(default_size: Optional[int] = None) -> Callable[..., Tuple[int, int]]:
    """Build a ``(page, size)`` dependency; ``page`` is zero-based."""
    default = default_size or settings.DEFAULT_PAGE_SIZE

    def _pagination(
        page: int = Query(0, ge=0, description="Page number (0-based)"),
        size: int = Query(default, ge=1, le=settings.MAX_PAGE_SIZE, description="Page size"),
    ) -> Tuple[int, int]:
        return page, size

    return _pagination
