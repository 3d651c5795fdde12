"""Registration, login and token refresh for the auth service."""
from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from socialapi.models.user import User
from socialapi.repositories.user_repo import user_repo
from socialapi.server.errors import (
    AuthenticationError,
    ConflictError,
    InvalidRequestError,
    NotFoundError,
)
from socialapi.server.schemas import (
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    RegisterRequest,
    UserDto,
)
from socialapi.server.security import (
    REFRESH_TOKEN_TYPE,
    TokenVerificationError,
    create_token,
    decode_token,
    hash_password,
    verify_password,
)
from socialapi.server.settings import settings

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid username or password"


def _issue_tokens(user: User) -> AuthResponse:
    token = create_token(
        user_id=user.id, username=user.username, email=user.email, role=user.role
    )
    refresh_token = create_token(
        user_id=user.id,
        username=user.username,
        email=user.email,
        role=user.role,
        token_type=REFRESH_TOKEN_TYPE,
    )
    return AuthResponse(
        token=token,
        refresh_token=refresh_token,
        expires_in=settings.JWT_EXPIRATION_SECONDS,
        username=user.username,
        email=user.email,
    )


def _is_numeric_id(user_id: str) -> bool:
    # isdigit() also accepts characters such as "²" that int() rejects
    return user_id.isascii() and user_id.isdecimal()


def to_user_dto(user: User) -> UserDto:
    return UserDto(
        id=str(user.id),
        username=user.username,
        display_name=user.display_name,
        status=user.status,
        created_at=user.created_at.isoformat() if user.created_at else None,
    )


class AuthService:

    def register(self, db: Session, request: RegisterRequest) -> AuthResponse:
        if user_repo.exists_by_username(db, request.username):
            raise ConflictError("Username is already taken!")
        if user_repo.exists_by_email(db, request.email):
            raise ConflictError("Email is already in use!")

        user = User(
            username=request.username,
            email=request.email,
            password_hash=hash_password(request.password),
            display_name=request.display_name,
        )
        try:
            user_repo.add(db, user)
            db.commit()
        except IntegrityError as exc:
            # lost a race against a concurrent registration
            db.rollback()
            logger.warning("Registration conflict for %s: %s", request.username, exc.orig)
            raise ConflictError("Username or email is already in use!") from exc

        logger.info("Registered user %s (id=%s)", user.username, user.id)
        return _issue_tokens(user)

    def login(self, db: Session, request: LoginRequest) -> AuthResponse:
        user = user_repo.get_by_username(db, request.username)
        if user is None or not verify_password(request.password, user.password_hash):
            logger.warning("Failed login attempt for %s", request.username)
            raise AuthenticationError(INVALID_CREDENTIALS)

        logger.info("User %s logged in", user.username)
        return _issue_tokens(user)

    def refresh(self, db: Session, refresh_token: str) -> AuthResponse:
        """Exchange a refresh token for a new token pair."""
        try:
            claims = decode_token(refresh_token, expected_type=REFRESH_TOKEN_TYPE)
        except TokenVerificationError as exc:
            raise AuthenticationError("Invalid or expired refresh token") from exc

        user = user_repo.get_by_username(db, claims.sub)
        if user is None:
            raise AuthenticationError("Invalid or expired refresh token")
        return _issue_tokens(user)

    def get_current_user(self, db: Session, username: str) -> User:
        user = user_repo.get_by_username(db, username)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def change_password(self, db: Session, username: str, request: ChangePasswordRequest) -> None:
        user = self.get_current_user(db, username)
        if not verify_password(request.current_password, user.password_hash):
            raise InvalidRequestError("Current password is incorrect")

        user.password_hash = hash_password(request.new_password)
        db.commit()
        logger.info("Password changed for user %s", username)

    def list_users(self, db: Session) -> List[User]:
        return user_repo.list_all(db)

    # -- lookups for other services -----------------------------------------

    def lookup_user(self, db: Session, user_id: str) -> UserDto:
        user = self._get_by_public_id(db, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return to_user_dto(user)

    def lookup_users(self, db: Session, user_ids: List[str]) -> List[UserDto]:
        ids = [int(user_id) for user_id in user_ids if _is_numeric_id(user_id)]
        return [to_user_dto(user) for user in user_repo.get_by_ids(db, ids)]

    @staticmethod
    def _get_by_public_id(db: Session, user_id: str) -> Optional[User]:
        if not _is_numeric_id(user_id):
            return None
        return user_repo.get_by_id(db, int(user_id))


auth_service = AuthService()
