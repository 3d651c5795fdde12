"""Authentication endpoints: register, login, token refresh and account info."""
from typing import List

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from socialapi.server.deps import get_auth_session, get_current_username
from socialapi.server.routers.health import service_health
from socialapi.server.schemas import (
    AuthResponse,
    ChangePasswordRequest,
    HealthResponse,
    LoginRequest,
    MessageResponse,
    RefreshTokenRequest,
    RegisterRequest,
    UserPublic,
)
from socialapi.services.auth_service import auth_service

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(request: RegisterRequest, db: Session = Depends(get_auth_session)) -> AuthResponse:
    """Create an account and return a fresh token pair.

    Raises:
        409: username or email already in use
    """
    return auth_service.register(db, request)


@router.post("/login", response_model=AuthResponse)
def login(request: LoginRequest, db: Session = Depends(get_auth_session)) -> AuthResponse:
    return auth_service.login(db, request)


@router.post("/refresh", response_model=AuthResponse)
def refresh(request: RefreshTokenRequest, db: Session = Depends(get_auth_session)) -> AuthResponse:
    return auth_service.refresh(db, request.refresh_token)


@router.post("/logout", response_model=MessageResponse)
def logout(username: str = Depends(get_current_username)) -> MessageResponse:
    # tokens are stateless; the client discards them
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserPublic)
def me(
    username: str = Depends(get_current_username),
    db: Session = Depends(get_auth_session),
) -> UserPublic:
    return UserPublic.model_validate(auth_service.get_current_user(db, username))


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    request: ChangePasswordRequest,
    username: str = Depends(get_current_username),
    db: Session = Depends(get_auth_session),
) -> MessageResponse:
    auth_service.change_password(db, username, request)
    return MessageResponse(message="Password changed successfully")


@router.get("/health", response_model=HealthResponse)
def health(request: Request) -> HealthResponse:
    return service_health(request, "Auth Service is running")


@router.get("/users", response_model=List[UserPublic])
def list_users(
    username: str = Depends(get_current_username),
    db: Session = Depends(get_auth_session),
) -> List[UserPublic]:
    return [UserPublic.model_validate(user) for user in auth_service.list_users(db)]
