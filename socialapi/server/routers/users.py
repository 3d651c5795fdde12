"""User lookup endpoints consumed by the post service."""
from fastapi import APIRouter, Depends, Header
from sqlalchemy.orm import Session

from socialapi.server.deps import get_auth_session, get_current_username
from socialapi.server.schemas import UserBatchResponse, UserLookupResponse
from socialapi.services.auth_service import auth_service

router = APIRouter(
    prefix="/api/users",
    tags=["users"],
    dependencies=[Depends(get_current_username)],
)


@router.get("/batch", response_model=UserBatchResponse)
def get_users_batch(
    user_ids: str = Header(default="", alias="userIds"),
    db: Session = Depends(get_auth_session),
) -> UserBatchResponse:
    """Look up several users at once.

    ``userIds`` is a comma separated header; unknown ids are skipped.
    """
    ids = [user_id.strip() for user_id in user_ids.split(",") if user_id.strip()]
    return UserBatchResponse(data={"users": auth_service.lookup_users(db, ids)})


@router.get("/{user_id}", response_model=UserLookupResponse)
def get_user(user_id: str, db: Session = Depends(get_auth_session)) -> UserLookupResponse:
    return UserLookupResponse(data={"user": auth_service.lookup_user(db, user_id)})
