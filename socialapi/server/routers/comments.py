"""Comment endpoints for posts (threaded replies and comment likes)."""
from typing import Optional, Tuple

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from socialapi.server.deps import (
    get_authorization_header,
    get_current_user_id,
    get_post_session,
    pagination,
)
from socialapi.server.schemas import (
    CommentResponse,
    CreateCommentRequest,
    LikeStatusResponse,
    MessageResponse,
    Page,
    UpdateCommentRequest,
)
from socialapi.services.comment_service import comment_service

router = APIRouter(prefix="/api/posts", tags=["comments"])


@router.post(
    "/{post_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_comment(
    post_id: int,
    request: CreateCommentRequest,
    user_id: str = Depends(get_current_user_id),
    authorization: Optional[str] = Depends(get_authorization_header),
    db: Session = Depends(get_post_session),
) -> CommentResponse:
    """Comment on a post, or reply to one of its comments via ``parent_id``."""
    return comment_service.create_comment(db, post_id, request, user_id, authorization)


@router.get("/{post_id}/comments", response_model=Page[CommentResponse])
def list_comments(
    post_id: int,
    paging: Tuple[int, int] = Depends(pagination()),
    user_id: str = Depends(get_current_user_id),
    authorization: Optional[str] = Depends(get_authorization_header),
    db: Session = Depends(get_post_session),
) -> Page[CommentResponse]:
    page, size = paging
    return comment_service.get_comments(db, post_id, page, size, user_id, authorization)


@router.get("/comments/{comment_id}/replies", response_model=Page[CommentResponse])
def list_replies(
    comment_id: int,
    paging: Tuple[int, int] = Depends(pagination()),
    user_id: str = Depends(get_current_user_id),
    authorization: Optional[str] = Depends(get_authorization_header),
    db: Session = Depends(get_post_session),
) -> Page[CommentResponse]:
    page, size = paging
    return comment_service.get_replies(db, comment_id, page, size, user_id, authorization)


@router.put("/comments/{comment_id}", response_model=CommentResponse)
def update_comment(
    comment_id: int,
    request: UpdateCommentRequest,
    user_id: str = Depends(get_current_user_id),
    authorization: Optional[str] = Depends(get_authorization_header),
    db: Session = Depends(get_post_session),
) -> CommentResponse:
    return comment_service.update_comment(db, comment_id, request, user_id, authorization)


@router.delete("/comments/{comment_id}", response_model=MessageResponse)
def delete_comment(
    comment_id: int,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_post_session),
) -> MessageResponse:
    comment_service.delete_comment(db, comment_id, user_id)
    return MessageResponse(message="Comment deleted successfully")


@router.post(
    "/comments/{comment_id}/like",
    response_model=LikeStatusResponse,
    status_code=status.HTTP_201_CREATED,
)
def like_comment(
    comment_id: int,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_post_session),
) -> LikeStatusResponse:
    return comment_service.like_comment(db, comment_id, user_id)


@router.delete("/comments/{comment_id}/like", response_model=LikeStatusResponse)
def unlike_comment(
    comment_id: int,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_post_session),
) -> LikeStatusResponse:
    return comment_service.unlike_comment(db, comment_id, user_id)
