"""Post endpoints: publishing, feeds, search and likes."""
from typing import List, Optional, Tuple

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from socialapi.server.deps import (
    get_authorization_header,
    get_current_user_id,
    get_post_session,
    pagination,
)
from socialapi.server.routers.health import service_health
from socialapi.server.schemas import (
    CreatePostRequest,
    HealthResponse,
    LikeStatusResponse,
    MessageResponse,
    Page,
    PostLikeResponse,
    PostResponse,
    UpdatePostRequest,
)
from socialapi.services.post_service import post_service

router = APIRouter(prefix="/api/posts", tags=["posts"])


# Static paths are declared before "/{post_id}".

@router.get("/health", response_model=HealthResponse)
def health(request: Request) -> HealthResponse:
    return service_health(request, "Post Service is running")


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
def create_post(
    request: CreatePostRequest,
    user_id: str = Depends(get_current_user_id),
    authorization: Optional[str] = Depends(get_authorization_header),
    db: Session = Depends(get_post_session),
) -> PostResponse:
    """Publish a post as the authenticated user.

    Raises:
        400: author inactive, content or media invalid
        422: body fails schema validation (e.g. content too long)
    """
    return post_service.create_post(db, request, user_id, authorization)


@router.get("", response_model=Page[PostResponse])
def list_posts(
    paging: Tuple[int, int] = Depends(pagination()),
    user_id: str = Depends(get_current_user_id),
    authorization: Optional[str] = Depends(get_authorization_header),
    db: Session = Depends(get_post_session),
) -> Page[PostResponse]:
    page, size = paging
    return post_service.list_posts(db, page, size, user_id, authorization)


@router.get("/search", response_model=Page[PostResponse])
def search_posts(
    q: str = Query(..., description="Search query"),
    paging: Tuple[int, int] = Depends(pagination()),
    user_id: str = Depends(get_current_user_id),
    authorization: Optional[str] = Depends(get_authorization_header),
    db: Session = Depends(get_post_session),
) -> Page[PostResponse]:
    page, size = paging
    return post_service.search_posts(db, q, page, size, user_id, authorization)


@router.get("/trending", response_model=Page[PostResponse])
def trending_posts(
    paging: Tuple[int, int] = Depends(pagination()),
    user_id: str = Depends(get_current_user_id),
    authorization: Optional[str] = Depends(get_authorization_header),
    db: Session = Depends(get_post_session),
) -> Page[PostResponse]:
    page, size = paging
    return post_service.get_trending_posts(db, page, size, user_id, authorization)


@router.get("/feed", response_model=Page[PostResponse])
def feed_posts(
    following: List[str] = Query(default=[], description="Followed user ids"),
    paging: Tuple[int, int] = Depends(pagination()),
    user_id: str = Depends(get_current_user_id),
    authorization: Optional[str] = Depends(get_authorization_header),
    db: Session = Depends(get_post_session),
) -> Page[PostResponse]:
    """Posts by the given authors; accepts repeated or comma separated ids."""
    author_ids = [item.strip() for value in following for item in value.split(",") if item.strip()]
    page, size = paging
    return post_service.get_feed_posts(db, author_ids, page, size, user_id, authorization)


@router.get("/author/{author_id}", response_model=Page[PostResponse])
def posts_by_author(
    author_id: str,
    paging: Tuple[int, int] = Depends(pagination()),
    user_id: str = Depends(get_current_user_id),
    authorization: Optional[str] = Depends(get_authorization_header),
    db: Session = Depends(get_post_session),
) -> Page[PostResponse]:
    page, size = paging
    return post_service.get_posts_by_author(db, author_id, page, size, user_id, authorization)


@router.get("/{post_id}", response_model=PostResponse)
def get_post(
    post_id: int,
    user_id: str = Depends(get_current_user_id),
    authorization: Optional[str] = Depends(get_authorization_header),
    db: Session = Depends(get_post_session),
) -> PostResponse:
    return post_service.get_post(db, post_id, user_id, authorization)


@router.put("/{post_id}", response_model=PostResponse)
def update_post(
    post_id: int,
    request: UpdatePostRequest,
    user_id: str = Depends(get_current_user_id),
    authorization: Optional[str] = Depends(get_authorization_header),
    db: Session = Depends(get_post_session),
) -> PostResponse:
    return post_service.update_post(db, post_id, request, user_id, authorization)


@router.delete("/{post_id}", response_model=MessageResponse)
def delete_post(
    post_id: int,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_post_session),
) -> MessageResponse:
    post_service.delete_post(db, post_id, user_id)
    return MessageResponse(message="Post deleted successfully")


@router.post("/{post_id}/like", response_model=LikeStatusResponse, status_code=status.HTTP_201_CREATED)
def like_post(
    post_id: int,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_post_session),
) -> LikeStatusResponse:
    return post_service.like_post(db, post_id, user_id)


@router.delete("/{post_id}/like", response_model=LikeStatusResponse)
def unlike_post(
    post_id: int,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_post_session),
) -> LikeStatusResponse:
    return post_service.unlike_post(db, post_id, user_id)


@router.get("/{post_id}/likes", response_model=Page[PostLikeResponse])
def post_likes(
    post_id: int,
    paging: Tuple[int, int] = Depends(pagination()),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_post_session),
) -> Page[PostLikeResponse]:
    page, size = paging
    return post_service.get_post_likes(db, post_id, page, size)
