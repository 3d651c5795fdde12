"""Tweet endpoints. Reads are public; writes need a bearer token."""
from typing import List, Tuple

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from socialapi.server.deps import get_current_username, get_tweet_session, pagination
from socialapi.server.routers.health import service_health
from socialapi.server.schemas import (
    AuthorStatsResponse,
    CreateTweetCommentRequest,
    CreateTweetRequest,
    HealthResponse,
    MessageResponse,
    Page,
    TweetCommentResponse,
    TweetLikeResponse,
    TweetResponse,
    UpdateTweetRequest,
)
from socialapi.services.tweet_service import tweet_service

router = APIRouter(prefix="/api/tweets", tags=["tweets"])

tweet_pagination = pagination(default_size=10)


@router.get("/health", response_model=HealthResponse)
def health(request: Request) -> HealthResponse:
    return service_health(request, "Tweet Service is running")


@router.post("", response_model=TweetResponse, status_code=status.HTTP_201_CREATED)
def create_tweet(
    request: CreateTweetRequest,
    username: str = Depends(get_current_username),
    db: Session = Depends(get_tweet_session),
) -> TweetResponse:
    return tweet_service.create_tweet(db, request, username)


@router.get("", response_model=Page[TweetResponse])
def list_tweets(
    paging: Tuple[int, int] = Depends(tweet_pagination),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_dir: str = Query("desc", alias="sortDir"),
    db: Session = Depends(get_tweet_session),
) -> Page[TweetResponse]:
    page, size = paging
    return tweet_service.list_tweets(db, page, size, sort_by, sort_dir)


@router.get("/search", response_model=Page[TweetResponse])
def search_tweets(
    keyword: str = Query(..., description="Search keyword"),
    paging: Tuple[int, int] = Depends(tweet_pagination),
    db: Session = Depends(get_tweet_session),
) -> Page[TweetResponse]:
    page, size = paging
    return tweet_service.search_tweets(db, keyword, page, size)


@router.get("/author/{username}", response_model=Page[TweetResponse])
def tweets_by_author(
    username: str,
    paging: Tuple[int, int] = Depends(tweet_pagination),
    db: Session = Depends(get_tweet_session),
) -> Page[TweetResponse]:
    page, size = paging
    return tweet_service.get_tweets_by_author(db, username, page, size)


@router.get("/author/{username}/stats", response_model=AuthorStatsResponse)
def author_stats(username: str, db: Session = Depends(get_tweet_session)) -> AuthorStatsResponse:
    return tweet_service.get_author_stats(db, username)


@router.delete("/comments/{comment_id}", response_model=MessageResponse)
def delete_comment(
    comment_id: int,
    username: str = Depends(get_current_username),
    db: Session = Depends(get_tweet_session),
) -> MessageResponse:
    tweet_service.delete_comment(db, comment_id, username)
    return MessageResponse(message="Comment deleted successfully")


@router.get("/{tweet_id}", response_model=TweetResponse, response_model_exclude_none=True)
def get_tweet(tweet_id: int, db: Session = Depends(get_tweet_session)) -> TweetResponse:
    return tweet_service.get_tweet(db, tweet_id)


@router.get("/{tweet_id}/details", response_model=TweetResponse)
def get_tweet_details(tweet_id: int, db: Session = Depends(get_tweet_session)) -> TweetResponse:
    """Tweet together with its comments and likes."""
    return tweet_service.get_tweet_with_details(db, tweet_id)


@router.put("/{tweet_id}", response_model=TweetResponse, response_model_exclude_none=True)
def update_tweet(
    tweet_id: int,
    request: UpdateTweetRequest,
    username: str = Depends(get_current_username),
    db: Session = Depends(get_tweet_session),
) -> TweetResponse:
    return tweet_service.update_tweet(db, tweet_id, request, username)


@router.delete("/{tweet_id}", response_model=MessageResponse)
def delete_tweet(
    tweet_id: int,
    username: str = Depends(get_current_username),
    db: Session = Depends(get_tweet_session),
) -> MessageResponse:
    tweet_service.delete_tweet(db, tweet_id, username)
    return MessageResponse(message="Tweet deleted successfully")


@router.post(
    "/{tweet_id}/comments",
    response_model=TweetCommentResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_comment(
    tweet_id: int,
    request: CreateTweetCommentRequest,
    username: str = Depends(get_current_username),
    db: Session = Depends(get_tweet_session),
) -> TweetCommentResponse:
    return tweet_service.create_comment(db, tweet_id, request, username)


@router.get("/{tweet_id}/comments", response_model=List[TweetCommentResponse])
def list_comments(tweet_id: int, db: Session = Depends(get_tweet_session)) -> List[TweetCommentResponse]:
    return tweet_service.get_comments(db, tweet_id)


@router.post(
    "/{tweet_id}/like",
    response_model=TweetLikeResponse,
    status_code=status.HTTP_201_CREATED,
)
def like_tweet(
    tweet_id: int,
    username: str = Depends(get_current_username),
    db: Session = Depends(get_tweet_session),
) -> TweetLikeResponse:
    return tweet_service.like_tweet(db, tweet_id, username)


@router.delete("/{tweet_id}/like", response_model=MessageResponse)
def unlike_tweet(
    tweet_id: int,
    username: str = Depends(get_current_username),
    db: Session = Depends(get_tweet_session),
) -> MessageResponse:
    tweet_service.unlike_tweet(db, tweet_id, username)
    return MessageResponse(message="Tweet unliked successfully")


@router.get("/{tweet_id}/likes", response_model=List[TweetLikeResponse])
def list_likes(tweet_id: int, db: Session = Depends(get_tweet_session)) -> List[TweetLikeResponse]:
    return tweet_service.get_likes(db, tweet_id)
