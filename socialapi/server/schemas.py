"""Pydantic schemas for request/response models.

This module defines the request/response models of the auth, post and tweet
endpoints. Every schema inherits pydantic ``BaseModel`` so FastAPI validates
and documents it automatically.
"""
from math import ceil
from typing import Any, Dict, Generic, List, Optional, TypeVar
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field

from socialapi.models.post import CommentStatus, PostStatus
from socialapi.server.settings import settings

T = TypeVar("T")


# ============================================================================
# Pagination
# ============================================================================

class Page(BaseModel, Generic[T]):
    """One page of results.

    Attributes:
        content: items on this page
        page: zero-based page number
        size: requested page size
        total_elements: number of matching rows
        total_pages: number of pages of ``size`` items
    """
    content: List[T]
    page: int
    size: int
    total_elements: int
    total_pages: int
    first: bool
    last: bool
    empty: bool

    @classmethod
    def build(cls, content: List[Any], total: int, page: int, size: int) -> "Page":
        total_pages = ceil(total / size) if size else 0
        return cls(
            content=content,
            page=page,
            size=size,
            total_elements=total,
            total_pages=total_pages,
            first=page == 0,
            last=page >= total_pages - 1,
            empty=not content,
        )


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    service: str
    status: str
    database: str
    message: str
    timestamp: datetime


# ============================================================================
# User & Auth
# ============================================================================

class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.-]+$")
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)
    display_name: Optional[str] = Field(default=None, max_length=100)


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RefreshTokenRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=72)


class AuthResponse(BaseModel):
    """Token pair returned by register, login and refresh.

    Example:
        >>> AuthResponse(token="eyJ...", refresh_token="eyJ...",
        ...              expires_in=86400, username="alice",
        ...              email="alice@example.com")
    """
    token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int
    username: str
    email: str


class UserPublic(BaseModel):
    """Public user information (never includes the password hash)."""
    id: int
    username: str
    email: str
    display_name: Optional[str] = None
    role: str
    status: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserDto(BaseModel):
    """User as seen by other services through the user lookup endpoints."""
    id: str
    username: str
    display_name: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    verified: bool = False
    status: Optional[str] = None
    followers_count: int = 0
    following_count: int = 0
    created_at: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "UserDto":
        """Build from a snake_case or camelCase user payload."""

        def pick(snake: str, camel: str, default: Any = None) -> Any:
            if payload.get(snake) is not None:
                return payload[snake]
            if payload.get(camel) is not None:
                return payload[camel]
            return default

        return cls(
            id=str(payload.get("id")),
            username=payload.get("username") or "",
            display_name=pick("display_name", "displayName"),
            bio=payload.get("bio"),
            avatar_url=pick("avatar_url", "avatarUrl"),
            verified=bool(payload.get("verified") or False),
            status=payload.get("status"),
            followers_count=pick("followers_count", "followersCount", 0),
            following_count=pick("following_count", "followingCount", 0),
            created_at=pick("created_at", "createdAt"),
        )


class UserLookupResponse(BaseModel):
    """``{success, data: {user}}`` envelope of ``GET /api/users/{id}``."""
    success: bool = True
    data: Dict[str, UserDto]


class UserBatchResponse(BaseModel):
    """``{success, data: {users}}`` envelope of ``GET /api/users/batch``."""
    success: bool = True
    data: Dict[str, List[UserDto]]


# ============================================================================
# Posts & comments
# ============================================================================

class CreatePostRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=settings.CONTENT_MAX_POST_LENGTH)
    image_urls: Optional[List[str]] = None
    video_url: Optional[str] = None


class UpdatePostRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=settings.CONTENT_MAX_POST_LENGTH)


class PostResponse(BaseModel):
    id: int
    content: str
    image_urls: Optional[List[str]] = None
    video_url: Optional[str] = None
    status: PostStatus
    is_edited: bool = False
    edited_at: Optional[datetime] = None
    like_count: int = 0
    comment_count: int = 0
    share_count: int = 0
    view_count: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None
    author_id: str
    author: Optional[UserDto] = None
    is_liked: bool = False
    hashtags: List[str] = Field(default_factory=list)
    mentions: List[str] = Field(default_factory=list)


class CreateCommentRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=settings.CONTENT_MAX_COMMENT_LENGTH)
    parent_id: Optional[int] = None


class UpdateCommentRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=settings.CONTENT_MAX_COMMENT_LENGTH)


class CommentResponse(BaseModel):
    id: int
    post_id: int
    parent_id: Optional[int] = None
    content: str
    status: CommentStatus
    is_edited: bool = False
    edited_at: Optional[datetime] = None
    like_count: int = 0
    reply_count: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None
    author_id: str
    author: Optional[UserDto] = None
    is_liked: bool = False


class PostLikeResponse(BaseModel):
    id: int
    post_id: int
    user_id: str
    created_at: datetime

    class Config:
        from_attributes = True


class LikeStatusResponse(BaseModel):
    """Result of a like/unlike toggle."""
    target_id: int
    liked: bool
    like_count: int


# ============================================================================
# Tweets
# ============================================================================

class CreateTweetRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=settings.CONTENT_MAX_TWEET_LENGTH)


class UpdateTweetRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=settings.CONTENT_MAX_TWEET_LENGTH)


class CreateTweetCommentRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=settings.CONTENT_MAX_TWEET_LENGTH)


class TweetCommentResponse(BaseModel):
    id: int
    content: str
    author_username: str
    tweet_id: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TweetLikeResponse(BaseModel):
    id: int
    username: str
    tweet_id: int
    created_at: datetime

    class Config:
        from_attributes = True


class TweetResponse(BaseModel):
    """Tweet with derived counters.

    ``comments`` and ``likes`` are only filled by the details endpoint.
    """
    id: int
    content: str
    author_username: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    comment_count: int = 0
    like_count: int = 0
    comments: Optional[List[TweetCommentResponse]] = None
    likes: Optional[List[TweetLikeResponse]] = None


class AuthorStatsResponse(BaseModel):
    username: str
    tweet_count: int
    comment_count: int
    like_count: int
