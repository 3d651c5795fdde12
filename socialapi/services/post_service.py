"""Post business logic: publishing, editing, soft deletion, likes and feeds."""
from __future__ import annotations

import logging
from datetime import timedelta
from typing import Dict, List, Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from socialapi.db import utcnow
from socialapi.models.post import Post, PostLike, PostStatus
from socialapi.repositories.like_repo import like_repo
from socialapi.repositories.post_repo import post_repo
from socialapi.server.errors import (
    ConflictError,
    ForbiddenError,
    InvalidRequestError,
    NotFoundError,
)
from socialapi.server.schemas import (
    CreatePostRequest,
    LikeStatusResponse,
    Page,
    PostLikeResponse,
    PostResponse,
    UpdatePostRequest,
    UserDto,
)
from socialapi.server.settings import settings
from socialapi.services.content_validation import ContentValidator, content_validator
from socialapi.services.user_service import UserService, user_service

logger = logging.getLogger(__name__)

POST_NOT_FOUND = "Post not found"


class PostService:
    """Operations behind ``/api/posts``.

    Every method receives the request's database session and commits its own
    changes. ``authorization`` is the caller's raw ``Authorization`` header,
    forwarded to the user service when author details are needed.
    """

    def __init__(
        self,
        users: Optional[UserService] = None,
        validator: Optional[ContentValidator] = None,
    ) -> None:
        self.users = users or user_service
        self.validator = validator or content_validator

    # -- response building ---------------------------------------------------

    def _authors(self, posts: Sequence[Post], authorization: Optional[str]) -> Dict[str, UserDto]:
        author_ids = [post.author_id for post in posts]
        users = self.users.get_users_by_ids(author_ids, authorization)
        return {user.id: user for user in users}

    def _to_response(self, post: Post, author: Optional[UserDto], liked: bool) -> PostResponse:
        return PostResponse(
            id=post.id,
            content=post.content,
            image_urls=post.image_urls,
            video_url=post.video_url,
            status=post.status,
            is_edited=post.is_edited,
            edited_at=post.edited_at,
            like_count=post.like_count,
            comment_count=post.comment_count,
            share_count=post.share_count,
            view_count=post.view_count,
            created_at=post.created_at,
            updated_at=post.updated_at,
            author_id=post.author_id,
            author=author,
            is_liked=liked,
            hashtags=self.validator.extract_hashtags(post.content),
            mentions=self.validator.extract_mentions(post.content),
        )

    def _single(
        self, db: Session, post: Post, user_id: str, authorization: Optional[str]
    ) -> PostResponse:
        author = self.users.get_user_by_id(post.author_id, authorization)
        liked = like_repo.find_post_like(db, post.id, user_id) is not None
        return self._to_response(post, author, liked)

    def _page(
        self,
        db: Session,
        posts: List[Post],
        total: int,
        page: int,
        size: int,
        user_id: str,
        authorization: Optional[str],
    ) -> Page[PostResponse]:
        authors = self._authors(posts, authorization)
        liked = like_repo.liked_post_ids(db, user_id, [post.id for post in posts])
        content = [
            self._to_response(post, authors.get(post.author_id), post.id in liked)
            for post in posts
        ]
        return Page[PostResponse].build(content, total, page, size)

    def _get_published(self, db: Session, post_id: int) -> Post:
        post = post_repo.get_by_id_and_status(db, post_id, PostStatus.PUBLISHED)
        if post is None:
            raise NotFoundError(POST_NOT_FOUND)
        return post

    # -- commands ------------------------------------------------------------

    def create_post(
        self,
        db: Session,
        request: CreatePostRequest,
        author_id: str,
        authorization: Optional[str] = None,
    ) -> PostResponse:
        logger.info("Creating post for user: %s", author_id)

        if not self.users.is_user_active(author_id, authorization):
            raise InvalidRequestError("User not found or inactive")

        content = self.validator.validate_post_content(request.content)
        self.validator.validate_image_urls(request.image_urls)
        self.validator.validate_video_url(request.video_url)
        if not self.validator.is_content_appropriate(content):
            raise InvalidRequestError("Content violates community guidelines")

        post = Post(
            author_id=author_id,
            content=content,
            image_urls=request.image_urls,
            video_url=request.video_url,
            status=PostStatus.PUBLISHED,
        )
        post_repo.add(db, post)
        db.commit()
        logger.info("Post created successfully with ID: %s", post.id)

        author = self.users.get_user_by_id(author_id, authorization)
        return self._to_response(post, author, False)

    def update_post(
        self,
        db: Session,
        post_id: int,
        request: UpdatePostRequest,
        user_id: str,
        authorization: Optional[str] = None,
    ) -> PostResponse:
        logger.info("Updating post %s by user %s", post_id, user_id)
        post = self._get_published(db, post_id)
        if post.author_id != user_id:
            raise ForbiddenError("Not authorized to update this post")

        content = self.validator.validate_post_content(request.content)
        if not self.validator.is_content_appropriate(content):
            raise InvalidRequestError("Content violates community guidelines")

        post.content = content
        post.mark_as_edited()
        db.commit()
        logger.info("Post %s updated", post_id)
        return self._single(db, post, user_id, authorization)

    def delete_post(self, db: Session, post_id: int, user_id: str) -> None:
        """Soft delete: the row stays with status ``REMOVED``."""
        post = post_repo.get_by_id(db, post_id)
        if post is None or post.status == PostStatus.REMOVED:
            raise NotFoundError(POST_NOT_FOUND)
        if post.author_id != user_id:
            raise ForbiddenError("Not authorized to delete this post")

        post.status = PostStatus.REMOVED
        db.commit()
        logger.info("Post %s deleted by user %s", post_id, user_id)

    def like_post(self, db: Session, post_id: int, user_id: str) -> LikeStatusResponse:
        post = self._get_published(db, post_id)
        if like_repo.find_post_like(db, post_id, user_id) is not None:
            raise ConflictError("You have already liked this post")

        try:
            like_repo.add(db, PostLike(post_id=post_id, user_id=user_id))
            post.increment_like_count()
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise ConflictError("You have already liked this post") from exc

        logger.info("User %s liked post %s", user_id, post_id)
        return LikeStatusResponse(target_id=post_id, liked=True, like_count=post.like_count)

    def unlike_post(self, db: Session, post_id: int, user_id: str) -> LikeStatusResponse:
        post = self._get_published(db, post_id)
        like = like_repo.find_post_like(db, post_id, user_id)
        if like is None:
            raise NotFoundError("Like not found")

        like_repo.delete(db, like)
        post.decrement_like_count()
        db.commit()
        logger.info("User %s unliked post %s", user_id, post_id)
        return LikeStatusResponse(target_id=post_id, liked=False, like_count=post.like_count)

    # -- queries -------------------------------------------------------------

    def get_post(
        self, db: Session, post_id: int, user_id: str, authorization: Optional[str] = None
    ) -> PostResponse:
        """Fetch a published post and count the view."""
        post = self._get_published(db, post_id)
        post.increment_view_count()
        db.commit()
        return self._single(db, post, user_id, authorization)

    def list_posts(
        self, db: Session, page: int, size: int, user_id: str, authorization: Optional[str] = None
    ) -> Page[PostResponse]:
        posts, total = post_repo.list_by_status(db, page, size)
        return self._page(db, posts, total, page, size, user_id, authorization)

    def get_posts_by_author(
        self,
        db: Session,
        author_id: str,
        page: int,
        size: int,
        user_id: str,
        authorization: Optional[str] = None,
    ) -> Page[PostResponse]:
        posts, total = post_repo.list_by_author(db, author_id, page, size)
        return self._page(db, posts, total, page, size, user_id, authorization)

    def get_feed_posts(
        self,
        db: Session,
        following: Sequence[str],
        page: int,
        size: int,
        user_id: str,
        authorization: Optional[str] = None,
    ) -> Page[PostResponse]:
        following = [author for author in following if author]
        if not following:
            return Page[PostResponse].build([], 0, page, size)
        posts, total = post_repo.list_by_authors(db, following, page, size)
        return self._page(db, posts, total, page, size, user_id, authorization)

    def search_posts(
        self,
        db: Session,
        query: str,
        page: int,
        size: int,
        user_id: str,
        authorization: Optional[str] = None,
    ) -> Page[PostResponse]:
        if not query or not query.strip():
            raise InvalidRequestError("Search query cannot be empty")
        posts, total = post_repo.search(db, query.strip(), page, size)
        return self._page(db, posts, total, page, size, user_id, authorization)

    def get_trending_posts(
        self, db: Session, page: int, size: int, user_id: str, authorization: Optional[str] = None
    ) -> Page[PostResponse]:
        since = utcnow() - timedelta(hours=settings.TRENDING_WINDOW_HOURS)
        posts, total = post_repo.list_trending(db, since, page, size)
        return self._page(db, posts, total, page, size, user_id, authorization)

    def get_post_likes(self, db: Session, post_id: int, page: int, size: int) -> Page[PostLikeResponse]:
        self._get_published(db, post_id)
        likes, total = like_repo.list_post_likes(db, post_id, page, size)
        content = [PostLikeResponse.model_validate(like) for like in likes]
        return Page[PostLikeResponse].build(content, total, page, size)


post_service = PostService()
