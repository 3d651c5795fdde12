"""Threaded comments on posts."""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from socialapi.models.post import Comment, CommentLike, CommentStatus, PostStatus
from socialapi.repositories.comment_repo import comment_repo
from socialapi.repositories.like_repo import like_repo
from socialapi.repositories.post_repo import post_repo
from socialapi.server.errors import (
    ConflictError,
    ForbiddenError,
    InvalidRequestError,
    NotFoundError,
)
from socialapi.server.schemas import (
    CommentResponse,
    CreateCommentRequest,
    LikeStatusResponse,
    Page,
    UpdateCommentRequest,
    UserDto,
)
from socialapi.services.content_validation import ContentValidator, content_validator
from socialapi.services.user_service import UserService, user_service

logger = logging.getLogger(__name__)

COMMENT_NOT_FOUND = "Comment not found"


class CommentService:
    """Comments and replies; counters on the post and the parent follow along."""

    def __init__(
        self,
        users: Optional[UserService] = None,
        validator: Optional[ContentValidator] = None,
    ) -> None:
        self.users = users or user_service
        self.validator = validator or content_validator

    def _to_response(self, comment: Comment, author: Optional[UserDto], liked: bool) -> CommentResponse:
        return CommentResponse(
            id=comment.id,
            post_id=comment.post_id,
            parent_id=comment.parent_id,
            content=comment.content,
            status=comment.status,
            is_edited=comment.is_edited,
            edited_at=comment.edited_at,
            like_count=comment.like_count,
            reply_count=comment.reply_count,
            created_at=comment.created_at,
            updated_at=comment.updated_at,
            author_id=comment.author_id,
            author=author,
            is_liked=liked,
        )

    def _page(
        self,
        db: Session,
        comments: List[Comment],
        total: int,
        page: int,
        size: int,
        user_id: str,
        authorization: Optional[str],
    ) -> Page[CommentResponse]:
        users = self.users.get_users_by_ids([c.author_id for c in comments], authorization)
        authors: Dict[str, UserDto] = {user.id: user for user in users}
        liked = like_repo.liked_comment_ids(db, user_id, [c.id for c in comments])
        content = [
            self._to_response(c, authors.get(c.author_id), c.id in liked) for c in comments
        ]
        return Page[CommentResponse].build(content, total, page, size)

    def _get_published_post(self, db: Session, post_id: int):
        post = post_repo.get_by_id_and_status(db, post_id, PostStatus.PUBLISHED)
        if post is None:
            raise NotFoundError("Post not found")
        return post

    def _get_published(self, db: Session, comment_id: int) -> Comment:
        comment = comment_repo.get_published(db, comment_id)
        if comment is None:
            raise NotFoundError(COMMENT_NOT_FOUND)
        return comment

    def create_comment(
        self,
        db: Session,
        post_id: int,
        request: CreateCommentRequest,
        author_id: str,
        authorization: Optional[str] = None,
    ) -> CommentResponse:
        post = self._get_published_post(db, post_id)
        content = self.validator.validate_comment_content(request.content)
        if not self.validator.is_content_appropriate(content):
            raise InvalidRequestError("Content violates community guidelines")

        parent = None
        if request.parent_id is not None:
            parent = comment_repo.get_published(db, request.parent_id)
            if parent is None or parent.post_id != post_id:
                raise InvalidRequestError("Parent comment not found on this post")

        comment = Comment(
            post_id=post_id,
            author_id=author_id,
            content=content,
            parent_id=request.parent_id,
            status=CommentStatus.PUBLISHED,
        )
        comment_repo.add(db, comment)
        post.increment_comment_count()
        if parent is not None:
            parent.increment_reply_count()
        db.commit()
        logger.info("Comment %s created on post %s by user %s", comment.id, post_id, author_id)

        author = self.users.get_user_by_id(author_id, authorization)
        return self._to_response(comment, author, False)

    def get_comments(
        self,
        db: Session,
        post_id: int,
        page: int,
        size: int,
        user_id: str,
        authorization: Optional[str] = None,
    ) -> Page[CommentResponse]:
        self._get_published_post(db, post_id)
        comments, total = comment_repo.list_top_level(db, post_id, page, size)
        return self._page(db, comments, total, page, size, user_id, authorization)

    def get_replies(
        self,
        db: Session,
        comment_id: int,
        page: int,
        size: int,
        user_id: str,
        authorization: Optional[str] = None,
    ) -> Page[CommentResponse]:
        self._get_published(db, comment_id)
        replies, total = comment_repo.list_replies(db, comment_id, page, size)
        return self._page(db, replies, total, page, size, user_id, authorization)

    def update_comment(
        self,
        db: Session,
        comment_id: int,
        request: UpdateCommentRequest,
        user_id: str,
        authorization: Optional[str] = None,
    ) -> CommentResponse:
        comment = self._get_published(db, comment_id)
        if comment.author_id != user_id:
            raise ForbiddenError("Not authorized to update this comment")

        content = self.validator.validate_comment_content(request.content)
        if not self.validator.is_content_appropriate(content):
            raise InvalidRequestError("Content violates community guidelines")

        comment.content = content
        comment.mark_as_edited()
        db.commit()
        logger.info("Comment %s updated", comment_id)

        author = self.users.get_user_by_id(comment.author_id, authorization)
        liked = like_repo.find_comment_like(db, comment_id, user_id) is not None
        return self._to_response(comment, author, liked)

    def delete_comment(self, db: Session, comment_id: int, user_id: str) -> None:
        comment = self._get_published(db, comment_id)
        if comment.author_id != user_id:
            raise ForbiddenError("Not authorized to delete this comment")

        comment.status = CommentStatus.REMOVED
        comment.post.decrement_comment_count()
        if comment.parent is not None:
            comment.parent.decrement_reply_count()
        db.commit()
        logger.info("Comment %s deleted by user %s", comment_id, user_id)

    def like_comment(self, db: Session, comment_id: int, user_id: str) -> LikeStatusResponse:
        comment = self._get_published(db, comment_id)
        if like_repo.find_comment_like(db, comment_id, user_id) is not None:
            raise ConflictError("You have already liked this comment")

        try:
            like_repo.add(db, CommentLike(comment_id=comment_id, user_id=user_id))
            comment.increment_like_count()
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise ConflictError("You have already liked this comment") from exc

        logger.info("User %s liked comment %s", user_id, comment_id)
        return LikeStatusResponse(target_id=comment_id, liked=True, like_count=comment.like_count)

    def unlike_comment(self, db: Session, comment_id: int, user_id: str) -> LikeStatusResponse:
        comment = self._get_published(db, comment_id)
        like = like_repo.find_comment_like(db, comment_id, user_id)
        if like is None:
            raise NotFoundError("Like not found")

        like_repo.delete(db, like)
        comment.decrement_like_count()
        db.commit()
        logger.info("User %s unliked comment %s", user_id, comment_id)
        return LikeStatusResponse(target_id=comment_id, liked=False, like_count=comment.like_count)


comment_service = CommentService()
