"""Comment queries for the post service database."""
from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from socialapi.models.post import Comment, CommentStatus
from socialapi.repositories.pagination import paginate


class CommentRepository:
    def get_published(self, db: Session, comment_id: int) -> Optional[Comment]:
        return (
            db.query(Comment)
            .filter(Comment.id == comment_id, Comment.status == CommentStatus.PUBLISHED)
            .first()
        )

    def list_top_level(
        self, db: Session, post_id: int, page: int, size: int
    ) -> Tuple[List[Comment], int]:
        """Published comments without a parent, newest first."""
        query = (
            db.query(Comment)
            .filter(
                Comment.post_id == post_id,
                Comment.parent_id.is_(None),
                Comment.status == CommentStatus.PUBLISHED,
            )
            .order_by(Comment.created_at.desc(), Comment.id.desc())
        )
        return paginate(query, page, size)

    def list_replies(
        self, db: Session, parent_id: int, page: int, size: int
    ) -> Tuple[List[Comment], int]:
        """Published replies to ``parent_id``, oldest first."""
        query = (
            db.query(Comment)
            .filter(Comment.parent_id == parent_id, Comment.status == CommentStatus.PUBLISHED)
            .order_by(Comment.created_at.asc(), Comment.id.asc())
        )
        return paginate(query, page, size)

    def add(self, db: Session, comment: Comment) -> Comment:
        db.add(comment)
        db.flush()
        return comment


comment_repo = CommentRepository()
