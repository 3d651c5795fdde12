"""Post and comment like queries."""
from __future__ import annotations

from typing import Iterable, List, Optional, Set, Tuple

from sqlalchemy.orm import Session

from socialapi.models.post import CommentLike, PostLike
from socialapi.repositories.pagination import paginate


class LikeRepository:
    # -- post likes ----------------------------------------------------------

    def find_post_like(self, db: Session, post_id: int, user_id: str) -> Optional[PostLike]:
        return (
            db.query(PostLike)
            .filter(PostLike.post_id == post_id, PostLike.user_id == user_id)
            .first()
        )

    def list_post_likes(
        self, db: Session, post_id: int, page: int, size: int
    ) -> Tuple[List[PostLike], int]:
        query = (
            db.query(PostLike)
            .filter(PostLike.post_id == post_id)
            .order_by(PostLike.created_at.desc(), PostLike.id.desc())
        )
        return paginate(query, page, size)

    def liked_post_ids(self, db: Session, user_id: str, post_ids: Iterable[int]) -> Set[int]:
        """Subset of ``post_ids`` that ``user_id`` has liked."""
        ids = list(post_ids)
        if not ids:
            return set()
        rows = (
            db.query(PostLike.post_id)
            .filter(PostLike.user_id == user_id, PostLike.post_id.in_(ids))
            .all()
        )
        return {row[0] for row in rows}

    # -- comment likes -------------------------------------------------------

    def find_comment_like(
        self, db: Session, comment_id: int, user_id: str
    ) -> Optional[CommentLike]:
        return (
            db.query(CommentLike)
            .filter(CommentLike.comment_id == comment_id, CommentLike.user_id == user_id)
            .first()
        )

    def liked_comment_ids(
        self, db: Session, user_id: str, comment_ids: Iterable[int]
    ) -> Set[int]:
        ids = list(comment_ids)
        if not ids:
            return set()
        rows = (
            db.query(CommentLike.comment_id)
            .filter(CommentLike.user_id == user_id, CommentLike.comment_id.in_(ids))
            .all()
        )
        return {row[0] for row in rows}

    def add(self, db: Session, like) -> None:
        db.add(like)
        db.flush()

    def delete(self, db: Session, like) -> None:
        db.delete(like)
        db.flush()


like_repo = LikeRepository()
