"""Post queries for the post service database."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from socialapi.models.post import Post, PostStatus
from socialapi.repositories.pagination import paginate


class PostRepository:
    """Paginated post lookups.

    Every list method returns ``(posts, total)`` and only considers posts in
    the requested status (``PUBLISHED`` unless stated otherwise).
    """

    def get_by_id(self, db: Session, post_id: int) -> Optional[Post]:
        return db.get(Post, post_id)

    def get_by_id_and_status(
        self, db: Session, post_id: int, status: PostStatus = PostStatus.PUBLISHED
    ) -> Optional[Post]:
        return db.query(Post).filter(Post.id == post_id, Post.status == status).first()

    def list_by_status(
        self, db: Session, page: int, size: int, status: PostStatus = PostStatus.PUBLISHED
    ) -> Tuple[List[Post], int]:
        query = (
            db.query(Post)
            .filter(Post.status == status)
            .order_by(Post.created_at.desc(), Post.id.desc())
        )
        return paginate(query, page, size)

    def list_by_author(
        self, db: Session, author_id: str, page: int, size: int
    ) -> Tuple[List[Post], int]:
        query = (
            db.query(Post)
            .filter(Post.author_id == author_id, Post.status == PostStatus.PUBLISHED)
            .order_by(Post.created_at.desc(), Post.id.desc())
        )
        return paginate(query, page, size)

    def list_by_authors(
        self, db: Session, author_ids: Sequence[str], page: int, size: int
    ) -> Tuple[List[Post], int]:
        query = (
            db.query(Post)
            .filter(Post.author_id.in_(list(author_ids)), Post.status == PostStatus.PUBLISHED)
            .order_by(Post.created_at.desc(), Post.id.desc())
        )
        return paginate(query, page, size)

    def search(self, db: Session, text: str, page: int, size: int) -> Tuple[List[Post], int]:
        query = (
            db.query(Post)
            .filter(Post.status == PostStatus.PUBLISHED, Post.content.icontains(text, autoescape=True))
            .order_by(Post.created_at.desc(), Post.id.desc())
        )
        return paginate(query, page, size)

    def list_trending(
        self, db: Session, since: datetime, page: int, size: int
    ) -> Tuple[List[Post], int]:
        query = (
            db.query(Post)
            .filter(Post.status == PostStatus.PUBLISHED, Post.created_at >= since)
            .order_by(Post.like_count.desc(), Post.created_at.desc(), Post.id.desc())
        )
        return paginate(query, page, size)

    def add(self, db: Session, post: Post) -> Post:
        db.add(post)
        db.flush()
        return post


post_repo = PostRepository()
