"""Tweet, tweet comment and tweet like queries."""
from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, selectinload

from socialapi.models.tweet import Tweet, TweetComment, TweetLike
from socialapi.repositories.pagination import paginate

SORT_COLUMNS = {
    "createdAt": Tweet.created_at,
    "created_at": Tweet.created_at,
    "updatedAt": Tweet.updated_at,
    "updated_at": Tweet.updated_at,
    "id": Tweet.id,
    "content": Tweet.content,
    "authorUsername": Tweet.author_username,
    "author_username": Tweet.author_username,
}


# comment_count and like_count read these collections
_WITH_COUNTS = (selectinload(Tweet.comments), selectinload(Tweet.likes))


class TweetRepository:
    def get_by_id(self, db: Session, tweet_id: int) -> Optional[Tweet]:
        return db.get(Tweet, tweet_id)

    def list_sorted(
        self, db: Session, page: int, size: int, sort_by: str, descending: bool
    ) -> Tuple[List[Tweet], int]:
        """``sort_by`` must be a key of ``SORT_COLUMNS``."""
        column = SORT_COLUMNS[sort_by]
        order = column.desc() if descending else column.asc()
        tie_breaker = Tweet.id.desc() if descending else Tweet.id.asc()
        query = db.query(Tweet).options(*_WITH_COUNTS).order_by(order, tie_breaker)
        return paginate(query, page, size)

    def list_by_author(
        self, db: Session, username: str, page: int, size: int
    ) -> Tuple[List[Tweet], int]:
        query = (
            db.query(Tweet)
            .options(*_WITH_COUNTS)
            .filter(Tweet.author_username == username)
            .order_by(Tweet.created_at.desc(), Tweet.id.desc())
        )
        return paginate(query, page, size)

    def search(
        self, db: Session, keyword: str, page: int, size: int
    ) -> Tuple[List[Tweet], int]:
        query = (
            db.query(Tweet)
            .options(*_WITH_COUNTS)
            .filter(Tweet.content.icontains(keyword, autoescape=True))
            .order_by(Tweet.created_at.desc(), Tweet.id.desc())
        )
        return paginate(query, page, size)

    def count_by_author(self, db: Session, username: str) -> int:
        return db.query(Tweet).filter(Tweet.author_username == username).count()

    # -- comments ------------------------------------------------------------

    def get_comment(self, db: Session, comment_id: int) -> Optional[TweetComment]:
        return db.get(TweetComment, comment_id)

    def list_comments(self, db: Session, tweet_id: int) -> List[TweetComment]:
        return (
            db.query(TweetComment)
            .filter(TweetComment.tweet_id == tweet_id)
            .order_by(TweetComment.created_at.asc(), TweetComment.id.asc())
            .all()
        )

    def count_comments_by_author(self, db: Session, username: str) -> int:
        return db.query(TweetComment).filter(TweetComment.author_username == username).count()

    # -- likes ---------------------------------------------------------------

    def find_like(self, db: Session, tweet_id: int, username: str) -> Optional[TweetLike]:
        return (
            db.query(TweetLike)
            .filter(TweetLike.tweet_id == tweet_id, TweetLike.username == username)
            .first()
        )

    def list_likes(self, db: Session, tweet_id: int) -> List[TweetLike]:
        return (
            db.query(TweetLike)
            .filter(TweetLike.tweet_id == tweet_id)
            .order_by(TweetLike.created_at.asc(), TweetLike.id.asc())
            .all()
        )

    def count_likes_by_user(self, db: Session, username: str) -> int:
        return db.query(TweetLike).filter(TweetLike.username == username).count()

    def add(self, db: Session, entity) -> None:
        db.add(entity)
        db.flush()

    def delete(self, db: Session, entity) -> None:
        db.delete(entity)
        db.flush()


tweet_repo = TweetRepository()
