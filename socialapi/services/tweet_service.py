"""Tweets, their comments and likes."""
from __future__ import annotations

import logging
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from socialapi.models.tweet import Tweet, TweetComment, TweetLike
from socialapi.repositories.tweet_repo import SORT_COLUMNS, tweet_repo
from socialapi.server.errors import (
    ConflictError,
    ForbiddenError,
    InvalidRequestError,
    NotFoundError,
)
from socialapi.server.schemas import (
    AuthorStatsResponse,
    CreateTweetCommentRequest,
    CreateTweetRequest,
    Page,
    TweetCommentResponse,
    TweetLikeResponse,
    TweetResponse,
    UpdateTweetRequest,
)

logger = logging.getLogger(__name__)

TWEET_NOT_FOUND = "Tweet not found"


def _require_text(content: str, label: str) -> str:
    if not content or not content.strip():
        raise InvalidRequestError(f"{label} content cannot be empty")
    return content


def to_tweet_response(tweet: Tweet, with_details: bool = False) -> TweetResponse:
    response = TweetResponse(
        id=tweet.id,
        content=tweet.content,
        author_username=tweet.author_username,
        created_at=tweet.created_at,
        updated_at=tweet.updated_at,
        comment_count=tweet.comment_count,
        like_count=tweet.like_count,
    )
    if with_details:
        response.comments = [TweetCommentResponse.model_validate(c) for c in tweet.comments]
        response.likes = [TweetLikeResponse.model_validate(like) for like in tweet.likes]
    return response


class TweetService:
    """Operations behind ``/api/tweets``; the principal is the token subject."""

    def _get(self, db: Session, tweet_id: int) -> Tweet:
        tweet = tweet_repo.get_by_id(db, tweet_id)
        if tweet is None:
            raise NotFoundError(TWEET_NOT_FOUND)
        return tweet

    # -- tweets --------------------------------------------------------------

    def create_tweet(self, db: Session, request: CreateTweetRequest, username: str) -> TweetResponse:
        tweet = Tweet(content=_require_text(request.content, "Tweet"), author_username=username)
        tweet_repo.add(db, tweet)
        db.commit()
        logger.info("Tweet %s created by %s", tweet.id, username)
        return to_tweet_response(tweet)

    def get_tweet(self, db: Session, tweet_id: int) -> TweetResponse:
        return to_tweet_response(self._get(db, tweet_id))

    def get_tweet_with_details(self, db: Session, tweet_id: int) -> TweetResponse:
        return to_tweet_response(self._get(db, tweet_id), with_details=True)

    def list_tweets(
        self,
        db: Session,
        page: int,
        size: int,
        sort_by: str = "createdAt",
        sort_dir: str = "desc",
    ) -> Page[TweetResponse]:
        if sort_by not in SORT_COLUMNS:
            raise InvalidRequestError(f"Cannot sort tweets by '{sort_by}'")
        if sort_dir.lower() not in ("asc", "desc"):
            raise InvalidRequestError(f"Invalid sort direction '{sort_dir}'")
        descending = sort_dir.lower() == "desc"
        tweets, total = tweet_repo.list_sorted(db, page, size, sort_by, descending)
        return Page[TweetResponse].build([to_tweet_response(t) for t in tweets], total, page, size)

    def get_tweets_by_author(self, db: Session, username: str, page: int, size: int) -> Page[TweetResponse]:
        tweets, total = tweet_repo.list_by_author(db, username, page, size)
        return Page[TweetResponse].build([to_tweet_response(t) for t in tweets], total, page, size)

    def search_tweets(self, db: Session, keyword: str, page: int, size: int) -> Page[TweetResponse]:
        if not keyword or not keyword.strip():
            raise InvalidRequestError("Search keyword cannot be empty")
        tweets, total = tweet_repo.search(db, keyword.strip(), page, size)
        return Page[TweetResponse].build([to_tweet_response(t) for t in tweets], total, page, size)

    def update_tweet(
        self, db: Session, tweet_id: int, request: UpdateTweetRequest, username: str
    ) -> TweetResponse:
        tweet = self._get(db, tweet_id)
        if tweet.author_username != username:
            raise ForbiddenError("You can only update your own tweets")

        tweet.content = _require_text(request.content, "Tweet")
        db.commit()
        logger.info("Tweet %s updated by %s", tweet_id, username)
        return to_tweet_response(tweet)

    def delete_tweet(self, db: Session, tweet_id: int, username: str) -> None:
        """Hard delete; comments and likes go with the tweet."""
        tweet = self._get(db, tweet_id)
        if tweet.author_username != username:
            raise ForbiddenError("You can only delete your own tweets")

        tweet_repo.delete(db, tweet)
        db.commit()
        logger.info("Tweet %s deleted by %s", tweet_id, username)

    # -- comments ------------------------------------------------------------

    def create_comment(
        self, db: Session, tweet_id: int, request: CreateTweetCommentRequest, username: str
    ) -> TweetCommentResponse:
        self._get(db, tweet_id)
        comment = TweetComment(
            content=_require_text(request.content, "Comment"),
            author_username=username,
            tweet_id=tweet_id,
        )
        tweet_repo.add(db, comment)
        db.commit()
        logger.info("Comment %s added to tweet %s by %s", comment.id, tweet_id, username)
        return TweetCommentResponse.model_validate(comment)

    def get_comments(self, db: Session, tweet_id: int) -> List[TweetCommentResponse]:
        self._get(db, tweet_id)
        return [TweetCommentResponse.model_validate(c) for c in tweet_repo.list_comments(db, tweet_id)]

    def delete_comment(self, db: Session, comment_id: int, username: str) -> None:
        comment = tweet_repo.get_comment(db, comment_id)
        if comment is None:
            raise NotFoundError("Comment not found")
        if comment.author_username != username:
            raise ForbiddenError("You can only delete your own comments")

        tweet_repo.delete(db, comment)
        db.commit()
        logger.info("Comment %s deleted by %s", comment_id, username)

    # -- likes ---------------------------------------------------------------

    def like_tweet(self, db: Session, tweet_id: int, username: str) -> TweetLikeResponse:
        self._get(db, tweet_id)
        if tweet_repo.find_like(db, tweet_id, username) is not None:
            raise ConflictError("You have already liked this tweet")

        like = TweetLike(username=username, tweet_id=tweet_id)
        try:
            tweet_repo.add(db, like)
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise ConflictError("You have already liked this tweet") from exc

        logger.info("Tweet %s liked by %s", tweet_id, username)
        return TweetLikeResponse.model_validate(like)

    def unlike_tweet(self, db: Session, tweet_id: int, username: str) -> None:
        like = tweet_repo.find_like(db, tweet_id, username)
        if like is None:
            raise NotFoundError("Like not found")

        tweet_repo.delete(db, like)
        db.commit()
        logger.info("Tweet %s unliked by %s", tweet_id, username)

    def get_likes(self, db: Session, tweet_id: int) -> List[TweetLikeResponse]:
        self._get(db, tweet_id)
        return [TweetLikeResponse.model_validate(like) for like in tweet_repo.list_likes(db, tweet_id)]

    # -- stats ---------------------------------------------------------------

    def get_author_stats(self, db: Session, username: str) -> AuthorStatsResponse:
        return AuthorStatsResponse(
            username=username,
            tweet_count=tweet_repo.count_by_author(db, username),
            comment_count=tweet_repo.count_comments_by_author(db, username),
            like_count=tweet_repo.count_likes_by_user(db, username),
        )


tweet_service = TweetService()
