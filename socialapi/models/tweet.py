"""Tweet service entities."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from socialapi.db import TweetBase, utcnow
from socialapi.server.settings import settings


class Tweet(TweetBase):
    __tablename__ = "tweets"

    id = Column(Integer, primary_key=True, index=True)
    content = Column(String(settings.CONTENT_MAX_TWEET_LENGTH), nullable=False)
    author_username = Column(String(50), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    comments = relationship(
        "TweetComment",
        back_populates="tweet",
        cascade="all, delete-orphan",
        order_by="TweetComment.created_at",
    )
    likes = relationship("TweetLike", back_populates="tweet", cascade="all, delete-orphan")

    @property
    def comment_count(self) -> int:
        return len(self.comments) if self.comments is not None else 0

    @property
    def like_count(self) -> int:
        return len(self.likes) if self.likes is not None else 0


class TweetComment(TweetBase):
    __tablename__ = "tweet_comments"

    id = Column(Integer, primary_key=True, index=True)
    content = Column(String(settings.CONTENT_MAX_TWEET_LENGTH), nullable=False)
    author_username = Column(String(50), nullable=False, index=True)
    tweet_id = Column(Integer, ForeignKey("tweets.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    tweet = relationship("Tweet", back_populates="comments")


class TweetLike(TweetBase):
    __tablename__ = "tweet_likes"
    __table_args__ = (UniqueConstraint("tweet_id", "username", name="uq_tweet_likes_tweet_user"),)

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), nullable=False, index=True)
    tweet_id = Column(Integer, ForeignKey("tweets.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    tweet = relationship("Tweet", back_populates="likes")
