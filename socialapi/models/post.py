"""Post service entities: posts, threaded comments and likes."""
from __future__ import annotations

import enum

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from socialapi.db import PostBase, utcnow


class PostStatus(str, enum.Enum):
    PUBLISHED = "PUBLISHED"
    DRAFT = "DRAFT"
    HIDDEN = "HIDDEN"
    PENDING_MODERATION = "PENDING_MODERATION"
    REMOVED = "REMOVED"


class CommentStatus(str, enum.Enum):
    PUBLISHED = "PUBLISHED"
    HIDDEN = "HIDDEN"
    PENDING_MODERATION = "PENDING_MODERATION"
    REMOVED = "REMOVED"


class Post(PostBase):
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)
    author_id = Column(String(64), nullable=False, index=True)
    content = Column(Text, nullable=False)
    image_urls = Column(JSON, nullable=True)
    video_url = Column(String(500), nullable=True)
    status = Column(Enum(PostStatus), nullable=False, default=PostStatus.PUBLISHED, index=True)
    is_edited = Column(Boolean, nullable=False, default=False)
    edited_at = Column(DateTime, nullable=True)
    like_count = Column(Integer, nullable=False, default=0)
    comment_count = Column(Integer, nullable=False, default=0)
    share_count = Column(Integer, nullable=False, default=0)
    view_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    comments = relationship("Comment", back_populates="post", cascade="all, delete-orphan")
    likes = relationship("PostLike", back_populates="post", cascade="all, delete-orphan")

    def increment_like_count(self) -> None:
        self.like_count = (self.like_count or 0) + 1

    def decrement_like_count(self) -> None:
        if self.like_count and self.like_count > 0:
            self.like_count -= 1

    def increment_comment_count(self) -> None:
        self.comment_count = (self.comment_count or 0) + 1

    def decrement_comment_count(self) -> None:
        if self.comment_count and self.comment_count > 0:
            self.comment_count -= 1

    def increment_view_count(self) -> None:
        self.view_count = (self.view_count or 0) + 1

    def mark_as_edited(self) -> None:
        self.is_edited = True
        self.edited_at = utcnow()


class Comment(PostBase):
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, index=True)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    author_id = Column(String(64), nullable=False, index=True)
    content = Column(Text, nullable=False)
    parent_id = Column(Integer, ForeignKey("comments.id", ondelete="CASCADE"), nullable=True, index=True)
    is_edited = Column(Boolean, nullable=False, default=False)
    edited_at = Column(DateTime, nullable=True)
    like_count = Column(Integer, nullable=False, default=0)
    reply_count = Column(Integer, nullable=False, default=0)
    status = Column(Enum(CommentStatus), nullable=False, default=CommentStatus.PUBLISHED)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    post = relationship("Post", back_populates="comments")
    parent = relationship("Comment", remote_side="Comment.id", backref="replies")
    likes = relationship("CommentLike", back_populates="comment", cascade="all, delete-orphan")

    def increment_like_count(self) -> None:
        self.like_count = (self.like_count or 0) + 1

    def decrement_like_count(self) -> None:
        if self.like_count and self.like_count > 0:
            self.like_count -= 1

    def increment_reply_count(self) -> None:
        self.reply_count = (self.reply_count or 0) + 1

    def decrement_reply_count(self) -> None:
        if self.reply_count and self.reply_count > 0:
            self.reply_count -= 1

    def mark_as_edited(self) -> None:
        self.is_edited = True
        self.edited_at = utcnow()


class PostLike(PostBase):
    __tablename__ = "post_likes"
    __table_args__ = (UniqueConstraint("post_id", "user_id", name="uq_post_likes_post_user"),)

    id = Column(Integer, primary_key=True, index=True)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    post = relationship("Post", back_populates="likes")


class CommentLike(PostBase):
    __tablename__ = "comment_likes"
    __table_args__ = (UniqueConstraint("comment_id", "user_id", name="uq_comment_likes_comment_user"),)

    id = Column(Integer, primary_key=True, index=True)
    comment_id = Column(Integer, ForeignKey("comments.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    comment = relationship("Comment", back_populates="likes")
