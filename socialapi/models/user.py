"""User entity stored in the auth service database."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, String

from socialapi.db import AuthBase, utcnow


class User(AuthBase):
    """Registered account.

    Attributes:
        id: numeric primary key (exposed to other services as a string)
        username: unique login name
        email: unique email address
        password_hash: bcrypt hash, never serialized
        role: authorization role carried in issued tokens
        status: ``ACTIVE`` accounts may publish posts
        display_name: optional name shown next to posts
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="USER")
    status = Column(String(20), nullable=False, default="ACTIVE")
    display_name = Column(String(100), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"User(id={self.id!r}, username={self.username!r}, email={self.email!r})"
