"""User repository backed by the auth service database."""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from socialapi.models.user import User

logger = logging.getLogger(__name__)


class UserRepository:
    """Queries over the ``users`` table. Callers own the transaction."""

    def get_by_id(self, db: Session, user_id: int) -> Optional[User]:
        return db.get(User, user_id)

    def get_by_username(self, db: Session, username: str) -> Optional[User]:
        return db.query(User).filter(User.username == username).first()

    def exists_by_username(self, db: Session, username: str) -> bool:
        return self.get_by_username(db, username) is not None

    def exists_by_email(self, db: Session, email: str) -> bool:
        return db.query(User.id).filter(User.email == email).first() is not None

    def get_by_ids(self, db: Session, user_ids: Iterable[int]) -> List[User]:
        ids = list(user_ids)
        if not ids:
            return []
        return db.query(User).filter(User.id.in_(ids)).order_by(User.id).all()

    def list_all(self, db: Session) -> List[User]:
        return db.query(User).order_by(User.id).all()

    def add(self, db: Session, user: User) -> User:
        db.add(user)
        db.flush()
        logger.debug("Staged user %s (id=%s)", user.username, user.id)
        return user


user_repo = UserRepository()
