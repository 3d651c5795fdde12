"""SQLAlchemy engines and sessions, one database per service.

Each service owns a declarative ``Base`` (and therefore its own metadata), so
the auth, post and tweet tables never share a schema.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from socialapi.server.settings import settings

logger = logging.getLogger(__name__)

AuthBase = declarative_base()
PostBase = declarative_base()
TweetBase = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp (what the DateTime columns store)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Database:
    """Engine + session factory for a single service database."""

    def __init__(self, name: str, url: str, base) -> None:
        self.name = name
        self.base = base
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None
        self.configure(url)

    def configure(self, url: str) -> None:
        """(Re)bind the database to ``url``.

        In-memory SQLite gets a ``StaticPool`` so every session sees the same
        connection, which is what the test suite relies on.
        """
        kwargs = {"echo": settings.DATABASE_ECHO}
        if url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if url in ("sqlite://", "sqlite:///:memory:"):
                kwargs["poolclass"] = StaticPool

        if self._engine is not None:
            self._engine.dispose()

        self.url = url
        self._engine = create_engine(url, **kwargs)
        self._session_factory = sessionmaker(
            bind=self._engine, autoflush=False, expire_on_commit=False
        )
        logger.debug("Configured %s database (%s)", self.name, self._engine.dialect.name)

    @property
    def engine(self) -> Engine:
        assert self._engine is not None
        return self._engine

    @property
    def dialect(self) -> str:
        return self.engine.dialect.name

    def create_all(self) -> None:
        self.base.metadata.create_all(bind=self.engine)

    def drop_all(self) -> None:
        self.base.metadata.drop_all(bind=self.engine)

    def new_session(self) -> Session:
        assert self._session_factory is not None
        return self._session_factory()

    def session(self) -> Iterator[Session]:
        """Yield a session for one request; roll back if the request fails."""
        db = self.new_session()
        try:
            yield db
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def ping(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception as exc:
            logger.error("%s database is unreachable: %s", self.name, exc)
            return False


auth_db = Database("auth", settings.AUTH_DATABASE_URL, AuthBase)
post_db = Database("post", settings.POST_DATABASE_URL, PostBase)
tweet_db = Database("tweet", settings.TWEET_DATABASE_URL, TweetBase)

DATABASES = {"auth": auth_db, "post": post_db, "tweet": tweet_db}
