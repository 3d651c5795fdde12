"""Cached user lookups for the post service."""
from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional, Tuple

from socialapi.adapters.user_client import UserServiceClient, UserServiceError, user_client
from socialapi.server.schemas import UserDto
from socialapi.server.settings import settings

logger = logging.getLogger(__name__)

UNKNOWN_USER = "Unknown User"


class UserService:
    """Wraps ``UserServiceClient`` with a per-user TTL cache.

    Lookups never raise: an unreachable or failing user service is logged and
    reported as a missing user.
    """

    def __init__(self, client: Optional[UserServiceClient] = None) -> None:
        self.client = client or user_client
        self._cache: Dict[str, Tuple[float, UserDto]] = {}
        self._lock = threading.Lock()
        self._executor: Optional[ThreadPoolExecutor] = None

    # -- cache -------------------------------------------------------------

    def _cached(self, user_id: str) -> Optional[UserDto]:
        with self._lock:
            entry = self._cache.get(user_id)
            if entry is None:
                return None
            stored_at, user = entry
            if time.monotonic() - stored_at > settings.USER_CACHE_TTL_SECONDS:
                del self._cache[user_id]
                return None
            return user

    def _store(self, user_id: str, user: UserDto) -> None:
        with self._lock:
            if user_id not in self._cache and len(self._cache) >= settings.USER_CACHE_MAX_SIZE:
                # evict the oldest entry
                oldest = min(self._cache, key=lambda key: self._cache[key][0])
                del self._cache[oldest]
            self._cache[user_id] = (time.monotonic(), user)

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()

    # -- lookups -----------------------------------------------------------

    def get_user_by_id(self, user_id: str, authorization: Optional[str] = None) -> Optional[UserDto]:
        user_id = str(user_id)
        cached = self._cached(user_id)
        if cached is not None:
            logger.debug("User %s served from cache", user_id)
            return cached

        try:
            user = self.client.get_user_by_id(user_id, authorization=authorization)
        except UserServiceError as exc:
            logger.error("Error fetching user %s: %s", user_id, exc)
            return None

        self._store(user_id, user)
        return user

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=settings.USER_FETCH_MAX_WORKERS,
                    thread_name_prefix="user-fetch",
                )
            return self._executor

    def get_users_by_ids(
        self,
        user_ids: Iterable[str],
        authorization: Optional[str] = None,
    ) -> List[UserDto]:
        """Fetch several users concurrently and return the ones that exist.

        Order follows ``user_ids`` with duplicates removed.
        """
        unique_ids = list(dict.fromkeys(str(user_id) for user_id in user_ids))
        if not unique_ids:
            return []

        executor = self._get_executor()
        futures = [
            executor.submit(self.get_user_by_id, user_id, authorization)
            for user_id in unique_ids
        ]
        users = [future.result() for future in futures]
        return [user for user in users if user is not None]

    def is_user_active(self, user_id: str, authorization: Optional[str] = None) -> bool:
        user = self.get_user_by_id(user_id, authorization)
        return user is not None and user.status == "ACTIVE"

    def get_user_display_name(self, user_id: str, authorization: Optional[str] = None) -> str:
        user = self.get_user_by_id(user_id, authorization)
        if user is None:
            return UNKNOWN_USER
        return user.display_name or user.username or UNKNOWN_USER

    def shutdown(self) -> None:
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)
            logger.info("User fetch executor shut down")


user_service = UserService()
