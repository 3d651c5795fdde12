"""HTTP client helpers for calling the user lookup endpoints of the auth service."""
from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from socialapi.server.schemas import UserDto
from socialapi.server.settings import settings

logger = logging.getLogger(__name__)

ERROR_MESSAGES: Dict[int, str] = {
    400: "Invalid request to User Service",
    401: "Unauthorized access to User Service",
    403: "Forbidden access to User Service",
    404: "User not found in User Service",
    429: "Rate limit exceeded for User Service",
    500: "User Service internal error",
    502: "User Service unavailable",
    503: "User Service temporarily unavailable",
}


class UserServiceError(RuntimeError):
    """Raised when the user service cannot answer a lookup."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def decode_error(status_code: int) -> UserServiceError:
    message = ERROR_MESSAGES.get(
        status_code, f"User Service request failed with status {status_code}"
    )
    return UserServiceError(message, status_code=status_code)


def _backoff(attempt: int) -> float:
    """Seconds to wait after the ``attempt``-th failed try (1-based)."""
    interval = settings.USER_SERVICE_RETRY_INTERVAL * (1.5 ** (attempt - 1))
    return min(interval, settings.USER_SERVICE_RETRY_MAX_INTERVAL)


def _build_headers(authorization: Optional[str]) -> Dict[str, str]:
    headers: Dict[str, str] = {"Accept": "application/json"}
    if authorization:
        headers["Authorization"] = authorization
    return headers


def _extract(payload: Any, key: str) -> Any:
    """Unwrap ``{success, data: {key: ...}}``; plain bodies pass through."""
    if isinstance(payload, dict):
        data = payload.get("data", payload)
        if isinstance(data, dict) and key in data:
            return data[key]
        return data
    return payload


class UserServiceClient:
    """Synchronous user lookup client.

    Transport failures (connect errors, timeouts) are retried with a growing
    backoff; HTTP error statuses are decoded into ``UserServiceError`` right
    away.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.USER_SERVICE_BASE_URL).rstrip("/")
        self._transport = transport

    def _build_url(self, path: str) -> str:
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self.base_url}{path}"

    def _timeout(self) -> httpx.Timeout:
        return httpx.Timeout(
            settings.USER_SERVICE_READ_TIMEOUT,
            connect=settings.USER_SERVICE_CONNECT_TIMEOUT,
        )

    def _request(
        self,
        method: str,
        path: str,
        *,
        authorization: Optional[str] = None,
    ) -> Any:
        url = self._build_url(path)
        headers = _build_headers(authorization)
        max_attempts = max(1, settings.USER_SERVICE_MAX_ATTEMPTS)

        attempt = 0
        while True:
            attempt += 1
            try:
                with httpx.Client(
                    timeout=self._timeout(),
                    follow_redirects=True,
                    transport=self._transport,
                ) as client:
                    response = client.request(method, url, headers=headers)
                    response.raise_for_status()
                break
            except httpx.HTTPStatusError as exc:
                logger.error(
                    "User service responded with status %s for %s %s: %s",
                    exc.response.status_code,
                    method,
                    url,
                    exc.response.text[:500],
                )
                raise decode_error(exc.response.status_code) from exc
            except httpx.TransportError as exc:
                if attempt >= max_attempts:
                    logger.error(
                        "User service request failed for %s %s after %s attempts: %s",
                        method,
                        url,
                        attempt,
                        exc,
                    )
                    raise UserServiceError("User Service request failed") from exc
                delay = _backoff(attempt)
                logger.warning(
                    "User service request %s %s failed (attempt %s/%s), retrying in %.1fs: %s",
                    method,
                    url,
                    attempt,
                    max_attempts,
                    delay,
                    exc,
                )
                time.sleep(delay)

        if not response.content:
            return {}

        try:
            return response.json()
        except json.JSONDecodeError as exc:
            logger.error("Failed to decode user service JSON response from %s: %s", url, response.text[:200])
            raise UserServiceError("Invalid JSON response from User Service") from exc

    def get_user_by_id(self, user_id: str, authorization: Optional[str] = None) -> UserDto:
        payload = self._request("GET", f"/api/users/{user_id}", authorization=authorization)
        user = _extract(payload, "user")
        if not isinstance(user, dict):
            raise UserServiceError("User Service response missing user")
        try:
            return UserDto.from_payload(user)
        except ValidationError as exc:
            logger.error("Invalid user payload for %s from User Service: %s", user_id, exc)
            raise UserServiceError("Invalid user payload from User Service") from exc


user_client = UserServiceClient()
