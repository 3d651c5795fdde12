"""Pytest configuration and fixtures.

Shared fixtures for every test module:

- auth_client / post_client / tweet_client: FastAPI test clients, one per service
- databases: every service database rebound to a fresh in-memory SQLite
- alice_headers / bob_headers: bearer headers signed with the shared JWT secret
- known_users / mock_user_client: user lookups answered without an HTTP call

No test talks to a real user service or a database file on disk.
"""
from typing import Dict

import pytest
from fastapi.testclient import TestClient
from unittest.mock import MagicMock

from socialapi.adapters.user_client import UserServiceError
from socialapi.db import DATABASES
from socialapi.server.main import auth_app, post_app, tweet_app
from socialapi.server.schemas import UserDto
from socialapi.server.security import create_token
from socialapi.services.user_service import user_service


@pytest.fixture(autouse=True)
def databases():
    """Bind each service database to an empty in-memory SQLite.

    Notes:
        - StaticPool keeps one connection, so the schema survives across sessions
        - tables are dropped after the test; nothing leaks between tests
    """
    for database in DATABASES.values():
        database.configure("sqlite://")
        database.create_all()
    yield DATABASES
    for database in DATABASES.values():
        database.drop_all()


@pytest.fixture
def auth_client():
    return TestClient(auth_app)


@pytest.fixture
def post_client():
    """Post service client.

    Author lookups go through ``mock_user_client``; request it alongside this
    fixture when a test creates posts.
    """
    return TestClient(post_app)


@pytest.fixture
def tweet_client():
    return TestClient(tweet_app)


def bearer(user_id: int, username: str) -> Dict[str, str]:
    token = create_token(user_id=user_id, username=username, email=f"{username}@example.com")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def alice_headers():
    return bearer(1, "alice")


@pytest.fixture
def bob_headers():
    return bearer(2, "bob")


@pytest.fixture
def carol_headers():
    """Carol exists but her account is suspended."""
    return bearer(3, "carol")


@pytest.fixture
def known_users() -> Dict[str, UserDto]:
    return {
        "1": UserDto(id="1", username="alice", display_name="Alice", status="ACTIVE"),
        "2": UserDto(id="2", username="bob", status="ACTIVE"),
        "3": UserDto(id="3", username="carol", display_name="Carol", status="SUSPENDED"),
    }


@pytest.fixture
def mock_user_client(known_users):
    """Swap the user service's HTTP client for a mock.

    Yields:
        MagicMock: ``get_user_by_id`` answers from ``known_users`` and raises
        ``UserServiceError`` (404) for anything else

    Notes:
        - the cache is cleared before and after so lookups are observable
        - the fan-out executor is shut down after the test
    """

    def lookup(user_id, authorization=None):
        if user_id not in known_users:
            raise UserServiceError("User not found in User Service", status_code=404)
        return known_users[user_id]

    client = MagicMock()
    client.get_user_by_id.side_effect = lookup

    original = user_service.client
    user_service.client = client
    user_service.clear_cache()
    yield client
    user_service.client = original
    user_service.clear_cache()
    user_service.shutdown()
