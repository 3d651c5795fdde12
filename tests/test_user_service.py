"""Tests for the cached user lookups used by the post service."""
from unittest.mock import MagicMock, patch

import pytest

from socialapi.adapters.user_client import UserServiceClient, UserServiceError
from socialapi.server.schemas import UserDto
from socialapi.server.settings import settings
from socialapi.services.user_service import UNKNOWN_USER, UserService

USERS = {
    "1": UserDto(id="1", username="alice", display_name="Alice", status="ACTIVE"),
    "2": UserDto(id="2", username="bob", status="ACTIVE"),
    "3": UserDto(id="3", username="carol", status="SUSPENDED"),
}


def lookup(user_id, authorization=None):
    if user_id not in USERS:
        raise UserServiceError("User not found in User Service", status_code=404)
    return USERS[user_id]


@pytest.fixture
def client():
    mock = MagicMock(spec=UserServiceClient)
    mock.get_user_by_id.side_effect = lookup
    return mock


@pytest.fixture
def service(client):
    svc = UserService(client)
    yield svc
    svc.shutdown()


def test_lookup_is_cached(service, client):
    """Given: a cached user / When: looked up again / Then: no second remote call."""
    assert service.get_user_by_id("1").username == "alice"
    assert service.get_user_by_id("1").username == "alice"

    assert client.get_user_by_id.call_count == 1


def test_cache_entries_expire(service, client):
    with patch.object(settings, "USER_CACHE_TTL_SECONDS", -1):
        service.get_user_by_id("1")
        service.get_user_by_id("1")

    assert client.get_user_by_id.call_count == 2


def test_cache_is_bounded(service, client):
    with patch.object(settings, "USER_CACHE_MAX_SIZE", 2):
        for user_id in ("1", "2", "3"):
            service.get_user_by_id(user_id)
        # "1" was the oldest entry and got evicted
        service.get_user_by_id("1")

    assert client.get_user_by_id.call_count == 4


def test_failures_degrade_to_none_and_are_not_cached(service, client):
    assert service.get_user_by_id("404") is None
    assert service.get_user_by_id("404") is None

    assert client.get_user_by_id.call_count == 2


def test_clear_cache(service, client):
    service.get_user_by_id("1")
    service.clear_cache()
    service.get_user_by_id("1")

    assert client.get_user_by_id.call_count == 2


def test_get_users_by_ids_fans_out(service, client):
    """Duplicates are fetched once, missing users are dropped, order is kept."""
    users = service.get_users_by_ids(["2", "404", "1", "2"], authorization="Bearer t")

    assert [user.username for user in users] == ["bob", "alice"]
    assert client.get_user_by_id.call_count == 3
    for call in client.get_user_by_id.call_args_list:
        assert call.kwargs["authorization"] == "Bearer t"


def test_get_users_by_ids_empty(service, client):
    assert service.get_users_by_ids([]) == []
    client.get_user_by_id.assert_not_called()


@pytest.mark.parametrize("user_id, active", [("1", True), ("3", False), ("404", False)])
def test_is_user_active(service, user_id, active):
    assert service.is_user_active(user_id) is active


@pytest.mark.parametrize("user_id, name", [("1", "Alice"), ("2", "bob"), ("404", UNKNOWN_USER)])
def test_display_name_fallbacks(service, user_id, name):
    assert service.get_user_display_name(user_id) == name


def test_shutdown_allows_reuse(service):
    service.get_users_by_ids(["1"])
    service.shutdown()

    assert [user.id for user in service.get_users_by_ids(["2"])] == ["2"]
