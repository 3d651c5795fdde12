"""Tests for the auth service.

Covers:
1. Registration and its uniqueness rules
2. Login with valid and invalid credentials
3. Token refresh, current user, password change
4. User lookup endpoints used by the post service

Each test follows the Given-When-Then pattern.
"""
import pytest

from socialapi.server.security import decode_token, REFRESH_TOKEN_TYPE


def register(client, username="alice", email="alice@example.com", password="secret123"):
    return client.post(
        "/api/auth/register",
        json={"username": username, "email": email, "password": password},
    )


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


def test_register_success(auth_client):
    """Registration returns a usable token pair.

    Given: no account named alice
    When: alice registers
    Then: 201 with a Bearer access token whose subject is alice
    """
    # When: register a new account
    response = register(auth_client)

    # Then: created with tokens
    assert response.status_code == 201
    data = response.json()
    assert data["username"] == "alice"
    assert data["email"] == "alice@example.com"
    assert data["token_type"] == "Bearer"
    assert data["expires_in"] > 0

    claims = decode_token(data["token"])
    assert claims.sub == "alice"
    assert claims.user_id == "1"
    assert claims.type == "access"
    assert decode_token(data["refresh_token"], expected_type=REFRESH_TOKEN_TYPE).sub == "alice"


def test_register_duplicate_username(auth_client):
    """Given: alice exists / When: alice registers again / Then: 409."""
    register(auth_client)

    response = register(auth_client, email="other@example.com")

    assert response.status_code == 409
    assert response.json()["detail"] == "Username is already taken!"


def test_register_duplicate_email(auth_client):
    register(auth_client)

    response = register(auth_client, username="alice2")

    assert response.status_code == 409
    assert response.json()["detail"] == "Email is already in use!"


@pytest.mark.parametrize(
    "payload",
    [
        {"username": "al", "email": "al@example.com", "password": "secret123"},
        {"username": "alice", "email": "not-an-email", "password": "secret123"},
        {"username": "alice", "email": "alice@example.com", "password": "123"},
    ],
)
def test_register_rejects_invalid_body(auth_client, payload):
    """Schema violations are rejected before reaching the service."""
    response = auth_client.post("/api/auth/register", json=payload)
    assert response.status_code == 422


def test_login_success(auth_client):
    """Given: a registered user / When: correct credentials / Then: 200 with tokens."""
    register(auth_client)

    # When: log in
    response = auth_client.post(
        "/api/auth/login", json={"username": "alice", "password": "secret123"}
    )

    # Then: tokens issued
    assert response.status_code == 200
    assert decode_token(response.json()["token"]).sub == "alice"


@pytest.mark.parametrize(
    "username, password",
    [("alice", "wrong-password"), ("nobody", "secret123")],
)
def test_login_invalid_credentials(auth_client, username, password):
    """Wrong password and unknown user get the same 401."""
    register(auth_client)

    response = auth_client.post(
        "/api/auth/login", json={"username": username, "password": password}
    )

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid username or password"
    assert response.headers["www-authenticate"] == "Bearer"


def test_refresh_issues_new_tokens(auth_client):
    tokens = register(auth_client).json()

    response = auth_client.post(
        "/api/auth/refresh", json={"refresh_token": tokens["refresh_token"]}
    )

    assert response.status_code == 200
    assert decode_token(response.json()["token"]).sub == "alice"


def test_refresh_rejects_access_token(auth_client):
    """An access token cannot be used as a refresh token."""
    tokens = register(auth_client).json()

    response = auth_client.post("/api/auth/refresh", json={"refresh_token": tokens["token"]})

    assert response.status_code == 401


def test_me_requires_token(auth_client):
    """Given: no Authorization header / When: GET /me / Then: 401 with challenge."""
    response = auth_client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


def test_me_rejects_garbage_token(auth_client):
    response = auth_client.get("/api/auth/me", headers=auth_header("not-a-jwt"))
    assert response.status_code == 401


@pytest.mark.parametrize("header", ["", "Basic abc", "Bearer ", "Token abc.def.ghi"])
def test_me_rejects_malformed_authorization_header(auth_client, header):
    response = auth_client.get("/api/auth/me", headers={"Authorization": header})

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


def test_me_returns_current_user(auth_client):
    token = register(auth_client).json()["token"]

    response = auth_client.get("/api/auth/me", headers=auth_header(token))

    assert response.status_code == 200
    data = response.json()
    assert data["username"] == "alice"
    assert data["status"] == "ACTIVE"
    assert data["role"] == "USER"
    assert "password_hash" not in data


def test_change_password(auth_client):
    """Given: alice is logged in
    When: she changes her password
    Then: only the new password works afterwards
    """
    token = register(auth_client).json()["token"]

    # When: wrong current password
    response = auth_client.post(
        "/api/auth/change-password",
        json={"current_password": "nope", "new_password": "newsecret"},
        headers=auth_header(token),
    )
    assert response.status_code == 400

    # When: correct current password
    response = auth_client.post(
        "/api/auth/change-password",
        json={"current_password": "secret123", "new_password": "newsecret"},
        headers=auth_header(token),
    )
    assert response.status_code == 200

    # Then: old password fails, new password works
    old = auth_client.post("/api/auth/login", json={"username": "alice", "password": "secret123"})
    new = auth_client.post("/api/auth/login", json={"username": "alice", "password": "newsecret"})
    assert old.status_code == 401
    assert new.status_code == 200


def test_logout(auth_client):
    token = register(auth_client).json()["token"]

    response = auth_client.post("/api/auth/logout", headers=auth_header(token))

    assert response.status_code == 200
    assert response.json()["message"] == "Logged out successfully"


def test_list_users_requires_token(auth_client):
    token = register(auth_client).json()["token"]
    register(auth_client, username="bob", email="bob@example.com")

    assert auth_client.get("/api/auth/users").status_code == 401

    response = auth_client.get("/api/auth/users", headers=auth_header(token))
    assert response.status_code == 200
    assert [user["username"] for user in response.json()] == ["alice", "bob"]


def test_user_lookup(auth_client):
    """The post service reads users through /api/users/{id}."""
    token = register(auth_client).json()["token"]

    response = auth_client.get("/api/users/1", headers=auth_header(token))

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["data"]["user"]["id"] == "1"
    assert data["data"]["user"]["username"] == "alice"
    assert data["data"]["user"]["status"] == "ACTIVE"


@pytest.mark.parametrize("user_id", ["999", "abc", "%C2%B2"])
def test_user_lookup_not_found(auth_client, user_id):
    token = register(auth_client).json()["token"]

    response = auth_client.get(f"/api/users/{user_id}", headers=auth_header(token))

    assert response.status_code == 404


def test_user_batch_lookup(auth_client):
    """Unknown ids in the userIds header are skipped."""
    token = register(auth_client).json()["token"]
    register(auth_client, username="bob", email="bob@example.com")

    response = auth_client.get(
        "/api/users/batch",
        headers={**auth_header(token), "userIds": "1, 2, 42"},
    )

    assert response.status_code == 200
    users = response.json()["data"]["users"]
    assert [user["username"] for user in users] == ["alice", "bob"]


def test_user_batch_lookup_skips_non_decimal_ids(auth_client):
    """Given: a userIds header holding "²" / When: looked up / Then: the id is skipped."""
    token = register(auth_client).json()["token"]

    response = auth_client.get(
        "/api/users/batch",
        headers={**auth_header(token), "userIds": "1,²".encode("latin-1")},
    )

    assert response.status_code == 200
    assert [user["username"] for user in response.json()["data"]["users"]] == ["alice"]
