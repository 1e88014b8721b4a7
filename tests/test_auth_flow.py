"""End-to-end tests for the /auth endpoints."""

from __future__ import annotations

import pytest
from flask.testing import FlaskClient

from conftest import RESET_LINK, VERIFY_LINK, bearer, extract_token, login, register
from models.user import User


def _set_cookie_headers(response) -> list[str]:
    return response.headers.getlist("Set-Cookie")


def test_register_login_logout_scenario(client: FlaskClient, outbox):
    """Register, log in, log out; the old refresh token is dead afterwards."""

    response = register(client)

    assert response.status_code == 201
    body = response.get_json()
    assert body["success"] is True
    assert body["statusCode"] == 201
    user = body["data"]["user"]
    assert user["email"] == "a@x.com"
    assert user["username"] == "alice"
    assert user["isEmailVerified"] is False
    for secret in ("password", "passwordHash", "password_hash", "refreshToken"):
        assert secret not in user
    assert len(outbox) == 1
    assert outbox[0].recipients == ["a@x.com"]

    response = login(client)

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["accessToken"]
    assert data["refreshToken"]
    assert "passwordHash" not in data["user"]
    cookies = _set_cookie_headers(response)
    access_cookie = next(c for c in cookies if c.startswith("accessToken="))
    refresh_cookie = next(c for c in cookies if c.startswith("refreshToken="))
    for cookie in (access_cookie, refresh_cookie):
        assert "HttpOnly" in cookie
        assert "Secure" in cookie

    response = client.post("/auth/logout", headers=bearer(data["accessToken"]))

    assert response.status_code == 200
    assert response.get_json()["message"] == "User logged out."
    cleared = _set_cookie_headers(response)
    assert any(c.startswith("accessToken=;") for c in cleared)
    assert any(c.startswith("refreshToken=;") for c in cleared)

    response = client.post(
        "/auth/refresh-token", json={"refreshToken": data["refreshToken"]}
    )

    assert response.status_code == 401
    assert response.get_json()["success"] is False


def test_register_duplicate_returns_conflict(client: FlaskClient):
    assert register(client).status_code == 201

    response = register(client, email="a@x.com", username="someoneelse")
    assert response.status_code == 409
    body = response.get_json()
    assert body["data"] is None
    assert body["success"] is False
    assert body["errors"] == []

    assert register(client, email="b@x.com", username="alice").status_code == 409


@pytest.mark.parametrize("role", ["admin", ["admin"], {"name": "admin"}])
def test_register_ignores_role_in_body(client: FlaskClient, role):
    response = client.post(
        "/auth/register",
        json={"email": "a@x.com", "username": "alice", "password": "pw123456", "role": role},
    )

    assert response.status_code == 201
    assert response.get_json()["data"]["user"]["role"] == "user"


@pytest.mark.parametrize(
    "payload, field",
    [
        ({"username": "alice", "password": "pw123456"}, "email"),
        ({"email": "nope", "username": "alice", "password": "pw123456"}, "email"),
        ({"email": "a@x.com", "password": "pw123456"}, "username"),
        ({"email": "a@x.com", "username": "Alice", "password": "pw123456"}, "username"),
        ({"email": "a@x.com", "username": "al", "password": "pw123456"}, "username"),
        ({"email": "a@x.com", "username": "alice"}, "password"),
        ({"email": "a@x.com", "username": "alice", "role": ["admin"]}, "password"),
    ],
)
def test_register_validation_errors(client: FlaskClient, payload, field):
    response = client.post("/auth/register", json=payload)

    assert response.status_code == 422
    body = response.get_json()
    assert body["message"] == "Received data is not valid."
    assert any(field in entry for entry in body["errors"])


def test_login_failures(client: FlaskClient):
    register(client)

    wrong_password = login(client, password="wrong-password")
    assert wrong_password.status_code == 401
    assert wrong_password.get_json()["message"] == "Invalid credentials."

    unknown = login(client, email="ghost@x.com")
    assert unknown.status_code == 404

    missing = client.post("/auth/login", json={"email": "a@x.com"})
    assert missing.status_code == 422


def test_current_user_via_bearer_header_and_cookie(client: FlaskClient):
    register(client)
    tokens = login(client).get_json()["data"]

    response = client.get("/auth/current-user", headers=bearer(tokens["accessToken"]))
    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["email"] == "a@x.com"
    assert "refreshToken" not in data

    client.set_cookie("accessToken", tokens["accessToken"])
    response = client.get("/auth/current-user")
    assert response.status_code == 200
    assert response.get_json()["data"]["username"] == "alice"


def test_protected_routes_require_access_token(app):
    client = app.test_client()

    for method, path in [
        ("post", "/auth/logout"),
        ("post", "/auth/resend-email-verification"),
        ("post", "/auth/change-password"),
        ("get", "/auth/current-user"),
    ]:
        response = getattr(client, method)(path)
        assert response.status_code == 401, path
        assert response.get_json()["success"] is False


def test_refresh_token_is_not_an_access_token(client: FlaskClient):
    register(client)
    tokens = login(client).get_json()["data"]

    response = client.get("/auth/current-user", headers=bearer(tokens["refreshToken"]))

    assert response.status_code == 401


def test_refresh_rotation_and_replay(client: FlaskClient):
    register(client)
    original = login(client).get_json()["data"]

    response = client.post("/auth/refresh-token", json={"refreshToken": original["refreshToken"]})
    assert response.status_code == 200
    rotated = response.get_json()["data"]
    assert rotated["refreshToken"] != original["refreshToken"]
    assert any(c.startswith("refreshToken=") for c in _set_cookie_headers(response))

    replay = client.post("/auth/refresh-token", json={"refreshToken": original["refreshToken"]})
    assert replay.status_code == 401
    assert replay.get_json()["message"] == "Refresh token is expired or used."

    assert client.get("/auth/current-user", headers=bearer(rotated["accessToken"])).status_code == 200


def test_refresh_reads_cookie_when_body_is_absent(app):
    client = app.test_client()
    register(client)
    tokens = login(client).get_json()["data"]
    client.set_cookie("refreshToken", tokens["refreshToken"])

    response = client.post("/auth/refresh-token")

    assert response.status_code == 200


def test_refresh_without_token_is_unauthorized(app):
    response = app.test_client().post("/auth/refresh-token")

    assert response.status_code == 401
    assert response.get_json()["message"] == "Unauthorized request."


def test_verify_email_link(client: FlaskClient, outbox, app):
    register(client)
    token = extract_token(VERIFY_LINK, outbox[0])
    assert "Verify your email" in outbox[0].html

    response = client.get(f"/auth/verify-email/{token}")
    assert response.status_code == 200
    assert response.get_json()["data"] == {"isEmailVerified": True}

    with app.app_context():
        assert User.query.filter_by(email="a@x.com").one().is_email_verified is True

    second = client.get(f"/auth/verify-email/{token}")
    assert second.status_code == 400
    assert second.get_json()["message"] == "Token is invalid or expired."


def test_resend_email_verification(client: FlaskClient, outbox):
    register(client)
    access = login(client).get_json()["data"]["accessToken"]

    response = client.post("/auth/resend-email-verification", headers=bearer(access))
    assert response.status_code == 200
    assert len(outbox) == 2

    new_token = extract_token(VERIFY_LINK, outbox[1])
    assert client.get(f"/auth/verify-email/{new_token}").status_code == 200

    again = client.post("/auth/resend-email-verification", headers=bearer(access))
    assert again.status_code == 409


def test_forgot_and_reset_password(client: FlaskClient, outbox):
    register(client)
    old = login(client).get_json()["data"]

    response = client.post("/auth/forgot-password", json={"email": "a@x.com"})
    assert response.status_code == 200
    reset_token = extract_token(RESET_LINK, outbox[-1])
    assert "Reset Password" in outbox[-1].html

    response = client.post(
        f"/auth/reset-password/{reset_token}", json={"newPassword": "brand-new-pw"}
    )
    assert response.status_code == 200

    refresh = client.post("/auth/refresh-token", json={"refreshToken": old["refreshToken"]})
    assert refresh.status_code == 401
    assert login(client).status_code == 401
    assert login(client, password="brand-new-pw").status_code == 200

    reused = client.post(
        f"/auth/reset-password/{reset_token}", json={"newPassword": "other-pw"}
    )
    assert reused.status_code == 400


def test_forgot_password_unknown_email(client: FlaskClient, outbox):
    response = client.post("/auth/forgot-password", json={"email": "ghost@x.com"})

    assert response.status_code == 404
    assert outbox == []


def test_reset_password_requires_new_password(client: FlaskClient):
    response = client.post("/auth/reset-password/abc", json={})

    assert response.status_code == 422


def test_change_password(client: FlaskClient):
    register(client)
    tokens = login(client).get_json()["data"]
    headers = bearer(tokens["accessToken"])

    wrong = client.post(
        "/auth/change-password",
        json={"oldPassword": "nope", "newPassword": "next-password"},
        headers=headers,
    )
    assert wrong.status_code == 401

    response = client.post(
        "/auth/change-password",
        json={"oldPassword": "pw123456", "newPassword": "next-password"},
        headers=headers,
    )
    assert response.status_code == 200

    refresh = client.post("/auth/refresh-token", json={"refreshToken": tokens["refreshToken"]})
    assert refresh.status_code == 401
    assert login(client, password="next-password").status_code == 200
