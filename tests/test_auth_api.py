from datetime import datetime, timedelta

import pytest
from dateutil.relativedelta import relativedelta

from planbee.core.security import create_access_token, decode_access_token
from planbee.interfaces.http.deps import get_account_service
from planbee.modules.accounts.service import next_tag_change_allowed

AFTER_COOLDOWN = relativedelta(months=3, days=1)


def _bearer(token):
    return {"Authorization": f"Bearer {token}"}


def _contains_key(payload, key):
    if isinstance(payload, dict):
        return key in payload or any(_contains_key(value, key) for value in payload.values())
    if isinstance(payload, list):
        return any(_contains_key(item, key) for item in payload)
    return False


def test_home_endpoint(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.text == "API Running"
    assert response.headers["content-type"].startswith("text/plain")


def test_register_returns_token_and_public_profile(register):
    response = register()

    assert response.status_code == 201
    payload = response.json()
    assert payload["success"] is True
    assert payload["message"] == "User registered successfully"
    user = payload["user"]
    assert user["tag"] == "john_doe"
    assert user["email"] == "a@x.com"
    assert user["username"] == "John"
    assert user["profilePicture"] is None
    assert user["stats"] == {
        "totalTasksCompleted": 0,
        "currentStreak": 0,
        "highestStreak": 0,
        "totalPoints": 0,
    }
    assert decode_access_token(payload["token"]) == user["id"]
    assert not _contains_key(payload, "password")
    assert not _contains_key(payload, "password_hash")


def test_register_normalizes_email(register):
    response = register(email="  A@X.COM ")

    assert response.status_code == 201
    assert response.json()["user"]["email"] == "a@x.com"


def test_register_duplicate_email(register):
    assert register().status_code == 201

    response = register(tag="other_tag")

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "User with this email already exists"}


def test_register_duplicate_email_ignores_case(register):
    assert register().status_code == 201

    response = register(email="A@X.com", tag="other_tag")

    assert response.status_code == 400
    assert response.json()["message"] == "User with this email already exists"


def test_register_duplicate_tag(register):
    assert register().status_code == 201

    response = register(email="b@x.com")

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "This tag is already taken"}


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"email": None}, "Email, password, tag, and username are required"),
        ({"username": ""}, "Email, password, tag, and username are required"),
        ({"password": "12345"}, "Password must be at least 6 characters long"),
        ({"tag": "john-doe"}, "Tag can only contain letters, numbers, and underscores"),
        ({"tag": "jd"}, "Tag must be between 3 and 30 characters"),
        ({"tag": "j" * 31}, "Tag must be between 3 and 30 characters"),
        ({"username": "u" * 31}, "Username must be at most 30 characters"),
        # first failing check wins
        ({"password": "123", "tag": "bad tag!"}, "Password must be at least 6 characters long"),
        ({"tag": "x!"}, "Tag can only contain letters, numbers, and underscores"),
    ],
)
def test_register_validation_messages(register, overrides, message):
    response = register(**overrides)

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": message}


def test_register_empty_body(client):
    response = client.post("/api/auth/register", json={})

    assert response.status_code == 400
    assert response.json()["message"] == "Email, password, tag, and username are required"


def test_register_malformed_body(client):
    response = client.post(
        "/api/auth/register",
        content="not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Invalid request body"}


def test_login_with_email_and_tag(client, register):
    registered = register().json()

    by_email = client.post("/api/auth/login", json={"identifier": "a@x.com", "password": "secret1"})
    by_tag = client.post("/api/auth/login", json={"identifier": "john_doe", "password": "secret1"})

    assert by_email.status_code == 200
    assert by_tag.status_code == 200
    assert by_email.json()["message"] == "Login successful"
    assert by_email.json()["user"] == by_tag.json()["user"] == registered["user"]
    assert decode_access_token(by_email.json()["token"]) == registered["user"]["id"]
    tokens = {registered["token"], by_email.json()["token"], by_tag.json()["token"]}
    assert len(tokens) == 3


def test_login_email_is_case_insensitive(client, register):
    register()

    response = client.post("/api/auth/login", json={"identifier": "A@X.COM", "password": "secret1"})

    assert response.status_code == 200


def test_login_failures_are_indistinguishable(client, register):
    register()

    wrong_password = client.post("/api/auth/login", json={"identifier": "john_doe", "password": "wrong"})
    unknown = client.post("/api/auth/login", json={"identifier": "nobody", "password": "secret1"})

    assert wrong_password.status_code == unknown.status_code == 400
    assert wrong_password.json() == unknown.json() == {"success": False, "message": "Invalid credentials"}


def test_login_requires_both_fields(client):
    response = client.post("/api/auth/login", json={"identifier": "john_doe"})

    assert response.status_code == 400
    assert response.json()["message"] == "Identifier (email or tag) and password are required"


def test_me_returns_profile(client, register):
    registered = register().json()

    response = client.get("/api/auth/me", headers=_bearer(registered["token"]))

    assert response.status_code == 200
    assert response.json()["user"] == registered["user"]


def test_change_tag_requires_token(client):
    response = client.post("/api/auth/change-tag", json={"newTag": "new_tag_1"})

    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "No token provided"}


@pytest.mark.parametrize("token", ["garbage", "a.b.c"])
def test_change_tag_rejects_malformed_token(client, token):
    response = client.post("/api/auth/change-tag", json={"newTag": "new_tag_1"}, headers=_bearer(token))

    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Invalid token"}


def test_change_tag_rejects_expired_token(client, register):
    user_id = register().json()["user"]["id"]
    expired = create_access_token(user_id, expires_delta=timedelta(seconds=-1))

    response = client.post("/api/auth/change-tag", json={"newTag": "new_tag_1"}, headers=_bearer(expired))

    assert response.status_code == 401


def test_change_tag_rejects_token_for_unknown_account(client):
    token = create_access_token("00000000-0000-0000-0000-000000000000")

    response = client.post("/api/auth/change-tag", json={"newTag": "new_tag_1"}, headers=_bearer(token))

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid token"


def test_change_tag_within_cooldown_reports_next_date(client, register, clock):
    registered_at = clock.now
    token = register().json()["token"]

    response = client.post("/api/auth/change-tag", json={"newTag": "new_tag_1"}, headers=_bearer(token))

    assert response.status_code == 403
    payload = response.json()
    next_allowed = next_tag_change_allowed(registered_at)
    assert payload["success"] is False
    assert payload["message"] == (
        "Tag can only be changed every 3 months. "
        f"Next change allowed on {next_allowed.strftime('%a %b %d %Y')}"
    )
    assert datetime.fromisoformat(payload["nextChangeAllowed"]) == next_allowed


def test_change_tag_two_months_later_is_rejected(client, register, clock):
    token = register().json()["token"]
    clock.advance(relativedelta(months=2))

    response = client.post("/api/auth/change-tag", json={"newTag": "new_tag_1"}, headers=_bearer(token))

    assert response.status_code == 403


def test_change_tag_after_cooldown(client, register, clock):
    token = register().json()["token"]
    clock.advance(AFTER_COOLDOWN)

    response = client.post("/api/auth/change-tag", json={"newTag": "new_tag_1"}, headers=_bearer(token))

    assert response.status_code == 200
    payload = response.json()
    assert payload == {
        "success": True,
        "message": "Tag changed successfully",
        "oldTag": "john_doe",
        "newTag": "new_tag_1",
    }
    assert not _contains_key(payload, "password")

    me = client.get("/api/auth/me", headers=_bearer(token)).json()
    assert me["user"]["tag"] == "new_tag_1"

    old = client.post("/api/auth/login", json={"identifier": "john_doe", "password": "secret1"})
    new = client.post("/api/auth/login", json={"identifier": "new_tag_1", "password": "secret1"})
    assert old.status_code == 400
    assert new.status_code == 200


def test_change_tag_resets_cooldown(client, register, clock):
    token = register().json()["token"]
    clock.advance(AFTER_COOLDOWN)
    first = client.post("/api/auth/change-tag", json={"newTag": "new_tag_1"}, headers=_bearer(token))
    assert first.status_code == 200
    changed_at = clock.now

    clock.advance(timedelta(days=1))
    second = client.post("/api/auth/change-tag", json={"newTag": "new_tag_2"}, headers=_bearer(token))

    assert second.status_code == 403
    expected = next_tag_change_allowed(changed_at)
    assert datetime.fromisoformat(second.json()["nextChangeAllowed"]) == expected


@pytest.mark.parametrize(
    "body, message",
    [
        ({}, "New tag is required"),
        ({"newTag": "bad tag"}, "Tag can only contain letters, numbers, and underscores"),
        ({"newTag": "ab"}, "Tag must be between 3 and 30 characters"),
    ],
)
def test_change_tag_validation(client, register, clock, body, message):
    token = register().json()["token"]
    clock.advance(AFTER_COOLDOWN)

    response = client.post("/api/auth/change-tag", json=body, headers=_bearer(token))

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": message}


def test_change_tag_to_taken_tag(client, register, clock):
    token = register().json()["token"]
    register(email="b@x.com", tag="taken_tag")
    clock.advance(AFTER_COOLDOWN)

    response = client.post("/api/auth/change-tag", json={"newTag": "taken_tag"}, headers=_bearer(token))

    assert response.status_code == 400
    assert response.json()["message"] == "This tag is already taken"


def test_unexpected_failure_returns_server_error(app, client):
    class BrokenService:
        async def register(self, payload):
            raise RuntimeError("database is gone")

    app.dependency_overrides[get_account_service] = lambda: BrokenService()

    response = client.post(
        "/api/auth/register",
        json={"email": "a@x.com", "password": "secret1", "tag": "john_doe", "username": "John"},
    )

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Server error during registration"}


def test_register_rejects_tag_with_surrounding_whitespace(register):
    response = register(tag=" john_doe ")

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "message": "Tag can only contain letters, numbers, and underscores",
    }


def test_change_tag_rejects_tag_with_surrounding_whitespace(client, register, clock):
    token = register().json()["token"]
    clock.advance(AFTER_COOLDOWN)

    response = client.post("/api/auth/change-tag", json={"newTag": " new_tag_1 "}, headers=_bearer(token))

    assert response.status_code == 400
    assert response.json()["message"] == "Tag can only contain letters, numbers, and underscores"
    me = client.get("/api/auth/me", headers=_bearer(token)).json()
    assert me["user"]["tag"] == "john_doe"
