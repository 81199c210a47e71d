from __future__ import annotations

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import jwt
import pytest

from backend.app.core.config import settings
from backend.app.core.security import (
    InvalidToken,
    hash_password,
    issue_token,
    sanitize_user,
    verify_password,
    verify_token,
)


def _claims_user(role: str = "user") -> SimpleNamespace:
    return SimpleNamespace(id="user-1", email="someone@example.com", role=role)


def test_password_round_trip() -> None:
    stored = hash_password("hunter2")
    assert stored != "hunter2"
    assert verify_password("hunter2", stored)
    assert not verify_password("hunter3", stored)
    assert not verify_password("hunter2", "not-a-hash")
    assert not verify_password("", stored)


def test_issue_and_verify_token() -> None:
    token = issue_token(_claims_user("admin"))
    claims = verify_token(token)
    assert (claims.id, claims.email, claims.role) == ("user-1", "someone@example.com", "admin")
    assert claims.is_admin


def test_token_expires_after_seven_days() -> None:
    issued = datetime.now(timezone.utc) - timedelta(days=7, minutes=1)
    token = issue_token(_claims_user(), now=issued)
    payload = jwt.decode(token, options={"verify_signature": False})
    assert payload["exp"] - payload["iat"] == 7 * 24 * 3600
    with pytest.raises(InvalidToken):
        verify_token(token)


def test_expired_and_forged_tokens_fail_identically() -> None:
    expired = issue_token(_claims_user(), now=datetime.now(timezone.utc) - timedelta(days=8))
    forged = jwt.encode(
        {
            "sub": "user-1",
            "id": "user-1",
            "email": "x@example.com",
            "role": "admin",
            "iat": datetime.now(timezone.utc),
            "exp": datetime.now(timezone.utc) + timedelta(days=1),
        },
        "not-the-secret",
        algorithm="HS256",
    )
    messages = []
    for token in (expired, forged, "garbage", ""):
        with pytest.raises(InvalidToken) as exc_info:
            verify_token(token)
        messages.append(str(exc_info.value))
    assert len(set(messages)) == 1


def test_token_missing_role_claim_is_invalid() -> None:
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {"sub": "u", "id": "u", "email": "u@example.com", "iat": now, "exp": now + timedelta(hours=1)},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )
    with pytest.raises(InvalidToken):
        verify_token(token)


def test_sanitize_user_drops_hash(regular_user) -> None:
    public = sanitize_user(regular_user)
    assert "password_hash" not in public
    assert "passwordHash" not in public
    assert public["email"] == regular_user.email
    assert sanitize_user(None) is None


def test_register_then_login(app) -> None:
    response = app.post(
        "/api/auth/register",
        json={"name": "Lan", "email": "Lan@Example.com", "password": "pw123456"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["user"]["email"] == "lan@example.com"
    assert body["user"]["role"] == "user"
    assert "passwordHash" not in body["user"]
    assert verify_token(body["token"]).email == "lan@example.com"

    duplicate = app.post(
        "/api/auth/register",
        json={"name": "Lan", "email": "LAN@example.com", "password": "other"},
    )
    assert duplicate.status_code == 400

    login = app.post("/api/auth/login", json={"email": "LAN@EXAMPLE.COM", "password": "pw123456"})
    assert login.status_code == 200
    me = app.get("/api/auth/me", headers={"Authorization": f"Bearer {login.json()['token']}"})
    assert me.status_code == 200
    assert me.json()["user"]["name"] == "Lan"


def test_register_requires_all_fields(app) -> None:
    response = app.post("/api/auth/register", json={"email": "a@example.com"})
    assert response.status_code == 400
    assert response.json() == {"message": "Missing required information"}


def test_login_rejects_bad_password(app, regular_user) -> None:
    wrong = app.post("/api/auth/login", json={"email": regular_user.email, "password": "nope"})
    unknown = app.post("/api/auth/login", json={"email": "ghost@example.com", "password": "nope"})
    assert wrong.status_code == unknown.status_code == 400
    assert wrong.json() == unknown.json()


def test_admin_login_requires_admin_role(app, regular_user, admin_user, default_password) -> None:
    denied = app.post(
        "/api/auth/admin-login",
        json={"email": regular_user.email, "password": default_password},
    )
    assert denied.status_code == 403

    allowed = app.post(
        "/api/auth/admin-login",
        json={"email": admin_user.email, "password": default_password},
    )
    assert allowed.status_code == 200
    assert allowed.json()["user"]["role"] == "admin"


def test_gate_missing_or_malformed_header(app) -> None:
    assert app.get("/api/users").status_code == 401
    assert app.get("/api/users", headers={"Authorization": "Token abc"}).status_code == 401
    assert app.get("/api/users", headers={"Authorization": "Bearer"}).status_code == 401


def test_gate_non_admin_gets_403(app, user_headers) -> None:
    response = app.get("/api/users", headers=user_headers)
    assert response.status_code == 403


def test_gate_expired_and_forged_tokens_get_same_401(app, regular_user) -> None:
    expired = issue_token(regular_user, now=datetime.now(timezone.utc) - timedelta(days=30))
    forged = jwt.encode(
        {
            "sub": regular_user.id,
            "id": regular_user.id,
            "email": regular_user.email,
            "role": "admin",
            "iat": datetime.now(timezone.utc),
            "exp": datetime.now(timezone.utc) + timedelta(days=1),
        },
        "attacker-secret",
        algorithm="HS256",
    )
    responses = [
        app.get("/api/users", headers={"Authorization": f"Bearer {token}"}) for token in (expired, forged)
    ]
    assert [response.status_code for response in responses] == [401, 401]
    assert responses[0].json() == responses[1].json()


def test_gate_admin_passes(app, admin_headers) -> None:
    response = app.get("/api/users", headers=admin_headers)
    assert response.status_code == 200
    assert all("passwordHash" not in user for user in response.json()["users"])
