"""Tests for the authentication HTTP endpoints, including the full 2FA handshake."""

import logging
from unittest.mock import patch

from fastapi.testclient import TestClient
from sqlmodel import Session, select

from storefront.main import app
from storefront.models.two_factor import TwoFactorAuth
from storefront.services import totp
from storefront.services.errors import StoreError

ALICE = {"username": "alice", "email": "alice@x.com", "password": "secret123"}
LOGIN = {"username": "alice", "password": "secret123"}


def _register(client, payload=ALICE) -> int:
    resp = client.post("/api/register", json=payload)
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    return body["userId"]


def _secret_for(engine, user_id: int) -> str:
    with Session(engine) as session:
        record = session.exec(
            select(TwoFactorAuth).where(TwoFactorAuth.user_id == user_id)
        ).first()
        return record.secret_key


def _is_enabled(engine, user_id: int) -> bool:
    with Session(engine) as session:
        record = session.exec(
            select(TwoFactorAuth).where(TwoFactorAuth.user_id == user_id)
        ).first()
        return record.is_enabled


def _enable_two_factor(client, user_id: int) -> str:
    client.post("/api/login", json=LOGIN)
    secret = client.post("/api/enable-2fa").json()["secretKey"]
    client.post("/api/confirm-2fa", json={"userId": user_id, "code": totp.current_code(secret)})
    client.post("/api/logout")
    return secret


# ---------------------------------------------------------------------------
# 1. End-to-end scenario
# ---------------------------------------------------------------------------

def test_full_two_factor_lifecycle(client, engine):
    user_id = _register(client)
    assert _is_enabled(engine, user_id) is False

    # First login: no second factor yet, session issued straight away
    resp = client.post("/api/login", json=LOGIN)
    body = resp.json()
    assert body["success"] is True
    assert "requireTwoFactor" not in body
    assert "user_id" in resp.cookies
    assert client.get("/api/me").json()["user"]["username"] == "alice"

    # Enroll and confirm
    resp = client.post("/api/enable-2fa")
    enrollment = resp.json()
    assert enrollment["success"] is True
    assert enrollment["qrCodeUrl"].startswith("data:image/png;base64,")
    assert enrollment["secretKey"] == _secret_for(engine, user_id)

    code = totp.current_code(enrollment["secretKey"])
    resp = client.post("/api/confirm-2fa", json={"userId": user_id, "code": code})
    assert resp.json()["success"] is True
    assert _is_enabled(engine, user_id) is True

    # Logout
    assert client.post("/api/logout").json()["success"] is True
    assert client.get("/api/me").json()["user"] is None

    # Second login stops at the second factor
    resp = client.post("/api/login", json=LOGIN)
    body = resp.json()
    assert body["success"] is True
    assert body["requireTwoFactor"] is True
    assert body["userId"] == user_id
    assert "user_id" not in resp.cookies
    assert "pending_2fa" in resp.cookies
    assert client.get("/api/me").json()["user"] is None

    # Correct code completes the login
    code = totp.current_code(enrollment["secretKey"])
    resp = client.post("/api/verify-2fa", json={"userId": user_id, "code": code})
    assert resp.json()["success"] is True
    assert "pending_2fa" not in client.cookies
    assert client.get("/api/me").json()["user"]["id"] == user_id


def test_wrong_second_factor_code_issues_no_session(client, engine):
    user_id = _register(client)
    secret = _enable_two_factor(client, user_id)

    client.post("/api/login", json=LOGIN)
    wrong = "000000" if totp.current_code(secret) != "000000" else "111111"
    resp = client.post("/api/verify-2fa", json={"userId": user_id, "code": wrong})

    assert resp.status_code == 200
    assert resp.json() == {"success": False, "message": "Invalid authentication code"}
    assert client.get("/api/me").json()["user"] is None


# ---------------------------------------------------------------------------
# 2. Registration and login failures
# ---------------------------------------------------------------------------

def test_duplicate_registration(client):
    _register(client)
    resp = client.post("/api/register", json={**ALICE, "email": "new@x.com"})
    assert resp.status_code == 200
    assert resp.json()["success"] is False


def test_register_rejects_bad_email(client):
    resp = client.post("/api/register", json={**ALICE, "email": "not-an-email"})
    assert resp.status_code == 400
    assert resp.json()["success"] is False


def test_login_wrong_password(client):
    _register(client)
    resp = client.post("/api/login", json={"username": "alice", "password": "wrong"})
    assert resp.status_code == 200
    assert resp.json() == {"success": False, "message": "Invalid username or password"}
    assert "set-cookie" not in resp.headers


def test_store_failure_returns_500(client):
    with patch(
        "storefront.services.credential_store.CredentialStore.find_user_by_username",
        side_effect=StoreError("db down"),
    ):
        resp = client.post("/api/login", json=LOGIN)
    assert resp.status_code == 500
    body = resp.json()
    assert body["success"] is False
    assert "db down" not in body["message"]


def test_unexpected_error_returns_json_500(client, caplog):
    unsafe_client = TestClient(app, raise_server_exceptions=False)
    with patch(
        "storefront.services.credential_store.CredentialStore.find_two_factor_by_user_id",
        side_effect=OverflowError("int too big to convert"),
    ):
        with caplog.at_level(logging.ERROR):
            resp = unsafe_client.post("/api/confirm-2fa", json={"userId": 1, "code": "123456"})

    assert resp.status_code == 500
    assert resp.json() == {
        "success": False,
        "message": "An internal error occurred, please try again later",
    }
    assert "Unhandled error on POST /api/confirm-2fa" in caplog.text


# ---------------------------------------------------------------------------
# 3. confirm-2fa request validation
# ---------------------------------------------------------------------------

def test_confirm_requires_user_id_and_code(client):
    assert client.post("/api/confirm-2fa", json={"code": "123456"}).status_code == 400
    assert client.post("/api/confirm-2fa", json={"userId": 1}).status_code == 400
    assert client.post("/api/confirm-2fa", json={"userId": 1, "code": ""}).status_code == 400
    assert client.post("/api/confirm-2fa", json={"userId": 0, "code": "123456"}).status_code == 400


def test_confirm_rejects_non_numeric_user_id(client):
    resp = client.post("/api/confirm-2fa", json={"userId": "abc", "code": "123456"})
    assert resp.status_code == 400
    assert resp.json()["success"] is False


def test_confirm_rejects_out_of_range_user_id(client):
    resp = client.post("/api/confirm-2fa", json={"userId": 10**20, "code": "123456"})
    assert resp.status_code == 400
    assert resp.json()["success"] is False


def test_confirm_accepts_numeric_string_user_id(client, engine):
    user_id = _register(client)
    code = totp.current_code(_secret_for(engine, user_id))
    resp = client.post("/api/confirm-2fa", json={"userId": str(user_id), "code": code})
    assert resp.status_code == 200
    assert resp.json()["success"] is True


def test_confirm_unknown_user_not_configured(client):
    resp = client.post("/api/confirm-2fa", json={"userId": 999, "code": "123456"})
    assert resp.status_code == 200
    assert resp.json()["success"] is False


# ---------------------------------------------------------------------------
# 4. Session-guarded endpoints
# ---------------------------------------------------------------------------

def test_enable_2fa_requires_session(client):
    assert client.post("/api/enable-2fa").status_code == 401


def test_me_without_session(client):
    resp = client.get("/api/me")
    assert resp.status_code == 200
    assert resp.json() == {"user": None}


def test_me_hides_password_hash(client):
    _register(client)
    client.post("/api/login", json=LOGIN)
    user = client.get("/api/me").json()["user"]
    assert user["email"] == "alice@x.com"
    assert "password_hash" not in user


# ---------------------------------------------------------------------------
# 5. Pending password login
# ---------------------------------------------------------------------------

def test_verify_without_password_login_issues_no_session(client):
    user_id = _register(client)
    secret = _enable_two_factor(client, user_id)
    client.cookies.clear()

    resp = client.post(
        "/api/verify-2fa", json={"userId": user_id, "code": totp.current_code(secret)}
    )

    assert resp.status_code == 200
    assert resp.json() == {"success": False, "message": "Please log in with your password first"}
    assert "user_id" not in resp.cookies
    assert client.get("/api/me").json()["user"] is None


def test_pending_login_only_covers_its_own_user(client, engine):
    alice_id = _register(client)
    bob_id = _register(client, {"username": "bob", "email": "bob@x.com", "password": "pw"})
    _enable_two_factor(client, alice_id)
    bob_secret = _secret_for(engine, bob_id)

    # Alice passes the password step, then someone submits Bob's code
    client.post("/api/login", json=LOGIN)
    resp = client.post(
        "/api/verify-2fa", json={"userId": bob_id, "code": totp.current_code(bob_secret)}
    )

    assert resp.json()["success"] is False
    assert client.get("/api/me").json()["user"] is None


def test_pending_token_is_not_a_session(client):
    user_id = _register(client)
    _enable_two_factor(client, user_id)

    resp = client.post("/api/login", json=LOGIN)
    client.cookies.set("user_id", resp.cookies["pending_2fa"])

    assert client.get("/api/me").json()["user"] is None
    assert client.post("/api/enable-2fa").status_code == 401
