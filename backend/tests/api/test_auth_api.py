"""HTTP tests for the /api/v1/auth endpoints."""

from __future__ import annotations

import pytest
from tests.factories.user import DEFAULT_PASSWORD, UserFactory

BASE = "/api/v1/auth"


def _register(client, email="alice@example.com", password=DEFAULT_PASSWORD, name="Alice"):
    return client.post(
        f"{BASE}/register", json={"name": name, "email": email, "password": password}
    )


def _login(client, email, password=DEFAULT_PASSWORD):
    return client.post(f"{BASE}/login", json={"email": email, "password": password})


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class TestRegister:
    def test_creates_unverified_user(self, client, outbox):
        resp = _register(client)

        assert resp.status_code == 201
        body = resp.get_json()
        assert body["data"]["email"] == "alice@example.com"
        assert body["data"]["email_verified_at"] is None
        assert body["meta"]["email_verification_required"] is True
        assert "password" not in body["data"]
        assert len(outbox) == 1
        assert outbox[0].to_address == "alice@example.com"

    def test_duplicate_email_conflicts(self, client, session):
        UserFactory(email="taken@example.com")
        session.flush()

        resp = _register(client, email="TAKEN@example.com")

        assert resp.status_code == 409
        assert resp.mimetype == "application/problem+json"
        assert resp.get_json()["code"] == "email_already_exists"

    @pytest.mark.parametrize(
        "payload",
        [
            {"name": "A", "email": "not-an-email", "password": DEFAULT_PASSWORD},
            {"name": "A", "email": "a@example.com", "password": "short"},
            {"name": "A", "email": "a@example.com", "password": "x" * 73},
            {"email": "a@example.com", "password": DEFAULT_PASSWORD},
        ],
    )
    def test_invalid_payload(self, client, payload):
        resp = client.post(f"{BASE}/register", json=payload)

        assert resp.status_code == 422
        assert resp.get_json()["code"] == "validation_error"


class TestLogin:
    def test_unverified_user_is_refused(self, client, session):
        user = UserFactory(pending=True)
        session.flush()

        resp = _login(client, user.email)

        assert resp.status_code == 403
        assert resp.get_json()["code"] == "email_verification_required"

    def test_wrong_password_and_unknown_email_look_alike(self, client, session):
        user = UserFactory()
        session.flush()

        wrong = _login(client, user.email, "not-the-password")
        unknown = _login(client, "ghost@example.com")

        assert wrong.status_code == unknown.status_code == 401
        assert wrong.get_json()["code"] == unknown.get_json()["code"] == "invalid_credentials"
        assert wrong.get_json()["detail"] == unknown.get_json()["detail"]

    def test_returns_token_pair(self, client, session):
        user = UserFactory()
        session.flush()

        resp = _login(client, user.email)

        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["token_type"] == "bearer"
        assert len(data["refresh_token"]) == 64
        assert data["access_token"].count(".") == 2


class TestVerification:
    def test_verify_with_unknown_token(self, client):
        resp = client.get(f"{BASE}/verify-email", query_string={"token": "nope"})

        assert resp.status_code == 422
        assert resp.get_json()["code"] == "invalid_verification_token"

    def test_verify_requires_token(self, client):
        resp = client.get(f"{BASE}/verify-email")
        assert resp.status_code == 422

    def test_resend_unknown_email_is_generic(self, client, outbox):
        resp = client.post(f"{BASE}/resend-verification", json={"email": "ghost@example.com"})

        assert resp.status_code == 200
        assert "verification email" in resp.get_json()["data"]["message"]
        assert outbox == []

    def test_resend_for_verified_user_conflicts(self, client, session):
        user = UserFactory()
        session.flush()

        resp = client.post(f"{BASE}/resend-verification", json={"email": user.email})

        assert resp.status_code == 409
        assert resp.get_json()["code"] == "already_verified"

    def test_resend_rotates_token(self, client, session, outbox):
        user = UserFactory(pending=True)
        old_token = user.email_verification_token
        session.flush()

        resp = client.post(f"{BASE}/resend-verification", json={"email": user.email})

        assert resp.status_code == 200
        assert len(outbox) == 1
        assert outbox[0].token != old_token


class TestTokenLifecycle:
    def test_full_flow(self, client, outbox):
        assert _register(client, email="flow@example.com").status_code == 201

        dev = client.post(f"{BASE}/dev/verification-token", json={"email": "flow@example.com"})
        assert dev.status_code == 200
        token = dev.get_json()["data"]["verification_token"]
        assert token == outbox[0].token

        verified = client.get(f"{BASE}/verify-email", query_string={"token": token})
        assert verified.status_code == 200
        assert verified.get_json()["data"]["email_verified_at"] is not None

        again = client.get(f"{BASE}/verify-email", query_string={"token": token})
        assert again.status_code == 422

        pair = _login(client, "flow@example.com", DEFAULT_PASSWORD).get_json()["data"]

        me = client.get(f"{BASE}/me", headers=_bearer(pair["access_token"]))
        assert me.status_code == 200
        assert me.get_json()["data"]["email"] == "flow@example.com"

        rotated = client.post(f"{BASE}/refresh", json={"refresh_token": pair["refresh_token"]})
        assert rotated.status_code == 200
        new_pair = rotated.get_json()["data"]
        assert new_pair["refresh_token"] != pair["refresh_token"]

        reused = client.post(f"{BASE}/refresh", json={"refresh_token": pair["refresh_token"]})
        assert reused.status_code == 401
        assert reused.get_json()["code"] == "token_invalid"

        out = client.post(f"{BASE}/logout", headers=_bearer(new_pair["access_token"]))
        assert out.status_code == 204

        after = client.post(f"{BASE}/refresh", json={"refresh_token": new_pair["refresh_token"]})
        assert after.status_code == 401

    def test_unknown_refresh_token(self, client):
        resp = client.post(f"{BASE}/refresh", json={"refresh_token": "f" * 64})

        assert resp.status_code == 401
        assert resp.get_json()["code"] == "token_invalid"

    def test_dev_token_for_unknown_email(self, client):
        resp = client.post(
            f"{BASE}/dev/verification-token", json={"email": "ghost@example.com"}
        )
        assert resp.status_code == 404


class TestProtectedRoutes:
    def test_me_without_token(self, client):
        resp = client.get(f"{BASE}/me")

        assert resp.status_code == 401
        assert resp.get_json()["code"] == "token_missing"

    def test_me_with_garbage_token(self, client):
        resp = client.get(f"{BASE}/me", headers=_bearer("not.a.jwt"))

        assert resp.status_code == 401
        assert resp.get_json()["code"] == "token_invalid"

    def test_logout_requires_token(self, client):
        assert client.post(f"{BASE}/logout").status_code == 401

    def test_request_id_is_echoed(self, client):
        resp = client.get(f"{BASE}/me", headers={"X-Request-ID": "req-123"})

        assert resp.headers["X-Request-ID"] == "req-123"
        assert resp.get_json()["request_id"] == "req-123"


def test_dev_endpoint_hidden_when_disabled(app, client, session):
    app.config["EXPOSE_DEV_ENDPOINTS"] = False
    try:
        resp = client.post(
            f"{BASE}/dev/verification-token", json={"email": "a@example.com"}
        )
    finally:
        app.config["EXPOSE_DEV_ENDPOINTS"] = True

    assert resp.status_code == 404
    assert resp.get_json()["code"] == "not_found"
