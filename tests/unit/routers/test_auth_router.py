"""Unit tests for the access-code authentication endpoints."""

from unittest.mock import AsyncMock

from app.api.deps import get_verifier
from app.core.errors import AuthUnavailable
from app.core.security import SESSION_COOKIE


class TestLogin:
    def test_valid_code_sets_session_cookie(self, client, access_code):
        response = client.post("/api/auth/login", json={"code": access_code})

        assert response.status_code == 200
        assert response.json() == {"message": "Login successful"}
        assert SESSION_COOKIE in response.cookies
        assert "httponly" in response.headers["set-cookie"].lower()

    def test_wrong_code_is_401(self, client):
        response = client.post("/api/auth/login", json={"code": "wrong"})

        assert response.status_code == 401
        assert SESSION_COOKIE not in response.cookies

    def test_verifier_outage_is_503(self, client, access_code):
        verifier = AsyncMock()
        verifier.verify.side_effect = AuthUnavailable()
        client.app.dependency_overrides[get_verifier] = lambda: verifier

        response = client.post("/api/auth/login", json={"code": access_code})

        assert response.status_code == 503

    def test_missing_code_is_422(self, client):
        response = client.post("/api/auth/login", json={})

        assert response.status_code == 422


class TestQrLogin:
    def test_qr_link_logs_in_and_redirects(self, client, access_code):
        response = client.get(
            "/api/auth/qr", params={"code": access_code}, follow_redirects=False
        )

        assert response.status_code == 303
        assert response.headers["location"] == "http://localhost:3000"
        assert SESSION_COOKIE in response.cookies

    def test_qr_link_with_wrong_code(self, client):
        response = client.get(
            "/api/auth/qr", params={"code": "wrong"}, follow_redirects=False
        )

        assert response.status_code == 401


class TestMeAndLogout:
    def test_me_when_anonymous(self, client):
        response = client.get("/api/auth/me")

        assert response.json() == {"authenticated": False, "name": None, "showWelcome": False}

    def test_me_after_login_shows_welcome(self, guest_client):
        response = guest_client.get("/api/auth/me")

        body = response.json()
        assert body["authenticated"] is True
        assert body["name"] == "Invité"
        assert body["showWelcome"] is True

    def test_logout_ends_session(self, guest_client):
        response = guest_client.post("/api/auth/logout")

        assert response.status_code == 200
        assert guest_client.get("/api/auth/me").json()["authenticated"] is False
        assert guest_client.get("/api/images").status_code == 401

    def test_forged_cookie_is_rejected(self, client):
        client.cookies.set(SESSION_COOKIE, "forged")

        assert client.get("/api/images").status_code == 401
