"""
Authentication endpoints
Tests: register, login, profile, change/forgot/reset password, refresh,
       token validation and the auth rate limiter
"""

from datetime import datetime, timedelta

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from app.core.errors import register_exception_handlers
from app.models.database import User, UserRole, get_db
from app.services.auth import (
    create_access_token, create_token_for_user, require_admin, verify_password, verify_token
)
from app.services.rate_limit import RateLimiter

TEST_PASSWORD = "TestPass123"

pytestmark = pytest.mark.api


class TestRegisterAndLogin:

    def test_register_returns_user_and_token(self, client, test_db):
        response = client.post("/v1/auth/register", json={
            "name": "Ana",
            "email": "ana@alacena.app",
            "password": "Secreta123",
        })

        assert response.status_code == 201
        body = response.json()
        assert body["user"]["email"] == "ana@alacena.app"
        assert body["user"]["role"] == "user"
        assert "hashed_password" not in body["user"]
        assert "reset_token" not in body["user"]

        payload = verify_token(body["token"])
        assert payload["email"] == "ana@alacena.app"
        assert payload["role"] == "user"
        assert test_db.query(User).filter(User.email == "ana@alacena.app").count() == 1

    def test_register_duplicate_email(self, client, test_user):
        response = client.post("/v1/auth/register", json={
            "name": "Otra",
            "email": test_user.email,
            "password": "Secreta123",
        })

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Email already registered"}

    def test_register_weak_password_is_a_validation_error(self, client):
        response = client.post("/v1/auth/register", json={
            "name": "Ana",
            "email": "ana@alacena.app",
            "password": "short",
        })

        assert response.status_code == 422
        body = response.json()
        assert body["error_code"] == "VALIDATION_ERROR"
        assert "password" in body["errors"]

    def test_login_updates_last_login(self, client, test_user, test_db):
        assert test_user.last_login is None

        response = client.post("/v1/auth/login", json={"email": test_user.email, "password": TEST_PASSWORD})

        assert response.status_code == 200
        assert response.json()["user"]["id"] == test_user.id
        test_db.refresh(test_user)
        assert test_user.last_login is not None

    def test_login_wrong_password(self, client, test_user):
        response = client.post("/v1/auth/login", json={"email": test_user.email, "password": "Wrong1234"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"

    def test_login_unknown_email(self, client):
        response = client.post("/v1/auth/login", json={"email": "nadie@alacena.app", "password": TEST_PASSWORD})
        assert response.status_code == 401

    def test_login_inactive_user(self, client, test_user, test_db):
        test_user.is_active = False
        test_db.commit()

        response = client.post("/v1/auth/login", json={"email": test_user.email, "password": TEST_PASSWORD})
        assert response.status_code == 401


class TestTokens:

    def test_missing_token(self, client):
        response = client.get("/v1/auth/profile")
        assert response.status_code == 401
        assert response.json()["message"] == "No authentication token provided"

    def test_malformed_token(self, client):
        response = client.get("/v1/auth/profile", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401
        assert response.json()["error_code"] == "INVALID_TOKEN"

    def test_expired_token(self, client, test_user):
        token = create_access_token({"sub": str(test_user.id)}, expires_delta=timedelta(seconds=-10))
        response = client.get("/v1/auth/profile", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["message"] == "Token expired"

    def test_token_for_deleted_user(self, client):
        token = create_access_token({"sub": "9999"})
        response = client.get("/v1/auth/profile", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_inactive_user_is_forbidden(self, client, test_user, test_db, auth_headers):
        test_user.is_active = False
        test_db.commit()

        response = client.get("/v1/auth/profile", headers=auth_headers)
        assert response.status_code == 403

    def test_refresh_issues_a_new_valid_token(self, authenticated_client, test_user):
        response = authenticated_client.post("/v1/auth/refresh")

        assert response.status_code == 200
        assert verify_token(response.json()["token"])["sub"] == str(test_user.id)

    def test_require_admin(self, test_user, test_db, auth_headers):
        admin_app = FastAPI()
        register_exception_handlers(admin_app)
        admin_app.dependency_overrides[get_db] = lambda: test_db

        @admin_app.get("/admin-only")
        def admin_only(user: User = Depends(require_admin)):
            return {"ok": True}

        admin_client = TestClient(admin_app)
        assert admin_client.get("/admin-only", headers=auth_headers).status_code == 403

        test_user.role = UserRole.ADMIN
        test_db.commit()
        headers = {"Authorization": f"Bearer {create_token_for_user(test_user)}"}
        assert admin_client.get("/admin-only", headers=headers).status_code == 200


class TestProfileAndPasswords:

    def test_get_profile(self, authenticated_client, test_user):
        response = authenticated_client.get("/v1/auth/profile")
        assert response.status_code == 200
        assert response.json()["user"]["email"] == test_user.email

    def test_update_profile(self, authenticated_client):
        response = authenticated_client.put("/v1/auth/profile", json={
            "name": "Nuevo Nombre",
            "preferences": {"theme": "dark"},
        })

        assert response.status_code == 200
        user = response.json()["user"]
        assert user["name"] == "Nuevo Nombre"
        assert user["preferences"] == {"theme": "dark"}

    def test_change_password(self, authenticated_client, test_user, test_db):
        response = authenticated_client.post("/v1/auth/change-password", json={
            "current_password": TEST_PASSWORD,
            "new_password": "Cambiada456",
        })

        assert response.status_code == 200
        test_db.refresh(test_user)
        assert verify_password("Cambiada456", test_user.hashed_password)

    def test_change_password_wrong_current(self, authenticated_client):
        response = authenticated_client.post("/v1/auth/change-password", json={
            "current_password": "NotMyPass1",
            "new_password": "Cambiada456",
        })
        assert response.status_code == 401

    def test_forgot_password_same_answer_for_unknown_email(self, client, test_user):
        known = client.post("/v1/auth/forgot-password", json={"email": test_user.email})
        unknown = client.post("/v1/auth/forgot-password", json={"email": "nadie@alacena.app"})

        assert known.status_code == unknown.status_code == 200
        assert known.json()["message"] == unknown.json()["message"]
        assert "reset_token" not in unknown.json()

    def test_forgot_then_reset_password(self, client, test_user, test_db):
        response = client.post("/v1/auth/forgot-password", json={"email": test_user.email})
        token = response.json()["reset_token"]
        assert len(token) == 64

        test_db.refresh(test_user)
        assert test_user.reset_token == token
        assert test_user.reset_token_expiry > datetime.utcnow() + timedelta(minutes=59)

        response = client.post(f"/v1/auth/reset-password/{token}", json={"password": "Restablecida1"})
        assert response.status_code == 200

        test_db.refresh(test_user)
        assert test_user.reset_token is None
        assert verify_password("Restablecida1", test_user.hashed_password)

        # Tokens are single use
        response = client.post(f"/v1/auth/reset-password/{token}", json={"password": "OtraVez123"})
        assert response.status_code == 400

    def test_expired_reset_token(self, client, test_user, test_db):
        test_user.reset_token = "a" * 64
        test_user.reset_token_expiry = datetime.utcnow() - timedelta(minutes=1)
        test_db.commit()

        response = client.post(f"/v1/auth/reset-password/{'a' * 64}", json={"password": "Restablecida1"})
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid or expired token"


class TestRateLimit:

    def test_limiter_counts_per_identifier(self, redis_client):
        limiter = RateLimiter("test", max_requests=2, window_seconds=60)

        assert limiter.hit(redis_client, "1.1.1.1") == 1
        assert limiter.hit(redis_client, "1.1.1.1") == 2
        assert limiter.hit(redis_client, "2.2.2.2") == 1
        assert 0 < redis_client.ttl("ratelimit:test:1.1.1.1") <= 60

    def test_auth_routes_return_429_over_the_limit(self, client, redis_client, monkeypatch):
        from app.services import rate_limit
        monkeypatch.setattr(rate_limit.auth_rate_limiter, "max_requests", 2)

        for _ in range(2):
            assert client.post("/v1/auth/login", json={"email": "x@alacena.app", "password": "x"}).status_code == 401

        response = client.post("/v1/auth/login", json={"email": "x@alacena.app", "password": "x"})
        assert response.status_code == 429
        assert response.json()["error_code"] == "RATE_LIMITED"
