"""
Tests for authentication endpoints and bearer token handling.
"""
from datetime import timedelta

from app.core.security import create_access_token


class TestLogin:
    """Tests for POST /api/auth/login."""

    def test_login_success(self, client, candidate_user):
        response = client.post(
            "/api/auth/login",
            json={"email": "candidate@example.com", "password": "testpassword123"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["token_type"] == "bearer"
        assert data["access_token"]
        assert data["user"]["id"] == candidate_user.id
        assert data["user"]["role"] == "candidate"
        assert "password_hash" not in data["user"]

    def test_token_works_for_protected_routes(self, client, candidate_user):
        token = client.post(
            "/api/auth/login",
            json={"email": "candidate@example.com", "password": "testpassword123"},
        ).json()["access_token"]

        response = client.get(
            "/api/auth/me", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 200
        assert response.json()["email"] == "candidate@example.com"

    def test_wrong_password(self, client, candidate_user):
        response = client.post(
            "/api/auth/login",
            json={"email": "candidate@example.com", "password": "wrong"},
        )

        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "message": "Invalid email or password",
        }

    def test_unknown_email(self, client):
        response = client.post(
            "/api/auth/login",
            json={"email": "ghost@example.com", "password": "testpassword123"},
        )

        assert response.status_code == 401

    def test_malformed_email(self, client):
        response = client.post(
            "/api/auth/login",
            json={"email": "not-an-email", "password": "testpassword123"},
        )

        assert response.status_code == 400
        assert response.json()["success"] is False


class TestBearerTokens:
    """Token checks applied by get_current_user."""

    def test_missing_token(self, client):
        response = client.get("/api/auth/me")

        assert response.status_code in (401, 403)
        assert response.json()["success"] is False

    def test_invalid_token(self, client):
        response = client.get(
            "/api/auth/me", headers={"Authorization": "Bearer garbage"}
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid authentication token"

    def test_expired_token(self, client, candidate_user):
        token = create_access_token(
            {"user_id": candidate_user.id}, expires_delta=timedelta(minutes=-1)
        )

        response = client.get(
            "/api/auth/me", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 401

    def test_token_without_user_id(self, client):
        token = create_access_token({"sub": "nobody"})

        response = client.get(
            "/api/auth/me", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 401

    def test_deleted_user(self, client, candidate_user, db_session):
        token = create_access_token({"user_id": candidate_user.id})
        db_session.delete(candidate_user)
        db_session.commit()

        response = client.get(
            "/api/auth/me", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 401
        assert response.json()["message"] == "User not found"
