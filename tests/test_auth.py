import pytest

from app.core.config import settings
from app.core.database import redis_client
from app.services.auth_service import AuthService
from tests.conftest import PASSWORD, TestingSessionLocal

# Test data
test_user_data = {
    "username": "dana",
    "password": "TestPassword123",
    "name": "Dana Scully",
    "group": "Patients"
}

test_login_data = {
    "username": "dana",
    "password": "TestPassword123"
}

class TestAuthentication:

    def test_register_user(self, client):
        """Test user registration."""
        response = client.post("/api/v1/auth/register", json=test_user_data)
        assert response.status_code == 200

        data = response.json()
        assert data["username"] == test_user_data["username"]
        assert data["group"] == "Patients"
        assert data["groups"] == ["Patients"]
        assert "password" not in data
        assert "password_hash" not in data

    def test_register_doctor(self, client):
        doctor = {**test_user_data, "username": "drhouse", "group": "Doctors"}
        response = client.post("/api/v1/auth/register", json=doctor)
        assert response.status_code == 200
        assert response.json()["groups"] == ["Doctors"]

    def test_register_duplicate_username(self, client):
        """Test registration with duplicate username."""
        client.post("/api/v1/auth/register", json=test_user_data)

        # Usernames are matched case-insensitively
        duplicate = {**test_user_data, "username": "DANA"}
        response = client.post("/api/v1/auth/register", json=duplicate)
        assert response.status_code == 400
        assert "already registered" in response.json()["detail"]

    def test_register_invalid_password(self, client):
        """Test registration with invalid password."""
        invalid_data = test_user_data.copy()
        invalid_data["password"] = "weak"

        response = client.post("/api/v1/auth/register", json=invalid_data)
        assert response.status_code == 422

    def test_register_unknown_group(self, client):
        invalid_data = {**test_user_data, "group": "Admins"}
        response = client.post("/api/v1/auth/register", json=invalid_data)
        assert response.status_code == 422

    def test_login_success(self, client):
        """Test successful login."""
        client.post("/api/v1/auth/register", json=test_user_data)

        response = client.post("/api/v1/auth/login", json=test_login_data)
        assert response.status_code == 200

        data = response.json()
        assert "access_token" in data
        assert data["token_type"] == "bearer"
        assert data["user"]["username"] == "dana"

    def test_login_is_case_insensitive_on_username(self, client, users):
        response = client.post(
            "/api/v1/auth/login",
            json={"username": "Alice", "password": PASSWORD}
        )
        assert response.status_code == 200

    def test_login_invalid_credentials(self, client):
        """Test login with invalid credentials."""
        invalid_login = {
            "username": "nobody",
            "password": "wrongpassword1"
        }

        response = client.post("/api/v1/auth/login", json=invalid_login)
        assert response.status_code == 401

    def test_login_wrong_password(self, client, users):
        """Test login with wrong password."""
        response = client.post(
            "/api/v1/auth/login",
            json={"username": "alice", "password": "wrongpassword1"}
        )
        assert response.status_code == 401

    def test_login_rate_limited(self, client, users):
        for _ in range(settings.LOGIN_RATE_LIMIT):
            response = client.post(
                "/api/v1/auth/login",
                json={"username": "alice", "password": PASSWORD}
            )
            assert response.status_code == 200

        response = client.post(
            "/api/v1/auth/login",
            json={"username": "alice", "password": PASSWORD}
        )
        assert response.status_code == 429

    def test_get_current_user(self, client, login):
        """Test getting current user info."""
        headers = login("drbob")

        response = client.get("/api/v1/auth/me", headers=headers)
        assert response.status_code == 200

        data = response.json()
        assert data["username"] == "drbob"
        assert data["groups"] == ["Doctors"]

    def test_get_current_user_invalid_token(self, client):
        """Test get current user with invalid token."""
        headers = {"Authorization": "Bearer invalid_token"}

        response = client.get("/api/v1/auth/me", headers=headers)
        assert response.status_code == 401

    def test_missing_token(self, client):
        response = client.get("/api/v1/appointments")
        assert response.status_code in (401, 403)

    def test_logout_revokes_token(self, client, login):
        """Test user logout."""
        headers = login("alice")

        response = client.post("/api/v1/auth/logout", headers=headers)
        assert response.status_code == 200

        response = client.get("/api/v1/auth/me", headers=headers)
        assert response.status_code == 401
        assert any(key.startswith("revoked_token:") for key in redis_client.data)

class TestDemoSeed:

    def test_seed_only_into_empty_table(self, test_db):
        db = TestingSessionLocal()
        try:
            service = AuthService(db)
            assert service.seed_demo_users() == 3
            assert service.seed_demo_users() == 0
        finally:
            db.close()

    def test_demo_users_can_log_in(self, client, test_db):
        db = TestingSessionLocal()
        try:
            AuthService(db).seed_demo_users()
        finally:
            db.close()

        response = client.post(
            "/api/v1/auth/login",
            json={"username": "drbob", "password": "doctor123"}
        )
        assert response.status_code == 200
        assert response.json()["user"]["name"] == "Dr. Bob Smith"

if __name__ == "__main__":
    pytest.main([__file__])
