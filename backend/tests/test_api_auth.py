"""Tests for authentication API endpoints."""

from datetime import timedelta

from fastapi.testclient import TestClient

from app.services.auth_service import create_access_token, decode_access_token


class TestRegister:
    """Test user registration endpoint."""

    def test_register_success(self, client: TestClient):
        """Should register a new user and return a token with the public profile."""
        response = client.post(
            "/api/v1/auth/register",
            json={
                "email": "NewUser@Example.com",
                "username": "newuser",
                "password": "securepassword123",
                "display_name": "New User",
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["token_type"] == "bearer"
        assert decode_access_token(data["access_token"]) == data["user"]["id"]
        assert data["user"]["username"] == "newuser"
        assert data["user"]["display_name"] == "New User"
        assert data["user"]["followers"] == []
        assert data["user"]["reading_goal"] == 12

    def test_register_never_exposes_credentials(self, client: TestClient):
        """Should not include the password or its hash anywhere in the response."""
        response = client.post(
            "/api/v1/auth/register",
            json={
                "email": "newuser@example.com",
                "username": "newuser",
                "password": "securepassword123",
                "display_name": "New User",
            },
        )

        assert response.status_code == 201
        body = response.text
        assert "hashed_password" not in body
        assert "securepassword123" not in body
        assert "$2b$" not in body
        assert "email" not in response.json()["user"]

    def test_register_duplicate_email(self, client: TestClient, test_user):
        """Should reject an email that differs from an existing one only by case."""
        response = client.post(
            "/api/v1/auth/register",
            json={
                "email": "ALICE@example.com",
                "username": "differentuser",
                "password": "securepassword123",
                "display_name": "Someone",
            },
        )

        assert response.status_code == 409
        assert response.json()["field"] == "email"
        assert "already exists" in response.json()["detail"].lower()

    def test_register_duplicate_username(self, client: TestClient, test_user):
        """Should reject registration with existing username."""
        response = client.post(
            "/api/v1/auth/register",
            json={
                "email": "different@example.com",
                "username": "alice",
                "password": "securepassword123",
                "display_name": "Someone",
            },
        )

        assert response.status_code == 409
        assert response.json()["field"] == "username"

    def test_register_collects_every_validation_error(self, client: TestClient):
        """Should report all invalid fields at once."""
        response = client.post(
            "/api/v1/auth/register",
            json={
                "email": "notanemail",
                "username": "no spaces!",
                "password": "short",
                "display_name": "",
            },
        )

        assert response.status_code == 400
        data = response.json()
        assert data["detail"] == "Validation failed"
        fields = {error["field"] for error in data["errors"]}
        assert fields == {"email", "username", "password", "display_name"}

    def test_register_username_too_short(self, client: TestClient):
        response = client.post(
            "/api/v1/auth/register",
            json={
                "email": "ab@example.com",
                "username": "ab",
                "password": "secret1",
                "display_name": "AB",
            },
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "username"


class TestLogin:
    """Test login endpoint."""

    def test_login_with_username(self, client: TestClient, test_user):
        """alice/secret1 should sign in."""
        response = client.post(
            "/api/v1/auth/login",
            json={"login": "alice", "password": "secret1"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["user"]["id"] == test_user.id
        assert decode_access_token(data["access_token"]) == test_user.id

    def test_login_with_email_any_case(self, client: TestClient, test_user):
        response = client.post(
            "/api/v1/auth/login",
            json={"login": "Alice@Example.com", "password": "secret1"},
        )

        assert response.status_code == 200
        assert response.json()["user"]["username"] == "alice"

    def test_login_wrong_password(self, client: TestClient, test_user):
        """Should reject a wrong password with the generic message."""
        response = client.post(
            "/api/v1/auth/login",
            json={"login": "alice", "password": "wrong-password"},
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid credentials"

    def test_login_unknown_user_same_message(self, client: TestClient, test_user):
        """Unknown identifiers should be indistinguishable from wrong passwords."""
        response = client.post(
            "/api/v1/auth/login",
            json={"login": "nobody", "password": "secret1"},
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid credentials"


class TestCurrentUser:
    """Test the bearer-token protected /auth/me endpoint."""

    def test_me(self, client: TestClient, test_user, auth_headers):
        response = client.get("/api/v1/auth/me", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["username"] == "alice"

    def test_me_without_token(self, client: TestClient):
        response = client.get("/api/v1/auth/me")

        assert response.status_code == 401
        assert response.json()["detail"] == "No token, authorization denied"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_me_with_garbage_token(self, client: TestClient, test_user):
        response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Token is not valid"

    def test_me_with_expired_token(self, client: TestClient, test_user):
        token = create_access_token({"sub": str(test_user.id)}, expires_delta=timedelta(seconds=-5))
        response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    def test_me_for_deleted_subject(self, client: TestClient, db, test_user, auth_headers):
        db.delete(test_user)
        db.commit()

        response = client.get("/api/v1/auth/me", headers=auth_headers)

        assert response.status_code == 401
        assert response.json()["detail"] == "Token is not valid"


class TestUpdateProfile:
    """Test self-service profile updates."""

    def test_update_whitelisted_fields(self, client: TestClient, test_user, auth_headers):
        response = client.put(
            "/api/v1/auth/profile",
            headers=auth_headers,
            json={
                "display_name": "Alice Liddell",
                "bio": "Curiouser and curiouser",
                "reading_goal": 40,
                "favorite_genres": ["Fantasy"],
                "is_public": False,
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["display_name"] == "Alice Liddell"
        assert data["bio"] == "Curiouser and curiouser"
        assert data["reading_goal"] == 40
        assert data["favorite_genres"] == ["Fantasy"]
        assert data["is_public"] is False

    def test_other_fields_ignored(self, client: TestClient, db, test_user, auth_headers):
        """Should silently ignore fields outside the whitelist."""
        response = client.put(
            "/api/v1/auth/profile",
            headers=auth_headers,
            json={"is_admin": True, "username": "mallory", "email": "x@example.com"},
        )

        assert response.status_code == 200
        db.refresh(test_user)
        assert test_user.is_admin is False
        assert test_user.username == "alice"
        assert test_user.email == "alice@example.com"

    def test_update_rejects_long_bio(self, client: TestClient, test_user, auth_headers):
        response = client.put(
            "/api/v1/auth/profile",
            headers=auth_headers,
            json={"bio": "x" * 501, "reading_goal": 0},
        )

        assert response.status_code == 400
        fields = {error["field"] for error in response.json()["errors"]}
        assert fields == {"bio", "reading_goal"}

    def test_update_requires_auth(self, client: TestClient):
        response = client.put("/api/v1/auth/profile", json={"bio": "hi"})

        assert response.status_code == 401
