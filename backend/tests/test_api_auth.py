"""Tests for authentication and account endpoints."""

from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from bookclub.core.database import get_db
from bookclub.core.logging import user_id_var
from bookclub.models.user import InviteCode, User
from bookclub.services.auth_service import get_current_user, verify_password


def register(client: TestClient, **overrides):
    payload = {
        "name": "Carol",
        "email": "carol@example.com",
        "password": "securepassword123",
        "invite_code": "ABCD1234",
    }
    payload.update(overrides)
    return client.post("/api/v1/auth/register", json=payload)


class TestRegister:
    """Test invite-gated registration."""

    def test_register_success(self, client: TestClient, db: Session, invite_code: InviteCode):
        """Should create the member and redeem the code."""
        response = register(client)

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Carol"
        assert data["email"] == "carol@example.com"
        assert data["is_admin"] is False
        assert "hashed_password" not in data

        db.refresh(invite_code)
        assert invite_code.used_by_id == data["id"]
        assert invite_code.used_at is not None
        assert invite_code.redeemed is True

    def test_register_normalizes_email(self, client: TestClient, invite_code):
        response = register(client, email="  Carol@Example.COM ")

        assert response.status_code == 201
        assert response.json()["email"] == "carol@example.com"

    def test_register_unknown_code(self, client: TestClient, invite_code):
        """Should reject a code that does not exist."""
        response = register(client, invite_code="NOPE0000")

        assert response.status_code == 400
        assert "invalid invite code" in response.json()["detail"].lower()

    def test_register_used_code(self, client: TestClient, db: Session, invite_code, member):
        """Should reject a code that was already redeemed."""
        invite_code.used_by_id = member.id
        invite_code.redeemed = True
        db.commit()

        response = register(client)

        assert response.status_code == 409
        assert db.query(User).filter(User.email == "carol@example.com").first() is None

    def test_register_duplicate_email(self, client: TestClient, db: Session, invite_code, member):
        """Should reject an existing email and leave the code unused."""
        response = register(client, email="ALICE@example.com")

        assert response.status_code == 409
        assert "already registered" in response.json()["detail"].lower()
        db.refresh(invite_code)
        assert invite_code.used_by_id is None

    def test_register_code_only_once(self, client: TestClient, invite_code):
        """A second registration with the same code should fail."""
        assert register(client).status_code == 201

        response = register(client, name="Dan", email="dan@example.com")

        assert response.status_code == 409

    def test_register_short_password(self, client: TestClient, invite_code):
        """Should reject passwords that are too short."""
        response = register(client, password="short")

        assert response.status_code == 422

    def test_register_invalid_email(self, client: TestClient, invite_code):
        response = register(client, email="notanemail")

        assert response.status_code == 422


class TestLogin:
    """Test login endpoint."""

    def test_login_with_email(self, client: TestClient, member):
        response = client.post(
            "/api/v1/auth/login",
            data={"username": "alice@example.com", "password": "password123"},
        )

        assert response.status_code == 200
        data = response.json()
        assert "access_token" in data
        assert data["token_type"] == "bearer"

    def test_login_email_is_case_insensitive(self, client: TestClient, member):
        response = client.post(
            "/api/v1/auth/login",
            data={"username": "ALICE@example.com", "password": "password123"},
        )

        assert response.status_code == 200

    def test_login_with_name(self, client: TestClient, member):
        """A login without '@' is treated as a member name."""
        response = client.post(
            "/api/v1/auth/login",
            data={"username": "Alice", "password": "password123"},
        )

        assert response.status_code == 200

    def test_login_wrong_password(self, client: TestClient, member):
        response = client.post(
            "/api/v1/auth/login",
            data={"username": "alice@example.com", "password": "wrongpassword"},
        )

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_login_unknown_user(self, client: TestClient):
        response = client.post(
            "/api/v1/auth/login",
            data={"username": "nobody", "password": "password123"},
        )

        assert response.status_code == 401

    def test_token_works_for_me(self, client: TestClient, member):
        login = client.post(
            "/api/v1/auth/login",
            data={"username": "Alice", "password": "password123"},
        )
        token = login.json()["access_token"]

        response = client.get(
            "/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 200
        assert response.json()["email"] == "alice@example.com"


class TestCurrentUser:
    """Test the current user endpoint."""

    def test_get_me_authenticated(self, client: TestClient, member_headers):
        response = client.get("/api/v1/auth/me", headers=member_headers)

        assert response.status_code == 200
        assert response.json()["name"] == "Alice"

    def test_get_me_unauthenticated(self, client: TestClient):
        response = client.get("/api/v1/auth/me")

        assert response.status_code == 401

    def test_get_me_invalid_token(self, client: TestClient):
        response = client.get(
            "/api/v1/auth/me", headers={"Authorization": "Bearer invalid_token"}
        )

        assert response.status_code == 401


class TestAccount:
    """Test self-service account changes."""

    def test_update_email(self, client: TestClient, member_headers):
        response = client.put(
            "/api/v1/account/email",
            json={"email": "Alice.New@Example.com"},
            headers=member_headers,
        )

        assert response.status_code == 200
        assert response.json()["email"] == "alice.new@example.com"

    def test_update_email_taken(self, client: TestClient, member_headers, other_member):
        response = client.put(
            "/api/v1/account/email",
            json={"email": "bob@example.com"},
            headers=member_headers,
        )

        assert response.status_code == 409

    def test_change_password(self, client: TestClient, db: Session, member, member_headers):
        response = client.put(
            "/api/v1/account/password",
            json={"current_password": "password123", "new_password": "newpassword456"},
            headers=member_headers,
        )

        assert response.status_code == 200
        db.refresh(member)
        assert verify_password("newpassword456", member.hashed_password)

    def test_change_password_wrong_current(self, client: TestClient, member_headers):
        response = client.put(
            "/api/v1/account/password",
            json={"current_password": "not-it", "new_password": "newpassword456"},
            headers=member_headers,
        )

        assert response.status_code == 403

    def test_change_password_too_short(self, client: TestClient, member_headers):
        response = client.put(
            "/api/v1/account/password",
            json={"current_password": "password123", "new_password": "short"},
            headers=member_headers,
        )

        assert response.status_code == 400

    def test_rating_history(self, client: TestClient, books, member_headers):
        client.post(
            "/api/v1/ratings/",
            json={"book_id": books["completed"].id, "rating": 4.5},
            headers=member_headers,
        )

        response = client.get("/api/v1/account/ratings", headers=member_headers)

        assert response.status_code == 200
        history = response.json()
        assert len(history) == 1
        assert history[0]["rating"] == 4.5
        assert history[0]["book"]["title"] == "Station Eleven"


class TestLoggingContext:
    """Test that the authenticated member is visible to request logging."""

    def test_user_id_visible_in_route(self, db: Session, member, member_headers):
        whoami_app = FastAPI()

        @whoami_app.get("/whoami")
        async def whoami(user: User = Depends(get_current_user)):
            return {"logged_user_id": user_id_var.get(), "user_id": user.id}

        whoami_app.dependency_overrides[get_db] = lambda: db

        with TestClient(whoami_app) as test_client:
            response = test_client.get("/whoami", headers=member_headers)

        assert response.status_code == 200
        assert response.json() == {"logged_user_id": member.id, "user_id": member.id}
