"""
Tests for authentication and user lookup endpoints
"""
from datetime import datetime, timedelta, timezone
import pytest
from app.models import ROLE_ADMIN, ROLE_CLIENT
from app.services import auth_service

TEST_PASSWORD = "password123"


@pytest.mark.unit
class TestUsernames:
    """Test username derivation"""

    def test_sanitize(self):
        """Test sanitize"""
        assert auth_service.sanitize_username("  Maria.Santos! ") == "maria.santos"

    def test_sanitize_too_short(self):
        """Test sanitize too short"""
        assert auth_service.sanitize_username("a!") is None

    def test_from_email(self):
        """Test from email"""
        assert auth_service.username_from_email("Jo+Events@example.com") == "joevents"

    def test_short_email_is_padded(self):
        """Test short email is padded"""
        assert auth_service.username_from_email("x@example.com") == "xuser"

    def test_unique_suffix(self, test_db_session, make_user):
        """Test unique suffix"""
        make_user(username="maria")
        make_user(username="maria1")

        assert auth_service.unique_username(test_db_session, "maria") == "maria2"


class TestTokens:
    """Test bearer token round trip"""

    def test_decode(self, client_user):
        """Test decode"""
        claims = auth_service.decode_access_token(auth_service.create_access_token(client_user))

        assert claims["sub"] == str(client_user.id)
        assert claims["role"] == ROLE_CLIENT

    def test_expired(self, client_user):
        """Test expired"""
        issued = datetime.now(timezone.utc) - timedelta(days=30)
        token = auth_service.create_access_token(client_user, now=issued)

        with pytest.raises(auth_service.InvalidToken) as exc_info:
            auth_service.decode_access_token(token)
        assert exc_info.value.message == "Token expired"

    def test_tampered(self, client_user):
        """Test tampered"""
        header, payload, _ = auth_service.create_access_token(client_user).split(".")

        with pytest.raises(auth_service.InvalidToken):
            auth_service.decode_access_token(f"{header}.{payload}.{'A' * 43}")


@pytest.mark.integration
class TestRegisterAndLogin:
    """Test /api/auth endpoints"""

    def test_register(self, client):
        """Test register"""
        response = client.post("/api/auth/register", json={
            "first_name": "Liza", "last_name": "Ramos", "email": "Liza@Example.com", "password": "secret123",
        })

        assert response.status_code == 201
        data = response.json()
        assert data["token"]
        assert data["user"]["email"] == "liza@example.com"
        assert data["user"]["username"] == "liza"
        assert data["user"]["role"] == ROLE_CLIENT
        assert "password" not in data["user"]

    def test_register_duplicate_email(self, client, client_user):
        """Test register duplicate email"""
        response = client.post("/api/auth/register", json={
            "first_name": "Maria", "last_name": "S", "email": "maria@example.com", "password": "secret123",
        })

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Email already registered"}

    def test_register_invalid_email(self, client):
        """Test register invalid email"""
        response = client.post("/api/auth/register", json={
            "first_name": "A", "last_name": "B", "email": "not-an-email", "password": "secret123",
        })
        assert response.status_code == 400

    def test_login_with_username_or_email(self, client, client_user):
        """Test login with username or email"""
        by_username = client.post("/api/auth/login", json={"username": "maria", "password": TEST_PASSWORD})
        by_email = client.post("/api/auth/login", json={"identifier": "MARIA@example.com", "password": TEST_PASSWORD})

        assert by_username.status_code == 200
        assert by_email.status_code == 200
        assert by_email.json()["user"]["id"] == client_user.id

    def test_login_wrong_password(self, client, client_user):
        """Test login wrong password"""
        response = client.post("/api/auth/login", json={"email": "maria@example.com", "password": "nope"})

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid credentials"

    def test_login_without_identifier(self, client):
        """Test login without identifier"""
        response = client.post("/api/auth/login", json={"password": "x"})
        assert response.status_code == 400

    def test_me(self, client, headers_for, client_user):
        """Test me"""
        response = client.get("/api/auth/me", headers=headers_for(client_user))

        assert response.status_code == 200
        assert response.json()["user"]["username"] == "maria"

    def test_me_bad_token(self, client):
        """Test me bad token"""
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_resolve_username(self, client, client_user):
        """Test resolve username"""
        assert client.get("/api/auth/resolve-username", params={"u": "Maria"}).json()["email"] == "maria@example.com"
        assert client.get("/api/auth/resolve-username", params={"u": "ghost"}).status_code == 404
        assert client.get("/api/auth/resolve-username").status_code == 400


@pytest.mark.integration
class TestUserLookups:
    """Test user and chat contact lookups"""

    def test_list_users(self, client, client_user, vendor_user):
        """Test list users"""
        users = client.get("/api/users").json()["users"]
        assert users == [{"id": client_user.id, "username": "maria"}, {"id": vendor_user.id, "username": "paolo"}]

    def test_by_id_hides_password(self, client, client_user):
        """Test by id hides password"""
        user = client.get(f"/api/users/by-id/{client_user.id}").json()["user"]

        assert user["first_name"] == "Maria"
        assert "password" not in user
        assert "email" not in user

    def test_by_firebase_uid(self, client, make_user):
        """Test by firebase uid"""
        make_user(firebase_uid="fb-123")

        assert client.get("/api/users/fb-123").status_code == 200
        assert client.get("/api/users/fb-999").status_code == 404

    def test_chat_contacts_are_admins(self, client, headers_for, client_user, make_user):
        """Test chat contacts are admins"""
        admin = make_user(role=ROLE_ADMIN, first_name="Ops")

        contacts = client.get("/api/chat/contacts", headers=headers_for(client_user)).json()["contacts"]
        assert [c["id"] for c in contacts] == [admin.id]

    def test_chat_vendors_exclude_self(self, client, headers_for, client_user, vendor_user, provider):
        """Test chat vendors exclude self"""
        listed = client.get("/api/chat/vendors", headers=headers_for(client_user)).json()["vendors"]
        assert listed[0]["business_name"] == "Lens & Light Studio"

        own = client.get("/api/chat/vendors", headers=headers_for(vendor_user)).json()["vendors"]
        assert own == []
