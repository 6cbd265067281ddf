"""Tests for login, logout and session persistence."""

import json

import pytest

from paydesk.api.auth import AuthService
from paydesk.config import settings
from paydesk.errors import AuthenticationError, FormValidationError
from paydesk.models.session import AuthSession, normalize_role
from paydesk.utils.session import get_current_session, load_session, save_session

from conftest import FakeResponse


LOGIN_OK = {
    "token": "jwt-abc",
    "user": {"id": "u_42", "role": "superadmin", "businessName": "Verma Traders"},
}


@pytest.fixture
def auth(client):
    return AuthService(client)


class TestLogin:
    """Tests for AuthService.login."""

    def test_login_persists_session(self, auth, fake_http):
        """Test that a successful login stores the session in memory and on disk."""
        fake_http.queue(FakeResponse(200, LOGIN_OK))

        session = auth.login("  owner@shop.in ", " hunter22 ")

        call = fake_http.last_call
        assert call["json"] == {"email": "owner@shop.in", "password": "hunter22"}
        assert "x-auth-token" not in call["headers"]
        assert session.token == "jwt-abc"
        assert session.role == "superAdmin"
        assert session.user_id == "u_42"
        assert session.business_name == "Verma Traders"
        assert get_current_session() == session

        stored = json.loads(settings.session_file.read_text(encoding="utf-8"))
        assert stored["token"] == "jwt-abc"

    def test_unknown_role_becomes_admin(self, auth, fake_http):
        """Test that an unrecognised role is treated as a merchant admin."""
        fake_http.queue(FakeResponse(200, {"token": "t", "user": {"_id": "u1", "role": "owner"}}))
        session = auth.login("a@b.com", "secret1")
        assert session.role == "admin"
        assert session.user_id == "u1"

    @pytest.mark.parametrize("email, password, message", [
        ("", "secret1", "Email is required"),
        ("   ", "secret1", "Email is required"),
        ("a@b.com", "", "Password is required"),
        ("a@b.com", "  ", "Password is required"),
    ])
    def test_empty_fields(self, auth, fake_http, email, password, message):
        """Test that blank credentials fail before any request."""
        with pytest.raises(FormValidationError, match=message):
            auth.login(email, password)
        assert fake_http.calls == []

    def test_rejected_credentials_use_server_message(self, auth, fake_http):
        """Test that a rejected login reports the server's message."""
        fake_http.queue(FakeResponse(401, {"message": "Invalid credentials"}))
        with pytest.raises(AuthenticationError, match="Invalid credentials"):
            auth.login("a@b.com", "wrong-pass")
        assert get_current_session() is None

    def test_failed_login_keeps_existing_session(self, auth, fake_http, merchant_session):
        """Test that wrong credentials do not log out the current user."""
        save_session(merchant_session, settings.session_file)
        fake_http.queue(FakeResponse(401, {"message": "Invalid credentials"}))

        with pytest.raises(AuthenticationError, match="Invalid credentials"):
            auth.login("other@example.com", "wrongpass")

        assert get_current_session() == merchant_session
        assert load_session(settings.session_file) == merchant_session

    def test_missing_token(self, auth, fake_http):
        """Test that a response without a token is rejected."""
        fake_http.queue(FakeResponse(200, {"token": "  ", "user": {"id": "u1"}}))
        with pytest.raises(AuthenticationError, match="No token received from server"):
            auth.login("a@b.com", "secret1")

    def test_missing_user(self, auth, fake_http):
        """Test that a response without user data is rejected."""
        fake_http.queue(FakeResponse(200, {"token": "t"}))
        with pytest.raises(AuthenticationError, match="No user data received from server"):
            auth.login("a@b.com", "secret1")


class TestSessionLifecycle:
    """Tests for logout, restore and role checks."""

    def test_logout_clears_everything(self, auth, client, merchant_session):
        """Test that logout forgets the session, the stored file and the API key."""
        save_session(merchant_session, settings.session_file)
        client.api_key = "key_123"

        auth.logout()

        assert get_current_session() is None
        assert not settings.session_file.exists()
        assert client.api_key is None

    def test_restore(self, auth):
        """Test restoring a stored superadmin session."""
        saved = AuthSession(token="t", role="superAdmin", user_id="u9")
        save_session(saved, settings.session_file)

        assert auth.restore() == saved
        assert auth.is_superadmin()
        assert not auth.is_admin()

    def test_restore_without_file(self, auth):
        """Test that restoring with nothing stored leaves the user logged out."""
        assert auth.restore() is None
        assert not auth.is_authenticated()

    def test_corrupt_session_file(self):
        """Test that an unreadable session file counts as logged out."""
        settings.session_file.parent.mkdir(parents=True, exist_ok=True)
        settings.session_file.write_text("{not json", encoding="utf-8")
        assert load_session(settings.session_file) is None

    def test_session_file_is_private(self, merchant_session):
        """Test that the session file is readable by its owner only."""
        save_session(merchant_session, settings.session_file)
        assert settings.session_file.stat().st_mode & 0o777 == 0o600

    @pytest.mark.parametrize("raw, expected", [
        ("superAdmin", "superAdmin"),
        ("SUPERADMIN", "superAdmin"),
        ("ADMIN", "admin"),
        (None, "admin"),
    ])
    def test_normalize_role(self, raw, expected):
        """Test role name normalisation."""
        assert normalize_role(raw) == expected


class TestProfile:
    """Tests for signup and profile updates."""

    def test_signup_validates_first(self, auth, fake_http):
        """Test that signup validates the form before sending it."""
        with pytest.raises(FormValidationError, match="at least 6 characters"):
            auth.signup("Asha", "asha@example.com", "123")
        assert fake_http.calls == []

    def test_signup_body(self, auth, fake_http):
        """Test the signup request body."""
        fake_http.queue(FakeResponse(201, {"success": True}))
        auth.signup(" Asha ", "asha@example.com", "secret1", business_name="Verma Traders")
        assert fake_http.last_call["json"] == {
            "name": "Asha",
            "email": "asha@example.com",
            "password": "secret1",
            "businessName": "Verma Traders",
        }

    def test_update_profile_requires_fields(self, auth, merchant_session):
        """Test that an empty profile update is rejected."""
        with pytest.raises(FormValidationError, match="Nothing to update"):
            auth.update_profile(name=None)

    def test_update_profile(self, auth, fake_http, merchant_session):
        """Test updating the merchant profile."""
        fake_http.queue(FakeResponse(200, {"user": {"name": "New"}}))
        auth.update_profile(name="New", phone=None)
        assert fake_http.last_call["method"] == "PUT"
        assert fake_http.last_call["json"] == {"name": "New"}
