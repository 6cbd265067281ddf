"""Login, logout and profile calls."""

from typing import Any

from paydesk import endpoints
from paydesk.api.client import ApiClient
from paydesk.config import settings
from paydesk.errors import (
    ApiError,
    AuthenticationError,
    FormValidationError,
    TransportError,
    extract_error_message,
)
from paydesk.models.session import AuthSession, normalize_role
from paydesk.utils.logging import get_logger
from paydesk.utils.session import (
    clear_session,
    get_current_session,
    load_session,
    save_session,
    set_current_session,
)
from paydesk.validation import validate_email, validate_password

logger = get_logger("paydesk.auth", settings.log_level)


class AuthService:
    """Keeps the logged-in session in context and on disk."""

    def __init__(self, client: ApiClient | None = None):
        self.client = client or ApiClient()

    def login(self, email: str, password: str) -> AuthSession:
        """Log in and persist the session.

        Args:
            email: Login email; surrounding whitespace is ignored
            password: Password; surrounding whitespace is ignored

        Returns:
            The new session

        Raises:
            FormValidationError: If email or password is empty
            AuthenticationError: If the API rejects the credentials or
                returns no token / user
        """
        if not email or not email.strip():
            raise FormValidationError("Email is required")
        if not password or not password.strip():
            raise FormValidationError("Password is required")

        try:
            data = self.client.post(
                endpoints.LOGIN,
                {"email": email.strip(), "password": password.strip()},
                auth="none",
                fallback="Login failed",
            )
        except TransportError:
            raise
        except ApiError as e:
            raise AuthenticationError(
                extract_error_message(e.payload, "Login failed"),
                e.status_code,
                e.payload,
            ) from e

        token = (data.get("token") or "").strip()
        if not token:
            raise AuthenticationError("No token received from server")

        user = data.get("user")
        if not user:
            raise AuthenticationError("No user data received from server")

        role = user.get("role")
        normalized = normalize_role(role)
        if role not in ("admin", "ADMIN", "superAdmin", "superadmin", "SUPERADMIN"):
            logger.warning(f"Unexpected role received from API: {role}")

        user_id = user.get("id") or user.get("_id")
        session = AuthSession(
            token=token,
            role=normalized,
            user_id=str(user_id) if user_id else None,
            business_name=user.get("businessName"),
            email=email.strip(),
        )
        set_current_session(session)
        save_session(session, settings.session_file)
        self.client.audit.log_auth_event("login", session.role)
        logger.info(f"Login successful, role: {session.role}")
        return session

    def logout(self) -> None:
        """Forget the current session locally."""
        session = get_current_session()
        set_current_session(None)
        clear_session(settings.session_file)
        self.client.api_key = None
        if session is not None:
            self.client.audit.log_auth_event("logout", session.role)

    def restore(self) -> AuthSession | None:
        """Load the persisted session into context, if any."""
        session = load_session(settings.session_file)
        set_current_session(session)
        return session

    def signup(
        self,
        name: str,
        email: str,
        password: str,
        business_name: str | None = None,
        phone: str | None = None,
    ) -> dict[str, Any]:
        """Register a merchant account."""
        validate_email(email)
        validate_password(password)
        body = {
            "name": name.strip(),
            "email": email.strip(),
            "password": password,
            "businessName": business_name,
            "phone": phone,
        }
        return self.client.post(
            endpoints.SIGNUP,
            {k: v for k, v in body.items() if v is not None},
            auth="none",
            fallback="Signup failed",
        )

    def get_profile(self) -> dict[str, Any]:
        """Fetch the logged-in user's profile."""
        return self.client.get(endpoints.PROFILE, fallback="Failed to fetch profile")

    def update_profile(self, **fields: Any) -> dict[str, Any]:
        """Update profile fields (name, businessName, phone, ...)."""
        body = {k: v for k, v in fields.items() if v is not None}
        if not body:
            raise FormValidationError("Nothing to update")
        return self.client.put(endpoints.PROFILE, body, fallback="Failed to update profile")

    def is_authenticated(self) -> bool:
        return get_current_session() is not None

    def is_admin(self) -> bool:
        session = get_current_session()
        return session is not None and session.is_admin

    def is_superadmin(self) -> bool:
        session = get_current_session()
        return session is not None and session.is_superadmin
