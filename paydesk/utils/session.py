"""Session context management for the logged-in user."""

import contextvars
import json
from pathlib import Path
from typing import Optional

from paydesk.models.session import AuthSession

# Context variable for the current session
_current_session: contextvars.ContextVar[Optional[AuthSession]] = contextvars.ContextVar(
    "current_session", default=None
)


def get_current_session() -> Optional[AuthSession]:
    """Get the current session from context, or None when logged out."""
    return _current_session.get()


def set_current_session(session: Optional[AuthSession]) -> contextvars.Token[Optional[AuthSession]]:
    """Set the current session in context.

    Args:
        session: The session to set, or None to log out

    Returns:
        Token that can be used to reset the context
    """
    return _current_session.set(session)


def reset_current_session(token: contextvars.Token[Optional[AuthSession]]) -> None:
    """Reset the session context to its previous value.

    Args:
        token: Token returned from set_current_session()
    """
    _current_session.reset(token)


def save_session(session: AuthSession, path: Path) -> None:
    """Persist a session so the next CLI invocation stays logged in."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(session.model_dump_json(), encoding="utf-8")
    path.chmod(0o600)


def load_session(path: Path) -> Optional[AuthSession]:
    """Load a persisted session, or None if there is none or it is unreadable."""
    if not path.exists():
        return None
    try:
        return AuthSession.model_validate(json.loads(path.read_text(encoding="utf-8")))
    except (ValueError, OSError):
        return None


def clear_session(path: Path) -> None:
    """Remove a persisted session."""
    path.unlink(missing_ok=True)
