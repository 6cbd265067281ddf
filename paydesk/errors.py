"""Exceptions raised by the gateway client and the form validators."""

from typing import Any

SESSION_EXPIRED = "Session expired. Please log in again."
FORBIDDEN = "Forbidden. You do not have permission to perform this action."
NOT_FOUND = "Resource not found."
INVALID_REQUEST = "Invalid request."
NO_TOKEN = "No authentication token found"


class PaydeskError(Exception):
    """Base class for every error paydesk reports to the user."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class FormValidationError(PaydeskError):
    """Raised when user input fails client-side validation."""
    pass


class ApiError(PaydeskError):
    """An API call failed."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        payload: Any = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class AuthenticationError(ApiError):
    """No token, or the token was rejected (401)."""
    pass


class PermissionDeniedError(ApiError):
    """403 from the API."""
    pass


class NotFoundError(ApiError):
    """404 from the API."""
    pass


class BadRequestError(ApiError):
    """400 from the API."""
    pass


class ConflictError(ApiError):
    """409 from the API."""
    pass


class TransportError(ApiError):
    """The request never got an HTTP answer, or the gateway is unavailable."""
    pass


# Statuses worth retrying for idempotent requests
RETRYABLE_STATUSES = frozenset({502, 503, 504})


def extract_error_message(data: Any, fallback: str) -> str:
    """Pull the most specific error text out of an API error body."""
    if isinstance(data, str) and data.strip():
        return data.strip()
    if isinstance(data, dict):
        for key in ("error", "message", "errorMsg"):
            value = data.get(key)
            if isinstance(value, str) and value.strip():
                return value
    return fallback


def error_for_status(
    status_code: int,
    data: Any,
    fallback: str,
    messages: dict[int, str] | None = None,
) -> ApiError:
    """Map an HTTP error status onto the matching exception.

    Args:
        status_code: HTTP status of the response
        data: Decoded response body (dict, str or None)
        fallback: Message used when the body carries no error text
        messages: Per-operation overrides keyed by status code

    Returns:
        The exception to raise
    """
    if messages and status_code in messages:
        message = messages[status_code]
    elif status_code == 401:
        message = SESSION_EXPIRED
    elif status_code == 403:
        message = FORBIDDEN
    elif status_code == 404:
        message = NOT_FOUND
    elif status_code == 400:
        message = extract_error_message(data, INVALID_REQUEST)
    else:
        message = extract_error_message(data, fallback)

    if status_code == 401:
        return AuthenticationError(message, status_code, data)
    if status_code == 403:
        return PermissionDeniedError(message, status_code, data)
    if status_code == 404:
        return NotFoundError(message, status_code, data)
    if status_code == 400:
        return BadRequestError(message, status_code, data)
    if status_code == 409:
        return ConflictError(message, status_code, data)
    if status_code in RETRYABLE_STATUSES:
        return TransportError(message, status_code, data)
    return ApiError(message, status_code, data)
