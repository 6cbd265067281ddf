"""HTTP client for the payment gateway REST API."""

import time
from typing import Any, Literal

import requests

from paydesk.config import settings
from paydesk.errors import (
    NO_TOKEN,
    ApiError,
    AuthenticationError,
    TransportError,
    error_for_status,
    extract_error_message,
)
from paydesk.utils.logging import AuditLogger, get_logger
from paydesk.utils.resilience import CircuitBreaker, CircuitBreakerOpen, RateLimiter, with_retry
from paydesk.utils.session import clear_session, get_current_session, set_current_session


logger = get_logger("paydesk.client", settings.log_level)

AuthMode = Literal["jwt", "api_key", "none"]


def clean_params(params: dict[str, Any] | None) -> dict[str, Any]:
    """Drop query parameters that carry no value.

    None, empty strings and False are left out; True is sent as "true".
    """
    if not params:
        return {}
    cleaned = {}
    for key, value in params.items():
        if value is None or value is False or value == "":
            continue
        if value is True:
            value = "true"
        cleaned[key] = value
    return cleaned


class ApiClient:
    """Thin wrapper over a requests session.

    Adds the auth headers, maps error statuses onto exceptions, retries
    idempotent reads, rate-limits and audits every call.
    """

    def __init__(
        self,
        base_url: str | None = None,
        session: requests.Session | None = None,
        audit_logger: AuditLogger | None = None,
        timeout: float | None = None,
        api_key: str | None = None,
    ):
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout or settings.request_timeout
        self.http = session or requests.Session()
        self.http.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
        })
        self.api_key = api_key
        self._audit_logger = audit_logger

        self.rate_limiter = RateLimiter(settings.rate_limit_rpm)
        self.circuit_breaker = CircuitBreaker(
            failure_threshold=settings.circuit_breaker_threshold,
            failure_exceptions=(TransportError,),
        )
        self._send_with_retry = with_retry(
            max_attempts=settings.max_retries,
            backoff_base=settings.retry_backoff_base,
            exceptions=(TransportError,),
        )(self._send)

    @property
    def audit(self) -> AuditLogger:
        """Audit logger bound to the current user."""
        if self._audit_logger is None:
            session = get_current_session()
            return AuditLogger(
                log_dir=settings.logs_dir,
                user_id=session.user_id if session else None,
                use_presidio=settings.pii_use_presidio,
            )
        return self._audit_logger

    def _auth_headers(self, auth: AuthMode, api_key: str | None) -> dict[str, str]:
        """Headers for the requested auth mode; fails before any I/O."""
        if auth == "none":
            return {}

        headers = {}
        session = get_current_session()
        if session is not None and session.token.strip():
            headers["x-auth-token"] = session.token.strip()

        if auth == "api_key":
            key = api_key or self.api_key
            if not key:
                raise AuthenticationError("API key not found")
            headers["x-api-key"] = key
        elif "x-auth-token" not in headers:
            raise AuthenticationError(NO_TOKEN)

        return headers

    @staticmethod
    def _decode(response: requests.Response) -> Any:
        """Decode a response body: JSON when possible, else stripped text."""
        try:
            return response.json()
        except ValueError:
            text = (response.text or "").strip()
            return text or None

    def _send(
        self,
        method: str,
        path: str,
        params: dict[str, Any],
        body: dict[str, Any] | None,
        headers: dict[str, str],
        fallback: str,
        messages: dict[int, str] | None,
        audit: AuditLogger,
    ) -> dict[str, Any]:
        """Perform one HTTP exchange and turn the outcome into data or an exception."""
        url = f"{self.base_url}{path}"
        started = time.monotonic()
        try:
            response = self.http.request(
                method,
                url,
                params=params or None,
                json=body,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"Could not reach the payment gateway: {e}") from e

        elapsed_ms = (time.monotonic() - started) * 1000
        data = self._decode(response)

        if not response.ok:
            raise error_for_status(response.status_code, data, fallback, messages)

        if isinstance(data, dict) and data.get("success") is False:
            raise ApiError(
                extract_error_message(data, fallback), response.status_code, data
            )

        audit.log_api_response(method, path, response.status_code, elapsed_ms)

        if data is None:
            return {}
        if not isinstance(data, dict):
            return {"data": data}
        return data

    def _expire_session(self, audit: AuditLogger) -> None:
        """Forget the session after the API rejected its token."""
        session = get_current_session()
        set_current_session(None)
        clear_session(settings.session_file)
        logger.warning("Session expired; stored token cleared")
        audit.log_auth_event("session_expired", session.role if session else None)

    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        auth: AuthMode = "jwt",
        api_key: str | None = None,
        fallback: str = "Request failed",
        messages: dict[int, str] | None = None,
        retry: bool = True,
    ) -> dict[str, Any]:
        """Call an endpoint and return its decoded JSON body.

        Args:
            method: HTTP method
            path: Endpoint path from ``paydesk.endpoints``
            params: Query parameters; empty values are dropped
            json: Request body
            auth: "jwt" (x-auth-token), "api_key" (x-api-key) or "none"
            api_key: Overrides the client's API key for this call
            fallback: Message used when an error body carries no text
            messages: Per-status message overrides
            retry: Retry transport failures; only honoured for GET, and
                must be False for GETs with side effects

        Returns:
            The response body as a dict

        Raises:
            ApiError: Or one of its subclasses, see ``paydesk.errors``
            CircuitBreakerOpen: When the gateway has failed repeatedly
        """
        method = method.upper()
        headers = self._auth_headers(auth, api_key)
        params = clean_params(params)
        audit = self.audit

        audit.log_api_request(method, path, params, json)
        send = self._send_with_retry if retry and method == "GET" else self._send

        try:
            self.rate_limiter.acquire()
            return self.circuit_breaker.call(
                send, method, path, params, json, headers, fallback, messages, audit
            )
        except CircuitBreakerOpen as e:
            audit.log_api_error(method, path, str(e))
            raise
        except ApiError as e:
            audit.log_api_error(method, path, e.message, e.status_code)
            # A 401 on an unauthenticated call is a bad login, not an expired token
            if isinstance(e, AuthenticationError) and e.status_code == 401 and auth != "none":
                self._expire_session(audit)
            raise

    def get(self, path: str, **kwargs) -> dict[str, Any]:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, json: dict[str, Any] | None = None, **kwargs) -> dict[str, Any]:
        return self.request("POST", path, json=json if json is not None else {}, **kwargs)

    def put(self, path: str, json: dict[str, Any] | None = None, **kwargs) -> dict[str, Any]:
        return self.request("PUT", path, json=json if json is not None else {}, **kwargs)

    def delete(self, path: str, **kwargs) -> dict[str, Any]:
        return self.request("DELETE", path, **kwargs)
