"""Utilities module - Logging, PII masking, resilience, session."""

from .pii import mask_pii, mask_account_number, redact_for_logging
from .logging import get_logger, AuditLogger
from .resilience import with_retry, RateLimiter, CircuitBreaker, CircuitBreakerOpen
from .session import (
    get_current_session,
    set_current_session,
    reset_current_session,
    save_session,
    load_session,
    clear_session,
)

__all__ = [
    "mask_pii",
    "mask_account_number",
    "redact_for_logging",
    "get_logger",
    "AuditLogger",
    "with_retry",
    "RateLimiter",
    "CircuitBreaker",
    "CircuitBreakerOpen",
    "get_current_session",
    "set_current_session",
    "reset_current_session",
    "save_session",
    "load_session",
    "clear_session",
]
