"""Structured audit logging with PII redaction."""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

from paydesk.utils.pii import mask_pii, hash_user_id, redact_for_logging


def get_logger(name: str, level: str = "INFO") -> logging.Logger:
    """Get a configured logger instance."""
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(getattr(logging, level.upper()))
    return logger


class AuditLogger:
    """Audit logger for gateway API traffic with PII protection."""

    def __init__(
        self,
        log_dir: Path | None = None,
        user_id: str | None = None,
        use_presidio: bool = True,
    ):
        self.log_dir = log_dir or Path("logs")
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.user_id = user_id
        self.user_hash = hash_user_id(user_id) if user_id else "anonymous"
        self.use_presidio = use_presidio
        self._logger = get_logger(f"audit.{self.user_hash}")

    def _get_log_file(self) -> Path:
        """Get the current audit log file path."""
        date_str = datetime.now().strftime("%Y-%m-%d")
        return self.log_dir / f"audit_{date_str}.jsonl"

    def _write_entry(self, entry: dict):
        """Write an audit entry to the log file."""
        entry["timestamp"] = datetime.now().isoformat()
        entry["user_hash"] = self.user_hash

        with open(self._get_log_file(), "a", encoding="utf-8") as f:
            f.write(json.dumps(entry, default=str) + "\n")

    def _mask(self, text: str) -> str:
        """Mask PII, dropping to regex rules if Presidio cannot load.

        spaCy exits instead of raising when its model download fails.
        """
        if self.use_presidio:
            try:
                return mask_pii(text, use_presidio=True)
            except (Exception, SystemExit) as e:
                self._logger.warning(f"Presidio unavailable, using regex masking: {e!r}")
                self.use_presidio = False
        return mask_pii(text, use_presidio=False)

    def log_api_request(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        body: dict | None = None,
    ):
        """Log an outgoing API request."""
        entry = {
            "event": "api_request",
            "method": method,
            "path": path,
            "params": redact_for_logging(params) if params else None,
            "body": redact_for_logging(body) if body else None,
        }
        self._write_entry(entry)
        self._logger.debug(f"{method} {path}")

    def log_api_response(self, method: str, path: str, status_code: int, elapsed_ms: float):
        """Log a successful API response."""
        entry = {
            "event": "api_response",
            "method": method,
            "path": path,
            "status_code": status_code,
            "elapsed_ms": round(elapsed_ms, 1),
        }
        self._write_entry(entry)
        self._logger.debug(f"{method} {path} -> {status_code} ({elapsed_ms:.0f} ms)")

    def log_api_error(
        self,
        method: str,
        path: str,
        error: str,
        status_code: int | None = None,
    ):
        """Log a failed API call."""
        entry = {
            "event": "api_error",
            "method": method,
            "path": path,
            "status_code": status_code,
            "error": self._mask(error),
        }
        self._write_entry(entry)
        self._logger.warning(f"{method} {path} failed ({status_code}): {entry['error']}")

    def log_payout_requested(
        self,
        amount: Any,
        transfer_mode: str,
        commission: Any,
        payout_id: str | None = None,
    ):
        """Log a merchant payout request."""
        entry = {
            "event": "payout_requested",
            "payout_id": payout_id,
            "amount": str(amount),
            "commission": str(commission),
            "transfer_mode": transfer_mode,
        }
        self._write_entry(entry)
        self._logger.info(f"Payout requested via {transfer_mode} (id: {payout_id})")

    def log_payout_action(self, payout_id: str, action: str, details: str = ""):
        """Log a superadmin decision on a payout."""
        entry = {
            "event": "payout_action",
            "payout_id": payout_id,
            "action": action,
            "details": self._mask(details),
        }
        self._write_entry(entry)
        self._logger.info(f"Payout {payout_id}: {action}")

    def log_auth_event(self, event_type: str, role: str | None = None):
        """Log login, logout and session expiry."""
        entry = {
            "event": "auth",
            "event_type": event_type,
            "role": role,
        }
        self._write_entry(entry)
        self._logger.info(f"Auth event: {event_type}")

    def log_security_event(
        self,
        event_type: str,
        details: str,
        severity: str = "warning",
    ):
        """Log a security-related event."""
        entry = {
            "event": "security",
            "event_type": event_type,
            "details": self._mask(details),
            "severity": severity,
        }
        self._write_entry(entry)
        log_method = getattr(self._logger, severity.lower(), self._logger.warning)
        log_method(f"Security event: {event_type}")
