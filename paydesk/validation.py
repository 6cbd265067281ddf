"""Client-side form validation and free-text sanitization."""

import re
from decimal import Decimal
from typing import NamedTuple
from urllib.parse import urlparse

from paydesk.errors import FormValidationError
from paydesk.fees import PayoutCharge, compute_payout_charge
from paydesk.models.balance import Balance
from paydesk.models.payout import BeneficiaryDetails, PayoutRequest
from paydesk.utils.logging import AuditLogger


MIN_PASSWORD_LENGTH = 6
MAX_NOTE_LENGTH = 500

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
IFSC_PATTERN = re.compile(r"^[A-Z]{4}0[A-Z0-9]{6}$")
UPI_PATTERN = re.compile(r"^[A-Za-z0-9._-]{2,256}@[A-Za-z]{2,64}$")

# Characters stripped from notes, reasons and other free text
DANGEROUS_CHARS = {
    '\x00': '',  # Null byte
    '\x1b': '',  # Escape character
}


class SanitizationResult(NamedTuple):
    """Result of free-text sanitization."""
    text: str
    was_modified: bool
    warnings: list[str]


def sanitize_text(
    text: str | None,
    max_length: int = MAX_NOTE_LENGTH,
    audit_logger: AuditLogger | None = None,
) -> SanitizationResult:
    """Clean a note or reason before it is sent to the API.

    Removes control characters, collapses runs of spaces and trims the
    text to ``max_length``.
    """
    if not text:
        return SanitizationResult(text="", was_modified=False, warnings=[])

    warnings = []
    was_modified = False

    sanitized = text
    for char, replacement in DANGEROUS_CHARS.items():
        if char in sanitized:
            sanitized = sanitized.replace(char, replacement)
            was_modified = True
            warnings.append(f"Removed dangerous character: {repr(char)}")

    normalized = re.sub(r' {3,}', '  ', sanitized).strip()
    if normalized != sanitized:
        sanitized = normalized
        was_modified = True

    if len(sanitized) > max_length:
        sanitized = sanitized[:max_length]
        was_modified = True
        warnings.append(f"Text truncated from {len(text)} to {max_length} characters")

    if warnings and audit_logger:
        audit_logger.log_security_event(
            event_type="input_sanitized",
            details="; ".join(warnings),
            severity="info",
        )

    return SanitizationResult(text=sanitized, was_modified=was_modified, warnings=warnings)


def validate_email(email: str | None) -> str:
    """Return the trimmed email or raise FormValidationError."""
    value = (email or "").strip()
    if not value:
        raise FormValidationError("Email is required")
    if not EMAIL_PATTERN.match(value):
        raise FormValidationError("Please enter a valid email address.")
    return value


def validate_password(password: str | None) -> str:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise FormValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )
    return password


def validate_webhook_url(url: str | None) -> str:
    """Webhook URLs must be absolute http(s) URLs."""
    value = (url or "").strip()
    if not value:
        raise FormValidationError("Webhook URL is required")
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise FormValidationError("Webhook URL must start with http:// or https://")
    return value


def validate_ifsc(code: str | None) -> str:
    """Return the upper-cased IFSC code or raise FormValidationError."""
    value = (code or "").strip().upper()
    if not IFSC_PATTERN.match(value):
        raise FormValidationError("Please enter a valid IFSC code (e.g. HDFC0001234).")
    return value


def validate_upi_id(upi_id: str | None) -> str:
    value = (upi_id or "").strip()
    if not UPI_PATTERN.match(value):
        raise FormValidationError("Please enter a valid UPI ID (e.g. yourname@paytm).")
    return value


def validate_beneficiary(transfer_mode: str, details: BeneficiaryDetails) -> None:
    """Check that the fields required by the transfer mode are present and well-formed.

    Args:
        transfer_mode: "upi", "bank" or "crypto"
        details: Beneficiary details from the request form

    Raises:
        FormValidationError: On the first missing or malformed field
    """
    if transfer_mode == "upi":
        if not details.upi_id:
            raise FormValidationError("Please enter UPI ID.")
        validate_upi_id(details.upi_id)
    elif transfer_mode == "bank":
        if not details.account_number:
            raise FormValidationError("Please enter account number.")
        if not details.ifsc_code:
            raise FormValidationError("Please enter IFSC code.")
        if not details.account_holder_name:
            raise FormValidationError("Please enter account holder name.")
        validate_ifsc(details.ifsc_code)
    elif transfer_mode == "crypto":
        if not details.wallet_address:
            raise FormValidationError("Please enter wallet address.")
        if not details.network_name:
            raise FormValidationError("Please enter network name.")
        if not details.currency_name:
            raise FormValidationError("Please enter currency name.")
    else:
        raise FormValidationError(f"Unsupported transfer mode: {transfer_mode}")


def _rupees(value: Decimal) -> str:
    return f"₹{value:,.2f}"


def validate_payout_request(
    request: PayoutRequest,
    balance: Balance,
    free_payouts_remaining: int | None = None,
) -> PayoutCharge:
    """Validate a payout request against the merchant's balance.

    Args:
        request: The payout about to be submitted
        balance: Current balance, including payout eligibility
        free_payouts_remaining: Overrides ``balance.free_payouts_remaining``

    Returns:
        The fee preview for the request

    Raises:
        FormValidationError: With the message to show the merchant
    """
    if not balance.eligibility.can_request_payout:
        raise FormValidationError(
            "You are not eligible to request a payout at this time. "
            "Wait for settlement to complete."
        )

    if request.amount is None or request.amount <= 0:
        raise FormValidationError("Please enter a valid payout amount.")

    if free_payouts_remaining is None:
        free_payouts_remaining = balance.free_payouts_remaining
    charge = compute_payout_charge(request.amount, free_payouts_remaining)

    if charge.total_debit > balance.available_balance:
        raise FormValidationError(
            f"Insufficient Balance: The requested amount ({_rupees(charge.total_debit)}) "
            f"exceeds your available balance ({_rupees(balance.available_balance)})."
        )

    validate_beneficiary(request.transfer_mode, request.beneficiary_details)
    return charge
