"""PII masking utilities for audit entries."""

import re
import hashlib
from typing import Any, Optional

from presidio_analyzer import AnalyzerEngine, RecognizerResult
from presidio_anonymizer import AnonymizerEngine
from presidio_anonymizer.entities import OperatorConfig


# Initialize Presidio engines (lazy loading)
_analyzer: Optional[AnalyzerEngine] = None
_anonymizer: Optional[AnonymizerEngine] = None


def _get_analyzer() -> AnalyzerEngine:
    """Get or create the Presidio analyzer engine."""
    global _analyzer
    if _analyzer is None:
        _analyzer = AnalyzerEngine()
    return _analyzer


def _get_anonymizer() -> AnonymizerEngine:
    """Get or create the Presidio anonymizer engine."""
    global _anonymizer
    if _anonymizer is None:
        _anonymizer = AnonymizerEngine()
    return _anonymizer


# Entity types Presidio should look for on top of the regex rules
FINANCIAL_ENTITIES = [
    "CREDIT_CARD",
    "IBAN_CODE",
    "EMAIL_ADDRESS",
    "PHONE_NUMBER",
    "IP_ADDRESS",
    "PERSON",
    "LOCATION",
]

# Ordered: earlier rules win because later ones only see the redacted text
REGEX_RULES: list[tuple[str, str]] = [
    (r'\b(?:\d{4}[-\s]?){3}\d{4}\b', '[REDACTED_CREDIT_CARD]'),
    (r'\b\d{4}[-\s]\d{4}[-\s]\d{4}\b', '[REDACTED_AADHAAR]'),
    (r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b', '[REDACTED_EMAIL]'),
    (r'\b[A-Za-z0-9._-]{2,}@[A-Za-z]{2,}\b(?!\.[A-Za-z])', '[REDACTED_UPI]'),
    (r'\b[A-Z]{5}\d{4}[A-Z]\b', '[REDACTED_PAN]'),
    (r'\b[A-Z]{4}0[A-Z0-9]{6}\b', '[REDACTED_IFSC]'),
    (r'(?:\+91[-\s]?)?\b[6-9]\d{9}\b', '[REDACTED_PHONE]'),
    (r'\b\d{9,18}\b', '[REDACTED_ACCOUNT]'),
]

# Keys are compared after lowercasing and dropping "_" and "-"
SENSITIVE_FIELDS = {
    "password", "newpassword", "token", "xauthtoken", "apikey", "xapikey",
    "key", "secret", "webhooksecret", "email", "customeremail", "phone",
    "customerphone", "accountnumber", "upiid", "walletaddress", "pan", "aadhaar",
}
PARTIAL_FIELDS = {"accountnumber", "walletaddress"}


def mask_account_number(account_number: str) -> str:
    """Mask an account or wallet number, showing only the last 4 characters."""
    if not account_number:
        return ""
    if len(account_number) <= 4:
        return f"****{account_number}"
    return f"****{account_number[-4:]}"


def hash_user_id(user_id: str) -> str:
    """Hash a user ID for audit logging."""
    return hashlib.sha256(user_id.encode()).hexdigest()[:12]


def _mask_pii_regex(text: str) -> str:
    """Apply rule-based regex masking for common Indian payment PII.

    Masks card numbers, Aadhaar numbers, email addresses, UPI handles,
    PAN, IFSC codes, mobile numbers and bank account numbers.
    """
    for pattern, replacement in REGEX_RULES:
        text = re.sub(pattern, replacement, text)
    return text


def _mask_pii_presidio(text: str) -> str:
    """Apply Microsoft Presidio-based PII detection and anonymization."""
    analyzer = _get_analyzer()
    anonymizer = _get_anonymizer()

    results: list[RecognizerResult] = analyzer.analyze(
        text=text,
        entities=FINANCIAL_ENTITIES,
        language="en",
    )

    if not results:
        return text

    operators = {
        "CREDIT_CARD": OperatorConfig("replace", {"new_value": "[REDACTED_CREDIT_CARD]"}),
        "IBAN_CODE": OperatorConfig("replace", {"new_value": "[REDACTED_IBAN]"}),
        "EMAIL_ADDRESS": OperatorConfig("replace", {"new_value": "[REDACTED_EMAIL]"}),
        "PHONE_NUMBER": OperatorConfig("replace", {"new_value": "[REDACTED_PHONE]"}),
        "IP_ADDRESS": OperatorConfig("replace", {"new_value": "[REDACTED_IP]"}),
        "PERSON": OperatorConfig("replace", {"new_value": "[REDACTED_PERSON]"}),
        "LOCATION": OperatorConfig("replace", {"new_value": "[REDACTED_LOCATION]"}),
        "DEFAULT": OperatorConfig("replace", {"new_value": "[REDACTED]"}),
    }

    anonymized = anonymizer.anonymize(
        text=text,
        analyzer_results=results,
        operators=operators,
    )

    return anonymized.text


def mask_pii(text: str, use_presidio: bool = True) -> str:
    """Mask PII patterns in text using a hybrid approach.

    Regex rules run first, then Presidio optionally catches names and
    locations the rules cannot see.

    Args:
        text: The text to redact PII from.
        use_presidio: Whether to apply Presidio detection after regex.

    Returns:
        Text with PII redacted.
    """
    if not text:
        return text

    masked_text = _mask_pii_regex(text)

    if use_presidio:
        masked_text = _mask_pii_presidio(masked_text)

    return masked_text


def _normalize_key(key: str) -> str:
    return key.lower().replace("_", "").replace("-", "")


def redact_for_logging(data: dict[str, Any]) -> dict[str, Any]:
    """Redact sensitive fields from a request/response payload for logging."""
    redacted = {}
    for key, value in data.items():
        normalized = _normalize_key(str(key))
        if normalized in SENSITIVE_FIELDS:
            if normalized in PARTIAL_FIELDS and value:
                redacted[key] = mask_account_number(str(value))
            else:
                redacted[key] = "[REDACTED]"
        elif isinstance(value, dict):
            redacted[key] = redact_for_logging(value)
        elif isinstance(value, list):
            redacted[key] = [
                redact_for_logging(v) if isinstance(v, dict) else v
                for v in value
            ]
        else:
            redacted[key] = value

    return redacted
