"""API module - service classes over the gateway REST API."""

from .client import ApiClient
from .auth import AuthService
from .api_keys import ApiKeyService
from .payments import PaymentService
from .webhooks import WebhookService
from .superadmin import SuperadminService

__all__ = [
    "ApiClient",
    "AuthService",
    "ApiKeyService",
    "PaymentService",
    "WebhookService",
    "SuperadminService",
]
