"""Models module - Pydantic data models."""

from .transaction import Transaction
from .payout import BeneficiaryDetails, Payout, PayoutRequest
from .balance import Balance, PayoutEligibility
from .merchant import Merchant
from .webhook import WebhookConfig, WebhookEvent, PAYMENT_EVENTS, PAYOUT_EVENTS
from .session import AuthSession
from .invoice import InvoiceData, InvoiceLine, Product

__all__ = [
    "Transaction",
    "BeneficiaryDetails",
    "Payout",
    "PayoutRequest",
    "Balance",
    "PayoutEligibility",
    "Merchant",
    "WebhookConfig",
    "WebhookEvent",
    "PAYMENT_EVENTS",
    "PAYOUT_EVENTS",
    "AuthSession",
    "InvoiceData",
    "InvoiceLine",
    "Product",
]
