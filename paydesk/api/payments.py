"""Merchant transactions, payouts, balance and payment links."""

from datetime import datetime, timezone
from typing import Any

from paydesk import endpoints
from paydesk.api.api_keys import ApiKeyService
from paydesk.api.client import ApiClient
from paydesk.config import settings
from paydesk.errors import ApiError, AuthenticationError
from paydesk.fees import PayoutCharge
from paydesk.models.balance import Balance
from paydesk.models.payout import Payout, PayoutRequest
from paydesk.models.transaction import Transaction
from paydesk.utils.logging import get_logger
from paydesk.validation import sanitize_text

logger = get_logger("paydesk.payments", settings.log_level)

API_KEY_REQUIRED = "API key required for this operation. Please create an API key first."

TRANSACTION_SEARCH_FILTERS = (
    "merchantId", "minAmount", "maxAmount", "startDate", "endDate", "description",
    "transactionId", "orderId", "customerName", "customerEmail", "customerPhone",
    "status", "paymentGateway", "paymentMethod", "settlementStatus", "payoutStatus",
    "search", "page", "limit", "sortBy", "sortOrder",
)
PAYOUT_SEARCH_FILTERS = (
    "merchantId", "payoutId", "minAmount", "maxAmount", "status", "startDate", "endDate",
    "description", "beneficiaryName", "notes", "search", "page", "limit", "sortBy", "sortOrder",
)
TRANSACTION_FILTERS = (
    "page", "limit", "status", "payment_gateway", "payment_method", "start_date",
    "end_date", "search", "sort_by", "sort_order",
)
PAYOUT_FILTERS = ("page", "limit", "status", "startDate", "endDate")
REPORT_FILTERS = ("startDate", "endDate", "status", "format")


def pick_filters(filters: dict[str, Any], allowed: tuple[str, ...]) -> dict[str, Any]:
    """Keep only the query parameters an endpoint understands."""
    unknown = set(filters) - set(allowed)
    if unknown:
        logger.debug(f"Ignoring unsupported filters: {sorted(unknown)}")
    return {key: filters[key] for key in allowed if key in filters}


def extract_records(data: dict[str, Any], *keys: str) -> list[dict[str, Any]]:
    """Find the list of records in a list response.

    Endpoints wrap their lists under different keys, sometimes nested in
    ``data``.
    """
    for container in (data, data.get("data")):
        if isinstance(container, list):
            return container
        if isinstance(container, dict):
            for key in keys:
                value = container.get(key)
                if isinstance(value, list):
                    return value
    return []


def parse_transactions(data: dict[str, Any]) -> list[Transaction]:
    return [
        Transaction.model_validate(item)
        for item in extract_records(data, "transactions", "results", "items")
    ]


def parse_payouts(data: dict[str, Any]) -> list[Payout]:
    return [
        Payout.model_validate(item)
        for item in extract_records(data, "payouts", "results", "items")
    ]


def _expiry(value: Any) -> str | None:
    """Payment link expiry arrives as epoch seconds."""
    if not value:
        return None
    try:
        return datetime.fromtimestamp(float(value), tz=timezone.utc).isoformat()
    except (TypeError, ValueError):
        return str(value)


class PaymentService:
    """Merchant-side payment and payout operations."""

    def __init__(self, client: ApiClient | None = None, api_keys: ApiKeyService | None = None):
        self.client = client or ApiClient()
        self.api_keys = api_keys or ApiKeyService(self.client)

    # ============ SEARCH ============

    def search_transactions(self, **filters: Any) -> dict[str, Any]:
        """Search the merchant's transactions.

        Filters use the API's camelCase names (``startDate``, ``orderId``,
        ``sortBy`` ...); empty values are dropped.
        """
        return self.client.get(
            endpoints.SEARCH_TRANSACTIONS,
            params=pick_filters(filters, TRANSACTION_SEARCH_FILTERS),
            fallback="Failed to search transactions",
        )

    def search_payouts(self, **filters: Any) -> dict[str, Any]:
        return self.client.get(
            endpoints.SEARCH_PAYOUTS,
            params=pick_filters(filters, PAYOUT_SEARCH_FILTERS),
            fallback="Failed to search payouts",
        )

    # ============ MERCHANT ============

    def resolve_api_key(self) -> str:
        """Return the merchant's API key, fetching and caching it once.

        Raises:
            AuthenticationError: If the merchant has no API key
        """
        if self.client.api_key:
            return self.client.api_key

        try:
            data = self.api_keys.get_api_key()
        except ApiError as e:
            raise AuthenticationError(API_KEY_REQUIRED, payload=e.payload) from e

        nested = data.get("data") if isinstance(data.get("data"), dict) else {}
        key = data.get("apiKey") or data.get("key") or nested.get("apiKey") or nested.get("key")
        if not key:
            raise AuthenticationError("API key not found")

        self.client.api_key = key
        return key

    def get_transactions(self, **filters: Any) -> dict[str, Any]:
        """List transactions through the API-key endpoint.

        Filters use snake_case names (``payment_gateway``, ``start_date``,
        ``sort_order`` ...).
        """
        return self.client.get(
            endpoints.TRANSACTIONS,
            params=pick_filters(filters, TRANSACTION_FILTERS),
            auth="api_key",
            api_key=self.resolve_api_key(),
            fallback="Failed to fetch transactions",
        )

    def get_payouts(self, **filters: Any) -> dict[str, Any]:
        return self.client.get(
            endpoints.PAYOUTS,
            params=pick_filters(filters, PAYOUT_FILTERS),
            fallback="Failed to fetch payouts",
        )

    def get_balance(self) -> Balance:
        data = self.client.get(endpoints.BALANCE, fallback="Failed to fetch balance")
        return Balance.from_response(data)

    def get_transaction_detail(self, transaction_id: str) -> Transaction:
        data = self.client.get(
            endpoints.transaction_detail(transaction_id),
            fallback="Failed to fetch transaction detail",
        )
        record = data.get("transaction") or data.get("data") or data
        return Transaction.model_validate(record)

    def create_payment_link(
        self,
        amount: Any,
        customer_name: str,
        customer_email: str,
        customer_phone: str,
        description: str | None = None,
    ) -> dict[str, Any]:
        """Create a hosted payment link.

        Returns:
            Normalised link details; the raw response is kept under ``raw``
        """
        body = {
            "amount": str(amount),
            "customer_name": customer_name,
            "customer_email": customer_email,
            "customer_phone": customer_phone,
            "description": description or "Product purchase",
        }
        api = self.client.post(
            endpoints.CREATE_LINK,
            body,
            auth="api_key",
            api_key=self.resolve_api_key(),
            fallback="Failed to create payment link",
        )

        return {
            "payment_link": api.get("payment_url"),
            "link_id": api.get("payment_link_id") or api.get("order_id"),
            "order_id": api.get("order_id") or api.get("transaction_id"),
            "transaction_id": api.get("transaction_id"),
            "amount": api.get("order_amount") or str(amount),
            "currency": api.get("order_currency") or settings.default_currency,
            "status": "created",
            "customer_name": customer_name,
            "merchant_name": api.get("merchant_name"),
            "merchant_id": api.get("merchant_id"),
            "reference_id": api.get("reference_id"),
            "created_at": datetime.now(timezone.utc).isoformat(),
            "expires_at": _expiry(api.get("expires_at")),
            "message": api.get("message") or "Payment link created successfully",
            "success": bool(api.get("success", False)),
            "upi_deep_link": api.get("upi_deep_link"),
            "phonepe_deep_link": api.get("phonepe_deep_link"),
            "gpay_deep_link": api.get("gpay_deep_link"),
            "raw": api,
        }

    def get_payment_status(self, order_id: str) -> dict[str, Any]:
        return self.client.get(
            endpoints.payment_status(order_id),
            auth="api_key",
            api_key=self.resolve_api_key(),
            fallback="Failed to fetch payment status",
        )

    def refund_payment(self, order_id: str, amount: Any = None, reason: str | None = None) -> dict[str, Any]:
        """Refund a paid order, in full unless ``amount`` is given."""
        body: dict[str, Any] = {}
        if amount is not None:
            body["amount"] = str(amount)
        if reason:
            body["reason"] = sanitize_text(reason).text
        return self.client.post(
            endpoints.refund(order_id),
            body,
            auth="api_key",
            api_key=self.resolve_api_key(),
            fallback="Failed to process refund",
        )

    def get_available_gateways(self) -> dict[str, Any]:
        return self.client.get(
            endpoints.AVAILABLE_GATEWAYS, fallback="Failed to fetch payment gateways"
        )

    # ============ PAYOUTS ============

    def request_payout(
        self,
        request: PayoutRequest,
        charge: PayoutCharge | None = None,
    ) -> dict[str, Any]:
        """Submit a payout request.

        Args:
            request: The payout; validate it first with
                ``paydesk.validation.validate_payout_request``
            charge: Fee preview, recorded in the audit log
        """
        notes = sanitize_text(request.notes, audit_logger=self.client.audit).text
        payload = request.model_copy(update={"notes": notes}).to_payload()

        data = self.client.post(
            endpoints.PAYOUT_REQUEST, payload, fallback="Failed to request payout"
        )

        payout = data.get("payout") if isinstance(data.get("payout"), dict) else data
        payout_id = payout.get("payoutId") or payout.get("payout_id") or payout.get("_id")
        self.client.audit.log_payout_requested(
            amount=request.amount,
            transfer_mode=request.transfer_mode,
            commission=charge.commission if charge else payout.get("commission"),
            payout_id=payout_id,
        )
        return data

    def cancel_payout(self, payout_id: str) -> dict[str, Any]:
        data = self.client.post(
            endpoints.payout_cancel(payout_id), fallback="Failed to cancel payout"
        )
        self.client.audit.log_payout_action(payout_id, "cancel")
        return data

    def get_payout_status(self, payout_id: str) -> dict[str, Any]:
        return self.client.get(
            endpoints.payout_status(payout_id), fallback="Failed to fetch payout status"
        )

    # ============ REPORTS ============

    def transaction_report(self, **filters: Any) -> dict[str, Any]:
        return self.client.get(
            endpoints.TRANSACTION_REPORT,
            params=pick_filters(filters, REPORT_FILTERS),
            fallback="Failed to fetch transaction report",
        )

    def payout_report(self, **filters: Any) -> dict[str, Any]:
        return self.client.get(
            endpoints.PAYOUT_REPORT,
            params=pick_filters(filters, REPORT_FILTERS),
            fallback="Failed to fetch payout report",
        )

    def combined_report(self, **filters: Any) -> dict[str, Any]:
        return self.client.get(
            endpoints.COMBINED_REPORT,
            params=pick_filters(filters, REPORT_FILTERS),
            fallback="Failed to fetch combined report",
        )
