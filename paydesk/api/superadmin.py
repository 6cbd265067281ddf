"""Platform superadmin operations: merchants, settlements, payout review."""

from typing import Any, Literal

from paydesk import endpoints
from paydesk.api.client import ApiClient
from paydesk.config import settings
from paydesk.errors import FormValidationError
from paydesk.fees import to_amount
from paydesk.models.merchant import Merchant
from paydesk.utils.logging import get_logger
from paydesk.validation import sanitize_text, validate_password

logger = get_logger("paydesk.superadmin", settings.log_level)

FundsAction = Literal["block", "unblock"]

ADMIN_TRANSACTION_FILTERS = (
    "merchantId", "status", "settlementStatus", "payoutStatus", "startDate", "endDate",
    "minAmount", "maxAmount", "search",
)
ADMIN_PAYOUT_FILTERS = ("status", "merchantId", "isAutoPayout", "startDate", "endDate")


def parse_merchants(data: dict[str, Any]) -> list[Merchant]:
    """Merchants from the comprehensive merchants response."""
    records = data.get("merchants")
    if records is None and isinstance(data.get("data"), dict):
        records = data["data"].get("merchants")
    if records is None and isinstance(data.get("data"), list):
        records = data["data"]
    return [Merchant.model_validate(item) for item in records or []]


class SuperadminService:
    """Operations available to the platform superadmin role."""

    def __init__(self, client: ApiClient | None = None):
        self.client = client or ApiClient()

    # ============ DASHBOARD / MERCHANTS ============

    def get_dashboard_stats(self) -> dict[str, Any]:
        data = self.client.get(
            endpoints.DASHBOARD_STATS, fallback="Failed to fetch dashboard statistics"
        )
        return data.get("stats") or {}

    def get_all_merchants(
        self,
        merchant_id: str | None = None,
        status: str | None = None,
        include_inactive: bool = False,
    ) -> dict[str, Any]:
        """Merchants with their balances and transaction summaries."""
        return self.client.get(
            endpoints.MERCHANTS_COMPREHENSIVE,
            params={
                "merchantId": merchant_id,
                "status": status,
                "includeInactive": include_inactive is True,
            },
            fallback="Failed to fetch merchants data",
        )

    def delete_user(self, user_id: str) -> dict[str, Any]:
        data = self.client.delete(
            endpoints.superadmin_user(user_id), fallback="Failed to delete user"
        )
        self.client.audit.log_security_event("user_deleted", f"user {user_id}", severity="info")
        return data

    def change_user_password(self, user_id: str, new_password: str) -> dict[str, Any]:
        validate_password(new_password)
        data = self.client.put(
            endpoints.superadmin_user_password(user_id),
            {"newPassword": new_password},
            fallback="Failed to change user password",
        )
        self.client.audit.log_security_event(
            "password_changed", f"user {user_id}", severity="info"
        )
        return data

    def block_merchant_funds(
        self,
        merchant_id: str,
        amount: Any,
        action: FundsAction,
    ) -> dict[str, Any]:
        """Block or release part of a merchant's available balance.

        Raises:
            FormValidationError: If the amount is not positive or the action
                is not "block" / "unblock"
        """
        value = to_amount(amount)
        if value <= 0:
            raise FormValidationError("Amount must be greater than 0")
        if action not in ("block", "unblock"):
            raise FormValidationError('Action must be either "block" or "unblock"')

        data = self.client.put(
            endpoints.superadmin_block_funds(merchant_id),
            {"amount": float(value), "action": action},
            fallback=f"Failed to {action} merchant funds",
        )
        self.client.audit.log_security_event(
            f"funds_{action}", f"merchant {merchant_id}: {value}", severity="info"
        )
        return data

    def trigger_manual_settlement(self) -> dict[str, Any]:
        logger.info("Triggering manual settlement")
        return self.client.get(
            endpoints.MANUAL_SETTLEMENT,
            fallback="Failed to trigger manual settlement",
            retry=False,
        )

    # ============ TRANSACTIONS ============

    def get_admin_transactions(
        self,
        page: int = 1,
        limit: int = 50,
        sort_by: str = "createdAt",
        sort_order: str = "desc",
        **filters: Any,
    ) -> dict[str, Any]:
        """All merchants' transactions.

        Extra filters use the API's camelCase names (``merchantId``,
        ``settlementStatus``, ``minAmount`` ...).
        """
        params = {key: filters.get(key) for key in ADMIN_TRANSACTION_FILTERS}
        params.update({
            "page": page or 1,
            "limit": limit or 50,
            "sortBy": sort_by or "createdAt",
            "sortOrder": sort_order or "desc",
        })
        return self.client.get(
            endpoints.ADMIN_TRANSACTIONS,
            params=params,
            fallback="Failed to fetch admin transactions",
        )

    def settle_transaction(self, transaction_id: str) -> dict[str, Any]:
        return self.client.put(
            endpoints.admin_transaction(transaction_id, "settle"),
            fallback="Failed to settle transaction",
        )

    def update_transaction_status(self, transaction_id: str, status: str) -> dict[str, Any]:
        if not status or not status.strip():
            raise FormValidationError("Status is required")
        return self.client.put(
            endpoints.admin_transaction(transaction_id, "status"),
            {"status": status.strip()},
            fallback="Failed to update transaction status",
        )

    def delete_transaction(self, transaction_id: str) -> dict[str, Any]:
        return self.client.delete(
            endpoints.admin_transaction(transaction_id),
            fallback="Failed to delete transaction",
        )

    # ============ PAYOUTS ============

    def get_all_payouts(
        self,
        page: int = 1,
        limit: int = 20,
        sort_by: str = "createdAt",
        sort_order: str = "desc",
        **filters: Any,
    ) -> dict[str, Any]:
        """Payout requests across all merchants, newest first."""
        params = {key: filters.get(key) for key in ADMIN_PAYOUT_FILTERS}
        params.update({
            "page": page or 1,
            "limit": limit or 20,
            "sortBy": sort_by or "createdAt",
            "sortOrder": sort_order or "desc",
        })
        return self.client.get(
            endpoints.ADMIN_PAYOUTS, params=params, fallback="Failed to fetch payouts"
        )

    def get_payout_details(self, payout_id: str) -> dict[str, Any]:
        return self.client.get(
            endpoints.admin_payout(payout_id, "details"),
            fallback="Failed to fetch payout details",
        )

    def approve_payout(self, payout_id: str, notes: str = "") -> dict[str, Any]:
        notes = sanitize_text(notes).text
        data = self.client.post(
            endpoints.admin_payout(payout_id, "approve"),
            {"notes": notes},
            fallback="Failed to approve payout",
        )
        self.client.audit.log_payout_action(payout_id, "approve", notes)
        return data

    def reject_payout(self, payout_id: str, reason: str) -> dict[str, Any]:
        """Reject a payout request; the reason is shown to the merchant."""
        if not reason or not reason.strip():
            raise FormValidationError("Rejection reason is required")
        reason = sanitize_text(reason).text
        data = self.client.post(
            endpoints.admin_payout(payout_id, "reject"),
            {"reason": reason},
            fallback="Failed to reject payout",
        )
        self.client.audit.log_payout_action(payout_id, "reject", reason)
        return data

    def process_payout(
        self,
        payout_id: str,
        utr: str,
        notes: str = "",
        transaction_hash: str | None = None,
    ) -> dict[str, Any]:
        """Mark an approved payout as paid.

        Args:
            payout_id: Payout to complete
            utr: Bank UTR or other transfer reference
            notes: Optional note for the merchant
            transaction_hash: On-chain hash for crypto payouts
        """
        if not utr or not utr.strip():
            raise FormValidationError("UTR/Transaction reference is required")

        payload = {"utr": utr.strip(), "notes": sanitize_text(notes).text}
        if transaction_hash:
            payload["transactionHash"] = transaction_hash.strip()

        data = self.client.post(
            endpoints.admin_payout(payout_id, "process"),
            payload,
            fallback="Failed to process payout",
        )
        self.client.audit.log_payout_action(payout_id, "process", f"utr {payload['utr']}")
        return data

    # ============ SETTINGS ============

    def get_payment_gateway_settings(self) -> dict[str, Any]:
        return self.client.get(
            endpoints.PAYMENT_GATEWAY_SETTINGS,
            fallback="Failed to fetch payment gateway settings",
        )

    def update_payment_gateway_settings(self, payment_gateways: dict[str, Any]) -> dict[str, Any]:
        """Enable, disable or set the default payment gateways."""
        return self.client.put(
            endpoints.PAYMENT_GATEWAY_SETTINGS,
            {"payment_gateways": payment_gateways},
            fallback="Failed to update payment gateway settings",
        )
