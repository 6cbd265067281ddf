"""Merchant model."""

from decimal import Decimal

from paydesk.models.base import ApiModel, api_field


class Merchant(ApiModel):
    """A merchant as listed in the superadmin merchant overview."""

    merchant_id: str = api_field("merchant_id", "merchantId", "id", "_id")
    name: str = api_field("name", "merchantName", "businessName", default="")
    email: str | None = api_field("email", default=None)
    status: str = api_field("status", default="active")
    available_balance: Decimal = api_field(
        "available_balance", "availableBalance", default=Decimal("0")
    )
    unsettled_balance: Decimal = api_field(
        "unsettled_balance", "unsettledBalance", default=Decimal("0")
    )
    blocked_balance: Decimal = api_field(
        "blocked_balance", "blockedBalance", default=Decimal("0")
    )
    total_transactions: int = api_field("total_transactions", "totalTransactions", default=0)

    def matches_name(self, query: str) -> bool:
        """Check if merchant name, email or id contains the query."""
        query_lower = query.lower()
        for candidate in (self.name, self.email or "", self.merchant_id):
            if query_lower in candidate.lower():
                return True
        return False

    def to_display_dict(self) -> dict:
        """Return a dictionary suitable for display."""
        return {
            "id": self.merchant_id,
            "name": self.name or "N/A",
            "email": self.email or "N/A",
            "status": self.status,
            "available": f"{self.available_balance:.2f}",
            "unsettled": f"{self.unsettled_balance:.2f}",
            "blocked": f"{self.blocked_balance:.2f}",
        }
