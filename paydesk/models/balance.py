"""Merchant balance model."""

from decimal import Decimal
from typing import Any

from pydantic import Field

from paydesk.models.base import ApiModel, api_field


class PayoutEligibility(ApiModel):
    """Whether, and for how much, the merchant may request a payout."""

    can_request_payout: bool = api_field("can_request_payout", "canRequestPayout", default=False)
    minimum_payout_amount: Decimal = api_field(
        "minimum_payout_amount", "minimumPayoutAmount", default=Decimal("0")
    )
    maximum_payout_amount: Decimal = api_field(
        "maximum_payout_amount", "maximumPayoutAmount", default=Decimal("0")
    )
    reason: str | None = api_field("reason", default=None)


class Balance(ApiModel):
    """Flattened view of the merchant balance endpoint."""

    available_balance: Decimal = api_field("available_balance", default=Decimal("0"))
    unsettled_balance: Decimal = api_field(
        "unsettled_balance", "unsettled_net_revenue", "unsettled_revenue", default=Decimal("0")
    )
    total_revenue: Decimal = api_field("total_revenue", "settled_revenue", default=Decimal("0"))
    total_commission: Decimal = api_field("total_commission", default=Decimal("0"))
    total_paid_out: Decimal = api_field("total_paid_out", default=Decimal("0"))
    pending_payouts: Decimal = api_field("pending_payouts", default=Decimal("0"))
    blocked_balance: Decimal = api_field("blocked_balance", "blockedBalance", default=Decimal("0"))
    free_payouts_remaining: int = api_field(
        "free_payouts_remaining", "freePayoutsRemaining", default=0
    )
    next_settlement: str | None = api_field("next_settlement", default=None)
    eligibility: PayoutEligibility = Field(default_factory=PayoutEligibility)

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> "Balance":
        """Build from the nested ``{balance, merchant, payout_eligibility}`` response."""
        figures = dict(data.get("balance") or {})
        merchant = data.get("merchant") or {}
        settlement = data.get("settlement_info") or {}
        eligibility = data.get("payout_eligibility") or data.get("payoutEligibility") or {}

        figures["free_payouts_remaining"] = merchant.get("freePayoutsRemaining", 0) or 0
        figures["next_settlement"] = settlement.get("next_settlement")
        figures["eligibility"] = PayoutEligibility.model_validate(eligibility)
        return cls.model_validate(figures)

    def to_display_dict(self) -> dict:
        """Return a dictionary suitable for display."""
        return {
            "available": f"{self.available_balance:.2f}",
            "unsettled": f"{self.unsettled_balance:.2f}",
            "total_revenue": f"{self.total_revenue:.2f}",
            "paid_out": f"{self.total_paid_out:.2f}",
            "pending_payouts": f"{self.pending_payouts:.2f}",
            "free_payouts_left": self.free_payouts_remaining,
            "can_request_payout": self.eligibility.can_request_payout,
            "max_payout": f"{self.eligibility.maximum_payout_amount:.2f}",
            "next_settlement": self.next_settlement or "N/A",
        }
