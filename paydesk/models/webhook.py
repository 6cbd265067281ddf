"""Webhook configuration models."""

from datetime import datetime

from pydantic import BaseModel, Field

from paydesk.models.base import ApiModel, api_field


class WebhookEvent(BaseModel):
    """An event a merchant can subscribe a webhook to."""

    id: str
    label: str
    description: str


PAYMENT_EVENTS: list[WebhookEvent] = [
    WebhookEvent(id="payment.success", label="Payment Success", description="Payment completed successfully"),
    WebhookEvent(id="payment.failed", label="Payment Failed", description="Payment failed"),
    WebhookEvent(id="payment.pending", label="Payment Pending", description="Payment is pending"),
    WebhookEvent(id="payment.cancelled", label="Payment Cancelled", description="Payment cancelled by user"),
    WebhookEvent(id="payment.expired", label="Payment Expired", description="Payment link expired"),
]

PAYOUT_EVENTS: list[WebhookEvent] = [
    WebhookEvent(id="payout.requested", label="Payout Requested", description="Merchant requested a payout"),
    WebhookEvent(id="payout.pending", label="Payout Pending", description="Payout approved and pending processing"),
    WebhookEvent(id="payout.completed", label="Payout Completed", description="Payout processed successfully"),
    WebhookEvent(id="payout.rejected", label="Payout Rejected", description="Payout request rejected by admin"),
    WebhookEvent(id="payout.failed", label="Payout Failed", description="Payout processing failed"),
]


class WebhookConfig(ApiModel):
    """A merchant's webhook endpoint as stored by the gateway."""

    webhook_url: str | None = api_field("webhook_url", "webhookUrl", "url", default=None)
    events: list[str] = Field(default_factory=list)
    is_active: bool = api_field("is_active", "isActive", "enabled", default=True)
    secret: str | None = api_field("webhook_secret", "webhookSecret", "secret", default=None)
    updated_at: datetime | None = api_field("updated_at", "updatedAt", default=None)

    def to_display_dict(self) -> dict:
        """Return a dictionary suitable for display; the secret is masked."""
        return {
            "url": self.webhook_url or "N/A",
            "events": ", ".join(self.events) if self.events else "none",
            "active": self.is_active,
            "secret": f"{self.secret[:6]}..." if self.secret else "N/A",
        }
