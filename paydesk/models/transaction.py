"""Transaction model."""

from datetime import datetime
from decimal import Decimal

from pydantic import field_validator

from paydesk.models.base import ApiModel, api_field


class Transaction(ApiModel):
    """A pay-in collected through the gateway."""

    transaction_id: str = api_field(
        "transaction_id", "transactionId", "id", "_id", description="Gateway transaction id"
    )
    order_id: str | None = api_field("order_id", "orderId", default=None)
    merchant_id: str | None = api_field("merchant_id", "merchantId", default=None)
    merchant_name: str | None = api_field("merchant_name", "merchantName", default=None)
    amount: Decimal = api_field("amount", default=Decimal("0"))
    currency: str = api_field("currency", default="INR")
    status: str = api_field("status", default="created")
    payment_gateway: str | None = api_field("payment_gateway", "paymentGateway", default=None)
    payment_method: str | None = api_field("payment_method", "paymentMethod", default=None)
    customer_name: str | None = api_field("customer_name", "customerName", default=None)
    customer_email: str | None = api_field("customer_email", "customerEmail", default=None)
    customer_phone: str | None = api_field("customer_phone", "customerPhone", default=None)
    description: str | None = api_field("description", default=None)
    settlement_status: str | None = api_field("settlement_status", "settlementStatus", default=None)
    commission: Decimal | None = api_field("commission", default=None)
    net_amount: Decimal | None = api_field("net_amount", "netAmount", default=None)
    created_at: datetime | None = api_field("created_at", "createdAt", default=None)
    paid_at: datetime | None = api_field("paid_at", "paidAt", default=None)
    settled_at: datetime | None = api_field("settled_at", "settlementDate", "settledAt", default=None)

    @field_validator("amount", mode="before")
    @classmethod
    def _blank_amount(cls, value):
        return value if value not in (None, "") else Decimal("0")

    @property
    def invoice_date(self) -> datetime | None:
        """Date printed on the invoice: payment time, else creation time."""
        return self.paid_at or self.created_at

    def to_display_dict(self) -> dict:
        """Return a dictionary suitable for display."""
        when = self.invoice_date
        return {
            "id": self.transaction_id,
            "order_id": self.order_id or "N/A",
            "amount": f"{self.currency} {self.amount:.2f}",
            "status": self.status,
            "customer": self.customer_name or "N/A",
            "gateway": self.payment_gateway or "N/A",
            "settlement": self.settlement_status or "N/A",
            "date": when.strftime("%Y-%m-%d %H:%M") if when else "N/A",
        }
