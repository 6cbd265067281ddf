"""Payout models."""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

from paydesk.models.base import ApiModel, api_field

TransferMode = Literal["upi", "bank", "crypto"]

# Beneficiary fields sent for each transfer mode, in API (camelCase) spelling
MODE_FIELDS: dict[str, tuple[str, ...]] = {
    "upi": ("upiId",),
    "bank": ("accountNumber", "ifscCode", "accountHolderName", "bankName", "branchName"),
    "crypto": ("walletAddress", "networkName", "currencyName"),
}


class BeneficiaryDetails(ApiModel):
    """Where a payout is sent."""

    upi_id: str | None = api_field("upi_id", "upiId", default=None)
    account_number: str | None = api_field("account_number", "accountNumber", default=None)
    ifsc_code: str | None = api_field("ifsc_code", "ifscCode", default=None)
    account_holder_name: str | None = api_field(
        "account_holder_name", "accountHolderName", default=None
    )
    bank_name: str | None = api_field("bank_name", "bankName", default=None)
    branch_name: str | None = api_field("branch_name", "branchName", default=None)
    wallet_address: str | None = api_field("wallet_address", "walletAddress", default=None)
    network_name: str | None = api_field("network_name", "networkName", default=None)
    currency_name: str | None = api_field("currency_name", "currencyName", default=None)

    def to_api_dict(self) -> dict[str, str | None]:
        """All fields in the camelCase spelling the API expects."""
        return {
            "upiId": self.upi_id,
            "accountNumber": self.account_number,
            "ifscCode": self.ifsc_code,
            "accountHolderName": self.account_holder_name,
            "bankName": self.bank_name,
            "branchName": self.branch_name,
            "walletAddress": self.wallet_address,
            "networkName": self.network_name,
            "currencyName": self.currency_name,
        }


class PayoutRequest(BaseModel):
    """A merchant withdrawal request, before submission."""

    amount: Decimal = Field(description="Requested payout amount")
    transfer_mode: TransferMode = Field(default="bank", description="upi, bank or crypto")
    beneficiary_details: BeneficiaryDetails = Field(default_factory=BeneficiaryDetails)
    notes: str = Field(default="", description="Free-text note for the approver")

    def to_payload(self) -> dict:
        """Request body for the payout endpoint.

        Only the beneficiary fields that belong to the chosen transfer mode
        are sent.
        """
        details = self.beneficiary_details.to_api_dict()
        return {
            "amount": float(self.amount),
            "transferMode": self.transfer_mode,
            "beneficiaryDetails": {
                key: details[key] for key in MODE_FIELDS[self.transfer_mode]
            },
            "notes": self.notes,
        }


class Payout(ApiModel):
    """A payout as reported by the gateway."""

    payout_id: str = api_field("payout_id", "payoutId", "id", "_id")
    merchant_id: str | None = api_field("merchant_id", "merchantId", default=None)
    merchant_name: str | None = api_field("merchant_name", "merchantName", default=None)
    amount: Decimal = api_field("amount", "grossAmount", "gross_amount", default=Decimal("0"))
    commission: Decimal | None = api_field("commission", default=None)
    net_amount: Decimal | None = api_field("net_amount", "netAmount", default=None)
    currency: str = api_field("currency", default="INR")
    status: str = api_field("status", default="requested")
    transfer_mode: str | None = api_field("transfer_mode", "transferMode", default=None)
    beneficiary_details: BeneficiaryDetails | None = api_field(
        "beneficiary_details", "beneficiaryDetails", default=None
    )
    notes: str | None = api_field("notes", "description", default=None)
    utr: str | None = api_field("utr", "UTR", default=None)
    rejection_reason: str | None = api_field("rejection_reason", "rejectionReason", default=None)
    created_at: datetime | None = api_field("created_at", "createdAt", "requestedAt", default=None)
    processed_at: datetime | None = api_field("processed_at", "processedAt", "completedAt", default=None)

    def to_display_dict(self) -> dict:
        """Return a dictionary suitable for display."""
        return {
            "id": self.payout_id,
            "amount": f"{self.currency} {self.amount:.2f}",
            "commission": f"{self.commission:.2f}" if self.commission is not None else "N/A",
            "status": self.status,
            "mode": self.transfer_mode or "N/A",
            "utr": self.utr or "N/A",
            "date": self.created_at.strftime("%Y-%m-%d %H:%M") if self.created_at else "N/A",
        }
