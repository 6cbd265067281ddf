"""Tests for merchant payment, payout and API key operations."""

import json
from decimal import Decimal

import pytest

from paydesk.api.api_keys import ApiKeyService
from paydesk.api.payments import (
    API_KEY_REQUIRED,
    PaymentService,
    extract_records,
    parse_payouts,
    parse_transactions,
)
from paydesk.errors import AuthenticationError, ConflictError, NotFoundError
from paydesk.models.payout import BeneficiaryDetails, PayoutRequest

from conftest import FakeResponse


@pytest.fixture
def payments(client, merchant_session):
    return PaymentService(client)


BALANCE_RESPONSE = {
    "success": True,
    "merchant": {"merchantId": "m_1", "freePayoutsRemaining": 2},
    "balance": {
        "available_balance": 15234.5,
        "unsettled_net_revenue": "820.00",
        "total_revenue": 50000,
        "total_paid_out": 30000,
        "pending_payouts": 0,
    },
    "settlement_info": {"next_settlement": "2024-01-16T04:00:00Z"},
    "payout_eligibility": {"can_request_payout": True, "maximum_payout_amount": 15234.5},
}


class TestSearch:
    """Tests for the JWT search endpoints."""

    def test_search_transactions_filters(self, payments, fake_http):
        """Test that transaction search sends only the given filters."""
        fake_http.queue(FakeResponse(200, {"transactions": []}))
        payments.search_transactions(
            status="paid", startDate="2024-01-01", page=2, bogus="x", orderId=None
        )
        call = fake_http.last_call
        assert call["url"].endswith("/payments/merchant/transactions/search")
        assert call["params"] == {"status": "paid", "startDate": "2024-01-01", "page": 2}

    def test_search_payouts_filters(self, payments, fake_http):
        """Test that payout search sends only the given filters."""
        fake_http.queue(FakeResponse(200, {"payouts": []}))
        payments.search_payouts(beneficiaryName="Asha", limit=10)
        assert fake_http.last_call["params"] == {"beneficiaryName": "Asha", "limit": 10}

    def test_get_payouts(self, payments, fake_http):
        """Test listing payouts."""
        fake_http.queue(FakeResponse(200, {"payouts": []}))
        payments.get_payouts(page=1, status="completed", startDate="")
        assert fake_http.last_call["params"] == {"page": 1, "status": "completed"}


class TestApiKey:
    """Tests for API key resolution."""

    def test_key_fetched_once(self, payments, fake_http):
        """Test that the API key is fetched once and reused."""
        fake_http.queue(
            FakeResponse(200, {"success": True, "data": {"apiKey": "key_live_1"}}),
            FakeResponse(200, {"transactions": [{"transactionId": "T1", "amount": 10}]}),
            FakeResponse(200, {"transactions": []}),
        )

        payments.get_transactions(page=1, payment_gateway="upi")
        payments.get_transactions(page=2)

        urls = [call["url"] for call in fake_http.calls]
        assert urls[0].endswith("/get")
        assert urls[1].endswith("/payments/transactions")
        assert len(urls) == 3
        assert fake_http.calls[1]["headers"]["x-api-key"] == "key_live_1"
        assert fake_http.calls[1]["params"] == {"page": 1, "payment_gateway": "upi"}

    def test_missing_key_asks_to_create_one(self, payments, fake_http):
        """Test the message when the merchant has no API key yet."""
        fake_http.queue(FakeResponse(404, {"message": "not found"}))
        with pytest.raises(AuthenticationError) as exc:
            payments.get_transactions()
        assert exc.value.message == API_KEY_REQUIRED
        assert len(fake_http.calls) == 1

    def test_empty_key(self, payments, fake_http):
        """Test that an empty API key is rejected."""
        fake_http.queue(FakeResponse(200, {"success": True, "data": {}}))
        with pytest.raises(AuthenticationError, match="API key not found"):
            payments.resolve_api_key()

    def test_create_api_key_conflict(self, client, fake_http, merchant_session):
        """Test creating a second API key."""
        fake_http.queue(FakeResponse(409, {"message": "exists"}))
        with pytest.raises(ConflictError, match="You can only create one API key"):
            ApiKeyService(client).create_api_key()

    def test_get_api_key_not_found_message(self, client, fake_http, merchant_session):
        """Test the not-found message for API key lookup."""
        fake_http.queue(FakeResponse(404))
        with pytest.raises(NotFoundError, match="You may need to create one first"):
            ApiKeyService(client).get_api_key()


class TestPaymentLinks:
    """Tests for payment link creation."""

    def test_normalised_link(self, payments, fake_http, client):
        """Test that a payment link response is normalised."""
        client.api_key = "key_live_1"
        fake_http.queue(FakeResponse(200, {
            "success": True,
            "payment_url": "https://pay.test/l/abc",
            "order_id": "ORD-9",
            "transaction_id": "TXN-9",
            "order_amount": "499",
            "merchant_name": "Verma Traders",
            "expires_at": 1705312800,
            "upi_deep_link": "upi://pay?pa=x",
        }))

        link = payments.create_payment_link(499, "Asha", "asha@example.com", "9876543210")

        assert fake_http.last_call["json"] == {
            "amount": "499",
            "customer_name": "Asha",
            "customer_email": "asha@example.com",
            "customer_phone": "9876543210",
            "description": "Product purchase",
        }
        assert fake_http.last_call["headers"]["x-api-key"] == "key_live_1"
        assert link["payment_link"] == "https://pay.test/l/abc"
        assert link["link_id"] == "ORD-9"
        assert link["order_id"] == "ORD-9"
        assert link["currency"] == "INR"
        assert link["status"] == "created"
        assert link["success"] is True
        assert link["expires_at"] == "2024-01-15T10:00:00+00:00"
        assert link["upi_deep_link"] == "upi://pay?pa=x"
        assert link["raw"]["merchant_name"] == "Verma Traders"

    def test_refund_body(self, payments, fake_http, client):
        """Test the refund request body."""
        client.api_key = "key_live_1"
        fake_http.queue(FakeResponse(200, {"success": True}))
        payments.refund_payment("ORD-9", amount=Decimal("100.50"), reason="  damaged\x00 ")
        assert fake_http.last_call["url"].endswith("/payments/refund/ORD-9")
        assert fake_http.last_call["json"] == {"amount": "100.50", "reason": "damaged"}


class TestBalanceAndDetail:
    """Tests for balance and transaction detail parsing."""

    def test_balance(self, payments, fake_http):
        """Test parsing the merchant balance."""
        fake_http.queue(FakeResponse(200, BALANCE_RESPONSE))
        balance = payments.get_balance()
        assert balance.available_balance == Decimal("15234.5")
        assert balance.unsettled_balance == Decimal("820.00")
        assert balance.free_payouts_remaining == 2
        assert balance.next_settlement == "2024-01-16T04:00:00Z"
        assert balance.eligibility.can_request_payout is True

    def test_transaction_detail(self, payments, fake_http):
        """Test fetching one transaction with a quoted id."""
        fake_http.queue(FakeResponse(200, {"transaction": {
            "transactionId": "TXN/1", "amount": "250.00", "status": "paid",
            "customerName": "Asha", "paymentGateway": "upi",
        }}))
        txn = payments.get_transaction_detail("TXN/1")
        assert fake_http.last_call["url"].endswith("/payments/merchant/transactions/TXN%2F1")
        assert txn.transaction_id == "TXN/1"
        assert txn.amount == Decimal("250.00")
        assert txn.to_display_dict()["customer"] == "Asha"

    def test_extract_records(self):
        """Test finding the record list in different response shapes."""
        assert extract_records({"data": {"transactions": [1]}}, "transactions") == [1]
        assert extract_records({"data": [2]}, "transactions") == [2]
        assert extract_records({"results": [3]}, "transactions", "results") == [3]
        assert extract_records({"message": "none"}, "transactions") == []

    def test_parse_helpers(self):
        """Test parsing raw records into models."""
        txns = parse_transactions({"transactions": [{"_id": "a", "amount": ""}]})
        assert txns[0].amount == Decimal("0")
        payouts = parse_payouts({"data": {"payouts": [{"payoutId": "p1", "grossAmount": 500}]}})
        assert payouts[0].amount == Decimal("500")


class TestPayouts:
    """Tests for payout submission and cancellation."""

    def test_payload_contains_only_mode_fields(self, payments, fake_http, audit):
        """Test that a UPI payout sends only UPI beneficiary fields."""
        fake_http.queue(FakeResponse(200, {"success": True, "payout": {"payoutId": "PO_1"}}))
        request = PayoutRequest(
            amount=Decimal("1500"),
            transfer_mode="upi",
            beneficiary_details=BeneficiaryDetails(upi_id="shop@okaxis", account_number="999"),
            notes="weekly   \x1b withdrawal",
        )

        payments.request_payout(request)

        assert fake_http.last_call["json"] == {
            "amount": 1500.0,
            "transferMode": "upi",
            "beneficiaryDetails": {"upiId": "shop@okaxis"},
            "notes": "weekly  withdrawal",
        }
        entries = [
            json.loads(line)
            for line in audit._get_log_file().read_text(encoding="utf-8").splitlines()
        ]
        requested = [e for e in entries if e["event"] == "payout_requested"]
        assert requested[0]["payout_id"] == "PO_1"
        assert requested[0]["transfer_mode"] == "upi"

    def test_bank_payload(self):
        """Test the bank transfer beneficiary payload."""
        request = PayoutRequest(
            amount=Decimal("2000"),
            transfer_mode="bank",
            beneficiary_details=BeneficiaryDetails(
                account_number="123456789012",
                ifsc_code="HDFC0001234",
                account_holder_name="Asha Verma",
            ),
        )
        details = request.to_payload()["beneficiaryDetails"]
        assert list(details) == [
            "accountNumber", "ifscCode", "accountHolderName", "bankName", "branchName",
        ]
        assert details["bankName"] is None

    def test_cancel_payout(self, payments, fake_http):
        """Test cancelling a payout."""
        fake_http.queue(FakeResponse(200, {"success": True}))
        payments.cancel_payout("PO_1")
        assert fake_http.last_call["method"] == "POST"
        assert fake_http.last_call["url"].endswith("/payments/merchant/payout/PO_1/cancel")

    def test_reports_pass_date_range(self, payments, fake_http):
        """Test that reports send the date range."""
        fake_http.queue(FakeResponse(200, {"report": []}))
        payments.combined_report(startDate="2024-01-01", endDate="2024-01-31", page=3)
        assert fake_http.last_call["url"].endswith("/payments/merchant/report/combined")
        assert fake_http.last_call["params"] == {"startDate": "2024-01-01", "endDate": "2024-01-31"}


class TestStatusLookups:
    """Tests for status, gateway and report lookups."""

    def test_payout_status(self, payments, fake_http):
        """Test looking up a payout's status."""
        fake_http.queue(FakeResponse(200, {"status": "pending"}))
        assert payments.get_payout_status("PO_1")["status"] == "pending"
        assert fake_http.last_call["url"].endswith("/payments/merchant/payout/PO_1/status")

    def test_payment_status_uses_api_key(self, payments, fake_http, client):
        """Test that payment status is fetched with the API key."""
        client.api_key = "key_live_1"
        fake_http.queue(FakeResponse(200, {"status": "paid"}))
        payments.get_payment_status("ORD-9")
        assert fake_http.last_call["url"].endswith("/payments/status/ORD-9")
        assert fake_http.last_call["headers"]["x-api-key"] == "key_live_1"

    def test_available_gateways(self, payments, fake_http):
        """Test listing available gateways."""
        fake_http.queue(FakeResponse(200, {"gateways": ["upi"]}))
        assert payments.get_available_gateways() == {"gateways": ["upi"]}

    @pytest.mark.parametrize("method, path", [
        ("transaction_report", "/payments/merchant/transaction/report"),
        ("payout_report", "/payments/merchant/payout/report"),
    ])
    def test_reports(self, payments, fake_http, method, path):
        """Test the transaction and payout report endpoints."""
        fake_http.queue(FakeResponse(200, {"report": []}))
        getattr(payments, method)(status="paid", format="json")
        assert fake_http.last_call["url"].endswith(path)
        assert fake_http.last_call["params"] == {"status": "paid", "format": "json"}
