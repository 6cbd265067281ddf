"""Tests for webhook configuration."""

import pytest

from paydesk.api.webhooks import WebhookService
from paydesk.errors import FormValidationError, PermissionDeniedError

from conftest import FakeResponse


@pytest.fixture
def webhooks(client, merchant_session):
    return WebhookService(client)


class TestPaymentWebhook:
    """Tests for the payment webhook endpoints."""

    def test_configure(self, webhooks, fake_http):
        """Test configuring the payment webhook."""
        fake_http.queue(FakeResponse(200, {"success": True}))
        webhooks.configure_webhook(" https://shop.in/hooks ", ["payment.success", "payment.failed"])
        call = fake_http.last_call
        assert call["url"].endswith("/payments/merchant/webhook/configure")
        assert call["json"] == {
            "webhook_url": "https://shop.in/hooks",
            "events": ["payment.success", "payment.failed"],
        }

    @pytest.mark.parametrize("url", ["", "ftp://shop.in/hooks", "shop.in/hooks"])
    def test_configure_rejects_bad_url(self, webhooks, fake_http, url):
        """Test that bad webhook URLs are rejected locally."""
        with pytest.raises(FormValidationError):
            webhooks.configure_webhook(url, ["payment.success"])
        assert fake_http.calls == []

    def test_config_not_found(self, webhooks, fake_http):
        """Test that a 404 means no payment webhook."""
        fake_http.queue(FakeResponse(404))
        assert webhooks.get_webhook_config() is None

    def test_config_success_false(self, webhooks, fake_http):
        """Test that success false means no payment webhook."""
        fake_http.queue(FakeResponse(200, {"success": False, "message": "No webhook configured"}))
        assert webhooks.get_webhook_config() is None

    def test_config_forbidden_propagates(self, webhooks, fake_http):
        """Test that a 403 is still raised."""
        fake_http.queue(FakeResponse(403))
        with pytest.raises(PermissionDeniedError):
            webhooks.get_webhook_config()

    def test_config_parsed(self, webhooks, fake_http):
        """Test parsing a payment webhook config."""
        fake_http.queue(FakeResponse(200, {
            "webhookUrl": "https://shop.in/hooks",
            "events": ["payment.success"],
            "isActive": True,
            "webhookSecret": "whsec_1234567890",
        }))
        config = webhooks.get_webhook_config()
        assert config.webhook_url == "https://shop.in/hooks"
        assert config.to_display_dict()["secret"] == "whsec_..."

    def test_delete(self, webhooks, fake_http):
        """Test deleting the payment webhook."""
        fake_http.queue(FakeResponse(200, {"success": True}))
        webhooks.delete_webhook()
        assert fake_http.last_call["method"] == "DELETE"

    def test_available_events(self, webhooks):
        """Test the available webhook events."""
        ids = [event.id for event in webhooks.available_events()]
        assert ids == [
            "payment.success", "payment.failed", "payment.pending",
            "payment.cancelled", "payment.expired",
        ]
        assert len(webhooks.available_payout_events()) == 5


class TestAllConfigs:
    """Tests for fetching both webhook configurations."""

    @pytest.mark.parametrize("status", [404, 500])
    def test_missing_means_none(self, webhooks, fake_http, status):
        """Test that missing configs come back as None."""
        fake_http.queue(FakeResponse(status))
        assert webhooks.get_all_webhook_configs() == {
            "payment_webhook": None,
            "payout_webhook": None,
        }

    def test_both_configured(self, webhooks, fake_http):
        """Test reading both webhook configs."""
        fake_http.queue(FakeResponse(200, {
            "payment_webhook": {"webhook_url": "https://shop.in/pay", "events": ["payment.success"]},
            "payout_webhook": None,
        }))
        configs = webhooks.get_all_webhook_configs()
        assert configs["payment_webhook"].webhook_url == "https://shop.in/pay"
        assert configs["payout_webhook"] is None


class TestPayoutWebhook:
    """Tests for the payout webhook endpoints."""

    def test_update_sends_only_given_fields(self, webhooks, fake_http):
        """Test that a payout webhook update sends only the given fields."""
        fake_http.queue(FakeResponse(200, {"success": True}))
        webhooks.update_payout_webhook(is_active=False)
        call = fake_http.last_call
        assert call["method"] == "PUT"
        assert call["url"].endswith("/payments/merchant/webhook/payout")
        assert call["json"] == {"is_active": False}

    def test_configure(self, webhooks, fake_http):
        """Test configuring the payout webhook."""
        fake_http.queue(FakeResponse(200, {"success": True}))
        webhooks.configure_payout_webhook("http://shop.in/payouts", ["payout.completed"])
        assert fake_http.last_call["url"].endswith("/payments/merchant/webhook/payout/configure")

    def test_config_not_found(self, webhooks, fake_http):
        """Test that a 404 means no payout webhook."""
        fake_http.queue(FakeResponse(404))
        assert webhooks.get_payout_webhook_config() is None
