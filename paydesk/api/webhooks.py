"""Payment and payout webhook configuration."""

from typing import Any

from paydesk import endpoints
from paydesk.api.client import ApiClient
from paydesk.errors import ApiError, NotFoundError
from paydesk.models.webhook import PAYMENT_EVENTS, PAYOUT_EVENTS, WebhookConfig, WebhookEvent
from paydesk.validation import validate_webhook_url


def _config_or_none(data: Any) -> WebhookConfig | None:
    if not isinstance(data, dict) or not data:
        return None
    return WebhookConfig.model_validate(data)


def _unusable(error: ApiError) -> bool:
    """A server error, or a 2xx body flagged ``success: false``."""
    return error.status_code == 500 or (
        error.status_code is not None and error.status_code < 300
    )


class WebhookService:
    """Where the gateway posts payment and payout notifications."""

    def __init__(self, client: ApiClient | None = None):
        self.client = client or ApiClient()

    # ============ PAYMENT WEBHOOK ============

    def configure_webhook(self, url: str, events: list[str]) -> dict[str, Any]:
        """Register the payment webhook URL and the events it receives."""
        payload = {"webhook_url": validate_webhook_url(url), "events": list(events)}
        return self.client.post(
            endpoints.WEBHOOK_CONFIGURE, payload, fallback="Failed to configure webhook"
        )

    def get_all_webhook_configs(self) -> dict[str, WebhookConfig | None]:
        """Both webhook configurations in one call.

        Returns:
            ``{"payment_webhook": ..., "payout_webhook": ...}``; each is None
            when not configured. A 404 or 500 means neither is configured.
        """
        empty = {"payment_webhook": None, "payout_webhook": None}
        try:
            data = self.client.get(
                endpoints.WEBHOOK_ALL_CONFIG,
                fallback="Failed to fetch webhook configurations",
            )
        except NotFoundError:
            return empty
        except ApiError as e:
            if _unusable(e):
                return empty
            raise

        return {
            "payment_webhook": _config_or_none(data.get("payment_webhook")),
            "payout_webhook": _config_or_none(data.get("payout_webhook")),
        }

    def get_webhook_config(self) -> WebhookConfig | None:
        """The payment webhook, or None when none is configured."""
        try:
            data = self.client.get(
                endpoints.WEBHOOK_CONFIG, fallback="Failed to fetch webhook configuration"
            )
        except NotFoundError:
            return None
        except ApiError as e:
            if e.status_code is not None and e.status_code < 300:
                return None
            raise
        return _config_or_none(data)

    def test_webhook(self) -> dict[str, Any]:
        return self.client.post(endpoints.WEBHOOK_TEST, fallback="Failed to test webhook")

    def delete_webhook(self) -> dict[str, Any]:
        return self.client.delete(
            endpoints.WEBHOOK_DELETE, fallback="Failed to delete webhook configuration"
        )

    def available_events(self) -> list[WebhookEvent]:
        return list(PAYMENT_EVENTS)

    # ============ PAYOUT WEBHOOK ============

    def configure_payout_webhook(self, url: str, events: list[str]) -> dict[str, Any]:
        payload = {"webhook_url": validate_webhook_url(url), "events": list(events)}
        return self.client.post(
            endpoints.PAYOUT_WEBHOOK_CONFIGURE,
            payload,
            fallback="Failed to configure payout webhook",
        )

    def update_payout_webhook(
        self,
        url: str | None = None,
        events: list[str] | None = None,
        is_active: bool | None = None,
    ) -> dict[str, Any]:
        """Change some of the payout webhook settings."""
        payload: dict[str, Any] = {}
        if url is not None:
            payload["webhook_url"] = validate_webhook_url(url)
        if events is not None:
            payload["events"] = list(events)
        if is_active is not None:
            payload["is_active"] = is_active
        return self.client.put(
            endpoints.PAYOUT_WEBHOOK_UPDATE,
            payload,
            fallback="Failed to update payout webhook",
        )

    def get_payout_webhook_config(self) -> WebhookConfig | None:
        try:
            data = self.client.get(
                endpoints.PAYOUT_WEBHOOK_CONFIG,
                fallback="Failed to fetch payout webhook configuration",
            )
        except NotFoundError:
            return None
        except ApiError as e:
            if e.status_code is not None and e.status_code < 300:
                return None
            raise
        return _config_or_none(data)

    def test_payout_webhook(self) -> dict[str, Any]:
        return self.client.post(
            endpoints.PAYOUT_WEBHOOK_TEST, fallback="Failed to test payout webhook"
        )

    def delete_payout_webhook(self) -> dict[str, Any]:
        return self.client.delete(
            endpoints.PAYOUT_WEBHOOK_DELETE,
            fallback="Failed to delete payout webhook configuration",
        )

    def available_payout_events(self) -> list[WebhookEvent]:
        return list(PAYOUT_EVENTS)
