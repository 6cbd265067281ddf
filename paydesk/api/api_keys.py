"""Merchant API key management."""

from typing import Any

from paydesk import endpoints
from paydesk.api.client import ApiClient

UNAUTHORIZED = "Unauthorized. Please log in again."


class ApiKeyService:
    """Create and read the merchant's single API key."""

    def __init__(self, client: ApiClient | None = None):
        self.client = client or ApiClient()

    def create_api_key(self) -> dict[str, Any]:
        """Create the merchant's API key; only one key may exist."""
        return self.client.post(
            endpoints.CREATE_API_KEY,
            fallback="Failed to create API key",
            messages={
                401: UNAUTHORIZED,
                403: "Forbidden. You do not have permission to create API keys.",
                409: "API key already exists. You can only create one API key.",
            },
        )

    def get_api_key(self) -> dict[str, Any]:
        """Fetch the merchant's API key."""
        return self.client.get(
            endpoints.GET_API_KEY,
            fallback="Failed to fetch API key",
            messages={
                401: UNAUTHORIZED,
                403: "Forbidden. You do not have permission to access API keys.",
                404: "API key not found. You may need to create one first.",
            },
        )
