"""Configuration module using Pydantic Settings."""

from decimal import Decimal
from pathlib import Path

from pydantic import Field, BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict


class FeeConfig(BaseModel):
    # Payout fee tiers (INR)
    flat_fee_500_1000: Decimal = Field(
        default=Decimal("35.40"), description="Flat fee for payouts between 500 and 1000"
    )
    percent_above_1000: Decimal = Field(
        default=Decimal("0.0177"), description="Fee rate for payouts above 1000"
    )
    small_txn_extra_charge: Decimal = Field(
        default=Decimal("10"),
        description="Flat charge below the small-payout threshold once free payouts are used up",
    )
    small_txn_threshold: Decimal = Field(
        default=Decimal("500"), description="Amount below which a payout counts as small"
    )
    flat_fee_ceiling: Decimal = Field(
        default=Decimal("1000"), description="Upper bound of the flat-fee tier"
    )


class InvoiceConfig(BaseModel):
    max_line_items: int = Field(
        default=40, description="Upper bound on synthesized invoice line items"
    )
    company_name: str = Field(default="Shakti Sewa Foundation")
    company_address: list[str] = Field(
        default_factory=lambda: [
            "353 mr3 road",
            "Mahalakshmi nagar",
            "Indore Madhya Pradesh 452001",
            "India",
        ]
    )
    company_cin: str = Field(default="U88100MP2025NPL079676")
    company_phone: str = Field(default="9243143997")
    company_email: str = Field(default="foundationshaktisewa@gmail.com")
    notes: str = Field(default="Thanks for your business.")


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="PAYDESK_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Gateway API
    api_base_url: str = Field(
        default="https://himora.art/api", description="Base URL of the payment gateway API"
    )
    request_timeout: float = Field(default=30.0, description="HTTP timeout in seconds")

    fee_config: FeeConfig = FeeConfig()

    invoice: InvoiceConfig = InvoiceConfig()

    default_currency: str = Field(default="INR", description="Default currency code")

    # Resilience Settings
    max_retries: int = Field(default=3, description="Maximum attempts for idempotent requests")
    retry_backoff_base: float = Field(
        default=2.0, description="Base for exponential backoff"
    )
    rate_limit_rpm: int = Field(
        default=120, description="Rate limit in requests per minute"
    )
    circuit_breaker_threshold: int = Field(
        default=5, description="Failures before circuit breaker opens"
    )

    # Paths
    data_dir: Path = Field(
        default=Path.home() / ".paydesk", description="Directory for session, logs and exports"
    )
    log_level: str = Field(default="INFO", description="Logging level")
    pii_use_presidio: bool = Field(
        default=True, description="Run Presidio NLP detection when masking audit entries"
    )

    @property
    def session_file(self) -> Path:
        """Path to the persisted login session."""
        return self.data_dir / "session.json"

    @property
    def logs_dir(self) -> Path:
        """Path to the audit log directory."""
        return self.data_dir / "logs"

    @property
    def exports_dir(self) -> Path:
        """Path to the default export directory."""
        return self.data_dir / "exports"


# Global settings instance
settings = Settings()
