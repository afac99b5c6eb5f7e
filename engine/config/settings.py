"""FacilityQuote configuration settings.

Loads configuration from environment variables with sensible defaults.
Pricing plans themselves live in the store; these settings only hold the
engine-wide fallbacks used when a plan or request leaves a value unset.
"""

import os
from dataclasses import dataclass, field
from dotenv import load_dotenv

# Load .env file for local overrides (log level, default strategy, etc.)
load_dotenv()


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    # Strategy selection
    default_pricing_strategy_key: str = field(
        default_factory=lambda: os.getenv("DEFAULT_PRICING_STRATEGY_KEY", "sqft_settings_v1")
    )

    # Pricing fallbacks
    default_subcontractor_percentage: float = field(
        default_factory=lambda: float(os.getenv("DEFAULT_SUBCONTRACTOR_PERCENTAGE", "0.60"))
    )
    default_monthly_visits: float = field(
        default_factory=lambda: float(os.getenv("DEFAULT_MONTHLY_VISITS", "4.33"))
    )

    # Invoicing
    batch_idempotency_ttl_seconds: int = field(
        default_factory=lambda: int(os.getenv("BATCH_IDEMPOTENCY_TTL_SECONDS", "600"))
    )
    max_billing_window_days: int = field(
        default_factory=lambda: int(os.getenv("MAX_BILLING_WINDOW_DAYS", "31"))
    )
    default_payment_terms_days: int = field(
        default_factory=lambda: int(os.getenv("DEFAULT_PAYMENT_TERMS_DAYS", "30"))
    )
    default_timezone: str = field(default_factory=lambda: os.getenv("DEFAULT_TIMEZONE", "UTC"))

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_format: str = field(default_factory=lambda: os.getenv("LOG_FORMAT", "console"))

    def validate(self) -> None:
        """Validate settings values.

        Raises:
            ValueError: If a setting is outside its allowed range.
        """
        if not 0.0 <= self.default_subcontractor_percentage <= 1.0:
            raise ValueError("DEFAULT_SUBCONTRACTOR_PERCENTAGE must be between 0 and 1")
        if self.default_monthly_visits <= 0:
            raise ValueError("DEFAULT_MONTHLY_VISITS must be positive")
        if self.batch_idempotency_ttl_seconds <= 0:
            raise ValueError("BATCH_IDEMPOTENCY_TTL_SECONDS must be positive")
        if self.max_billing_window_days <= 0:
            raise ValueError("MAX_BILLING_WINDOW_DAYS must be positive")
        if self.log_format not in ("console", "json"):
            raise ValueError("LOG_FORMAT must be 'console' or 'json'")


# Singleton settings instance
settings = Settings()
