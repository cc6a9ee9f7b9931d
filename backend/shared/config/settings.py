"""
Application settings loaded from environment variables.
Uses pydantic-settings for type-safe configuration.
"""

from decimal import Decimal
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Settings with defaults for development."""

    # Environment
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # Restaurant wall clock; offer hours and weekdays are read in this zone
    timezone: str = "Asia/Kolkata"

    # Billing
    currency_symbol: str = "₹"
    # Used when the data store has no "tax_inclusive" restaurant setting
    default_tax_inclusive: bool = False

    # Offers
    # Cart must reach this fraction of a threshold before "almost there" shows
    offer_almost_there_ratio: Decimal = Decimal("0.6")
    loyalty_min_orders_default: int = 5

    # Kitchen board
    kot_warning_age_minutes: int = 15
    kot_critical_age_minutes: int = 30

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    def validate_production_settings(self) -> list[str]:
        """
        Validate settings that must hold in production.
        Returns a list of validation errors. Empty list means all checks pass.
        """
        errors = []

        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            errors.append(f"TIMEZONE '{self.timezone}' is not a known IANA zone")

        if not (Decimal("0") < self.offer_almost_there_ratio <= Decimal("1")):
            errors.append("OFFER_ALMOST_THERE_RATIO must be in (0, 1]")

        if self.kot_warning_age_minutes >= self.kot_critical_age_minutes:
            errors.append(
                "KOT_WARNING_AGE_MINUTES must be lower than KOT_CRITICAL_AGE_MINUTES"
            )

        if self.environment == "production" and self.debug:
            errors.append("DEBUG must be False in production")

        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience exports
settings = get_settings()
