"""
Data-store ports.

Services read one consistent snapshot through these interfaces and write
results back through them. Implementations live with the application that
owns the database; tests use in-memory fakes.
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping, Sequence

from order_rules.schemas.billing import TaxSetting
from order_rules.schemas.kitchen import OrderItem
from order_rules.schemas.offers import OfferUsage


class KitchenRepository(ABC):
    """Order items and KOT batch status."""

    @abstractmethod
    def fetch_order_items(
        self,
        statuses: Sequence[str] | None = None,
        order_id: str | None = None,
    ) -> list[OrderItem]:
        """
        Order items, optionally filtered.

        Args:
            statuses: Only items in one of these statuses
            order_id: Only items of this order
        """
        ...

    @abstractmethod
    def update_batch_status(self, kot_batch_id: str, status: str) -> int:
        """
        Set the status of every item in a KOT batch.

        Returns:
            Number of items updated
        """
        ...


class BillingRepository(ABC):
    """Restaurant tax configuration and settings."""

    @abstractmethod
    def fetch_tax_settings(self) -> list[TaxSetting]:
        ...

    @abstractmethod
    def fetch_setting(self, key: str) -> str | None:
        """Raw setting value, e.g. "true" for "tax_inclusive"."""
        ...


class OfferRepository(ABC):
    """Offer catalog and usage records."""

    @abstractmethod
    def fetch_active_offers(self) -> list[Mapping[str, Any]]:
        """
        Active offer records as stored, with their offer_items and
        combo_meals rows joined in.
        """
        ...

    @abstractmethod
    def record_offer_usage(self, usage: OfferUsage) -> None:
        """
        Record an applied offer against an order and increment the offer's
        usage_count, in the same transaction as the order itself.
        """
        ...
