"""
Repository ports consumed by the domain services.

Usage:
    from order_rules.repositories import KitchenRepository

    class SqlKitchenRepository(KitchenRepository):
        ...
"""

from .base import BillingRepository, KitchenRepository, OfferRepository

__all__ = [
    "KitchenRepository",
    "BillingRepository",
    "OfferRepository",
]
