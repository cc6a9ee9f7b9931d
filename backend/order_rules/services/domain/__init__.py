"""
Domain Services.

Services read a snapshot through a repository port, run the pure engines on
it and write results back.

Structure:
    Caller
        ↓
    Service (orchestration, logging)  ← YOU ARE HERE
        ↓
    Engine (pure rules)   Repository (data access)

Usage:
    from order_rules.services.domain import KOTService

    service = KOTService(repository)
    board = service.kitchen_board()
"""

from .kot_service import KOTService
from .billing_service import BillingService
from .offer_service import OfferService

__all__ = [
    "KOTService",
    "BillingService",
    "OfferService",
]
