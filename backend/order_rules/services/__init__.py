from order_rules.services.domain import BillingService, KOTService, OfferService

__all__ = ["KOTService", "BillingService", "OfferService"]
