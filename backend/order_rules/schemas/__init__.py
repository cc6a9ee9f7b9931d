"""
Pydantic schemas for kitchen tickets, bills and offers.
"""

from order_rules.schemas.billing import (
    BillCalculation,
    BillLineBreakdown,
    BillLineItem,
    TaxLine,
    TaxRule,
    TaxSetting,
)
from order_rules.schemas.kitchen import KOT, KOTBoardEntry, KOTItem, OrderItem
from order_rules.schemas.offers import (
    AppliedOffer,
    Cart,
    CartItem,
    ComboComponent,
    FreeItem,
    FreeItemRef,
    FreeItemSelection,
    GuestProfile,
    Offer,
    OfferCalculationResult,
    OfferEvaluation,
    OfferItemLink,
    OfferRule,
    OfferSuggestion,
    OfferUsage,
)

__all__ = [
    # kitchen
    "OrderItem",
    "KOT",
    "KOTItem",
    "KOTBoardEntry",
    # billing
    "BillLineItem",
    "TaxRule",
    "TaxSetting",
    "TaxLine",
    "BillLineBreakdown",
    "BillCalculation",
    # offers
    "Offer",
    "OfferRule",
    "OfferItemLink",
    "ComboComponent",
    "FreeItemRef",
    "Cart",
    "CartItem",
    "GuestProfile",
    "FreeItemSelection",
    "FreeItem",
    "OfferEvaluation",
    "OfferSuggestion",
    "AppliedOffer",
    "OfferCalculationResult",
    "OfferUsage",
]
