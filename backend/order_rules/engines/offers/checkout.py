"""
Checkout-time offer application.
"""

from datetime import datetime
from decimal import Decimal
from typing import Iterable

from order_rules.engines.offers.evaluators import evaluate_offer_for_checkout
from order_rules.engines.offers.validity import prioritized
from order_rules.schemas.offers import (
    AppliedOffer,
    Cart,
    Offer,
    OfferCalculationResult,
)

ZERO = Decimal("0")


def calculate_offers(
    offers: Iterable[Offer],
    cart: Cart,
    now: datetime,
) -> OfferCalculationResult:
    """
    Apply every qualifying offer to the cart, in priority order.

    Offers that apply but grant nothing (no discount, no free items) are left
    out. The combined discount is capped at the cart total.
    """
    applied = []
    total_discount = ZERO

    for offer in prioritized(offers):
        evaluation = evaluate_offer_for_checkout(offer, cart, now)
        if not evaluation.applies:
            continue
        if evaluation.discount <= 0 and not evaluation.free_items:
            continue

        applied.append(
            AppliedOffer(
                offer_id=offer.id,
                name=offer.name,
                offer_type=offer.offer_type,
                discount_amount=evaluation.discount,
                free_items=evaluation.free_items,
            )
        )
        total_discount += evaluation.discount

    total_discount = min(total_discount, cart.total)
    return OfferCalculationResult(
        original_amount=cart.total,
        discount_amount=total_discount,
        final_amount=max(ZERO, cart.total - total_discount),
        applied_offers=applied,
    )


def find_promo_offer(code: str | None, offers: Iterable[Offer]) -> Offer | None:
    """Offer whose promo code matches exactly (case-sensitive)."""
    if not code:
        return None
    return next((offer for offer in offers if offer.promo_code == code), None)
