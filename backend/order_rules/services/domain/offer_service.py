"""
Offer Domain Service.

Loads the offer catalog from the data store, evaluates it against a cart at
one instant, and records usage once an order is placed.
"""

from datetime import datetime
from typing import Callable, Iterable, List

from order_rules.engines.offers import (
    calculate_offers,
    evaluate_offer_for_checkout,
    find_best_suggestion,
    find_promo_offer,
    load_offers,
)
from order_rules.repositories.base import OfferRepository
from order_rules.schemas.offers import (
    AppliedOffer,
    Cart,
    Offer,
    OfferCalculationResult,
    OfferEvaluation,
    OfferSuggestion,
    OfferUsage,
)
from order_rules.services.domain.clock import as_aware, restaurant_time, utc_now
from shared.config.logging import mask_phone, offers_logger as logger
from shared.config.settings import settings
from shared.utils.exceptions import NotFoundError


class OfferService:
    """
    Domain service for offers.

    Each public call reads the catalog once and the clock once, so all
    offers in a call are judged against the same snapshot and instant.
    Offer hours and weekdays are read on the restaurant's wall clock
    (``settings.timezone`` unless a zone name is given).
    """

    def __init__(
        self,
        repository: OfferRepository,
        clock: Callable[[], datetime] | None = None,
        timezone_name: str | None = None,
    ):
        self._repository = repository
        self._clock = clock or utc_now
        self._timezone_name = timezone_name

    def _now(self) -> datetime:
        return restaurant_time(self._clock(), self._timezone_name)

    def list_offers(self) -> List[Offer]:
        """Active offers that pass load-time validation."""
        return load_offers(self._repository.fetch_active_offers())

    def get_offer(self, offer_id: str) -> Offer:
        offer = next((o for o in self.list_offers() if o.id == offer_id), None)
        if offer is None:
            raise NotFoundError("Offer", offer_id)
        return offer

    def suggest(self, cart: Cart) -> OfferSuggestion | None:
        """Single upsell banner for the cart, if any."""
        suggestion = find_best_suggestion(
            cart,
            self.list_offers(),
            self._now(),
            almost_there_ratio=settings.offer_almost_there_ratio,
        )
        if suggestion:
            logger.debug(
                "Offer suggested",
                offer_id=suggestion.offer_id,
                suggestion_type=suggestion.type,
            )
        return suggestion

    def evaluate(self, offer_id: str, cart: Cart) -> OfferEvaluation:
        """
        Evaluate one offer against the cart now.

        Raises:
            NotFoundError: If the offer is not in the active catalog
        """
        return evaluate_offer_for_checkout(self.get_offer(offer_id), cart, self._now())

    def apply_promo_code(self, code: str, cart: Cart) -> OfferEvaluation:
        """
        Evaluate the offer behind a promo code.

        Raises:
            NotFoundError: If no active offer has this exact code
        """
        offer = find_promo_offer(code, self.list_offers())
        if offer is None:
            raise NotFoundError("Promo code", code)
        return evaluate_offer_for_checkout(
            offer,
            cart.model_copy(update={"promo_code": code}),
            self._now(),
        )

    def apply_offers(self, cart: Cart) -> OfferCalculationResult:
        """Every qualifying offer applied to the cart now."""
        result = calculate_offers(self.list_offers(), cart, self._now())
        logger.info(
            "Offers applied",
            applied=len(result.applied_offers),
            discount_amount=str(result.discount_amount),
        )
        return result

    def commit_offer_usage(
        self,
        order_id: str,
        applied_offers: Iterable[AppliedOffer],
        guest_phone: str | None = None,
    ) -> List[OfferUsage]:
        """
        Record applied offers against a placed order.

        The data store increments each offer's usage_count in the order's
        transaction.
        """
        applied_at = as_aware(self._clock())
        usages = []
        for applied in applied_offers:
            usage = OfferUsage(
                offer_id=applied.offer_id,
                order_id=order_id,
                discount_amount=applied.discount_amount,
                guest_phone=guest_phone,
                free_items=applied.free_items,
                applied_at=applied_at,
            )
            self._repository.record_offer_usage(usage)
            usages.append(usage)

            logger.info(
                "Offer usage recorded",
                offer_id=applied.offer_id,
                order_id=order_id,
                guest=mask_phone(guest_phone),
            )
        return usages
