"""
Offer evaluation engine: loading, validity, per-type evaluation,
suggestions and checkout application.
"""

from order_rules.engines.offers.checkout import calculate_offers, find_promo_offer
from order_rules.engines.offers.evaluators import (
    EVALUATORS,
    evaluate_offer_for_checkout,
    guest_matches,
    register_evaluator,
)
from order_rules.engines.offers.loader import load_offer, load_offers
from order_rules.engines.offers.suggestions import (
    SUGGESTERS,
    find_best_suggestion,
    register_suggester,
)
from order_rules.engines.offers.validity import (
    check_validity,
    is_valid_at,
    prioritized,
    valid_offers,
)

__all__ = [
    "load_offer",
    "load_offers",
    "check_validity",
    "is_valid_at",
    "prioritized",
    "valid_offers",
    "EVALUATORS",
    "register_evaluator",
    "evaluate_offer_for_checkout",
    "guest_matches",
    "SUGGESTERS",
    "register_suggester",
    "find_best_suggestion",
    "calculate_offers",
    "find_promo_offer",
]
