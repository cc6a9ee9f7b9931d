"""
Upsell suggestions.

Picks the single offer banner shown to a guest while they build their cart:
"almost there" when a threshold is close, "unlocked" once it is met and
"available" for offers the guest can take right away. Offers are tried in
descending priority and the first one that yields a suggestion wins; equal
priorities keep their input order. Promo-code offers are never suggested.
"""

from datetime import datetime
from decimal import Decimal
from typing import Callable, Iterable, Optional

from order_rules.engines.billing import format_currency
from order_rules.engines.offers.evaluators import (
    combo_slots,
    evaluate_offer_for_checkout,
    matching_lines,
    slot_filled,
    slot_price,
)
from order_rules.engines.offers.validity import prioritized, valid_offers
from order_rules.schemas.offers import Cart, Offer, OfferSuggestion
from shared.config.constants import ALMOST_THERE_RATIO, OfferType, SuggestionType

ZERO = Decimal("0")
HUNDRED = Decimal("100")

Suggester = Callable[[Offer, Cart, Decimal], Optional[OfferSuggestion]]

SUGGESTERS: dict[str, Suggester] = {}


def register_suggester(offer_type: str, suggester: Suggester) -> None:
    SUGGESTERS[offer_type] = suggester


def _suggestion(offer: Offer, type_: str, message: str, **fields) -> OfferSuggestion:
    return OfferSuggestion(
        offer_id=offer.id,
        offer_name=offer.name,
        offer_type=offer.offer_type,
        type=type_,
        message=message,
        **fields,
    )


def is_almost_there(total: Decimal, threshold: Decimal, ratio: Decimal) -> bool:
    """Below the threshold but at or above ``ratio`` of it."""
    return total < threshold and total >= threshold * ratio


# =============================================================================
# Per-type suggesters
# =============================================================================


def _suggest_min_order(offer: Offer, cart: Cart, ratio: Decimal) -> OfferSuggestion | None:
    threshold = offer.rule.threshold_amount
    savings = offer.rule.discount_amount
    if cart.total >= threshold:
        return _suggestion(
            offer,
            SuggestionType.UNLOCKED,
            f"You've unlocked {format_currency(savings)} off! Apply this offer.",
            savings=savings,
        )
    if is_almost_there(cart.total, threshold, ratio):
        needed = threshold - cart.total
        return _suggestion(
            offer,
            SuggestionType.ALMOST_THERE,
            f"Add {format_currency(needed)} more to save {format_currency(savings)}!",
            amount_needed=needed,
            savings=savings,
        )
    return None


def _suggest_cart_percentage(offer: Offer, cart: Cart, ratio: Decimal) -> OfferSuggestion | None:
    rule = offer.rule
    pct = rule.discount_percentage.normalize()

    def capped(amount: Decimal) -> Decimal:
        savings = amount * rule.discount_percentage / HUNDRED
        if rule.max_discount_amount is not None:
            savings = min(savings, rule.max_discount_amount)
        return savings

    if cart.total >= rule.min_amount:
        savings = capped(cart.total)
        if savings <= 0:
            return None
        return _suggestion(
            offer,
            SuggestionType.AVAILABLE,
            f"Save {format_currency(savings)} with {pct:f}% off!",
            savings=savings,
        )
    if is_almost_there(cart.total, rule.min_amount, ratio):
        needed = rule.min_amount - cart.total
        return _suggestion(
            offer,
            SuggestionType.ALMOST_THERE,
            f"Add {format_currency(needed)} more to unlock {pct:f}% off!",
            amount_needed=needed,
            savings=capped(rule.min_amount),
        )
    return None


def _suggest_cart_flat(offer: Offer, cart: Cart, ratio: Decimal) -> OfferSuggestion | None:
    rule = offer.rule
    savings = rule.discount_amount
    if cart.total >= rule.min_amount:
        return _suggestion(
            offer,
            SuggestionType.AVAILABLE,
            f"Save {format_currency(savings)} on this order!",
            savings=savings,
        )
    if is_almost_there(cart.total, rule.min_amount, ratio):
        needed = rule.min_amount - cart.total
        return _suggestion(
            offer,
            SuggestionType.ALMOST_THERE,
            f"Add {format_currency(needed)} more to save {format_currency(savings)}!",
            amount_needed=needed,
            savings=savings,
        )
    return None


def _suggest_threshold_item(offer: Offer, cart: Cart, ratio: Decimal) -> OfferSuggestion | None:
    rule = offer.rule
    item_name = rule.free_item.name or "a free item"
    if cart.total >= rule.threshold_amount:
        return _suggestion(
            offer,
            SuggestionType.UNLOCKED,
            f"You've unlocked {item_name}! Apply this offer.",
            savings=rule.free_item.price,
        )
    if is_almost_there(cart.total, rule.threshold_amount, ratio):
        needed = rule.threshold_amount - cart.total
        return _suggestion(
            offer,
            SuggestionType.ALMOST_THERE,
            f"Add {format_currency(needed)} more to get {item_name}!",
            amount_needed=needed,
            savings=rule.free_item.price,
        )
    return None


def _suggest_buy_get_free(offer: Offer, cart: Cart, ratio: Decimal) -> OfferSuggestion | None:
    rule = offer.rule
    bought = sum(item.quantity for item in matching_lines(cart, rule.buy_items))
    free_name = next((link.name for link in rule.get_items if link.name), "item")

    if bought >= rule.buy_quantity:
        evaluation = evaluate_offer_for_checkout(offer, cart)
        return _suggestion(
            offer,
            SuggestionType.UNLOCKED,
            f"Get free {free_name}! Apply this offer now.",
            savings=evaluation.discount if evaluation.applies else None,
        )
    if bought > 0:
        needed = rule.buy_quantity - bought
        buy_name = next((link.name for link in rule.buy_items if link.name), "item")
        return _suggestion(
            offer,
            SuggestionType.ALMOST_THERE,
            f"Add {needed} more {buy_name} to get free {free_name}!",
            items_needed=needed,
        )
    return None


def _suggest_combo(offer: Offer, cart: Cart, ratio: Decimal) -> OfferSuggestion | None:
    rule = offer.rule
    slots = combo_slots(offer)
    missing = [slot for slot in slots if not slot_filled(slot, cart)]
    combo_price = format_currency(rule.combo_price)

    if not missing:
        regular_price = sum((slot_price(slot, cart) for slot in slots), ZERO)
        savings = max(ZERO, regular_price - rule.combo_price)
        return _suggestion(
            offer,
            SuggestionType.UNLOCKED,
            f"Combo unlocked! Save {format_currency(savings)} - Apply this offer.",
            savings=savings,
        )

    missing_names = [slot.name for slot in missing if slot.name]
    if len(missing) < len(slots):
        if len(missing_names) == len(missing):
            item_list = ", ".join(missing_names)
        else:
            item_list = f"{len(missing)} more {'item' if len(missing) == 1 else 'items'}"
        return _suggestion(
            offer,
            SuggestionType.ALMOST_THERE,
            f"Add {item_list} to unlock combo for {combo_price}!",
            items_needed=len(missing),
            missing_items=missing_names,
        )

    all_names = [slot.name for slot in slots if slot.name]
    item_list = " + ".join(all_names) if len(all_names) == len(slots) else f"{len(slots)} items"
    return _suggestion(
        offer,
        SuggestionType.AVAILABLE,
        f"Get {item_list} combo for {combo_price}!",
    )


def _suggest_free_addon(offer: Offer, cart: Cart, ratio: Decimal) -> OfferSuggestion | None:
    if matching_lines(cart, offer.rule.items):
        return _suggestion(
            offer,
            SuggestionType.UNLOCKED,
            "Get a free addon with your purchase! Apply this offer.",
        )
    return None


register_suggester(OfferType.MIN_ORDER_DISCOUNT, _suggest_min_order)
register_suggester(OfferType.CART_PERCENTAGE, _suggest_cart_percentage)
register_suggester(OfferType.CART_FLAT_AMOUNT, _suggest_cart_flat)
register_suggester(OfferType.CART_THRESHOLD_ITEM, _suggest_threshold_item)
register_suggester(OfferType.ITEM_BUY_GET_FREE, _suggest_buy_get_free)
register_suggester(OfferType.COMBO_MEAL, _suggest_combo)
register_suggester(OfferType.ITEM_FREE_ADDON, _suggest_free_addon)


# =============================================================================
# Entry point
# =============================================================================


def find_best_suggestion(
    cart: Cart,
    offers: Iterable[Offer],
    now: datetime,
    almost_there_ratio: Decimal = ALMOST_THERE_RATIO,
) -> OfferSuggestion | None:
    """
    The one suggestion to show for this cart at ``now``, if any.

    Offers outside their validity window or past their usage limit are
    ignored. The first offer in priority order that produces a suggestion
    wins, even if a later offer would save more.
    """
    for offer in prioritized(valid_offers(offers, now)):
        if offer.offer_type == OfferType.PROMO_CODE or offer.usage_exhausted:
            continue
        suggester = SUGGESTERS.get(offer.offer_type)
        if suggester is None:
            continue
        suggestion = suggester(offer, cart, Decimal(almost_there_ratio))
        if suggestion is not None:
            return suggestion
    return None
