"""
Per-type offer evaluators.

Each offer type registers a (check, award) pair:

- check(offer, cart) returns the guest-facing reason the offer does not
  apply, or None when it does.
- award(offer, cart) computes the discount and any free items, and is only
  called after check passed.

New offer types are added with register_evaluator; evaluate_offer_for_checkout
never branches on the type itself.
"""

from datetime import datetime
from decimal import Decimal
from typing import Callable, NamedTuple, Optional, Sequence

from order_rules.engines.billing import format_currency
from order_rules.engines.offers.validity import check_validity
from order_rules.schemas.offers import (
    Cart,
    CartItem,
    ComboComponent,
    FreeItem,
    GuestProfile,
    Offer,
    OfferEvaluation,
    OfferItemLink,
)
from shared.config.constants import CustomerType, OfferType
from shared.config.settings import settings

ZERO = Decimal("0")
HUNDRED = Decimal("100")


class Award(NamedTuple):
    discount: Decimal
    free_items: tuple[FreeItem, ...] = ()
    requires_user_action: bool = False


Check = Callable[[Offer, Cart], Optional[str]]
Compute = Callable[[Offer, Cart], Award]


class OfferEvaluator(NamedTuple):
    check: Check
    award: Compute


EVALUATORS: dict[str, OfferEvaluator] = {}


def register_evaluator(offer_type: str, check: Check, award: Compute) -> None:
    EVALUATORS[offer_type] = OfferEvaluator(check, award)


# =============================================================================
# Helpers
# =============================================================================


def matching_lines(cart: Cart, links: Sequence[OfferItemLink | ComboComponent]) -> list[CartItem]:
    return [item for item in cart.items if any(link.matches(item) for link in links)]


def _min_amount_reason(cart: Cart, min_amount: Decimal) -> str | None:
    if cart.total < min_amount:
        return f"Minimum order of {format_currency(min_amount)} required"
    return None


def _threshold_reason(cart: Cart, threshold: Decimal) -> str | None:
    if cart.total < threshold:
        needed = threshold - cart.total
        return f"Spend {format_currency(threshold)} to unlock ({format_currency(needed)} more needed)"
    return None


def _link_label(link: OfferItemLink | ComboComponent, fallback: str = "item") -> str:
    return link.name or fallback


def guest_matches(
    target: str,
    guest: GuestProfile | None,
    loyalty_min_orders: int | None = None,
) -> bool:
    """
    Whether the guest falls in the targeted customer group.

    First-time guests have no prior orders, returning guests at least one and
    loyalty guests at least ``loyalty_min_orders``.
    """
    if target == CustomerType.ALL:
        return True
    if guest is None:
        return False

    count = guest.prior_order_count
    if target == CustomerType.FIRST_TIME:
        return count == 0
    if target == CustomerType.RETURNING:
        return count >= 1
    if target == CustomerType.LOYALTY:
        if loyalty_min_orders is None:
            loyalty_min_orders = settings.loyalty_min_orders_default
        return count >= loyalty_min_orders
    return False


# =============================================================================
# Cart-level offers
# =============================================================================


def _check_min_order(offer: Offer, cart: Cart) -> str | None:
    return _threshold_reason(cart, offer.rule.threshold_amount)


def _flat_discount(offer: Offer, cart: Cart) -> Award:
    return Award(offer.rule.discount_amount)


def _check_min_amount(offer: Offer, cart: Cart) -> str | None:
    return _min_amount_reason(cart, offer.rule.min_amount)


def _cart_percentage(offer: Offer, cart: Cart) -> Award:
    rule = offer.rule
    discount = cart.total * rule.discount_percentage / HUNDRED
    if rule.max_discount_amount is not None:
        discount = min(discount, rule.max_discount_amount)
    return Award(discount)


def _benefit_on_total(offer: Offer, cart: Cart) -> Award:
    return Award(offer.rule.discount_on(cart.total))


def _check_time_based(offer: Offer, cart: Cart) -> str | None:
    # The time window itself is enforced by the validity filter
    categories = offer.rule.categories
    if categories and not any(item.category_id in categories for item in cart.items):
        return "Add items from the eligible categories to unlock"
    return None


def _time_based(offer: Offer, cart: Cart) -> Award:
    categories = offer.rule.categories
    if not categories:
        return Award(offer.rule.discount_on(cart.total))
    base = sum((item.line_total for item in cart.items if item.category_id in categories), ZERO)
    return Award(offer.rule.discount_on(base))


def _check_customer(offer: Offer, cart: Cart) -> str | None:
    rule = offer.rule
    if not guest_matches(rule.target_customer_type, cart.guest, rule.min_orders_count):
        if rule.target_customer_type == CustomerType.FIRST_TIME:
            return "Available on your first order only"
        return "Not available for your account yet"
    return None


def _check_promo_code(offer: Offer, cart: Cart) -> str | None:
    if cart.promo_code != offer.promo_code:
        return "Enter the promo code to apply this offer"
    return _min_amount_reason(cart, offer.rule.min_amount)


def _check_repeat_customer(offer: Offer, cart: Cart) -> str | None:
    needed = offer.rule.min_orders_count
    if cart.guest is None or cart.guest.prior_order_count < needed:
        return f"Available after {needed} orders"
    return None


def _check_threshold_item(offer: Offer, cart: Cart) -> str | None:
    return _threshold_reason(cart, offer.rule.threshold_amount)


def _threshold_item(offer: Offer, cart: Cart) -> Award:
    free_item = offer.rule.free_item
    return Award(
        free_item.price,
        (FreeItem(menu_item_id=free_item.id, name=free_item.name, price=free_item.price),),
    )


# =============================================================================
# Item-level offers
# =============================================================================


def _check_buy_get_free(offer: Offer, cart: Cart) -> str | None:
    rule = offer.rule
    bought = sum(item.quantity for item in matching_lines(cart, rule.buy_items))
    if bought < rule.buy_quantity:
        return (
            f"Buy {rule.buy_quantity} to get {rule.get_quantity} free "
            f"({rule.buy_quantity - bought} more needed)"
        )
    if not rule.get_same_item and not _priced_get_items(offer):
        return "Free item not configured"
    return None


def _priced_get_items(offer: Offer) -> list[OfferItemLink]:
    return [link for link in offer.rule.get_items if link.menu_item_id and link.price is not None]


def _buy_get_free(offer: Offer, cart: Cart) -> Award:
    """The cheapest eligible free item, get_quantity times."""
    rule = offer.rule
    if rule.get_same_item:
        cheapest = min(matching_lines(cart, rule.buy_items), key=lambda item: item.price)
        free_id, free_name, free_price = cheapest.id, cheapest.name, cheapest.price
    else:
        cheapest = min(_priced_get_items(offer), key=lambda link: link.price)
        free_id, free_name, free_price = cheapest.menu_item_id, cheapest.name or "", cheapest.price

    return Award(
        free_price * rule.get_quantity,
        (FreeItem(menu_item_id=free_id, name=free_name, price=free_price, quantity=rule.get_quantity),),
    )


def _check_free_addon(offer: Offer, cart: Cart) -> str | None:
    rule = offer.rule
    if not matching_lines(cart, rule.items):
        return f"Add {_link_label(rule.items[0], 'a qualifying item')} to unlock"

    selections = cart.selections_for(offer.id)
    if sum(s.quantity for s in selections) > rule.max_free_items:
        return f"Choose at most {rule.max_free_items} free items"
    for selection in selections:
        in_offer = any(
            link.menu_item_id == selection.menu_item_id
            or (link.menu_category_id is not None and link.menu_category_id == selection.category_id)
            for link in rule.free_addon_items
        )
        if not in_offer:
            return f"{selection.name or 'Selected item'} is not part of this offer"
        if rule.max_price is not None and selection.price > rule.max_price:
            return f"Free items are limited to {format_currency(rule.max_price)}"
    return None


def _free_addon(offer: Offer, cart: Cart) -> Award:
    selections = cart.selections_for(offer.id)
    if not selections:
        return Award(ZERO, requires_user_action=True)

    return Award(
        sum((s.price * s.quantity for s in selections), ZERO),
        tuple(
            FreeItem(menu_item_id=s.menu_item_id, name=s.name, price=s.price, quantity=s.quantity)
            for s in selections
        ),
    )


def _check_item_percentage(offer: Offer, cart: Cart) -> str | None:
    if not matching_lines(cart, offer.rule.items):
        return f"Add {_link_label(offer.rule.items[0], 'qualifying items')} to unlock"
    return None


def _item_percentage(offer: Offer, cart: Cart) -> Award:
    rule = offer.rule
    base = sum((item.line_total for item in matching_lines(cart, rule.items)), ZERO)
    discount = base * rule.discount_percentage / HUNDRED
    if rule.max_discount_amount is not None:
        discount = min(discount, rule.max_discount_amount)
    return Award(discount)


def combo_slots(offer: Offer) -> list[ComboComponent]:
    """Slots the cart must fill for the combo to apply."""
    rule = offer.rule
    if rule.is_customizable:
        return rule.required_components + rule.selectable_components
    return rule.required_components


def slot_filled(component: ComboComponent, cart: Cart) -> bool:
    quantity = sum(item.quantity for item in cart.items if component.matches(item))
    return quantity >= component.quantity


def slot_price(component: ComboComponent, cart: Cart) -> Decimal:
    """Catalog price of a slot, or the cheapest cart item filling it."""
    if component.price is not None:
        unit_price = component.price
    else:
        unit_price = min((item.price for item in cart.items if component.matches(item)), default=ZERO)
    return unit_price * component.quantity


def _check_combo(offer: Offer, cart: Cart) -> str | None:
    missing = [c for c in combo_slots(offer) if not slot_filled(c, cart)]
    if missing:
        names = ", ".join(_link_label(c) for c in missing)
        return f"Add {names} to unlock the combo"
    return None


def _combo(offer: Offer, cart: Cart) -> Award:
    regular_price = sum((slot_price(c, cart) for c in combo_slots(offer)), ZERO)
    return Award(max(ZERO, regular_price - offer.rule.combo_price))


# Registration order is the order evaluators are listed in
register_evaluator(OfferType.MIN_ORDER_DISCOUNT, _check_min_order, _flat_discount)
register_evaluator(OfferType.CART_PERCENTAGE, _check_min_amount, _cart_percentage)
register_evaluator(OfferType.CART_FLAT_AMOUNT, _check_min_amount, _flat_discount)
register_evaluator(OfferType.PROMO_CODE, _check_promo_code, _benefit_on_total)
register_evaluator(OfferType.ITEM_BUY_GET_FREE, _check_buy_get_free, _buy_get_free)
register_evaluator(OfferType.ITEM_FREE_ADDON, _check_free_addon, _free_addon)
register_evaluator(OfferType.ITEM_PERCENTAGE, _check_item_percentage, _item_percentage)
register_evaluator(OfferType.CART_THRESHOLD_ITEM, _check_threshold_item, _threshold_item)
register_evaluator(OfferType.COMBO_MEAL, _check_combo, _combo)
register_evaluator(OfferType.CUSTOMER_BASED, _check_customer, _benefit_on_total)
register_evaluator(OfferType.REPEAT_CUSTOMER_DISCOUNT, _check_repeat_customer, _benefit_on_total)
register_evaluator(OfferType.TIME_BASED, _check_time_based, _time_based)


# =============================================================================
# Entry point
# =============================================================================


def evaluate_offer_for_checkout(
    offer: Offer,
    cart: Cart,
    now: datetime | None = None,
) -> OfferEvaluation:
    """
    Decide whether an offer applies to a cart and what it is worth.

    When ``now`` is given the validity window is checked first. Otherwise
    only the active flag is. Exhausted usage limits, unmatched promo codes
    and unmet conditions are all "not applicable" results with a reason,
    never exceptions. The discount never exceeds the cart total.
    """

    def not_applicable(reason: str) -> OfferEvaluation:
        return OfferEvaluation(
            offer_id=offer.id,
            offer_type=offer.offer_type,
            applies=False,
            reason=reason,
        )

    reason = check_validity(offer, now) if now is not None else None
    if reason is None and not offer.is_active:
        reason = "Offer is not active"
    if reason is None and offer.usage_exhausted:
        reason = "Offer usage limit reached"
    if reason is not None:
        return not_applicable(reason)

    evaluator = EVALUATORS.get(offer.offer_type)
    if evaluator is None:
        return not_applicable("Unsupported offer type")

    reason = evaluator.check(offer, cart)
    if reason is not None:
        return not_applicable(reason)

    award = evaluator.award(offer, cart)
    discount = max(ZERO, min(award.discount, cart.total))
    return OfferEvaluation(
        offer_id=offer.id,
        offer_type=offer.offer_type,
        applies=True,
        discount=discount,
        free_items=list(award.free_items),
        requires_user_action=award.requires_user_action,
    )
