"""
Centralized constants for the order rules.
Avoid magic strings and repeated constants.

Usage:
    from shared.config.constants import KOTStatus, OfferType

    if status == KOTStatus.PLACED:
        ...

    if offer.offer_type == OfferType.COMBO_MEAL:
        ...
"""

from decimal import Decimal
from typing import Final


# =============================================================================
# Kitchen Order Ticket
# =============================================================================


class KOTStatus:
    """Order item / KOT lifecycle status constants."""

    PLACED: Final[str] = "placed"
    PREPARING: Final[str] = "preparing"
    READY: Final[str] = "ready"
    SERVED: Final[str] = "served"

    # Lifecycle order: an item only ever moves forward through this list
    ALL: Final[list[str]] = [PLACED, PREPARING, READY, SERVED]
    ACTIVE: Final[list[str]] = [PLACED, PREPARING, READY]


# Position of each status in the lifecycle, used to reject regressions
KOT_STATUS_RANK: Final[dict[str, int]] = {
    status: rank for rank, status in enumerate(KOTStatus.ALL)
}


class KOTUrgency:
    """Kitchen board urgency levels derived from status and ticket age."""

    READY: Final[str] = "ready"
    CRITICAL: Final[str] = "critical"
    DELAYED: Final[str] = "delayed"
    PREPARING: Final[str] = "preparing"
    NEW: Final[str] = "new"


class OrderType:
    """Order channel constants."""

    DINE_IN: Final[str] = "dine-in"
    TAKEAWAY: Final[str] = "takeaway"


# =============================================================================
# Offers
# =============================================================================


class OfferType:
    """Offer type tags."""

    MIN_ORDER_DISCOUNT: Final[str] = "min_order_discount"
    CART_PERCENTAGE: Final[str] = "cart_percentage"
    CART_FLAT_AMOUNT: Final[str] = "cart_flat_amount"
    TIME_BASED: Final[str] = "time_based"
    CUSTOMER_BASED: Final[str] = "customer_based"
    PROMO_CODE: Final[str] = "promo_code"
    ITEM_BUY_GET_FREE: Final[str] = "item_buy_get_free"
    ITEM_FREE_ADDON: Final[str] = "item_free_addon"
    ITEM_PERCENTAGE: Final[str] = "item_percentage"
    CART_THRESHOLD_ITEM: Final[str] = "cart_threshold_item"
    COMBO_MEAL: Final[str] = "combo_meal"
    REPEAT_CUSTOMER_DISCOUNT: Final[str] = "repeat_customer_discount"

    ALL: Final[list[str]] = [
        MIN_ORDER_DISCOUNT,
        CART_PERCENTAGE,
        CART_FLAT_AMOUNT,
        TIME_BASED,
        CUSTOMER_BASED,
        PROMO_CODE,
        ITEM_BUY_GET_FREE,
        ITEM_FREE_ADDON,
        ITEM_PERCENTAGE,
        CART_THRESHOLD_ITEM,
        COMBO_MEAL,
        REPEAT_CUSTOMER_DISCOUNT,
    ]


class OfferItemType:
    """Role of an item/category linked to an offer."""

    BUY: Final[str] = "buy"
    GET: Final[str] = "get"
    GET_FREE: Final[str] = "get_free"
    QUALIFYING: Final[str] = "qualifying"
    FREE_ADDON: Final[str] = "free_addon"

    # Both spellings are found in stored BOGO offers
    GET_TYPES: Final[frozenset[str]] = frozenset({GET, GET_FREE})


class CustomerType:
    """Target guest classification for customer_based offers."""

    ALL: Final[str] = "all"
    FIRST_TIME: Final[str] = "first_time"
    RETURNING: Final[str] = "returning"
    LOYALTY: Final[str] = "loyalty"


class SuggestionType:
    """Guest-facing upsell banner kinds."""

    ALMOST_THERE: Final[str] = "almost_there"
    UNLOCKED: Final[str] = "unlocked"
    AVAILABLE: Final[str] = "available"


# Default fraction of a threshold the cart must reach for an "almost there" banner
ALMOST_THERE_RATIO: Final[Decimal] = Decimal("0.6")

WEEKDAYS: Final[tuple[str, ...]] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


# =============================================================================
# Billing
# =============================================================================


class SettingKeys:
    """Restaurant-wide setting keys read from the data store."""

    TAX_INCLUSIVE: Final[str] = "tax_inclusive"


# =============================================================================
# Validation Constants
# =============================================================================


class Limits:
    """Validation limits."""

    MIN_QUANTITY: Final[int] = 1
    MAX_QUANTITY: Final[int] = 99

    MIN_PERCENTAGE: Final[Decimal] = Decimal("0")
    MAX_PERCENTAGE: Final[Decimal] = Decimal("100")

    MAX_NAME_LENGTH: Final[int] = 200
    MAX_PROMO_CODE_LENGTH: Final[int] = 50
