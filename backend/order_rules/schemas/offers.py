"""
Offer catalog, cart and evaluation schemas.

Offers arrive from the data store with loosely typed ``conditions`` and
``benefits`` maps. Each offer type gets its own rule model carrying only the
fields its evaluation reads; the rule union is discriminated on
``offer_type`` and validated once, when the offer is loaded.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, List, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from shared.config.constants import Limits, OfferItemType, OfferType
from shared.utils.validators import normalize_weekdays, validate_quantity, validate_time_of_day

SuggestionTypeLiteral = Literal["almost_there", "unlocked", "available"]


# =============================================================================
# Cart
# =============================================================================


class CartItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    price: Decimal = Field(ge=0)
    quantity: int
    category_id: str | None = None

    @field_validator("quantity")
    @classmethod
    def _quantity(cls, value: int) -> int:
        return validate_quantity(value)

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class FreeItemSelection(BaseModel):
    """A free add-on the guest picked for an item_free_addon offer."""
    model_config = ConfigDict(frozen=True)

    offer_id: str
    menu_item_id: str
    category_id: str | None = None
    name: str = ""
    price: Decimal = Field(ge=0)
    quantity: int = 1

    @field_validator("quantity")
    @classmethod
    def _quantity(cls, value: int) -> int:
        return validate_quantity(value)


class GuestProfile(BaseModel):
    """What the guest classifier knows about the person ordering."""
    model_config = ConfigDict(frozen=True)

    phone: str | None = None
    prior_order_count: int = Field(default=0, ge=0)


class Cart(BaseModel):
    """
    Cart snapshot handed to the offer engine.

    ``total`` defaults to the sum of line totals when not supplied.
    """

    items: List[CartItem] = []
    total: Decimal | None = None
    promo_code: str | None = None
    guest: GuestProfile | None = None
    free_item_selections: List[FreeItemSelection] = []

    @model_validator(mode="after")
    def _fill_total(self) -> "Cart":
        if self.total is None:
            self.total = sum((item.line_total for item in self.items), Decimal("0"))
        return self

    def quantity_of_item(self, menu_item_id: str) -> int:
        return sum(item.quantity for item in self.items if item.id == menu_item_id)

    def quantity_in_category(self, category_id: str) -> int:
        return sum(item.quantity for item in self.items if item.category_id == category_id)

    def selections_for(self, offer_id: str) -> list[FreeItemSelection]:
        return [s for s in self.free_item_selections if s.offer_id == offer_id]


# =============================================================================
# Catalog links
# =============================================================================


class OfferItemLink(BaseModel):
    """Menu item or category linked to an offer, with its role."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    menu_item_id: str | None = None
    menu_category_id: str | None = None
    item_type: str | None = None
    quantity: int = Field(default=1, ge=1)
    name: str | None = None
    price: Decimal | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _needs_target(self) -> "OfferItemLink":
        if not self.menu_item_id and not self.menu_category_id:
            raise ValueError("offer item needs a menu_item_id or a menu_category_id")
        return self

    def matches(self, item: CartItem) -> bool:
        if self.menu_item_id:
            return item.id == self.menu_item_id
        return item.category_id is not None and item.category_id == self.menu_category_id

    def cart_quantity(self, cart: Cart) -> int:
        if self.menu_item_id:
            return cart.quantity_of_item(self.menu_item_id)
        return cart.quantity_in_category(self.menu_category_id)


class ComboComponent(BaseModel):
    """One slot of a combo meal."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    menu_item_id: str | None = None
    menu_category_id: str | None = None
    quantity: int = Field(default=1, ge=1)
    is_required: bool = True
    is_selectable: bool = False
    name: str | None = None
    price: Decimal | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _needs_target(self) -> "ComboComponent":
        if not self.menu_item_id and not self.menu_category_id:
            raise ValueError("combo component needs a menu_item_id or a menu_category_id")
        return self

    def matches(self, item: CartItem) -> bool:
        if self.menu_item_id:
            return item.id == self.menu_item_id
        return item.category_id is not None and item.category_id == self.menu_category_id


class FreeItemRef(BaseModel):
    """Catalog item granted for free by cart_threshold_item offers."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    price: Decimal = Field(ge=0)


# =============================================================================
# Rules (one per offer type)
# =============================================================================


class _Rule(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class DiscountBenefit(_Rule):
    """Percentage (optionally capped) or flat discount."""

    discount_percentage: Decimal | None = Field(default=None, gt=0, le=100)
    discount_amount: Decimal | None = Field(default=None, gt=0)
    max_discount_amount: Decimal | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def _needs_benefit(self):
        if self.discount_percentage is None and self.discount_amount is None:
            raise ValueError("discount_percentage or discount_amount is required")
        return self

    def discount_on(self, base: Decimal) -> Decimal:
        """Discount for ``base``; a percentage wins over a flat amount."""
        if self.discount_percentage is not None:
            discount = base * self.discount_percentage / Decimal("100")
            if self.max_discount_amount is not None:
                discount = min(discount, self.max_discount_amount)
            return discount
        return self.discount_amount


class MinOrderDiscountRule(_Rule):
    offer_type: Literal["min_order_discount"] = OfferType.MIN_ORDER_DISCOUNT
    threshold_amount: Decimal = Field(gt=0)
    discount_amount: Decimal = Field(gt=0)


class CartPercentageRule(_Rule):
    offer_type: Literal["cart_percentage"] = OfferType.CART_PERCENTAGE
    min_amount: Decimal = Field(default=Decimal("0"), ge=0)
    discount_percentage: Decimal = Field(gt=0, le=100)
    max_discount_amount: Decimal | None = Field(default=None, gt=0)


class CartFlatAmountRule(_Rule):
    offer_type: Literal["cart_flat_amount"] = OfferType.CART_FLAT_AMOUNT
    min_amount: Decimal = Field(default=Decimal("0"), ge=0)
    discount_amount: Decimal = Field(gt=0)


class TimeBasedRule(DiscountBenefit):
    offer_type: Literal["time_based"] = OfferType.TIME_BASED
    # Optional restriction to menu categories; the discount then covers only those lines
    categories: List[str] = []


class CustomerBasedRule(DiscountBenefit):
    offer_type: Literal["customer_based"] = OfferType.CUSTOMER_BASED
    target_customer_type: Literal["all", "first_time", "returning", "loyalty"] = "all"
    min_orders_count: int | None = Field(default=None, ge=1)


class PromoCodeRule(DiscountBenefit):
    offer_type: Literal["promo_code"] = OfferType.PROMO_CODE
    min_amount: Decimal = Field(default=Decimal("0"), ge=0)


class RepeatCustomerDiscountRule(DiscountBenefit):
    offer_type: Literal["repeat_customer_discount"] = OfferType.REPEAT_CUSTOMER_DISCOUNT
    min_orders_count: int = Field(ge=1)


class ItemBuyGetFreeRule(_Rule):
    offer_type: Literal["item_buy_get_free"] = OfferType.ITEM_BUY_GET_FREE
    buy_quantity: int = Field(default=1, ge=1)
    get_quantity: int = Field(default=1, ge=1)
    get_same_item: bool = False
    items: List[OfferItemLink]

    @model_validator(mode="after")
    def _needs_buy_and_get(self) -> "ItemBuyGetFreeRule":
        if not self.buy_items:
            raise ValueError('BOGO offers need at least one "buy" item')
        if not self.get_items:
            raise ValueError('BOGO offers need at least one "get" item')
        return self

    @property
    def buy_items(self) -> list[OfferItemLink]:
        return [link for link in self.items if link.item_type == OfferItemType.BUY]

    @property
    def get_items(self) -> list[OfferItemLink]:
        return [link for link in self.items if link.item_type in OfferItemType.GET_TYPES]


class ItemFreeAddonRule(_Rule):
    offer_type: Literal["item_free_addon"] = OfferType.ITEM_FREE_ADDON
    items: List[OfferItemLink]
    free_addon_items: List[OfferItemLink]
    max_free_items: int = Field(default=1, ge=1)
    max_price: Decimal | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def _needs_both_lists(self) -> "ItemFreeAddonRule":
        if not self.items:
            raise ValueError("free add-on offers need qualifying items")
        if not self.free_addon_items:
            raise ValueError("free add-on offers need free add-on items")
        return self


class ItemPercentageRule(_Rule):
    offer_type: Literal["item_percentage"] = OfferType.ITEM_PERCENTAGE
    items: List[OfferItemLink] = Field(min_length=1)
    discount_percentage: Decimal = Field(gt=0, le=100)
    max_discount_amount: Decimal | None = Field(default=None, gt=0)


class CartThresholdItemRule(_Rule):
    offer_type: Literal["cart_threshold_item"] = OfferType.CART_THRESHOLD_ITEM
    threshold_amount: Decimal = Field(gt=0)
    free_item: FreeItemRef


class ComboMealRule(_Rule):
    offer_type: Literal["combo_meal"] = OfferType.COMBO_MEAL
    combo_price: Decimal = Field(ge=0)
    is_customizable: bool = False
    components: List[ComboComponent]

    @model_validator(mode="after")
    def _needs_required(self) -> "ComboMealRule":
        if not self.required_components:
            raise ValueError("combo needs at least one required component")
        return self

    @property
    def required_components(self) -> list[ComboComponent]:
        return [c for c in self.components if c.is_required]

    @property
    def selectable_components(self) -> list[ComboComponent]:
        return [c for c in self.components if c.is_selectable and not c.is_required]


OfferRule = Annotated[
    Union[
        MinOrderDiscountRule,
        CartPercentageRule,
        CartFlatAmountRule,
        TimeBasedRule,
        CustomerBasedRule,
        PromoCodeRule,
        RepeatCustomerDiscountRule,
        ItemBuyGetFreeRule,
        ItemFreeAddonRule,
        ItemPercentageRule,
        CartThresholdItemRule,
        ComboMealRule,
    ],
    Field(discriminator="offer_type"),
]


# =============================================================================
# Offer envelope
# =============================================================================


class Offer(BaseModel):
    """Validated offer: shared validity window plus its type-specific rule."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = Field(max_length=Limits.MAX_NAME_LENGTH)
    description: str | None = None
    is_active: bool = True
    priority: int = 0
    start_date: date | None = None
    end_date: date | None = None
    valid_hours_start: str | None = None
    valid_hours_end: str | None = None
    valid_days: List[str] = []
    usage_limit: int | None = Field(default=None, ge=0)
    usage_count: int = Field(default=0, ge=0)
    promo_code: str | None = Field(default=None, max_length=Limits.MAX_PROMO_CODE_LENGTH)
    application_type: str | None = None
    rule: OfferRule

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _calendar_date(cls, value):
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str):
            value = value.strip()
            # Timestamps like "2025-01-31T00:00:00+00:00" keep their calendar date
            return value[:10] or None
        return value

    @field_validator("valid_hours_start", "valid_hours_end", mode="before")
    @classmethod
    def _time_of_day(cls, value):
        return validate_time_of_day(value)

    @field_validator("valid_days", mode="before")
    @classmethod
    def _weekdays(cls, value):
        return normalize_weekdays(value)

    @field_validator("promo_code", mode="before")
    @classmethod
    def _promo_code(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def _check_envelope(self) -> "Offer":
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        if self.offer_type == OfferType.PROMO_CODE and not self.promo_code:
            raise ValueError("promo_code offers need a promo_code")
        return self

    @property
    def offer_type(self) -> str:
        return self.rule.offer_type

    @property
    def usage_exhausted(self) -> bool:
        return self.usage_limit is not None and self.usage_count >= self.usage_limit


# =============================================================================
# Evaluation results
# =============================================================================


class FreeItem(BaseModel):
    menu_item_id: str
    name: str = ""
    price: Decimal
    quantity: int = 1


class OfferEvaluation(BaseModel):
    """Checkout verdict for one offer against one cart."""
    offer_id: str
    offer_type: str
    applies: bool
    discount: Decimal = Decimal("0")
    reason: str | None = None
    free_items: List[FreeItem] = []
    # item_free_addon offers apply before the guest picks, with zero discount
    requires_user_action: bool = False


class OfferSuggestion(BaseModel):
    """Single upsell banner surfaced to the guest."""
    offer_id: str
    offer_name: str
    offer_type: str
    type: SuggestionTypeLiteral
    message: str
    amount_needed: Decimal | None = None
    savings: Decimal | None = None
    items_needed: int | None = None
    missing_items: List[str] = []


class AppliedOffer(BaseModel):
    offer_id: str
    name: str
    offer_type: str
    discount_amount: Decimal
    free_items: List[FreeItem] = []


class OfferCalculationResult(BaseModel):
    original_amount: Decimal
    discount_amount: Decimal
    final_amount: Decimal
    applied_offers: List[AppliedOffer] = []


class OfferUsage(BaseModel):
    """Usage record written to the data store when an order is placed."""
    offer_id: str
    order_id: str
    discount_amount: Decimal
    guest_phone: str | None = None
    free_items: List[FreeItem] = []
    applied_at: datetime
