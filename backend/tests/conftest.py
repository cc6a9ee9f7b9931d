"""
Pytest configuration and fixtures for backend tests.
"""

import itertools
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Mapping, Sequence

import pytest

from order_rules.repositories.base import (
    BillingRepository,
    KitchenRepository,
    OfferRepository,
)
from order_rules.schemas.billing import BillLineItem, TaxSetting
from order_rules.schemas.kitchen import OrderItem
from order_rules.schemas.offers import Cart, CartItem, OfferUsage


_id_counter = itertools.count(1000)


def next_id(prefix: str = "id") -> str:
    """Unique string id for test records."""
    return f"{prefix}-{next(_id_counter)}"


# 2025-06-14 is a Saturday, 2025-06-17 a Tuesday
SATURDAY_5PM = datetime(2025, 6, 14, 17, 0, tzinfo=timezone.utc)
TUESDAY_5PM = datetime(2025, 6, 17, 17, 0, tzinfo=timezone.utc)


# =============================================================================
# Builders
# =============================================================================


def make_order_item(
    status: str = "placed",
    kot_batch_id: str | None = "batch-1",
    kot_number: int | None = 1,
    order_id: str = "order-1",
    created_at: datetime = SATURDAY_5PM,
    quantity: int = 1,
    unit_price: str = "100",
    **overrides: Any,
) -> OrderItem:
    data = dict(
        id=next_id("item"),
        order_id=order_id,
        menu_item_name="Paneer Tikka",
        is_veg=True,
        quantity=quantity,
        unit_price=Decimal(unit_price),
        total_price=Decimal(unit_price) * quantity,
        status=status,
        created_at=created_at,
        kot_batch_id=kot_batch_id,
        kot_number=kot_number,
        table_number="T4",
    )
    data.update(overrides)
    return OrderItem(**data)


def make_line(total: str, name: str = "Item", quantity: int = 1, is_manual: bool = False) -> BillLineItem:
    total_price = Decimal(total)
    return BillLineItem(
        name=name,
        quantity=quantity,
        unit_price=total_price / quantity,
        total_price=total_price,
        is_manual=is_manual,
    )


def make_cart(*items: tuple, **fields: Any) -> Cart:
    """
    Cart from (id, price, quantity[, category_id]) tuples.

    Usage:
        make_cart(("pizza", "300", 2), ("coke", "60", 1, "drinks"))
    """
    cart_items = []
    for entry in items:
        item_id, price, quantity = entry[:3]
        category_id = entry[3] if len(entry) > 3 else None
        cart_items.append(
            CartItem(
                id=item_id,
                name=item_id.title(),
                price=Decimal(price),
                quantity=quantity,
                category_id=category_id,
            )
        )
    return Cart(items=cart_items, **fields)


def cart_with_total(total: str, **fields: Any) -> Cart:
    """Cart whose only relevant property is its total."""
    return Cart(items=[], total=Decimal(total), **fields)


def make_offer_record(offer_type: str, **fields: Any) -> dict[str, Any]:
    """Offer record shaped like a stored row with joined offer items."""
    record: dict[str, Any] = {
        "id": next_id("offer"),
        "name": f"{offer_type} offer",
        "offer_type": offer_type,
        "is_active": True,
        "priority": 5,
        "conditions": {},
        "benefits": {},
        "offer_items": [],
        "combo_meals": [],
    }
    record.update(fields)
    return record


# =============================================================================
# In-memory repositories
# =============================================================================


class InMemoryKitchenRepository(KitchenRepository):
    def __init__(self, items: Sequence[OrderItem] = ()):
        self.items = list(items)

    def fetch_order_items(self, statuses=None, order_id=None):
        return [
            item for item in self.items
            if (statuses is None or item.status in statuses)
            and (order_id is None or item.order_id == order_id)
        ]

    def update_batch_status(self, kot_batch_id, status):
        updated = 0
        for index, item in enumerate(self.items):
            if item.kot_batch_id == kot_batch_id:
                self.items[index] = item.model_copy(update={"status": status})
                updated += 1
        return updated


class InMemoryBillingRepository(BillingRepository):
    def __init__(self, tax_settings: Sequence[TaxSetting] = (), settings: Mapping[str, str] | None = None):
        self.tax_settings = list(tax_settings)
        self.settings = dict(settings or {})

    def fetch_tax_settings(self):
        return list(self.tax_settings)

    def fetch_setting(self, key):
        return self.settings.get(key)


class InMemoryOfferRepository(OfferRepository):
    def __init__(self, records: Sequence[Mapping[str, Any]] = ()):
        self.records = list(records)
        self.usages: list[OfferUsage] = []

    def fetch_active_offers(self):
        return [r for r in self.records if r.get("is_active", True)]

    def record_offer_usage(self, usage):
        self.usages.append(usage)
        for record in self.records:
            if record["id"] == usage.offer_id:
                record["usage_count"] = record.get("usage_count", 0) + 1


# =============================================================================
# Fixtures
# =============================================================================


class FixedClock:
    """Clock returning a settable instant."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: Any) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    """Clock fixed at Saturday 17:00 UTC."""
    return FixedClock(SATURDAY_5PM)


@pytest.fixture
def gst_settings():
    """CGST and SGST at 2.5% each, plus an inactive service charge."""
    return [
        TaxSetting(name="SGST", rate=Decimal("2.5"), display_order=2),
        TaxSetting(name="CGST", rate=Decimal("2.5"), display_order=1),
        TaxSetting(name="Service Charge", rate=Decimal("10"), is_active=False, display_order=3),
    ]


@pytest.fixture
def kitchen_repository():
    return InMemoryKitchenRepository()


@pytest.fixture
def billing_repository(gst_settings):
    return InMemoryBillingRepository(gst_settings)


@pytest.fixture
def offer_repository():
    return InMemoryOfferRepository()
