"""
Tests for the single upsell suggestion.
"""

from decimal import Decimal

import pytest

from order_rules.engines.offers import SUGGESTERS, find_best_suggestion, load_offer
from shared.config.constants import OfferType
from tests.conftest import (
    SATURDAY_5PM,
    TUESDAY_5PM,
    cart_with_total,
    make_cart,
    make_offer_record,
)


def offer(offer_type, **fields):
    return load_offer(make_offer_record(offer_type, **fields))


def min_order(threshold=1000, discount=100, **fields):
    return offer(
        "min_order_discount",
        conditions={"threshold_amount": threshold},
        benefits={"discount_amount": discount},
        **fields,
    )


class TestAlmostThere:
    """Tests for the proximity rule."""

    def test_below_ratio_no_suggestion(self):
        """599.99 of 1000 is under 60%."""
        assert find_best_suggestion(cart_with_total("599.99"), [min_order()], SATURDAY_5PM) is None

    def test_at_ratio_suggests(self):
        """600.00 of 1000 is exactly 60%; 400.00 more is needed."""
        suggestion = find_best_suggestion(cart_with_total("600.00"), [min_order()], SATURDAY_5PM)

        assert suggestion.type == "almost_there"
        assert suggestion.amount_needed == Decimal("400.00")
        assert suggestion.savings == Decimal("100")
        assert suggestion.message == "Add ₹400.00 more to save ₹100.00!"

    def test_threshold_met_unlocked(self):
        """Once met the suggestion flips to unlocked."""
        suggestion = find_best_suggestion(cart_with_total("1000"), [min_order()], SATURDAY_5PM)

        assert suggestion.type == "unlocked"
        assert suggestion.amount_needed is None
        assert suggestion.message == "You've unlocked ₹100.00 off! Apply this offer."

    def test_ratio_is_tunable(self):
        """A lower ratio widens the window."""
        suggestion = find_best_suggestion(
            cart_with_total("500"), [min_order()], SATURDAY_5PM, almost_there_ratio=Decimal("0.5")
        )
        assert suggestion.type == "almost_there"

    def test_cart_percentage_available_and_almost(self):
        """Percentage offers are available once min_amount is met."""
        pct = offer(
            "cart_percentage",
            conditions={"min_amount": 500},
            benefits={"discount_percentage": 10, "max_discount_amount": 40},
        )

        available = find_best_suggestion(cart_with_total("600"), [pct], SATURDAY_5PM)
        assert available.type == "available"
        assert available.savings == Decimal("40")
        assert available.message == "Save ₹40.00 with 10% off!"

        almost = find_best_suggestion(cart_with_total("300"), [pct], SATURDAY_5PM)
        assert almost.type == "almost_there"
        assert almost.amount_needed == Decimal("200")

    def test_cart_percentage_empty_cart_not_suggested(self):
        """Nothing to save on an empty cart means no banner."""
        pct = offer("cart_percentage", benefits={"discount_percentage": 20})

        assert find_best_suggestion(make_cart(), [pct], SATURDAY_5PM) is None

    def test_zero_savings_falls_through_to_next_offer(self):
        """A percentage offer with nothing to save does not block lower priorities."""
        pct = offer("cart_percentage", priority=9, benefits={"discount_percentage": 20})
        flat = offer("cart_flat_amount", priority=1, benefits={"discount_amount": 50})

        suggestion = find_best_suggestion(make_cart(), [pct, flat], SATURDAY_5PM)

        assert suggestion.offer_id == flat.id
        assert suggestion.message == "Save ₹50.00 on this order!"

    def test_threshold_item(self):
        """Free-item thresholds name the item."""
        lassi = offer(
            "cart_threshold_item",
            conditions={"threshold_amount": 800},
            benefits={"free_item_id": "lassi", "free_item_name": "Lassi", "free_item_price": 80},
        )

        suggestion = find_best_suggestion(cart_with_total("700"), [lassi], SATURDAY_5PM)

        assert suggestion.type == "almost_there"
        assert suggestion.message == "Add ₹100.00 more to get Lassi!"


class TestItemSuggestions:
    """Tests for BOGO, combo and free add-on suggestions."""

    @pytest.fixture
    def bogo(self):
        return offer(
            "item_buy_get_free",
            benefits={"buy_quantity": 2, "get_quantity": 1},
            offer_items=[
                {"menu_item_id": "burger", "item_type": "buy", "name": "Burger"},
                {"menu_item_id": "fries", "item_type": "get", "name": "Fries", "price": 150},
            ],
        )

    def test_bogo_partial(self, bogo):
        """Part of the buy quantity gives an items-needed nudge."""
        suggestion = find_best_suggestion(make_cart(("burger", "250", 1)), [bogo], SATURDAY_5PM)

        assert suggestion.type == "almost_there"
        assert suggestion.items_needed == 1
        assert suggestion.message == "Add 1 more Burger to get free Fries!"

    def test_bogo_unlocked(self, bogo):
        """Enough bought unlocks it with the free item's value."""
        suggestion = find_best_suggestion(make_cart(("burger", "250", 2)), [bogo], SATURDAY_5PM)

        assert suggestion.type == "unlocked"
        assert suggestion.savings == Decimal("150")

    def test_bogo_nothing_in_cart(self, bogo):
        """No buy items, no nudge."""
        assert find_best_suggestion(make_cart(("coke", "60", 1)), [bogo], SATURDAY_5PM) is None

    @pytest.fixture
    def combo(self):
        return offer(
            "combo_meal",
            combo_meals=[
                {
                    "combo_price": 250,
                    "combo_meal_items": [
                        {"menu_item_id": "burger", "name": "Burger", "price": 199},
                        {"menu_item_id": "fries", "name": "Fries", "price": 99},
                    ],
                }
            ],
        )

    def test_combo_teaser(self, combo):
        """An empty cart sees the combo as available."""
        suggestion = find_best_suggestion(make_cart(("coke", "60", 1)), [combo], SATURDAY_5PM)

        assert suggestion.type == "available"
        assert suggestion.message == "Get Burger + Fries combo for ₹250.00!"

    def test_combo_partial(self, combo):
        """Missing parts are listed."""
        suggestion = find_best_suggestion(make_cart(("burger", "199", 1)), [combo], SATURDAY_5PM)

        assert suggestion.type == "almost_there"
        assert suggestion.missing_items == ["Fries"]
        assert suggestion.items_needed == 1

    def test_combo_complete(self, combo):
        """A complete combo shows its savings."""
        suggestion = find_best_suggestion(
            make_cart(("burger", "199", 1), ("fries", "99", 1)), [combo], SATURDAY_5PM
        )

        assert suggestion.type == "unlocked"
        assert suggestion.savings == Decimal("48")

    def test_free_addon_unlocked(self):
        """A qualifying item unlocks the add-on choice."""
        addon = offer(
            "item_free_addon",
            offer_items=[
                {"menu_item_id": "thali", "item_type": "qualifying"},
                {"menu_item_id": "raita", "item_type": "free_addon"},
            ],
        )

        suggestion = find_best_suggestion(make_cart(("thali", "250", 1)), [addon], SATURDAY_5PM)

        assert suggestion.type == "unlocked"


class TestSelection:
    """Tests for which offer wins."""

    def test_promo_codes_never_suggested(self):
        """Promo offers stay hidden even when they would apply."""
        promo = offer("promo_code", promo_code="SECRET", priority=99, benefits={"discount_amount": 500})

        assert "promo_code" not in SUGGESTERS
        assert find_best_suggestion(cart_with_total("5000"), [promo], SATURDAY_5PM) is None

    def test_invalid_offers_skipped(self):
        """Offers outside their window are ignored."""
        weekend = min_order(valid_days=["saturday", "sunday"])
        assert find_best_suggestion(cart_with_total("1000"), [weekend], TUESDAY_5PM) is None

    def test_exhausted_offers_skipped(self):
        """Offers past their usage limit are ignored."""
        used_up = min_order(usage_limit=10, usage_count=10)
        assert find_best_suggestion(cart_with_total("1000"), [used_up], SATURDAY_5PM) is None

    def test_highest_priority_first(self):
        """The higher priority offer is suggested."""
        low = min_order(id="low", priority=1, discount=300)
        high = min_order(id="high", priority=9, discount=50)

        suggestion = find_best_suggestion(cart_with_total("1000"), [low, high], SATURDAY_5PM)

        assert suggestion.offer_id == "high"

    def test_first_found_wins_on_ties(self):
        """Equal priorities keep input order, even if a later offer saves more."""
        first = min_order(id="first", discount=50)
        better = min_order(id="better", discount=300)

        suggestion = find_best_suggestion(cart_with_total("1000"), [first, better], SATURDAY_5PM)

        assert suggestion.offer_id == "first"

    def test_falls_through_to_next_offer(self):
        """An offer with nothing to say does not block the next one."""
        far = min_order(id="far", priority=9, threshold=5000)
        near = min_order(id="near", priority=1)

        suggestion = find_best_suggestion(cart_with_total("700"), [far, near], SATURDAY_5PM)

        assert suggestion.offer_id == "near"

    def test_types_without_suggestions(self):
        """Some types never produce a banner."""
        assert OfferType.TIME_BASED not in SUGGESTERS
        timed = offer("time_based", benefits={"discount_percentage": 10})
        assert find_best_suggestion(cart_with_total("500"), [timed], SATURDAY_5PM) is None
