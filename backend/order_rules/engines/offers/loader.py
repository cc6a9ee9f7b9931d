"""
Offer loading.

Turns offer records as stored (envelope columns, loose ``conditions`` and
``benefits`` maps, ``offer_items`` rows and ``combo_meals`` rows) into
validated Offer models. A record that cannot be validated is rejected here,
once, instead of surprising an evaluator later.
"""

from typing import Any, Iterable, Mapping

from pydantic import ValidationError as PydanticValidationError

from order_rules.schemas.offers import Offer
from shared.config.constants import OfferItemType, OfferType
from shared.config.logging import offers_logger as logger
from shared.utils.exceptions import OfferConfigurationError

ENVELOPE_FIELDS = (
    "id",
    "name",
    "description",
    "is_active",
    "priority",
    "start_date",
    "end_date",
    "valid_hours_start",
    "valid_hours_end",
    "valid_days",
    "usage_limit",
    "usage_count",
    "promo_code",
    "application_type",
)


def _present(data: Mapping[str, Any] | None) -> dict[str, Any]:
    """Drop unset values; admin forms store blanks as empty strings."""
    if not data:
        return {}
    return {key: value for key, value in data.items() if value is not None and value != ""}


def _catalog_fields(row: Mapping[str, Any]) -> dict[str, Any]:
    # Joined rows carry the menu item as a nested "menu_items" object
    menu_item = row.get("menu_items")
    if not isinstance(menu_item, Mapping):
        menu_item = {}
    fields = {
        "name": row.get("name") or menu_item.get("name"),
        "price": row.get("price", menu_item.get("price")),
    }
    return _present(fields)


def _item_link(row: Mapping[str, Any]) -> dict[str, Any]:
    link = _present(
        {
            "menu_item_id": row.get("menu_item_id"),
            "menu_category_id": row.get("menu_category_id"),
            "item_type": row.get("item_type"),
            "quantity": row.get("quantity"),
        }
    )
    link.update(_catalog_fields(row))
    return link


def _addon_link(entry: Mapping[str, Any]) -> dict[str, Any]:
    """Free add-on entry kept in benefits: {"type": "item"|"category", "id": ...}."""
    id_field = "menu_category_id" if entry.get("type") == "category" else "menu_item_id"
    link = {id_field: entry.get("id"), "item_type": OfferItemType.FREE_ADDON}
    link.update(_catalog_fields(entry))
    return link


def _combo_component(row: Mapping[str, Any]) -> dict[str, Any]:
    component = _present(
        {
            "menu_item_id": row.get("menu_item_id"),
            "menu_category_id": row.get("menu_category_id"),
            "quantity": row.get("quantity"),
            "is_required": row.get("is_required"),
            "is_selectable": row.get("is_selectable"),
        }
    )
    component.update(_catalog_fields(row))
    return component


def _rule_data(record: Mapping[str, Any]) -> dict[str, Any]:
    offer_type = record.get("offer_type")
    data: dict[str, Any] = {}
    data.update(_present(record.get("conditions")))
    data.update(_present(record.get("benefits")))
    data["offer_type"] = offer_type

    # Customer targeting may live on the offer row itself
    for key in ("target_customer_type", "min_orders_count"):
        if record.get(key) not in (None, ""):
            data[key] = record[key]

    links = [_item_link(row) for row in record.get("offer_items") or []]

    if offer_type == OfferType.ITEM_FREE_ADDON:
        data["items"] = [link for link in links if link.get("item_type") != OfferItemType.FREE_ADDON]
        free_addons = [link for link in links if link.get("item_type") == OfferItemType.FREE_ADDON]
        free_addons.extend(
            _addon_link(entry) for entry in data.get("free_addon_items") or [] if isinstance(entry, Mapping)
        )
        data["free_addon_items"] = free_addons
    else:
        data["items"] = links

    if offer_type == OfferType.CART_THRESHOLD_ITEM and "free_item" not in data and "free_item_id" in data:
        data["free_item"] = _present(
            {
                "id": data["free_item_id"],
                "name": data.get("free_item_name"),
                "price": data.get("free_item_price"),
            }
        )

    if offer_type == OfferType.COMBO_MEAL:
        combos = record.get("combo_meals") or []
        # One combo per offer
        combo = combos[0] if combos else {}
        data.update(_present({key: combo.get(key) for key in ("combo_price", "is_customizable")}))
        data["components"] = [_combo_component(row) for row in combo.get("combo_meal_items") or []]

    return data


def _shape_problem(record: Mapping[str, Any]) -> str | None:
    """First structural problem in a record, before any field is read."""
    for key in ("conditions", "benefits"):
        if record.get(key) is not None and not isinstance(record[key], Mapping):
            return f"{key} must be a mapping"
    for key in ("offer_items", "combo_meals"):
        rows = record.get(key)
        if rows is None:
            continue
        if not isinstance(rows, list):
            return f"{key} must be a list"
        if not all(isinstance(row, Mapping) for row in rows):
            return f"{key} rows must be mappings"
    for combo in record.get("combo_meals") or []:
        items = combo.get("combo_meal_items")
        if items is not None and not (
            isinstance(items, list) and all(isinstance(row, Mapping) for row in items)
        ):
            return "combo_meal_items must be a list of mappings"
    return None


def _describe(exc: PydanticValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        problems.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(problems)


def load_offer(record: Mapping[str, Any]) -> Offer:
    """
    Build a validated Offer from a stored record.

    Raises:
        OfferConfigurationError: If the record is missing fields its offer
            type needs or carries invalid values
    """
    if not isinstance(record, Mapping):
        raise OfferConfigurationError(None, "record is not a mapping")

    offer_id = record.get("id")
    problem = _shape_problem(record)
    if problem:
        raise OfferConfigurationError(offer_id, problem, offer_type=record.get("offer_type"))

    envelope = {key: record[key] for key in ENVELOPE_FIELDS if record.get(key) is not None}

    try:
        return Offer.model_validate({**envelope, "rule": _rule_data(record)})
    except PydanticValidationError as exc:
        raise OfferConfigurationError(
            offer_id,
            _describe(exc),
            offer_type=record.get("offer_type"),
        ) from exc


def load_offers(records: Iterable[Mapping[str, Any]]) -> list[Offer]:
    """
    Load every valid offer, skipping misconfigured ones.

    Rejected records are logged by OfferConfigurationError itself.
    """
    offers = []
    skipped = 0
    for record in records:
        try:
            offers.append(load_offer(record))
        except OfferConfigurationError:
            skipped += 1

    if skipped:
        logger.warning("Skipped misconfigured offers", skipped=skipped, loaded=len(offers))
    return offers
