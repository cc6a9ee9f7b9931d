"""
Offer validity window.

An offer is usable at a given instant when it is active, the instant's
calendar date falls inside its date range, its time of day falls inside the
daily window and its weekday is allowed. Every check takes ``now`` from the
caller; nothing here reads the clock.
"""

from datetime import datetime
from typing import Iterable

from order_rules.schemas.offers import Offer
from shared.config.constants import WEEKDAYS


def format_time_12h(hhmm: str) -> str:
    """Format "16:00" as "4:00 PM"."""
    hours, minutes = (int(part) for part in hhmm.split(":"))
    suffix = "AM" if hours < 12 else "PM"
    return f"{hours % 12 or 12}:{minutes:02d} {suffix}"


def check_validity(offer: Offer, now: datetime) -> str | None:
    """
    Why the offer cannot be used at ``now``, or None if it can.

    Checks run in a fixed order and stop at the first failure. Bounds are
    inclusive. The time window does not wrap past midnight. ``now`` is read
    in its own timezone; services pass the restaurant's wall clock.
    """
    if not offer.is_active:
        return "Offer is not active"

    today = now.date()
    if offer.start_date and today < offer.start_date:
        return f"Offer starts on {offer.start_date:%d %b %Y}"
    if offer.end_date and today > offer.end_date:
        return "Offer has expired"

    if offer.valid_hours_start and offer.valid_hours_end:
        current_time = now.strftime("%H:%M")
        if not offer.valid_hours_start <= current_time <= offer.valid_hours_end:
            return (
                f"Available {format_time_12h(offer.valid_hours_start)}"
                f" - {format_time_12h(offer.valid_hours_end)}"
            )

    if offer.valid_days and WEEKDAYS[now.weekday()] not in offer.valid_days:
        days = ", ".join(day.capitalize() for day in offer.valid_days)
        return f"Valid only on {days}"

    return None


def is_valid_at(offer: Offer, now: datetime) -> bool:
    return check_validity(offer, now) is None


def prioritized(offers: Iterable[Offer]) -> list[Offer]:
    """Highest priority first; equal priorities keep input order."""
    return sorted(offers, key=lambda offer: offer.priority, reverse=True)


def valid_offers(offers: Iterable[Offer], now: datetime) -> list[Offer]:
    return [offer for offer in offers if is_valid_at(offer, now)]
