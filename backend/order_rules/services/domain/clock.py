"""
Clock helpers for the domain services.

Services read the clock once per call. Kitchen ages are plain instant
arithmetic; offer windows are judged on the restaurant's wall clock.
"""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from shared.config.settings import settings


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_aware(value: datetime) -> datetime:
    """Treat a naive instant as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def restaurant_time(value: datetime, zone_name: str | None = None) -> datetime:
    """
    The instant as the restaurant's wall clock shows it.

    Usage:
        restaurant_time(datetime(2025, 6, 14, 12, 0, tzinfo=timezone.utc))
        # 2025-06-14 17:30 in Asia/Kolkata
    """
    return as_aware(value).astimezone(ZoneInfo(zone_name or settings.timezone))
