"""
Shared validators for offer catalog and billing input.

They raise ValueError so they can be used directly inside pydantic
field validators as well as in service code.
"""

import re
from decimal import Decimal
from typing import Iterable, Optional

from shared.config.constants import Limits, WEEKDAYS

# Stored times come back as "HH:MM" or "HH:MM:SS"
TIME_OF_DAY_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)(:[0-5]\d)?$")


def validate_time_of_day(value: Optional[str]) -> Optional[str]:
    """
    Normalize a time-of-day string to zero-padded "HH:MM".

    Args:
        value: "HH:MM" or "HH:MM:SS", or None/empty for "no restriction"

    Returns:
        The "HH:MM" form, or None

    Raises:
        ValueError: If the value is not a valid 24h time
    """
    if value is None:
        return None

    # datetime.time renders as "HH:MM:SS"
    value = str(value).strip()
    if not value:
        return None

    match = TIME_OF_DAY_PATTERN.match(value)
    if not match:
        raise ValueError(f"Invalid time of day '{value}', expected HH:MM")
    return f"{match.group(1)}:{match.group(2)}"


def normalize_weekdays(days: Optional[Iterable[str]]) -> list[str]:
    """
    Lower-case and validate weekday names.

    Args:
        days: Full English weekday names in any case

    Returns:
        Lower-cased names, order preserved, duplicates removed

    Raises:
        ValueError: If days is not a list of names or a name is not an
            English weekday
    """
    if not days:
        return []
    if isinstance(days, str) or not isinstance(days, Iterable):
        raise ValueError(f"Weekdays must be a list of names, got {days!r}")

    normalized: list[str] = []
    for day in days:
        name = str(day).strip().lower()
        if name not in WEEKDAYS:
            raise ValueError(f"Invalid weekday '{day}'")
        if name not in normalized:
            normalized.append(name)
    return normalized


def validate_percentage(value: Decimal) -> Decimal:
    """
    Validate a percentage is within [0, 100].

    Raises:
        ValueError: If percentage is outside allowed range
    """
    if value < Limits.MIN_PERCENTAGE or value > Limits.MAX_PERCENTAGE:
        raise ValueError(
            f"Percentage must be between {Limits.MIN_PERCENTAGE} and {Limits.MAX_PERCENTAGE}"
        )
    return value


def validate_quantity(quantity: int, min_val: int = Limits.MIN_QUANTITY, max_val: int = Limits.MAX_QUANTITY) -> int:
    """
    Validate quantity is within acceptable range.

    Raises:
        ValueError: If quantity is outside allowed range
    """
    if quantity < min_val:
        raise ValueError(f"Minimum quantity is {min_val}")
    if quantity > max_val:
        raise ValueError(f"Maximum quantity is {max_val}")
    return quantity
