"""
Utilities module: Exceptions, validators.
"""

from shared.utils.exceptions import (
    AppException,
    NotFoundError,
    ValidationError,
    InvalidStateError,
    InvalidTransitionError,
    OfferConfigurationError,
)
from shared.utils.validators import (
    validate_time_of_day,
    normalize_weekdays,
    validate_percentage,
    validate_quantity,
)

__all__ = [
    # exceptions
    "AppException",
    "NotFoundError",
    "ValidationError",
    "InvalidStateError",
    "InvalidTransitionError",
    "OfferConfigurationError",
    # validators
    "validate_time_of_day",
    "normalize_weekdays",
    "validate_percentage",
    "validate_quantity",
]
