"""
Configuration module: Settings, logging, constants.
"""

from shared.config.settings import settings, get_settings
from shared.config.logging import get_logger, setup_logging
from shared.config.constants import (
    KOTStatus,
    OfferType,
    OfferItemType,
    CustomerType,
    SuggestionType,
    Limits,
)

__all__ = [
    # settings
    "settings",
    "get_settings",
    # logging
    "get_logger",
    "setup_logging",
    # constants
    "KOTStatus",
    "OfferType",
    "OfferItemType",
    "CustomerType",
    "SuggestionType",
    "Limits",
]
