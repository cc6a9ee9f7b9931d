"""
Shared module for configuration and utilities used by the order rules.

STRUCTURE:
- shared.config: Configuration
  - settings.py: Environment config (pydantic-settings)
  - logging.py: Structured logging
  - constants.py: KOTStatus, OfferType, limits

- shared.utils: Utilities
  - exceptions.py: Domain exceptions with auto-logging
  - validators.py: Time-of-day, weekday, percentage and quantity validation

IMPORT EXAMPLES:
    from shared.config.settings import settings
    from shared.config.constants import KOTStatus, OfferType
    from shared.utils.exceptions import NotFoundError, InvalidTransitionError
    from shared.utils.validators import validate_time_of_day
"""
