"""
Centralized domain exceptions for consistent error handling.

Every exception logs itself with structured context when raised, so callers
only need to decide how to recover.

Usage:
    from shared.utils.exceptions import NotFoundError, ValidationError

    raise NotFoundError("KOT", kot_batch_id)
    raise ValidationError("Discount percentage must be between 0 and 100", value=120)
"""

from typing import Any

from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(Exception):
    """
    Base exception with automatic logging.

    All custom exceptions should inherit from this class
    to ensure consistent logging and message format.
    """

    def __init__(
        self,
        detail: str,
        log_level: str = "warning",
        **log_context: Any,
    ):
        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, error=type(self).__name__, **log_context)

        self.detail = detail
        self.context = log_context
        super().__init__(detail)


# =============================================================================
# Lookup Errors
# =============================================================================


class NotFoundError(AppException):
    """
    Entity not found.

    Usage:
        raise NotFoundError("KOT", "batch-42")
    """

    def __init__(self, entity: str, entity_id: int | str | None = None, **log_context: Any):
        if entity_id is not None:
            detail = f"{entity} with ID {entity_id} not found"
        else:
            detail = f"{entity} not found"

        super().__init__(detail, entity=entity, entity_id=entity_id, **log_context)


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(AppException):
    """
    Input validation error.

    Usage:
        raise ValidationError("Invalid quantity", field="quantity", value=-1)
    """

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(detail, log_level="warning", **log_context)


class InvalidStateError(ValidationError):
    """Entity is in an invalid state for the operation."""

    def __init__(self, entity: str, current_state: str, expected_states: list[str] | None = None, **log_context: Any):
        if expected_states:
            states_str = ", ".join(expected_states)
            detail = f"{entity} is in state '{current_state}', expected: {states_str}"
        else:
            detail = f"{entity} cannot be in state '{current_state}' for this operation"

        super().__init__(detail, entity=entity, current_state=current_state, **log_context)


class InvalidTransitionError(ValidationError):
    """Invalid status transition."""

    def __init__(self, entity: str, from_status: str, to_status: str, **log_context: Any):
        detail = f"Invalid transition from '{from_status}' to '{to_status}' for {entity}"
        super().__init__(detail, entity=entity, from_status=from_status, to_status=to_status, **log_context)


class OfferConfigurationError(ValidationError):
    """Offer record is missing fields its type needs, or has invalid ones."""

    def __init__(self, offer_id: str | None, reason: str, **log_context: Any):
        detail = f"Offer {offer_id or '<unknown>'} is misconfigured: {reason}"
        super().__init__(detail, offer_id=offer_id, **log_context)
