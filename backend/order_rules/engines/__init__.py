"""
Pure engines. No I/O, no clock reads; callers pass ``now`` in.
"""

from order_rules.engines.billing import (
    active_tax_rules,
    calculate_bill,
    effective_discount_percentage,
    format_currency,
    round_money,
)
from order_rules.engines.kot import (
    assign_kot,
    compute_status,
    group_into_kots,
    kot_age_minutes,
    kot_urgency,
    validate_batch_transition,
    validate_item_transition,
)

__all__ = [
    # billing
    "calculate_bill",
    "active_tax_rules",
    "effective_discount_percentage",
    "round_money",
    "format_currency",
    # kot
    "compute_status",
    "group_into_kots",
    "kot_age_minutes",
    "kot_urgency",
    "validate_item_transition",
    "validate_batch_transition",
    "assign_kot",
]
