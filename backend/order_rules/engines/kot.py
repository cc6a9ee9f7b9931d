"""
Kitchen Order Ticket engine.

Derives a ticket status from its line statuses and groups order items into
tickets for the kitchen board. Everything here is pure.
"""

from datetime import datetime
from typing import Iterable, Sequence

from order_rules.schemas.kitchen import KOT, KOTItem, OrderItem
from shared.config.constants import KOT_STATUS_RANK, KOTStatus, KOTUrgency
from shared.config.settings import settings
from shared.utils.exceptions import InvalidStateError, InvalidTransitionError


def compute_status(item_statuses: Iterable[str]) -> str:
    """
    Aggregate status of a ticket from the statuses of its items.

    A ticket is only as far along as its least-progressed item, and reads
    "served" only when every item is served. Empty input and unknown values
    fall back to "placed".
    """
    statuses = list(item_statuses)
    present = set(statuses)

    if KOTStatus.PLACED in present:
        return KOTStatus.PLACED
    if KOTStatus.PREPARING in present:
        return KOTStatus.PREPARING
    if KOTStatus.READY in present:
        return KOTStatus.READY
    if statuses and present == {KOTStatus.SERVED}:
        return KOTStatus.SERVED
    return KOTStatus.PLACED


def group_into_kots(order_items: Iterable[OrderItem]) -> list[KOT]:
    """
    Group order items into tickets by KOT batch.

    Items without a batch id have not been sent to the kitchen and are
    skipped. Ticket context comes from the first item seen in each batch and
    tickets are returned ordered by KOT number, ties keeping input order.
    """
    batches: dict[str, list[OrderItem]] = {}
    for item in order_items:
        if not item.kot_batch_id:
            continue
        batches.setdefault(item.kot_batch_id, []).append(item)

    kots = []
    for batch_id, items in batches.items():
        first = items[0]
        kots.append(
            KOT(
                kot_number=first.kot_number or 0,
                kot_batch_id=batch_id,
                order_id=first.order_id,
                order_type=first.order_type,
                table_number=first.table_number,
                customer_name=first.customer_name,
                kot_status=compute_status(item.status for item in items),
                created_at=min(item.created_at for item in items),
                items=[
                    KOTItem(
                        id=item.id,
                        quantity=item.quantity,
                        unit_price=item.unit_price,
                        total_price=item.total_price,
                        created_at=item.created_at,
                        status=item.status,
                        menu_item_name=item.menu_item_name,
                        is_veg=item.is_veg,
                    )
                    for item in items
                ],
            )
        )

    kots.sort(key=lambda kot: kot.kot_number)
    return kots


def kot_age_minutes(created_at: datetime, now: datetime) -> int:
    """Whole minutes since the ticket was created, never negative."""
    seconds = (now - created_at).total_seconds()
    return max(0, int(seconds // 60))


def kot_urgency(
    status: str,
    age_minutes: int,
    warning_minutes: int | None = None,
    critical_minutes: int | None = None,
) -> str:
    """
    Urgency level for the kitchen board.

    Ready tickets are always "ready". Otherwise age decides: past the
    critical threshold is "critical", past the warning threshold "delayed".
    Young tickets read "preparing" or "new" by status.
    """
    if warning_minutes is None:
        warning_minutes = settings.kot_warning_age_minutes
    if critical_minutes is None:
        critical_minutes = settings.kot_critical_age_minutes

    if status == KOTStatus.READY:
        return KOTUrgency.READY
    if age_minutes > critical_minutes:
        return KOTUrgency.CRITICAL
    if age_minutes > warning_minutes:
        return KOTUrgency.DELAYED
    if status == KOTStatus.PREPARING:
        return KOTUrgency.PREPARING
    return KOTUrgency.NEW


def validate_item_transition(current: str, new: str) -> None:
    """
    Reject status regressions and unknown statuses.

    Re-applying the current status is allowed so updates stay idempotent.

    Raises:
        InvalidTransitionError: If new is unknown or earlier than current
    """
    if new not in KOT_STATUS_RANK:
        raise InvalidTransitionError("order item", current, new)
    if current in KOT_STATUS_RANK and KOT_STATUS_RANK[new] < KOT_STATUS_RANK[current]:
        raise InvalidTransitionError("order item", current, new)


def validate_batch_transition(items: Sequence[OrderItem], new: str) -> None:
    """Check every item of a batch can move to new."""
    for item in items:
        validate_item_transition(item.status, new)


def assign_kot(item: OrderItem, kot_batch_id: str, kot_number: int) -> OrderItem:
    """
    Copy of item sent to the kitchen under the given KOT.

    Assigning the same KOT again is a no-op.

    Raises:
        InvalidStateError: If the item already belongs to a different KOT
    """
    already_assigned = item.kot_batch_id is not None or item.kot_number is not None
    if already_assigned:
        if item.kot_batch_id == kot_batch_id and item.kot_number == kot_number:
            return item
        raise InvalidStateError(
            "order item",
            f"kot {item.kot_batch_id}#{item.kot_number}",
            item_id=item.id,
        )

    return item.model_copy(update={"kot_batch_id": kot_batch_id, "kot_number": kot_number})
