"""
KOT Domain Service.

Builds kitchen tickets from order items and moves KOT batches through the
kitchen lifecycle.
"""

from datetime import datetime
from typing import Callable, List, Sequence

from order_rules.engines.kot import (
    group_into_kots,
    kot_age_minutes,
    kot_urgency,
    validate_batch_transition,
)
from order_rules.repositories.base import KitchenRepository
from order_rules.schemas.kitchen import KOT, KOTBoardEntry
from order_rules.services.domain.clock import as_aware, utc_now
from shared.config.constants import KOTStatus
from shared.config.logging import kitchen_logger as logger
from shared.utils.exceptions import NotFoundError


class KOTService:
    """
    Domain service for kitchen tickets.

    The clock is read once per call so every ticket in a board shares the
    same "now".
    """

    def __init__(
        self,
        repository: KitchenRepository,
        clock: Callable[[], datetime] | None = None,
    ):
        self._repository = repository
        self._clock = clock or utc_now

    def list_kots(
        self,
        statuses: Sequence[str] | None = None,
        order_id: str | None = None,
    ) -> List[KOT]:
        """Tickets built from the matching order items, by KOT number."""
        items = self._repository.fetch_order_items(statuses=statuses, order_id=order_id)
        return group_into_kots(items)

    def kitchen_board(self, statuses: Sequence[str] = KOTStatus.ACTIVE) -> List[KOTBoardEntry]:
        """Active tickets with their age and urgency."""
        now = as_aware(self._clock())
        board = []
        for kot in self.list_kots(statuses=statuses):
            age = kot_age_minutes(kot.created_at, now)
            board.append(
                KOTBoardEntry(kot=kot, age_minutes=age, urgency=kot_urgency(kot.kot_status, age))
            )
        return board

    def get_kot(self, kot_batch_id: str) -> KOT:
        items = [
            item for item in self._repository.fetch_order_items()
            if item.kot_batch_id == kot_batch_id
        ]
        if not items:
            raise NotFoundError("KOT", kot_batch_id)
        return group_into_kots(items)[0]

    def update_kot_status(self, kot_batch_id: str, status: str) -> KOT:
        """
        Move every item of a KOT batch to ``status``.

        Raises:
            NotFoundError: If no items belong to the batch
            InvalidTransitionError: If any item would move backwards
        """
        items = [
            item for item in self._repository.fetch_order_items()
            if item.kot_batch_id == kot_batch_id
        ]
        if not items:
            raise NotFoundError("KOT", kot_batch_id)

        validate_batch_transition(items, status)
        updated = self._repository.update_batch_status(kot_batch_id, status)

        logger.info(
            "KOT status updated",
            kot_batch_id=kot_batch_id,
            kot_number=items[0].kot_number,
            status=status,
            items_updated=updated,
        )

        return group_into_kots(
            item.model_copy(update={"status": status}) for item in items
        )[0]
