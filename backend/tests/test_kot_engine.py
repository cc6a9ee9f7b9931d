"""
Tests for the KOT engine: status aggregation, grouping, age and urgency.
"""

from datetime import timedelta

import pytest

from order_rules.engines.kot import (
    assign_kot,
    compute_status,
    group_into_kots,
    kot_age_minutes,
    kot_urgency,
    validate_item_transition,
)
from shared.utils.exceptions import InvalidStateError, InvalidTransitionError
from tests.conftest import SATURDAY_5PM, make_order_item


class TestComputeStatus:
    """Tests for the aggregate ticket status cascade."""

    @pytest.mark.parametrize(
        "statuses, expected",
        [
            (["placed", "served"], "placed"),
            (["preparing", "ready", "served"], "preparing"),
            (["served", "served"], "served"),
            ([], "placed"),
            (["ready", "served"], "ready"),
            (["ready"], "ready"),
            (["preparing", "placed"], "placed"),
        ],
    )
    def test_least_progressed_item_wins(self, statuses, expected):
        """Ticket status follows the least-progressed item."""
        assert compute_status(statuses) == expected

    def test_unknown_status_falls_back_to_placed(self):
        """Unrecognized values fall through to placed."""
        assert compute_status(["served", "cancelled"]) == "placed"
        assert compute_status(["bogus"]) == "placed"

    def test_unknown_status_does_not_hide_progress(self):
        """Known statuses still drive the cascade next to unknown ones."""
        assert compute_status(["bogus", "preparing"]) == "preparing"

    def test_accepts_generator(self):
        """Any iterable of statuses is accepted."""
        assert compute_status(s for s in ["served", "served"]) == "served"


class TestGroupIntoKots:
    """Tests for grouping order items into tickets."""

    def test_groups_by_batch_and_sorts_by_number(self):
        """Tickets come back ordered by KOT number."""
        items = [
            make_order_item(kot_batch_id="b2", kot_number=2, status="ready"),
            make_order_item(kot_batch_id="b1", kot_number=1, status="served"),
            make_order_item(kot_batch_id="b2", kot_number=2, status="served"),
        ]

        kots = group_into_kots(items)

        assert [k.kot_number for k in kots] == [1, 2]
        assert kots[0].kot_status == "served"
        assert kots[1].kot_status == "ready"
        assert len(kots[1].items) == 2

    def test_items_without_batch_are_skipped(self):
        """Items not yet sent to the kitchen form no ticket."""
        items = [
            make_order_item(kot_batch_id=None, kot_number=None),
            make_order_item(kot_batch_id="b1", kot_number=1),
        ]

        kots = group_into_kots(items)

        assert len(kots) == 1
        assert kots[0].kot_batch_id == "b1"

    def test_ticket_context_from_first_item(self):
        """Table, order type and customer come from the batch's first item."""
        items = [
            make_order_item(order_type="takeaway", customer_name="Asha", table_number=None),
            make_order_item(order_type="takeaway", customer_name="Other", table_number=None),
        ]

        kot = group_into_kots(items)[0]

        assert kot.order_type == "takeaway"
        assert kot.customer_name == "Asha"
        assert kot.table_number is None

    def test_created_at_is_earliest_item(self):
        """Ticket age is measured from its oldest item."""
        later = SATURDAY_5PM + timedelta(minutes=3)
        items = [
            make_order_item(created_at=later),
            make_order_item(created_at=SATURDAY_5PM),
        ]

        assert group_into_kots(items)[0].created_at == SATURDAY_5PM

    def test_equal_numbers_keep_input_order(self):
        """Sorting is stable for tickets sharing a number."""
        items = [
            make_order_item(kot_batch_id="second", kot_number=7),
            make_order_item(kot_batch_id="first", kot_number=7),
        ]

        assert [k.kot_batch_id for k in group_into_kots(items)] == ["second", "first"]

    def test_empty_input(self):
        """No items, no tickets."""
        assert group_into_kots([]) == []


class TestAgeAndUrgency:
    """Tests for kitchen board age and urgency."""

    def test_age_is_floored_minutes(self):
        """Partial minutes are dropped."""
        now = SATURDAY_5PM + timedelta(minutes=4, seconds=59)
        assert kot_age_minutes(SATURDAY_5PM, now) == 4

    def test_age_never_negative(self):
        """Clock skew never yields a negative age."""
        now = SATURDAY_5PM - timedelta(minutes=2)
        assert kot_age_minutes(SATURDAY_5PM, now) == 0

    @pytest.mark.parametrize(
        "status, age, expected",
        [
            ("ready", 45, "ready"),
            ("placed", 31, "critical"),
            ("preparing", 31, "critical"),
            ("placed", 30, "delayed"),
            ("preparing", 16, "delayed"),
            ("placed", 15, "new"),
            ("preparing", 15, "preparing"),
            ("placed", 0, "new"),
        ],
    )
    def test_urgency_levels(self, status, age, expected):
        """Ready wins, then age thresholds, then status."""
        assert kot_urgency(status, age) == expected

    def test_custom_thresholds(self):
        """Thresholds can be overridden per call."""
        assert kot_urgency("placed", 6, warning_minutes=5, critical_minutes=10) == "delayed"
        assert kot_urgency("placed", 11, warning_minutes=5, critical_minutes=10) == "critical"


class TestItemTransitions:
    """Tests for item status transitions."""

    @pytest.mark.parametrize(
        "current, new",
        [
            ("placed", "preparing"),
            ("placed", "served"),
            ("preparing", "ready"),
            ("ready", "served"),
            ("ready", "ready"),
        ],
    )
    def test_forward_and_same_status_allowed(self, current, new):
        """Moving forward or re-applying the status is fine."""
        validate_item_transition(current, new)

    @pytest.mark.parametrize(
        "current, new",
        [
            ("preparing", "placed"),
            ("served", "ready"),
            ("ready", "preparing"),
        ],
    )
    def test_regression_rejected(self, current, new):
        """Status never moves backwards."""
        with pytest.raises(InvalidTransitionError) as exc_info:
            validate_item_transition(current, new)
        assert f"from '{current}' to '{new}'" in exc_info.value.detail

    def test_unknown_target_rejected(self):
        """Only lifecycle statuses are accepted."""
        with pytest.raises(InvalidTransitionError):
            validate_item_transition("placed", "cancelled")


class TestAssignKot:
    """Tests for KOT assignment."""

    def test_assigns_to_unassigned_item(self):
        """Unassigned item gets a copy with KOT fields set."""
        item = make_order_item(kot_batch_id=None, kot_number=None)

        assigned = assign_kot(item, "batch-9", 9)

        assert assigned.kot_batch_id == "batch-9"
        assert assigned.kot_number == 9
        assert item.kot_batch_id is None

    def test_same_assignment_is_noop(self):
        """Re-assigning the same KOT returns the item unchanged."""
        item = make_order_item(kot_batch_id="batch-1", kot_number=1)
        assert assign_kot(item, "batch-1", 1) is item

    def test_reassignment_rejected(self):
        """KOT fields are immutable once set."""
        item = make_order_item(kot_batch_id="batch-1", kot_number=1)
        with pytest.raises(InvalidStateError):
            assign_kot(item, "batch-2", 2)
