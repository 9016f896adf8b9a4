from __future__ import annotations

import pytest
from floor_fakes import make_table

from floorops.domain.table.entities import TableStatus, TableTransitionError, sort_for_seating


def test_capacity_bounds_are_enforced() -> None:
    with pytest.raises(ValueError):
        make_table(capacity=0)
    with pytest.raises(ValueError):
        make_table(capacity=21)


def test_seating_order_prefers_smallest_then_lowest_number() -> None:
    tables = [
        make_table("tbl_c", number=3, capacity=6),
        make_table("tbl_b", number=2, capacity=4),
        make_table("tbl_a", number=1, capacity=4),
    ]

    assert [table.number for table in sort_for_seating(tables)] == [1, 2, 3]


def test_maintenance_only_returns_to_available() -> None:
    table = make_table(status=TableStatus.MAINTENANCE)

    table.ensure_can_transition(TableStatus.AVAILABLE)
    with pytest.raises(TableTransitionError) as exc_info:
        table.ensure_can_transition(TableStatus.OCCUPIED)

    assert exc_info.value.allowed == frozenset({TableStatus.AVAILABLE})


def test_same_status_is_not_a_transition() -> None:
    with pytest.raises(TableTransitionError):
        make_table(status=TableStatus.OCCUPIED).ensure_can_transition(TableStatus.OCCUPIED)


def test_edit_keeps_status_and_unspecified_fields() -> None:
    table = make_table(status=TableStatus.RESERVED, location="window")

    edited = table.edited(capacity=6)

    assert edited.capacity == 6
    assert edited.location == "window"
    assert edited.status == TableStatus.RESERVED
