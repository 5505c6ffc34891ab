"""Unit tests for the status rules applied on transfer."""
import pytest

from app.errors import ValidationError
from app.schemas.equipment import BuildingType as B
from app.schemas.equipment import EquipmentStatus as S
from app.services.status_policy import (
    can_leave,
    check_transfer_eligible,
    compute_status_on_transfer,
    eligible_statuses_for,
    is_valid_status,
)


def test_vocabularies_are_disjoint():
    warehouse = eligible_statuses_for(B.WAREHOUSE)
    assert warehouse == {S.STORED, S.MAINTENANCE, S.REPLACED}
    assert eligible_statuses_for(B.CLASSROOM) == {S.IN_USE, S.NEED_REPLACEMENT}
    assert eligible_statuses_for("office") == eligible_statuses_for(B.CLASSROOM)
    assert not warehouse & eligible_statuses_for(B.OFFICE)


def test_is_valid_status():
    assert is_valid_status("stored", "warehouse")
    assert not is_valid_status(S.IN_USE, B.WAREHOUSE)
    assert not is_valid_status(S.MAINTENANCE, B.OFFICE)


@pytest.mark.parametrize(
    "current, from_type, to_type, expected",
    [
        (S.STORED, B.WAREHOUSE, B.CLASSROOM, S.IN_USE),
        (S.MAINTENANCE, B.WAREHOUSE, B.OFFICE, S.IN_USE),
        (S.REPLACED, B.WAREHOUSE, B.CLASSROOM, S.REPLACED),
        (S.IN_USE, B.CLASSROOM, B.WAREHOUSE, S.STORED),
        (S.NEED_REPLACEMENT, B.OFFICE, B.WAREHOUSE, S.REPLACED),
        (S.IN_USE, B.CLASSROOM, B.CLASSROOM, S.IN_USE),
        (S.NEED_REPLACEMENT, B.CLASSROOM, B.OFFICE, S.NEED_REPLACEMENT),
        (S.MAINTENANCE, B.WAREHOUSE, B.WAREHOUSE, S.MAINTENANCE),
    ],
)
def test_compute_status_on_transfer(current, from_type, to_type, expected):
    assert compute_status_on_transfer(current, from_type, to_type) == expected


def test_compute_status_is_deterministic():
    first = compute_status_on_transfer("stored", "warehouse", "classroom")
    second = compute_status_on_transfer("stored", "warehouse", "classroom")
    assert first == second == S.IN_USE


def test_round_trip_does_not_restore_maintenance():
    out = compute_status_on_transfer(S.MAINTENANCE, B.WAREHOUSE, B.CLASSROOM)
    back = compute_status_on_transfer(out, B.CLASSROOM, B.WAREHOUSE)
    assert back == S.STORED

    out = compute_status_on_transfer(S.STORED, B.WAREHOUSE, B.CLASSROOM)
    assert compute_status_on_transfer(out, B.CLASSROOM, B.WAREHOUSE) == S.STORED


class TestEligibility:
    def test_warehouse_items(self):
        assert can_leave(S.STORED, B.WAREHOUSE)
        assert can_leave(S.MAINTENANCE, B.WAREHOUSE)
        assert not can_leave(S.REPLACED, B.WAREHOUSE)

    def test_items_outside_warehouse_always_leave(self):
        assert can_leave(S.IN_USE, B.CLASSROOM)
        assert can_leave(S.NEED_REPLACEMENT, B.OFFICE)

    def test_replaced_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            check_transfer_eligible(S.REPLACED, B.WAREHOUSE)
        assert exc_info.value.errors == {"status": "replaced"}

    def test_eligible_passes(self):
        check_transfer_eligible(S.MAINTENANCE, B.WAREHOUSE)
