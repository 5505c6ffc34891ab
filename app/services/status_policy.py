"""Status rules for equipment as it moves between rooms.

Each building type admits one of two disjoint vocabularies: warehouse items are
``stored``, ``maintenance`` or ``replaced``; items in classrooms and offices are
``in-use`` or ``need-replacement``. Everything here is pure.
"""

from app.errors import ValidationError
from app.schemas.equipment import BuildingType, EquipmentStatus

WAREHOUSE_STATUSES = frozenset({
    EquipmentStatus.STORED,
    EquipmentStatus.MAINTENANCE,
    EquipmentStatus.REPLACED,
})
USAGE_STATUSES = frozenset({EquipmentStatus.IN_USE, EquipmentStatus.NEED_REPLACEMENT})

# statuses allowed to leave the warehouse
TRANSFERABLE_FROM_WAREHOUSE = frozenset({EquipmentStatus.STORED, EquipmentStatus.MAINTENANCE})

_RETURN_TO_WAREHOUSE = {
    EquipmentStatus.IN_USE: EquipmentStatus.STORED,
    EquipmentStatus.NEED_REPLACEMENT: EquipmentStatus.REPLACED,
}


def eligible_statuses_for(building_type: BuildingType | str) -> frozenset[EquipmentStatus]:
    if BuildingType(building_type) == BuildingType.WAREHOUSE:
        return WAREHOUSE_STATUSES
    return USAGE_STATUSES


def is_valid_status(status: EquipmentStatus | str, building_type: BuildingType | str) -> bool:
    return EquipmentStatus(status) in eligible_statuses_for(building_type)


def compute_status_on_transfer(
    current: EquipmentStatus | str,
    from_type: BuildingType | str,
    to_type: BuildingType | str,
) -> EquipmentStatus:
    current = EquipmentStatus(current)
    leaving = BuildingType(from_type) == BuildingType.WAREHOUSE
    arriving = BuildingType(to_type) == BuildingType.WAREHOUSE

    if leaving and not arriving:
        # replaced items never get here past check_transfer_eligible
        if current in TRANSFERABLE_FROM_WAREHOUSE:
            return EquipmentStatus.IN_USE
        return current
    if arriving and not leaving:
        return _RETURN_TO_WAREHOUSE.get(current, current)
    return current


def can_leave(current: EquipmentStatus | str, from_type: BuildingType | str) -> bool:
    if BuildingType(from_type) != BuildingType.WAREHOUSE:
        return True
    return EquipmentStatus(current) in TRANSFERABLE_FROM_WAREHOUSE


def check_transfer_eligible(current: EquipmentStatus | str, from_type: BuildingType | str) -> None:
    if not can_leave(current, from_type):
        raise ValidationError(
            f"Equipment with status '{EquipmentStatus(current)}' cannot be moved out of the warehouse",
            {"status": str(EquipmentStatus(current))},
        )
