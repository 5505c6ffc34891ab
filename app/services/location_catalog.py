from dataclasses import dataclass

from app.schemas.equipment import BuildingType

BUILDING_PREFIX = "HON"
FLOORS = 4
ROOMS_PER_FLOOR = 12
CLASSROOMS_PER_FLOOR = 8  # the rest of each floor is offices


@dataclass(frozen=True)
class CatalogRoom:
    id: str
    name: str
    building_type: BuildingType

    @property
    def is_warehouse(self) -> bool:
        return self.building_type == BuildingType.WAREHOUSE


def generate_building_rooms() -> list[CatalogRoom]:
    """Build the HON room list: one warehouse, then floors of classrooms and offices."""
    rooms = [CatalogRoom("warehouse-1", f"{BUILDING_PREFIX} Warehouse", BuildingType.WAREHOUSE)]
    for floor in range(1, FLOORS + 1):
        for number in range(1, ROOMS_PER_FLOOR + 1):
            building_type = (
                BuildingType.CLASSROOM if number <= CLASSROOMS_PER_FLOOR else BuildingType.OFFICE
            )
            rooms.append(CatalogRoom(
                id=f"{building_type}-{floor}-{number}",
                name=f"{BUILDING_PREFIX} {floor}{number:02d}",
                building_type=building_type,
            ))
    return rooms


class LocationCatalog:
    """Read-only registry of rooms. Lookups return None or [] for no match."""

    def __init__(self, rooms: list[CatalogRoom]):
        warehouses = [r for r in rooms if r.is_warehouse]
        if len(warehouses) != 1:
            raise ValueError(f"expected exactly one warehouse room, got {len(warehouses)}")
        self._rooms = list(rooms)
        self._by_id = {r.id: r for r in rooms}
        self.warehouse = warehouses[0]

    @classmethod
    def default(cls) -> "LocationCatalog":
        return cls(generate_building_rooms())

    @property
    def rooms(self) -> list[CatalogRoom]:
        return list(self._rooms)

    def find_by_id(self, room_id: str) -> CatalogRoom | None:
        return self._by_id.get(room_id)

    def find_by_building_type(self, building_type: BuildingType) -> list[CatalogRoom]:
        return [r for r in self._rooms if r.building_type == building_type]

    def search_by_name_prefix(
        self, query: str, building_type: BuildingType | None = None
    ) -> list[CatalogRoom]:
        # matches anywhere in the name, not only at the start
        needle = query.upper()
        return [
            r for r in self._rooms
            if needle in r.name.upper()
            and (building_type is None or r.building_type == building_type)
        ]


catalog = LocationCatalog.default()
