from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from app.repositories.equipment_repo import EquipmentRepository
from app.repositories.room_repo import RoomRepository
from app.schemas.equipment import BuildingType
from app.services.location_catalog import CatalogRoom, catalog


@dataclass
class RoomListViewModel:
    rooms: list[dict] = field(default_factory=list)

    @classmethod
    async def load(
        cls,
        session: AsyncSession,
        building_type: BuildingType | None = None,
        query: str | None = None,
    ) -> "RoomListViewModel":
        if query:
            rooms = catalog.search_by_name_prefix(query, building_type)
        elif building_type:
            rooms = catalog.find_by_building_type(building_type)
        else:
            rooms = catalog.rooms

        counts = await RoomRepository(session).get_equipment_counts()
        return cls(rooms=[
            {
                "id": r.id,
                "name": r.name,
                "building_type": r.building_type,
                "equipment_count": counts.get(r.id, 0),
            }
            for r in rooms
        ])


@dataclass
class RoomDetailViewModel:
    room: CatalogRoom | None = None
    equipment: list = field(default_factory=list)

    @classmethod
    async def load(cls, session: AsyncSession, room_id: str) -> "RoomDetailViewModel":
        room = catalog.find_by_id(room_id)
        if not room:
            return cls()

        equipment = await EquipmentRepository(session).get_by_room(room_id)
        return cls(room=room, equipment=equipment)
