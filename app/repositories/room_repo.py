import logging
from collections.abc import Iterable

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.equipment import Equipment
from app.models.room import Room
from app.repositories.base import BaseRepository
from app.services.location_catalog import CatalogRoom

logger = logging.getLogger(__name__)


class RoomRepository(BaseRepository[Room]):
    def __init__(self, session: AsyncSession):
        super().__init__(session, Room)

    async def get_by_name(self, name: str) -> Room | None:
        stmt = select(Room).where(Room.name == name)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def upsert_rooms(self, rooms: Iterable[CatalogRoom]) -> None:
        """Insert catalog rooms, matching existing rows by name."""
        added = 0
        for room in rooms:
            existing = await self.get_by_name(room.name)
            if existing is None:
                self.session.add(Room(id=room.id, name=room.name, building_type=str(room.building_type)))
                added += 1
            elif existing.building_type != room.building_type:
                existing.building_type = str(room.building_type)
        await self.session.flush()
        if added:
            logger.info("Added %d rooms to locations", added)

    async def get_equipment_counts(self) -> dict[str, int]:
        stmt = (
            select(Room.id, func.count(Equipment.id))
            .outerjoin(
                Equipment,
                (Room.id == Equipment.room_id) & Equipment.delete_reason.is_(None),
            )
            .group_by(Room.id)
        )
        result = await self.session.execute(stmt)
        return {row[0]: row[1] for row in result.all()}
