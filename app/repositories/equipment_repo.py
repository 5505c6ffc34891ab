from collections.abc import Sequence
from typing import Any

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.equipment import Equipment
from app.models.room import Room
from app.repositories.base import BaseRepository


class EquipmentRepository(BaseRepository[Equipment]):
    def __init__(self, session: AsyncSession):
        super().__init__(session, Equipment)

    async def get_all_equipment(self, include_deleted: bool = False) -> list[Equipment]:
        stmt = select(Equipment).order_by(Equipment.date_added.desc())
        if not include_deleted:
            stmt = stmt.where(Equipment.delete_reason.is_(None))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_room(self, room_id: str) -> list[Equipment]:
        stmt = (
            select(Equipment)
            .where(Equipment.room_id == room_id, Equipment.delete_reason.is_(None))
            .order_by(Equipment.last_updated.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_existing_serials(self, serials: Sequence[str], exclude_id: str | None = None) -> set[str]:
        """Serial numbers from ``serials`` already used by a stored row, soft-deleted ones included."""
        if not serials:
            return set()
        stmt = select(Equipment.serial_number).where(Equipment.serial_number.in_(serials))
        if exclude_id:
            stmt = stmt.where(Equipment.id != exclude_id)
        result = await self.session.execute(stmt)
        return set(result.scalars().all())

    async def insert_many(self, rows: list[dict[str, Any]]) -> list[Equipment]:
        objs = [Equipment(**row) for row in rows]
        self.session.add_all(objs)
        await self.session.flush()
        return objs

    async def search(
        self,
        query: str | None = None,
        status: str | None = None,
        building_type: str | None = None,
        offset: int = 0,
        limit: int = 500,
    ) -> list[Equipment]:
        stmt = select(Equipment).where(Equipment.delete_reason.is_(None))

        if query:
            stmt = stmt.where(
                or_(
                    Equipment.model.ilike(f"%{query}%"),
                    Equipment.equipment_type.ilike(f"%{query}%"),
                    Equipment.serial_number.ilike(f"%{query}%"),
                )
            )
        if status:
            stmt = stmt.where(Equipment.status == status)
        if building_type:
            stmt = stmt.join(Room, Room.id == Equipment.room_id).where(
                Room.building_type == building_type
            )

        stmt = stmt.offset(offset).limit(limit).order_by(Equipment.last_updated.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_soft_deleted(self) -> list[Equipment]:
        stmt = (
            select(Equipment)
            .where(Equipment.delete_reason.is_not(None))
            .order_by(Equipment.last_updated)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete_permanently(self, ids: Sequence[str]) -> int:
        if not ids:
            return 0
        # only soft-deleted rows are ever purged
        stmt = delete(Equipment).where(
            Equipment.id.in_(ids), Equipment.delete_reason.is_not(None)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def get_stats(self) -> dict:
        status_stmt = (
            select(Equipment.status, func.count(Equipment.id))
            .where(Equipment.delete_reason.is_(None))
            .group_by(Equipment.status)
        )
        status_result = await self.session.execute(status_stmt)

        type_stmt = (
            select(Room.building_type, func.count(Equipment.id))
            .join(Room, Room.id == Equipment.room_id)
            .where(Equipment.delete_reason.is_(None))
            .group_by(Room.building_type)
        )
        type_result = await self.session.execute(type_stmt)

        deleted_stmt = select(func.count(Equipment.id)).where(Equipment.delete_reason.is_not(None))
        deleted = (await self.session.execute(deleted_stmt)).scalar_one()

        by_status = {row[0]: row[1] for row in status_result.all()}
        return {
            "total_equipment": sum(by_status.values()),
            "by_status": by_status,
            "by_building_type": {row[0]: row[1] for row in type_result.all()},
            "deleted_count": deleted,
        }
