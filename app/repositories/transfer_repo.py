from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.transfer import TransferRecord
from app.repositories.base import BaseRepository


class TransferRepository(BaseRepository[TransferRecord]):
    def __init__(self, session: AsyncSession):
        super().__init__(session, TransferRecord)

    async def record(
        self,
        equipment_id: str,
        from_room_id: str,
        to_room_id: str,
        previous_status: str,
        new_status: str,
        transferred_at: datetime,
    ) -> TransferRecord:
        record = TransferRecord(
            equipment_id=equipment_id,
            from_room_id=from_room_id,
            to_room_id=to_room_id,
            previous_status=previous_status,
            new_status=new_status,
            transferred_at=transferred_at,
        )
        self.session.add(record)
        await self.session.flush()
        return record

    async def get_for_equipment(self, equipment_id: str) -> list[TransferRecord]:
        stmt = (
            select(TransferRecord)
            .where(TransferRecord.equipment_id == equipment_id)
            .order_by(TransferRecord.transferred_at, TransferRecord.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
