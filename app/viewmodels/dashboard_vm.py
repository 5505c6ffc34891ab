from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from app.repositories.equipment_repo import EquipmentRepository
from app.services.location_catalog import catalog


@dataclass
class DashboardViewModel:
    total_equipment: int = 0
    total_rooms: int = 0
    deleted_count: int = 0
    by_status: dict[str, int] = field(default_factory=dict)
    by_building_type: dict[str, int] = field(default_factory=dict)
    recent: list = field(default_factory=list)

    @classmethod
    async def load(cls, session: AsyncSession) -> "DashboardViewModel":
        repo = EquipmentRepository(session)
        stats = await repo.get_stats()
        recent = await repo.search(limit=8)

        return cls(
            total_equipment=stats["total_equipment"],
            total_rooms=len(catalog.rooms),
            deleted_count=stats["deleted_count"],
            by_status=stats["by_status"],
            by_building_type=stats["by_building_type"],
            recent=recent,
        )
