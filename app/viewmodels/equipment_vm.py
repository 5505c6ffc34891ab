from dataclasses import dataclass, field

from app.models.equipment import Equipment
from app.services.lifecycle import EquipmentLifecycle
from app.services.location_catalog import CatalogRoom


@dataclass
class EquipmentDetailViewModel:
    equipment: Equipment
    room: CatalogRoom | None = None
    transfers: list = field(default_factory=list)

    @classmethod
    async def load(cls, lifecycle: EquipmentLifecycle, equipment_id: str) -> "EquipmentDetailViewModel":
        item = await lifecycle.get(equipment_id)
        return cls(
            equipment=item,
            room=lifecycle.catalog.find_by_id(item.room_id),
            transfers=await lifecycle.transfer_history(equipment_id),
        )
