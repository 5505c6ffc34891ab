from pydantic import BaseModel

from app.schemas.equipment import BuildingType, EquipmentOut


class RoomOut(BaseModel):
    id: str
    name: str
    building_type: BuildingType

    model_config = {"from_attributes": True}


class RoomSummaryOut(RoomOut):
    equipment_count: int = 0


class RoomDetailOut(RoomOut):
    equipment: list[EquipmentOut] = []
