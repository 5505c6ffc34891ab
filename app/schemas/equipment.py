from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator, model_validator

DATE_IMPORTED_PATTERN = r"^(0[1-9]|1[0-2])/\d{4}$"


class BuildingType(StrEnum):
    WAREHOUSE = "warehouse"
    CLASSROOM = "classroom"
    OFFICE = "office"


class EquipmentStatus(StrEnum):
    STORED = "stored"
    MAINTENANCE = "maintenance"
    REPLACED = "replaced"
    IN_USE = "in-use"
    NEED_REPLACEMENT = "need-replacement"


class DeleteReason(StrEnum):
    BROKEN = "broken"
    OBSOLETE = "obsolete"
    OTHER = "other"


def _not_blank(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


class EquipmentCommon(BaseModel):
    """Fields shared by every item of a batch add."""

    model: str = Field(max_length=255)
    equipment_type: str = Field(max_length=50)
    date_imported: str = Field(pattern=DATE_IMPORTED_PATTERN, examples=["09/2025"])

    @field_validator("model", "equipment_type")
    @classmethod
    def _required(cls, value: str) -> str:
        return _not_blank(value)


class EquipmentBatchCreate(EquipmentCommon):
    serial_numbers: list[str] = Field(min_length=1, max_length=100)


class EquipmentUpdate(BaseModel):
    model: str | None = Field(default=None, max_length=255)
    equipment_type: str | None = Field(default=None, max_length=50)
    serial_number: str | None = Field(default=None, max_length=100)
    date_imported: str | None = Field(default=None, pattern=DATE_IMPORTED_PATTERN)
    status: EquipmentStatus | None = None

    @field_validator("model", "equipment_type", "serial_number")
    @classmethod
    def _strip(cls, value: str | None) -> str | None:
        return None if value is None else _not_blank(value)


class TransferRequest(BaseModel):
    to_room_id: str


class BatchTransferRequest(TransferRequest):
    ids: list[str] = Field(min_length=1)


class DeleteRequest(BaseModel):
    reason: DeleteReason
    note: str | None = None

    @model_validator(mode="after")
    def _note_required_for_other(self):
        if self.reason == DeleteReason.OTHER and not (self.note or "").strip():
            raise ValueError("a note is required when the reason is 'other'")
        return self


class BatchDeleteRequest(DeleteRequest):
    ids: list[str] = Field(min_length=1)


class BatchStatusRequest(BaseModel):
    ids: list[str] = Field(min_length=1)
    status: EquipmentStatus


class EquipmentOut(BaseModel):
    id: str
    model: str
    equipment_type: str
    serial_number: str
    date_imported: str
    status: EquipmentStatus
    room_id: str
    date_added: datetime
    last_updated: datetime
    delete_reason: DeleteReason | None = None
    delete_note: str | None = None

    model_config = {"from_attributes": True}


class TransferOut(BaseModel):
    id: int
    equipment_id: str
    from_room_id: str
    to_room_id: str
    previous_status: EquipmentStatus
    new_status: EquipmentStatus
    transferred_at: datetime

    model_config = {"from_attributes": True}


class TransferResult(BaseModel):
    equipment: list[EquipmentOut]
    transfers: list[TransferOut]


class DeleteBatchOut(BaseModel):
    deleted: list[EquipmentOut]
    skipped_ids: list[str]


class DeletedEquipmentOut(EquipmentOut):
    purge_due_at: datetime
    time_remaining: str


class PurgeOut(BaseModel):
    success: bool
    purged_count: int
    error: str | None = None
    timestamp: datetime


class DeletedItemsOut(BaseModel):
    items: list[DeletedEquipmentOut]
    total: int
    eligible_count: int


class EquipmentDetailOut(EquipmentOut):
    room_name: str | None = None
    building_type: BuildingType | None = None
    transfers: list[TransferOut] = []


class DashboardOut(BaseModel):
    total_equipment: int
    total_rooms: int
    deleted_count: int
    by_status: dict[str, int]
    by_building_type: dict[str, int]
    recent: list[EquipmentOut]

    model_config = {"from_attributes": True}
