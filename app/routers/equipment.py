from fastapi import APIRouter, Depends

from app.dependencies import get_lifecycle
from app.schemas.equipment import (
    BatchDeleteRequest,
    BatchStatusRequest,
    BatchTransferRequest,
    BuildingType,
    DeleteBatchOut,
    DeleteRequest,
    EquipmentBatchCreate,
    EquipmentDetailOut,
    EquipmentOut,
    EquipmentStatus,
    EquipmentUpdate,
    TransferOut,
    TransferRequest,
    TransferResult,
)
from app.services.lifecycle import EquipmentLifecycle
from app.viewmodels.equipment_vm import EquipmentDetailViewModel

router = APIRouter(prefix="/equipment", tags=["equipment"])


@router.get("/", response_model=list[EquipmentOut])
async def list_equipment(
    q: str | None = None,
    status: EquipmentStatus | None = None,
    building_type: BuildingType | None = None,
    lifecycle: EquipmentLifecycle = Depends(get_lifecycle),
):
    return await lifecycle.search(query=q, status=status, building_type=building_type)


@router.post("/", response_model=list[EquipmentOut], status_code=201)
async def add_equipment(data: EquipmentBatchCreate, lifecycle: EquipmentLifecycle = Depends(get_lifecycle)):
    return await lifecycle.create(data, data.serial_numbers)


@router.post("/transfer", response_model=TransferResult)
async def transfer_many(data: BatchTransferRequest, lifecycle: EquipmentLifecycle = Depends(get_lifecycle)):
    moved, records = await lifecycle.transfer_batch(data.ids, data.to_room_id)
    return {"equipment": moved, "transfers": records}


@router.post("/delete", response_model=DeleteBatchOut)
async def delete_many(data: BatchDeleteRequest, lifecycle: EquipmentLifecycle = Depends(get_lifecycle)):
    result = await lifecycle.delete_batch(data.ids, data.reason, data.note)
    return {"deleted": result.deleted, "skipped_ids": result.skipped_ids}


@router.post("/status", response_model=list[EquipmentOut])
async def change_status(data: BatchStatusRequest, lifecycle: EquipmentLifecycle = Depends(get_lifecycle)):
    return await lifecycle.change_status_batch(data.ids, data.status)


@router.get("/{equipment_id}", response_model=EquipmentDetailOut)
async def equipment_detail(equipment_id: str, lifecycle: EquipmentLifecycle = Depends(get_lifecycle)):
    vm = await EquipmentDetailViewModel.load(lifecycle, equipment_id)
    out = EquipmentDetailOut.model_validate(vm.equipment)
    if vm.room:
        out.room_name = vm.room.name
        out.building_type = vm.room.building_type
    out.transfers = [TransferOut.model_validate(t) for t in vm.transfers]
    return out


@router.patch("/{equipment_id}", response_model=EquipmentOut)
async def edit_equipment(
    equipment_id: str,
    data: EquipmentUpdate,
    lifecycle: EquipmentLifecycle = Depends(get_lifecycle),
):
    return await lifecycle.edit(equipment_id, data)


@router.post("/{equipment_id}/transfer", response_model=TransferResult)
async def transfer_one(
    equipment_id: str,
    data: TransferRequest,
    lifecycle: EquipmentLifecycle = Depends(get_lifecycle),
):
    item, record = await lifecycle.transfer(equipment_id, data.to_room_id)
    return {"equipment": [item], "transfers": [record]}


@router.get("/{equipment_id}/transfers", response_model=list[TransferOut])
async def transfer_history(equipment_id: str, lifecycle: EquipmentLifecycle = Depends(get_lifecycle)):
    return await lifecycle.transfer_history(equipment_id)


@router.post("/{equipment_id}/delete", response_model=EquipmentOut)
async def delete_one(
    equipment_id: str,
    data: DeleteRequest,
    lifecycle: EquipmentLifecycle = Depends(get_lifecycle),
):
    return await lifecycle.delete(equipment_id, data.reason, data.note)
