from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_session
from app.schemas.equipment import BuildingType
from app.schemas.room import RoomDetailOut, RoomSummaryOut
from app.viewmodels.room_vm import RoomDetailViewModel, RoomListViewModel

router = APIRouter(prefix="/rooms", tags=["rooms"])


@router.get("/", response_model=list[RoomSummaryOut])
async def list_rooms(
    building_type: BuildingType | None = None,
    q: str | None = None,
    session: AsyncSession = Depends(get_session),
):
    vm = await RoomListViewModel.load(session, building_type=building_type, query=q)
    return vm.rooms


@router.get("/{room_id}", response_model=RoomDetailOut)
async def room_detail(room_id: str, session: AsyncSession = Depends(get_session)):
    vm = await RoomDetailViewModel.load(session, room_id)
    if not vm.room:
        raise HTTPException(status_code=404, detail="Room not found")
    return {
        "id": vm.room.id,
        "name": vm.room.name,
        "building_type": vm.room.building_type,
        "equipment": vm.equipment,
    }
