from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_session
from app.schemas.equipment import DashboardOut
from app.viewmodels.dashboard_vm import DashboardViewModel

router = APIRouter(tags=["dashboard"])


@router.get("/", response_model=DashboardOut)
async def dashboard(session: AsyncSession = Depends(get_session)):
    vm = await DashboardViewModel.load(session)
    return DashboardOut.model_validate(vm)
