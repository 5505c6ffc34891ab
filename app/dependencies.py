from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_session
from app.services.lifecycle import EquipmentLifecycle


def get_lifecycle(session: AsyncSession = Depends(get_session)) -> EquipmentLifecycle:
    return EquipmentLifecycle(session)
