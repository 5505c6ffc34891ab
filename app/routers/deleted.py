import logging

from fastapi import APIRouter, Depends, Header, HTTPException
from fastapi.responses import JSONResponse

from app.config import settings
from app.dependencies import get_lifecycle
from app.schemas.equipment import DeletedEquipmentOut, DeletedItemsOut, EquipmentOut, PurgeOut
from app.services.lifecycle import EquipmentLifecycle
from app.viewmodels.deleted_vm import DeletedItemsViewModel

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/deleted", tags=["deleted"])


@router.get("/", response_model=DeletedItemsOut)
async def deleted_items(lifecycle: EquipmentLifecycle = Depends(get_lifecycle)):
    vm = await DeletedItemsViewModel.load(lifecycle)
    items = [
        DeletedEquipmentOut(
            **EquipmentOut.model_validate(entry["equipment"]).model_dump(),
            purge_due_at=entry["purge_due_at"],
            time_remaining=entry["time_remaining"],
        )
        for entry in vm.items
    ]
    return {"items": items, "total": vm.total, "eligible_count": vm.eligible_count}


@router.post("/cleanup", response_model=PurgeOut)
async def run_cleanup(
    authorization: str | None = Header(default=None),
    lifecycle: EquipmentLifecycle = Depends(get_lifecycle),
):
    """Purge trigger for an external cron job."""
    if settings.cron_secret and authorization != f"Bearer {settings.cron_secret}":
        raise HTTPException(status_code=401, detail="Unauthorized")

    result = await lifecycle.purge_expired()
    body = PurgeOut(
        success=result.error is None,
        purged_count=result.purged_count,
        error=result.error,
        timestamp=lifecycle.clock(),
    )
    if result.error:
        logger.error("Cron cleanup error: %s", result.error)
        return JSONResponse(status_code=500, content=body.model_dump(mode="json"))

    logger.info("Cron cleanup completed: %d item(s) permanently deleted", result.purged_count)
    return body
