import asyncio
import logging

from app.config import settings
from app.database import async_session
from app.services.lifecycle import EquipmentLifecycle, PurgeResult

logger = logging.getLogger(__name__)


async def run_cleanup() -> PurgeResult:
    async with async_session() as session:
        result = await EquipmentLifecycle(session).purge_expired()
    if result.error:
        logger.error("Cleanup purged %d item(s) before failing: %s", result.purged_count, result.error)
    else:
        logger.info("Cleanup completed: %d item(s) permanently deleted", result.purged_count)
    return result


async def cleanup_loop(interval_minutes: int | None = None) -> None:
    """Purge expired items forever; runs are serial so they never overlap."""
    interval = (interval_minutes or settings.cleanup_interval_minutes) * 60
    while True:
        try:
            await run_cleanup()
        except Exception:
            logger.exception("Cleanup run failed")
        await asyncio.sleep(interval)


def start_cleanup_scheduler() -> asyncio.Task:
    logger.info("Cleanup scheduler started, every %d minute(s)", settings.cleanup_interval_minutes)
    return asyncio.create_task(cleanup_loop())
