import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from app.config import settings
from app.database import async_session, engine
from app.errors import NotFoundError, StoreError, ValidationError
from app.models import Base
from app.repositories.room_repo import RoomRepository
from app.routers import dashboard, deleted, equipment, rooms
from app.services.cleanup_scheduler import start_cleanup_scheduler
from app.services.location_catalog import catalog

logger = logging.getLogger(__name__)


async def _migrate_add_columns(conn):
    """Add missing columns to existing SQLite tables. Safe to run repeatedly."""
    # databases created before soft delete existed lack these
    migrations = [
        ("equipment", "delete_reason", "VARCHAR(20)", None),
        ("equipment", "delete_note", "TEXT", None),
    ]

    for table, column, col_type, default in migrations:
        result = await conn.execute(text(f"PRAGMA table_info({table})"))
        existing = {row[1] for row in result.fetchall()}
        if column not in existing:
            default_clause = f" DEFAULT {default!r}" if default is not None else ""
            await conn.execute(text(
                f"ALTER TABLE {table} ADD COLUMN {column} {col_type}{default_clause}"
            ))
            logger.info("Added column %s.%s", table, column)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.database_url.startswith("sqlite"):
        settings.data_dir.mkdir(parents=True, exist_ok=True)

    # create tables on startup
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    if engine.dialect.name == "sqlite":
        async with engine.begin() as conn:
            await _migrate_add_columns(conn)

    # mirror the room catalog into the locations table
    async with async_session() as session:
        await RoomRepository(session).upsert_rooms(catalog.rooms)
        await session.commit()

    cleanup_task = start_cleanup_scheduler() if settings.cleanup_enabled else None

    yield

    if cleanup_task:
        cleanup_task.cancel()
    await engine.dispose()


app = FastAPI(title=settings.app_name, lifespan=lifespan)


@app.exception_handler(ValidationError)
async def _validation_error(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"detail": exc.message, "errors": exc.errors})


@app.exception_handler(NotFoundError)
async def _not_found(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": exc.message})


@app.exception_handler(StoreError)
async def _store_error(request: Request, exc: StoreError):
    return JSONResponse(
        status_code=503, content={"detail": exc.message, "completed": exc.completed}
    )


# routers
app.include_router(dashboard.router)
app.include_router(rooms.router)
app.include_router(equipment.router)
app.include_router(deleted.router)
