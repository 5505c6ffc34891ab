import os
from collections.abc import AsyncIterator
from datetime import UTC, datetime, timedelta

os.environ.setdefault("INVENTORY_DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("INVENTORY_CRON_SECRET", "")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.database import get_session  # noqa: E402
from app.dependencies import get_lifecycle  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Base  # noqa: E402
from app.repositories.room_repo import RoomRepository  # noqa: E402
from app.schemas.equipment import EquipmentCommon  # noqa: E402
from app.services.lifecycle import EquipmentLifecycle  # noqa: E402
from app.services.location_catalog import catalog  # noqa: E402
from app.services.retention import FixedWindowPolicy  # noqa: E402

START = datetime(2025, 10, 15, 10, 0, tzinfo=UTC)  # a Wednesday


class FakeClock:
    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture()
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with async_sessionmaker(engine)() as session:
        await RoomRepository(session).upsert_rooms(catalog.rooms)
        await session.commit()
    yield engine
    await engine.dispose()


@pytest.fixture()
async def session(engine) -> AsyncIterator[AsyncSession]:
    async with async_sessionmaker(engine, expire_on_commit=False)() as session:
        yield session


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def lifecycle(session, clock) -> EquipmentLifecycle:
    return EquipmentLifecycle(session, catalog=catalog, policy=FixedWindowPolicy(days=3), clock=clock)


@pytest.fixture()
async def client(session, lifecycle) -> AsyncIterator[AsyncClient]:
    async def _session():
        yield session

    app.dependency_overrides[get_session] = _session
    app.dependency_overrides[get_lifecycle] = lambda: lifecycle
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture()
def laptop() -> EquipmentCommon:
    return EquipmentCommon(model="ThinkPad T14", equipment_type="laptop", date_imported="09/2025")
