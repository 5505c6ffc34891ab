"""Equipment lifecycle: active -> soft-deleted -> purged.

Every mutation goes through ``EquipmentLifecycle`` so the status rules in
``status_policy`` are applied in one place. Each public write validates the
whole request first and then commits in a single transaction; the only
exception is ``purge_expired``, which commits chunk by chunk and reports how
far it got.
"""

import logging
import uuid
from collections import Counter
from collections.abc import Callable, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.errors import NotFoundError, StoreError, ValidationError
from app.models.equipment import Equipment
from app.models.transfer import TransferRecord
from app.repositories.equipment_repo import EquipmentRepository
from app.repositories.transfer_repo import TransferRepository
from app.schemas.equipment import (
    BuildingType,
    DeleteReason,
    EquipmentCommon,
    EquipmentStatus,
    EquipmentUpdate,
)
from app.services import status_policy
from app.services.location_catalog import CatalogRoom, LocationCatalog, catalog as default_catalog
from app.services.retention import RetentionPolicy, policy_from_settings, select_expired

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass
class DeleteBatchResult:
    deleted: list[Equipment] = field(default_factory=list)
    skipped_ids: list[str] = field(default_factory=list)


@dataclass
class PurgeResult:
    purged_count: int = 0
    error: str | None = None


def _unique(ids: Sequence[str]) -> list[str]:
    return list(dict.fromkeys(ids))


class EquipmentLifecycle:
    def __init__(
        self,
        session: AsyncSession,
        catalog: LocationCatalog | None = None,
        policy: RetentionPolicy | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.session = session
        self.catalog = catalog or default_catalog
        self.policy = policy or policy_from_settings(settings)
        self.clock = clock
        self.equipment = EquipmentRepository(session)
        self.transfers = TransferRepository(session)

    @asynccontextmanager
    async def _transaction(self, action: str):
        try:
            yield
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error("%s failed: %s", action, exc)
            raise StoreError(f"{action} failed: {exc}") from exc

    def _room(self, room_id: str) -> CatalogRoom:
        room = self.catalog.find_by_id(room_id)
        if room is None:
            raise NotFoundError(f"Room {room_id!r} not found")
        return room

    async def _load_many(self, ids: Sequence[str]) -> list[Equipment]:
        ids = _unique(ids)
        if not ids:
            raise ValidationError("No equipment selected")
        found = {item.id: item for item in await self.equipment.get_many(ids)}
        missing = [i for i in ids if i not in found]
        if missing:
            raise NotFoundError(f"Equipment not found: {', '.join(missing)}")
        return [found[i] for i in ids]

    async def get(self, equipment_id: str) -> Equipment:
        item = await self.equipment.get(equipment_id)
        if item is None:
            raise NotFoundError(f"Equipment {equipment_id!r} not found")
        return item

    async def _get_active(self, equipment_id: str) -> Equipment:
        item = await self.get(equipment_id)
        if item.is_deleted:
            raise ValidationError(f"Equipment {equipment_id!r} is deleted")
        return item

    async def search(
        self,
        query: str | None = None,
        status: EquipmentStatus | None = None,
        building_type: BuildingType | None = None,
    ) -> list[Equipment]:
        return await self.equipment.search(query=query, status=status, building_type=building_type)

    async def create(self, common: EquipmentCommon, serial_numbers: Sequence[str]) -> list[Equipment]:
        """Add a batch of items sharing model, type and import date.

        The batch is rejected as a whole if any serial number is blank,
        repeated within the batch or already in use; ``errors`` is keyed by
        the index of each offending serial.
        """
        if not serial_numbers:
            raise ValidationError("At least one serial number is required")
        if len(serial_numbers) > settings.max_batch_size:
            raise ValidationError(f"Cannot add more than {settings.max_batch_size} items at once")

        serials = [s.strip() for s in serial_numbers]
        counts = Counter(serials)
        existing = await self.equipment.find_existing_serials([s for s in serials if s])

        errors = {}
        for index, serial in enumerate(serials):
            if not serial:
                errors[str(index)] = "Serial number is required"
            elif counts[serial] > 1:
                errors[str(index)] = "Duplicate serial number"
            elif serial in existing:
                errors[str(index)] = "Serial number already exists"
        if errors:
            raise ValidationError("Some serial numbers are invalid", errors)

        now = self.clock()
        warehouse = self.catalog.warehouse
        rows = [
            {
                "id": str(uuid.uuid4()),
                "model": common.model,
                "equipment_type": common.equipment_type,
                "serial_number": serial,
                "date_imported": common.date_imported,
                "status": str(EquipmentStatus.STORED),
                "room_id": warehouse.id,
                "date_added": now,
                "last_updated": now,
            }
            for serial in serials
        ]
        async with self._transaction("add equipment"):
            items = await self.equipment.insert_many(rows)
        logger.info("Added %d %s item(s) to %s", len(items), common.equipment_type, warehouse.name)
        return items

    async def edit(self, equipment_id: str, data: EquipmentUpdate) -> Equipment:
        item = await self._get_active(equipment_id)
        fields = data.model_dump(exclude_unset=True, exclude_none=True)

        serial = fields.get("serial_number")
        if serial and serial != item.serial_number:
            if await self.equipment.find_existing_serials([serial], exclude_id=item.id):
                raise ValidationError(
                    "Serial number already exists", {"serial_number": "Serial number already exists"}
                )

        if "status" in fields:
            room = self._room(item.room_id)
            if not status_policy.is_valid_status(fields["status"], room.building_type):
                allowed = ", ".join(sorted(status_policy.eligible_statuses_for(room.building_type)))
                raise ValidationError(
                    f"Status '{fields['status']}' is not valid in a {room.building_type}",
                    {"status": f"Allowed: {allowed}"},
                )
            fields["status"] = str(fields["status"])

        fields["last_updated"] = self.clock()
        async with self._transaction("edit equipment"):
            updated = await self.equipment.update(item.id, **fields)
        logger.info("Edited equipment %s", item.id)
        return updated

    def _plan_transfer(self, item: Equipment, dest: CatalogRoom) -> tuple[CatalogRoom, EquipmentStatus]:
        if item.is_deleted:
            raise ValidationError(f"Equipment {item.id!r} is deleted")
        source = self._room(item.room_id)
        if source.id == dest.id:
            raise ValidationError(f"Equipment is already in {dest.name}")
        status_policy.check_transfer_eligible(item.status, source.building_type)
        new_status = status_policy.compute_status_on_transfer(
            item.status, source.building_type, dest.building_type
        )
        return source, new_status

    async def _apply_transfer(
        self,
        item: Equipment,
        source: CatalogRoom,
        dest: CatalogRoom,
        new_status: EquipmentStatus,
        now: datetime,
    ) -> tuple[Equipment, TransferRecord]:
        previous_status = item.status
        updated = await self.equipment.update(
            item.id, room_id=dest.id, status=str(new_status), last_updated=now
        )
        record = await self.transfers.record(
            equipment_id=item.id,
            from_room_id=source.id,
            to_room_id=dest.id,
            previous_status=previous_status,
            new_status=str(new_status),
            transferred_at=now,
        )
        return updated, record

    async def transfer(self, equipment_id: str, to_room_id: str) -> tuple[Equipment, TransferRecord]:
        dest = self._room(to_room_id)
        item = await self.get(equipment_id)
        source, new_status = self._plan_transfer(item, dest)

        async with self._transaction("transfer equipment"):
            updated, record = await self._apply_transfer(item, source, dest, new_status, self.clock())
        logger.info(
            "Transferred %s from %s to %s (%s -> %s)",
            item.id, source.name, dest.name, record.previous_status, record.new_status,
        )
        return updated, record

    async def transfer_batch(
        self, equipment_ids: Sequence[str], to_room_id: str
    ) -> tuple[list[Equipment], list[TransferRecord]]:
        """Move every item or none of them.

        Each item is checked as for a single transfer; if any fails, a
        ``ValidationError`` keyed by equipment id is raised before anything
        is written.
        """
        dest = self._room(to_room_id)
        items = await self._load_many(equipment_ids)

        plans, errors = [], {}
        for item in items:
            try:
                plans.append((item, *self._plan_transfer(item, dest)))
            except ValidationError as exc:
                errors[item.id] = exc.message
        if errors:
            raise ValidationError(f"{len(errors)} item(s) cannot be transferred to {dest.name}", errors)

        now = self.clock()
        moved, records = [], []
        async with self._transaction("transfer equipment batch"):
            for item, source, new_status in plans:
                updated, record = await self._apply_transfer(item, source, dest, new_status, now)
                moved.append(updated)
                records.append(record)
        logger.info("Transferred %d item(s) to %s", len(moved), dest.name)
        return moved, records

    async def transfer_history(self, equipment_id: str) -> list[TransferRecord]:
        return await self.transfers.get_for_equipment(equipment_id)

    @staticmethod
    def _check_delete_reason(reason: DeleteReason | str, note: str | None) -> tuple[DeleteReason, str | None]:
        try:
            reason = DeleteReason(reason)
        except ValueError:
            raise ValidationError(f"Unknown delete reason {reason!r}", {"reason": "Invalid reason"}) from None
        note = (note or "").strip() or None
        if reason == DeleteReason.OTHER and note is None:
            raise ValidationError(
                "A note is required when the reason is 'other'", {"note": "Note is required"}
            )
        return reason, note

    async def delete(self, equipment_id: str, reason: DeleteReason | str, note: str | None = None) -> Equipment:
        reason, note = self._check_delete_reason(reason, note)
        item = await self._get_active(equipment_id)
        if not self._room(item.room_id).is_warehouse:
            raise ValidationError("Only warehouse items can be deleted; transfer it back first")

        async with self._transaction("delete equipment"):
            deleted = await self.equipment.update(
                item.id, delete_reason=str(reason), delete_note=note, last_updated=self.clock()
            )
        logger.info("Soft-deleted %s (%s)", item.id, reason)
        return deleted

    async def delete_batch(
        self, equipment_ids: Sequence[str], reason: DeleteReason | str, note: str | None = None
    ) -> DeleteBatchResult:
        """Soft-delete the warehouse items of a selection.

        Items outside the warehouse, or already deleted, are left alone and
        reported in ``skipped_ids``.
        """
        reason, note = self._check_delete_reason(reason, note)
        items = await self._load_many(equipment_ids)

        result = DeleteBatchResult()
        eligible = []
        for item in items:
            if item.is_deleted or not self._room(item.room_id).is_warehouse:
                result.skipped_ids.append(item.id)
            else:
                eligible.append(item)

        if eligible:
            now = self.clock()
            async with self._transaction("delete equipment batch"):
                for item in eligible:
                    result.deleted.append(await self.equipment.update(
                        item.id, delete_reason=str(reason), delete_note=note, last_updated=now
                    ))
        logger.info("Soft-deleted %d item(s), skipped %d", len(result.deleted), len(result.skipped_ids))
        return result

    async def change_status_batch(
        self, equipment_ids: Sequence[str], new_status: EquipmentStatus | str
    ) -> list[Equipment]:
        """Set one status on items that currently share a status.

        Mixed selections are rejected whole.
        """
        new_status = EquipmentStatus(new_status)
        items = await self._load_many(equipment_ids)

        deleted = {item.id: "Equipment is deleted" for item in items if item.is_deleted}
        if deleted:
            raise ValidationError("Deleted equipment cannot change status", deleted)

        if len({item.status for item in items}) > 1:
            raise ValidationError(
                "Selected items have different statuses",
                {item.id: item.status for item in items},
            )

        errors = {}
        for item in items:
            room = self._room(item.room_id)
            if not status_policy.is_valid_status(new_status, room.building_type):
                errors[item.id] = f"Status '{new_status}' is not valid in a {room.building_type}"
        if errors:
            raise ValidationError(f"Status '{new_status}' is not allowed here", errors)

        now = self.clock()
        updated = []
        async with self._transaction("change equipment status"):
            for item in items:
                updated.append(await self.equipment.update(item.id, status=str(new_status), last_updated=now))
        logger.info("Changed status of %d item(s) to %s", len(updated), new_status)
        return updated

    async def list_soft_deleted(self) -> list[Equipment]:
        return await self.equipment.list_soft_deleted()

    async def purge_expired(self, policy: RetentionPolicy | None = None) -> PurgeResult:
        """Permanently remove soft-deleted items whose retention has run out.

        Never raises for store failures: the result carries the number of
        rows removed before the failure and the error text.
        """
        policy = policy or self.policy
        try:
            candidates = await self.equipment.list_soft_deleted()
        except SQLAlchemyError as exc:
            logger.error("Loading deleted equipment failed: %s", exc)
            return PurgeResult(error=str(exc))

        expired = [item.id for item in select_expired(candidates, policy, self.clock())]
        chunk_size = max(settings.purge_chunk_size, 1)
        purged = 0
        for start in range(0, len(expired), chunk_size):
            chunk = expired[start:start + chunk_size]
            try:
                removed = await self.equipment.delete_permanently(chunk)
                await self.session.commit()
            except SQLAlchemyError as exc:
                await self.session.rollback()
                logger.error("Purge stopped after %d item(s): %s", purged, exc)
                return PurgeResult(purged_count=purged, error=str(exc))
            purged += removed

        if purged:
            logger.info("Purged %d expired item(s)", purged)
        return PurgeResult(purged_count=purged)
