"""HTTP tests for the equipment, room and deleted-items routes."""
import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine

from app.config import settings
from app.main import _migrate_add_columns

NEW_LAPTOPS = {
    "model": "Latitude 5440",
    "equipment_type": "laptop",
    "date_imported": "03/2025",
    "serial_numbers": ["L-1", "L-2"],
}


async def _add(client, **overrides):
    response = await client.post("/equipment/", json={**NEW_LAPTOPS, **overrides})
    assert response.status_code == 201, response.text
    return response.json()


class TestEquipmentRoutes:
    async def test_add_and_list(self, client):
        created = await _add(client)
        assert [e["status"] for e in created] == ["stored", "stored"]

        response = await client.get("/equipment/", params={"q": "l-2"})
        assert [e["serial_number"] for e in response.json()] == ["L-2"]

        response = await client.get("/equipment/", params={"building_type": "classroom"})
        assert response.json() == []

    async def test_duplicate_serials(self, client):
        response = await client.post("/equipment/", json={**NEW_LAPTOPS, "serial_numbers": ["L-1", "L-1"]})
        assert response.status_code == 422
        assert response.json()["errors"] == {"0": "Duplicate serial number", "1": "Duplicate serial number"}

    @pytest.mark.parametrize("date_imported", ["13/2025", "3/2025", "2025-03", ""])
    async def test_bad_import_date(self, client, date_imported):
        response = await client.post("/equipment/", json={**NEW_LAPTOPS, "date_imported": date_imported})
        assert response.status_code == 422

    async def test_blank_model(self, client):
        response = await client.post("/equipment/", json={**NEW_LAPTOPS, "model": "  "})
        assert response.status_code == 422

    async def test_detail_and_edit(self, client):
        first, _ = await _add(client)

        response = await client.patch(f"/equipment/{first['id']}", json={"status": "maintenance"})
        assert response.status_code == 200
        assert response.json()["status"] == "maintenance"

        response = await client.get(f"/equipment/{first['id']}")
        body = response.json()
        assert body["room_name"] == "HON Warehouse"
        assert body["building_type"] == "warehouse"
        assert body["transfers"] == []

    async def test_edit_invalid_status_for_room(self, client):
        first, _ = await _add(client)
        response = await client.patch(f"/equipment/{first['id']}", json={"status": "in-use"})
        assert response.status_code == 422
        assert "status" in response.json()["errors"]

    async def test_unknown_equipment(self, client):
        response = await client.get("/equipment/does-not-exist")
        assert response.status_code == 404

    async def test_transfer_and_history(self, client):
        first, _ = await _add(client)

        response = await client.post(f"/equipment/{first['id']}/transfer", json={"to_room_id": "classroom-1-1"})
        assert response.status_code == 200
        body = response.json()
        assert body["equipment"][0]["status"] == "in-use"
        assert body["transfers"][0]["from_room_id"] == "warehouse-1"

        history = await client.get(f"/equipment/{first['id']}/transfers")
        assert [(t["previous_status"], t["new_status"]) for t in history.json()] == [("stored", "in-use")]

        room = await client.get("/rooms/classroom-1-1")
        assert [e["id"] for e in room.json()["equipment"]] == [first["id"]]

    async def test_transfer_to_unknown_room(self, client):
        first, _ = await _add(client)
        response = await client.post(f"/equipment/{first['id']}/transfer", json={"to_room_id": "roof"})
        assert response.status_code == 404

    async def test_batch_transfer_is_all_or_nothing(self, client):
        first, second = await _add(client)
        await client.patch(f"/equipment/{second['id']}", json={"status": "replaced"})

        response = await client.post(
            "/equipment/transfer", json={"ids": [first["id"], second["id"]], "to_room_id": "office-2-10"}
        )
        assert response.status_code == 422
        assert list(response.json()["errors"]) == [second["id"]]

        detail = await client.get(f"/equipment/{first['id']}")
        assert detail.json()["room_id"] == "warehouse-1"

    async def test_batch_status_rejects_mixed_selection(self, client):
        first, second = await _add(client)
        await client.patch(f"/equipment/{second['id']}", json={"status": "maintenance"})

        response = await client.post(
            "/equipment/status", json={"ids": [first["id"], second["id"]], "status": "replaced"}
        )
        assert response.status_code == 422

    async def test_batch_delete_skips_deployed(self, client):
        first, second = await _add(client)
        await client.post(f"/equipment/{second['id']}/transfer", json={"to_room_id": "office-1-9"})

        response = await client.post(
            "/equipment/delete", json={"ids": [first["id"], second["id"]], "reason": "obsolete"}
        )
        assert response.status_code == 200
        body = response.json()
        assert [e["id"] for e in body["deleted"]] == [first["id"]]
        assert body["skipped_ids"] == [second["id"]]

    async def test_delete_other_needs_note(self, client):
        first, _ = await _add(client)
        response = await client.post(f"/equipment/{first['id']}/delete", json={"reason": "other"})
        assert response.status_code == 422


class TestRoomRoutes:
    async def test_filter_by_building_type(self, client):
        response = await client.get("/rooms/", params={"building_type": "office"})
        rooms = response.json()
        assert len(rooms) == 16
        assert {r["building_type"] for r in rooms} == {"office"}

    async def test_search_and_counts(self, client):
        await _add(client)
        response = await client.get("/rooms/", params={"q": "warehouse"})
        assert response.json() == [
            {"id": "warehouse-1", "name": "HON Warehouse", "building_type": "warehouse", "equipment_count": 2}
        ]

    async def test_unknown_room(self, client):
        response = await client.get("/rooms/lab-1")
        assert response.status_code == 404


class TestDeletedRoutes:
    async def test_countdown_and_cleanup(self, client, clock):
        first, _ = await _add(client)
        await client.post(f"/equipment/{first['id']}/delete", json={"reason": "other", "note": "damaged screen"})

        response = await client.get("/deleted/")
        body = response.json()
        assert body["total"] == 1
        assert body["eligible_count"] == 0
        assert body["items"][0]["time_remaining"] == "3 days remaining"
        assert body["items"][0]["delete_note"] == "damaged screen"

        clock.advance(days=3, seconds=1)
        response = await client.post("/deleted/cleanup")
        assert response.status_code == 200
        assert response.json()["purged_count"] == 1
        assert response.json()["success"] is True

        response = await client.post("/deleted/cleanup")
        assert response.json()["purged_count"] == 0

    async def test_cleanup_requires_secret_when_configured(self, client, monkeypatch):
        monkeypatch.setattr(settings, "cron_secret", "s3cret")

        response = await client.post("/deleted/cleanup")
        assert response.status_code == 401

        response = await client.post("/deleted/cleanup", headers={"Authorization": "Bearer s3cret"})
        assert response.status_code == 200


async def test_dashboard(client):
    first, second = await _add(client)
    await client.post(f"/equipment/{second['id']}/transfer", json={"to_room_id": "classroom-4-2"})
    await client.post(f"/equipment/{first['id']}/delete", json={"reason": "broken"})

    body = (await client.get("/")).json()
    assert body["total_equipment"] == 1
    assert body["deleted_count"] == 1
    assert body["total_rooms"] == 49
    assert body["by_status"] == {"in-use": 1}
    assert body["by_building_type"] == {"classroom": 1}
    assert [e["id"] for e in body["recent"]] == [second["id"]]


async def test_migration_adds_soft_delete_columns():
    engine = create_async_engine("sqlite+aiosqlite://")
    async with engine.begin() as conn:
        await conn.execute(text("CREATE TABLE equipment (id VARCHAR(36) PRIMARY KEY)"))
        await _migrate_add_columns(conn)
        await _migrate_add_columns(conn)
        result = await conn.execute(text("PRAGMA table_info(equipment)"))
        columns = {row[1] for row in result.fetchall()}
    await engine.dispose()
    assert {"delete_reason", "delete_note"} <= columns
