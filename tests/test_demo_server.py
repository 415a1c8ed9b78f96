"""Tests for solar_dashboard.demo_server, driven through the real RestClient."""

from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
import pytest
import pytest_asyncio
from aiohttp import test_utils

from solar_dashboard.batch_viewer import BatchViewer
from solar_dashboard.communication import RestClient
from solar_dashboard.config import DashboardConfig
from solar_dashboard.control_panel import ControlPanel
from solar_dashboard.demo import DEMO_BATCHES, DEMO_SCHEDULE
from solar_dashboard.demo_server import DemoBackend
from solar_dashboard.models import ScheduleEntry, Weekday
from solar_dashboard.schedule_editor import ScheduleEditor


@pytest_asyncio.fixture()
async def server() -> AsyncIterator[test_utils.TestServer]:
    srv = test_utils.TestServer(DemoBackend().app)
    await srv.start_server()
    yield srv
    await srv.close()


@pytest.fixture()
def demo_config(server: test_utils.TestServer) -> DashboardConfig:
    return DashboardConfig(server_url=str(server.make_url("")).rstrip("/"))


@pytest_asyncio.fixture()
async def client(demo_config: DashboardConfig) -> AsyncIterator[RestClient]:
    rest = RestClient(demo_config)
    yield rest
    await rest.close()


@pytest.mark.asyncio
async def test_dashboard_snapshot(client: RestClient) -> None:
    status = await client.fetch_dashboard()

    assert status.is_cleaner_on is False
    assert len(status.on_off_history) == 5
    assert status.last_cleaning_time == "2 hours ago"
    assert status.images_captured == sum(len(b["images"]) for b in DEMO_BATCHES)


@pytest.mark.asyncio
async def test_toggle_updates_state_and_history(client: RestClient) -> None:
    result = await client.toggle_cleaner(True)
    assert result.success is True
    assert result.new_state is True

    status = await client.fetch_dashboard()
    assert status.is_cleaner_on is True
    assert len(status.on_off_history) == 5
    assert status.on_off_history[-1].state is True


@pytest.mark.asyncio
async def test_set_active(client: RestClient) -> None:
    result = await client.set_active(True)
    assert result.new_active_state is True
    assert (await client.fetch_dashboard()).is_active is True


@pytest.mark.asyncio
async def test_batches_paging_and_search(client: RestClient) -> None:
    first = await client.fetch_batches(page=1)
    assert first.total_count == len(DEMO_BATCHES)
    assert [b.id for b in first.batches] == ["1", "2", "3", "4", "5"]

    last = await client.fetch_batches(page=3)
    assert [b.id for b in last.batches] == ["11", "12"]

    found = await client.fetch_batches(page=1, search="batch 2023-05-03")
    assert found.total_count == 1
    assert found.batches[0].damage_count == 7
    assert len(found.batches[0].images) == 3


@pytest.mark.asyncio
async def test_schedule_crud(client: RestClient) -> None:
    entries = await client.fetch_schedule()
    assert [e.to_wire() for e in entries] == DEMO_SCHEDULE

    added = await client.add_schedule_item("Sunday", "07:00")
    assert added.new_schedule_item == ScheduleEntry(day=Weekday.SUNDAY, time="07:00")

    entries = await client.fetch_schedule()
    entries[0] = ScheduleEntry(day=Weekday.TUESDAY, time="05:45")
    updated = await client.replace_schedule(entries)
    assert updated.success is True
    assert updated.updated_schedule[0].day is Weekday.TUESDAY

    deleted = await client.delete_schedule_item(1)
    assert deleted.success is True
    remaining = await client.fetch_schedule()
    assert [e.day for e in remaining] == [Weekday.TUESDAY, Weekday.SATURDAY, Weekday.SUNDAY]


@pytest.mark.asyncio
async def test_delete_out_of_range_is_404(client: RestClient) -> None:
    with pytest.raises(httpx.HTTPStatusError) as info:
        await client.delete_schedule_item(99)
    assert info.value.response.status_code == 404


@pytest.mark.asyncio
async def test_bad_bodies_are_400(demo_config: DashboardConfig) -> None:
    async with httpx.AsyncClient(base_url=demo_config.api_base) as raw:
        resp = await raw.post("/cleaner/toggle", json={"state": "yes"})
        assert resp.status_code == 400

        resp = await raw.post(
            "/schedule", content=b"{not json", headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid JSON in request body"}

        resp = await raw.post("/schedule", json={"day": "Someday", "time": "08:00"})
        assert resp.status_code == 400


@pytest.mark.asyncio
async def test_regions_against_demo_backend(client: RestClient, demo_config: DashboardConfig) -> None:
    """The three regions drive the demo backend end to end."""
    panel = ControlPanel(client, demo_config)
    await panel.load()
    await panel.toggle_cleaner()
    assert panel.status.is_cleaner_on is True
    assert panel.error is None

    viewer = BatchViewer(client, demo_config)
    await viewer.load()
    assert await viewer.next_page() is True
    assert await viewer.next_page() is True
    assert viewer.has_next is False
    assert viewer.showing_range() == (11, 12, 12)

    editor = ScheduleEditor(client)
    await editor.load()
    editor.start_editing(2)
    editor.edit_time = "11:15"
    assert await editor.save_edit() is True
    assert editor.entries[2] == ScheduleEntry(day=Weekday.SATURDAY, time="11:15")
    assert await editor.delete(0) is True
    assert len(editor.entries) == 2
