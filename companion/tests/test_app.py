"""Tests for ride reminders FastAPI endpoints."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

from modules.ride_reminders import main
from modules.ride_reminders.main import app
from modules.ride_reminders.models import COLOR_TAGS, TRIGGER_KINDS
from modules.ride_reminders.refresh import RideActivityRefresher, build_board
from modules.ride_reminders.tools import ReminderTools
from shared.config import get_settings
from tests.fixtures import STORED_REMINDERS_JSON, make_reminder, riding


@pytest.fixture
async def client():
    """Create an async test client for the FastAPI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def wired(store, fake_redis, settings):
    """Point the module globals at a store backed by the Redis double."""
    fake_redis.data["reminders"] = STORED_REMINDERS_JSON
    refresher = RideActivityRefresher(store, fake_redis, settings)
    tools = ReminderTools(store, refresher)
    with patch.object(main, "tools", tools), patch.object(main, "refresher", refresher), patch.object(
        main, "redis_client", fake_redis
    ):
        yield refresher


# ---------------------------------------------------------------------------
# Health / manifest
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_health_before_startup(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "starting"


@pytest.mark.asyncio
async def test_health_ok(client, wired):
    resp = await client.get("/health")
    assert resp.json() == {"status": "ok", "redis": True}


@pytest.mark.asyncio
async def test_health_degraded(client):
    broken = MagicMock()
    broken.ping = AsyncMock(side_effect=ConnectionError("Redis down"))
    with patch.object(main, "redis_client", broken):
        resp = await client.get("/health")
    assert resp.json() == {"status": "degraded", "redis": False}


@pytest.mark.asyncio
async def test_manifest(client):
    resp = await client.get("/manifest")
    assert resp.status_code == 200
    data = resp.json()
    assert data["module_name"] == "ride_reminders"
    tool_names = {t["name"] for t in data["tools"]}
    assert tool_names == {
        "ride_reminders.list_reminders",
        "ride_reminders.get_reminder",
        "ride_reminders.create_reminder",
        "ride_reminders.update_reminder",
        "ride_reminders.delete_reminder",
        "ride_reminders.get_activity",
        "ride_reminders.preview_display",
    }
    create = next(t for t in data["tools"] if t["name"] == "ride_reminders.create_reminder")
    enums = {p["name"]: p["enum"] for p in create["parameters"] if p["enum"]}
    assert enums == {"trigger": list(TRIGGER_KINDS), "foreground_color": list(COLOR_TAGS)}


# ---------------------------------------------------------------------------
# Execute
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_execute_not_ready(client):
    resp = await client.post("/execute", json={"tool_name": "ride_reminders.list_reminders", "arguments": {}})
    data = resp.json()
    assert data["success"] is False
    assert data["error"] == "Module not ready"


@pytest.mark.asyncio
async def test_execute_create_then_list(client, wired):
    resp = await client.post(
        "/execute",
        json={
            "tool_name": "ride_reminders.create_reminder",
            "arguments": {"name": "Stretch", "interval": 45, "foreground_color": "purple"},
        },
    )
    data = resp.json()
    assert data["success"] is True
    assert data["result"]["reminder"]["id"] == 8

    resp = await client.post("/execute", json={"tool_name": "ride_reminders.list_reminders", "arguments": {}})
    names = [r["name"] for r in resp.json()["result"]["reminders"]]
    assert names == ["Drink", "Eat", "Tire pressure", "Stretch"]


@pytest.mark.asyncio
async def test_execute_validation_error(client, wired, fake_redis):
    resp = await client.post(
        "/execute",
        json={"tool_name": "ride_reminders.create_reminder", "arguments": {"name": "", "interval": "x"}},
    )
    data = resp.json()
    assert data["success"] is False
    assert "name" in data["error"]
    fake_redis.set.assert_not_called()


@pytest.mark.asyncio
async def test_execute_delete(client, wired):
    resp = await client.post(
        "/execute", json={"tool_name": "ride_reminders.delete_reminder", "arguments": {"reminder_id": 3}}
    )
    assert resp.json()["result"] == {"success": True, "deleted_id": 3}


@pytest.mark.asyncio
async def test_execute_update_with_null_clears_interval_float(client, wired):
    resp = await client.post(
        "/execute",
        json={
            "tool_name": "ride_reminders.update_reminder",
            "arguments": {"reminder_id": 3, "interval_float": None},
        },
    )
    reminder = resp.json()["result"]["reminder"]
    assert reminder["intervalFloat"] is None
    assert reminder["name"] == "Eat"


@pytest.mark.asyncio
async def test_execute_unknown_tool(client, wired):
    resp = await client.post("/execute", json={"tool_name": "ride_reminders.nope", "arguments": {}})
    data = resp.json()
    assert data["success"] is False
    assert "Unknown tool" in data["error"]


@pytest.mark.asyncio
async def test_execute_bad_arguments(client, wired):
    resp = await client.post(
        "/execute", json={"tool_name": "ride_reminders.get_reminder", "arguments": {"unexpected": 1}}
    )
    data = resp.json()
    assert data["success"] is False
    assert data["error"]


# ---------------------------------------------------------------------------
# Activity
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_activity_not_ready(client):
    resp = await client.get("/activity")
    assert resp.status_code == 503


@pytest.mark.asyncio
async def test_activity_returns_latest_board(client, wired):
    wired.latest = build_board(
        (make_reminder(interval=30),), riding(elapsed_seconds=1800), connected=True, show_notices=True
    )
    resp = await client.get("/activity")
    assert resp.status_code == 200
    data = resp.json()
    assert data["reminders"][0]["active"] is True
    assert data["reminders"][0]["displayText"] == "Every 30 min"


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_service_auth_enforced_when_configured(client, monkeypatch):
    monkeypatch.setenv("SERVICE_AUTH_TOKEN", "secret")
    get_settings.cache_clear()
    try:
        assert (await client.get("/manifest")).status_code == 401
        bad = await client.get("/manifest", headers={"Authorization": "Bearer wrong"})
        assert bad.status_code == 401
        ok = await client.get("/manifest", headers={"Authorization": "Bearer secret"})
        assert ok.status_code == 200
    finally:
        get_settings.cache_clear()
