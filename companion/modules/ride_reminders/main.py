"""Ride reminders module: FastAPI service with background activity refresh."""

from __future__ import annotations

import asyncio

import structlog
from fastapi import Depends, FastAPI, HTTPException

from modules.ride_reminders.manifest import MANIFEST
from modules.ride_reminders.refresh import RideActivityRefresher
from modules.ride_reminders.store import ReminderStore
from modules.ride_reminders.tools import ReminderTools
from shared.auth import require_service_auth
from shared.config import get_settings
from shared.redis import close_redis, get_redis
from shared.schemas.common import HealthResponse
from shared.schemas.tools import ModuleManifest, ToolCall, ToolResult

structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer(),
    ],
)

logger = structlog.get_logger()
app = FastAPI(title="Ride Reminders Module", version="1.0.0")

tools: ReminderTools | None = None
refresher: RideActivityRefresher | None = None
redis_client = None
_refresh_task: asyncio.Task | None = None


@app.on_event("startup")
async def startup():
    global tools, refresher, redis_client, _refresh_task
    settings = get_settings()
    redis_client = await get_redis()

    store = ReminderStore(
        redis_client,
        key=settings.reminders_key,
        changed_channel=settings.reminders_changed_channel,
        default_document=settings.default_reminders,
    )
    refresher = RideActivityRefresher(store, redis_client, settings)
    tools = ReminderTools(store, refresher)

    _refresh_task = asyncio.create_task(refresher.run())
    logger.info("ride_reminders_module_ready")


@app.on_event("shutdown")
async def shutdown():
    global _refresh_task
    if _refresh_task and not _refresh_task.done():
        _refresh_task.cancel()
        try:
            await _refresh_task
        except asyncio.CancelledError:
            pass
    _refresh_task = None
    await close_redis()
    logger.info("ride_reminders_module_shutdown")


@app.get("/manifest", response_model=ModuleManifest)
async def manifest(_=Depends(require_service_auth)):
    """Return the module manifest."""
    return MANIFEST


@app.post("/execute", response_model=ToolResult)
async def execute(call: ToolCall, _=Depends(require_service_auth)):
    """Execute a tool call."""
    if tools is None:
        return ToolResult(tool_name=call.tool_name, success=False, error="Module not ready")

    try:
        tool_name = call.tool_name.split(".")[-1]
        args = dict(call.arguments)

        if tool_name == "list_reminders":
            result = await tools.list_reminders(**args)
        elif tool_name == "get_reminder":
            result = await tools.get_reminder(**args)
        elif tool_name == "create_reminder":
            result = await tools.create_reminder(**args)
        elif tool_name == "update_reminder":
            result = await tools.update_reminder(**args)
        elif tool_name == "delete_reminder":
            result = await tools.delete_reminder(**args)
        elif tool_name == "get_activity":
            result = await tools.get_activity()
        elif tool_name == "preview_display":
            result = await tools.preview_display(**args)
        else:
            return ToolResult(
                tool_name=call.tool_name,
                success=False,
                error=f"Unknown tool: {call.tool_name}",
            )

        if isinstance(result, dict) and result.get("success") is False:
            return ToolResult(tool_name=call.tool_name, success=False, error=result.get("error"))
        return ToolResult(tool_name=call.tool_name, success=True, result=result)
    except Exception as e:
        logger.error("tool_execution_error", tool=call.tool_name, error=str(e), exc_info=True)
        return ToolResult(tool_name=call.tool_name, success=False, error=str(e))


@app.get("/activity")
async def activity(_=Depends(require_service_auth)):
    """Latest reminder board for the presentation layer."""
    if refresher is None:
        raise HTTPException(status_code=503, detail="Module not ready")
    return refresher.latest.dump()


@app.get("/health", response_model=HealthResponse)
async def health():
    if redis_client is None:
        return HealthResponse(status="starting")
    try:
        await redis_client.ping()
        return HealthResponse(status="ok", redis=True)
    except Exception as e:
        logger.warning("health_redis_unavailable", error=str(e))
        return HealthResponse(status="degraded", redis=False)
