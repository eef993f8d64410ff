"""Test data and helpers for ride reminder tests."""

from __future__ import annotations

import asyncio
import json

from modules.ride_reminders.models import Reminder, RideTelemetrySnapshot

# Persisted form as written by the settings screen (camelCase keys)
STORED_REMINDERS_JSON = json.dumps(
    [
        {
            "id": 0,
            "name": "Drink",
            "foregroundColor": "blue",
            "interval": 20,
            "intervalFloat": None,
            "text": "Take a sip",
            "trigger": "elapsed_time",
        },
        {
            "id": 3,
            "name": "Eat",
            "foregroundColor": "green",
            "interval": 25,
            "intervalFloat": 25.0,
            "text": "Eat a bar",
            "trigger": "distance",
        },
        {
            "id": 7,
            "name": "Tire pressure",
            "foregroundColor": "orange",
            "interval": 0,
            "intervalFloat": 12.5,
            "text": "",
            "trigger": "distance_marker",
            "isActive": True,
            "enabledRideProfiles": ["Road"],
        },
    ]
)

MALFORMED_JSON = '[{"id": 0, "name": "Drink", '

UNKNOWN_TRIGGER_JSON = json.dumps(
    [{"id": 0, "name": "Power", "interval": 250, "trigger": "power_limit"}]
)

# json.dumps writes float("inf") as a bare Infinity token
INFINITE_INTERVAL_JSON = json.dumps(
    [{"id": 0, "name": "Eat", "intervalFloat": float("inf"), "trigger": "distance"}]
)


def make_reminder(**kwargs) -> Reminder:
    """Build a Reminder with sensible defaults."""
    defaults = dict(id=0, name="Drink", interval=30, trigger="elapsed_time")
    defaults.update(kwargs)
    return Reminder(**defaults)


def riding(
    elapsed_seconds: float | None = None,
    distance_meters: float | None = None,
    unit: str = "metric",
    ride_profile: str | None = None,
    ride_state: str = "active",
) -> RideTelemetrySnapshot:
    """Snapshot of a ride in progress."""
    return RideTelemetrySnapshot(
        ride_state=ride_state,
        elapsed_seconds=elapsed_seconds,
        distance_meters=distance_meters,
        unit=unit,
        ride_profile=ride_profile,
    )


async def async_iter(values, delay: float = 0.0):
    """Async generator over ``values``, optionally pausing between items."""
    for value in values:
        if delay:
            await asyncio.sleep(delay)
        yield value


async def wait_for_subscribers(redis, channel: str, count: int = 1, timeout: float = 1.0) -> None:
    """Wait until ``count`` subscriptions exist on ``channel`` of a fake_redis."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while len(redis.subscribers.get(channel, [])) < count:
        if loop.time() > deadline:
            raise TimeoutError(f"no subscriber on {channel}")
        await asyncio.sleep(0.001)
