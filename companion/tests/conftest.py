"""Shared test fixtures for the ride reminders test suite.

Provides Redis doubles so store, stream and service tests can run without a
Redis server.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from modules.ride_reminders.store import ReminderStore
from shared.config import Settings


# ---------------------------------------------------------------------------
# Redis doubles
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_redis():
    """Mock async Redis client with common operations."""
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock()
    redis.delete = AsyncMock()
    redis.publish = AsyncMock(return_value=0)
    return redis


@pytest.fixture
def fake_redis():
    """Stateful async Redis double: string keys plus in-process pub/sub.

    ``fake_redis.data`` holds the key space, ``fake_redis.subscribers`` maps a
    channel to the queues of its live subscriptions and ``fake_redis.pubsubs``
    lists every pub/sub object handed out.
    """
    data: dict[str, str] = {}
    subscribers: dict[str, list[asyncio.Queue]] = {}
    pubsubs: list[MagicMock] = []

    async def _get(key):
        return data.get(key)

    async def _set(key, value, **kwargs):
        data[key] = value
        return True

    async def _delete(key):
        return 1 if data.pop(key, None) is not None else 0

    async def _publish(channel, message):
        queues = subscribers.get(channel, [])
        for q in queues:
            q.put_nowait({"type": "message", "channel": channel, "data": message})
        return len(queues)

    def _pubsub():
        queue: asyncio.Queue = asyncio.Queue()
        ps = MagicMock()
        ps.channels = []

        async def _subscribe(*channels):
            for channel in channels:
                subscribers.setdefault(channel, []).append(queue)
                ps.channels.append(channel)
                queue.put_nowait({"type": "subscribe", "channel": channel, "data": 1})

        async def _unsubscribe(*channels):
            for channel in channels or tuple(ps.channels):
                if queue in subscribers.get(channel, []):
                    subscribers[channel].remove(queue)

        async def _listen():
            while True:
                yield await queue.get()

        ps.subscribe = AsyncMock(side_effect=_subscribe)
        ps.unsubscribe = AsyncMock(side_effect=_unsubscribe)
        ps.aclose = AsyncMock()
        ps.listen = _listen
        pubsubs.append(ps)
        return ps

    redis = MagicMock()
    redis.data = data
    redis.subscribers = subscribers
    redis.pubsubs = pubsubs
    redis.get = AsyncMock(side_effect=_get)
    redis.set = AsyncMock(side_effect=_set)
    redis.delete = AsyncMock(side_effect=_delete)
    redis.publish = AsyncMock(side_effect=_publish)
    redis.pubsub = MagicMock(side_effect=_pubsub)
    redis.ping = AsyncMock(return_value=True)
    redis.aclose = AsyncMock()
    return redis


# ---------------------------------------------------------------------------
# Store / settings
# ---------------------------------------------------------------------------


@pytest.fixture
def settings():
    """Settings with a short grace delay so notice tests stay fast."""
    return Settings(status_grace_seconds=0.05, _env_file=None)


@pytest.fixture
def store(fake_redis):
    return ReminderStore(fake_redis)
