"""Push-based sources and the latest-of-each combinator.

The host publishes ride telemetry, the user profile and the active ride
profile on separate Redis pub/sub channels. Each channel is exposed as an async
generator; ``combine_latest`` merges any number of them into one stream of
"latest value per source" dicts. Closing the combined stream closes every
source, which unsubscribes its channel.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

import structlog
from pydantic import BaseModel, ValidationError

from modules.ride_reminders.models import Reminder
from modules.ride_reminders.store import ReminderStore

logger = structlog.get_logger()

_DONE = object()


async def subscribe(redis_client, channel: str, model: type[BaseModel]) -> AsyncIterator[BaseModel]:
    """Yield every valid ``model`` payload published on ``channel``."""
    pubsub = redis_client.pubsub()
    await pubsub.subscribe(channel)
    logger.info("channel_subscribed", channel=channel)
    try:
        async for message in pubsub.listen():
            if message["type"] != "message":
                continue
            try:
                yield model.model_validate_json(message["data"])
            except ValidationError as e:
                logger.warning("channel_payload_invalid", channel=channel, error=str(e))
    finally:
        await pubsub.unsubscribe(channel)
        await pubsub.aclose()
        logger.info("channel_unsubscribed", channel=channel)


async def watch_reminders(store: ReminderStore, redis_client) -> AsyncIterator[tuple[Reminder, ...]]:
    """Yield the stored list now and again after every change marker.

    The change channel is subscribed before the first read, so a write that
    lands in between is still seen. Consecutive identical lists are skipped.
    """
    pubsub = redis_client.pubsub()
    await pubsub.subscribe(store.changed_channel)
    try:
        current = await store.load()
        yield current

        async for message in pubsub.listen():
            if message["type"] != "message":
                continue
            reloaded = await store.load()
            if reloaded != current:
                current = reloaded
                yield current
    finally:
        await pubsub.unsubscribe(store.changed_channel)
        await pubsub.aclose()


async def after_delay(seconds: float, value=True) -> AsyncIterator:
    """Yield ``value`` once after ``seconds``."""
    await asyncio.sleep(seconds)
    yield value


async def combine_latest(**sources: AsyncIterator) -> AsyncIterator[dict]:
    """Merge independent async sources into dicts of their latest values.

    A dict is emitted whenever any source has produced a value since the last
    emission; sources that have not produced anything yet map to None. Values
    that arrive while the consumer is busy are conflated, so only the newest
    value of each source is seen. The stream ends once every source is
    exhausted, and an error raised by a source is re-raised here.
    """
    latest: dict = {name: None for name in sources}
    queue: asyncio.Queue = asyncio.Queue()

    async def pump(name: str, source: AsyncIterator) -> None:
        try:
            async for value in source:
                await queue.put((name, value))
        except asyncio.CancelledError:
            raise
        except Exception as e:
            await queue.put((name, e))
            return
        finally:
            aclose = getattr(source, "aclose", None)
            if aclose is not None:
                await aclose()
        await queue.put((name, _DONE))

    tasks = [asyncio.create_task(pump(name, source)) for name, source in sources.items()]
    remaining = len(tasks)
    try:
        while remaining:
            # Drain everything already queued so a burst collapses into one emission
            items = [await queue.get()]
            while not queue.empty():
                items.append(queue.get_nowait())

            changed = False
            for name, value in items:
                if value is _DONE:
                    remaining -= 1
                    continue
                if isinstance(value, Exception):
                    raise value
                latest[name] = value
                changed = True
            if changed:
                yield dict(latest)
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
