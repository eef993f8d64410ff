"""Redis-backed reminder store.

The whole reminder list lives in one string key as a JSON array. Every
mutation loads the current list, builds a new tuple and writes it back with a
single SET, so readers only ever see a complete list. A mutation whose read
fails is abandoned rather than written over an empty list. After each write a
marker is published on the change channel so watchers can reload.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

import structlog
from pydantic import ValidationError

from modules.ride_reminders.models import REMINDER_LIST, Reminder, ReminderDraft

logger = structlog.get_logger()


def next_id(existing: Sequence[Reminder]) -> int:
    """``1 + max(id)``, or 0 for an empty list."""
    return max((r.id for r in existing), default=-1) + 1


def with_added(reminders: Sequence[Reminder], reminder: Reminder) -> tuple[Reminder, ...]:
    return (*reminders, reminder)


def with_replaced(reminders: Sequence[Reminder], reminder: Reminder) -> tuple[Reminder, ...]:
    """Swap the entry with ``reminder.id`` in place; other entries keep their order."""
    return tuple(reminder if r.id == reminder.id else r for r in reminders)


def without(reminders: Sequence[Reminder], reminder_id: int) -> tuple[Reminder, ...]:
    return tuple(r for r in reminders if r.id != reminder_id)


def parse_reminders(raw: str | bytes) -> tuple[Reminder, ...]:
    return tuple(REMINDER_LIST.validate_json(raw))


def dump_reminders(reminders: Sequence[Reminder]) -> str:
    return REMINDER_LIST.dump_json(list(reminders), by_alias=True).decode()


class ReminderStore:
    """CRUD over the ordered reminder list, with graceful fallback on bad data."""

    def __init__(
        self,
        redis_client,
        key: str = "reminders",
        changed_channel: str = "reminders:changed",
        default_document: str = "[]",
    ):
        self._redis = redis_client
        self.key = key
        self.changed_channel = changed_channel
        self._default_document = default_document
        self._lock = asyncio.Lock()
        # Lowest id not yet seen or issued by this instance; deleted ids are not reissued
        self._next_free = 0

    async def _read(self) -> tuple[Reminder, ...]:
        """Read the stored list. Storage errors propagate; unparsable data reads as empty."""
        raw = await self._redis.get(self.key)
        if raw is None:
            raw = self._default_document
        try:
            reminders = parse_reminders(raw)
        except ValidationError as e:
            logger.error("reminders_parse_failed", key=self.key, error=str(e))
            return ()
        self._next_free = max(self._next_free, next_id(reminders))
        return reminders

    async def load(self) -> tuple[Reminder, ...]:
        """Read the stored list. Corrupt or unreadable data yields an empty list."""
        try:
            return await self._read()
        except Exception as e:
            logger.error("reminders_load_failed", key=self.key, error=str(e))
            return ()

    async def _read_for_write(self) -> tuple[Reminder, ...] | None:
        """Like ``load``, but None when storage could not be read."""
        try:
            return await self._read()
        except Exception as e:
            logger.error("reminders_read_failed", key=self.key, error=str(e))
            return None

    async def save(self, reminders: Sequence[Reminder]) -> bool:
        """Overwrite the stored list. Returns False if the write failed."""
        try:
            await self._redis.set(self.key, dump_reminders(reminders))
        except Exception as e:
            logger.error("reminders_save_failed", key=self.key, error=str(e))
            return False

        try:
            await self._redis.publish(self.changed_channel, str(len(reminders)))
        except Exception as e:
            # Data is written; watchers pick it up on their next reload
            logger.warning("reminders_publish_failed", channel=self.changed_channel, error=str(e))
        logger.debug("reminders_saved", key=self.key, count=len(reminders))
        return True

    async def get(self, reminder_id: int) -> Reminder | None:
        for reminder in await self.load():
            if reminder.id == reminder_id:
                return reminder
        return None

    async def create(self, draft: ReminderDraft) -> Reminder | None:
        """Append a new reminder with the next free id. None if the list could not be read or written."""
        async with self._lock:
            current = await self._read_for_write()
            if current is None:
                return None
            reminder = draft.to_reminder(max(next_id(current), self._next_free))
            if not await self.save(with_added(current, reminder)):
                return None
            self._next_free = reminder.id + 1
        logger.info("reminder_created", reminder_id=reminder.id, trigger=reminder.trigger)
        return reminder

    async def update(self, reminder: Reminder) -> Reminder | None:
        """Replace the stored reminder with the same id. None if missing or not written."""
        async with self._lock:
            current = await self._read_for_write()
            if current is None or not any(r.id == reminder.id for r in current):
                return None
            if not await self.save(with_replaced(current, reminder)):
                return None
        logger.info("reminder_updated", reminder_id=reminder.id)
        return reminder

    async def delete(self, reminder_id: int) -> bool:
        """Remove exactly one reminder. False if it did not exist or was not written."""
        async with self._lock:
            current = await self._read_for_write()
            if current is None:
                return False
            remaining = without(current, reminder_id)
            if len(remaining) == len(current):
                return False
            if not await self.save(remaining):
                return False
        logger.info("reminder_deleted", reminder_id=reminder_id)
        return True
