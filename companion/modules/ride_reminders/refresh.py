"""Ride activity refresh: re-evaluate every reminder on every upstream tick."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Sequence

import structlog

from modules.ride_reminders.colors import tag_to_color
from modules.ride_reminders.models import (
    ActiveRideProfile,
    ActivityBoard,
    Reminder,
    ReminderView,
    RideTelemetry,
    RideTelemetrySnapshot,
    UserProfile,
)
from modules.ride_reminders.store import ReminderStore
from modules.ride_reminders.streams import after_delay, combine_latest, subscribe, watch_reminders
from modules.ride_reminders.triggers import DueWindow, format_display, is_active
from shared.config import Settings

logger = structlog.get_logger()

NO_REMINDERS_NOTICE = "No reminders added."
DEVICE_STATUS_NOTICE = "Could not read device status. Is the host service running?"

HOST_SOURCES = ("telemetry", "user_profile", "ride_profile")


def build_board(
    reminders: Sequence[Reminder] | None,
    snapshot: RideTelemetrySnapshot | None,
    *,
    connected: bool,
    show_notices: bool,
    windows: DueWindow = DueWindow(),
    theme: str = "light",
) -> ActivityBoard:
    """Annotate each reminder (in store order) with its activity and display text.

    ``reminders`` is None while the store has not been read yet; that state
    never produces the "no reminders" notice.
    """
    unit = snapshot.unit if snapshot is not None else "metric"
    views = [
        ReminderView(
            reminder=r,
            color=tag_to_color(r.foreground_color, theme),
            active=is_active(r, snapshot, windows),
            display_text=format_display(r, unit),
        )
        for r in reminders or ()
    ]

    notices: list[str] = []
    if show_notices:
        if reminders is not None and not reminders:
            notices.append(NO_REMINDERS_NOTICE)
        if not connected:
            notices.append(DEVICE_STATUS_NOTICE)

    return ActivityBoard(reminders=views, connected=connected, notices=notices, snapshot=snapshot)


class RideActivityRefresher:
    """Keeps the latest activity board and publishes it for the presentation layer.

    The only state is the most recent board; the reminder list and telemetry
    are re-read from their streams on every tick.
    """

    def __init__(self, store: ReminderStore, redis_client, settings: Settings):
        self.store = store
        self.redis_client = redis_client
        self.settings = settings
        self.windows = DueWindow(seconds=settings.due_window_seconds, meters=settings.due_window_meters)
        self.latest = ActivityBoard()

    def sources(self) -> dict[str, AsyncIterator]:
        s = self.settings
        return {
            "reminders": watch_reminders(self.store, self.redis_client),
            "telemetry": subscribe(self.redis_client, s.telemetry_channel, RideTelemetry),
            "user_profile": subscribe(self.redis_client, s.user_profile_channel, UserProfile),
            "ride_profile": subscribe(self.redis_client, s.ride_profile_channel, ActiveRideProfile),
            "grace": after_delay(s.status_grace_seconds),
        }

    def board_from(self, values: dict) -> ActivityBoard:
        snapshot = RideTelemetrySnapshot.combine(
            values.get("telemetry"), values.get("user_profile"), values.get("ride_profile")
        )
        return build_board(
            values.get("reminders"),
            snapshot,
            connected=any(values.get(name) is not None for name in HOST_SOURCES),
            show_notices=values.get("grace") is not None,
            windows=self.windows,
            theme=self.settings.theme,
        )

    async def updates(self, sources: dict[str, AsyncIterator] | None = None) -> AsyncIterator[ActivityBoard]:
        """Yield a board per tick. A tick whose board cannot be built is logged and skipped."""
        async for values in combine_latest(**(sources or self.sources())):
            try:
                board = self.board_from(values)
            except Exception as e:
                logger.error("activity_board_failed", error=str(e), exc_info=True)
                continue
            yield board

    async def run(self, sources: dict[str, AsyncIterator] | None = None) -> None:
        """Refresh until cancelled. Cancelling unsubscribes every source."""
        logger.info("activity_refresh_started")
        try:
            async for board in self.updates(sources):
                self.latest = board
                await self._publish(board)
        except asyncio.CancelledError:
            logger.info("activity_refresh_stopped")
            raise

    async def _publish(self, board: ActivityBoard) -> None:
        try:
            await self.redis_client.publish(
                self.settings.reminders_activity_channel,
                board.model_dump_json(by_alias=True),
            )
        except Exception as e:
            logger.warning("activity_publish_failed", error=str(e))
