"""Ride reminders tool implementations."""

from __future__ import annotations

import structlog
from pydantic import ValidationError

from modules.ride_reminders.models import Reminder, ReminderDraft
from modules.ride_reminders.refresh import RideActivityRefresher
from modules.ride_reminders.store import ReminderStore
from modules.ride_reminders.triggers import format_display
from modules.ride_reminders.units import normalize_unit

logger = structlog.get_logger()

# Marks an update argument that was not passed; None is a real value (it clears intervalFloat)
UNSET = object()


def _validation_message(e: ValidationError) -> str:
    """Flatten pydantic errors into 'field: message; ...'."""
    parts = []
    for err in e.errors():
        field = ".".join(str(loc) for loc in err["loc"]) or "input"
        parts.append(f"{field}: {err['msg']}")
    return "; ".join(parts)


def _dump(reminder: Reminder) -> dict:
    return reminder.model_dump(mode="json", by_alias=True)


class ReminderTools:
    """Tool implementations for managing reminders and reading ride activity."""

    def __init__(self, store: ReminderStore, refresher: RideActivityRefresher | None = None):
        self.store = store
        self.refresher = refresher

    async def list_reminders(self, units: str = "metric") -> dict:
        """List reminders in display order with their formatted trigger."""
        unit = normalize_unit(units)
        reminders = await self.store.load()
        return {
            "count": len(reminders),
            "reminders": [
                {**_dump(r), "displayText": format_display(r, unit)} for r in reminders
            ],
        }

    async def get_reminder(self, reminder_id: int) -> dict:
        reminder = await self.store.get(int(reminder_id))
        if reminder is None:
            return {"success": False, "error": f"Reminder {reminder_id} not found"}
        return {"success": True, "reminder": _dump(reminder)}

    async def create_reminder(
        self,
        name: str,
        interval: int | str = 30,
        interval_float: float | None = None,
        trigger: str = "elapsed_time",
        foreground_color: str = "red",
        text: str = "",
        is_active: bool = True,
        enabled_ride_profiles: list[str] | None = None,
    ) -> dict:
        """Validate and append a new reminder."""
        try:
            draft = ReminderDraft(
                name=name,
                interval=interval,
                interval_float=interval_float,
                trigger=trigger,
                foreground_color=foreground_color,
                text=text,
                is_active=is_active,
                enabled_ride_profiles=tuple(enabled_ride_profiles or ()),
            )
        except ValidationError as e:
            return {"success": False, "error": _validation_message(e)}

        reminder = await self.store.create(draft)
        if reminder is None:
            return {"success": False, "error": "Could not save reminder"}
        return {"success": True, "reminder": _dump(reminder)}

    async def update_reminder(
        self,
        reminder_id: int,
        name=UNSET,
        interval=UNSET,
        interval_float=UNSET,
        trigger=UNSET,
        foreground_color=UNSET,
        text=UNSET,
        is_active=UNSET,
        enabled_ride_profiles=UNSET,
    ) -> dict:
        """Replace a reminder by id. Omitted fields keep their current value.

        ``interval_float=None`` clears the decimal magnitude and
        ``enabled_ride_profiles=None`` or ``[]`` makes the reminder apply to
        every profile.
        """
        changes = {
            "name": name,
            "interval": interval,
            "interval_float": interval_float,
            "trigger": trigger,
            "foreground_color": foreground_color,
            "text": text,
            "is_active": is_active,
            "enabled_ride_profiles": enabled_ride_profiles,
        }
        changes = {k: v for k, v in changes.items() if v is not UNSET}
        if "enabled_ride_profiles" in changes:
            changes["enabled_ride_profiles"] = tuple(changes["enabled_ride_profiles"] or ())

        existing = await self.store.get(int(reminder_id))
        if existing is None:
            return {"success": False, "error": f"Reminder {reminder_id} not found"}

        fields = ReminderDraft.from_reminder(existing).model_dump()
        fields.update(changes)
        try:
            draft = ReminderDraft(**fields)
        except ValidationError as e:
            return {"success": False, "error": _validation_message(e)}

        updated = await self.store.update(draft.to_reminder(existing.id))
        if updated is None:
            return {"success": False, "error": "Could not save reminder"}
        return {"success": True, "reminder": _dump(updated)}

    async def delete_reminder(self, reminder_id: int) -> dict:
        deleted = await self.store.delete(int(reminder_id))
        if not deleted:
            return {"success": False, "error": f"Reminder {reminder_id} not found"}
        return {"success": True, "deleted_id": int(reminder_id)}

    async def get_activity(self) -> dict:
        """Latest activity board computed from the ride telemetry streams."""
        if self.refresher is None:
            return {"success": False, "error": "Activity refresh is not running"}
        return self.refresher.latest.dump()

    async def preview_display(
        self,
        trigger: str = "elapsed_time",
        interval: int | str = 30,
        interval_float: float | None = None,
        units: str = "metric",
    ) -> dict:
        """Show how a trigger would read in both unit systems without saving anything."""
        try:
            draft = ReminderDraft(
                name="preview", trigger=trigger, interval=interval, interval_float=interval_float
            )
        except ValidationError as e:
            return {"success": False, "error": _validation_message(e)}
        reminder = draft.to_reminder(0)
        return {
            "success": True,
            "displayText": format_display(reminder, normalize_unit(units)),
            "metric": format_display(reminder, "metric"),
            "imperial": format_display(reminder, "imperial"),
        }
