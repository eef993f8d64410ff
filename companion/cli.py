"""Admin CLI for the ride reminders store."""

from __future__ import annotations

import asyncio
import json
import logging
import sys

import click
import redis.asyncio as aioredis
import structlog

from modules.ride_reminders.models import COLOR_TAGS, TRIGGER_KINDS, UNIT_SYSTEMS, RideTelemetrySnapshot
from modules.ride_reminders.store import ReminderStore
from modules.ride_reminders.tools import ReminderTools
from modules.ride_reminders.triggers import DueWindow, format_display, is_active
from modules.ride_reminders.units import to_meters
from shared.config import get_settings


def run_async(coro):
    """Run an async function in a new event loop."""
    return asyncio.run(coro)


def _parse_elapsed(value: str | None) -> float | None:
    """Accept seconds ("1800") or [hh:]mm:ss ("30:00", "1:05:00")."""
    if value is None:
        return None
    if ":" not in value:
        return float(value)
    seconds = 0.0
    for part in value.split(":"):
        seconds = seconds * 60 + float(part)
    return seconds


async def _with_tools(fn):
    """Open a Redis connection, run ``fn(tools)`` and close the connection."""
    settings = get_settings()
    r = aioredis.from_url(settings.redis_url, encoding="utf-8", decode_responses=True)
    store = ReminderStore(
        r,
        key=settings.reminders_key,
        changed_channel=settings.reminders_changed_channel,
        default_document=settings.default_reminders,
    )
    try:
        return await fn(ReminderTools(store))
    finally:
        await r.aclose()


def _echo_result(result: dict) -> None:
    if result.get("success") is False:
        click.echo(f"Error: {result['error']}")
        return
    click.echo(json.dumps(result.get("reminder", result), indent=2))


def _stderr_logger(*args):
    # Resolved per call so a swapped sys.stderr is honoured
    return structlog.PrintLogger(sys.stderr)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Show info-level logs on stderr")
def cli(verbose):
    """Ride reminders administration CLI."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(logging.INFO if verbose else logging.WARNING),
        logger_factory=_stderr_logger,
    )


@cli.group()
def reminders():
    """Reminder management commands."""
    pass


@reminders.command("list")
@click.option("--units", type=click.Choice(UNIT_SYSTEMS), default="metric", show_default=True)
def list_reminders(units):
    """List stored reminders in display order."""
    result = run_async(_with_tools(lambda t: t.list_reminders(units=units)))
    if not result["reminders"]:
        click.echo("No reminders added.")
        return
    for r in result["reminders"]:
        state = "" if r["isActive"] else "  (disabled)"
        click.echo(f"[{r['id']}] {r['name']}: {r['displayText']}{state}")


_FIELD_OPTIONS = [
    click.option("--interval", default=None, help="Whole-number magnitude (minutes for time triggers)"),
    click.option("--interval-float", type=float, default=None, help="Decimal magnitude (km or mi)"),
    click.option("--trigger", type=click.Choice(TRIGGER_KINDS), default=None),
    click.option("--color", "foreground_color", type=click.Choice(COLOR_TAGS), default=None),
    click.option("--text", default=None, help="Body text shown when due"),
    click.option("--profile", "profiles", multiple=True, help="Ride profile to limit the reminder to (repeatable)"),
]


def _field_options(fn):
    for option in reversed(_FIELD_OPTIONS):
        fn = option(fn)
    return fn


@reminders.command("add")
@click.argument("name")
@_field_options
def add(name, interval, interval_float, trigger, foreground_color, text, profiles):
    """Create a reminder."""
    result = run_async(
        _with_tools(
            lambda t: t.create_reminder(
                name=name,
                interval=interval if interval is not None else 30,
                interval_float=interval_float,
                trigger=trigger or "elapsed_time",
                foreground_color=foreground_color or "red",
                text=text or "",
                enabled_ride_profiles=list(profiles),
            )
        )
    )
    _echo_result(result)


@reminders.command("edit")
@click.argument("reminder_id", type=int)
@click.option("--name", default=None)
@_field_options
@click.option("--enable/--disable", "is_active", default=None)
@click.option("--clear-interval-float", is_flag=True, help="Drop the decimal magnitude")
@click.option("--all-profiles", is_flag=True, help="Apply the reminder to every ride profile")
def edit(
    reminder_id,
    name,
    interval,
    interval_float,
    trigger,
    foreground_color,
    text,
    profiles,
    is_active,
    clear_interval_float,
    all_profiles,
):
    """Edit a reminder. Options not given keep their current value."""
    changes = {
        k: v
        for k, v in dict(
            name=name,
            interval=interval,
            interval_float=interval_float,
            trigger=trigger,
            foreground_color=foreground_color,
            text=text,
            is_active=is_active,
            enabled_ride_profiles=list(profiles) or None,
        ).items()
        if v is not None
    }
    if clear_interval_float:
        changes["interval_float"] = None
    if all_profiles:
        changes["enabled_ride_profiles"] = []
    result = run_async(_with_tools(lambda t: t.update_reminder(reminder_id, **changes)))
    _echo_result(result)


@reminders.command("delete")
@click.argument("reminder_id", type=int)
def delete(reminder_id):
    """Delete a reminder by id."""
    result = run_async(_with_tools(lambda t: t.delete_reminder(reminder_id)))
    if result.get("success") is False:
        click.echo(f"Error: {result['error']}")
        return
    click.echo(f"Deleted reminder {reminder_id}")


@reminders.command("preview")
@click.option("--elapsed", default=None, help="Elapsed ride time, seconds or mm:ss")
@click.option("--distance", type=float, default=None, help="Elapsed distance in km or mi (see --units)")
@click.option("--units", type=click.Choice(UNIT_SYSTEMS), default="metric", show_default=True)
@click.option("--profile", default=None, help="Active ride profile name")
def preview(elapsed, distance, units, profile):
    """Show which reminders would be due at a given point of a ride."""
    settings = get_settings()
    snapshot = RideTelemetrySnapshot(
        ride_state="active",
        elapsed_seconds=_parse_elapsed(elapsed),
        distance_meters=to_meters(distance, units) if distance is not None else None,
        unit=units,
        ride_profile=profile,
    )
    windows = DueWindow(seconds=settings.due_window_seconds, meters=settings.due_window_meters)

    async def _load(t: ReminderTools):
        return await t.store.load()

    stored = run_async(_with_tools(_load))
    if not stored:
        click.echo("No reminders added.")
        return
    for r in stored:
        mark = "DUE" if is_active(r, snapshot, windows) else "   "
        click.echo(f"{mark} [{r.id}] {r.name}: {format_display(r, units)}")


if __name__ == "__main__":
    cli()
