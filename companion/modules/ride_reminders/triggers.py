"""Trigger evaluation: decide whether a reminder is due and how it reads.

Everything here is pure: the functions only look at the reminder and the
telemetry snapshot they are given, never at storage or the host service.

Due windows
-----------
A reminder does not fire at an instant, it is *highlighted* for a short band
after its threshold is crossed:

* interval triggers are due while ``value >= period`` and
  ``value % period < window``, so a 30 minute reminder is active from 30:00
  up to (not including) 31:00 with the default 60 s window, then re-arms for
  60:00. The window is capped at half the period, so a reminder with a very
  short period (1 minute, 0.1 km) still goes quiet before it re-arms;
* marker triggers are due while ``threshold <= value < threshold + window``.

Distance magnitudes are expressed in the rider's preferred unit (km or mi).
"""

from __future__ import annotations

from dataclasses import dataclass

from modules.ride_reminders.models import Reminder, RideTelemetrySnapshot
from modules.ride_reminders.units import distance_suffix, format_decimal, to_meters

DEFAULT_WINDOW_SECONDS = 60.0
DEFAULT_WINDOW_METERS = 100.0


@dataclass(frozen=True)
class TriggerFormat:
    """How a trigger kind is measured and labelled."""

    prefix: str
    measures: str  # "time" or "distance"
    marker: bool
    decimal: bool


TRIGGERS: dict[str, TriggerFormat] = {
    "elapsed_time": TriggerFormat(prefix="Every ", measures="time", marker=False, decimal=False),
    "distance": TriggerFormat(prefix="Every ", measures="distance", marker=False, decimal=True),
    "elapsed_time_marker": TriggerFormat(prefix="At ", measures="time", marker=True, decimal=False),
    "distance_marker": TriggerFormat(prefix="At ", measures="distance", marker=True, decimal=True),
}


@dataclass(frozen=True)
class DueWindow:
    """Tolerance band after a threshold during which a reminder counts as due."""

    seconds: float = DEFAULT_WINDOW_SECONDS
    meters: float = DEFAULT_WINDOW_METERS


def is_decimal(trigger: str) -> bool:
    return TRIGGERS[trigger].decimal


def prefix(trigger: str) -> str:
    return TRIGGERS[trigger].prefix


def suffix(trigger: str, unit: str) -> str:
    """Unit label for a trigger; time triggers ignore the unit preference."""
    if TRIGGERS[trigger].measures == "time":
        return " min"
    return distance_suffix(unit)


def magnitude(reminder: Reminder) -> float:
    """The configured threshold/period in display units (minutes, km or mi)."""
    if is_decimal(reminder.trigger) and reminder.interval_float is not None:
        return reminder.interval_float
    return float(reminder.interval)


def format_display(reminder: Reminder, unit: str) -> str:
    """Render ``<prefix><value><suffix>``, e.g. ``Every 20 min`` or ``At 12.5 mi``."""
    if is_decimal(reminder.trigger):
        value = format_decimal(magnitude(reminder))
    else:
        value = str(reminder.interval)
    return f"{prefix(reminder.trigger)}{value}{suffix(reminder.trigger, unit)}"


def applies_to_profile(reminder: Reminder, ride_profile: str | None) -> bool:
    """Reminders without a profile list apply to every ride profile."""
    if not reminder.enabled_ride_profiles:
        return True
    return ride_profile is not None and ride_profile in reminder.enabled_ride_profiles


def _within_window(value: float, threshold: float, window: float, marker: bool) -> bool:
    if value < threshold:
        return False
    if marker:
        return value < threshold + window
    return value % threshold < min(window, threshold / 2)


def is_active(
    reminder: Reminder,
    snapshot: RideTelemetrySnapshot | None,
    windows: DueWindow = DueWindow(),
) -> bool:
    """True exactly when the current telemetry satisfies the reminder's due condition.

    Missing telemetry, a ride that is not running, a disabled reminder or one
    scoped to another ride profile all evaluate to False.
    """
    if snapshot is None or snapshot.ride_state != "active":
        return False
    if not reminder.is_active or not applies_to_profile(reminder, snapshot.ride_profile):
        return False

    fmt = TRIGGERS[reminder.trigger]
    amount = magnitude(reminder)
    if amount <= 0:
        return False

    if fmt.measures == "time":
        if snapshot.elapsed_seconds is None:
            return False
        return _within_window(snapshot.elapsed_seconds, amount * 60, windows.seconds, fmt.marker)

    if snapshot.distance_meters is None:
        return False
    return _within_window(
        snapshot.distance_meters, to_meters(amount, snapshot.unit), windows.meters, fmt.marker
    )
