"""Pydantic models for reminders, host telemetry and the activity board."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

TriggerKind = Literal["elapsed_time", "distance", "elapsed_time_marker", "distance_marker"]
ColorTag = Literal["red", "orange", "yellow", "green", "blue", "purple", "grey"]
RideState = Literal["not_started", "active", "paused", "stopped"]
UnitSystem = Literal["metric", "imperial"]

TRIGGER_KINDS: tuple[str, ...] = ("elapsed_time", "distance", "elapsed_time_marker", "distance_marker")
COLOR_TAGS: tuple[str, ...] = ("red", "orange", "yellow", "green", "blue", "purple", "grey")
UNIT_SYSTEMS: tuple[str, ...] = ("metric", "imperial")


class Reminder(BaseModel):
    """A user-defined cue, persisted with camelCase keys.

    Records are frozen: an edit is a new ``Reminder`` that replaces the old one
    by id.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int = Field(ge=0)
    name: str
    foreground_color: ColorTag = Field(default="red", alias="foregroundColor")
    interval: int = Field(default=30, ge=0)
    interval_float: float | None = Field(default=None, ge=0, allow_inf_nan=False, alias="intervalFloat")
    text: str = ""
    trigger: TriggerKind = "elapsed_time"
    is_active: bool = Field(default=True, alias="isActive")
    enabled_ride_profiles: tuple[str, ...] = Field(default=(), alias="enabledRideProfiles")


class ReminderDraft(BaseModel):
    """Create/edit input. Validated before anything is written."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    foreground_color: ColorTag = Field(default="red", alias="foregroundColor")
    interval: int = Field(default=30, ge=0)
    interval_float: float | None = Field(default=None, ge=0, allow_inf_nan=False, alias="intervalFloat")
    text: str = ""
    trigger: TriggerKind = "elapsed_time"
    is_active: bool = Field(default=True, alias="isActive")
    enabled_ride_profiles: tuple[str, ...] = Field(default=(), alias="enabledRideProfiles")

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be empty")
        return v

    @field_validator("interval", mode="before")
    @classmethod
    def _interval_is_whole_number(cls, v: object) -> object:
        if isinstance(v, bool) or (isinstance(v, float) and not v.is_integer()):
            raise ValueError("interval must be a whole number")
        if isinstance(v, str):
            try:
                return int(v.strip())
            except ValueError:
                raise ValueError("interval must be a whole number") from None
        return v

    def to_reminder(self, reminder_id: int) -> Reminder:
        return Reminder(id=reminder_id, **self.model_dump())

    @classmethod
    def from_reminder(cls, reminder: Reminder) -> ReminderDraft:
        return cls(**reminder.model_dump(exclude={"id"}))


REMINDER_LIST = TypeAdapter(list[Reminder])


# ---------------------------------------------------------------------------
# Host messages (one model per pub/sub channel)
# ---------------------------------------------------------------------------


class RideTelemetry(BaseModel):
    """Ride state plus the elapsed values the host reports for it."""

    ride_state: RideState = "not_started"
    elapsed_seconds: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    distance_meters: float | None = Field(default=None, ge=0, allow_inf_nan=False)


class UserProfile(BaseModel):
    preferred_unit: UnitSystem = "metric"


class ActiveRideProfile(BaseModel):
    profile_name: str | None = None


class RideTelemetrySnapshot(BaseModel):
    """Latest known ride state, recombined from the independent host channels."""

    model_config = ConfigDict(frozen=True)

    ride_state: RideState = "not_started"
    elapsed_seconds: float | None = None
    distance_meters: float | None = None
    unit: UnitSystem = "metric"
    ride_profile: str | None = None

    @classmethod
    def combine(
        cls,
        telemetry: RideTelemetry | None,
        user_profile: UserProfile | None,
        ride_profile: ActiveRideProfile | None,
    ) -> RideTelemetrySnapshot:
        """Build a snapshot from whatever each channel last delivered."""
        fields: dict = {}
        if telemetry is not None:
            fields.update(
                ride_state=telemetry.ride_state,
                elapsed_seconds=telemetry.elapsed_seconds,
                distance_meters=telemetry.distance_meters,
            )
        if user_profile is not None:
            fields["unit"] = user_profile.preferred_unit
        if ride_profile is not None:
            fields["ride_profile"] = ride_profile.profile_name
        return cls(**fields)


# ---------------------------------------------------------------------------
# Outbound view
# ---------------------------------------------------------------------------


class ReminderView(BaseModel):
    """A reminder annotated for the presentation layer."""

    model_config = ConfigDict(populate_by_name=True)

    reminder: Reminder
    color: str
    active: bool
    display_text: str = Field(alias="displayText")


class ActivityBoard(BaseModel):
    """Ordered reminder views plus passive notices, recomputed on every tick."""

    reminders: list[ReminderView] = []
    connected: bool = False
    notices: list[str] = []
    snapshot: RideTelemetrySnapshot | None = None

    def dump(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
