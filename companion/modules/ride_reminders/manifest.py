"""Ride reminders module manifest: tool definitions."""

from modules.ride_reminders.models import COLOR_TAGS, TRIGGER_KINDS, UNIT_SYSTEMS
from shared.schemas.tools import ModuleManifest, ToolDefinition, ToolParameter

TRIGGER_ENUM = list(TRIGGER_KINDS)
COLOR_ENUM = list(COLOR_TAGS)
UNITS_ENUM = list(UNIT_SYSTEMS)

_REMINDER_ID = ToolParameter(
    name="reminder_id",
    type="integer",
    description="Id of the reminder (see list_reminders)",
)

MANIFEST = ModuleManifest(
    module_name="ride_reminders",
    description=(
        "Manage ride reminders (e.g. 'drink every 20 minutes', 'eat every 25 km') and "
        "see which ones are currently due based on live ride telemetry."
    ),
    tools=[
        ToolDefinition(
            name="ride_reminders.list_reminders",
            description="List all reminders in display order, with their formatted trigger text.",
            parameters=[
                ToolParameter(
                    name="units",
                    type="string",
                    description="Unit system for distance labels. Default: metric",
                    required=False,
                    enum=UNITS_ENUM,
                ),
            ],
        ),
        ToolDefinition(
            name="ride_reminders.get_reminder",
            description="Get a single reminder by id.",
            parameters=[_REMINDER_ID],
        ),
        ToolDefinition(
            name="ride_reminders.create_reminder",
            description=(
                "Create a reminder. Time triggers take whole minutes in 'interval'; distance "
                "triggers take km or mi (the rider's unit) in 'interval_float'. "
                "Example: 'Remind me to drink every 20 minutes.'"
            ),
            parameters=[
                ToolParameter(name="name", type="string", description="Short label shown on the card"),
                ToolParameter(
                    name="interval",
                    type="integer",
                    description="Whole-number magnitude for time triggers (minutes). Default: 30",
                    required=False,
                ),
                ToolParameter(
                    name="interval_float",
                    type="number",
                    description="Decimal magnitude for distance triggers (km or mi)",
                    required=False,
                ),
                ToolParameter(
                    name="trigger",
                    type="string",
                    description=(
                        "'elapsed_time' (every N min), 'distance' (every N km/mi), "
                        "'elapsed_time_marker' (once at N min), 'distance_marker' (once at N km/mi). "
                        "Default: elapsed_time"
                    ),
                    required=False,
                    enum=TRIGGER_ENUM,
                ),
                ToolParameter(
                    name="foreground_color",
                    type="string",
                    description="Card color. Default: red",
                    required=False,
                    enum=COLOR_ENUM,
                ),
                ToolParameter(name="text", type="string", description="Body text shown when due", required=False),
                ToolParameter(
                    name="is_active",
                    type="boolean",
                    description="Whether the reminder is enabled. Default: true",
                    required=False,
                ),
                ToolParameter(
                    name="enabled_ride_profiles",
                    type="array",
                    description="Ride profile names the reminder applies to. Empty means all profiles.",
                    required=False,
                ),
            ],
        ),
        ToolDefinition(
            name="ride_reminders.update_reminder",
            description="Edit a reminder. Only the given fields change; the record is replaced as a whole.",
            parameters=[
                _REMINDER_ID,
                ToolParameter(name="name", type="string", description="New label", required=False),
                ToolParameter(name="interval", type="integer", description="New whole-number magnitude", required=False),
                ToolParameter(name="interval_float", type="number", description="New decimal magnitude; null clears it", required=False),
                ToolParameter(name="trigger", type="string", description="New trigger kind", required=False, enum=TRIGGER_ENUM),
                ToolParameter(name="foreground_color", type="string", description="New color", required=False, enum=COLOR_ENUM),
                ToolParameter(name="text", type="string", description="New body text", required=False),
                ToolParameter(name="is_active", type="boolean", description="Enable or disable", required=False),
                ToolParameter(
                    name="enabled_ride_profiles",
                    type="array",
                    description="Ride profile names the reminder applies to; empty or null means all profiles",
                    required=False,
                ),
            ],
        ),
        ToolDefinition(
            name="ride_reminders.delete_reminder",
            description="Delete a reminder by id. Other reminders keep their ids and order.",
            parameters=[_REMINDER_ID],
        ),
        ToolDefinition(
            name="ride_reminders.get_activity",
            description="Which reminders are currently due, plus any device status notices.",
            parameters=[],
        ),
        ToolDefinition(
            name="ride_reminders.preview_display",
            description="Show how a trigger would be labelled in metric and imperial, without saving.",
            parameters=[
                ToolParameter(name="trigger", type="string", description="Trigger kind", required=False, enum=TRIGGER_ENUM),
                ToolParameter(name="interval", type="integer", description="Whole-number magnitude", required=False),
                ToolParameter(name="interval_float", type="number", description="Decimal magnitude", required=False),
                ToolParameter(name="units", type="string", description="Unit system", required=False, enum=UNITS_ENUM),
            ],
        ),
    ],
)
