"""Ride reminders: store, trigger evaluation and live activity refresh."""
