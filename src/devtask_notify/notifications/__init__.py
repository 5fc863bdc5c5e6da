"""Permission gate, channels, scheduling engine, reminders, notifiers, listeners."""
