# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "DEVTASK_APP_NAME": "App display name (default: devtask).",
    "DEVTASK_LOG_LEVEL": "Logging level (default: INFO).",
    "DEVTASK_DATA_DIR": "Local data/log directory (default: .local/devtask).",
    # Platform
    "DEVTASK_SUPPORTS_CHANNELS": "Declare notification channels to the local platform (true/false).",
    "DEVTASK_AUTO_GRANT_PERMISSION": "Local platform answers the permission prompt with 'granted' (true/false).",
    # Notification preferences
    "DEVTASK_NOTIFICATIONS_ENABLED": "Master switch for all notifications (true/false).",
    "DEVTASK_SOUND_ENABLED": "Play sound with notifications (true/false).",
    "DEVTASK_DAILY_SUMMARY_ENABLED": "Schedule the daily summary (true/false).",
    "DEVTASK_DAILY_SUMMARY_TIME": "Daily summary wall-clock time, HH:MM (default: 09:00).",
    "DEVTASK_STREAK_NOTIFICATIONS_ENABLED": "Streak milestone notifications (true/false).",
    "DEVTASK_OVERDUE_ALERTS_ENABLED": "Overdue task alerts (true/false).",
    "DEVTASK_UPCOMING_DEADLINE_HOURS": "Warn about deadlines this many hours ahead (default: 24, 0 disables).",
    # Reminders
    "DEVTASK_REMINDER_LEAD_MINUTES": "Default reminder lead before the due date (default: 60).",
}
