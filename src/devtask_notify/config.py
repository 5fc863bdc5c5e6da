# src/devtask_notify/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Notification preferences have sane defaults so nothing is required at import time.
- Tests pass their own settings object instead of reading the environment.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "DEVTASK"

_HHMM_RE = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def _env_hhmm(name: str, default: str) -> str:
    raw = (os.getenv(name) or "").strip()
    if raw and _HHMM_RE.match(raw):
        return raw
    return default


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path

    # ---- Platform ----
    supports_channels: bool
    auto_grant_permission: bool

    # ---- Notification preferences ----
    notifications_enabled: bool
    sound_enabled: bool
    daily_summary_enabled: bool
    daily_summary_time: str
    streak_notifications_enabled: bool
    overdue_alerts_enabled: bool
    upcoming_deadline_hours: int

    # ---- Reminders ----
    reminder_lead_minutes: int

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "devtask") or "devtask"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/devtask"))

        supports_channels = _env_bool(_k("SUPPORTS_CHANNELS"), True)
        auto_grant_permission = _env_bool(_k("AUTO_GRANT_PERMISSION"), True)

        notifications_enabled = _env_bool(_k("NOTIFICATIONS_ENABLED"), True)
        sound_enabled = _env_bool(_k("SOUND_ENABLED"), True)
        daily_summary_enabled = _env_bool(_k("DAILY_SUMMARY_ENABLED"), True)
        daily_summary_time = _env_hhmm(_k("DAILY_SUMMARY_TIME"), "09:00")
        streak_notifications_enabled = _env_bool(_k("STREAK_NOTIFICATIONS_ENABLED"), True)
        overdue_alerts_enabled = _env_bool(_k("OVERDUE_ALERTS_ENABLED"), True)
        upcoming_deadline_hours = max(0, _env_int(_k("UPCOMING_DEADLINE_HOURS"), 24))

        reminder_lead_minutes = max(0, _env_int(_k("REMINDER_LEAD_MINUTES"), 60))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            supports_channels=supports_channels,
            auto_grant_permission=auto_grant_permission,
            notifications_enabled=notifications_enabled,
            sound_enabled=sound_enabled,
            daily_summary_enabled=daily_summary_enabled,
            daily_summary_time=daily_summary_time,
            streak_notifications_enabled=streak_notifications_enabled,
            overdue_alerts_enabled=overdue_alerts_enabled,
            upcoming_deadline_hours=upcoming_deadline_hours,
            reminder_lead_minutes=reminder_lead_minutes,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
