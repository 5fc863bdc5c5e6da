# src/devtask_notify/bootstrap.py

"""
Composition root.

- loads settings once (or takes the caller's),
- picks the notification platform (the in-process one unless a real OS backend is injected),
- wires gate, registry, engine, lifecycle manager, notifiers and listener bridge into NotifierState.

There is no module-level service instance: the application calls
create_initial_state() once and passes the result around.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .config import get_settings
from .core.ports import NotificationPlatform, TaskSource
from .core.state import NotifierState
from .logging_setup import setup_logging
from .notifications.channels import ChannelRegistry
from .notifications.clock import Clock, local_now
from .notifications.engine import SchedulingEngine
from .notifications.listeners import DeliveryListenerBridge
from .notifications.notifiers import AggregateNotifier, NotificationPreferences
from .notifications.permissions import PermissionGate
from .notifications.reminders import ReminderLifecycleManager, TaskReminder
from .platforms.local import LocalNotificationPlatform

logger = logging.getLogger(__name__)


def configure_logging(settings=None) -> Path:
    """Console level from settings.log_level, full file log under settings.data_dir."""
    if settings is None:
        settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    return setup_logging(log_dir=getattr(settings, "data_dir", ".local/devtask"), console_level=console_level)


def create_initial_state(
    *,
    settings=None,
    platform: NotificationPlatform | None = None,
    tasks: TaskSource | None = None,
    clock: Clock = local_now,
) -> NotifierState:
    """
    Create NotifierState from the provided settings.

    Keeping settings and the platform injectable makes the layer testable with a fake
    primitive. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    if platform is None:
        platform = LocalNotificationPlatform(
            supports_channels=bool(getattr(settings, "supports_channels", True)),
            grant_on_request=bool(getattr(settings, "auto_grant_permission", True)),
            clock=clock,
        )

    preferences = NotificationPreferences.from_settings(settings)

    permissions = PermissionGate(platform)
    channels = ChannelRegistry(platform)
    engine = SchedulingEngine(
        platform,
        permissions,
        channels,
        clock=clock,
        sound_enabled=preferences.sound_enabled,
    )

    return NotifierState(
        settings=settings,
        platform=platform,
        permissions=permissions,
        channels=channels,
        engine=engine,
        reminders=ReminderLifecycleManager(
            engine,
            lead_minutes=int(getattr(settings, "reminder_lead_minutes", 60)),
        ),
        notifiers=AggregateNotifier(engine, preferences),
        listeners=DeliveryListenerBridge(platform),
        tasks=tasks,
    )


async def initialize(state: NotifierState) -> bool:
    """
    Call on app startup: configure channels and read the current permission.

    Never fails app start; returns True even when notifications are unavailable.
    """
    logger.info("Initializing notification service...")
    try:
        await state.channels.configure_channels()
        if await state.permissions.has_permission():
            logger.info("Notification permissions granted")
        else:
            logger.info("Notification permissions not granted yet (state=%s)", state.permissions.state)
    except Exception:
        logger.exception("Error initializing notification service")

    state.initialized = True
    return True


async def resync_reminders(state: NotifierState) -> list[TaskReminder]:
    """
    Reconcile every stored task with the schedule (app start, after an import).

    Returns the reconciled reminders; persisting their new handles is the task store's job.
    """
    if state.tasks is None:
        return []
    try:
        records = state.tasks.list_tasks()
    except Exception:
        logger.exception("Task source listing failed; reminders not resynced")
        return []

    reminders = [await state.reminders.sync(record) for record in records]
    live = sum(1 for r in reminders if r.notification_id)
    logger.info("Reminders resynced: %d live of %d tasks", live, len(records))
    return reminders


def shutdown(state: NotifierState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        state.listeners.close()
    except Exception:
        logger.exception("Failed to release notification listeners.")
