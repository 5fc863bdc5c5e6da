# src/devtask_notify/notifications/reminders.py

from __future__ import annotations

"""
Reminder lifecycle.

Binds a scheduled notification handle to a task's reminder and keeps the two
consistent while the task is edited, completed or deleted:

  off -> scheduled        enable(), update_reminder_time()
  scheduled -> scheduled  update_reminder_time(), update_due_date()   (cancel, then schedule)
  scheduled -> off        disable(), complete(), delete()

Invariant after every transition:
  enabled      -> at most one live handle, triggered at reminder_date
                  (no handle at all when scheduling was refused; the UI reports that)
  not enabled  -> notification_id is None
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import StrEnum

from .clock import Clock, aligned
from .engine import SchedulingEngine
from .models import ChannelId, DateTrigger, ReminderPayload, TaskRecord

logger = logging.getLogger(__name__)

REMINDER_TITLE = "⏰ Task Reminder"

# (label, minutes before the due date)
REMINDER_PRESETS: tuple[tuple[str, int], ...] = (
    ("15 min before", 15),
    ("30 min before", 30),
    ("1 hour before", 60),
    ("1 day before", 1440),
)


class ReminderState(StrEnum):
    OFF = "off"
    SCHEDULED = "scheduled"


@dataclass(slots=True)
class TaskReminder:
    task_id: str
    title: str
    due_date: datetime | None = None
    reminder_date: datetime | None = None
    enabled: bool = False
    notification_id: str | None = None

    @property
    def state(self) -> ReminderState:
        return ReminderState.SCHEDULED if self.enabled else ReminderState.OFF

    @property
    def degraded(self) -> bool:
        """Enabled, but no notification is actually pending."""
        return self.enabled and self.notification_id is None

    @classmethod
    def from_task(cls, task: TaskRecord) -> TaskReminder:
        return cls(
            task_id=task.id,
            title=task.title,
            due_date=task.due_date,
            reminder_date=task.reminder_date,
            enabled=task.reminder_enabled,
            notification_id=task.notification_id,
        )


def default_reminder_time(
    due_date: datetime | None,
    now: datetime,
    lead: timedelta = timedelta(hours=1),
) -> datetime:
    """One lead before the due date, or one lead from now when there is no due date."""
    if due_date is not None:
        return due_date - lead
    return now + lead


def preset_reminder_time(due_date: datetime, minutes_before: int) -> datetime:
    return due_date - timedelta(minutes=minutes_before)


def reminder_body(title: str, due_date: datetime | None) -> str:
    if due_date is None:
        return f'"{title}" is due soon'
    return f'"{title}" is due on {due_date:%b %d, %Y}'


class ReminderLifecycleManager:
    def __init__(
        self,
        engine: SchedulingEngine,
        *,
        lead_minutes: int = 60,
        clock: Clock | None = None,
    ) -> None:
        self._engine = engine
        self._lead = timedelta(minutes=max(0, int(lead_minutes)))
        self._clock = clock or engine.now

    # ---- handle-level API (used by the task store glue) ----

    async def schedule_task_reminder(self, task: TaskRecord) -> str | None:
        if task.reminder_date is None:
            logger.warning("No reminder date set for task %s", task.id)
            return None
        return await self._schedule(task.id, task.title, task.due_date, task.reminder_date)

    async def cancel_task_reminder(self, handle: str | None) -> None:
        await self._engine.cancel(handle)

    async def reschedule_task_reminder(self, old_handle: str | None, task: TaskRecord) -> str | None:
        # Cancel before schedule so a failed cancel never leaves two notifications.
        await self.cancel_task_reminder(old_handle)
        return await self.schedule_task_reminder(task)

    # ---- state machine over TaskReminder ----

    def default_time_for(self, reminder: TaskReminder) -> datetime:
        return default_reminder_time(reminder.due_date, self._clock(), self._lead)

    async def enable(self, reminder: TaskReminder, at: datetime | None = None) -> str | None:
        if at is None:
            at = self.default_time_for(reminder)
        return await self._apply(reminder, at)

    async def update_reminder_time(self, reminder: TaskReminder, at: datetime) -> str | None:
        return await self._apply(reminder, at)

    async def update_due_date(self, reminder: TaskReminder, due_date: datetime | None) -> str | None:
        old_due = reminder.due_date
        reminder.due_date = due_date
        if not reminder.enabled:
            return None

        if due_date is not None and old_due is not None and reminder.reminder_date is not None:
            # Keep the lead the user picked relative to the due date.
            at = due_date - (old_due - reminder.reminder_date)
        elif due_date is not None:
            at = default_reminder_time(due_date, self._clock(), self._lead)
        elif reminder.reminder_date is not None:
            at = reminder.reminder_date
        else:
            at = self.default_time_for(reminder)

        return await self._apply(reminder, at)

    async def disable(self, reminder: TaskReminder) -> None:
        await self._turn_off(reminder, "disabled")

    async def complete(self, reminder: TaskReminder) -> None:
        await self._turn_off(reminder, "task completed")

    async def delete(self, reminder: TaskReminder) -> None:
        await self._turn_off(reminder, "task deleted")

    async def sync(self, task: TaskRecord) -> TaskReminder:
        """
        Reconcile a stored task with the notification schedule.

        A stored handle is never trusted: enabled reminders get cancel-then-schedule,
        disabled or completed ones get their handle cancelled.
        """
        reminder = TaskReminder.from_task(task)
        if task.completed or not task.reminder_enabled:
            await self._turn_off(reminder, "sync")
            return reminder

        at = reminder.reminder_date or self.default_time_for(reminder)
        await self._apply(reminder, at)
        return reminder

    # ---- internals ----

    async def _apply(self, reminder: TaskReminder, at: datetime) -> str | None:
        old = reminder.notification_id
        reminder.notification_id = None
        await self._engine.cancel(old)

        reminder.enabled = True
        reminder.reminder_date = at
        handle = await self._schedule(reminder.task_id, reminder.title, reminder.due_date, at)
        reminder.notification_id = handle

        if handle is None:
            logger.info("Reminder for task %s enabled without an active notification", reminder.task_id)
        return handle

    async def _turn_off(self, reminder: TaskReminder, reason: str) -> None:
        old = reminder.notification_id
        reminder.notification_id = None
        reminder.enabled = False
        reminder.reminder_date = None
        if old:
            await self._engine.cancel(old)
            logger.debug("Reminder for task %s off (%s)", reminder.task_id, reason)

    async def _schedule(
        self,
        task_id: str,
        title: str,
        due_date: datetime | None,
        at: datetime,
    ) -> str | None:
        now = self._clock()
        if aligned(at, now) <= now:
            # Past reminders are stale data, not a request to notify right away.
            logger.warning("Reminder date is in the past for task %s: %s", task_id, at)
            return None

        return await self._engine.schedule(
            REMINDER_TITLE,
            reminder_body(title, due_date),
            DateTrigger(at),
            ReminderPayload(task_id=task_id),
            ChannelId.TASK_REMINDERS,
        )
