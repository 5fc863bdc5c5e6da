# src/devtask_notify/notifications/notifiers.py

from __future__ import annotations

"""
Recurring & aggregate notifiers.

Each build_* function is pure: aggregate input in, NotificationSpec out.
AggregateNotifier applies the user's notification preferences and hands the
spec to the scheduling engine.

None of these loop or re-arm themselves. The daily summary schedules exactly
one future instance per call; weekly summaries and deadline sweeps are driven
by an external periodic job.
"""

import logging
import math
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta

from .clock import Clock, aligned, from_wall
from .engine import SchedulingEngine
from .models import (
    IMMEDIATE,
    ChannelId,
    DailySummaryPayload,
    DateTrigger,
    DeadlinePayload,
    OverduePayload,
    Payload,
    StreakPayload,
    TaskRecord,
    Trigger,
    WeeklySummaryPayload,
)

logger = logging.getLogger(__name__)

_HHMM_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")

STREAK_MILESTONES: dict[int, str] = {
    3: "🔥 3 days strong! Keep it up!",
    7: "🔥 One week streak! You are on fire!",
    14: "🔥 14 days! Two weeks of productivity!",
    30: "🔥 30 days! A month of consistency!",
    50: "🔥 50 days! Halfway to 100!",
    100: "🔥 100 days! Century milestone reached!",
}
STREAK_FALLBACK = "🔥 Keep your streak going!"


@dataclass(slots=True, frozen=True)
class NotificationSpec:
    title: str
    body: str
    trigger: Trigger
    channel: ChannelId
    payload: Payload


@dataclass(slots=True, frozen=True)
class DailyStats:
    pending: int
    completed: int
    in_progress: int


@dataclass(slots=True, frozen=True)
class WeeklyStats:
    completed: int
    created: int
    top_category: str
    total_time: int


@dataclass(slots=True, frozen=True)
class NotificationPreferences:
    notifications_enabled: bool = True
    sound_enabled: bool = True
    daily_summary_enabled: bool = True
    daily_summary_time: str = "09:00"
    streak_notifications_enabled: bool = True
    overdue_alerts_enabled: bool = True
    upcoming_deadline_hours: int = 24

    @classmethod
    def from_settings(cls, settings) -> NotificationPreferences:
        return cls(
            notifications_enabled=bool(getattr(settings, "notifications_enabled", True)),
            sound_enabled=bool(getattr(settings, "sound_enabled", True)),
            daily_summary_enabled=bool(getattr(settings, "daily_summary_enabled", True)),
            daily_summary_time=str(getattr(settings, "daily_summary_time", "09:00")),
            streak_notifications_enabled=bool(getattr(settings, "streak_notifications_enabled", True)),
            overdue_alerts_enabled=bool(getattr(settings, "overdue_alerts_enabled", True)),
            upcoming_deadline_hours=int(getattr(settings, "upcoming_deadline_hours", 24)),
        )


# ---- pure builders ----


def parse_hhmm(value: str) -> tuple[int, int]:
    m = _HHMM_RE.match(value or "")
    if not m:
        raise ValueError(f"Expected HH:MM, got {value!r}")
    hours, minutes = int(m.group(1)), int(m.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError(f"Expected HH:MM, got {value!r}")
    return hours, minutes


def next_occurrence(time_hhmm: str, now: datetime) -> datetime:
    """The next wall-clock HH:MM strictly after now (today if still ahead, else tomorrow)."""
    hours, minutes = parse_hhmm(time_hhmm)
    # Day arithmetic on wall time; the offset is re-derived for the target date.
    base = now.replace(tzinfo=None)
    at = base.replace(hour=hours, minute=minutes, second=0, microsecond=0)
    if at <= base:
        at += timedelta(days=1)
    return from_wall(at, now)


def build_daily_summary(time_hhmm: str, stats: DailyStats, now: datetime) -> NotificationSpec:
    return NotificationSpec(
        title="📊 Daily Summary",
        body=f"{stats.completed} completed, {stats.pending} pending, {stats.in_progress} in progress",
        trigger=DateTrigger(next_occurrence(time_hhmm, now)),
        channel=ChannelId.DAILY_SUMMARY,
        payload=DailySummaryPayload(
            pending=stats.pending,
            completed=stats.completed,
            in_progress=stats.in_progress,
        ),
    )


def build_weekly_summary(stats: WeeklyStats) -> NotificationSpec:
    return NotificationSpec(
        title="📈 Weekly Summary",
        body=f"{stats.completed} tasks completed this week. Top category: {stats.top_category}",
        trigger=IMMEDIATE,
        channel=ChannelId.DAILY_SUMMARY,
        payload=WeeklySummaryPayload(
            completed=stats.completed,
            created=stats.created,
            top_category=stats.top_category,
            total_time=stats.total_time,
        ),
    )


def streak_message(streak: int) -> str:
    if streak in STREAK_MILESTONES:
        return STREAK_MILESTONES[streak]
    if streak > 0 and streak % 10 == 0:
        return f"🔥 {streak} day streak! Amazing!"
    return STREAK_FALLBACK


def build_streak(streak: int) -> NotificationSpec:
    return NotificationSpec(
        title=f"{streak} Day Streak",
        body=streak_message(streak),
        trigger=IMMEDIATE,
        channel=ChannelId.STREAKS,
        payload=StreakPayload(streak=streak),
    )


def build_overdue_alert(tasks: Sequence[TaskRecord]) -> NotificationSpec | None:
    if not tasks:
        return None
    if len(tasks) == 1:
        body = f'"{tasks[0].title}" is overdue'
    else:
        body = f"You have {len(tasks)} overdue tasks"
    return NotificationSpec(
        title="⚠️ Overdue Tasks",
        body=body,
        trigger=IMMEDIATE,
        channel=ChannelId.OVERDUE_TASKS,
        payload=OverduePayload(task_ids=tuple(t.id for t in tasks)),
    )


def deadline_phrase(hours_until_due: float) -> str:
    if hours_until_due < 1:
        return "in less than an hour"
    if hours_until_due == 1:
        return "in 1 hour"
    return f"in {math.floor(hours_until_due)} hours"


def build_deadline_warning(task: TaskRecord, hours_until_due: float) -> NotificationSpec:
    return NotificationSpec(
        title="📅 Upcoming Deadline",
        body=f'"{task.title}" is due {deadline_phrase(hours_until_due)}',
        trigger=IMMEDIATE,
        channel=ChannelId.TASK_REMINDERS,
        payload=DeadlinePayload(task_id=task.id, hours_until_due=hours_until_due),
    )


# ---- sweep helpers ----


def find_overdue(tasks: Iterable[TaskRecord], now: datetime) -> list[TaskRecord]:
    """Open tasks whose due date has passed, oldest first."""
    out = [t for t in tasks if not t.completed and t.due_date is not None and aligned(t.due_date, now) < now]
    out.sort(key=lambda t: aligned(t.due_date, now))  # type: ignore[arg-type]
    return out


def find_upcoming(
    tasks: Iterable[TaskRecord],
    now: datetime,
    within_hours: float,
) -> list[tuple[TaskRecord, float]]:
    """Open tasks due within the window, with hours left, soonest first."""
    horizon = now + timedelta(hours=within_hours)
    out: list[tuple[TaskRecord, float]] = []
    for t in tasks:
        if t.completed or t.due_date is None:
            continue
        due = aligned(t.due_date, now)
        if now <= due <= horizon:
            out.append((t, (due - now).total_seconds() / 3600.0))
    out.sort(key=lambda pair: pair[1])
    return out


class AggregateNotifier:
    def __init__(
        self,
        engine: SchedulingEngine,
        preferences: NotificationPreferences | None = None,
        *,
        clock: Clock | None = None,
    ) -> None:
        self._engine = engine
        self.preferences = preferences or NotificationPreferences()
        self._clock = clock or engine.now

    async def _send(self, spec: NotificationSpec) -> str | None:
        return await self._engine.schedule(spec.title, spec.body, spec.trigger, spec.payload, spec.channel)

    def _allowed(self, kind: str, flag: bool) -> bool:
        if not self.preferences.notifications_enabled:
            logger.debug("Notifications disabled; skipping %s", kind)
            return False
        if not flag:
            logger.debug("%s notifications disabled; skipping", kind)
            return False
        return True

    async def schedule_daily_summary(self, time_hhmm: str | None, stats: DailyStats) -> str | None:
        if not self._allowed("daily summary", self.preferences.daily_summary_enabled):
            return None
        time_hhmm = time_hhmm or self.preferences.daily_summary_time
        try:
            spec = build_daily_summary(time_hhmm, stats, self._clock())
        except ValueError:
            logger.warning("Invalid daily summary time %r", time_hhmm)
            return None
        return await self._send(spec)

    async def send_weekly_summary(self, stats: WeeklyStats) -> str | None:
        if not self._allowed("weekly summary", True):
            return None
        return await self._send(build_weekly_summary(stats))

    async def send_streak_notification(self, streak: int) -> str | None:
        if not self._allowed("streak", self.preferences.streak_notifications_enabled):
            return None
        return await self._send(build_streak(streak))

    async def send_overdue_alert(self, tasks: Sequence[TaskRecord]) -> str | None:
        spec = build_overdue_alert(tasks)
        if spec is None:
            return None
        if not self._allowed("overdue", self.preferences.overdue_alerts_enabled):
            return None
        return await self._send(spec)

    async def send_deadline_warning(self, task: TaskRecord, hours_until_due: float) -> str | None:
        if not self._allowed("deadline", True):
            return None
        return await self._send(build_deadline_warning(task, hours_until_due))

    async def check_deadlines(self, tasks: Iterable[TaskRecord]) -> list[str]:
        """
        One sweep over the task list: a single overdue alert for everything past due,
        plus a deadline warning per task due within upcoming_deadline_hours.

        Returns the handles that were actually scheduled.
        """
        now = self._clock()
        tasks = list(tasks)
        handles: list[str] = []

        handle = await self.send_overdue_alert(find_overdue(tasks, now))
        if handle:
            handles.append(handle)

        window = self.preferences.upcoming_deadline_hours
        if window > 0:
            for task, hours in find_upcoming(tasks, now, window):
                handle = await self.send_deadline_warning(task, hours)
                if handle:
                    handles.append(handle)

        return handles
