# tests/test_notifiers.py

from __future__ import annotations

import os
import time
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import pytest

from devtask_notify.notifications.models import IMMEDIATE, ChannelId, DateTrigger, TaskRecord
from devtask_notify.notifications.notifiers import (
    AggregateNotifier,
    DailyStats,
    NotificationPreferences,
    WeeklyStats,
    build_daily_summary,
    build_deadline_warning,
    build_overdue_alert,
    deadline_phrase,
    find_overdue,
    find_upcoming,
    next_occurrence,
    parse_hhmm,
    streak_message,
)

from .conftest import NOW


def test_daily_summary_anchoring() -> None:
    # NOW is 14:00
    assert next_occurrence("09:00", NOW) == (NOW + timedelta(days=1)).replace(hour=9)
    assert next_occurrence("18:00", NOW) == NOW.replace(hour=18)
    assert next_occurrence("14:00", NOW) == NOW + timedelta(days=1)


@pytest.fixture
def new_york_local_time():
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    saved = os.environ.get("TZ")
    os.environ["TZ"] = "America/New_York"
    time.tzset()
    try:
        if time.tzname[0] != "EST":
            pytest.skip("tz database has no America/New_York")
        yield
    finally:
        if saved is None:
            os.environ.pop("TZ", None)
        else:
            os.environ["TZ"] = saved
        time.tzset()


def test_daily_summary_keeps_wall_time_across_spring_forward(new_york_local_time) -> None:
    # Saturday 14:00 EST; clocks jump to EDT on Sunday 2026-03-08.
    now = datetime(2026, 3, 7, 14, 0).astimezone()
    assert now.utcoffset() == timedelta(hours=-5)

    at = next_occurrence("09:00", now)

    assert (at.year, at.month, at.day, at.hour, at.minute) == (2026, 3, 8, 9, 0)
    assert at.utcoffset() == timedelta(hours=-4)


def test_daily_summary_keeps_wall_time_across_fall_back(new_york_local_time) -> None:
    now = datetime(2026, 10, 31, 20, 0).astimezone()
    assert now.utcoffset() == timedelta(hours=-4)

    at = next_occurrence("09:00", now)

    assert (at.day, at.hour) == (1, 9)
    assert at.utcoffset() == timedelta(hours=-5)


def test_daily_summary_keeps_wall_time_in_named_zone() -> None:
    try:
        zone = ZoneInfo("America/New_York")
    except ZoneInfoNotFoundError:
        pytest.skip("tz database is not installed")
    now = datetime(2026, 3, 7, 14, 0, tzinfo=zone)

    at = next_occurrence("09:00", now)

    assert at == datetime(2026, 3, 8, 9, 0, tzinfo=zone)
    assert at.utcoffset() == timedelta(hours=-4)


def test_daily_summary_spec() -> None:
    spec = build_daily_summary("18:30", DailyStats(pending=4, completed=2, in_progress=1), NOW)

    assert spec.trigger == DateTrigger(NOW.replace(hour=18, minute=30))
    assert spec.channel == ChannelId.DAILY_SUMMARY
    assert spec.body == "2 completed, 4 pending, 1 in progress"
    assert spec.payload.to_data()["stats"] == {"pending": 4, "completed": 2, "inProgress": 1}


@pytest.mark.parametrize("bad", ["", "9", "24:00", "12:60", "ab:cd"])
def test_parse_hhmm_rejects_garbage(bad: str) -> None:
    with pytest.raises(ValueError):
        parse_hhmm(bad)


def test_streak_messages() -> None:
    assert "week" in streak_message(7)
    assert streak_message(23) == "🔥 Keep your streak going!"
    assert "40 day streak! Amazing!" in streak_message(40)
    assert "Century" in streak_message(100)
    assert streak_message(3) == "🔥 3 days strong! Keep it up!"
    assert streak_message(0) == "🔥 Keep your streak going!"
    assert streak_message(-10) == "🔥 Keep your streak going!"


def test_overdue_phrasing() -> None:
    one = [TaskRecord(id="a", title="Ship it")]
    many = one + [TaskRecord(id="b", title="Fix it")]

    assert build_overdue_alert([]) is None
    assert build_overdue_alert(one).body == '"Ship it" is overdue'
    spec = build_overdue_alert(many)
    assert spec.body == "You have 2 overdue tasks"
    assert spec.payload.to_data() == {"type": "overdue", "taskIds": ["a", "b"]}
    assert spec.channel == ChannelId.OVERDUE_TASKS


def test_deadline_phrasing() -> None:
    assert deadline_phrase(0.5) == "in less than an hour"
    assert deadline_phrase(1) == "in 1 hour"
    assert deadline_phrase(5.9) == "in 5 hours"
    spec = build_deadline_warning(TaskRecord(id="a", title="Demo"), 2.5)
    assert spec.body == '"Demo" is due in 2 hours'
    assert spec.trigger == IMMEDIATE
    assert spec.channel == ChannelId.TASK_REMINDERS


@pytest.mark.asyncio
async def test_send_overdue_alert_empty_is_noop(state, platform) -> None:
    assert await state.notifiers.send_overdue_alert([]) is None
    assert platform.calls == []


@pytest.mark.asyncio
async def test_schedule_daily_summary_through_engine(state, platform) -> None:
    handle = await state.notifiers.schedule_daily_summary("09:00", DailyStats(1, 2, 3))

    scheduled = platform.scheduled[handle]
    assert scheduled.trigger == DateTrigger((NOW + timedelta(days=1)).replace(hour=9))
    assert scheduled.content.channel_id == "daily-summary"


@pytest.mark.asyncio
async def test_daily_summary_defaults_to_preference_time(state, platform) -> None:
    handle = await state.notifiers.schedule_daily_summary(None, DailyStats(0, 0, 0))

    assert platform.scheduled[handle].trigger.at.hour == 9


@pytest.mark.asyncio
async def test_invalid_daily_summary_time_is_logged_not_raised(state, platform) -> None:
    assert await state.notifiers.schedule_daily_summary("25:99", DailyStats(0, 0, 0)) is None
    assert platform.calls == []


@pytest.mark.asyncio
async def test_streak_weekly_and_deadline_are_immediate(state, platform) -> None:
    streak = await state.notifiers.send_streak_notification(7)
    weekly = await state.notifiers.send_weekly_summary(WeeklyStats(5, 8, "coding", 320))
    deadline = await state.notifiers.send_deadline_warning(TaskRecord(id="t", title="T"), 1)

    assert platform.scheduled[streak].content.title == "7 Day Streak"
    assert platform.scheduled[streak].content.channel_id == "streaks"
    assert platform.scheduled[weekly].content.body == "5 tasks completed this week. Top category: coding"
    assert platform.scheduled[deadline].content.data["taskId"] == "t"
    assert all(platform.scheduled[h].trigger == IMMEDIATE for h in (streak, weekly, deadline))


@pytest.mark.asyncio
async def test_preferences_gate_sends(state, platform) -> None:
    state.notifiers.preferences = NotificationPreferences(
        streak_notifications_enabled=False,
        overdue_alerts_enabled=False,
    )
    assert await state.notifiers.send_streak_notification(7) is None
    assert await state.notifiers.send_overdue_alert([TaskRecord(id="a", title="a")]) is None
    assert await state.notifiers.send_weekly_summary(WeeklyStats(1, 1, "x", 1)) is not None

    state.notifiers.preferences = NotificationPreferences(notifications_enabled=False)
    assert await state.notifiers.send_weekly_summary(WeeklyStats(1, 1, "x", 1)) is None


def test_find_overdue_and_upcoming() -> None:
    tasks = [
        TaskRecord(id="late", title="late", due_date=NOW - timedelta(hours=2)),
        TaskRecord(id="later", title="later", due_date=NOW - timedelta(days=1)),
        TaskRecord(id="done", title="done", due_date=NOW - timedelta(days=1), completed=True),
        TaskRecord(id="soon", title="soon", due_date=NOW + timedelta(hours=3)),
        TaskRecord(id="far", title="far", due_date=NOW + timedelta(days=5)),
        TaskRecord(id="none", title="none"),
    ]

    assert [t.id for t in find_overdue(tasks, NOW)] == ["later", "late"]
    upcoming = find_upcoming(tasks, NOW, 24)
    assert [(t.id, h) for t, h in upcoming] == [("soon", 3.0)]


@pytest.mark.asyncio
async def test_check_deadlines_sends_one_overdue_and_warnings(state, platform) -> None:
    tasks = [
        TaskRecord(id="late", title="late", due_date=NOW - timedelta(hours=2)),
        TaskRecord(id="soon", title="soon", due_date=NOW + timedelta(minutes=30)),
    ]

    handles = await state.notifiers.check_deadlines(tasks)

    assert len(handles) == 2
    bodies = [platform.scheduled[h].content.body for h in handles]
    assert bodies == ['"late" is overdue', '"soon" is due in less than an hour']


@pytest.mark.asyncio
async def test_notifier_uses_its_own_clock(state, platform, clock) -> None:
    notifier = AggregateNotifier(state.engine, clock=lambda: NOW.replace(hour=20))
    handle = await notifier.schedule_daily_summary("18:00", DailyStats(0, 0, 0))

    assert platform.scheduled[handle].trigger.at == (NOW + timedelta(days=1)).replace(hour=18)
