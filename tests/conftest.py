# tests/conftest.py

from __future__ import annotations

from datetime import UTC, datetime
from types import SimpleNamespace

import pytest

from devtask_notify.bootstrap import create_initial_state
from devtask_notify.core.state import NotifierState

from .fakes import FakeClock, FakeNotificationPlatform

NOW = datetime(2026, 3, 10, 14, 0, tzinfo=UTC)


@pytest.fixture()
def settings(tmp_path) -> SimpleNamespace:
    """
    Minimal settings object compatible with create_initial_state().

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="devtask-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        supports_channels=True,
        auto_grant_permission=True,
        notifications_enabled=True,
        sound_enabled=True,
        daily_summary_enabled=True,
        daily_summary_time="09:00",
        streak_notifications_enabled=True,
        overdue_alerts_enabled=True,
        upcoming_deadline_hours=24,
        reminder_lead_minutes=60,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture()
def platform() -> FakeNotificationPlatform:
    return FakeNotificationPlatform()


@pytest.fixture()
def state(settings: SimpleNamespace, platform: FakeNotificationPlatform, clock: FakeClock) -> NotifierState:
    """NotifierState wired with the fake platform and a frozen clock."""
    return create_initial_state(settings=settings, platform=platform, clock=clock)
