# tests/test_local_platform.py

from __future__ import annotations

import asyncio
from datetime import timedelta

import pytest

from devtask_notify.bootstrap import create_initial_state, initialize
from devtask_notify.notifications.clock import local_now
from devtask_notify.notifications.models import (
    IMMEDIATE,
    ChannelId,
    DateTrigger,
    NotificationContent,
    NotificationTap,
    ReminderPayload,
)
from devtask_notify.platforms.local import LocalNotificationPlatform


@pytest.fixture()
def local_state(settings):
    return create_initial_state(settings=settings, platform=LocalNotificationPlatform())


@pytest.mark.asyncio
async def test_immediate_notification_is_delivered(local_state) -> None:
    await initialize(local_state)
    delivered = []
    local_state.listeners.add_notification_received_listener(delivered.append)

    handle = await local_state.engine.send_immediate("hi", "there", channel=ChannelId.STREAKS)
    await asyncio.sleep(0.01)

    assert [d.handle for d in delivered] == [handle]
    assert await local_state.engine.list_scheduled() == []


@pytest.mark.asyncio
async def test_date_trigger_fires_later_and_tap_is_routed(local_state) -> None:
    await initialize(local_state)
    taps: list[NotificationTap] = []
    local_state.listeners.add_notification_response_listener(taps.append)

    handle = await local_state.engine.schedule(
        "soon",
        "body",
        DateTrigger(local_now() + timedelta(milliseconds=50)),
        ReminderPayload(task_id="t1"),
    )
    assert [n.handle for n in await local_state.engine.list_scheduled()] == [handle]

    await asyncio.sleep(0.15)
    assert await local_state.engine.list_scheduled() == []

    assert local_state.platform.simulate_tap(handle) is True
    assert taps[0].task_id == "t1"


@pytest.mark.asyncio
async def test_cancelled_notification_never_fires(local_state) -> None:
    await initialize(local_state)
    delivered = []
    local_state.listeners.add_notification_received_listener(delivered.append)

    handle = await local_state.engine.schedule("x", "y", DateTrigger(local_now() + timedelta(milliseconds=30)))
    await local_state.engine.cancel(handle)
    await local_state.engine.cancel(handle)
    await asyncio.sleep(0.08)

    assert delivered == []


@pytest.mark.asyncio
async def test_platform_contract_raises_engine_absorbs() -> None:
    platform = LocalNotificationPlatform()

    with pytest.raises(PermissionError):
        await platform.schedule_notification(NotificationContent("t", "b"), IMMEDIATE)
    with pytest.raises(KeyError):
        await platform.cancel_notification("missing")

    await platform.request_permission()
    with pytest.raises(ValueError):
        await platform.schedule_notification(NotificationContent("t", "b", channel_id="streaks"), IMMEDIATE)


@pytest.mark.asyncio
async def test_denied_local_permission(settings) -> None:
    st = create_initial_state(settings=settings, platform=LocalNotificationPlatform(grant_on_request=False))
    await initialize(st)

    assert await st.engine.send_immediate("t", "b") is None
    assert await st.engine.send_immediate("t", "b") is None
    assert st.platform.prompt_count == 1


@pytest.mark.asyncio
async def test_delivered_history_is_bounded() -> None:
    platform = LocalNotificationPlatform(max_delivered=3)
    await platform.request_permission()

    handles = []
    for i in range(5):
        handles.append(await platform.schedule_notification(NotificationContent(f"t{i}", "b"), IMMEDIATE))
        await asyncio.sleep(0.01)

    assert [d.handle for d in platform.delivered] == handles[2:]
    assert platform.simulate_tap(handles[0]) is False
    assert platform.simulate_tap(handles[-1]) is True
