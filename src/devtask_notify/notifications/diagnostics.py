# src/devtask_notify/notifications/diagnostics.py

from __future__ import annotations

"""
Self-checks for the notification path (settings screen "send test notification").

They go through the same engine as real notifications, so a failed check
shows exactly what a user would miss.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta

from ..core.state import NotifierState
from .channels import CHANNELS
from .models import ChannelId, DateTrigger, DiagnosticPayload

logger = logging.getLogger(__name__)

_CHANNEL_SAMPLES: dict[ChannelId, tuple[str, str]] = {
    ChannelId.TASK_REMINDERS: ("📌 Task Reminder Test", "This is a task reminder notification"),
    ChannelId.DAILY_SUMMARY: ("📊 Daily Summary Test", "This is a daily summary notification"),
    ChannelId.STREAKS: ("🔥 Streak Test", "This is a streak notification"),
    ChannelId.OVERDUE_TASKS: ("⚠️ Overdue Task Test", "This is an overdue task notification"),
}


@dataclass(slots=True, frozen=True)
class DeliveryCheck:
    permission_granted: bool
    immediate_handle: str | None
    scheduled_handle: str | None
    pending_count: int

    @property
    def ok(self) -> bool:
        return self.permission_granted and bool(self.immediate_handle) and bool(self.scheduled_handle)


async def check_delivery(state: NotifierState, *, delay_seconds: float = 5.0) -> DeliveryCheck:
    engine = state.engine

    granted = await state.permissions.has_permission() or await state.permissions.request_permission()
    if not granted:
        logger.error("Notification permission denied. Cannot check delivery.")
        return DeliveryCheck(False, None, None, 0)

    immediate = await engine.send_immediate(
        "✓ Test Notification",
        "If you see this, notifications are working! 🎉",
        DiagnosticPayload(label="immediate"),
    )
    scheduled = await engine.schedule(
        "⏰ Scheduled Test",
        f"This notification was scheduled {delay_seconds:g} seconds ago",
        DateTrigger(engine.now() + timedelta(seconds=delay_seconds)),
        DiagnosticPayload(label="scheduled"),
    )
    pending = await engine.list_scheduled()

    result = DeliveryCheck(True, immediate, scheduled, len(pending))
    logger.info(
        "Delivery check: immediate=%s scheduled=%s pending=%d",
        immediate,
        scheduled,
        result.pending_count,
    )
    return result


async def check_channels(state: NotifierState) -> dict[ChannelId, str | None]:
    """Send one immediate notification per channel."""
    out: dict[ChannelId, str | None] = {}
    for channel_id in CHANNELS:
        title, body = _CHANNEL_SAMPLES[channel_id]
        out[channel_id] = await state.engine.send_immediate(
            title,
            body,
            DiagnosticPayload(label=f"channel:{channel_id.value}"),
            channel_id,
        )
    logger.info("Channel check: %d/%d delivered to platform", sum(1 for h in out.values() if h), len(out))
    return out
