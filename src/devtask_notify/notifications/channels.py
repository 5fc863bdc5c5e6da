# src/devtask_notify/notifications/channels.py

from __future__ import annotations

import logging
from types import MappingProxyType

from ..core.ports import NotificationPlatform
from .models import ChannelId, NotificationChannel, Urgency

logger = logging.getLogger(__name__)

_CHANNELS: tuple[NotificationChannel, ...] = (
    NotificationChannel(
        id=ChannelId.TASK_REMINDERS,
        name="Task Reminders",
        description="Notifications for task due dates and reminders",
        urgency=Urgency.HIGH,
        sound=True,
        vibration_pattern=(0, 250, 250, 250),
        light_color="#007ACC",
    ),
    NotificationChannel(
        id=ChannelId.DAILY_SUMMARY,
        name="Daily Summary",
        description="Daily task summaries and reviews",
        urgency=Urgency.DEFAULT,
        sound=True,
        vibration_pattern=(0, 250, 250),
        light_color="#007ACC",
    ),
    NotificationChannel(
        id=ChannelId.STREAKS,
        name="Streaks & Achievements",
        description="Notifications for streaks and milestones",
        urgency=Urgency.DEFAULT,
        sound=True,
        vibration_pattern=(0, 250),
        light_color="#4EC9B0",
    ),
    NotificationChannel(
        id=ChannelId.OVERDUE_TASKS,
        name="Overdue Tasks",
        description="Alerts for overdue tasks",
        urgency=Urgency.HIGH,
        sound=True,
        vibration_pattern=(0, 500, 250, 500),
        light_color="#F48771",
    ),
)

CHANNELS = MappingProxyType({c.id: c for c in _CHANNELS})


class ChannelRegistry:
    """
    The fixed set of delivery channels.

    configure_channels() is safe to call on every start: channels already
    declared with identical metadata are skipped. Platforms without a channel
    concept make it a no-op and channel_id_for() returns None.
    """

    def __init__(self, platform: NotificationPlatform, *, supports_channels: bool | None = None) -> None:
        self._platform = platform
        if supports_channels is None:
            supports_channels = bool(getattr(platform, "supports_channels", False))
        self._supports_channels = supports_channels
        self._configured: dict[ChannelId, NotificationChannel] = {}

    @property
    def supports_channels(self) -> bool:
        return self._supports_channels

    def get(self, channel_id: ChannelId | str) -> NotificationChannel:
        return CHANNELS[ChannelId(channel_id)]

    def all(self) -> list[NotificationChannel]:
        return list(CHANNELS.values())

    def channel_id_for(self, channel_id: ChannelId | str) -> str | None:
        channel = self.get(channel_id)
        return channel.id.value if self._supports_channels else None

    async def configure_channels(self) -> None:
        if not self._supports_channels:
            logger.debug("Platform has no notification channels; skipping configuration")
            return

        configured = 0
        for channel in CHANNELS.values():
            if self._configured.get(channel.id) == channel:
                continue
            try:
                await self._platform.configure_channel(channel)
            except Exception:
                logger.exception("Failed to configure notification channel %s", channel.id.value)
                continue
            self._configured[channel.id] = channel
            configured += 1

        if configured:
            logger.info("Notification channels configured: %d", configured)
