# src/devtask_notify/notifications/engine.py

from __future__ import annotations

"""
Scheduling engine.

Mediates permission, channel and trigger semantics into one call:
- make sure we are allowed to notify (prompting at most once),
- reject triggers that are already in the past,
- attach channel metadata where the platform has channels,
- hand the request to the platform and return its handle.

Every failure mode comes back as None (or a no-op for cancels). Notification
delivery is a side effect of task mutations and must never abort them.
"""

import logging
from datetime import datetime

from ..core.ports import NotificationPlatform
from .channels import ChannelRegistry
from .clock import Clock, aligned, local_now
from .models import (
    IMMEDIATE,
    ChannelId,
    DateTrigger,
    NotificationContent,
    Payload,
    ScheduledNotification,
    Trigger,
)
from .permissions import PermissionGate

logger = logging.getLogger(__name__)


class SchedulingEngine:
    def __init__(
        self,
        platform: NotificationPlatform,
        permissions: PermissionGate,
        channels: ChannelRegistry,
        *,
        clock: Clock = local_now,
        sound_enabled: bool = True,
    ) -> None:
        self._platform = platform
        self._permissions = permissions
        self._channels = channels
        self._clock = clock
        self.sound_enabled = sound_enabled

    @property
    def permissions(self) -> PermissionGate:
        return self._permissions

    @property
    def channels(self) -> ChannelRegistry:
        return self._channels

    def now(self) -> datetime:
        return self._clock()

    async def schedule(
        self,
        title: str,
        body: str,
        trigger: Trigger,
        payload: Payload | None = None,
        channel: ChannelId = ChannelId.TASK_REMINDERS,
    ) -> str | None:
        """Schedule one notification. Returns the platform handle or None."""
        # Stale triggers are rejected before the consent prompt can be shown.
        if isinstance(trigger, DateTrigger):
            now = self._clock()
            if aligned(trigger.at, now) <= now:
                logger.warning("Rejected notification with past trigger at=%s (title=%r)", trigger.at, title)
                return None

        if not self._permissions.granted:
            if not await self._permissions.request_permission():
                logger.warning("Cannot schedule notification: permission denied (title=%r)", title)
                return None

        content = NotificationContent(
            title=title,
            body=body,
            data=payload.to_data() if payload is not None else {},
            sound=self.sound_enabled,
            channel_id=self._channels.channel_id_for(channel),
        )

        try:
            handle = await self._platform.schedule_notification(content, trigger)
        except Exception:
            logger.exception("Platform rejected notification (title=%r channel=%s)", title, channel)
            return None

        if not handle:
            logger.warning("Platform returned no handle (title=%r)", title)
            return None

        logger.info("Notification scheduled handle=%s channel=%s", handle, channel)
        return str(handle)

    async def send_immediate(
        self,
        title: str,
        body: str,
        payload: Payload | None = None,
        channel: ChannelId = ChannelId.TASK_REMINDERS,
    ) -> str | None:
        return await self.schedule(title, body, IMMEDIATE, payload, channel)

    async def cancel(self, handle: str | None) -> None:
        """Cancel one notification; unknown, fired or already-cancelled handles are a no-op."""
        if not handle:
            return
        try:
            await self._platform.cancel_notification(handle)
        except Exception:
            logger.debug("Cancel of handle=%s ignored (already consumed?)", handle, exc_info=True)
            return
        logger.info("Notification cancelled handle=%s", handle)

    async def cancel_all(self) -> None:
        """Destructive reset. Normal reminder edits use cancel()."""
        try:
            await self._platform.cancel_all_notifications()
        except Exception:
            logger.exception("cancel_all_notifications failed")
            return
        logger.info("All notifications cancelled")

    async def list_scheduled(self) -> list[ScheduledNotification]:
        try:
            return list(await self._platform.get_all_scheduled())
        except Exception:
            logger.exception("get_all_scheduled failed")
            return []
