# src/devtask_notify/platforms/local.py

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Callable
from typing import Any

from ..notifications.clock import Clock, aligned, local_now
from ..notifications.models import (
    DateTrigger,
    DeliveredNotification,
    NotificationChannel,
    NotificationContent,
    NotificationResponse,
    PermissionState,
    ScheduledNotification,
    Trigger,
)

logger = logging.getLogger(__name__)


class _LocalSubscription:
    def __init__(self, listeners: list[Any], callback: Any) -> None:
        self._listeners = listeners
        self._callback = callback

    def remove(self) -> None:
        if self._callback in self._listeners:
            self._listeners.remove(self._callback)


class LocalNotificationPlatform:
    """
    In-process notification primitive used for desktop/dev runs when no OS backend is wired.

    Behavior:
    - Date triggers fire through loop.call_later, immediate ones on the next loop turn
    - Firing removes the entry from the pending set and calls received listeners
    - simulate_tap() plays the role of the user tapping a delivered notification
    - The permission prompt answers with grant_on_request
    - Only the newest max_delivered notifications stay tappable, like a tray that drops old entries
    """

    def __init__(
        self,
        *,
        supports_channels: bool = True,
        grant_on_request: bool = True,
        clock: Clock = local_now,
        max_delivered: int = 100,
    ) -> None:
        self.supports_channels = supports_channels
        self.grant_on_request = grant_on_request
        self.prompt_count = 0
        self.max_delivered = max(1, max_delivered)

        self._clock = clock
        self._permission = PermissionState.UNDETERMINED
        self._channels: dict[str, NotificationChannel] = {}
        self._pending: dict[str, tuple[ScheduledNotification, asyncio.TimerHandle]] = {}
        self._delivered: dict[str, DeliveredNotification] = {}
        self._received: list[Callable[[DeliveredNotification], None]] = []
        self._responses: list[Callable[[NotificationResponse], None]] = []

    @property
    def channels(self) -> dict[str, NotificationChannel]:
        return dict(self._channels)

    @property
    def delivered(self) -> list[DeliveredNotification]:
        return list(self._delivered.values())

    # ---- scheduling ----

    async def schedule_notification(self, content: NotificationContent, trigger: Trigger) -> str:
        if self._permission != PermissionState.GRANTED:
            raise PermissionError("notifications are not authorized")
        if content.channel_id is not None and self.supports_channels and content.channel_id not in self._channels:
            raise ValueError(f"unknown notification channel: {content.channel_id}")

        delay = 0.0
        if isinstance(trigger, DateTrigger):
            now = self._clock()
            delay = (aligned(trigger.at, now) - now).total_seconds()
            if delay < 0:
                raise ValueError(f"trigger is in the past: {trigger.at}")

        handle = uuid.uuid4().hex
        loop = asyncio.get_running_loop()
        timer = loop.call_later(delay, self._fire, handle)
        self._pending[handle] = (ScheduledNotification(handle=handle, content=content, trigger=trigger), timer)
        logger.debug("Local notification pending handle=%s delay=%.1fs", handle, delay)
        return handle

    async def cancel_notification(self, handle: str) -> None:
        _, timer = self._pending.pop(handle)
        timer.cancel()

    async def cancel_all_notifications(self) -> None:
        for _, timer in self._pending.values():
            timer.cancel()
        self._pending.clear()

    async def get_all_scheduled(self) -> list[ScheduledNotification]:
        return [n for n, _ in self._pending.values()]

    # ---- channels / permission ----

    async def configure_channel(self, channel: NotificationChannel) -> None:
        self._channels[channel.id.value] = channel

    async def get_permission_status(self) -> PermissionState:
        return self._permission

    async def request_permission(self) -> PermissionState:
        self.prompt_count += 1
        self._permission = PermissionState.GRANTED if self.grant_on_request else PermissionState.DENIED
        return self._permission

    # ---- listeners ----

    def add_received_listener(self, callback: Callable[[DeliveredNotification], None]) -> _LocalSubscription:
        self._received.append(callback)
        return _LocalSubscription(self._received, callback)

    def add_response_listener(self, callback: Callable[[NotificationResponse], None]) -> _LocalSubscription:
        self._responses.append(callback)
        return _LocalSubscription(self._responses, callback)

    def simulate_tap(self, handle: str, action_id: str = "default") -> bool:
        delivered = self._delivered.get(handle)
        if delivered is None:
            return False
        response = NotificationResponse(notification=delivered, action_id=action_id)
        for cb in list(self._responses):
            try:
                cb(response)
            except Exception:
                logger.exception("Response listener failed handle=%s", handle)
        return True

    def _fire(self, handle: str) -> None:
        entry = self._pending.pop(handle, None)
        if entry is None:
            return
        scheduled, _ = entry
        delivered = DeliveredNotification(handle=handle, content=scheduled.content, delivered_at=self._clock())
        self._delivered[handle] = delivered
        while len(self._delivered) > self.max_delivered:
            del self._delivered[next(iter(self._delivered))]
        logger.info("Notification delivered: %s | %s", scheduled.content.title, scheduled.content.body)

        for cb in list(self._received):
            try:
                cb(delivered)
            except Exception:
                logger.exception("Received listener failed handle=%s", handle)
