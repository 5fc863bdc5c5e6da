# src/devtask_notify/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the OS notification primitive and the task store swappable
and makes testing easier.
"""

from collections.abc import Callable
from typing import Protocol

from ..notifications.models import (
    DeliveredNotification,
    NotificationChannel,
    NotificationContent,
    NotificationResponse,
    PermissionState,
    ScheduledNotification,
    TaskRecord,
    Trigger,
)

ReceivedCallback = Callable[[DeliveredNotification], None]
ResponseCallback = Callable[[NotificationResponse], None]


class PlatformSubscription(Protocol):
    def remove(self) -> None: ...


class NotificationPlatform(Protocol):
    """
    OS-level local notification primitive.

    Scheduling/cancel/permission/channel calls are coroutines; listener
    registration is synchronous and returns a removable subscription.
    Implementations may raise on any call; the engine owns the best-effort policy.
    """

    supports_channels: bool

    async def schedule_notification(self, content: NotificationContent, trigger: Trigger) -> str: ...
    async def cancel_notification(self, handle: str) -> None: ...
    async def cancel_all_notifications(self) -> None: ...
    async def get_all_scheduled(self) -> list[ScheduledNotification]: ...

    async def configure_channel(self, channel: NotificationChannel) -> None: ...

    async def get_permission_status(self) -> PermissionState: ...
    async def request_permission(self) -> PermissionState: ...

    def add_received_listener(self, callback: ReceivedCallback) -> PlatformSubscription: ...
    def add_response_listener(self, callback: ResponseCallback) -> PlatformSubscription: ...


class TaskSource(Protocol):
    """Read side of the task store; persistence is owned elsewhere."""

    def get_task(self, task_id: str) -> TaskRecord | None: ...
    def list_tasks(self) -> list[TaskRecord]: ...
