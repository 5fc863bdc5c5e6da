# src/devtask_notify/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..notifications.channels import ChannelRegistry
from ..notifications.engine import SchedulingEngine
from ..notifications.listeners import DeliveryListenerBridge
from ..notifications.notifiers import AggregateNotifier
from ..notifications.permissions import PermissionGate
from ..notifications.reminders import ReminderLifecycleManager
from .ports import NotificationPlatform, TaskSource


@dataclass
class NotifierState:
    """Everything the notification layer needs, wired once by the composition root."""

    # Store Settings on the state for easy access in other modules later.
    settings: object

    platform: NotificationPlatform
    permissions: PermissionGate
    channels: ChannelRegistry
    engine: SchedulingEngine
    reminders: ReminderLifecycleManager
    notifiers: AggregateNotifier
    listeners: DeliveryListenerBridge

    tasks: TaskSource | None = None
    initialized: bool = False
