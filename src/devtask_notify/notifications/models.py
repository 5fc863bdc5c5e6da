# src/devtask_notify/notifications/models.py

from __future__ import annotations

"""
Value types shared by the notification components.

Payloads are a closed set of tagged variants. Producers build one of the
*Payload classes, the platform only ever sees the plain dict from to_data(),
and the tap consumer gets a typed payload back through parse_payload().
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any, ClassVar


class ChannelId(StrEnum):
    TASK_REMINDERS = "task-reminders"
    DAILY_SUMMARY = "daily-summary"
    STREAKS = "streaks"
    OVERDUE_TASKS = "overdue-tasks"


class Urgency(StrEnum):
    HIGH = "high"
    DEFAULT = "default"


class PermissionState(StrEnum):
    UNDETERMINED = "undetermined"
    GRANTED = "granted"
    DENIED = "denied"

    @classmethod
    def from_platform(cls, raw: Any) -> PermissionState:
        if isinstance(raw, PermissionState):
            return raw
        if not raw:
            return cls.UNDETERMINED
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.UNDETERMINED


@dataclass(slots=True, frozen=True)
class NotificationChannel:
    id: ChannelId
    name: str
    description: str
    urgency: Urgency
    sound: bool
    vibration_pattern: tuple[int, ...]
    light_color: str


# ---- triggers ----


@dataclass(slots=True, frozen=True)
class DateTrigger:
    """Fire once at an absolute point in time."""

    at: datetime


@dataclass(slots=True, frozen=True)
class ImmediateTrigger:
    """Deliver as soon as the platform can."""


IMMEDIATE = ImmediateTrigger()

Trigger = DateTrigger | ImmediateTrigger


# ---- payloads ----


@dataclass(slots=True, frozen=True)
class ReminderPayload:
    type: ClassVar[str] = "reminder"

    task_id: str
    screen: str | None = None

    def to_data(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type, "taskId": self.task_id}
        if self.screen:
            data["screen"] = self.screen
        return data

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> ReminderPayload:
        return cls(task_id=str(data["taskId"]), screen=data.get("screen"))


@dataclass(slots=True, frozen=True)
class DailySummaryPayload:
    type: ClassVar[str] = "daily-summary"

    pending: int
    completed: int
    in_progress: int

    def to_data(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "stats": {
                "pending": self.pending,
                "completed": self.completed,
                "inProgress": self.in_progress,
            },
        }

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> DailySummaryPayload:
        stats = data["stats"]
        return cls(
            pending=int(stats["pending"]),
            completed=int(stats["completed"]),
            in_progress=int(stats["inProgress"]),
        )


@dataclass(slots=True, frozen=True)
class WeeklySummaryPayload:
    type: ClassVar[str] = "weekly-summary"

    completed: int
    created: int
    top_category: str
    total_time: int

    def to_data(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "stats": {
                "completed": self.completed,
                "created": self.created,
                "topCategory": self.top_category,
                "totalTime": self.total_time,
            },
        }

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> WeeklySummaryPayload:
        stats = data["stats"]
        return cls(
            completed=int(stats["completed"]),
            created=int(stats["created"]),
            top_category=str(stats["topCategory"]),
            total_time=int(stats["totalTime"]),
        )


@dataclass(slots=True, frozen=True)
class StreakPayload:
    type: ClassVar[str] = "streak"

    streak: int

    def to_data(self) -> dict[str, Any]:
        return {"type": self.type, "streak": self.streak}

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> StreakPayload:
        return cls(streak=int(data["streak"]))


@dataclass(slots=True, frozen=True)
class OverduePayload:
    type: ClassVar[str] = "overdue"

    task_ids: tuple[str, ...]

    def to_data(self) -> dict[str, Any]:
        return {"type": self.type, "taskIds": list(self.task_ids)}

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> OverduePayload:
        return cls(task_ids=tuple(str(t) for t in data["taskIds"]))


@dataclass(slots=True, frozen=True)
class DeadlinePayload:
    type: ClassVar[str] = "deadline"

    task_id: str
    hours_until_due: float
    screen: str | None = None

    def to_data(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": self.type,
            "taskId": self.task_id,
            "hoursUntilDue": self.hours_until_due,
        }
        if self.screen:
            data["screen"] = self.screen
        return data

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> DeadlinePayload:
        return cls(
            task_id=str(data["taskId"]),
            hours_until_due=float(data["hoursUntilDue"]),
            screen=data.get("screen"),
        )


@dataclass(slots=True, frozen=True)
class DiagnosticPayload:
    type: ClassVar[str] = "diagnostic"

    label: str

    def to_data(self) -> dict[str, Any]:
        return {"type": self.type, "label": self.label}

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> DiagnosticPayload:
        return cls(label=str(data["label"]))


Payload = (
    ReminderPayload
    | DailySummaryPayload
    | WeeklySummaryPayload
    | StreakPayload
    | OverduePayload
    | DeadlinePayload
    | DiagnosticPayload
)

_PAYLOAD_TYPES: dict[str, Any] = {
    cls.type: cls
    for cls in (
        ReminderPayload,
        DailySummaryPayload,
        WeeklySummaryPayload,
        StreakPayload,
        OverduePayload,
        DeadlinePayload,
        DiagnosticPayload,
    )
}


def parse_payload(data: Mapping[str, Any] | None) -> Payload | None:
    """Rebuild a typed payload from notification data; None if unknown or malformed."""
    if not data:
        return None
    cls = _PAYLOAD_TYPES.get(str(data.get("type") or ""))
    if cls is None:
        return None
    try:
        return cls.from_data(data)
    except (KeyError, TypeError, ValueError):
        return None


# ---- content / platform records ----


@dataclass(slots=True, frozen=True)
class NotificationContent:
    title: str
    body: str
    data: dict[str, Any] = field(default_factory=dict)
    sound: bool = True
    channel_id: str | None = None


@dataclass(slots=True, frozen=True)
class ScheduledNotification:
    handle: str
    content: NotificationContent
    trigger: Trigger


@dataclass(slots=True, frozen=True)
class DeliveredNotification:
    handle: str
    content: NotificationContent
    delivered_at: datetime


@dataclass(slots=True, frozen=True)
class NotificationResponse:
    notification: DeliveredNotification
    action_id: str = "default"


@dataclass(slots=True, frozen=True)
class NotificationTap:
    """What the UI layer receives when a notification is tapped."""

    task_id: str | None
    screen: str | None
    payload: Payload | None
    data: dict[str, Any]


# ---- task view ----


@dataclass(slots=True, frozen=True)
class TaskRecord:
    """Read-only view of a task as supplied by the task store."""

    id: str
    title: str
    due_date: datetime | None = None
    reminder_date: datetime | None = None
    reminder_enabled: bool = False
    notification_id: str | None = None
    completed: bool = False
