# src/devtask_notify/notifications/listeners.py

from __future__ import annotations

import contextlib
import logging
from collections.abc import Callable, Iterator

from ..core.ports import NotificationPlatform, PlatformSubscription
from .models import DeliveredNotification, NotificationResponse, NotificationTap, parse_payload

logger = logging.getLogger(__name__)

ReceivedListener = Callable[[DeliveredNotification], None]
TapListener = Callable[[NotificationTap], None]


def tap_from_response(response: NotificationResponse) -> NotificationTap:
    """taskId/screen are copied from the payload as-is; routing is the UI's job."""
    data = dict(response.notification.content.data or {})
    return NotificationTap(
        task_id=data.get("taskId"),
        screen=data.get("screen"),
        payload=parse_payload(data),
        data=data,
    )


class Subscription:
    """A registered listener. remove() is idempotent; usable as a context manager."""

    def __init__(self, inner: PlatformSubscription, on_removed: Callable[[Subscription], None]) -> None:
        self._inner = inner
        self._on_removed = on_removed
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def remove(self) -> None:
        if not self._active:
            return
        self._active = False
        try:
            self._inner.remove()
        except Exception:
            logger.exception("Failed to remove platform notification listener")
        finally:
            self._on_removed(self)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc_info) -> None:
        self.remove()


class DeliveryListenerBridge:
    """
    Re-exposes platform delivery/tap callbacks as plain event sinks.

    Every subscription handed out is tracked so close() can release whatever a
    caller forgot; listening() scopes a pair of listeners to a with-block.
    A listener that raises is logged and does not reach the platform.
    """

    def __init__(self, platform: NotificationPlatform) -> None:
        self._platform = platform
        self._subscriptions: list[Subscription] = []

    @property
    def active_count(self) -> int:
        return len(self._subscriptions)

    def add_notification_received_listener(self, callback: ReceivedListener) -> Subscription:
        def _on_received(notification: DeliveredNotification) -> None:
            try:
                callback(notification)
            except Exception:
                logger.exception("Notification received listener failed handle=%s", notification.handle)

        return self._track(self._platform.add_received_listener(_on_received))

    def add_notification_response_listener(self, callback: TapListener) -> Subscription:
        def _on_response(response: NotificationResponse) -> None:
            tap = tap_from_response(response)
            try:
                callback(tap)
            except Exception:
                logger.exception("Notification tap listener failed task_id=%s", tap.task_id)

        return self._track(self._platform.add_response_listener(_on_response))

    @contextlib.contextmanager
    def listening(
        self,
        on_received: ReceivedListener | None = None,
        on_tap: TapListener | None = None,
    ) -> Iterator[None]:
        with contextlib.ExitStack() as stack:
            if on_received is not None:
                stack.enter_context(self.add_notification_received_listener(on_received))
            if on_tap is not None:
                stack.enter_context(self.add_notification_response_listener(on_tap))
            yield

    def close(self) -> None:
        for sub in list(self._subscriptions):
            sub.remove()

    def _track(self, inner: PlatformSubscription) -> Subscription:
        sub = Subscription(inner, self._forget)
        self._subscriptions.append(sub)
        return sub

    def _forget(self, sub: Subscription) -> None:
        with contextlib.suppress(ValueError):
            self._subscriptions.remove(sub)
