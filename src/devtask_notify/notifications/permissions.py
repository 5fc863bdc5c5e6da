# src/devtask_notify/notifications/permissions.py

from __future__ import annotations

import asyncio
import logging

from ..core.ports import NotificationPlatform
from .models import PermissionState

logger = logging.getLogger(__name__)


class PermissionGate:
    """
    Tracks and requests authorization to deliver notifications.

    - The cached state is refreshed on every query.
    - The consent prompt is shown at most once per process lifetime;
      concurrent requests share that single prompt.
    - Nothing here raises: platform failures are logged and read as "not granted".
    """

    def __init__(self, platform: NotificationPlatform) -> None:
        self._platform = platform
        self._state = PermissionState.UNDETERMINED
        self._prompted = False
        self._lock = asyncio.Lock()

    @property
    def state(self) -> PermissionState:
        return self._state

    @property
    def granted(self) -> bool:
        return self._state == PermissionState.GRANTED

    async def has_permission(self) -> bool:
        try:
            status = PermissionState.from_platform(await self._platform.get_permission_status())
        except Exception:
            logger.exception("Notification permission query failed")
            return False

        self._state = status
        return self.granted

    async def request_permission(self) -> bool:
        if self.granted:
            return True

        async with self._lock:
            # Another caller may have finished the prompt while we waited.
            if self.granted:
                return True

            if await self.has_permission():
                return True

            if self._prompted:
                logger.debug("Permission prompt already answered this session (state=%s)", self._state)
                return False

            self._prompted = True
            try:
                status = PermissionState.from_platform(await self._platform.request_permission())
            except Exception:
                logger.exception("Notification permission request failed")
                return False

            self._state = status
            if not self.granted:
                logger.warning("Notification permission not granted (state=%s)", status)
            return self.granted
