# src/devtask_notify/notifications/clock.py

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone

Clock = Callable[[], datetime]


def local_now() -> datetime:
    return datetime.now().astimezone()


def aligned(dt: datetime, ref: datetime) -> datetime:
    """Return dt made comparable with ref (naive values are read as local wall time)."""
    if (dt.tzinfo is None) == (ref.tzinfo is None):
        return dt
    if dt.tzinfo is None:
        return dt.astimezone(ref.tzinfo)
    return dt.astimezone().replace(tzinfo=None)


def from_wall(wall: datetime, like: datetime) -> datetime:
    """
    Place a naive wall-clock time in like's zone, with the UTC offset valid on that date.

    - naive like: stays naive
    - zoneinfo-style zones: the zone resolves the offset itself
    - fixed offsets that match the system zone (a local_now() snapshot): resolved
      through the system zone, so a DST change between like and wall is honored
    - any other fixed offset: kept as is
    """
    tz = like.tzinfo
    if tz is None:
        return wall
    if not isinstance(tz, timezone):
        return wall.replace(tzinfo=tz)
    if like.astimezone().utcoffset() == like.utcoffset():
        return wall.astimezone()
    return wall.replace(tzinfo=tz)
