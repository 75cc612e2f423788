"""Timezone conversion and half-open interval arithmetic."""

from datetime import date, datetime, time, timedelta, timezone
from typing import Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from availability.exceptions.configuration import InvalidTimezoneError
from availability.schemas.availability import MINUTES_PER_DAY, DateWindow


class Interval(Protocol):
    @property
    def start(self) -> datetime: ...

    @property
    def end(self) -> datetime: ...


def get_zone(key: str) -> ZoneInfo:
    try:
        return ZoneInfo(key)
    except (ZoneInfoNotFoundError, ValueError, TypeError) as e:
        raise InvalidTimezoneError(f"Unknown timezone {key!r}") from e


def _exists(local: datetime) -> bool:
    return local.astimezone(timezone.utc).astimezone(local.tzinfo).replace(tzinfo=None) == local.replace(tzinfo=None)


def _first_instant_after_gap(before: datetime, after: datetime, zone: ZoneInfo) -> datetime:
    """Binary search (minute resolution) for the first UTC instant in (before, after] using the new offset."""

    offset = after.astimezone(zone).utcoffset()
    lo, hi = before, after
    while hi - lo > timedelta(minutes=1):
        mid = lo + (hi - lo) // 2
        mid = mid.replace(second=0, microsecond=0)
        if mid <= lo:
            break
        if mid.astimezone(zone).utcoffset() == offset:
            hi = mid
        else:
            lo = mid
    return hi


def to_absolute(day: date, minutes: int, zone: ZoneInfo) -> datetime:
    """
    Resolve a wall-clock time on `day` in `zone` to an aware UTC datetime.

    A repeated wall time (DST ends) resolves to the later of the two instants.
    A skipped wall time (DST starts) resolves to the transition instant, the first one that exists.
    `minutes == 1440` is midnight at the end of the day.
    """

    if minutes == MINUTES_PER_DAY:
        day, minutes = day + timedelta(days=1), 0
    local = datetime.combine(day, time(*divmod(minutes, 60)), tzinfo=zone)

    if _exists(local):
        return local.replace(fold=1).astimezone(timezone.utc)

    # inside a gap: fold=1 lands before the transition, fold=0 after it
    before = local.replace(fold=1).astimezone(timezone.utc)
    after = local.replace(fold=0).astimezone(timezone.utc)
    return _first_instant_after_gap(min(before, after), max(before, after), zone)


def to_zone(instant: datetime, zone: ZoneInfo) -> datetime:
    return instant.astimezone(zone)


def overlaps(a: Interval, b: Interval) -> bool:
    return a.start < b.end and b.start < a.end


def contains(outer: Interval, inner: Interval) -> bool:
    return outer.start <= inner.start and inner.end <= outer.end


def daterange(window: DateWindow) -> list[date]:
    return [window.start + timedelta(days=i) for i in range((window.end - window.start).days + 1)]
