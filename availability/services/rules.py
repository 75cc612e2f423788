"""
Resolution of weekly rules and date exceptions into absolute open intervals.

Every date of the window is resolved on its own. An exception for a date replaces the
weekly rules of that date completely, there is no merging of the two.
"""

from collections.abc import Iterable
from datetime import date

from availability.exceptions.configuration import (
    CrossingMidnightError,
    DuplicateExceptionError,
    InvalidRangeError,
    InvalidWindowError,
)
from availability.logger import get_logger
from availability.schemas.availability import DateException, DateWindow, TimeRange, WeeklyRule, format_minutes
from availability.schemas.slots import OpenInterval
from availability.utils.timegrid import daterange, get_zone, to_absolute


logger = get_logger(__name__)


def check_range(start: int, end: int, what: str) -> None:
    if end < start:
        raise CrossingMidnightError(f"{what}: {format_minutes(start)}-{format_minutes(end)} crosses midnight")
    if start == end:
        raise InvalidRangeError(f"{what}: {format_minutes(start)}-{format_minutes(end)} is empty")


def _index_exceptions(exceptions: Iterable[DateException]) -> dict[date, DateException]:
    out: dict[date, DateException] = {}
    for exception in exceptions:
        if exception.day in out:
            raise DuplicateExceptionError(f"More than one exception for {exception.day.isoformat()}")
        if exception.open:
            for r in exception.ranges:
                check_range(r.start, r.end, f"exception {exception.day.isoformat()}")
        out[exception.day] = exception
    return out


def _ranges_for(day: date, rules: list[WeeklyRule], exceptions: dict[date, DateException]) -> list[TimeRange]:
    if (exception := exceptions.get(day)) is not None:
        return list(exception.ranges) if exception.open else []
    return [rule.range for rule in rules if day.weekday() in rule.weekdays]


def resolve_open_intervals(
    rules: Iterable[WeeklyRule], exceptions: Iterable[DateException], window: DateWindow, home_zone: str
) -> list[OpenInterval]:
    """
    Return the open intervals of every date in `window`, ordered by start.

    Raises a `ConfigurationError` for an unknown zone, an empty or reversed range,
    a range crossing midnight, two exceptions on the same date or a reversed window.
    """

    zone = get_zone(home_zone)
    if window.start > window.end:
        raise InvalidWindowError(f"Window starts on {window.start.isoformat()} but ends on {window.end.isoformat()}")

    rules = list(rules)
    for rule in rules:
        check_range(rule.start, rule.end, f"weekly rule {sorted(rule.weekdays)}")
    by_day = _index_exceptions(exceptions)

    intervals: list[OpenInterval] = []
    for day in daterange(window):
        for r in _ranges_for(day, rules, by_day):
            start, end = to_absolute(day, r.start, zone), to_absolute(day, r.end, zone)
            if start >= end:
                # the whole range fell into a DST gap
                logger.debug("Dropping range %s on %s, empty after DST resolution", r.serialize, day)
                continue
            intervals.append(OpenInterval(start=start, end=end, day=day, timezone=home_zone))

    intervals.sort(key=lambda i: (i.start, i.end))
    logger.debug("Resolved %d open intervals between %s and %s", len(intervals), window.start, window.end)
    return intervals
