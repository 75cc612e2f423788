"""Edits of an availability snapshot. Each function returns a new snapshot."""

from collections.abc import Sequence
from datetime import date
from typing import Any

from availability.exceptions.configuration import InvalidWeeklyScheduleError
from availability.exceptions.editing import DateExceptionNotFoundError
from availability.schemas.availability import Availability, DateException, TimeRange, WeeklyRule


def upsert_exception(availability: Availability, exception: DateException) -> Availability:
    if not exception.open and exception.ranges:
        exception = exception.model_copy(update={"ranges": ()})
    exceptions = tuple(e for e in availability.exceptions if e.day != exception.day)
    return availability.model_copy(update={"exceptions": (*exceptions, exception)})


def remove_exception(availability: Availability, day: date) -> Availability:
    exceptions = tuple(e for e in availability.exceptions if e.day != day)
    if len(exceptions) == len(availability.exceptions):
        raise DateExceptionNotFoundError(f"No exception for {day.isoformat()}")
    return availability.model_copy(update={"exceptions": exceptions})


def weekly_rules_from_day_ranges(day_ranges: Sequence[Sequence[TimeRange | dict[str, Any]]]) -> list[WeeklyRule]:
    """
    Convert the profile editor's schedule into weekly rules.

    `day_ranges` holds seven lists of ranges, Monday first. Identical ranges on
    several days are merged into one rule.
    """

    if len(day_ranges) != 7:
        raise InvalidWeeklyScheduleError(f"Expected 7 days, got {len(day_ranges)}")

    weekdays: dict[tuple[int, int], set[int]] = {}
    for weekday, ranges in enumerate(day_ranges):
        for r in ranges or []:
            r = r if isinstance(r, TimeRange) else TimeRange.model_validate(r)
            weekdays.setdefault((r.start, r.end), set()).add(weekday)

    return [WeeklyRule(weekdays=frozenset(days), start=start, end=end) for (start, end), days in weekdays.items()]
