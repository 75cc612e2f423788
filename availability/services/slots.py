"""Slicing of open intervals into bookable slots."""

import heapq
from collections.abc import Iterable, Iterator, Mapping
from datetime import datetime, timedelta
from typing import Any, NamedTuple
from zoneinfo import ZoneInfo

from pydantic import ValidationError

from availability.exceptions.configuration import InvalidDurationError, InvalidSlotIntervalError
from availability.exceptions.slots import InvalidSlotError, SlotClashError, SlotNotInAvailabilityError
from availability.logger import get_logger
from availability.schemas.availability import Availability, DateWindow, SlotStartPolicy
from availability.schemas.slots import Booking, OpenInterval
from availability.services.rules import resolve_open_intervals
from availability.settings import settings
from availability.utils.timegrid import get_zone, overlaps, to_zone
from availability.utils.utc import as_utc


logger = get_logger(__name__)


class Span(NamedTuple):
    start: datetime
    end: datetime


def _check_minutes(value: Any, error: type[InvalidDurationError | InvalidSlotIntervalError], name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise error(f"{name} must be a positive number of minutes, got {value!r}")
    return value


def blocking_spans(bookings: Iterable[Booking | Mapping[str, Any]]) -> list[Span]:
    """Return the spans of all bookings that block a slot, skipping cancelled and malformed ones."""

    spans = []
    for booking in bookings:
        if not isinstance(booking, Booking):
            try:
                booking = Booking.model_validate(booking)
            except ValidationError as e:
                logger.warning("Skipping malformed booking %r: %s", booking, e)
                continue
        if booking.status and booking.status.lower() in settings.non_blocking_booking_statuses:
            continue
        if booking.start is None or booking.end is None:
            logger.warning("Skipping booking %s without start or end", booking.id)
            continue
        if booking.end <= booking.start:
            logger.warning("Skipping booking %s ending before it starts", booking.id)
            continue
        spans.append(Span(booking.start, booking.end))
    return spans


def snap(instant: datetime, zone: ZoneInfo, policy: SlotStartPolicy) -> datetime:
    """Move `instant` forward to the next full or half hour of `zone` if the policy asks for it."""

    if policy is SlotStartPolicy.ANY:
        return instant
    local = instant.astimezone(zone)
    if local.minute % 30 == 0 and not local.second and not local.microsecond:
        return instant
    return instant + timedelta(minutes=30 - local.minute % 30, seconds=-local.second, microseconds=-local.microsecond)


class SlotGenerator:
    """
    Lazy, restartable sequence of slot starts.

    Each iteration walks every open interval in steps of `slot_interval` minutes, keeps the
    starts whose lesson of `duration` minutes ends before the interval does, drops the ones
    overlapping a booking and yields the rest in `display_zone`, earliest first and without
    duplicates.
    """

    def __init__(
        self,
        open_intervals: Iterable[OpenInterval],
        bookings: Iterable[Booking | Mapping[str, Any]],
        duration: int,
        slot_interval: int,
        display_zone: str,
        start_policy: SlotStartPolicy = SlotStartPolicy.ANY,
    ):
        self.duration = timedelta(minutes=_check_minutes(duration, InvalidDurationError, "duration"))
        self.step = timedelta(minutes=_check_minutes(slot_interval, InvalidSlotIntervalError, "slot_interval"))
        self.display_zone = get_zone(display_zone)
        self.start_policy = SlotStartPolicy(start_policy)
        self.open_intervals = tuple(sorted(open_intervals, key=lambda i: (i.start, i.end)))
        self.bookings = tuple(bookings)

    def _walk(self, interval: OpenInterval) -> Iterator[datetime]:
        zone = get_zone(interval.timezone)
        current = snap(interval.start, zone, self.start_policy)
        while current + self.duration <= interval.end:
            yield current
            current = snap(current + self.step, zone, self.start_policy)

    def __iter__(self) -> Iterator[datetime]:
        blocked = blocking_spans(self.bookings)
        last: datetime | None = None
        for start in heapq.merge(*map(self._walk, self.open_intervals)):
            if start == last:
                continue
            last = start
            if any(overlaps(Span(start, start + self.duration), b) for b in blocked):
                continue
            yield to_zone(start, self.display_zone)


def generate_slots(
    open_intervals: Iterable[OpenInterval],
    bookings: Iterable[Booking | Mapping[str, Any]],
    duration: int,
    slot_interval: int,
    display_zone: str,
    start_policy: SlotStartPolicy = SlotStartPolicy.ANY,
) -> list[datetime]:
    return list(SlotGenerator(open_intervals, bookings, duration, slot_interval, display_zone, start_policy))


def find_available_slots(
    availability: Availability,
    bookings: Iterable[Booking | Mapping[str, Any]],
    window: DateWindow,
    duration: int | None = None,
    display_zone: str | None = None,
) -> list[datetime]:
    """Return the free slots of a tutor in `window` based on their availability snapshot."""

    intervals = resolve_open_intervals(availability.weekly, availability.exceptions, window, availability.timezone)
    return generate_slots(
        intervals,
        bookings,
        settings.default_duration if duration is None else duration,
        availability.slot_interval,
        display_zone or settings.default_timezone,
        availability.slot_start_policy,
    )


def validate_slot(
    availability: Availability,
    bookings: Iterable[Booking | Mapping[str, Any]],
    start: datetime,
    end: datetime,
) -> None:
    """
    Check that `[start, end)` is one of the tutor's slots and is still free.

    Meant to be called again right before a booking is committed.
    """

    start, end = as_utc(start), as_utc(end)
    if end <= start or (end - start) % timedelta(minutes=1):
        raise InvalidSlotError(f"Invalid slot {start.isoformat()} - {end.isoformat()}")

    day = start.astimezone(get_zone(availability.timezone)).date()
    intervals = resolve_open_intervals(
        availability.weekly, availability.exceptions, DateWindow(start=day, end=day), availability.timezone
    )
    candidates = SlotGenerator(
        intervals,
        [],
        (end - start) // timedelta(minutes=1),
        availability.slot_interval,
        "UTC",
        availability.slot_start_policy,
    )
    if start not in candidates:
        raise SlotNotInAvailabilityError

    if any(overlaps(Span(start, end), b) for b in blocking_spans(bookings)):
        raise SlotClashError
