import logging
from datetime import date, datetime, timedelta, timezone

import pytest

from availability.exceptions.configuration import (
    InvalidDurationError,
    InvalidSlotIntervalError,
    InvalidTimezoneError,
)
from availability.exceptions.slots import InvalidSlotError, SlotClashError, SlotNotInAvailabilityError
from availability.schemas.availability import (
    Availability,
    DateException,
    DateWindow,
    SlotStartPolicy,
    TimeRange,
    WeeklyRule,
)
from availability.schemas.slots import Booking, OpenInterval
from availability.services.rules import resolve_open_intervals
from availability.services.slots import SlotGenerator, find_available_slots, generate_slots, validate_slot
from availability.utils.timegrid import contains, overlaps


MONDAY = DateWindow(start=date(2024, 1, 15), end=date(2024, 1, 15))
WEEKDAYS = WeeklyRule(weekdays={0, 1, 2, 3, 4}, start="10:00", end="16:00")


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def interval(start: datetime, end: datetime, tz: str = "UTC") -> OpenInterval:
    return OpenInterval(start=start, end=end, day=start.date(), timezone=tz)


def monday_intervals() -> list[OpenInterval]:
    return resolve_open_intervals([WEEKDAYS], [], MONDAY, "UTC")


def test__weekday_scenario() -> None:
    slots = generate_slots(monday_intervals(), [], 60, 30, "UTC")

    assert slots == [utc(2024, 1, 15, 10) + timedelta(minutes=30 * i) for i in range(11)]
    assert slots[-1] == utc(2024, 1, 15, 15)


def test__booking_scenario() -> None:
    booking = Booking(id="b1", start=utc(2024, 1, 15, 12), end=utc(2024, 1, 15, 13))

    slots = generate_slots(monday_intervals(), [booking], 60, 30, "UTC")

    assert utc(2024, 1, 15, 12) not in slots
    assert utc(2024, 1, 15, 12, 30) not in slots
    assert utc(2024, 1, 15, 11, 30) not in slots
    assert utc(2024, 1, 15, 11) in slots
    assert utc(2024, 1, 15, 13) in slots


def test__no_conflicts_and_fit() -> None:
    window = DateWindow(start=date(2024, 1, 15), end=date(2024, 1, 19))
    intervals = resolve_open_intervals([WEEKDAYS], [], window, "UTC")
    bookings = [
        Booking(start=utc(2024, 1, 15, 10, 15), end=utc(2024, 1, 15, 10, 45)),
        Booking(start=utc(2024, 1, 16, 14), end=utc(2024, 1, 16, 17)),
        Booking(start=utc(2024, 1, 18, 9), end=utc(2024, 1, 18, 11)),
    ]

    slots = generate_slots(intervals, bookings, 45, 15, "UTC")

    assert slots
    for start in slots:
        lesson = Booking(start=start, end=start + timedelta(minutes=45))
        assert any(contains(i, lesson) for i in intervals)
        assert not any(overlaps(lesson, b) for b in bookings)


def test__trailing_partial_slot_is_dropped() -> None:
    slots = generate_slots([interval(utc(2024, 1, 15, 10), utc(2024, 1, 15, 11, 45))], [], 60, 30, "UTC")

    assert slots == [utc(2024, 1, 15, 10), utc(2024, 1, 15, 10, 30)]


def test__duration_longer_than_interval() -> None:
    assert generate_slots(monday_intervals(), [], 7 * 60, 30, "UTC") == []


def test__no_intervals() -> None:
    assert generate_slots([], [], 60, 30, "UTC") == []


def test__display_zone() -> None:
    slots = generate_slots(monday_intervals(), [], 60, 30, "Europe/Berlin")

    assert slots[0] == utc(2024, 1, 15, 10)
    assert (slots[0].hour, slots[0].minute) == (11, 0)
    assert str(slots[0].tzinfo) == "Europe/Berlin"
    assert slots == generate_slots(monday_intervals(), [], 60, 30, "UTC")


def test__ordered_without_duplicates() -> None:
    intervals = [
        interval(utc(2024, 1, 15, 14), utc(2024, 1, 15, 16)),
        interval(utc(2024, 1, 15, 10), utc(2024, 1, 15, 12)),
        interval(utc(2024, 1, 15, 10), utc(2024, 1, 15, 11)),
        interval(utc(2024, 1, 15, 11), utc(2024, 1, 15, 12)),
    ]

    slots = generate_slots(intervals, [], 60, 30, "UTC")

    assert slots == [
        utc(2024, 1, 15, 10),
        utc(2024, 1, 15, 10, 30),
        utc(2024, 1, 15, 11),
        utc(2024, 1, 15, 14),
        utc(2024, 1, 15, 14, 30),
        utc(2024, 1, 15, 15),
    ]


def test__malformed_booking_is_skipped(caplog: pytest.LogCaptureFixture) -> None:
    bookings = [
        Booking(id="broken", start=utc(2024, 1, 15, 10)),
        {"id": "also-broken", "end": utc(2024, 1, 15, 11)},
        Booking(id="ok", start=utc(2024, 1, 15, 15), end=utc(2024, 1, 15, 16)),
        {"id": "unparseable", "start": "not-a-date", "end": utc(2024, 1, 15, 11)},
        {"id": 42, "start": utc(2024, 1, 15, 12), "end": utc(2024, 1, 15, 13)},
    ]

    with caplog.at_level(logging.WARNING):
        slots = generate_slots(monday_intervals(), bookings, 60, 30, "UTC")

    assert slots[0] == utc(2024, 1, 15, 10)
    assert utc(2024, 1, 15, 10, 30) in slots
    assert utc(2024, 1, 15, 14, 30) not in slots
    assert utc(2024, 1, 15, 15) not in slots
    assert utc(2024, 1, 15, 11, 30) not in slots
    assert utc(2024, 1, 15, 12) not in slots
    assert utc(2024, 1, 15, 12, 30) not in slots
    assert utc(2024, 1, 15, 13) in slots
    assert "broken" in caplog.text
    assert "also-broken" in caplog.text
    assert "Skipping malformed booking" in caplog.text
    assert "unparseable" in caplog.text


@pytest.mark.parametrize("status", ["cancelled", "Canceled", "EXPIRED"])
def test__cancelled_booking_does_not_block(status: str) -> None:
    booking = Booking(start=utc(2024, 1, 15, 12), end=utc(2024, 1, 15, 13), status=status)

    assert generate_slots(monday_intervals(), [booking], 60, 30, "UTC") == generate_slots(
        monday_intervals(), [], 60, 30, "UTC"
    )


def test__naive_booking_is_utc() -> None:
    booking = {"start": datetime(2024, 1, 15, 12), "end": datetime(2024, 1, 15, 13), "status": "booked"}

    assert utc(2024, 1, 15, 12) not in generate_slots(monday_intervals(), [booking], 60, 30, "UTC")


@pytest.mark.parametrize("duration", [0, -30, 1.5, None])
def test__invalid_duration(duration: int) -> None:
    with pytest.raises(InvalidDurationError):
        generate_slots(monday_intervals(), [], duration, 30, "UTC")


@pytest.mark.parametrize("slot_interval", [0, -15])
def test__invalid_slot_interval(slot_interval: int) -> None:
    with pytest.raises(InvalidSlotIntervalError):
        generate_slots(monday_intervals(), [], 60, slot_interval, "UTC")


def test__invalid_display_zone() -> None:
    with pytest.raises(InvalidTimezoneError):
        SlotGenerator(monday_intervals(), [], 60, 30, "Nowhere/Nothing")


def test__generator_is_lazy_and_restartable() -> None:
    generator = SlotGenerator(monday_intervals(), [], 60, 30, "UTC")

    assert next(iter(generator)) == utc(2024, 1, 15, 10)
    assert list(generator) == list(generator)
    assert len(list(generator)) == 11


@pytest.mark.parametrize(
    "policy,expected",
    [
        (SlotStartPolicy.ANY, [utc(2024, 1, 15, 10, 10), utc(2024, 1, 15, 10, 40), utc(2024, 1, 15, 11, 10)]),
        (SlotStartPolicy.HOUR_HALF, [utc(2024, 1, 15, 10, 30), utc(2024, 1, 15, 11), utc(2024, 1, 15, 11, 30)]),
    ],
)
def test__start_policy(policy: SlotStartPolicy, expected: list[datetime]) -> None:
    intervals = [interval(utc(2024, 1, 15, 10, 10), utc(2024, 1, 15, 12))]

    assert generate_slots(intervals, [], 30, 30, "UTC", policy) == expected


def test__hour_half_in_home_zone() -> None:
    # Kolkata is UTC+05:30, so its full hours are half hours in UTC
    intervals = [interval(utc(2024, 1, 15, 4, 40), utc(2024, 1, 15, 6), "Asia/Kolkata")]

    slots = generate_slots(intervals, [], 30, 30, "Asia/Kolkata", SlotStartPolicy.HOUR_HALF)

    assert [(s.hour, s.minute) for s in slots] == [(10, 30), (11, 0)]


def test__dst_transition() -> None:
    rule = WeeklyRule(weekdays={6}, start="01:00", end="04:00")
    intervals = resolve_open_intervals(
        [rule], [], DateWindow(start=date(2024, 3, 10), end=date(2024, 3, 10)), "America/New_York"
    )

    slots = generate_slots(intervals, [], 60, 60, "America/New_York")

    assert slots == [utc(2024, 3, 10, 6), utc(2024, 3, 10, 7)]
    assert [(s.hour, s.minute) for s in slots] == [(1, 0), (3, 0)]


def test__find_available_slots() -> None:
    availability = Availability(
        tutor_id="t1",
        timezone="Europe/Berlin",
        slot_interval=60,
        weekly=[WEEKDAYS],
        exceptions=[DateException(date="2024-01-16", open=False)],
    )
    bookings = [Booking(start=utc(2024, 1, 15, 9), end=utc(2024, 1, 15, 10))]

    slots = find_available_slots(availability, bookings, DateWindow(start=date(2024, 1, 15), end=date(2024, 1, 16)), 60)

    assert slots == [utc(2024, 1, 15, h) for h in range(10, 15)]
    assert all(s.utcoffset() == timedelta(0) for s in slots)


AVAILABILITY = Availability(tutor_id="t1", timezone="UTC", slot_interval=30, weekly=[WEEKDAYS])


def test__validate_slot() -> None:
    validate_slot(AVAILABILITY, [], utc(2024, 1, 15, 10, 30), utc(2024, 1, 15, 11, 30))


@pytest.mark.parametrize(
    "start,end",
    [
        (utc(2024, 1, 15, 10, 15), utc(2024, 1, 15, 11, 15)),
        (utc(2024, 1, 15, 15, 30), utc(2024, 1, 15, 16, 30)),
        (utc(2024, 1, 20, 10), utc(2024, 1, 20, 11)),
    ],
)
def test__validate_slot__not_in_availability(start: datetime, end: datetime) -> None:
    with pytest.raises(SlotNotInAvailabilityError):
        validate_slot(AVAILABILITY, [], start, end)


def test__validate_slot__closed_day() -> None:
    availability = AVAILABILITY.model_copy(
        update={"exceptions": (DateException(day=date(2024, 1, 15), open=False, ranges=[TimeRange(start=0, end=60)]),)}
    )

    with pytest.raises(SlotNotInAvailabilityError):
        validate_slot(availability, [], utc(2024, 1, 15, 10), utc(2024, 1, 15, 11))


def test__validate_slot__clash() -> None:
    bookings = [Booking(start=utc(2024, 1, 15, 11), end=utc(2024, 1, 15, 12))]

    with pytest.raises(SlotClashError):
        validate_slot(AVAILABILITY, bookings, utc(2024, 1, 15, 10, 30), utc(2024, 1, 15, 11, 30))
    validate_slot(AVAILABILITY, bookings, utc(2024, 1, 15, 10), utc(2024, 1, 15, 11))


@pytest.mark.parametrize(
    "start,end",
    [
        (utc(2024, 1, 15, 11), utc(2024, 1, 15, 10)),
        (utc(2024, 1, 15, 10), utc(2024, 1, 15, 10)),
        (utc(2024, 1, 15, 10), utc(2024, 1, 15, 10, 59, 30)),
    ],
)
def test__validate_slot__invalid(start: datetime, end: datetime) -> None:
    with pytest.raises(InvalidSlotError):
        validate_slot(AVAILABILITY, [], start, end)
