from .schemas.availability import Availability, DateException, DateWindow, SlotStartPolicy, TimeRange, WeeklyRule
from .schemas.slots import Booking, OpenInterval
from .schemas.trials import Lesson, TrialUsage
from .services.editing import remove_exception, upsert_exception, weekly_rules_from_day_ranges
from .services.policies import can_reschedule
from .services.rules import resolve_open_intervals
from .services.slots import SlotGenerator, find_available_slots, generate_slots, validate_slot
from .services.trials import (
    can_book_trial,
    compute_trial_usage,
    ensure_can_book_trial,
    get_student_trial_usage,
    is_countable,
)


__all__ = [
    "Availability",
    "Booking",
    "DateException",
    "DateWindow",
    "Lesson",
    "OpenInterval",
    "SlotGenerator",
    "SlotStartPolicy",
    "TimeRange",
    "TrialUsage",
    "WeeklyRule",
    "can_book_trial",
    "can_reschedule",
    "compute_trial_usage",
    "ensure_can_book_trial",
    "find_available_slots",
    "generate_slots",
    "get_student_trial_usage",
    "is_countable",
    "remove_exception",
    "resolve_open_intervals",
    "upsert_exception",
    "validate_slot",
    "weekly_rules_from_day_ranges",
]
