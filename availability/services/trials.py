"""
Trial lesson bookkeeping.

A student may take at most `trial_total_cap` trial lessons overall and at most
`trial_per_tutor_cap` with any single tutor. Usage is derived from the lesson history on
every query and never stored.

Trials with one tutor beyond `trial_per_tutor_cap` are charged against the overall cap
only up to the per-tutor cap. `total_used` is therefore `min(trial_total_cap, sum of the
clamped per-tutor counts)` and not the raw number of countable trials: two uncancelled
trials with tutor A and one with tutor B use two of three, not three.
"""

from collections import defaultdict
from collections.abc import Iterable, Mapping
from typing import Any

from availability.exceptions.trials import TrialAlreadyUsedError, TrialLimitReachedError
from availability.logger import get_logger
from availability.schemas.trials import Lesson, TrialUsage
from availability.settings import settings


logger = get_logger(__name__)


def is_countable(lesson: Lesson) -> bool:
    if not lesson.is_trial:
        return False
    return (lesson.status or "").lower() not in settings.cancelled_lesson_statuses


def compute_trial_usage(lessons: Iterable[Lesson | Mapping[str, Any]]) -> dict[str, TrialUsage]:
    trials: defaultdict[str, defaultdict[str, list[str | None]]] = defaultdict(lambda: defaultdict(list))
    for lesson in lessons:
        if not isinstance(lesson, Lesson):
            lesson = Lesson.model_validate(lesson)
        if not lesson.student_id or not lesson.tutor_id or not is_countable(lesson):
            continue
        trials[lesson.student_id][lesson.tutor_id].append(lesson.id)

    usage = {}
    for student_id, by_tutor in trials.items():
        clamped = {t: min(settings.trial_per_tutor_cap, len(ids)) for t, ids in by_tutor.items()}
        total = sum(clamped.values())
        for tutor_id, ids in by_tutor.items():
            if len(ids) > settings.trial_per_tutor_cap:
                # counted up to the cap, but likely duplicate uncancelled trial bookings
                logger.warning(
                    "Student %s has %d countable trials with tutor %s (cap %d): lessons %s",
                    student_id,
                    len(ids),
                    tutor_id,
                    settings.trial_per_tutor_cap,
                    ", ".join(str(i) for i in ids),
                )
        usage[student_id] = TrialUsage(
            total_used=min(settings.trial_total_cap, total),
            total_remaining=max(0, settings.trial_total_cap - total),
            by_tutor=clamped,
        )
    return usage


def get_student_trial_usage(usage: Mapping[str, TrialUsage], student_id: str) -> TrialUsage:
    return usage.get(student_id) or TrialUsage(total_used=0, total_remaining=settings.trial_total_cap, by_tutor={})


def can_book_trial(usage: Mapping[str, TrialUsage], student_id: str, tutor_id: str) -> bool:
    u = get_student_trial_usage(usage, student_id)
    return u.total_remaining > 0 and u.by_tutor.get(tutor_id, 0) < settings.trial_per_tutor_cap


def ensure_can_book_trial(usage: Mapping[str, TrialUsage], student_id: str, tutor_id: str) -> None:
    """Raise if the student may not book a trial with the tutor. Re-check inside the booking commit."""

    u = get_student_trial_usage(usage, student_id)
    if u.total_remaining <= 0:
        raise TrialLimitReachedError
    if u.by_tutor.get(tutor_id, 0) >= settings.trial_per_tutor_cap:
        raise TrialAlreadyUsedError
