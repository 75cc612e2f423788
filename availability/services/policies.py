from datetime import datetime, timedelta

from availability.schemas.trials import Lesson
from availability.settings import settings
from availability.utils.utc import as_utc, utcnow


def can_reschedule(lesson: Lesson, now: datetime | None = None) -> bool:
    if lesson.start is None:
        return False
    now = as_utc(now) if now else utcnow()
    return as_utc(lesson.start) - now >= timedelta(hours=settings.reschedule_min_notice_hours)
