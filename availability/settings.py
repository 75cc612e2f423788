from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    default_timezone: str = "UTC"
    default_duration: int = Field(60, gt=0)  # minutes
    default_slot_interval: int = Field(30, gt=0)  # minutes
    default_slot_start_policy: Literal["any", "hour_half"] = "any"

    trial_total_cap: int = Field(3, ge=0)
    trial_per_tutor_cap: int = Field(1, ge=0)

    reschedule_min_notice_hours: int = 24

    non_blocking_booking_statuses: set[str] = {"cancelled", "canceled", "expired"}
    cancelled_lesson_statuses: set[str] = {"cancelled", "canceled"}


settings = Settings()
