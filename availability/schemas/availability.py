import enum
import re
from datetime import date
from typing import Annotated, Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from availability.settings import settings


MINUTES_PER_DAY = 24 * 60

_HHMM = re.compile(r"^(\d{1,2}):(\d{2})$")


class SlotStartPolicy(enum.Enum):
    ANY = "any"
    HOUR_HALF = "hour_half"


def parse_minutes(value: Any) -> Any:
    """Convert an "HH:MM" string into minutes since midnight. Other values are left to pydantic."""

    if not isinstance(value, str):
        return value
    match = _HHMM.match(value.strip())
    if not match:
        raise ValueError(f"expected HH:MM, got {value!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if minutes >= 60:
        raise ValueError(f"invalid minute in {value!r}")
    return hours * 60 + minutes


def format_minutes(minutes: int) -> str:
    return "{:02d}:{:02d}".format(*divmod(minutes, 60))


class TimeRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: int = Field(ge=0, le=MINUTES_PER_DAY, description="Start of the range (in minutes since midnight)")
    end: int = Field(ge=0, le=MINUTES_PER_DAY, description="End of the range (in minutes since midnight)")

    @field_validator("start", "end", mode="before")
    @classmethod
    def parse_time(cls, value: Any) -> Any:
        return parse_minutes(value)

    @property
    def serialize(self) -> dict[str, str]:
        return {"start": format_minutes(self.start), "end": format_minutes(self.end)}


class WeeklyRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    weekdays: frozenset[Annotated[int, Field(ge=0, le=6)]] = Field(
        description="Weekdays the rule applies to (0=Monday, 1=Tuesday, ...)"
    )
    start: int = Field(ge=0, le=MINUTES_PER_DAY, description="Start of the rule (in minutes since midnight)")
    end: int = Field(ge=0, le=MINUTES_PER_DAY, description="End of the rule (in minutes since midnight)")

    @field_validator("start", "end", mode="before")
    @classmethod
    def parse_time(cls, value: Any) -> Any:
        return parse_minutes(value)

    @property
    def range(self) -> TimeRange:
        return TimeRange(start=self.start, end=self.end)


class DateException(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    day: date = Field(validation_alias=AliasChoices("day", "date"), description="Calendar date in the tutor's timezone")
    open: bool = Field(description="False closes the whole day, True replaces the weekly rule by `ranges`")
    ranges: tuple[TimeRange, ...] = Field((), description="Open time ranges (only used if open)")


class DateWindow(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: date = Field(description="First date of the window (inclusive)")
    end: date = Field(description="Last date of the window (inclusive)")


class Availability(BaseModel):
    """Snapshot of a tutor's availability as kept by the tutor profile store."""

    model_config = ConfigDict(frozen=True)

    tutor_id: str | None = Field(None, description="Tutor ID")
    timezone: str = Field(default_factory=lambda: settings.default_timezone, description="Tutor's home timezone")
    slot_interval: int = Field(
        default_factory=lambda: settings.default_slot_interval, description="Distance between slot starts in minutes"
    )
    slot_start_policy: SlotStartPolicy = Field(
        default_factory=lambda: SlotStartPolicy(settings.default_slot_start_policy),
        description="How slot starts are aligned",
    )
    weekly: tuple[WeeklyRule, ...] = Field((), description="Recurring weekly rules")
    exceptions: tuple[DateException, ...] = Field((), description="Date-specific overrides")
