from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from availability.utils.utc import as_utc


class OpenInterval(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: datetime = Field(description="Start of the interval (UTC)")
    end: datetime = Field(description="End of the interval (UTC, exclusive)")
    day: date = Field(description="Calendar date the interval was resolved for")
    timezone: str = Field(description="Timezone the calendar date refers to")

    @field_validator("start", "end")
    @classmethod
    def to_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class Booking(BaseModel):
    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    id: str | None = Field(None, description="Booking ID")
    start: datetime | None = Field(None, description="Start of the booking")
    end: datetime | None = Field(None, description="End of the booking (exclusive)")
    status: str | None = Field(None, description="Lesson status of the booking")

    @field_validator("start", "end")
    @classmethod
    def to_utc(cls, value: datetime | None) -> datetime | None:
        return None if value is None else as_utc(value)
