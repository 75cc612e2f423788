from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Lesson(BaseModel):
    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    id: str | None = Field(None, description="Lesson ID")
    student_id: str | None = Field(None, description="Student ID")
    tutor_id: str | None = Field(None, description="Tutor ID")
    is_trial: bool = Field(False, description="Whether the lesson is a trial lesson")
    status: str | None = Field(None, description="Lesson status")
    start: datetime | None = Field(None, description="Start of the lesson")


class TrialUsage(BaseModel):
    total_used: int = Field(description="Number of trial lessons counted against the global cap")
    total_remaining: int = Field(description="Number of trial lessons the student may still book")
    by_tutor: dict[str, int] = Field(default_factory=dict, description="Trials used per tutor (0 or 1)")
