"""Habit API schemas."""

from datetime import date as date_type
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.domain.enums import HabitFrequency, HabitSource, HabitStatus


class HabitReminder(BaseModel):
    time: str = Field(..., description="HH:MM")


class HabitCreateRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=500)
    frequency_type: HabitFrequency = HabitFrequency.DAILY
    frequency_value: list[int] | int | None = None
    linked_routine: str | None = Field(default=None, max_length=200)
    reminder: HabitReminder | None = None
    target_repetitions: int | None = None


class HabitUpdate(BaseModel):
    text: str | None = Field(default=None, min_length=1, max_length=500)
    frequency_type: HabitFrequency | None = None
    frequency_value: list[int] | int | None = None
    linked_routine: str | None = Field(default=None, max_length=200)
    reminder: HabitReminder | None = None
    target_repetitions: int | None = None


class HabitDayRequest(BaseModel):
    """Day acted on; defaults to today (UTC)."""

    date: date_type | None = None


class HabitResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    text: str
    frequency_type: HabitFrequency
    frequency_value: list[int] | int | None = None
    status: HabitStatus
    source: HabitSource
    linked_routine: str | None = None
    reminder: dict[str, Any] | None = None
    target_repetitions: int | None = None
    progress: dict[str, Any] = Field(default_factory=dict)
    program_id: str | None = None
    created_at: datetime | None = None
