"""Squad API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class SquadCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    program_id: str | None = None
    cohort_id: str | None = None
    coach_id: str | None = None
    capacity: int | None = Field(default=None, ge=1)


class SquadMemberRequest(BaseModel):
    user_id: str = Field(..., min_length=1)


class SquadResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    organization_id: str
    name: str
    member_ids: list[str] = Field(default_factory=list)
    member_count: int
    program_id: str | None = None
    cohort_id: str | None = None
    coach_id: str | None = None
    capacity: int | None = None
    is_closed: bool = False
    created_at: datetime | None = None
