"""User API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class UserResponse(BaseModel):
    """The signed-in user as mirrored from Clerk."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    image_url: str | None = None
    role: str | None = None
    organization_ids: list[str] = Field(default_factory=list)
    primary_organization_id: str | None = None
    created_at: datetime | None = None


class MeResponse(BaseModel):
    """GET /me: user plus the active organization of the session."""

    user: UserResponse
    organization_id: str | None = None
    org_role: str | None = None
    is_coach: bool = False


class WebhookAck(BaseModel):
    received: bool = True
    action: str | None = None
