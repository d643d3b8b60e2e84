"""DTOs for users mirrored from Clerk."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class UserResult:
    """User read-model (users/{clerk user id})."""

    id: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    image_url: str | None = None
    role: str | None = None
    organization_ids: list[str] = field(default_factory=list)
    primary_organization_id: str | None = None
    deleted: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def display_name(self) -> str:
        name = " ".join(p for p in (self.first_name, self.last_name) if p)
        return name or self.email
