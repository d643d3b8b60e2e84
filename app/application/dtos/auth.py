"""Authenticated caller of a request."""

from __future__ import annotations

from dataclasses import dataclass

from app.domain.enums import OrgRole


@dataclass(frozen=True)
class AuthContext:
    """Clerk session: user, active organization and role in it."""

    user_id: str
    organization_id: str | None = None
    org_role: str | None = None
    org_slug: str | None = None

    @property
    def is_coach(self) -> bool:
        return self.org_role in (OrgRole.ADMIN.value, OrgRole.COACH.value)
