"""User operations: profile lookup and Clerk user lifecycle sync."""

from __future__ import annotations

from typing import Any

from app.application.dtos.user import UserResult
from app.application.interfaces.repositories import IUserRepository
from app.domain.exceptions import ResourceNotFoundException
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


def _primary_email(data: dict[str, Any]) -> str:
    addresses = data.get("email_addresses") or []
    primary_id = data.get("primary_email_address_id")
    for address in addresses:
        if address.get("id") == primary_id:
            return address.get("email_address", "")
    return addresses[0].get("email_address", "") if addresses else ""


def user_fields_from_clerk(data: dict[str, Any]) -> dict[str, Any]:
    """Map a Clerk user object onto users/{id} fields."""
    metadata = data.get("public_metadata") or {}
    fields: dict[str, Any] = {
        "email": _primary_email(data),
        "first_name": data.get("first_name"),
        "last_name": data.get("last_name"),
        "image_url": data.get("image_url"),
        "role": metadata.get("role"),
        "deleted": False,
    }
    primary_org = metadata.get("primaryOrganizationId") or metadata.get("organizationId")
    if primary_org:
        fields["primary_organization_id"] = primary_org
    return fields


class UserService:
    """Read the signed-in user; apply Clerk webhook events."""

    def __init__(self, user_repo: IUserRepository) -> None:
        self.user_repo = user_repo

    async def get_me(self, user_id: str) -> UserResult:
        """Return the caller's profile; 404 until the Clerk webhook has created it."""
        user = await self.user_repo.get_by_id(user_id)
        if not user or user.deleted:
            raise ResourceNotFoundException("user", user_id)
        return user

    async def handle_clerk_event(self, event_type: str, data: dict[str, Any]) -> str:
        """Apply one verified Clerk webhook event. Returns what was done."""
        if event_type in ("user.created", "user.updated"):
            user = await self.user_repo.upsert(data["id"], user_fields_from_clerk(data))
            logger.info("Synced user %s from %s", user.id, event_type)
            return "user_synced"
        if event_type == "user.deleted":
            if data.get("id"):
                await self.user_repo.mark_deleted(data["id"])
            return "user_deleted"
        if event_type in ("organizationMembership.created", "organizationMembership.deleted"):
            organization_id = (data.get("organization") or {}).get("id")
            user_id = (data.get("public_user_data") or {}).get("user_id")
            if not organization_id or not user_id:
                logger.warning("Membership event without org or user id; ignored")
                return "ignored"
            if event_type.endswith("created"):
                await self.user_repo.add_organization(user_id, organization_id)
                return "membership_added"
            await self.user_repo.remove_organization(user_id, organization_id)
            return "membership_removed"
        logger.debug("Unhandled Clerk event %s", event_type)
        return "ignored"
