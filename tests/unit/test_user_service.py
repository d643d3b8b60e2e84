"""Clerk user lifecycle sync."""

from unittest.mock import AsyncMock

import pytest

from app.application.dtos.user import UserResult
from app.application.use_cases.users import UserService
from app.application.use_cases.users.user_operations import user_fields_from_clerk
from app.domain.exceptions import ResourceNotFoundException

CLERK_USER = {
    "id": "user_1",
    "first_name": "Ada",
    "last_name": "Lovelace",
    "primary_email_address_id": "idn_2",
    "email_addresses": [
        {"id": "idn_1", "email_address": "old@example.com"},
        {"id": "idn_2", "email_address": "ada@example.com"},
    ],
    "public_metadata": {"role": "coach", "primaryOrganizationId": "org_1"},
}


@pytest.fixture
def user_repo():
    repo = AsyncMock()
    repo.upsert = AsyncMock(return_value=UserResult(id="user_1", email="ada@example.com"))
    return repo


def test_fields_use_primary_email_and_metadata():
    fields = user_fields_from_clerk(CLERK_USER)
    assert fields["email"] == "ada@example.com"
    assert fields["role"] == "coach"
    assert fields["primary_organization_id"] == "org_1"
    assert fields["deleted"] is False


def test_first_address_when_primary_is_unknown():
    data = {**CLERK_USER, "primary_email_address_id": None, "public_metadata": {}}
    fields = user_fields_from_clerk(data)
    assert fields["email"] == "old@example.com"
    assert "primary_organization_id" not in fields


@pytest.mark.parametrize("event_type", ["user.created", "user.updated"])
async def test_user_events_upsert(user_repo, event_type):
    action = await UserService(user_repo).handle_clerk_event(event_type, CLERK_USER)
    assert action == "user_synced"
    assert user_repo.upsert.await_args.args[0] == "user_1"


async def test_user_deleted(user_repo):
    assert await UserService(user_repo).handle_clerk_event("user.deleted", {"id": "user_1"}) == (
        "user_deleted"
    )
    user_repo.mark_deleted.assert_awaited_once_with("user_1")


async def test_membership_events(user_repo):
    service = UserService(user_repo)
    data = {"organization": {"id": "org_1"}, "public_user_data": {"user_id": "user_1"}}
    assert await service.handle_clerk_event("organizationMembership.created", data) == (
        "membership_added"
    )
    user_repo.add_organization.assert_awaited_once_with("user_1", "org_1")
    assert await service.handle_clerk_event("organizationMembership.deleted", data) == (
        "membership_removed"
    )
    user_repo.remove_organization.assert_awaited_once_with("user_1", "org_1")
    assert await service.handle_clerk_event("organizationMembership.created", {}) == "ignored"


async def test_unknown_event_is_ignored(user_repo):
    assert await UserService(user_repo).handle_clerk_event("session.created", {}) == "ignored"


async def test_get_me_hides_deleted_users(user_repo):
    user_repo.get_by_id = AsyncMock(
        return_value=UserResult(id="user_1", email="ada@example.com", deleted=True)
    )
    with pytest.raises(ResourceNotFoundException):
        await UserService(user_repo).get_me("user_1")
