"""FeedService visibility and validation rules."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.application.dtos.auth import AuthContext
from app.application.dtos.feed import FeedPostResult
from app.application.dtos.organization import OrgSettingsResult
from app.application.use_cases.feed import FeedService
from app.domain.enums import PostVisibility
from app.domain.exceptions import (
    AuthorizationException,
    FeatureDisabledException,
    ResourceNotFoundException,
    ValidationException,
)

CREATED = datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc)
MEMBER = AuthContext(user_id="u1", organization_id="org1", org_role="org:member")
COACH = AuthContext(user_id="coach", organization_id="org1", org_role="org:coach")


def _post(post_id: str, **overrides) -> FeedPostResult:
    data = {
        "id": post_id,
        "organization_id": "org1",
        "author_id": "u2",
        "text": "Day 3 done",
        "created_at": CREATED,
        **overrides,
    }
    return FeedPostResult(**data)


@pytest.fixture
def repos():
    feed_repo = AsyncMock()
    org_repo = AsyncMock()
    org_repo.get_settings = AsyncMock(return_value=OrgSettingsResult(organization_id="org1"))
    squad_repo = AsyncMock()
    squad_repo.list_for_member = AsyncMock(return_value=[MagicMock(id="sq1")])
    return feed_repo, org_repo, squad_repo


@pytest.fixture
def service(repos):
    return FeedService(*repos)


async def test_disabled_feed(service, repos):
    repos[1].get_settings.return_value = OrgSettingsResult(
        organization_id="org1", feed_enabled=False
    )
    with pytest.raises(FeatureDisabledException):
        await service.list_posts(MEMBER)


async def test_member_only_sees_own_squad_posts(service, repos):
    repos[0].list_posts = AsyncMock(
        return_value=[
            _post("p1"),
            _post("p2", visibility=PostVisibility.SQUAD, squad_id="sq1"),
            _post("p3", visibility=PostVisibility.SQUAD, squad_id="sq2"),
        ]
    )
    assert [p.id for p in await service.list_posts(MEMBER)] == ["p1", "p2"]
    assert len(await service.list_posts(COACH)) == 3


async def test_empty_post_is_rejected(service):
    with pytest.raises(ValidationException):
        await service.create_post(MEMBER, "   ", image_urls=[""])


async def test_squad_post_needs_membership(service):
    with pytest.raises(AuthorizationException):
        await service.create_post(
            MEMBER, "Hi", visibility=PostVisibility.SQUAD, squad_id="sq2"
        )


async def test_org_post_drops_squad_id(service, repos):
    await service.create_post(MEMBER, " Hello ", squad_id="sq1")
    data = repos[0].create_post.await_args.args[0]
    assert data["text"] == "Hello"
    assert data["squad_id"] is None
    assert data["visibility"] == "org"


async def test_reacting_twice_adds_one_reaction(service, repos):
    feed_repo = repos[0]
    feed_repo.get_post = AsyncMock(return_value=_post("p1"))
    feed_repo.has_reaction = AsyncMock(side_effect=[False, True])
    await service.react(MEMBER, "p1")
    await service.react(MEMBER, "p1")
    feed_repo.add_reaction.assert_awaited_once()


async def test_hidden_squad_post_is_not_found(service, repos):
    repos[0].get_post = AsyncMock(
        return_value=_post("p3", visibility=PostVisibility.SQUAD, squad_id="sq2")
    )
    with pytest.raises(ResourceNotFoundException):
        await service.add_comment(MEMBER, "p3", "Nice")


async def test_only_author_or_coach_deletes(service, repos):
    repos[0].get_post = AsyncMock(return_value=_post("p1"))
    with pytest.raises(AuthorizationException):
        await service.delete_post(MEMBER, "p1")
    await service.delete_post(COACH, "p1")
    repos[0].delete_post.assert_awaited_once_with("p1")
