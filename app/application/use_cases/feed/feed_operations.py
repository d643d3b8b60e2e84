"""Org feed operations: posts, reactions and comments."""

from __future__ import annotations

from datetime import datetime

from app.application.dtos.auth import AuthContext
from app.application.dtos.feed import FeedCommentResult, FeedPostResult
from app.application.interfaces.repositories import (
    IFeedRepository,
    IOrganizationRepository,
    ISquadRepository,
)
from app.domain.enums import PostVisibility
from app.domain.exceptions import (
    AuthorizationException,
    FeatureDisabledException,
    ResourceNotFoundException,
    ValidationException,
)
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import traced

logger = get_logger(__name__)


class FeedService:
    """Feed of the caller's active organization. Every call checks feed_enabled."""

    def __init__(
        self,
        feed_repo: IFeedRepository,
        org_repo: IOrganizationRepository,
        squad_repo: ISquadRepository,
        max_post_length: int = 5000,
        max_comment_length: int = 2000,
        page_max: int = 50,
    ) -> None:
        self.feed_repo = feed_repo
        self.org_repo = org_repo
        self.squad_repo = squad_repo
        self.max_post_length = max_post_length
        self.max_comment_length = max_comment_length
        self.page_max = page_max

    async def _ensure_enabled(self, organization_id: str) -> None:
        settings = await self.org_repo.get_settings(organization_id)
        if settings is not None and not settings.feed_enabled:
            raise FeatureDisabledException("feed")

    async def _member_squad_ids(self, auth: AuthContext) -> set[str]:
        squads = await self.squad_repo.list_for_member(auth.user_id, auth.organization_id)
        return {s.id for s in squads}

    async def _get_visible_post(self, auth: AuthContext, post_id: str) -> FeedPostResult:
        post = await self.feed_repo.get_post(post_id)
        if not post or post.organization_id != auth.organization_id:
            raise ResourceNotFoundException("feed_post", post_id)
        if (
            post.visibility is PostVisibility.SQUAD
            and not auth.is_coach
            and post.squad_id not in await self._member_squad_ids(auth)
        ):
            raise ResourceNotFoundException("feed_post", post_id)
        return post

    @traced("feed.create_post")
    async def create_post(
        self,
        auth: AuthContext,
        text: str | None,
        image_urls: list[str] | None = None,
        visibility: PostVisibility = PostVisibility.ORG,
        squad_id: str | None = None,
    ) -> FeedPostResult:
        await self._ensure_enabled(auth.organization_id)
        text = (text or "").strip() or None
        image_urls = [u for u in image_urls or [] if u]
        if not text and not image_urls:
            raise ValidationException("A post needs text or images", field="text")
        if text and len(text) > self.max_post_length:
            raise ValidationException(
                f"Post text is limited to {self.max_post_length} characters", field="text"
            )
        if visibility is PostVisibility.SQUAD:
            if not squad_id:
                raise ValidationException("squad_id is required for squad posts", field="squad_id")
            if not auth.is_coach and squad_id not in await self._member_squad_ids(auth):
                raise AuthorizationException("squad", "post")
        else:
            squad_id = None
        return await self.feed_repo.create_post({
            "organization_id": auth.organization_id,
            "author_id": auth.user_id,
            "text": text,
            "image_urls": image_urls,
            "visibility": visibility.value,
            "squad_id": squad_id,
        })

    async def list_posts(
        self, auth: AuthContext, limit: int = 20, before: datetime | None = None
    ) -> list[FeedPostResult]:
        """Newest first. Squad posts are only shown to that squad's members and coaches."""
        await self._ensure_enabled(auth.organization_id)
        if not 1 <= limit <= self.page_max:
            raise ValidationException(
                f"limit must be between 1 and {self.page_max}", field="limit"
            )
        posts = await self.feed_repo.list_posts(auth.organization_id, limit, before)
        if auth.is_coach:
            return posts
        squad_ids = await self._member_squad_ids(auth)
        return [
            p
            for p in posts
            if p.visibility is PostVisibility.ORG or p.squad_id in squad_ids
        ]

    async def delete_post(self, auth: AuthContext, post_id: str) -> None:
        await self._ensure_enabled(auth.organization_id)
        post = await self._get_visible_post(auth, post_id)
        if post.author_id != auth.user_id and not auth.is_coach:
            raise AuthorizationException("feed_post", "delete")
        await self.feed_repo.delete_post(post_id)
        logger.info("Feed post %s deleted by %s", post_id, auth.user_id)

    async def react(
        self, auth: AuthContext, post_id: str, reaction: str = "like"
    ) -> FeedPostResult:
        await self._ensure_enabled(auth.organization_id)
        post = await self._get_visible_post(auth, post_id)
        if not await self.feed_repo.has_reaction(post_id, auth.user_id):
            await self.feed_repo.add_reaction(post, auth.user_id, reaction)
        return await self.feed_repo.get_post(post_id)

    async def unreact(self, auth: AuthContext, post_id: str) -> FeedPostResult:
        await self._ensure_enabled(auth.organization_id)
        post = await self._get_visible_post(auth, post_id)
        if await self.feed_repo.has_reaction(post_id, auth.user_id):
            await self.feed_repo.remove_reaction(post, auth.user_id)
        return await self.feed_repo.get_post(post_id)

    async def add_comment(
        self, auth: AuthContext, post_id: str, text: str
    ) -> FeedCommentResult:
        await self._ensure_enabled(auth.organization_id)
        post = await self._get_visible_post(auth, post_id)
        text = (text or "").strip()
        if not text:
            raise ValidationException("Comment text is required", field="text")
        if len(text) > self.max_comment_length:
            raise ValidationException(
                f"Comments are limited to {self.max_comment_length} characters", field="text"
            )
        return await self.feed_repo.add_comment(
            post, {"author_id": auth.user_id, "text": text}
        )

    async def list_comments(
        self, auth: AuthContext, post_id: str
    ) -> list[FeedCommentResult]:
        await self._ensure_enabled(auth.organization_id)
        await self._get_visible_post(auth, post_id)
        return await self.feed_repo.list_comments(post_id)
