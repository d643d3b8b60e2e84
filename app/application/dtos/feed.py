"""DTOs for the org feed."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from app.domain.enums import PostVisibility


@dataclass(frozen=True)
class FeedPostResult:
    id: str
    organization_id: str
    author_id: str
    text: str | None
    created_at: datetime
    image_urls: list[str] = field(default_factory=list)
    visibility: PostVisibility = PostVisibility.ORG
    squad_id: str | None = None
    reaction_count: int = 0
    comment_count: int = 0


@dataclass(frozen=True)
class FeedCommentResult:
    id: str
    post_id: str
    organization_id: str
    author_id: str
    text: str
    created_at: datetime
