"""Firestore-backed org feed: posts, reactions and comments (implements IFeedRepository)."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from app.application.dtos.feed import FeedCommentResult, FeedPostResult
from app.domain.enums import PostVisibility
from app.infrastructure.firebase.collections import (
    COLLECTION_FEED_COMMENTS,
    COLLECTION_FEED_POSTS,
    COLLECTION_FEED_REACTIONS,
)
from app.infrastructure.firebase._rest_client import FirestoreRESTClient
from app.shared.utils.datetime import utc_now


def _reaction_doc_id(post_id: str, user_id: str) -> str:
    return f"{post_id}_{user_id}"


class FirestoreFeedRepository:
    """Post counters are incremented server-side in the same batch as the reaction/comment write."""

    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client
        self._posts = client.collection(COLLECTION_FEED_POSTS)
        self._reactions = client.collection(COLLECTION_FEED_REACTIONS)
        self._comments = client.collection(COLLECTION_FEED_COMMENTS)

    def _post(self, doc_id: str, data: dict) -> FeedPostResult:
        return FeedPostResult(
            id=doc_id,
            organization_id=data.get("organization_id", ""),
            author_id=data.get("author_id", ""),
            text=data.get("text"),
            created_at=data.get("created_at") or utc_now(),
            image_urls=list(data.get("image_urls") or []),
            visibility=PostVisibility(data.get("visibility", PostVisibility.ORG.value)),
            squad_id=data.get("squad_id"),
            reaction_count=max(data.get("reaction_count") or 0, 0),
            comment_count=data.get("comment_count") or 0,
        )

    def _comment(self, doc_id: str, data: dict) -> FeedCommentResult:
        return FeedCommentResult(
            id=doc_id,
            post_id=data.get("post_id", ""),
            organization_id=data.get("organization_id", ""),
            author_id=data.get("author_id", ""),
            text=data.get("text", ""),
            created_at=data.get("created_at") or utc_now(),
        )

    async def create_post(self, data: dict[str, Any]) -> FeedPostResult:
        doc = {**data, "reaction_count": 0, "comment_count": 0, "created_at": utc_now()}
        ref = await self._posts.add(doc)
        return self._post(ref.id, doc)

    async def get_post(self, post_id: str) -> FeedPostResult | None:
        doc = await self._posts.document(post_id).get()
        if not doc:
            return None
        return self._post(doc.id, doc.to_dict())

    async def list_posts(
        self, organization_id: str, limit: int, before: datetime | None = None
    ) -> list[FeedPostResult]:
        q = self._posts.where("organization_id", "==", organization_id)
        if before is not None:
            q = q.where("created_at", "<", before)
        q = q.order_by("created_at", "DESCENDING").limit(limit)
        return [self._post(s.id, s.to_dict()) async for s in q.stream()]

    async def delete_post(self, post_id: str) -> None:
        batch = self._client.batch()
        for coll in (self._reactions, self._comments):
            async for snapshot in coll.where("post_id", "==", post_id).stream():
                batch.delete(coll.document(snapshot.id))
        batch.delete(self._posts.document(post_id))
        await batch.commit()

    async def has_reaction(self, post_id: str, user_id: str) -> bool:
        doc = await self._reactions.document(_reaction_doc_id(post_id, user_id)).get()
        return doc is not None

    async def add_reaction(self, post: FeedPostResult, user_id: str, reaction: str) -> None:
        batch = self._client.batch()
        batch.set(self._reactions.document(_reaction_doc_id(post.id, user_id)), {
            "post_id": post.id,
            "organization_id": post.organization_id,
            "user_id": user_id,
            "reaction": reaction,
            "created_at": utc_now(),
        })
        batch.increment(self._posts.document(post.id), "reaction_count")
        await batch.commit()

    async def remove_reaction(self, post: FeedPostResult, user_id: str) -> None:
        batch = self._client.batch()
        batch.delete(self._reactions.document(_reaction_doc_id(post.id, user_id)))
        batch.increment(self._posts.document(post.id), "reaction_count", -1)
        await batch.commit()

    async def add_comment(
        self, post: FeedPostResult, data: dict[str, Any]
    ) -> FeedCommentResult:
        ref = self._comments.document()
        doc = {
            **data,
            "post_id": post.id,
            "organization_id": post.organization_id,
            "created_at": utc_now(),
        }
        batch = self._client.batch()
        batch.set(ref, doc)
        batch.increment(self._posts.document(post.id), "comment_count")
        await batch.commit()
        return self._comment(ref.id, doc)

    async def list_comments(self, post_id: str) -> list[FeedCommentResult]:
        q = self._comments.where("post_id", "==", post_id).order_by("created_at")
        return [self._comment(s.id, s.to_dict()) async for s in q.stream()]
