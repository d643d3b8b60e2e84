"""Organization feed: posts, reactions and comments."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response

from app.api.v1.dependencies import OrgUser, get_feed_service
from app.application.use_cases.feed import FeedService
from app.core.limiter import limit_writes
from app.schemas.feed import (
    CommentCreateRequest,
    CommentResponse,
    PostCreateRequest,
    PostResponse,
    ReactionRequest,
)

router = APIRouter()

FeedServiceDep = Annotated[FeedService, Depends(get_feed_service)]


@router.get("/posts", response_model=list[PostResponse])
async def list_posts(
    auth: OrgUser,
    feed_svc: FeedServiceDep,
    limit: Annotated[int, Query(ge=1)] = 20,
    before: Annotated[datetime | None, Query(description="Cursor: created_at of the last post seen")] = None,
):
    posts = await feed_svc.list_posts(auth, limit=limit, before=before)
    return [PostResponse.model_validate(p) for p in posts]


@router.post("/posts", response_model=PostResponse, status_code=201)
@limit_writes
async def create_post(
    request: Request, body: PostCreateRequest, auth: OrgUser, feed_svc: FeedServiceDep
):
    post = await feed_svc.create_post(
        auth, body.text, body.image_urls, body.visibility, body.squad_id
    )
    return PostResponse.model_validate(post)


@router.delete("/posts/{post_id}", status_code=204)
@limit_writes
async def delete_post(request: Request, post_id: str, auth: OrgUser, feed_svc: FeedServiceDep):
    await feed_svc.delete_post(auth, post_id)
    return Response(status_code=204)


@router.put("/posts/{post_id}/reaction", response_model=PostResponse)
@limit_writes
async def react_to_post(
    request: Request,
    post_id: str,
    body: ReactionRequest,
    auth: OrgUser,
    feed_svc: FeedServiceDep,
):
    """One reaction per user; repeating it leaves the count unchanged."""
    return PostResponse.model_validate(await feed_svc.react(auth, post_id, body.reaction))


@router.delete("/posts/{post_id}/reaction", response_model=PostResponse)
@limit_writes
async def remove_reaction(
    request: Request, post_id: str, auth: OrgUser, feed_svc: FeedServiceDep
):
    return PostResponse.model_validate(await feed_svc.unreact(auth, post_id))


@router.get("/posts/{post_id}/comments", response_model=list[CommentResponse])
async def list_comments(post_id: str, auth: OrgUser, feed_svc: FeedServiceDep):
    comments = await feed_svc.list_comments(auth, post_id)
    return [CommentResponse.model_validate(c) for c in comments]


@router.post("/posts/{post_id}/comments", response_model=CommentResponse, status_code=201)
@limit_writes
async def add_comment(
    request: Request,
    post_id: str,
    body: CommentCreateRequest,
    auth: OrgUser,
    feed_svc: FeedServiceDep,
):
    return CommentResponse.model_validate(await feed_svc.add_comment(auth, post_id, body.text))
