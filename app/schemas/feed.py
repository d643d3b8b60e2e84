"""Feed API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.domain.enums import PostVisibility


class PostCreateRequest(BaseModel):
    text: str | None = None
    image_urls: list[str] = Field(default_factory=list, max_length=10)
    visibility: PostVisibility = PostVisibility.ORG
    squad_id: str | None = None


class PostResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    author_id: str
    text: str | None = None
    image_urls: list[str] = Field(default_factory=list)
    visibility: PostVisibility
    squad_id: str | None = None
    reaction_count: int = 0
    comment_count: int = 0
    created_at: datetime


class ReactionRequest(BaseModel):
    reaction: str = Field(default="like", min_length=1, max_length=32)


class CommentCreateRequest(BaseModel):
    text: str = Field(..., min_length=1)


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    post_id: str
    author_id: str
    text: str
    created_at: datetime
