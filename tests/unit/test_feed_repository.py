"""Feed repository writes as sent to the Firestore REST commit endpoint."""

import json
from datetime import datetime, timezone

import httpx
import pytest

from app.application.dtos.feed import FeedPostResult
from app.infrastructure.firebase._rest_client import FirestoreRESTClient
from app.infrastructure.firebase.repositories.feed_repo_firestore import (
    FirestoreFeedRepository,
)

POST = FeedPostResult(
    id="post1",
    organization_id="org1",
    author_id="u2",
    text="Week one done",
    created_at=datetime(2026, 10, 18, tzinfo=timezone.utc),
    reaction_count=4,
    comment_count=2,
)


@pytest.fixture
def commits():
    return []


@pytest.fixture
def repo(commits, monkeypatch):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("/documents:commit")
        commits.append(json.loads(request.content))
        return httpx.Response(200, json={"writeResults": []})

    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = FirestoreRESTClient("coachhub-test", credentials=None, http_client=http)

    async def fake_token() -> str:
        return "token"

    monkeypatch.setattr(client, "get_token", fake_token)
    return FirestoreFeedRepository(client)


def _transforms(body: dict) -> list[dict]:
    return [w["transform"] for w in body["writes"] if "transform" in w]


async def test_reaction_increments_counter_server_side(repo, commits):
    await repo.add_reaction(POST, "u1", "heart")

    [body] = commits
    [transform] = _transforms(body)
    assert transform["document"].endswith("/feed_posts/post1")
    assert transform["fieldTransforms"] == [
        {"fieldPath": "reaction_count", "increment": {"integerValue": "1"}}
    ]
    assert not any("updateMask" in w for w in body["writes"])


async def test_removing_a_reaction_decrements(repo, commits):
    await repo.remove_reaction(POST, "u1")
    [transform] = _transforms(commits[0])
    assert transform["fieldTransforms"][0]["increment"] == {"integerValue": "-1"}


async def test_comment_increments_comment_count(repo, commits):
    comment = await repo.add_comment(POST, {"author_id": "u1", "text": "Nice"})
    assert comment.post_id == "post1"
    [transform] = _transforms(commits[0])
    assert transform["fieldTransforms"] == [
        {"fieldPath": "comment_count", "increment": {"integerValue": "1"}}
    ]
