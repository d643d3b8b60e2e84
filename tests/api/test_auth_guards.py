"""Session token checks on protected routes (no Firestore needed)."""

import time
from unittest.mock import AsyncMock

from httpx import AsyncClient
from jose import jwt

from app.api.v1.dependencies import get_intake_service, get_user_service
from app.application.dtos.user import UserResult
from app.main import app


async def test_missing_token_returns_401(client: AsyncClient) -> None:
    response = await client.get("/api/v1/me")
    assert response.status_code == 401
    assert response.json()["error"] == "AUTHENTICATION_ERROR"


async def test_expired_token_returns_401(client: AsyncClient, auth_headers) -> None:
    response = await client.get("/api/v1/tasks?date=2026-10-19", headers=auth_headers(expires_in=-60))
    assert response.status_code == 401


async def test_token_signed_with_other_key_returns_401(client: AsyncClient) -> None:
    token = jwt.encode({"sub": "user_x", "org_id": "org_test"}, "not-the-key", algorithm="HS256")
    response = await client.get("/api/v1/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


async def test_org_route_without_active_org_returns_400(client: AsyncClient, auth_headers) -> None:
    response = await client.get(
        "/api/v1/tasks?date=2026-10-19", headers=auth_headers(org_id=None, org_role=None)
    )
    assert response.status_code == 400
    assert response.json()["error"] == "ORGANIZATION_REQUIRED"


async def test_member_on_coach_route_returns_403(
    client: AsyncClient, member_headers: dict[str, str]
) -> None:
    app.dependency_overrides[get_intake_service] = lambda: AsyncMock()
    response = await client.get("/api/v1/intake/configs", headers=member_headers)
    assert response.status_code == 403
    assert response.json()["error"] == "PERMISSION_DENIED"


async def test_me_returns_session_org_and_role(
    client: AsyncClient, coach_headers: dict[str, str]
) -> None:
    user_svc = AsyncMock()
    user_svc.get_me = AsyncMock(
        return_value=UserResult(id="user_coach", email="coach@example.com", first_name="Grace")
    )
    app.dependency_overrides[get_user_service] = lambda: user_svc

    response = await client.get("/api/v1/me", headers=coach_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["user"]["email"] == "coach@example.com"
    assert data["organization_id"] == "org_test"
    assert data["org_role"] == "org:coach"
    assert data["is_coach"] is True
    user_svc.get_me.assert_awaited_once_with("user_coach")


async def test_v2_session_claims_are_understood(client: AsyncClient) -> None:
    user_svc = AsyncMock()
    user_svc.get_me = AsyncMock(return_value=UserResult(id="user_v2", email="v2@example.com"))
    app.dependency_overrides[get_user_service] = lambda: user_svc
    token = jwt.encode(
        {
            "sub": "user_v2",
            "exp": int(time.time()) + 600,
            "v": 2,
            "o": {"id": "org_v2", "rol": "admin", "slg": "v2-org"},
        },
        "test-clerk-signing-key",
        algorithm="HS256",
    )

    response = await client.get("/api/v1/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    assert response.json()["organization_id"] == "org_v2"
    assert response.json()["org_role"] == "org:admin"
