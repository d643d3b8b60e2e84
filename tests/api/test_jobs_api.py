"""Cron-triggered job routes."""

from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient

from app.api.v1.dependencies import get_lifecycle_service
from app.main import app

URL = "/api/v1/jobs/program-lifecycle"


@pytest.fixture
def lifecycle_svc() -> AsyncMock:
    svc = AsyncMock()
    svc.run_program_lifecycle = AsyncMock(
        return_value={"activated": 2, "completed": 1, "synced": 5, "failed": 0}
    )
    app.dependency_overrides[get_lifecycle_service] = lambda: svc
    return svc


@pytest.mark.parametrize(
    "headers",
    [{}, {"Authorization": "Bearer wrong"}, {"Authorization": "test-cron-secret"}],
)
async def test_wrong_cron_secret_returns_401(client: AsyncClient, lifecycle_svc, headers) -> None:
    response = await client.post(URL, headers=headers)
    assert response.status_code == 401
    lifecycle_svc.run_program_lifecycle.assert_not_awaited()


async def test_lifecycle_run(client: AsyncClient, lifecycle_svc) -> None:
    response = await client.post(URL, headers={"Authorization": "Bearer test-cron-secret"})
    assert response.status_code == 200
    assert response.json() == {"activated": 2, "completed": 1, "synced": 5, "failed": 0}
