"""Pytest configuration and fixtures for coachhub.

Environment is set before app.main is imported: session tokens are signed
with an HS256 test key, Redis and telemetry are off and Firestore is left
unconfigured. API tests replace services with AsyncMocks through
app.dependency_overrides, so no request reaches Firestore.
"""

import base64
import os
import time

os.environ["CLERK_JWT_KEY"] = "test-clerk-signing-key"
os.environ["CLERK_JWT_ALGORITHM"] = "HS256"
os.environ["CLERK_WEBHOOK_SECRET"] = "whsec_" + base64.b64encode(
    b"coachhub-test-webhook-key"
).decode()
os.environ["CRON_SECRET"] = "test-cron-secret"
os.environ["REDIS_ENABLED"] = "false"
os.environ["TELEMETRY_ENABLED"] = "false"
os.environ["APP_BASE_URL"] = "https://app.test"
os.environ.pop("FIREBASE_SERVICE_ACCOUNT_KEY", None)
os.environ.pop("FIREBASE_SERVICE_ACCOUNT_PATH", None)
os.environ.pop("CLERK_ISSUER", None)

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from jose import jwt  # noqa: E402

from app.core.config import get_settings  # noqa: E402

get_settings.cache_clear()

from app.core.limiter import limiter  # noqa: E402
from app.main import app  # noqa: E402

ORG_ID = "org_test"
USER_ID = "user_member"
COACH_ID = "user_coach"


def make_session_token(
    user_id: str = USER_ID,
    org_id: str | None = ORG_ID,
    org_role: str | None = "org:member",
    expires_in: int = 3600,
) -> str:
    """Session JWT shaped like Clerk's v1 claims, signed with the test key."""
    claims: dict = {"sub": user_id, "exp": int(time.time()) + expires_in}
    if org_id:
        claims["org_id"] = org_id
    if org_role:
        claims["org_role"] = org_role
    return jwt.encode(claims, os.environ["CLERK_JWT_KEY"], algorithm="HS256")


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(autouse=True)
def _reset_app_state():
    """Fresh rate limit counters and no leftover dependency overrides per test."""
    limiter.reset()
    yield
    app.dependency_overrides.clear()


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def member_headers() -> dict[str, str]:
    return bearer(make_session_token())


@pytest.fixture
def coach_headers() -> dict[str, str]:
    return bearer(make_session_token(user_id=COACH_ID, org_role="org:coach"))


@pytest.fixture
def auth_headers():
    """Build Authorization headers for any user, org and role."""

    def _headers(**kwargs) -> dict[str, str]:
        return bearer(make_session_token(**kwargs))

    return _headers
