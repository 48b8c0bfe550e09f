"""Integration-test fixtures.

Requires PostgreSQL at DATABASE_URL with migrations applied (alembic upgrade head).
All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool (created at import time) remains valid across the
entire test session. Skipped when the database is unreachable.
"""

import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from src.main import app
from src.pm_common.database import engine
from src.pm_gateway.auth.jwt_handler import create_access_token


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client: keeps the engine pool alive."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (OSError, SQLAlchemyError) as e:
        pytest.skip(f"PostgreSQL not reachable: {e}")
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture(scope="session")
def identities() -> dict[str, str]:
    """Fresh caller identities per run so reruns never collide on balances."""
    suffix = uuid.uuid4().hex[:8]
    return {role: f"{role}-{suffix}" for role in ("authority", "user1", "user2")}


@pytest.fixture(scope="session")
def headers(identities: dict[str, str]) -> dict[str, dict[str, str]]:
    return {
        role: {"Authorization": f"Bearer {create_access_token(identity)}"}
        for role, identity in identities.items()
    }
