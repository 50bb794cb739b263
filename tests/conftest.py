import os
from types import SimpleNamespace
from typing import AsyncGenerator, Optional
from uuid import UUID

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from shiftplan.main import app
from shiftplan.db.init_db import create_tables, drop_tables
from shiftplan.db.session import get_db


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_PASSWORD = "secret123"


@pytest.fixture()
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory SQLite DB per test. StaticPool keeps the single connection alive."""
    eng = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    await create_tables(eng)
    yield eng
    await drop_tables(eng)
    await eng.dispose()


@pytest.fixture()
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for a test and override FastAPI dependency."""
    async_session = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            yield session

        app.dependency_overrides[get_db] = override_get_db
        yield session

    app.dependency_overrides.clear()


@pytest.fixture()
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def make_user(client: AsyncClient):
    """Sign up through the API, sign in, and return id + auth headers."""

    async def _make(
        email: str,
        role: str = "associate",
        manager_email: Optional[str] = None,
        full_name: Optional[str] = None,
    ) -> SimpleNamespace:
        payload = {
            "full_name": full_name or email.split("@")[0].title(),
            "email": email,
            "password": TEST_PASSWORD,
            "role": role,
            "manager_email": manager_email,
        }
        resp = await client.post("/api/v1/auth/sign-up", json=payload)
        assert resp.status_code == 201, resp.text

        login = await client.post("/api/v1/auth/sign-in", json={"email": email, "password": TEST_PASSWORD})
        assert login.status_code == 200, login.text
        tokens = login.json()
        return SimpleNamespace(
            id=UUID(resp.json()["user_id"]),
            email=email,
            headers={"Authorization": f"Bearer {tokens['access_token']}"},
            refresh_token=tokens["refresh_token"],
        )

    return _make


@pytest.fixture()
async def manager(make_user) -> SimpleNamespace:
    return await make_user("maya.manager@example.com", role="manager", full_name="Maya Manager")


@pytest.fixture()
async def associate(make_user, manager) -> SimpleNamespace:
    return await make_user("alex@example.com", manager_email=manager.email, full_name="Alex Associate")
