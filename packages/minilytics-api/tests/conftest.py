"""Test fixtures and configuration."""

from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from minilytics.config import get_settings
from minilytics.dependencies import ALGORITHM, get_db, get_session_provider
from minilytics.main import create_app
from minilytics.models import Base
from minilytics.tracker import reset as reset_default_tracker


def _make_token(
    user_id: str | None = "user-a",
    expires_in: timedelta = timedelta(hours=1),
    secret: str | None = None,
    **claims,
) -> str:
    """Mint an access token the way the identity provider would."""
    settings = get_settings()
    payload = {
        "aud": settings.jwt_audience,
        "exp": datetime.now(timezone.utc) + expires_in,
        **claims,
    }
    if user_id is not None:
        payload["sub"] = user_id
    return jwt.encode(payload, secret or settings.jwt_secret, algorithm=ALGORITHM)


def _auth(user_id: str = "user-a") -> dict[str, str]:
    """Return an Authorization header dict for a user's bearer token."""
    return {"Authorization": f"Bearer {_make_token(user_id)}"}


@pytest.fixture(autouse=True)
def _reset_default_tracker():
    """Forget the process-wide tracker between tests."""
    reset_default_tracker()
    yield
    reset_default_tracker()


@pytest_asyncio.fixture
async def db_engine():
    """Create an in-memory SQLite engine for tests."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=db_engine, class_=AsyncSession, expire_on_commit=False
    )


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session bound to the test engine."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def app(session_factory):
    """Application wired to the in-memory engine."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app = create_app()
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_provider] = lambda: (lambda: session_factory)
    return app


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client with overridden DB dependencies."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def site_for_user_a(client: AsyncClient) -> dict:
    """Register a site for ``user-a`` via POST /api/sites and return it."""
    response = await client.post(
        "/api/sites",
        json={"domain": "fixture-site.example.com"},
        headers=_auth("user-a"),
    )
    assert response.status_code == 201, response.text
    return response.json()["site"]


@pytest.fixture
def issue_token():
    """Factory for signed access tokens: ``issue_token("user-b", expires_in=...)``."""
    return _make_token


@pytest.fixture
def auth_headers():
    """Factory for bearer headers: ``auth_headers("user-b")``."""
    return _auth
