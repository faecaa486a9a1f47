"""Async database engine and session factory.

The engine is created on first use, cached for the lifetime of the process
and disposed by the application lifespan on shutdown.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from minilytics.config import get_settings

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


class PersistenceUnavailable(RuntimeError):
    """Raised when the database client cannot be constructed."""


def _get_engine() -> AsyncEngine:
    """Create or return the cached async engine."""
    global _engine
    if _engine is None:
        settings = get_settings()
        url = settings.database_url.strip()
        if not url:
            raise PersistenceUnavailable("Missing DATABASE_URL. Add it to your environment or .env file.")

        connect_args = {}
        if url.startswith("sqlite"):
            connect_args["check_same_thread"] = False

        try:
            _engine = create_async_engine(
                url,
                echo=(settings.environment == "development"),
                connect_args=connect_args,
            )
        except (SQLAlchemyError, ImportError) as exc:
            raise PersistenceUnavailable(f"Invalid DATABASE_URL: {exc}") from exc
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Create or return the cached session factory."""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            bind=_get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _session_factory


async def init_db() -> None:
    """Create all tables from metadata. Used for development/testing."""
    from minilytics.models import Base  # noqa: F811

    engine = _get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session for FastAPI dependency injection."""
    factory = get_session_factory()
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def dispose_engine() -> None:
    """Dispose of the engine. Called on app shutdown."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
