"""FastAPI dependency injection functions."""

import logging
from collections.abc import AsyncGenerator, Callable

from fastapi import Depends, Header, HTTPException, status
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from minilytics.config import Settings, get_settings
from minilytics.db.engine import get_session, get_session_factory

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session."""
    async for session in get_session():
        yield session


def get_app_settings() -> Settings:
    """Return application settings."""
    return get_settings()


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
    )


def user_id_from_token(token: str, settings: Settings) -> str | None:
    """Verify a bearer token and return its subject, or None if invalid."""
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[ALGORITHM],
            audience=settings.jwt_audience,
        )
    except JWTError as exc:
        logger.debug("Rejected bearer token: %s", exc)
        return None
    subject = claims.get("sub")
    if not isinstance(subject, str) or not subject:
        return None
    return subject


async def resolve_caller_identity(
    authorization: str | None = Header(default=None, description="Bearer <access_token>"),
    settings: Settings = Depends(get_app_settings),
) -> str:
    """Resolve the calling user's id from the Authorization header.

    Every failure mode (no header, wrong scheme, empty, bad signature,
    expired, no subject) maps to the same 401.
    """
    if not authorization:
        raise _unauthorized()

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        raise _unauthorized()

    token = token.strip()
    if not token:
        raise _unauthorized()

    user_id = user_id_from_token(token, settings)
    if user_id is None:
        raise _unauthorized()
    return user_id


SessionProvider = Callable[[], async_sessionmaker[AsyncSession]]


def get_session_provider() -> SessionProvider:
    """Return a callable that builds (or reuses) the session factory.

    Handed out unevaluated so the ingestion route can validate its input
    before touching persistence.
    """
    return get_session_factory
