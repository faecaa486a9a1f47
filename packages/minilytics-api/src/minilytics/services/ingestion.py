"""Event persistence for the ingestion endpoint."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from minilytics.models.page_view import PageView
from minilytics.schemas.track import TrackPayload

logger = logging.getLogger(__name__)


def build_page_view(payload: TrackPayload) -> PageView:
    """Map a validated payload onto a new row. Empty referrers become null."""
    return PageView(
        domain=payload.domain,
        path=payload.path,
        referrer=payload.referrer or None,
        site_id=payload.site_id,
        title=payload.title or None,
        event=payload.event or None,
        properties=payload.properties,
    )


async def write_page_view(
    session_factory: async_sessionmaker[AsyncSession],
    payload: TrackPayload,
) -> None:
    """Insert one event after the response has been sent.

    Runs as a background task with its own session. A failure here is lost
    for good: it is logged and never retried.
    """
    async with session_factory() as db:
        try:
            db.add(build_page_view(payload))
            await db.commit()
        except Exception:
            logger.exception(
                "page_views insert failed for %s%s (site %s)",
                payload.domain,
                payload.path,
                payload.site_id,
            )
            await db.rollback()
