"""Dashboard read path: raw page views and their aggregated summary."""

from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from minilytics.dependencies import get_db, resolve_caller_identity
from minilytics.models.page_view import PageView
from minilytics.models.site import Site
from minilytics.schemas.stats import (
    RANGE_DAYS,
    PageViewResponse,
    StatsResponse,
    TimeRange,
)
from minilytics.services.aggregation import summarize

router = APIRouter(prefix="/api", tags=["stats"])


async def _scoped_site_ids(
    db: AsyncSession, user_id: str, site_id: str | None
) -> tuple[list[str], list[str]]:
    """Return the caller's site ids and the subset this request reads.

    A ``site_id`` filter that is unknown or owned by someone else is a 404,
    indistinguishable from one another.
    """
    stmt = select(Site.site_id).where(Site.user_id == user_id)
    result = await db.execute(stmt)
    owned = list(result.scalars().all())

    if site_id is None:
        return owned, owned
    if site_id not in owned:
        raise HTTPException(status_code=404, detail="Not found")
    return owned, [site_id]


async def _fetch_page_views(
    db: AsyncSession, site_ids: list[str], limit: int | None = None
) -> list[PageView]:
    if not site_ids:
        return []
    stmt = (
        select(PageView)
        .where(PageView.site_id.in_(site_ids))
        .order_by(PageView.created_at.desc())
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await db.execute(stmt)
    return list(result.scalars().all())


def _resolve_zone(tz: str) -> ZoneInfo:
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        raise HTTPException(status_code=422, detail=f"Unknown time zone: {tz}")


@router.get("/page-views", response_model=list[PageViewResponse])
async def list_page_views(
    user_id: str = Depends(resolve_caller_identity),
    db: AsyncSession = Depends(get_db),
    site_id: str | None = Query(default=None),
    limit: int = Query(default=100, ge=1, le=1000),
) -> list[PageViewResponse]:
    """Return the caller's raw page views, newest first."""
    _, site_ids = await _scoped_site_ids(db, user_id, site_id)
    views = await _fetch_page_views(db, site_ids, limit=limit)
    return [PageViewResponse.model_validate(v) for v in views]


@router.get("/stats", response_model=StatsResponse)
async def get_stats(
    user_id: str = Depends(resolve_caller_identity),
    db: AsyncSession = Depends(get_db),
    site_id: str | None = Query(default=None),
    time_range: TimeRange = Query(default="7d", alias="range"),
    tz: str = Query(default="UTC", max_length=64),
) -> StatsResponse:
    """Summarize the caller's traffic over a trailing window.

    ``tz`` is the viewer's IANA time zone; it decides which calendar day
    an event falls on.
    """
    zone = _resolve_zone(tz)
    owned, site_ids = await _scoped_site_ids(db, user_id, site_id)

    views = await _fetch_page_views(db, site_ids)
    summary = summarize(views, now=datetime.now(zone), days=RANGE_DAYS[time_range])

    return StatsResponse(
        range=time_range,
        total_sites=len(owned),
        total=summary["total"],
        today=summary["today"],
        average_per_day=summary["average_per_day"],
        daily=summary["daily"],
        top_paths=summary["top_paths"],
        recent=[PageViewResponse.model_validate(v) for v in summary["recent"]],
    )
