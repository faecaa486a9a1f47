"""Site registry endpoints."""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from minilytics.dependencies import get_db, resolve_caller_identity
from minilytics.models.site import Site
from minilytics.schemas.site import (
    SiteCreate,
    SiteCreateResponse,
    SiteListResponse,
    SiteResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sites", tags=["sites"])


def _generate_site_id() -> str:
    """Generate a fresh, unguessable public site identifier."""
    return str(uuid.uuid4())


@router.get("", response_model=SiteListResponse)
async def list_sites(
    user_id: str = Depends(resolve_caller_identity),
    db: AsyncSession = Depends(get_db),
) -> SiteListResponse:
    """List the caller's sites, newest first."""
    stmt = (
        select(Site)
        .where(Site.user_id == user_id)
        .order_by(Site.created_at.desc())
    )
    result = await db.execute(stmt)
    sites = result.scalars().all()
    return SiteListResponse(sites=[SiteResponse.model_validate(s) for s in sites])


@router.post(
    "",
    response_model=SiteCreateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_site(
    request: Request,
    user_id: str = Depends(resolve_caller_identity),
    db: AsyncSession = Depends(get_db),
) -> SiteCreateResponse:
    """Register a domain for the caller and assign it a new site_id.

    The body is read by hand, after authentication, so a bad token is
    always a 401 even when the body is garbage. Registering the same
    domain twice is allowed.
    """
    try:
        data = await request.json()
    except ValueError:
        data = {}
    if not isinstance(data, dict):
        data = {}

    try:
        body = SiteCreate.model_validate(data)
    except ValidationError:
        raise HTTPException(status_code=422, detail="Invalid domain")

    if not body.domain:
        raise HTTPException(status_code=422, detail="Domain is required")

    site = Site(
        site_id=_generate_site_id(),
        user_id=user_id,
        domain=body.domain,
    )
    db.add(site)
    await db.flush()

    logger.info("User %s registered site %s for %s", user_id, site.site_id, site.domain)
    return SiteCreateResponse(site=SiteResponse.model_validate(site))


@router.delete("/{row_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_site(
    row_id: str,
    user_id: str = Depends(resolve_caller_identity),
    db: AsyncSession = Depends(get_db),
) -> Response:
    """Delete one of the caller's sites.

    The lookup carries both the row id and the caller, so "no such site"
    and "someone else's site" are the same 404. Events recorded for the
    site are left in place.
    """
    stmt = (
        select(Site)
        .where(Site.id == row_id)
        .where(Site.user_id == user_id)
    )
    result = await db.execute(stmt)
    site = result.scalar_one_or_none()

    if site is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Not found",
        )

    await db.delete(site)
    await db.flush()

    logger.info("User %s deleted site %s", user_id, site.site_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
