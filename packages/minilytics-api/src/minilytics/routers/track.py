"""Ingest endpoint - hot path for page views reported by trackers.

Public and unauthenticated, like a tracking pixel. The row is written in a
background task after the response goes out, so a slow or failing store
never holds up the visitor's browser.
"""

import json
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from minilytics.db.engine import PersistenceUnavailable
from minilytics.dependencies import SessionProvider, get_session_provider
from minilytics.schemas.track import TrackPayload, TrackResponse
from minilytics.services.ingestion import write_page_view

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["track"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST,OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Max-Age": "86400",
}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        content={"error": message},
        status_code=status_code,
        headers=CORS_HEADERS,
    )


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err["loc"])
        parts.append(f"{location}: {err['msg']}" if location else err["msg"])
    return "; ".join(parts)


@router.options("/track", status_code=status.HTTP_204_NO_CONTENT)
async def track_preflight() -> Response:
    """Answer CORS pre-flight requests from any origin."""
    return Response(status_code=status.HTTP_204_NO_CONTENT, headers=CORS_HEADERS)


@router.post(
    "/track",
    response_model=TrackResponse,
    responses={400: {}, 422: {}, 500: {}},
)
async def track(
    request: Request,
    background_tasks: BackgroundTasks,
    session_provider: SessionProvider = Depends(get_session_provider),
) -> JSONResponse:
    """Record one page view or custom event.

    The body is parsed as JSON whatever its Content-Type, so beacons sent
    as text/plain (no pre-flight) are accepted.
    """
    raw = await request.body()
    try:
        data = json.loads(raw)
    except ValueError:
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid JSON")

    if not isinstance(data, dict):
        return _error(422, "Missing domain or path")

    try:
        payload = TrackPayload.model_validate(data)
    except ValidationError as exc:
        return _error(422, _describe(exc))

    if not payload.has_location():
        return _error(422, "Missing domain or path")

    try:
        session_factory = session_provider()
    except PersistenceUnavailable as exc:
        logger.error("Cannot record page view: %s", exc)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))

    # Not awaited here: the write runs after the response is sent.
    background_tasks.add_task(write_page_view, session_factory, payload)

    return JSONResponse(
        content=TrackResponse().model_dump(),
        status_code=status.HTTP_200_OK,
        headers=CORS_HEADERS,
    )
