"""Serves the standalone tracking snippet."""

from importlib.resources import files

from fastapi import APIRouter
from fastapi.responses import Response

router = APIRouter(tags=["snippet"])

_SNIPPET = files("minilytics").joinpath("static/tracker.js").read_text(encoding="utf-8")


@router.get("/tracker.js", include_in_schema=False)
async def tracker_script() -> Response:
    """Return tracker.js for ``<script defer src=".../tracker.js" data-site-id="...">``."""
    return Response(
        content=_SNIPPET,
        media_type="application/javascript",
        headers={
            "Cache-Control": "public, max-age=3600",
            "Access-Control-Allow-Origin": "*",
        },
    )
