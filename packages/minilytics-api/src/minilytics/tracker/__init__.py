"""Minilytics tracking library.

Typical use::

    from minilytics import tracker

    tracker.init(tracker.TrackerOptions(site_id="..."), context=page)
    tracker.track_event("signup", {"plan": "pro"})

``init`` configures one process-wide tracker; later calls are no-ops.
"""

import logging

from minilytics.tracker.client import (
    DEFAULT_API_URL,
    PageViewData,
    Tracker,
    TrackerOptions,
    create_tracker,
)
from minilytics.tracker.context import History, PageContext
from minilytics.tracker.transport import (
    BeaconTransport,
    DefaultTransport,
    KeepAliveTransport,
    Transport,
)

logger = logging.getLogger("minilytics.tracker")

_default_tracker: Tracker | None = None


def init(
    options: TrackerOptions,
    context: PageContext | None = None,
    transport: Transport | None = None,
) -> Tracker:
    """Create the process-wide tracker on first call and initialize it."""
    global _default_tracker
    if _default_tracker is None:
        _default_tracker = create_tracker(options, context=context, transport=transport)
    _default_tracker.init()
    return _default_tracker


def track_page_view(data: PageViewData | None = None) -> None:
    if _default_tracker is None:
        logger.debug("Tracker not initialized, call init() first")
        return
    _default_tracker.track_page_view(data)


def track_event(name: str, properties: dict | None = None) -> None:
    if _default_tracker is None:
        logger.debug("Tracker not initialized, call init() first")
        return
    _default_tracker.track_event(name, properties)


def reset() -> None:
    """Forget the process-wide tracker."""
    global _default_tracker
    _default_tracker = None


__all__ = [
    "DEFAULT_API_URL",
    "BeaconTransport",
    "DefaultTransport",
    "History",
    "KeepAliveTransport",
    "PageContext",
    "PageViewData",
    "Tracker",
    "TrackerOptions",
    "Transport",
    "create_tracker",
    "init",
    "reset",
    "track_event",
    "track_page_view",
]
