"""Minilytics tracking client."""

import logging
from urllib.parse import urljoin, urlsplit

from pydantic import BaseModel, Field

from minilytics.schemas.track import (
    FIELD_LIMITS,
    MAX_PROPERTIES,
    MAX_PROPERTY_KEY_LENGTH,
    MAX_PROPERTY_VALUE_LENGTH,
    clip,
)
from minilytics.tracker.context import History, PageContext
from minilytics.tracker.transport import DefaultTransport, Transport

logger = logging.getLogger("minilytics.tracker")

DEFAULT_API_URL = "https://minilytics.app/api/track"


class TrackerOptions(BaseModel):
    """Tracker configuration."""

    site_id: str | None = Field(description="Your Minilytics site ID")
    api_url: str = DEFAULT_API_URL
    respect_dnt: bool = True
    debug: bool = False


class PageViewData(BaseModel):
    """Overrides for a single page view; unset fields come from the context."""

    url: str | None = None
    title: str | None = None
    referrer: str | None = None
    properties: dict | None = None


def bound_properties(properties: dict | None, debug: bool = False) -> dict | None:
    """Keep at most MAX_PROPERTIES scalar entries with short keys."""
    if not properties:
        return None
    kept: dict = {}
    for key, value in properties.items():
        if len(kept) >= MAX_PROPERTIES:
            if debug:
                logger.info("Dropping properties beyond the first %d", MAX_PROPERTIES)
            break
        if not isinstance(key, str) or not key or len(key) > MAX_PROPERTY_KEY_LENGTH:
            if debug:
                logger.info("Dropping property with invalid key %r", key)
            continue
        if value is not None and not isinstance(value, (str, int, float, bool)):
            if debug:
                logger.info("Dropping non-scalar property %r", key)
            continue
        kept[key] = clip(value, MAX_PROPERTY_VALUE_LENGTH)
    return kept or None


class Tracker:
    def __init__(
        self,
        options: TrackerOptions,
        context: PageContext | None = None,
        transport: Transport | None = None,
    ) -> None:
        self.options = options
        self.context = context
        self.transport = transport or DefaultTransport(debug=options.debug)
        self.initialized = False

    @classmethod
    def from_script_tag(
        cls,
        src: str | None,
        site_id: str | None,
        page_url: str,
        context: PageContext | None = None,
        transport: Transport | None = None,
        **options,
    ) -> "Tracker":
        """Configure a tracker the way the ``data-site-id`` snippet does.

        The ingestion endpoint lives on the origin that served the script,
        with ``src`` resolved against the embedding page.
        """
        parts = urlsplit(urljoin(page_url, src) if src else page_url)
        api_url = f"{parts.scheme}://{parts.netloc}/api/track"
        return cls(
            TrackerOptions(site_id=site_id or None, api_url=api_url, **options),
            context=context or PageContext(href=page_url),
            transport=transport,
        )

    def init(self) -> None:
        """Send the initial page view and follow client-side navigation."""
        if self.initialized:
            self._log("Already initialized")
            return

        if self.options.respect_dnt and self._dnt_enabled():
            self._log("Do Not Track is enabled, tracking disabled")
            return

        self.initialized = True
        self.track_page_view()

        history = self.context.history if self.context is not None else None
        if history is not None:
            self._observe(history)

        self._log("Tracker initialized")

    def track_page_view(self, data: PageViewData | None = None) -> None:
        """Track a page view.

        Before ``init`` only an explicit ``data.url`` is accepted.
        """
        data = data or PageViewData()
        if not self.initialized and not data.url:
            self._log("Tracker not initialized, call init() first")
            return

        if self.options.respect_dnt and self._dnt_enabled():
            return

        context = self.context
        url = data.url or (context.href if context else None)
        if not url:
            self._log("No page URL to report")
            return

        self._send(
            url=url,
            title=data.title or (context.title if context else None),
            referrer=data.referrer or (context.referrer if context else None),
            properties=data.properties,
        )

    def track_event(self, name: str, properties: dict | None = None) -> None:
        """Track a custom event on the current page."""
        if not self.initialized:
            self._log("Tracker not initialized, call init() first")
            return

        if self.options.respect_dnt and self._dnt_enabled():
            return

        if self.context is None:
            self._log("No page URL to report")
            return

        self._send(url=self.context.href, event=name, properties=properties)

    def _observe(self, history: History) -> None:
        original_push_state = history.push_state
        original_replace_state = history.replace_state

        def push_state(*args, **kwargs):
            original_push_state(*args, **kwargs)
            self.track_page_view()

        def replace_state(*args, **kwargs):
            original_replace_state(*args, **kwargs)
            self.track_page_view()

        history.push_state = push_state
        history.replace_state = replace_state
        history.add_listener("popstate", lambda event: self.track_page_view())

    def build_payload(
        self,
        url: str,
        title: str | None = None,
        referrer: str | None = None,
        event: str | None = None,
        properties: dict | None = None,
    ) -> dict:
        parts = urlsplit(url)
        path = parts.path or "/"
        if parts.query:
            path = f"{path}?{parts.query}"

        payload = {
            "domain": parts.hostname or "",
            "path": path,
            "referrer": referrer or None,
            "site_id": self.options.site_id,
        }
        if title:
            payload["title"] = title
        if event:
            payload["event"] = event
        for name, limit in FIELD_LIMITS.items():
            if name in payload:
                payload[name] = clip(payload[name], limit)
        bounded = bound_properties(properties, debug=self.options.debug)
        if bounded:
            payload["properties"] = bounded
        return payload

    def _send(self, url: str, **fields) -> None:
        try:
            payload = self.build_payload(url, **fields)
            self._log("Sending:", payload)
            self.transport.send(self.options.api_url, payload)
        except Exception as exc:
            # The host page must never see a tracking failure.
            self._log("Failed to send tracking data:", exc)

    def _dnt_enabled(self) -> bool:
        return self.context is not None and self.context.do_not_track()

    def _log(self, *args) -> None:
        if self.options.debug:
            logger.info("[Minilytics] %s", " ".join(str(a) for a in args))


def create_tracker(
    options: TrackerOptions,
    context: PageContext | None = None,
    transport: Transport | None = None,
) -> Tracker:
    """Create a Minilytics tracker."""
    return Tracker(options, context=context, transport=transport)
