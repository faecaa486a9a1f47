"""ASGI integration: report a page view for every HTML page served."""

from starlette.datastructures import URL, Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from minilytics.tracker.client import PageViewData, Tracker, TrackerOptions, create_tracker
from minilytics.tracker.transport import Transport


class MinilyticsMiddleware:
    """Track successful ``GET`` responses with an HTML content type.

    Each request is its own page view; a ``DNT: 1`` request header
    suppresses it when ``respect_dnt`` is set. Sends happen on the running
    loop and never delay the response.
    """

    def __init__(
        self,
        app: ASGIApp,
        options: TrackerOptions,
        transport: Transport | None = None,
    ) -> None:
        self.app = app
        self.tracker: Tracker = create_tracker(options, transport=transport)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["method"] != "GET":
            await self.app(scope, receive, send)
            return

        response: dict = {}

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = Headers(raw=message.get("headers", []))
                response["status"] = message["status"]
                response["html"] = headers.get("content-type", "").startswith("text/html")
            await send(message)

        await self.app(scope, receive, send_wrapper)

        if not response.get("html") or not 200 <= response.get("status", 0) < 300:
            return

        request_headers = Headers(scope=scope)
        if self.tracker.options.respect_dnt and request_headers.get("dnt") == "1":
            return

        self.tracker.track_page_view(
            PageViewData(
                url=str(URL(scope=scope)),
                referrer=request_headers.get("referer"),
            )
        )
