"""Page context the tracker reads from.

A browser gives the tracker ``window.location``, ``document.title``,
``document.referrer``, the Do-Not-Track flags and ``window.history``.
``PageContext`` carries the same information for Python hosts such as
embedded web views, server-rendered apps and test harnesses.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from urllib.parse import urljoin

DNT_ENABLED_VALUES = {"1", "yes"}


class History:
    """Navigation history that notifies listeners, like ``window.history``.

    ``push_state`` and ``replace_state`` change the current URL without
    firing events; ``back`` fires ``popstate``. The tracker wraps the first
    two and listens for the third.
    """

    def __init__(self, context: "PageContext") -> None:
        self._context = context
        self._entries: list[str] = [context.href]
        self._listeners: dict[str, list[Callable[[dict], None]]] = {}

    def push_state(self, state: object = None, title: str = "", url: str | None = None) -> None:
        href = self._resolve(url)
        self._entries.append(href)
        self._context.href = href

    def replace_state(self, state: object = None, title: str = "", url: str | None = None) -> None:
        href = self._resolve(url)
        self._entries[-1] = href
        self._context.href = href

    def back(self) -> None:
        if len(self._entries) < 2:
            return
        self._entries.pop()
        self._context.href = self._entries[-1]
        self._dispatch("popstate", {"href": self._context.href})

    def add_listener(self, event: str, callback: Callable[[dict], None]) -> None:
        self._listeners.setdefault(event, []).append(callback)

    def __len__(self) -> int:
        return len(self._entries)

    def _resolve(self, url: str | None) -> str:
        if url is None:
            return self._context.href
        return urljoin(self._context.href, url)

    def _dispatch(self, event: str, detail: dict) -> None:
        for callback in list(self._listeners.get(event, [])):
            callback(detail)


@dataclass
class PageContext:
    """Current document state: location, title, referrer and DNT flags.

    The three DNT fields mirror ``navigator.doNotTrack``,
    ``window.doNotTrack`` and ``navigator.msDoNotTrack``.
    """

    href: str
    title: str = ""
    referrer: str = ""
    navigator_do_not_track: str | None = None
    window_do_not_track: str | None = None
    ms_do_not_track: str | None = None
    history: History | None = field(default=None, repr=False)

    @classmethod
    def with_history(cls, href: str, **kwargs) -> "PageContext":
        """Build a context for a single-page app that navigates client-side."""
        context = cls(href=href, **kwargs)
        context.history = History(context)
        return context

    def do_not_track(self) -> bool:
        """Return True if any vendor form of Do-Not-Track is set."""
        signals = (
            self.navigator_do_not_track,
            self.window_do_not_track,
            self.ms_do_not_track,
        )
        return any(value in DNT_ENABLED_VALUES for value in signals if value is not None)
