"""Fire-and-forget delivery of tracking payloads.

Nothing here blocks the caller or raises into it. ``BeaconTransport``
schedules the POST on the running event loop, the closest thing to
``navigator.sendBeacon``; ``KeepAliveTransport`` posts from a worker pool
over a pooled keep-alive connection, and its non-daemon workers let
in-flight sends finish at interpreter exit. ``DefaultTransport`` prefers
the beacon whenever a loop is running.

Requests never carry cookies: the clients use a cookie jar whose policy
accepts no domain.
"""

import asyncio
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from http.cookiejar import CookieJar, DefaultCookiePolicy
from typing import Protocol

import httpx

logger = logging.getLogger("minilytics.tracker")

DEFAULT_TIMEOUT = 5.0
HEADERS = {"Content-Type": "application/json"}


class Transport(Protocol):
    def send(self, url: str, payload: dict) -> None: ...


def _cookieless() -> httpx.Cookies:
    return httpx.Cookies(CookieJar(policy=DefaultCookiePolicy(allowed_domains=[])))


class BeaconTransport:
    """Schedule each POST as a task on the running event loop."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, debug: bool = False) -> None:
        self.timeout = timeout
        self.debug = debug
        self._pending: set[asyncio.Task] = set()

    def send(self, url: str, payload: dict) -> None:
        """Queue the POST and return immediately.

        Must be called from inside a running loop; raises RuntimeError
        otherwise, which ``DefaultTransport`` checks for first.
        """
        loop = asyncio.get_running_loop()
        task = loop.create_task(self._post(url, payload))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _post(self, url: str, payload: dict) -> None:
        try:
            async with httpx.AsyncClient(
                cookies=_cookieless(), timeout=self.timeout
            ) as client:
                response = await client.post(url, json=payload, headers=HEADERS)
            if self.debug:
                logger.info("Tracking response %s from %s", response.status_code, url)
        except httpx.HTTPError as exc:
            if self.debug:
                logger.info("Failed to send tracking data: %s", exc)

    async def drain(self) -> None:
        """Wait for every queued send to settle."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


class KeepAliveTransport:
    """POST from a small worker pool over one keep-alive ``httpx.Client``."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        debug: bool = False,
        max_workers: int = 2,
    ) -> None:
        self.timeout = timeout
        self.debug = debug
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="minilytics-send"
        )
        self._client: httpx.Client | None = None
        self._lock = threading.Lock()
        self._pending: set[Future] = set()

    def _get_client(self) -> httpx.Client:
        with self._lock:
            if self._client is None:
                self._client = httpx.Client(
                    cookies=_cookieless(),
                    timeout=self.timeout,
                    headers={"Connection": "keep-alive"},
                )
            return self._client

    def send(self, url: str, payload: dict) -> None:
        future = self._executor.submit(self._post, url, payload)
        self._pending.add(future)
        future.add_done_callback(self._pending.discard)

    def _post(self, url: str, payload: dict) -> None:
        try:
            response = self._get_client().post(url, json=payload, headers=HEADERS)
            if self.debug:
                logger.info("Tracking response %s from %s", response.status_code, url)
        except httpx.HTTPError as exc:
            if self.debug:
                logger.info("Failed to send tracking data: %s", exc)

    def flush(self, timeout: float | None = None) -> None:
        """Block until queued sends finish or ``timeout`` elapses."""
        if self._pending:
            wait(list(self._pending), timeout=timeout)

    def close(self) -> None:
        self._executor.shutdown(wait=True)
        with self._lock:
            if self._client is not None:
                self._client.close()
                self._client = None


class DefaultTransport:
    """Beacon when an event loop is running, keep-alive request otherwise."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, debug: bool = False) -> None:
        self.beacon = BeaconTransport(timeout=timeout, debug=debug)
        self.keepalive = KeepAliveTransport(timeout=timeout, debug=debug)

    def send(self, url: str, payload: dict) -> None:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            self.keepalive.send(url, payload)
            return
        self.beacon.send(url, payload)
