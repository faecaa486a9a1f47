"""Tests for tracking transports."""

import json

import httpx
import pytest
import respx

from minilytics.tracker.transport import BeaconTransport, DefaultTransport, KeepAliveTransport

API_URL = "https://stats.example.com/api/track"
PAYLOAD = {"domain": "blog.example.com", "path": "/", "referrer": None, "site_id": "s1"}


# ---------------------------------------------------------------------------
# KeepAliveTransport
# ---------------------------------------------------------------------------


class TestKeepAliveTransport:
    @respx.mock
    def test_posts_json(self):
        route = respx.post(API_URL).mock(return_value=httpx.Response(200, json={"status": "ok"}))
        transport = KeepAliveTransport()
        try:
            transport.send(API_URL, PAYLOAD)
            transport.flush(timeout=5)
        finally:
            transport.close()

        assert route.call_count == 1
        request = route.calls.last.request
        assert request.headers["content-type"] == "application/json"
        assert json.loads(request.content) == PAYLOAD

    @respx.mock
    def test_never_sends_cookies(self):
        route = respx.post(API_URL).mock(
            return_value=httpx.Response(
                200, json={"status": "ok"}, headers={"Set-Cookie": "uid=abc; Path=/"}
            )
        )
        transport = KeepAliveTransport()
        try:
            transport.send(API_URL, PAYLOAD)
            transport.flush(timeout=5)
            transport.send(API_URL, PAYLOAD)
            transport.flush(timeout=5)
        finally:
            transport.close()

        assert route.call_count == 2
        assert "cookie" not in route.calls[1].request.headers

    @respx.mock
    def test_network_error_is_swallowed(self):
        respx.post(API_URL).mock(side_effect=httpx.ConnectError("refused"))
        transport = KeepAliveTransport(debug=True)
        try:
            transport.send(API_URL, PAYLOAD)
            transport.flush(timeout=5)
        finally:
            transport.close()

    @respx.mock
    def test_server_error_is_not_raised(self):
        route = respx.post(API_URL).mock(return_value=httpx.Response(500))
        transport = KeepAliveTransport()
        try:
            transport.send(API_URL, PAYLOAD)
            transport.flush(timeout=5)
        finally:
            transport.close()
        assert route.called


# ---------------------------------------------------------------------------
# BeaconTransport
# ---------------------------------------------------------------------------


class TestBeaconTransport:
    @pytest.mark.asyncio
    @respx.mock
    async def test_posts_on_running_loop(self):
        route = respx.post(API_URL).mock(return_value=httpx.Response(200, json={"status": "ok"}))
        transport = BeaconTransport()
        transport.send(API_URL, PAYLOAD)
        assert not route.called
        await transport.drain()
        assert route.call_count == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_network_error_is_swallowed(self):
        respx.post(API_URL).mock(side_effect=httpx.ConnectError("refused"))
        transport = BeaconTransport(debug=True)
        transport.send(API_URL, PAYLOAD)
        await transport.drain()

    def test_requires_running_loop(self):
        with pytest.raises(RuntimeError):
            BeaconTransport().send(API_URL, PAYLOAD)


# ---------------------------------------------------------------------------
# DefaultTransport
# ---------------------------------------------------------------------------


class TestDefaultTransport:
    @pytest.mark.asyncio
    @respx.mock
    async def test_uses_beacon_inside_loop(self):
        route = respx.post(API_URL).mock(return_value=httpx.Response(200))
        transport = DefaultTransport()
        transport.send(API_URL, PAYLOAD)
        await transport.beacon.drain()
        assert route.call_count == 1
        transport.keepalive.close()

    @respx.mock
    def test_uses_keepalive_without_loop(self):
        route = respx.post(API_URL).mock(return_value=httpx.Response(200))
        transport = DefaultTransport()
        transport.send(API_URL, PAYLOAD)
        transport.keepalive.flush(timeout=5)
        transport.keepalive.close()
        assert route.call_count == 1
