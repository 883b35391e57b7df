"""Tests for the bounded HTTP client."""

import asyncio

import httpx
import pytest
import respx
from httpx import Response

from surfacescan.errors import ProbeFailure
from surfacescan.tools.http import FetchError, FetchTimeout, HTTPClient


class TestHTTPClient:
    """Test HTTPClient functionality."""

    @respx.mock
    async def test_get_request(self):
        respx.get("https://example.com/").mock(return_value=Response(200, text="Hello World"))

        async with HTTPClient() as client:
            response = await client.get("https://example.com/")

        assert response.status_code == 200
        assert response.body == "Hello World"
        assert response.ok

    @respx.mock
    async def test_headers_are_lowercased(self):
        respx.get("https://example.com/").mock(
            return_value=Response(
                200,
                text="OK",
                headers={"Content-Type": "text/html", "Server": "nginx/1.18.0"},
            )
        )

        async with HTTPClient() as client:
            response = await client.get("https://example.com/")

        assert response.headers["content-type"] == "text/html"
        assert response.header("Server") == "nginx/1.18.0"
        assert response.content_type == "text/html"

    @respx.mock
    async def test_options_request_sends_headers(self):
        route = respx.route(method="OPTIONS", host="example.com", path="/api/").mock(
            return_value=Response(204)
        )

        async with HTTPClient() as client:
            response = await client.fetch(
                "https://example.com/api/",
                method="OPTIONS",
                headers={"Origin": "https://other.test"},
            )

        assert response.status_code == 204
        assert route.calls.last.request.headers["origin"] == "https://other.test"

    @respx.mock
    async def test_user_agent_is_sent(self):
        route = respx.get("https://example.com/").mock(return_value=Response(200))

        async with HTTPClient(user_agent="probe-agent/1.0") as client:
            await client.get("https://example.com/")

        assert route.calls.last.request.headers["user-agent"] == "probe-agent/1.0"

    @respx.mock
    async def test_non_2xx_is_not_an_error(self):
        respx.get("https://example.com/missing").mock(return_value=Response(404))

        async with HTTPClient() as client:
            response = await client.get("https://example.com/missing")

        assert response.status_code == 404
        assert not response.ok

    @respx.mock
    async def test_connect_error_becomes_fetch_error(self):
        respx.get("https://example.com/").mock(side_effect=httpx.ConnectError("refused"))

        async with HTTPClient() as client:
            with pytest.raises(FetchError) as exc_info:
                await client.get("https://example.com/")

        assert isinstance(exc_info.value, ProbeFailure)
        assert exc_info.value.url == "https://example.com/"

    @pytest.mark.parametrize(
        "url",
        [
            "https://example.com/x\x01.js",
            "https://example.com/x\x7f.js",
            "https://example.com/" + "a" * 70_000,
        ],
    )
    @respx.mock
    async def test_url_httpx_rejects_becomes_fetch_error(self, url):
        async with HTTPClient() as client:
            with pytest.raises(FetchError) as exc_info:
                await client.get(url)

        assert isinstance(exc_info.value, ProbeFailure)
        assert "invalid URL" in exc_info.value.reason

    @respx.mock
    async def test_httpx_timeout_becomes_fetch_timeout(self):
        respx.get("https://example.com/").mock(side_effect=httpx.ReadTimeout("slow"))

        async with HTTPClient() as client:
            with pytest.raises(FetchTimeout):
                await client.get("https://example.com/", timeout=1.0)

    @respx.mock
    async def test_slow_response_is_cancelled(self):
        async def slow(request):
            await asyncio.sleep(5)
            return Response(200)

        respx.get("https://example.com/").mock(side_effect=slow)

        async with HTTPClient() as client:
            with pytest.raises(FetchTimeout) as exc_info:
                await client.get("https://example.com/", timeout=0.05)

        assert exc_info.value.timeout == 0.05

    async def test_requires_context_manager(self):
        client = HTTPClient()
        with pytest.raises(RuntimeError):
            await client.get("https://example.com/")
