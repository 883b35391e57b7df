"""Bounded async HTTP client used by every probe."""

import asyncio
from dataclasses import dataclass

import httpx

from surfacescan.errors import ProbeFailure

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; SurfaceScan/0.1; +passive-assessment)"


class FetchError(ProbeFailure):
    """Transport-level failure for a single request."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"{url}: {reason}")


class FetchTimeout(FetchError):
    """A request did not complete within its per-call timeout."""

    def __init__(self, url: str, timeout: float):
        self.timeout = timeout
        super().__init__(url, f"timed out after {timeout:g}s")


@dataclass(frozen=True)
class HTTPResponse:
    """Represents an HTTP response."""

    url: str
    status_code: int
    headers: dict[str, str]
    body: str
    content_type: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower())


class HTTPClient:
    """Async HTTP client whose every call is bounded by a timeout.

    One instance owns one connection pool and is meant to be shared by all
    probes of a single scan::

        async with HTTPClient() as client:
            response = await client.fetch("https://example.com", timeout=5.0)
    """

    def __init__(
        self,
        follow_redirects: bool = True,
        verify_ssl: bool = True,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.follow_redirects = follow_redirects
        self.verify_ssl = verify_ssl
        self.user_agent = user_agent
        self._transport = transport
        self.client: httpx.AsyncClient | None = None

    async def __aenter__(self):
        self.client = httpx.AsyncClient(
            follow_redirects=self.follow_redirects,
            verify=self.verify_ssl,
            headers={"User-Agent": self.user_agent},
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.client:
            await self.client.aclose()
            self.client = None

    async def fetch(
        self,
        url: str,
        method: str = "GET",
        headers: dict[str, str] | None = None,
        timeout: float = 8.0,
    ) -> HTTPResponse:
        """Make one HTTP request, cancelling it if *timeout* elapses.

        Raises:
            FetchTimeout: the request did not finish in time.
            FetchError: any other transport failure, or a URL httpx rejects.
        """
        if not self.client:
            raise RuntimeError("Client not initialized. Use async context manager.")

        try:
            async with asyncio.timeout(timeout):
                response = await self.client.request(
                    method=method,
                    url=url,
                    headers=headers,
                    timeout=timeout,
                )
        except TimeoutError:
            raise FetchTimeout(url, timeout) from None
        except httpx.TimeoutException:
            raise FetchTimeout(url, timeout) from None
        except httpx.HTTPError as exc:
            raise FetchError(url, type(exc).__name__) from exc
        except httpx.InvalidURL as exc:
            raise FetchError(url, f"invalid URL: {exc}") from exc

        response_headers = {key.lower(): value for key, value in response.headers.items()}

        return HTTPResponse(
            url=str(response.url),
            status_code=response.status_code,
            headers=response_headers,
            body=response.text,
            content_type=response_headers.get("content-type", ""),
        )

    async def get(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        timeout: float = 8.0,
    ) -> HTTPResponse:
        """Make a GET request."""
        return await self.fetch(url, "GET", headers=headers, timeout=timeout)
