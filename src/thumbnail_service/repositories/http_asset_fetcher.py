"""httpx-based asset fetcher.

Fetches font stylesheets, font binaries and logo images over HTTP.

Key features:
- Browser-like User-Agent so font providers serve a format fontTools can read
- Bounded timeout on every request
- Typed FetchError for both HTTP and transport failures
- No retries
"""

import logging

import httpx

from thumbnail_service.config import settings
from thumbnail_service.exceptions import FetchError

logger = logging.getLogger(__name__)


class HttpAssetFetcher:
    """httpx implementation of the AssetFetcher protocol.

    This class satisfies the AssetFetcher protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        fetcher = HttpAssetFetcher.create()
        css = await fetcher.fetch_text("https://fonts.googleapis.com/css2?family=Inter:wght@700")
        await fetcher.close()
        ```
    """

    def __init__(
        self,
        user_agent: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            user_agent: Client identity header. Defaults to settings.font_user_agent.
            timeout: Per-request timeout in seconds. Defaults to settings.font_fetch_timeout.
            transport: Optional httpx transport (used by tests to stub the network).
        """
        self._user_agent = user_agent or settings.font_user_agent
        self._timeout = timeout or settings.font_fetch_timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def create(
        cls,
        user_agent: str | None = None,
        timeout: float | None = None,
    ) -> "HttpAssetFetcher":
        """Factory method to create HttpAssetFetcher with defaults.

        Args:
            user_agent: Client identity header. If None, uses settings.
            timeout: Per-request timeout in seconds. If None, uses settings.

        Returns:
            Configured HttpAssetFetcher
        """
        return cls(user_agent=user_agent, timeout=timeout)

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers={"User-Agent": self._user_agent},
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def _get(self, url: str) -> httpx.Response:
        try:
            response = await self.client.get(url)
        except httpx.TimeoutException as e:
            raise FetchError(url, f"timed out after {self._timeout}s", transport=True) from e
        except httpx.HTTPError as e:
            raise FetchError(url, str(e) or type(e).__name__, transport=True) from e
        except httpx.InvalidURL as e:
            raise FetchError(url, f"invalid URL: {e}", transport=True) from e

        if not response.is_success:
            raise FetchError(url, response.reason_phrase or "request failed", status=response.status_code)

        logger.info("Fetched %s (%d bytes)", url, len(response.content))
        return response

    async def fetch_bytes(self, url: str) -> bytes:
        """Fetch a URL and return the response body.

        Raises:
            FetchError: On a non-success status, timeout or connection failure
        """
        response = await self._get(url)
        return response.content

    async def fetch_text(self, url: str) -> str:
        """Fetch a URL and return the decoded response body.

        Raises:
            FetchError: On a non-success status, timeout or connection failure
        """
        response = await self._get(url)
        return response.text

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None
