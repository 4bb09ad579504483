"""Asset fetcher protocol.

Defines the interface for retrieving remote resources (font stylesheets,
font binaries, logo images) as raw bytes.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class AssetFetcher(Protocol):
    """Protocol for network retrieval of remote assets.

    Implementations must not retry; retry policy belongs to the caller.
    """

    async def fetch_bytes(self, url: str) -> bytes:
        """Fetch a URL and return the response body.

        Args:
            url: Absolute URL to fetch

        Returns:
            The raw response body

        Raises:
            FetchError: On a non-success status or a transport failure
        """
        ...

    async def fetch_text(self, url: str) -> str:
        """Fetch a URL and return the response body decoded as text.

        Args:
            url: Absolute URL to fetch

        Returns:
            The decoded response body

        Raises:
            FetchError: On a non-success status or a transport failure
        """
        ...
