"""Exception hierarchy for the thumbnail service.

Every error raised by the fetch, cache and render layers derives from
ThumbnailError so the HTTP layer can map them to status codes in one place.
"""


class ThumbnailError(Exception):
    """Base class for thumbnail service errors."""


class FetchError(ThumbnailError):
    """A remote asset could not be retrieved.

    Attributes:
        url: The URL that was requested
        status: HTTP status code, or None for transport-level failures
        message: Human-readable reason
        transport: True when the failure happened below HTTP (DNS, connect, timeout)
    """

    def __init__(
        self,
        url: str,
        message: str,
        status: int | None = None,
        transport: bool = False,
    ) -> None:
        self.url = url
        self.status = status
        self.message = message
        self.transport = transport
        if transport:
            detail = f"transport error fetching {url}: {message}"
        else:
            detail = f"HTTP {status} fetching {url}: {message}"
        super().__init__(detail)


class CacheError(ThumbnailError):
    """A font could not be resolved by the font cache.

    Attributes:
        family: Font family requested
        weight: Font weight requested
        reason: "weight_not_found" or "fetch_failed"
    """

    WEIGHT_NOT_FOUND = "weight_not_found"
    FETCH_FAILED = "fetch_failed"

    def __init__(self, family: str, weight: int, reason: str, message: str = "") -> None:
        self.family = family
        self.weight = weight
        self.reason = reason
        super().__init__(message or f"Font not found: {family} weight {weight} ({reason})")


class RenderError(ThumbnailError):
    """The render pipeline could not produce an image.

    Attributes:
        reason: "missing_font", "malformed_document" or "invalid_font"
    """

    MISSING_FONT = "missing_font"
    MALFORMED_DOCUMENT = "malformed_document"
    INVALID_FONT = "invalid_font"

    def __init__(self, reason: str, message: str) -> None:
        self.reason = reason
        super().__init__(message)


class InvalidRequestError(ThumbnailError):
    """The request parameters are malformed (maps to 400)."""


class EntityNotFoundError(ThumbnailError):
    """The referenced entity does not exist (maps to 404)."""


class EntityRedirect(ThumbnailError):
    """The entity must not be rendered; send the client elsewhere (maps to 302).

    Attributes:
        location: Where to redirect the client
    """

    def __init__(self, location: str) -> None:
        self.location = location
        super().__init__(f"Redirect to {location}")
