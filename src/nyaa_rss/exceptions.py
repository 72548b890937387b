"""Exception hierarchy for nyaa-rss."""


class NyaaRssException(Exception):
    """Base exception."""

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


class InvalidArgumentError(NyaaRssException):
    """Raised before any request when a required argument is missing or invalid."""

    def __init__(self, message: str = "Invalid argument", code: str | None = "INVALID_ARGUMENT"):
        super().__init__(message, code)


class FeedFetchError(NyaaRssException):
    """The feed could not be fetched or parsed.

    ``status_code`` carries the upstream HTTP status when there was one.
    """

    def __init__(
        self,
        message: str = "Failed to fetch feed",
        code: str | None = "FEED_FETCH_ERROR",
        status_code: int | None = None,
    ):
        super().__init__(message, code)
        self.status_code = status_code


class NotFoundError(FeedFetchError):
    """Upstream answered 404."""

    def __init__(self, message: str = "Feed not found", code: str | None = "NOT_FOUND", status_code: int = 404):
        super().__init__(message, code, status_code)
