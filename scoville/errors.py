"""Error types surfaced through completion callbacks and logs."""

from typing import Optional


class ScovilleError(Exception):
    """Base class for Scoville client errors."""

    pass


class NotConfiguredError(ScovilleError):
    """Raised into a completion when an operation runs before configure()."""

    def __init__(self, message: str = "Scoville not configured"):
        super().__init__(message)


class NetworkError(ScovilleError):
    """
    Transport, HTTP status or body (de)serialization failure.

    Callers only get the description; status_code and url are carried for logging.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.url = url
