"""Error taxonomy for the resolution and polling pipeline."""

from typing import Optional


class AdWatchError(Exception):
    """Base class for every recoverable pipeline failure."""


class NetworkError(AdWatchError):
    """Connection failure or timeout while talking to an upstream service."""


class ProtocolError(AdWatchError):
    """Upstream answered with an unexpected status code."""

    def __init__(self, status_code: int, url: str, message: Optional[str] = None):
        self.status_code = status_code
        self.url = url
        super().__init__(message or f"Unexpected status {status_code} from {url}")


class DataError(AdWatchError):
    """Missing or malformed field in a response body or manifest attribute."""
