"""
HTTP helpers mapping requests failures onto the pipeline's error taxonomy.
"""

from typing import Any

import requests

from .errors import NetworkError, ProtocolError

DEFAULT_TIMEOUT_SEC = 5.0
USER_AGENT = "adwatch/0.1"


def create_session() -> requests.Session:
    """Build a session with the default headers every upstream call carries."""
    session = requests.Session()
    session.headers["User-Agent"] = USER_AGENT
    return session


def send(session: requests.Session, method: str, url: str,
         timeout: float = DEFAULT_TIMEOUT_SEC, **kwargs: Any) -> requests.Response:
    """Issue a single request. No retries; callers retry on their own schedule."""
    try:
        return session.request(method, url, timeout=timeout, **kwargs)
    except requests.Timeout as e:
        raise NetworkError(f"Timed out after {timeout}s: {method} {url}") from e
    except requests.RequestException as e:
        raise NetworkError(f"{method} {url} failed: {e}") from e


def is_success(response: requests.Response) -> bool:
    return 200 <= response.status_code < 300


def require_success(response: requests.Response, url: str) -> requests.Response:
    """Raise ProtocolError unless the response carries a 2xx status."""
    if not is_success(response):
        raise ProtocolError(response.status_code, url)
    return response
