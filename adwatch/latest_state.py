import threading
from typing import Optional

from .models import StitchedAdEvent


class LatestState:
    """Thread-safe single slot holding the most recent stitched ad finding.

    One writer (the polling worker) and any number of readers (query handlers).
    Stored events are frozen, so swapping the reference under the lock is enough
    for readers to always see one complete value.
    """

    def __init__(self, initial: Optional[StitchedAdEvent] = None) -> None:
        self._lock = threading.Lock()
        self._value = initial

    def set(self, value: Optional[StitchedAdEvent]) -> None:
        with self._lock:
            self._value = value

    def get(self) -> Optional[StitchedAdEvent]:
        with self._lock:
            return self._value
