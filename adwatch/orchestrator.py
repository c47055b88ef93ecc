#!/usr/bin/env python3
"""
Resolution/polling state machine.

RESOLVING: token + master manifest -> variant URL. Error or empty URL sleeps
           the playlist interval and stays; a URL moves to POLLING.
POLLING:   variant manifest -> stitched ad (or None), published every poll
           interval. Any error sleeps the playlist interval and drops back to
           RESOLVING without publishing.
"""

import enum
import threading
import time
from typing import Callable, Optional

from .ad_stitch_parser import AdStitchParser
from .errors import AdWatchError
from .latest_state import LatestState
from .logging_utils import setup_logger
from .playlist_resolver import PlaylistResolver
from .token_resolver import TokenResolver

logger = setup_logger(__name__)

PLAYLIST_INTERVAL_SEC = 60.0
STITCHED_INTERVAL_SEC = 2.0


class OrchestratorState(enum.Enum):
    RESOLVING = "resolving"
    POLLING = "polling"


class PollingOrchestrator:
    """Drives the two-level resolve/poll cycle for one channel."""

    def __init__(self, channel: str, tokens: TokenResolver, playlists: PlaylistResolver,
                 parser: AdStitchParser, latest: LatestState,
                 playlist_interval: float = PLAYLIST_INTERVAL_SEC,
                 stitched_interval: float = STITCHED_INTERVAL_SEC,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Args:
            channel: Twitch channel login
            tokens: Access token lookup
            playlists: Master manifest lookup
            parser: Variant manifest scanner
            latest: Slot the findings are published into
            playlist_interval: Seconds to wait before the next resolution attempt
            stitched_interval: Seconds between variant manifest polls
            sleep: Wait function, replaced in tests
        """
        self.channel = channel
        self.tokens = tokens
        self.playlists = playlists
        self.parser = parser
        self.latest = latest
        self.playlist_interval = playlist_interval
        self.stitched_interval = stitched_interval
        self.sleep = sleep

        self.state = OrchestratorState.RESOLVING
        self.playlist_url = ""
        self._thread: Optional[threading.Thread] = None

    def step(self) -> OrchestratorState:
        """Run one resolution attempt or one poll and return the next state."""
        if self.state is OrchestratorState.RESOLVING:
            self.state = self._resolve()
        else:
            self.state = self._poll()
        return self.state

    def _resolve(self) -> OrchestratorState:
        logger.debug(f"[{self.channel}] Fetching playlist url...")
        try:
            credential = self.tokens.resolve(self.channel)
            url = self.playlists.resolve(credential, self.channel)
        except AdWatchError as e:
            logger.error(f"[{self.channel}] An error occurred while fetching playlist url: {e}")
            url = ""

        if not url:
            self.sleep(self.playlist_interval)
            return OrchestratorState.RESOLVING

        self.playlist_url = url
        logger.info(f"[{self.channel}] Channel playlist found: {url}")
        return OrchestratorState.POLLING

    def _poll(self) -> OrchestratorState:
        logger.debug(f"[{self.channel}] Fetching stitched...")
        try:
            event = self.parser.fetch(self.playlist_url)
        except AdWatchError as e:
            logger.error(f"[{self.channel}] An error occurred while fetching stitched "
                         f"from {self.playlist_url}: {e}")
            self.playlist_url = ""
            self.sleep(self.playlist_interval)
            return OrchestratorState.RESOLVING

        self.latest.set(event)
        logger.debug(f"[{self.channel}] Fetched stitched: {event}")
        self.sleep(self.stitched_interval)
        return OrchestratorState.POLLING

    def run_forever(self) -> None:
        while True:
            self.step()

    def start(self) -> threading.Thread:
        """Run the state machine on a daemon thread for the life of the process."""
        if self._thread is None:
            self._thread = threading.Thread(
                target=self.run_forever, name=f"adwatch-{self.channel}", daemon=True
            )
            self._thread.start()
        return self._thread
