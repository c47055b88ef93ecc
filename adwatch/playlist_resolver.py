#!/usr/bin/env python3
"""
Master manifest lookup: turns an access credential into a variant playlist URL.
"""

from typing import Optional
from urllib.parse import quote_plus

import m3u8
import requests

from .errors import DataError
from .logging_utils import setup_logger
from .models import AccessCredential
from .transport import DEFAULT_TIMEOUT_SEC, create_session, is_success, send

logger = setup_logger(__name__)

MASTER_PLAYLIST_URL = "https://usher.ttvnw.net/api/channel/hls/{channel}.m3u8?token={token}&sig={sig}"


def first_variant_uri(manifest_text: str) -> str:
    """Return the first variant URI listed in a master manifest, or "" if none."""
    try:
        playlist = m3u8.loads(manifest_text)
    except Exception as e:  # m3u8 raises a mix of ParseError, ValueError and KeyError
        raise DataError(f"Could not parse master manifest: {e}") from e

    for variant in playlist.playlists:
        return variant.uri or ""

    return ""


class PlaylistResolver:
    """Resolves the variant manifest URL for a channel."""

    def __init__(self, session: Optional[requests.Session] = None,
                 timeout: float = DEFAULT_TIMEOUT_SEC,
                 url_template: str = MASTER_PLAYLIST_URL):
        self.session = session or create_session()
        self.timeout = timeout
        self.url_template = url_template

    def master_url(self, credential: AccessCredential, channel: str) -> str:
        # Token is JSON and needs escaping; the signature is plain hex
        return self.url_template.format(
            channel=channel,
            token=quote_plus(credential.token),
            sig=credential.signature,
        )

    def resolve(self, credential: AccessCredential, channel: str) -> str:
        """
        Fetch the master manifest and pick its first variant.

        Returns:
            Variant playlist URL, or "" when the channel is not resolvable right now
        """
        url = self.master_url(credential, channel)
        response = send(self.session, "GET", url, timeout=self.timeout)

        if not is_success(response):
            # Offline channels answer 404; other statuses are treated the same way
            logger.debug(f"Master manifest for {channel} returned status {response.status_code}")
            return ""

        return first_variant_uri(response.text)
