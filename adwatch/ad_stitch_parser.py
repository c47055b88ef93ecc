#!/usr/bin/env python3
"""
Stitched ad detection for Twitch variant playlists.
Looks for EXT-X-DATERANGE entries of class twitch-stitched-ad.
"""

import re
from typing import Dict, List, Optional

import m3u8
import requests
from m3u8 import protocol
from m3u8.parser import ATTRIBUTELISTPATTERN, normalize_attribute, remove_quotes
from pydantic import ValidationError

from .errors import DataError
from .logging_utils import setup_logger
from .models import StitchedAdEvent
from .transport import DEFAULT_TIMEOUT_SEC, create_session, require_success, send

logger = setup_logger(__name__)

STITCHED_AD_CLASS = "twitch-stitched-ad"
ROLL_TYPE_ATTR = "X-TV-TWITCH-AD-ROLL-TYPE"
POD_LENGTH_ATTR = "X-TV-TWITCH-AD-POD-LENGTH"
PREROLL = "PREROLL"

DATERANGES_KEY = "adwatch_dateranges"
POD_LENGTH_RE = re.compile(r"\+?[0-9]+")


def parse_daterange_attributes(line: str) -> Dict[str, str]:
    """Attributes of an EXT-X-DATERANGE line keyed by m3u8's normalized names, quotes stripped."""
    body = line[len(protocol.ext_x_daterange) + 1:]
    attrs = {}
    for param in ATTRIBUTELISTPATTERN.split(body)[1::2]:
        name, _, value = param.partition("=")
        attrs[normalize_attribute(name)] = remove_quotes(value.strip())
    return attrs


def collect_dateranges(line, lineno, data, state):
    """
    m3u8 custom tag hook keeping every date range in document order.

    m3u8 only attaches date ranges to the segment that follows them, which loses
    trailing entries. The line is consumed here so it is not attached twice.
    """
    if not line.startswith(protocol.ext_x_daterange + ":"):
        return False
    data.setdefault(DATERANGES_KEY, []).append(parse_daterange_attributes(line))
    return True


def _event_from(attrs: Dict[str, str], roll_type: str) -> StitchedAdEvent:
    ad_id = attrs.get("id", "?")
    pod_length = attrs.get(normalize_attribute(POD_LENGTH_ATTR))
    if pod_length is None:
        raise DataError(f"Stitched ad {ad_id} has no {POD_LENGTH_ATTR}")
    if not POD_LENGTH_RE.fullmatch(pod_length):
        raise DataError(f"Stitched ad {ad_id} has malformed pod length {pod_length!r}")

    try:
        return StitchedAdEvent(
            start_date=attrs.get("start_date"),
            roll_type=roll_type,
            pod_length=int(pod_length),
        )
    except ValidationError as e:
        raise DataError(f"Stitched ad {ad_id} is malformed: {e}") from e


def dateranges(manifest_text: str) -> List[Dict[str, str]]:
    """Every date range of a media playlist, in document order."""
    try:
        playlist = m3u8.loads(manifest_text, custom_tags_parser=collect_dateranges)
    except Exception as e:  # m3u8 raises a mix of ParseError, ValueError and KeyError
        raise DataError(f"Could not parse variant manifest: {e}") from e
    return playlist.data.get(DATERANGES_KEY, [])


def find_stitched_ad(manifest_text: str) -> Optional[StitchedAdEvent]:
    """
    Scan a variant manifest for the first non-preroll stitched ad.

    Args:
        manifest_text: Raw m3u8 media playlist

    Returns:
        The first qualifying event in document order, or None
    """
    for attrs in dateranges(manifest_text):
        if attrs.get("class") != STITCHED_AD_CLASS:
            continue

        roll_type = attrs.get(normalize_attribute(ROLL_TYPE_ATTR), "").upper()
        if roll_type == PREROLL:
            logger.debug(f"Skipping preroll {attrs.get('id', '?')}")
            continue

        return _event_from(attrs, roll_type)

    return None


class AdStitchParser:
    """Fetches a variant playlist and reports the stitched ad it carries, if any."""

    def __init__(self, session: Optional[requests.Session] = None,
                 timeout: float = DEFAULT_TIMEOUT_SEC):
        self.session = session or create_session()
        self.timeout = timeout

    def fetch(self, url: str) -> Optional[StitchedAdEvent]:
        response = send(self.session, "GET", url, timeout=self.timeout)
        require_success(response, url)
        return find_stitched_ad(response.text)
