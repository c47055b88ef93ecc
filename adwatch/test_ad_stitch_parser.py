#!/usr/bin/env python3
"""
Unit tests for stitched ad detection.
Tests date range scanning with sample variant playlists.
"""

import unittest
from datetime import datetime, timezone
from unittest import mock

import requests

from adwatch.ad_stitch_parser import AdStitchParser, find_stitched_ad
from adwatch.errors import DataError, NetworkError, ProtocolError

HEADER = """#EXTM3U
#EXT-X-VERSION:3
#EXT-X-TARGETDURATION:6
#EXT-X-MEDIA-SEQUENCE:1000
"""

SEGMENTS = """#EXTINF:2.000,live
index-0000001000-AbCd.ts
#EXTINF:2.000,live
index-0000001001-EfGh.ts
"""


def daterange(ad_id, roll_type="MIDROLL", pod_length="90",
              start_date="2024-01-01T00:00:00Z", klass="twitch-stitched-ad"):
    return (
        f'#EXT-X-DATERANGE:ID="{ad_id}",CLASS="{klass}",START-DATE="{start_date}",'
        f'DURATION=90.000,X-TV-TWITCH-AD-ROLL-TYPE="{roll_type}",'
        f'X-TV-TWITCH-AD-POD-LENGTH="{pod_length}"\n'
    )


def playlist(*dateranges):
    return HEADER + "".join(dateranges) + SEGMENTS


class TestFindStitchedAd(unittest.TestCase):
    """Test cases for the manifest scan."""

    def test_midroll_is_reported(self):
        event = find_stitched_ad(playlist(daterange("stitched-ad-1")))

        self.assertIsNotNone(event)
        self.assertEqual(event.model_dump(mode="json"), {
            "start_date": "2024-01-01T00:00:00Z",
            "roll_type": "MIDROLL",
            "pod_length": 90,
        })

    def test_fields_match_the_entry(self):
        event = find_stitched_ad(playlist(
            daterange("stitched-ad-2", roll_type="POSTROLL", pod_length="30",
                      start_date="2024-03-05T12:30:15Z")
        ))

        self.assertEqual(event.start_date, datetime(2024, 3, 5, 12, 30, 15, tzinfo=timezone.utc))
        self.assertEqual(event.roll_type, "POSTROLL")
        self.assertEqual(event.pod_length, 30)

    def test_roll_type_is_uppercased(self):
        event = find_stitched_ad(playlist(daterange("stitched-ad-1", roll_type="midroll")))
        self.assertEqual(event.roll_type, "MIDROLL")

    def test_preroll_is_not_reported(self):
        self.assertIsNone(find_stitched_ad(playlist(daterange("stitched-ad-1", roll_type="PREROLL"))))
        self.assertIsNone(find_stitched_ad(playlist(daterange("stitched-ad-1", roll_type="preroll"))))

    def test_clean_playlist(self):
        self.assertIsNone(find_stitched_ad(playlist()))

    def test_other_daterange_classes_are_ignored(self):
        manifest = playlist(daterange("source-1", klass="twitch-session", pod_length="x"))
        self.assertIsNone(find_stitched_ad(manifest))

    def test_first_qualifying_entry_wins(self):
        manifest = playlist(
            daterange("stitched-ad-1", start_date="2024-01-01T00:05:00Z", pod_length="60"),
            daterange("stitched-ad-2", start_date="2024-01-01T00:00:00Z", pod_length="30"),
        )

        event = find_stitched_ad(manifest)

        self.assertEqual(event.pod_length, 60)
        self.assertEqual(event.start_date, datetime(2024, 1, 1, 0, 5, tzinfo=timezone.utc))

    def test_preroll_before_midroll_is_skipped(self):
        manifest = playlist(
            daterange("stitched-ad-1", roll_type="PREROLL", pod_length="broken"),
            daterange("stitched-ad-2", roll_type="MIDROLL", pod_length="45"),
        )

        event = find_stitched_ad(manifest)

        self.assertEqual(event.roll_type, "MIDROLL")
        self.assertEqual(event.pod_length, 45)

    def test_malformed_pod_length(self):
        for bad in ("abc", "", "-5", "1.5", "++5", "\u00b2", " 5"):
            with self.subTest(pod_length=bad):
                with self.assertRaises(DataError):
                    find_stitched_ad(playlist(daterange("stitched-ad-1", pod_length=bad)))

    def test_malformed_start_date(self):
        for bad in ("yesterday", "1704067200", "2024-01-01T00:00:00"):
            with self.subTest(start_date=bad):
                with self.assertRaises(DataError):
                    find_stitched_ad(playlist(daterange("stitched-ad-1", start_date=bad)))

    def test_missing_pod_length(self):
        manifest = playlist(
            '#EXT-X-DATERANGE:ID="stitched-ad-1",CLASS="twitch-stitched-ad",'
            'START-DATE="2024-01-01T00:00:00Z",X-TV-TWITCH-AD-ROLL-TYPE="MIDROLL"\n'
        )
        with self.assertRaises(DataError):
            find_stitched_ad(manifest)

    def test_daterange_after_last_segment(self):
        event = find_stitched_ad(HEADER + SEGMENTS + daterange("stitched-ad-1"))

        self.assertEqual(event.roll_type, "MIDROLL")
        self.assertEqual(event.pod_length, 90)

    def test_manifest_without_segments(self):
        event = find_stitched_ad(HEADER + daterange("stitched-ad-1", pod_length="15"))
        self.assertEqual(event.pod_length, 15)

    def test_document_order_spans_segments(self):
        manifest = (HEADER + daterange("stitched-ad-1", roll_type="PREROLL") + SEGMENTS
                    + daterange("stitched-ad-2", pod_length="20") + SEGMENTS
                    + daterange("stitched-ad-3", pod_length="40"))

        self.assertEqual(find_stitched_ad(manifest).pod_length, 20)

    def test_offset_start_date_is_kept(self):
        event = find_stitched_ad(playlist(
            daterange("stitched-ad-1", start_date="2024-01-01T02:00:00+02:00")
        ))
        self.assertEqual(event.start_date, datetime(2024, 1, 1, tzinfo=timezone.utc))


class TestAdStitchParserFetch(unittest.TestCase):
    """Test cases for fetching variant playlists."""

    URL = "https://video-weaver.example/v1/playlist/abc.m3u8"

    def setUp(self):
        self.session = mock.Mock()
        self.parser = AdStitchParser(session=self.session, timeout=3)

    def test_fetch_parses_body(self):
        self.session.request.return_value = mock.Mock(
            status_code=200, text=playlist(daterange("stitched-ad-1"))
        )

        event = self.parser.fetch(self.URL)

        self.assertEqual(event.pod_length, 90)
        self.session.request.assert_called_once_with("GET", self.URL, timeout=3)

    def test_fetch_returns_none_for_clean_playlist(self):
        self.session.request.return_value = mock.Mock(status_code=200, text=playlist())
        self.assertIsNone(self.parser.fetch(self.URL))

    def test_non_success_status(self):
        self.session.request.return_value = mock.Mock(status_code=403, text="")

        with self.assertRaises(ProtocolError) as ctx:
            self.parser.fetch(self.URL)
        self.assertEqual(ctx.exception.status_code, 403)

    def test_transport_failure(self):
        self.session.request.side_effect = requests.ConnectionError("reset")
        with self.assertRaises(NetworkError):
            self.parser.fetch(self.URL)

    def test_timeout(self):
        self.session.request.side_effect = requests.Timeout()
        with self.assertRaises(NetworkError):
            self.parser.fetch(self.URL)


if __name__ == "__main__":
    unittest.main(verbosity=2)
