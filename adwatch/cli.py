#!/usr/bin/env python3
"""
Entry point: start the polling worker and serve the query endpoint.
Usage: adwatch [--channel <name>] [--client-id <id>] [--host 0.0.0.0] [--port 3000]
"""

import argparse
import sys

import uvicorn

from .ad_stitch_parser import AdStitchParser
from .config import ConfigError, Settings, load_settings
from .latest_state import LatestState
from .logging_utils import setup_logger
from .orchestrator import PollingOrchestrator
from .playlist_resolver import PlaylistResolver
from .query_service import create_app
from .token_resolver import TokenResolver
from .transport import create_session

logger = setup_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Report whether a Twitch channel is currently in a stitched ad break",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
  CHANNEL_NAME, CLIENT_ID (required unless passed as flags)
  PLAYLIST_INTERVAL_SEC, STITCHED_INTERVAL_SEC, HTTP_TIMEOUT_SEC, HOST, PORT, DEBUG
        """
    )
    parser.add_argument("--channel", help="Twitch channel login (overrides CHANNEL_NAME)")
    parser.add_argument("--client-id", help="Twitch client id (overrides CLIENT_ID)")
    parser.add_argument("--host", help="Bind address (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, help="Bind port (default: 3000)")
    return parser


def build_orchestrator(settings: Settings, latest: LatestState) -> PollingOrchestrator:
    """Wire the resolvers and parser around one shared session.

    The session carries no credentials; Client-ID is added to the GraphQL call only.
    """
    session = create_session()
    return PollingOrchestrator(
        channel=settings.channel_name,
        tokens=TokenResolver(settings.client_id, session=session, timeout=settings.http_timeout),
        playlists=PlaylistResolver(session=session, timeout=settings.http_timeout),
        parser=AdStitchParser(session=session, timeout=settings.http_timeout),
        latest=latest,
        playlist_interval=settings.playlist_interval,
        stitched_interval=settings.stitched_interval,
    )


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(
            channel_name=args.channel,
            client_id=args.client_id,
            host=args.host,
            port=args.port,
        )
    except ConfigError as e:
        logger.error(str(e))
        return 2

    latest = LatestState()
    orchestrator = build_orchestrator(settings, latest)
    orchestrator.start()

    logger.info(f"Watching {settings.channel_name}, serving on {settings.host}:{settings.port}")
    uvicorn.run(create_app(latest), host=settings.host, port=settings.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
