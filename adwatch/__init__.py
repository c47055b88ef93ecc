"""
Live Twitch ad-break watcher.
Polls a channel's HLS manifests for server-stitched ads and serves the latest finding.
"""

__version__ = "0.1.0"
