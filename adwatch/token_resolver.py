#!/usr/bin/env python3
"""
Playback access token lookup against Twitch's GraphQL endpoint.
"""

from typing import Optional

import requests
from pydantic import ValidationError

from .errors import DataError
from .logging_utils import setup_logger
from .models import AccessCredential, AccessTokenResponse
from .transport import DEFAULT_TIMEOUT_SEC, create_session, require_success, send

logger = setup_logger(__name__)

GRAPHQL_URL = "https://gql.twitch.tv/gql"

# Channel login travels as a GraphQL variable, never as query text
ACCESS_TOKEN_QUERY = (
    "query PlaybackAccessToken($login: String!) {"
    " streamPlaybackAccessToken("
    "channelName: $login,"
    ' params: {platform: "web", playerBackend: "mediaplayer", playerType: "site"}'
    ") { value signature } }"
)


class TokenResolver:
    """Obtains ephemeral playback credentials for a channel."""

    def __init__(self, client_id: str, session: Optional[requests.Session] = None,
                 timeout: float = DEFAULT_TIMEOUT_SEC, url: str = GRAPHQL_URL):
        self.client_id = client_id
        self.session = session or create_session()
        self.timeout = timeout
        self.url = url

    def build_payload(self, channel: str) -> dict:
        return {
            "operationName": "PlaybackAccessToken",
            "query": ACCESS_TOKEN_QUERY,
            "variables": {"login": channel},
        }

    def resolve(self, channel: str) -> AccessCredential:
        """
        Request a token/signature pair for the channel.

        Raises:
            NetworkError: transport failure or timeout
            ProtocolError: non-2xx status
            DataError: body is not JSON or lacks the token fields
        """
        if not channel:
            raise ValueError("channel must be non-empty")

        logger.debug(f"Requesting playback access token for {channel}")
        response = send(
            self.session, "POST", self.url, timeout=self.timeout,
            json=self.build_payload(channel),
            headers={"Client-ID": self.client_id},
        )
        require_success(response, self.url)

        try:
            body = response.json()
        except ValueError as e:
            raise DataError(f"Access token response is not JSON: {e}") from e

        try:
            parsed = AccessTokenResponse.model_validate(body)
        except ValidationError as e:
            raise DataError(f"Unexpected access token response shape: {e}") from e

        token = parsed.data.stream_playback_access_token
        if token is None:
            raise DataError(f"No playback access token returned for {channel}")

        return AccessCredential(token=token.value, signature=token.signature)
