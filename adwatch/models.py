"""
Pydantic models shared by the resolvers, the parser and the query endpoint.
"""

from datetime import datetime
from typing import Optional

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, StrictStr, field_validator


class AccessCredential(BaseModel):
    """Ephemeral token/signature pair authorizing master manifest retrieval."""

    model_config = ConfigDict(frozen=True)

    token: str
    signature: str


class StitchedAdEvent(BaseModel):
    """A server-stitched ad break found in a variant manifest."""

    model_config = ConfigDict(frozen=True)

    start_date: AwareDatetime
    roll_type: str
    pod_length: int = Field(ge=0)

    @field_validator("start_date", mode="before")
    @classmethod
    def _start_date_is_text(cls, value):
        # START-DATE is always quoted text in a manifest, never epoch seconds
        if isinstance(value, datetime):
            return value
        if not isinstance(value, str) or "T" not in value:
            raise ValueError(f"not an RFC3339 timestamp: {value!r}")
        return value


# GraphQL response shape for streamPlaybackAccessToken

class PlaybackAccessToken(BaseModel):
    value: StrictStr
    signature: StrictStr


class AccessTokenData(BaseModel):
    stream_playback_access_token: Optional[PlaybackAccessToken] = Field(
        default=None, alias="streamPlaybackAccessToken"
    )


class AccessTokenResponse(BaseModel):
    data: AccessTokenData
