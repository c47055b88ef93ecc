"""
Environment-backed settings.
"""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .orchestrator import PLAYLIST_INTERVAL_SEC, STITCHED_INTERVAL_SEC
from .transport import DEFAULT_TIMEOUT_SEC

ENV_FIELDS = {
    "CHANNEL_NAME": "channel_name",
    "CLIENT_ID": "client_id",
    "PLAYLIST_INTERVAL_SEC": "playlist_interval",
    "STITCHED_INTERVAL_SEC": "stitched_interval",
    "HTTP_TIMEOUT_SEC": "http_timeout",
    "HOST": "host",
    "PORT": "port",
}


class ConfigError(ValueError):
    """Startup configuration is missing or invalid."""


class Settings(BaseModel):
    channel_name: str
    client_id: str
    playlist_interval: float = Field(default=PLAYLIST_INTERVAL_SEC, gt=0)
    stitched_interval: float = Field(default=STITCHED_INTERVAL_SEC, gt=0)
    http_timeout: float = Field(default=DEFAULT_TIMEOUT_SEC, gt=0)
    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=1, le=65535)

    @field_validator("channel_name", "client_id")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("channel_name")
    @classmethod
    def _lowercase_login(cls, value: str) -> str:
        return value.lower()


def load_settings(env: Optional[Mapping[str, str]] = None, **overrides) -> Settings:
    """
    Read settings from the environment, with explicit overrides taking priority.

    Raises:
        ConfigError: a required variable is missing or a value does not validate
    """
    env = os.environ if env is None else env

    values = {}
    for var, field in ENV_FIELDS.items():
        raw = env.get(var)
        if raw not in (None, ""):
            values[field] = raw
    values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return Settings(**values)
    except ValidationError as e:
        missing = [var for var, field in ENV_FIELDS.items()
                   if any(err["loc"] == (field,) and err["type"] == "missing" for err in e.errors())]
        if missing:
            raise ConfigError(f"Missing required environment variable(s): {', '.join(missing)}") from e
        raise ConfigError(f"Invalid configuration: {e}") from e
