"""Settings loaded from the environment and an optional `.env` file."""

import os
from dataclasses import dataclass
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from .errors import ConfigurationError
from .ratelimit import DEFAULT_QUOTA, DEFAULT_WINDOW_SECONDS
from .service import DEFAULT_DISPLAY_ZONE


@dataclass(frozen=True)
class Settings:
    api_key: Optional[str]
    shard: str = "steam"
    display_zone: str = DEFAULT_DISPLAY_ZONE
    rate_limit: int = DEFAULT_QUOTA
    rate_window: float = DEFAULT_WINDOW_SECONDS
    log_level: str = "INFO"

    def require_api_key(self) -> str:
        if not self.api_key:
            raise ConfigurationError("PUBG API key not configured")
        return self.api_key


def load_settings(dotenv: bool = True) -> Settings:
    """Read settings; environment variables win over `.env` values."""
    if dotenv:
        load_dotenv(override=False)
    display_zone = os.getenv("SHAREDMATCH_DISPLAY_TZ", DEFAULT_DISPLAY_ZONE)
    try:
        ZoneInfo(display_zone)
    except (ZoneInfoNotFoundError, ValueError) as exn:
        raise ConfigurationError(f"Unknown display time zone: {display_zone}") from exn

    try:
        return Settings(
            api_key=os.getenv("PUBG_API_KEY") or None,
            shard=os.getenv("PUBG_SHARD", "steam"),
            display_zone=display_zone,
            rate_limit=int(os.getenv("SHAREDMATCH_RATE_LIMIT", str(DEFAULT_QUOTA))),
            rate_window=float(os.getenv("SHAREDMATCH_RATE_WINDOW", str(DEFAULT_WINDOW_SECONDS))),
            log_level=os.getenv("SHAREDMATCH_LOG_LEVEL", "INFO").upper(),
        )
    except ValueError as exn:
        raise ConfigurationError(f"Invalid rate limit setting: {exn}") from exn
