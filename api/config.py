"""
Configuration for the FastAPI application, read from environment variables.
"""
import os
from typing import Optional

from pydantic import BaseModel, Field

from weather_lookup.cache import CACHE_TTL
from weather_lookup.provider import DEFAULT_TIMEOUT_SECONDS, OPENWEATHER_BASE_URL
from weather_lookup.rate_limiter import MAX_REQUESTS


class Settings(BaseModel):
    openweather_api_key: Optional[str] = None
    openweather_base_url: str = OPENWEATHER_BASE_URL
    provider_timeout_seconds: float = Field(DEFAULT_TIMEOUT_SECONDS, gt=0)
    max_daily_requests: int = Field(MAX_REQUESTS, ge=0)
    cache_ttl_seconds: int = Field(int(CACHE_TTL.total_seconds()), gt=0)
    cache_max_entries: Optional[int] = Field(None, ge=1)
    log_level: str = "INFO"
    port: int = 3001


def get_api_key() -> Optional[str]:
    """Get the OpenWeatherMap API key from environment variables."""
    api_key = os.getenv("OPENWEATHER_API_KEY", "").strip()
    return api_key or None


def load_settings() -> Settings:
    """
    Build settings from the environment.

    A missing API key is not an error here; lookups report it per request.
    """
    values = {
        "openweather_api_key": get_api_key(),
        "openweather_base_url": os.getenv("OPENWEATHER_BASE_URL"),
        "provider_timeout_seconds": os.getenv("PROVIDER_TIMEOUT_SECONDS"),
        "max_daily_requests": os.getenv("MAX_DAILY_REQUESTS"),
        "cache_ttl_seconds": os.getenv("CACHE_TTL_SECONDS"),
        "cache_max_entries": os.getenv("CACHE_MAX_ENTRIES"),
        "log_level": os.getenv("LOG_LEVEL"),
        "port": os.getenv("PORT"),
    }
    # Unset variables fall back to model defaults
    return Settings(**{k: v for k, v in values.items() if v not in (None, "")})
