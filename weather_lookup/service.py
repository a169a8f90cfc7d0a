"""
Weather lookup orchestration: cache first, then rate limit, then provider.
"""
import logging
import re
from typing import Any, Dict, Optional

from .cache import ResponseCache
from .clock import Clock, system_clock, to_iso
from .errors import (
    InvalidCredentials,
    InvalidZipCode,
    LocationNotFound,
    MissingConfiguration,
    ProviderUnavailable,
    RateLimited,
)
from .payload import build_weather_payload
from .provider import OpenWeatherProvider, ProviderError
from .rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

ZIP_CODE_PATTERN = re.compile(r"[0-9]{5}(?:-[0-9]{4})?")


def is_valid_zip_code(zip_code: Optional[str]) -> bool:
    """Check for a 5-digit or ZIP+4 US zip code."""
    return bool(zip_code) and ZIP_CODE_PATTERN.fullmatch(zip_code) is not None


class WeatherLookupService:
    """
    Serves weather payloads for zip codes.

    The cache is always consulted before the rate limiter, so a cache hit is
    never refused and never consumes quota. Only successful provider calls
    are counted and cached.
    """

    def __init__(
        self,
        provider: OpenWeatherProvider,
        rate_limiter: Optional[RateLimiter] = None,
        cache: Optional[ResponseCache] = None,
        clock: Optional[Clock] = None,
    ):
        self.clock = clock or system_clock
        self.provider = provider
        self.rate_limiter = rate_limiter if rate_limiter is not None else RateLimiter(clock=self.clock)
        self.cache = cache if cache is not None else ResponseCache(clock=self.clock)

    def lookup(self, zip_code: str) -> Dict[str, Any]:
        """
        Return the weather payload for ``zip_code``.

        Raises a WeatherLookupError subclass on failure.
        """
        if not is_valid_zip_code(zip_code):
            raise InvalidZipCode()

        if not self.provider.is_configured:
            logger.error("OpenWeatherMap API key is not configured")
            raise MissingConfiguration()

        key = zip_code

        cached = self.cache.get(key)
        if cached is not None:
            logger.info(
                f"Cache hit for {zip_code}",
                extra={"zip_code": zip_code, "outcome": "cache_hit"},
            )
            return {**cached, "timestamp": to_iso(self.clock()), "fromCache": True}

        limit = self.rate_limiter.check()
        if not limit.allowed:
            logger.warning(
                f"Daily request limit of {self.rate_limiter.max_requests} reached",
                extra={"zip_code": zip_code, "outcome": "rate_limited"},
            )
            raise RateLimited(reset_at=limit.reset_at, remaining=0)

        try:
            raw = self.provider.fetch_current_weather(zip_code)
            payload = build_weather_payload(raw, zip_code, self.clock())
        except ProviderError as e:
            logger.error(
                f"Weather API error: {e.detail}",
                extra={"zip_code": zip_code, "outcome": "provider_error"},
            )
            if e.status_code == 404:
                raise LocationNotFound() from e
            if e.status_code == 401:
                raise InvalidCredentials() from e
            raise ProviderUnavailable() from e

        self.rate_limiter.increment()
        self.cache.put(key, payload)

        used = self.rate_limiter.request_count
        logger.info(
            f"Fetched weather for {zip_code} ({used}/{self.rate_limiter.max_requests} requests used)",
            extra={"zip_code": zip_code, "outcome": "fetched"},
        )

        return {
            **payload,
            "fromCache": False,
            "apiUsage": {
                "requestsUsed": used,
                "requestsRemaining": max(0, self.rate_limiter.max_requests - used),
            },
        }

    def usage(self) -> Dict[str, Any]:
        """Report quota and cache state. May roll the rate-limit window over."""
        limit = self.rate_limiter.check()
        return {
            "requestsUsed": self.rate_limiter.request_count,
            "requestsRemaining": limit.remaining,
            "maxRequests": self.rate_limiter.max_requests,
            "resetTime": to_iso(limit.reset_at),
            "cacheSize": self.cache.size(),
            "status": "OK" if limit.allowed else "RATE_LIMITED",
        }
