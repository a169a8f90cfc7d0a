"""
Errors raised by the weather lookup layer.

Each error carries the HTTP status and the client-safe message the route
layer returns. Raw provider detail is logged where it occurs and never
placed in ``message``.
"""
from datetime import datetime
from typing import Any, Dict, Optional

from .clock import to_iso


class WeatherLookupError(Exception):
    status_code = 500
    message = "Something went wrong!"
    error_type = "internal_error"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message}


class InvalidZipCode(WeatherLookupError):
    status_code = 400
    message = "Invalid zip code format. Please provide a valid US zip code."
    error_type = "invalid_input"


class MissingConfiguration(WeatherLookupError):
    status_code = 500
    message = "Weather API key not configured"
    error_type = "missing_configuration"


class RateLimited(WeatherLookupError):
    status_code = 429
    message = "Daily API request limit reached. Please try again later."
    error_type = "rate_limited"

    def __init__(self, reset_at: datetime, remaining: int = 0):
        super().__init__()
        self.reset_at = reset_at
        self.remaining = remaining

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.message,
            "requestsRemaining": self.remaining,
            "resetTime": to_iso(self.reset_at),
        }


class LocationNotFound(WeatherLookupError):
    status_code = 404
    message = "Location not found. Please check the zip code."
    error_type = "not_found"


class InvalidCredentials(WeatherLookupError):
    # Surfaced as 500, not 401
    status_code = 500
    message = "Invalid API key. Please check configuration."
    error_type = "invalid_credentials"


class ProviderUnavailable(WeatherLookupError):
    status_code = 500
    message = "Failed to fetch weather data. Please try again later."
    error_type = "provider_unavailable"
