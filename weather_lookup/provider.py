"""
Weather data provider using the OpenWeatherMap current-weather API.
"""
import logging
import time
from typing import Any, Dict, Optional

import requests

from utils.metrics import provider_call_counter, provider_call_duration

logger = logging.getLogger(__name__)

OPENWEATHER_BASE_URL = "https://api.openweathermap.org/data/2.5"
DEFAULT_TIMEOUT_SECONDS = 10.0


class ProviderError(Exception):
    """
    Outbound call failed.

    ``status_code`` is the provider's HTTP status, or None when no response
    was received or the body could not be used.
    """

    def __init__(self, status_code: Optional[int], detail: Any):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"provider error (status={status_code}): {detail}")


class OpenWeatherProvider:
    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = OPENWEATHER_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.api_key = api_key
        self.weather_url = f"{base_url.rstrip('/')}/weather"
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def fetch_current_weather(self, zip_code: str) -> Dict[str, Any]:
        """
        Fetch current conditions for a US zip code in imperial units.

        Makes exactly one attempt. Raises ProviderError on any failure.
        """
        params = {"zip": zip_code, "appid": self.api_key, "units": "imperial"}
        start_time = time.time()

        try:
            response = requests.get(self.weather_url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            provider_call_counter.labels(status="network_error").inc()
            raise ProviderError(None, str(e)) from e
        finally:
            provider_call_duration.observe(time.time() - start_time)

        provider_call_counter.labels(status=str(response.status_code)).inc()

        if not response.ok:
            raise ProviderError(response.status_code, _error_detail(response))

        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(None, f"Invalid JSON from provider: {e}") from e


def _error_detail(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text
