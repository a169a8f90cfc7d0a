"""
Shared fixtures: a controllable clock and a mocked OpenWeatherMap provider.
"""
import copy
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

from weather_lookup.provider import OpenWeatherProvider

START_TIME = datetime(2024, 6, 1, 15, 30, tzinfo=timezone.utc)

BEVERLY_HILLS_RESPONSE = {
    "name": "Beverly Hills",
    "sys": {"country": "US"},
    "weather": [{"main": "Clear", "description": "clear sky", "icon": "01d"}],
    "main": {
        "temp": 72.5,
        "feels_like": 75.2,
        "temp_min": 68.1,
        "temp_max": 76.8,
        "humidity": 65,
    },
    "wind": {"speed": 5.2},
    "visibility": 10000,
}


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = START_TIME):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def raw_weather():
    return copy.deepcopy(BEVERLY_HILLS_RESPONSE)


@pytest.fixture
def provider(raw_weather):
    """Configured provider whose outbound call returns the Beverly Hills body."""
    mock_provider = Mock(spec=OpenWeatherProvider)
    mock_provider.is_configured = True
    mock_provider.fetch_current_weather.return_value = raw_weather
    return mock_provider
