"""
Reshape OpenWeatherMap current-weather bodies into the client payload.
"""
import math
from datetime import datetime
from typing import Any, Dict, Optional

from .clock import to_iso
from .provider import ProviderError


def round_half_up(value: float) -> int:
    """Round like JavaScript's Math.round: halves go towards +infinity."""
    return int(math.floor(value + 0.5))


def _visibility_km(meters: Optional[float]) -> Optional[float]:
    if meters is None:
        return None
    return meters / 1000


def build_weather_payload(
    raw: Dict[str, Any], zip_code: str, observed_at: datetime
) -> Dict[str, Any]:
    """
    Build the canonical payload from a raw provider body.

    The returned dict has no ``fromCache`` flag; the lookup service adds it
    when serving. Raises ProviderError if required fields are missing.
    """
    try:
        conditions = raw["weather"][0]
        main = raw["main"]
        return {
            "location": {
                "name": raw["name"],
                "country": raw["sys"]["country"],
                "zipCode": zip_code,
            },
            "weather": {
                "main": conditions["main"],
                "description": conditions["description"],
                "icon": conditions["icon"],
            },
            "temperature": {
                "current": round_half_up(main["temp"]),
                "feelsLike": round_half_up(main["feels_like"]),
                "min": round_half_up(main["temp_min"]),
                "max": round_half_up(main["temp_max"]),
            },
            "humidity": int(main["humidity"]),
            "windSpeed": raw["wind"]["speed"],
            "visibility": _visibility_km(raw.get("visibility")),
            "timestamp": to_iso(observed_at),
        }
    except (KeyError, IndexError, TypeError) as e:
        raise ProviderError(None, f"Unexpected provider payload: missing {e}") from e
