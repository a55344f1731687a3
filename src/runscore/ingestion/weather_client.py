"""
Weather ingestion client (Open-Meteo).

This module fetches *current* conditions for a coordinate and normalizes them into
a `WeatherContext` (temperature, description, icon, wind, humidity). The advisory
is derived by the model itself, so it is identical no matter where the snapshot
came from (live provider, API payload, tests).

The recommender never calls this client on its own; callers resolve weather first
and hand the snapshot to the engine.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from runscore.config.settings import Settings
from runscore.core.cache import FileCache
from runscore.core.errors import WeatherUnavailable
from runscore.core.http import get_json
from runscore.domain.models import WeatherContext

logger = logging.getLogger(__name__)

CURRENT_FIELDS = ["temperature_2m", "relative_humidity_2m", "wind_speed_10m", "weather_code"]

# WMO weather interpretation codes -> (description, icon), grouped by code ranges.
_WMO_CODES: list[tuple[range, str, str]] = [
    (range(0, 1), "Clear sky", "☀️"),
    (range(1, 3), "Partly cloudy", "⛅"),
    (range(3, 4), "Overcast", "☁️"),
    (range(45, 49), "Fog", "🌫️"),
    (range(51, 58), "Drizzle", "🌦️"),
    (range(61, 68), "Rain", "🌧️"),
    (range(71, 78), "Snow", "❄️"),
    (range(80, 83), "Rain showers", "🌧️"),
    (range(85, 87), "Snow showers", "🌨️"),
    (range(95, 100), "Thunderstorm", "⛈️"),
]


def describe_weather_code(code: int | None) -> tuple[str, str]:
    """Map a WMO weather code to a short description and display icon."""
    if code is not None:
        for codes, description, icon in _WMO_CODES:
            if code in codes:
                return description, icon
    return "Unknown", "🌡️"


def parse_current_payload(payload: Any) -> WeatherContext:
    """Convert an Open-Meteo `current` payload into a `WeatherContext`."""
    current = payload.get("current") if isinstance(payload, dict) else None
    if not isinstance(current, dict):
        raise WeatherUnavailable("Weather payload has no 'current' block")

    missing = [f for f in CURRENT_FIELDS[:3] if current.get(f) is None]
    if missing:
        raise WeatherUnavailable(f"Weather payload is missing fields: {', '.join(missing)}")

    code = current.get("weather_code")
    try:
        description, icon = describe_weather_code(int(code) if code is not None else None)
        return WeatherContext(
            temperature_c=float(current["temperature_2m"]),
            description=description,
            icon=icon,
            wind_speed_kmh=float(current["wind_speed_10m"]),
            humidity_pct=float(current["relative_humidity_2m"]),
        )
    except (TypeError, ValueError, ValidationError) as e:
        raise WeatherUnavailable(f"Weather payload has invalid values: {e}") from e


class WeatherClient:
    """Fetches and caches Open-Meteo current conditions."""

    def __init__(self, settings: Settings, cache: FileCache):
        self._settings = settings
        self._cache = cache

    def _fetch_open_meteo(self, lat: float, lon: float) -> dict[str, Any]:
        cfg = self._settings.ingestion.weather
        params = {
            "latitude": lat,
            "longitude": lon,
            "current": ",".join(CURRENT_FIELDS),
            "wind_speed_unit": "kmh",
            "timezone": "auto",
        }
        return get_json(cfg.base_url, params=params, timeout_seconds=self._settings.app.http_timeout_seconds)

    def current_weather(self, *, lat: float, lon: float) -> WeatherContext:
        """Return current conditions for a coordinate, or raise `WeatherUnavailable`."""
        cfg = self._settings.ingestion.weather
        precision = cfg.coordinate_precision
        cache_key = f"openmeteo:current:{lat:.{precision}f}:{lon:.{precision}f}"

        def builder() -> dict[str, Any]:
            logger.info("Fetching current weather for lat=%.4f lon=%.4f", lat, lon)
            return self._fetch_open_meteo(lat, lon)

        try:
            payload = self._cache.get_or_set("weather", cache_key, builder, ttl_seconds=cfg.cache_ttl_seconds)
        except httpx.HTTPError as e:
            raise WeatherUnavailable(f"Weather provider request failed: {e}") from e
        except ValueError as e:
            raise WeatherUnavailable(f"Weather provider returned invalid JSON: {e}") from e
        return parse_current_payload(payload)
