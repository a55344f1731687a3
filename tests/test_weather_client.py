import httpx
import pytest

import runscore.ingestion.weather_client as weather_client
from runscore.config.settings import get_settings
from runscore.core.cache import FileCache, record_cache_stats
from runscore.core.errors import WeatherUnavailable
from runscore.ingestion.weather_client import WeatherClient, describe_weather_code, parse_current_payload

PAYLOAD = {
    "current": {
        "temperature_2m": 33.4,
        "relative_humidity_2m": 88,
        "wind_speed_10m": 6.5,
        "weather_code": 1,
    }
}


def test_describe_weather_code():
    assert describe_weather_code(0) == ("Clear sky", "☀️")
    assert describe_weather_code(61)[0] == "Rain"
    assert describe_weather_code(95)[0] == "Thunderstorm"
    assert describe_weather_code(42) == ("Unknown", "🌡️")
    assert describe_weather_code(None) == ("Unknown", "🌡️")


def test_parse_current_payload():
    weather = parse_current_payload(PAYLOAD)
    assert weather.temperature_c == pytest.approx(33.4)
    assert weather.humidity_pct == 88
    assert weather.description == "Partly cloudy"
    assert weather.advisory_kind == "heat"


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"current": None},
        {"current": {"temperature_2m": 20, "wind_speed_10m": 5}},
        {"current": {"temperature_2m": 20, "relative_humidity_2m": 140, "wind_speed_10m": 5}},
        {"current": {"temperature_2m": "hot", "relative_humidity_2m": 50, "wind_speed_10m": 5}},
        [],
    ],
)
def test_parse_current_payload_rejects_malformed_payloads(payload):
    with pytest.raises(WeatherUnavailable):
        parse_current_payload(payload)


def test_current_weather_is_cached_per_rounded_coordinate(monkeypatch, tmp_path):
    calls = []

    def fake_get_json(url, *, params=None, headers=None, timeout_seconds=10):
        calls.append(params)
        return PAYLOAD

    monkeypatch.setattr(weather_client, "get_json", fake_get_json)
    client = WeatherClient(get_settings(), FileCache(tmp_path))

    with record_cache_stats() as stats:
        first = client.current_weather(lat=31.2304, lon=121.4737)
        # Same coordinate at two decimals -> served from cache.
        second = client.current_weather(lat=31.2301, lon=121.4741)

    assert first == second
    assert len(calls) == 1
    assert calls[0]["latitude"] == 31.2304
    assert stats.hits == 1
    assert stats.sets == 1


def test_provider_errors_become_weather_unavailable(monkeypatch, tmp_path):
    def failing_get_json(url, **kwargs):
        raise httpx.ConnectError("connection refused")

    monkeypatch.setattr(weather_client, "get_json", failing_get_json)
    client = WeatherClient(get_settings(), FileCache(tmp_path))

    with pytest.raises(WeatherUnavailable):
        client.current_weather(lat=0.0, lon=0.0)
    # Failed fetches are not cached.
    assert not any(tmp_path.rglob("*.json"))
