"""
Running advisory derived from current conditions.

The advisory is a pure, total function of the numeric weather fields. Rules are
evaluated in priority order and the first match wins, so e.g. 35°C at 90%
humidity is a heat caution, not a humidity caution.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

HEAT_CAUTION_MIN_TEMPERATURE_C = 32.0
COLD_CAUTION_MAX_TEMPERATURE_C = 2.0
WIND_CAUTION_MIN_SPEED_KMH = 30.0
HUMIDITY_CAUTION_MIN_PCT = 85.0


class AdvisoryKind(str, Enum):
    HEAT = "heat"
    COLD = "cold"
    WIND = "wind"
    HUMIDITY = "humidity"
    GOOD = "good"


ADVISORY_TEXT: dict[AdvisoryKind, str] = {
    AdvisoryKind.HEAT: "High temperature: run early or on shaded routes, slow your pace and hydrate often.",
    AdvisoryKind.COLD: "Cold conditions: warm up indoors, dress in layers and watch for icy surfaces.",
    AdvisoryKind.WIND: "Strong wind: prefer sheltered routes and start into the wind.",
    AdvisoryKind.HUMIDITY: "High humidity or rain: expect slippery ground and reduce intensity.",
    AdvisoryKind.GOOD: "Good running conditions: enjoy your run!",
}


@dataclass(frozen=True)
class Advisory:
    kind: AdvisoryKind
    text: str


def derive_advisory(*, temperature_c: float, wind_speed_kmh: float, humidity_pct: float) -> Advisory:
    """Return exactly one advisory for the given conditions."""
    if temperature_c >= HEAT_CAUTION_MIN_TEMPERATURE_C:
        kind = AdvisoryKind.HEAT
    elif temperature_c <= COLD_CAUTION_MAX_TEMPERATURE_C:
        kind = AdvisoryKind.COLD
    elif wind_speed_kmh >= WIND_CAUTION_MIN_SPEED_KMH:
        kind = AdvisoryKind.WIND
    elif humidity_pct >= HUMIDITY_CAUTION_MIN_PCT:
        kind = AdvisoryKind.HUMIDITY
    else:
        kind = AdvisoryKind.GOOD
    return Advisory(kind=kind, text=ADVISORY_TEXT[kind])
