# src/runscore/features/weather.py
"""
Weather fit feature (route-level).

This module converts the current weather snapshot into an explainable 0..1 score
for one route.

Why a separate `features/weather.py` layer?
- The advisory (heat/cold/wind/humidity/good) is a property of the *conditions*.
- How much a given advisory matters depends on the *route*: a covered track is
  fine at 34°C, an exposed waterfront loop is not.
- Routes with no relevant tags get a neutral score, so they neither win nor lose
  on weather alone.
"""

from __future__ import annotations

# `Settings` carries config-defined tag lists and scores (no hard-coded tuning).
from runscore.config.settings import Settings
from runscore.domain.advisory import AdvisoryKind
from runscore.domain.models import Route, WeatherContext
from runscore.scoring.composite import ComponentResult, clamp01


def score_weather_fit(route: Route, *, weather: WeatherContext, settings: Settings) -> ComponentResult:
    cfg = settings.features.weather
    advisory = weather.advisory
    tags = route.feature_set

    # Tag matches are computed once; tags are lower-cased by the Route model.
    sheltered = sorted(tags.intersection(cfg.shelter_tags))
    exposed = sorted(tags.intersection(cfg.exposed_tags))

    reasons: list[str] = []
    score = float(cfg.neutral_score)

    # --- Heat or humidity: shade matters most ---
    if advisory.kind in (AdvisoryKind.HEAT, AdvisoryKind.HUMIDITY):
        if sheltered:
            score = float(cfg.heat_shelter_score)
            reasons.append(f"Sheltered from {advisory.kind.value} ({', '.join(sheltered)})")
        elif exposed:
            score = float(cfg.heat_exposed_score)
            reasons.append(f"Exposed route during {advisory.kind.value} caution")
        elif tags.intersection(cfg.unshaded_tags):
            score = float(cfg.heat_unshaded_score)
            reasons.append(f"No shade during {advisory.kind.value} caution")
        # Untagged routes stay neutral: missing tags are not evidence of exposure.

    # --- Wind: sheltered routes help, open routes hurt ---
    elif advisory.kind is AdvisoryKind.WIND:
        wind_sheltered = sorted(tags.intersection(cfg.wind_shelter_tags))
        if wind_sheltered:
            score = float(cfg.wind_shelter_score)
            reasons.append(f"Sheltered from wind ({', '.join(wind_sheltered)})")
        elif exposed:
            score = float(cfg.wind_exposed_score)
            reasons.append("Exposed to strong wind")

    # --- Cold: covered routes avoid ice and wind chill ---
    elif advisory.kind is AdvisoryKind.COLD:
        covered = sorted(tags.intersection(cfg.shelter_tags))
        if covered:
            score = float(cfg.cold_covered_score)
            reasons.append("Covered route in cold conditions")

    if not reasons:
        reasons.append("Weather-neutral route")

    details = {
        "advisory": advisory.kind.value,
        "sheltered_tags": sheltered,
        "exposed_tags": exposed,
    }
    return ComponentResult(score=clamp01(score), details=details, reasons=reasons)
