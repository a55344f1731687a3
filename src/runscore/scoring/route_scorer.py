"""
Per-route scoring.

`score_route` turns one catalog route plus the request context into a
`Recommendation`: four feature scores, their weighted combination (confidence),
a category and a short reason. It is a pure function of its inputs, so routes
can be scored in any order (or in parallel) with identical results.
"""

from __future__ import annotations

from runscore.config.settings import Settings
from runscore.domain.models import (
    ComponentName,
    PreferenceProfile,
    Recommendation,
    Route,
    ScoreBreakdown,
    ScoreComponent,
    TimeOfDay,
    WeatherContext,
)
from runscore.features.popularity import score_popularity
from runscore.features.preference_match import score_preference_match
from runscore.features.time_fit import score_time_fit
from runscore.features.weather import score_weather_fit
from runscore.scoring.categories import CategoryInputs, assign_category
from runscore.scoring.composite import ComponentResult, clamp01, combine, normalize_weights
from runscore.scoring.explain import COMPONENT_ORDER, build_reason


def effective_weights(settings: Settings) -> dict[str, float]:
    """Composite weights normalized to sum to 1.0 (keeps confidence within 0..1)."""
    return normalize_weights(dict(settings.scoring.composite_weights))


def score_route(
    route: Route,
    *,
    weather: WeatherContext,
    time_of_day: TimeOfDay,
    profile: PreferenceProfile | None,
    settings: Settings,
    weights: dict[str, float] | None = None,
) -> Recommendation:
    weights = weights or effective_weights(settings)

    results: dict[ComponentName, ComponentResult] = {
        "weather": score_weather_fit(route, weather=weather, settings=settings),
        "time": score_time_fit(route, time_of_day=time_of_day, settings=settings),
        "preference": score_preference_match(route, profile=profile, settings=settings),
        "popularity": score_popularity(route, settings=settings),
    }
    scores: dict[ComponentName, float] = {name: clamp01(r.score) for name, r in results.items()}
    confidence = combine(scores, weights)

    category = assign_category(
        route,
        inputs=CategoryInputs(
            confidence=confidence,
            weather_fit=scores["weather"],
            time_fit=scores["time"],
            preference_fit=scores["preference"],
            popularity=scores["popularity"],
            night_safety_bonus=bool(results["time"].details.get("night_safety_bonus")),
        ),
        time_of_day=time_of_day,
        settings=settings,
    )

    components = [
        ScoreComponent(
            name=name,
            score=scores[name],
            weight=float(weights[name]),
            contribution=clamp01(scores[name] * float(weights[name])),
            details=results[name].details,
            reasons=results[name].reasons,
        )
        for name in COMPONENT_ORDER
    ]
    return Recommendation(
        route=route,
        recommendation_type=category,
        confidence_score=confidence,
        reason=build_reason(scores, min_spread=settings.scoring.reason_min_spread),
        breakdown=ScoreBreakdown(route_id=route.id, total_score=confidence, components=components),
    )
