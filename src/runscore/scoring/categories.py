"""
Recommendation category rules.

Rules are checked in a fixed priority order and the first match wins, so the
category of a route is reproducible for identical inputs regardless of how close
its scores are to several thresholds.
"""

from __future__ import annotations

from dataclasses import dataclass

from runscore.config.settings import Settings
from runscore.domain.models import DifficultyLevel, RecommendationType, Route, TimeOfDay


@dataclass(frozen=True)
class CategoryInputs:
    confidence: float
    weather_fit: float
    time_fit: float
    preference_fit: float
    popularity: float
    night_safety_bonus: bool


def assign_category(
    route: Route, *, inputs: CategoryInputs, time_of_day: TimeOfDay, settings: Settings
) -> RecommendationType:
    cfg = settings.categories
    hard_levels = {DifficultyLevel[name.upper()] for name in cfg.challenge_difficulties}

    if inputs.confidence >= cfg.perfect_match_min_confidence:
        return RecommendationType.PERFECT_MATCH
    if (
        time_of_day is TimeOfDay.NIGHT
        and inputs.night_safety_bonus
        and inputs.time_fit >= cfg.safe_night_min_time_fit
    ):
        return RecommendationType.SAFE_NIGHT
    if inputs.popularity >= cfg.popular_min_popularity and inputs.preference_fit < cfg.popular_max_preference:
        return RecommendationType.POPULAR
    if route.difficulty_level in hard_levels and inputs.preference_fit >= cfg.challenge_min_preference:
        return RecommendationType.CHALLENGE
    if inputs.preference_fit < cfg.exploration_max_preference and inputs.weather_fit >= cfg.exploration_min_weather:
        return RecommendationType.EXPLORATION
    return RecommendationType.GENERAL
