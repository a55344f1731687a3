"""
Domain models (Pydantic).

These types represent the stable "contract" between layers:
- catalog entities (`Route`)
- request context (`WeatherContext`, `TimeOfDay`, `PreferenceProfile`)
- explainable output (`Recommendation`, `ScoreBreakdown`)

All models are frozen: the engine reads immutable snapshots and never mutates
a route, a weather reading or a profile while scoring.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum, IntEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator

from runscore.core.errors import InvalidRequest
from runscore.domain.advisory import Advisory, derive_advisory

# Rating used for display/ordering when a route has never been rated.
NEUTRAL_RATING = 2.5


def _normalize_tags(tags: list[str]) -> list[str]:
    """Lower-case, strip and de-duplicate tags while keeping their first-seen order."""
    cleaned = (t.strip().lower() for t in tags if t and t.strip())
    return list(dict.fromkeys(cleaned))


class DifficultyLevel(IntEnum):
    """Ordered route difficulty (1 = easiest)."""

    EASY = 1
    MODERATE = 2
    HARD = 3
    EXPERT = 4

    @classmethod
    def parse(cls, value: Any) -> "DifficultyLevel":
        if isinstance(value, str) and not value.strip().isdigit():
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise ValueError(f"Unknown difficulty level '{value}'") from None
        return cls(int(value))


class TimeOfDay(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"


def time_of_day_for_hour(hour: int) -> TimeOfDay:
    """Bucket a local wall-clock hour: [5,12) morning, [12,17) afternoon, [17,21) evening, else night."""
    if not 0 <= hour <= 23:
        raise InvalidRequest(f"hour must be within 0..23, got {hour}")
    if 5 <= hour < 12:
        return TimeOfDay.MORNING
    if 12 <= hour < 17:
        return TimeOfDay.AFTERNOON
    if 17 <= hour < 21:
        return TimeOfDay.EVENING
    return TimeOfDay.NIGHT


def parse_time_of_day(value: TimeOfDay | str) -> TimeOfDay:
    """Accept a `TimeOfDay` or its string value; anything else is an invalid request."""
    if isinstance(value, TimeOfDay):
        return value
    if isinstance(value, str):
        try:
            return TimeOfDay(value.strip().lower())
        except ValueError:
            pass
    raise InvalidRequest(f"Unknown time of day {value!r}; expected one of {[t.value for t in TimeOfDay]}")


class Route(BaseModel):
    """A running route from the catalog (static attributes only)."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    distance_km: float = Field(..., gt=0)
    estimated_duration_min: int = Field(..., gt=0)
    difficulty_level: DifficultyLevel
    avg_rating: float = Field(0.0, ge=0, le=5)
    total_ratings: int = Field(0, ge=0)
    features: list[str] = Field(default_factory=list)
    status: Literal["active", "disabled", "archived"] = "active"

    @field_validator("difficulty_level", mode="before")
    @classmethod
    def _parse_difficulty(cls, value: Any) -> DifficultyLevel:
        return DifficultyLevel.parse(value)

    @field_validator("features")
    @classmethod
    def _normalize_features(cls, features: list[str]) -> list[str]:
        return _normalize_tags(features)

    @property
    def feature_set(self) -> frozenset[str]:
        return frozenset(self.features)

    @property
    def effective_rating(self) -> float:
        """Average rating, or the neutral rating when nobody has rated the route."""
        return self.avg_rating if self.total_ratings > 0 else NEUTRAL_RATING


class WeatherContext(BaseModel):
    """Point-in-time weather snapshot for the requesting location."""

    model_config = ConfigDict(frozen=True)

    temperature_c: float = Field(..., allow_inf_nan=False)
    description: str = ""
    icon: str = ""
    wind_speed_kmh: float = Field(0.0, ge=0, allow_inf_nan=False)
    humidity_pct: float = Field(0.0, ge=0, le=100, allow_inf_nan=False)

    @property
    def advisory(self) -> Advisory:
        return derive_advisory(
            temperature_c=self.temperature_c,
            wind_speed_kmh=self.wind_speed_kmh,
            humidity_pct=self.humidity_pct,
        )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def advisory_kind(self) -> str:
        return self.advisory.kind.value

    @computed_field  # type: ignore[prop-decorator]
    @property
    def advisory_text(self) -> str:
        return self.advisory.text


class DistanceRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    min_km: float = Field(..., ge=0)
    max_km: float = Field(..., gt=0)

    @model_validator(mode="after")
    def _validate_order(self) -> "DistanceRange":
        if self.max_km < self.min_km:
            raise ValueError("preferred_distance_km.max_km must be >= min_km")
        return self

    @property
    def midpoint(self) -> float:
        return (self.min_km + self.max_km) / 2


class PreferenceProfile(BaseModel):
    """Preference signal for a known user. Guests have no profile at all (None)."""

    model_config = ConfigDict(frozen=True)

    preferred_distance_km: DistanceRange | None = None
    preferred_difficulty: DifficultyLevel | None = None
    liked_features: list[str] = Field(default_factory=list)
    disliked_route_ids: list[str] = Field(default_factory=list)

    @field_validator("preferred_difficulty", mode="before")
    @classmethod
    def _parse_difficulty(cls, value: Any) -> DifficultyLevel | None:
        return None if value is None else DifficultyLevel.parse(value)

    @field_validator("liked_features")
    @classmethod
    def _normalize_features(cls, features: list[str]) -> list[str]:
        return _normalize_tags(features)

    @property
    def has_signals(self) -> bool:
        """True when at least one scoring signal (distance, difficulty, features) is present."""
        return (
            self.preferred_distance_km is not None
            or self.preferred_difficulty is not None
            or bool(self.liked_features)
        )


class RecommendationType(str, Enum):
    PERFECT_MATCH = "perfect_match"
    POPULAR = "popular"
    CHALLENGE = "challenge"
    EXPLORATION = "exploration"
    SAFE_NIGHT = "safe_night"
    GENERAL = "general"


ComponentName = Literal["weather", "time", "preference", "popularity"]


class ScoreComponent(BaseModel):
    """One explainable component score (weather/time/preference/popularity)."""

    model_config = ConfigDict(frozen=True)

    name: ComponentName
    score: float = Field(..., ge=0, le=1)
    weight: float = Field(..., ge=0, le=1)
    contribution: float = Field(..., ge=0, le=1)
    details: dict[str, Any] = Field(default_factory=dict)
    reasons: list[str] = Field(default_factory=list)


class ScoreBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    route_id: str
    total_score: float = Field(..., ge=0, le=1)
    components: list[ScoreComponent]

    def component(self, name: ComponentName) -> ScoreComponent:
        return next(c for c in self.components if c.name == name)


class Recommendation(BaseModel):
    """One scored route; built per request and never persisted."""

    model_config = ConfigDict(frozen=True)

    route: Route
    recommendation_type: RecommendationType
    confidence_score: float = Field(..., ge=0, le=1)
    reason: str = ""
    breakdown: ScoreBreakdown


class RecommendationRequest(BaseModel):
    """API/CLI request payload for one recommendation run."""

    user_id: str = "guest"
    weather: WeatherContext
    # Either an explicit bucket or a local hour; neither means "now" in the app timezone.
    time_of_day: str | None = None
    hour: int | None = Field(default=None, ge=0, le=23)
    count: int | None = None
    settings_overrides: dict[str, Any] | None = None


class RecommendationResponse(BaseModel):
    generated_at: datetime
    user_id: str
    time_of_day: TimeOfDay
    weather: WeatherContext
    results: list[Recommendation]
    meta: dict[str, Any] = Field(default_factory=dict)
