# src/runscore/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/runscore/config/defaults.yaml`, then optionally overridden by:
- environment variables (e.g., `RUNSCORE_LOG_LEVEL`, `RUNSCORE_CATALOG_PATH`)
- an external YAML file via `RUNSCORE_CONFIG_PATH`

Design rule:
- Tuning knobs (weights, tag scores, category thresholds) live in YAML, not in business logic.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, model_validator

from runscore.core.env import load_dotenv_if_present


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `runscore.config`."""
    text = resources.files("runscore.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "RunScore"
    timezone: str = "Asia/Shanghai"
    http_timeout_seconds: float = 10
    log_level: str = "INFO"


class CacheSettings(BaseModel):
    enabled: bool = True
    dir: str = ".cache/runscore"
    default_ttl_seconds: int = 60 * 60


class CatalogSettings(BaseModel):
    path: str = "data/catalogs/routes.json"


class ProfileSettings(BaseModel):
    path: str = "data/profiles/profiles.json"
    # User ids with this prefix never have a stored history.
    guest_prefix: str = "guest"


class WeatherIngestionSettings(BaseModel):
    base_url: str = "https://api.open-meteo.com/v1/forecast"
    cache_ttl_seconds: int = 10 * 60
    # Coordinates are rounded before building cache keys (~1 km at 2 decimals).
    coordinate_precision: int = Field(2, ge=0, le=4)


class IngestionSettings(BaseModel):
    weather: WeatherIngestionSettings = Field(default_factory=WeatherIngestionSettings)


class WeatherFitSettings(BaseModel):
    neutral_score: float = Field(0.6, ge=0, le=1)
    shelter_tags: list[str] = Field(default_factory=lambda: ["covered", "shaded"])
    exposed_tags: list[str] = Field(default_factory=lambda: ["exposed"])
    unshaded_tags: list[str] = Field(default_factory=lambda: ["unshaded"])
    wind_shelter_tags: list[str] = Field(default_factory=lambda: ["covered", "sheltered", "shaded"])
    # Heat/humidity: sheltered routes win, exposed or unshaded routes lose; untagged stay neutral.
    heat_shelter_score: float = Field(0.9, ge=0, le=1)
    heat_exposed_score: float = Field(0.2, ge=0, le=1)
    heat_unshaded_score: float = Field(0.4, ge=0, le=1)
    wind_shelter_score: float = Field(0.8, ge=0, le=1)
    wind_exposed_score: float = Field(0.35, ge=0, le=1)
    cold_covered_score: float = Field(0.7, ge=0, le=1)


class TimeFitSettings(BaseModel):
    neutral_score: float = Field(0.6, ge=0, le=1)
    tag_scores: dict[Literal["morning", "afternoon", "evening", "night"], dict[str, float]] = Field(
        default_factory=lambda: {
            "morning": {"scenic": 0.8},
            "afternoon": {"scenic": 0.75},
            "evening": {},
            "night": {"safe-night": 0.9, "well-lit": 0.85},
        }
    )
    extra_tag_bonus: float = Field(0.05, ge=0, le=1)
    night_safety_tags: list[str] = Field(default_factory=lambda: ["safe-night", "well-lit"])


class PreferenceFitSettings(BaseModel):
    guest_score: float = Field(1.0, ge=0, le=1)
    distance_decay_km: float = Field(5.0, gt=0)
    adjacent_difficulty_score: float = Field(0.5, ge=0, le=1)
    component_weights: dict[Literal["distance", "difficulty", "features"], float] = Field(
        default_factory=lambda: {"distance": 0.4, "difficulty": 0.3, "features": 0.3}
    )


class PopularitySettings(BaseModel):
    # Rating count at which the average rating is trusted in full.
    rating_reference_count: int = Field(20, ge=1)


class FeaturesSettings(BaseModel):
    weather: WeatherFitSettings = Field(default_factory=WeatherFitSettings)
    time: TimeFitSettings = Field(default_factory=TimeFitSettings)
    preference: PreferenceFitSettings = Field(default_factory=PreferenceFitSettings)
    popularity: PopularitySettings = Field(default_factory=PopularitySettings)


class ScoringSettings(BaseModel):
    composite_weights: dict[Literal["weather", "time", "preference", "popularity"], float] = Field(
        default_factory=lambda: {
            "weather": 0.35,
            "time": 0.20,
            "preference": 0.30,
            "popularity": 0.15,
        }
    )
    # Below this spread between the best and worst component, no reason is shown.
    reason_min_spread: float = Field(0.1, ge=0, le=1)
    default_count: int = Field(6, ge=1)

    @model_validator(mode="after")
    def _validate_weights(self) -> "ScoringSettings":
        if any(v < 0 for v in self.composite_weights.values()):
            raise ValueError("scoring.composite_weights must be non-negative")
        return self


class CategorySettings(BaseModel):
    perfect_match_min_confidence: float = Field(0.85, ge=0, le=1)
    safe_night_min_time_fit: float = Field(0.8, ge=0, le=1)
    popular_min_popularity: float = Field(0.8, ge=0, le=1)
    popular_max_preference: float = Field(0.5, ge=0, le=1)
    challenge_min_preference: float = Field(0.5, ge=0, le=1)
    challenge_difficulties: list[Literal["easy", "moderate", "hard", "expert"]] = Field(
        default_factory=lambda: ["hard", "expert"]
    )
    exploration_max_preference: float = Field(0.3, ge=0, le=1)
    exploration_min_weather: float = Field(0.6, ge=0, le=1)


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    profiles: ProfileSettings = Field(default_factory=ProfileSettings)
    ingestion: IngestionSettings = Field(default_factory=IngestionSettings)
    features: FeaturesSettings = Field(default_factory=FeaturesSettings)
    scoring: ScoringSettings = Field(default_factory=ScoringSettings)
    categories: CategorySettings = Field(default_factory=CategorySettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Note: We intentionally keep this whitelist small.
    """
    load_dotenv_if_present()
    data = dict(data)
    cache_dir = os.getenv("RUNSCORE_CACHE_DIR")
    if cache_dir:
        data.setdefault("cache", {})["dir"] = cache_dir

    log_level = os.getenv("RUNSCORE_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    catalog_path = os.getenv("RUNSCORE_CATALOG_PATH")
    if catalog_path:
        data.setdefault("catalog", {})["path"] = catalog_path

    profiles_path = os.getenv("RUNSCORE_PROFILES_PATH")
    if profiles_path:
        data.setdefault("profiles", {})["path"] = profiles_path

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("RUNSCORE_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
