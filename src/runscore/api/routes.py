"""
API routes.

Endpoints:
- POST `/api/recommendations`: main recommender entrypoint (caller supplies the weather snapshot).
- GET  `/api/recommendations/current`: resolve live weather + current time bucket, then recommend.
- GET  `/api/weather`: current conditions and running advisory for a coordinate.
- GET  `/api/categories`: display labels for every recommendation type.
- GET  `/api/health`: liveness probe.
"""

from __future__ import annotations

import time
from datetime import datetime
from functools import lru_cache
from zoneinfo import ZoneInfo

from fastapi import APIRouter, HTTPException, Query

from runscore.catalog.loader import JsonRouteCatalog
from runscore.config.overrides import apply_settings_overrides
from runscore.config.settings import Settings, get_settings
from runscore.core.cache import FileCache, record_cache_stats
from runscore.core.env import resolve_project_path
from runscore.core.errors import CatalogUnavailable, WeatherUnavailable
from runscore.core.time import local_hour
from runscore.domain.models import (
    RecommendationRequest,
    RecommendationResponse,
    RecommendationType,
    WeatherContext,
    parse_time_of_day,
    time_of_day_for_hour,
)
from runscore.ingestion.weather_client import WeatherClient
from runscore.profiles.store import JsonProfileStore
from runscore.recommender.engine import create_engine
from runscore.scoring.explain import category_label
from runscore.scoring.route_scorer import effective_weights

router = APIRouter()


@lru_cache
def _cache() -> FileCache:
    settings = get_settings()
    return FileCache(
        resolve_project_path(settings.cache.dir),
        enabled=settings.cache.enabled,
        default_ttl_seconds=settings.cache.default_ttl_seconds,
    )


@lru_cache
def _weather_client() -> WeatherClient:
    return WeatherClient(get_settings(), _cache())


@lru_cache
def _catalog() -> JsonRouteCatalog:
    return JsonRouteCatalog(get_settings().catalog.path)


@lru_cache
def _profile_store() -> JsonProfileStore:
    settings = get_settings()
    return JsonProfileStore(settings.profiles.path, guest_prefix=settings.profiles.guest_prefix)


def _upstream_error(e: Exception) -> HTTPException:
    return HTTPException(status_code=503, detail={"code": "UPSTREAM_UNAVAILABLE", "message": str(e)})


def _build_response(
    *, settings: Settings, user_id: str, weather: WeatherContext, time_of_day, results, stats, t0: float
) -> RecommendationResponse:
    return RecommendationResponse(
        generated_at=datetime.now(ZoneInfo(settings.app.timezone)),
        user_id=user_id,
        time_of_day=time_of_day,
        weather=weather,
        results=results,
        meta={
            "cache": stats.as_dict(),
            "api_ms": int((time.monotonic() - t0) * 1000),
            "settings_snapshot": {
                "composite_weights": effective_weights(settings),
                "timezone": settings.app.timezone,
            },
        },
    )


@router.get("/api/health")
def get_health() -> dict:
    return {"status": "ok"}


@router.get("/api/categories")
def get_categories() -> dict:
    """Return the display label/style for every recommendation type."""
    return {
        "categories": [
            {"type": kind.value, "label": category_label(kind).label, "style": category_label(kind).style}
            for kind in RecommendationType
        ]
    }


@router.get("/api/weather", response_model=WeatherContext)
def get_weather(lat: float = Query(..., ge=-90, le=90), lon: float = Query(..., ge=-180, le=180)) -> WeatherContext:
    try:
        return _weather_client().current_weather(lat=lat, lon=lon)
    except WeatherUnavailable as e:
        raise _upstream_error(e) from e


@router.post("/api/recommendations", response_model=RecommendationResponse)
def post_recommendations(request: RecommendationRequest) -> RecommendationResponse:
    """Run the recommender for a caller-supplied weather snapshot."""
    t0 = time.monotonic()
    try:
        settings = apply_settings_overrides(get_settings(), request.settings_overrides)
        if request.time_of_day is not None:
            bucket = parse_time_of_day(request.time_of_day)
        else:
            hour = request.hour if request.hour is not None else local_hour(settings.app.timezone)
            bucket = time_of_day_for_hour(hour)
        count = request.count if request.count is not None else settings.scoring.default_count

        engine = create_engine(
            request.user_id, settings=settings, catalog=_catalog(), profile_store=_profile_store()
        )
        with record_cache_stats() as stats:
            results = engine.generate_recommendations(request.weather, bucket, count)
        return _build_response(
            settings=settings,
            user_id=request.user_id,
            weather=request.weather,
            time_of_day=bucket,
            results=results,
            stats=stats,
            t0=t0,
        )
    except CatalogUnavailable as e:
        raise _upstream_error(e) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail={"code": "VALIDATION_ERROR", "message": str(e)}) from e
    except Exception as e:
        raise HTTPException(status_code=500, detail={"code": "INTERNAL_ERROR", "message": str(e)}) from e


@router.get("/api/recommendations/current", response_model=RecommendationResponse)
def get_current_recommendations(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    user_id: str = "guest",
    count: int | None = None,
) -> RecommendationResponse:
    """Resolve live weather for (lat, lon) and the current local time bucket, then recommend."""
    t0 = time.monotonic()
    settings = get_settings()
    try:
        engine = create_engine(user_id, settings=settings, catalog=_catalog(), profile_store=_profile_store())
        with record_cache_stats() as stats:
            weather, bucket, results = engine.generate_for_location(
                _weather_client(),
                lat=lat,
                lon=lon,
                count=count if count is not None else settings.scoring.default_count,
            )
        return _build_response(
            settings=settings,
            user_id=user_id,
            weather=weather,
            time_of_day=bucket,
            results=results,
            stats=stats,
            t0=t0,
        )
    except (CatalogUnavailable, WeatherUnavailable) as e:
        raise _upstream_error(e) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail={"code": "VALIDATION_ERROR", "message": str(e)}) from e
    except Exception as e:
        raise HTTPException(status_code=500, detail={"code": "INTERNAL_ERROR", "message": str(e)}) from e
