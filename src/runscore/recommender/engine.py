from __future__ import annotations

# This module is the "orchestrator" for the recommendation pipeline.
# It wires together:
# - the route catalog (which routes exist)
# - the preference store (what this user likes, if anything)
# - per-route scoring (weather/time/preference/popularity -> confidence + category)
# - top-N selection with a diversity cap
#
# Design goals:
# - One engine per user; the user binding never changes after construction.
# - No cross-request state: identical inputs always give identical, ordered output.
# - Personalization is optional: profile failures degrade to "guest" instead of failing.

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

from runscore.catalog.loader import JsonRouteCatalog
from runscore.config.settings import Settings, get_settings
from runscore.core.errors import CatalogUnavailable, InvalidRequest
from runscore.core.time import local_hour
from runscore.domain.models import (
    PreferenceProfile,
    Recommendation,
    Route,
    TimeOfDay,
    WeatherContext,
    parse_time_of_day,
    time_of_day_for_hour,
)
from runscore.profiles.store import JsonProfileStore
from runscore.recommender.select import select
from runscore.scoring.route_scorer import effective_weights, score_route

logger = logging.getLogger(__name__)


def _validate_count(count: int) -> int:
    # bool is an int subclass; `True` is not a meaningful count.
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        raise InvalidRequest(f"count must be a positive integer, got {count!r}")
    return count


class RecommendationEngine:
    """Generates ranked route recommendations for one bound user."""

    def __init__(self, user_id: str, *, settings: Settings, catalog, profile_store):
        self._user_id = user_id
        self._settings = settings
        self._catalog = catalog
        self._profile_store = profile_store

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def settings(self) -> Settings:
        return self._settings

    def _load_profile(self) -> PreferenceProfile | None:
        try:
            return self._profile_store.load_profile(self._user_id)
        except Exception as e:
            # Personalization is an enhancement; never fail a request because of it.
            logger.warning("Profile lookup failed for %s; treating as guest: %s", self._user_id, e)
            return None

    def _list_routes(self) -> list[Route]:
        try:
            return list(self._catalog.list_eligible_routes())
        except CatalogUnavailable:
            raise
        except Exception as e:
            raise CatalogUnavailable(f"Route catalog read failed: {e}") from e

    def _load_inputs(self) -> tuple[PreferenceProfile | None, list[Route]]:
        # Both reads are independent and read-only, so they run side by side.
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="runscore-io") as pool:
            profile_future = pool.submit(self._load_profile)
            routes_future = pool.submit(self._list_routes)
            routes = routes_future.result()
            profile = profile_future.result()
        return profile, routes

    def generate_recommendations(
        self, weather: WeatherContext, time_of_day: TimeOfDay | str, count: int
    ) -> list[Recommendation]:
        """Score the catalog for the current context and return up to `count` recommendations."""
        t0 = time.monotonic()

        # ---- Step 1: Validate before any I/O ----
        count = _validate_count(count)
        bucket = parse_time_of_day(time_of_day)
        if not isinstance(weather, WeatherContext):
            raise InvalidRequest("weather must be a WeatherContext snapshot")

        # ---- Step 2: Load profile + catalog (catalog failure is fatal) ----
        profile, routes = self._load_inputs()
        if not routes:
            logger.info("Empty route catalog for user=%s; nothing to recommend", self._user_id)
            return []

        # ---- Step 3: Hard-exclude disliked routes before scoring ----
        disliked = set(profile.disliked_route_ids) if profile is not None else set()
        candidates = [r for r in routes if r.id not in disliked]

        # ---- Step 4: Score every candidate (pure per-route function) ----
        weights = effective_weights(self._settings)
        scored = [
            score_route(
                route,
                weather=weather,
                time_of_day=bucket,
                profile=profile,
                settings=self._settings,
                weights=weights,
            )
            for route in candidates
        ]

        # ---- Step 5: Rank + diversity-capped top-N (count is clamped to the pool) ----
        selected = select(scored, count)

        logger.info(
            "Recommendations user=%s time=%s advisory=%s candidates=%d excluded=%d returned=%d in %dms",
            self._user_id,
            bucket.value,
            weather.advisory_kind,
            len(candidates),
            len(routes) - len(candidates),
            len(selected),
            int((time.monotonic() - t0) * 1000),
        )
        return selected

    def generate_for_location(
        self, weather_client, *, lat: float, lon: float, count: int, now: datetime | None = None
    ) -> tuple[WeatherContext, TimeOfDay, list[Recommendation]]:
        """Resolve live weather and the local time bucket, then recommend.

        `WeatherUnavailable` from the client propagates unchanged.
        """
        _validate_count(count)
        bucket = time_of_day_for_hour(local_hour(self._settings.app.timezone, now))
        weather = weather_client.current_weather(lat=lat, lon=lon)
        return weather, bucket, self.generate_recommendations(weather, bucket, count)


def create_engine(
    user_id: str,
    *,
    settings: Settings | None = None,
    catalog=None,
    profile_store=None,
) -> RecommendationEngine:
    """Bind `user_id` to a new engine; collaborators default to the configured JSON files."""
    settings = settings or get_settings()
    if catalog is None:
        catalog = JsonRouteCatalog(settings.catalog.path)
    if profile_store is None:
        profile_store = JsonProfileStore(settings.profiles.path, guest_prefix=settings.profiles.guest_prefix)
    return RecommendationEngine(user_id, settings=settings, catalog=catalog, profile_store=profile_store)
