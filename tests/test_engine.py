from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from runscore.catalog.loader import InMemoryRouteCatalog
from runscore.config.settings import get_settings
from runscore.core.errors import CatalogUnavailable, InvalidRequest, ProfileUnavailable, WeatherUnavailable
from runscore.domain.models import PreferenceProfile, RecommendationType, Route, TimeOfDay, WeatherContext
from runscore.profiles.store import InMemoryProfileStore
from runscore.recommender.engine import create_engine


def _route(route_id, *, features=(), difficulty="moderate", rating=4.0, ratings=30, distance=5.0) -> Route:
    return Route(
        id=route_id,
        name=route_id,
        distance_km=distance,
        estimated_duration_min=30,
        difficulty_level=difficulty,
        avg_rating=rating,
        total_ratings=ratings,
        features=list(features),
    )


class CountingCatalog:
    def __init__(self, routes):
        self.routes = routes
        self.calls = 0

    def list_eligible_routes(self):
        self.calls += 1
        return list(self.routes)


class FailingCatalog:
    def __init__(self, exc: Exception):
        self.exc = exc

    def list_eligible_routes(self):
        raise self.exc


class FailingProfileStore:
    def load_profile(self, user_id: str):
        raise ProfileUnavailable("profile db down")


class StubWeatherClient:
    def __init__(self, weather: WeatherContext | None = None):
        self.weather = weather

    def current_weather(self, *, lat: float, lon: float) -> WeatherContext:
        if self.weather is None:
            raise WeatherUnavailable("provider timeout")
        return self.weather


HOT_HUMID = WeatherContext(temperature_c=34, description="Hot", icon="☀️", wind_speed_kmh=5, humidity_pct=90)
MILD = WeatherContext(temperature_c=18, wind_speed_kmh=8, humidity_pct=55)

CATALOG = [
    _route("riverside", features=["scenic", "shaded", "flat"], difficulty="easy", rating=4.7, ratings=128),
    _route("stadium", features=["covered", "well-lit", "safe-night"], difficulty="easy", rating=4.3, ratings=64),
    _route("harbour", features=["scenic", "exposed"], rating=4.8, ratings=210, distance=8.0),
    _route("hill", features=["hilly", "trail"], difficulty="hard", rating=4.5, ratings=42, distance=7.5),
    _route("ridge", features=["trail", "exposed"], difficulty="expert", rating=4.9, ratings=12, distance=21.0),
    _route("lanes", features=["shaded"], rating=5.0, ratings=1, distance=6.0),
]


def _engine(user_id="guest", *, routes=CATALOG, profiles=None, **kwargs):
    return create_engine(
        user_id,
        settings=get_settings(),
        catalog=kwargs.pop("catalog", InMemoryRouteCatalog(routes)),
        profile_store=kwargs.pop("profile_store", InMemoryProfileStore(profiles)),
    )


def test_shaded_route_ranks_first_in_heat_despite_lower_rating():
    routes = [
        _route("shaded", features=["shaded", "covered"], rating=4.8, ratings=40),
        _route("exposed", features=["exposed"], rating=4.9, ratings=40),
    ]
    recs = _engine(routes=routes).generate_recommendations(HOT_HUMID, TimeOfDay.AFTERNOON, 2)

    assert [r.route.id for r in recs] == ["shaded", "exposed"]
    shaded, exposed = recs
    assert shaded.breakdown.component("weather").score > exposed.breakdown.component("weather").score


def test_generate_is_deterministic():
    engine = _engine("runner", profiles={"runner": PreferenceProfile(liked_features=["scenic"])})
    first = engine.generate_recommendations(MILD, "morning", 4)
    second = engine.generate_recommendations(MILD, "morning", 4)
    assert [r.model_dump() for r in first] == [r.model_dump() for r in second]


def test_disliked_routes_never_appear():
    # Make the disliked route the strongest candidate by far.
    profile = PreferenceProfile(disliked_route_ids=["stadium"], liked_features=["covered", "well-lit", "safe-night"])
    recs = _engine("runner", profiles={"runner": profile}).generate_recommendations(MILD, TimeOfDay.NIGHT, 10)

    assert "stadium" not in {r.route.id for r in recs}
    assert len(recs) == len(CATALOG) - 1


def test_empty_catalog_returns_empty_list():
    assert _engine(routes=[]).generate_recommendations(MILD, TimeOfDay.EVENING, 3) == []


def test_count_is_clamped_to_catalog_size():
    recs = _engine().generate_recommendations(MILD, TimeOfDay.EVENING, 50)
    assert len(recs) == len(CATALOG)
    assert len({r.route.id for r in recs}) == len(CATALOG)


def test_invalid_requests_are_rejected_before_io():
    catalog = CountingCatalog(CATALOG)
    engine = _engine(catalog=catalog)
    with pytest.raises(InvalidRequest):
        engine.generate_recommendations(MILD, TimeOfDay.MORNING, 0)
    with pytest.raises(InvalidRequest):
        engine.generate_recommendations(MILD, "noon", 3)
    assert catalog.calls == 0


def test_catalog_failure_is_fatal():
    with pytest.raises(CatalogUnavailable):
        _engine(catalog=FailingCatalog(CatalogUnavailable("db down"))).generate_recommendations(MILD, "morning", 3)
    # Unexpected errors from a catalog are surfaced as CatalogUnavailable too.
    with pytest.raises(CatalogUnavailable):
        _engine(catalog=FailingCatalog(RuntimeError("boom"))).generate_recommendations(MILD, "morning", 3)


def test_profile_failure_downgrades_to_guest():
    recs = _engine("runner", profile_store=FailingProfileStore()).generate_recommendations(MILD, "morning", 3)
    assert len(recs) == 3
    assert all(r.breakdown.component("preference").score == 1.0 for r in recs)


def test_diversity_cap_applies_end_to_end():
    # An "easy" preference against expert routes gives preference 0 -> popular routes.
    profile = PreferenceProfile(preferred_difficulty="easy")
    popular = [_route(f"p{i}", difficulty="expert", rating=4.5, ratings=40) for i in range(8)]
    alternatives = [_route(f"x{i}", difficulty="expert", rating=3.0, ratings=40) for i in range(3)]

    engine = _engine("runner", routes=popular + alternatives, profiles={"runner": profile})
    recs = engine.generate_recommendations(MILD, TimeOfDay.MORNING, 6)

    kinds = [r.recommendation_type for r in recs]
    assert len(recs) == 6
    assert kinds.count(RecommendationType.POPULAR) == 3
    assert kinds.count(RecommendationType.EXPLORATION) == 3

    only_popular = _engine("runner", routes=popular, profiles={"runner": profile})
    recs = only_popular.generate_recommendations(MILD, TimeOfDay.MORNING, 6)
    assert [r.recommendation_type for r in recs] == [RecommendationType.POPULAR] * 6


def test_generate_for_location_resolves_weather_and_time_bucket():
    tz = ZoneInfo(get_settings().app.timezone)
    now = datetime(2026, 7, 1, 22, 30, tzinfo=tz)
    weather, bucket, recs = _engine().generate_for_location(
        StubWeatherClient(MILD), lat=31.23, lon=121.47, count=2, now=now
    )
    assert weather == MILD
    assert bucket is TimeOfDay.NIGHT
    assert recs[0].route.id == "stadium"
    assert recs[0].recommendation_type is RecommendationType.SAFE_NIGHT


def test_generate_for_location_propagates_weather_errors():
    with pytest.raises(WeatherUnavailable):
        _engine().generate_for_location(StubWeatherClient(None), lat=0.0, lon=0.0, count=3)


def test_engine_binds_user():
    assert _engine("runner-42").user_id == "runner-42"
