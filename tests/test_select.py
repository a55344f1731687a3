import pytest

from runscore.core.errors import InvalidRequest
from runscore.domain.models import Recommendation, RecommendationType, Route, ScoreBreakdown
from runscore.recommender.select import diversity_cap, select

POPULAR = RecommendationType.POPULAR
GENERAL = RecommendationType.GENERAL


def _rec(route_id: str, confidence: float, kind: RecommendationType = GENERAL, *, rating: float = 4.0) -> Recommendation:
    route = Route(
        id=route_id,
        name=route_id,
        distance_km=5.0,
        estimated_duration_min=30,
        difficulty_level="moderate",
        avg_rating=rating,
        total_ratings=30,
    )
    return Recommendation(
        route=route,
        recommendation_type=kind,
        confidence_score=confidence,
        breakdown=ScoreBreakdown(route_id=route_id, total_score=confidence, components=[]),
    )


def _ids(recs):
    return [r.route.id for r in recs]


def test_orders_by_confidence_then_rating_then_id():
    scored = [
        _rec("c", 0.7, rating=4.0),
        _rec("b", 0.7, rating=4.0),
        _rec("a", 0.7, rating=4.5),
        _rec("d", 0.9, rating=3.0),
    ]
    assert _ids(select(scored, 4)) == ["d", "a", "b", "c"]


def test_result_is_bounded_by_count_and_pool():
    scored = [_rec(f"r{i}", 0.5 + i / 100) for i in range(3)]
    assert len(select(scored, 2)) == 2
    assert len(select(scored, 10)) == 3
    assert select([], 5) == []


@pytest.mark.parametrize("count", [0, -1, True, 2.5])
def test_rejects_non_positive_or_non_integer_count(count):
    with pytest.raises(InvalidRequest):
        select([_rec("a", 0.5)], count)


def test_diversity_cap_limits_a_single_category():
    popular = [_rec(f"p{i}", 0.9 - i / 100, POPULAR) for i in range(8)]
    others = [_rec(f"g{i}", 0.5 - i / 100, GENERAL) for i in range(3)]

    result = select(popular + others, 6)

    assert diversity_cap(6) == 3
    assert sum(r.recommendation_type is POPULAR for r in result) == 3
    assert _ids(result) == ["p0", "p1", "p2", "g0", "g1", "g2"]


def test_diversity_cap_relaxes_when_pool_cannot_fill_quota():
    only_popular = [_rec(f"p{i}", 0.9 - i / 100, POPULAR) for i in range(8)]
    assert _ids(select(only_popular, 6)) == ["p0", "p1", "p2", "p3", "p4", "p5"]

    # One alternative: it is kept, the rest of the quota is popular, output stays in rank order.
    mixed = only_popular + [_rec("g0", 0.95, GENERAL)]
    result = select(mixed, 6)
    assert len(result) == 6
    assert _ids(result) == ["g0", "p0", "p1", "p2", "p3", "p4"]


def test_odd_count_rounds_cap_up():
    popular = [_rec(f"p{i}", 0.9 - i / 100, POPULAR) for i in range(5)]
    others = [_rec(f"g{i}", 0.5 - i / 100) for i in range(5)]
    result = select(popular + others, 5)
    assert sum(r.recommendation_type is POPULAR for r in result) == 3
