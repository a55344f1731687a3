"""Damped popularity: a high average only counts once enough runners have rated the route."""

from __future__ import annotations

from runscore.config.settings import Settings
from runscore.domain.models import Route
from runscore.scoring.composite import ComponentResult, clamp01


def score_popularity(route: Route, *, settings: Settings) -> ComponentResult:
    reference = settings.features.popularity.rating_reference_count
    damping = min(1.0, route.total_ratings / reference)
    # Unrated routes get damping 0, so the neutral rating never boosts confidence.
    score = clamp01(route.effective_rating / 5.0 * damping)

    if route.total_ratings == 0:
        reasons = ["Not rated yet"]
    else:
        reasons = [f"Rated {route.avg_rating:.1f}/5 by {route.total_ratings} runners"]
    details = {
        "avg_rating": route.avg_rating,
        "total_ratings": route.total_ratings,
        "damping": damping,
    }
    return ComponentResult(score=score, details=details, reasons=reasons)
