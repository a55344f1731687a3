# src/runscore/features/preference_match.py
"""
Preference match feature (route-level).

This module implements a simple, explainable "how well does this route fit my
running history" score built from up to three signals:
- distance closeness: linear decay from the midpoint of the preferred range
- difficulty: full credit when equal, partial credit one level away
- features: Jaccard overlap between route tags and liked tags

Important scope note:
- Disliked routes are removed earlier by the recommender (hard filter), never penalized here.
- Guests (no profile) and profiles without any signal get `guest_score` (1.0): a
  missing history must not push routes down.
"""

from __future__ import annotations

from runscore.config.settings import Settings
from runscore.domain.models import PreferenceProfile, Route
from runscore.scoring.composite import ComponentResult, clamp01, normalize_weights


def jaccard(a: frozenset[str] | set[str], b: frozenset[str] | set[str]) -> float:
    """|a ∩ b| / |a ∪ b|, defined as 0.0 when both sets are empty."""
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)


def score_preference_match(
    route: Route, *, profile: PreferenceProfile | None, settings: Settings
) -> ComponentResult:
    cfg = settings.features.preference

    # No personalization data: fail open so guests see the full catalog on its merits.
    if profile is None or not profile.has_signals:
        details = {"profile": "none" if profile is None else "empty", "signals": {}}
        return ComponentResult(score=float(cfg.guest_score), details=details, reasons=["No preference history"])

    signals: dict[str, float] = {}
    reasons: list[str] = []

    # --- Distance: closer to the preferred midpoint is better (linear decay) ---
    if profile.preferred_distance_km is not None:
        midpoint = profile.preferred_distance_km.midpoint
        gap = abs(route.distance_km - midpoint)
        signals["distance"] = clamp01(1 - gap / cfg.distance_decay_km)
        reasons.append(f"{route.distance_km:.1f} km vs. preferred ~{midpoint:.1f} km")

    # --- Difficulty: equality bonus, partial credit for neighbors ---
    if profile.preferred_difficulty is not None:
        steps = abs(int(route.difficulty_level) - int(profile.preferred_difficulty))
        if steps == 0:
            signals["difficulty"] = 1.0
            reasons.append("Matches your preferred difficulty")
        elif steps == 1:
            signals["difficulty"] = float(cfg.adjacent_difficulty_score)
        else:
            signals["difficulty"] = 0.0

    # --- Features: Jaccard overlap with liked tags ---
    liked = frozenset(profile.liked_features)
    if liked:
        signals["features"] = jaccard(route.feature_set, liked)
        shared = [t for t in route.features if t in liked]
        if shared:
            reasons.append("Has features you like: " + ", ".join(shared[:4]))

    # Renormalize over the signals this profile actually carries.
    weights = normalize_weights({k: cfg.component_weights.get(k, 0.0) for k in signals})
    score = clamp01(sum(signals[k] * weights[k] for k in signals))

    if not reasons:
        reasons.append("Weak match with your preferences")

    details = {"profile": "present", "signals": signals, "weights": weights}
    return ComponentResult(score=score, details=details, reasons=reasons)
