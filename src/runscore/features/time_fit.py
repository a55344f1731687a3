"""
Time-of-day fit feature (route-level).

Each time bucket has a small table of tag -> score (e.g. `well-lit` at night,
`scenic` in daylight). The best matching tag sets the score, every further match
adds a small bonus, and routes with no matching tag stay neutral.
"""

from __future__ import annotations

from runscore.config.settings import Settings
from runscore.domain.models import Route, TimeOfDay
from runscore.scoring.composite import ComponentResult, clamp01


def score_time_fit(route: Route, *, time_of_day: TimeOfDay, settings: Settings) -> ComponentResult:
    cfg = settings.features.time
    table = cfg.tag_scores.get(time_of_day.value, {})

    # Iterate in the route's own tag order so reasons read naturally.
    matched = [t for t in route.features if t in table]
    if matched:
        best = max(float(table[t]) for t in matched)
        score = clamp01(best + cfg.extra_tag_bonus * (len(matched) - 1))
        reasons = [f"Good for {time_of_day.value} running ({', '.join(matched)})"]
    else:
        score = float(cfg.neutral_score)
        reasons = [f"No {time_of_day.value}-specific advantages"]

    night_safety = [t for t in matched if t in cfg.night_safety_tags] if time_of_day is TimeOfDay.NIGHT else []
    details = {
        "time_of_day": time_of_day.value,
        "matched_tags": matched,
        "night_safety_bonus": bool(night_safety),
    }
    return ComponentResult(score=score, details=details, reasons=reasons)
