"""
Small explainability formatting helpers.

- `build_reason`: the short "why" string shown next to a recommendation
- `category_label`: display label/style for each recommendation type
- `one_line_summary`: compact breakdown used by the CLI
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import assert_never

from runscore.domain.models import ComponentName, RecommendationType, ScoreBreakdown

# Fixed order used to break ties between equally strong components.
COMPONENT_ORDER: tuple[ComponentName, ...] = ("weather", "time", "preference", "popularity")

_REASON_TEMPLATES: dict[ComponentName, str] = {
    "weather": "Well suited to current conditions",
    "time": "Great for this time of day",
    "preference": "Matches your running preferences",
    "popularity": "Highly rated by other runners",
}


def build_reason(scores: dict[ComponentName, float], *, min_spread: float) -> str:
    """Name the dominant component, or return "" when no component clearly stands out."""
    values = [scores[name] for name in COMPONENT_ORDER]
    if max(values) - min(values) <= min_spread:
        return ""
    dominant = max(COMPONENT_ORDER, key=lambda name: (scores[name], -COMPONENT_ORDER.index(name)))
    return _REASON_TEMPLATES[dominant]


@dataclass(frozen=True)
class CategoryLabel:
    label: str
    style: str


def category_label(kind: RecommendationType) -> CategoryLabel:
    match kind:
        case RecommendationType.PERFECT_MATCH:
            return CategoryLabel(label="Perfect match", style="green")
        case RecommendationType.POPULAR:
            return CategoryLabel(label="Popular route", style="blue")
        case RecommendationType.CHALLENGE:
            return CategoryLabel(label="Challenge", style="red")
        case RecommendationType.EXPLORATION:
            return CategoryLabel(label="Explore something new", style="purple")
        case RecommendationType.SAFE_NIGHT:
            return CategoryLabel(label="Safe at night", style="indigo")
        case RecommendationType.GENERAL:
            return CategoryLabel(label="Recommended", style="gray")
        case _:
            assert_never(kind)


def one_line_summary(breakdown: ScoreBreakdown) -> str:
    """Render a compact single-line summary for a score breakdown."""
    parts = [f"total={breakdown.total_score:.3f}"]
    for comp in breakdown.components:
        parts.append(f"{comp.name}={comp.score:.3f} (w={comp.weight:.2f})")
    return " | ".join(parts)
