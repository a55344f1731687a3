"""
Top-N selection with a category diversity cap.

Candidates are ranked by confidence (desc), then route rating (desc), then route
id (asc), which is a total order. The greedy pass allows at most `ceil(count/2)`
items per recommendation type; when that leaves the result short of what the
candidate pool could supply, the cap is relaxed and the remaining slots are
filled in ranking order.
"""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Sequence

from runscore.core.errors import InvalidRequest
from runscore.domain.models import Recommendation, RecommendationType


def ranking_key(rec: Recommendation) -> tuple[float, float, str]:
    return (-rec.confidence_score, -rec.route.avg_rating, rec.route.id)


def diversity_cap(count: int) -> int:
    return math.ceil(count / 2)


def select(scored: Sequence[Recommendation], count: int) -> list[Recommendation]:
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        raise InvalidRequest(f"count must be a positive integer, got {count!r}")

    ranked = sorted(scored, key=ranking_key)
    quota = min(count, len(ranked))
    cap = diversity_cap(count)

    taken: list[int] = []
    per_type: Counter[RecommendationType] = Counter()
    for i, rec in enumerate(ranked):
        if len(taken) == quota:
            break
        if per_type[rec.recommendation_type] >= cap:
            continue
        taken.append(i)
        per_type[rec.recommendation_type] += 1

    # Relax the cap only when the pool cannot otherwise fill the quota.
    if len(taken) < quota:
        chosen = set(taken)
        for i in range(len(ranked)):
            if len(taken) == quota:
                break
            if i not in chosen:
                taken.append(i)

    return [ranked[i] for i in sorted(taken)]
