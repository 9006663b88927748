"""
Explanation ranking & aggregation — derived views over ``ScoreResult.explanations``.

None of these re-run scoring. All sorts are stable so ties keep evaluation
order. Signs are never flipped here: negative totals reduce risk.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from ..config import (
    DEFAULT_EXPLAIN_ITEMS,
    DEFAULT_TOP_DRIVERS,
    SORT_ABSOLUTE,
    SORT_INCREASE,
    SORT_REDUCTION,
    SORT_ORDERS,
)
from .models import Explanation

logger = logging.getLogger("triage_planner.scoring.ranking")

_SORT_KEYS = {
    SORT_ABSOLUTE: lambda r: -abs(r.total_delta),
    SORT_INCREASE: lambda r: -r.total_delta,
    SORT_REDUCTION: lambda r: r.total_delta,
}


@dataclass(frozen=True)
class RankedExplanation:
    """An explanation paired with its summed delta."""
    explanation: Explanation
    total_delta: float

    @property
    def rule_id(self) -> str:
        return self.explanation.rule_id

    @property
    def reduces_risk(self) -> bool:
        return self.total_delta < 0

    @property
    def increases_risk(self) -> bool:
        return self.total_delta > 0


def subscore_totals(explanations: Iterable[Explanation]) -> dict[str, float]:
    """Net delta per subscore key across all explanations, baseline included."""
    totals: dict[str, float] = {}
    for exp in explanations:
        for key, value in exp.delta.items():
            totals[key] = totals.get(key, 0) + value
    return totals


def resolve_sort_order(sort_order: Optional[str]) -> str:
    if sort_order in SORT_ORDERS:
        return sort_order
    if sort_order:
        logger.warning(f"Unknown sort order '{sort_order}', using {SORT_ABSOLUTE}")
    return SORT_ABSOLUTE


def rank_explanations(
    explanations: Iterable[Explanation],
    sort_order: Optional[str] = SORT_ABSOLUTE,
    max_items: Optional[int] = DEFAULT_EXPLAIN_ITEMS,
) -> list[RankedExplanation]:
    """
    Order explanations for display.

    The baseline entry and zero-total entries are dropped. ``max_items=None``
    returns the full list.
    """
    ranked = [
        RankedExplanation(explanation=exp, total_delta=exp.total_delta)
        for exp in explanations
        if not exp.is_baseline and exp.total_delta != 0
    ]
    ranked.sort(key=_SORT_KEYS[resolve_sort_order(sort_order)])
    if max_items is not None:
        ranked = ranked[:max_items]
    return ranked


def top_drivers(
    explanations: Iterable[Explanation],
    n: int = DEFAULT_TOP_DRIVERS,
) -> list[RankedExplanation]:
    """The *n* factors with the largest absolute effect."""
    return rank_explanations(explanations, SORT_ABSOLUTE, n)
