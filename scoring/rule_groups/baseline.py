"""
Baseline rule group — seeds every evaluation with the configured baseline vector.
"""

from __future__ import annotations

from ..models import BASELINE_RULE_ID
from .base import BaseRuleGroup, ScoringContext

BASELINE_EXPLAIN = "Starting baseline risk scores"


class BaselineRules(BaseRuleGroup):
    name = "baseline"
    description = "Unconditional starting scores"

    def _evaluate(self, ctx: ScoringContext):
        # Recorded even when every value is zero
        self.add_explanation(BASELINE_RULE_ID, ctx.rules.baseline, BASELINE_EXPLAIN)
