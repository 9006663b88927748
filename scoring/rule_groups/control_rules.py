"""
Control rule group — one rule per control state (e.g. Wi-Fi security level, MFA on/off).
"""

from __future__ import annotations

import logging

from ..conditions import control_condition_matches
from .base import BaseRuleGroup, ScoringContext

logger = logging.getLogger("triage_planner.scoring.rule_groups.controls")


class ControlRules(BaseRuleGroup):
    name = "control_rules"
    description = "Security control toggles"

    def _evaluate(self, ctx: ScoringContext):
        for rule in ctx.rules.control_rules:
            if control_condition_matches(rule.when, ctx.controls):
                logger.debug(f"Control rule matched: {rule.id}")
                self.add_explanation(rule.id, rule.add, rule.explain, rule.explain_key)
