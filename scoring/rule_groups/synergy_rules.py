"""
Synergy rule group — cross-cutting rules combining controls with device population aggregates.
"""

from __future__ import annotations

import logging

from ..conditions import synergy_condition_holds
from .base import BaseRuleGroup, ScoringContext

logger = logging.getLogger("triage_planner.scoring.rule_groups.synergy")


class SynergyRules(BaseRuleGroup):
    name = "synergy_rules"
    description = "Controls working together with device placement"

    def _evaluate(self, ctx: ScoringContext):
        for rule in ctx.rules.synergy_rules:
            if synergy_condition_holds(
                rule.when,
                ctx.controls,
                ctx.devices,
                ctx.device_zones,
                ctx.flagged_devices,
            ):
                logger.debug(f"Synergy rule matched: {rule.id}")
                self.add_explanation(rule.id, rule.add, rule.explain, rule.explain_key)
