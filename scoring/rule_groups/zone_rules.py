"""
Zone rule group — per-device placement rules.

Every match is attributed to the device: the explanation id is
``{ruleId}_{deviceId}`` and the text is prefixed with the device label.
"""

from __future__ import annotations

import logging

from ..conditions import zone_condition_matches
from .base import BaseRuleGroup, ScoringContext

logger = logging.getLogger("triage_planner.scoring.rule_groups.zones")


class ZoneRules(BaseRuleGroup):
    name = "zone_rules"
    description = "Device placement in trust zones"

    def _evaluate(self, ctx: ScoringContext):
        for device in ctx.devices:
            zone = ctx.zone_of(device)
            if not zone:
                # Unplaced devices contribute nothing
                continue
            is_flagged = ctx.is_flagged(device)

            for rule in ctx.rules.zone_rules:
                if not zone_condition_matches(rule.when, device, zone, is_flagged):
                    continue
                logger.debug(f"Zone rule matched: {rule.id} for {device.id} in {zone}")
                self.add_explanation(
                    f"{rule.id}_{device.id}",
                    rule.add,
                    f"{device.label}: {rule.explain}",
                    rule.explain_key,
                    device=device.label,
                    zone=zone,
                )
