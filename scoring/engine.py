"""
Scoring Engine — Computes the capped, weighted risk score from a scenario state.

Scoring model:
  - Rule groups run in fixed order: baseline, control, zone, synergy.
  - Each matched rule adds its delta to the running subscores and records
    an explanation.
  - Subscores are clamped to their caps, combined with the configured
    weights, and the total is clamped.
  - Explanations whose delta sums to zero are dropped (baseline always stays).

The engine is pure: no I/O, no clock, no randomness. Identical inputs give
identical results, including explanation order.
"""

from __future__ import annotations

import logging
from typing import Collection, Mapping, Optional, Sequence

from ..scenarios.models import ControlValue, Device
from .models import Explanation, ScoreResult
from .rule_groups import ALL_RULE_GROUPS, ScoringContext
from .rules import TOTAL_CAP, ScoringRules

logger = logging.getLogger("triage_planner.scoring")


def calculate_score(
    rules: ScoringRules,
    devices: Sequence[Device],
    device_zones: Mapping[str, str],
    controls: Mapping[str, ControlValue],
    flagged_devices: Optional[Collection[str]] = None,
) -> ScoreResult:
    """
    Score a scenario state against a rule set.

    Args:
        rules: Parsed rule document.
        devices: Devices in the scenario, in display order.
        device_zones: Current placement, deviceId → zone id.
        controls: Current control values; absent controls never match.
        flagged_devices: Device ids the trainee marked for investigation.

    Returns:
        ScoreResult with clamped subscores, clamped total and the filtered
        explanation trail.
    """
    ctx = ScoringContext(
        rules=rules,
        devices=tuple(devices),
        device_zones=dict(device_zones),
        controls=dict(controls),
        flagged_devices=frozenset(flagged_devices or ()),
    )

    subscores: dict[str, float] = {name: 0.0 for name in rules.score_model.subscores}
    explanations: list[Explanation] = []

    for cls in ALL_RULE_GROUPS:
        group = cls()
        for explanation in group.evaluate(ctx):
            _apply_delta(subscores, explanation.delta)
            explanations.append(explanation)

    # --- Clamp subscores ---
    caps = rules.score_model.caps
    for name, value in subscores.items():
        cap = caps.get(name)
        if cap is not None:
            subscores[name] = cap.clamp(value)

    # --- Weighted total ---
    total = weighted_total(subscores, rules.score_model.weights)
    total_cap = caps.get(TOTAL_CAP)
    if total_cap is not None:
        total = total_cap.clamp(total)

    kept = tuple(e for e in explanations if e.is_baseline or e.total_delta != 0)
    logger.debug(
        f"Scored {len(ctx.devices)} devices: total={total:.2f}, "
        f"{len(kept)}/{len(explanations)} explanations kept"
    )
    return ScoreResult(subscores=subscores, total=total, explanations=kept)


def _apply_delta(subscores: dict[str, float], delta: Mapping[str, float]):
    """Add a delta in place. Keys outside the score model are ignored."""
    for key, value in delta.items():
        if key in subscores:
            subscores[key] += value


# Used when the rule set gives no (or a zero) weight for a subscore
DEFAULT_WEIGHTS = {
    "exposure": 0.5,
    "credentialAccount": 0.3,
    "hygiene": 0.2,
}


def weighted_total(subscores: Mapping[str, float], weights: Mapping[str, float]) -> float:
    """Sum of subscore × weight, in subscore order."""
    total = 0.0
    for name, value in subscores.items():
        weight = weights.get(name) or DEFAULT_WEIGHTS.get(name, 0.0)
        total += value * weight
    return total
