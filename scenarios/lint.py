"""
Content linter — authoring-time checks for scenarios and rule sets.

Linting never changes scoring. The engine keeps its permissive defaults
(unknown subscore keys ignored, unrecognized synergy entries treated as
true); the linter is where those situations become visible.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from ..config import SORT_ORDERS
from ..scoring.rules import (
    TOTAL_CAP,
    CountDevicesWithFlag,
    CountDevicesWithFlagInZone,
    CountUnflaggedDevicesWithFlag,
    PctOfDevicesWithFlagInZone,
    ScoringRules,
    UnrecognizedCondition,
)
from .models import DEVICE_TYPES, RISK_FLAGS, Scenario
from .registry import ControlsRegistry
from .zones import ALL_ZONES, NETWORK_ZONES, MAIN

logger = logging.getLogger("triage_planner.lint")


@dataclass(frozen=True)
class LintWarning:
    code: str
    params: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        if not self.params:
            return self.code
        detail = ", ".join(f"{k}={v}" for k, v in self.params.items())
        return f"{self.code} ({detail})"


def _unique(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


def _duplicates(values: list[str]) -> list[str]:
    seen: set[str] = set()
    dupes = []
    for v in values:
        if v in seen:
            dupes.append(v)
        seen.add(v)
    return _unique(dupes)


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------

def lint_scenario(scenario: Scenario, registry: Optional[ControlsRegistry] = None) -> list[LintWarning]:
    """
    Authoring checks for one scenario.

    Control checks need a controls registry and only run when the registry
    defines controls for the scenario's environment type.
    """
    warnings: list[LintWarning] = []
    w = warnings.append

    network_ids = [n.id for n in scenario.networks]
    if MAIN not in network_ids:
        w(LintWarning("missingMainNetwork"))

    unknown = _unique([i for i in network_ids if i not in NETWORK_ZONES])
    if unknown:
        w(LintWarning("unknownNetworkIds", {"ids": ", ".join(unknown)}))

    dupes = _duplicates(network_ids)
    if dupes:
        w(LintWarning("duplicateNetworkIds", {"ids": ", ".join(dupes)}))

    invalid_network = [d.id for d in scenario.devices if d.network_id not in NETWORK_ZONES]
    if invalid_network:
        w(LintWarning("deviceInvalidNetwork", {"count": len(invalid_network)}))

    missing_network = [d.id for d in scenario.devices if d.network_id not in network_ids]
    if missing_network:
        w(LintWarning("deviceNetworkMissing", {"count": len(missing_network)}))

    bad_types = _unique([d.type for d in scenario.devices if d.type not in DEVICE_TYPES])
    if bad_types:
        w(LintWarning("deviceTypeInvalid", {"types": ", ".join(bad_types)}))

    bad_flags = _unique([
        f for d in scenario.devices for f in sorted(d.risk_flags) if f not in RISK_FLAGS
    ])
    if bad_flags:
        w(LintWarning("deviceFlagInvalid", {"flags": ", ".join(bad_flags)}))

    if registry is not None:
        warnings.extend(_lint_controls(scenario, registry))

    return warnings


def _lint_controls(scenario: Scenario, registry: ControlsRegistry) -> list[LintWarning]:
    definitions = registry.for_environment(scenario.environment_type)
    if not definitions:
        return []
    applicable = {c.id for c in definitions}
    controls = scenario.initial_controls

    warnings: list[LintWarning] = []
    w = warnings.append

    missing = [c.id for c in definitions if controls.get(c.id) is None]
    if missing:
        w(LintWarning("controlMissing", {"count": len(missing)}))

    invalid = [
        c.id for c in definitions
        if controls.get(c.id) is not None and not c.accepts(controls[c.id])
    ]
    if invalid:
        w(LintWarning("controlInvalidValue", {"count": len(invalid)}))

    not_applicable = [k for k, v in controls.items() if v is not None and k not in applicable]
    if not_applicable:
        w(LintWarning("controlNotApplicable", {"count": len(not_applicable)}))

    win_controls = [r.control for r in scenario.win_conditions.requires if r.control not in applicable]
    if win_controls:
        w(LintWarning("winConditionNotApplicable", {"count": len(win_controls)}))

    return warnings


# ---------------------------------------------------------------------------
# Rule sets
# ---------------------------------------------------------------------------

def _check_flag(flag: str, rule_id: str, warnings: list[LintWarning]):
    if flag not in RISK_FLAGS:
        warnings.append(LintWarning("unknownRiskFlag", {"rule": rule_id, "flag": flag}))


def _check_zone(zone: str, rule_id: str, warnings: list[LintWarning]):
    if zone not in ALL_ZONES:
        warnings.append(LintWarning("unknownZone", {"rule": rule_id, "zone": zone}))


def lint_rules(rules: ScoringRules) -> list[LintWarning]:
    warnings: list[LintWarning] = []
    w = warnings.append
    model = rules.score_model
    known = set(model.subscores)

    for name in model.subscores:
        if name not in model.weights:
            w(LintWarning("missingWeight", {"subscore": name}))
        if name not in model.caps:
            w(LintWarning("missingCap", {"subscore": name}))
    if TOTAL_CAP not in model.caps:
        w(LintWarning("missingCap", {"subscore": TOTAL_CAP}))

    all_rules = [
        ("baseline", rules.baseline),
        *((r.id, r.add) for r in rules.control_rules),
        *((r.id, r.add) for r in rules.zone_rules),
        *((r.id, r.add) for r in rules.synergy_rules),
    ]
    for rule_id, add in all_rules:
        for key in add:
            if key not in known:
                w(LintWarning("unknownSubscoreKey", {"rule": rule_id, "key": key}))

    dupes = _duplicates([rid for rid, _ in all_rules[1:]])
    if dupes:
        w(LintWarning("duplicateRuleId", {"ids": ", ".join(dupes)}))

    for rule in rules.zone_rules:
        cond = rule.when
        if cond.is_empty:
            w(LintWarning("emptyZoneCondition", {"rule": rule.id}))
        if cond.device_has_flag is not None:
            _check_flag(cond.device_has_flag, rule.id, warnings)
        for zone in (cond.zone_is, cond.zone_not, *(cond.zone_in or ())):
            if zone is not None:
                _check_zone(zone, rule.id, warnings)

    for rule in rules.synergy_rules:
        if rule.when.all_of is None:
            w(LintWarning("missingSynergyAll", {"rule": rule.id}))
            continue
        for atom in rule.when.all_of:
            if isinstance(atom, UnrecognizedCondition):
                w(LintWarning("unrecognizedSynergyCondition", {"rule": rule.id}))
            if isinstance(atom, (PctOfDevicesWithFlagInZone, CountDevicesWithFlagInZone,
                                 CountDevicesWithFlag, CountUnflaggedDevicesWithFlag)):
                _check_flag(atom.flag, rule.id, warnings)
            if isinstance(atom, (PctOfDevicesWithFlagInZone, CountDevicesWithFlagInZone)):
                _check_zone(atom.zone, rule.id, warnings)

    if rules.explain_panel.sort_order not in SORT_ORDERS:
        w(LintWarning("unknownSortOrder", {"sortOrder": rules.explain_panel.sort_order}))

    logger.debug(f"Rule set {rules.version}: {len(warnings)} lint warnings")
    return warnings
