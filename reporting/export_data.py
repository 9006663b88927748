"""
Export model — a flat, serialisable snapshot of one scored scenario state.

Every report format renders from the same ``ExportData`` so the numbers in
the JSON, CSV, Markdown and HTML outputs always agree.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional

from ..config import DEFAULT_EXPLAIN_ITEMS, SORT_ABSOLUTE
from ..scenarios.goals import evaluate_goals
from ..scenarios.models import ControlValue, Scenario
from ..scenarios.registry import ControlsRegistry
from ..scenarios.zones import GUEST, INVESTIGATE, IOT, MAIN, zone_label
from ..scoring.formatter import delta_breakdown, impact_label, risk_level
from ..scoring.models import Explanation, ScoreResult
from ..scoring.ranking import rank_explanations

ExplanationFormatter = Callable[[Explanation], str]


def _round1(value: float) -> float:
    """One decimal place, halves rounded up."""
    return math.floor(value * 10 + 0.5) / 10


@dataclass
class DevicePlacement:
    device_id: str
    device_name: str
    device_type: str
    original_zone: str
    current_zone: str
    was_moved: bool
    risk_flags: list[str] = field(default_factory=list)

    @property
    def current_zone_label(self) -> str:
        return zone_label(self.current_zone)

    @property
    def original_zone_label(self) -> str:
        return zone_label(self.original_zone)

    def to_dict(self) -> dict:
        return {
            "deviceId": self.device_id,
            "deviceName": self.device_name,
            "deviceType": self.device_type,
            "originalZone": self.original_zone,
            "currentZone": self.current_zone,
            "wasMoved": self.was_moved,
            "riskFlags": list(self.risk_flags),
        }


@dataclass
class ExportSummary:
    total_devices: int = 0
    devices_in_main: int = 0
    devices_in_guest: int = 0
    devices_in_iot: int = 0
    devices_in_investigate: int = 0
    devices_moved: int = 0
    controls_enabled: int = 0
    controls_total: int = 0

    def to_dict(self) -> dict:
        return {
            "totalDevices": self.total_devices,
            "devicesInMainZone": self.devices_in_main,
            "devicesInGuestZone": self.devices_in_guest,
            "devicesInIoTZone": self.devices_in_iot,
            "devicesInInvestigateZone": self.devices_in_investigate,
            "devicesMoved": self.devices_moved,
            "controlsEnabled": self.controls_enabled,
            "controlsTotal": self.controls_total,
        }


@dataclass
class DriverRow:
    """One ranked explanation, ready for display."""
    rule_id: str
    text: str
    total_delta: float
    breakdown: list[str]
    impact: str

    def to_dict(self) -> dict:
        return {
            "ruleId": self.rule_id,
            "text": self.text,
            "totalDelta": self.total_delta,
            "breakdown": list(self.breakdown),
            "impact": self.impact,
        }


@dataclass
class ExportData:
    """Snapshot of a scored state for reporting."""
    exported_at: str
    scenario_id: str
    scenario_title: str
    environment: str
    device_placements: list[DevicePlacement]
    control_states: dict[str, ControlValue]
    total: float
    subscores: dict[str, float]
    explanations: list[str]
    summary: ExportSummary
    risk_level: str
    drivers: list[DriverRow] = field(default_factory=list)
    goals: Optional[dict[str, Any]] = None

    def to_dict(self) -> dict:
        return {
            "exportedAt": self.exported_at,
            "scenarioId": self.scenario_id,
            "scenarioTitle": self.scenario_title,
            "environment": self.environment,
            "devicePlacements": [p.to_dict() for p in self.device_placements],
            "controlStates": dict(self.control_states),
            "scoring": {
                "total": self.total,
                "riskLevel": self.risk_level,
                "subscores": dict(self.subscores),
                "explanations": list(self.explanations),
                "drivers": [d.to_dict() for d in self.drivers],
            },
            "summary": self.summary.to_dict(),
            "goals": self.goals,
        }


def count_enabled_controls(controls: Mapping[str, Optional[ControlValue]]) -> tuple[int, int]:
    """
    (enabled, total) over controls that have a value.

    Booleans count when true; ``wifiSecurity`` counts unless it is ``OPEN``.
    Other string controls are counted in the total only.
    """
    enabled = 0
    total = 0
    for key, value in controls.items():
        if value is None:
            continue
        total += 1
        if isinstance(value, bool):
            enabled += int(value)
        elif key == "wifiSecurity" and value != "OPEN":
            enabled += 1
    return enabled, total


def generate_export_data(
    scenario: Scenario,
    device_zones: Mapping[str, str],
    controls: Mapping[str, ControlValue],
    result: ScoreResult,
    format_explanation: Optional[ExplanationFormatter] = None,
    sort_order: Optional[str] = SORT_ABSOLUTE,
    max_items: Optional[int] = DEFAULT_EXPLAIN_ITEMS,
    registry: Optional[ControlsRegistry] = None,
) -> ExportData:
    """
    Build the export snapshot. Scores are rounded to one decimal place.

    A device with no entry in *device_zones* is reported in its authored
    network but counted as moved.
    """
    fmt = format_explanation or (lambda exp: exp.explain)

    placements = []
    for device in scenario.devices:
        current = device_zones.get(device.id) or device.network_id
        placements.append(DevicePlacement(
            device_id=device.id,
            device_name=device.label,
            device_type=device.type,
            original_zone=device.network_id,
            current_zone=current,
            was_moved=device_zones.get(device.id) != device.network_id,
            risk_flags=sorted(device.risk_flags),
        ))

    zone_counts = {MAIN: 0, GUEST: 0, IOT: 0, INVESTIGATE: 0}
    for p in placements:
        if p.current_zone in zone_counts:
            zone_counts[p.current_zone] += 1

    enabled, total_controls = count_enabled_controls(controls)
    summary = ExportSummary(
        total_devices=len(scenario.devices),
        devices_in_main=zone_counts[MAIN],
        devices_in_guest=zone_counts[GUEST],
        devices_in_iot=zone_counts[IOT],
        devices_in_investigate=zone_counts[INVESTIGATE],
        devices_moved=sum(1 for p in placements if p.was_moved),
        controls_enabled=enabled,
        controls_total=total_controls,
    )

    drivers = [
        DriverRow(
            rule_id=ranked.rule_id,
            text=fmt(ranked.explanation),
            total_delta=_round1(ranked.total_delta),
            breakdown=delta_breakdown(ranked.explanation.delta),
            impact=impact_label(ranked.total_delta),
        )
        for ranked in rank_explanations(result.explanations, sort_order, max_items)
    ]

    goals = evaluate_goals(scenario, result.total, controls, registry)

    return ExportData(
        exported_at=datetime.now(timezone.utc).isoformat(),
        scenario_id=scenario.id,
        scenario_title=scenario.title,
        environment=scenario.environment_type,
        device_placements=placements,
        control_states={k: v for k, v in controls.items() if v is not None},
        total=_round1(result.total),
        subscores={k: _round1(v) for k, v in result.subscores.items()},
        explanations=[fmt(exp) for exp in result.explanations],
        summary=summary,
        risk_level=risk_level(result.total),
        drivers=drivers,
        goals=goals.to_dict() if goals.applicable else None,
    )
