"""
Scenario goals — checks a scored state against the scenario's suggested win conditions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional

from ..scoring.conditions import control_value_equals
from .models import ControlValue, Scenario
from .registry import ControlsRegistry, applicable_requirements

CONTROL_LABELS = {
    "wifiSecurity": "Wi-Fi Security",
    "strongWifiPassword": "Strong Wi-Fi Password",
    "guestNetworkEnabled": "Guest Network",
    "iotNetworkEnabled": "IoT Network",
    "mfaEnabled": "MFA",
    "autoUpdatesEnabled": "Auto Updates",
    "defaultPasswordsAddressed": "Default Passwords Changed",
}


def goal_text(control: str, required: ControlValue, label: Optional[str] = None) -> str:
    label = label or CONTROL_LABELS.get(control, control)
    if isinstance(required, bool):
        return f"Enable {label}" if required else f"Disable {label}"
    return f"Set {label} to {required}"


@dataclass(frozen=True)
class RequirementStatus:
    control: str
    goal: str
    required_value: ControlValue
    current_value: Optional[ControlValue]
    met: bool

    def to_dict(self) -> dict:
        return {
            "control": self.control,
            "goal": self.goal,
            "requiredValue": self.required_value,
            "currentValue": self.current_value,
            "met": self.met,
        }


@dataclass(frozen=True)
class GoalStatus:
    score_target: Optional[float]
    score_achieved: bool
    requirements: list[RequirementStatus] = field(default_factory=list)
    applicable: bool = True

    @property
    def complete(self) -> bool:
        if not self.applicable:
            return False
        if self.score_target is not None and not self.score_achieved:
            return False
        return all(r.met for r in self.requirements)

    def to_dict(self) -> dict:
        return {
            "applicable": self.applicable,
            "scoreTarget": self.score_target,
            "scoreAchieved": self.score_achieved,
            "requirements": [r.to_dict() for r in self.requirements],
            "complete": self.complete,
        }


def evaluate_goals(
    scenario: Scenario,
    total: float,
    controls: Mapping[str, ControlValue],
    registry: Optional[ControlsRegistry] = None,
) -> GoalStatus:
    """
    Compare the current total and controls against the scenario's goals.

    With a controls registry, requirements on controls the scenario's
    environment does not offer are left out, and goal text uses the
    registry's control labels.
    """
    conditions = scenario.win_conditions
    if conditions.is_empty:
        return GoalStatus(score_target=None, score_achieved=False, applicable=False)

    target = conditions.max_total_risk
    requirements = [
        RequirementStatus(
            control=req.control,
            goal=goal_text(req.control, req.value, registry.label(req.control) if registry else None),
            required_value=req.value,
            current_value=controls.get(req.control),
            met=control_value_equals(controls.get(req.control), req.value),
        )
        for req in applicable_requirements(conditions.requires, registry, scenario.environment_type)
    ]
    return GoalStatus(
        score_target=target,
        score_achieved=target is not None and total <= target,
        requirements=requirements,
    )
