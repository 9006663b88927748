"""
Controls registry — the security controls a scenario may expose, per environment.

Each control is a ``toggle`` (boolean) or a ``select`` (one of ``options``)
and lists the environment types it applies to.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from .models import ControlValue, RequiredControl, ScenarioFormatError

CONTROL_TOGGLE = "toggle"
CONTROL_SELECT = "select"


@dataclass(frozen=True)
class ControlDefinition:
    id: str
    type: str
    label: str = ""
    options: Optional[tuple[str, ...]] = None
    default: Optional[ControlValue] = None
    category: str = ""
    applicable_scenarios: tuple[str, ...] = ()

    def applies_to(self, environment_type: str) -> bool:
        return environment_type in self.applicable_scenarios

    def accepts(self, value: Any) -> bool:
        """Whether *value* is a valid setting for this control."""
        if self.type == CONTROL_TOGGLE:
            return isinstance(value, bool)
        if self.type == CONTROL_SELECT:
            return self.options is not None and str(value) in self.options
        return True

    @classmethod
    def from_dict(cls, data: dict) -> "ControlDefinition":
        try:
            options = data.get("options")
            return cls(
                id=data["id"],
                type=data["type"],
                label=data.get("label", ""),
                options=tuple(options) if options is not None else None,
                default=data.get("default"),
                category=data.get("category", ""),
                applicable_scenarios=tuple(data.get("applicableScenarios", [])),
            )
        except KeyError as e:
            raise ScenarioFormatError(f"Control definition is missing required field {e}") from e

    def to_dict(self) -> dict:
        out: dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "label": self.label,
            "category": self.category,
            "applicableScenarios": list(self.applicable_scenarios),
        }
        if self.options is not None:
            out["options"] = list(self.options)
        if self.default is not None:
            out["default"] = self.default
        return out


@dataclass
class ControlsRegistry:
    version: str
    controls: list[ControlDefinition] = field(default_factory=list)
    categories: dict[str, dict] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "ControlsRegistry":
        if not isinstance(data.get("controls"), list):
            raise ScenarioFormatError("Controls registry is missing its 'controls' list")
        return cls(
            version=str(data.get("version", "")),
            controls=[ControlDefinition.from_dict(c) for c in data["controls"]],
            categories=dict(data.get("controlCategories", {})),
        )

    def get(self, control_id: str) -> Optional[ControlDefinition]:
        for control in self.controls:
            if control.id == control_id:
                return control
        return None

    def for_environment(self, environment_type: str) -> list[ControlDefinition]:
        if not environment_type:
            return []
        return [c for c in self.controls if c.applies_to(environment_type)]

    def control_ids(self, environment_type: str) -> set[str]:
        return {c.id for c in self.for_environment(environment_type)}

    def label(self, control_id: str) -> Optional[str]:
        control = self.get(control_id)
        return control.label if control and control.label else None


def applicable_requirements(
    requires: Sequence[RequiredControl],
    registry: Optional[ControlsRegistry],
    environment_type: str,
) -> list[RequiredControl]:
    """
    Drop requirements on controls the environment does not offer.

    Without a registry, or when the registry lists nothing for the
    environment, every requirement is kept.
    """
    if registry is None or not environment_type:
        return list(requires)
    allowed = registry.control_ids(environment_type)
    if not allowed:
        return list(requires)
    return [req for req in requires if req.control in allowed]
