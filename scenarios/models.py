"""
Scenario data models — devices, networks, controls, and win conditions.

All models parse from and serialise to the camelCase JSON shape used by the
scenario content files.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Union


DEVICE_TYPES = (
    "router", "laptop", "phone", "tablet", "tv", "speaker",
    "thermostat", "camera", "printer", "iot", "unknown",
)

RISK_FLAGS = (
    "unknown_device",
    "iot_device",
    "visitor_device",
    "trusted_work_device",
)

ControlValue = Union[bool, str]


class ScenarioFormatError(ValueError):
    """Raised when a scenario document is missing required structure."""


@dataclass(frozen=True)
class Device:
    """A simulated device. Immutable; placement lives in a separate mapping."""
    id: str
    type: str
    label: str
    network_id: str                      # Original placement
    ip: Optional[str] = None
    local_id: Optional[str] = None
    risk_flags: frozenset[str] = frozenset()

    def has_flag(self, flag: str) -> bool:
        return flag in self.risk_flags

    @classmethod
    def from_dict(cls, data: dict) -> "Device":
        try:
            return cls(
                id=data["id"],
                type=data["type"],
                label=data["label"],
                network_id=data["networkId"],
                ip=data.get("ip"),
                local_id=data.get("localId"),
                risk_flags=frozenset(data.get("riskFlags", [])),
            )
        except KeyError as e:
            raise ScenarioFormatError(f"Device is missing required field {e}") from e

    def to_dict(self) -> dict:
        out: dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "label": self.label,
            "networkId": self.network_id,
        }
        if self.ip is not None:
            out["ip"] = self.ip
        if self.local_id is not None:
            out["localId"] = self.local_id
        out["riskFlags"] = sorted(self.risk_flags)
        return out


@dataclass(frozen=True)
class Network:
    """A network segment offered by the scenario."""
    id: str
    label: str
    ssid: Optional[str] = None
    security: Optional[str] = None
    subnet: Optional[str] = None
    enabled: bool = True

    @classmethod
    def from_dict(cls, data: dict) -> "Network":
        try:
            return cls(
                id=data["id"],
                label=data["label"],
                ssid=data.get("ssid"),
                security=data.get("security"),
                subnet=data.get("subnet"),
                enabled=data.get("enabled", True),
            )
        except KeyError as e:
            raise ScenarioFormatError(f"Network is missing required field {e}") from e


@dataclass(frozen=True)
class RequiredControl:
    control: str
    value: ControlValue


@dataclass(frozen=True)
class WinConditions:
    """Optional goals a trainee should reach."""
    max_total_risk: Optional[float] = None
    requires: tuple[RequiredControl, ...] = ()

    @property
    def is_empty(self) -> bool:
        return self.max_total_risk is None and not self.requires

    @classmethod
    def from_dict(cls, data: dict) -> "WinConditions":
        return cls(
            max_total_risk=data.get("maxTotalRisk"),
            requires=tuple(
                RequiredControl(control=r["control"], value=r["value"])
                for r in data.get("requires", [])
            ),
        )


@dataclass
class Scenario:
    """A complete training scenario."""
    id: str
    title: str
    environment_type: str
    networks: list[Network] = field(default_factory=list)
    devices: list[Device] = field(default_factory=list)
    initial_controls: dict[str, ControlValue] = field(default_factory=dict)
    environment_notes: str = ""
    learning_objectives: list[str] = field(default_factory=list)
    win_conditions: WinConditions = field(default_factory=WinConditions)

    @classmethod
    def from_dict(cls, data: dict) -> "Scenario":
        """Parse a scenario document."""
        for key in ("id", "title", "environment", "devices"):
            if key not in data:
                raise ScenarioFormatError(f"Scenario is missing required key '{key}'")
        if not isinstance(data["devices"], list):
            raise ScenarioFormatError("Scenario 'devices' must be a list")

        env = data["environment"]
        return cls(
            id=data["id"],
            title=data["title"],
            environment_type=env.get("type", ""),
            environment_notes=env.get("notes", ""),
            networks=[Network.from_dict(n) for n in data.get("networks", [])],
            devices=[Device.from_dict(d) for d in data["devices"]],
            initial_controls=dict(data.get("initialControls", {})),
            learning_objectives=list(data.get("learningObjectives", [])),
            win_conditions=WinConditions.from_dict(data.get("suggestedWinConditions", {})),
        )

    def initial_zones(self) -> dict[str, str]:
        """Device placement as authored (deviceId → networkId)."""
        return {d.id: d.network_id for d in self.devices}

    def get_device(self, device_id: str) -> Optional[Device]:
        for d in self.devices:
            if d.id == device_id:
                return d
        return None

    def summary(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "environment": {"type": self.environment_type},
        }
