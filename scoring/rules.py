"""
Scoring rule models — typed view of the versioned ``scoringRules.json`` document.

Each rule category has its own condition type. Synergy conditions are a list
of tagged atoms, one class per atom kind, so the evaluator in
``conditions.py`` can dispatch on the class instead of probing for optional
JSON fields. The JSON shape is unchanged; ``ScoringRules.from_dict`` does the
translation once at load time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Union

from ..config import SORT_ABSOLUTE, DEFAULT_EXPLAIN_ITEMS
from ..scenarios.models import ControlValue

SUBSCORE_NAMES = ["exposure", "credentialAccount", "hygiene"]
TOTAL_CAP = "total"


class RulesFormatError(ValueError):
    """Raised when a rule document is structurally unusable."""


# ---------------------------------------------------------------------------
# Score model
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Cap:
    min: float
    max: float

    def clamp(self, value: float) -> float:
        return max(self.min, min(self.max, value))


@dataclass
class ScoreModel:
    subscores: list[str] = field(default_factory=lambda: list(SUBSCORE_NAMES))
    weights: dict[str, float] = field(default_factory=dict)
    caps: dict[str, Cap] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "ScoreModel":
        caps = {}
        for name, bounds in data.get("caps", {}).items():
            try:
                caps[name] = Cap(min=bounds["min"], max=bounds["max"])
            except (KeyError, TypeError) as e:
                raise RulesFormatError(f"Cap '{name}' must have min and max") from e
        return cls(
            subscores=list(data.get("subscores", SUBSCORE_NAMES)),
            weights=dict(data.get("weights", {})),
            caps=caps,
        )


@dataclass
class ExplainPanel:
    max_items: int = DEFAULT_EXPLAIN_ITEMS
    sort_order: str = SORT_ABSOLUTE
    include: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "ExplainPanel":
        return cls(
            max_items=data.get("maxItems", DEFAULT_EXPLAIN_ITEMS),
            sort_order=data.get("sortOrder", SORT_ABSOLUTE),
            include=list(data.get("include", [])),
        )


# ---------------------------------------------------------------------------
# Conditions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ZoneCondition:
    """Per-device condition. Every atom that is set must hold."""
    device_has_flag: Optional[str] = None
    device_type_is: Optional[str] = None
    zone_is: Optional[str] = None
    zone_not: Optional[str] = None
    zone_in: Optional[tuple[str, ...]] = None
    flagged_for_investigation: Optional[bool] = None
    not_flagged_for_investigation: Optional[bool] = None

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, name) is None for name in self.__dataclass_fields__)

    @classmethod
    def from_dict(cls, data: dict) -> "ZoneCondition":
        zone_in = data.get("zoneIn")
        return cls(
            device_has_flag=data.get("deviceHasFlag"),
            device_type_is=data.get("deviceTypeIs"),
            zone_is=data.get("zoneIs"),
            zone_not=data.get("zoneNot"),
            zone_in=tuple(zone_in) if zone_in is not None else None,
            flagged_for_investigation=data.get("flaggedForInvestigation"),
            not_flagged_for_investigation=data.get("notFlaggedForInvestigation"),
        )


@dataclass(frozen=True)
class ControlCondition:
    """Exact match of one control value. A missing control never matches."""
    control: Optional[str]
    value: Optional[ControlValue]

    @classmethod
    def from_dict(cls, data: dict) -> "ControlCondition":
        return cls(control=data.get("controlIs"), value=data.get("valueIs"))


@dataclass(frozen=True)
class PctOfDevicesWithFlagInZone:
    flag: str
    zone: str
    pct: float


@dataclass(frozen=True)
class CountDevicesWithFlagInZone:
    flag: str
    zone: str
    count: int


@dataclass(frozen=True)
class CountDevicesWithFlag:
    flag: str
    count: int


@dataclass(frozen=True)
class CountUnflaggedDevicesWithFlag:
    flag: str
    count: int


@dataclass(frozen=True)
class UnrecognizedCondition:
    """Entry with no known atom. Evaluates true; reported by the linter."""
    raw: tuple[tuple[str, Any], ...] = ()


SynergyAtom = Union[
    ControlCondition,
    PctOfDevicesWithFlagInZone,
    CountDevicesWithFlagInZone,
    CountDevicesWithFlag,
    CountUnflaggedDevicesWithFlag,
    UnrecognizedCondition,
]


def parse_synergy_atom(data: dict) -> SynergyAtom:
    """Pick the first atom kind present in *data*."""
    if data.get("controlIs") is not None and data.get("valueIs") is not None:
        return ControlCondition(control=data["controlIs"], value=data["valueIs"])

    params = data.get("pctOfDevicesWithFlagInZoneAtLeast")
    if params is not None:
        return PctOfDevicesWithFlagInZone(params["flag"], params["zone"], params["pct"])

    params = data.get("countDevicesWithFlagInZoneAtLeast")
    if params is not None:
        return CountDevicesWithFlagInZone(params["flag"], params["zone"], params["count"])

    params = data.get("countDevicesWithFlagAtLeast")
    if params is not None:
        return CountDevicesWithFlag(params["flag"], params["count"])

    params = data.get("countUnflaggedDevicesWithFlag")
    if params is not None:
        return CountUnflaggedDevicesWithFlag(params["flag"], params["count"])

    return UnrecognizedCondition(raw=tuple(sorted((k, repr(v)) for k, v in data.items())))


@dataclass(frozen=True)
class SynergyCondition:
    """Conjunction of atoms. ``all_of`` is None when the rule has no ``all`` list."""
    all_of: Optional[tuple[SynergyAtom, ...]] = None

    @classmethod
    def from_dict(cls, data: dict) -> "SynergyCondition":
        entries = data.get("all")
        if entries is None:
            return cls(all_of=None)
        return cls(all_of=tuple(parse_synergy_atom(e or {}) for e in entries))


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ZoneRule:
    id: str
    when: ZoneCondition
    add: dict[str, float] = field(default_factory=dict)
    explain: str = ""
    explain_key: Optional[str] = None


@dataclass(frozen=True)
class ControlRule:
    id: str
    when: ControlCondition
    add: dict[str, float] = field(default_factory=dict)
    explain: str = ""
    explain_key: Optional[str] = None


@dataclass(frozen=True)
class SynergyRule:
    id: str
    when: SynergyCondition
    add: dict[str, float] = field(default_factory=dict)
    explain: str = ""
    explain_key: Optional[str] = None


def _rule_fields(data: dict, category: str, condition_cls) -> dict:
    if not isinstance(data, dict) or "id" not in data or not isinstance(data.get("when"), dict):
        raise RulesFormatError(f"{category} entry needs 'id' and a 'when' object: {data!r}")
    try:
        when = condition_cls.from_dict(data["when"])
    except (KeyError, TypeError, AttributeError) as e:
        raise RulesFormatError(f"{category} rule '{data['id']}' has a malformed condition") from e
    return {
        "id": data["id"],
        "when": when,
        "add": dict(data.get("add", {})),
        "explain": data.get("explain", ""),
        "explain_key": data.get("explainKey"),
    }


def _require_list(data: dict, key: str) -> list:
    value = data.get(key)
    if not isinstance(value, list):
        raise RulesFormatError(f"Rule document field '{key}' must be a list")
    return value


@dataclass
class ScoringRules:
    """A complete, versioned rule set."""
    version: str
    score_model: ScoreModel
    baseline: dict[str, float]
    allowed_zones: list[str] = field(default_factory=list)
    zone_rules: list[ZoneRule] = field(default_factory=list)
    control_rules: list[ControlRule] = field(default_factory=list)
    synergy_rules: list[SynergyRule] = field(default_factory=list)
    explain_panel: ExplainPanel = field(default_factory=ExplainPanel)

    @classmethod
    def from_dict(cls, data: dict) -> "ScoringRules":
        """
        Parse a rule document.

        Raises RulesFormatError when a required section is missing or has the
        wrong shape. Partially specified content (missing weights, caps or
        baseline fields) is accepted; the engine applies its defaults.
        """
        if not isinstance(data, dict):
            raise RulesFormatError("Rule document must be a JSON object")
        if not isinstance(data.get("scoreModel"), dict):
            raise RulesFormatError("Rule document is missing 'scoreModel'")
        if not isinstance(data.get("defaults"), dict):
            raise RulesFormatError("Rule document is missing 'defaults'")

        zone_rules = [
            ZoneRule(**_rule_fields(r, "zoneRules", ZoneCondition))
            for r in _require_list(data, "zoneRules")
        ]
        control_rules = [
            ControlRule(**_rule_fields(r, "controlRules", ControlCondition))
            for r in _require_list(data, "controlRules")
        ]
        synergy_rules = [
            SynergyRule(**_rule_fields(r, "synergyRules", SynergyCondition))
            for r in _require_list(data, "synergyRules")
        ]

        defaults = data["defaults"]
        return cls(
            version=str(data.get("version", "")),
            score_model=ScoreModel.from_dict(data["scoreModel"]),
            baseline=dict(defaults.get("baseline", {})),
            allowed_zones=list(defaults.get("allowedZones", [])),
            zone_rules=zone_rules,
            control_rules=control_rules,
            synergy_rules=synergy_rules,
            explain_panel=ExplainPanel.from_dict(data.get("explainPanel", {})),
        )
