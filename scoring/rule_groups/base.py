"""
Base rule group — Abstract interface for the four rule categories.
Defines the scoring context and the rule group contract.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence

from ...scenarios.models import ControlValue, Device
from ..models import Explanation
from ..rules import ScoringRules

logger = logging.getLogger("triage_planner.scoring.rule_groups")


@dataclass(frozen=True)
class ScoringContext:
    """Read-only snapshot of everything a rule may look at."""
    rules: ScoringRules
    devices: Sequence[Device]
    device_zones: Mapping[str, str]
    controls: Mapping[str, ControlValue]
    flagged_devices: frozenset[str] = field(default_factory=frozenset)

    def zone_of(self, device: Device) -> Optional[str]:
        return self.device_zones.get(device.id)

    def is_flagged(self, device: Device) -> bool:
        return device.id in self.flagged_devices


class BaseRuleGroup(ABC):
    """
    Abstract base class for all rule groups.
    A rule group inspects the context and records one explanation per
    matched rule. The engine applies the deltas in the order recorded.
    """

    name: str = "base"
    description: str = "Base rule group"

    def __init__(self):
        self.explanations: list[Explanation] = []

    def evaluate(self, ctx: ScoringContext) -> list[Explanation]:
        """
        Run the group against a context and return its explanations.
        Subclasses implement _evaluate().
        """
        self.explanations = []
        self._evaluate(ctx)
        logger.debug(f"[{self.name}] {len(self.explanations)} rules matched")
        return self.explanations

    @abstractmethod
    def _evaluate(self, ctx: ScoringContext):
        """Implement rule matching. Record matches via self.add_explanation()."""
        raise NotImplementedError

    def add_explanation(
        self,
        rule_id: str,
        delta: Mapping[str, float],
        explain: str,
        explain_key: Optional[str] = None,
        **explain_params: Any,
    ) -> Explanation:
        """Create and register a new explanation. The delta is copied."""
        explanation = Explanation(
            rule_id=rule_id,
            delta=dict(delta),
            explain=explain,
            explain_key=explain_key,
            explain_params=explain_params,
        )
        self.explanations.append(explanation)
        return explanation
