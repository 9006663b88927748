"""
Scoring data models — structured types for the scoring engine output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

BASELINE_RULE_ID = "baseline"


@dataclass(frozen=True)
class Explanation:
    """One contributing factor: which rule fired and what it added."""
    rule_id: str
    delta: dict[str, float]
    explain: str
    explain_key: Optional[str] = None
    explain_params: dict[str, Any] = field(default_factory=dict)

    @property
    def is_baseline(self) -> bool:
        return self.rule_id == BASELINE_RULE_ID

    @property
    def total_delta(self) -> float:
        """Sum across subscore keys. Negative reduces risk."""
        return sum(self.delta.values())

    def to_dict(self) -> dict:
        out: dict[str, Any] = {
            "ruleId": self.rule_id,
            "delta": dict(self.delta),
            "explain": self.explain,
        }
        if self.explain_key:
            out["explainKey"] = self.explain_key
        if self.explain_params:
            out["explainParams"] = dict(self.explain_params)
        return out


@dataclass(frozen=True)
class ScoreResult:
    """Complete scoring result. Built fresh for every call."""
    subscores: dict[str, float]
    total: float
    explanations: tuple[Explanation, ...] = ()

    def to_dict(self) -> dict:
        return {
            "subscores": dict(self.subscores),
            "total": self.total,
            "explanations": [e.to_dict() for e in self.explanations],
        }
