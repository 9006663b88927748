from .base import BaseRuleGroup, ScoringContext
from .baseline import BaselineRules
from .control_rules import ControlRules
from .zone_rules import ZoneRules
from .synergy_rules import SynergyRules

# Evaluation order is part of the scoring contract
ALL_RULE_GROUPS = [
    BaselineRules,
    ControlRules,
    ZoneRules,
    SynergyRules,
]

__all__ = [
    "BaseRuleGroup",
    "ScoringContext",
    "BaselineRules",
    "ControlRules",
    "ZoneRules",
    "SynergyRules",
    "ALL_RULE_GROUPS",
]
