"""Scoring package — rule evaluation, score calculation, and explanation ranking."""

from .engine import calculate_score
from .models import Explanation, ScoreResult
from .rules import ScoringRules, RulesFormatError
from .ranking import RankedExplanation, rank_explanations, subscore_totals, top_drivers
from .formatter import format_explanation, delta_breakdown, risk_level

__all__ = [
    "calculate_score",
    "Explanation",
    "ScoreResult",
    "ScoringRules",
    "RulesFormatError",
    "RankedExplanation",
    "rank_explanations",
    "subscore_totals",
    "top_drivers",
    "format_explanation",
    "delta_breakdown",
    "risk_level",
]
