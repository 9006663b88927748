"""
Explanation formatting — turns deltas and explanations into display text.

Localization is pluggable: pass any ``translate(key, default, **params)``
callable. Without one, the rule's own ``explain`` text is used.
"""

from __future__ import annotations

from typing import Callable, Mapping, Optional

from ..config import RISK_LEVELS, RISK_LEVEL_CRITICAL
from .models import Explanation

Translate = Callable[..., str]

_SUBSCORE_LABELS = {
    "exposure": "Exposure",
    "credentialAccount": "Credential",
    "hygiene": "Hygiene",
}


def subscore_label(key: str) -> str:
    return _SUBSCORE_LABELS.get(key, key[:1].upper() + key[1:])


def format_number(value: float) -> str:
    """12.0 → '12', 2.5 → '2.5'."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def format_signed(value: float) -> str:
    sign = "+" if value > 0 else ""
    return f"{sign}{format_number(value)}"


def delta_breakdown(delta: Mapping[str, float]) -> list[str]:
    """Non-zero entries as e.g. ``['+25 Exposure', '+10 Hygiene']``."""
    return [
        f"{format_signed(value)} {subscore_label(key)}"
        for key, value in delta.items()
        if value != 0
    ]


def format_explanation(explanation: Explanation, translate: Optional[Translate] = None) -> str:
    if explanation.explain_key and translate is not None:
        return translate(
            explanation.explain_key,
            default=explanation.explain,
            **explanation.explain_params,
        )
    return explanation.explain


def risk_level(total: float) -> str:
    for upper, label in RISK_LEVELS:
        if total <= upper:
            return label
    return RISK_LEVEL_CRITICAL


def impact_label(total_delta: float) -> str:
    if total_delta < 0:
        return "Reduces risk"
    if total_delta > 0:
        return "Increases risk"
    return "No effect"
