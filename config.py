"""
Configuration module for the Device Triage Planner.
Defines tunable parameters, content locations, and output settings.
"""

from __future__ import annotations

import os
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from datetime import datetime, timezone


# ─── Content Sources ────────────────────────────────────────────────────────

BUNDLED_CONTENT_DIR = Path(__file__).parent / "content" / "data"
RULES_FILENAME = "scoringRules.json"
REGISTRY_FILENAME = "controlsRegistry.json"

# Endpoints exposed by the scenario server
RULES_ENDPOINT = "/api/scoring-rules"
SCENARIOS_ENDPOINT = "/api/scenarios"
REGISTRY_ENDPOINT = "/api/controls-registry"

# Retry / throttling for the HTTP content client
MAX_RETRIES = 3                   # Retry count for throttled requests
INITIAL_BACKOFF_SECONDS = 0.5     # First retry delay
MAX_BACKOFF_SECONDS = 8.0         # Cap on exponential backoff
BACKOFF_MULTIPLIER = 2.0          # Exponential factor
DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass
class ContentConfig:
    """Where scoring rules and scenarios are read from."""
    content_dir: str = str(BUNDLED_CONTENT_DIR)
    server_url: Optional[str] = None      # Load over HTTP when set
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @property
    def use_server(self) -> bool:
        return bool(self.server_url)


# ─── Explanation Panel ──────────────────────────────────────────────────────

SORT_ABSOLUTE = "largestAbsoluteImpactFirst"
SORT_INCREASE = "largestIncreaseFirst"
SORT_REDUCTION = "largestReductionFirst"
SORT_ORDERS = (SORT_ABSOLUTE, SORT_INCREASE, SORT_REDUCTION)

DEFAULT_EXPLAIN_ITEMS = 8
DEFAULT_TOP_DRIVERS = 3


@dataclass
class ExplainConfig:
    """Presentation overrides for ranked explanations. Unset values fall back to the rule set's explainPanel."""
    max_items: Optional[int] = None
    top_drivers: int = DEFAULT_TOP_DRIVERS
    sort_order: Optional[str] = None


# ─── Risk Levels ────────────────────────────────────────────────────────────

# Upper bound (inclusive) → label, checked in order
RISK_LEVELS = [
    (25, "Low Risk"),
    (50, "Moderate Risk"),
    (75, "High Risk"),
]
RISK_LEVEL_CRITICAL = "Critical Risk"


# ─── Output Configuration ───────────────────────────────────────────────────

REPORT_FORMATS = ["json", "csv", "markdown", "html"]


@dataclass
class OutputConfig:
    """Output directory and format settings."""
    base_dir: str = ""
    timestamp: str = ""
    formats: list[str] = field(default_factory=lambda: list(REPORT_FORMATS))

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        if not self.base_dir:
            self.base_dir = os.path.join(
                os.getcwd(),
                f"triage_report_{self.timestamp}"
            )

    @property
    def report_dir(self) -> Path:
        return Path(self.base_dir)

    def create_directories(self):
        self.report_dir.mkdir(parents=True, exist_ok=True)


# ─── Master Configuration ───────────────────────────────────────────────────

@dataclass
class PlannerConfig:
    """Top-level configuration for the planner."""
    content: ContentConfig = field(default_factory=ContentConfig)
    explain: ExplainConfig = field(default_factory=ExplainConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    verbose: bool = False

    @classmethod
    def from_file(cls, path: str | os.PathLike) -> "PlannerConfig":
        """Load configuration from a JSON file. Unknown keys are ignored."""
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        config = cls()
        for section in ("content", "explain", "output"):
            if section in data:
                target = getattr(config, section)
                for k, v in data[section].items():
                    if hasattr(target, k):
                        setattr(target, k, v)
        config.verbose = data.get("verbose", False)
        return config
