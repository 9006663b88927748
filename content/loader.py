"""
Local content loader — reads the scoring rules and scenario documents from a directory.

Layout mirrors the scenario server: ``scoringRules.json``, an optional
``controlsRegistry.json`` and one JSON file per scenario. Scenarios are
returned in file-name order.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from ..config import BUNDLED_CONTENT_DIR, REGISTRY_FILENAME, RULES_FILENAME
from ..scenarios.models import Scenario
from ..scenarios.registry import ControlsRegistry
from ..scoring.rules import ScoringRules
from .client import ContentNotFound

logger = logging.getLogger("triage_planner.content.loader")

# Non-scenario documents that live alongside the scenarios
_RESERVED_FILES = {RULES_FILENAME, REGISTRY_FILENAME}


class ContentLoader:
    """Loads rules and scenarios from a content directory."""

    def __init__(self, content_dir: str | Path = BUNDLED_CONTENT_DIR):
        self.content_dir = Path(content_dir)

    def _read_json(self, path: Path) -> dict:
        with open(path, "r", encoding="utf-8") as fh:
            return json.load(fh)

    def _scenario_files(self) -> list[Path]:
        return sorted(
            p for p in self.content_dir.glob("*.json")
            if p.name not in _RESERVED_FILES
        )

    def load_rules(self) -> ScoringRules:
        path = self.content_dir / RULES_FILENAME
        rules = ScoringRules.from_dict(self._read_json(path))
        logger.info(
            f"Loaded rule set {rules.version} from {path}: "
            f"{len(rules.control_rules)} control, {len(rules.zone_rules)} zone, "
            f"{len(rules.synergy_rules)} synergy rules"
        )
        return rules

    def load_registry(self) -> Optional[ControlsRegistry]:
        """The controls registry, or None when the directory has none."""
        path = self.content_dir / REGISTRY_FILENAME
        if not path.exists():
            logger.debug(f"No controls registry at {path}")
            return None
        registry = ControlsRegistry.from_dict(self._read_json(path))
        logger.info(f"Loaded controls registry {registry.version}: {len(registry.controls)} controls")
        return registry

    def load_scenarios(self) -> list[Scenario]:
        scenarios = [Scenario.from_dict(self._read_json(p)) for p in self._scenario_files()]
        logger.info(f"Loaded {len(scenarios)} scenarios from {self.content_dir}")
        return scenarios

    def load_scenario(self, scenario_id: str) -> Scenario:
        for scenario in self.load_scenarios():
            if scenario.id == scenario_id:
                return scenario
        raise ContentNotFound(404, "Scenario not found", str(self.content_dir / scenario_id))

    def list_scenarios(self) -> list[dict]:
        return [s.summary() for s in self.load_scenarios()]
