"""
JSON exporter — Writes the full export payload for a scored scenario.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from .. import __version__
from .export_data import ExportData

logger = logging.getLogger("triage_planner.reporting")


def export_json(data: ExportData, output_dir: Path, report_id: str) -> Path:
    """
    Write the export snapshot to a JSON file.

    Returns:
        Path to the created JSON file.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    payload = {
        "metadata": {
            "tool": "Device Triage Planner",
            "version": __version__,
            "reportId": report_id,
        },
        **data.to_dict(),
    }

    filepath = output_dir / f"network-triage-{data.scenario_id}-{report_id}.json"
    with open(filepath, "w", encoding="utf-8") as fh:
        json.dump(payload, fh, indent=2, default=str, ensure_ascii=False)

    logger.info(f"Wrote JSON export {filepath}")
    return filepath
