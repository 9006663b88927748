"""
CSV exporter — Writes device placements and ranked risk drivers as CSV tables.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path

from .export_data import ExportData

logger = logging.getLogger("triage_planner.reporting")

PLACEMENT_FIELDS = [
    "device_id", "device_name", "device_type",
    "original_zone", "current_zone", "was_moved", "risk_flags",
]

DRIVER_FIELDS = ["rank", "rule_id", "text", "total_delta", "breakdown", "impact"]


def export_csv(data: ExportData, output_dir: Path, report_id: str) -> list[Path]:
    """
    Write CSV files for placements, drivers and the score summary.

    Returns:
        List of created CSV file paths.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    created = []

    # --- Placements CSV ---
    placements_path = output_dir / f"placements_{report_id}.csv"
    with open(placements_path, "w", newline="", encoding="utf-8-sig") as fh:
        writer = csv.DictWriter(fh, fieldnames=PLACEMENT_FIELDS)
        writer.writeheader()
        for p in data.device_placements:
            writer.writerow({
                "device_id": p.device_id,
                "device_name": p.device_name,
                "device_type": p.device_type,
                "original_zone": p.original_zone,
                "current_zone": p.current_zone,
                "was_moved": p.was_moved,
                "risk_flags": "; ".join(p.risk_flags),
            })
    created.append(placements_path)

    # --- Drivers CSV ---
    drivers_path = output_dir / f"drivers_{report_id}.csv"
    with open(drivers_path, "w", newline="", encoding="utf-8-sig") as fh:
        writer = csv.DictWriter(fh, fieldnames=DRIVER_FIELDS)
        writer.writeheader()
        for rank, d in enumerate(data.drivers, 1):
            writer.writerow({
                "rank": rank,
                "rule_id": d.rule_id,
                "text": d.text,
                "total_delta": d.total_delta,
                "breakdown": "; ".join(d.breakdown),
                "impact": d.impact,
            })
    created.append(drivers_path)

    # --- Summary Row CSV ---
    summary_path = output_dir / f"score_summary_{report_id}.csv"
    with open(summary_path, "w", newline="", encoding="utf-8-sig") as fh:
        writer = csv.writer(fh)
        writer.writerow(["metric", "value"])
        writer.writerow(["total", data.total])
        writer.writerow(["risk_level", data.risk_level])
        for key, value in data.subscores.items():
            writer.writerow([key, value])
        writer.writerow(["devices_moved", data.summary.devices_moved])
        writer.writerow(["controls_enabled", data.summary.controls_enabled])
        writer.writerow(["controls_total", data.summary.controls_total])
    created.append(summary_path)

    logger.info(f"Wrote {len(created)} CSV files to {output_dir}")
    return created
