"""
Markdown report — Scenario triage report rendered via Jinja2.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..scenarios.goals import CONTROL_LABELS
from ..scoring.formatter import subscore_label
from .export_data import ExportData

logger = logging.getLogger("triage_planner.reporting")

TEMPLATE_DIR = Path(__file__).parent / "templates"


def control_value(value) -> str:
    if isinstance(value, bool):
        return "On" if value else "Off"
    return str(value)


def build_environment(autoescape) -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=autoescape,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["subscore_label"] = subscore_label
    env.filters["control_label"] = lambda key: CONTROL_LABELS.get(key, key)
    env.filters["control_value"] = control_value
    return env


def export_markdown(data: ExportData, output_dir: Path, report_id: str) -> Path:
    """Generate the Markdown triage report."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    filepath = output_dir / f"network-triage-report-{data.scenario_id}-{report_id}.md"

    env = build_environment(select_autoescape([]))
    template = env.get_template("report.md.j2")
    content = template.render(
        data=data,
        report_id=report_id,
        generated_utc=datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC"),
    )

    with open(filepath, "w", encoding="utf-8") as fh:
        fh.write(content)

    logger.info(f"Wrote Markdown report {filepath}")
    return filepath
