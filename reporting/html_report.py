"""
HTML Triage Report — Single-file HTML output with inline CSS.

Rendered through Jinja2 with autoescaping on, so device labels and
explanation text from scenario content are always escaped.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from jinja2 import select_autoescape

from .export_data import ExportData
from .markdown_report import build_environment

logger = logging.getLogger("triage_planner.reporting")


# ---------------------------------------------------------------------------
# Colour palette
# ---------------------------------------------------------------------------
_TOTAL_COLOUR_MAP = [
    (0,  35, "#dcfce7"),    # green
    (35, 60, "#fef3c7"),    # amber
    (60, 101, "#fee2e2"),   # red
]


def _total_colour(total: float) -> str:
    for lo, hi, colour in _TOTAL_COLOUR_MAP:
        if lo <= total < hi:
            return colour
    return "#f3f4f6"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def export_html(data: ExportData, output_dir: Path, report_id: str) -> Path:
    """
    Generate a self-contained HTML triage report.

    Returns the Path to the written file.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    env = build_environment(select_autoescape(["html", "html.j2"]))
    template = env.get_template("report.html.j2")
    html_content = template.render(
        data=data,
        report_id=report_id,
        generated_utc=datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC"),
        total_colour=_total_colour(data.total),
    )

    filepath = output_dir / f"network-triage-report-{data.scenario_id}-{report_id}.html"
    filepath.write_text(html_content, encoding="utf-8")

    logger.info(f"Wrote HTML report {filepath}")
    return filepath
