"""Reporting package — export snapshot and multi-format output generation."""

from .export_data import ExportData, generate_export_data
from .json_export import export_json
from .csv_export import export_csv
from .markdown_report import export_markdown
from .html_report import export_html

EXPORTERS = {
    "json": export_json,
    "csv": export_csv,
    "markdown": export_markdown,
    "html": export_html,
}

__all__ = [
    "ExportData",
    "generate_export_data",
    "export_json",
    "export_csv",
    "export_markdown",
    "export_html",
    "EXPORTERS",
]
