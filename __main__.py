"""
Device Triage Planner — Command-line front end

Usage:
    python -m triage_planner scenarios                          # list bundled scenarios
    python -m triage_planner score family_home                  # score the authored state
    python -m triage_planner score family_home \\
        --move smart_tv=iot --move mystery_device=investigate \\
        --flag mystery_device --set iotNetworkEnabled=true
    python -m triage_planner lint                               # lint rules + all scenarios
    python -m triage_planner --server http://localhost:5000 scenarios

All scenario data is fictional and intended for training.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Sequence

from . import __version__
from .config import PlannerConfig, REPORT_FORMATS, SORT_ORDERS
from .content import ContentClient, ContentError, ContentLoader
from .scenarios import ALL_ZONES, ControlsRegistry, Scenario, ScenarioFormatError, zone_label
from .scenarios.goals import evaluate_goals
from .scenarios.lint import lint_rules, lint_scenario
from .scoring import (
    RulesFormatError,
    ScoringRules,
    calculate_score,
    delta_breakdown,
    format_explanation,
    rank_explanations,
    risk_level,
    top_drivers,
)
from .scoring.formatter import format_number, subscore_label
from .reporting import EXPORTERS, generate_export_data

logger = logging.getLogger("triage_planner")


class UsageError(ValueError):
    """Raised for malformed command-line overrides."""


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="triage_planner",
        description="Device Triage Planner: explainable home/office network risk scoring",
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Path to JSON configuration file",
    )
    parser.add_argument(
        "--server",
        type=str,
        default=None,
        help="Load rules and scenarios from a scenario server instead of disk",
    )
    parser.add_argument(
        "--content-dir",
        type=Path,
        default=None,
        help="Directory containing scoringRules.json and scenario files",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # scenarios
    subparsers.add_parser("scenarios", help="List available scenarios")

    # score
    score_p = subparsers.add_parser("score", help="Score a scenario state")
    score_p.add_argument("scenario", help="Scenario id")
    score_p.add_argument(
        "--move", action="append", default=[], metavar="DEVICE=ZONE",
        help=f"Place a device into a zone ({', '.join(ALL_ZONES)}); repeatable",
    )
    score_p.add_argument(
        "--flag", action="append", default=[], metavar="DEVICE",
        help="Flag a device for investigation; repeatable",
    )
    score_p.add_argument(
        "--set", action="append", default=[], dest="set_controls", metavar="CONTROL=VALUE",
        help="Override a control value (true/false or a string such as WPA3); repeatable",
    )
    score_p.add_argument(
        "--sort-order",
        choices=list(SORT_ORDERS),
        default=None,
        help="Order of the explanation panel (default: rule set setting)",
    )
    score_p.add_argument(
        "--max-items",
        type=int,
        default=None,
        help="Number of explanations to show (default: rule set setting)",
    )
    score_p.add_argument(
        "--formats",
        nargs="+",
        choices=REPORT_FORMATS,
        default=None,
        help="Report formats to generate",
    )
    score_p.add_argument(
        "--output-dir", "-o",
        type=Path,
        default=None,
        help="Output directory for reports",
    )
    score_p.add_argument(
        "--no-reports",
        action="store_true",
        help="Print the score only; write no report files",
    )

    # lint
    lint_p = subparsers.add_parser("lint", help="Check the rule set and scenarios for authoring mistakes")
    lint_p.add_argument("scenarios", nargs="*", help="Scenario ids (default: all)")

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> PlannerConfig:
    """Build configuration from the config file, then apply CLI overrides."""
    if args.config and args.config.exists():
        config = PlannerConfig.from_file(args.config)
    else:
        config = PlannerConfig()

    if args.server:
        config.content.server_url = args.server
    if args.content_dir:
        config.content.content_dir = str(args.content_dir)
    if args.verbose:
        config.verbose = True

    if getattr(args, "sort_order", None):
        config.explain.sort_order = args.sort_order
    if getattr(args, "max_items", None) is not None:
        config.explain.max_items = args.max_items
    if getattr(args, "formats", None):
        config.output.formats = list(args.formats)
    if getattr(args, "output_dir", None):
        config.output.base_dir = str(args.output_dir)

    return config


def configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# Overrides
# ---------------------------------------------------------------------------

def parse_control_value(raw: str):
    lowered = raw.strip().lower()
    if lowered in ("true", "on", "yes"):
        return True
    if lowered in ("false", "off", "no"):
        return False
    return raw.strip()


def _split_pair(raw: str, option: str) -> tuple[str, str]:
    key, sep, value = raw.partition("=")
    if not sep or not key.strip() or not value.strip():
        raise UsageError(f"{option} expects KEY=VALUE, got '{raw}'")
    return key.strip(), value.strip()


def apply_moves(scenario: Scenario, zones: dict[str, str], moves: Sequence[str]) -> dict[str, str]:
    for raw in moves:
        device_id, zone = _split_pair(raw, "--move")
        if scenario.get_device(device_id) is None:
            raise UsageError(f"Unknown device '{device_id}' in scenario '{scenario.id}'")
        if zone not in ALL_ZONES:
            raise UsageError(f"Unknown zone '{zone}'. Choose from: {', '.join(ALL_ZONES)}")
        zones[device_id] = zone
    return zones


def apply_control_overrides(controls: dict, overrides: Sequence[str]) -> dict:
    for raw in overrides:
        control, value = _split_pair(raw, "--set")
        controls[control] = parse_control_value(value)
    return controls


# ---------------------------------------------------------------------------
# Content
# ---------------------------------------------------------------------------

async def load_rules(config: PlannerConfig) -> ScoringRules:
    if config.content.use_server:
        async with ContentClient(config.content.server_url, config.content.timeout_seconds) as client:
            return await client.get_scoring_rules()
    return ContentLoader(config.content.content_dir).load_rules()


async def load_registry(config: PlannerConfig) -> Optional[ControlsRegistry]:
    if config.content.use_server:
        async with ContentClient(config.content.server_url, config.content.timeout_seconds) as client:
            return await client.get_controls_registry()
    return ContentLoader(config.content.content_dir).load_registry()


async def load_scenarios(config: PlannerConfig, ids: Sequence[str] = ()) -> list[Scenario]:
    if config.content.use_server:
        async with ContentClient(config.content.server_url, config.content.timeout_seconds) as client:
            if ids:
                return [await client.get_scenario(i) for i in ids]
            return await client.get_scenarios()
    loader = ContentLoader(config.content.content_dir)
    if ids:
        return [loader.load_scenario(i) for i in ids]
    return loader.load_scenarios()


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

async def cmd_scenarios(config: PlannerConfig) -> int:
    scenarios = await load_scenarios(config)
    if not scenarios:
        print("No scenarios found.")
        return 0

    print(f"\n  {'ID':<20s} {'Environment':<12s} {'Devices':>7s}  Title")
    print(f"  {'─'*20} {'─'*12} {'─'*7}  {'─'*30}")
    for s in scenarios:
        print(f"  {s.id:<20s} {s.environment_type:<12s} {len(s.devices):>7d}  {s.title}")
    print()
    return 0


async def cmd_lint(config: PlannerConfig, scenario_ids: Sequence[str]) -> int:
    rules = await load_rules(config)
    scenarios = await load_scenarios(config, scenario_ids)
    registry = await load_registry(config)

    total = 0
    warnings = lint_rules(rules)
    total += len(warnings)
    _print_lint(f"Rule set {rules.version}", warnings)

    for scenario in scenarios:
        warnings = lint_scenario(scenario, registry)
        total += len(warnings)
        _print_lint(f"Scenario {scenario.id}", warnings)

    print(f"\n  {total} warning(s)")
    return 0


def _print_lint(label: str, warnings) -> None:
    if not warnings:
        print(f"  ✅ {label}: no warnings")
        return
    print(f"  ⚠  {label}: {len(warnings)} warning(s)")
    for w in warnings:
        print(f"      - {w}")


async def cmd_score(config: PlannerConfig, args: argparse.Namespace) -> int:
    rules = await load_rules(config)
    scenario = (await load_scenarios(config, [args.scenario]))[0]
    registry = await load_registry(config)

    zones = apply_moves(scenario, scenario.initial_zones(), args.move)
    controls = apply_control_overrides(dict(scenario.initial_controls), args.set_controls)
    for device_id in args.flag:
        if scenario.get_device(device_id) is None:
            raise UsageError(f"Unknown device '{device_id}' in scenario '{scenario.id}'")
    flagged = set(args.flag)

    result = calculate_score(rules, scenario.devices, zones, controls, flagged)

    sort_order = config.explain.sort_order or rules.explain_panel.sort_order
    max_items = config.explain.max_items
    if max_items is None:
        max_items = rules.explain_panel.max_items

    print("=" * 70)
    print(f" Device Triage Planner v{__version__}")
    print(f" Scenario: {scenario.title} ({scenario.environment_type})")
    print("=" * 70)

    print(f"\n  Total Risk:       {result.total:.1f}/100 ({risk_level(result.total)})")
    for key, value in result.subscores.items():
        print(f"    {subscore_label(key):<20s} {value:5.1f}")

    drivers = top_drivers(result.explanations, config.explain.top_drivers)
    if drivers:
        print(f"  Top drivers:      {', '.join(d.rule_id for d in drivers)}")

    moved = [d for d in scenario.devices if zones.get(d.id) != d.network_id]
    if moved:
        print("\n  Placement changes:")
        for d in moved:
            print(f"    {d.label}: {zone_label(d.network_id)} → {zone_label(zones[d.id])}")

    ranked = rank_explanations(result.explanations, sort_order, max_items)
    print("\n  Why this score:")
    if not ranked:
        print("    Only the baseline applies.")
    for item in ranked:
        marker = "▼" if item.reduces_risk else "▲"
        parts = ", ".join(delta_breakdown(item.explanation.delta))
        print(f"    {marker} {format_number(item.total_delta):>5s}  "
              f"{format_explanation(item.explanation)} ({parts})")

    goals = evaluate_goals(scenario, result.total, controls, registry)
    if goals.applicable:
        print("\n  Scenario goals:")
        if goals.score_target is not None:
            mark = "✅" if goals.score_achieved else "❌"
            print(f"    {mark} Total risk at or below {format_number(goals.score_target)}")
        for req in goals.requirements:
            print(f"    {'✅' if req.met else '❌'} {req.goal}")
        print(f"    Status: {'Complete' if goals.complete else 'In progress'}")

    if args.no_reports or not config.output.formats:
        print()
        return 0

    data = generate_export_data(
        scenario, zones, controls, result,
        sort_order=sort_order, max_items=max_items, registry=registry,
    )
    report_id = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S") + "_" + uuid.uuid4().hex[:8]
    output_dir = config.output.report_dir

    print("\n" + "=" * 70)
    print(" REPORTS")
    print("=" * 70 + "\n")
    created = []
    for fmt in config.output.formats:
        exporter = EXPORTERS[fmt]
        out = exporter(data, output_dir, report_id)
        paths = out if isinstance(out, list) else [out]
        created.extend(paths)
        for p in paths:
            print(f"  📄 {fmt.upper():<9s} {p}")

    print(f"\n  Files: {len(created)} reports generated")
    print(f"  Path:  {output_dir.resolve()}")
    print()
    return 0


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

async def main_async(argv: Optional[Sequence[str]] = None) -> int:
    """Async entry point. Returns the process exit code."""
    args = parse_args(argv)
    config = build_config(args)
    configure_logging(config.verbose)
    logger.debug(f"Content source: {config.content.server_url or config.content.content_dir}")

    if not args.command:
        print("Usage: python -m triage_planner {scenarios|score|lint} [options]")
        return 0

    try:
        if args.command == "scenarios":
            return await cmd_scenarios(config)
        if args.command == "lint":
            return await cmd_lint(config, args.scenarios)
        if args.command == "score":
            return await cmd_score(config, args)
    except (RulesFormatError, ScenarioFormatError) as e:
        print(f"\n❌ Invalid content: {e}")
        return 1
    except ContentError as e:
        print(f"\n❌ {e}")
        return 1
    except UsageError as e:
        print(f"\n❌ {e}")
        return 1
    except json.JSONDecodeError as e:
        print(f"\n❌ Content is not valid JSON: {e}")
        return 1
    except OSError as e:
        print(f"\n❌ Could not read content: {e}")
        return 1

    return 0


def main():
    """Synchronous entry point for `python -m triage_planner`."""
    sys.exit(asyncio.run(main_async()))


if __name__ == "__main__":
    main()
