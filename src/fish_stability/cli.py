"""
Command-line interface for the application.

This module provides the main entry point for the CLI.
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

from fish_stability import __version__
from fish_stability.config import get_settings
from fish_stability.errors import SurveyError
from fish_stability.flows.analyze import analyze_all
from fish_stability.flows.clean import clean_all
from fish_stability.reference import HABITATS
from fish_stability.schemas import Result


def _add_source_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--sbc", type=Path, default=None, help="SBC LTER fish biomass extract (CSV)"
    )
    parser.add_argument(
        "--mcr", type=Path, default=None, help="MCR LTER fish biomass extract (CSV)"
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Re-normalize extracts even if their cleaned tables are current",
    )


def _add_analysis_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--value",
        type=str,
        default=None,
        help="Biomass column to analyze (default: value_column from settings)",
    )
    parser.add_argument(
        "--window",
        type=int,
        action="append",
        default=None,
        dest="windows",
        help="Rolling window width in years; repeat for several (default: from settings)",
    )
    parser.add_argument(
        "--taxa", type=Path, default=None, help="Taxon metadata CSV keyed by 'taxon'"
    )
    parser.add_argument(
        "--subset-column",
        type=str,
        default=None,
        help="Taxon metadata column to subset by (default: subset_column from settings)",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="fish-stability",
        description="Diversity and community variability partitioning for LTER fish surveys",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("info", help="Show application info")

    clean_parser = subparsers.add_parser("clean", help="Normalize raw survey extracts")
    _add_source_arguments(clean_parser)

    analyze_parser = subparsers.add_parser("analyze", help="Build derived tables from cleaned data")
    _add_analysis_arguments(analyze_parser)

    run_parser = subparsers.add_parser("run", help="Clean extracts, then analyze")
    _add_source_arguments(run_parser)
    _add_analysis_arguments(run_parser)

    return parser


def _sources(args: argparse.Namespace) -> dict[str, Path]:
    pairs = (("SBC", args.sbc), ("MCR", args.mcr))
    return {dataset: path for dataset, path in pairs if path is not None}


def run_stage(label: str, stage: Callable[..., dict[str, Any]], **kwargs: Any) -> Result:
    """Run a flow, turning input problems into a failed Result."""
    try:
        data = stage(**kwargs)
    except SurveyError as e:
        return Result(success=False, message="", error=str(e))
    if "error" in data:
        return Result(success=False, message="", data=data, error=str(data["error"]))
    return Result(success=True, message=f"{label} complete", data=data)


def _report(result: Result) -> int:
    if result.success:
        print(f"Success: {result.message}")
        return 0
    print(f"Error: {result.error}", file=sys.stderr)
    return 1


def cmd_info(_args: argparse.Namespace) -> int:
    """Handle the 'info' command."""
    settings = get_settings()
    print(f"Application: {settings.app_name}")
    print(f"Version: {__version__}")
    print(f"Environment: {settings.app_env}")
    print(f"Data directory: {settings.data_dir}")
    print(f"Value column: {settings.value_column}")
    print(f"Window widths: {settings.window_widths}")
    for dataset, habitats in HABITATS.items():
        print(f"Habitats ({dataset}): {', '.join(habitats)}")
    print(f"Debug: {settings.debug}")
    return 0


def cmd_clean(args: argparse.Namespace) -> int:
    """Handle the 'clean' command."""
    sources = _sources(args)
    if not sources:
        print("Error: give at least one extract with --sbc or --mcr", file=sys.stderr)
        return 1
    if args.debug:
        print(f"Debug mode enabled. Settings: {get_settings()}")
    return _report(run_stage("clean", clean_all, sources=sources, force=args.force))


def cmd_analyze(args: argparse.Namespace) -> int:
    """Handle the 'analyze' command."""
    if args.debug:
        print(f"Debug mode enabled. Settings: {get_settings()}")
    return _report(
        run_stage(
            "analyze",
            analyze_all,
            value_column=args.value,
            window_widths=args.windows,
            taxa_file=args.taxa,
            subset_column=args.subset_column,
        )
    )


def cmd_run(args: argparse.Namespace) -> int:
    """Handle the 'run' command: clean then analyze."""
    exit_code = cmd_clean(args)
    if exit_code != 0:
        return exit_code
    return cmd_analyze(args)


def main() -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "info": cmd_info,
        "clean": cmd_clean,
        "analyze": cmd_analyze,
        "run": cmd_run,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
