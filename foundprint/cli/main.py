"""
FOUNDprint CLI.

Commands:
    foundprint run                 Replay a profile and narrate each step
    foundprint baselines           Show every baseline and how it was chosen
    foundprint pixel-ratio VALUE   Explain a pixel ratio reading

The CLI only renders. Every number it prints comes from the engine and
carries its source.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Optional

from ..config import EngineConfig, default_config
from ..orchestrator import RunReport, StepRecord, run_experiment
from ..probes.observed import SAMPLE_PROFILE, build_profile_probes, load_profile
from ..reporting import (
    format_final,
    format_spoofability,
    format_step,
    summarize_spoofability,
)
from ..resolution.pixel_ratio import disambiguate


# =============================================================================
# OUTPUT FORMATTING
# =============================================================================

def report_to_dict(report: RunReport) -> dict[str, Any]:
    """JSON-ready view of a run report."""
    summary = summarize_spoofability(report)
    return {
        "fingerprint_hash": report.fingerprint_hash,
        "final_entropy_bits": report.final_entropy_bits,
        "display_anonymity_set": report.display_anonymity_set,
        "population": report.population,
        "is_unique": report.is_unique,
        "observations": [
            {
                "attribute": obs.attribute_key,
                "name": obs.name,
                "value": obs.raw_value,
                "message": obs.message,
                "entropy_bits": obs.entropy_bits,
                "one_in_x": obs.one_in_x,
                "percent": obs.percent,
                "estimated": obs.estimated,
                "strategy": obs.strategy,
                "source": obs.source_citation,
                "source_label": obs.source_label,
                "note": obs.note,
            }
            for obs in report.observations
        ],
        "failures": [
            {
                "attribute": failure.attribute_key,
                "name": failure.name,
                "kind": failure.kind.value,
                "reason": failure.reason,
            }
            for failure in report.failures
        ],
        "spoofability": {
            "tier_counts": {t.value: n for t, n in summary.tier_counts.items()},
            "tier_bits": {t.value: b for t, b in summary.tier_bits.items()},
            "after_easy": summary.after_easy,
            "after_easy_medium": summary.after_easy_medium,
            "hard_only": summary.hard_only,
        },
    }


def format_baseline_listing(config: EngineConfig) -> str:
    """Every baseline with its candidates, excluded ones marked."""
    lines = []
    for key, record in config.baselines.items():
        lines.append(f"{key}: {record.bits:g} bits ({record.source_label})")
        for candidate in record.candidates:
            if candidate.excluded:
                lines.append(
                    f"    - {candidate.study}: {candidate.bits:g} "
                    f"[excluded: {candidate.excluded_reason}]"
                )
            else:
                marker = "*" if candidate.bits == record.bits else "-"
                lines.append(f"    {marker} {candidate.study}: {candidate.bits:g}")
        if record.note:
            lines.append(f"    note: {record.note}")
    return "\n".join(lines)


# =============================================================================
# CLI COMMANDS
# =============================================================================

def cmd_run(args: argparse.Namespace) -> int:
    """Replay a profile through the engine."""
    try:
        profile = load_profile(args.profile) if args.profile else SAMPLE_PROFILE
    except (OSError, ValueError) as e:
        print("ERROR: Could not load profile")
        print(f"Reason: {e}")
        return 1

    config = default_config()
    if args.population is not None:
        try:
            config = config.with_population(args.population)
        except ValueError as e:
            print(f"ERROR: {e}")
            return 1

    subscribers = []
    if not args.json:
        print("FOUNDprint")
        print("=" * 50)
        print()

        def narrate(record: StepRecord) -> None:
            print(format_step(record, config.population))
            print()

        subscribers.append(narrate)

    report = run_experiment(
        build_profile_probes(profile, config),
        config=config,
        subscribers=subscribers,
    )

    if args.json:
        print(json.dumps(report_to_dict(report), indent=2, default=str))
        return 0

    print("=" * 50)
    print(format_final(report))
    print()
    print(format_spoofability(report))
    return 0


def cmd_baselines(args: argparse.Namespace) -> int:
    """List study baselines."""
    print("FOUNDprint Baselines (most conservative study wins)")
    print("=" * 50)
    print(format_baseline_listing(default_config()))
    return 0


def cmd_pixel_ratio(args: argparse.Namespace) -> int:
    """Explain one pixel ratio reading."""
    result = disambiguate(args.value)

    print(f"Reading:     {args.value}")
    print(f"Display:     {result.display_value:g}x")
    print(f"Base ratio:  {result.canonical_base:g}x ({result.density_description})")
    print(f"Zoom:        {result.scale_factor_percent}%")
    print(f"Confidence:  {result.confidence.value}")
    print(f"Bucket:      {result.matched_bucket_key}")
    return 0


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def create_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="foundprint",
        description="FOUNDprint - how identifiable is this device?",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
    )

    # Run command
    run_parser = subparsers.add_parser(
        "run",
        help="Replay a device profile through the engine",
    )
    run_parser.add_argument(
        "--profile",
        help="JSON device profile (default: bundled sample)",
    )
    run_parser.add_argument(
        "--population",
        type=float,
        help="Population constant for the anonymity set cap",
    )
    run_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the report as JSON",
    )
    run_parser.set_defaults(func=cmd_run)

    # Baselines command
    baselines_parser = subparsers.add_parser(
        "baselines",
        help="List study baselines and their candidates",
    )
    baselines_parser.set_defaults(func=cmd_baselines)

    # Pixel ratio command
    ratio_parser = subparsers.add_parser(
        "pixel-ratio",
        help="Disambiguate a device pixel ratio",
    )
    ratio_parser.add_argument(
        "value",
        type=float,
        help="Raw devicePixelRatio reading",
    )
    ratio_parser.set_defaults(func=cmd_pixel_ratio)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
