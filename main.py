"""
Lot Constraint Engine CLI.

Runs the constraint evaluator, the permit deriver and the action checklist
over a site document (or a seeded mock site) and prints the results.

    python main.py site.json
    python main.py --mock "parcel-0042" --lot 80x125
"""

import argparse
import json
import logging
import sys
from typing import List, Optional, Tuple

import pandas as pd

from loaders import get_mock_generator, get_site_loader, SiteBundle
from loaders.flood_zones import flood_flag_from_code
from report import checklist_frame, comments_frame, permits_frame, status_counts
from siteplan import (
    ChecklistSettings,
    EvaluatorSettings,
    PropertyFacts,
    classify,
    derive_permits,
    evaluate_all,
    load_settings,
    septic_summary,
    utility_summary,
)
from siteplan.facts import ParcelMetrics

log = logging.getLogger("siteplan")


def parse_lot(text: str) -> Tuple[float, float]:
    """Parse a WIDTHxDEPTH lot size in feet."""
    try:
        width, depth = (float(part) for part in text.lower().split("x"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Lot size must look like 80x125, got '{text}'")
    if width <= 0 or depth <= 0:
        raise argparse.ArgumentTypeError(f"Lot dimensions must be positive, got '{text}'")
    return width, depth


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Evaluate structure placement and property actions for a lot")
    parser.add_argument("site", nargs="?", help="Site document (JSON)")
    parser.add_argument("--mock", metavar="SEED", help="Generate a mock site from a seed instead of a file")
    parser.add_argument("--lot", type=parse_lot, default=(100.0, 100.0), help="Mock lot size WIDTHxDEPTH (feet)")
    parser.add_argument("--settings", help="Settings JSON with 'evaluator' and/or 'checklist' sections")
    parser.add_argument("--json", action="store_true", help="Print machine-readable JSON instead of tables")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser


def load_bundle(args) -> SiteBundle:
    if args.mock:
        width, depth = args.lot
        site = get_mock_generator(args.mock).generate(width, depth)
        flags = [flood_flag_from_code(site.flood_zone)]
        facts = PropertyFacts(
            parcel=ParcelMetrics(area_sqft=width * depth, lot_width=width, lot_depth=depth),
            environmental_flags=flags,
        )
        return SiteBundle(width, depth, site, [], facts)
    return get_site_loader().load(args.site)


def run(bundle: SiteBundle, evaluator_settings: EvaluatorSettings, checklist_settings: ChecklistSettings):
    comments = evaluate_all(bundle.candidates, bundle.site, bundle.lot_width, bundle.lot_depth,
                            evaluator_settings)
    permits = derive_permits(bundle.candidates, bundle.site, evaluator_settings)
    checklist = classify(bundle.facts, checklist_settings)
    return comments, permits, checklist


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.site and not args.mock:
        parser.error("either a site document or --mock SEED is required")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s │ %(name)-20s │ %(levelname)-8s │ %(message)s',
        datefmt='%H:%M:%S',
    )

    try:
        if args.settings:
            evaluator_settings, checklist_settings = load_settings(args.settings)
        else:
            evaluator_settings, checklist_settings = EvaluatorSettings(), ChecklistSettings()
        bundle = load_bundle(args)
    except (ValueError, OSError) as e:
        log.error(f"Could not load input: {e}")
        return 1

    comments, permits, checklist = run(bundle, evaluator_settings, checklist_settings)

    if args.json:
        print(json.dumps({
            "comments": [c.to_dict() for c in comments],
            "permits": [p.to_dict() for p in permits],
            "checklist": [item.to_dict() for item in checklist],
        }, indent=2))
        return 0

    with pd.option_context("display.max_colwidth", 80, "display.width", 200):
        print("\n=== UTILITIES ===")
        for line in utility_summary(bundle.site, evaluator_settings):
            print(f"  {line}")

        septic = septic_summary(bundle.site, evaluator_settings)
        print(f"\n=== SEPTIC ({septic.status.value.upper()}) ===")
        for message in septic.messages:
            print(f"  {message}")

        print(f"\n=== PLACEMENT FEEDBACK ({len(bundle.candidates)} structures) ===")
        frame = comments_frame(comments)
        print(frame[["severity", "title", "message"]].to_string(index=False) if not frame.empty else "  (none)")

        print("\n=== PERMITS ===")
        frame = permits_frame(permits)
        print(frame.to_string(index=False) if not frame.empty else "  (none)")

        print("\n=== WHAT CAN I DO HERE? ===")
        print(checklist_frame(checklist)[["category", "action_name", "status", "confidence"]].to_string(index=False))
        print()
        print(status_counts(checklist).to_string())

    return 0


if __name__ == "__main__":
    sys.exit(main())
