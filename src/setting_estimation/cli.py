"""
CLI interface for setting estimation.

Implements the command:
estimate --machine my-juggler-5 --games 1000 \
  --count grape=177 --count reg=4 --details
"""

import argparse
import sys
from pathlib import Path
from typing import Dict, List, Optional

from slot_mechanics.catalog import MachineCatalog
from slot_mechanics.rules import DEFAULT_CATALOG_PATH, EstimationRules, RULES
from setting_estimation.estimator import SettingEstimator
from setting_estimation.report import (
    breakdown_frame,
    estimations_frame,
    probability_table,
    totals_by_setting,
)
from setting_estimation.session import CounterSession
from setting_estimation.validate import validate_catalog


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Estimate slot machine settings from observed counts"
    )

    parser.add_argument(
        "--catalog",
        type=Path,
        default=DEFAULT_CATALOG_PATH,
        help="Machine catalog JSON file (default: bundled catalog)"
    )

    parser.add_argument(
        "--list-machines",
        action="store_true",
        help="List the machines in the catalog and exit"
    )

    parser.add_argument(
        "--machine",
        help="Machine id to estimate for"
    )

    parser.add_argument(
        "--games",
        type=int,
        default=0,
        help="Total spins played this session (default: 0)"
    )

    parser.add_argument(
        "--normal-games",
        type=int,
        help="Spins played in the normal phase (default: all of --games)"
    )

    parser.add_argument(
        "--count",
        action="append",
        default=[],
        metavar="ID=N",
        help="Observed count for an element, e.g. grape=177 (repeatable)"
    )

    parser.add_argument(
        "--ignore",
        action="append",
        default=[],
        metavar="ID",
        help="Element id to leave out of the estimate (repeatable)"
    )

    parser.add_argument(
        "--auto-ignore-parents",
        action="store_true",
        help="Leave out parent aggregates whose sub-categories have counts"
    )

    parser.add_argument(
        "--zero-counts-as-evidence",
        action="store_true",
        help="Let elements with a zero count contribute to the estimate"
    )

    parser.add_argument(
        "--table",
        action="store_true",
        help="Print the machine's probability table"
    )

    parser.add_argument(
        "--details",
        action="store_true",
        help="Print the per-element log-likelihood breakdown"
    )

    parser.add_argument(
        "--closest",
        action="store_true",
        help="Print the nearest setting for each element on its own"
    )

    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate the catalog and exit"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    return parser.parse_args(argv)


def parse_count_list(items: List[str]) -> Dict[str, int]:
    """Parse ID=N pairs into a count mapping."""
    counts: Dict[str, int] = {}
    for item in items:
        if "=" not in item:
            raise ValueError(f"Invalid count '{item}', expected ID=N")
        element_id, _, value = item.partition("=")
        element_id = element_id.strip()
        try:
            n = int(value)
        except ValueError:
            raise ValueError(f"Invalid count value in '{item}'") from None
        if n < 0:
            raise ValueError(f"Count must be non-negative: '{item}'")
        counts[element_id] = n
    return counts


def build_session(
    catalog: MachineCatalog,
    machine_id: str,
    games: int,
    normal_games: Optional[int],
    counts: Dict[str, int],
    ignored: List[str],
    rules: EstimationRules,
) -> CounterSession:
    """Build a session holding the given counts for a catalog machine."""
    machine = catalog.get_machine_by_id(machine_id)
    if machine is None:
        known = ", ".join(m.id for m in catalog)
        raise ValueError(f"Unknown machine '{machine_id}'. Known: {known}")

    session = CounterSession(rules=rules)
    session.select_machine(machine)
    session.set_current_games(max(0, games))
    session.set_normal_games(normal_games)

    for element_id, n in counts.items():
        if machine.get_element(element_id) is None:
            raise ValueError(f"Unknown element '{element_id}' for machine {machine_id}")
        session.counts[element_id] = n

    for element_id in ignored:
        session.toggle_ignored(element_id)

    return session


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = parse_arguments(argv)

    if args.verbose:
        print(f"Loading catalog {args.catalog}...")

    catalog = MachineCatalog.from_file(args.catalog)

    if args.validate:
        results = validate_catalog(catalog)
        bad = {mid: issues for mid, issues in results.items() if issues}
        for machine_id, issues in results.items():
            status = "❌" if issues else "✅"
            print(f"{status} {machine_id}")
            for issue in issues:
                print(f"   - {issue}")
        return 1 if bad else 0

    if args.list_machines:
        for machine in catalog:
            settings = ",".join(str(s) for s in machine.settings)
            print(f"{machine.id:<20} {machine.machine_name} ({machine.maker}) settings={settings}")
        return 0

    if not args.machine:
        print("Error: --machine is required (use --list-machines to see ids)")
        return 1

    rules = EstimationRules(
        percentage_decimals=RULES.percentage_decimals,
        zero_counts_are_evidence=args.zero_counts_as_evidence,
        exclude_parent_aggregates=args.auto_ignore_parents,
        default_settings=RULES.default_settings,
    )
    session = build_session(
        catalog,
        args.machine,
        args.games,
        args.normal_games,
        parse_count_list(args.count),
        args.ignore,
        rules,
    )
    machine = session.machine

    print(f"Machine: {machine}")
    print(f"Games: {session.total_games} (normal: {session.normal_phase_games})")
    if args.verbose:
        print(f"Counts: {session.effective_counts()}")
        print(f"Ignored: {sorted(session.effective_ignored())}")

    if args.table:
        print("\nProbability table (1/N):")
        print(probability_table(machine).to_string())

    results = session.estimate()
    print("\nSetting estimate:")
    print(estimations_frame(results).to_string(index=False))

    if args.details:
        print("\nLog-likelihood breakdown:")
        estimator = SettingEstimator(machine, rules)
        frame = breakdown_frame(estimator.log_likelihoods(session.observation()))
        if frame.empty:
            print("(no contributing elements)")
        else:
            print(frame.to_string(index=False))
            print("\nLog-likelihood per setting:")
            print(totals_by_setting(frame).to_string())

    if args.closest:
        print("\nNearest setting per element:")
        for element_id, setting in session.closest_settings().items():
            label = "-" if setting is None else str(setting)
            print(f"  {element_id:<20} {label}")

    return 0


def cli_entry_point():
    """Entry point for setuptools console script."""
    try:
        exit_code = main()
        sys.exit(exit_code)
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}")
        if "--verbose" in sys.argv or "-v" in sys.argv:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    cli_entry_point()
