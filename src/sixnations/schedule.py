#!/usr/bin/env python3
"""Six Nations fixture builder.

Generate mode (default):
    sixnations-schedule [config.yaml] [--algorithm NAME] [--seed N] [-o DIR]

    Generates a schedule from the YAML config and writes:
      {DIR}/schedule.txt              - Round-by-round + per-team schedule and summary
      {DIR}/provisional_fixtures.csv  - Provisional fixtures for review
      {DIR}/stats.txt                 - Validation report + statistics

Verify mode:
    sixnations-schedule --verify <provisional_fixtures.csv> [config.yaml]

    Re-imports a provisional CSV and checks all constraints against config.
    Exit code 0 if valid, 1 if violations found.

Examples:
    sixnations-schedule                              # random algorithm, random seed
    sixnations-schedule --algorithm marquee --seed 7 # reproducible marquee schedule
    sixnations-schedule --rest-weeks 2,4 -o 2025     # rest weekends after rounds 2 and 4
"""

import argparse
import logging
import sys
from pathlib import Path

from sixnations.config import load_config
from sixnations.constraints import format_validation_report, validate_schedule
from sixnations.errors import SixNationsError
from sixnations.logging_config import setup_logging
from sixnations.output import write_schedule
from sixnations.scheduler import ALGORITHMS, ScheduleOptions, generate_schedule
from sixnations.stats import compute_stats, format_stats_report
from sixnations.store import InMemoryFixtureHistory, InMemoryTeamDirectory


def parse_rest_weeks(s: str) -> list[int]:
    """Parse '2,4' into [2, 4]. An empty string means no rest weeks."""
    return [int(p) for p in s.split(",") if p.strip()]


def build_options(config: dict, algorithm: str = "random",
                  rest_weeks: list[int] | None = None) -> ScheduleOptions:
    season = config["season"]
    return ScheduleOptions(
        algorithm=algorithm,
        rest_weeks=season["rest_weeks"] if rest_weeks is None else rest_weeks,
        window_start=season["window_start"],
        window_end=season["window_end"],
        standard_kickoffs=config["kickoffs"]["standard"],
        final_kickoffs=config["kickoffs"]["final"],
        min_gap_minutes=season["min_kickoff_gap_minutes"],
        weights=config["interest"]["weights"],
        pin_runner_up=config["interest"]["pin_runner_up"],
        travel_attempts=config["travel"]["attempts"],
        median_threshold_km=config["travel"]["median_threshold_km"],
    )


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Six Nations fixture builder",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Algorithms:
  random   Shuffled round-robin with balanced home/away
  marquee  Round 5 Extravaganza: best matches late, #1 v #2 in the final slot
  travel   Best of many random candidates by total travel distance
  travel_balanced  Best of many random candidates by even travel across teams

Exit codes:
  0  Schedule valid
  1  Constraint violations found, or generation error
""",
    )
    parser.add_argument(
        "config", nargs="?", default="config.yaml",
        help="Path to config YAML file (default: config.yaml)"
    )
    parser.add_argument(
        "--algorithm", "-a", choices=ALGORITHMS, default="random",
        help="Fixture generation algorithm (default: random)"
    )
    parser.add_argument(
        "--seed", type=int, default=None,
        help="Random seed for reproducible schedules"
    )
    parser.add_argument(
        "--season", type=int, default=None,
        help="Season year (default: season.year from config)"
    )
    parser.add_argument(
        "--rest-weeks", type=parse_rest_weeks, default=None,
        help="Comma-separated rounds followed by a rest weekend, e.g. 2,4"
    )
    parser.add_argument(
        "--output-prefix", "-o", default="output",
        help="Output directory for generated files (default: output/)"
    )
    parser.add_argument(
        "--verify", metavar="CSV",
        help="Verify an existing provisional fixtures CSV instead of generating"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Log every scheduling decision"
    )
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)

    config_path = args.config
    if not Path(config_path).exists():
        print(f"Error: config file {config_path} not found")
        sys.exit(1)

    try:
        print(f"Loading config from {config_path}...")
        config = load_config(config_path)

        if args.verify:
            from sixnations.verify import verify_file
            print(f"Verifying schedule from {args.verify}...")
            result = verify_file(args.verify, config)
            sys.exit(0 if result["valid"] else 1)

        season = args.season or config["season"]["year"]
        options = build_options(config, args.algorithm, args.rest_weeks)
        if args.season and args.season != config["season"]["year"]:
            options.window_start = options.window_start.replace(year=season)
            options.window_end = options.window_end.replace(year=season)

        teams = config["teams"]
        print(f"Generating {args.algorithm} schedule for {season} (seed={args.seed})...")
        schedule = generate_schedule(
            list(teams.values()), season, options,
            history=InMemoryFixtureHistory(config["history"]),
            directory=InMemoryTeamDirectory(teams.values()),
            seed=args.seed,
        )
    except SixNationsError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print("\nValidating...")
    result = validate_schedule(
        list(schedule.fixtures), teams, previous=config["history"],
        min_gap_minutes=options.min_gap_minutes,
    )
    report = format_validation_report(result)
    print(report)

    stats = compute_stats(list(schedule.fixtures), teams)
    stats_text = format_stats_report(stats, teams)
    print("\n" + stats_text)

    print("\nWriting output files...")
    write_schedule(schedule, teams, output_prefix=args.output_prefix)

    stats_path = Path(args.output_prefix) / "stats.txt"
    stats_path.write_text(report + "\n\n" + stats_text)
    print(f"Written: {stats_path}")

    if result["valid"]:
        print("\nSchedule generated successfully!")
    else:
        print(f"\nSchedule has {len(result['errors'])} constraint violations.")
        sys.exit(1)


if __name__ == "__main__":
    main()
