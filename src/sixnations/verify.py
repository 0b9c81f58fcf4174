"""Standalone verifier for provisional fixture files.

Re-imports a provisional CSV and checks every constraint against config.
Usage: sixnations-verify <provisional_fixtures.csv> [config.yaml]
"""

import csv
import sys
from datetime import datetime
from pathlib import Path

from sixnations.config import load_config
from sixnations.constraints import format_validation_report, validate_schedule
from sixnations.models import Fixture, Stadium
from sixnations.stats import compute_stats, format_stats_report


def parse_provisional_csv(csv_path: str | Path, config: dict) -> list[Fixture]:
    """Parse a provisional fixtures CSV back into Fixture objects."""
    fixtures = []
    stadiums = config["stadiums"]

    with open(csv_path, newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            date_str = (row.get("Date") or "").strip()
            home = (row.get("Home") or "").strip()
            away = (row.get("Away") or "").strip()
            if not date_str or not home or not away:
                continue

            kickoff = datetime.strptime(
                f"{date_str} {(row.get('Time') or '00:00').strip()}", "%Y-%m-%d %H:%M"
            )
            stadium_name = (row.get("Stadium") or "").strip()
            stadium = stadiums.get(stadium_name) or Stadium(
                name=stadium_name, city=(row.get("Location") or "").strip()
            )
            fixtures.append(Fixture(
                round_number=int(row["Round"]),
                kickoff=kickoff,
                home_team=home,
                away_team=away,
                stadium=stadium,
                location=(row.get("Location") or "").strip(),
                season=int(row.get("Season") or config["season"]["year"]),
            ))

    return fixtures


def verify_file(csv_path: str | Path, config: dict) -> dict:
    """Parse and validate; returns the validation result dict."""
    fixtures = parse_provisional_csv(csv_path, config)
    print(f"Loaded {len(fixtures)} fixtures")
    result = validate_schedule(
        fixtures, config["teams"], previous=config["history"],
        min_gap_minutes=config["season"]["min_kickoff_gap_minutes"],
    )
    print(format_validation_report(result))
    if fixtures:
        stats = compute_stats(fixtures, config["teams"])
        print("\n" + format_stats_report(stats, config["teams"]))
    return result


def main():
    if len(sys.argv) < 2:
        print("Usage: sixnations-verify <provisional_fixtures.csv> [config.yaml]")
        print("  Validates a provisional fixtures CSV against constraints in config.")
        sys.exit(1)

    csv_path = sys.argv[1]
    config_path = sys.argv[2] if len(sys.argv) > 2 else "config.yaml"

    if not Path(csv_path).exists():
        print(f"Error: {csv_path} not found")
        sys.exit(1)
    if not Path(config_path).exists():
        print(f"Error: {config_path} not found")
        sys.exit(1)

    print(f"Loading config from {config_path}...")
    config = load_config(config_path)

    print(f"Parsing schedule from {csv_path}...")
    result = verify_file(csv_path, config)
    sys.exit(0 if result["valid"] else 1)


if __name__ == "__main__":
    main()
