"""Output formatters for generated schedules."""

import csv
from io import StringIO
from pathlib import Path

from sixnations.models import Fixture, Schedule, Team

PROVISIONAL_COLUMNS = [
    "Round", "Date", "Time", "Day", "Home", "Away", "Stadium", "Location", "Season",
]


def format_schedule(schedule: Schedule, teams: dict[str, Team]) -> str:
    """Format schedule as human-readable text, organized by round."""
    lines = []
    lines.append("=" * 80)
    lines.append(f"SIX NATIONS {schedule.season} FIXTURES ({schedule.algorithm})")
    lines.append("=" * 80)

    for rnd, fixtures in sorted(schedule.by_round().items()):
        lines.append(f"\n--- ROUND {rnd} ---")
        for f in sorted(fixtures, key=lambda x: x.kickoff):
            lines.append(
                f"  {f.kickoff:%a %d/%m/%Y %H:%M}  {teams[f.home_team].name:<10} vs "
                f"{teams[f.away_team].name:<10} @ {f.stadium.name}, {f.location}"
            )

    lines.append("\n" + "=" * 80)
    lines.append("PER-TEAM SCHEDULES")
    lines.append("=" * 80)

    for code in sorted(teams, key=lambda c: teams[c].ranking):
        own = sorted((f for f in schedule.fixtures
                      if code in (f.home_team, f.away_team)),
                     key=lambda f: f.kickoff)
        lines.append(f"\n{teams[code].name}:")
        for f in own:
            is_home = f.home_team == code
            opponent = f.away_team if is_home else f.home_team
            h_a = "H" if is_home else "A"
            lines.append(
                f"  R{f.round_number} {f.kickoff:%a %d/%m %H:%M} {h_a} vs "
                f"{teams[opponent].name:<10} @ {f.location}"
            )

    lines.append("\n" + "=" * 80)
    lines.append("SUMMARY")
    lines.append("=" * 80)
    lines.extend(schedule.summary)

    return "\n".join(lines)


def format_provisional_csv(fixtures: list[Fixture]) -> str:
    """Provisional fixtures, staged for review before promotion."""
    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(PROVISIONAL_COLUMNS)

    for f in sorted(fixtures, key=lambda x: (x.kickoff, x.round_number)):
        writer.writerow([
            f.round_number,
            f.kickoff.strftime("%Y-%m-%d"),
            f.kickoff.strftime("%H:%M"),
            f.kickoff.strftime("%a"),
            f.home_team,
            f.away_team,
            f.stadium.name,
            f.location,
            f.season,
        ])

    return output.getvalue()


def write_schedule(schedule: Schedule, teams: dict[str, Team],
                   output_prefix: str = "output") -> list[Path]:
    """Write all output files into {output_prefix}/ directory."""
    out_dir = Path(output_prefix)
    out_dir.mkdir(parents=True, exist_ok=True)
    written = []

    schedule_path = out_dir / "schedule.txt"
    schedule_path.write_text(format_schedule(schedule, teams))
    print(f"Written: {schedule_path}")
    written.append(schedule_path)

    csv_path = out_dir / "provisional_fixtures.csv"
    csv_path.write_text(format_provisional_csv(list(schedule.fixtures)))
    print(f"Written: {csv_path}")
    written.append(csv_path)

    return written
