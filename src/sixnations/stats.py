"""Statistics and balance reporting for a generated schedule."""

from collections import defaultdict

from sixnations.models import DayOfWeek, Fixture, Team
from sixnations.travel import compute_travel, travel_spread


def compute_stats(fixtures: list[Fixture], teams: dict[str, Team]) -> dict:
    """Per-team home/away, kickoff day and travel statistics."""
    all_teams = sorted(teams, key=lambda c: teams[c].ranking)

    home_counts = defaultdict(int)
    away_counts = defaultdict(int)
    day_counts = defaultdict(lambda: defaultdict(int))  # team -> day -> count
    home_rounds = defaultdict(list)

    for f in fixtures:
        home_counts[f.home_team] += 1
        away_counts[f.away_team] += 1
        dow = DayOfWeek(f.date.weekday()).name
        day_counts[f.home_team][dow] += 1
        day_counts[f.away_team][dow] += 1
        home_rounds[f.home_team].append(f.round_number)

    # Longest run of consecutive away rounds
    max_away_streak = {}
    for t in all_teams:
        streak = best = 0
        for rnd in sorted({f.round_number for f in fixtures}):
            if rnd in home_rounds[t]:
                streak = 0
            else:
                streak += 1
                best = max(best, streak)
        max_away_streak[t] = best

    travel_km, legs = compute_travel(fixtures, list(teams.values()))

    return {
        "all_teams": all_teams,
        "home_counts": dict(home_counts),
        "away_counts": dict(away_counts),
        "day_counts": {t: dict(v) for t, v in day_counts.items()},
        "max_away_streak": max_away_streak,
        "travel_km": travel_km,
        "travel_legs": legs,
        "travel_spread": travel_spread(travel_km),
    }


def format_stats_report(stats: dict, teams: dict[str, Team]) -> str:
    """Format statistics into a human-readable report."""
    lines = []
    lines.append("=" * 70)
    lines.append("SCHEDULE STATISTICS")
    lines.append("=" * 70)

    lines.append("\n--- SEASON BALANCE ---")
    lines.append(f"{'Team':<10} {'Home':>5} {'Away':>5} {'Sat':>5} {'Sun':>5} "
                 f"{'AwRun':>6} {'Travel km':>10}")
    lines.append("-" * 52)
    for t in stats["all_teams"]:
        days = stats["day_counts"].get(t, {})
        lines.append(
            f"{teams[t].name:<10} {stats['home_counts'].get(t, 0):>5} "
            f"{stats['away_counts'].get(t, 0):>5} {days.get('Sat', 0):>5} "
            f"{days.get('Sun', 0):>5} {stats['max_away_streak'][t]:>6} "
            f"{stats['travel_km'].get(t, 0.0):>10.1f}"
        )

    spread = stats["travel_spread"]
    lines.append(f"\nTotal travel: {spread['total']:.1f} km")
    lines.append(f"Median per team: {spread['median']:.1f} km, "
                 f"std dev {spread['stdev']:.1f} km, "
                 f"max deviation from median {spread['max_from_median']:.1f} km")

    return "\n".join(lines)
