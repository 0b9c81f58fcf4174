"""Constraint validation for generated or re-imported schedules."""

from collections import defaultdict
from datetime import date, timedelta

from sixnations.models import DayOfWeek, Fixture, PreviousFixture, Team, pair_key
from sixnations.roundrobin import PAIRINGS_PER_ROUND, ROUND_COUNT
from sixnations.slotter import DEFAULT_MIN_GAP_MINUTES
from sixnations.venues import MAX_HOME, MIN_HOME


def _weekend_key(d: date) -> date:
    """Saturday of the weekend a date belongs to."""
    return d - timedelta(days=(d.weekday() - 5) % 7)


def validate_schedule(fixtures: list[Fixture], teams: dict[str, Team],
                      previous: list[PreviousFixture] | None = None,
                      min_gap_minutes: int = DEFAULT_MIN_GAP_MINUTES) -> dict:
    """Validate a schedule against all constraints.

    Returns dict with:
    - valid: bool (True if no hard constraint violations)
    - errors: list of hard constraint violations
    - warnings: list of soft constraint issues
    """
    errors = []
    warnings = []

    home_counts = defaultdict(int)
    away_counts = defaultdict(int)
    matchup_counts = defaultdict(int)
    by_round: dict[int, list[Fixture]] = defaultdict(list)
    by_date: dict[date, list[Fixture]] = defaultdict(list)

    for f in fixtures:
        h = f.home_team
        a = f.away_team

        if h not in teams:
            errors.append(f"Unknown home team: {h}")
            continue
        if a not in teams:
            errors.append(f"Unknown away team: {a}")
            continue
        if h == a:
            errors.append(f"Round {f.round_number}: {h} plays itself")
            continue

        home_counts[h] += 1
        away_counts[a] += 1
        matchup_counts[pair_key(h, a)] += 1
        by_round[f.round_number].append(f)
        by_date[f.date].append(f)

        dow = DayOfWeek(f.date.weekday())
        if not dow.is_weekend():
            errors.append(f"{h} vs {a} on {dow.name} {f.date}: not a weekend")

        home_stadium = teams[h].stadium
        if home_stadium is not None and f.stadium.name != home_stadium.name:
            errors.append(
                f"{h} vs {a}: played at {f.stadium.name}, not {h}'s "
                f"home venue {home_stadium.name}"
            )
        if not f.location:
            errors.append(f"{h} vs {a}: missing location")

    # Complete, unique round-robin
    codes = sorted(teams)
    for i, t1 in enumerate(codes):
        for t2 in codes[i + 1:]:
            count = matchup_counts.get(pair_key(t1, t2), 0)
            if count != 1:
                errors.append(f"{t1} vs {t2}: played {count} times (expected 1)")

    # Rounds: 5 of 3, every team once per round
    if len(by_round) != ROUND_COUNT:
        errors.append(f"Expected {ROUND_COUNT} rounds, found {len(by_round)}")
    for rnd, rfx in sorted(by_round.items()):
        if len(rfx) != PAIRINGS_PER_ROUND:
            errors.append(
                f"Round {rnd}: {len(rfx)} fixtures (expected {PAIRINGS_PER_ROUND})"
            )
        playing = defaultdict(int)
        for f in rfx:
            playing[f.home_team] += 1
            playing[f.away_team] += 1
        for t in codes:
            if playing.get(t, 0) != 1:
                errors.append(f"Round {rnd}: {t} plays {playing.get(t, 0)} times")

    # Home/away balance
    for t in codes:
        if not MIN_HOME <= home_counts[t] <= MAX_HOME:
            errors.append(
                f"{t}: {home_counts[t]} home / {away_counts[t]} away "
                f"(expected 2 or 3 home)"
            )

    # Kickoff gaps on the same day
    gap = timedelta(minutes=min_gap_minutes)
    for d, dfx in sorted(by_date.items()):
        kickoffs = sorted(f.kickoff for f in dfx)
        for k1, k2 in zip(kickoffs, kickoffs[1:]):
            if k2 - k1 < gap:
                errors.append(
                    f"{d}: kickoffs {k1:%H:%M} and {k2:%H:%M} less than "
                    f"{min_gap_minutes} minutes apart"
                )

    # One weekend per round, no weekend shared by two rounds
    weekend_rounds: dict[date, set[int]] = defaultdict(set)
    for rnd, rfx in by_round.items():
        weekends = {_weekend_key(f.date) for f in rfx}
        if len(weekends) > 1:
            errors.append(f"Round {rnd}: spread over {len(weekends)} weekends")
        for w in weekends:
            weekend_rounds[w].add(rnd)
    for w, rounds in sorted(weekend_rounds.items()):
        if len(rounds) > 1:
            errors.append(f"Weekend of {w}: shared by rounds {sorted(rounds)}")

    # Rounds in date order
    starts = {rnd: min(f.kickoff for f in rfx) for rnd, rfx in by_round.items()}
    ordered = sorted(starts)
    for r1, r2 in zip(ordered, ordered[1:]):
        if starts[r2] <= starts[r1]:
            errors.append(f"Round {r2} starts before round {r1}")

    # Venue alternation is soft: balance may override it
    if previous:
        latest: dict[tuple[str, str], PreviousFixture] = {}
        for p in previous:
            if p.key not in latest or p.season > latest[p.key].season:
                latest[p.key] = p
        for f in fixtures:
            p = latest.get(f.pairing_key)
            if p is not None and p.season < f.season and f.home_team == p.home_team:
                warnings.append(
                    f"{f.home_team} vs {f.away_team}: {f.home_team} also hosted "
                    f"in {p.season} (venue not alternated)"
                )

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
        "home_counts": dict(home_counts),
        "away_counts": dict(away_counts),
    }


def format_validation_report(result: dict) -> str:
    """Format validation results as text."""
    lines = []
    lines.append("=" * 60)
    lines.append("SCHEDULE VALIDATION REPORT")
    lines.append("=" * 60)

    if result["valid"]:
        lines.append("\nRESULT: VALID (no hard constraint violations)")
    else:
        lines.append(f"\nRESULT: INVALID ({len(result['errors'])} violations)")

    if result["errors"]:
        lines.append(f"\n--- ERRORS ({len(result['errors'])}) ---")
        for e in result["errors"]:
            lines.append(f"  ERROR: {e}")

    if result["warnings"]:
        lines.append(f"\n--- WARNINGS ({len(result['warnings'])}) ---")
        for w in result["warnings"]:
            lines.append(f"  WARN: {w}")

    return "\n".join(lines)
