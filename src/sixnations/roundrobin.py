"""Round-robin pairing generation for the six-team championship."""

import logging
import random
from itertools import combinations

from sixnations.errors import SchedulingError, ValidationError
from sixnations.models import Pairing, Round, pair_key

logger = logging.getLogger(__name__)

TEAM_COUNT = 6
ROUND_COUNT = TEAM_COUNT - 1
PAIRINGS_PER_ROUND = TEAM_COUNT // 2


def require_six_teams(teams) -> None:
    """Raise ValidationError unless exactly six distinct teams are given."""
    if len(teams) != TEAM_COUNT:
        raise ValidationError(
            f"Exactly {TEAM_COUNT} teams are required, got {len(teams)}"
        )
    if len(set(teams)) != TEAM_COUNT:
        raise ValidationError("Exactly 6 teams are required, duplicates given")


def generate_pairings(teams: list[str]) -> list[Pairing]:
    """All C(6,2) = 15 unordered pairings, in input order."""
    require_six_teams(teams)
    return [Pairing(a, b) for a, b in combinations(teams, 2)]


def generate_round_robin(teams: list[str],
                         rng: random.Random | None = None) -> list[Round]:
    """Generate a single round-robin using the circle method.

    Teams are shuffled before generation, and rounds are shuffled after,
    so repeated calls give different (but always valid) schedules. Pass a
    seeded ``random.Random`` to replay a run.
    """
    require_six_teams(teams)
    rng = rng or random.Random()

    shuffled = list(teams)
    rng.shuffle(shuffled)
    n = len(shuffled)

    # Circle method: fix position 0, rotate the rest
    rounds = []
    for r in range(n - 1):
        pairings = [Pairing(shuffled[i], shuffled[n - 1 - i])
                    for i in range(n // 2)]
        rounds.append(Round(number=r + 1, pairings=pairings))
        shuffled = [shuffled[0]] + [shuffled[-1]] + shuffled[1:-1]

    rng.shuffle(rounds)
    for i, rnd in enumerate(rounds):
        rnd.number = i + 1
        rng.shuffle(rnd.pairings)

    logger.debug("Circle method produced %d rounds", len(rounds))
    return rounds


def _fill_rounds(leftover: list[Pairing], index: int,
                 rounds: list[list[Pairing]]) -> bool:
    """Backtracking placement, latest round first."""
    if index == len(leftover):
        return True
    p = leftover[index]
    for r in range(len(rounds) - 1, -1, -1):
        if len(rounds[r]) >= PAIRINGS_PER_ROUND:
            continue
        if any(q.involves(p.team_a) or q.involves(p.team_b) for q in rounds[r]):
            continue
        rounds[r].append(p)
        if _fill_rounds(leftover, index + 1, rounds):
            return True
        rounds[r].pop()
    return False


def factorize_with_final_round(teams: list[str],
                               final_pairings: list[Pairing],
                               rng: random.Random | None = None) -> list[Round]:
    """Build five rounds where round 5 is exactly ``final_pairings``.

    The remaining twelve pairings are shuffled and placed by backtracking
    from round 4 down to round 1.
    """
    require_six_teams(teams)
    rng = rng or random.Random()

    covered = [t for p in final_pairings for t in (p.team_a, p.team_b)]
    if len(final_pairings) != PAIRINGS_PER_ROUND or sorted(covered) != sorted(teams):
        raise ValidationError(
            "Final round must contain 3 pairings covering every team once"
        )

    fixed = {p.key for p in final_pairings}
    leftover = [p for p in generate_pairings(teams) if p.key not in fixed]
    rng.shuffle(leftover)

    slots: list[list[Pairing]] = [[] for _ in range(ROUND_COUNT - 1)]
    if not _fill_rounds(leftover, 0, slots):
        raise SchedulingError("Could not complete rounds around the fixed final round")

    rounds = [Round(number=i + 1, pairings=ps) for i, ps in enumerate(slots)]
    rounds.append(Round(number=ROUND_COUNT, pairings=list(final_pairings)))
    return rounds


def verify_round_robin(rounds: list[Round], teams: list[str]) -> dict:
    """Verify a round-robin schedule is valid and complete.

    Returns dict with:
    - valid: bool
    - errors: list of error strings
    - matchup_counts: dict of (team_a, team_b) -> count
    - games_per_team: dict of team -> game count
    """
    errors = []
    matchup_counts: dict[tuple[str, str], int] = {}
    games_per_team: dict[str, int] = {t: 0 for t in teams}

    if len(rounds) != ROUND_COUNT:
        errors.append(f"Expected {ROUND_COUNT} rounds, found {len(rounds)}")

    for rnd in rounds:
        if len(rnd.pairings) != PAIRINGS_PER_ROUND:
            errors.append(
                f"Round {rnd.number}: {len(rnd.pairings)} pairings "
                f"(expected {PAIRINGS_PER_ROUND})"
            )
        teams_in_round = set()
        for p in rnd.pairings:
            if p.team_a == p.team_b:
                errors.append(f"Round {rnd.number}: {p.team_a} plays itself")
            for t in (p.team_a, p.team_b):
                if t in teams_in_round:
                    errors.append(f"Round {rnd.number}: {t} appears twice")
                teams_in_round.add(t)
                games_per_team[t] = games_per_team.get(t, 0) + 1
            matchup_counts[p.key] = matchup_counts.get(p.key, 0) + 1

    for i, t1 in enumerate(teams):
        for t2 in teams[i + 1:]:
            count = matchup_counts.get(pair_key(t1, t2), 0)
            if count != 1:
                errors.append(f"{t1} vs {t2}: played {count} times (expected 1)")

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "matchup_counts": matchup_counts,
        "games_per_team": games_per_team,
    }
