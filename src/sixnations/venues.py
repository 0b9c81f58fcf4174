"""Home/away assignment for the 15 pairings of a season.

Two rules, in priority order:

1. Venue alternation. If the pairing was played in an earlier season, last
   season's away side hosts this time.
2. Balance. Everyone else gets home status by running home count (fewer
   home games so far wins, ties random). A repair pass then reverses
   home->away paths until every team has 2 or 3 home games, touching
   alternated pairings only when there is no other way.
"""

import logging
import random
from collections import deque
from typing import Protocol

from sixnations.errors import SchedulingError
from sixnations.models import PreviousFixture, Round, VenueAssignment

logger = logging.getLogger(__name__)

MIN_HOME = 2
MAX_HOME = 3

Assignments = dict[tuple[str, str], VenueAssignment]


class VenueAssignmentStrategy(Protocol):
    def assign(self, rounds: list[Round],
               previous: dict[tuple[str, str], PreviousFixture],
               rng: random.Random) -> Assignments:
        ...


def home_counts(assignments: Assignments, team_codes) -> dict[str, int]:
    counts = {t: 0 for t in team_codes}
    for va in assignments.values():
        counts[va.home_team] += 1
    return counts


def _flip(va: VenueAssignment) -> None:
    va.home_team, va.away_team = va.away_team, va.home_team


def _find_path(start: str, assignments: Assignments, is_target, forward: bool,
               allow_alternated: bool) -> list[tuple[str, str]] | None:
    """BFS over home->away edges (or away->home when not ``forward``).

    Returns the pairing keys along a path from ``start`` to the first team
    satisfying ``is_target``, or None.
    """
    edges: dict[str, list[tuple[str, tuple[str, str]]]] = {}
    for key, va in assignments.items():
        if va.alternated and not allow_alternated:
            continue
        src, dst = (va.home_team, va.away_team) if forward else (va.away_team, va.home_team)
        edges.setdefault(src, []).append((dst, key))

    parent: dict[str, tuple[str, tuple[str, str]] | None] = {start: None}
    queue = deque([start])
    while queue:
        node = queue.popleft()
        if node != start and is_target(node):
            path = []
            while parent[node] is not None:
                prev, key = parent[node]
                path.append(key)
                node = prev
            return list(reversed(path))
        for nxt, key in edges.get(node, []):
            if nxt not in parent:
                parent[nxt] = (node, key)
                queue.append(nxt)
    return None


def rebalance(assignments: Assignments, team_codes: list[str]) -> list[str]:
    """Flip pairings until every team hosts 2 or 3 matches.

    Returns human-readable notes for every flip made.
    """
    notes = []
    while True:
        counts = home_counts(assignments, team_codes)
        surplus = [t for t in team_codes if counts[t] > MAX_HOME]
        deficit = [t for t in team_codes if counts[t] < MIN_HOME]
        if not surplus and not deficit:
            return notes

        if surplus:
            start, forward = surplus[0], True

            def is_target(t):
                return counts[t] < MAX_HOME
        else:
            start, forward = deficit[0], False

            def is_target(t):
                return counts[t] > MIN_HOME

        path = _find_path(start, assignments, is_target, forward, allow_alternated=False)
        if path is None:
            path = _find_path(start, assignments, is_target, forward, allow_alternated=True)
        if path is None:
            raise SchedulingError(f"No home/away balancing path from {start}")

        for key in path:
            va = assignments[key]
            _flip(va)
            if va.alternated:
                va.alternated = False
                va.note = (f"Alternation overridden for balance: "
                           f"{va.home_team} hosts {va.away_team}")
                logger.warning("Venue alternation overridden for %s vs %s",
                               va.home_team, va.away_team)
            else:
                va.note = f"Balancing: {va.home_team} now hosts {va.away_team}"
            notes.append(va.note)
            logger.debug(va.note)


class BalancedVenueAssigner:
    """Alternate venues from history, otherwise balance home counts."""

    def assign(self, rounds: list[Round],
               previous: dict[tuple[str, str], PreviousFixture],
               rng: random.Random) -> Assignments:
        team_codes = sorted({t for rnd in rounds for t in rnd.teams()})
        running = {t: 0 for t in team_codes}
        assignments: Assignments = {}

        for rnd in sorted(rounds, key=lambda r: r.number):
            for p in rnd.pairings:
                prev = previous.get(p.key)
                if prev is not None:
                    va = VenueAssignment(
                        home_team=prev.away_team,
                        away_team=prev.home_team,
                        alternated=True,
                        note=(f"{prev.season}: {prev.home_team} hosted "
                              f"{prev.away_team}, so {prev.away_team} hosts"),
                    )
                else:
                    a, b = p.team_a, p.team_b
                    if running[a] != running[b]:
                        home = a if running[a] < running[b] else b
                    else:
                        home = rng.choice([a, b])
                    va = VenueAssignment(home_team=home, away_team=p.opponent(home))
                running[va.home_team] += 1
                assignments[p.key] = va

        rebalance(assignments, team_codes)
        logger.info("Venues assigned: %s", home_counts(assignments, team_codes))
        return assignments
