"""Lookup collaborators used by the scheduling engine.

The engine only reads through these interfaces. Persisting a generated
schedule is the caller's job.
"""

import logging
from typing import Iterable, Optional, Protocol

from sixnations.errors import DataLookupError
from sixnations.models import PreviousFixture, Stadium, Team, pair_key

logger = logging.getLogger(__name__)


class TeamDirectory(Protocol):
    def get_team(self, code: str) -> Team:
        ...


class FixtureHistory(Protocol):
    def previous_fixture(self, team_a: str, team_b: str,
                         season: int) -> Optional[PreviousFixture]:
        ...


class InMemoryTeamDirectory:
    """Team and stadium lookup backed by a dict."""

    def __init__(self, teams: Iterable[Team]):
        self._teams = {t.code: t for t in teams}

    def get_team(self, code: str) -> Team:
        try:
            return self._teams[code]
        except KeyError:
            raise DataLookupError(f"Unknown team: {code}") from None

    def get_stadium(self, code: str) -> Stadium:
        team = self.get_team(code)
        if team.stadium is None:
            raise DataLookupError(f"Team {code} has no home stadium")
        return team.stadium


class InMemoryFixtureHistory:
    """Previous-season fixtures keyed by unordered team pair."""

    def __init__(self, fixtures: Iterable[PreviousFixture] = ()):
        self._by_pair: dict[tuple[str, str], list[PreviousFixture]] = {}
        for f in fixtures:
            self._by_pair.setdefault(f.key, []).append(f)

    def __len__(self):
        return sum(len(v) for v in self._by_pair.values())

    def previous_fixture(self, team_a: str, team_b: str,
                         season: int) -> Optional[PreviousFixture]:
        """Most recent fixture between the two teams before ``season``."""
        prior = [f for f in self._by_pair.get(pair_key(team_a, team_b), [])
                 if f.season < season]
        if not prior:
            return None
        return max(prior, key=lambda f: f.season)


def load_history(history: FixtureHistory, team_codes: list[str],
                 season: int) -> dict[tuple[str, str], PreviousFixture]:
    """Fetch every prior fixture for the roster once, at the start of a run.

    Lookup failures become DataLookupError. A missing record just means
    there is no prior data for that pairing.
    """
    found: dict[tuple[str, str], PreviousFixture] = {}
    for i, a in enumerate(team_codes):
        for b in team_codes[i + 1:]:
            try:
                prev = history.previous_fixture(a, b, season)
            except DataLookupError:
                raise
            except Exception as e:
                raise DataLookupError(
                    f"Previous fixture lookup failed for {a} vs {b}: {e}"
                ) from e
            if prev is not None:
                found[pair_key(a, b)] = prev
    logger.info("Loaded %d previous fixtures before season %d", len(found), season)
    return found
