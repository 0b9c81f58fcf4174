"""Data models for the Six Nations fixture scheduler."""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import Optional


class DayOfWeek(Enum):
    Mon = 0
    Tue = 1
    Wed = 2
    Thu = 3
    Fri = 4
    Sat = 5
    Sun = 6

    @classmethod
    def from_str(cls, s: str) -> "DayOfWeek":
        return cls[s.strip()[:3].capitalize()]

    def is_weekend(self) -> bool:
        return self.value >= 5


WEEKENDS = [DayOfWeek.Sat, DayOfWeek.Sun]


@dataclass
class Stadium:
    """A home venue. Coordinates are used for travel distances."""
    name: str
    city: str
    country: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    capacity: int = 0
    surface: str = "Grass"

    @property
    def coordinates(self) -> tuple[float, float]:
        return (self.latitude, self.longitude)


@dataclass
class Team:
    """A competing nation. Ranking 1 is the best side."""
    code: str
    name: str
    ranking: int
    stadium: Optional[Stadium] = None

    def __hash__(self):
        return hash(self.code)

    def __eq__(self, other):
        if isinstance(other, Team):
            return self.code == other.code
        return False


def pair_key(a: str, b: str) -> tuple[str, str]:
    """Order-independent key for a pair of team codes."""
    return (a, b) if a < b else (b, a)


@dataclass
class Pairing:
    """An unordered pairing of two teams (no home/away yet)."""
    team_a: str
    team_b: str

    @property
    def key(self) -> tuple[str, str]:
        return pair_key(self.team_a, self.team_b)

    def involves(self, team_code: str) -> bool:
        return team_code in (self.team_a, self.team_b)

    def opponent(self, team_code: str) -> str:
        if team_code == self.team_a:
            return self.team_b
        return self.team_a


@dataclass
class Round:
    """Three pairings in which every team plays exactly once.

    Pairing order is kickoff order: the last pairing kicks off last.
    """
    number: int
    pairings: list[Pairing]

    def teams(self) -> set[str]:
        codes = set()
        for p in self.pairings:
            codes.add(p.team_a)
            codes.add(p.team_b)
        return codes


@dataclass
class VenueAssignment:
    home_team: str
    away_team: str
    alternated: bool = False  # flipped from last season's fixture
    note: str = ""


@dataclass
class PreviousFixture:
    """A fixture from an earlier season. Read-only input."""
    season: int
    home_team: str
    away_team: str
    round_number: int = 0
    date: Optional[date] = None

    @property
    def key(self) -> tuple[str, str]:
        return pair_key(self.home_team, self.away_team)


@dataclass
class Fixture:
    """A fully scheduled match with kickoff, home/away and venue."""
    round_number: int
    kickoff: datetime
    home_team: str
    away_team: str
    stadium: Stadium
    location: str
    season: int

    @property
    def date(self) -> date:
        return self.kickoff.date()

    @property
    def start_time(self) -> time:
        return self.kickoff.time()

    @property
    def pairing_key(self) -> tuple[str, str]:
        return pair_key(self.home_team, self.away_team)

    def to_record(self) -> dict:
        """Plain dict for a persistence collaborator."""
        return {
            "round": self.round_number,
            "date": self.kickoff.isoformat(),
            "homeTeam": self.home_team,
            "awayTeam": self.away_team,
            "stadium": self.stadium.name,
            "location": self.location,
            "season": self.season,
        }


@dataclass(frozen=True)
class Schedule:
    """Result of one generation run. Never mutated after it is returned."""
    fixtures: tuple[Fixture, ...]
    summary: tuple[str, ...]
    season: int
    algorithm: str
    total_distance_km: Optional[float] = None
    team_distances_km: dict[str, float] = field(default_factory=dict)

    def by_round(self) -> dict[int, list[Fixture]]:
        rounds: dict[int, list[Fixture]] = {}
        for f in self.fixtures:
            rounds.setdefault(f.round_number, []).append(f)
        return rounds

    def to_records(self) -> list[dict]:
        return [f.to_record() for f in self.fixtures]
