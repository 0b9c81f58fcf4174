"""Travel distances between home stadiums.

Great-circle (haversine) distances only. A team travels from wherever it
currently is to each away match, returns home before a home match, and
returns home at the end of the season.
"""

import logging
import math
from statistics import median, pstdev

from sixnations.models import Fixture, Stadium, Team

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0
DEFAULT_MEDIAN_THRESHOLD_KM = 500.0


def haversine_km(a: tuple[float, float], b: tuple[float, float]) -> float:
    lat1, lon1 = map(math.radians, a)
    lat2, lon2 = map(math.radians, b)
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def stadium_distance_km(a: Stadium, b: Stadium) -> float:
    return haversine_km(a.coordinates, b.coordinates)


def compute_travel(fixtures: list[Fixture], teams: list[Team]) -> tuple[dict[str, float], list[dict]]:
    """Per-team season travel and the individual legs.

    Returns (team_distances, legs). Each leg is a dict with team, round,
    from/to stadium names, distance_km and note.
    """
    home = {t.code: t.stadium for t in teams}
    where = dict(home)
    totals = {t.code: 0.0 for t in teams}
    legs = []

    def travel(code: str, dest: Stadium, rnd: int, note: str) -> None:
        src = where[code]
        if src == dest:
            return
        d = stadium_distance_km(src, dest)
        totals[code] += d
        legs.append({
            "team": code, "round": rnd, "from": src.name, "to": dest.name,
            "distance_km": d, "note": note,
        })
        where[code] = dest

    for f in sorted(fixtures, key=lambda f: (f.kickoff, f.round_number)):
        travel(f.home_team, home[f.home_team], f.round_number, "Return home")
        travel(f.away_team, f.stadium, f.round_number, f"Away at {f.home_team}")

    last_round = max((f.round_number for f in fixtures), default=0)
    for t in teams:
        travel(t.code, home[t.code], last_round, "Return home at season end")

    return totals, legs


def travel_spread(team_distances: dict[str, float]) -> dict:
    values = list(team_distances.values())
    if not values:
        return {"total": 0.0, "median": 0.0, "stdev": 0.0, "max_from_median": 0.0}
    med = median(values)
    return {
        "total": sum(values),
        "median": med,
        "stdev": pstdev(values),
        "max_from_median": max(abs(v - med) for v in values),
    }


def within_median_threshold(team_distances: dict[str, float],
                            threshold_km: float = DEFAULT_MEDIAN_THRESHOLD_KM) -> bool:
    """True when every team travels within ``threshold_km`` of the median."""
    return travel_spread(team_distances)["max_from_median"] <= threshold_km


def travel_summary_lines(team_distances: dict[str, float], teams: list[Team]) -> list[str]:
    names = {t.code: t.name for t in teams}
    spread = travel_spread(team_distances)
    lines = [f"Total travel distance: {spread['total']:.1f} km "
             f"(median {spread['median']:.1f} km, std dev {spread['stdev']:.1f} km)"]
    for code, km in sorted(team_distances.items(), key=lambda kv: kv[1]):
        lines.append(f" - {names.get(code, code)}: {km:.1f} km")
    return lines
