"""Config loading and validation for the Six Nations scheduler."""

from datetime import date, time
from pathlib import Path

import yaml

from sixnations.errors import ConfigError
from sixnations.models import DayOfWeek, PreviousFixture, Stadium, Team
from sixnations.prioritizer import InterestWeights
from sixnations.travel import DEFAULT_MEDIAN_THRESHOLD_KM
from sixnations.slotter import (
    DEFAULT_FINAL_KICKOFFS, DEFAULT_MIN_GAP_MINUTES, DEFAULT_STANDARD_KICKOFFS,
    KickoffSlot,
)


def parse_time(s: str) -> time:
    """Parse time strings like '2:15pm', '10am', '14:15'."""
    s = s.strip()
    s_lower = s.lower()

    is_pm = s_lower.endswith("pm")
    is_am = s_lower.endswith("am")

    s_clean = s_lower
    if is_pm or is_am:
        s_clean = s_clean[:-2].strip()

    if ":" in s_clean:
        parts = s_clean.split(":")
        h = int(parts[0])
        m = int(parts[1])
    else:
        h = int(s_clean)
        m = 0

    if is_pm and h < 12:
        h += 12
    elif is_am and h == 12:
        h = 0

    return time(h, m)


def parse_date(s: str) -> date:
    """Parse date string YYYY-MM-DD."""
    parts = s.strip().split("-")
    return date(int(parts[0]), int(parts[1]), int(parts[2]))


def parse_time_minutes(value) -> time:
    """YAML reads an unquoted 14:15 as 855 minutes (sexagesimal)."""
    if isinstance(value, int):
        return time(value // 60, value % 60)
    return parse_time(str(value))


def _parse_kickoffs(raw_slots, default: list[KickoffSlot]) -> list[KickoffSlot]:
    if not raw_slots:
        return list(default)
    return [KickoffSlot(day=DayOfWeek.from_str(s["day"]),
                        start_time=parse_time_minutes(s["time"]))
            for s in raw_slots]


def load_config(path: str | Path) -> dict:
    """Load and validate config YAML, returning structured data.

    Returns dict with:
    - season: {year, window_start, window_end, rest_weeks, min_kickoff_gap_minutes}
    - kickoffs: {standard: [KickoffSlot], final: [KickoffSlot]}
    - interest: {weights: InterestWeights, pin_runner_up: bool}
    - travel: {attempts, median_threshold_km}
    - stadiums: dict[name -> Stadium]
    - teams: dict[code -> Team]
    - history: list[PreviousFixture]
    """
    path = Path(path)
    with open(path) as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict):
        raise ConfigError(f"{path}: expected a mapping at top level")

    try:
        raw_season = raw["season"]
        year = int(raw_season["year"])
        season = {
            "year": year,
            "window_start": parse_date(str(raw_season.get("window_start", f"{year}-02-01"))),
            "window_end": parse_date(str(raw_season.get("window_end", f"{year}-03-31"))),
            "rest_weeks": [int(r) for r in raw_season.get("rest_weeks", [])],
            "min_kickoff_gap_minutes": int(
                raw_season.get("min_kickoff_gap_minutes", DEFAULT_MIN_GAP_MINUTES)
            ),
        }

        raw_kickoffs = raw.get("kickoffs") or {}
        kickoffs = {
            "standard": _parse_kickoffs(raw_kickoffs.get("standard"),
                                        DEFAULT_STANDARD_KICKOFFS),
            "final": _parse_kickoffs(raw_kickoffs.get("final"),
                                     DEFAULT_FINAL_KICKOFFS),
        }

        raw_interest = raw.get("interest") or {}
        interest = {
            "weights": InterestWeights(
                alpha=float(raw_interest.get("alpha", 1)),
                beta=float(raw_interest.get("beta", 2)),
            ),
            "pin_runner_up": bool(raw_interest.get("pin_runner_up", True)),
        }

        raw_travel = raw.get("travel") or {}
        travel = {
            "attempts": int(raw_travel.get("attempts", 50)),
            "median_threshold_km": float(raw_travel.get("median_threshold_km",
                                                        DEFAULT_MEDIAN_THRESHOLD_KM)),
        }

        stadiums: dict[str, Stadium] = {}
        for name, sdata in (raw.get("stadiums") or {}).items():
            stadiums[name] = Stadium(
                name=name,
                city=sdata["city"],
                country=sdata.get("country", ""),
                latitude=float(sdata["latitude"]),
                longitude=float(sdata["longitude"]),
                capacity=int(sdata.get("capacity", 0)),
                surface=sdata.get("surface", "Grass"),
            )

        teams: dict[str, Team] = {}
        for code, tdata in raw["teams"].items():
            teams[code] = Team(
                code=code,
                name=tdata.get("name", code),
                ranking=int(tdata["ranking"]),
                stadium=stadiums.get(tdata.get("stadium")),
            )

        history: list[PreviousFixture] = []
        for hseason, fixtures in (raw.get("history") or {}).items():
            for fx in fixtures:
                history.append(PreviousFixture(
                    season=int(hseason),
                    home_team=fx["home"],
                    away_team=fx["away"],
                    round_number=int(fx.get("round", 0)),
                    date=parse_date(str(fx["date"])) if "date" in fx else None,
                ))
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise ConfigError(f"{path}: invalid configuration ({e!r})") from e

    # Validate
    errors = []
    for code, tdata in raw["teams"].items():
        if teams[code].stadium is None:
            errors.append(f"Team {code} references unknown stadium {tdata.get('stadium')!r}")
    rankings = [t.ranking for t in teams.values()]
    if len(set(rankings)) != len(rankings):
        errors.append("Team rankings must be unique")
    for fx in history:
        for code in (fx.home_team, fx.away_team):
            if code not in teams:
                errors.append(f"History {fx.season}: unknown team {code}")
    if season["window_end"] < season["window_start"]:
        errors.append("Season window ends before it starts")

    if errors:
        raise ConfigError("Config validation errors:\n  " + "\n  ".join(errors))

    return {
        "season": season,
        "kickoffs": kickoffs,
        "interest": interest,
        "travel": travel,
        "stadiums": stadiums,
        "teams": teams,
        "history": history,
    }
