"""Tests for scheduler.py — the full generation pipeline."""

from collections import defaultdict
from datetime import date, timedelta

import pytest

from sixnations import scheduler
from sixnations.errors import DataLookupError, SchedulingError, ValidationError
from sixnations.models import PreviousFixture, Stadium, Team, pair_key
from sixnations.scheduler import ScheduleOptions, generate_schedule, select_candidate
from sixnations.store import InMemoryFixtureHistory
from sixnations.travel import travel_spread, within_median_threshold

STADIUMS = {
    "ENG": Stadium("Twickenham Stadium", "London", latitude=51.4559, longitude=-0.3415),
    "WAL": Stadium("Principality Stadium", "Cardiff", latitude=51.4782, longitude=-3.1826),
    "SCO": Stadium("Murrayfield Stadium", "Edinburgh", latitude=55.9422, longitude=-3.2409),
    "IRE": Stadium("Aviva Stadium", "Dublin", latitude=53.3352, longitude=-6.2285),
    "ITA": Stadium("Stadio Olimpico", "Rome", latitude=41.9341, longitude=12.4547),
    "FRA": Stadium("Stade de France", "Saint-Denis", latitude=48.9245, longitude=2.3602),
}
NAMES = {"ENG": "England", "WAL": "Wales", "SCO": "Scotland",
         "IRE": "Ireland", "ITA": "Italy", "FRA": "France"}

HISTORY_2024 = [
    ("FRA", "IRE"), ("ITA", "ENG"), ("WAL", "SCO"),
    ("SCO", "FRA"), ("ENG", "WAL"), ("IRE", "ITA"),
    ("IRE", "WAL"), ("SCO", "ENG"), ("FRA", "ITA"),
    ("ITA", "SCO"), ("ENG", "IRE"), ("WAL", "FRA"),
    ("WAL", "ITA"), ("IRE", "SCO"), ("FRA", "ENG"),
]


def _teams():
    return [Team(code, NAMES[code], i + 1, STADIUMS[code])
            for i, code in enumerate(NAMES)]


def _history():
    return InMemoryFixtureHistory(
        PreviousFixture(2024, h, a) for h, a in HISTORY_2024
    )


class _FailingHistory:
    def previous_fixture(self, team_a, team_b, season):
        raise TimeoutError("history store timed out")


class TestScheduleShape:
    @pytest.mark.parametrize("algorithm", ["random", "marquee"])
    def test_every_pair_once(self, algorithm):
        for seed in range(5):
            s = generate_schedule(_teams(), 2025, ScheduleOptions(algorithm=algorithm),
                                  seed=seed)
            assert len(s.fixtures) == 15
            keys = [f.pairing_key for f in s.fixtures]
            assert len(set(keys)) == 15

    def test_every_team_once_per_round(self):
        s = generate_schedule(_teams(), 2025, seed=3)
        rounds = s.by_round()
        assert sorted(rounds) == [1, 2, 3, 4, 5]
        for fixtures in rounds.values():
            assert len(fixtures) == 3
            playing = [t for f in fixtures for t in (f.home_team, f.away_team)]
            assert sorted(playing) == sorted(NAMES)

    def test_weekend_only(self):
        s = generate_schedule(_teams(), 2025, ScheduleOptions(rest_weeks=[2, 3]), seed=1)
        for f in s.fixtures:
            assert f.date.weekday() in (5, 6)

    def test_same_day_kickoff_gap(self):
        s = generate_schedule(_teams(), 2025, ScheduleOptions(algorithm="marquee"), seed=2)
        by_day = defaultdict(list)
        for f in s.fixtures:
            by_day[f.date].append(f.kickoff)
        for kickoffs in by_day.values():
            kickoffs.sort()
            for a, b in zip(kickoffs, kickoffs[1:]):
                assert b - a >= timedelta(minutes=120)

    def test_home_balance(self):
        for seed in range(10):
            s = generate_schedule(_teams(), 2025, seed=seed, history=_history())
            homes = defaultdict(int)
            for f in s.fixtures:
                homes[f.home_team] += 1
            assert all(homes[c] in (2, 3) for c in NAMES), homes

    def test_venue_is_home_stadium(self):
        s = generate_schedule(_teams(), 2025, seed=5)
        for f in s.fixtures:
            assert f.stadium == STADIUMS[f.home_team]
            assert f.location == STADIUMS[f.home_team].city
            assert f.season == 2025

    def test_rounds_in_date_order(self):
        s = generate_schedule(_teams(), 2025, ScheduleOptions(rest_weeks=[1, 4]), seed=9)
        starts = [min(f.kickoff for f in fx) for _, fx in sorted(s.by_round().items())]
        assert starts == sorted(starts)
        assert starts[0].date() == date(2025, 2, 1)

    def test_default_window_first_saturday(self):
        # 2026-02-01 is a Sunday
        s = generate_schedule(_teams(), 2026, seed=1)
        first = min(f.date for f in s.fixtures)
        assert first == date(2026, 2, 7)


class TestDeterminism:
    def test_same_seed_same_schedule(self):
        a = generate_schedule(_teams(), 2025, seed=42, history=_history())
        b = generate_schedule(_teams(), 2025, seed=42, history=_history())
        assert a.to_records() == b.to_records()
        assert a.summary == b.summary

    def test_different_seeds_vary(self):
        seen = set()
        for seed in range(8):
            s = generate_schedule(_teams(), 2025, seed=seed)
            seen.add(tuple(sorted(f.pairing_key for f in s.by_round()[1])))
        assert len(seen) > 1

    def test_unseeded_calls_vary(self):
        orderings = set()
        for _ in range(5):
            s = generate_schedule(_teams(), 2025)
            first = sorted(s.by_round()[1], key=lambda f: f.kickoff)
            orderings.add(tuple(f.home_team for f in first))
        assert len(orderings) > 1


class TestHistory:
    def test_venues_alternate(self):
        s = generate_schedule(_teams(), 2025, seed=4, history=_history())
        last_home = {pair_key(h, a): h for h, a in HISTORY_2024}
        for f in s.fixtures:
            assert f.home_team != last_home[f.pairing_key]

    def test_failing_history_propagates(self):
        with pytest.raises(DataLookupError):
            generate_schedule(_teams(), 2025, seed=1, history=_FailingHistory())

    def test_future_history_ignored(self):
        history = InMemoryFixtureHistory([PreviousFixture(2030, "ENG", "WAL")])
        s = generate_schedule(_teams(), 2025, seed=1, history=history)
        assert not any("2030" in line for line in s.summary)


class TestMarquee:
    def test_marquee_last_kickoff_of_round_five(self):
        for seed in range(5):
            s = generate_schedule(_teams(), 2025, ScheduleOptions(algorithm="marquee"),
                                  seed=seed, history=_history())
            final = sorted(s.by_round()[5], key=lambda f: f.kickoff)
            assert final[-1].pairing_key == ("ENG", "WAL")
            assert final[-1].kickoff == max(f.kickoff for f in s.fixtures)

    def test_summary(self):
        s = generate_schedule(_teams(), 2025,
                              ScheduleOptions(algorithm="marquee", rest_weeks=[2]), seed=1)
        text = "\n".join(s.summary)
        assert "Round 5 Extravaganza" in text
        assert "Match Week 5" in text
        assert "Rest Week inserted after Round 2" in text
        assert "Per-team fixtures:" in text


class TestTravel:
    def test_not_worse_than_single_random_run(self):
        options = ScheduleOptions(algorithm="travel", travel_attempts=20)
        best = generate_schedule(_teams(), 2025, options, seed=11)
        single = generate_schedule(_teams(), 2025, ScheduleOptions(), seed=11)
        assert best.total_distance_km <= single.total_distance_km + 1e-6

    def test_summary_reports_distances(self):
        s = generate_schedule(_teams(), 2025,
                              ScheduleOptions(algorithm="travel", travel_attempts=3), seed=2)
        assert any(line.startswith("Total travel distance") for line in s.summary)
        assert set(s.team_distances_km) == set(NAMES)
        assert s.total_distance_km == pytest.approx(sum(s.team_distances_km.values()))


class TestTravelBalanced:
    def test_spread_no_worse_than_any_candidate(self, monkeypatch):
        seen = {}

        def capture(travels, algorithm, median_threshold_km):
            seen["travels"] = travels
            return select_candidate(travels, algorithm, median_threshold_km)

        monkeypatch.setattr(scheduler, "select_candidate", capture)
        options = ScheduleOptions(algorithm="travel_balanced", travel_attempts=30)
        s = generate_schedule(_teams(), 2025, options, seed=1, history=_history())

        travels = seen["travels"]
        assert len(travels) == 30
        valid = [t for t in travels if within_median_threshold(t, 500)]
        pool = valid or travels
        chosen = travel_spread(s.team_distances_km)["stdev"]
        assert chosen <= min(travel_spread(t)["stdev"] for t in pool) + 1e-9
        if valid:
            assert within_median_threshold(s.team_distances_km, 500)

    def test_more_even_than_total_objective(self):
        total = generate_schedule(
            _teams(), 2025, ScheduleOptions(algorithm="travel", travel_attempts=20), seed=4)
        even = generate_schedule(
            _teams(), 2025,
            ScheduleOptions(algorithm="travel_balanced", travel_attempts=20,
                            median_threshold_km=1e9),
            seed=4)
        # same seed, same candidates; only the selection differs
        assert (travel_spread(even.team_distances_km)["stdev"]
                <= travel_spread(total.team_distances_km)["stdev"] + 1e-9)
        assert even.total_distance_km >= total.total_distance_km - 1e-6

    def test_summary(self):
        s = generate_schedule(
            _teams(), 2025,
            ScheduleOptions(algorithm="travel_balanced", travel_attempts=3), seed=2)
        text = "\n".join(s.summary)
        assert "Travel Balanced" in text
        assert "by travel spread" in text

    def test_negative_threshold_rejected(self):
        with pytest.raises(ValidationError, match="median_threshold_km"):
            generate_schedule(_teams(), 2025,
                              ScheduleOptions(algorithm="travel_balanced",
                                              median_threshold_km=-1))


class TestSelectCandidate:
    TRAVELS = [
        {"A": 1000.0, "B": 1000.0, "C": 4000.0},   # total 6000, uneven
        {"A": 2400.0, "B": 2500.0, "C": 2600.0},   # total 7500, even
        {"A": 1500.0, "B": 2000.0, "C": 2700.0},   # total 6200, within 700 of median
    ]

    def test_total_objective(self):
        assert select_candidate(self.TRAVELS, "travel") == 0

    def test_balanced_objective(self):
        assert select_candidate(self.TRAVELS, "travel_balanced", 500) == 1

    def test_balanced_prefers_threshold_over_raw_spread(self):
        travels = [
            {"A": 0.0, "B": 600.0, "C": 600.0},      # lower stdev, 600 km off median
            {"A": 0.0, "B": 450.0, "C": 900.0},      # higher stdev, within 450 km
        ]
        assert select_candidate(travels, "travel_balanced", 500) == 1

    def test_balanced_fallback_lowest_spread(self):
        assert select_candidate(self.TRAVELS[::2], "travel_balanced", 10) == 1

    def test_other_algorithms_keep_first(self):
        assert select_candidate(self.TRAVELS, "random") == 0


class TestErrors:
    @pytest.mark.parametrize("count", [0, 5, 7])
    def test_wrong_team_count(self, count):
        teams = (_teams() * 2)[:count]
        if count == 7:
            teams = _teams() + [Team("GEO", "Georgia", 7, STADIUMS["ENG"])]
        with pytest.raises(ValidationError, match=r"(?i)exactly 6 teams"):
            generate_schedule(teams, 2025, seed=1)

    def test_unknown_algorithm(self):
        with pytest.raises(ValidationError, match="algorithm"):
            generate_schedule(_teams(), 2025, ScheduleOptions(algorithm="fastest"))

    def test_bad_rest_week(self):
        with pytest.raises(ValidationError, match="Rest weeks"):
            generate_schedule(_teams(), 2025, ScheduleOptions(rest_weeks=[6]))

    def test_window_too_narrow(self):
        options = ScheduleOptions(window_start=date(2025, 2, 1),
                                  window_end=date(2025, 2, 25))
        with pytest.raises(SchedulingError):
            generate_schedule(_teams(), 2025, options, seed=1)

    def test_rest_weeks_push_past_window(self):
        options = ScheduleOptions(rest_weeks=[1, 2, 3, 4],
                                  window_start=date(2025, 2, 1),
                                  window_end=date(2025, 3, 10))
        with pytest.raises(SchedulingError):
            generate_schedule(_teams(), 2025, options, seed=1)

    def test_team_without_stadium(self):
        teams = _teams()
        teams[0] = Team("ENG", "England", 1)
        with pytest.raises(DataLookupError):
            generate_schedule(teams, 2025, seed=1)
