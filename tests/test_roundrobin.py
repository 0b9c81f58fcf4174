"""Tests for roundrobin.py — pairing generation and verification."""

import random

import pytest

from sixnations.errors import ValidationError
from sixnations.models import Pairing, Round
from sixnations.roundrobin import (
    factorize_with_final_round,
    generate_pairings,
    generate_round_robin,
    require_six_teams,
    verify_round_robin,
)

TEAMS = ["ENG", "WAL", "SCO", "IRE", "ITA", "FRA"]


class TestRequireSixTeams:
    def test_accepts_six(self):
        require_six_teams(TEAMS)

    @pytest.mark.parametrize("teams", [TEAMS[:5], TEAMS + ["GEO"], []])
    def test_rejects_wrong_count(self, teams):
        with pytest.raises(ValidationError, match=r"(?i)exactly 6 teams"):
            require_six_teams(teams)

    def test_rejects_duplicates(self):
        with pytest.raises(ValidationError, match=r"(?i)exactly 6 teams"):
            require_six_teams(["ENG"] * 6)


class TestGeneratePairings:
    def test_fifteen_unique(self):
        pairings = generate_pairings(TEAMS)
        assert len(pairings) == 15
        assert len({p.key for p in pairings}) == 15
        assert all(p.team_a != p.team_b for p in pairings)


class TestGenerateRoundRobin:
    def test_five_rounds_of_three(self):
        rounds = generate_round_robin(TEAMS, random.Random(1))
        assert len(rounds) == 5
        for r in rounds:
            assert len(r.pairings) == 3

    def test_every_pair_plays_once(self):
        for seed in range(20):
            rounds = generate_round_robin(TEAMS, random.Random(seed))
            result = verify_round_robin(rounds, TEAMS)
            assert result["valid"], result["errors"]
            for t in TEAMS:
                assert result["games_per_team"][t] == 5

    def test_every_team_once_per_round(self):
        rounds = generate_round_robin(TEAMS, random.Random(99))
        for r in rounds:
            assert r.teams() == set(TEAMS)

    def test_round_numbers(self):
        rounds = generate_round_robin(TEAMS, random.Random(3))
        assert [r.number for r in rounds] == [1, 2, 3, 4, 5]

    def test_deterministic_with_seed(self):
        r1 = generate_round_robin(TEAMS, random.Random(7))
        r2 = generate_round_robin(TEAMS, random.Random(7))
        for a, b in zip(r1, r2):
            assert [p.key for p in a.pairings] == [p.key for p in b.pairings]

    def test_different_seeds_differ(self):
        first_rounds = set()
        for seed in range(10):
            rounds = generate_round_robin(TEAMS, random.Random(seed))
            first_rounds.add(tuple((p.team_a, p.team_b) for p in rounds[0].pairings))
        assert len(first_rounds) > 1

    def test_wrong_team_count(self):
        with pytest.raises(ValidationError):
            generate_round_robin(TEAMS[:4])


class TestFactorizeWithFinalRound:
    FINAL = [Pairing("ITA", "FRA"), Pairing("SCO", "IRE"), Pairing("ENG", "WAL")]

    def test_final_round_fixed(self):
        rounds = factorize_with_final_round(TEAMS, self.FINAL, random.Random(5))
        assert rounds[-1].number == 5
        assert [p.key for p in rounds[-1].pairings] == [p.key for p in self.FINAL]

    def test_valid_round_robin(self):
        for seed in range(10):
            rounds = factorize_with_final_round(TEAMS, self.FINAL, random.Random(seed))
            result = verify_round_robin(rounds, TEAMS)
            assert result["valid"], result["errors"]

    def test_rejects_final_round_missing_a_team(self):
        bad = [Pairing("ENG", "WAL"), Pairing("ENG", "SCO"), Pairing("ITA", "FRA")]
        with pytest.raises(ValidationError):
            factorize_with_final_round(TEAMS, bad)


class TestVerifyRoundRobin:
    def test_detects_missing_matchup(self):
        rounds = generate_round_robin(TEAMS, random.Random(1))
        rounds[0].pairings.pop()
        result = verify_round_robin(rounds, TEAMS)
        assert not result["valid"]
        assert any("played 0 times" in e for e in result["errors"])

    def test_detects_team_playing_twice_in_round(self):
        rounds = [Round(1, [Pairing("ENG", "WAL"), Pairing("ENG", "SCO"),
                            Pairing("IRE", "ITA")])]
        result = verify_round_robin(rounds, TEAMS)
        assert not result["valid"]
        assert any("ENG" in e and "twice" in e for e in result["errors"])

    def test_detects_self_play(self):
        rounds = [Round(1, [Pairing("ENG", "ENG")])]
        result = verify_round_robin(rounds, TEAMS)
        assert any("plays itself" in e for e in result["errors"])
