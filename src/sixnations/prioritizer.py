"""Round ordering strategies.

A strategy takes the five generated rounds and returns them relabelled
1..5, with pairings inside each round in kickoff order.
"""

import logging
import random
from dataclasses import dataclass
from typing import Protocol

from sixnations.models import Pairing, Round, Team, pair_key
from sixnations.roundrobin import TEAM_COUNT, factorize_with_final_round

logger = logging.getLogger(__name__)


@dataclass
class InterestWeights:
    """Weights for the competitiveness ("interest") of a pairing.

    interest = alpha * (N - rank_diff) + beta * (2N - rank_sum)

    Close rankings raise interest through alpha; top-tier clashes
    (small rank sum) raise it through beta.
    """
    alpha: float = 1.0
    beta: float = 2.0
    team_count: int = TEAM_COUNT

    def interest(self, rank_a: int, rank_b: int) -> float:
        diff = abs(rank_a - rank_b)
        total = rank_a + rank_b
        return (self.alpha * (self.team_count - diff)
                + self.beta * (2 * self.team_count - total))


@dataclass
class PairingInterest:
    pairing: Pairing
    diff: int
    rank_sum: int
    interest: float
    position: int = 0  # 1 = most interesting


def rank_pairings(pairings: list[Pairing], rankings: dict[str, int],
                  weights: InterestWeights) -> list[PairingInterest]:
    """Score pairings, most interesting first (ties: smaller rank sum)."""
    scored = []
    for p in pairings:
        ra, rb = rankings[p.team_a], rankings[p.team_b]
        scored.append(PairingInterest(
            pairing=p,
            diff=abs(ra - rb),
            rank_sum=ra + rb,
            interest=weights.interest(ra, rb),
        ))
    scored.sort(key=lambda s: (-s.interest, s.rank_sum))
    for i, s in enumerate(scored, 1):
        s.position = i
    return scored


def marquee_key(teams: list[Team]) -> tuple[str, str]:
    """Pairing key of the rank-1 vs rank-2 match."""
    ranked = sorted(teams, key=lambda t: t.ranking)
    return pair_key(ranked[0].code, ranked[1].code)


class RoundOrderingStrategy(Protocol):
    name: str

    def order(self, rounds: list[Round], teams: list[Team],
              rng: random.Random) -> list[Round]:
        ...

    def summary_lines(self, rounds: list[Round], teams: list[Team]) -> list[str]:
        ...


class RandomRoundOrder:
    """Keep the generator's (already shuffled) round order."""

    name = "random"

    def order(self, rounds, teams, rng):
        return sorted(rounds, key=lambda r: r.number)

    def summary_lines(self, rounds, teams):
        return []


class MarqueeRoundOrder:
    """Push high-interest pairings late and the marquee match into round 5.

    With ``pin_runner_up`` the factorization is rebuilt so that round 5
    holds #1 v #2, #3 v #4 and #5 v #6.
    """

    name = "marquee"

    def __init__(self, weights: InterestWeights | None = None,
                 pin_runner_up: bool = True):
        self.weights = weights or InterestWeights()
        self.pin_runner_up = pin_runner_up

    def _interest(self, teams: list[Team]) -> dict[tuple[str, str], float]:
        rankings = {t.code: t.ranking for t in teams}
        codes = [t.code for t in teams]
        pairings = [Pairing(a, b) for i, a in enumerate(codes) for b in codes[i + 1:]]
        return {s.pairing.key: s.interest
                for s in rank_pairings(pairings, rankings, self.weights)}

    def order(self, rounds: list[Round], teams: list[Team],
              rng: random.Random) -> list[Round]:
        interest = self._interest(teams)
        marquee = marquee_key(teams)

        if self.pin_runner_up:
            ranked = [t.code for t in sorted(teams, key=lambda t: t.ranking)]
            final = [Pairing(ranked[4], ranked[5]),
                     Pairing(ranked[2], ranked[3]),
                     Pairing(ranked[0], ranked[1])]
            rounds = factorize_with_final_round([t.code for t in teams], final, rng)

        def round_score(rnd: Round) -> float:
            return sum(interest[p.key] for p in rnd.pairings)

        ordered = sorted(rounds, key=round_score)
        marquee_round = next(r for r in ordered
                             if any(p.key == marquee for p in r.pairings))
        if ordered[-1] is not marquee_round:
            logger.debug("Moving marquee round ahead of a higher-scored round")
            ordered.remove(marquee_round)
            ordered.append(marquee_round)

        for i, rnd in enumerate(ordered, 1):
            rnd.number = i
            rnd.pairings.sort(key=lambda p: (p.key == marquee, interest[p.key]))

        logger.info("Round scores: %s",
                    [round_score(r) for r in ordered])
        return ordered

    def summary_lines(self, rounds: list[Round], teams: list[Team]) -> list[str]:
        rankings = {t.code: t.ranking for t in teams}
        names = {t.code: t.name for t in teams}
        pairings = [p for rnd in rounds for p in rnd.pairings]
        lines = [f"Interest weights: alpha={self.weights.alpha}, beta={self.weights.beta}"]
        if self.pin_runner_up:
            lines.append("Round 5 pinned: #1 v #2 in the final slot, #3 v #4 second-last.")
        else:
            lines.append("Round 5 holds the #1 v #2 match in the final slot.")
        lines.append("Match interest rankings (highest first):")
        for s in rank_pairings(pairings, rankings, self.weights):
            p = s.pairing
            lines.append(
                f"{s.position} - {names[p.team_a]} (rank {rankings[p.team_a]}) vs "
                f"{names[p.team_b]} (rank {rankings[p.team_b]}), "
                f"interest={s.interest:g}, sum={s.rank_sum}, diff={s.diff}"
            )
        return lines
