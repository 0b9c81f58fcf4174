"""Fixture generation pipeline for the Six Nations championship.

Single pass, no persisted state:

1. Validate the roster (exactly six teams)
2. Generate pairings and a round-robin (roundrobin.py)
3. Assign home/away (venues.py)
4. Order rounds, if the algorithm prioritizes them (prioritizer.py)
5. Assign weekends and kickoffs (slotter.py)
6. Assemble fixtures and the summary (assembler.py)

The "travel" and "travel_balanced" algorithms repeat steps 2-6 with fresh
randomness. "travel" keeps the candidate with the least total travel,
"travel_balanced" the one with the most even travel across teams. Any
failure aborts the run.
"""

import logging
import random
from dataclasses import dataclass, field
from datetime import date

from sixnations.assembler import build_fixtures, build_summary
from sixnations.errors import ValidationError
from sixnations.models import Schedule, Team
from sixnations.prioritizer import (
    InterestWeights, MarqueeRoundOrder, RandomRoundOrder, RoundOrderingStrategy,
)
from sixnations.roundrobin import ROUND_COUNT, generate_round_robin, require_six_teams
from sixnations.slotter import DEFAULT_MIN_GAP_MINUTES, DateSlotter, KickoffSlot
from sixnations.store import (
    FixtureHistory, InMemoryFixtureHistory, InMemoryTeamDirectory, TeamDirectory,
    load_history,
)
from sixnations.travel import (
    DEFAULT_MEDIAN_THRESHOLD_KM, compute_travel, travel_spread, travel_summary_lines,
    within_median_threshold,
)
from sixnations.venues import BalancedVenueAssigner, VenueAssignmentStrategy

logger = logging.getLogger(__name__)

ALGORITHMS = ("random", "marquee", "travel", "travel_balanced")
TRAVEL_ALGORITHMS = ("travel", "travel_balanced")


@dataclass
class ScheduleOptions:
    """Per-run knobs. ``rest_weeks`` lists rounds followed by a free weekend."""
    algorithm: str = "random"
    rest_weeks: list[int] = field(default_factory=list)
    window_start: date | None = None
    window_end: date | None = None
    standard_kickoffs: list[KickoffSlot] | None = None
    final_kickoffs: list[KickoffSlot] | None = None
    min_gap_minutes: int = DEFAULT_MIN_GAP_MINUTES
    weights: InterestWeights = field(default_factory=InterestWeights)
    pin_runner_up: bool = True
    travel_attempts: int = 50
    median_threshold_km: float = DEFAULT_MEDIAN_THRESHOLD_KM

    def validate(self) -> None:
        if self.algorithm not in ALGORITHMS:
            raise ValidationError(
                f"Unknown algorithm {self.algorithm!r}; choose from {', '.join(ALGORITHMS)}"
            )
        bad = [r for r in self.rest_weeks if not 1 <= r <= ROUND_COUNT]
        if bad:
            raise ValidationError(f"Rest weeks must be rounds 1-{ROUND_COUNT}, got {bad}")
        if self.travel_attempts < 1:
            raise ValidationError("travel_attempts must be at least 1")
        if self.median_threshold_km < 0:
            raise ValidationError("median_threshold_km must not be negative")


@dataclass
class _Candidate:
    fixtures: list
    slots: list
    venues: dict
    rounds: list
    strategy: RoundOrderingStrategy


def select_candidate(travels: list[dict[str, float]], algorithm: str,
                     median_threshold_km: float = DEFAULT_MEDIAN_THRESHOLD_KM) -> int:
    """Index of the candidate to keep, given each candidate's per-team travel.

    "travel" keeps the least total distance (ties: lower std dev).
    "travel_balanced" keeps the lowest std dev among candidates with every
    team within ``median_threshold_km`` of the median, or the lowest std dev
    overall when none qualifies. Anything else keeps the first candidate.
    """
    if algorithm not in TRAVEL_ALGORITHMS:
        return 0
    spreads = [travel_spread(t) for t in travels]
    indices = range(len(travels))
    if algorithm == "travel":
        return min(indices, key=lambda i: (spreads[i]["total"], spreads[i]["stdev"]))

    valid = [i for i in indices if within_median_threshold(travels[i], median_threshold_km)]
    if not valid:
        logger.warning("No candidate keeps every team within %.0f km of the median; "
                       "using the lowest spread", median_threshold_km)
    return min(valid or indices, key=lambda i: spreads[i]["stdev"])


def ordering_strategy(options: ScheduleOptions) -> RoundOrderingStrategy:
    if options.algorithm == "marquee":
        return MarqueeRoundOrder(options.weights, pin_runner_up=options.pin_runner_up)
    return RandomRoundOrder()


def _run_once(teams: list[Team], season: int, options: ScheduleOptions,
              previous: dict, directory: TeamDirectory,
              venue_strategy: VenueAssignmentStrategy,
              slotter: DateSlotter, rng: random.Random) -> _Candidate:
    codes = [t.code for t in teams]
    rounds = generate_round_robin(codes, rng)
    venues = venue_strategy.assign(rounds, previous, rng)
    strategy = ordering_strategy(options)
    rounds = strategy.order(rounds, teams, rng)
    slots = slotter.assign(rounds)
    fixtures = build_fixtures(rounds, venues, slots, directory, season)
    return _Candidate(fixtures, slots, venues, rounds, strategy)


def generate_schedule(teams: list[Team], season: int,
                      options: ScheduleOptions | None = None, *,
                      history: FixtureHistory | None = None,
                      directory: TeamDirectory | None = None,
                      seed: int | None = None,
                      rng: random.Random | None = None) -> Schedule:
    """Generate a full 15-fixture schedule for ``season``.

    Raises ValidationError for a roster that is not exactly six teams,
    SchedulingError when the season window cannot hold the rounds and
    DataLookupError when a collaborator lookup fails.
    """
    require_six_teams([t.code for t in teams])
    options = options or ScheduleOptions()
    options.validate()

    rng = rng or random.Random(seed)
    history = history if history is not None else InMemoryFixtureHistory()
    directory = directory or InMemoryTeamDirectory(teams)
    teams = [directory.get_team(t.code) for t in teams]
    codes = [t.code for t in teams]

    logger.info("Generating %s schedule for season %d", options.algorithm, season)
    previous = load_history(history, codes, season)

    slotter = DateSlotter(
        window_start=options.window_start or date(season, 2, 1),
        window_end=options.window_end or date(season, 3, 31),
        standard=options.standard_kickoffs,
        final=options.final_kickoffs,
        rest_weeks=options.rest_weeks,
        min_gap_minutes=options.min_gap_minutes,
    )
    venue_strategy = BalancedVenueAssigner()

    attempts = options.travel_attempts if options.algorithm in TRAVEL_ALGORITHMS else 1
    candidates = []
    travels = []
    for attempt in range(1, attempts + 1):
        candidate = _run_once(teams, season, options, previous, directory,
                              venue_strategy, slotter, rng)
        team_km, _ = compute_travel(candidate.fixtures, teams)
        logger.debug("Attempt %d: total %.1f km", attempt, sum(team_km.values()))
        candidates.append(candidate)
        travels.append(team_km)

    chosen = select_candidate(travels, options.algorithm, options.median_threshold_km)
    best, best_travel = candidates[chosen], travels[chosen]

    travel_lines = None
    if options.algorithm == "travel":
        travel_lines = [f"Best of {attempts} candidate schedules by total travel."]
        travel_lines += travel_summary_lines(best_travel, teams)
    elif options.algorithm == "travel_balanced":
        within = within_median_threshold(best_travel, options.median_threshold_km)
        travel_lines = [
            f"Best of {attempts} candidate schedules by travel spread "
            f"(every team within {options.median_threshold_km:g} km of the median: "
            f"{'yes' if within else 'no, lowest spread used'})."
        ]
        travel_lines += travel_summary_lines(best_travel, teams)

    summary = build_summary(
        options.algorithm, teams, best.fixtures, best.slots, best.venues,
        ordering_lines=best.strategy.summary_lines(best.rounds, teams),
        travel_lines=travel_lines,
    )
    logger.info("Schedule complete: %d fixtures", len(best.fixtures))
    return Schedule(
        fixtures=tuple(best.fixtures),
        summary=tuple(summary),
        season=season,
        algorithm=options.algorithm,
        total_distance_km=sum(best_travel.values()),
        team_distances_km=dict(best_travel),
    )
