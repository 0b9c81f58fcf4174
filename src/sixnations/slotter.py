"""Weekend date and kickoff assignment.

Each round gets one weekend. Round 1 starts on the first Saturday on or
after the window start, every later round moves on a week, and a rest
round adds one more empty weekend after it.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta

from sixnations.errors import SchedulingError
from sixnations.models import DayOfWeek, Round

logger = logging.getLogger(__name__)

DEFAULT_MIN_GAP_MINUTES = 120


@dataclass
class KickoffSlot:
    day: DayOfWeek
    start_time: time

    def on_weekend(self, saturday: date) -> datetime:
        offset = 0 if self.day == DayOfWeek.Sat else 1
        return datetime.combine(saturday + timedelta(days=offset), self.start_time)


DEFAULT_STANDARD_KICKOFFS = [
    KickoffSlot(DayOfWeek.Sat, time(14, 15)),
    KickoffSlot(DayOfWeek.Sat, time(16, 45)),
    KickoffSlot(DayOfWeek.Sun, time(15, 0)),
]

# "Super Saturday": all three final-round matches on the Saturday
DEFAULT_FINAL_KICKOFFS = [
    KickoffSlot(DayOfWeek.Sat, time(12, 30)),
    KickoffSlot(DayOfWeek.Sat, time(14, 45)),
    KickoffSlot(DayOfWeek.Sat, time(17, 0)),
]


def validate_layout(slots: list[KickoffSlot], count: int,
                    min_gap_minutes: int = DEFAULT_MIN_GAP_MINUTES) -> None:
    """Raise SchedulingError unless the layout is usable for a round."""
    if len(slots) != count:
        raise SchedulingError(f"Kickoff layout needs {count} slots, got {len(slots)}")
    for s in slots:
        if not s.day.is_weekend():
            raise SchedulingError(f"Kickoff on {s.day.name} is not a weekend day")
    anchor = date(2000, 1, 1)  # any Saturday works, only differences matter
    anchor += timedelta(days=(5 - anchor.weekday()) % 7)
    starts = sorted(s.on_weekend(anchor) for s in slots)
    for a, b in zip(starts, starts[1:]):
        if a.date() == b.date() and (b - a) < timedelta(minutes=min_gap_minutes):
            raise SchedulingError(
                f"Kickoffs {a:%a %H:%M} and {b:%a %H:%M} are less than "
                f"{min_gap_minutes} minutes apart"
            )


def first_saturday(on_or_after: date) -> date:
    return on_or_after + timedelta(days=(5 - on_or_after.weekday()) % 7)


@dataclass
class RoundSlot:
    """A round's weekend and ordered kickoff times."""
    round_number: int
    saturday: date
    kickoffs: list[datetime] = field(default_factory=list)
    rest_after: bool = False


class DateSlotter:
    def __init__(self, window_start: date, window_end: date,
                 standard: list[KickoffSlot] | None = None,
                 final: list[KickoffSlot] | None = None,
                 rest_weeks: list[int] | None = None,
                 min_gap_minutes: int = DEFAULT_MIN_GAP_MINUTES):
        if window_end < window_start:
            raise SchedulingError(
                f"Season window ends ({window_end}) before it starts ({window_start})"
            )
        self.window_start = window_start
        self.window_end = window_end
        self.standard = list(standard or DEFAULT_STANDARD_KICKOFFS)
        self.final = list(final or DEFAULT_FINAL_KICKOFFS)
        self.rest_weeks = sorted(set(rest_weeks or []))
        self.min_gap_minutes = min_gap_minutes

    def assign(self, rounds: list[Round]) -> list[RoundSlot]:
        """Pick a weekend and kickoffs for every round, in round order."""
        ordered = sorted(rounds, key=lambda r: r.number)
        last_round = ordered[-1].number if ordered else 0

        saturday = first_saturday(self.window_start)
        slots = []
        for rnd in ordered:
            layout = self.final if rnd.number == last_round else self.standard
            validate_layout(layout, len(rnd.pairings), self.min_gap_minutes)
            kickoffs = sorted(s.on_weekend(saturday) for s in layout)
            if kickoffs[-1].date() > self.window_end:
                raise SchedulingError(
                    f"Round {rnd.number} would fall on {kickoffs[-1].date()}, "
                    f"after the season window ends on {self.window_end}"
                )
            rest = rnd.number in self.rest_weeks and rnd.number != last_round
            slots.append(RoundSlot(rnd.number, saturday, kickoffs, rest_after=rest))
            logger.debug("Round %d on weekend of %s", rnd.number, saturday)

            saturday += timedelta(days=7)
            if rest:
                saturday += timedelta(days=7)
        return slots
