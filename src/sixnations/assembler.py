"""Join rounds, venues and kickoffs into fixtures plus a run summary."""

import logging
from datetime import timedelta

from sixnations.errors import DataLookupError
from sixnations.models import Fixture, Round, Team, VenueAssignment
from sixnations.slotter import RoundSlot
from sixnations.store import TeamDirectory

logger = logging.getLogger(__name__)

ALGORITHM_BANNERS = {
    "random": "Fixtures generated using the Random (Round Robin) algorithm.",
    "marquee": "Fixtures generated using the Round 5 Extravaganza (marquee match last) algorithm.",
    "travel": "Fixtures generated using the Travel Optimized algorithm.",
    "travel_balanced": "Fixtures generated using the Travel Balanced (std dev) algorithm.",
}


def build_fixtures(rounds: list[Round],
                   venues: dict[tuple[str, str], VenueAssignment],
                   slots: list[RoundSlot],
                   directory: TeamDirectory,
                   season: int) -> list[Fixture]:
    """One Fixture per pairing; the i-th pairing gets the i-th kickoff."""
    slot_by_round = {s.round_number: s for s in slots}
    fixtures = []
    for rnd in sorted(rounds, key=lambda r: r.number):
        slot = slot_by_round[rnd.number]
        for pairing, kickoff in zip(rnd.pairings, slot.kickoffs):
            va = venues[pairing.key]
            home = directory.get_team(va.home_team)
            if home.stadium is None:
                raise DataLookupError(f"Team {home.code} has no home stadium")
            fixtures.append(Fixture(
                round_number=rnd.number,
                kickoff=kickoff,
                home_team=va.home_team,
                away_team=va.away_team,
                stadium=home.stadium,
                location=home.stadium.city,
                season=season,
            ))
    logger.info("Assembled %d fixtures", len(fixtures))
    return fixtures


def build_summary(algorithm: str,
                  teams: list[Team],
                  fixtures: list[Fixture],
                  slots: list[RoundSlot],
                  venues: dict[tuple[str, str], VenueAssignment],
                  ordering_lines: list[str] | None = None,
                  travel_lines: list[str] | None = None) -> list[str]:
    """Human-readable log of the decisions taken in a run."""
    names = {t.code: t.name for t in teams}
    lines = [ALGORITHM_BANNERS.get(algorithm, f"Fixtures generated using {algorithm}.")]
    rounds = sorted({f.round_number for f in fixtures})
    lines.append(f"{len(fixtures)} fixtures scheduled across {len(rounds)} rounds.")

    lines.append("Team rankings:")
    for t in sorted(teams, key=lambda t: t.ranking):
        lines.append(f" - {t.name} (rank {t.ranking})")

    if ordering_lines:
        lines.extend(ordering_lines)

    notes = [va.note for _, va in sorted(venues.items()) if va.note]
    if notes:
        lines.append("Home/away decisions:")
        lines.extend(f" - {n}" for n in notes)

    for slot in sorted(slots, key=lambda s: s.round_number):
        lines.append(
            f"Match Week {slot.round_number}: Round {slot.round_number} "
            f"starts {slot.kickoffs[0]:%a %d %b %Y}"
        )
        for f in sorted((f for f in fixtures if f.round_number == slot.round_number),
                        key=lambda f: f.kickoff):
            lines.append(
                f"   {f.kickoff:%a %H:%M} {names[f.home_team]} vs "
                f"{names[f.away_team]} @ {f.stadium.name}, {f.location}"
            )
        if slot.rest_after:
            rest = slot.saturday + timedelta(days=7)
            lines.append(
                f"Rest Week inserted after Round {slot.round_number} "
                f"(no matches weekend of {rest:%d %b %Y})"
            )

    lines.append("Per-team fixtures:")
    for t in sorted(teams, key=lambda t: t.ranking):
        own = sorted((f for f in fixtures if t.code in (f.home_team, f.away_team)),
                     key=lambda f: f.round_number)
        home = sum(1 for f in own if f.home_team == t.code)
        lines.append(f"{t.name} ({home}H / {len(own) - home}A):")
        for f in own:
            is_home = f.home_team == t.code
            opp = f.away_team if is_home else f.home_team
            lines.append(
                f"  R{f.round_number} - {'Home' if is_home else 'Away'} vs "
                f"{names[opp]} ({f.kickoff:%a %d %b})"
            )

    if travel_lines:
        lines.extend(travel_lines)
    return lines
