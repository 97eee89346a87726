"""
Career Simulation Suspension Ledger
===================================

One counter of matches-to-serve per competition type.  A red card in a
competition only ever suspends the athlete for that competition, and a
suspension is only consumed when the athlete is next selected for it.

Usage:
    from careersim.suspensions import apply_red_card, check_and_consume

    apply_red_card(athlete.suspensions, CompetitionType.CUP)
    if check_and_consume(athlete.suspensions, CompetitionType.CUP):
        ...  # misses this cup match; league selection is unaffected
"""

from __future__ import annotations

from typing import Union

from careersim.athlete import Athlete, CompetitionType, SeasonStats, Suspensions

_FIELDS = {
    CompetitionType.LEAGUE: "league",
    CompetitionType.CUP: "cup",
    CompetitionType.CONTINENTAL: "continental",
    CompetitionType.STATE_CUP: "state_cup",
    CompetitionType.INTERNATIONAL: "international",
}


def _field(competition: Union[CompetitionType, str]) -> str:
    if isinstance(competition, CompetitionType):
        return _FIELDS[competition]
    for comp, name in _FIELDS.items():
        if competition in (name, comp.value):
            return name
    raise ValueError(f"Unknown competition: {competition!r}")


def apply_red_card(suspensions: Suspensions,
                   competition: Union[CompetitionType, str]) -> int:
    """Add a one-match ban for the competition. Returns the new count."""
    name = _field(competition)
    setattr(suspensions, name, getattr(suspensions, name) + 1)
    return getattr(suspensions, name)


def check_and_consume(suspensions: Suspensions,
                      competition: Union[CompetitionType, str]) -> bool:
    """
    Called when the athlete is selected for a match in this competition.

    Returns True (and serves one match) if a ban is pending.
    """
    name = _field(competition)
    pending = getattr(suspensions, name)
    if pending > 0:
        setattr(suspensions, name, pending - 1)
        return True
    return False


def total(suspensions: Suspensions) -> int:
    return sum(getattr(suspensions, name) for name in _FIELDS.values())


def any_active(suspensions: Suspensions) -> bool:
    return total(suspensions) > 0


def reset(suspensions: Suspensions) -> None:
    for name in _FIELDS.values():
        setattr(suspensions, name, 0)


def apply_season_red_cards(athlete: Athlete, season: SeasonStats) -> int:
    """
    Record the season's sending-offs.  Cards without a competition
    breakdown count as league cards.  Returns the number applied.
    """
    applied = 0
    by_comp = dict(season.red_cards_by_competition)
    unassigned = season.red_cards - sum(by_comp.values())
    if unassigned > 0:
        by_comp["league"] = by_comp.get("league", 0) + unassigned
    for competition, count in by_comp.items():
        for _ in range(max(0, int(count))):
            apply_red_card(athlete.suspensions, competition)
            applied += 1
    return applied
