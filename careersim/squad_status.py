"""
Career Simulation Squad Status
==============================

Classifies an athlete's standing in the club's depth chart:

    Surplus < Reserve < Prospect < Rotation < Key Player < Captain

determine_squad_status() derives a base role from skill against the
club's expected-starter level (and rank among same-position teammates
when a roster is supplied).  update_squad_status() applies the
season-end transition rules in priority order on top of that base and
never demotes by more than one level per season.

Everything here is deterministic: no random draws, only thresholds.

Usage:
    from careersim.squad_status import update_squad_status

    new_status = update_squad_status(athlete, season_stats, teammates=squad)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from careersim.athlete import Athlete, Position, SeasonStats, SquadStatus, Team
from careersim.config import SquadStatusConfig


# ──────────────────────────────────────────────
# POSITION GROUPS
# ──────────────────────────────────────────────

_P = Position

POSITION_GROUPS: Dict[Position, List[Position]] = {
    _P.GK: [_P.GK],
    _P.CB: [_P.CB],
    _P.LB: [_P.LB, _P.LWB],
    _P.LWB: [_P.LB, _P.LWB],
    _P.RB: [_P.RB, _P.RWB],
    _P.RWB: [_P.RB, _P.RWB],
    _P.CDM: [_P.CDM, _P.CM],
    _P.CM: [_P.CM, _P.CDM, _P.CAM],
    _P.CAM: [_P.CAM, _P.CM],
    _P.LM: [_P.LM, _P.LW],
    _P.LW: [_P.LW, _P.LM],
    _P.RM: [_P.RM, _P.RW],
    _P.RW: [_P.RW, _P.RM],
    _P.ST: [_P.ST, _P.CF],
    _P.CF: [_P.CF, _P.ST],
}


def position_group(position: Position) -> List[Position]:
    return POSITION_GROUPS.get(position, [position])


def _lookup(table: List[List[int]], reputation: float, default: int) -> int:
    for min_rep, value in table:
        if reputation >= min_rep:
            return value
    return default


def expected_starter_overall(team: Team, position: Position,
                             config: Optional[SquadStatusConfig] = None) -> int:
    """Overall a regular starter at this club and position is expected to have."""
    cfg = config or SquadStatusConfig()
    expected = _lookup(cfg.starter_by_reputation, team.reputation, cfg.starter_default)
    expected += cfg.starter_tier_bonus.get(str(team.league_tier), 0)
    expected += cfg.starter_position_bonus.get(position.value, 0)
    lo, hi = cfg.starter_bounds
    return max(lo, min(expected, hi))


# ──────────────────────────────────────────────
# PERFORMANCE HISTORY
# ──────────────────────────────────────────────

@dataclass
class PerformanceHistory:
    good_streak: int = 0
    poor_streak: int = 0


def performance_history(season_log: Sequence[dict],
                        config: Optional[SquadStatusConfig] = None) -> PerformanceHistory:
    """
    Consecutive good and poor seasons, counted back from the newest entry
    over the last few seasons.  A season that is neither ends both counts.
    """
    cfg = config or SquadStatusConfig()
    recent = list(season_log)[-cfg.history_window:][::-1]

    good = 0
    for entry in recent:
        if (entry.get("average_rating", 0) >= cfg.good_season_rating
                and entry.get("matches", 0) >= cfg.good_season_matches):
            good += 1
        else:
            break

    poor = 0
    for entry in recent:
        if (entry.get("average_rating", 0) < cfg.poor_season_rating
                or entry.get("matches", 0) < cfg.poor_season_matches):
            poor += 1
        else:
            break
    return PerformanceHistory(good_streak=good, poor_streak=poor)


# ──────────────────────────────────────────────
# BASE STATUS
# ──────────────────────────────────────────────

def _youth_status(athlete: Athlete) -> SquadStatus:
    overall = athlete.overall
    age = max(1, athlete.age)
    ratio = overall / age
    if athlete.potential > 94 and athlete.age < 16:
        return SquadStatus.KEY_PLAYER
    if ratio > 4 and athlete.age <= 16:
        return SquadStatus.KEY_PLAYER
    if ratio > 3.5 and athlete.age <= 17:
        return SquadStatus.ROTATION
    if athlete.potential > 85 and athlete.age <= 18:
        return SquadStatus.PROSPECT
    return SquadStatus.RESERVE


def _ranked_status(athlete: Athlete, team: Team, teammates: Sequence[Athlete],
                   history: PerformanceHistory, cfg: SquadStatusConfig) -> SquadStatus:
    group = position_group(athlete.position)
    overall = athlete.overall
    rivals = [t for t in teammates if t is not athlete and t.position in group]
    rank = 1 + sum(1 for t in rivals if t.overall > overall)

    expected = expected_starter_overall(team, athlete.position, cfg)
    diff = overall - expected

    if athlete.attr("leadership") >= cfg.captain_leadership and rank == 1 and diff >= 3:
        return SquadStatus.CAPTAIN
    if (rank == 1 and diff >= 8) or (rank <= 2 and diff >= 5) \
            or (history.good_streak >= 2 and diff >= 0):
        return SquadStatus.KEY_PLAYER
    if (rank <= 3 and diff >= -3) or diff >= -1 \
            or (history.good_streak >= 1 and diff >= -5) \
            or (athlete.age <= 23 and athlete.potential >= expected + 5 and diff >= -6):
        return SquadStatus.ROTATION
    if athlete.age <= 24:
        if athlete.potential >= expected + 3 and diff >= -10:
            return SquadStatus.PROSPECT
        if athlete.age <= 21 and athlete.potential >= expected and diff >= -15:
            return SquadStatus.PROSPECT
    if diff >= -12:
        return SquadStatus.SURPLUS if history.poor_streak >= 2 else SquadStatus.RESERVE
    if history.poor_streak >= 3:
        return SquadStatus.SURPLUS
    return SquadStatus.RESERVE if diff >= -18 else SquadStatus.SURPLUS


def _fallback_status(athlete: Athlete, team: Team, cfg: SquadStatusConfig) -> SquadStatus:
    expected = _lookup(cfg.fallback_by_reputation, team.reputation, cfg.fallback_default)
    if team.league_tier == 1:
        expected += 2
    elif team.league_tier == 2:
        expected += 1
    diff = athlete.overall - expected

    if athlete.attr("leadership") >= cfg.captain_leadership and diff >= 5:
        return SquadStatus.CAPTAIN
    if diff >= 4:
        return SquadStatus.KEY_PLAYER
    if diff >= -2:
        return SquadStatus.ROTATION
    if athlete.age <= 24 and athlete.potential >= expected and diff >= -8:
        return SquadStatus.PROSPECT
    if diff >= -12:
        return SquadStatus.RESERVE
    return SquadStatus.SURPLUS


def determine_squad_status(athlete: Athlete, team: Optional[Team] = None,
                           teammates: Optional[Sequence[Athlete]] = None,
                           history: Optional[PerformanceHistory] = None,
                           config: Optional[SquadStatusConfig] = None) -> SquadStatus:
    """Base role from skill alone, before season-end transition rules."""
    cfg = config or SquadStatusConfig()
    team = team or athlete.team
    if not athlete.has_made_senior_debut:
        return _youth_status(athlete)
    if history is None:
        history = performance_history(athlete.season_log, cfg)
    if teammates:
        return _ranked_status(athlete, team, teammates, history, cfg)
    return _fallback_status(athlete, team, cfg)


# ──────────────────────────────────────────────
# SEASON-END TRANSITION
# ──────────────────────────────────────────────

def _step(status: SquadStatus, levels: int, ceiling: SquadStatus = SquadStatus.CAPTAIN) -> SquadStatus:
    return SquadStatus.from_rank(min(status.rank + levels, ceiling.rank))


def _transition(athlete: Athlete, season: SeasonStats, base: SquadStatus,
                cfg: SquadStatusConfig) -> SquadStatus:
    current = athlete.squad_status
    rating = season.average_rating if season.average_rating else cfg.default_rating
    available = max(1, season.available_matches or cfg.default_available_matches)
    matches = season.matches
    ratio = matches / available
    goals = season.goals
    assists = season.assists
    leadership = athlete.attr("leadership")

    # 1. captains keep the armband unless the season was a disaster
    if current == SquadStatus.CAPTAIN:
        disastrous = (rating < 6.0 or ratio < 0.40
                      or (athlete.age >= 35 and base < SquadStatus.KEY_PLAYER))
        if not disastrous:
            return SquadStatus.CAPTAIN
        if rating >= 6.5 and ratio >= 0.30:
            return SquadStatus.KEY_PLAYER

    # 2. key players hold on unless they had a bad season
    if current == SquadStatus.KEY_PLAYER:
        if rating >= 6.3 and ratio >= 0.35:
            if leadership >= cfg.captain_leadership and rating >= 7.2:
                return SquadStatus.CAPTAIN
            return SquadStatus.KEY_PLAYER
        return SquadStatus.ROTATION

    # 3. heavy playing time
    if matches >= 25 or ratio >= 0.5:
        if rating >= 7.3 or goals >= 15 or assists >= 10 or goals + assists >= 20:
            return SquadStatus.KEY_PLAYER
        if base < SquadStatus.ROTATION:
            return SquadStatus.ROTATION
        if rating >= 7.0:
            return _step(current, 1, SquadStatus.KEY_PLAYER)

    # 4. exceptional output
    exceptional = (goals >= 30
                   or (goals >= 20 and assists >= 10)
                   or (matches >= 20 and goals / matches >= 0.6)
                   or (matches >= 20 and goals + assists >= 20))
    if exceptional:
        if leadership >= cfg.captain_leadership:
            return SquadStatus.CAPTAIN
        return SquadStatus.KEY_PLAYER

    # 5. high rating in a decent run of games
    if rating >= 7.5 and matches >= 15:
        return _step(current, 1, SquadStatus.KEY_PLAYER)

    # 6. played a fair share and did well
    if ratio >= 0.3 and rating >= 6.8:
        return current

    # 7. skill has fallen well below the current role
    if base.rank < current.rank - 1:
        return _step(current, -1)

    # 8. young high-potential players are not written off
    if athlete.age <= 24 and athlete.potential >= 75 and base < SquadStatus.PROSPECT:
        return SquadStatus.PROSPECT

    # 9. promised roles are honoured
    promised = athlete.promised_squad_status
    if promised is not None and promised > base:
        return promised

    # 10. base, nudged by form
    if athlete.form >= 3 and base < SquadStatus.ROTATION:
        return SquadStatus.ROTATION
    if athlete.form <= -4:
        return _step(base, -1)
    return base


def update_squad_status(athlete: Athlete, season: SeasonStats,
                        teammates: Optional[Sequence[Athlete]] = None,
                        history: Optional[PerformanceHistory] = None,
                        config: Optional[SquadStatusConfig] = None) -> SquadStatus:
    """
    Season-end role for the athlete.  Does not mutate the athlete.

    history defaults to streaks computed from athlete.season_log, which
    should not yet include the season being evaluated.
    """
    cfg = config or SquadStatusConfig()
    if history is None:
        history = performance_history(athlete.season_log, cfg)
    base = determine_squad_status(athlete, athlete.team, teammates, history, cfg)
    proposed = _transition(athlete, season, base, cfg)

    floor = athlete.squad_status.rank - cfg.max_demotion
    if proposed.rank < floor:
        proposed = SquadStatus.from_rank(floor)
    return proposed
