"""
Career Simulation Market Profile
================================

How the market sees an athlete, recomputed every evaluation:

- Market tier      World Class ... Fringe, from reputation, overall and upside
- True value       EUR, a steep curve on overall shaped by age, upside,
                   form, contract, position, league and injury status
- Desirability     0-100 demand signal
- Transfer probability, ideal destination tiers, negotiation difficulty

Also home to the weekly wage baseline every wage negotiation anchors on,
and to the tactical-fit score between an athlete and a playing style.

Usage:
    from careersim.market_value import get_player_profile, weekly_wage_baseline

    profile = get_player_profile(athlete, desperate=False)
    baseline = weekly_wage_baseline(team, SquadStatus.KEY_PLAYER, athlete.overall)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from careersim.athlete import (
    AgentReputation, Athlete, ClubTier, InjuryType, MarketTier, Personality,
    PlayingStyle, Position, SquadStatus, Team, TraitName,
)
from careersim.rng import RandomSource, clamp


# ──────────────────────────────────────────────
# WAGE BASELINE
# ──────────────────────────────────────────────

_S = SquadStatus

# Weekly EUR band (min, max) per league tier and role
_WAGE_BANDS: Dict[int, Dict[SquadStatus, Tuple[int, int]]] = {
    1: {_S.CAPTAIN: (220_000, 800_000), _S.KEY_PLAYER: (140_000, 500_000),
        _S.ROTATION: (20_000, 100_000), _S.PROSPECT: (10_000, 30_000),
        _S.RESERVE: (5_000, 20_000), _S.SURPLUS: (3_000, 10_000)},
    2: {_S.CAPTAIN: (120_000, 350_000), _S.KEY_PLAYER: (80_000, 220_000),
        _S.ROTATION: (15_000, 70_000), _S.PROSPECT: (8_000, 25_000),
        _S.RESERVE: (3_000, 12_000), _S.SURPLUS: (2_000, 8_000)},
    3: {_S.CAPTAIN: (12_000, 35_000), _S.KEY_PLAYER: (8_000, 25_000),
        _S.ROTATION: (3_000, 12_000), _S.PROSPECT: (1_500, 6_000),
        _S.RESERVE: (800, 3_000), _S.SURPLUS: (500, 1_500)},
    4: {_S.CAPTAIN: (6_000, 18_000), _S.KEY_PLAYER: (4_000, 12_000),
        _S.ROTATION: (1_500, 6_000), _S.PROSPECT: (800, 3_000),
        _S.RESERVE: (500, 1_500), _S.SURPLUS: (300, 1_000)},
    5: {_S.CAPTAIN: (3_000, 10_000), _S.KEY_PLAYER: (2_000, 7_000),
        _S.ROTATION: (1_000, 4_000), _S.PROSPECT: (500, 2_000),
        _S.RESERVE: (300, 1_000), _S.SURPLUS: (200, 600)},
}

# league tier -> (weekly cap, baseline overall)
_TIER_ECONOMICS = {
    1: (800_000, 88), 2: (350_000, 82), 3: (60_000, 76), 4: (15_000, 71), 5: (5_000, 66),
}

_BAND_POSITION = {
    _S.CAPTAIN: 0.8, _S.KEY_PLAYER: 0.65, _S.ROTATION: 0.4,
    _S.PROSPECT: 0.3, _S.RESERVE: 0.3, _S.SURPLUS: 0.25,
}

# Country wage level by league tier (index 0 = tier 1)
_COUNTRY_DIVISION_FACTOR = {
    "England": [1.0, 0.6, 0.42, 0.3, 0.22],
    "Spain": [0.85, 0.5, 0.38, 0.3, 0.22],
    "France": [0.55, 0.4, 0.28, 0.2, 0.15],
    "Germany": [0.7, 0.5, 0.35, 0.26, 0.18],
    "Italy": [0.55, 0.42, 0.3, 0.22, 0.16],
    "USA": [0.65, 0.42, 0.3, 0.22, 0.15],
    "Saudi Arabia": [2.2, 1.3, 0.85, 0.55, 0.35],
    "Qatar": [1.6, 1.0, 0.65, 0.42, 0.3],
    "UAE": [1.5, 0.95, 0.6, 0.4, 0.28],
    "Brazil": [0.2, 0.06, 0.035, 0.02, 0.012],
    "Argentina": [0.38, 0.28, 0.2, 0.15, 0.11],
}
_GENERIC_DIVISION_FACTOR = [1.0, 0.65, 0.45, 0.35, 0.25]


def _tier_index(league_tier: int) -> int:
    return max(1, min(int(league_tier), 5))


def weekly_wage_baseline(team: Team, status: SquadStatus, overall: float,
                         rng: Optional[RandomSource] = None) -> int:
    """
    Market-rate weekly wage (EUR) for a role at a club.

    The role band sets the range, club reputation and overall versus the
    league's typical starter move the figure within it, and the country's
    wage level scales it.  Youth academies pay a stipend.
    """
    if team.is_youth:
        return rng.rand(200, 1000) if rng is not None else 600

    tier = _tier_index(team.league_tier)
    lo, hi = _WAGE_BANDS[tier][status]
    cap, baseline_overall = _TIER_ECONOMICS[tier]

    rep_factor = 0.8 + (team.reputation - 60) / 40 * 0.35
    delta = overall - baseline_overall
    if delta < 0:
        ovr_factor = 1 + delta / 100 * 1.5
    elif tier >= 3:
        ovr_factor = 1 + delta / 100 * 0.15
    else:
        ovr_factor = 1 + delta / 100 * 0.4

    wage = (lo + (hi - lo) * _BAND_POSITION[status]) * rep_factor * ovr_factor
    wage = clamp(wage, lo * 0.9, hi * 1.05)
    wage *= _COUNTRY_DIVISION_FACTOR.get(team.country, _GENERIC_DIVISION_FACTOR)[tier - 1]

    if tier >= 3 and delta > 15:
        cap = cap * 1.2
    return int(round(min(wage, cap)))


# ──────────────────────────────────────────────
# TACTICAL FIT
# ──────────────────────────────────────────────

_STYLE_ATTRIBUTES = {
    PlayingStyle.POSSESSION: ["passing", "vision", "dribbling", "composure", "flair"],
    PlayingStyle.COUNTER: ["pace", "shooting", "positioning", "composure", "aggression"],
    PlayingStyle.DIRECT: ["physical", "strength", "jumping", "crossing", "long_shots"],
    PlayingStyle.BALANCED: ["passing", "shooting", "physical", "composure", "work_rate"],
    PlayingStyle.DEFENSIVE: ["defending", "positioning", "interceptions", "aggression", "stamina"],
}

_STYLE_POSITION_BONUS = {
    PlayingStyle.POSSESSION: {Position.CAM: 15, Position.CM: 12, Position.CDM: 8, Position.CB: -5},
    PlayingStyle.COUNTER: {Position.ST: 12, Position.LW: 15, Position.RW: 15, Position.CAM: 8},
    PlayingStyle.DIRECT: {Position.ST: 10, Position.CB: 12, Position.LW: 8, Position.RW: 8},
    PlayingStyle.BALANCED: {Position.CM: 10, Position.CAM: 8, Position.ST: 8},
    PlayingStyle.DEFENSIVE: {Position.CB: 15, Position.CDM: 12, Position.LB: 8, Position.RB: 8},
}

_STYLE_TRAITS = {
    PlayingStyle.POSSESSION: [TraitName.PLAYMAKER, TraitName.DRIBBLING_WIZARD],
    PlayingStyle.COUNTER: [TraitName.SPEED_MERCHANT, TraitName.CLINICAL_FINISHER],
    PlayingStyle.DIRECT: [TraitName.POWER_HEADER, TraitName.CROSSING_SPECIALIST],
    PlayingStyle.BALANCED: [TraitName.ENGINE, TraitName.VERSATILE],
    PlayingStyle.DEFENSIVE: [TraitName.SLIDE_TACKLE, TraitName.DISCIPLINE],
}


def tactical_fit(athlete: Athlete, style: PlayingStyle, rng: RandomSource) -> float:
    """How well the athlete's strengths suit a club's playing style, 10-100."""
    names = _STYLE_ATTRIBUTES.get(style, _STYLE_ATTRIBUTES[PlayingStyle.BALANCED])
    average = sum(athlete.attr(n) for n in names) / len(names)
    score = average * 0.8
    score += _STYLE_POSITION_BONUS.get(style, {}).get(athlete.position, 0)
    score += sum(6 for t in _STYLE_TRAITS.get(style, []) if athlete.has_trait(t))

    if athlete.age <= 23:
        score *= 1.05
    elif athlete.age >= 32:
        score *= 0.92
    return clamp(rng.uncertainty(score, 0.12), 10, 100)


# ──────────────────────────────────────────────
# PLAYER PROFILE
# ──────────────────────────────────────────────

_POSITION_VALUE = {
    Position.ST: 1.25, Position.CF: 1.2, Position.LW: 1.18, Position.RW: 1.18,
    Position.CAM: 1.12, Position.CM: 1.05, Position.LM: 1.08, Position.RM: 1.08,
    Position.CDM: 0.98, Position.LB: 0.95, Position.RB: 0.95,
    Position.LWB: 0.98, Position.RWB: 0.98, Position.CB: 0.93, Position.GK: 0.88,
}

_LEAGUE_VALUE = [1.35, 1.15, 1.0, 0.85, 0.7]

_MARKETABLE_TRAITS = {
    TraitName.CLINICAL_FINISHER, TraitName.DRIBBLING_WIZARD, TraitName.SPEED_MERCHANT,
    TraitName.BIG_GAME_PLAYER, TraitName.PLAYMAKER, TraitName.FLAIR_PLAYER,
}

_PERSONALITY_DESIRABILITY = {
    Personality.PROFESSIONAL: 12, Personality.AMBITIOUS: 8, Personality.DETERMINED: 10,
    Personality.LOYAL: -5, Personality.TEMPERAMENTAL: -8, Personality.LAZY: -15,
}

_AGENT_BONUS = {
    AgentReputation.SUPER_AGENT: 15, AgentReputation.GOOD: 8, AgentReputation.AVERAGE: 3,
}


@dataclass
class PlayerProfile:
    market_tier: MarketTier
    true_value: int                   # EUR
    desirability: float
    transfer_probability: float       # percent
    ideal_tiers: List[ClubTier] = field(default_factory=list)
    negotiation_difficulty: float = 50.0
    desperate: bool = False

    def to_dict(self) -> dict:
        return {
            "market_tier": self.market_tier.value,
            "true_value": self.true_value,
            "desirability": round(self.desirability, 1),
            "transfer_probability": round(self.transfer_probability, 1),
            "ideal_tiers": [t.value for t in self.ideal_tiers],
            "negotiation_difficulty": round(self.negotiation_difficulty, 1),
            "desperate": self.desperate,
        }


def market_tier(athlete: Athlete) -> MarketTier:
    overall = athlete.overall
    effective = athlete.reputation + (athlete.potential - overall) * 0.3
    if effective >= 94 or overall >= 91:
        return MarketTier.WORLD_CLASS
    if effective >= 88 or overall >= 87:
        return MarketTier.ELITE
    if effective >= 82 or overall >= 83:
        return MarketTier.LEADING
    if effective >= 76 or overall >= 79:
        return MarketTier.REGULAR
    if athlete.age <= 23 and athlete.potential >= 85:
        return MarketTier.PROMISING
    if athlete.age <= 21 and athlete.potential >= 80:
        return MarketTier.DEVELOPING
    return MarketTier.FRINGE


def _age_value(age: int) -> float:
    if age <= 17:
        mult = 0.4 + (age - 14) * 0.15
    elif age <= 21:
        mult = 0.85 + (21 - age) * 0.08
    elif age <= 23:
        mult = 1.3 + (23 - age) * 0.1
    elif age <= 26:
        mult = 1.7 + (26 - age) * 0.05
    elif age <= 28:
        mult = 1.9
    elif age <= 30:
        mult = 1.6 - (age - 28) * 0.15
    elif age <= 33:
        mult = 1.3 - (age - 30) * 0.18
    else:
        mult = 0.7 - (age - 33) * 0.15
    return max(0.15, mult)


def _contract_value(years: int) -> float:
    if years <= 0:
        return 0.3
    if years == 1:
        return 0.65
    if years == 2:
        return 0.9
    return 1 + (years - 2) * 0.04


def true_market_value(athlete: Athlete) -> int:
    """Market value in EUR."""
    overall = athlete.overall
    age = athlete.age
    value = (overall / 40) ** 4.5 * 1.2
    value *= _age_value(age)

    gap = max(0, athlete.potential - overall)
    if age < 26 and gap > 0:
        value *= 1 + gap ** 1.3 * (26 - age) / 12 * 0.12

    form = athlete.form
    if form > 0:
        value *= 1 + (form / 5) ** 0.7 * 0.15
    elif form < 0:
        value *= 1 - (abs(form) / 5) ** 0.9 * 0.2

    value *= _contract_value(athlete.contract_length)
    value *= _POSITION_VALUE.get(athlete.position, 1.0)
    value *= _LEAGUE_VALUE[_tier_index(athlete.team.league_tier) - 1]
    if athlete.reputation >= 85:
        value *= 1.08
    if any(athlete.has_trait(t) for t in _MARKETABLE_TRAITS):
        value *= 1.12

    if athlete.injury is not None:
        if athlete.injury.type >= InjuryType.SEVERE:
            value *= 0.45
        elif athlete.injury.type == InjuryType.MODERATE:
            value *= 0.72
        else:
            value *= 0.88

    millions = clamp(round(value), 1, 450)
    return int(millions * 1_000_000)


def desirability(athlete: Athlete) -> float:
    age = athlete.age
    score = 50 + athlete.form * 6
    if age < 26:
        score += max(0, athlete.potential - athlete.overall) * 2

    if 23 <= age <= 29:
        score += 15
    elif 21 <= age <= 30:
        score += 8
    elif age < 21 and athlete.potential > 85:
        score += 10
    if age > 30:
        score -= (age - 30) * 3

    score += _PERSONALITY_DESIRABILITY.get(athlete.personality, 0)
    score += _AGENT_BONUS.get(athlete.agent.reputation, 0)
    return clamp(score, 10, 100)


def transfer_probability(athlete: Athlete, desperate: bool = False) -> float:
    """Percent chance the athlete is open to a move this window."""
    if desperate:
        return 95.0
    p = 20.0
    if athlete.contract_length <= 0:
        p += 40
    elif athlete.contract_length == 1:
        p += 25
    if athlete.morale.rank < 2:
        p += 30
    if athlete.seasons_with_low_playing_time >= 2:
        p += 35
    elif athlete.seasons_with_low_playing_time == 1:
        p += 15
    if athlete.squad_status == SquadStatus.SURPLUS:
        p += 25
    elif athlete.squad_status == SquadStatus.RESERVE and athlete.age > 22:
        p += 15
    if athlete.personality == Personality.AMBITIOUS and athlete.team.league_tier > 2:
        p += 20
    if athlete.years_at_club > 5 and athlete.personality != Personality.AMBITIOUS:
        p -= 15
    if athlete.years_at_club > 8:
        p -= 10
    return clamp(p, 5, 98)


def ideal_tiers(athlete: Athlete, tier: MarketTier, desperate: bool = False) -> List[ClubTier]:
    C = ClubTier
    if tier == MarketTier.WORLD_CLASS:
        tiers = [C.ELITE] + ([C.MAJOR] if athlete.age > 30 else [])
    elif tier == MarketTier.ELITE:
        tiers = [C.ELITE, C.MAJOR]
    elif tier == MarketTier.LEADING:
        tiers = [C.MAJOR, C.STANDARD] + ([C.ELITE] if athlete.age < 24 else [])
    elif tier == MarketTier.REGULAR:
        tiers = [C.STANDARD, C.MAJOR] + ([C.LOWER] if desperate else [])
    elif tier == MarketTier.PROMISING:
        tiers = [C.ELITE, C.MAJOR, C.STANDARD]
    elif tier == MarketTier.DEVELOPING:
        tiers = [C.MAJOR, C.STANDARD, C.LOWER]
    else:
        tiers = [C.STANDARD, C.LOWER, C.MINOR]
    return tiers


def negotiation_difficulty(athlete: Athlete) -> float:
    score = 50 + _AGENT_BONUS.get(athlete.agent.reputation, 0) * 1.5
    if athlete.personality == Personality.AMBITIOUS:
        score += 15
    elif athlete.personality == Personality.TEMPERAMENTAL:
        score += 10
    elif athlete.personality == Personality.LOYAL:
        score -= 10
    if athlete.contract_length <= 1:
        score -= 20
    elif athlete.contract_length >= 4:
        score += 15
    if athlete.squad_status == SquadStatus.KEY_PLAYER:
        score += 20
    elif athlete.squad_status == SquadStatus.SURPLUS:
        score -= 15
    return clamp(score, 15, 95)


def get_player_profile(athlete: Athlete, desperate: bool = False) -> PlayerProfile:
    tier = market_tier(athlete)
    demand = desirability(athlete)
    return PlayerProfile(
        market_tier=tier,
        true_value=true_market_value(athlete),
        desirability=demand,
        transfer_probability=transfer_probability(athlete, desperate),
        ideal_tiers=ideal_tiers(athlete, tier, desperate),
        negotiation_difficulty=negotiation_difficulty(athlete),
        desperate=desperate,
    )
