"""
Career Simulation Attribute Progression
=======================================

Ages an athlete's attributes by one season.  Growth is driven by six
correlated development factors:

- Talent       headroom between overall and potential, scaled by archetype
- Effort       personality and form
- Opportunity  matches played
- Environment  league tier, club and player reputation, paid training
- Performance  season performance rating
- Age          steep growth before the peak window, decline after it

The six are sampled jointly (they are correlated in real careers) and
the resulting base growth is distributed across attributes using
per-position weights.  Physical attributes decline fastest after the
peak; mental attributes hold up best.

Called once per season by the season orchestrator.

Usage:
    from careersim.progression import performance_rating, apply_progression

    rating = performance_rating(athlete, goals=18, assists=6, clean_sheets=0, matches=30)
    report = apply_progression(athlete, matches=30, rating=rating, season=2031, rng=rng)
    for line in report.events:
        print(line)
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from careersim.athlete import (
    Archetype, Athlete, Personality, Position, attribute_range,
)
from careersim.config import ProgressionConfig
from careersim.rng import RandomSource, clamp

_log = logging.getLogger("careersim.progression")


# ──────────────────────────────────────────────
# PERFORMANCE RATING
# ──────────────────────────────────────────────

_ATTACK_MULTIPLIER = {
    Position.ST: 1.9, Position.CF: 1.7,
    Position.LW: 1.6, Position.RW: 1.6,
    Position.CAM: 1.4, Position.CM: 1.2, Position.CDM: 1.1,
    Position.LM: 1.0, Position.RM: 1.0,
    Position.LB: 0.9, Position.RB: 0.9,
    Position.LWB: 0.85, Position.RWB: 0.85,
    Position.CB: 0.8,
}

_DEFENSIVE_DAMPENED = (Position.CB, Position.LB, Position.RB, Position.GK)


def performance_rating(athlete: Athlete, goals: int, assists: int,
                       clean_sheets: int, matches: int) -> float:
    """
    Season output on a 0-2 scale (1.0 is a solid season for the position).

    Keepers are rated on clean sheets, everyone else on goal involvement
    weighted by how much scoring the position is expected to do.
    """
    if not matches or matches <= 0:
        return 0.0

    if athlete.position == Position.GK:
        base = clean_sheets / matches * 2.5
    else:
        mult = _ATTACK_MULTIPLIER.get(athlete.position, 1.0)
        base = (goals + assists * 0.6) / matches * mult

    rating = base * (1 + (athlete.overall - 70) / 100)
    rating *= 1 + athlete.form / 10
    rating *= 1 + (5 - athlete.team.league_tier) * 0.03
    if athlete.position in _DEFENSIVE_DAMPENED:
        rating *= 0.9

    rating = max(0.3, rating)
    return clamp(rating, 0.0, 2.0)


# ──────────────────────────────────────────────
# DEVELOPMENT FACTORS
# ──────────────────────────────────────────────

_ARCHETYPE_TALENT = {
    Archetype.GENERATIONAL_TALENT: (1.8, 0.3),
    Archetype.WONDERKID: (1.5, 0.25),
    Archetype.TOP_PROSPECT: (1.3, 0.2),
    Archetype.TECHNICAL_MAESTRO: (1.4, 0.25),
    Archetype.LATE_BLOOMER: (0.7, 0.2),
    Archetype.SOLID_PROFESSIONAL: (1.0, 0.15),
    Archetype.JOURNEYMAN: (0.85, 0.2),
    Archetype.THE_ENGINE: (1.2, 0.2),
    Archetype.TARGET_MAN: (1.1, 0.18),
}

_PERSONALITY_EFFORT = {
    Personality.PROFESSIONAL: (1.25, 0.15),
    Personality.DETERMINED: (1.2, 0.12),
    Personality.AMBITIOUS: (1.15, 0.12),
    Personality.LAZY: (0.65, 0.15),
    Personality.TEMPERAMENTAL: (0.75, 0.2),
    Personality.INCONSISTENT: (0.7, 0.25),
}

# (age below, mean, std) growth multiplier before the peak window ends
_YOUTH_AGE_CURVE = [
    (18, 2.0, 0.4),
    (20, 1.7, 0.35),
    (22, 1.4, 0.3),
    (24, 1.2, 0.25),
    (26, 1.0, 0.2),
    (28, 0.8, 0.2),
    (30, 0.6, 0.2),
    (32, 0.4, 0.18),
]


@dataclass
class DevelopmentFactors:
    talent: float
    effort: float
    opportunity: float
    environment: float
    performance: float
    age: float
    potential_bump: bool = False

    def as_list(self) -> List[float]:
        return [self.talent, self.effort, self.opportunity,
                self.environment, self.performance, self.age]


def _age_factor(athlete: Athlete, rng: RandomSource) -> float:
    age = athlete.age
    if age < athlete.peak_age_end:
        mean, std = 0.2, 0.15
        for limit, m, s in _YOUTH_AGE_CURVE:
            if age < limit:
                mean, std = m, s
                break
        factor = rng.gauss(mean, std)
        if athlete.archetype == Archetype.LATE_BLOOMER and 23 <= age <= 28:
            factor *= rng.gauss(1.4, 0.2)
        return clamp(factor, -20, 3)

    years_past = age - athlete.peak_age_end
    rate = min(0.03 * 1.5 ** max(0, years_past - 1), 0.15)
    overall = athlete.overall
    if overall > 85:
        rate *= 0.85
    elif overall > 75:
        rate *= 0.92

    expected = -rate * overall
    factor = rng.gauss(expected, abs(expected) * 0.25)
    if athlete.personality == Personality.PROFESSIONAL:
        factor *= rng.gauss(0.8, 0.05)
    if athlete.attr("fitness") > 80:
        factor *= rng.gauss(0.85, 0.05)

    if age >= 40:
        factor *= rng.gauss(1.8, 0.2)
    elif age >= 38:
        factor *= rng.gauss(1.35, 0.1)
    elif age >= 36:
        factor *= rng.gauss(1.2, 0.08)
    return clamp(factor, -20, 3)


def development_factors(athlete: Athlete, matches: int, rating: float,
                        rng: RandomSource, config: Optional[ProgressionConfig] = None,
                        season: Optional[int] = None) -> DevelopmentFactors:
    """
    Compute the six (uncorrelated) factor means for one season.

    The paid training modifier only counts when it was bought for the
    season being simulated.
    """
    overall = athlete.overall

    gap = max(athlete.potential - overall, 0)
    talent = abs(rng.gauss(gap * 0.12, gap * 0.08))
    t_mean, t_std = _ARCHETYPE_TALENT.get(athlete.archetype, (1.0, 0.2))
    talent *= max(0.3, rng.gauss(t_mean, t_std))

    e_mean, e_std = _PERSONALITY_EFFORT.get(athlete.personality, (1.0, 0.15))
    effort = max(0.3, rng.gauss(e_mean, e_std))
    effort *= 0.7 + athlete.form / 25 + rng.gauss(0, 0.15)

    opportunity = max(0.1, rng.gauss(min(matches / 30, 1.4), 0.25))
    if matches < 10:
        opportunity *= rng.gauss(0.25, 0.1)
    elif matches < 20:
        opportunity *= rng.gauss(0.55, 0.15)

    team = athlete.team
    environment = 1.0
    environment += rng.gauss((6 - team.league_tier) * 0.18, 0.12)
    environment += rng.gauss(team.reputation / 100 * 0.25, 0.1)
    environment += rng.gauss(athlete.reputation / 100 * 0.15, 0.08)
    environment += rng.gauss(0.1, 0.05)
    environment = max(0.5, rng.uncertainty(environment, 0.15))
    if season is not None and athlete.training_modifier_season == season:
        environment *= athlete.training_modifier

    performance = rng.gauss(rating * 0.6, 0.25)
    potential_bump = False
    if rating > 1.5 and matches >= 10:
        performance += abs(rng.gauss(0.35, 0.15))
        if athlete.age <= athlete.peak_age_end and rng.random() < rng.gauss(0.03, 0.01):
            potential_bump = True
    elif rating > 0.6 and matches >= 5:
        performance = max(performance, rng.gauss(0.4, 0.15))
    performance = max(0.0, performance)

    return DevelopmentFactors(
        talent=talent,
        effort=effort,
        opportunity=opportunity,
        environment=environment,
        performance=performance,
        age=_age_factor(athlete, rng),
        potential_bump=potential_bump,
    )


# ──────────────────────────────────────────────
# PROGRESSION REPORT
# ──────────────────────────────────────────────

@dataclass
class ProgressionReport:
    """What one season of progression did to an athlete."""
    overall_before: int
    overall_after: int
    base_growth: float = 0.0
    changes: Dict[str, int] = field(default_factory=dict)    # attr -> delta
    events: List[str] = field(default_factory=list)
    potential_change: int = 0

    @property
    def overall_change(self) -> int:
        return self.overall_after - self.overall_before

    def to_dict(self) -> dict:
        return {
            "overall_before": self.overall_before,
            "overall_after": self.overall_after,
            "overall_change": self.overall_change,
            "base_growth": round(self.base_growth, 3),
            "changes": dict(self.changes),
            "events": list(self.events),
            "potential_change": self.potential_change,
        }


def _diminishing_returns(value: float, potential: int) -> float:
    gap = potential - value
    if gap <= 0:
        return 0.05
    if gap <= 2:
        return 0.12
    if gap <= 5:
        return 0.30
    if gap <= 10:
        return 0.60
    if value > 85:
        return 0.70
    return 1.0


def _probabilistic_round(value: float, rng: RandomSource) -> int:
    whole = math.floor(value)
    return int(whole + (1 if rng.random() < value - whole else 0))


def _aged_delta(name: str, growth: float, athlete: Athlete,
                cfg: ProgressionConfig, rng: RandomSource) -> float:
    """Shape post-peak decline per attribute group."""
    age = athlete.age
    if age < athlete.peak_age_end or growth >= 0:
        return growth
    years_past = age - athlete.peak_age_end

    if name in cfg.physical_stats:
        growth *= min(1.4 * 1.15 ** years_past, 5.0)
        if age >= 38:
            growth *= 1.5
        elif age >= 36:
            growth *= 1.25
        if name in ("pace", "acceleration"):
            growth *= 1.15
    elif name in cfg.mental_stats:
        if age <= 34:
            if rng.random() < 0.3:
                growth = abs(growth) * rng.gauss(0.3, 0.1)
            else:
                growth *= 0.3
        else:
            growth *= max(0.4, 0.6 - (age - 34) * 0.03)
    elif name in cfg.technical_stats:
        growth *= max(0.7, 0.85 - years_past * 0.02)
    return growth


# ──────────────────────────────────────────────
# MAIN FUNCTION
# ──────────────────────────────────────────────

def apply_progression(athlete: Athlete, matches: int, rating: float, season: int,
                      rng: RandomSource,
                      config: Optional[ProgressionConfig] = None) -> ProgressionReport:
    """
    Apply one season of attribute development to an athlete in place.

    rating is the 0-2 performance rating from performance_rating().
    Attributes never exceed potential + headroom through growth, though an
    attribute already above that cap is not pulled down.  weak_foot is not
    an attribute and never changes here.
    """
    cfg = config or ProgressionConfig()
    overall_before = athlete.overall
    if athlete.original_potential is None:
        athlete.original_potential = athlete.potential

    report = ProgressionReport(overall_before=overall_before, overall_after=overall_before)

    factors = development_factors(athlete, matches, rating, rng, cfg, season=season)
    means = factors.as_list()
    stds = [abs(m) * 0.25 + 0.15 for m in means]
    talent, effort, opportunity, environment, performance, age_factor = rng.multivariate(
        means, stds, cfg.factor_correlation)

    if athlete.age < athlete.peak_age_end:
        base = (talent * 0.3 + effort * 0.2 + opportunity * 0.2
                + environment * 0.15 + performance * 0.15) * age_factor
    else:
        base = age_factor

    event_chance = abs(rng.gauss(0.5, 0.2))
    event_roll = rng.random()
    if event_roll < event_chance * cfg.exceptional_event_share:
        base *= max(1.0, rng.gauss(1.8, 0.4))
        report.events.append(f"{athlete.name} had an exceptional development season")
    elif event_roll > 1 - event_chance * cfg.struggle_event_share:
        base *= max(0.2, min(1.0, rng.gauss(0.5, 0.2)))
        report.events.append(f"{athlete.name} struggled to develop this season")

    base = rng.uncertainty(base, 0.2)
    report.base_growth = base

    _log.debug(
        f"{athlete.name} (age {athlete.age}) factors "
        f"t={talent:.2f} e={effort:.2f} o={opportunity:.2f} "
        f"env={environment:.2f} p={performance:.2f} age={age_factor:.2f} -> base {base:.2f}"
    )

    weights = cfg.stat_weights.get(athlete.position.value, {})
    cap = min(athlete.potential + cfg.potential_headroom, 99)

    for name in list(athlete.attributes):
        value = athlete.attr(name)
        weight = rng.uncertainty(weights.get(name, cfg.default_stat_weight), 0.15)
        growth = _aged_delta(name, base * weight, athlete, cfg, rng)

        if growth > 0:
            growth *= _diminishing_returns(value, athlete.potential)
            if value < 60 and athlete.age < 23:
                growth *= rng.gauss(1.2, 0.15)

        g1, g2 = rng.bivariate(growth, growth * 0.3, abs(growth) * 0.4,
                               abs(growth) * 0.3, 0.6)
        growth = g1 + 0.3 * g2

        delta = _probabilistic_round(growth, rng)
        if delta == 0:
            continue
        target = min(value + delta, max(cap, value))
        lo, hi = attribute_range(name, athlete.position)
        new_value = athlete.set_attribute(name, clamp(target, lo, hi))
        actual = new_value - int(round(value))
        if actual:
            report.changes[name] = actual
        if abs(actual) >= cfg.notable_change:
            verb = "improved" if actual > 0 else "declined"
            report.events.append(f"{name.replace('_', ' ').title()} {verb} by {abs(actual)}")

    if factors.potential_bump:
        ceiling = min(athlete.original_potential + cfg.max_potential_gain, 99)
        if athlete.potential < ceiling:
            athlete.potential += 1
            report.potential_change = 1
            report.events.append(f"{athlete.name}'s potential rose to {athlete.potential}")

    report.overall_after = athlete.overall
    return report


# ──────────────────────────────────────────────
# REPUTATION
# ──────────────────────────────────────────────

_TROPHY_REPUTATION = {
    "league": (3, 1, True),
    "continental": (6, 1.5, False),
    "cup": (1, 0.5, False),
    "state_cup": (1, 0.5, False),
    "world_cup": (10, 2, False),
    "international": (4, 1, False),
    "world_player_award": (8, 2, False),
    "continental_player_award": (4, 1, False),
    "young_player_award": (2, 0.5, False),
}


def update_reputation(athlete: Athlete, rating: float, trophies_won: List[str],
                      rng: RandomSource, config: Optional[ProgressionConfig] = None) -> int:
    """Move reputation toward the club's standing and reward silverware. Returns the new value."""
    cfg = config or ProgressionConfig()
    change = 0.0

    if rating > 1.2:
        change += math.floor(abs(rng.gauss(2, 0.8)))
    elif rating > 0.9:
        change += math.floor(abs(rng.gauss(1.2, 0.5)))
    elif rating < 0.3 and athlete.overall > 70:
        change -= math.floor(abs(rng.gauss(1, 0.4)))

    gap = athlete.team.reputation - athlete.reputation
    change += rng.gauss(gap / 25, abs(gap) / 40)

    for trophy in trophies_won:
        band = _TROPHY_REPUTATION.get(trophy)
        if band is None:
            continue
        mean, std, floored = band
        bonus = abs(rng.gauss(mean, std))
        change += math.floor(bonus) if floored else bonus

    if athlete.age > 35:
        change -= math.floor(abs(rng.gauss(1.5, 0.6)))
    elif athlete.age > 32:
        change -= math.floor(abs(rng.gauss(0.5, 0.3)))

    new_rep = int(clamp(round(athlete.reputation + change),
                        cfg.min_reputation, cfg.max_reputation))
    athlete.reputation = new_rep
    return new_rep
