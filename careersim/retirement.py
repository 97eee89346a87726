"""
Career Simulation Retirement
============================

Decides at season end whether the athlete hangs up their boots.

The chance follows a hockey stick around a personal target age: almost
nothing four years out, a coin flip or so at the target, certainty two
years past it.  Physical condition, morale, silverware, playing time and
form bend the curve; a career-ending injury forces the decision.

Usage:
    from careersim.retirement import check_retirement

    decision = check_retirement(athlete, rating=0.8, matches=22, rng=rng)
    if decision.retire:
        print(decision.reason)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from careersim.athlete import (
    Athlete, Personality, Position, SquadStatus, TraitName,
)
from careersim.config import RetirementConfig
from careersim.rng import RandomSource, clamp

_log = logging.getLogger("careersim.retirement")

PREMATURE = "PREMATURE"
PEAK_LEGEND = "PEAK_LEGEND"
TOO_LONG = "TOO_LONG"
NATURAL = "NATURAL"
CAREER_ENDING_INJURY = "CAREER_ENDING_INJURY"


@dataclass
class RetirementDecision:
    retire: bool
    probability: float
    target_age: int
    reason: Optional[str] = None


def retirement_target_age(athlete: Athlete, config: Optional[RetirementConfig] = None) -> int:
    cfg = config or RetirementConfig()
    target = athlete.retirement_age
    if athlete.is_goalkeeper:
        target += 5
    elif athlete.position in (Position.CB, Position.CDM):
        target += 3

    overall = athlete.overall
    if overall >= 92:
        target += 3
    elif overall >= 88:
        target += 2
    elif overall >= 85:
        target += 1

    if athlete.personality == Personality.PROFESSIONAL:
        target += 1
    if athlete.has_trait(TraitName.INJURY_PRONE):
        target -= 2

    cap = (cfg.max_target_age_goalkeeper if athlete.is_goalkeeper
           else cfg.max_target_age_outfield)
    return min(target, cap)


def retirement_probability(athlete: Athlete, rating: float, matches: int,
                           config: Optional[RetirementConfig] = None) -> float:
    cfg = config or RetirementConfig()
    target = retirement_target_age(athlete, cfg)
    delta = int(clamp(athlete.age - target, -4, 2))
    p = cfg.base_chance.get(str(delta), 0.0)
    if athlete.age - target < -4:
        p = cfg.base_chance.get("-4", 0.0)

    goalkeeper = athlete.is_goalkeeper
    if goalkeeper:
        condition = athlete.attr("reflexes")
    else:
        condition = (athlete.attr("pace") + athlete.attr("stamina")) / 2
    if condition >= 90:
        p *= 0.4
    elif condition >= 80:
        p *= 0.7

    if athlete.morale.rank >= 4:
        p *= 0.6
    elif athlete.morale.rank == 3:
        p *= 0.8

    honours = sum(athlete.trophies.values()) + sum(athlete.awards.values())
    if honours > 0 and delta <= 0:
        p *= 0.7

    if matches < 5:
        p *= 1.8
    elif matches < 15:
        p *= 1.3
    if rating < 0.3:
        p *= 1.5
    elif rating < 0.5:
        p *= 1.2

    if not goalkeeper and athlete.attr("pace") < 50:
        p *= 1.4
    if goalkeeper and athlete.attr("reflexes") < 60:
        p *= 1.4
    if athlete.squad_status == SquadStatus.SURPLUS:
        p *= 1.3

    if athlete.age - target <= -2 and athlete.injury is None:
        p = min(p, 0.02)
    return clamp(p, 0.0, cfg.max_probability)


def _reason(athlete: Athlete, target: int) -> str:
    delta = athlete.age - target
    if delta <= -2:
        return PREMATURE
    if delta <= 0 and athlete.overall >= 85:
        return PEAK_LEGEND
    if delta >= 1 or athlete.overall < 75:
        return TOO_LONG
    return NATURAL


def check_retirement(athlete: Athlete, rating: float, matches: int, rng: RandomSource,
                     config: Optional[RetirementConfig] = None) -> RetirementDecision:
    """Roll the retirement decision and, on retirement, close out the contract."""
    cfg = config or RetirementConfig()
    target = retirement_target_age(athlete, cfg)

    if athlete.injury is not None and athlete.injury.is_career_ending:
        decision = RetirementDecision(True, 1.0, target, CAREER_ENDING_INJURY)
    else:
        p = retirement_probability(athlete, rating, matches, cfg)
        _log.debug(f"{athlete.name} age {athlete.age} (target {target}) retirement chance {p:.3f}")
        if rng.roll(p):
            decision = RetirementDecision(True, p, target, _reason(athlete, target))
        else:
            decision = RetirementDecision(False, p, target)

    if decision.retire:
        athlete.retired = True
        athlete.contract_length = 0
        athlete.wage = 0
        _log.info(f"{athlete.name} retired at {athlete.age} ({decision.reason})")
    return decision
