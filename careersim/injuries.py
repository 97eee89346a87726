"""
Career Simulation Injury Ledger
===============================

Tracks the athlete's single active injury across seasons:
- Four tiers: Minor (1 cycle), Moderate (1-2), Severe (2-4), Career-Ending
- Risk is the product of base rate, age curve, workload, position contact
  risk, playing style and injury history, clamped to a sane range
- One roll per season, skipped while an injury is active
- Recovery ticks the duration down; Severe injuries can suffer setbacks

Usage:
    from careersim.injuries import roll_injury, process_recovery

    recovery = process_recovery(athlete, rng)
    injury = roll_injury(athlete, matches=34, rng=rng)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from careersim.athlete import (
    Archetype, Athlete, Injury, InjuryType, Personality, Position, TraitName,
)
from careersim.config import InjuryConfig
from careersim.rng import RandomSource, clamp

_log = logging.getLogger("careersim.injuries")


# ──────────────────────────────────────────────
# FLAVOR
# ──────────────────────────────────────────────

_INJURY_FLAVORS: Dict[Position, List[str]] = {
    Position.ST: ["hamstring injury", "groin strain", "ankle sprain", "knee problem"],
    Position.CF: ["hamstring injury", "groin strain", "ankle sprain", "knee problem"],
    Position.LW: ["hamstring injury", "ankle sprain", "thigh strain", "knee problem"],
    Position.RW: ["hamstring injury", "ankle sprain", "thigh strain", "knee problem"],
    Position.CAM: ["ankle sprain", "hamstring injury", "calf strain"],
    Position.CM: ["calf strain", "ankle sprain", "knee problem", "hamstring injury"],
    Position.CDM: ["knee injury", "ankle sprain", "muscle tear", "concussion"],
    Position.LM: ["hamstring injury", "ankle sprain", "calf strain"],
    Position.RM: ["hamstring injury", "ankle sprain", "calf strain"],
    Position.LB: ["hamstring injury", "ankle sprain", "knee injury"],
    Position.RB: ["hamstring injury", "ankle sprain", "knee injury"],
    Position.LWB: ["hamstring injury", "calf strain", "knee injury"],
    Position.RWB: ["hamstring injury", "calf strain", "knee injury"],
    Position.CB: ["back injury", "knee injury", "muscle tear", "concussion"],
    Position.GK: ["finger injury", "shoulder problem", "knee injury"],
}

_SEVERE_FLAVORS = ["ACL tear", "broken leg", "ruptured Achilles", "fractured ankle"]

_DURATIONS = {
    InjuryType.MINOR: (1, 1),
    InjuryType.MODERATE: (1, 2),
    InjuryType.SEVERE: (2, 4),
    InjuryType.CAREER_ENDING: (1, 1),
}


# ──────────────────────────────────────────────
# RISK
# ──────────────────────────────────────────────

@dataclass
class InjuryRisk:
    """Multiplicative injury risk factors for one season."""
    base: float
    age: float
    workload: float
    position: float
    style: float
    history: float

    @property
    def total(self) -> float:
        return self.base * self.age * self.workload * self.position * self.style * self.history

    def to_dict(self) -> dict:
        return {
            "base": self.base,
            "age": self.age,
            "workload": self.workload,
            "position": self.position,
            "style": self.style,
            "history": self.history,
            "total": round(self.total, 4),
        }


def _age_risk(age: int) -> float:
    if age < 20:
        return 0.9
    if age <= 25:
        return 0.8
    if age <= 30:
        return 1.0
    if age <= 33:
        return 1.4
    return 2.0


def _workload_risk(matches: int, season_length: int) -> float:
    load = matches / max(1, season_length)
    if load > 2.5:
        return 2.2
    if load > 2.0:
        return 1.7
    if load > 1.5:
        return 1.3
    if load < 0.5:
        return 0.6
    return 1.0


def injury_risk(athlete: Athlete, matches: int,
                config: Optional[InjuryConfig] = None) -> InjuryRisk:
    cfg = config or InjuryConfig()

    base = cfg.base_risk
    if athlete.has_trait(TraitName.INJURY_PRONE):
        base *= 2.5
    if athlete.has_trait(TraitName.NATURAL_FITNESS):
        base *= 0.5
    if athlete.personality == Personality.LAZY:
        base *= 1.3

    style = 1.0
    if athlete.attr("aggression") > 80:
        style *= 1.3
    if athlete.has_trait(TraitName.SLIDE_TACKLE):
        style *= 1.4
    if athlete.archetype == Archetype.THE_ENGINE:
        style *= 1.2

    history = 1.0
    if athlete.injury is not None and athlete.injury.type == InjuryType.SEVERE:
        history = 1.8
    if athlete.total_injuries > 5:
        history *= 1.3
    if athlete.total_injuries > 10:
        history *= 1.6

    risk = InjuryRisk(
        base=base,
        age=_age_risk(athlete.age),
        workload=_workload_risk(matches, cfg.season_length),
        position=cfg.position_risk.get(athlete.position.value, 1.0),
        style=style,
        history=history,
    )
    if risk.total > cfg.log_risk_above:
        _log.debug(f"{athlete.name} high injury risk {risk.total:.3f}: {risk.to_dict()}")
    return risk


# ──────────────────────────────────────────────
# ROLL
# ──────────────────────────────────────────────

def _severity(athlete: Athlete, roll: float, cfg: InjuryConfig) -> InjuryType:
    severe_at = cfg.severe_threshold_veteran if athlete.age > 32 else cfg.severe_threshold
    if roll > cfg.career_ending_threshold:
        return InjuryType.CAREER_ENDING
    if roll > severe_at:
        return InjuryType.SEVERE
    if roll > cfg.moderate_threshold:
        return InjuryType.MODERATE
    return InjuryType.MINOR


def roll_injury(athlete: Athlete, matches: int, rng: RandomSource,
                config: Optional[InjuryConfig] = None) -> Optional[Injury]:
    """
    Roll for one new injury this season.

    Returns the new injury (also stored on the athlete) or None.  Never
    rolls while an injury is still active.
    """
    cfg = config or InjuryConfig()
    if athlete.injury is not None:
        return None

    risk = injury_risk(athlete, matches, cfg)
    probability = clamp(risk.total, cfg.min_risk, cfg.max_risk)
    if not rng.roll(probability):
        return None

    injury_type = _severity(athlete, rng.random(), cfg)
    lo, hi = _DURATIONS[injury_type]
    flavors = _INJURY_FLAVORS.get(athlete.position, ["muscle strain"])
    if injury_type >= InjuryType.SEVERE:
        description = rng.choice(_SEVERE_FLAVORS)
    else:
        description = rng.choice(flavors)

    injury = Injury(
        type=injury_type,
        duration=rng.rand(lo, hi),
        description=description,
        recurrence_risk=cfg.recurrence.get(injury_type.value, 0.0),
    )
    if injury_type == InjuryType.SEVERE and rng.roll(cfg.severe_penalty_chance):
        injury.penalty_attribute = "stamina"
        injury.penalty_points = rng.rand(1, 3)
        athlete.set_attribute("stamina", athlete.attr("stamina") - injury.penalty_points)

    athlete.injury = injury
    athlete.total_injuries += 1
    _log.info(f"{athlete.name} suffered a {injury_type.value.lower()} injury "
              f"({description}, {injury.duration} cycle(s))")
    return injury


# ──────────────────────────────────────────────
# RECOVERY
# ──────────────────────────────────────────────

@dataclass
class RecoveryResult:
    recovered: bool
    setback: bool = False
    remaining: float = 0.0


def recovery_rate(athlete: Athlete, config: Optional[InjuryConfig] = None) -> float:
    """Cycles of recovery per tick. Later conditions override earlier ones."""
    cfg = config or InjuryConfig()
    rate = cfg.base_recovery_rate
    if athlete.has_trait(TraitName.NATURAL_FITNESS):
        rate = 1.5
    if athlete.age > 32:
        rate = 0.8
    if athlete.attr("fitness") < 70:
        rate = 0.9
    return rate


def process_recovery(athlete: Athlete, rng: RandomSource,
                     config: Optional[InjuryConfig] = None) -> RecoveryResult:
    """Advance the active injury by one recovery cycle."""
    cfg = config or InjuryConfig()
    injury = athlete.injury
    if injury is None:
        return RecoveryResult(recovered=True)

    injury.duration -= recovery_rate(athlete, cfg)

    if injury.type == InjuryType.SEVERE and rng.roll(cfg.setback_chance):
        injury.duration += 1
        _log.info(f"{athlete.name} suffered a setback ({injury.description})")
        return RecoveryResult(recovered=False, setback=True, remaining=injury.duration)

    if injury.duration <= 0:
        athlete.injury = None
        return RecoveryResult(recovered=True)
    return RecoveryResult(recovered=False, remaining=injury.duration)
