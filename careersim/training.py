"""
Career Simulation Training Investment
=====================================

Once per season an athlete may pay for private training (four weeks of
wages).  The investment rolls a development modifier that the progression
step applies to the environment factor for that season only.

Buying twice in one season is rejected; the athlete is left untouched.

Usage:
    from careersim.training import apply_training_investment, should_auto_invest

    decision = should_auto_invest(athlete, rng)
    if decision.invest:
        result = apply_training_investment(athlete, season=2031, rng=rng)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from careersim.athlete import AgentReputation, Athlete, Personality
from careersim.rng import RandomSource, clamp

_log = logging.getLogger("careersim.training")

TRAINING_WEEKS = 4

# (min modifier, result type), checked top-down
_RESULT_TYPES = [
    (1.25, "excellent"),
    (1.10, "good"),
    (1.00, "neutral"),
]


@dataclass
class TrainingResult:
    success: bool
    cost: int = 0
    modifier: float = 1.0
    result_type: Optional[str] = None     # excellent | good | neutral | poor
    reason: Optional[str] = None          # already_invested | insufficient_funds

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "cost": self.cost,
            "modifier": self.modifier,
            "result_type": self.result_type,
            "reason": self.reason,
        }


@dataclass
class TrainingDecision:
    invest: bool
    score: float
    confidence: float


def training_cost(athlete: Athlete) -> int:
    return int(athlete.wage * TRAINING_WEEKS)


def can_afford_training(athlete: Athlete) -> bool:
    return athlete.bank_balance >= training_cost(athlete)


def _result_type(modifier: float) -> str:
    for threshold, label in _RESULT_TYPES:
        if modifier >= threshold:
            return label
    return "poor"


def roll_training_modifier(athlete: Athlete, rng: RandomSource) -> float:
    modifier = clamp(rng.gauss(1.10, 0.12), 0.95, 1.40)
    if athlete.agent.reputation == AgentReputation.SUPER_AGENT:
        modifier = max(1.0, modifier)
    return round(modifier, 2)


def apply_training_investment(athlete: Athlete, season: int,
                              rng: RandomSource) -> TrainingResult:
    """Pay for one season of private training. Idempotent per season."""
    if athlete.training_modifier_season == season:
        return TrainingResult(success=False, reason="already_invested")
    cost = training_cost(athlete)
    if athlete.bank_balance < cost:
        return TrainingResult(success=False, cost=cost, reason="insufficient_funds")

    modifier = roll_training_modifier(athlete, rng)
    result_type = _result_type(modifier)

    athlete.bank_balance -= cost
    athlete.training_modifier = modifier
    athlete.training_modifier_season = season
    athlete.last_training_result = result_type

    _log.info(f"{athlete.name} invested EUR {cost:,} in training for {season}: "
              f"{result_type} (x{modifier:.2f})")
    return TrainingResult(success=True, cost=cost, modifier=modifier, result_type=result_type)


def should_auto_invest(athlete: Athlete, rng: RandomSource) -> TrainingDecision:
    """
    Score whether an automated career should pay for training this season.

    Young athletes with growth room, decent agents and savings to spare
    lean towards investing; veterans at their ceiling lean away.
    """
    cost = training_cost(athlete)
    if athlete.bank_balance < cost:
        return TrainingDecision(invest=False, score=0.0, confidence=1.0)

    score = 0.0
    score += 2.0 if athlete.potential - athlete.overall > 3 else -3.0
    if athlete.age < 28:
        score += 1.5
    elif athlete.age >= 32:
        score -= 2.0
    if athlete.agent.reputation >= AgentReputation.GOOD:
        score += 1.0
    if athlete.team.league_tier <= 2:
        score += 1.0
    elif athlete.team.league_tier >= 4:
        score -= 1.0
    if athlete.potential >= 80:
        score += 1.5
    if athlete.personality in (Personality.AMBITIOUS, Personality.PROFESSIONAL):
        score += 1.0
    if athlete.bank_balance > cost * 3:
        score += 0.5

    adjusted = score * rng.rand_float(0.85, 1.15)
    confidence = clamp(abs(adjusted - 3.5) / 5, 0.0, 1.0)
    return TrainingDecision(invest=adjusted >= 3.5, score=adjusted, confidence=confidence)
