"""
Career Simulation Club Profiles
===============================

Derives a club's financial and sporting identity from its reputation and
league tier:

- Tier          Elite / Major / Standard / Lower / Minor
- Financial     power-law on reputation, so elite clubs out-spend the
                mid-table by far more than their reputation gap suggests
- Attractiveness, development index, ambition, transfer activity
- Playing style and the best overall the club can realistically sign
- Budgets       weekly wage budget, per-player wage cap (a tier share of
                the budget) and transfer budget, scaled up for Elite and
                Major clubs

A profile is a pure function of the Team: its noise comes from a random
stream seeded by the club key, so the same club always profiles the same
way.  Persisted ledger values on the Team override the derived budgets.

Usage:
    from careersim.club_profile import get_club_profile

    profile = get_club_profile(team)
    print(profile.tier, profile.wage_cap, profile.remaining_transfer_budget)
"""

from __future__ import annotations

import random
import zlib
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from careersim.athlete import ClubTier, PlayingStyle, Team
from careersim.clubs import DEVELOPMENT_CLUBS
from careersim.config import TransferConfig
from careersim.rng import RandomSource, clamp


# ──────────────────────────────────────────────
# TABLES
# ──────────────────────────────────────────────

_WAGE_TIER_MULTIPLIER = {1: 2.0, 2: 1.3, 3: 0.9, 4: 0.6, 5: 0.5}
_TRANSFER_TIER_MULTIPLIER = {1: 1.0, 2: 0.7, 3: 0.45}

# (min reputation, mean max overall)
_MAX_OVERALL_BY_REP = [
    (95, 98), (90, 95), (85, 92), (80, 89), (75, 85), (70, 82), (65, 79), (60, 75),
]

_STYLE_WEIGHTS = [
    (85, [(PlayingStyle.POSSESSION, 0.4), (PlayingStyle.BALANCED, 0.3),
          (PlayingStyle.COUNTER, 0.2), (PlayingStyle.DIRECT, 0.1)]),
    (75, [(PlayingStyle.BALANCED, 0.3), (PlayingStyle.COUNTER, 0.3),
          (PlayingStyle.DIRECT, 0.2), (PlayingStyle.POSSESSION, 0.2)]),
    (0, [(PlayingStyle.DIRECT, 0.4), (PlayingStyle.COUNTER, 0.3),
         (PlayingStyle.BALANCED, 0.3)]),
]


# ──────────────────────────────────────────────
# PROFILE
# ──────────────────────────────────────────────

@dataclass
class ClubProfile:
    key: str
    name: str
    tier: ClubTier
    financial_power: float
    attractiveness: float
    development_index: float
    ambition: float
    transfer_activity: float
    playing_style: PlayingStyle
    max_overall: int
    wage_budget_weekly: int
    remaining_wage_budget_weekly: int
    wage_cap: int
    transfer_budget: int
    remaining_transfer_budget: int
    viability_ratio: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "name": self.name,
            "tier": self.tier.value,
            "financial_power": round(self.financial_power, 1),
            "attractiveness": round(self.attractiveness, 1),
            "development_index": round(self.development_index, 1),
            "ambition": round(self.ambition, 1),
            "transfer_activity": round(self.transfer_activity, 1),
            "playing_style": self.playing_style.value,
            "max_overall": self.max_overall,
            "wage_budget_weekly": self.wage_budget_weekly,
            "remaining_wage_budget_weekly": self.remaining_wage_budget_weekly,
            "wage_cap": self.wage_cap,
            "transfer_budget": self.transfer_budget,
            "remaining_transfer_budget": self.remaining_transfer_budget,
            "viability_ratio": self.viability_ratio,
        }


def _club_rng(team: Team) -> RandomSource:
    return RandomSource(rng=random.Random(zlib.crc32(team.key.encode("utf-8"))))


def _club_tier(rep: float, league_tier: int, rng: RandomSource) -> ClubTier:
    adjusted = rep + rng.gauss(0, 1.5)
    if adjusted >= 90 and league_tier <= 1:
        return ClubTier.ELITE
    if adjusted >= 84 and league_tier <= 2:
        return ClubTier.MAJOR
    if adjusted >= 77 and league_tier <= 3:
        return ClubTier.STANDARD
    if adjusted >= 70:
        return ClubTier.LOWER
    return ClubTier.MINOR


def _financial_power(rep: float, league_tier: int, rng: RandomSource) -> float:
    base = (max(0.0, rep - 60) / 40) ** 2.2 * 100
    power = abs(rng.gauss(base, base * 0.15))
    power += rng.gauss((6 - league_tier) * 12, 4)
    return clamp(power, 8, 100)


def _attractiveness(rep: float, league_tier: int, fp: float, rng: RandomSource) -> float:
    if rep > 88:
        history = rng.gauss(18, 3)
    elif rep > 83:
        history = rng.gauss(12, 2)
    elif rep > 78:
        history = rng.gauss(8, 1.5)
    else:
        history = rng.gauss(5, 1)
    league = {1: (25, 4), 2: (15, 3), 3: (8, 2)}.get(league_tier)
    league_bonus = rng.gauss(*league) if league else 0.0
    value, _ = rng.bivariate(rep - 60 + history + league_bonus, fp, 12, 8, 0.7)
    return clamp(value, 15, 100)


def _development_index(team: Team, rng: RandomSource) -> float:
    if team.name in DEVELOPMENT_CLUBS:
        return clamp(abs(rng.gauss(90, 8)), 80, 100)
    return clamp(rng.gauss(35 + (team.reputation - 70) * 1.8, 10), 15, 88)


def _max_overall(rep: float, league_tier: int, rng: RandomSource) -> int:
    mean = 90
    for min_rep, value in _MAX_OVERALL_BY_REP:
        if rep >= min_rep:
            mean = value
            break
    mean -= (league_tier - 1) * 5
    return max(65, int(round(rng.gauss(mean, 2))))


def _playing_style(rep: float, rng: RandomSource) -> PlayingStyle:
    for min_rep, weights in _STYLE_WEIGHTS:
        if rep >= min_rep:
            styles = [s for s, _ in weights]
            return rng.weighted_pick(styles, [w for _, w in weights])
    return PlayingStyle.BALANCED


def _build_profile(team: Team, cfg: TransferConfig) -> ClubProfile:
    rng = _club_rng(team)
    rep = team.reputation
    league_tier = team.league_tier

    tier = _club_tier(rep, league_tier, rng)
    fp = _financial_power(rep, league_tier, rng)
    attractiveness = _attractiveness(rep, league_tier, fp, rng)
    development = _development_index(team, rng)
    ambition = clamp(rng.gauss(rep - 15, rng.uncertainty(10, 0.3)), 25, 98)
    activity, _ = rng.bivariate(fp * 0.65 + ambition * 0.35, ambition, 12, 10, 0.6)
    activity = clamp(activity, 18, 96)
    style = _playing_style(rep, rng)
    max_overall = _max_overall(rep, league_tier, rng)

    derived_wage_budget = int((fp * 15 + rng.rand_float(0, 50)) * 1000
                              * _WAGE_TIER_MULTIPLIER.get(league_tier, 0.5))
    wage_budget = (team.wage_budget_weekly
                   if team.wage_budget_weekly is not None else derived_wage_budget)
    remaining_wage = (team.remaining_wage_budget_weekly
                      if team.remaining_wage_budget_weekly is not None else wage_budget)

    derived_transfer = (fp / 100) ** 2.2 * 250_000_000 * _TRANSFER_TIER_MULTIPLIER.get(league_tier, 0.25)
    derived_transfer *= cfg.transfer_budget_by_tier.get(tier.value, 1.0)
    derived_transfer = int(clamp(derived_transfer, 1_000_000, cfg.max_transfer_budget))
    transfer_budget = (team.transfer_budget
                       if team.transfer_budget is not None else derived_transfer)
    remaining_transfer = (team.remaining_transfer_budget
                          if team.remaining_transfer_budget is not None else transfer_budget)

    wage_cap = int(wage_budget * cfg.wage_share.get(tier.value, 0.22))

    return ClubProfile(
        key=team.key,
        name=team.name,
        tier=tier,
        financial_power=fp,
        attractiveness=attractiveness,
        development_index=development,
        ambition=ambition,
        transfer_activity=activity,
        playing_style=style,
        max_overall=max_overall,
        wage_budget_weekly=wage_budget,
        remaining_wage_budget_weekly=remaining_wage,
        wage_cap=wage_cap,
        transfer_budget=transfer_budget,
        remaining_transfer_budget=remaining_transfer,
        viability_ratio=cfg.viability_ratio.get(tier.value),
    )


# ──────────────────────────────────────────────
# CACHE
# ──────────────────────────────────────────────

_PROFILE_CACHE: Dict[Tuple, ClubProfile] = {}


def _cache_key(team: Team, cfg: TransferConfig) -> Tuple:
    return (team.key, team.reputation, team.league_tier,
            team.transfer_budget, team.remaining_transfer_budget,
            team.wage_budget_weekly, team.remaining_wage_budget_weekly,
            tuple(sorted(cfg.wage_share.items())),
            tuple(sorted(cfg.viability_ratio.items())),
            tuple(sorted(cfg.transfer_budget_by_tier.items())),
            cfg.max_transfer_budget)


def get_club_profile(team: Team, config: Optional[TransferConfig] = None) -> ClubProfile:
    """Profile for a club. Cached per club, ledger state and budget tuning."""
    cfg = config or TransferConfig()
    key = _cache_key(team, cfg)
    profile = _PROFILE_CACHE.get(key)
    if profile is None:
        profile = _build_profile(team, cfg)
        _PROFILE_CACHE[key] = profile
    return profile


def clear_profile_cache() -> None:
    _PROFILE_CACHE.clear()
