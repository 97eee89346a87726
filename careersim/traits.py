"""
Career Simulation Trait Acquisition
===================================

Traits are named perks (Clinical Finisher, Playmaker, One-Club Man, ...)
with a tier from Bronze to Diamond.

Each trait is a TraitRule: an eligibility predicate over the athlete and
the season just played, plus an acquisition band.  The band is turned
into a fresh probability on every evaluation (base + uniform * spread)
so nobody picks up a trait the instant they cross a threshold.  Many
predicates also jitter their own thresholds for the same reason.

Loyalty traits skip the roll entirely: their gate already encodes the
rarity, so passing it grants the trait (probability 1).

The probability gate is injectable (roll=...) so tests can pin it to
True/False while the predicates still run for real.

Usage:
    from careersim.traits import check_trait_acquisition, check_trait_removal

    gained = check_trait_acquisition(athlete, season_stats, rng)
    lost = check_trait_removal(athlete, rng)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from careersim.athlete import (
    Athlete, Personality, Position, SeasonStats, SquadStatus, Trait, TraitName, TraitTier,
)
from careersim.config import TraitConfig
from careersim.rng import RandomSource, Roll

_log = logging.getLogger("careersim.traits")

Predicate = Callable[[Athlete, SeasonStats, RandomSource], bool]

_P = Position


# ──────────────────────────────────────────────
# RULE & CHANGE RECORDS
# ──────────────────────────────────────────────

@dataclass
class TraitRule:
    name: TraitName
    predicate: Predicate
    band: Tuple[float, float] = (0.1, 0.1)     # (base probability, uniform spread)
    special: bool = False                      # tiers by the special scale
    loyalty: bool = False                      # granted outright once eligible

    def probability(self, rng: RandomSource) -> float:
        if self.loyalty:
            return 1.0
        base, spread = self.band
        return base + rng.random() * spread


@dataclass
class TraitChange:
    name: TraitName
    tier: TraitTier
    action: str          # "acquired" | "upgraded" | "removed"

    def to_dict(self) -> dict:
        return {"name": self.name.value, "tier": self.tier.value, "action": self.action}


# ──────────────────────────────────────────────
# PREDICATES
# ──────────────────────────────────────────────

def _per_match(count: int, matches: int) -> float:
    return count / matches if matches > 0 else 0.0


def _one_club_man(a: Athlete, s: SeasonStats, rng: RandomSource) -> bool:
    return a.years_at_club >= 8 and a.total_matches >= 150


def _two_footed(a: Athlete, s: SeasonStats, rng: RandomSource) -> bool:
    needed = 4 if rng.random() < 0.3 else 5
    return (a.weak_foot >= needed
            and a.age >= 23 + rng.rand(0, 3)
            and a.total_matches >= 120 + rng.rand(0, 79))


def _leadership(a: Athlete, s: SeasonStats, rng: RandomSource) -> bool:
    min_age = 27 if a.personality == Personality.PROFESSIONAL else 29
    return (a.age >= min_age
            and a.attr("leadership") >= 82 + rng.rand(0, 5)
            and a.squad_status == SquadStatus.KEY_PLAYER
            and a.total_matches >= 250 + rng.rand(0, 99)
            and a.years_at_club >= 2 + rng.rand(0, 1))


def _clinical_finisher(a: Athlete, s: SeasonStats, rng: RandomSource) -> bool:
    return (a.position in (_P.ST, _P.CF, _P.LW, _P.RW)
            and _per_match(s.goals, s.matches) >= 0.60 + rng.random() * 0.1
            and a.attr("finishing") >= 82 + rng.rand(0, 5)
            and a.attr("shooting") >= 82
            and s.matches >= 25 + rng.rand(0, 9))


def _set_piece_specialist(a: Athlete, s: SeasonStats, rng: RandomSource) -> bool:
    return (a.position in (_P.CAM, _P.CM, _P.LM, _P.RM, _P.LW, _P.RW, _P.ST, _P.CF)
            and _per_match(s.assists, s.matches) >= 0.40 + rng.random() * 0.15
            and a.attr("passing") >= 83 + rng.rand(0, 4)
            and a.attr("curve") >= 81 + rng.rand(0, 4)
            and s.matches >= 25 + rng.rand(0, 9))


def _big_game_player(a: Athlete, s: SeasonStats, rng: RandomSource) -> bool:
    if sum(a.trophies.values()) < 4 + rng.rand(0, 2):
        return False
    if a.age < 25 + rng.rand(0, 2) or a.reputation < 80 + rng.rand(0, 9):
        return False
    if rng.random() < 0.6:
        return sum(a.awards.values()) > 0
    return True


def _injury_prone(a: Athlete, s: SeasonStats, rng: RandomSource) -> bool:
    fitness = a.attr("fitness")
    risks = 0
    if fitness <= 35 + rng.rand(0, 14):
        risks += 1
    if a.personality == Personality.INCONSISTENT:
        risks += 1
    if a.personality == Personality.LAZY:
        risks += 1
    if a.age >= 24 + rng.rand(0, 3) and fitness < 55:
        risks += 1
    return risks >= 2


def _versatile(a: Athlete, s: SeasonStats, rng: RandomSource) -> bool:
    overall = a.overall
    return ((a.age >= 26 and overall >= 78 and a.years_at_club >= 4)
            or (a.age >= 24 and overall >= 82 and a.total_matches >= 180)
            or (a.personality == Personality.PROFESSIONAL and a.age >= 25
                and a.total_matches >= 150))


def _power_header(a: Athlete, s: SeasonStats, rng: RandomSource) -> bool:
    return (a.position in (_P.ST, _P.CF, _P.CB, _P.LB, _P.RB)
            and a.attr("heading") >= 83 + rng.rand(0, 5)
            and a.attr("jumping") >= 79 + rng.rand(0, 5)
            and a.attr("physical") >= 77 + rng.rand(0, 5)
            and s.matches >= 20 + rng.rand(0, 9))


def _playmaker(a: Athlete, s: SeasonStats, rng: RandomSource) -> bool:
    if a.position not in (_P.CAM, _P.CM, _P.CDM, _P.LW, _P.RW):
        return False
    passing = a.attr("passing")
    vision = a.attr("vision")
    creative = (_per_match(s.assists, s.matches) >= 0.40 + rng.random() * 0.1
                or passing >= 88 or vision >= 88)
    return (creative and passing >= 84 and vision >= 82
            and s.matches >= 25 + rng.rand(0, 9))


def _speed_merchant(a: Athlete, s: SeasonStats, rng: RandomSource) -> bool:
    pace = a.attr("pace")
    accel = a.attr("acceleration")
    quick = ((pace >= 92 and accel >= 88)
             or (pace >= 90 and accel >= 92)
             or (pace >= 89 and a.age <= 25))
    return quick and a.age <= 28 + rng.rand(0, 2)


def _engine(a: Athlete, s: SeasonStats, rng: RandomSource) -> bool:
    return (a.attr("stamina") >= 87 + rng.rand(0, 5)
            and a.attr("work_rate") >= 85 + rng.rand(0, 4)
            and s.matches >= 30 + rng.rand(0, 9)
            and a.position in (_P.CM, _P.CDM, _P.CAM, _P.LM, _P.RM))


def _dribbling_wizard(a: Athlete, s: SeasonStats, rng: RandomSource) -> bool:
    dribbling = a.attr("dribbling")
    skilful = ((dribbling >= 88 and a.attr("agility") >= 83)
               or (dribbling >= 86 and a.attr("ball_control") >= 87)
               or (dribbling >= 85 and a.attr("agility") >= 87))
    return (skilful and s.matches >= 20 + rng.rand(0, 9)
            and a.position in (_P.LW, _P.RW, _P.CAM, _P.ST, _P.CF))


def _composure(a: Athlete, s: SeasonStats, rng: RandomSource) -> bool:
    composure = a.attr("composure")
    return ((composure >= 86 and a.age >= 27 and a.total_matches >= 200)
            or (composure >= 90 and a.age >= 24)
            or (composure >= 84
                and a.personality in (Personality.PROFESSIONAL, Personality.DETERMINED)
                and a.total_matches >= 150))


def _discipline(a: Athlete, s: SeasonStats, rng: RandomSource) -> bool:
    calm = a.personality == Personality.PROFESSIONAL or a.attr("aggression") <= 50
    return (calm
            and a.attr("composure") >= 75 + rng.rand(0, 5)
            and s.matches >= 25 + rng.rand(0, 9)
            and s.yellow_cards <= 2 + rng.rand(0, 2)
            and s.red_cards == 0)


def _natural_fitness(a: Athlete, s: SeasonStats, rng: RandomSource) -> bool:
    return (a.attr("fitness") >= 88 + rng.rand(0, 4)
            and a.attr("stamina") >= 85
            and a.age <= 30
            and s.matches >= 30 + rng.rand(0, 5))


def _slide_tackle(a: Athlete, s: SeasonStats, rng: RandomSource) -> bool:
    return (a.position in (_P.CB, _P.CDM, _P.LB, _P.RB, _P.LWB, _P.RWB)
            and a.attr("defending") >= 84 + rng.rand(0, 4)
            and a.attr("aggression") >= 70
            and s.matches >= 25 + rng.rand(0, 9))


def _long_shots(a: Athlete, s: SeasonStats, rng: RandomSource) -> bool:
    return (a.position not in (_P.GK, _P.CB)
            and a.attr("long_shots") >= 85 + rng.rand(0, 4)
            and a.attr("shot_power") >= 80
            and s.matches >= 20 + rng.rand(0, 9))


def _crossing_specialist(a: Athlete, s: SeasonStats, rng: RandomSource) -> bool:
    return (a.position in (_P.LB, _P.RB, _P.LWB, _P.RWB, _P.LM, _P.RM, _P.LW, _P.RW)
            and a.attr("crossing") >= 85 + rng.rand(0, 4)
            and _per_match(s.assists, s.matches) >= 0.2
            and s.matches >= 25 + rng.rand(0, 9))


def _poacher(a: Athlete, s: SeasonStats, rng: RandomSource) -> bool:
    return (a.position in (_P.ST, _P.CF)
            and a.attr("finishing") >= 84 + rng.rand(0, 4)
            and a.attr("positioning") >= 82
            and s.goals >= 20 + rng.rand(0, 5))


def _shot_stopper(a: Athlete, s: SeasonStats, rng: RandomSource) -> bool:
    return (a.position == _P.GK
            and a.attr("reflexes") >= 85 + rng.rand(0, 4)
            and a.attr("diving") >= 83
            and s.clean_sheets >= 15 + rng.rand(0, 5))


def _flair_player(a: Athlete, s: SeasonStats, rng: RandomSource) -> bool:
    return (a.position in (_P.LW, _P.RW, _P.CAM, _P.CF, _P.ST)
            and a.attr("flair") >= 88 + rng.rand(0, 4)
            and a.attr("dribbling") >= 82
            and s.matches >= 20)


DEFAULT_TRAIT_RULES: List[TraitRule] = [
    TraitRule(TraitName.ONE_CLUB_MAN, _one_club_man, special=True, loyalty=True),
    TraitRule(TraitName.TWO_FOOTED, _two_footed, (0.15, 0.20), special=True),
    TraitRule(TraitName.LEADERSHIP, _leadership, (0.10, 0.15), special=True),
    TraitRule(TraitName.CLINICAL_FINISHER, _clinical_finisher, (0.08, 0.12)),
    TraitRule(TraitName.SET_PIECE_SPECIALIST, _set_piece_specialist, (0.07, 0.10)),
    TraitRule(TraitName.BIG_GAME_PLAYER, _big_game_player, (0.10, 0.15), special=True),
    TraitRule(TraitName.INJURY_PRONE, _injury_prone, (0.03, 0.05)),
    TraitRule(TraitName.VERSATILE, _versatile, (0.06, 0.08)),
    TraitRule(TraitName.POWER_HEADER, _power_header, (0.09, 0.12)),
    TraitRule(TraitName.PLAYMAKER, _playmaker, (0.11, 0.12)),
    TraitRule(TraitName.SPEED_MERCHANT, _speed_merchant, (0.15, 0.15)),
    TraitRule(TraitName.ENGINE, _engine, (0.12, 0.12)),
    TraitRule(TraitName.DRIBBLING_WIZARD, _dribbling_wizard, (0.09, 0.11)),
    TraitRule(TraitName.COMPOSURE, _composure, (0.14, 0.14)),
    TraitRule(TraitName.DISCIPLINE, _discipline, (0.08, 0.10)),
    TraitRule(TraitName.NATURAL_FITNESS, _natural_fitness, (0.06, 0.08)),
    TraitRule(TraitName.SLIDE_TACKLE, _slide_tackle, (0.08, 0.10)),
    TraitRule(TraitName.LONG_SHOTS, _long_shots, (0.08, 0.10)),
    TraitRule(TraitName.CROSSING_SPECIALIST, _crossing_specialist, (0.08, 0.10)),
    TraitRule(TraitName.POACHER, _poacher, (0.09, 0.10)),
    TraitRule(TraitName.SHOT_STOPPER, _shot_stopper, (0.10, 0.12)),
    TraitRule(TraitName.FLAIR_PLAYER, _flair_player, (0.08, 0.10)),
]

_SPECIAL_TRAITS = {r.name for r in DEFAULT_TRAIT_RULES if r.special}


# ──────────────────────────────────────────────
# TIERS & MERGE
# ──────────────────────────────────────────────

def trait_tier(athlete: Athlete, name: TraitName,
               config: Optional[TraitConfig] = None) -> TraitTier:
    cfg = config or TraitConfig()
    overall = athlete.overall
    if name in _SPECIAL_TRAITS:
        return TraitTier.DIAMOND if overall >= cfg.special_diamond_overall else TraitTier.GOLD
    if overall >= cfg.diamond_overall:
        return TraitTier.DIAMOND
    if overall >= cfg.gold_overall:
        return TraitTier.GOLD
    if overall >= cfg.silver_overall:
        return TraitTier.SILVER
    return TraitTier.BRONZE


def merge_trait(traits: List[Trait], trait: Trait) -> Optional[str]:
    """
    Add a trait keyed by name.

    Returns "acquired" for a new trait, "upgraded" when an existing entry
    moved to a strictly higher tier, None when nothing changed.
    """
    for existing in traits:
        if existing.name == trait.name:
            if trait.tier > existing.tier:
                existing.tier = trait.tier
                return "upgraded"
            return None
    traits.append(Trait(trait.name, trait.tier))
    return "acquired"


# ──────────────────────────────────────────────
# ACQUISITION & REMOVAL
# ──────────────────────────────────────────────

def check_trait_acquisition(athlete: Athlete, season: SeasonStats, rng: RandomSource,
                            roll: Optional[Roll] = None,
                            rules: Optional[Sequence[TraitRule]] = None,
                            config: Optional[TraitConfig] = None) -> List[TraitChange]:
    """Evaluate every rule once and merge the traits that pass their roll."""
    roll = roll or rng.roll
    changes: List[TraitChange] = []
    for rule in (rules if rules is not None else DEFAULT_TRAIT_RULES):
        if not rule.predicate(athlete, season, rng):
            continue
        if not roll(rule.probability(rng)):
            continue
        tier = trait_tier(athlete, rule.name, config)
        action = merge_trait(athlete.traits, Trait(rule.name, tier))
        if action:
            changes.append(TraitChange(rule.name, tier, action))
            _log.info(f"{athlete.name} {action} trait {rule.name.value} ({tier.value})")
    return changes


def check_trait_removal(athlete: Athlete, rng: RandomSource,
                        roll: Optional[Roll] = None,
                        config: Optional[TraitConfig] = None) -> List[TraitChange]:
    """Shed reversible traits. Only Injury Prone and Weak Foot can be lost."""
    cfg = config or TraitConfig()
    roll = roll or rng.roll
    removed: List[TraitChange] = []

    prone = athlete.get_trait(TraitName.INJURY_PRONE)
    if (prone is not None
            and athlete.attr("fitness") >= cfg.injury_prone_removal_fitness
            and athlete.age <= cfg.injury_prone_removal_max_age
            and roll(cfg.injury_prone_removal_chance)):
        removed.append(TraitChange(prone.name, prone.tier, "removed"))

    weak = athlete.get_trait(TraitName.WEAK_FOOT)
    if (weak is not None
            and athlete.weak_foot >= cfg.weak_foot_removal_min_rating
            and roll(cfg.weak_foot_removal_chance)):
        removed.append(TraitChange(weak.name, weak.tier, "removed"))

    if removed:
        gone = {c.name for c in removed}
        athlete.traits = [t for t in athlete.traits if t.name not in gone]
        for change in removed:
            _log.info(f"{athlete.name} lost trait {change.name.value}")
    return removed
