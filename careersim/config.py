"""
Career Simulation Tuning Tables
===============================

Every tunable table the engine reads lives on one of the config
dataclasses below instead of a module-level constant, so tests and batch
runs can override single values without patching modules.

    ProgressionConfig   factor correlations, per-position stat weights, ageing groups
    SquadStatusConfig   expected-starter baselines, streak thresholds
    InjuryConfig        risk tables, severity thresholds, recovery rates
    TraitConfig         tier thresholds, removal chances
    TransferConfig      style-need matrix, visibility, negotiation limits
    RetirementConfig    hockey-stick chance curve, age caps

Usage:
    from careersim.config import EngineConfig, load_config

    config = EngineConfig()
    config.injuries.max_risk = 0.5
    config = load_config("tuning.json")    # overlays the file on the defaults
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field, fields
from typing import Dict, List


# ──────────────────────────────────────────────
# PROGRESSION
# ──────────────────────────────────────────────

# Order: talent, effort, opportunity, environment, performance, age
_FACTOR_CORRELATION = [
    [1.00, 0.15, 0.25, 0.35, 0.45, -0.20],
    [0.15, 1.00, 0.40, 0.20, 0.50, -0.10],
    [0.25, 0.40, 1.00, 0.30, 0.55, 0.00],
    [0.35, 0.20, 0.30, 1.00, 0.35, -0.15],
    [0.45, 0.50, 0.55, 0.35, 1.00, -0.25],
    [-0.20, -0.10, 0.00, -0.15, -0.25, 1.00],
]

_FULLBACK_WEIGHTS = {
    "pace": 1.1, "crossing": 1.05, "stamina": 1.0, "defending": 0.95,
    "interceptions": 0.9, "dribbling": 0.8, "passing": 0.85,
    "shooting": 0.4, "physical": 0.7,
}
_WINGBACK_WEIGHTS = {
    "pace": 1.1, "crossing": 0.95, "stamina": 1.05, "defending": 0.9,
    "work_rate": 1.0, "dribbling": 0.8, "passing": 0.75,
    "shooting": 0.4, "physical": 0.7,
}
_WIDE_MID_WEIGHTS = {
    "pace": 1.0, "shooting": 0.9, "passing": 0.95, "dribbling": 1.1,
    "defending": 0.5, "composure": 0.8, "vision": 0.85, "flair": 0.85,
    "crossing": 1.05,
}
_WINGER_WEIGHTS = {
    "pace": 1.05, "shooting": 1.0, "passing": 0.8, "dribbling": 1.15,
    "defending": 0.3, "composure": 1.1, "vision": 0.8, "flair": 1.1,
    "crossing": 0.95,
}


def _default_stat_weights() -> Dict[str, Dict[str, float]]:
    return {
        "GK": {
            "handling": 1.2, "reflexes": 1.15, "diving": 1.1, "positioning": 1.05,
            "composure": 1.0, "pace": 0.3, "dribbling": 0.4, "shooting": 0.2,
            "passing": 0.6, "defending": 0.5, "physical": 0.8,
        },
        "CB": {
            "defending": 1.15, "positioning": 1.1, "interceptions": 1.05,
            "physical": 1.0, "strength": 0.95, "pace": 0.8, "dribbling": 0.5,
            "shooting": 0.3, "passing": 0.7, "composure": 0.9,
        },
        "LB": dict(_FULLBACK_WEIGHTS),
        "RB": dict(_FULLBACK_WEIGHTS),
        "LWB": dict(_WINGBACK_WEIGHTS),
        "RWB": dict(_WINGBACK_WEIGHTS),
        "CDM": {
            "interceptions": 1.1, "work_rate": 1.05, "stamina": 1.0,
            "defending": 0.95, "passing": 0.9, "vision": 0.85, "physical": 0.8,
            "dribbling": 0.6, "shooting": 0.4,
        },
        "CM": {
            "vision": 1.1, "passing": 1.05, "dribbling": 1.0, "work_rate": 0.95,
            "stamina": 0.9, "shooting": 0.8, "physical": 0.7, "defending": 0.6,
            "composure": 0.85,
        },
        "CAM": {
            "pace": 0.7, "shooting": 0.95, "passing": 1.0, "dribbling": 1.05,
            "defending": 0.4, "composure": 0.9, "vision": 1.15, "flair": 1.1,
            "positioning": 0.9,
        },
        "LM": dict(_WIDE_MID_WEIGHTS),
        "RM": dict(_WIDE_MID_WEIGHTS),
        "LW": dict(_WINGER_WEIGHTS),
        "RW": dict(_WINGER_WEIGHTS),
        "CF": {
            "pace": 0.9, "shooting": 1.1, "passing": 0.8, "dribbling": 1.0,
            "defending": 0.3, "composure": 0.95, "vision": 0.8, "flair": 0.8,
            "positioning": 1.05,
        },
        "ST": {
            "pace": 1.0, "shooting": 1.15, "passing": 0.7, "dribbling": 0.8,
            "defending": 0.3, "composure": 1.05, "vision": 0.7, "flair": 0.8,
            "positioning": 1.1, "physical": 0.95,
        },
    }


@dataclass
class ProgressionConfig:
    factor_correlation: List[List[float]] = field(
        default_factory=lambda: [list(row) for row in _FACTOR_CORRELATION])
    stat_weights: Dict[str, Dict[str, float]] = field(default_factory=_default_stat_weights)
    default_stat_weight: float = 0.5
    physical_stats: List[str] = field(default_factory=lambda: [
        "pace", "stamina", "physical", "strength", "agility", "jumping", "acceleration"])
    mental_stats: List[str] = field(default_factory=lambda: [
        "composure", "positioning", "vision", "leadership", "work_rate"])
    technical_stats: List[str] = field(default_factory=lambda: [
        "dribbling", "shooting", "passing", "crossing", "flair"])
    potential_headroom: int = 2            # attributes may exceed potential by this much
    max_potential_gain: int = 3            # over original potential, lifetime
    notable_change: int = 3                # |delta| that produces an event line
    exceptional_event_share: float = 0.10
    struggle_event_share: float = 0.08
    min_reputation: int = 10
    max_reputation: int = 100


# ──────────────────────────────────────────────
# SQUAD STATUS
# ──────────────────────────────────────────────

@dataclass
class SquadStatusConfig:
    # (min reputation, expected starter overall), checked top-down
    starter_by_reputation: List[List[int]] = field(default_factory=lambda: [
        [95, 85], [90, 82], [85, 78], [80, 75], [75, 71], [70, 67], [65, 63]])
    starter_default: int = 65
    starter_tier_bonus: Dict[str, int] = field(default_factory=lambda: {
        "1": 3, "2": 1, "4": -2, "5": -2})
    starter_position_bonus: Dict[str, int] = field(default_factory=lambda: {
        "GK": 2, "ST": -2, "CF": -2, "LW": -1, "RW": -1, "CAM": -1})
    starter_bounds: List[int] = field(default_factory=lambda: [60, 90])
    fallback_by_reputation: List[List[int]] = field(default_factory=lambda: [
        [95, 80], [90, 77], [85, 74], [80, 71], [75, 67], [70, 64]])
    fallback_default: int = 61
    captain_leadership: int = 80
    good_season_rating: float = 7.0
    good_season_matches: int = 15
    poor_season_rating: float = 6.5
    poor_season_matches: int = 10
    history_window: int = 3
    default_rating: float = 6.5
    default_available_matches: int = 40
    max_demotion: int = 1


# ──────────────────────────────────────────────
# INJURIES
# ──────────────────────────────────────────────

@dataclass
class InjuryConfig:
    base_risk: float = 0.08
    position_risk: Dict[str, float] = field(default_factory=lambda: {
        "ST": 1.2, "CF": 1.1, "LW": 1.0, "RW": 1.0, "CAM": 0.8, "CM": 1.0,
        "CDM": 1.3, "LB": 1.4, "RB": 1.4, "LWB": 1.5, "RWB": 1.5, "CB": 1.6,
        "GK": 0.7,
    })
    season_length: int = 38
    min_risk: float = 0.02
    max_risk: float = 0.65
    career_ending_threshold: float = 0.9998
    severe_threshold: float = 0.95
    severe_threshold_veteran: float = 0.92
    moderate_threshold: float = 0.75
    recurrence: Dict[str, float] = field(default_factory=lambda: {
        "Minor": 0.05, "Moderate": 0.12, "Severe": 0.25})
    severe_penalty_chance: float = 0.25
    setback_chance: float = 0.08
    base_recovery_rate: float = 1.0
    log_risk_above: float = 0.25


# ──────────────────────────────────────────────
# TRAITS
# ──────────────────────────────────────────────

@dataclass
class TraitConfig:
    diamond_overall: int = 88
    gold_overall: int = 83
    silver_overall: int = 78
    special_diamond_overall: int = 85
    injury_prone_removal_chance: float = 0.08
    injury_prone_removal_fitness: int = 88
    injury_prone_removal_max_age: int = 28
    weak_foot_removal_chance: float = 0.05
    weak_foot_removal_min_rating: int = 4


# ──────────────────────────────────────────────
# TRANSFERS
# ──────────────────────────────────────────────

@dataclass
class TransferConfig:
    max_tradeable_age: int = 35
    style_need: Dict[str, Dict[str, float]] = field(default_factory=lambda: {
        "Possession": {"CAM": 1.15, "CM": 1.12, "LW": 1.1, "RW": 1.1,
                       "LB": 1.06, "RB": 1.06, "ST": 1.02},
        "Balanced": {"ST": 1.05, "CF": 1.05, "CAM": 1.05, "CM": 1.05,
                     "CB": 1.03, "CDM": 1.03},
        "Counter": {"ST": 1.15, "LW": 1.12, "RW": 1.12, "CF": 1.08, "CM": 1.02},
        "Direct": {"ST": 1.18, "CF": 1.12, "CB": 1.08, "LB": 1.03, "RB": 1.03},
        "Defensive": {"CB": 1.15, "CDM": 1.12, "GK": 1.06, "LB": 1.04, "RB": 1.04},
    })
    depth_baseline_by_tier: List[int] = field(default_factory=lambda: [88, 82, 76, 71, 66])
    status_magnifier: Dict[str, float] = field(default_factory=lambda: {
        "Captain": 1.2, "Key Player": 1.15, "Rotation": 1.05,
        "Prospect": 0.95, "Reserve": 0.9, "Surplus": 0.85})
    desperate_prospect_magnifier: float = 1.02
    visibility_by_tier: Dict[str, float] = field(default_factory=lambda: {
        "1": 1.0, "2": 1.0, "3": 0.7, "4": 0.4, "5": 0.2})
    min_transfer_activity: int = 30
    min_interest: int = 30
    need_threshold: float = 0.95
    youth_star_need_threshold: float = 0.9
    rival_penalty: int = 45
    max_offers: int = 5
    loan_probability: float = 0.35
    elite_prospect_loan_probability: float = 0.65
    fee_slack: float = 1.05
    min_fee: int = 1000
    max_fee: int = 450_000_000
    # asking fee stays within these multiples of market value
    fee_value_band: List[float] = field(default_factory=lambda: [0.5, 1.8])
    min_wage: int = 1000
    max_wage: int = 800_000
    wage_share: Dict[str, float] = field(default_factory=lambda: {
        "Elite": 0.18, "Major": 0.22, "Standard": 0.25, "Lower": 0.27, "Minor": 0.22})
    viability_ratio: Dict[str, float] = field(default_factory=lambda: {
        "Minor": 0.22, "Lower": 0.25, "Standard": 0.30})
    transfer_budget_by_tier: Dict[str, float] = field(default_factory=lambda: {
        "Elite": 1.6, "Major": 1.25})
    max_transfer_budget: int = 500_000_000
    renewal_probability: float = 0.55
    arab_leagues: List[str] = field(default_factory=lambda: ["Saudi Arabia", "UAE", "Qatar"])


# ──────────────────────────────────────────────
# RETIREMENT
# ──────────────────────────────────────────────

@dataclass
class RetirementConfig:
    # base chance keyed by (age - target age), clamped to [-4, 2]
    base_chance: Dict[str, float] = field(default_factory=lambda: {
        "-4": 0.005, "-3": 0.015, "-2": 0.04, "-1": 0.12, "0": 0.40, "1": 0.80, "2": 1.0})
    max_target_age_goalkeeper: int = 47
    max_target_age_outfield: int = 43
    max_probability: float = 0.98


# ──────────────────────────────────────────────
# ENGINE CONFIG
# ──────────────────────────────────────────────

@dataclass
class EngineConfig:
    progression: ProgressionConfig = field(default_factory=ProgressionConfig)
    squad_status: SquadStatusConfig = field(default_factory=SquadStatusConfig)
    injuries: InjuryConfig = field(default_factory=InjuryConfig)
    traits: TraitConfig = field(default_factory=TraitConfig)
    transfers: TransferConfig = field(default_factory=TransferConfig)
    retirement: RetirementConfig = field(default_factory=RetirementConfig)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "EngineConfig":
        """Overlay d on the defaults. Unknown sections or keys raise ValueError."""
        config = cls()
        sections = {f.name for f in fields(cls)}
        for section_name, values in (d or {}).items():
            if section_name not in sections:
                raise ValueError(f"Unknown config section: {section_name!r}")
            section = getattr(config, section_name)
            known = {f.name for f in fields(section)}
            for key, value in values.items():
                if key not in known:
                    raise ValueError(f"Unknown {section_name} setting: {key!r}")
                setattr(section, key, value)
        return config


def load_config(path: str) -> EngineConfig:
    with open(path) as f:
        return EngineConfig.from_dict(json.load(f))
