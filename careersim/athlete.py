"""
Career Simulation Athlete Record
================================

The athlete is the aggregate root of the engine: every component reads
and writes the same record once per season.

- Skill attributes live in a name -> value mapping (10-99).
- Overall is a property computed from attributes + position; it is never
  stored, so it cannot drift from the attributes it summarises.
- Team, Agent, Trait, Injury, Suspensions and SeasonStats are the
  supporting records.  Everything serialises to/from plain dicts.

Usage:
    from careersim.athlete import Athlete, Position, Team

    team = Team("porto", "FC Porto", "Portugal", reputation=84, league_tier=1)
    athlete = Athlete(name="R. Sousa", age=19, position=Position.ST,
                      attributes={"shooting": 71, "pace": 80}, potential=88,
                      team=team)
    print(athlete.overall)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from careersim.rng import clamp


# ──────────────────────────────────────────────
# ENUMERATIONS
# ──────────────────────────────────────────────

class _Ordered(Enum):
    """Enum whose declaration order is its ranking (low to high)."""

    @property
    def rank(self) -> int:
        return list(type(self)).index(self)

    def __lt__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.rank >= other.rank

    @classmethod
    def from_rank(cls, rank: int):
        members = list(cls)
        return members[max(0, min(rank, len(members) - 1))]


class Position(Enum):
    GK = "GK"
    LWB = "LWB"
    LB = "LB"
    CB = "CB"
    RB = "RB"
    RWB = "RWB"
    CDM = "CDM"
    LM = "LM"
    CM = "CM"
    RM = "RM"
    CAM = "CAM"
    LW = "LW"
    CF = "CF"
    RW = "RW"
    ST = "ST"


class SquadStatus(_Ordered):
    SURPLUS = "Surplus"
    RESERVE = "Reserve"
    PROSPECT = "Prospect"
    ROTATION = "Rotation"
    KEY_PLAYER = "Key Player"
    CAPTAIN = "Captain"


class Personality(Enum):
    AMBITIOUS = "Ambitious"
    LAZY = "Lazy"
    PROFESSIONAL = "Professional"
    TEMPERAMENTAL = "Temperamental"
    LOYAL = "Loyal"
    DETERMINED = "Determined"
    MEDIA_DARLING = "Media Darling"
    RESERVED = "Reserved"
    INCONSISTENT = "Inconsistent"
    LEADER = "Leader"


class Morale(_Ordered):
    VERY_LOW = "Very Low"
    LOW = "Low"
    NORMAL = "Normal"
    HIGH = "High"
    VERY_HIGH = "Very High"


class Archetype(Enum):
    GENERATIONAL_TALENT = "Generational Talent"
    WONDERKID = "Wonderkid"
    TOP_PROSPECT = "Top Prospect"
    TECHNICAL_MAESTRO = "Technical Maestro"
    LATE_BLOOMER = "Late Bloomer"
    SOLID_PROFESSIONAL = "Solid Professional"
    JOURNEYMAN = "Journeyman"
    THE_ENGINE = "The Engine"
    TARGET_MAN = "Target Man"


class InjuryType(_Ordered):
    MINOR = "Minor"
    MODERATE = "Moderate"
    SEVERE = "Severe"
    CAREER_ENDING = "Career-Ending"


class CompetitionType(Enum):
    LEAGUE = "League"
    CUP = "Cup"
    CONTINENTAL = "Continental"
    STATE_CUP = "State Cup"
    INTERNATIONAL = "International"


class TraitName(Enum):
    ONE_CLUB_MAN = "One-Club Man"
    TWO_FOOTED = "Two-Footed"
    LEADERSHIP = "Leadership"
    CLINICAL_FINISHER = "Clinical Finisher"
    SET_PIECE_SPECIALIST = "Set-piece Specialist"
    BIG_GAME_PLAYER = "Big Game Player"
    INJURY_PRONE = "Injury Prone"
    VERSATILE = "Versatile"
    POWER_HEADER = "Power Header"
    PLAYMAKER = "Playmaker"
    SPEED_MERCHANT = "Speed Merchant"
    ENGINE = "Engine"
    DRIBBLING_WIZARD = "Dribbling Wizard"
    COMPOSURE = "Composure"
    DISCIPLINE = "Discipline"
    NATURAL_FITNESS = "Natural Fitness"
    SLIDE_TACKLE = "Slide Tackle"
    LONG_SHOTS = "Long Shots"
    CROSSING_SPECIALIST = "Crossing Specialist"
    POACHER = "Poacher"
    SHOT_STOPPER = "Shot Stopper"
    FLAIR_PLAYER = "Flair Player"
    WEAK_FOOT = "Weak Foot"


class TraitTier(_Ordered):
    BRONZE = "Bronze"
    SILVER = "Silver"
    GOLD = "Gold"
    DIAMOND = "Diamond"


class ClubTier(_Ordered):
    MINOR = "Minor"
    LOWER = "Lower"
    STANDARD = "Standard"
    MAJOR = "Major"
    ELITE = "Elite"


class PlayingStyle(Enum):
    POSSESSION = "Possession"
    COUNTER = "Counter"
    DIRECT = "Direct"
    BALANCED = "Balanced"
    DEFENSIVE = "Defensive"


class AgentReputation(_Ordered):
    ROOKIE = "Rookie"
    AVERAGE = "Average"
    GOOD = "Good"
    SUPER_AGENT = "Super Agent"


class MarketTier(_Ordered):
    FRINGE = "Fringe"
    DEVELOPING = "Developing"
    PROMISING = "Promising"
    REGULAR = "Regular"
    LEADING = "Leading"
    ELITE = "Elite"
    WORLD_CLASS = "World Class"


# ──────────────────────────────────────────────
# ATTRIBUTES & OVERALL
# ──────────────────────────────────────────────

ATTRIBUTE_NAMES = [
    "pace", "shooting", "passing", "dribbling", "defending", "physical",
    "flair", "leadership", "fitness", "vision", "composure", "handling",
    "reflexes", "diving", "aggression", "positioning", "interceptions",
    "work_rate", "stamina", "strength", "agility", "jumping", "crossing",
    "long_shots", "curve", "balance", "sprint_speed", "ball_control",
    "acceleration", "shot_power", "heading", "finishing",
]

GOALKEEPING_ATTRIBUTES = ("handling", "reflexes", "diving")

ATTRIBUTE_RANGE = (10, 99)
OUTFIELD_GK_RANGE = (10, 40)

_BASE_WEIGHTS = {
    "pace": 1.0, "physical": 1.0, "composure": 1.0,
    "vision": 0.5, "work_rate": 0.5, "stamina": 1.0,
}


def _with_base(**overrides) -> Dict[str, float]:
    weights = dict(_BASE_WEIGHTS)
    weights.update(overrides)
    return weights


# Position weight table used by the overall rating.
OVERALL_WEIGHTS: Dict[Position, Dict[str, float]] = {
    Position.GK: {
        "handling": 3, "reflexes": 3, "diving": 3,
        "composure": 1, "physical": 0.5, "positioning": 1,
    },
    Position.CB: _with_base(defending=3, strength=2, jumping=1, interceptions=1.5,
                            aggression=0.5, leadership=1, passing=0.5),
    Position.LB: _with_base(defending=2.5, pace=1.5, crossing=1, dribbling=0.5,
                            interceptions=1, stamina=1.5),
    Position.RB: _with_base(defending=2.5, pace=1.5, crossing=1, dribbling=0.5,
                            interceptions=1, stamina=1.5),
    Position.LWB: _with_base(pace=2, defending=1.5, passing=1.5, dribbling=1,
                             crossing=1.5, stamina=1.5),
    Position.RWB: _with_base(pace=2, defending=1.5, passing=1.5, dribbling=1,
                             crossing=1.5, stamina=1.5),
    Position.CDM: _with_base(defending=2, passing=2, physical=1.5, vision=1,
                             interceptions=2, aggression=1),
    Position.CM: _with_base(passing=2.5, dribbling=1.5, vision=1.5, shooting=1,
                            defending=1, long_shots=0.5),
    Position.CAM: _with_base(passing=2, dribbling=2, shooting=1.5, vision=2, flair=1,
                             long_shots=1, curve=0.5),
    Position.LM: _with_base(pace=2, dribbling=2, passing=1.5, shooting=1, flair=1,
                            crossing=1.5),
    Position.RM: _with_base(pace=2, dribbling=2, passing=1.5, shooting=1, flair=1,
                            crossing=1.5),
    Position.LW: _with_base(pace=2, dribbling=2.5, shooting=2, flair=1.5, passing=1,
                            crossing=1, curve=1),
    Position.RW: _with_base(pace=2, dribbling=2.5, shooting=2, flair=1.5, passing=1,
                            crossing=1, curve=1),
    Position.CF: _with_base(shooting=2.5, dribbling=2, pace=1.5, passing=1.5, flair=1,
                            positioning=1.5),
    Position.ST: _with_base(shooting=3, strength=1.5, pace=1.5, composure=1.5,
                            dribbling=1, positioning=1.5, jumping=0.5),
}


def attribute_range(name: str, position: Position):
    """Valid (lo, hi) for an attribute; goalkeeping skills are capped for outfielders."""
    if name in GOALKEEPING_ATTRIBUTES and position != Position.GK:
        return OUTFIELD_GK_RANGE
    return ATTRIBUTE_RANGE


def compute_overall(attributes: Dict[str, float], position: Position) -> int:
    """
    Weighted mean of the attributes that matter for a position.

    Missing or non-finite attribute values count as the midpoint of the
    valid range.  With no weighted attribute present the rating is 50.
    """
    weights = OVERALL_WEIGHTS.get(position, {})
    total_weight = 0.0
    weighted_sum = 0.0
    for name, weight in weights.items():
        if not weight:
            continue
        lo, hi = attribute_range(name, position)
        value = clamp(attributes.get(name), lo, hi)
        weighted_sum += value * weight
        total_weight += weight

    if total_weight <= 0.1:
        return 50
    result = weighted_sum / total_weight
    if not math.isfinite(result):
        return 50
    return int(math.floor(result + 0.5))


# ──────────────────────────────────────────────
# SUPPORTING RECORDS
# ──────────────────────────────────────────────

@dataclass
class Team:
    """
    League reference data for one club.

    Everything except the four budget ledgers is read-only; the ledgers
    are None until the club first spends, after which they persist.
    """
    key: str
    name: str
    country: str
    reputation: int
    league_tier: int
    is_youth: bool = False
    transfer_budget: Optional[int] = None
    remaining_transfer_budget: Optional[int] = None
    wage_budget_weekly: Optional[int] = None
    remaining_wage_budget_weekly: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "name": self.name,
            "country": self.country,
            "reputation": self.reputation,
            "league_tier": self.league_tier,
            "is_youth": self.is_youth,
            "transfer_budget": self.transfer_budget,
            "remaining_transfer_budget": self.remaining_transfer_budget,
            "wage_budget_weekly": self.wage_budget_weekly,
            "remaining_wage_budget_weekly": self.remaining_wage_budget_weekly,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Team":
        return cls(**{k: d[k] for k in cls.__dataclass_fields__ if k in d})


@dataclass
class Agent:
    name: str = "Unrepresented"
    reputation: AgentReputation = AgentReputation.ROOKIE

    def to_dict(self) -> dict:
        return {"name": self.name, "reputation": self.reputation.value}

    @classmethod
    def from_dict(cls, d: dict) -> "Agent":
        return cls(name=d.get("name", "Unrepresented"),
                   reputation=AgentReputation(d.get("reputation", "Rookie")))


@dataclass
class Trait:
    name: TraitName
    tier: TraitTier = TraitTier.BRONZE

    def to_dict(self) -> dict:
        return {"name": self.name.value, "tier": self.tier.value}

    @classmethod
    def from_dict(cls, d: dict) -> "Trait":
        return cls(name=TraitName(d["name"]), tier=TraitTier(d.get("tier", "Bronze")))


@dataclass
class Injury:
    """An active injury. Duration is counted in recovery cycles."""
    type: InjuryType
    duration: float
    description: str = ""
    recurrence_risk: float = 0.0
    penalty_attribute: Optional[str] = None
    penalty_points: int = 0

    @property
    def is_career_ending(self) -> bool:
        return self.type == InjuryType.CAREER_ENDING

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "duration": self.duration,
            "description": self.description,
            "recurrence_risk": self.recurrence_risk,
            "penalty_attribute": self.penalty_attribute,
            "penalty_points": self.penalty_points,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Injury":
        return cls(
            type=InjuryType(d["type"]),
            duration=d.get("duration", 0),
            description=d.get("description", ""),
            recurrence_risk=d.get("recurrence_risk", 0.0),
            penalty_attribute=d.get("penalty_attribute"),
            penalty_points=d.get("penalty_points", 0),
        )


@dataclass
class Suspensions:
    """Matches still to serve, one counter per competition type."""
    league: int = 0
    cup: int = 0
    continental: int = 0
    state_cup: int = 0
    international: int = 0

    def to_dict(self) -> dict:
        return {
            "league": self.league,
            "cup": self.cup,
            "continental": self.continental,
            "state_cup": self.state_cup,
            "international": self.international,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Suspensions":
        return cls(**{k: int(d.get(k, 0)) for k in cls.__dataclass_fields__})


@dataclass
class SeasonStats:
    """
    Raw match output for one season, supplied by the match simulator.

    red_cards_by_competition maps CompetitionType values to sending-offs.
    """
    matches: int = 0
    available_matches: int = 40
    goals: int = 0
    assists: int = 0
    clean_sheets: int = 0
    average_rating: float = 6.5
    yellow_cards: int = 0
    red_cards: int = 0
    red_cards_by_competition: Dict[str, int] = field(default_factory=dict)
    trophies_won: List[str] = field(default_factory=list)

    @property
    def play_ratio(self) -> float:
        return self.matches / max(1, self.available_matches or 40)

    def to_dict(self) -> dict:
        return {
            "matches": self.matches,
            "available_matches": self.available_matches,
            "goals": self.goals,
            "assists": self.assists,
            "clean_sheets": self.clean_sheets,
            "average_rating": self.average_rating,
            "yellow_cards": self.yellow_cards,
            "red_cards": self.red_cards,
            "red_cards_by_competition": dict(self.red_cards_by_competition),
            "trophies_won": list(self.trophies_won),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "SeasonStats":
        return cls(**{k: d[k] for k in cls.__dataclass_fields__ if k in d})


# ──────────────────────────────────────────────
# ATHLETE
# ──────────────────────────────────────────────

def _default_trophies() -> Dict[str, int]:
    return {"league": 0, "cup": 0, "continental": 0, "state_cup": 0, "international": 0}


def _default_awards() -> Dict[str, int]:
    return {"world_player_award": 0, "continental_player_award": 0, "young_player_award": 0}


@dataclass
class Athlete:
    """The simulated career subject."""
    name: str
    age: int
    position: Position
    attributes: Dict[str, float]
    potential: int
    team: Team
    personality: Personality = Personality.PROFESSIONAL
    squad_status: SquadStatus = SquadStatus.ROTATION
    wage: int = 5000                       # EUR per week
    contract_length: int = 3               # seasons remaining
    weak_foot: int = 3                     # 1-5
    reputation: int = 50
    form: float = 0.0                      # -5 .. +5
    morale: Morale = Morale.NORMAL
    agent: Agent = field(default_factory=Agent)
    archetype: Archetype = Archetype.SOLID_PROFESSIONAL
    peak_age_end: int = 29
    retirement_age: int = 35
    bank_balance: int = 0
    training_modifier: float = 1.0
    training_modifier_season: Optional[int] = None
    last_training_result: Optional[str] = None
    parent_club: Optional[Team] = None
    loan_duration: int = 0
    pending_loan_return: bool = False
    promised_squad_status: Optional[SquadStatus] = None
    role_guarantee_seasons: int = 0
    years_at_club: int = 0
    seasons_with_low_playing_time: int = 0
    has_made_senior_debut: bool = True
    total_matches: int = 0
    total_goals: int = 0
    total_assists: int = 0
    total_injuries: int = 0
    trophies: Dict[str, int] = field(default_factory=_default_trophies)
    awards: Dict[str, int] = field(default_factory=_default_awards)
    traits: List[Trait] = field(default_factory=list)
    injury: Optional[Injury] = None
    suspensions: Suspensions = field(default_factory=Suspensions)
    retired: bool = False
    original_potential: Optional[int] = None
    season_log: List[dict] = field(default_factory=list)

    def __post_init__(self):
        for name in list(self.attributes):
            self.set_attribute(name, self.attributes[name])

    # ── attributes ──

    @property
    def overall(self) -> int:
        return compute_overall(self.attributes, self.position)

    def attr(self, name: str) -> float:
        """Attribute value; absent attributes read as the midpoint of their range."""
        lo, hi = attribute_range(name, self.position)
        return clamp(self.attributes.get(name), lo, hi)

    def set_attribute(self, name: str, value: float) -> int:
        lo, hi = attribute_range(name, self.position)
        new_value = int(round(clamp(value, lo, hi)))
        self.attributes[name] = new_value
        return new_value

    # ── traits ──

    def has_trait(self, name: TraitName) -> bool:
        return any(t.name == name for t in self.traits)

    def get_trait(self, name: TraitName) -> Optional[Trait]:
        for t in self.traits:
            if t.name == name:
                return t
        return None

    @property
    def is_goalkeeper(self) -> bool:
        return self.position == Position.GK

    @property
    def on_loan(self) -> bool:
        return self.parent_club is not None

    # ── serialisation ──

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "age": self.age,
            "position": self.position.value,
            "attributes": dict(self.attributes),
            "overall": self.overall,
            "potential": self.potential,
            "team": self.team.to_dict(),
            "personality": self.personality.value,
            "squad_status": self.squad_status.value,
            "wage": self.wage,
            "contract_length": self.contract_length,
            "weak_foot": self.weak_foot,
            "reputation": self.reputation,
            "form": self.form,
            "morale": self.morale.value,
            "agent": self.agent.to_dict(),
            "archetype": self.archetype.value,
            "peak_age_end": self.peak_age_end,
            "retirement_age": self.retirement_age,
            "bank_balance": self.bank_balance,
            "training_modifier": self.training_modifier,
            "training_modifier_season": self.training_modifier_season,
            "last_training_result": self.last_training_result,
            "parent_club": self.parent_club.to_dict() if self.parent_club else None,
            "loan_duration": self.loan_duration,
            "pending_loan_return": self.pending_loan_return,
            "promised_squad_status": (self.promised_squad_status.value
                                      if self.promised_squad_status else None),
            "role_guarantee_seasons": self.role_guarantee_seasons,
            "years_at_club": self.years_at_club,
            "seasons_with_low_playing_time": self.seasons_with_low_playing_time,
            "has_made_senior_debut": self.has_made_senior_debut,
            "total_matches": self.total_matches,
            "total_goals": self.total_goals,
            "total_assists": self.total_assists,
            "total_injuries": self.total_injuries,
            "trophies": dict(self.trophies),
            "awards": dict(self.awards),
            "traits": [t.to_dict() for t in self.traits],
            "injury": self.injury.to_dict() if self.injury else None,
            "suspensions": self.suspensions.to_dict(),
            "retired": self.retired,
            "original_potential": self.original_potential,
            "season_log": list(self.season_log),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Athlete":
        """Rebuild an athlete. A stored 'overall' is ignored; it is always recomputed."""
        promised = d.get("promised_squad_status")
        parent = d.get("parent_club")
        injury = d.get("injury")
        return cls(
            name=d["name"],
            age=d["age"],
            position=Position(d["position"]),
            attributes=dict(d.get("attributes", {})),
            potential=d.get("potential", 70),
            team=Team.from_dict(d["team"]),
            personality=Personality(d.get("personality", "Professional")),
            squad_status=SquadStatus(d.get("squad_status", "Rotation")),
            wage=d.get("wage", 5000),
            contract_length=d.get("contract_length", 3),
            weak_foot=d.get("weak_foot", 3),
            reputation=d.get("reputation", 50),
            form=d.get("form", 0.0),
            morale=Morale(d.get("morale", "Normal")),
            agent=Agent.from_dict(d.get("agent", {})),
            archetype=Archetype(d.get("archetype", "Solid Professional")),
            peak_age_end=d.get("peak_age_end", 29),
            retirement_age=d.get("retirement_age", 35),
            bank_balance=d.get("bank_balance", 0),
            training_modifier=d.get("training_modifier", 1.0),
            training_modifier_season=d.get("training_modifier_season"),
            last_training_result=d.get("last_training_result"),
            parent_club=Team.from_dict(parent) if parent else None,
            loan_duration=d.get("loan_duration", 0),
            pending_loan_return=d.get("pending_loan_return", False),
            promised_squad_status=SquadStatus(promised) if promised else None,
            role_guarantee_seasons=d.get("role_guarantee_seasons", 0),
            years_at_club=d.get("years_at_club", 0),
            seasons_with_low_playing_time=d.get("seasons_with_low_playing_time", 0),
            has_made_senior_debut=d.get("has_made_senior_debut", True),
            total_matches=d.get("total_matches", 0),
            total_goals=d.get("total_goals", 0),
            total_assists=d.get("total_assists", 0),
            total_injuries=d.get("total_injuries", 0),
            trophies={**_default_trophies(), **d.get("trophies", {})},
            awards={**_default_awards(), **d.get("awards", {})},
            traits=[Trait.from_dict(t) for t in d.get("traits", [])],
            injury=Injury.from_dict(injury) if injury else None,
            suspensions=Suspensions.from_dict(d.get("suspensions", {})),
            retired=d.get("retired", False),
            original_potential=d.get("original_potential"),
            season_log=list(d.get("season_log", [])),
        )
