"""
Football Career Simulation Engine
"""

from .rng import RandomSource, FixedRollSource, clamp
from .athlete import (
    Athlete,
    Team,
    Agent,
    Trait,
    Injury,
    Suspensions,
    SeasonStats,
    Position,
    SquadStatus,
    Personality,
    Morale,
    Archetype,
    InjuryType,
    CompetitionType,
    TraitName,
    TraitTier,
    ClubTier,
    PlayingStyle,
    AgentReputation,
    MarketTier,
    ATTRIBUTE_NAMES,
    compute_overall,
)
from .config import EngineConfig, load_config
from .clubs import ALL_TEAMS, YOUTH_TEAMS, TEAMS_BY_KEY, RIVALRIES, default_club_pool, get_rival_teams, is_rivalry
from .club_profile import ClubProfile, get_club_profile
from .ledger import ClubLedger, LedgerBook, Commitment
from .market_value import PlayerProfile, get_player_profile, weekly_wage_baseline
from .progression import ProgressionReport, apply_progression, performance_rating, update_reputation
from .training import TrainingResult, apply_training_investment, should_auto_invest
from .squad_status import determine_squad_status, update_squad_status
from .injuries import injury_risk, roll_injury, process_recovery
from .traits import check_trait_acquisition, check_trait_removal
from .transfer_market import (
    TransferOffer,
    LoanOffer,
    TransferOutcome,
    generate_offers,
    negotiate_transfer,
    process_transfer,
    process_contract_renewal,
)
from .retirement import RetirementDecision, check_retirement
from .season import Career, SeasonResult, simulate_season

__version__ = "0.5.6"

__all__ = [
    "RandomSource",
    "FixedRollSource",
    "clamp",
    "Athlete",
    "Team",
    "Agent",
    "Trait",
    "Injury",
    "Suspensions",
    "SeasonStats",
    "Position",
    "SquadStatus",
    "Personality",
    "Morale",
    "Archetype",
    "InjuryType",
    "CompetitionType",
    "TraitName",
    "TraitTier",
    "ClubTier",
    "PlayingStyle",
    "AgentReputation",
    "MarketTier",
    "ATTRIBUTE_NAMES",
    "compute_overall",
    "EngineConfig",
    "load_config",
    "ALL_TEAMS",
    "YOUTH_TEAMS",
    "TEAMS_BY_KEY",
    "RIVALRIES",
    "default_club_pool",
    "get_rival_teams",
    "is_rivalry",
    "ClubProfile",
    "get_club_profile",
    "ClubLedger",
    "LedgerBook",
    "Commitment",
    "PlayerProfile",
    "get_player_profile",
    "weekly_wage_baseline",
    "ProgressionReport",
    "apply_progression",
    "performance_rating",
    "update_reputation",
    "TrainingResult",
    "apply_training_investment",
    "should_auto_invest",
    "determine_squad_status",
    "update_squad_status",
    "injury_risk",
    "roll_injury",
    "process_recovery",
    "check_trait_acquisition",
    "check_trait_removal",
    "TransferOffer",
    "LoanOffer",
    "TransferOutcome",
    "generate_offers",
    "negotiate_transfer",
    "process_transfer",
    "process_contract_renewal",
    "RetirementDecision",
    "check_retirement",
    "Career",
    "SeasonResult",
    "simulate_season",
]
