"""
Career Simulation Season Orchestrator
=====================================

Runs one season tick for one athlete, in order:

    training -> rating -> progression -> injury recovery, then roll ->
    suspensions -> squad status -> traits -> reputation -> contract and
    loan countdown -> renewal -> retirement -> offers -> ageing

The season's raw match output (SeasonStats) comes from the match
simulator outside this package.  Offers are returned for the caller to
accept or reject; Career.accept_offer() settles one through the ledgers.

Usage:
    from careersim.season import Career
    from careersim.athlete import SeasonStats

    career = Career(athlete, seed=7)
    result = career.advance(SeasonStats(matches=31, goals=12, assists=5, average_rating=7.1))
    if result.offers:
        career.accept_offer(result.offers[0])
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from careersim.athlete import Athlete, Injury, Personality, SeasonStats, SquadStatus, Team
from careersim.clubs import default_club_pool
from careersim.config import EngineConfig
from careersim.injuries import RecoveryResult, process_recovery, roll_injury
from careersim.ledger import LedgerBook
from careersim.progression import (
    ProgressionReport, apply_progression, performance_rating, update_reputation,
)
from careersim.retirement import RetirementDecision, check_retirement
from careersim.rng import RandomSource, ensure_source
from careersim.squad_status import determine_squad_status, update_squad_status
from careersim.suspensions import apply_season_red_cards
from careersim.training import TrainingResult, apply_training_investment, should_auto_invest
from careersim.traits import TraitChange, check_trait_acquisition, check_trait_removal
from careersim.transfer_market import (
    Offer, RenewalOutcome, TransferOutcome, generate_offers, process_contract_renewal,
    process_transfer,
)

_log = logging.getLogger("careersim.season")

LOW_PLAYING_TIME_RATIO = 0.3
WEEKS_PER_SEASON = 52


# ──────────────────────────────────────────────
# SEASON RESULT
# ──────────────────────────────────────────────

@dataclass
class SeasonResult:
    """Everything that happened to the athlete in one season tick."""
    season_year: int
    age: int
    team: str
    rating: float
    overall_before: int
    overall_after: int
    squad_status_before: SquadStatus
    squad_status_after: SquadStatus
    progression: Optional[ProgressionReport] = None
    training: Optional[TrainingResult] = None
    recovery: Optional[RecoveryResult] = None
    new_injury: Optional[Injury] = None
    red_cards_applied: int = 0
    traits_gained: List[TraitChange] = field(default_factory=list)
    traits_lost: List[TraitChange] = field(default_factory=list)
    reputation: int = 0
    renewal: Optional[RenewalOutcome] = None
    loan_returned: bool = False
    retirement: Optional[RetirementDecision] = None
    offers: List[Offer] = field(default_factory=list)
    events: List[str] = field(default_factory=list)

    @property
    def retired(self) -> bool:
        return self.retirement is not None and self.retirement.retire

    def to_dict(self) -> dict:
        return {
            "season_year": self.season_year,
            "age": self.age,
            "team": self.team,
            "rating": round(self.rating, 3),
            "overall_before": self.overall_before,
            "overall_after": self.overall_after,
            "squad_status_before": self.squad_status_before.value,
            "squad_status_after": self.squad_status_after.value,
            "progression": self.progression.to_dict() if self.progression else None,
            "training": self.training.to_dict() if self.training else None,
            "injured": self.new_injury.to_dict() if self.new_injury else None,
            "red_cards_applied": self.red_cards_applied,
            "traits_gained": [c.to_dict() for c in self.traits_gained],
            "traits_lost": [c.to_dict() for c in self.traits_lost],
            "reputation": self.reputation,
            "renewed": self.renewal.renewed if self.renewal else False,
            "loan_returned": self.loan_returned,
            "retired": self.retired,
            "retirement_reason": self.retirement.reason if self.retirement else None,
            "offers": [o.to_dict() for o in self.offers],
            "events": list(self.events),
        }


# ──────────────────────────────────────────────
# HELPERS
# ──────────────────────────────────────────────

_AWARD_KEYS = ("world_player_award", "continental_player_award", "young_player_award")


def _record_honours(athlete: Athlete, trophies_won: Sequence[str]) -> None:
    for trophy in trophies_won:
        if trophy in _AWARD_KEYS:
            athlete.awards[trophy] = athlete.awards.get(trophy, 0) + 1
        else:
            key = "international" if trophy == "world_cup" else trophy
            athlete.trophies[key] = athlete.trophies.get(key, 0) + 1


def _renewal_probability(athlete: Athlete, base: float) -> float:
    p = base
    if athlete.squad_status >= SquadStatus.KEY_PLAYER:
        p += 0.2
    elif athlete.squad_status <= SquadStatus.RESERVE:
        p -= 0.2
    if athlete.personality == Personality.LOYAL:
        p += 0.15
    if athlete.years_at_club > 5:
        p += 0.1
    return p


def _return_from_loan(athlete: Athlete, result: SeasonResult) -> None:
    parent = athlete.parent_club
    if parent is None:
        return
    result.events.append(f"Loan at {athlete.team.name} ended; returned to {parent.name}")
    athlete.team = parent
    athlete.parent_club = None
    athlete.loan_duration = 0
    athlete.pending_loan_return = True
    athlete.squad_status = determine_squad_status(athlete)
    result.loan_returned = True


# ──────────────────────────────────────────────
# MAIN FUNCTION
# ──────────────────────────────────────────────

def simulate_season(athlete: Athlete, season: SeasonStats, clubs: Sequence[Team],
                    rng: RandomSource, season_year: int,
                    config: Optional[EngineConfig] = None,
                    ledgers: Optional[LedgerBook] = None,
                    teammates: Optional[Sequence[Athlete]] = None,
                    invest_in_training: bool = False,
                    seek_move: bool = False) -> SeasonResult:
    """Advance the athlete by one season in place and return what happened."""
    cfg = config or EngineConfig()
    rng = ensure_source(rng)
    athlete.pending_loan_return = False

    result = SeasonResult(
        season_year=season_year,
        age=athlete.age,
        team=athlete.team.name,
        rating=0.0,
        overall_before=athlete.overall,
        overall_after=athlete.overall,
        squad_status_before=athlete.squad_status,
        squad_status_after=athlete.squad_status,
    )

    if athlete.retired:
        return result

    # training
    if invest_in_training:
        result.training = apply_training_investment(athlete, season_year, rng)

    # rating & progression
    result.rating = performance_rating(athlete, season.goals, season.assists,
                                       season.clean_sheets, season.matches)
    result.progression = apply_progression(athlete, season.matches, result.rating,
                                           season_year, rng, cfg.progression)
    result.events.extend(result.progression.events)

    # injuries
    if athlete.injury is not None:
        result.recovery = process_recovery(athlete, rng, cfg.injuries)
    result.new_injury = roll_injury(athlete, season.matches, rng, cfg.injuries)
    if result.new_injury is not None:
        result.events.append(f"Injured: {result.new_injury.description}")

    # suspensions
    result.red_cards_applied = apply_season_red_cards(athlete, season)

    # squad status
    if season.matches > 0 and not athlete.team.is_youth:
        athlete.has_made_senior_debut = True
    new_status = update_squad_status(athlete, season, teammates, config=cfg.squad_status)
    if new_status != athlete.squad_status:
        result.events.append(f"Squad status: {athlete.squad_status.value} -> {new_status.value}")
    athlete.squad_status = new_status
    if athlete.role_guarantee_seasons > 0:
        athlete.role_guarantee_seasons -= 1
        if athlete.role_guarantee_seasons == 0:
            athlete.promised_squad_status = None

    # career totals (traits read them)
    athlete.total_matches += season.matches
    athlete.total_goals += season.goals
    athlete.total_assists += season.assists
    _record_honours(athlete, season.trophies_won)

    # traits
    result.traits_gained = check_trait_acquisition(athlete, season, rng, config=cfg.traits)
    result.traits_lost = check_trait_removal(athlete, rng, config=cfg.traits)

    # reputation
    result.reputation = update_reputation(athlete, result.rating, season.trophies_won,
                                          rng, cfg.progression)

    # salary, playing time, contract and loan countdown
    athlete.bank_balance += athlete.wage * WEEKS_PER_SEASON
    if season.play_ratio < LOW_PLAYING_TIME_RATIO:
        athlete.seasons_with_low_playing_time += 1
    else:
        athlete.seasons_with_low_playing_time = 0
    athlete.contract_length = max(0, athlete.contract_length - 1)
    if athlete.on_loan:
        athlete.loan_duration = max(0, athlete.loan_duration - 1)
        if athlete.loan_duration == 0:
            _return_from_loan(athlete, result)
    else:
        athlete.years_at_club += 1

    # renewal
    if not athlete.on_loan and athlete.contract_length <= 1:
        promotion = (result.squad_status_before < SquadStatus.KEY_PLAYER
                     <= athlete.squad_status)
        p = _renewal_probability(athlete, cfg.transfers.renewal_probability)
        if rng.roll(p):
            result.renewal = process_contract_renewal(athlete, rng, promotion, ledgers,
                                                      config=cfg.transfers)
            result.events.append(f"Signed a {result.renewal.contract_length}-season extension")

    # retirement
    result.retirement = check_retirement(athlete, result.rating, season.matches, rng,
                                         cfg.retirement)
    if result.retired:
        result.events.append(f"Retired ({result.retirement.reason})")

    # offers
    if not result.retired:
        forced = (athlete.squad_status == SquadStatus.SURPLUS
                  and athlete.seasons_with_low_playing_time >= 2)
        result.offers = generate_offers(athlete, clubs, rng, seek_move=seek_move,
                                        forced=forced, ledgers=ledgers, config=cfg.transfers)

    athlete.season_log.append({
        "season": season_year,
        "age": athlete.age,
        "team": athlete.team.key,
        "overall": athlete.overall,
        "matches": season.matches,
        "goals": season.goals,
        "assists": season.assists,
        "average_rating": season.average_rating,
        "squad_status": athlete.squad_status.value,
    })

    athlete.age += 1
    result.overall_after = athlete.overall
    result.squad_status_after = athlete.squad_status
    _log.debug(f"{athlete.name} {season_year}: OVR {result.overall_before} -> "
               f"{result.overall_after}, {len(result.offers)} offer(s)")
    return result


# ──────────────────────────────────────────────
# CAREER
# ──────────────────────────────────────────────

class Career:
    """
    One athlete's career against a club pool.

    Owns the random source and the club ledgers.  Every advance() opens a
    fresh budget window: ledgers reset to the clubs' full budgets, so
    money committed in one season is not carried into the next.  No other
    career can see these ledgers.
    """

    def __init__(self, athlete: Athlete, clubs: Optional[List[Team]] = None,
                 rng: Optional[RandomSource] = None, seed: Optional[int] = None,
                 config: Optional[EngineConfig] = None, start_year: int = 2025,
                 auto_invest: bool = False):
        self.athlete = athlete
        self.clubs = clubs if clubs is not None else default_club_pool()
        self.rng = rng if rng is not None else RandomSource(seed=seed)
        self.config = config or EngineConfig()
        self.ledgers = LedgerBook()
        self.season_year = start_year
        self.auto_invest = auto_invest
        self.history: List[SeasonResult] = []
        self.pending_offers: List[Offer] = []

    @property
    def finished(self) -> bool:
        return self.athlete.retired

    def advance(self, season: SeasonStats, invest_in_training: Optional[bool] = None,
                seek_move: bool = False,
                teammates: Optional[Sequence[Athlete]] = None) -> SeasonResult:
        if invest_in_training is None:
            invest_in_training = (self.auto_invest
                                  and should_auto_invest(self.athlete, self.rng).invest)
        self.ledgers.reset_all()
        result = simulate_season(self.athlete, season, self.clubs, self.rng, self.season_year,
                                 config=self.config, ledgers=self.ledgers, teammates=teammates,
                                 invest_in_training=invest_in_training, seek_move=seek_move)
        self.history.append(result)
        self.pending_offers = list(result.offers)
        self.season_year += 1
        return result

    def accept_offer(self, offer: Offer) -> TransferOutcome:
        if offer not in self.pending_offers:
            raise ValueError(f"Offer from {offer.team.name} is not on the table")
        outcome = process_transfer(self.athlete, offer, self.ledgers, self.rng,
                                   self.config.transfers)
        if outcome.success:
            self.pending_offers = []
        return outcome

    def to_dict(self) -> dict:
        return {
            "athlete": self.athlete.to_dict(),
            "season_year": self.season_year,
            "history": [r.to_dict() for r in self.history],
        }
