"""
Career Simulation Transfer Market
=================================

Generates and settles the athlete's offers for one transfer window.

Phases per evaluation:
1. Club profiling      club_profile.get_club_profile for every candidate
2. Eligibility         current/parent club, youth academies, clubs far
                       above or below the athlete, scouting visibility
3. Fit & interest      TransferFit (status, financial, cultural, tactical,
                       career) plus club interest scaled by positional need;
                       rivals take a heavy interest penalty
4. Negotiation         loan or permanent; fee and wage checked against the
                       club's remaining budgets, wage cap and wage floor

An offer that cannot be financed without breaking a budget or the wage
floor is dropped, never forced through with a reduced figure.  Only an
athlete who is desperate to move gets a fee trimmed to fit the budget.

Nothing here writes to a club's budgets until process_transfer() commits
the accepted offer through the LedgerBook.

Usage:
    from careersim.transfer_market import generate_offers, process_transfer

    offers = generate_offers(athlete, clubs, rng, ledgers=book)
    if offers:
        outcome = process_transfer(athlete, offers[0], book, rng)
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

from careersim.athlete import (
    AgentReputation, Athlete, ClubTier, MarketTier, Personality,
    SquadStatus, Team,
)
from careersim.club_profile import ClubProfile, get_club_profile
from careersim.clubs import is_rivalry
from careersim.config import TransferConfig
from careersim.ledger import ClubLedger, Commitment, LedgerBook
from careersim.market_value import (
    PlayerProfile, get_player_profile, tactical_fit, weekly_wage_baseline,
)
from careersim.rng import RandomSource, clamp
from careersim.squad_status import determine_squad_status

_log = logging.getLogger("careersim.transfer_market")


# ──────────────────────────────────────────────
# RECORDS
# ──────────────────────────────────────────────

@dataclass
class TransferFit:
    status: float
    financial: float
    cultural: float
    tactical: float
    career: float
    overall: float

    def to_dict(self) -> dict:
        return {k: round(getattr(self, k), 1) for k in
                ("status", "financial", "cultural", "tactical", "career", "overall")}


@dataclass
class TransferOffer:
    """Permanent move. Fee in EUR, wage in EUR per week."""
    team: Team
    fee: int
    wage: int
    contract_length: int
    expected_status: SquadStatus
    fit: Optional[TransferFit] = None
    interest: float = 0.0
    score: float = 0.0
    rivalry: Optional[str] = None

    kind = "transfer"

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "team": self.team.key,
            "fee": self.fee,
            "wage": self.wage,
            "contract_length": self.contract_length,
            "expected_status": self.expected_status.value,
            "fit": self.fit.to_dict() if self.fit else None,
            "interest": round(self.interest, 1),
            "score": round(self.score, 1),
            "rivalry": self.rivalry,
        }


@dataclass
class LoanOffer:
    """Season-long loan. wage_contribution is the share (%) the borrowing club pays."""
    team: Team
    wage_contribution: int
    duration: int
    expected_status: SquadStatus
    fit: Optional[TransferFit] = None
    interest: float = 0.0
    score: float = 0.0
    rivalry: Optional[str] = None

    kind = "loan"

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "team": self.team.key,
            "wage_contribution": self.wage_contribution,
            "duration": self.duration,
            "expected_status": self.expected_status.value,
            "fit": self.fit.to_dict() if self.fit else None,
            "interest": round(self.interest, 1),
            "score": round(self.score, 1),
            "rivalry": self.rivalry,
        }


Offer = Union[TransferOffer, LoanOffer]


@dataclass
class _Candidate:
    team: Team
    club: ClubProfile
    expected_status: SquadStatus
    fit: TransferFit
    need: float
    interest: float
    score: float
    rivalry: Optional[str] = None


# ──────────────────────────────────────────────
# PHASE 3: FIT
# ──────────────────────────────────────────────

_FIT_WEIGHTS = [(0.28, 0.03), (0.24, 0.03), (0.22, 0.03), (0.14, 0.02), (0.12, 0.02)]

# (min wage ratio, mean, std) for the financial sub-score
_FINANCIAL_BANDS = [
    (1.6, 98, 2), (1.3, 88, 4), (1.1, 75, 5), (1.02, 60, 6), (0.95, 50, 8), (0.85, 32, 6),
]


def calculate_transfer_fit(athlete: Athlete, player_profile: PlayerProfile, team: Team,
                           club_profile: ClubProfile, rng: RandomSource,
                           expected_status: Optional[SquadStatus] = None) -> TransferFit:
    if expected_status is None:
        expected_status = determine_squad_status(athlete, team=team)

    # status: the role on offer versus the current one
    diff = expected_status.rank - athlete.squad_status.rank
    status = rng.gauss(45, 5) + (diff * 18 if diff >= 0 else diff * 22)
    if (athlete.age < 22 and expected_status == SquadStatus.PROSPECT
            and club_profile.tier == ClubTier.ELITE):
        status += rng.gauss(20, 4)
    status = clamp(status, 8, 100)

    # financial: market wage at the destination versus current pay
    baseline = weekly_wage_baseline(team, expected_status, athlete.overall, rng)
    ratio = baseline / max(1, athlete.wage)
    mean, std = 12, 4
    for min_ratio, m, s in _FINANCIAL_BANDS:
        if ratio >= min_ratio:
            mean, std = m, s
            break
    financial = rng.gauss(mean, std)
    if club_profile.financial_power < player_profile.true_value / 1e6 / 4.5:
        financial *= rng.gauss(0.25, 0.08)
    financial = clamp(financial, 3, 100)

    # cultural
    cultural = rng.gauss(55, 10)
    current = athlete.team
    if team.country == current.country and team.league_tier == current.league_tier:
        cultural += rng.gauss(25, 5)
    tier_gap = abs(team.league_tier - current.league_tier)
    if tier_gap:
        cultural -= rng.gauss(tier_gap * 10, 3)
    if athlete.age > 26:
        cultural += rng.gauss(12, 2)
    if athlete.personality == Personality.PROFESSIONAL:
        cultural += 12
    elif athlete.personality == Personality.AMBITIOUS:
        cultural += 8
    cultural = clamp(cultural, 15, 100)

    tactical = tactical_fit(athlete, club_profile.playing_style, rng)

    # career: is this a step up?
    career = rng.gauss(45, 8)
    rep_gap = team.reputation - current.reputation
    if rep_gap > 0:
        career += rng.gauss(min(rep_gap * 2.2, 40), 6)
    elif rep_gap < 0:
        career -= rng.gauss(min(-rep_gap * 1.8, 35), 5)
    tier_up = current.league_tier - team.league_tier
    if tier_up > 0:
        career += rng.gauss(tier_up * 15, 3)
    if career < 45:
        if athlete.personality == Personality.AMBITIOUS:
            career -= rng.gauss(18, 3)
        elif athlete.age > 32:
            career += rng.gauss(25, 5)
    career = clamp(career, 8, 100)

    weights = [max(0.01, rng.gauss(m, s)) for m, s in _FIT_WEIGHTS]
    total = sum(weights)
    scores = [status, financial, career, tactical, cultural]
    overall = sum(w / total * s for w, s in zip(weights, scores))

    return TransferFit(status=status, financial=financial, cultural=cultural,
                       tactical=tactical, career=career, overall=overall)


# ──────────────────────────────────────────────
# PHASE 2: ELIGIBILITY
# ──────────────────────────────────────────────

def scouting_visibility(league_tier: int, config: Optional[TransferConfig] = None) -> float:
    """Chance that elite scouts notice a player in this league tier."""
    cfg = config or TransferConfig()
    return cfg.visibility_by_tier.get(str(league_tier), 0.2)


def is_realistic_destination(athlete: Athlete, team: Team, club_profile: ClubProfile,
                             player_profile: PlayerProfile,
                             config: Optional[TransferConfig] = None) -> bool:
    """Would a scout at this club seriously consider the athlete?"""
    cfg = config or TransferConfig()
    overall = athlete.overall
    rep = team.reputation
    age = athlete.age

    if overall > club_profile.max_overall + 1:
        return False
    if (rep >= 85 and overall < 65) or (rep >= 80 and overall < 60) or (rep >= 75 and overall < 55):
        return False
    if age > 32 and ((rep >= 85 and overall < 75) or (rep >= 80 and overall < 70)):
        return False

    if team.country in cfg.arab_leagues:
        if age < 23 and athlete.potential < 80:
            return False
        if 23 <= age <= 30 and overall < 70:
            return False
        if age > 30 and overall < 75:
            return False

    if rep - athlete.reputation > 30 and player_profile.market_tier == MarketTier.FRINGE:
        return False

    if club_profile.tier not in player_profile.ideal_tiers:
        if club_profile.tier in (ClubTier.MINOR, ClubTier.LOWER) and athlete.potential > 80:
            return False
        if age < 35 and athlete.seasons_with_low_playing_time < 3:
            return False
    return True


def _basic_exclusion(athlete: Athlete, team: Team) -> bool:
    if team.key == athlete.team.key:
        return True
    if athlete.parent_club is not None and team.key == athlete.parent_club.key:
        return True
    if team.is_youth and (athlete.has_made_senior_debut or athlete.age >= 20):
        return True
    return False


# ──────────────────────────────────────────────
# PHASE 3: NEED & INTEREST
# ──────────────────────────────────────────────

def need_score(athlete: Athlete, team: Team, club_profile: ClubProfile,
               expected_status: SquadStatus, desperate: bool = False,
               config: Optional[TransferConfig] = None) -> float:
    """Positional need: style demand x depth gap x role magnifier."""
    cfg = config or TransferConfig()
    style = cfg.style_need.get(club_profile.playing_style.value, {}).get(
        athlete.position.value, 1.0)

    tier_index = max(1, min(team.league_tier, 5)) - 1
    baseline = cfg.depth_baseline_by_tier[tier_index]
    baseline += int(clamp(round((team.reputation - 80) / 2), -6, 6))
    baseline = clamp(baseline, 60, 92)
    gap = athlete.overall - baseline
    if gap >= 0:
        depth = 1 + min(0.2, gap * 0.01)
    else:
        depth = 1 + max(-0.1, gap * 0.005)

    if expected_status == SquadStatus.PROSPECT and desperate:
        magnifier = cfg.desperate_prospect_magnifier
    else:
        magnifier = cfg.status_magnifier.get(expected_status.value, 1.0)
    return style * depth * magnifier


def club_interest(athlete: Athlete, player_profile: PlayerProfile, club_profile: ClubProfile,
                  fit: TransferFit, need: float, rivalry: Optional[str] = None,
                  youth_star: bool = False, config: Optional[TransferConfig] = None) -> float:
    cfg = config or TransferConfig()
    interest = (50 + club_profile.ambition * 0.3 + club_profile.transfer_activity * 0.2
                + player_profile.desirability * 0.4 + fit.overall * 0.3)
    if youth_star and club_profile.tier == ClubTier.ELITE:
        interest += 10
    interest *= clamp(need, 0.85, 1.2)
    if rivalry:
        interest -= cfg.rival_penalty
    return clamp(interest, 3, 98)


def _blend_score(fit: TransferFit, interest: float, need: float) -> float:
    return fit.overall * 0.5 + interest * 0.35 + need * 100 * 0.15


# ──────────────────────────────────────────────
# PHASE 4: NEGOTIATION
# ──────────────────────────────────────────────

_AGENT_WAGE = {
    AgentReputation.SUPER_AGENT: 1.18, AgentReputation.GOOD: 1.1, AgentReputation.AVERAGE: 1.05,
}


def price_transfer(athlete: Athlete, player_profile: PlayerProfile, club_profile: ClubProfile,
                   desperate: bool, rng: RandomSource,
                   config: Optional[TransferConfig] = None) -> int:
    """
    Asking fee in EUR, before the buying club's budget is considered.

    Always within the fee band around market value (0.5x to 1.8x by
    default), whatever the club's wealth or the athlete's demands.
    """
    cfg = config or TransferConfig()
    fee = float(player_profile.true_value)
    fee *= 1 + (player_profile.desirability - 50) / 200
    fee *= 1 + player_profile.negotiation_difficulty / 100
    fee *= 0.85 + club_profile.financial_power / 200
    if athlete.contract_length <= 1:
        fee *= 0.7
    if athlete.seasons_with_low_playing_time >= 2:
        fee *= 0.75
    if desperate:
        fee *= 0.6
    fee *= rng.rand_float(0.85, 1.2)

    low, high = cfg.fee_value_band
    floor = max(cfg.min_fee, player_profile.true_value * low)
    ceiling = min(cfg.max_fee, player_profile.true_value * high)
    return int(clamp(round(fee), floor, max(floor, ceiling)))


def contract_length_for(age: int, rng: RandomSource) -> int:
    if age >= 34:
        return rng.rand(1, 2)
    if age >= 31:
        return rng.rand(2, 3)
    if age >= 28:
        return rng.rand(3, 4)
    if age <= 21:
        return rng.rand(4, 5)
    return rng.rand(3, 5)


def _wage_floor(athlete: Athlete, club_profile: ClubProfile, expected_status: SquadStatus,
                baseline: int, cfg: TransferConfig) -> float:
    current_tier = get_club_profile(athlete.team, cfg).tier
    lateral_or_up = expected_status >= athlete.squad_status
    floor = athlete.wage * 0.7
    if lateral_or_up and club_profile.tier > current_tier:
        floor = athlete.wage * 1.2
    elif lateral_or_up and club_profile.tier == current_tier:
        floor = athlete.wage * 1.0
    return max(floor, baseline * 0.75)


def negotiate_transfer(athlete: Athlete, team: Team, club_profile: ClubProfile,
                       player_profile: PlayerProfile, fit: TransferFit, rng: RandomSource,
                       desperate: bool = False,
                       expected_status: Optional[SquadStatus] = None,
                       competing_offers: int = 0,
                       ledger: Optional[ClubLedger] = None,
                       config: Optional[TransferConfig] = None) -> Optional[TransferOffer]:
    """
    Build a permanent offer the club can actually finance, or None.

    Budgets come from the ledger when one is given (the committed state
    for this window), otherwise from the club profile.
    """
    cfg = config or TransferConfig()
    if expected_status is None:
        expected_status = determine_squad_status(athlete, team=team)

    remaining_transfer = ledger.remaining_transfer if ledger else club_profile.remaining_transfer_budget
    remaining_wage = ledger.remaining_wage if ledger else club_profile.remaining_wage_budget_weekly

    # fee
    fee = price_transfer(athlete, player_profile, club_profile, desperate, rng, cfg)
    if fee > remaining_transfer * cfg.fee_slack:
        if not desperate:
            _log.debug(f"Dropped {team.name}: fee {fee:,} over remaining budget {remaining_transfer:,}")
            return None
        fee = int(min(fee, remaining_transfer * rng.rand_float(0.88, 1.02)))

    # wage
    baseline = weekly_wage_baseline(team, expected_status, athlete.overall, rng)
    wage = baseline * _AGENT_WAGE.get(athlete.agent.reputation, 1.0)
    if competing_offers >= 4:
        wage *= 1.08
    if fit.overall < 60:
        wage *= 1.12
    wage *= rng.rand_float(0.95, 1.08)

    floor = _wage_floor(athlete, club_profile, expected_status, baseline, cfg)
    wage = max(wage, floor)
    cap = club_profile.wage_cap
    wage = min(wage, cap)
    if wage < floor and not desperate:
        _log.debug(f"Dropped {team.name}: wage cap {cap:,} below floor {floor:,.0f}")
        return None
    if cap < cfg.min_wage:
        _log.debug(f"Dropped {team.name}: wage cap {cap:,} below minimum wage")
        return None
    wage = int(min(clamp(round(wage), cfg.min_wage, cfg.max_wage), cap))

    if wage > remaining_wage:
        _log.debug(f"Dropped {team.name}: wage {wage:,} over remaining weekly budget {remaining_wage:,}")
        return None
    viability = club_profile.viability_ratio
    if (viability is not None and not desperate
            and wage > club_profile.wage_budget_weekly * viability):
        _log.debug(f"Dropped {team.name}: wage {wage:,} not viable for a "
                   f"{club_profile.tier.value} club")
        return None

    return TransferOffer(
        team=team,
        fee=fee,
        wage=wage,
        contract_length=contract_length_for(athlete.age, rng),
        expected_status=expected_status,
        fit=fit,
    )


def _loan_offer(athlete: Athlete, candidate: _Candidate, rng: RandomSource) -> LoanOffer:
    fp = candidate.club.financial_power
    if fp > 70:
        contribution = 100
    elif fp > 50:
        contribution = rng.rand(80, 100)
    else:
        contribution = rng.rand(60, 90)
    return LoanOffer(
        team=candidate.team,
        wage_contribution=contribution,
        duration=rng.rand(1, 2) if athlete.age < 20 else 1,
        expected_status=candidate.expected_status,
        fit=candidate.fit,
    )


def _can_be_loaned(athlete: Athlete, player_profile: PlayerProfile) -> bool:
    return (athlete.age < 24
            and player_profile.market_tier not in (MarketTier.WORLD_CLASS, MarketTier.ELITE)
            and athlete.contract_length > 1)


# ──────────────────────────────────────────────
# OFFER GENERATION
# ──────────────────────────────────────────────

def _offer_count(athlete: Athlete, player_profile: PlayerProfile, desperate: bool,
                 youth_star: bool, rng: RandomSource, cfg: TransferConfig) -> int:
    if desperate:
        return rng.rand(4, 6)
    count = int(clamp(math.floor(player_profile.desirability / 25) + rng.rand(0, 2),
                      1, cfg.max_offers))
    if player_profile.market_tier == MarketTier.WORLD_CLASS:
        count += 2
    elif player_profile.market_tier == MarketTier.ELITE:
        count += 1
    if youth_star:
        count = min(count + 1, 6)
    return count


def generate_offers(athlete: Athlete, clubs: Sequence[Team], rng: RandomSource,
                    seek_move: bool = False, forced: bool = False,
                    ledgers: Optional[LedgerBook] = None,
                    config: Optional[TransferConfig] = None) -> List[Offer]:
    """
    Ranked offers for one transfer window.

    seek_move (the athlete asked to leave) and forced (the club is pushing
    the athlete out) both make the athlete desperate: the willingness gate
    is skipped, more clubs are approached and fees are trimmed to budgets.
    """
    cfg = config or TransferConfig()
    if (athlete.retired or athlete.age > cfg.max_tradeable_age or athlete.pending_loan_return
            or (athlete.injury is not None and athlete.injury.is_career_ending)):
        return []

    desperate = seek_move or forced
    player_profile = get_player_profile(athlete, desperate)
    if not desperate and not rng.chance(player_profile.transfer_probability):
        return []

    overall = athlete.overall
    youth_star = overall >= 80 and athlete.age <= 21
    prodigy = overall >= 75 and athlete.age <= 17
    discovered = rng.roll(scouting_visibility(athlete.team.league_tier, cfg))

    candidates: List[_Candidate] = []
    hidden_elite: List[_Candidate] = []

    for team in clubs:
        if _basic_exclusion(athlete, team):
            continue
        club = get_club_profile(team, cfg)
        if not is_realistic_destination(athlete, team, club, player_profile, cfg):
            continue
        if not desperate and club.tier not in player_profile.ideal_tiers:
            continue
        if club.transfer_activity < cfg.min_transfer_activity and not desperate:
            continue

        expected = determine_squad_status(athlete, team=team)
        if athlete.age <= 23 and not desperate:
            if expected == SquadStatus.SURPLUS:
                continue
            if (expected == SquadStatus.RESERVE
                    and team.reputation <= athlete.team.reputation + 5):
                continue

        fit = calculate_transfer_fit(athlete, player_profile, team, club, rng, expected)
        need = need_score(athlete, team, club, expected, desperate, cfg)
        rivalry = is_rivalry(athlete.team.key, team.key)
        interest = club_interest(athlete, player_profile, club, fit, need, rivalry,
                                 youth_star, cfg)
        candidate = _Candidate(team, club, expected, fit, need, interest,
                               _blend_score(fit, interest, need), rivalry)

        if athlete.age <= 23 and club.tier == ClubTier.ELITE and not discovered:
            hidden_elite.append(candidate)
            continue

        threshold = cfg.youth_star_need_threshold if (
            youth_star and club.tier == ClubTier.ELITE) else cfg.need_threshold
        if desperate or (interest > cfg.min_interest and need >= threshold):
            candidates.append(candidate)

    elite_pool = list(hidden_elite) + [
        c for c in candidates if c.club.tier == ClubTier.ELITE]
    if prodigy and discovered and elite_pool:
        best = max(elite_pool, key=lambda c: c.score)
        if best.interest > 25 and best not in candidates:
            candidates.append(best)
    if youth_star and not any(c.club.tier == ClubTier.ELITE for c in candidates) and elite_pool:
        best = max(elite_pool, key=lambda c: c.score)
        if best.interest > 35:
            candidates.append(best)

    if not candidates:
        return []

    candidates.sort(key=lambda c: c.score, reverse=True)
    wanted = _offer_count(athlete, player_profile, desperate, youth_star, rng, cfg)
    top_offers = sum(1 for c in candidates[:wanted] if c.club.tier >= ClubTier.MAJOR)

    offers: List[Offer] = []
    for candidate in candidates:
        if len(offers) >= wanted:
            break
        if not desperate and _can_be_loaned(athlete, player_profile):
            p = (cfg.elite_prospect_loan_probability
                 if candidate.club.tier == ClubTier.ELITE
                 and candidate.expected_status == SquadStatus.PROSPECT
                 else cfg.loan_probability)
            if rng.roll(p):
                loan = _loan_offer(athlete, candidate, rng)
                loan.interest, loan.score, loan.rivalry = (
                    candidate.interest, candidate.score, candidate.rivalry)
                offers.append(loan)
                continue

        ledger = ledgers.for_team(candidate.team, cfg) if ledgers is not None else None
        offer = negotiate_transfer(athlete, candidate.team, candidate.club, player_profile,
                                   candidate.fit, rng, desperate=desperate,
                                   expected_status=candidate.expected_status,
                                   competing_offers=top_offers, ledger=ledger, config=cfg)
        if offer is None:
            continue
        offer.interest, offer.score, offer.rivalry = (
            candidate.interest, candidate.score, candidate.rivalry)
        offers.append(offer)

    _log.debug(f"{athlete.name}: {len(offers)} offer(s) from {len(candidates)} candidate(s)")
    return offers


# ──────────────────────────────────────────────
# SETTLEMENT
# ──────────────────────────────────────────────

@dataclass
class TransferOutcome:
    success: bool
    offer: Offer
    commitment: Optional[Commitment] = None
    rivalry: Optional[str] = None
    message: str = ""


def process_transfer(athlete: Athlete, offer: Offer, ledgers: LedgerBook,
                     rng: RandomSource, config: Optional[TransferConfig] = None) -> TransferOutcome:
    """Move the athlete. Permanent deals commit fee and wage to the buyer's ledger."""
    cfg = config or TransferConfig()
    previous = athlete.team
    rivalry = is_rivalry(previous.key, offer.team.key)

    if isinstance(offer, LoanOffer):
        if athlete.parent_club is None:
            athlete.parent_club = previous
        athlete.team = offer.team
        athlete.loan_duration = offer.duration
        athlete.squad_status = offer.expected_status
        athlete.has_made_senior_debut = True
        message = f"{athlete.name} joined {offer.team.name} on a {offer.duration}-season loan"
        _log.info(message)
        return TransferOutcome(success=True, offer=offer, rivalry=rivalry, message=message)

    ledger = ledgers.for_team(offer.team, cfg)
    commitment = ledger.commit(offer.fee, offer.wage, fee_slack=cfg.fee_slack)
    if commitment is None:
        message = f"{offer.team.name} could no longer fund the move for {athlete.name}"
        _log.info(message)
        return TransferOutcome(success=False, offer=offer, message=message)

    if previous.key in ledgers:
        ledgers.for_team(previous, cfg).adjust_wage(athlete.wage, 0)

    athlete.team = offer.team
    athlete.wage = offer.wage
    athlete.contract_length = offer.contract_length
    athlete.squad_status = offer.expected_status
    athlete.years_at_club = 0
    athlete.parent_club = None
    athlete.loan_duration = 0
    athlete.pending_loan_return = False
    athlete.has_made_senior_debut = True
    athlete.seasons_with_low_playing_time = 0
    if offer.expected_status >= SquadStatus.KEY_PLAYER:
        athlete.promised_squad_status = offer.expected_status
        athlete.role_guarantee_seasons = 2
    else:
        athlete.promised_squad_status = None
        athlete.role_guarantee_seasons = 0

    if rivalry:
        message = (f"{athlete.name} crossed the {rivalry} divide: "
                   f"{previous.name} -> {offer.team.name} (EUR {offer.fee:,})")
    else:
        message = f"{athlete.name} transferred to {offer.team.name} for EUR {offer.fee:,}"
    _log.info(message)
    return TransferOutcome(success=True, offer=offer, commitment=commitment,
                           rivalry=rivalry, message=message)


@dataclass
class RenewalOutcome:
    renewed: bool
    old_wage: int
    new_wage: int
    contract_length: int
    promotion: bool = False


def process_contract_renewal(athlete: Athlete, rng: RandomSource, promotion: bool = False,
                             ledgers: Optional[LedgerBook] = None,
                             config: Optional[TransferConfig] = None) -> RenewalOutcome:
    """
    Extend the athlete's contract at the current club.

    The new wage is the market baseline scaled by loyalty and age, capped
    by the club's wage cap and what the club can still pay, but always at
    least a small raise on the current wage.
    """
    cfg = config or TransferConfig()
    length = rng.rand(3, 5) if promotion else rng.rand(1 if athlete.age > 31 else 2, 4)
    loyalty = max(0.7, rng.gauss(min(athlete.years_at_club / 1.8, 1.18), 0.08))
    age_factor = rng.gauss(0.82, 0.05) if athlete.age > 32 else 1.0

    current_wage = athlete.wage
    baseline = weekly_wage_baseline(athlete.team, athlete.squad_status, athlete.overall, rng)
    new_wage = baseline * loyalty * age_factor * rng.rand_float(0.95, 1.05)

    club = get_club_profile(athlete.team, cfg)
    new_wage = min(new_wage, club.wage_cap)
    ledger = ledgers.for_team(athlete.team, cfg) if ledgers is not None else None
    if ledger is not None:
        available = ledger.remaining_wage + current_wage
        if new_wage > available:
            new_wage = max(current_wage, available)
    new_wage = int(round(max(new_wage, current_wage * (1.2 if promotion else 1.02))))

    if ledger is not None:
        ledger.adjust_wage(current_wage, new_wage)

    athlete.contract_length = length
    athlete.wage = new_wage
    _log.info(f"{athlete.name} renewed with {athlete.team.name}: {length} season(s) "
              f"at EUR {new_wage:,}/week")
    return RenewalOutcome(renewed=True, old_wage=current_wage, new_wage=new_wage,
                          contract_length=length, promotion=promotion)
