#!/usr/bin/env python3
"""
Season & Career Tests
=====================

The per-season orchestration, loan returns, renewals, retirement and the
Career wrapper that owns the ledgers between seasons.
"""

import json

import pytest

from careersim.athlete import (
    ATTRIBUTE_NAMES, Athlete, ClubTier, Injury, InjuryType, Position, SeasonStats, SquadStatus,
    Team,
)
from careersim.club_profile import get_club_profile
from careersim.clubs import TEAMS_BY_KEY, default_club_pool
from careersim.config import EngineConfig
from careersim.ledger import LedgerBook
from careersim.retirement import (
    CAREER_ENDING_INJURY, check_retirement, retirement_probability, retirement_target_age,
)
from careersim.rng import RandomSource
from careersim.season import Career, simulate_season
from careersim.transfer_market import TransferOffer


def no_retirement(**sections):
    d = {"retirement": {"base_chance": {}}}
    d.update(sections)
    return EngineConfig.from_dict(d)


def make_athlete(level=72, age=24, position=Position.CM, team=None, **kw):
    attrs = {name: level for name in ATTRIBUTE_NAMES}
    kw.setdefault("potential", level + 4)
    return Athlete(name="Season Test", age=age, position=position, attributes=attrs,
                   team=team if team is not None else
                   Team.from_dict(TEAMS_BY_KEY["aston_villa"].to_dict()), **kw)


def regular_season(**kw):
    values = dict(matches=30, goals=4, assists=6, average_rating=6.9)
    values.update(kw)
    return SeasonStats(**values)


# ═══════════════════════════════════════════════════════════════
# SEASON TICK
# ═══════════════════════════════════════════════════════════════

class TestSimulateSeason:
    def test_bookkeeping(self):
        athlete = make_athlete(wage=10_000, contract_length=3, years_at_club=2)
        result = simulate_season(athlete, regular_season(), [], RandomSource(seed=1), 2025,
                                 config=no_retirement())
        assert athlete.age == 25
        assert result.age == 24
        assert athlete.contract_length == 2
        assert athlete.years_at_club == 3
        assert athlete.bank_balance == 520_000
        assert athlete.total_matches == 30
        assert athlete.total_goals == 4
        assert len(athlete.season_log) == 1
        entry = athlete.season_log[0]
        assert entry["season"] == 2025
        assert entry["age"] == 24
        assert entry["team"] == "aston_villa"
        assert entry["matches"] == 30

    def test_overall_reported(self):
        athlete = make_athlete(age=19, potential=88)
        result = simulate_season(athlete, regular_season(), [], RandomSource(seed=2), 2025,
                                 config=no_retirement())
        assert result.overall_after == athlete.overall
        assert result.progression.overall_before == result.overall_before

    def test_honours_recorded(self):
        athlete = make_athlete()
        before = dict(athlete.trophies)
        season = regular_season(trophies_won=["league", "world_cup", "world_player_award"])
        simulate_season(athlete, season, [], RandomSource(seed=3), 2025, config=no_retirement())
        assert athlete.trophies["league"] == before.get("league", 0) + 1
        assert athlete.trophies["international"] == before.get("international", 0) + 1
        assert athlete.awards["world_player_award"] == 1

    def test_low_playing_time_streak(self):
        athlete = make_athlete()
        rng = RandomSource(seed=4)
        cfg = no_retirement()
        simulate_season(athlete, regular_season(matches=5), [], rng, 2025, config=cfg)
        assert athlete.seasons_with_low_playing_time == 1
        simulate_season(athlete, regular_season(matches=4), [], rng, 2026, config=cfg)
        assert athlete.seasons_with_low_playing_time == 2
        simulate_season(athlete, regular_season(matches=32), [], rng, 2027, config=cfg)
        assert athlete.seasons_with_low_playing_time == 0

    def test_red_cards_become_bans(self):
        athlete = make_athlete()
        season = regular_season(red_cards=1, red_cards_by_competition={"cup": 1})
        result = simulate_season(athlete, season, [], RandomSource(seed=5), 2025,
                                 config=no_retirement())
        assert result.red_cards_applied == 1
        assert athlete.suspensions.cup == 1

    def test_retired_athlete_untouched(self):
        athlete = make_athlete(retired=True, contract_length=0, wage=0)
        attrs = dict(athlete.attributes)
        result = simulate_season(athlete, regular_season(), default_club_pool(),
                                 RandomSource(seed=6), 2025)
        assert athlete.age == 24
        assert athlete.attributes == attrs
        assert athlete.season_log == []
        assert result.offers == []

    def test_result_serialises(self):
        athlete = make_athlete()
        result = simulate_season(athlete, regular_season(), default_club_pool(),
                                 RandomSource(seed=7), 2025, config=no_retirement())
        d = json.loads(json.dumps(result.to_dict()))
        assert d["season_year"] == 2025
        assert d["squad_status_before"] == SquadStatus.ROTATION.value

    def test_same_seed_same_season(self):
        a, b = make_athlete(age=20), make_athlete(age=20)
        simulate_season(a, regular_season(), [], RandomSource(seed=8), 2025)
        simulate_season(b, regular_season(), [], RandomSource(seed=8), 2025)
        assert a.attributes == b.attributes
        assert a.squad_status == b.squad_status


class TestBreakoutSeason:
    def test_rotation_striker_promoted_and_courted_by_elite_clubs(self):
        season = SeasonStats(matches=28, goals=18, assists=4, average_rating=7.6)
        elite = 0
        for seed in range(60):
            pool = default_club_pool()
            home = next(t for t in pool if t.league_tier == 1 and not t.is_youth
                        and get_club_profile(t).tier == ClubTier.STANDARD)
            athlete = make_athlete(level=88, potential=90, age=24, position=Position.ST,
                                   squad_status=SquadStatus.ROTATION, contract_length=3,
                                   reputation=75, team=home)
            book = LedgerBook()
            result = simulate_season(athlete, season, pool, RandomSource(seed=seed), 2025,
                                     config=no_retirement(), ledgers=book)
            assert result.squad_status_after == SquadStatus.KEY_PLAYER
            for offer in result.offers:
                if (isinstance(offer, TransferOffer)
                        and get_club_profile(offer.team).tier == ClubTier.ELITE):
                    elite += 1
                    assert offer.fee <= book.for_team(offer.team).remaining_transfer * 1.05
        assert elite > 0


# ═══════════════════════════════════════════════════════════════
# LOANS & RENEWALS
# ═══════════════════════════════════════════════════════════════

class TestLoanReturn:
    def test_returns_to_parent(self):
        pool = default_club_pool()
        parent = next(t for t in pool if t.key == "chelsea")
        borrower = next(t for t in pool if t.key == "brentford")
        athlete = make_athlete(level=68, age=19, team=borrower, parent_club=parent,
                               loan_duration=1, years_at_club=1)
        result = simulate_season(athlete, regular_season(), pool, RandomSource(seed=9), 2025,
                                 config=no_retirement(), ledgers=LedgerBook(), seek_move=True)
        assert result.loan_returned
        assert athlete.team is parent
        assert athlete.parent_club is None
        assert athlete.loan_duration == 0
        assert athlete.years_at_club == 1
        assert athlete.pending_loan_return
        assert result.offers == []

    def test_flag_cleared_next_season(self):
        pool = default_club_pool()
        athlete = make_athlete(level=68, age=19, pending_loan_return=True)
        simulate_season(athlete, regular_season(), pool, RandomSource(seed=10), 2026,
                        config=no_retirement())
        assert not athlete.pending_loan_return

    def test_multi_season_loan_counts_down(self):
        pool = default_club_pool()
        parent = next(t for t in pool if t.key == "chelsea")
        borrower = next(t for t in pool if t.key == "brentford")
        athlete = make_athlete(level=66, age=18, team=borrower, parent_club=parent,
                               loan_duration=2)
        result = simulate_season(athlete, regular_season(), [], RandomSource(seed=11), 2025,
                                 config=no_retirement())
        assert not result.loan_returned
        assert athlete.loan_duration == 1
        assert athlete.team is borrower


class TestRenewal:
    def test_expiring_contract_renewed(self):
        cfg = no_retirement(transfers={"renewal_probability": 2.0})
        athlete = make_athlete(wage=20_000, contract_length=1)
        result = simulate_season(athlete, regular_season(), [], RandomSource(seed=12), 2025,
                                 config=cfg)
        assert result.renewal is not None
        assert athlete.contract_length >= 2
        assert athlete.wage >= 20_400

    def test_no_renewal_when_gate_closed(self):
        cfg = no_retirement(transfers={"renewal_probability": -1.0})
        athlete = make_athlete(wage=20_000, contract_length=1)
        result = simulate_season(athlete, regular_season(), [], RandomSource(seed=13), 2025,
                                 config=cfg)
        assert result.renewal is None
        assert athlete.contract_length == 0

    def test_long_contract_not_renewed(self):
        cfg = no_retirement(transfers={"renewal_probability": 2.0})
        athlete = make_athlete(contract_length=4)
        result = simulate_season(athlete, regular_season(), [], RandomSource(seed=14), 2025,
                                 config=cfg)
        assert result.renewal is None
        assert athlete.contract_length == 3


# ═══════════════════════════════════════════════════════════════
# RETIREMENT
# ═══════════════════════════════════════════════════════════════

class TestRetirement:
    def test_target_age_by_position(self):
        outfield = make_athlete(position=Position.ST)
        keeper = make_athlete(position=Position.GK)
        assert retirement_target_age(keeper) == retirement_target_age(outfield) + 5

    def test_young_athlete_rarely_retires(self):
        athlete = make_athlete(age=22)
        assert retirement_probability(athlete, 1.0, 30) <= 0.02

    def test_well_past_target_capped(self):
        athlete = make_athlete(age=41)
        assert retirement_probability(athlete, 1.0, 30) == 0.98

    def test_probability_rises_with_age(self):
        young = retirement_probability(make_athlete(age=30), 1.0, 30)
        old = retirement_probability(make_athlete(age=36), 1.0, 30)
        assert old > young

    def test_career_ending_injury_forces_retirement(self):
        athlete = make_athlete(wage=30_000, injury=Injury(InjuryType.CAREER_ENDING, 99))
        decision = check_retirement(athlete, 1.0, 30, RandomSource(seed=1))
        assert decision.retire
        assert decision.reason == CAREER_ENDING_INJURY
        assert athlete.retired
        assert athlete.wage == 0
        assert athlete.contract_length == 0

    def test_season_stops_at_retirement(self):
        athlete = make_athlete(age=24, injury=Injury(InjuryType.CAREER_ENDING, 99))
        result = simulate_season(athlete, regular_season(matches=0), default_club_pool(),
                                 RandomSource(seed=15), 2025, seek_move=True)
        assert result.retired
        assert result.offers == []
        assert athlete.retired


# ═══════════════════════════════════════════════════════════════
# CAREER
# ═══════════════════════════════════════════════════════════════

class TestCareer:
    def test_advance_tracks_years(self):
        career = Career(make_athlete(), seed=1, start_year=2030, config=no_retirement())
        first = career.advance(regular_season())
        second = career.advance(regular_season())
        assert (first.season_year, second.season_year) == (2030, 2031)
        assert career.season_year == 2032
        assert len(career.history) == 2
        assert not career.finished

    def test_seeded_careers_repeat(self):
        a = Career(make_athlete(age=19), seed=42)
        b = Career(make_athlete(age=19), seed=42)
        for _ in range(3):
            a.advance(regular_season())
            b.advance(regular_season())
        assert a.athlete.attributes == b.athlete.attributes
        assert a.athlete.to_dict() == b.athlete.to_dict()

    def test_unknown_offer_rejected(self):
        career = Career(make_athlete(), seed=2, config=no_retirement())
        career.advance(regular_season())
        stranger = TransferOffer(team=Team.from_dict(TEAMS_BY_KEY["napoli"].to_dict()),
                                 fee=1_000_000, wage=20_000, contract_length=3,
                                 expected_status=SquadStatus.ROTATION)
        with pytest.raises(ValueError):
            career.accept_offer(stranger)

    def test_accept_offer_moves_athlete(self):
        for seed in range(15):
            pool = default_club_pool()
            home = next(t for t in pool if t.key == "aston_villa")
            career = Career(make_athlete(level=80, age=26, team=home), clubs=pool, seed=seed,
                            config=no_retirement())
            result = career.advance(regular_season(), seek_move=True)
            if result.offers:
                break
        assert result.offers
        assert career.pending_offers == result.offers

        offer = result.offers[0]
        outcome = career.accept_offer(offer)
        assert outcome.success
        assert career.athlete.team is offer.team
        assert career.pending_offers == []
        assert career.athlete.years_at_club == 0

    def test_auto_invest_spends_bank(self):
        athlete = make_athlete(age=19, potential=88, wage=50_000, bank_balance=10_000_000)
        career = Career(athlete, seed=3, auto_invest=True, config=no_retirement())
        result = career.advance(regular_season())
        assert result.training is not None and result.training.success
        assert result.training.cost == 200_000
        assert athlete.bank_balance == 10_000_000 - 200_000 + 50_000 * 52

    def test_explicit_choice_overrides_auto_invest(self):
        athlete = make_athlete(age=19, potential=88, wage=50_000, bank_balance=10_000_000)
        career = Career(athlete, seed=3, auto_invest=True, config=no_retirement())
        assert career.advance(regular_season(), invest_in_training=False).training is None

    def test_budgets_refresh_each_season(self):
        pool = default_club_pool()
        buyer = next(t for t in pool if t.key == "napoli")
        career = Career(make_athlete(), clubs=pool, seed=5, config=no_retirement())
        assert career.ledgers.for_team(buyer).commit(10_000_000, 0) is not None
        assert buyer.remaining_transfer_budget == buyer.transfer_budget - 10_000_000
        career.advance(regular_season())
        assert buyer.remaining_transfer_budget == buyer.transfer_budget

    def test_serialises(self):
        career = Career(make_athlete(), seed=4, config=no_retirement())
        career.advance(regular_season())
        d = json.loads(json.dumps(career.to_dict()))
        assert d["season_year"] == 2026
        assert len(d["history"]) == 1
