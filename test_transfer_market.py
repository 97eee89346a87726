#!/usr/bin/env python3
"""
Transfer Market Tests
=====================

Club profiles, ledger bookkeeping, offer generation invariants and
settlement of transfers, loans and renewals.
"""

import pytest

from careersim.athlete import (
    ATTRIBUTE_NAMES, Athlete, ClubTier, Injury, InjuryType, Position, SquadStatus, Team,
)
from careersim.club_profile import clear_profile_cache, get_club_profile
from careersim.clubs import TEAMS_BY_KEY, default_club_pool
from careersim.config import TransferConfig
from careersim.ledger import ClubLedger, Commitment, LedgerBook
from careersim.market_value import get_player_profile, weekly_wage_baseline
from careersim.rng import RandomSource
from careersim.transfer_market import (
    LoanOffer, TransferFit, TransferOffer, generate_offers, negotiate_transfer, price_transfer,
    process_contract_renewal, process_transfer,
)


def team_copy(key):
    return Team.from_dict(TEAMS_BY_KEY[key].to_dict())


def pool_team(pool, key):
    return next(t for t in pool if t.key == key)


def make_athlete(level=75, age=25, position=Position.ST, team=None, **kw):
    attrs = {name: level for name in ATTRIBUTE_NAMES}
    kw.setdefault("potential", level + 2)
    kw.setdefault("contract_length", 3)
    return Athlete(name="Market Test", age=age, position=position, attributes=attrs,
                   team=team if team is not None else team_copy("aston_villa"), **kw)


def funded_team(key, transfer=50_000_000, wage=2_000_000):
    team = team_copy(key)
    team.transfer_budget = transfer
    team.remaining_transfer_budget = transfer
    team.wage_budget_weekly = wage
    team.remaining_wage_budget_weekly = wage
    return team


def standard_club(pool):
    return next(t for t in pool if t.league_tier == 1 and not t.is_youth
                and get_club_profile(t).tier == ClubTier.STANDARD)


def breakout_striker(team, **kw):
    kw.setdefault("squad_status", SquadStatus.KEY_PLAYER)
    return make_athlete(level=88, age=24, potential=90, reputation=75, contract_length=2,
                        team=team, **kw)


def flat_wage_share(share):
    return TransferConfig(wage_share={tier.value: share for tier in ClubTier})


NEUTRAL_FIT = TransferFit(status=70, financial=70, cultural=70, tactical=70, career=70,
                          overall=70)


# ═══════════════════════════════════════════════════════════════
# CLUB PROFILES
# ═══════════════════════════════════════════════════════════════

class TestClubProfile:
    def test_pure_per_club(self):
        clear_profile_cache()
        a = get_club_profile(team_copy("benfica"))
        clear_profile_cache()
        b = get_club_profile(team_copy("benfica"))
        assert a.to_dict() == b.to_dict()

    def test_cached(self):
        team = team_copy("porto")
        assert get_club_profile(team) is get_club_profile(team)

    def test_explicit_config_matches_default(self):
        team = team_copy("ajax")
        assert get_club_profile(team, TransferConfig()).to_dict() == get_club_profile(team).to_dict()

    def test_wage_cap_is_share_of_budget(self):
        cfg = TransferConfig()
        for team in default_club_pool(include_youth=False):
            profile = get_club_profile(team)
            share = cfg.wage_share[profile.tier.value]
            assert profile.wage_cap == int(profile.wage_budget_weekly * share)
            assert profile.wage_cap <= profile.wage_budget_weekly

    def test_persisted_budgets_override(self):
        team = funded_team("celtic", transfer=5_000_000, wage=300_000)
        team.remaining_transfer_budget = 1_000_000
        profile = get_club_profile(team)
        assert profile.transfer_budget == 5_000_000
        assert profile.remaining_transfer_budget == 1_000_000
        assert profile.wage_budget_weekly == 300_000

    def test_elite_clubs_outspend_lower_leagues(self):
        big = get_club_profile(team_copy("real_madrid"))
        small = get_club_profile(team_copy("wrexham"))
        assert big.tier == ClubTier.ELITE
        assert big.transfer_budget > small.transfer_budget
        assert big.financial_power > small.financial_power

    def test_overridden_wage_share_not_served_from_cache(self):
        team = team_copy("ajax")
        default = get_club_profile(team)
        tight = get_club_profile(team, flat_wage_share(0.05))
        assert tight.wage_cap == int(tight.wage_budget_weekly * 0.05)
        assert tight.wage_cap < default.wage_cap
        assert get_club_profile(team) is default

    def test_elite_clubs_can_afford_elite_players(self):
        cfg = TransferConfig()
        pool = default_club_pool(include_youth=False)
        athlete = breakout_striker(standard_club(pool))
        top_fee = get_player_profile(athlete).true_value * cfg.fee_value_band[1]
        elite = [p for p in (get_club_profile(t) for t in pool) if p.tier == ClubTier.ELITE]
        assert elite
        for profile in elite:
            assert profile.transfer_budget * cfg.fee_slack >= top_fee


class TestWageBaseline:
    def test_roles_pay_in_order(self):
        team = team_copy("man_city")
        captain = weekly_wage_baseline(team, SquadStatus.CAPTAIN, 88)
        rotation = weekly_wage_baseline(team, SquadStatus.ROTATION, 88)
        surplus = weekly_wage_baseline(team, SquadStatus.SURPLUS, 88)
        assert captain > rotation > surplus

    def test_youth_stipend(self):
        academy = next(t for t in default_club_pool() if t.is_youth)
        assert weekly_wage_baseline(academy, SquadStatus.PROSPECT, 60) == 600


class TestPlayerProfile:
    def test_profile_is_pure(self):
        athlete = breakout_striker(team_copy("real_sociedad"))
        first = get_player_profile(athlete).to_dict()
        assert get_player_profile(athlete).to_dict() == first
        assert set(first) == {"market_tier", "true_value", "desirability",
                              "transfer_probability", "ideal_tiers",
                              "negotiation_difficulty", "desperate"}

    def test_breakout_striker_valued_within_elite_reach(self):
        athlete = breakout_striker(team_copy("real_sociedad"))
        assert 80_000_000 <= get_player_profile(athlete).true_value <= 200_000_000


# ═══════════════════════════════════════════════════════════════
# LEDGER
# ═══════════════════════════════════════════════════════════════

class TestLedger:
    def test_seeded_from_profile(self):
        team = team_copy("real_sociedad")
        ledger = ClubLedger(team)
        profile = get_club_profile(team_copy("real_sociedad"))
        assert ledger.remaining_transfer == profile.transfer_budget
        assert team.remaining_wage_budget_weekly == profile.wage_budget_weekly

    def test_can_afford(self):
        ledger = ClubLedger(funded_team("real_sociedad"))
        assert ledger.can_afford(50_000_000, 2_000_000)
        assert not ledger.can_afford(50_000_001, 0)
        assert not ledger.can_afford(0, 2_000_001)

    def test_commit_deducts(self):
        ledger = ClubLedger(funded_team("real_sociedad"))
        commitment = ledger.commit(20_000_000, 100_000)
        assert commitment == Commitment("real_sociedad", 20_000_000, 100_000)
        assert ledger.remaining_transfer == 30_000_000
        assert ledger.remaining_wage == 1_900_000

    def test_overdraw_writes_nothing(self):
        ledger = ClubLedger(funded_team("real_sociedad"))
        assert ledger.commit(60_000_000, 10_000) is None
        assert ledger.commit(1_000, 3_000_000) is None
        assert ledger.remaining_transfer == 50_000_000
        assert ledger.remaining_wage == 2_000_000

    def test_second_deal_cannot_overdraw(self):
        ledger = ClubLedger(funded_team("real_sociedad"))
        assert ledger.commit(40_000_000, 50_000) is not None
        assert ledger.commit(40_000_000, 50_000) is None
        assert ledger.remaining_transfer == 10_000_000

    def test_fee_slack_floors_at_zero(self):
        ledger = ClubLedger(funded_team("real_sociedad"))
        assert ledger.commit(52_000_000, 0, fee_slack=1.05) is not None
        assert ledger.remaining_transfer == 0

    def test_negative_commitment(self):
        ledger = ClubLedger(funded_team("real_sociedad"))
        with pytest.raises(ValueError):
            ledger.commit(-1, 0)
        with pytest.raises(ValueError):
            ledger.commit(0, -5)

    def test_release_and_reset(self):
        ledger = ClubLedger(funded_team("real_sociedad"))
        commitment = ledger.commit(10_000_000, 80_000)
        ledger.release(commitment)
        assert ledger.remaining_transfer == 50_000_000
        assert ledger.remaining_wage == 2_000_000
        ledger.commit(10_000_000, 80_000)
        ledger.reset()
        assert ledger.remaining_transfer == 50_000_000

    def test_book_one_ledger_per_team(self):
        book = LedgerBook()
        team = funded_team("real_sociedad")
        assert book.for_team(team) is book.for_team(team)
        assert "real_sociedad" in book
        assert len(book) == 1
        book.for_team(team).commit(5_000_000, 0)
        book.reset_all()
        assert team.remaining_transfer_budget == 50_000_000


# ═══════════════════════════════════════════════════════════════
# NEGOTIATION
# ═══════════════════════════════════════════════════════════════

class TestNegotiation:
    def test_budget_too_small_drops_offer(self):
        buyer = funded_team("atletico_madrid", transfer=2_000_000)
        ledger = ClubLedger(buyer)
        athlete = make_athlete(level=85, age=27, reputation=80)
        profile = get_player_profile(athlete)
        for seed in range(10):
            offer = negotiate_transfer(athlete, buyer, get_club_profile(buyer), profile,
                                       NEUTRAL_FIT, RandomSource(seed=seed), desperate=False,
                                       expected_status=SquadStatus.KEY_PLAYER, ledger=ledger)
            assert offer is None
        assert ledger.remaining_transfer == 2_000_000

    def test_desperate_fee_trimmed_to_budget(self):
        buyer = funded_team("atletico_madrid", transfer=2_000_000)
        ledger = ClubLedger(buyer)
        athlete = make_athlete(level=85, age=27, reputation=80)
        profile = get_player_profile(athlete, desperate=True)
        for seed in range(10):
            offer = negotiate_transfer(athlete, buyer, get_club_profile(buyer), profile,
                                       NEUTRAL_FIT, RandomSource(seed=seed), desperate=True,
                                       expected_status=SquadStatus.KEY_PLAYER, ledger=ledger)
            if offer is not None:
                assert offer.fee <= 2_000_000 * 1.02

    def test_poor_club_never_makes_permanent_offer(self):
        pool = default_club_pool(include_youth=False)
        poor = pool_team(pool, "atletico_madrid")
        poor.transfer_budget = 2_000_000
        poor.remaining_transfer_budget = 2_000_000
        for seed in range(15):
            athlete = make_athlete(level=85, age=27, reputation=80, contract_length=1,
                                   team=pool_team(pool, "aston_villa"))
            offers = generate_offers(athlete, pool, RandomSource(seed=seed), ledgers=LedgerBook())
            assert all(o.team.key != "atletico_madrid" for o in offers if isinstance(o, TransferOffer))

    def test_fee_within_market_value_band(self):
        athlete = breakout_striker(team_copy("real_sociedad"))
        profile = get_player_profile(athlete)
        for key in ("real_madrid", "napoli", "celtic"):
            club = get_club_profile(team_copy(key))
            for seed in range(10):
                for desperate in (False, True):
                    fee = price_transfer(athlete, profile, club, desperate,
                                         RandomSource(seed=seed))
                    assert profile.true_value * 0.5 <= fee <= profile.true_value * 1.8

    def test_elite_club_finances_elite_player(self):
        pool = default_club_pool(include_youth=False)
        athlete = breakout_striker(standard_club(pool))
        buyer = pool_team(pool, "real_madrid")
        profile = get_player_profile(athlete)
        for seed in range(10):
            ledger = ClubLedger(buyer)
            offer = negotiate_transfer(athlete, buyer, get_club_profile(buyer), profile,
                                       NEUTRAL_FIT, RandomSource(seed=seed), desperate=False,
                                       expected_status=SquadStatus.KEY_PLAYER, ledger=ledger)
            assert offer is not None
            assert offer.fee <= ledger.remaining_transfer * 1.05


# ═══════════════════════════════════════════════════════════════
# OFFER GENERATION
# ═══════════════════════════════════════════════════════════════

class TestGenerateOffers:
    def test_offers_respect_caps_and_budgets(self):
        checked = 0
        for seed in range(25):
            pool = default_club_pool()
            book = LedgerBook()
            level = 60 + seed
            athlete = make_athlete(level=level, age=20 + seed % 12,
                                   team=pool_team(pool, "aston_villa"))
            offers = generate_offers(athlete, pool, RandomSource(seed=seed),
                                     seek_move=seed % 2 == 0, ledgers=book)
            for offer in offers:
                if not isinstance(offer, TransferOffer):
                    continue
                checked += 1
                assert offer.wage <= get_club_profile(offer.team).wage_cap
                assert offer.fee <= book.for_team(offer.team).remaining_transfer * 1.05
                assert offer.team.key != athlete.team.key
        assert checked > 0

    def test_elite_interest_when_seeking_move(self):
        tiers = []
        for seed in range(20):
            pool = default_club_pool()
            athlete = make_athlete(level=88, age=24, potential=90, reputation=85,
                                   squad_status=SquadStatus.KEY_PLAYER,
                                   team=pool_team(pool, "man_city"))
            offers = generate_offers(athlete, pool, RandomSource(seed=seed), seek_move=True,
                                     ledgers=LedgerBook())
            tiers.extend(get_club_profile(o.team).tier for o in offers)
        assert ClubTier.ELITE in tiers

    def test_elite_offer_for_breakout_player_not_seeking_move(self):
        elite = 0
        for seed in range(60):
            pool = default_club_pool()
            book = LedgerBook()
            athlete = breakout_striker(standard_club(pool))
            offers = generate_offers(athlete, pool, RandomSource(seed=seed), ledgers=book)
            for offer in offers:
                if (isinstance(offer, TransferOffer)
                        and get_club_profile(offer.team).tier == ClubTier.ELITE):
                    elite += 1
                    assert offer.fee <= book.for_team(offer.team).remaining_transfer * 1.05
        assert elite > 0

    def test_overridden_wage_share_caps_offers(self):
        cfg = flat_wage_share(0.05)
        checked = 0
        for seed in range(15):
            pool = default_club_pool()
            athlete = make_athlete(level=76, age=26, team=pool_team(pool, "aston_villa"))
            offers = generate_offers(athlete, pool, RandomSource(seed=seed), seek_move=True,
                                     ledgers=LedgerBook(), config=cfg)
            for offer in offers:
                if not isinstance(offer, TransferOffer):
                    continue
                checked += 1
                profile = get_club_profile(offer.team, cfg)
                assert profile.wage_cap == int(profile.wage_budget_weekly * 0.05)
                assert offer.wage <= profile.wage_cap
        assert checked > 0

    def test_ranked_by_score(self):
        pool = default_club_pool()
        athlete = make_athlete(level=80, age=26, team=pool_team(pool, "aston_villa"))
        offers = generate_offers(athlete, pool, RandomSource(seed=3), seek_move=True,
                                 ledgers=LedgerBook())
        scores = [o.score for o in offers]
        assert scores == sorted(scores, reverse=True)

    def test_forced_move_is_desperate(self):
        pool = default_club_pool()
        athlete = make_athlete(level=70, age=28, squad_status=SquadStatus.SURPLUS,
                               seasons_with_low_playing_time=2,
                               team=pool_team(pool, "aston_villa"))
        offers = generate_offers(athlete, pool, RandomSource(seed=8), forced=True,
                                 ledgers=LedgerBook())
        assert all(isinstance(o, TransferOffer) for o in offers)

    @pytest.mark.parametrize("kw", [
        {"retired": True},
        {"age": 36},
        {"injury": Injury(InjuryType.CAREER_ENDING, 99)},
        {"pending_loan_return": True},
    ])
    def test_no_offers(self, kw):
        pool = default_club_pool()
        kw = dict(kw)
        athlete = make_athlete(level=85, age=kw.pop("age", 25),
                               team=pool_team(pool, "aston_villa"), **kw)
        assert generate_offers(athlete, pool, RandomSource(seed=1), seek_move=True) == []


# ═══════════════════════════════════════════════════════════════
# SETTLEMENT
# ═══════════════════════════════════════════════════════════════

class TestProcessTransfer:
    def test_permanent_move_commits(self):
        buyer = funded_team("napoli")
        book = LedgerBook()
        athlete = make_athlete(level=82, wage=40_000, years_at_club=4,
                               seasons_with_low_playing_time=1)
        offer = TransferOffer(team=buyer, fee=30_000_000, wage=120_000, contract_length=4,
                              expected_status=SquadStatus.KEY_PLAYER)
        outcome = process_transfer(athlete, offer, book, RandomSource(seed=1))
        assert outcome.success
        assert outcome.commitment.fee == 30_000_000
        assert book.for_team(buyer).remaining_transfer == 20_000_000
        assert book.for_team(buyer).remaining_wage == 1_880_000
        assert athlete.team is buyer
        assert athlete.wage == 120_000
        assert athlete.contract_length == 4
        assert athlete.years_at_club == 0
        assert athlete.seasons_with_low_playing_time == 0
        assert athlete.promised_squad_status == SquadStatus.KEY_PLAYER
        assert athlete.role_guarantee_seasons == 2

    def test_rotation_move_has_no_promise(self):
        buyer = funded_team("napoli")
        athlete = make_athlete()
        offer = TransferOffer(team=buyer, fee=1_000_000, wage=20_000, contract_length=3,
                              expected_status=SquadStatus.ROTATION)
        assert process_transfer(athlete, offer, LedgerBook(), RandomSource(seed=1)).success
        assert athlete.promised_squad_status is None
        assert athlete.squad_status == SquadStatus.ROTATION

    def test_unaffordable_move_fails_cleanly(self):
        buyer = funded_team("napoli")
        home = team_copy("aston_villa")
        athlete = make_athlete(team=home, wage=40_000)
        offer = TransferOffer(team=buyer, fee=60_000_000, wage=100_000, contract_length=4,
                              expected_status=SquadStatus.KEY_PLAYER)
        book = LedgerBook()
        outcome = process_transfer(athlete, offer, book, RandomSource(seed=1))
        assert not outcome.success
        assert athlete.team is home
        assert athlete.wage == 40_000
        assert book.for_team(buyer).remaining_transfer == 50_000_000

    def test_rivalry_reported(self):
        athlete = make_athlete(team=team_copy("real_madrid"))
        offer = TransferOffer(team=funded_team("fc_barcelona"), fee=5_000_000, wage=50_000,
                              contract_length=3, expected_status=SquadStatus.ROTATION)
        outcome = process_transfer(athlete, offer, LedgerBook(), RandomSource(seed=1))
        assert outcome.rivalry == "El Clásico"

    def test_loan_sets_parent_club(self):
        home = team_copy("chelsea")
        borrower = team_copy("brentford")
        athlete = make_athlete(level=68, age=19, team=home, wage=15_000)
        offer = LoanOffer(team=borrower, wage_contribution=80, duration=2,
                          expected_status=SquadStatus.ROTATION)
        outcome = process_transfer(athlete, offer, LedgerBook(), RandomSource(seed=1))
        assert outcome.success
        assert outcome.commitment is None
        assert athlete.parent_club is home
        assert athlete.team is borrower
        assert athlete.loan_duration == 2
        assert athlete.wage == 15_000


class TestRenewal:
    def test_raise_and_length(self):
        for seed in range(20):
            athlete = make_athlete(level=78, age=27, wage=50_000, contract_length=1,
                                   years_at_club=3)
            outcome = process_contract_renewal(athlete, RandomSource(seed=seed))
            assert outcome.renewed
            assert athlete.wage >= round(50_000 * 1.02)
            assert 2 <= athlete.contract_length <= 4

    def test_promotion(self):
        athlete = make_athlete(level=84, age=24, wage=60_000, contract_length=1)
        outcome = process_contract_renewal(athlete, RandomSource(seed=4), promotion=True)
        assert outcome.new_wage >= 72_000
        assert 3 <= outcome.contract_length <= 5

    def test_ledger_tracks_wage_change(self):
        team = funded_team("aston_villa")
        book = LedgerBook()
        athlete = make_athlete(level=78, wage=50_000, contract_length=1, team=team)
        outcome = process_contract_renewal(athlete, RandomSource(seed=2), ledgers=book)
        assert book.for_team(team).remaining_wage == 2_000_000 - (outcome.new_wage - 50_000)

    def test_overridden_wage_share_caps_renewal(self):
        athlete = make_athlete(level=84, age=27, wage=50_000, contract_length=1)
        outcome = process_contract_renewal(athlete, RandomSource(seed=3),
                                           config=flat_wage_share(0.001))
        assert outcome.new_wage == round(50_000 * 1.02)
