#!/usr/bin/env python3
"""
Injury & Suspension Tests
=========================

Risk model, injury rolls, recovery cycles and per-competition bans.
"""

import pytest

from careersim.athlete import (
    ATTRIBUTE_NAMES, Athlete, CompetitionType, Injury, InjuryType, Personality, Position,
    SeasonStats, Suspensions, Team, Trait, TraitName,
)
from careersim.clubs import TEAMS_BY_KEY
from careersim.injuries import injury_risk, process_recovery, recovery_rate, roll_injury
from careersim.rng import FixedRollSource, RandomSource
from careersim.suspensions import (
    any_active, apply_red_card, apply_season_red_cards, check_and_consume, reset, total,
)


def make_athlete(age=26, position=Position.CM, level=75, **kw):
    attrs = {name: level for name in ATTRIBUTE_NAMES}
    return Athlete(name="Injury Test", age=age, position=position, attributes=attrs,
                   potential=level + 3,
                   team=Team.from_dict(TEAMS_BY_KEY["napoli"].to_dict()), **kw)


# ═══════════════════════════════════════════════════════════════
# RISK
# ═══════════════════════════════════════════════════════════════

class TestInjuryRisk:
    def test_injury_prone_raises_risk(self):
        plain = make_athlete()
        prone = make_athlete(traits=[Trait(TraitName.INJURY_PRONE)])
        assert injury_risk(prone, 34).total > injury_risk(plain, 34).total

    def test_natural_fitness_lowers_risk(self):
        plain = make_athlete()
        fit = make_athlete(traits=[Trait(TraitName.NATURAL_FITNESS)])
        assert injury_risk(fit, 34).total < injury_risk(plain, 34).total

    def test_age_and_workload(self):
        young = make_athlete(age=24)
        old = make_athlete(age=34)
        assert injury_risk(old, 34).total > injury_risk(young, 34).total
        assert injury_risk(young, 10).workload < injury_risk(young, 34).workload

    def test_position_contact(self):
        cb = make_athlete(position=Position.CB)
        gk = make_athlete(position=Position.GK)
        assert injury_risk(cb, 34).position > injury_risk(gk, 34).position

    def test_lazy_personality(self):
        lazy = make_athlete(personality=Personality.LAZY)
        assert injury_risk(lazy, 34).base > injury_risk(make_athlete(), 34).base

    def test_injury_history_factors_stack(self):
        assert injury_risk(make_athlete(total_injuries=3), 34).history == 1.0
        assert injury_risk(make_athlete(total_injuries=8), 34).history == pytest.approx(1.3)
        assert injury_risk(make_athlete(total_injuries=12), 34).history == pytest.approx(1.3 * 1.6)


# ═══════════════════════════════════════════════════════════════
# ROLL
# ═══════════════════════════════════════════════════════════════

class TestRollInjury:
    def test_no_roll_while_injured(self):
        a = make_athlete(injury=Injury(InjuryType.SEVERE, 3))
        assert roll_injury(a, 34, FixedRollSource(True)) is None
        assert a.total_injuries == 0

    def test_gate_closed(self):
        a = make_athlete()
        assert roll_injury(a, 34, FixedRollSource(False)) is None
        assert a.injury is None

    def test_gate_open_records_injury(self):
        a = make_athlete()
        injury = roll_injury(a, 34, FixedRollSource(True, seed=4))
        assert injury is not None
        assert a.injury is injury
        assert a.total_injuries == 1
        assert injury.duration >= 1
        assert injury.description

    def test_severity_mix(self):
        counts = {t: 0 for t in InjuryType}
        for seed in range(600):
            a = make_athlete()
            injury = roll_injury(a, 34, FixedRollSource(True, seed=seed))
            counts[injury.type] += 1
        assert counts[InjuryType.MINOR] > counts[InjuryType.MODERATE] > counts[InjuryType.SEVERE]

    def test_overall_rate_in_range(self):
        rng = RandomSource(seed=12)
        injured = 0
        for _ in range(2000):
            a = make_athlete()
            if roll_injury(a, 34, rng) is not None:
                injured += 1
        assert 0.02 * 2000 <= injured <= 0.65 * 2000


# ═══════════════════════════════════════════════════════════════
# RECOVERY
# ═══════════════════════════════════════════════════════════════

class TestRecovery:
    def test_severe_three_to_two(self):
        a = make_athlete(age=28, injury=Injury(InjuryType.SEVERE, 3, "ACL tear"))
        rng = FixedRollSource(False)
        result = process_recovery(a, rng)
        assert not result.recovered
        assert result.remaining == 2.0
        assert a.injury is not None
        assert a.injury.duration == 2.0
        # the active injury blocks a fresh roll this cycle
        assert roll_injury(a, 34, rng) is None
        assert a.total_injuries == 0

    def test_setback_adds_a_cycle(self):
        a = make_athlete(injury=Injury(InjuryType.SEVERE, 3))
        result = process_recovery(a, FixedRollSource(True))
        assert result.setback
        assert a.injury.duration == 3.0

    def test_minor_clears(self):
        a = make_athlete(injury=Injury(InjuryType.MINOR, 1))
        result = process_recovery(a, FixedRollSource(True))
        assert result.recovered
        assert a.injury is None

    def test_no_injury(self):
        assert process_recovery(make_athlete(), RandomSource(seed=1)).recovered

    @pytest.mark.parametrize("age,fitness,trait,expected", [
        (26, 75, None, 1.0),
        (26, 75, TraitName.NATURAL_FITNESS, 1.5),
        (33, 75, TraitName.NATURAL_FITNESS, 0.8),
        (33, 60, None, 0.9),
    ])
    def test_recovery_rate(self, age, fitness, trait, expected):
        a = make_athlete(age=age, traits=[Trait(trait)] if trait else [])
        a.set_attribute("fitness", fitness)
        assert recovery_rate(a) == expected


# ═══════════════════════════════════════════════════════════════
# SUSPENSIONS
# ═══════════════════════════════════════════════════════════════

class TestSuspensions:
    def test_ban_is_per_competition(self):
        s = Suspensions()
        apply_red_card(s, CompetitionType.CUP)
        assert not check_and_consume(s, CompetitionType.LEAGUE)
        assert check_and_consume(s, CompetitionType.CUP)
        assert not check_and_consume(s, CompetitionType.CUP)

    def test_accepts_names(self):
        s = Suspensions()
        apply_red_card(s, "state_cup")
        apply_red_card(s, "Continental")
        assert s.state_cup == 1
        assert s.continental == 1
        assert total(s) == 2
        assert any_active(s)

    def test_unknown_competition(self):
        with pytest.raises(ValueError):
            apply_red_card(Suspensions(), "friendly")

    def test_reset(self):
        s = Suspensions(league=2, international=1)
        reset(s)
        assert total(s) == 0
        assert not any_active(s)

    def test_season_red_cards(self):
        a = make_athlete()
        season = SeasonStats(red_cards=3, red_cards_by_competition={"cup": 1, "continental": 1})
        assert apply_season_red_cards(a, season) == 3
        assert a.suspensions.cup == 1
        assert a.suspensions.continental == 1
        assert a.suspensions.league == 1
