#!/usr/bin/env python3
"""
Athlete Data Model Tests
========================

Overall rating invariants, attribute clamping, serialisation, the club
reference data and the engine config layer.
"""

import json
import os
import tempfile

import pytest

from careersim.athlete import (
    ATTRIBUTE_NAMES, Athlete, Injury, InjuryType, Position, SquadStatus, Team, Trait,
    TraitName, TraitTier, compute_overall,
)
from careersim.clubs import (
    ALL_TEAMS, RIVALRIES, TEAMS_BY_KEY, TEAMS_BY_TIER, YOUTH_TEAMS, default_club_pool,
    get_rival_teams, is_rivalry,
)
from careersim.config import EngineConfig, load_config


def make_athlete(level=70, position=Position.ST, age=24, team_key="aston_villa", **kw):
    attrs = {name: level for name in ATTRIBUTE_NAMES}
    return Athlete(name="Test Player", age=age, position=position, attributes=attrs,
                   potential=kw.pop("potential", level + 5),
                   team=Team.from_dict(TEAMS_BY_KEY[team_key].to_dict()), **kw)


# ═══════════════════════════════════════════════════════════════
# OVERALL
# ═══════════════════════════════════════════════════════════════

class TestOverall:
    def test_uniform_attributes(self):
        a = make_athlete(level=72)
        assert a.overall == 72

    def test_overall_follows_attributes(self):
        a = make_athlete(level=70)
        before = a.overall
        a.set_attribute("shooting", 95)
        assert a.overall > before
        assert a.overall == compute_overall(a.attributes, a.position)

    def test_overall_is_not_assignable(self):
        a = make_athlete()
        with pytest.raises(AttributeError):
            a.overall = 99

    def test_nan_attribute_reads_as_midpoint(self):
        attrs = {"shooting": float("nan")}
        assert compute_overall(attrs, Position.ST) == 55

    def test_missing_attributes_read_as_midpoint(self):
        assert compute_overall({}, Position.CM) == 55

    def test_no_applicable_weights(self):
        assert compute_overall({"shooting": 80}, "not a position") == 50

    def test_position_matters(self):
        a = make_athlete(level=60)
        a.set_attribute("shooting", 95)
        st = compute_overall(a.attributes, Position.ST)
        cb = compute_overall(a.attributes, Position.CB)
        assert st > cb


# ═══════════════════════════════════════════════════════════════
# ATTRIBUTES
# ═══════════════════════════════════════════════════════════════

class TestAttributes:
    def test_clamped_on_construction(self):
        a = make_athlete(level=120)
        assert all(10 <= v <= 99 for v in a.attributes.values())

    def test_outfield_goalkeeping_capped(self):
        a = make_athlete(level=85)
        for name in ("handling", "reflexes", "diving"):
            assert a.attributes[name] == 40

    def test_goalkeeper_keeps_goalkeeping(self):
        a = make_athlete(level=85, position=Position.GK)
        assert a.attributes["reflexes"] == 85

    def test_set_attribute_rounds(self):
        a = make_athlete()
        assert a.set_attribute("pace", 71.6) == 72
        assert a.set_attribute("pace", float("nan")) == 55

    def test_attr_defaults_to_midpoint(self):
        a = make_athlete()
        del a.attributes["flair"]
        assert a.attr("flair") == 55


# ═══════════════════════════════════════════════════════════════
# SERIALISATION
# ═══════════════════════════════════════════════════════════════

class TestSerialisation:
    def test_round_trip_keeps_state(self):
        a = make_athlete(level=78, squad_status=SquadStatus.KEY_PLAYER)
        a.traits.append(Trait(TraitName.POACHER, TraitTier.GOLD))
        a.injury = Injury(InjuryType.SEVERE, 3, "torn hamstring")
        a.suspensions.cup = 2
        a.trophies["league"] = 1
        b = Athlete.from_dict(json.loads(json.dumps(a.to_dict())))
        assert b.overall == a.overall
        assert b.squad_status == SquadStatus.KEY_PLAYER
        assert b.traits[0].tier == TraitTier.GOLD
        assert b.injury.type == InjuryType.SEVERE
        assert b.suspensions.cup == 2
        assert b.trophies["league"] == 1

    def test_stored_overall_ignored(self):
        d = make_athlete(level=70).to_dict()
        d["overall"] = 99
        assert Athlete.from_dict(d).overall == 70


# ═══════════════════════════════════════════════════════════════
# CLUBS
# ═══════════════════════════════════════════════════════════════

class TestClubs:
    def test_unique_keys(self):
        keys = [t.key for t in ALL_TEAMS + YOUTH_TEAMS]
        assert len(keys) == len(set(keys)), "Duplicate club keys found"

    def test_every_tier_populated(self):
        for tier in range(1, 6):
            assert TEAMS_BY_TIER.get(tier)

    def test_youth_flag(self):
        assert all(t.is_youth for t in YOUTH_TEAMS)
        assert not any(t.is_youth for t in ALL_TEAMS)

    def test_rivalry_lookup(self):
        assert is_rivalry("real_madrid", "fc_barcelona") == "El Clásico"
        assert is_rivalry("celtic", "rangers") == "Old Firm"
        assert is_rivalry("real_madrid", "liverpool") is None
        assert is_rivalry("celtic", "celtic") is None

    def test_rival_teams(self):
        assert "inter_milan" in get_rival_teams("ac_milan")
        assert get_rival_teams("benfica") == ["porto", "sporting_cp"]

    def test_rivalry_keys_exist(self):
        for r in RIVALRIES:
            for key in r["teams"]:
                assert key in TEAMS_BY_KEY

    def test_pool_is_fresh_copy(self):
        pool = default_club_pool()
        pool[0].remaining_transfer_budget = 1
        assert ALL_TEAMS[0].remaining_transfer_budget is None
        assert pool[0] is not ALL_TEAMS[0]


# ═══════════════════════════════════════════════════════════════
# CONFIG
# ═══════════════════════════════════════════════════════════════

class TestConfig:
    def test_defaults(self):
        cfg = EngineConfig()
        assert cfg.transfers.fee_slack == 1.05
        assert cfg.squad_status.max_demotion == 1
        assert cfg.progression.potential_headroom == 2

    def test_overlay(self):
        cfg = EngineConfig.from_dict({"injuries": {"base_risk": 0.2}})
        assert cfg.injuries.base_risk == 0.2
        assert cfg.injuries.max_risk == 0.65

    def test_unknown_section(self):
        with pytest.raises(ValueError):
            EngineConfig.from_dict({"weather": {}})

    def test_unknown_key(self):
        with pytest.raises(ValueError):
            EngineConfig.from_dict({"transfers": {"bribe_budget": 1}})

    def test_round_trip(self):
        cfg = EngineConfig()
        assert EngineConfig.from_dict(cfg.to_dict()).to_dict() == cfg.to_dict()

    def test_load_config(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "engine.json")
            with open(path, "w") as f:
                json.dump({"transfers": {"max_offers": 3}}, f)
            cfg = load_config(path)
        assert cfg.transfers.max_offers == 3
