"""
Career Simulation Club Reference Data
=====================================

Static club pool the transfer market evaluates against: reputation
(0-100), league tier (1-5) and country for each club, plus youth
academies, rivalry groups and the clubs known for developing players.

Budget ledgers on Team start empty (None) and are filled in lazily the
first time a club spends.  default_club_pool() hands out fresh copies so
one career's spending never leaks into another.

Usage:
    from careersim.clubs import default_club_pool, get_rival_teams

    clubs = default_club_pool()
    rivals = get_rival_teams("real_madrid")
"""

from __future__ import annotations

from typing import Dict, List, Optional

from careersim.athlete import Team


# ═══════════════════════════════════════════════════════════════
# CLUBS
# ═══════════════════════════════════════════════════════════════

# (key, name, country, reputation, league tier)
_CLUB_TABLE = [
    # ── Tier 1 ──
    ("real_madrid", "Real Madrid", "Spain", 97, 1),
    ("fc_barcelona", "FC Barcelona", "Spain", 95, 1),
    ("atletico_madrid", "Atletico Madrid", "Spain", 87, 1),
    ("real_sociedad", "Real Sociedad", "Spain", 80, 1),
    ("athletic_bilbao", "Athletic Bilbao", "Spain", 79, 1),
    ("man_city", "Manchester City", "England", 96, 1),
    ("liverpool", "Liverpool", "England", 93, 1),
    ("arsenal", "Arsenal", "England", 91, 1),
    ("man_united", "Manchester United", "England", 90, 1),
    ("chelsea", "Chelsea", "England", 89, 1),
    ("tottenham", "Tottenham Hotspur", "England", 85, 1),
    ("newcastle", "Newcastle United", "England", 84, 1),
    ("aston_villa", "Aston Villa", "England", 82, 1),
    ("brentford", "Brentford", "England", 74, 1),
    ("bayern_munich", "Bayern Munich", "Germany", 95, 1),
    ("dortmund", "Borussia Dortmund", "Germany", 86, 1),
    ("leverkusen", "Bayer Leverkusen", "Germany", 85, 1),
    ("rb_leipzig", "RB Leipzig", "Germany", 82, 1),
    ("freiburg", "SC Freiburg", "Germany", 75, 1),
    ("inter_milan", "Inter Milan", "Italy", 90, 1),
    ("juventus", "Juventus", "Italy", 88, 1),
    ("ac_milan", "AC Milan", "Italy", 87, 1),
    ("napoli", "Napoli", "Italy", 85, 1),
    ("atalanta", "Atalanta", "Italy", 81, 1),
    ("psg", "Paris Saint-Germain", "France", 93, 1),
    ("monaco", "Monaco", "France", 81, 1),
    ("marseille", "Marseille", "France", 80, 1),
    ("lyon", "Olympique Lyonnais", "France", 79, 1),
    ("benfica", "Benfica", "Portugal", 83, 1),
    ("porto", "FC Porto", "Portugal", 82, 1),
    ("sporting_cp", "Sporting CP", "Portugal", 81, 1),
    ("ajax", "Ajax", "Netherlands", 80, 1),
    ("psv", "PSV Eindhoven", "Netherlands", 79, 1),
    ("feyenoord", "Feyenoord", "Netherlands", 78, 1),
    ("rb_salzburg", "RB Salzburg", "Austria", 74, 1),
    ("celtic", "Celtic", "Scotland", 74, 1),
    ("rangers", "Rangers", "Scotland", 73, 1),
    ("galatasaray", "Galatasaray", "Turkey", 77, 1),
    ("fenerbahce", "Fenerbahce", "Turkey", 76, 1),
    ("al_hilal", "Al Hilal", "Saudi Arabia", 78, 1),
    ("al_nassr", "Al Nassr", "Saudi Arabia", 77, 1),
    ("al_ittihad", "Al Ittihad", "Saudi Arabia", 75, 1),
    ("al_sadd", "Al Sadd", "Qatar", 68, 1),
    ("al_ain", "Al Ain", "UAE", 67, 1),
    ("flamengo", "Flamengo", "Brazil", 76, 1),
    ("palmeiras", "Palmeiras", "Brazil", 76, 1),
    ("santos", "Santos", "Brazil", 70, 1),
    ("sao_paulo", "São Paulo", "Brazil", 72, 1),
    ("river_plate", "River Plate", "Argentina", 75, 1),
    ("boca_juniors", "Boca Juniors", "Argentina", 75, 1),
    ("inter_miami", "Inter Miami", "USA", 70, 1),
    ("la_galaxy", "LA Galaxy", "USA", 68, 1),
    # ── Tier 2 ──
    ("leeds", "Leeds United", "England", 72, 2),
    ("sunderland", "Sunderland", "England", 68, 2),
    ("hamburg", "Hamburger SV", "Germany", 70, 2),
    ("schalke", "Schalke 04", "Germany", 69, 2),
    ("sampdoria", "Sampdoria", "Italy", 66, 2),
    ("espanyol", "Espanyol", "Spain", 67, 2),
    ("saint_etienne", "Saint-Etienne", "France", 65, 2),
    ("cruzeiro", "Cruzeiro", "Brazil", 60, 2),
    # ── Tier 3 ──
    ("portsmouth", "Portsmouth", "England", 60, 3),
    ("bolton", "Bolton Wanderers", "England", 58, 3),
    ("dynamo_dresden", "Dynamo Dresden", "Germany", 56, 3),
    ("vicenza", "Vicenza", "Italy", 54, 3),
    ("racing_santander", "Racing Santander", "Spain", 57, 3),
    # ── Tier 4 ──
    ("wrexham", "Wrexham", "England", 52, 4),
    ("notts_county", "Notts County", "England", 48, 4),
    ("rot_weiss_essen", "Rot-Weiss Essen", "Germany", 46, 4),
    ("pro_patria", "Pro Patria", "Italy", 42, 4),
    # ── Tier 5 ──
    ("dulwich_hamlet", "Dulwich Hamlet", "England", 35, 5),
    ("fc_st_pauli_ii", "FC St. Pauli II", "Germany", 33, 5),
    ("real_union", "Real Unión", "Spain", 30, 5),
]

# Youth academies (players leave them once they debut or turn 20)
_YOUTH_TABLE = [
    ("la_masia", "Barcelona Youth", "Spain", 70, 1),
    ("ajax_youth", "Ajax Youth", "Netherlands", 65, 2),
    ("benfica_youth", "Benfica Youth", "Portugal", 64, 2),
    ("clairefontaine", "Clairefontaine Academy", "France", 60, 3),
]

ALL_TEAMS: List[Team] = [Team(*row) for row in _CLUB_TABLE]
YOUTH_TEAMS: List[Team] = [Team(*row, is_youth=True) for row in _YOUTH_TABLE]

TEAMS_BY_KEY: Dict[str, Team] = {t.key: t for t in ALL_TEAMS + YOUTH_TEAMS}

TEAMS_BY_TIER: Dict[int, List[Team]] = {}
for _team in ALL_TEAMS:
    TEAMS_BY_TIER.setdefault(_team.league_tier, []).append(_team)


# Clubs with a track record of bringing young players through
DEVELOPMENT_CLUBS = {
    "Ajax", "Benfica", "FC Porto", "Sporting CP", "Borussia Dortmund",
    "RB Salzburg", "Monaco", "Olympique Lyonnais", "Athletic Bilbao",
    "Real Sociedad", "Santos", "São Paulo", "Flamengo", "River Plate",
    "Boca Juniors",
}


# ═══════════════════════════════════════════════════════════════
# RIVALRIES
# ═══════════════════════════════════════════════════════════════

RIVALRIES: List[Dict] = [
    {"name": "El Clásico", "teams": ["real_madrid", "fc_barcelona"]},
    {"name": "Madrid Derby", "teams": ["real_madrid", "atletico_madrid"]},
    {"name": "Manchester Derby", "teams": ["man_united", "man_city"]},
    {"name": "North West Derby", "teams": ["liverpool", "man_united"]},
    {"name": "North London Derby", "teams": ["arsenal", "tottenham"]},
    {"name": "Derby della Madonnina", "teams": ["ac_milan", "inter_milan"]},
    {"name": "Derby d'Italia", "teams": ["juventus", "inter_milan"]},
    {"name": "Der Klassiker", "teams": ["bayern_munich", "dortmund"]},
    {"name": "Le Classique", "teams": ["psg", "marseille"]},
    {"name": "Old Firm", "teams": ["celtic", "rangers"]},
    {"name": "Portuguese Big Three", "teams": ["benfica", "porto", "sporting_cp"]},
    {"name": "De Klassieker", "teams": ["ajax", "feyenoord"]},
    {"name": "Intercontinental Derby", "teams": ["galatasaray", "fenerbahce"]},
    {"name": "Superclásico", "teams": ["river_plate", "boca_juniors"]},
    {"name": "Riyadh Derby", "teams": ["al_hilal", "al_nassr"]},
]


def get_rival_teams(team_key: str) -> List[str]:
    """Return all rival team keys for a given team."""
    rivals = []
    for r in RIVALRIES:
        if team_key in r["teams"]:
            rivals.extend(k for k in r["teams"] if k != team_key)
    return sorted(set(rivals))


def is_rivalry(team_a: str, team_b: str) -> Optional[str]:
    """If the clubs are rivals, return the rivalry name. Otherwise None."""
    for r in RIVALRIES:
        if team_a in r["teams"] and team_b in r["teams"] and team_a != team_b:
            return r["name"]
    return None


def default_club_pool(include_youth: bool = True) -> List[Team]:
    """Fresh Team copies with empty ledgers."""
    source = ALL_TEAMS + (YOUTH_TEAMS if include_youth else [])
    return [Team.from_dict(t.to_dict()) for t in source]
