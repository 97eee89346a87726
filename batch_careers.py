#!/usr/bin/env python3
"""Batch career simulation for checking progression and market distributions."""

import sys
import logging

import pandas as pd

from careersim import Athlete, Career, Position, SeasonStats, SquadStatus, default_club_pool
from careersim.rng import RandomSource


_MATCHES_BY_STATUS = {
    SquadStatus.CAPTAIN: (34, 44),
    SquadStatus.KEY_PLAYER: (28, 42),
    SquadStatus.ROTATION: (16, 30),
    SquadStatus.PROSPECT: (6, 18),
    SquadStatus.RESERVE: (2, 12),
    SquadStatus.SURPLUS: (0, 6),
}


def template_athlete(team, name="Batch Striker", age=18):
    attrs = {
        "pace": 72, "shooting": 66, "passing": 58, "dribbling": 64, "defending": 30,
        "physical": 60, "flair": 62, "leadership": 45, "fitness": 72, "vision": 55,
        "composure": 56, "aggression": 50, "positioning": 63, "work_rate": 65,
        "stamina": 70, "strength": 60, "agility": 70, "jumping": 58, "crossing": 50,
        "long_shots": 58, "curve": 52, "balance": 66, "sprint_speed": 74,
        "ball_control": 64, "acceleration": 75, "shot_power": 64, "heading": 56,
        "finishing": 67, "handling": 20, "reflexes": 20, "diving": 20,
        "interceptions": 28,
    }
    return Athlete(
        name=name,
        age=age,
        position=Position.ST,
        attributes=attrs,
        potential=86,
        team=team,
        squad_status=SquadStatus.PROSPECT,
    )


def synthetic_season(athlete, rng):
    """Season numbers a match simulator might produce for this status and level."""
    lo, hi = _MATCHES_BY_STATUS.get(athlete.squad_status, (10, 25))
    if athlete.injury is not None:
        hi = max(lo, hi - 10)
    matches = rng.rand(lo, hi)
    strength = max(0.0, (athlete.overall - 55) / 40)
    goals = int(rng.poisson(matches * 0.45 * strength)) if matches else 0
    assists = int(rng.poisson(matches * 0.2 * strength)) if matches else 0
    rating = round(rng.gauss_clamped(6.2 + strength * 1.5, 0.4, 5.0, 9.5), 2)
    reds = 1 if rng.roll(0.08) else 0
    return SeasonStats(matches=matches, goals=goals, assists=assists,
                       average_rating=rating, red_cards=reds)


def run_career(seed, max_seasons=25):
    rows = []
    clubs = default_club_pool()
    academy = next(t for t in clubs if t.key == "ajax_youth")
    career = Career(template_athlete(academy), clubs=clubs, seed=seed, auto_invest=True)
    season_rng = RandomSource(seed=seed + 100_000)
    for _ in range(max_seasons):
        if career.finished:
            break
        athlete = career.athlete
        result = career.advance(synthetic_season(athlete, season_rng))
        accepted = None
        if result.offers and season_rng.roll(0.5):
            outcome = career.accept_offer(result.offers[0])
            if outcome.success:
                accepted = outcome.offer.team.name
        rows.append({
            "seed": seed,
            "season": result.season_year,
            "age": result.age,
            "overall": result.overall_after,
            "overall_change": result.overall_after - result.overall_before,
            "status": result.squad_status_after.value,
            "offers": len(result.offers),
            "loan_offers": sum(1 for o in result.offers if o.kind == "loan"),
            "injured": result.new_injury is not None,
            "traits_gained": len(result.traits_gained),
            "reputation": result.reputation,
            "wage": athlete.wage,
            "moved_to": accepted,
            "retired": result.retired,
        })
    return rows


def run_batch(num_careers=100):
    rows = []
    for seed in range(num_careers):
        try:
            rows.extend(run_career(seed))
        except Exception:
            logging.exception(f"Career {seed} failed")
            continue

    df = pd.DataFrame(rows)
    if df.empty:
        print("No seasons simulated")
        return df

    print(f"\n{'='*60}")
    print(f"BATCH RESULTS ({num_careers} careers, {len(df)} seasons)")
    print(f"{'='*60}")

    print("\nOVERALL BY AGE")
    by_age = df.groupby("age")["overall"].describe()[["count", "mean", "std", "min", "max"]]
    print(by_age.round(1).to_string())

    print("\nOFFERS PER SEASON")
    print(df["offers"].describe().round(2).to_string())
    print(f"{'Seasons with a loan offer':<35} {(df['loan_offers'] > 0).mean() * 100:>7.1f}%")

    print(f"\n{'Injury rate (per season)':<35} {df['injured'].mean() * 100:>7.1f}%")
    print(f"{'Trait gains per season':<35} {df['traits_gained'].mean():>8.2f}")
    moves = df["moved_to"].notna().sum()
    print(f"{'Moves per career':<35} {moves / num_careers:>8.2f}")

    retired = df[df["retired"]]
    if not retired.empty:
        print(f"\n{'Retirement age (mean)':<35} {retired['age'].mean():>8.1f}")
        print(f"{'Retirement age (min/max)':<35} {retired['age'].min():>4}/{retired['age'].max():<4}")

    print("\nSQUAD STATUS MIX")
    print((df["status"].value_counts(normalize=True) * 100).round(1).to_string())
    return df


if __name__ == "__main__":
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    num = int(sys.argv[1]) if len(sys.argv) > 1 else 100
    print(f"Running {num} career batch simulation...")
    run_batch(num)
