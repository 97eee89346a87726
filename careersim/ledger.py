"""
Career Simulation Club Ledgers
==============================

Budget bookkeeping for clubs that sign the athlete.  Negotiation reads a
club's remaining budgets; only an accepted offer is committed back.
commit() rechecks the remaining figures at write time, so two offers in
the same window can never overdraw one club.

A ledger is seeded from the club profile's derived budgets the first
time it is touched and then written through to the Team's persisted
ledger fields.

Usage:
    from careersim.ledger import LedgerBook

    book = LedgerBook()
    ledger = book.for_team(team)
    commitment = ledger.commit(fee=25_000_000, weekly_wage=90_000)
    if commitment is None:
        ...  # club can no longer afford it
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from careersim.athlete import Team
from careersim.club_profile import get_club_profile
from careersim.config import TransferConfig

_log = logging.getLogger("careersim.ledger")


@dataclass
class Commitment:
    """An accepted spend against one club's budgets."""
    team_key: str
    fee: int
    weekly_wage: int


class ClubLedger:
    """Transfer and weekly wage budgets for one club."""

    def __init__(self, team: Team, config: Optional[TransferConfig] = None):
        self.team = team
        if team.transfer_budget is None or team.wage_budget_weekly is None:
            profile = get_club_profile(team, config)
            if team.transfer_budget is None:
                team.transfer_budget = profile.transfer_budget
                team.remaining_transfer_budget = profile.remaining_transfer_budget
            if team.wage_budget_weekly is None:
                team.wage_budget_weekly = profile.wage_budget_weekly
                team.remaining_wage_budget_weekly = profile.remaining_wage_budget_weekly
        if team.remaining_transfer_budget is None:
            team.remaining_transfer_budget = team.transfer_budget
        if team.remaining_wage_budget_weekly is None:
            team.remaining_wage_budget_weekly = team.wage_budget_weekly

    @property
    def remaining_transfer(self) -> int:
        return self.team.remaining_transfer_budget

    @property
    def remaining_wage(self) -> int:
        return self.team.remaining_wage_budget_weekly

    def can_afford(self, fee: int, weekly_wage: int) -> bool:
        return fee <= self.remaining_transfer and weekly_wage <= self.remaining_wage

    def commit(self, fee: int, weekly_wage: int,
               fee_slack: float = 1.0) -> Optional[Commitment]:
        """
        Deduct an accepted deal.  Returns None (nothing written) when the
        club can no longer afford it.  fee_slack allows a fee slightly above
        the remaining transfer budget; the remaining figure floors at zero.
        """
        if fee < 0 or weekly_wage < 0:
            raise ValueError(f"Negative commitment for {self.team.key}: fee={fee}, wage={weekly_wage}")
        if fee > self.remaining_transfer * fee_slack or weekly_wage > self.remaining_wage:
            _log.debug(f"{self.team.name} cannot commit fee {fee:,} / wage {weekly_wage:,}: "
                       f"remaining {self.remaining_transfer:,} / {self.remaining_wage:,}")
            return None
        self.team.remaining_transfer_budget = max(0, self.remaining_transfer - fee)
        self.team.remaining_wage_budget_weekly = self.remaining_wage - weekly_wage
        return Commitment(team_key=self.team.key, fee=fee, weekly_wage=weekly_wage)

    def adjust_wage(self, old_wage: int, new_wage: int) -> None:
        """Swap an existing weekly wage for a new one (contract renewal)."""
        self.team.remaining_wage_budget_weekly = min(
            self.team.wage_budget_weekly, max(0, self.remaining_wage + old_wage - new_wage))

    def release(self, commitment: Commitment) -> None:
        """Give a commitment's money back (deal collapsed or player left)."""
        self.team.remaining_transfer_budget = min(
            self.team.transfer_budget, self.remaining_transfer + commitment.fee)
        self.team.remaining_wage_budget_weekly = min(
            self.team.wage_budget_weekly, self.remaining_wage + commitment.weekly_wage)

    def reset(self) -> None:
        """Start of a new budget window."""
        self.team.remaining_transfer_budget = self.team.transfer_budget
        self.team.remaining_wage_budget_weekly = self.team.wage_budget_weekly


class LedgerBook:
    """One ledger per club key. The single writer for club budgets in a season tick."""

    def __init__(self):
        self._ledgers: Dict[str, ClubLedger] = {}

    def for_team(self, team: Team, config: Optional[TransferConfig] = None) -> ClubLedger:
        """The club's ledger, seeded from its profile under config on first use."""
        ledger = self._ledgers.get(team.key)
        if ledger is None or ledger.team is not team:
            ledger = ClubLedger(team, config)
            self._ledgers[team.key] = ledger
        return ledger

    def reset_all(self) -> None:
        for ledger in self._ledgers.values():
            ledger.reset()

    def __contains__(self, team_key: str) -> bool:
        return team_key in self._ledgers

    def __len__(self) -> int:
        return len(self._ledgers)
