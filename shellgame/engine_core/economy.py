"""
Economy Manager - Balance, bets, payouts and difficulty.

Rules:
- The bet is always clamped to [1, balance]. Out of range requests are
  clamped, never rejected with an error.
- Once confirmed, the bet is locked until the round is resolved.
- A win returns the stake plus the bet (displayed as 2x bet), so the
  balance grows by ``bet``. A loss forfeits the stake.
- Every win advances the level. Every ``level_step`` levels the table
  gains one cup, up to ``max_cups``. Losses never advance.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

from .state import BetState, ProgressionState

logger = logging.getLogger(__name__)

INITIAL_BALANCE = 3
INITIAL_BET = 1
INITIAL_LEVEL = 1
INITIAL_CUPS = 3
MAX_CUPS = 6
LEVEL_STEP = 3


@dataclass
class EconomyManager:
    """
    Owns BetState and ProgressionState for a session.

    Phase legality is not checked here; the session only forwards
    requests that are legal in the current phase.
    """
    initial_balance: int = INITIAL_BALANCE
    initial_bet: int = INITIAL_BET
    initial_level: int = INITIAL_LEVEL
    initial_cups: int = INITIAL_CUPS
    max_cups: int = MAX_CUPS
    level_step: int = LEVEL_STEP

    bets: BetState = field(init=False)
    progression: ProgressionState = field(init=False)

    def __post_init__(self):
        self.reset()

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def balance(self) -> int:
        return self.bets.balance

    @property
    def bet(self) -> int:
        return self.bets.bet

    @property
    def level(self) -> int:
        return self.progression.level

    @property
    def cup_count(self) -> int:
        return self.progression.cup_count

    @property
    def is_locked(self) -> bool:
        return self.bets.locked

    # =========================================================================
    # Betting
    # =========================================================================

    def set_bet(self, amount: int) -> int:
        """
        Set the bet, clamped to [1, balance].

        No-op while the bet is locked or the balance is empty.
        Returns the resulting bet.
        """
        if self.bets.locked or self.bets.balance <= 0:
            return self.bets.bet

        self.bets.bet = max(1, min(amount, self.bets.balance))
        return self.bets.bet

    def adjust_bet(self, delta: int) -> int:
        """Move the bet by ``delta`` coins, clamped like set_bet."""
        return self.set_bet(self.bets.bet + delta)

    def clamp_bet(self) -> int:
        """Re-apply the [1, balance] bound after the balance changed."""
        return self.set_bet(self.bets.bet)

    def confirm_bet(self) -> bool:
        """
        Lock in the current bet for the round.

        Returns False if there is nothing valid to commit.
        """
        if self.bets.locked:
            return False
        if self.bets.balance <= 0 or not 1 <= self.bets.bet <= self.bets.balance:
            return False

        self.bets.locked = True
        return True

    # =========================================================================
    # Resolution
    # =========================================================================

    def resolve_round(self, won: bool) -> int:
        """
        Apply the payout rule to the locked bet and unlock it.

        Returns the amount won or lost (always the bet).
        """
        amount = self.bets.bet
        if won:
            self.bets.balance += amount
        else:
            # bet <= balance while locked, so this only ever reaches 0
            self.bets.balance = max(0, self.bets.balance - amount)

        self.bets.locked = False
        logger.info(
            "round %s: %d coin(s), balance now %d",
            "won" if won else "lost", amount, self.bets.balance,
        )
        return amount

    def advance_level_if_won(self) -> bool:
        """
        Advance one level after a win.

        Returns True if the table gained a cup.
        """
        self.progression.level += 1
        if (
            self.progression.level % self.level_step == 0
            and self.progression.cup_count < self.max_cups
        ):
            self.progression.cup_count += 1
            logger.info(
                "level %d: difficulty raised to %d cups",
                self.progression.level, self.progression.cup_count,
            )
            return True
        return False

    def is_game_over(self) -> bool:
        return self.bets.balance <= 0

    def reset(self) -> None:
        """Restore initial balance, bet, level and cup count."""
        self.bets = BetState(bet=self.initial_bet, balance=self.initial_balance)
        self.progression = ProgressionState(
            level=self.initial_level,
            cup_count=self.initial_cups,
        )
