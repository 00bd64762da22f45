"""
Round State Machine - Lifecycle of a single round.

    BETTING -> SHOWING_COIN -> SHUFFLING -> GUESSING -> REVEALING
        -> ROUND_RESOLVED -> BETTING (next round)
                          -> GAME_OVER -> BETTING (new game)

The transition table is total: every (phase, trigger) pair not listed
is illegal, and firing an illegal trigger leaves the phase unchanged.
Illegal triggers are expected (taps arriving mid-animation), so they
are reported as a False return rather than raised.

The machine knows nothing about balances or cups. Guards such as
"balance > 0" are decided by the session, which then fires the
matching trigger.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable
import logging

logger = logging.getLogger(__name__)


class RoundPhase(Enum):
    """Phases of a round, plus the session-terminal GAME_OVER."""
    BETTING = "betting"
    SHOWING_COIN = "showing_coin"
    SHUFFLING = "shuffling"
    GUESSING = "guessing"
    REVEALING = "revealing"
    ROUND_RESOLVED = "round_resolved"
    GAME_OVER = "game_over"


class RoundTrigger(Enum):
    """Events that can move the machine."""
    CONFIRM_BET = "confirm_bet"
    COIN_DISPLAY_ELAPSED = "coin_display_elapsed"
    SHUFFLE_COMPLETE = "shuffle_complete"
    SELECT_CUP = "select_cup"
    REVEAL_ELAPSED = "reveal_elapsed"
    NEXT_ROUND = "next_round"  # guard: balance > 0
    BALANCE_DEPLETED = "balance_depleted"  # guard: balance <= 0
    NEW_GAME = "new_game"


TRANSITIONS: dict[tuple[RoundPhase, RoundTrigger], RoundPhase] = {
    (RoundPhase.BETTING, RoundTrigger.CONFIRM_BET): RoundPhase.SHOWING_COIN,
    (RoundPhase.SHOWING_COIN, RoundTrigger.COIN_DISPLAY_ELAPSED): RoundPhase.SHUFFLING,
    (RoundPhase.SHUFFLING, RoundTrigger.SHUFFLE_COMPLETE): RoundPhase.GUESSING,
    (RoundPhase.GUESSING, RoundTrigger.SELECT_CUP): RoundPhase.REVEALING,
    (RoundPhase.REVEALING, RoundTrigger.REVEAL_ELAPSED): RoundPhase.ROUND_RESOLVED,
    (RoundPhase.ROUND_RESOLVED, RoundTrigger.NEXT_ROUND): RoundPhase.BETTING,
    (RoundPhase.ROUND_RESOLVED, RoundTrigger.BALANCE_DEPLETED): RoundPhase.GAME_OVER,
    (RoundPhase.GAME_OVER, RoundTrigger.NEW_GAME): RoundPhase.BETTING,
}


def legal_triggers(phase: RoundPhase) -> list[RoundTrigger]:
    """All triggers that move the machine out of ``phase``."""
    return [trigger for (source, trigger) in TRANSITIONS if source == phase]


def successors(phase: RoundPhase) -> set[RoundPhase]:
    """All phases reachable from ``phase`` in one transition."""
    return {target for (source, _), target in TRANSITIONS.items() if source == phase}


# (previous phase, new phase, trigger)
TransitionListener = Callable[[RoundPhase, RoundPhase, RoundTrigger], None]


@dataclass
class RoundStateMachine:
    """
    Holds the current phase and applies the transition table.

    Usage:
        machine = RoundStateMachine()
        machine.fire(RoundTrigger.CONFIRM_BET)   # True
        machine.fire(RoundTrigger.SELECT_CUP)    # False, still SHOWING_COIN
    """
    phase: RoundPhase = RoundPhase.BETTING
    listeners: list[TransitionListener] = field(default_factory=list)

    def can_fire(self, trigger: RoundTrigger) -> bool:
        return (self.phase, trigger) in TRANSITIONS

    def fire(self, trigger: RoundTrigger) -> bool:
        """
        Apply ``trigger`` if it is legal in the current phase.

        Returns True if the phase changed. Illegal triggers are no-ops.
        """
        target = TRANSITIONS.get((self.phase, trigger))
        if target is None:
            logger.debug("ignored %s in %s", trigger.value, self.phase.value)
            return False

        previous = self.phase
        self.phase = target
        logger.debug("%s --%s--> %s", previous.value, trigger.value, target.value)

        for listener in self.listeners:
            listener(previous, target, trigger)
        return True

    def accepts_selection(self) -> bool:
        """Cup selection is only meaningful while guessing."""
        return self.phase == RoundPhase.GUESSING

    def accepts_bet_changes(self) -> bool:
        return self.phase == RoundPhase.BETTING

    @property
    def is_game_over(self) -> bool:
        return self.phase == RoundPhase.GAME_OVER
