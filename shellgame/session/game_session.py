"""
Game Session - The single entry point for presentation and input.

A session composes the round state machine, shuffle engine and economy
manager. Collaborators talk to it in two directions only:

    Input layer   -> place_bet / set_bet / confirm_bet / select_cup /
                     request_new_game
    Session       -> EventChannel notifications, AudioService triggers

Round pipeline (timers in parentheses):

    BETTING --confirm--> SHOWING_COIN (coin display)
        --> SHUFFLING (one swap per interval, then a pause)
        --> GUESSING --select--> REVEALING (reveal delay)
        --> ROUND_RESOLVED --(next round delay)--> BETTING
                           \\-> GAME_OVER --new game--> BETTING

Guarantees:
- Commands that arrive in the wrong phase are ignored and return False.
  They are never queued: only one guess per round counts.
- Each visible mutation is followed by exactly one event, in order.
- Pending timers are cancelled on new game and on close(), so a timer
  never acts on a round that no longer exists.
- The coin position is never published while the cups are covering it.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable
import logging
import time
import uuid

from ..config import GameConfig
from ..engine_core.economy import EconomyManager
from ..engine_core.rng import RandomSource, draw_index, seeded_source
from ..engine_core.shuffle import ShuffleEngine, SwapEvent
from ..engine_core.state import CupSet, RoundState
from ..engine_core.state_machine import RoundPhase, RoundStateMachine, RoundTrigger
from .audio import AudioService, SilentAudioService
from .events import EventChannel, EventType
from .scheduler import ManualScheduler, Scheduler, TimerHandle

logger = logging.getLogger(__name__)

PROMPT_PLACE_BET = "Place your bet!"
PROMPT_GUESS = "Tap a cup to guess!"
PROMPT_GAME_OVER = "GAME OVER!"

# Phases in which the coin may be shown to the player
COIN_VISIBLE_PHASES = {
    RoundPhase.SHOWING_COIN,
    RoundPhase.REVEALING,
    RoundPhase.ROUND_RESOLVED,
    RoundPhase.GAME_OVER,
}


def result_prompt(won: bool, bet: int) -> str:
    """Message shown after a round. A win displays the total return."""
    if won:
        return f"YOU WON ${bet * 2}!"
    return f"YOU LOST ${bet}"


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of a session for collaborators that poll."""
    session_id: str
    phase: RoundPhase
    balance: int
    bet: int
    level: int
    cup_count: int
    round_number: int
    coin_position: int | None = None
    guess: int | None = None
    last_won: bool | None = None
    last_payout: int = 0
    slot_order: list[int] = field(default_factory=list)

    @property
    def is_game_over(self) -> bool:
        return self.phase == RoundPhase.GAME_OVER

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "phase": self.phase.value,
            "balance": self.balance,
            "bet": self.bet,
            "level": self.level,
            "cup_count": self.cup_count,
            "round_number": self.round_number,
            "coin_position": self.coin_position,
            "guess": self.guess,
            "last_won": self.last_won,
            "last_payout": self.last_payout,
            "slot_order": list(self.slot_order),
        }


class GameSession:
    """
    Orchestrates one player's game.

    Usage:
        session = GameSession(rng=random.Random(7))
        session.events.subscribe(hud.render)
        session.start()

        session.place_bet(+1)
        session.confirm_bet()
        session.scheduler.run_until_idle()   # coin display + shuffle
        session.select_cup(0)
    """

    def __init__(
        self,
        config: GameConfig | None = None,
        rng: RandomSource | None = None,
        scheduler: Scheduler | None = None,
        audio: AudioService | None = None,
        session_id: str | None = None,
    ):
        self.config = config or GameConfig()
        self.config.validate()

        self.session_id = session_id or str(uuid.uuid4())
        self.created_at = time.time()
        self.last_activity = self.created_at

        self.rng = rng if rng is not None else seeded_source()
        self.scheduler = scheduler if scheduler is not None else ManualScheduler()
        self.audio = audio if audio is not None else SilentAudioService()

        self.events = EventChannel()
        self.economy: EconomyManager = self.config.make_economy()
        self.shuffler = ShuffleEngine(self.rng)
        self.machine = RoundStateMachine()
        self.machine.listeners.append(self._on_transition)

        self.round: RoundState | None = None
        self.round_number = 0
        self.prompt = ""

        self._pending_swaps: list[SwapEvent] = []
        self._timer: TimerHandle | None = None
        self._timer_token = 0
        self._started = False
        self._closed = False

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @property
    def phase(self) -> RoundPhase:
        return self.machine.phase

    @property
    def is_active(self) -> bool:
        return self._started and not self._closed

    def start(self) -> bool:
        """
        Publish the initial table and open the first round for betting.

        Collaborators should subscribe before calling this.
        """
        if self._started or self._closed:
            return False
        self._started = True

        self._play("start_ambience")
        self.events.emit(EventType.BALANCE_CHANGED, balance=self.economy.balance)
        self.events.emit(EventType.LEVEL_CHANGED, level=self.economy.level)
        self.events.emit(EventType.BET_CHANGED, bet=self.economy.bet)
        self.events.emit(EventType.CUPS_CHANGED, cup_count=self.economy.cup_count)
        self.events.emit(
            EventType.PHASE_CHANGED,
            phase=self.phase.value,
            previous=None,
        )
        self._begin_round()
        logger.info("session %s started", self.session_id)
        return True

    def close(self) -> None:
        """Tear the session down. Pending timers are cancelled."""
        if self._closed:
            return
        self._cancel_timer()
        self._pending_swaps.clear()
        self._closed = True
        self._play("stop_all")
        logger.info("session %s closed", self.session_id)

    # =========================================================================
    # Commands (input layer -> session)
    # =========================================================================

    def place_bet(self, delta: int) -> bool:
        """Nudge the bet by ``delta`` coins (usually +1 or -1)."""
        return self._change_bet(lambda: self.economy.adjust_bet(delta))

    def set_bet(self, amount: int) -> bool:
        """Set the bet outright. Clamped to [1, balance]."""
        return self._change_bet(lambda: self.economy.set_bet(amount))

    def confirm_bet(self) -> bool:
        """
        Commit the bet and place the coin.

        The coin stays visible for ``coin_display_seconds``, then the
        shuffle begins.
        """
        if not self._accepting("confirm_bet") or not self.machine.can_fire(RoundTrigger.CONFIRM_BET):
            return False
        if not self.economy.confirm_bet():
            logger.debug("confirm_bet ignored: bet %d, balance %d",
                         self.economy.bet, self.economy.balance)
            return False

        self._touch()
        self._play("on_tap")

        self.round.stake = self.economy.bet
        self.round.track(draw_index(self.rng, self.round.cups.cup_count))
        self.machine.fire(RoundTrigger.CONFIRM_BET)

        self._schedule(self.config.coin_display_seconds, self._on_coin_display_elapsed)
        return True

    def select_cup(self, index: int) -> bool:
        """
        Guess which cup hides the coin.

        Only the first valid selection while guessing counts.
        """
        if not self._accepting("select_cup") or not self.machine.accepts_selection():
            return False
        if not self.round.cups.contains(index):
            logger.debug("select_cup ignored: no slot %d", index)
            return False

        self._touch()
        self._play("on_tap")

        self.round.guess = index
        self.round.won = index == self.round.coin_position
        self.machine.fire(RoundTrigger.SELECT_CUP)

        self._schedule(self.config.reveal_seconds, self._on_reveal_elapsed)
        return True

    def request_new_game(self) -> bool:
        """
        Start over after a game over.

        Ignored in every other phase, so repeated requests are harmless.
        """
        if not self._accepting("request_new_game") or not self.machine.can_fire(RoundTrigger.NEW_GAME):
            return False

        self._touch()
        self._play("on_tap")
        self._cancel_timer()
        self._pending_swaps.clear()

        before = (self.economy.balance, self.economy.level, self.economy.bet, self.economy.cup_count)
        self.economy.reset()
        self.round_number = 0

        balance, level, bet, cups = before
        if self.economy.balance != balance:
            self.events.emit(EventType.BALANCE_CHANGED, balance=self.economy.balance)
        if self.economy.level != level:
            self.events.emit(EventType.LEVEL_CHANGED, level=self.economy.level)
        if self.economy.bet != bet:
            self.events.emit(EventType.BET_CHANGED, bet=self.economy.bet)
        if self.economy.cup_count != cups:
            self.events.emit(EventType.CUPS_CHANGED, cup_count=self.economy.cup_count)

        self.machine.fire(RoundTrigger.NEW_GAME)
        logger.info("session %s: new game", self.session_id)
        self._begin_round()
        return True

    # =========================================================================
    # Queries
    # =========================================================================

    def snapshot(self) -> SessionSnapshot:
        current = self.round
        coin = None
        if current and self.phase in COIN_VISIBLE_PHASES:
            coin = current.coin_position

        return SessionSnapshot(
            session_id=self.session_id,
            phase=self.phase,
            balance=self.economy.balance,
            bet=self.economy.bet,
            level=self.economy.level,
            cup_count=self.economy.cup_count,
            round_number=self.round_number,
            coin_position=coin,
            guess=current.guess if current else None,
            last_won=current.won if current else None,
            last_payout=current.payout if current else 0,
            slot_order=list(current.cups.slot_order) if current else [],
        )

    # =========================================================================
    # Timed steps
    # =========================================================================

    def _on_coin_display_elapsed(self) -> None:
        result = self.shuffler.shuffle(
            self.round.cups.cup_count,
            self.round.coin_position,
            self.config.shuffle_steps,
        )
        self._pending_swaps = list(result.swaps)
        self.machine.fire(RoundTrigger.COIN_DISPLAY_ELAPSED)
        self._next_swap()

    def _next_swap(self) -> None:
        if not self._pending_swaps:
            self.machine.fire(RoundTrigger.SHUFFLE_COMPLETE)
            self._set_prompt(PROMPT_GUESS)
            return

        swap = self._pending_swaps.pop(0)
        self.round.cups.swap(swap.position_a, swap.position_b)
        self.round.track(swap.coin_after)

        self._play("on_shuffle_step")
        self.events.emit(
            EventType.SHUFFLE_STEP,
            step=swap.step,
            position_a=swap.position_a,
            position_b=swap.position_b,
        )
        # The last swap is followed by the same pause before guessing opens
        self._schedule(self.config.step_interval, self._next_swap)

    def _on_reveal_elapsed(self) -> None:
        won = bool(self.round.won)
        self.machine.fire(RoundTrigger.REVEAL_ELAPSED)

        payout = self.economy.resolve_round(won)
        self.round.payout = payout
        self.events.emit(EventType.BALANCE_CHANGED, balance=self.economy.balance)

        self._play("on_win" if won else "on_lose")
        self.events.emit(EventType.ROUND_RESULT, won=won, amount=payout)
        self._set_prompt(result_prompt(won, payout))

        if won:
            cups_added = self.economy.advance_level_if_won()
            self.events.emit(EventType.LEVEL_CHANGED, level=self.economy.level)
            if cups_added:
                self.events.emit(EventType.CUPS_CHANGED, cup_count=self.economy.cup_count)

        if self.economy.is_game_over():
            self.machine.fire(RoundTrigger.BALANCE_DEPLETED)
            self.events.emit(EventType.GAME_OVER, level=self.economy.level)
            self._set_prompt(PROMPT_GAME_OVER)
            logger.info("session %s: game over at level %d", self.session_id, self.economy.level)
        else:
            self._schedule(self.config.next_round_seconds, self._on_next_round)

    def _on_next_round(self) -> None:
        self.machine.fire(RoundTrigger.NEXT_ROUND)
        self._begin_round()

    # =========================================================================
    # Helpers
    # =========================================================================

    def _begin_round(self) -> None:
        """Fresh cups for a new round; the bet is re-bounded by the balance."""
        bet = self.economy.bet
        if self.economy.clamp_bet() != bet:
            self.events.emit(EventType.BET_CHANGED, bet=self.economy.bet)

        self.round_number += 1
        self.round = RoundState(
            round_number=self.round_number,
            cups=CupSet(cup_count=self.economy.cup_count),
        )
        self.events.emit(
            EventType.ROUND_STARTED,
            round_number=self.round_number,
            cup_count=self.economy.cup_count,
        )
        self._set_prompt(PROMPT_PLACE_BET)

    def _change_bet(self, apply: Callable[[], int]) -> bool:
        if not self._accepting("bet change") or not self.machine.accepts_bet_changes():
            return False
        if self.economy.balance <= 0:
            return False

        self._touch()
        self._play("on_tap")
        before = self.economy.bet
        if apply() != before:
            self.events.emit(EventType.BET_CHANGED, bet=self.economy.bet)
        return True

    def _on_transition(self, previous: RoundPhase, phase: RoundPhase, trigger: RoundTrigger) -> None:
        data: dict[str, Any] = {"phase": phase.value, "previous": previous.value}
        if phase == RoundPhase.SHOWING_COIN:
            data["coin_position"] = self.round.coin_position
        elif phase == RoundPhase.REVEALING:
            data["coin_position"] = self.round.coin_position
            data["guess"] = self.round.guess
            data["won"] = self.round.won
        elif phase == RoundPhase.ROUND_RESOLVED:
            data["won"] = self.round.won
        self.events.emit(EventType.PHASE_CHANGED, **data)

    def _set_prompt(self, message: str) -> None:
        if message != self.prompt:
            self.prompt = message
            self.events.emit(EventType.PROMPT_CHANGED, message=message)

    def _accepting(self, command: str) -> bool:
        if not self._started or self._closed:
            logger.debug("%s ignored: session %s not running", command, self.session_id)
            return False
        return True

    def _touch(self) -> None:
        self.last_activity = time.time()

    def _play(self, trigger: str) -> None:
        """Call an audio hook. Audio failures never reach game state."""
        try:
            getattr(self.audio, trigger)()
        except Exception:
            logger.warning("audio trigger %s failed", trigger, exc_info=True)

    def _schedule(self, delay: float, callback: Callable[[], None]) -> None:
        """Replace the pending timer with ``callback`` after ``delay``."""
        self._cancel_timer()
        self._timer_token += 1
        token = self._timer_token

        def fire():
            # A cancelled or superseded timer must not touch the new state
            if token != self._timer_token or self._closed:
                return
            self._timer = None
            callback()

        self._timer = self.scheduler.call_later(delay, fire)
        logger.debug("timer %d: %s in %.2fs", token, callback.__name__, delay)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            logger.debug("timer %d cancelled", self._timer_token)
            self._timer = None
        self._timer_token += 1
