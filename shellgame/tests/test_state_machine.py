"""
Tests for the round state machine.

Tests:
- Every listed transition
- Every unlisted (phase, trigger) pair is a no-op
- Listener notification
"""

import itertools

import pytest

from ..engine_core.state_machine import (
    TRANSITIONS,
    RoundPhase,
    RoundStateMachine,
    RoundTrigger,
    legal_triggers,
    successors,
)


class TestTransitions:
    """The transition table."""

    @pytest.mark.parametrize("source,trigger", list(TRANSITIONS))
    def test_listed_transition(self, source, trigger):
        """Each listed trigger moves to its target."""
        machine = RoundStateMachine(phase=source)

        assert machine.fire(trigger)
        assert machine.phase == TRANSITIONS[(source, trigger)]

    def test_unlisted_pairs_leave_phase_unchanged(self):
        """Illegal triggers are silently ignored."""
        for phase, trigger in itertools.product(RoundPhase, RoundTrigger):
            if (phase, trigger) in TRANSITIONS:
                continue
            machine = RoundStateMachine(phase=phase)

            assert not machine.fire(trigger)
            assert machine.phase == phase

    def test_full_round(self):
        """A won round returns to betting."""
        machine = RoundStateMachine()
        for trigger in [
            RoundTrigger.CONFIRM_BET,
            RoundTrigger.COIN_DISPLAY_ELAPSED,
            RoundTrigger.SHUFFLE_COMPLETE,
            RoundTrigger.SELECT_CUP,
            RoundTrigger.REVEAL_ELAPSED,
            RoundTrigger.NEXT_ROUND,
        ]:
            assert machine.fire(trigger)
        assert machine.phase == RoundPhase.BETTING

    def test_select_cup_during_shuffling(self):
        """A guess while shuffling is rejected, not queued."""
        machine = RoundStateMachine(phase=RoundPhase.SHUFFLING)

        assert not machine.fire(RoundTrigger.SELECT_CUP)
        assert machine.fire(RoundTrigger.SHUFFLE_COMPLETE)
        assert machine.phase == RoundPhase.GUESSING

    def test_every_phase_has_successors(self):
        """No phase is a dead end."""
        for phase in RoundPhase:
            assert successors(phase), phase
            assert legal_triggers(phase), phase

    def test_round_resolved_branches(self):
        """Resolution either continues or ends the game."""
        assert successors(RoundPhase.ROUND_RESOLVED) == {
            RoundPhase.BETTING,
            RoundPhase.GAME_OVER,
        }


class TestInputGates:
    """Which phases accept which inputs."""

    def test_selection_only_while_guessing(self):
        for phase in RoundPhase:
            machine = RoundStateMachine(phase=phase)
            assert machine.accepts_selection() == (phase == RoundPhase.GUESSING)

    def test_bet_changes_only_while_betting(self):
        for phase in RoundPhase:
            machine = RoundStateMachine(phase=phase)
            assert machine.accepts_bet_changes() == (phase == RoundPhase.BETTING)


class TestListeners:
    """Transition listeners."""

    def test_listener_called_once_per_transition(self):
        calls = []
        machine = RoundStateMachine()
        machine.listeners.append(lambda prev, new, trig: calls.append((prev, new, trig)))

        machine.fire(RoundTrigger.CONFIRM_BET)
        machine.fire(RoundTrigger.SELECT_CUP)  # ignored

        assert calls == [
            (RoundPhase.BETTING, RoundPhase.SHOWING_COIN, RoundTrigger.CONFIRM_BET),
        ]
