"""
Tests for the economy manager.

Tests:
- Bet clamping
- Bet locking
- Payouts
- Level and difficulty progression
"""

import pytest

from ..engine_core.economy import EconomyManager


class TestSetBet:
    """Bets are always clamped to [1, balance]."""

    @pytest.mark.parametrize("amount", [-100, -1, 0, 1, 2, 3, 4, 10, 10**9])
    def test_bet_always_within_bounds(self, amount):
        economy = EconomyManager()
        bet = economy.set_bet(amount)

        assert 1 <= bet <= economy.balance
        assert economy.bet == bet

    def test_clamps_to_balance(self):
        """A bet above the balance becomes the balance."""
        economy = EconomyManager()
        assert economy.set_bet(10) == 3

    def test_clamps_to_one(self):
        economy = EconomyManager()
        economy.set_bet(3)
        assert economy.set_bet(0) == 1

    def test_adjust_bet(self):
        """Nudging moves by the delta and stops at the bounds."""
        economy = EconomyManager()
        assert economy.adjust_bet(+1) == 2
        assert economy.adjust_bet(+1) == 3
        assert economy.adjust_bet(+1) == 3
        assert economy.adjust_bet(-5) == 1

    def test_no_op_when_balance_empty(self):
        economy = EconomyManager(initial_balance=1)
        economy.confirm_bet()
        economy.resolve_round(won=False)

        assert economy.balance == 0
        assert economy.set_bet(5) == 1

    def test_no_op_while_locked(self):
        """A confirmed bet cannot change mid-round."""
        economy = EconomyManager()
        economy.set_bet(2)
        assert economy.confirm_bet()

        assert economy.set_bet(1) == 2
        assert economy.adjust_bet(+1) == 2


class TestConfirmBet:
    """Locking the stake."""

    def test_confirm_locks(self):
        economy = EconomyManager()
        assert economy.confirm_bet()
        assert economy.is_locked

    def test_cannot_confirm_twice(self):
        economy = EconomyManager()
        economy.confirm_bet()
        assert not economy.confirm_bet()

    def test_cannot_confirm_bet_above_balance(self):
        """The bet <= balance invariant is checked at confirmation."""
        economy = EconomyManager()
        economy.bets.bet = 5
        assert not economy.confirm_bet()


class TestResolveRound:
    """Payout rule."""

    def test_win_adds_bet(self):
        economy = EconomyManager()
        economy.set_bet(2)
        economy.confirm_bet()

        assert economy.resolve_round(won=True) == 2
        assert economy.balance == 5
        assert not economy.is_locked

    def test_loss_removes_bet(self):
        economy = EconomyManager()
        economy.set_bet(2)
        economy.confirm_bet()

        assert economy.resolve_round(won=False) == 2
        assert economy.balance == 1

    def test_loss_of_everything_reaches_zero(self):
        """Balance can reach exactly zero, never below."""
        economy = EconomyManager()
        economy.set_bet(3)
        economy.confirm_bet()
        economy.resolve_round(won=False)

        assert economy.balance == 0
        assert economy.is_game_over()

    def test_not_game_over_with_coins_left(self):
        economy = EconomyManager()
        assert not economy.is_game_over()


class TestProgression:
    """Difficulty grows every three levels."""

    def test_cup_added_at_level_three_once(self):
        economy = EconomyManager()

        assert not economy.advance_level_if_won()  # level 2
        assert economy.cup_count == 3
        assert economy.advance_level_if_won()  # level 3
        assert economy.level == 3
        assert economy.cup_count == 4

        assert not economy.advance_level_if_won()  # level 4
        assert not economy.advance_level_if_won()  # level 5
        assert economy.cup_count == 4
        assert economy.advance_level_if_won()  # level 6
        assert economy.cup_count == 5

    def test_cups_capped_at_six(self):
        economy = EconomyManager()
        for _ in range(30):
            economy.advance_level_if_won()

        assert economy.level == 31
        assert economy.cup_count == 6

    def test_reset_restores_initial_state(self):
        economy = EconomyManager()
        economy.set_bet(3)
        economy.confirm_bet()
        economy.resolve_round(won=True)
        for _ in range(5):
            economy.advance_level_if_won()

        economy.reset()

        assert (economy.bet, economy.balance, economy.level, economy.cup_count) == (1, 3, 1, 3)
        assert not economy.is_locked
