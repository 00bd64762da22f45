"""
Tests for the shuffle engine.

Tests:
- Coin tracking against an independent swap simulation
- Slot identity permutation
- Preconditions and RNG failures
- Determinism
"""

import random

import pytest

from ..engine_core.errors import PreconditionViolation
from ..engine_core.rng import draw_index
from ..engine_core.shuffle import ShuffleEngine, apply_swap, shuffle
from .conftest import ScriptedRandom


def simulate(coin, pairs):
    """Reference coin tracking, written independently of the engine."""
    path = [coin]
    for a, b in pairs:
        if coin in (a, b):
            coin = b if coin == a else a
        path.append(coin)
    return path


class TestCoinTracking:
    """The tracked coin always follows its cup."""

    def test_matches_reference_simulation(self):
        """Random shuffles agree with a manual apply-swap simulation."""
        for seed in range(300):
            rng = random.Random(seed)
            cup_count = rng.randint(2, 6)
            coin = rng.randrange(cup_count)
            steps = rng.randint(0, 20)

            result = ShuffleEngine(random.Random(seed + 10_000)).shuffle(cup_count, coin, steps)
            pairs = [s.pair for s in result.swaps]

            assert len(result.swaps) == steps
            assert result.coin_path == simulate(coin, pairs)
            assert result.final_coin_position == simulate(coin, pairs)[-1]

    def test_forced_pairs_path(self):
        """A coin only moves when its position is part of the swap."""
        engine = ShuffleEngine(ScriptedRandom([]))
        result = engine.replay(4, 2, [(0, 2), (2, 3), (1, 3)])

        assert result.coin_path == [2, 0, 0, 0]
        assert [s.moved_coin for s in result.swaps] == [True, False, False]
        assert result.final_coin_position == 0

    def test_forced_pairs_coin_returns_to_swapped_slot(self):
        """Coin moved out by one swap and on by a later one."""
        engine = ShuffleEngine(ScriptedRandom([]))
        result = engine.replay(4, 2, [(0, 2), (2, 3), (0, 1)])

        assert result.coin_path == [2, 0, 0, 1]
        assert result.final_coin_position == 1

    def test_apply_swap(self):
        """Both directions of a swap and the bystander case."""
        assert apply_swap(0, 0, 1) == 1
        assert apply_swap(1, 0, 1) == 0
        assert apply_swap(2, 0, 1) == 2

    def test_every_pair_is_distinct_and_in_range(self):
        """Pairs never repeat a slot and never leave the table."""
        result = shuffle(3, 0, 200, random.Random(5))
        for swap in result.swaps:
            assert swap.position_a != swap.position_b
            assert 0 <= swap.position_a < 3
            assert 0 <= swap.position_b < 3

    def test_resamples_equal_indices(self):
        """An equal second draw is redrawn, not used."""
        rng = ScriptedRandom([1, 1, 1, 2])
        engine = ShuffleEngine(rng)

        assert engine.pick_pair(3) == (1, 2)
        assert rng.calls == 4


class TestSlotIdentity:
    """The identity permutation follows the same swaps."""

    def test_coin_stays_under_its_cup(self):
        """The cup now at the final coin position is the one the coin started under."""
        for seed in range(100):
            rng = random.Random(seed)
            cup_count = rng.randint(2, 6)
            coin = rng.randrange(cup_count)
            result = ShuffleEngine(rng).shuffle(cup_count, coin, 8)

            assert sorted(result.slot_order) == list(range(cup_count))
            assert result.slot_order[result.final_coin_position] == coin

    def test_replay_slot_order(self):
        """Slot order after forced swaps."""
        result = ShuffleEngine(ScriptedRandom([])).replay(3, 0, [(0, 1), (1, 2)])
        assert result.slot_order == [1, 2, 0]


class TestPreconditions:
    """Impossible shuffles fail fast."""

    @pytest.mark.parametrize("cup_count", [0, 1])
    def test_too_few_cups(self, cup_count):
        """Fewer than two cups cannot be shuffled."""
        with pytest.raises(PreconditionViolation):
            ShuffleEngine(random.Random(0)).shuffle(cup_count, 0, 8)

    def test_negative_steps(self):
        """Negative step counts are rejected."""
        with pytest.raises(PreconditionViolation):
            ShuffleEngine(random.Random(0)).shuffle(3, 0, -1)

    def test_coin_out_of_range(self):
        """The coin must sit on the table."""
        with pytest.raises(PreconditionViolation):
            ShuffleEngine(random.Random(0)).shuffle(3, 3, 1)

    def test_zero_steps_is_identity(self):
        """Zero steps returns the input and never touches the RNG."""
        rng = ScriptedRandom([])
        result = ShuffleEngine(rng).shuffle(3, 2, 0)

        assert result.final_coin_position == 2
        assert result.swaps == []
        assert result.slot_order == [0, 1, 2]
        assert rng.calls == 0

    def test_replay_rejects_bad_pair(self):
        """Replayed pairs must be distinct slots on the table."""
        engine = ShuffleEngine(ScriptedRandom([]))
        with pytest.raises(PreconditionViolation):
            engine.replay(3, 0, [(1, 1)])
        with pytest.raises(PreconditionViolation):
            engine.replay(3, 0, [(0, 3)])


class TestRNGFailures:
    """A failing RNG is fatal."""

    def test_rng_raising(self):
        """An exception from the RNG becomes a precondition violation."""
        with pytest.raises(PreconditionViolation):
            ShuffleEngine(ScriptedRandom([0])).shuffle(3, 0, 1)

    def test_rng_out_of_range(self):
        """Values outside the requested range are rejected."""
        with pytest.raises(PreconditionViolation):
            ShuffleEngine(ScriptedRandom([7, 1])).shuffle(3, 0, 1)

    @pytest.mark.parametrize("value", [True, 1.0, "1"])
    def test_rng_non_integer(self, value):
        """Only plain ints count as slot indices."""
        with pytest.raises(PreconditionViolation):
            draw_index(ScriptedRandom([value]), 3)

    def test_rng_stuck_on_one_value(self):
        """A constant RNG cannot loop forever."""

        class Stuck:
            def randrange(self, stop):
                return 0

        engine = ShuffleEngine(Stuck(), max_resamples=50)
        with pytest.raises(PreconditionViolation):
            engine.shuffle(3, 0, 1)


class TestDeterminism:
    """Same seed, same shuffle."""

    def test_same_seed_same_sequence(self):
        first = shuffle(5, 3, 8, random.Random(99))
        second = shuffle(5, 3, 8, random.Random(99))

        assert first.swaps == second.swaps
        assert first.final_coin_position == second.final_coin_position
        assert first.slot_order == second.slot_order
