"""
Shuffle Engine - Randomized pairwise cup swaps with coin tracking.

The engine is purely logical and instantaneous. It produces an ordered
list of swap events that the presentation layer animates on its own
clock; the engine never waits on animation.

Invariants:
- Swaps are applied strictly in order. Each swap, including the coin
  tracking update, is fully applied before the next pair is drawn.
- A coin at A in an A<->B swap moves to B and vice versa. A coin at any
  other position is unaffected.
- Given the same seeded RNG, the same sequence is produced.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable
import logging

from .errors import PreconditionViolation
from .rng import RandomSource, draw_index
from .state import CupSet

logger = logging.getLogger(__name__)

# Steps per shuffle in the reference game
DEFAULT_SHUFFLE_STEPS = 8

# Upper bound on redraws when the RNG keeps returning the same slot
MAX_RESAMPLES = 1000


@dataclass(frozen=True)
class SwapEvent:
    """One step of a shuffle: the cups at two positions trade places."""
    step: int
    position_a: int
    position_b: int

    # Tracked coin position before and after this swap
    coin_before: int
    coin_after: int

    @property
    def pair(self) -> tuple[int, int]:
        return (self.position_a, self.position_b)

    @property
    def moved_coin(self) -> bool:
        return self.coin_before != self.coin_after


@dataclass
class ShuffleResult:
    """
    Result of a complete shuffle.

    ``slot_order[position]`` names the physical cup that ended up at
    ``position``. Game logic only depends on ``final_coin_position``.
    """
    cup_count: int
    initial_coin_position: int
    final_coin_position: int
    swaps: list[SwapEvent] = field(default_factory=list)
    slot_order: list[int] = field(default_factory=list)

    @property
    def coin_path(self) -> list[int]:
        """Coin position after placement and after every swap."""
        return [self.initial_coin_position] + [s.coin_after for s in self.swaps]


def apply_swap(coin_position: int, position_a: int, position_b: int) -> int:
    """Return where the coin is after the cups at A and B trade places."""
    if coin_position == position_a:
        return position_b
    if coin_position == position_b:
        return position_a
    return coin_position


def _check_preconditions(cup_count: int, coin_position: int, steps: int) -> None:
    if cup_count < 2:
        raise PreconditionViolation(f"Cannot shuffle {cup_count} cup(s): need at least 2")
    if steps < 0:
        raise PreconditionViolation(f"Shuffle steps must be >= 0, got {steps}")
    if not 0 <= coin_position < cup_count:
        raise PreconditionViolation(
            f"Coin position {coin_position} outside [0, {cup_count})"
        )


class ShuffleEngine:
    """
    Performs shuffles against an injected RNG.

    Usage:
        engine = ShuffleEngine(random.Random(42))
        result = engine.shuffle(cup_count=3, coin_position=1, steps=8)

        for swap in result.swaps:
            animate(swap.position_a, swap.position_b)
    """

    def __init__(self, rng: RandomSource, max_resamples: int = MAX_RESAMPLES):
        self.rng = rng
        self.max_resamples = max_resamples

    def pick_pair(self, cup_count: int) -> tuple[int, int]:
        """
        Pick two distinct slot indices uniformly at random.

        The second index is redrawn until it differs from the first.
        """
        if cup_count < 2:
            raise PreconditionViolation(f"Cannot pick a pair from {cup_count} cup(s)")

        first = draw_index(self.rng, cup_count)
        for _ in range(self.max_resamples):
            second = draw_index(self.rng, cup_count)
            if second != first:
                return first, second

        raise PreconditionViolation(
            f"RNG produced no distinct pair after {self.max_resamples} draws"
        )

    def shuffle(self, cup_count: int, coin_position: int, steps: int) -> ShuffleResult:
        """
        Run ``steps`` random swaps, tracking the coin after every one.

        ``steps=0`` returns the input unchanged with no swap events.
        """
        _check_preconditions(cup_count, coin_position, steps)
        return self._run(
            cup_count,
            coin_position,
            (self.pick_pair(cup_count) for _ in range(steps)),
        )

    def replay(
        self,
        cup_count: int,
        coin_position: int,
        pairs: Iterable[tuple[int, int]],
    ) -> ShuffleResult:
        """
        Apply a fixed sequence of swap pairs instead of random ones.

        Used to reproduce a recorded shuffle.
        """
        pairs = list(pairs)
        _check_preconditions(cup_count, coin_position, len(pairs))
        for a, b in pairs:
            if a == b or not (0 <= a < cup_count and 0 <= b < cup_count):
                raise PreconditionViolation(f"Invalid swap pair ({a}, {b}) for {cup_count} cups")
        return self._run(cup_count, coin_position, pairs)

    def _run(
        self,
        cup_count: int,
        coin_position: int,
        pairs: Iterable[tuple[int, int]],
    ) -> ShuffleResult:
        cups = CupSet(cup_count=cup_count)
        result = ShuffleResult(
            cup_count=cup_count,
            initial_coin_position=coin_position,
            final_coin_position=coin_position,
        )

        position = coin_position
        for step, (a, b) in enumerate(pairs):
            # Pairs are drawn lazily, so the swap is fully applied
            # before the next pair is computed
            after = apply_swap(position, a, b)
            cups.swap(a, b)
            result.swaps.append(SwapEvent(
                step=step,
                position_a=a,
                position_b=b,
                coin_before=position,
                coin_after=after,
            ))
            logger.debug("swap %d: %d<->%d coin %d->%d", step, a, b, position, after)
            position = after

        result.final_coin_position = position
        result.slot_order = list(cups.slot_order)
        return result


def shuffle(
    cup_count: int,
    coin_position: int,
    steps: int,
    rng: RandomSource,
) -> ShuffleResult:
    """
    Convenience function to run one shuffle.

    Creates a ShuffleEngine and shuffles.
    """
    return ShuffleEngine(rng).shuffle(cup_count, coin_position, steps)
