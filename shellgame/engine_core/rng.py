"""
RNG Source - Bounded random integers for coin placement and shuffling.

The engine never touches module-level randomness. Anything exposing
``randrange(stop)`` can be injected, which covers ``random.Random``
and the scripted sources used in tests.
"""

from __future__ import annotations
from typing import Protocol
import random

from .errors import PreconditionViolation


class RandomSource(Protocol):
    """Anything that can produce a uniform integer in ``[0, stop)``."""

    def randrange(self, stop: int) -> int:
        ...


def seeded_source(seed: int | None = None) -> RandomSource:
    """Create the default source. ``seed=None`` seeds from the OS."""
    return random.Random(seed)


def draw_index(rng: RandomSource, stop: int) -> int:
    """
    Draw a slot index in ``[0, stop)``.

    Any failure of the injected source is fatal: there is no meaningful
    recovery halfway through placing a coin or shuffling.
    """
    try:
        value = rng.randrange(stop)
    except Exception as e:
        raise PreconditionViolation(f"RNG failed drawing from [0, {stop}): {e}") from e

    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value < stop:
        raise PreconditionViolation(
            f"RNG returned {value!r}, expected an integer in [0, {stop})"
        )
    return value
