"""
Engine Core - Deterministic round logic for the shell game.

The engine is the part that protects fairness:
1. Places the coin with an injected RNG
2. Shuffles cups while tracking the coin after every swap
3. Moves each round through its legal phases
4. Applies bets, payouts and difficulty scaling
"""

from .errors import PreconditionViolation
from .rng import RandomSource, seeded_source, draw_index
from .state import BetState, ProgressionState, CupSet, RoundState
from .shuffle import ShuffleEngine, ShuffleResult, SwapEvent, apply_swap, shuffle
from .state_machine import RoundPhase, RoundTrigger, RoundStateMachine, TRANSITIONS
from .economy import EconomyManager

__all__ = [
    "PreconditionViolation",
    "RandomSource",
    "seeded_source",
    "draw_index",
    "BetState",
    "ProgressionState",
    "CupSet",
    "RoundState",
    "ShuffleEngine",
    "ShuffleResult",
    "SwapEvent",
    "apply_swap",
    "shuffle",
    "RoundPhase",
    "RoundTrigger",
    "RoundStateMachine",
    "TRANSITIONS",
    "EconomyManager",
]
