"""
Game State - Containers for economy, progression and per-round state.

Lifecycles:
- BetState and ProgressionState live for the whole session and are only
  reset by an explicit new game.
- CupSet and RoundState are created fresh for every round and discarded
  when the round ends.

Slot identity and coin ownership are kept apart: a slot's index never
changes during a round, only which index currently bears the coin.
"""

from __future__ import annotations
from dataclasses import dataclass, field


@dataclass
class BetState:
    """Balance and the current stake. All amounts are whole coins."""
    bet: int = 1
    balance: int = 3

    # True once the bet is committed for a round
    locked: bool = False


@dataclass
class ProgressionState:
    """Player progress and the difficulty it implies."""
    level: int = 1
    cup_count: int = 3


@dataclass
class CupSet:
    """
    Ordered logical cup slots for one round.

    ``slot_order[position]`` is the identity of the physical cup currently
    standing at ``position``. It starts as the identity permutation and is
    only rearranged by the shuffle engine, so the presentation layer can
    move the matching visuals.
    """
    cup_count: int
    slot_order: list[int] = field(default_factory=list)

    def __post_init__(self):
        if not self.slot_order:
            self.slot_order = list(range(self.cup_count))

    @property
    def slots(self) -> range:
        return range(self.cup_count)

    def contains(self, index: int) -> bool:
        """Check if ``index`` addresses a slot of this set. Only plain ints do."""
        if isinstance(index, bool) or not isinstance(index, int):
            return False
        return 0 <= index < self.cup_count

    def swap(self, position_a: int, position_b: int) -> None:
        order = self.slot_order
        order[position_a], order[position_b] = order[position_b], order[position_a]


@dataclass
class RoundState:
    """
    State of one bet -> reveal cycle.

    ``coin_position`` is set once at coin placement, then only moved by
    shuffle steps. It is frozen once the round reaches guessing.
    """
    round_number: int
    cups: CupSet
    stake: int = 0
    coin_position: int | None = None
    guess: int | None = None
    won: bool | None = None
    payout: int = 0

    # Every position the coin occupied this round, placement first
    coin_path: list[int] = field(default_factory=list)

    @property
    def is_resolved(self) -> bool:
        return self.won is not None

    def track(self, position: int) -> None:
        """Record a new tracked coin position."""
        self.coin_position = position
        self.coin_path.append(position)
