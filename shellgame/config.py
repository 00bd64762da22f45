"""
Game configuration.

Defaults reproduce the reference table: 8 swaps per shuffle, the coin
shown for two seconds, a 1.5 second reveal and a two second pause
between rounds. Every value can be overridden from the environment:

    SHELLGAME_SHUFFLE_STEPS=12 SHELLGAME_SWAP_SECONDS=0.15 shellgame play
"""

from __future__ import annotations
from dataclasses import dataclass, fields
import os

from .engine_core.errors import PreconditionViolation
from .engine_core import economy

ENV_PREFIX = "SHELLGAME_"


@dataclass(frozen=True)
class GameConfig:
    """Tunable constants for a session."""

    # Shuffle
    shuffle_steps: int = 8

    # Timers (seconds)
    coin_display_seconds: float = 2.0
    swap_seconds: float = 0.3
    swap_pause_seconds: float = 0.2
    reveal_seconds: float = 1.5
    next_round_seconds: float = 2.0

    # Economy
    initial_balance: int = economy.INITIAL_BALANCE
    initial_bet: int = economy.INITIAL_BET
    initial_level: int = economy.INITIAL_LEVEL
    initial_cups: int = economy.INITIAL_CUPS
    max_cups: int = economy.MAX_CUPS
    level_step: int = economy.LEVEL_STEP

    @property
    def step_interval(self) -> float:
        """Time between two emitted shuffle steps."""
        return self.swap_seconds + self.swap_pause_seconds

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> GameConfig:
        """
        Build a config from ``SHELLGAME_*`` variables.

        Unset variables keep their defaults.
        """
        environ = os.environ if environ is None else environ
        overrides = {}
        for f in fields(cls):
            raw = environ.get(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            try:
                overrides[f.name] = float(raw) if f.type == "float" else int(raw)
            except ValueError as e:
                raise PreconditionViolation(
                    f"{ENV_PREFIX}{f.name.upper()}={raw!r} is not a number"
                ) from e
        config = cls(**overrides)
        config.validate()
        return config

    def validate(self) -> None:
        """Raise PreconditionViolation if the table cannot be played."""
        if self.shuffle_steps < 0:
            raise PreconditionViolation("shuffle_steps must be >= 0")
        timers = (
            self.coin_display_seconds,
            self.swap_seconds,
            self.swap_pause_seconds,
            self.reveal_seconds,
            self.next_round_seconds,
        )
        if any(t < 0 for t in timers):
            raise PreconditionViolation("timer durations must be >= 0")
        if self.initial_cups < 2:
            raise PreconditionViolation("at least 2 cups are needed to shuffle")
        if self.initial_cups > self.max_cups:
            raise PreconditionViolation("initial_cups exceeds max_cups")
        if self.level_step < 1:
            raise PreconditionViolation("level_step must be >= 1")
        if self.initial_level < 1:
            raise PreconditionViolation("initial_level must be >= 1")
        if not 1 <= self.initial_bet <= self.initial_balance:
            raise PreconditionViolation("initial_bet must be within [1, initial_balance]")

    def make_economy(self) -> economy.EconomyManager:
        return economy.EconomyManager(
            initial_balance=self.initial_balance,
            initial_bet=self.initial_bet,
            initial_level=self.initial_level,
            initial_cups=self.initial_cups,
            max_cups=self.max_cups,
            level_step=self.level_step,
        )
