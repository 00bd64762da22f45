"""
Tests for game configuration.
"""

import pytest

from ..config import GameConfig
from ..engine_core.errors import PreconditionViolation


class TestDefaults:
    def test_reference_values(self):
        """Defaults match the reference table."""
        config = GameConfig()

        assert config.shuffle_steps == 8
        assert config.coin_display_seconds == 2.0
        assert config.reveal_seconds == 1.5
        assert config.next_round_seconds == 2.0
        assert config.step_interval == pytest.approx(0.5)
        config.validate()

    def test_make_economy(self):
        economy = GameConfig(initial_balance=10, initial_cups=4).make_economy()
        assert economy.balance == 10
        assert economy.cup_count == 4


class TestFromEnv:
    def test_overrides(self):
        config = GameConfig.from_env({
            "SHELLGAME_SHUFFLE_STEPS": "12",
            "SHELLGAME_SWAP_SECONDS": "0.1",
            "UNRELATED": "x",
        })

        assert config.shuffle_steps == 12
        assert config.swap_seconds == pytest.approx(0.1)
        assert config.reveal_seconds == 1.5

    def test_not_a_number(self):
        with pytest.raises(PreconditionViolation):
            GameConfig.from_env({"SHELLGAME_SHUFFLE_STEPS": "many"})

    def test_not_a_number_keeps_cause(self):
        with pytest.raises(PreconditionViolation) as excinfo:
            GameConfig.from_env({"SHELLGAME_SWAP_SECONDS": "fast"})
        assert isinstance(excinfo.value.__cause__, ValueError)

    def test_invalid_value(self):
        with pytest.raises(PreconditionViolation):
            GameConfig.from_env({"SHELLGAME_INITIAL_CUPS": "1"})


class TestValidate:
    @pytest.mark.parametrize("overrides", [
        {"shuffle_steps": -1},
        {"reveal_seconds": -0.5},
        {"initial_cups": 1},
        {"initial_cups": 7},
        {"initial_bet": 0},
        {"initial_bet": 4},
        {"level_step": 0},
    ])
    def test_rejects(self, overrides):
        with pytest.raises(PreconditionViolation):
            GameConfig(**overrides).validate()
