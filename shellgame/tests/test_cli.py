"""
Tests for the terminal table.
"""

from ..cli import TerminalTable, draw_cups, run_game
from ..config import GameConfig
from ..session import GameSession, ManualScheduler
from ..session.events import EventChannel, EventType
from .conftest import ScriptedRandom


class TestDrawCups:
    def test_coin_under_cup(self):
        assert draw_cups(3, coin=1).splitlines()[0] == "[ ] [o] [ ]"

    def test_guess_marker(self):
        lines = draw_cups(3, coin=0, guess=2).splitlines()
        assert lines[1] == " 0   1   2 "
        assert lines[2].index("^") == 9


class TestTerminalTable:
    def test_tracks_status(self):
        output = []
        table = TerminalTable(output.append)
        channel = EventChannel()
        channel.subscribe(table.render)

        channel.emit(EventType.BALANCE_CHANGED, balance=4)
        channel.emit(EventType.BET_CHANGED, bet=2)
        channel.emit(EventType.LEVEL_CHANGED, level=3)

        assert table.status_line() == "Balance: $4  Bet: $2  Level: 3"

    def test_shuffle_step(self):
        output = []
        table = TerminalTable(output.append)
        channel = EventChannel()
        channel.subscribe(table.render)

        channel.emit(EventType.SHUFFLE_STEP, step=0, position_a=0, position_b=2)
        assert output == ["  ~ swap 0 <-> 2"]


class TestRunGame:
    def test_scripted_win(self):
        scheduler = ManualScheduler()
        session = GameSession(
            config=GameConfig(shuffle_steps=0),
            rng=ScriptedRandom([1]),
            scheduler=scheduler,
        )
        inputs = iter(["", "1", "q"])
        output = []

        run_game(session, scheduler, read=lambda prompt: next(inputs), write=output.append, realtime=False)

        assert "YOU WON $2!" in output
        assert session.economy.balance == 4
        assert session.phase.value == "betting"

    def test_bet_commands(self):
        scheduler = ManualScheduler()
        session = GameSession(scheduler=scheduler, rng=ScriptedRandom([]))
        inputs = iter(["+", "+", "+", "1", "q"])
        output = []

        run_game(session, scheduler, read=lambda prompt: next(inputs), write=output.append, realtime=False)

        assert session.economy.bet == 1
        assert "Balance: $3  Bet: $3  Level: 1" in output
