"""
Shell Game CLI - Command-line interface for the engine.

Usage:
    shellgame play [--seed N] [--steps N] [--fast]   Play at the terminal
    shellgame serve [--host H] [--port P]            Run the HTTP API

The terminal table is a presentation and input layer like any other:
it renders session events and turns typed commands into session calls.
"""

from __future__ import annotations
from dataclasses import replace
from typing import Callable
import argparse
import logging
import random
import sys
import time

from .config import GameConfig
from .engine_core.errors import PreconditionViolation
from .engine_core.state_machine import RoundPhase
from .session import GameEvent, EventType, GameSession, LoggingAudioService, ManualScheduler


def main(argv: list[str] | None = None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Shell Game - bet, follow the cup, guess",
        prog="shellgame",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play at the terminal")
    play_parser.add_argument("--seed", type=int, default=None, help="RNG seed")
    play_parser.add_argument("--steps", type=int, default=None, help="Swaps per shuffle")
    play_parser.add_argument("--fast", action="store_true", help="Skip animation delays")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "play":
        cmd_play(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_play(args):
    """Play a game at the terminal."""
    try:
        config = GameConfig.from_env()
        if args.steps is not None:
            config = replace(config, shuffle_steps=args.steps)
            config.validate()
    except PreconditionViolation as e:
        print(f"Error: {e}")
        sys.exit(1)

    scheduler = ManualScheduler()
    session = GameSession(
        config=config,
        rng=random.Random(args.seed),
        scheduler=scheduler,
        audio=LoggingAudioService(),
    )
    try:
        run_game(session, scheduler, realtime=not args.fast)
    except (KeyboardInterrupt, EOFError):
        print()
    finally:
        session.close()
    print("Thanks for playing!")


def cmd_serve(args):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run("shellgame.api.app:app", host=args.host, port=args.port)


# =============================================================================
# Terminal table
# =============================================================================

def draw_cups(cup_count: int, coin: int | None = None, guess: int | None = None) -> str:
    """
    One line of cups, e.g. ``[ ] [o] [ ]`` with slot numbers underneath.

    The guessed cup is marked with ``^``.
    """
    cups = " ".join("[o]" if i == coin else "[ ]" for i in range(cup_count))
    labels = " ".join(f" {i} " for i in range(cup_count))
    line = f"{cups}\n{labels}"
    if guess is not None:
        marks = " ".join(" ^ " if i == guess else "   " for i in range(cup_count))
        line += f"\n{marks.rstrip()}"
    return line


class TerminalTable:
    """Renders session events as text."""

    def __init__(self, write: Callable[[str], None] = print):
        self.write = write
        self.cup_count = 0
        self.status = {"balance": 0, "bet": 0, "level": 0}

    def render(self, event: GameEvent) -> None:
        data = event.data
        kind = event.event_type

        if kind == EventType.BALANCE_CHANGED:
            self.status["balance"] = data["balance"]
        elif kind == EventType.BET_CHANGED:
            self.status["bet"] = data["bet"]
        elif kind == EventType.LEVEL_CHANGED:
            self.status["level"] = data["level"]
        elif kind == EventType.CUPS_CHANGED:
            self.cup_count = data["cup_count"]
        elif kind == EventType.ROUND_STARTED:
            self.cup_count = data["cup_count"]
            self.write(f"\n=== Round {data['round_number']} ===  {self.status_line()}")
        elif kind == EventType.SHUFFLE_STEP:
            self.write(f"  ~ swap {data['position_a']} <-> {data['position_b']}")
        elif kind == EventType.PROMPT_CHANGED:
            self.write(data["message"])
        elif kind == EventType.PHASE_CHANGED:
            self._render_phase(data)
        elif kind == EventType.GAME_OVER:
            self.write(f"You reached level {data['level']}.")

    def _render_phase(self, data: dict) -> None:
        phase = data["phase"]
        if phase == RoundPhase.SHOWING_COIN.value:
            self.write("Watch the coin...")
            self.write(draw_cups(self.cup_count, coin=data["coin_position"]))
        elif phase == RoundPhase.SHUFFLING.value:
            self.write("Shuffling!")
        elif phase == RoundPhase.REVEALING.value:
            self.write(draw_cups(self.cup_count, coin=data["coin_position"], guess=data["guess"]))
        elif phase == RoundPhase.ROUND_RESOLVED.value:
            self.write(self.status_line())

    def status_line(self) -> str:
        s = self.status
        return f"Balance: ${s['balance']}  Bet: ${s['bet']}  Level: {s['level']}"


def run_timers(scheduler: ManualScheduler, realtime: bool = True) -> None:
    """Fire pending timers in order until the table waits for input."""
    while True:
        due = scheduler.next_due()
        if due is None:
            return
        wait = due - scheduler.now
        if realtime and wait > 0:
            time.sleep(wait)
        scheduler.advance(wait)


def run_game(
    session: GameSession,
    scheduler: ManualScheduler,
    read: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
    realtime: bool = True,
) -> None:
    """
    Interactive loop.

    Betting:   + / - nudge the bet, a number sets it, enter places it
    Guessing:  a cup number
    Game over: n for a new game
    q quits at any prompt.
    """
    table = TerminalTable(write)
    session.events.subscribe(table.render)
    session.start()

    while True:
        phase = session.phase
        if phase == RoundPhase.BETTING:
            line = read("bet [+ / - / amount / enter=place / q]> ").strip()
            if line == "q":
                return
            if line in ("+", "-"):
                session.place_bet(1 if line == "+" else -1)
                write(table.status_line())
            elif line.isdigit():
                session.set_bet(int(line))
                write(table.status_line())
            elif line == "":
                session.confirm_bet()
        elif phase == RoundPhase.GUESSING:
            line = read(f"cup [0-{session.economy.cup_count - 1} / q]> ").strip()
            if line == "q":
                return
            if line.isdigit():
                session.select_cup(int(line))
        elif phase == RoundPhase.GAME_OVER:
            line = read("n = new game, q = quit> ").strip().lower()
            if line == "q":
                return
            if line == "n":
                session.request_new_game()
        else:
            # Nothing left to wait for outside input phases
            return

        run_timers(scheduler, realtime)


if __name__ == "__main__":
    main()
