"""
Shell Game - Three-cup monte wagering engine.

A deterministic game core for the classic shell game:
- Bet coins and watch the coin go under a cup
- Follow the cups through a randomized shuffle
- Guess the cup; a correct guess doubles the stake
- More cups appear as the player levels up

Presentation, input and audio are collaborators that talk to the
core through GameSession's request/notification surface.
"""

__version__ = "0.1.0"
