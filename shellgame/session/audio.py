"""
Audio Service - Fire-and-forget sound triggers.

The session calls these hooks at fixed points in a round. They return
nothing and can never change game state; the sounds themselves are
synthesized elsewhere.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
import logging

logger = logging.getLogger(__name__)


class AudioService(ABC):
    """
    Abstract sound hooks.

    Implementations must not block: the session calls them inline.
    """

    @abstractmethod
    def on_shuffle_step(self) -> None:
        """A pair of cups started swapping."""

    @abstractmethod
    def on_tap(self) -> None:
        """An input was accepted."""

    @abstractmethod
    def on_win(self) -> None:
        ...

    @abstractmethod
    def on_lose(self) -> None:
        ...

    def start_ambience(self) -> None:
        """Start looping background ambience. Optional."""

    def stop_all(self) -> None:
        """Silence everything, including ambience. Optional."""


class SilentAudioService(AudioService):
    """Plays nothing."""

    def on_shuffle_step(self) -> None:
        pass

    def on_tap(self) -> None:
        pass

    def on_win(self) -> None:
        pass

    def on_lose(self) -> None:
        pass


class LoggingAudioService(AudioService):
    """Logs each trigger instead of playing it. Handy for headless runs."""

    def on_shuffle_step(self) -> None:
        logger.debug("sound: swoosh")

    def on_tap(self) -> None:
        logger.debug("sound: click")

    def on_win(self) -> None:
        logger.debug("sound: win fanfare")

    def on_lose(self) -> None:
        logger.debug("sound: lose")

    def start_ambience(self) -> None:
        logger.debug("sound: tavern ambience on")

    def stop_all(self) -> None:
        logger.debug("sound: all stopped")
