"""
Session Module - Orchestrates play around the engine core.

A session represents one player's run at the table:
- Created when the player sits down
- Routes input commands to the engine
- Paces the round with cancellable timers
- Notifies presentation and audio collaborators
- Destroyed when the player leaves

Sessions are EPHEMERAL: nothing survives the process.
"""

from .audio import AudioService, SilentAudioService, LoggingAudioService
from .events import EventChannel, EventType, GameEvent
from .scheduler import Scheduler, ManualScheduler, AsyncioScheduler
from .game_session import GameSession, SessionSnapshot
from .manager import SessionManager

__all__ = [
    "AudioService",
    "SilentAudioService",
    "LoggingAudioService",
    "EventChannel",
    "EventType",
    "GameEvent",
    "Scheduler",
    "ManualScheduler",
    "AsyncioScheduler",
    "GameSession",
    "SessionSnapshot",
    "SessionManager",
]
