"""
Session Manager - Creates and tracks game sessions.

LIFECYCLE:
1. Player opens the table -> create an ephemeral session (in-memory only)
2. During play the presentation layer sends commands and renders events
3. Player leaves -> session closed, timers cancelled, state dropped

PERSISTENCE RULES:
- Nothing is persisted. Balance and level live only as long as the
  session does.
"""

from __future__ import annotations
from typing import Callable
import logging
import random
import time

from ..config import GameConfig
from .audio import AudioService
from .game_session import GameSession
from .scheduler import ManualScheduler, Scheduler

logger = logging.getLogger(__name__)


class SessionManager:
    """
    Manages game sessions.

    Responsibilities:
    - Create and start sessions with their collaborators
    - Track active sessions
    - Close idle sessions

    No persistence - sessions are in-memory only.
    """

    def __init__(
        self,
        config: GameConfig | None = None,
        scheduler_factory: Callable[[], Scheduler] = ManualScheduler,
        audio_factory: Callable[[], AudioService] | None = None,
    ):
        self.config = config or GameConfig()
        self.scheduler_factory = scheduler_factory
        self.audio_factory = audio_factory
        self._sessions: dict[str, GameSession] = {}

    def create_session(
        self,
        seed: int | None = None,
        config: GameConfig | None = None,
    ) -> GameSession:
        """
        Create and start a new session.

        Args:
            seed: Optional RNG seed for a reproducible game
            config: Overrides the manager's default config

        Returns:
            A started GameSession, open for betting
        """
        session = GameSession(
            config=config or self.config,
            rng=random.Random(seed),
            scheduler=self.scheduler_factory(),
            audio=self.audio_factory() if self.audio_factory else None,
        )
        self._sessions[session.session_id] = session
        session.start()
        logger.info("created session %s (seed=%s)", session.session_id, seed)
        return session

    def get_session(self, session_id: str) -> GameSession | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def end_session(self, session_id: str) -> bool:
        """
        Close a session and forget it.

        Returns False if the session did not exist.
        """
        session = self._sessions.pop(session_id, None)
        if not session:
            return False
        session.close()
        return True

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active
        ]

    def cleanup_stale_sessions(self, max_idle_seconds: float = 3600) -> list[str]:
        """
        Close sessions with no input for ``max_idle_seconds``.

        Returns the IDs that were removed.
        """
        now = time.time()
        stale = [
            sid for sid, session in self._sessions.items()
            if now - session.last_activity > max_idle_seconds
        ]
        for session_id in stale:
            self.end_session(session_id)
        if stale:
            logger.info("cleaned up %d stale session(s)", len(stale))
        return stale

    def close_all(self) -> None:
        for session_id in list(self._sessions):
            self.end_session(session_id)
