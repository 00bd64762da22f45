"""
API Service - Business logic layer between the API and game sessions.

The service:
1. Manages sessions through the SessionManager
2. Translates API requests into session commands
3. Formats session state and events for clients

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
import logging

from ..session import AsyncioScheduler, GameSession, GameEvent, SessionManager
from .schemas import (
    Command,
    CommandMessage,
    CommandResponse,
    CreateSessionRequest,
    ErrorCode,
    ErrorResponse,
    EventInfo,
    EventsResponse,
    Phase,
    SessionResponse,
)

logger = logging.getLogger(__name__)


def event_info(event: GameEvent) -> EventInfo:
    return EventInfo(**event.to_dict())


def session_response(session: GameSession) -> SessionResponse:
    """Render a session snapshot for clients."""
    snapshot = session.snapshot()
    return SessionResponse(
        session_id=snapshot.session_id,
        phase=Phase(snapshot.phase.value),
        balance=snapshot.balance,
        bet=snapshot.bet,
        level=snapshot.level,
        cup_count=snapshot.cup_count,
        round_number=snapshot.round_number,
        prompt=session.prompt,
        coin_position=snapshot.coin_position,
        guess=snapshot.guess,
        last_won=snapshot.last_won,
        last_payout=snapshot.last_payout,
        slot_order=snapshot.slot_order,
    )


def _not_found(session_id: str) -> ErrorResponse:
    return ErrorResponse(
        error=f"Session {session_id} not found",
        error_code=ErrorCode.SESSION_NOT_FOUND,
    )


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        response = service.create_session(CreateSessionRequest(seed=7))
        service.confirm_bet(response.session_id)
    """
    session_manager: SessionManager = field(
        default_factory=lambda: SessionManager(scheduler_factory=AsyncioScheduler)
    )
    max_idle_seconds: float = 3600

    def create_session(self, request: CreateSessionRequest) -> SessionResponse:
        """Open a new table. Idle tables are swept first."""
        self.session_manager.cleanup_stale_sessions(self.max_idle_seconds)

        config = None
        if request.shuffle_steps is not None:
            config = replace(self.session_manager.config, shuffle_steps=request.shuffle_steps)

        session = self.session_manager.create_session(seed=request.seed, config=config)
        return session_response(session)

    def get_session(self, session_id: str) -> SessionResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return _not_found(session_id)
        return session_response(session)

    def end_session(self, session_id: str) -> bool:
        return self.session_manager.end_session(session_id)

    def list_sessions(self) -> list[str]:
        return self.session_manager.list_active_sessions()

    # =========================================================================
    # Commands
    # =========================================================================

    def place_bet(self, session_id: str, delta: int) -> CommandResponse | ErrorResponse:
        return self._run(session_id, lambda s: s.place_bet(delta))

    def set_bet(self, session_id: str, amount: int) -> CommandResponse | ErrorResponse:
        return self._run(session_id, lambda s: s.set_bet(amount))

    def confirm_bet(self, session_id: str) -> CommandResponse | ErrorResponse:
        return self._run(session_id, lambda s: s.confirm_bet())

    def select_cup(self, session_id: str, index: int) -> CommandResponse | ErrorResponse:
        return self._run(session_id, lambda s: s.select_cup(index))

    def request_new_game(self, session_id: str) -> CommandResponse | ErrorResponse:
        return self._run(session_id, lambda s: s.request_new_game())

    def dispatch(self, session_id: str, message: CommandMessage) -> CommandResponse | ErrorResponse:
        """Route a WebSocket command to the matching session command."""
        if message.command == Command.PLACE_BET:
            return self.place_bet(session_id, message.delta or 0)
        if message.command == Command.SET_BET:
            return self.set_bet(session_id, message.amount or 0)
        if message.command == Command.CONFIRM_BET:
            return self.confirm_bet(session_id)
        if message.command == Command.SELECT_CUP:
            # A missing index can never match a slot
            return self.select_cup(session_id, -1 if message.index is None else message.index)
        return self.request_new_game(session_id)

    def drain_events(self, session_id: str) -> EventsResponse | ErrorResponse:
        """Pull queued notifications for clients that poll."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return _not_found(session_id)
        return EventsResponse(
            session_id=session_id,
            events=[event_info(e) for e in session.events.drain()],
        )

    def _run(self, session_id: str, command) -> CommandResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return _not_found(session_id)

        accepted = command(session)
        if not accepted:
            logger.debug("session %s ignored command in %s", session_id, session.phase.value)
        return CommandResponse(accepted=accepted, session=session_response(session))
