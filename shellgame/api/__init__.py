"""
API Module - Remote table interface.

Exposes game sessions over HTTP for browser and mobile clients.
A client:
1. Opens a session
2. Sends bet, confirm, select and new-game commands
3. Renders the table from responses and streamed events

All state is session-scoped. No accounts, nothing persisted.
"""

from .schemas import (
    Phase,
    ErrorCode,
    Command,
    CreateSessionRequest,
    PlaceBetRequest,
    SetBetRequest,
    SelectCupRequest,
    CommandMessage,
    SessionResponse,
    CommandResponse,
    EventInfo,
    EventsResponse,
    ErrorResponse,
)
from .service import APIService
from .app import create_app

__all__ = [
    "Phase",
    "ErrorCode",
    "Command",
    "CreateSessionRequest",
    "PlaceBetRequest",
    "SetBetRequest",
    "SelectCupRequest",
    "CommandMessage",
    "SessionResponse",
    "CommandResponse",
    "EventInfo",
    "EventsResponse",
    "ErrorResponse",
    "APIService",
    "create_app",
]
