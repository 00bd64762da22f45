"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between a remote table (browser or
mobile client) and a game session. The client renders purely from
these responses and the event stream.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has expired
- VALIDATION_ERROR: A WebSocket message could not be parsed
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class Phase(str, Enum):
    """Round phases as seen by clients."""
    BETTING = "betting"
    SHOWING_COIN = "showing_coin"
    SHUFFLING = "shuffling"
    GUESSING = "guessing"
    REVEALING = "revealing"
    ROUND_RESOLVED = "round_resolved"
    GAME_OVER = "game_over"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"


class Command(str, Enum):
    """Commands accepted over the WebSocket."""
    PLACE_BET = "place_bet"
    SET_BET = "set_bet"
    CONFIRM_BET = "confirm_bet"
    SELECT_CUP = "select_cup"
    NEW_GAME = "new_game"


# =============================================================================
# Requests
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Request to open a new table."""
    seed: Optional[int] = Field(None, description="RNG seed for a reproducible game")
    shuffle_steps: Optional[int] = Field(
        None, ge=0, le=64, description="Override the number of swaps per shuffle"
    )


class PlaceBetRequest(BaseModel):
    """Nudge the bet, as the +/- buttons do."""
    delta: int = Field(..., ge=-1000, le=1000, description="Coins to add (negative to remove)")


class SetBetRequest(BaseModel):
    """Set the bet outright. Out-of-range amounts are clamped."""
    amount: int


class SelectCupRequest(BaseModel):
    """Guess a cup by slot index."""
    index: int = Field(..., ge=0, description="Slot index, 0 is leftmost")


class CommandMessage(BaseModel):
    """A command sent over the WebSocket."""
    command: Command
    delta: Optional[int] = None
    amount: Optional[int] = None
    index: Optional[int] = None


# =============================================================================
# Responses
# =============================================================================

class SessionResponse(BaseModel):
    """Everything a client needs to render the table."""
    session_id: str
    phase: Phase
    balance: int = Field(..., ge=0)
    bet: int
    level: int = Field(..., ge=1)
    cup_count: int = Field(..., ge=2)
    round_number: int
    prompt: str = ""
    coin_position: Optional[int] = Field(
        None, description="Only present while the coin is visible"
    )
    guess: Optional[int] = None
    last_won: Optional[bool] = None
    last_payout: int = 0
    slot_order: list[int] = Field(default_factory=list)


class CommandResponse(BaseModel):
    """Result of a command. Mistimed commands are not errors."""
    accepted: bool = Field(..., description="False if the command was ignored")
    session: SessionResponse


class EventInfo(BaseModel):
    """One notification from the session."""
    type: str
    sequence: int
    data: dict[str, Any] = Field(default_factory=dict)


class EventsResponse(BaseModel):
    """Queued notifications, oldest first."""
    session_id: str
    events: list[EventInfo] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class SessionListResponse(BaseModel):
    """Response listing active sessions."""
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    """Response after ending a session."""
    success: bool
    session_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
    active_sessions: int = 0
