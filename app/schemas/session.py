"""Pydantic schemas for session endpoints."""

from pydantic import BaseModel, Field

from app.schemas.game_session import GameEvent, GameState, Player


class CreateSessionRequest(BaseModel):
    """Request body for starting a new play session."""

    current_turn: int = Field(1, ge=0, description="Round counter starting value")


class SessionResponse(BaseModel):
    code: str = Field(..., description="6-character session code")
    display_code: str = Field(..., description="Session code formatted for reading aloud")
    state: GameState


class RoundSummary(BaseModel):
    round_number: int
    scores: dict[str, int] = Field(
        default_factory=dict, description="Player ID -> score delta for the round"
    )
    events: list[GameEvent] = Field(default_factory=list)


class SessionSummary(BaseModel):
    code: str
    rounds: list[RoundSummary]
    ranking: list[Player]
    winner: Player | None = None
    roll_off_winner_name: str
    first_to_deploy_name: str
    initial_initiative_name: str
    duration_ms: int | None = None


class RoundScoringRequest(BaseModel):
    """Checked mission conditions for one round, per player."""

    round_number: int = Field(..., ge=1)
    conditions: dict[str, dict[str, bool]] = Field(
        ..., description="Player ID -> condition name -> scored"
    )


class RecordResultsResponse(BaseModel):
    recorded: list[str] = Field(default_factory=list, description="WAB IDs updated")
    skipped: list[str] = Field(default_factory=list, description="WAB IDs that failed")
    history_recorded: bool = False
