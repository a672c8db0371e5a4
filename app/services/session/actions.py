"""Session action types - the tagged inputs accepted by the reducer."""

import logging
import time
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, TypeAdapter

from app.schemas.game_session import (
    Faction,
    GameEvent,
    GamePhase,
    GameState,
    Mission,
    Player,
    Turn,
    Unit,
    UnitStatus,
)

logger = logging.getLogger(__name__)


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


class PlayerUpdate(BaseModel):
    """Partial player. Only fields explicitly set are merged."""

    name: str | None = None
    faction: Faction | None = None
    units: list[Unit] | None = None
    list: str | None = None
    wab_id: str | None = None
    avatar_url: str | None = None
    verified: bool | None = None
    user_profile_id: str | None = None
    score: int | None = None
    round_scores: dict[str, int] | None = None
    points: int | None = None
    objective_points: int | None = None


class UnitUpdate(BaseModel):
    """Partial unit. Only fields explicitly set are merged."""

    name: str | None = None
    status: UnitStatus | None = None
    keywords: list[str] | None = None
    points_cost: int | None = None
    quantity: int | None = None
    faction: str | None = None
    high_command: bool | None = None
    availability: int | None = None
    special_rules: list[str] | None = None


class SetPhaseAction(BaseModel):
    """Move the session to another phase. No ordering is enforced."""

    type: Literal["SET_PHASE"] = "SET_PHASE"
    phase: GamePhase
    timestamp: int = Field(default_factory=now_ms, description="Epoch ms of the transition")


class AddGameEventAction(BaseModel):
    """Append an entry to the ledger."""

    type: Literal["ADD_GAME_EVENT"] = "ADD_GAME_EVENT"
    event: GameEvent


class UpdateScoreAction(BaseModel):
    """Set a player's absolute score, recording the change against a round."""

    type: Literal["UPDATE_SCORE"] = "UPDATE_SCORE"
    player_id: str
    score: int
    round_number: int | None = None


class UpdatePlayerAction(BaseModel):
    type: Literal["UPDATE_PLAYER"] = "UPDATE_PLAYER"
    id: str
    updates: PlayerUpdate


class SetGameEndTimeAction(BaseModel):
    type: Literal["SET_GAME_END_TIME"] = "SET_GAME_END_TIME"
    timestamp: int


class ResetGameAction(BaseModel):
    type: Literal["RESET_GAME"] = "RESET_GAME"


class AddPlayerAction(BaseModel):
    type: Literal["ADD_PLAYER"] = "ADD_PLAYER"
    player: Player


class SetMissionAction(BaseModel):
    type: Literal["SET_MISSION"] = "SET_MISSION"
    mission: Mission


class SetRollOffWinnerAction(BaseModel):
    type: Literal["SET_ROLL_OFF_WINNER"] = "SET_ROLL_OFF_WINNER"
    player_id: str


class SetFirstToDeployAction(BaseModel):
    type: Literal["SET_FIRST_TO_DEPLOY"] = "SET_FIRST_TO_DEPLOY"
    player_id: str


class SetInitialInitiativeAction(BaseModel):
    type: Literal["SET_INITIAL_INITIATIVE"] = "SET_INITIAL_INITIATIVE"
    player_id: str


class AddUnitAction(BaseModel):
    type: Literal["ADD_UNIT"] = "ADD_UNIT"
    unit: Unit


class AddPlayerUnitsAction(BaseModel):
    """Replace every unit owned by a player."""

    type: Literal["ADD_PLAYER_UNITS"] = "ADD_PLAYER_UNITS"
    player_id: str
    units: list[Unit]


class UpdateUnitAction(BaseModel):
    type: Literal["UPDATE_UNIT"] = "UPDATE_UNIT"
    id: str
    updates: UnitUpdate


class StartTurnAction(BaseModel):
    type: Literal["START_TURN"] = "START_TURN"
    turn_number: int = Field(..., ge=0)
    active_player: str | None = None


class EndTurnAction(BaseModel):
    """Mark the current turn completed."""

    type: Literal["END_TURN"] = "END_TURN"


class CompleteTurnAction(BaseModel):
    type: Literal["COMPLETE_TURN"] = "COMPLETE_TURN"
    turn_number: int
    scores: dict[str, int] = Field(default_factory=dict)


class CompleteActivationAction(BaseModel):
    type: Literal["COMPLETE_ACTIVATION"] = "COMPLETE_ACTIVATION"
    player_id: str
    turn_number: int


class UpdateTurnsAction(BaseModel):
    type: Literal["UPDATE_TURNS"] = "UPDATE_TURNS"
    turns: list[Turn]


class RestoreStateAction(BaseModel):
    """Replace the whole state, e.g. when resuming a saved snapshot."""

    type: Literal["RESTORE_STATE"] = "RESTORE_STATE"
    state: GameState


# Union type for all session actions
GameAction = Annotated[
    SetPhaseAction
    | AddGameEventAction
    | UpdateScoreAction
    | UpdatePlayerAction
    | SetGameEndTimeAction
    | ResetGameAction
    | AddPlayerAction
    | SetMissionAction
    | SetRollOffWinnerAction
    | SetFirstToDeployAction
    | SetInitialInitiativeAction
    | AddUnitAction
    | AddPlayerUnitsAction
    | UpdateUnitAction
    | StartTurnAction
    | EndTurnAction
    | CompleteTurnAction
    | CompleteActivationAction
    | UpdateTurnsAction
    | RestoreStateAction,
    Field(discriminator="type"),
]

_action_adapter: TypeAdapter[GameAction] = TypeAdapter(GameAction)

ACTION_TYPES: frozenset[str] = frozenset(
    model.model_fields["type"].default
    for model in (
        SetPhaseAction,
        AddGameEventAction,
        UpdateScoreAction,
        UpdatePlayerAction,
        SetGameEndTimeAction,
        ResetGameAction,
        AddPlayerAction,
        SetMissionAction,
        SetRollOffWinnerAction,
        SetFirstToDeployAction,
        SetInitialInitiativeAction,
        AddUnitAction,
        AddPlayerUnitsAction,
        UpdateUnitAction,
        StartTurnAction,
        EndTurnAction,
        CompleteTurnAction,
        CompleteActivationAction,
        UpdateTurnsAction,
        RestoreStateAction,
    )
)


def parse_action(payload: dict[str, Any]) -> GameAction | None:
    """Build a typed action from a raw payload dict.

    Args:
        payload: Dict with a 'type' key and action-specific fields.

    Returns:
        The matching action, or None when 'type' is missing or not one we
        know. Unknown actions are ignored rather than rejected so older
        servers keep working with newer clients.

    Raises:
        pydantic.ValidationError: If the type is known but the payload is malformed.
    """
    action_type = payload.get("type")
    if not isinstance(action_type, str) or action_type not in ACTION_TYPES:
        logger.info("Ignoring unknown action type: %s", action_type)
        return None
    return _action_adapter.validate_python(payload)
