"""Session module - game-play session state machine.

This module provides:
- Action types for every change a view can request
- A pure reducer applying actions to GameState
- Derived summary values (rounds, ranking, winner)
- Mission scoring helpers
- GameSession, the explicit owner of one session's state

Usage:
    from app.services.session import GameSession, SetPhaseAction
    from app.schemas.game_session import GamePhase

    session = GameSession("ABC234")
    unsubscribe = session.subscribe(render)
    session.dispatch(SetPhaseAction(phase=GamePhase.DEPLOYMENT))
"""

# Actions
from .actions import (
    AddGameEventAction,
    AddPlayerAction,
    AddPlayerUnitsAction,
    AddUnitAction,
    CompleteActivationAction,
    CompleteTurnAction,
    EndTurnAction,
    GameAction,
    PlayerUpdate,
    ResetGameAction,
    RestoreStateAction,
    SetFirstToDeployAction,
    SetGameEndTimeAction,
    SetInitialInitiativeAction,
    SetMissionAction,
    SetPhaseAction,
    SetRollOffWinnerAction,
    StartTurnAction,
    UnitUpdate,
    UpdatePlayerAction,
    UpdateScoreAction,
    UpdateTurnsAction,
    UpdateUnitAction,
    now_ms,
    parse_action,
)

# Derived values
from .derived import (
    UNKNOWN_PLAYER_NAME,
    all_round_numbers,
    events_for_round,
    game_duration_ms,
    get_all_units,
    get_winner,
    player_name,
    round_numbers_from_turns,
    round_score,
    sort_players_by_score,
)

# Reducer
from .reducer import MAX_ACTIVATIONS, apply_action

# Session handle
from .session import GameSession

__all__ = [
    # Actions
    "GameAction",
    "PlayerUpdate",
    "UnitUpdate",
    "SetPhaseAction",
    "AddGameEventAction",
    "UpdateScoreAction",
    "UpdatePlayerAction",
    "SetGameEndTimeAction",
    "ResetGameAction",
    "AddPlayerAction",
    "SetMissionAction",
    "SetRollOffWinnerAction",
    "SetFirstToDeployAction",
    "SetInitialInitiativeAction",
    "AddUnitAction",
    "AddPlayerUnitsAction",
    "UpdateUnitAction",
    "StartTurnAction",
    "EndTurnAction",
    "CompleteTurnAction",
    "CompleteActivationAction",
    "UpdateTurnsAction",
    "RestoreStateAction",
    "now_ms",
    "parse_action",
    # Reducer
    "apply_action",
    "MAX_ACTIVATIONS",
    # Derived values
    "UNKNOWN_PLAYER_NAME",
    "all_round_numbers",
    "round_numbers_from_turns",
    "sort_players_by_score",
    "get_winner",
    "player_name",
    "round_score",
    "events_for_round",
    "get_all_units",
    "game_duration_ms",
    # Session handle
    "GameSession",
]
