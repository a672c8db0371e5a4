"""Session reducer - the single point of session state change.

apply_action(state, action) -> new state. The reducer:
- Never mutates the incoming state or any container inside it
- Never raises; actions it cannot apply leave the state unchanged
- Does not check that phase changes follow the nominal order, so views can
  move back and forth freely
"""

import logging

from app.schemas.game_session import GamePhase, GameState, Player, Turn

from .actions import (
    AddGameEventAction,
    AddPlayerAction,
    AddPlayerUnitsAction,
    AddUnitAction,
    CompleteActivationAction,
    CompleteTurnAction,
    EndTurnAction,
    GameAction,
    ResetGameAction,
    RestoreStateAction,
    SetFirstToDeployAction,
    SetGameEndTimeAction,
    SetInitialInitiativeAction,
    SetMissionAction,
    SetPhaseAction,
    SetRollOffWinnerAction,
    StartTurnAction,
    UpdatePlayerAction,
    UpdateScoreAction,
    UpdateTurnsAction,
    UpdateUnitAction,
)

logger = logging.getLogger(__name__)

# Activations each player gets per turn
MAX_ACTIVATIONS = 5


def apply_action(state: GameState, action: GameAction) -> GameState:
    """Apply an action and return the resulting state.

    Args:
        state: Current session state. Left untouched.
        action: The action to apply.

    Returns:
        A new GameState, or `state` itself when the action changes nothing
        (unknown action, reference to a missing player or turn).
    """
    action_type = getattr(action, "type", type(action).__name__)
    logger.debug("Applying action: type=%s, phase=%s", action_type, state.current_phase.value)

    if isinstance(action, SetPhaseAction):
        return _set_phase(state, action)

    elif isinstance(action, AddGameEventAction):
        return state.model_copy(update={"game_events": [*state.game_events, action.event]})

    elif isinstance(action, UpdateScoreAction):
        return _update_score(state, action)

    elif isinstance(action, UpdatePlayerAction):
        return _update_player(state, action)

    elif isinstance(action, SetGameEndTimeAction):
        if state.game_end_time is not None:
            logger.debug("Game end time already set, keeping %d", state.game_end_time)
            return state
        return state.model_copy(update={"game_end_time": action.timestamp})

    elif isinstance(action, ResetGameAction):
        logger.info("Resetting session state")
        return GameState()

    elif isinstance(action, AddPlayerAction):
        player = action.player.model_copy(
            update={"round_scores": {}, "units": list(action.player.units or [])}
        )
        return state.model_copy(update={"players": {**state.players, player.id: player}})

    elif isinstance(action, SetMissionAction):
        return state.model_copy(update={"mission": action.mission})

    elif isinstance(action, SetRollOffWinnerAction):
        return state.model_copy(update={"roll_off_winner": action.player_id})

    elif isinstance(action, SetFirstToDeployAction):
        return state.model_copy(update={"first_to_deploy_player_id": action.player_id})

    elif isinstance(action, SetInitialInitiativeAction):
        return state.model_copy(update={"initial_initiative_player_id": action.player_id})

    elif isinstance(action, AddUnitAction):
        return state.model_copy(update={"units": [*state.units, action.unit]})

    elif isinstance(action, AddPlayerUnitsAction):
        return _add_player_units(state, action)

    elif isinstance(action, UpdateUnitAction):
        return _update_unit(state, action)

    elif isinstance(action, StartTurnAction):
        return _start_turn(state, action)

    elif isinstance(action, EndTurnAction):
        return _complete_turn(state, state.current_turn, None)

    elif isinstance(action, CompleteTurnAction):
        return _complete_turn(state, action.turn_number, dict(action.scores))

    elif isinstance(action, CompleteActivationAction):
        return _complete_activation(state, action)

    elif isinstance(action, UpdateTurnsAction):
        return state.model_copy(update={"turns": list(action.turns)})

    elif isinstance(action, RestoreStateAction):
        logger.info("Restoring session state: players=%d", len(action.state.players))
        return action.state

    logger.warning("Unknown action ignored: %s", action_type)
    return state


def _set_phase(state: GameState, action: SetPhaseAction) -> GameState:
    update: dict = {"current_phase": action.phase}

    if (
        action.phase == GamePhase.GAME
        and state.current_phase == GamePhase.DEPLOYMENT
        and state.game_start_time is None
    ):
        update["game_start_time"] = action.timestamp
    elif action.phase == GamePhase.SUMMARY and state.game_end_time is None:
        update["game_end_time"] = action.timestamp

    logger.info("Phase change: %s -> %s", state.current_phase.value, action.phase.value)
    return state.model_copy(update=update)


def _replace_player(state: GameState, player: Player) -> GameState:
    return state.model_copy(update={"players": {**state.players, player.id: player}})


def _update_score(state: GameState, action: UpdateScoreAction) -> GameState:
    player = state.players.get(action.player_id)
    if player is None:
        logger.warning("Score update for unknown player ignored: %s", action.player_id)
        return state

    update: dict = {"score": action.score}
    if action.round_number is not None:
        delta = action.score - player.effective_score
        update["round_scores"] = {**player.round_score_map, str(action.round_number): delta}

    logger.debug(
        "Score update: player=%s, score=%d, round=%s",
        action.player_id,
        action.score,
        action.round_number,
    )
    return _replace_player(state, player.model_copy(update=update))


def _update_player(state: GameState, action: UpdatePlayerAction) -> GameState:
    player = state.players.get(action.id)
    if player is None:
        logger.warning("Update for unknown player ignored: %s", action.id)
        return state

    updates = {name: getattr(action.updates, name) for name in action.updates.model_fields_set}
    if not updates:
        return state
    return _replace_player(state, player.model_copy(update=updates))


def _add_player_units(state: GameState, action: AddPlayerUnitsAction) -> GameState:
    player = state.players.get(action.player_id)
    if player is None:
        logger.warning("Units for unknown player ignored: %s", action.player_id)
        return state

    units = list(action.units)
    kept = [unit for unit in state.units if unit.player != action.player_id]
    updated = _replace_player(state, player.model_copy(update={"units": units}))
    return updated.model_copy(update={"units": kept + units})


def _update_unit(state: GameState, action: UpdateUnitAction) -> GameState:
    updates = {name: getattr(action.updates, name) for name in action.updates.model_fields_set}
    if not updates or not any(unit.id == action.id for unit in state.units):
        return state

    units = [
        unit.model_copy(update=updates) if unit.id == action.id else unit for unit in state.units
    ]
    return state.model_copy(update={"units": units})


def _find_turn(turns: list[Turn], turn_number: int) -> int:
    for index, turn in enumerate(turns):
        if turn.number == turn_number:
            return index
    return -1


def _start_turn(state: GameState, action: StartTurnAction) -> GameState:
    turns = list(state.turns)
    index = _find_turn(turns, action.turn_number)

    if index >= 0:
        turns[index] = turns[index].model_copy(update={"active_player": action.active_player})
    else:
        turns.append(
            Turn(
                number=action.turn_number,
                active_player=action.active_player,
                activations_completed={player_id: 0 for player_id in state.players},
            )
        )

    logger.info("Turn %d started, active player: %s", action.turn_number, action.active_player)
    return state.model_copy(update={"current_turn": action.turn_number, "turns": turns})


def _complete_turn(
    state: GameState, turn_number: int, scores: dict[str, int] | None
) -> GameState:
    index = _find_turn(state.turns, turn_number)
    if index == -1:
        logger.debug("Turn %d not found, nothing to complete", turn_number)
        return state

    update: dict = {"completed": True}
    if scores is not None:
        update["scores"] = scores

    turns = list(state.turns)
    turns[index] = turns[index].model_copy(update=update)
    return state.model_copy(update={"turns": turns})


def _complete_activation(state: GameState, action: CompleteActivationAction) -> GameState:
    index = _find_turn(state.turns, action.turn_number)
    if index == -1:
        logger.warning("Activation for unknown turn ignored: %d", action.turn_number)
        return state

    turn = state.turns[index]
    count = turn.activations_completed.get(action.player_id, 0) + 1
    activations = {**turn.activations_completed, action.player_id: count}
    update: dict = {"activations_completed": activations}

    player_ids = list(state.players)
    if count >= MAX_ACTIVATIONS and player_ids:
        # First player in insertion order wins ties
        lowest = min(player_ids, key=lambda pid: activations.get(pid, 0))
        if activations.get(lowest, 0) < MAX_ACTIVATIONS:
            update["alternating_player"] = lowest
            logger.debug(
                "Player %s finished activations, alternating to %s", action.player_id, lowest
            )

    turns = list(state.turns)
    turns[index] = turn.model_copy(update=update)
    return state.model_copy(update={"turns": turns})
