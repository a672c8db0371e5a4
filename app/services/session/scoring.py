"""Mission victory-point scoring for the end of each round.

Each mission defines a set of per-player conditions worth a fixed number of
victory points. Views keep a mapping of player -> condition -> checked,
toggle conditions through toggle_condition(), and turn the checked
conditions into ledger entries and score updates with
build_round_scoring_actions().
"""

import logging

from app.schemas.game_session import EventType, GameEvent, GameState

from .actions import AddGameEventAction, GameAction, UpdateScoreAction

logger = logging.getLogger(__name__)

Conditions = dict[str, dict[str, bool]]

CONSOLIDATED_PROGRESS = "consolidated-progress"
TAKE_POSITIONS = "take-positions"
FOG_OF_DEATH = "fog-of-death"

FOG_MARKERS = ("fogContact1", "fogContact2", "fogContact3", "fogContact4")

# Mission ID -> condition -> (victory points, ledger description)
MISSION_CONDITIONS: dict[str, dict[str, tuple[int, str]]] = {
    CONSOLIDATED_PROGRESS: {
        "central": (1, "Control central objective (1 VP)"),
        "opponent1": (1, "Control opponent's objective 1 (1 VP)"),
        "opponent2": (2, "Control opponent's objective 2 (2 VP)"),
        "defendObjectives": (1, "Opponent controls neither of your objectives (1 VP)"),
    },
    TAKE_POSITIONS: {
        "opponent1": (1, "Control opponent's objective 1 (1 VP)"),
        "opponent2": (1, "Control opponent's objective 2 (1 VP)"),
        "defendObjectives": (1, "Opponent controls neither of your objectives (1 VP)"),
    },
    FOG_OF_DEATH: {
        **{
            marker: (1, f"Fog marker {i} contacted conquest marker (1 VP)")
            for i, marker in enumerate(FOG_MARKERS, start=1)
        },
        "controlArtifact": (2, "Control artifact at end of round (2 VP)"),
    },
}


def mission_conditions(mission_id: str | None) -> dict[str, tuple[int, str]]:
    """Scorable conditions for a mission; empty for missions without scoring rules."""
    if mission_id is None:
        return {}
    return MISSION_CONDITIONS.get(mission_id, {})


def initial_conditions(
    mission_id: str | None,
    player_ids: list[str],
    scored_markers: set[str] | frozenset[str] = frozenset(),
) -> Conditions:
    """Every condition unchecked, for every player.

    Fog markers can only be scored once per game, so markers in
    scored_markers are left out.
    """
    names = [name for name in mission_conditions(mission_id) if name not in scored_markers]
    return {player_id: {name: False for name in names} for player_id in player_ids}


def toggle_condition(
    conditions: Conditions,
    mission_id: str | None,
    player_id: str,
    condition: str,
) -> Conditions:
    """Flip one condition for one player, keeping the others consistent.

    - consolidated-progress: only one player can hold the central objective.
    - Two-player games: taking an opponent objective clears the opponent's
      defendObjectives; defendObjectives cannot be claimed while the
      opponent holds one of your objectives.

    Returns a new mapping; the input is left untouched.
    """
    updated = {pid: dict(flags) for pid, flags in conditions.items()}
    flags = updated.setdefault(player_id, {})
    checking = not flags.get(condition, False)

    if mission_id == CONSOLIDATED_PROGRESS and condition == "central" and checking:
        for other_id, other_flags in updated.items():
            if other_id != player_id:
                other_flags["central"] = False

    if len(updated) == 2 and checking:
        opponent_id = next(pid for pid in updated if pid != player_id)
        opponent_flags = updated[opponent_id]

        if condition in ("opponent1", "opponent2"):
            opponent_flags["defendObjectives"] = False

        if condition == "defendObjectives" and (
            opponent_flags.get("opponent1") or opponent_flags.get("opponent2")
        ):
            logger.debug(
                "defendObjectives rejected for %s: opponent holds an objective", player_id
            )
            return updated

    flags[condition] = checking
    return updated


def calculate_vp(mission_id: str | None, player_conditions: dict[str, bool]) -> int:
    """Victory points earned by one player's checked conditions."""
    definitions = mission_conditions(mission_id)
    return sum(
        definitions[name][0]
        for name, checked in player_conditions.items()
        if checked and name in definitions
    )


def describe_condition(mission_id: str | None, condition: str) -> str:
    definition = mission_conditions(mission_id).get(condition)
    return definition[1] if definition is not None else ""


def scored_fog_markers(conditions: Conditions) -> set[str]:
    """Fog markers checked by any player."""
    return {
        name
        for flags in conditions.values()
        for name, checked in flags.items()
        if checked and name in FOG_MARKERS
    }


def build_round_scoring_actions(
    state: GameState,
    conditions: Conditions,
    round_number: int,
    now: int,
) -> list[GameAction]:
    """Actions that record one round of mission scoring.

    For every player earning VP: one mission ledger entry per checked
    condition, then an UPDATE_SCORE carrying the new absolute total.
    Players earning nothing, or not in the session, produce no actions.

    Args:
        state: Session state the actions will be applied to.
        conditions: Player ID -> condition -> checked.
        round_number: Round being scored.
        now: Epoch ms used for event ids and timestamps.

    Returns:
        Actions to dispatch, in order.
    """
    mission_id = state.mission.id if state.mission is not None else None
    actions: list[GameAction] = []

    for player_id, flags in conditions.items():
        player = state.players.get(player_id)
        if player is None:
            logger.warning("Scoring for unknown player ignored: %s", player_id)
            continue

        vp = calculate_vp(mission_id, flags)
        if vp <= 0:
            continue

        for name, checked in flags.items():
            if not checked or name not in mission_conditions(mission_id):
                continue
            actions.append(
                AddGameEventAction(
                    event=GameEvent(
                        id=f"mission-{now}-{player_id}-{name}",
                        timestamp=now,
                        type=EventType.MISSION,
                        player_id=player_id,
                        description=describe_condition(mission_id, name),
                        objective_type="mission",
                        round_number=round_number,
                        value=mission_conditions(mission_id)[name][0],
                    )
                )
            )

        actions.append(
            UpdateScoreAction(
                player_id=player_id,
                score=player.effective_score + vp,
                round_number=round_number,
            )
        )
        logger.info("Round %d: %s scored %d VP", round_number, player.name, vp)

    return actions
