"""Read-only helpers computed from session state, used by scoring and summary views.

Player.score is the authoritative total. Round scores and ledger entries
are only used to list what happened in each round; they are not summed
back into the total.
"""

import logging
import re

from app.schemas.game_session import GameEvent, GameState, Player, Turn, Unit

logger = logging.getLogger(__name__)

UNKNOWN_PLAYER_NAME = "Unknown"

# Placeholder units synthesised per player when none were recorded
DEFAULT_UNITS_PER_PLAYER = 3

# Leading integer of a round key; "2", " 3" and "4th" all count, "1_0" is round 1
_ROUND_KEY_PATTERN = re.compile(r"\s*([+-]?[0-9]+)")


def parse_round_key(key: str) -> int | None:
    match = _ROUND_KEY_PATTERN.match(key)
    return int(match.group(1)) if match else None


def all_round_numbers(state: GameState) -> list[int]:
    """Every round that has a ledger entry or a recorded score, ascending.

    Rounds can be recorded through either source, so both are merged.
    """
    rounds: set[int] = set()

    for event in state.game_events:
        if event.round_number is not None:
            rounds.add(event.round_number)

    for player in state.players.values():
        for key in player.round_score_map:
            number = parse_round_key(key)
            if number is not None:
                rounds.add(number)
            else:
                logger.debug("Ignoring non-numeric round key %r for player %s", key, player.id)

    return sorted(rounds)


def round_numbers_from_turns(turns: list[Turn]) -> list[int]:
    return sorted({turn.round_number for turn in turns if turn.round_number is not None})


def sort_players_by_score(players: list[Player]) -> list[Player]:
    """Highest score first. Ties keep their original order."""
    # sorted() is stable, so equal scores stay in input order
    return sorted(players, key=lambda player: player.effective_score, reverse=True)


def get_winner(players: list[Player]) -> Player | None:
    ranking = sort_players_by_score(players)
    return ranking[0] if ranking else None


def player_name(state: GameState, player_id: str | None) -> str:
    """Display name for a player reference, tolerating dangling ids."""
    if player_id is None:
        return UNKNOWN_PLAYER_NAME
    player = state.players.get(player_id)
    return player.name if player is not None else UNKNOWN_PLAYER_NAME


def round_score(player: Player, round_number: int) -> int:
    return player.round_score_map.get(str(round_number), 0)


def events_for_round(state: GameState, round_number: int) -> list[GameEvent]:
    return [event for event in state.game_events if event.round_number == round_number]


def get_all_units(state: GameState) -> list[Unit]:
    """Units in play, falling back to placeholders when none were recorded."""
    if state.units:
        return list(state.units)

    logger.debug("No units in state, creating defaults for %d players", len(state.players))
    return [
        Unit(id=f"{player_id}-{n}", name=f"{player.name}'s Unit {n}", player=player_id)
        for player_id, player in state.players.items()
        for n in range(1, DEFAULT_UNITS_PER_PLAYER + 1)
    ]


def game_duration_ms(state: GameState) -> int | None:
    if state.game_start_time is None or state.game_end_time is None:
        return None
    return max(0, state.game_end_time - state.game_start_time)
