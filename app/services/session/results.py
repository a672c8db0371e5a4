"""Recording finished games against player profiles."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from supabase import Client

from app.schemas.game_session import GameState, Player

from .derived import UNKNOWN_PLAYER_NAME, sort_players_by_score

logger = logging.getLogger(__name__)


@dataclass
class GameOutcome:
    """Winners and losers of a finished session."""

    winners: list[Player] = field(default_factory=list)
    losers: list[Player] = field(default_factory=list)


@dataclass
class RecordResultsResult:
    """Result of record_results operation."""

    recorded: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    history_recorded: bool = False


def determine_outcome(state: GameState) -> GameOutcome:
    """Split players into winners and losers by final score.

    Everyone sharing the top score wins. Sessions with fewer than two
    players have no outcome.
    """
    players = list(state.players.values())
    if len(players) < 2:
        return GameOutcome()

    ranking = sort_players_by_score(players)
    top_score = ranking[0].effective_score
    return GameOutcome(
        winners=[p for p in ranking if p.effective_score == top_score],
        losers=[p for p in ranking if p.effective_score < top_score],
    )


class GameResultsService:
    """Writes game outcomes to the profiles and game_history tables."""

    def __init__(self, supabase_client: Client):
        self._supabase = supabase_client

    def _current_wab_id(self, user_id: str | None) -> str | None:
        if user_id is None:
            return None
        try:
            response = (
                self._supabase.table("profiles")
                .select("wab_id")
                .eq("id", user_id)
                .single()
                .execute()
            )
        except Exception as e:
            logger.warning("Failed to fetch wab_id for user %s: %s", user_id, e)
            return None
        data: dict[str, Any] = response.data or {}
        return data.get("wab_id")

    def _increment_record(self, wab_id: str, won: bool) -> None:
        column = "games_won" if won else "games_lost"
        response = (
            self._supabase.table("profiles")
            .select("games_won, games_lost")
            .eq("wab_id", wab_id)
            .single()
            .execute()
        )
        current = (response.data or {}).get(column) or 0
        self._supabase.table("profiles").update({column: current + 1}).eq(
            "wab_id", wab_id
        ).execute()

    def record_results(self, state: GameState, user_id: str | None) -> RecordResultsResult:
        """Update win/loss counts for verified players and log the caller's game.

        Only players with verified=True and a wab_id are recorded. A
        failure for one player is logged and that player skipped.

        Args:
            state: Finished session state.
            user_id: The authenticated caller, used for the game_history row.

        Returns:
            RecordResultsResult listing recorded and skipped WAB IDs.
        """
        result = RecordResultsResult()
        outcome = determine_outcome(state)
        winner_ids = {p.id for p in outcome.winners}
        ranked = outcome.winners + outcome.losers
        verified = [p for p in ranked if p.verified and p.wab_id]

        if not verified:
            logger.info("No verified players to record results for")
            return result

        caller_wab_id = self._current_wab_id(user_id)

        for player in verified:
            won = player.id in winner_ids
            try:
                self._increment_record(player.wab_id, won)
            except Exception as e:
                logger.warning("Failed to update record for %s: %s", player.wab_id, e)
                result.skipped.append(player.wab_id)
                continue

            result.recorded.append(player.wab_id)
            logger.info("Recorded %s for %s", "win" if won else "loss", player.wab_id)

            if caller_wab_id is None or caller_wab_id != player.wab_id:
                continue

            opponent = next((p for p in ranked if p.id != player.id), None)
            try:
                self._supabase.table("game_history").insert(
                    {
                        "user_id": user_id,
                        "opponent_name": opponent.name if opponent else UNKNOWN_PLAYER_NAME,
                        "won": won,
                        "played_at": datetime.now(timezone.utc).isoformat(),
                    }
                ).execute()
                result.history_recorded = True
            except Exception as e:
                logger.warning("Failed to record game history for user %s: %s", user_id, e)

        return result
