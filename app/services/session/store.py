"""Session store - keeps session snapshots in Redis between requests."""

import logging

from pydantic import ValidationError
from upstash_redis.asyncio import Redis

from app.config import get_settings
from app.dependencies.redis import get_redis_client
from app.schemas.game_session import GameState

from .join_codes import generate_join_code, normalize_join_code
from .session import GameSession

logger = logging.getLogger(__name__)

MAX_CODE_ATTEMPTS = 5


class SessionCodeExhaustedError(RuntimeError):
    """No free session code could be found."""


class SessionStore:
    """Snapshot storage for play sessions.

    Snapshots are written whole after each change; there is no partial
    update or locking. Each key expires after the configured TTL.

    A session assumes one writer at a time. Two requests that load the same
    snapshot and save it back concurrently keep only the last save, so the
    other request's changes (e.g. one round of scoring) are lost.
    """

    def __init__(self, redis_client: Redis | None = None, ttl_seconds: int | None = None):
        self._redis = redis_client or get_redis_client()
        self._ttl = ttl_seconds if ttl_seconds is not None else get_settings().SESSION_TTL_SECONDS

    def _state_key(self, code: str) -> str:
        return f"game:{code}:state"

    async def create(self, current_turn: int = 1, now: int | None = None) -> GameSession:
        """Create and persist a new session under a fresh code.

        Raises:
            SessionCodeExhaustedError: If every generated code was taken.
        """
        state = GameState(current_turn=current_turn, game_start_time=now)
        for attempt in range(1, MAX_CODE_ATTEMPTS + 1):
            code = generate_join_code()
            created = await self._redis.set(
                self._state_key(code), state.model_dump_json(), ex=self._ttl, nx=True
            )
            if created:
                logger.info("Session %s created (attempt %d)", code, attempt)
                return GameSession(code, state)
            logger.debug("Session code collision: %s", code)

        logger.error("Could not allocate a session code after %d attempts", MAX_CODE_ATTEMPTS)
        raise SessionCodeExhaustedError("Could not allocate a session code")

    async def load(self, code: str) -> GameSession | None:
        """Load a session, or None if it is missing, expired or unreadable."""
        code = normalize_join_code(code)
        raw = await self._redis.get(self._state_key(code))
        if raw is None:
            logger.debug("Session %s not found", code)
            return None

        try:
            return GameSession.from_snapshot(code, raw)
        except ValidationError as e:
            logger.warning("Discarding unreadable snapshot for session %s: %s", code, e)
            return None

    async def save(self, session: GameSession) -> None:
        await self._redis.set(
            self._state_key(session.session_id), session.snapshot(), ex=self._ttl
        )
        logger.debug(
            "Session %s saved, phase=%s", session.session_id, session.state.current_phase.value
        )

    async def delete(self, code: str) -> bool:
        code = normalize_join_code(code)
        deleted = await self._redis.delete(self._state_key(code))
        logger.info("Session %s deleted: %s", code, bool(deleted))
        return bool(deleted)


def get_session_store() -> SessionStore:
    return SessionStore()
