"""GameSession - owns one session's state and the dispatch entry point."""

import logging
from collections.abc import Callable

from app.schemas.game_session import GameState

from .actions import GameAction
from .reducer import apply_action

logger = logging.getLogger(__name__)

StateListener = Callable[[GameState], None]


class GameSession:
    """Holds the state of one play session.

    Each session is an explicit object handed to whoever needs it; there is
    no module-level instance. Views read `state`, send changes through
    `dispatch()` and can `subscribe()` to be told when the state changes.
    """

    def __init__(self, session_id: str, state: GameState | None = None):
        self.session_id = session_id
        self._state = state if state is not None else GameState()
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> GameState:
        return self._state

    def dispatch(self, action: GameAction) -> GameState:
        """Apply an action, notify listeners if the state changed, return the new state."""
        new_state = apply_action(self._state, action)
        if new_state is self._state:
            return new_state

        self._state = new_state
        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception:
                logger.exception("State listener failed for session %s", self.session_id)
        return new_state

    def dispatch_all(self, actions: list[GameAction]) -> GameState:
        for action in actions:
            self.dispatch(action)
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener. Returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def snapshot(self) -> str:
        return self._state.model_dump_json()

    @classmethod
    def from_snapshot(cls, session_id: str, snapshot: str | bytes) -> "GameSession":
        """Rebuild a session from snapshot().

        Raises:
            pydantic.ValidationError: If the snapshot is not a valid state.
        """
        return cls(session_id, GameState.model_validate_json(snapshot))
