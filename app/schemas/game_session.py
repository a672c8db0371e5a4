from enum import Enum

from pydantic import BaseModel, Field


# Session phases, in nominal order
class GamePhase(str, Enum):
    SETUP = "setup"
    DEPLOYMENT = "deployment"
    GAME = "game"
    SCORING = "scoring"
    SUMMARY = "summary"


# Ledger entry kinds
class EventType(str, Enum):
    SCORE = "score"
    KILL = "kill"
    OBJECTIVE = "objective"
    INITIATIVE = "initiative"
    MISSION = "mission"
    CASUALTY = "casualty"
    NOTE = "note"


class UnitStatus(str, Enum):
    ALIVE = "alive"
    WOUNDED = "wounded"
    DESTROYED = "destroyed"


class Faction(BaseModel):
    name: str
    id: str | None = None
    icon: str | None = None


class ObjectiveMarker(BaseModel):
    id: str
    name: str
    value: int = 0


class Mission(BaseModel):
    id: str
    name: str
    description: str = ""
    objective: str = ""
    title: str | None = None
    details: str | None = None
    objective_description: str | None = None
    map_image: str | None = None
    special_rules: list[str] | None = None
    objective_markers: list[ObjectiveMarker] | None = None
    turn_count: int | None = None
    round_count: int | None = None
    is_official: bool | None = None
    is_homebrew: bool | None = None
    community_creator: str | None = None


class Unit(BaseModel):
    """A unit fielded during a session, owned by one player."""

    id: str
    name: str
    player: str
    status: UnitStatus | None = None
    keywords: list[str] | None = None
    points_cost: int | None = None
    quantity: int | None = None
    faction: str | None = None
    high_command: bool | None = None
    availability: int | None = None
    special_rules: list[str] | None = None


class Player(BaseModel):
    id: str
    name: str
    faction: Faction | None = None
    units: list[Unit] | None = None
    list: str | None = None
    wab_id: str | None = None
    avatar_url: str | None = None
    verified: bool | None = None
    user_profile_id: str | None = None
    score: int | None = None
    # Round number (as string) -> score delta recorded in that round
    round_scores: dict[str, int] | None = None
    points: int | None = None
    objective_points: int | None = None

    @property
    def effective_score(self) -> int:
        return self.score or 0

    @property
    def round_score_map(self) -> dict[str, int]:
        return self.round_scores or {}


class GameEvent(BaseModel):
    """One entry of the session ledger.

    player_id is always set; notes that concern no particular player carry a
    fallback id chosen by the caller.
    """

    id: str
    type: EventType
    description: str = ""
    player_id: str
    round_number: int | None = None
    timestamp: int | None = None  # Epoch milliseconds
    objective_type: str | None = None
    value: int | None = None
    unit_id: str | None = None
    objective_id: str | None = None


class Turn(BaseModel):
    number: int
    round_number: int | None = None
    active_player: str | None = None
    alternating_player: str | None = None
    activations_completed: dict[str, int] = Field(default_factory=dict)
    completed: bool = False
    events: list[GameEvent] = Field(default_factory=list)
    scores: dict[str, int] | None = None


class GameState(BaseModel):
    """State of a single play session.

    GameState() is the initial state. Values are treated as immutable:
    the reducer always builds new containers instead of editing these.
    """

    players: dict[str, Player] = Field(default_factory=dict)
    mission: Mission | None = None
    current_phase: GamePhase = GamePhase.SETUP
    roll_off_winner: str | None = None
    first_to_deploy_player_id: str | None = None
    initial_initiative_player_id: str | None = None
    current_turn: int = 1
    units: list[Unit] = Field(default_factory=list)
    turns: list[Turn] = Field(default_factory=list)
    game_events: list[GameEvent] = Field(default_factory=list)
    game_start_time: int | None = None
    game_end_time: int | None = None
