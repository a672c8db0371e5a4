"""Shared fixtures for session, list and API tests."""

import os

# Settings are read from the environment on first use
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_API_KEY", "test-anon-key")
os.environ.setdefault("UPSTASH_REDIS_REST_URL", "https://test-redis.upstash.io")
os.environ.setdefault("UPSTASH_REDIS_REST_TOKEN", "test-redis-token")
os.environ.setdefault("SHARE_BASE_URL", "https://companion.example.com")

from typing import Any  # noqa: E402

import pytest  # noqa: E402

from app.schemas.army import SavedList, SelectedUnit  # noqa: E402
from app.schemas.game_session import (  # noqa: E402
    EventType,
    Faction,
    GameEvent,
    GameState,
    Mission,
    Player,
)

# Fixed IDs for deterministic testing
PLAYER_1_ID = "player-1"
PLAYER_2_ID = "player-2"
PLAYER_3_ID = "player-3"
PLAYER_4_ID = "player-4"
USER_ID = "00000000-0000-0000-0000-0000000000aa"

FIXED_NOW_MS = 1_700_000_000_000


def create_player(
    player_id: str,
    name: str,
    score: int | None = None,
    round_scores: dict[str, int] | None = None,
    wab_id: str | None = None,
    verified: bool | None = None,
) -> Player:
    """Helper to create a player."""
    return Player(
        id=player_id,
        name=name,
        faction=Faction(name="Northern Tribes", id="northern-tribes"),
        score=score,
        round_scores=round_scores,
        wab_id=wab_id,
        verified=verified,
    )


def create_event(
    event_id: str,
    player_id: str = PLAYER_1_ID,
    event_type: EventType = EventType.NOTE,
    round_number: int | None = None,
    value: int | None = None,
) -> GameEvent:
    """Helper to create a ledger entry."""
    return GameEvent(
        id=event_id,
        type=event_type,
        description=f"Event {event_id}",
        player_id=player_id,
        round_number=round_number,
        timestamp=FIXED_NOW_MS,
        value=value,
    )


def create_selected_unit(
    unit_id: str,
    name: str,
    points_cost: int = 20,
    quantity: int = 1,
    faction: str = "northern-tribes",
    keywords: list[str] | None = None,
    high_command: bool = False,
    availability: int = 2,
    command: int | None = None,
) -> SelectedUnit:
    """Helper to create a list entry."""
    return SelectedUnit(
        id=unit_id,
        name=name,
        points_cost=points_cost,
        quantity=quantity,
        faction=faction,
        keywords=keywords or [],
        high_command=high_command,
        availability=availability,
        command=command,
    )


@pytest.fixture
def initial_state() -> GameState:
    return GameState()


@pytest.fixture
def two_player_state() -> GameState:
    """Two players in the game phase, no scores yet."""
    return GameState(
        players={
            PLAYER_1_ID: create_player(PLAYER_1_ID, "Aldric"),
            PLAYER_2_ID: create_player(PLAYER_2_ID, "Brenna"),
        },
        current_phase="game",
    )


@pytest.fixture
def consolidated_progress() -> Mission:
    return Mission(
        id="consolidated-progress",
        name="Consolidated Progress",
        description="Hold the centre and your opponent's ground.",
        objective="Control objectives at the end of each round.",
    )


@pytest.fixture
def sample_list() -> SavedList:
    """A list mixing High Command, command values and hidden keywords."""
    return SavedList(
        id="list-123",
        name="Frost Raiders",
        faction="northern-tribes",
        units=[
            create_selected_unit(
                "tundra-marauders", "Tundra Marauders", points_cost=25, quantity=2, availability=3
            ),
            create_selected_unit(
                "njord", "Njord the Merciless", points_cost=35, high_command=True, command=2,
                availability=1,
            ),
            create_selected_unit(
                "eskold-scouts", "Eskold Scouts", points_cost=15, keywords=["Scout", "Infantry"]
            ),
        ],
        created_at="2026-01-15T10:00:00+00:00",
        user_id=USER_ID,
    )


# Test doubles for external services


class FakeRedis:
    """In-memory stand-in for the async Upstash client."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.expiry: dict[str, int] = {}

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def set(self, key: str, value: str, ex: int | None = None, nx: bool = False):
        if nx and key in self.data:
            return None
        self.data[key] = value
        if ex is not None:
            self.expiry[key] = ex
        return True

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed

    async def close(self) -> None:
        pass


class FakeResponse:
    def __init__(self, data: Any):
        self.data = data


class FakeQuery:
    """Chainable query mimicking the postgrest builder over in-memory rows."""

    def __init__(self, db: "FakeSupabase", table: str):
        self._db = db
        self._table = table
        self._op = "select"
        self._payload: dict[str, Any] = {}
        self._filters: list[tuple[str, Any]] = []
        self._single = False

    def select(self, *columns: str) -> "FakeQuery":
        self._op = "select"
        return self

    def update(self, values: dict[str, Any]) -> "FakeQuery":
        self._op, self._payload = "update", values
        return self

    def insert(self, values: dict[str, Any]) -> "FakeQuery":
        self._op, self._payload = "insert", values
        return self

    def upsert(self, values: dict[str, Any]) -> "FakeQuery":
        self._op, self._payload = "upsert", values
        return self

    def delete(self) -> "FakeQuery":
        self._op = "delete"
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self._filters.append((column, value))
        return self

    def single(self) -> "FakeQuery":
        self._single = True
        return self

    def _insert_row(self, rows: list[dict[str, Any]]) -> dict[str, Any]:
        self._db.counter += 1
        row = {"id": f"{self._table}-{self._db.counter}", "created_at": "2026-02-01T12:00:00+00:00"}
        row.update(self._payload)
        rows.append(row)
        return row

    def execute(self) -> FakeResponse:
        if (self._table, self._op) in self._db.failures:
            raise RuntimeError(f"{self._op} on {self._table} failed")

        rows = self._db.tables.setdefault(self._table, [])
        matches = [r for r in rows if all(r.get(c) == v for c, v in self._filters)]

        if self._op == "select":
            data: Any = [dict(r) for r in matches]
            if self._single:
                data = data[0] if data else None
            return FakeResponse(data)

        if self._op == "update":
            for row in matches:
                row.update(self._payload)
            return FakeResponse([dict(r) for r in matches])

        if self._op == "insert":
            return FakeResponse([dict(self._insert_row(rows))])

        if self._op == "upsert":
            existing = next((r for r in rows if r.get("id") == self._payload.get("id")), None)
            if existing is not None and "id" in self._payload:
                existing.update(self._payload)
                return FakeResponse([dict(existing)])
            return FakeResponse([dict(self._insert_row(rows))])

        # delete
        for row in matches:
            rows.remove(row)
        return FakeResponse([dict(r) for r in matches])


class FakeSupabase:
    """Minimal Supabase client: table() queries over dict rows."""

    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.failures: set[tuple[str, str]] = set()
        self.counter = 0

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def client(fake_redis: FakeRedis, fake_supabase: FakeSupabase):
    """API client with Redis, Supabase and auth replaced by test doubles."""
    from fastapi.testclient import TestClient

    from app.dependencies.auth import get_current_user, get_current_user_token
    from app.main import app
    from app.routers.lists import get_list_repository, get_public_list_repository
    from app.routers.sessions import get_results_service
    from app.schemas.auth import AuthUser
    from app.services.lists.repository import ListRepository
    from app.services.session.results import GameResultsService
    from app.services.session.store import SessionStore, get_session_store

    app.dependency_overrides[get_session_store] = lambda: SessionStore(fake_redis, ttl_seconds=3600)
    app.dependency_overrides[get_current_user] = lambda: AuthUser(id=USER_ID, email="a@b.test")
    app.dependency_overrides[get_current_user_token] = lambda: "test-token"
    app.dependency_overrides[get_list_repository] = lambda: ListRepository(fake_supabase)
    app.dependency_overrides[get_public_list_repository] = lambda: ListRepository(fake_supabase)
    app.dependency_overrides[get_results_service] = lambda: GameResultsService(fake_supabase)

    yield TestClient(app)

    app.dependency_overrides.clear()
