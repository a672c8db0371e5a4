"""Tests for the Redis-backed session store."""

import asyncio

import pytest

from app.schemas.game_session import GamePhase
from app.services.session import SetPhaseAction
from app.services.session.join_codes import validate_join_code
from app.services.session.store import SessionCodeExhaustedError, SessionStore

from .conftest import FakeRedis


@pytest.fixture
def store(fake_redis: FakeRedis) -> SessionStore:
    return SessionStore(fake_redis, ttl_seconds=3600)


class TestCreate:
    def test_create_persists_snapshot_with_ttl(self, store: SessionStore, fake_redis: FakeRedis):
        session = asyncio.run(store.create(current_turn=2, now=1000))

        key = f"game:{session.session_id}:state"
        assert validate_join_code(session.session_id)
        assert key in fake_redis.data
        assert fake_redis.expiry[key] == 3600
        assert session.state.current_turn == 2
        assert session.state.game_start_time == 1000

    def test_collision_retries(self, store: SessionStore, fake_redis: FakeRedis, monkeypatch):
        codes = iter(["AAAAAA", "AAAAAA", "BBBBBB"])
        monkeypatch.setattr("app.services.session.store.generate_join_code", lambda: next(codes))

        first = asyncio.run(store.create())
        second = asyncio.run(store.create())

        assert first.session_id == "AAAAAA"
        assert second.session_id == "BBBBBB"

    def test_exhausted_codes_raise(self, store: SessionStore, monkeypatch):
        monkeypatch.setattr("app.services.session.store.generate_join_code", lambda: "AAAAAA")
        asyncio.run(store.create())

        with pytest.raises(SessionCodeExhaustedError):
            asyncio.run(store.create())


class TestLoadSave:
    def test_save_then_load(self, store: SessionStore):
        session = asyncio.run(store.create())
        session.dispatch(SetPhaseAction(phase=GamePhase.DEPLOYMENT, timestamp=5))
        asyncio.run(store.save(session))

        loaded = asyncio.run(store.load(session.session_id.lower()))

        assert loaded is not None
        assert loaded.state == session.state

    def test_missing_session(self, store: SessionStore):
        assert asyncio.run(store.load("ZZZZZZ")) is None

    def test_unreadable_snapshot_is_discarded(self, store: SessionStore, fake_redis: FakeRedis):
        fake_redis.data["game:CCCCCC:state"] = "{not json"

        assert asyncio.run(store.load("CCCCCC")) is None

    def test_delete(self, store: SessionStore):
        session = asyncio.run(store.create())

        assert asyncio.run(store.delete(session.session_id)) is True
        assert asyncio.run(store.delete(session.session_id)) is False
        assert asyncio.run(store.load(session.session_id)) is None

    def test_concurrent_saves_keep_last_writer(self, store: SessionStore):
        session = asyncio.run(store.create())
        first = asyncio.run(store.load(session.session_id))
        second = asyncio.run(store.load(session.session_id))

        first.dispatch(SetPhaseAction(phase=GamePhase.DEPLOYMENT, timestamp=1))
        second.dispatch(SetPhaseAction(phase=GamePhase.SCORING, timestamp=2))
        asyncio.run(store.save(first))
        asyncio.run(store.save(second))

        loaded = asyncio.run(store.load(session.session_id))
        assert loaded.state.current_phase == GamePhase.SCORING
