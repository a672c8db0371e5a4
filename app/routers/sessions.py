"""REST endpoints for play sessions.

Each request loads the session snapshot, applies actions through the
reducer and writes the snapshot back.
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, HTTPException, Response, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from app.dependencies.auth import CurrentUser, CurrentUserToken
from app.dependencies.supabase import get_authenticated_supabase_client
from app.schemas.session import (
    CreateSessionRequest,
    RecordResultsResponse,
    RoundScoringRequest,
    RoundSummary,
    SessionResponse,
    SessionSummary,
)
from app.services.session import (
    GameSession,
    all_round_numbers,
    events_for_round,
    game_duration_ms,
    get_winner,
    now_ms,
    parse_action,
    player_name,
    round_score,
    sort_players_by_score,
)
from app.services.session.join_codes import (
    format_join_code,
    normalize_join_code,
    validate_join_code,
)
from app.services.session.results import GameResultsService
from app.services.session.scoring import build_round_scoring_actions
from app.services.session.store import (
    SessionCodeExhaustedError,
    SessionStore,
    get_session_store,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])

SessionStoreDep = Annotated[SessionStore, Depends(get_session_store)]


def get_results_service(token: CurrentUserToken) -> GameResultsService:
    return GameResultsService(get_authenticated_supabase_client(token))


def _session_response(session: GameSession) -> SessionResponse:
    return SessionResponse(
        code=session.session_id,
        display_code=format_join_code(session.session_id),
        state=session.state,
    )


async def _load_session(store: SessionStore, code: str) -> GameSession:
    session = None
    code = normalize_join_code(code)
    if validate_join_code(code):
        session = await store.load(code)
    if session is None:
        logger.warning("Session not found: %s", code)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found",
        )
    return session


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(store: SessionStoreDep, request: CreateSessionRequest | None = None):
    """Start a new session in the setup phase."""
    request = request or CreateSessionRequest()
    logger.info("POST /sessions - current_turn: %d", request.current_turn)

    try:
        session = await store.create(current_turn=request.current_turn, now=now_ms())
    except SessionCodeExhaustedError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not allocate a session code, try again",
        )
    return _session_response(session)


@router.get("/{code}", response_model=SessionResponse)
async def get_session(code: str, store: SessionStoreDep):
    session = await _load_session(store, code)
    return _session_response(session)


@router.post("/{code}/actions", response_model=SessionResponse)
async def dispatch_action(
    code: str,
    store: SessionStoreDep,
    payload: Annotated[dict[str, Any], Body()],
):
    """Apply one action to the session.

    Actions with an unknown type leave the session unchanged.

    Raises:
        HTTPException 404: If the session does not exist.
        RequestValidationError (422): If a known action has a malformed payload.
    """
    session = await _load_session(store, code)
    logger.info("POST /sessions/%s/actions - type: %s", session.session_id, payload.get("type"))

    try:
        action = parse_action(payload)
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False))

    if action is not None:
        before = session.state
        session.dispatch(action)
        if session.state is not before:
            await store.save(session)

    return _session_response(session)


@router.post("/{code}/scoring", response_model=SessionResponse)
async def score_round(code: str, request: RoundScoringRequest, store: SessionStoreDep):
    """Record one round of mission scoring from the checked conditions."""
    session = await _load_session(store, code)
    actions = build_round_scoring_actions(
        session.state, request.conditions, request.round_number, now_ms()
    )
    logger.info(
        "POST /sessions/%s/scoring - round: %d, actions: %d",
        session.session_id,
        request.round_number,
        len(actions),
    )

    if actions:
        session.dispatch_all(actions)
        await store.save(session)
    return _session_response(session)


@router.get("/{code}/summary", response_model=SessionSummary)
async def get_summary(code: str, store: SessionStoreDep):
    """Final standings and a per-round breakdown."""
    session = await _load_session(store, code)
    state = session.state
    players = list(state.players.values())

    rounds = [
        RoundSummary(
            round_number=number,
            scores={player.id: round_score(player, number) for player in players},
            events=events_for_round(state, number),
        )
        for number in all_round_numbers(state)
    ]

    return SessionSummary(
        code=session.session_id,
        rounds=rounds,
        ranking=sort_players_by_score(players),
        winner=get_winner(players),
        roll_off_winner_name=player_name(state, state.roll_off_winner),
        first_to_deploy_name=player_name(state, state.first_to_deploy_player_id),
        initial_initiative_name=player_name(state, state.initial_initiative_player_id),
        duration_ms=game_duration_ms(state),
    )


@router.post("/{code}/results", response_model=RecordResultsResponse)
async def record_results(
    code: str,
    current_user: CurrentUser,
    store: SessionStoreDep,
    results_service: Annotated[GameResultsService, Depends(get_results_service)],
):
    """Update verified players' win/loss records with the session outcome."""
    session = await _load_session(store, code)
    logger.info("POST /sessions/%s/results - user: %s", session.session_id, current_user.id)

    result = results_service.record_results(session.state, current_user.id)
    return RecordResultsResponse(
        recorded=result.recorded,
        skipped=result.skipped,
        history_recorded=result.history_recorded,
    )


@router.delete("/{code}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(code: str, store: SessionStoreDep):
    logger.info("DELETE /sessions/%s", code)
    if not await store.delete(code):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
