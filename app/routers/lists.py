"""REST endpoints for army lists: sharing, export, building and storage."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status

from app.config import Settings, get_settings
from app.dependencies.auth import CurrentUser, CurrentUserToken
from app.dependencies.supabase import get_authenticated_supabase_client, get_supabase_client
from app.schemas.army import (
    AddUnitRequest,
    AddUnitResponse,
    ExportListRequest,
    ExportListResponse,
    SavedList,
    SaveListRequest,
    ShareListResponse,
)
from app.services.lists import (
    add_unit_to_list,
    decode_list,
    encode_list,
    filter_units_for_courtesy,
    generate_list_text,
    generate_shareable_link,
    total_command,
    total_points,
    validate_unit_addition,
)
from app.services.lists.repository import ListRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/lists", tags=["lists"])


def get_list_repository(token: CurrentUserToken) -> ListRepository:
    return ListRepository(get_authenticated_supabase_client(token))


ListRepositoryDep = Annotated[ListRepository, Depends(get_list_repository)]


def get_public_list_repository() -> ListRepository:
    return ListRepository(get_supabase_client())


@router.post("/share", response_model=ShareListResponse)
async def share_list(
    saved_list: SavedList,
    settings: Annotated[Settings, Depends(get_settings)],
):
    """Pack a list into a share token and link. Nothing is stored server-side."""
    code = encode_list(saved_list)
    logger.info(
        "POST /lists/share - list: %r, units: %d, token length: %d",
        saved_list.name,
        len(saved_list.units),
        len(code),
    )
    return ShareListResponse(
        code=code,
        url=generate_shareable_link(saved_list, settings.SHARE_BASE_URL),
    )


@router.get("/shared/{code}", response_model=SavedList)
async def get_shared_list(code: str):
    """Rebuild a list from a share token.

    Raises:
        HTTPException 404: If the token cannot be decoded.
    """
    logger.info("GET /lists/shared - token length: %d", len(code))
    saved_list = decode_list(code)
    if saved_list is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Could not load shared list",
        )
    return saved_list


@router.post("/export", response_model=ExportListResponse)
async def export_list(request: ExportListRequest):
    """Render a list as text. A courtesy export hides Scout and Ambusher units."""
    units = request.list.units
    if request.courtesy:
        units = filter_units_for_courtesy(units)

    logger.info("POST /lists/export - list: %r, courtesy: %s", request.list.name, request.courtesy)
    return ExportListResponse(
        text=generate_list_text(units, request.list.name, request.list.faction),
        total_points=total_points(units),
        total_command=total_command(units),
    )


@router.post("/units", response_model=AddUnitResponse)
async def add_unit(request: AddUnitRequest):
    """Add one copy of a unit to a list after checking the army building rules.

    Raises:
        HTTPException 400: If the unit breaks a rule. The detail carries the
            rule's error code and message.
    """
    validation = validate_unit_addition(request.units, request.unit, request.faction)
    if not validation.is_valid:
        logger.info(
            "POST /lists/units - rejected %s: %s", request.unit.id, validation.error_code
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": validation.error_code, "message": validation.error_message},
        )

    units = add_unit_to_list(request.units, request.unit)
    return AddUnitResponse(units=units, total_points=total_points(units))


@router.get("", response_model=list[SavedList])
async def get_lists(current_user: CurrentUser, repository: ListRepositoryDep):
    """Lists saved by the current user."""
    logger.info("GET /lists - user: %s", current_user.id)
    return repository.list_for_user(current_user.id)


@router.post("", response_model=SavedList, status_code=status.HTTP_201_CREATED)
async def save_list(
    current_user: CurrentUser,
    request: SaveListRequest,
    repository: ListRepositoryDep,
):
    """Create or update a saved list. Lists opened from a share link get a new id."""
    logger.info("POST /lists - user: %s, list: %r", current_user.id, request.name)
    saved = repository.save(
        SavedList(
            id=request.id or "",
            name=request.name,
            faction=request.faction,
            units=request.units,
            created_at="",
            wab_id=request.wab_id,
        ),
        current_user.id,
    )
    if saved is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save list",
        )
    return saved


@router.delete("/{list_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_list(current_user: CurrentUser, list_id: str, repository: ListRepositoryDep):
    logger.info("DELETE /lists/%s - user: %s", list_id, current_user.id)
    if not repository.delete(list_id, current_user.id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="List not found",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/wab/{wab_id}", response_model=list[SavedList])
async def get_lists_for_wab_id(
    wab_id: str,
    repository: Annotated[ListRepository, Depends(get_public_list_repository)],
):
    """Lists linked to a WAB ID, so an opponent's list can be picked during setup."""
    logger.info("GET /lists/wab/%s", wab_id)
    return repository.list_for_wab_id(wab_id)
