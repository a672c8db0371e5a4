import logging
from typing import Any, cast

from fastapi import APIRouter, HTTPException, status

from app.dependencies.auth import CurrentUser, CurrentUserToken
from app.dependencies.supabase import get_authenticated_supabase_client
from app.schemas.profile import ProfileResponse, ProfileUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profile", tags=["profile"])


def _profile_response(row: dict[str, Any]) -> ProfileResponse:
    return ProfileResponse(
        **{name: row.get(name) for name in ProfileResponse.model_fields if row.get(name) is not None}
    )


@router.get("", response_model=ProfileResponse)
async def get_profile(current_user: CurrentUser, token: CurrentUserToken):
    """Get the current authenticated user's profile."""
    logger.info("GET /profile - user: %s", current_user.id)

    supabase = get_authenticated_supabase_client(token)
    response = supabase.table("profiles").select("*").eq("id", current_user.id).execute()

    if not response.data:
        logger.warning("Profile not found for user: %s", current_user.id)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found",
        )

    return _profile_response(cast(dict[str, Any], response.data[0]))


@router.patch("", response_model=ProfileResponse)
async def update_profile(
    current_user: CurrentUser, token: CurrentUserToken, profile_update: ProfileUpdate
):
    """Update the fields sent in the request; omitted fields are left alone."""
    updates = profile_update.model_dump(exclude_unset=True)
    logger.info("PATCH /profile - user: %s, fields: %s", current_user.id, sorted(updates))

    if not updates:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No profile fields to update",
        )

    supabase = get_authenticated_supabase_client(token)
    response = supabase.table("profiles").update(updates).eq("id", current_user.id).execute()

    if not response.data:
        logger.warning("Profile update failed - profile not found for user: %s", current_user.id)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found",
        )

    logger.info("Profile updated successfully for user: %s", current_user.id)
    return _profile_response(cast(dict[str, Any], response.data[0]))
