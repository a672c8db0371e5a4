import logging

from fastapi import APIRouter

from app.dependencies.auth import CurrentUser
from app.schemas.auth import AuthUser

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/me", response_model=AuthUser)
async def get_me(current_user: CurrentUser):
    """Get the identity carried by the caller's access token."""
    logger.info("GET /auth/me - user: %s", current_user.id)
    return current_user
