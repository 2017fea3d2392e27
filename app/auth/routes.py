# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# API endpoints for the signed-in user's own account.
#
# Note: Actual signup/login is handled by Supabase Auth client-side.
# These routes are for getting user info after authentication.
# =============================================================================

import logging
from fastapi import APIRouter, Depends

from app.auth.dependencies import get_current_user
from app.auth.models import AuthUser, TokenVerification
from core.models.profile import ProfileUpdate, UserProfile
from core.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/me", response_model=UserProfile)
async def get_current_user_info(
    user: AuthUser = Depends(get_current_user)
) -> UserProfile:
    """
    Get the current authenticated user's profile.

    Returns the profiles row plus is_admin. A user whose profile row
    hasn't been created yet gets the id/email from their token.

    Raises:
        401: If not authenticated
    """
    return UserService.get_profile(user.id, user.email)


@router.patch("/me", response_model=UserProfile)
async def update_current_user_info(
    request: ProfileUpdate,
    user: AuthUser = Depends(get_current_user)
) -> UserProfile:
    """
    Update the current user's display name or avatar.

    Raises:
        401: If not authenticated
        404: If the user has no profile row
    """
    return UserService.update_profile(user.id, request, user.email)


@router.get("/verify", response_model=TokenVerification)
async def verify_token(
    user: AuthUser = Depends(get_current_user)
) -> TokenVerification:
    """
    Verify that the current token is valid.

    Useful for checking if a stored token is still valid.

    Raises:
        401: If token is invalid or expired
    """
    return TokenVerification(valid=True, user_id=str(user.id), email=user.email)
