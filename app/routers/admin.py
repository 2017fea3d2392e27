# =============================================================================
# app/routers/admin.py - User Administration Endpoints
# =============================================================================
# Views over all users and account activation. Everything except /check
# requires an administrator.
# =============================================================================

from uuid import UUID

from fastapi import APIRouter, Depends

from app.auth import check_is_admin, get_current_user, require_admin, AuthUser
from core.models.profile import UserActiveUpdate, UserProfile, UserStats
from core.services.user_service import UserService

router = APIRouter()


@router.get("/users")
async def list_users(admin: AuthUser = Depends(require_admin)):
    """
    All user profiles, newest first, each with is_admin.

    Raises:
        403: Caller is not an admin
    """
    users = UserService.list_users()
    return {"users": users, "count": len(users)}


@router.patch("/users/{user_id}/active")
async def set_user_active(
    user_id: UUID,
    request: UserActiveUpdate,
    admin: AuthUser = Depends(require_admin),
) -> dict[str, UserProfile]:
    """
    Activate or deactivate a user account.

    Raises:
        400: Admin tried to deactivate themselves
        403: Caller is not an admin
        404: No such user
    """
    return {"user": UserService.set_active(user_id, request.is_active, admin.id)}


@router.get("/user-stats")
async def get_user_stats(admin: AuthUser = Depends(require_admin)) -> dict[str, UserStats]:
    """
    User counts for the admin dashboard.

    Raises:
        403: Caller is not an admin
    """
    return {"stats": UserService.get_user_stats()}


@router.get("/check")
async def check_admin(user: AuthUser = Depends(get_current_user)):
    """Whether the caller is an admin (never 403)."""
    return {"is_admin": check_is_admin(user), "user_id": str(user.id)}
