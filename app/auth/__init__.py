# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Verifies Supabase Auth JWTs and exposes the caller to routes.
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.get("/protected")
#   async def protected(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
# =============================================================================

from app.auth.dependencies import (
    check_is_admin,
    get_current_user,
    get_current_user_optional,
    require_admin,
)
from app.auth.models import AuthUser

__all__ = [
    "check_is_admin",
    "get_current_user",
    "get_current_user_optional",
    "require_admin",
    "AuthUser",
]
