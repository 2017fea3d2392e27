# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Provides dependency injection for authentication.
#
# Tokens are issued by Supabase Auth; this service only verifies them.
# Supports both:
# - ES256/RS256 (Supabase JWT signing keys) via JWKS
# - HS256 (Supabase JWT secret)
#
# Usage:
#   from app.auth import get_current_user, require_admin, AuthUser
#
#   @router.get("/protected")
#   async def protected(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
# =============================================================================

import logging
import time
from typing import Optional
from uuid import UUID

import httpx
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError, ExpiredSignatureError

from app.config import settings
from app.auth.models import AuthUser
from app.exceptions import AdminRequiredError, UnauthorizedError, translate_database_error
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

# HTTP Bearer token extractor; a missing header is reported as 401 below
security = HTTPBearer(auto_error=False)

# Cache for JWKS keys
_jwks_cache: dict = {}
_jwks_cache_time: float = 0
JWKS_CACHE_TTL = 3600  # 1 hour

TOKEN_AUDIENCE = "authenticated"


def _get_jwks_url() -> str:
    """Get the JWKS URL from the Supabase project URL."""
    supabase_url = settings.SUPABASE_URL.rstrip('/')
    return f"{supabase_url}/auth/v1/.well-known/jwks.json"


def _fetch_jwks() -> dict:
    """Fetch JWKS from Supabase with caching."""
    global _jwks_cache, _jwks_cache_time

    current_time = time.time()

    # Return cached if valid
    if _jwks_cache and (current_time - _jwks_cache_time) < JWKS_CACHE_TTL:
        return _jwks_cache

    try:
        jwks_url = _get_jwks_url()
        response = httpx.get(jwks_url, timeout=10)
        response.raise_for_status()
        _jwks_cache = response.json()
        _jwks_cache_time = current_time
        logger.debug(f"Fetched JWKS from {jwks_url}")
        return _jwks_cache
    except httpx.HTTPError as e:
        logger.warning(f"Failed to fetch JWKS: {e}")
        # Stale keys are better than none while the endpoint is down
        if _jwks_cache:
            return _jwks_cache
        return {"keys": []}


def _hs256_key() -> tuple[str, str]:
    """The project secret for HS256 tokens, refused when none is configured."""
    if not settings.SUPABASE_JWT_SECRET:
        logger.warning("HS256 token rejected: SUPABASE_JWT_SECRET is not set")
        raise UnauthorizedError("Invalid token")
    return settings.SUPABASE_JWT_SECRET, "HS256"


def _get_signing_key(token: str) -> tuple[str | dict, str]:
    """
    Get the key and algorithm to verify a token with.

    Returns:
        Tuple of (key, algorithm)

    Raises:
        UnauthorizedError: HS256 token while no JWT secret is configured
    """
    # Decode header without verification to get algorithm and key ID
    try:
        unverified_header = jwt.get_unverified_header(token)
    except JWTError:
        return _hs256_key()

    alg = unverified_header.get("alg", "HS256")
    kid = unverified_header.get("kid")

    if alg == "HS256":
        return _hs256_key()

    # Asymmetric keys come from the project's JWKS
    if kid:
        for key in _fetch_jwks().get("keys", []):
            if key.get("kid") == kid:
                return key, alg

    logger.warning(f"Could not find key for alg={alg}, kid={kid}, falling back to HS256")
    return _hs256_key()


def decode_token(token: str) -> AuthUser:
    """
    Verify a Supabase access token and return its user.

    Raises:
        UnauthorizedError: Token expired, badly signed, or missing claims
    """
    try:
        signing_key, algorithm = _get_signing_key(token)
        payload = jwt.decode(
            token,
            signing_key,
            algorithms=[algorithm],
            audience=TOKEN_AUDIENCE,
        )
    except ExpiredSignatureError:
        logger.warning("JWT token has expired")
        raise UnauthorizedError("Token has expired")
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise UnauthorizedError("Invalid token")

    user_id = payload.get("sub")
    if not user_id:
        logger.warning("JWT token missing 'sub' claim")
        raise UnauthorizedError("Invalid token: missing user ID")

    try:
        user_uuid = UUID(user_id)
    except ValueError:
        logger.warning(f"Invalid UUID in token: {user_id}")
        raise UnauthorizedError("Invalid token: malformed user ID")

    logger.debug(f"Authenticated user: {user_id}")
    return AuthUser(id=user_uuid, email=payload.get("email"))


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> AuthUser:
    """
    Extract and validate the user from a Supabase JWT.

    This dependency:
    1. Extracts the Bearer token from the Authorization header
    2. Verifies the JWT signature (ES256/RS256 via JWKS, or HS256)
    3. Validates expiry and the "authenticated" audience
    4. Returns an AuthUser with the user's ID and email

    Raises:
        UnauthorizedError: 401 if the token is missing, invalid or expired
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError()
    return decode_token(credentials.credentials)


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[AuthUser]:
    """
    Optionally get the current user from a JWT.

    Returns None when no token is sent, or when the token is invalid,
    instead of raising.
    """
    if credentials is None:
        return None

    try:
        return decode_token(credentials.credentials)
    except UnauthorizedError:
        return None


async def require_admin(user: AuthUser = Depends(get_current_user)) -> AuthUser:
    """
    Require the caller to be an administrator.

    Admins are users with an admin_users row or an email listed in
    ADMIN_EMAILS.

    Raises:
        AdminRequiredError: 403 for non-admins
    """
    try:
        is_admin = SupabaseClient.is_admin(user.id, user.email)
    except Exception as e:
        raise translate_database_error(e, "check admin status", table="admin_users") from e

    if not is_admin:
        logger.warning(f"Non-admin user {user.id} denied admin route")
        raise AdminRequiredError()
    return user


def check_is_admin(user: AuthUser) -> bool:
    """Admin flag for routes that adapt to admins instead of rejecting others."""
    try:
        return SupabaseClient.is_admin(user.id, user.email)
    except Exception as e:
        raise translate_database_error(e, "check admin status", table="admin_users") from e
