# =============================================================================
# app/routers/public.py - Public (Unauthenticated) Endpoints
# =============================================================================
# Read-only sheet views resolved through a public link's access key.
# =============================================================================

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Path

from app.auth import get_current_user_optional, AuthUser
from core.services.public_link_service import PublicLinkService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/sheets/{access_key}")
async def get_public_sheet(
    access_key: Annotated[str, Path(min_length=1, max_length=200, description="Public link key")],
    viewer: Optional[AuthUser] = Depends(get_current_user_optional),
):
    """
    Read-only view of a shared sheet.

    No sign-in needed; a token, when sent, is only used for logging.

    Raises:
        404: Unknown, disabled or expired link
    """
    data = PublicLinkService.get_public_sheet(access_key)
    logger.info(
        f"Public view of sheet {data['sheet']['id']} by "
        f"{viewer.id if viewer else 'anonymous visitor'}"
    )
    return data
