# =============================================================================
# Privacy Settings API Routes
# =============================================================================
#
# Endpoints (owner or admin only):
#   GET /users/{id}/privacy  - Visibility settings, defaults filled in
#   PUT /users/{id}/privacy  - Update some or all settings
#
# =============================================================================

import logging

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from ladder.auth.context import AuthContext
from ladder.auth.policies import require_ownership
from ladder.core.models import PrivacySettings, Visibility
from ladder.privacy.filter import PrivacyFilter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["privacy"])


def get_privacy_filter(request: Request) -> PrivacyFilter:
    return request.app.state.privacy_filter


class PrivacySettingsUpdate(BaseModel):
    community_posts_visibility: Visibility | None = None
    posts_on_profile_visibility: Visibility | None = None
    opportunities_on_profile_visibility: Visibility | None = None
    applications_on_profile_visibility: Visibility | None = None


@router.get("/{id}/privacy", response_model=PrivacySettings)
async def get_privacy(
    id: int,
    ctx: AuthContext = Depends(require_ownership("id")),
    privacy: PrivacyFilter = Depends(get_privacy_filter),
):
    return await privacy.get_privacy_settings(id)


@router.put("/{id}/privacy", response_model=PrivacySettings)
async def update_privacy(
    id: int,
    data: PrivacySettingsUpdate,
    ctx: AuthContext = Depends(require_ownership("id")),
    privacy: PrivacyFilter = Depends(get_privacy_filter),
):
    for field, value in data.model_dump(exclude_none=True).items():
        await privacy.settings.set_visibility(id, field, value)
    logger.info(f"User {ctx.user_id} updated privacy settings of user {id}")
    return await privacy.get_privacy_settings(id)
