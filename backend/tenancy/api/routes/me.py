"""Endpoints for the caller's own profile."""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.api.deps import get_current_principal
from tenancy.core.database import get_db
from tenancy.models.profile import Profile
from tenancy.schemas.profile import ProfileResponse, ProfileUpdateRequest
from tenancy.services.profile_service import ProfileService

router = APIRouter()


def _to_response(profile: Profile, active_organization_id: UUID | None) -> ProfileResponse:
    return ProfileResponse(
        principal_id=profile.principal_id,
        display_name=profile.display_name,
        avatar_url=profile.avatar_url,
        active_organization_id=active_organization_id,
        created_at=profile.created_at,
        updated_at=profile.updated_at,
    )


@router.get("/me", response_model=ProfileResponse, summary="Get my profile")
async def get_me(
    db: AsyncSession = Depends(get_db),
    principal_id: UUID = Depends(get_current_principal),
) -> ProfileResponse:
    """Return the caller's profile, registering it on first call."""
    profile, active = await ProfileService(db).get_my_profile(principal_id)
    return _to_response(profile, active)


@router.patch("/me", response_model=ProfileResponse, summary="Update my profile")
async def update_me(
    request: ProfileUpdateRequest,
    db: AsyncSession = Depends(get_db),
    principal_id: UUID = Depends(get_current_principal),
) -> ProfileResponse:
    profile, active = await ProfileService(db).update_my_profile(
        principal_id, request.model_dump(exclude_unset=True)
    )
    return _to_response(profile, active)
