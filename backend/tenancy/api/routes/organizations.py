"""Organization API endpoints.

Organization lifecycle, the caller's active organization and role, leaving,
and the member list of an organization.
"""
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.api.deps import get_current_principal, resolve_principal_id
from tenancy.core.database import get_db
from tenancy.core.validation import normalize_slug
from tenancy.schemas.errors import ErrorResponse
from tenancy.schemas.membership import (
    AddMemberRequest,
    MemberProfile,
    MembershipResponse,
    MemberWithProfile,
)
from tenancy.schemas.organization import (
    OrganizationCreateRequest,
    OrganizationResponse,
    OrganizationUpdateRequest,
    OrganizationWithRole,
    RoleResponse,
    SlugAvailabilityResponse,
)
from tenancy.schemas.profile import ProfileResponse
from tenancy.services.membership_service import MembershipService
from tenancy.services.org_service import OrganizationService

router = APIRouter()


@router.post(
    "",
    response_model=OrganizationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create organization",
    description="Creates an organization with the caller as owner and makes it the caller's active organization.",
    responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def create_organization(
    request: OrganizationCreateRequest,
    db: AsyncSession = Depends(get_db),
    principal_id: UUID = Depends(get_current_principal),
) -> OrganizationResponse:
    """Create an organization.

    Raises:
        SlugConflict: 409 if the slug is taken
        ValidationError: 422 if name or slug are malformed
    """
    service = OrganizationService(db)
    organization = await service.create(
        principal_id=principal_id,
        name=request.name,
        slug=request.slug,
        logo_url=request.logo_url,
    )
    return OrganizationResponse.model_validate(organization)


@router.get(
    "",
    response_model=list[OrganizationWithRole],
    summary="List my organizations",
)
async def list_my_organizations(
    db: AsyncSession = Depends(get_db),
    principal_id: UUID = Depends(get_current_principal),
) -> list[OrganizationWithRole]:
    service = OrganizationService(db)
    rows = await service.list_for_principal(principal_id)
    return [
        OrganizationWithRole.model_validate(
            {**OrganizationResponse.model_validate(org).model_dump(), "role": role}
        )
        for org, role in rows
    ]


@router.get(
    "/slug-availability",
    response_model=SlugAvailabilityResponse,
    summary="Check slug availability",
    description="Advisory check; creation is still decided by the unique constraint.",
)
async def check_slug_availability(
    slug: str = Query(..., description="Slug to check"),
    db: AsyncSession = Depends(get_db),
    principal_id: UUID = Depends(get_current_principal),
) -> SlugAvailabilityResponse:
    service = OrganizationService(db)
    available = await service.check_slug_available(slug)
    return SlugAvailabilityResponse(slug=normalize_slug(slug), available=available)


@router.get(
    "/{id_or_slug}",
    response_model=OrganizationResponse,
    summary="Get organization by ID or slug",
    responses={404: {"model": ErrorResponse}},
)
async def get_organization(
    id_or_slug: str,
    db: AsyncSession = Depends(get_db),
    principal_id: UUID = Depends(get_current_principal),
) -> OrganizationResponse:
    """Get an organization the caller belongs to.

    Raises:
        NotFound: 404 if missing or the caller is not a member
    """
    service = OrganizationService(db)
    organization = await service.get(principal_id, id_or_slug)
    return OrganizationResponse.model_validate(organization)


@router.patch(
    "/{org_id}",
    response_model=OrganizationResponse,
    summary="Update organization (admin or owner)",
    responses={403: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def update_organization(
    org_id: UUID,
    request: OrganizationUpdateRequest,
    db: AsyncSession = Depends(get_db),
    principal_id: UUID = Depends(get_current_principal),
) -> OrganizationResponse:
    service = OrganizationService(db)
    organization = await service.update(
        principal_id=principal_id,
        org_id=org_id,
        changes=request.model_dump(exclude_unset=True),
    )
    return OrganizationResponse.model_validate(organization)


@router.delete(
    "/{org_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete organization (owner only)",
    responses={403: {"model": ErrorResponse}},
)
async def delete_organization(
    org_id: UUID,
    db: AsyncSession = Depends(get_db),
    principal_id: UUID = Depends(get_current_principal),
) -> Response:
    service = OrganizationService(db)
    await service.delete(principal_id, org_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{org_id}/activate",
    response_model=ProfileResponse,
    summary="Set active organization",
    responses={404: {"model": ErrorResponse}},
)
async def set_active_organization(
    org_id: UUID,
    db: AsyncSession = Depends(get_db),
    principal_id: UUID = Depends(get_current_principal),
) -> ProfileResponse:
    service = OrganizationService(db)
    profile = await service.set_active(principal_id, org_id)
    return ProfileResponse(
        principal_id=profile.principal_id,
        display_name=profile.display_name,
        avatar_url=profile.avatar_url,
        active_organization_id=profile.current_organization_id,
        created_at=profile.created_at,
        updated_at=profile.updated_at,
    )


@router.get(
    "/{org_id}/role",
    response_model=RoleResponse,
    summary="Get my role in an organization",
)
async def get_my_role(
    org_id: UUID,
    db: AsyncSession = Depends(get_db),
    principal_id: UUID = Depends(get_current_principal),
) -> RoleResponse:
    service = OrganizationService(db)
    return RoleResponse(role=await service.role_of(principal_id, org_id))


@router.post(
    "/{org_id}/leave",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Leave organization",
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def leave_organization(
    org_id: UUID,
    db: AsyncSession = Depends(get_db),
    principal_id: UUID | None = Depends(resolve_principal_id),
) -> Response:
    """Leave an organization.

    Raises:
        Unauthenticated: 401 without a verified principal
        NotAMember: 404 if the caller does not belong to the organization
        MustTransferOwnership: 409 if the sole owner would leave members behind
    """
    service = MembershipService(db)
    await service.leave(principal_id, org_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{org_id}/members",
    response_model=list[MemberWithProfile],
    summary="List organization members",
    description="Returns an empty list when the caller is not a member.",
)
async def list_members(
    org_id: UUID,
    db: AsyncSession = Depends(get_db),
    principal_id: UUID = Depends(get_current_principal),
) -> list[MemberWithProfile]:
    service = OrganizationService(db)
    rows = await service.list_members(principal_id, org_id)
    return [
        MemberWithProfile(
            **MembershipResponse.model_validate(membership).model_dump(),
            profile=MemberProfile.model_validate(profile) if profile else None,
        )
        for membership, profile in rows
    ]


@router.post(
    "/{org_id}/members",
    response_model=MembershipResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add member (admin or owner)",
    responses={
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def add_member(
    org_id: UUID,
    request: AddMemberRequest,
    db: AsyncSession = Depends(get_db),
    principal_id: UUID = Depends(get_current_principal),
) -> MembershipResponse:
    """Add an existing principal to the organization.

    Raises:
        NotAuthorized: 403 if the caller is not an admin
        PrivilegeEscalation: 403 if a non-owner grants the owner role
        PrincipalNotFound: 404 if the principal has never signed in
        AlreadyMember: 409 if already a member
    """
    service = MembershipService(db)
    membership = await service.add_member(
        principal_id=principal_id,
        org_id=org_id,
        target_principal_id=request.principal_id,
        role=request.role,
    )
    return MembershipResponse.model_validate(membership)
