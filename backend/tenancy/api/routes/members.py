"""Membership API endpoints addressed by membership id."""
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.api.deps import get_current_principal
from tenancy.core.database import get_db
from tenancy.schemas.errors import ErrorResponse
from tenancy.schemas.membership import MembershipResponse, UpdateRoleRequest
from tenancy.services.membership_service import MembershipService

router = APIRouter()


@router.patch(
    "/{membership_id}",
    response_model=MembershipResponse,
    summary="Change a member's role",
    responses={
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def update_member_role(
    membership_id: UUID,
    request: UpdateRoleRequest,
    db: AsyncSession = Depends(get_db),
    principal_id: UUID = Depends(get_current_principal),
) -> MembershipResponse:
    """Change a member's role.

    Raises:
        MemberNotFound: 404 if the membership does not exist
        NotAuthorized: 403 if the caller's role does not allow the change
        NoRemainingOwner: 409 if no owner would remain
    """
    service = MembershipService(db)
    membership = await service.update_member_role(principal_id, membership_id, request.role)
    return MembershipResponse.model_validate(membership)


@router.delete(
    "/{membership_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a member",
    responses={
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def remove_member(
    membership_id: UUID,
    db: AsyncSession = Depends(get_db),
    principal_id: UUID = Depends(get_current_principal),
) -> Response:
    service = MembershipService(db)
    await service.remove_member(principal_id, membership_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
